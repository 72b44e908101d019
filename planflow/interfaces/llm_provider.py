"""
LLM provider interface.

Defines the contract for LLM (Large Language Model) access.
Implementations: Gemini API
"""

from abc import ABC, abstractmethod


class ILLMProvider(ABC):
    """Abstract interface for LLM providers."""

    @abstractmethod
    def get_model(self) -> str:
        """
        Get the model identifier passed to the client.

        Returns:
            Model identifier (e.g. "gemini-2.5-flash")
        """
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """
        Get the human-readable model name.

        Returns:
            Model name string for logging/display
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the provider has the credentials it needs."""
        pass
