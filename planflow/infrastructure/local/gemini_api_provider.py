"""
Gemini API provider.

Uses the Gemini API with an API key (no GCP project required).
"""

from planflow.core.config import get_settings
from planflow.interfaces.llm_provider import ILLMProvider


class GeminiAPIProvider(ILLMProvider):
    """Gemini API provider using API Key."""

    def __init__(self, model_name: str):
        """
        Initialize Gemini API provider.

        Args:
            model_name: Gemini model name (e.g., "gemini-2.5-flash")
        """
        self._model_name = model_name
        self._settings = get_settings()

    def get_model(self) -> str:
        """Get Gemini model name."""
        return self._model_name

    def get_model_name(self) -> str:
        """Get human-readable model name."""
        return f"Gemini API ({self._model_name})"

    def is_available(self) -> bool:
        """An API key is required; without it callers use fallbacks."""
        return bool(self._settings.GOOGLE_API_KEY)
