"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class PlanFlowError(Exception):
    """Base exception for planflow."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(PlanFlowError):
    """Resource not found."""

    pass


class ValidationError(PlanFlowError):
    """Validation error."""

    pass


class BusinessLogicError(PlanFlowError):
    """Business logic constraint violation."""

    pass
