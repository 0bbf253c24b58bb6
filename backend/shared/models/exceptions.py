"""Custom exceptions for the Green Star compliance service."""

from typing import Optional


class GreenStarException(Exception):
    """
    Base exception for the Green Star compliance service.

    Attributes:
        message: Human-readable description of the error.
        error_code: Machine-readable code identifying the error type.
        status_code: Suggested HTTP status code when translating to an HTTP response.
    """
    error_code: str = "unknown_error"
    status_code: int = 500

    def __init__(self, message: Optional[str] = None):
        # Use the class docstring as a default message if none provided
        default_msg = self.__class__.__doc__.strip().splitlines()[0] if self.__class__.__doc__ else ""
        self.message = message or default_msg
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ConfigurationError(GreenStarException):
    "Compliance catalog incomplete: a required credit threshold is missing."
    error_code = "configuration_error"
    status_code = 500


class InvalidInputError(GreenStarException):
    "Raised when submitted project data violates a basic invariant."
    error_code = "invalid_input"
    status_code = 400

    def __init__(self, message: Optional[str] = None, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = list(errors or [])


class ScoringException(GreenStarException):
    "Raised when scoring calculation fails."
    error_code = "scoring_error"
    status_code = 500


# Public API
__all__ = [
    "GreenStarException",
    "ConfigurationError",
    "InvalidInputError",
    "ScoringException",
]
