"""Base error definitions for danki packages."""

from typing import Any, Dict


class DankiError(Exception):
    """Base exception for all danki errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context


class ConfigurationError(DankiError):
    """Configuration is invalid or missing."""
    pass
