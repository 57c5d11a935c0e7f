"""Custom exceptions for mongoquery.

Malformed filter values never raise in the default (lenient) mode; they are
dropped from the compiled filter. The exceptions below cover strict mode,
programming-contract violations, and configuration problems.
"""

from typing import Any, Dict


# Base exception
class MongoQueryError(Exception):
    """Base exception for all mongoquery errors.

    Attributes:
        message: Error message
        details: Additional error context as key-value pairs
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        """Initialize exception with message and additional details.

        Args:
            message: Human-readable error message
            **kwargs: Additional context (e.g., token, key, reason)
        """
        self.message = message
        self.details: Dict[str, Any] = kwargs
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the complete error message with details."""
        if not self.details:
            return self.message

        details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        if self.message:
            return f"{self.message} ({details_str})"
        return details_str

    def __repr__(self) -> str:
        """Return detailed representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# Filter exceptions
class FilterParseError(MongoQueryError):
    """Raised in strict mode when a filter value cannot be compiled.

    Example:
        >>> raise FilterParseError("Empty operand", token="{gt}", reason="empty_value")
    """


class InvalidTokenError(MongoQueryError, TypeError):
    """Raised when the classifier is called with something other than a string.

    This is a caller bug, not malformed user input.

    Example:
        >>> raise InvalidTokenError("Token must be a string", received="int")
    """


# Configuration exceptions
class ConfigurationError(MongoQueryError):
    """Raised when configuration is invalid or missing.

    Example:
        >>> raise ConfigurationError("Invalid configuration", setting="MONGOQUERY_MAX_DEPTH", value=-1)
    """


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid.

    Example:
        >>> raise InvalidConfigError("Invalid config value", config_key="MONGOQUERY_DEFAULT_LIMIT", value=0, expected=">0")
    """
