"""
Custom exception classes with context for the Pincho client.

All exceptions inherit from PinchoError and carry the error kind, the HTTP
status code (0 when no response was received), a retryability flag and an
optional context dictionary for logging/debugging.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Category of a failed notification call."""

    INVALID_ARGUMENT = "invalid_argument"
    VALIDATION = "validation_error"
    AUTHENTICATION = "authentication_error"
    RATE_LIMIT = "rate_limit_error"
    SERVER = "server_error"
    CLIENT = "client_error"
    NETWORK = "network_error"
    CANCELLED = "cancelled"
    INVALID_RESPONSE = "invalid_response"
    CONFIGURATION = "configuration_error"


class PinchoError(Exception):
    """
    Base exception for the Pincho client.

    Attributes:
        message: Human-readable error message
        context: Dictionary with additional context for logging/debugging
        status_code: HTTP status code, or 0 if no response was involved
        is_retryable: Whether the failure was classified as transient
    """

    kind: ErrorKind = ErrorKind.CLIENT
    retryable: bool = False

    def __init__(
        self,
        message: str,
        context: dict[str, object] | None = None,
        status_code: int = 0,
    ):
        """
        Initialize exception with message and optional context.

        Args:
            message: Human-readable error message
            context: Optional dictionary with contextual information
                    (operation name, attempts made, error code, etc.)
            status_code: HTTP status code associated with the failure
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.status_code = status_code

    @property
    def is_retryable(self) -> bool:
        """Whether this error represents a retryable condition."""
        return self.retryable


class InvalidArgumentError(PinchoError, ValueError):
    """
    Contract violation detected before any network attempt.

    Raised for missing required values, conflicting credentials, malformed
    IVs and locally enforced length limits.

    Example:
        raise InvalidArgumentError(
            "Title exceeds 256 characters",
            context={"field": "title", "length": 300}
        )
    """

    kind = ErrorKind.INVALID_ARGUMENT


class ConfigurationError(PinchoError):
    """
    Configuration error.

    Raised when settings or the YAML configuration file cannot be loaded.

    Example:
        raise ConfigurationError(
            "Invalid YAML in config file",
            context={"config_file": "/etc/pincho.yaml"}
        )
    """

    kind = ErrorKind.CONFIGURATION


class ValidationError(PinchoError):
    """Server rejected the request parameters (400, 404)."""

    kind = ErrorKind.VALIDATION


class AuthenticationError(PinchoError):
    """Invalid or missing credentials (401, 403). Never retried."""

    kind = ErrorKind.AUTHENTICATION


class RateLimitError(PinchoError):
    """Rate limit exceeded (429). Retried with preferential backoff."""

    kind = ErrorKind.RATE_LIMIT
    retryable = True


class ServerError(PinchoError):
    """Server-side failure (5xx). Retried with exponential backoff."""

    kind = ErrorKind.SERVER
    retryable = True


class NetworkError(PinchoError):
    """Connection, DNS, I/O or timeout failure after all attempts were used."""

    kind = ErrorKind.NETWORK
    retryable = True


class RequestCancelledError(PinchoError):
    """The caller cancelled the operation. Never retried."""

    kind = ErrorKind.CANCELLED


class InvalidResponseError(PinchoError):
    """A success response body could not be parsed."""

    kind = ErrorKind.INVALID_RESPONSE


_ERRORS_BY_KIND: dict[ErrorKind, type[PinchoError]] = {
    ErrorKind.INVALID_ARGUMENT: InvalidArgumentError,
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.AUTHENTICATION: AuthenticationError,
    ErrorKind.RATE_LIMIT: RateLimitError,
    ErrorKind.SERVER: ServerError,
    ErrorKind.CLIENT: PinchoError,
    ErrorKind.NETWORK: NetworkError,
    ErrorKind.CANCELLED: RequestCancelledError,
    ErrorKind.INVALID_RESPONSE: InvalidResponseError,
    ErrorKind.CONFIGURATION: ConfigurationError,
}


def error_class_for(kind: ErrorKind) -> type[PinchoError]:
    """Return the exception class raised for an error kind."""
    return _ERRORS_BY_KIND[kind]
