"""Python client for the Pincho (and WirePusher) push notification API."""

from pincho.config import (
    PINCHO,
    WIREPUSHER,
    ApiVariant,
    Credentials,
    PinchoSettings,
    load_settings,
)
from pincho.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ErrorKind,
    InvalidArgumentError,
    InvalidResponseError,
    NetworkError,
    PinchoError,
    RateLimitError,
    RequestCancelledError,
    ServerError,
    ValidationError,
)
from pincho.models import (
    AINotification,
    NotifAIRequest,
    Notification,
    NotificationResponse,
)
from pincho.services.client import PinchoClient

__all__ = [
    "AINotification",
    "ApiVariant",
    "AuthenticationError",
    "ConfigurationError",
    "Credentials",
    "ErrorKind",
    "InvalidArgumentError",
    "InvalidResponseError",
    "NetworkError",
    "NotifAIRequest",
    "Notification",
    "NotificationResponse",
    "PINCHO",
    "PinchoClient",
    "PinchoError",
    "PinchoSettings",
    "RateLimitError",
    "RequestCancelledError",
    "ServerError",
    "ValidationError",
    "WIREPUSHER",
    "load_settings",
]
