"""Models for the Pincho client."""

from pincho.models.notification import (
    MAX_MESSAGE_LENGTH,
    MAX_TITLE_LENGTH,
    NotifAIRequest,
    Notification,
)
from pincho.models.response import (
    AINotification,
    ErrorDetail,
    ErrorResponse,
    NotificationResponse,
)

__all__ = [
    "AINotification",
    "ErrorDetail",
    "ErrorResponse",
    "MAX_MESSAGE_LENGTH",
    "MAX_TITLE_LENGTH",
    "NotifAIRequest",
    "Notification",
    "NotificationResponse",
]
