"""Request models for the send and NotifAI endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

MAX_TITLE_LENGTH = 256
MAX_MESSAGE_LENGTH = 4096


class Notification(BaseModel):
    """Notification to deliver via the send endpoint."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Notification title (max 256 characters)")
    message: str = Field(..., description="Notification message (max 4096 characters)")
    type: str | None = Field(None, description="Notification type for categorization")
    tags: list[str] | None = Field(
        None,
        description="Tags for filtering (max 10 after normalization)",
    )
    image_url: str | None = Field(None, description="URL of an image to display")
    action_url: str | None = Field(None, description="URL opened when the notification is tapped")
    encryption_password: str | None = Field(
        None,
        description="Password for client-side message encryption (never sent to the API)",
        repr=False,
    )


class NotifAIRequest(BaseModel):
    """
    Free-form text to be turned into a notification server-side.

    The text is encrypted exactly like Notification.message when an
    encryption password is given.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Free-form input text (max 4096 characters)")
    type: str | None = Field(None, description="Notification type override")
    encryption_password: str | None = Field(
        None,
        description="Password for client-side text encryption (never sent to the API)",
        repr=False,
    )
