"""Response models returned by the notification API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AINotification(BaseModel):
    """Notification fields inferred by the NotifAI endpoint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str | None = None
    message: str | None = None
    type: str | None = None
    tags: list[str] | None = None
    action_url: str | None = Field(None, alias="actionURL")


class NotificationResponse(BaseModel):
    """Successful response from the send or NotifAI endpoint."""

    model_config = ConfigDict(frozen=True)

    status: str = Field(..., description="Response status (e.g. 'success')")
    message: str = Field("", description="Response message")
    notification: AINotification | None = Field(
        None,
        description="AI-generated notification fields (NotifAI only)",
    )

    @field_validator("message", mode="before")
    @classmethod
    def null_message_as_empty(cls, v: Any) -> Any:
        """Treat a JSON null message as empty."""
        return "" if v is None else v

    @property
    def is_success(self) -> bool:
        """Whether the API reported success."""
        return self.status == "success"


class ErrorDetail(BaseModel):
    """Detailed error information from a non-2xx response."""

    type: str = ""
    code: str = ""
    message: str | None = None
    param: str | None = None

    @field_validator("type", "code", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        """Treat JSON nulls as empty strings."""
        return "" if v is None else v


class ErrorResponse(BaseModel):
    """Error envelope: nested ``error`` object, or a flat ``message``."""

    status: str = "error"
    error: ErrorDetail | None = None
    message: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def null_status_as_error(cls, v: Any) -> Any:
        return "error" if v is None else v
