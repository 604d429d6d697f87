"""
Request payload builders.

Optional fields are omitted entirely when absent rather than sent as null
or empty. Encryption replaces the message (or NotifAI text) with ciphertext
and adds the hex IV; the password itself never enters the payload.
"""

from __future__ import annotations

from typing import Any

from pincho.config import ApiVariant, Credentials
from pincho.exceptions import InvalidArgumentError
from pincho.models.notification import (
    MAX_MESSAGE_LENGTH,
    MAX_TITLE_LENGTH,
    NotifAIRequest,
    Notification,
)
from pincho.services.encryption import encrypt_message, generate_iv
from pincho.utils.tags import MAX_TAGS, normalize_tags


def _check_length(field: str, value: str, limit: int) -> None:
    if len(value) > limit:
        raise InvalidArgumentError(
            f"{field.capitalize()} exceeds {limit} characters",
            context={"field": field, "length": len(value), "limit": limit},
        )


def _encrypt(text: str, password: str | None) -> tuple[str, str | None]:
    """Encrypt text when a non-blank password is given. Returns (text, iv_hex)."""
    if password is None or not password.strip():
        return text, None
    iv = generate_iv()
    return encrypt_message(text, password, iv.iv_bytes), iv.iv_hex


def _add_credentials(payload: dict[str, Any], credentials: Credentials, variant: ApiVariant) -> None:
    if credentials.uses_bearer_token:
        return
    if credentials.user_id and credentials.user_id.strip():
        payload[variant.user_id_field] = credentials.user_id
    if credentials.device_id and credentials.device_id.strip():
        payload[variant.device_id_field] = credentials.device_id


def build_send_payload(
    notification: Notification,
    credentials: Credentials,
    variant: ApiVariant,
) -> dict[str, Any]:
    """
    Build the JSON body for the send endpoint.

    Raises:
        InvalidArgumentError: If the notification is missing or over a limit
    """
    if notification is None:
        raise InvalidArgumentError("Notification is required", context={"field": "notification"})
    if notification.title is None or notification.message is None:
        raise InvalidArgumentError("Title and message are required")

    _check_length("title", notification.title, MAX_TITLE_LENGTH)
    _check_length("message", notification.message, MAX_MESSAGE_LENGTH)

    tags = normalize_tags(notification.tags)
    if tags and len(tags) > MAX_TAGS:
        raise InvalidArgumentError(
            f"At most {MAX_TAGS} tags are allowed",
            context={"field": "tags", "count": len(tags)},
        )

    message, iv_hex = _encrypt(notification.message, notification.encryption_password)

    payload: dict[str, Any] = {
        "title": notification.title,
        "message": message,
    }
    if notification.type is not None:
        payload["type"] = notification.type
    if tags:
        payload["tags"] = tags
    if notification.image_url is not None:
        payload[variant.image_url_field] = notification.image_url
    if notification.action_url is not None:
        payload[variant.action_url_field] = notification.action_url
    if iv_hex is not None:
        payload["iv"] = iv_hex

    _add_credentials(payload, credentials, variant)
    return payload


def build_notifai_payload(
    request: NotifAIRequest,
    credentials: Credentials,
    variant: ApiVariant,
) -> dict[str, Any]:
    """
    Build the JSON body for the NotifAI endpoint.

    Raises:
        InvalidArgumentError: If the request is missing or its text is too long
    """
    if request is None:
        raise InvalidArgumentError("NotifAI request is required", context={"field": "request"})
    if request.text is None:
        raise InvalidArgumentError("Text is required", context={"field": "text"})

    _check_length("text", request.text, MAX_MESSAGE_LENGTH)

    text, iv_hex = _encrypt(request.text, request.encryption_password)

    payload: dict[str, Any] = {variant.notifai_input_field: text}
    if request.type is not None:
        payload["type"] = request.type
    if iv_hex is not None:
        payload["iv"] = iv_hex

    _add_credentials(payload, credentials, variant)
    return payload
