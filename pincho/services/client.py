"""Async client for the Pincho / WirePusher notification API."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from pincho.config import (
    DEFAULT_TIMEOUT_SECONDS,
    PINCHO,
    ApiVariant,
    Credentials,
    PinchoSettings,
)
from pincho.exceptions import InvalidArgumentError
from pincho.models.notification import NotifAIRequest, Notification
from pincho.models.response import NotificationResponse
from pincho.services.classifier import ErrorOutcome, classify_response
from pincho.services.payloads import build_notifai_payload, build_send_payload
from pincho.services.retry import DEFAULT_MAX_RETRIES, RetryExecutor
from pincho.utils.redaction import redact_dict
from pincho.utils.request_context import operation_scope
from pincho.version import user_agent

logger = logging.getLogger(__name__)


class PinchoClient:
    """
    Client for sending push notifications.

    Holds only immutable configuration (credentials, base URL, timeout and
    retry budget), so one instance can serve many concurrent calls.

    Example:
        async with PinchoClient("abc12345") as client:
            await client.send("Build Failed", "Pipeline #123 failed")
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        user_id: str | None = None,
        device_id: str | None = None,
        variant: ApiVariant = PINCHO,
        base_url: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        http_client: httpx.AsyncClient | None = None,
        retry_executor: RetryExecutor | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            token: API token sent as a bearer token
            user_id: Legacy user id embedded in the payload (instead of token)
            device_id: Legacy device id embedded in the payload (instead of token)
            variant: Endpoint and field naming configuration
            base_url: Override for the variant's default base URL
            timeout_seconds: Timeout for each physical attempt
            max_retries: Retries after the first attempt (0 disables retrying)
            http_client: Shared httpx client (caller keeps ownership)
            retry_executor: Custom retry executor (for testing or advanced scenarios)

        Raises:
            InvalidArgumentError: If credentials are missing or conflicting,
                or the timeout is not positive
        """
        if timeout_seconds <= 0:
            raise InvalidArgumentError(
                "Timeout must be positive",
                context={"field": "timeout_seconds", "value": timeout_seconds},
            )

        self.credentials = Credentials(token=token, user_id=user_id, device_id=device_id)
        self.variant = variant
        self.base_url = (base_url or variant.base_url).rstrip("/")
        self.timeout = timeout_seconds
        self._executor = retry_executor or RetryExecutor(
            max_retries=max_retries,
            attempt_timeout=timeout_seconds,
        )
        self._http_client = http_client
        self._owns_http_client = False

        logger.debug(
            "Notification client initialized",
            extra={
                "variant": variant.name,
                "base_url": self.base_url,
                "auth_mode": "token" if self.credentials.uses_bearer_token else "legacy",
                "max_retries": self._executor.max_retries,
            },
        )

    @classmethod
    def from_settings(cls, settings: PinchoSettings | None = None, **kwargs: Any) -> PinchoClient:
        """Create a client from PinchoSettings (read from PINCHO_* env vars by default)."""
        settings = settings or PinchoSettings()
        return cls(
            settings.token,
            user_id=settings.user_id,
            device_id=settings.device_id,
            variant=settings.api_variant(),
            base_url=settings.base_url,
            timeout_seconds=settings.timeout_seconds,
            max_retries=settings.max_retries,
            **kwargs,
        )

    @property
    def max_retries(self) -> int:
        """Retries allowed after the first attempt of each call."""
        return self._executor.max_retries

    async def __aenter__(self) -> PinchoClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_http_client = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
            self._owns_http_client = False

    async def send(
        self,
        title: str,
        message: str,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> NotificationResponse:
        """
        Send a simple notification with title and message.

        Args:
            title: Notification title (max 256 characters)
            message: Notification message (max 4096 characters)
            cancel_event: Optional event that cancels the call when set

        Returns:
            The API response

        Raises:
            PinchoError: Subclass describing the failure
        """
        try:
            notification = Notification(title=title, message=message)
        except PydanticValidationError as e:
            raise InvalidArgumentError("Title and message are required") from e
        return await self.send_notification(notification, cancel_event=cancel_event)

    async def send_notification(
        self,
        notification: Notification,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> NotificationResponse:
        """
        Send a notification with full options.

        The message is encrypted when the notification carries an encryption
        password; tags are normalized and sent only when any remain.

        Args:
            notification: Notification to send
            cancel_event: Optional event that cancels the call when set

        Returns:
            The API response

        Raises:
            InvalidArgumentError: Before any network call, for invalid input
            PinchoError: Subclass describing the terminal failure
        """
        payload = build_send_payload(notification, self.credentials, self.variant)
        return await self._execute(self.variant.send_path, payload, "send", cancel_event)

    async def notifai(
        self,
        request: str | NotifAIRequest,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> NotificationResponse:
        """
        Turn free-form text into a notification server-side.

        Args:
            request: Input text, or a NotifAIRequest with type/encryption options
            cancel_event: Optional event that cancels the call when set

        Returns:
            The API response, including the AI-generated notification fields

        Raises:
            InvalidArgumentError: Before any network call, for invalid input
            PinchoError: Subclass describing the terminal failure
        """
        if isinstance(request, str):
            request = NotifAIRequest(text=request)
        payload = build_notifai_payload(request, self.credentials, self.variant)
        return await self._execute(self.variant.notifai_path, payload, "notifai", cancel_event)

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": user_agent(),
        }
        if self.credentials.uses_bearer_token:
            headers["Authorization"] = f"Bearer {self.credentials.token}"
        return headers

    async def _execute(
        self,
        path: str,
        payload: dict[str, Any],
        operation_name: str,
        cancel_event: asyncio.Event | None,
    ) -> NotificationResponse:
        url = f"{self.base_url}/{path}"
        with operation_scope():
            return await self._executor.execute(
                lambda: self._post(url, payload),
                cancel_event=cancel_event,
                operation_name=operation_name,
            )

    async def _post(self, url: str, payload: dict[str, Any]) -> NotificationResponse | ErrorOutcome:
        """Perform one physical attempt and classify its response."""
        headers = self._headers()

        logger.debug(
            "Sending notification request",
            extra={"url": url, "payload": redact_dict(payload)},
        )

        if self._http_client is not None:
            response = await self._http_client.post(
                url, json=payload, headers=headers, timeout=self.timeout
            )
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, json=payload, headers=headers)

        logger.debug(
            "Notification response received",
            extra={"url": url, "status_code": response.status_code},
        )

        return classify_response(
            response.status_code,
            response.text,
            response.headers.get("Retry-After"),
        )
