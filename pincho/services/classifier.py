"""
HTTP response classification.

Maps a status code, raw body and optional Retry-After header to either a
parsed NotificationResponse or an ErrorOutcome that tells the retry loop
whether another attempt is worthwhile.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

from pydantic import ValidationError as PydanticValidationError

from pincho.exceptions import ErrorKind, PinchoError, error_class_for
from pincho.models.response import ErrorResponse, NotificationResponse

logger = logging.getLogger(__name__)

RETRYABLE_KINDS = frozenset({ErrorKind.RATE_LIMIT, ErrorKind.SERVER, ErrorKind.NETWORK})


@dataclass(frozen=True)
class ErrorOutcome:
    """Classified failure of a single physical attempt."""

    kind: ErrorKind
    message: str
    status_code: int = 0
    retryable: bool = False
    retry_after: float | None = None
    error_code: str | None = None
    param: str | None = None

    def to_exception(self, context: dict[str, object] | None = None) -> PinchoError:
        """Build the exception surfaced to the caller for this outcome."""
        merged: dict[str, object] = {"kind": self.kind.value}
        if self.error_code:
            merged["code"] = self.error_code
        if self.param:
            merged["param"] = self.param
        if context:
            merged.update(context)
        return error_class_for(self.kind)(self.message, context=merged, status_code=self.status_code)


def kind_for_status(status_code: int) -> ErrorKind:
    """Map a non-2xx status code to its error kind."""
    if status_code in (400, 404):
        return ErrorKind.VALIDATION
    if status_code in (401, 403):
        return ErrorKind.AUTHENTICATION
    if status_code == 429:
        return ErrorKind.RATE_LIMIT
    if 500 <= status_code < 600:
        return ErrorKind.SERVER
    return ErrorKind.CLIENT


def parse_retry_after(value: str | None, now: datetime | None = None) -> float | None:
    """
    Parse a Retry-After header value.

    Args:
        value: Integer seconds or an HTTP-date
        now: Reference time for HTTP-dates (defaults to current UTC time)

    Returns:
        Delay in seconds, or None if absent, unparseable or not positive
    """
    if value is None or not value.strip():
        return None

    value = value.strip()
    try:
        seconds = int(value)
    except ValueError:
        pass
    else:
        return float(seconds) if seconds > 0 else None

    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.debug("Ignoring unparseable Retry-After header", extra={"retry_after": value})
        return None

    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)
    delay = (retry_at - (now or datetime.now(timezone.utc))).total_seconds()
    return delay if delay > 0 else None


def build_error_message(status_code: int, body: str) -> tuple[str, str | None, str | None]:
    """
    Build a descriptive error message from a non-2xx body.

    Returns:
        Tuple of (message, error code, offending parameter)
    """
    fallback = f"HTTP {status_code}: {body}"
    try:
        parsed = ErrorResponse.model_validate_json(body)
    except PydanticValidationError:
        return fallback, None, None

    detail = parsed.error
    if detail is not None and detail.message is not None:
        message = detail.message
        if detail.param and detail.param.strip():
            message = f"{message} (parameter: {detail.param})"
        if detail.code and detail.code.strip():
            message = f"{message} [{detail.code}]"
        return message, detail.code or None, detail.param or None

    if parsed.message is not None:
        return parsed.message, None, None

    return fallback, None, None


def classify_response(
    status_code: int,
    body: str,
    retry_after: str | None = None,
) -> NotificationResponse | ErrorOutcome:
    """
    Classify one HTTP response.

    Args:
        status_code: HTTP status code
        body: Raw response body
        retry_after: Raw Retry-After header value, if any

    Returns:
        The parsed response for 2xx, otherwise an ErrorOutcome
    """
    if 200 <= status_code < 300:
        try:
            return NotificationResponse.model_validate_json(body)
        except PydanticValidationError as e:
            logger.debug(
                "Success response could not be parsed",
                extra={"status_code": status_code, "error_count": e.error_count()},
            )
            return ErrorOutcome(
                kind=ErrorKind.INVALID_RESPONSE,
                message="Invalid response from API",
                status_code=status_code,
            )

    kind = kind_for_status(status_code)
    message, code, param = build_error_message(status_code, body)

    return ErrorOutcome(
        kind=kind,
        message=message,
        status_code=status_code,
        retryable=kind in RETRYABLE_KINDS,
        retry_after=parse_retry_after(retry_after) if kind is ErrorKind.RATE_LIMIT else None,
        error_code=code,
        param=param,
    )
