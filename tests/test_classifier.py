"""Tests for HTTP response classification."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest

from pincho.exceptions import (
    AuthenticationError,
    ErrorKind,
    PinchoError,
    RateLimitError,
    ServerError,
    ValidationError,
)
from pincho.models.response import NotificationResponse
from pincho.services.classifier import (
    ErrorOutcome,
    build_error_message,
    classify_response,
    kind_for_status,
    parse_retry_after,
)


def _nested(message: str, code: str = "", param: str | None = None) -> str:
    error: dict[str, object] = {"type": "validation_error", "code": code, "message": message}
    if param is not None:
        error["param"] = param
    return json.dumps({"status": "error", "error": error})


class TestKindForStatus:
    """Status code table."""

    @pytest.mark.parametrize(
        ("status_code", "kind"),
        [
            (400, ErrorKind.VALIDATION),
            (404, ErrorKind.VALIDATION),
            (401, ErrorKind.AUTHENTICATION),
            (403, ErrorKind.AUTHENTICATION),
            (429, ErrorKind.RATE_LIMIT),
            (500, ErrorKind.SERVER),
            (503, ErrorKind.SERVER),
            (599, ErrorKind.SERVER),
            (402, ErrorKind.CLIENT),
            (409, ErrorKind.CLIENT),
            (600, ErrorKind.CLIENT),
            (302, ErrorKind.CLIENT),
        ],
    )
    def test_mapping(self, status_code: int, kind: ErrorKind) -> None:
        assert kind_for_status(status_code) is kind


class TestClassifySuccess:
    """2xx responses."""

    def test_parses_notification_response(self) -> None:
        result = classify_response(200, '{"status": "success", "message": "Notification sent"}')

        assert isinstance(result, NotificationResponse)
        assert result.is_success
        assert result.message == "Notification sent"

    def test_parses_ai_notification(self) -> None:
        body = json.dumps(
            {
                "status": "success",
                "message": "ok",
                "notification": {
                    "title": "Deploy done",
                    "message": "v2.1.3 is live",
                    "type": "deployment",
                    "actionURL": "https://example.com",
                },
            }
        )

        result = classify_response(201, body)

        assert isinstance(result, NotificationResponse)
        assert result.notification is not None
        assert result.notification.title == "Deploy done"
        assert result.notification.action_url == "https://example.com"

    def test_non_success_status_string(self) -> None:
        result = classify_response(200, '{"status": "queued", "message": "later"}')

        assert isinstance(result, NotificationResponse)
        assert result.is_success is False

    def test_null_message_still_success(self) -> None:
        result = classify_response(200, '{"status": "success", "message": null}')

        assert isinstance(result, NotificationResponse)
        assert result.is_success
        assert result.message == ""

    @pytest.mark.parametrize("body", ["", "not json", "[1, 2]", "null", '{"message": "no status"}'])
    def test_malformed_body_is_invalid_response(self, body: str) -> None:
        result = classify_response(200, body)

        assert isinstance(result, ErrorOutcome)
        assert result.kind is ErrorKind.INVALID_RESPONSE
        assert result.retryable is False
        assert result.message == "Invalid response from API"


class TestClassifyErrors:
    """Non-2xx responses."""

    def test_nested_error_with_param_and_code(self) -> None:
        result = classify_response(400, _nested("Title is required", "missing_parameter", "title"))

        assert isinstance(result, ErrorOutcome)
        assert result.kind is ErrorKind.VALIDATION
        assert result.message == "Title is required (parameter: title) [missing_parameter]"
        assert result.status_code == 400
        assert result.retryable is False

    def test_nested_error_without_param(self) -> None:
        result = classify_response(401, _nested("Invalid token", "invalid_token"))

        assert result.kind is ErrorKind.AUTHENTICATION
        assert result.message == "Invalid token [invalid_token]"

    def test_nested_error_without_code_or_param(self) -> None:
        result = classify_response(403, _nested("Forbidden"))

        assert result.message == "Forbidden"

    def test_nested_error_with_null_code_and_type(self) -> None:
        body = json.dumps(
            {
                "status": "error",
                "error": {
                    "type": None,
                    "code": None,
                    "message": "Title is required",
                    "param": "title",
                },
            }
        )

        result = classify_response(400, body)

        assert result.kind is ErrorKind.VALIDATION
        assert result.message == "Title is required (parameter: title)"
        assert result.error_code is None

    def test_null_status_in_error_envelope(self) -> None:
        result = classify_response(500, '{"status": null, "message": "Database down"}')

        assert result.kind is ErrorKind.SERVER
        assert result.message == "Database down"

    def test_flat_error_message(self) -> None:
        result = classify_response(400, '{"status": "error", "message": "Bad title"}')

        assert result.kind is ErrorKind.VALIDATION
        assert result.message == "Bad title"

    @pytest.mark.parametrize("body", ["Internal Server Error", "", "{}", '{"status": "error"}'])
    def test_unparseable_body_falls_back(self, body: str) -> None:
        result = classify_response(500, body)

        assert result.kind is ErrorKind.SERVER
        assert result.retryable is True
        assert result.message == f"HTTP 500: {body}"

    def test_rate_limit_is_retryable_with_hint(self) -> None:
        result = classify_response(429, _nested("Rate limit exceeded"), retry_after="2")

        assert result.kind is ErrorKind.RATE_LIMIT
        assert result.retryable is True
        assert result.retry_after == 2.0

    def test_retry_after_ignored_for_other_statuses(self) -> None:
        result = classify_response(503, "unavailable", retry_after="10")

        assert result.retry_after is None

    def test_generic_client_error_not_retryable(self) -> None:
        result = classify_response(409, _nested("Conflict"))

        assert result.kind is ErrorKind.CLIENT
        assert result.retryable is False


class TestBuildErrorMessage:
    """Error message composition."""

    def test_returns_code_and_param(self) -> None:
        message, code, param = build_error_message(400, _nested("Bad", "bad_value", "tags"))

        assert message == "Bad (parameter: tags) [bad_value]"
        assert code == "bad_value"
        assert param == "tags"

    def test_blank_param_and_code_are_omitted(self) -> None:
        message, code, param = build_error_message(400, _nested("Bad", "  ", " "))

        assert message == "Bad"


class TestParseRetryAfter:
    """Retry-After header parsing."""

    def test_integer_seconds(self) -> None:
        assert parse_retry_after("120") == 120.0

    @pytest.mark.parametrize("value", [None, "", "   ", "0", "-5", "soon"])
    def test_absent_or_invalid(self, value: str | None) -> None:
        assert parse_retry_after(value) is None

    def test_http_date_in_future(self) -> None:
        now = datetime(2015, 10, 21, 7, 27, 50, tzinfo=timezone.utc)

        assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT", now=now) == pytest.approx(10.0)

    def test_http_date_in_past(self) -> None:
        now = datetime(2015, 10, 21, 7, 28, 0, tzinfo=timezone.utc) + timedelta(minutes=1)

        assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT", now=now) is None


class TestErrorOutcomeToException:
    """Conversion of terminal outcomes into exceptions."""

    @pytest.mark.parametrize(
        ("kind", "exc_type", "retryable"),
        [
            (ErrorKind.VALIDATION, ValidationError, False),
            (ErrorKind.AUTHENTICATION, AuthenticationError, False),
            (ErrorKind.RATE_LIMIT, RateLimitError, True),
            (ErrorKind.SERVER, ServerError, True),
        ],
    )
    def test_exception_type(self, kind: ErrorKind, exc_type: type, retryable: bool) -> None:
        outcome = ErrorOutcome(kind=kind, message="boom", status_code=418, retryable=retryable)

        error = outcome.to_exception(context={"attempts": 1})

        assert type(error) is exc_type
        assert error.status_code == 418
        assert error.is_retryable is retryable
        assert error.context["attempts"] == 1
        assert error.context["kind"] == kind.value

    def test_generic_client_error(self) -> None:
        error = ErrorOutcome(kind=ErrorKind.CLIENT, message="teapot", status_code=418).to_exception()

        assert type(error) is PinchoError
        assert str(error) == "teapot"

    def test_code_and_param_in_context(self) -> None:
        outcome = ErrorOutcome(
            kind=ErrorKind.VALIDATION,
            message="bad",
            status_code=400,
            error_code="invalid_parameter",
            param="title",
        )

        error = outcome.to_exception()

        assert error.context["code"] == "invalid_parameter"
        assert error.context["param"] == "title"
