"""
Retry state machine for one logical notification call.

A logical call runs up to ``max_retries + 1`` physical attempts. Each attempt
either yields a NotificationResponse (done), or a classified ErrorOutcome /
transport failure. Retryable failures wait out a backoff delay and try again;
anything else, or running out of attempts, raises the matching PinchoError.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx

from pincho.exceptions import ErrorKind, RequestCancelledError
from pincho.models.response import NotificationResponse
from pincho.services.classifier import ErrorOutcome

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 3
INITIAL_RETRY_DELAY = 1.0
RATE_LIMIT_INITIAL_DELAY = 5.0
MAX_RETRY_DELAY = 30.0

Operation = Callable[[], Awaitable["NotificationResponse | ErrorOutcome"]]
Sleep = Callable[[float], Awaitable[Any]]


def compute_backoff(
    attempt: int,
    *,
    rate_limited: bool = False,
    retry_after: float | None = None,
) -> float:
    """
    Compute the delay before the next attempt.

    Args:
        attempt: Number of failures so far (1-indexed)
        rate_limited: Whether the last failure was a 429
        retry_after: Server-provided Retry-After delay in seconds, if any

    Returns:
        Delay in seconds, never more than MAX_RETRY_DELAY
    """
    if rate_limited and retry_after is not None and retry_after > 0:
        return min(retry_after, MAX_RETRY_DELAY)

    delay = INITIAL_RETRY_DELAY * 2 ** (attempt - 1)
    if rate_limited and attempt == 1:
        delay = RATE_LIMIT_INITIAL_DELAY

    return min(delay, MAX_RETRY_DELAY)


@dataclass
class RetryState:
    """Per-call retry bookkeeping. Discarded when the call returns or raises."""

    max_retries: int
    attempt: int = 0
    last_outcome: ErrorOutcome | None = None
    last_retry_after: float | None = None

    @property
    def exhausted(self) -> bool:
        """Whether the retry budget is used up."""
        return self.attempt >= self.max_retries

    @property
    def attempts_made(self) -> int:
        """Physical attempts made, including the one in flight."""
        return self.attempt + 1

    def record_failure(self, outcome: ErrorOutcome) -> None:
        """Count a retryable failure and remember its rate-limit hint."""
        self.attempt += 1
        self.last_outcome = outcome
        self.last_retry_after = outcome.retry_after

    def next_delay(self) -> float:
        """Backoff delay before the next attempt."""
        rate_limited = self.last_outcome is not None and self.last_outcome.kind is ErrorKind.RATE_LIMIT
        return compute_backoff(
            self.attempt,
            rate_limited=rate_limited,
            retry_after=self.last_retry_after,
        )


class RetryExecutor:
    """Drives an operation through attempts, backoff and cancellation."""

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        attempt_timeout: float | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        """
        Initialize the executor.

        Args:
            max_retries: Retries after the first attempt (0 disables retrying,
                negative values fall back to the default of 3)
            attempt_timeout: Deadline in seconds for each physical attempt
            sleep: Awaitable used for backoff waits (defaults to asyncio.sleep)
        """
        self.max_retries = max_retries if max_retries >= 0 else DEFAULT_MAX_RETRIES
        self.attempt_timeout = attempt_timeout
        self._sleep: Sleep = sleep or asyncio.sleep

    async def execute(
        self,
        operation: Operation,
        *,
        cancel_event: asyncio.Event | None = None,
        operation_name: str = "send",
    ) -> NotificationResponse:
        """
        Run an operation until it succeeds or fails terminally.

        Args:
            operation: Zero-argument coroutine factory performing one attempt
            cancel_event: Optional caller cancellation signal
            operation_name: Name used in logs and error context

        Returns:
            The successful NotificationResponse

        Raises:
            PinchoError: Subclass matching the terminal failure
            RequestCancelledError: If cancel_event was set
        """
        state = RetryState(max_retries=self.max_retries)

        while True:
            logger.debug(
                "Starting attempt",
                extra={
                    "operation": operation_name,
                    "attempt": state.attempts_made,
                    "max_attempts": self.max_retries + 1,
                },
            )

            cause: BaseException | None = None
            try:
                result = await self._until_cancelled(
                    self._attempt(operation), cancel_event, operation_name
                )
            except (httpx.TimeoutException, TimeoutError) as e:
                cause = e
                outcome = ErrorOutcome(
                    kind=ErrorKind.NETWORK,
                    message=f"Request timed out after {state.attempts_made} attempts",
                    retryable=True,
                )
            except httpx.RequestError as e:
                cause = e
                outcome = ErrorOutcome(
                    kind=ErrorKind.NETWORK,
                    message=(
                        f"Failed to send notification after {state.attempts_made} attempts: {e}"
                    ),
                    retryable=True,
                )
            else:
                if isinstance(result, NotificationResponse):
                    logger.info(
                        "Notification request succeeded",
                        extra={"operation": operation_name, "attempts": state.attempts_made},
                    )
                    return result
                outcome = result

            if not outcome.retryable or state.exhausted:
                logger.warning(
                    "Notification request failed",
                    extra={
                        "operation": operation_name,
                        "error_kind": outcome.kind.value,
                        "status_code": outcome.status_code,
                        "attempts": state.attempts_made,
                    },
                )
                raise outcome.to_exception(
                    context={"operation": operation_name, "attempts": state.attempts_made}
                ) from cause

            state.record_failure(outcome)
            delay = state.next_delay()

            logger.warning(
                "Retrying notification request",
                extra={
                    "operation": operation_name,
                    "error_kind": outcome.kind.value,
                    "status_code": outcome.status_code,
                    "retry": state.attempt,
                    "max_retries": self.max_retries,
                    "delay_seconds": delay,
                },
            )
            await self._until_cancelled(self._sleep(delay), cancel_event, operation_name)

    async def _attempt(self, operation: Operation) -> NotificationResponse | ErrorOutcome:
        if self.attempt_timeout is None:
            return await operation()
        return await asyncio.wait_for(operation(), timeout=self.attempt_timeout)

    async def _until_cancelled(
        self,
        awaitable: Awaitable[T],
        cancel_event: asyncio.Event | None,
        operation_name: str,
    ) -> T:
        """Await something, aborting early if the cancel event fires."""
        if cancel_event is None:
            return await awaitable

        if cancel_event.is_set():
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise _cancelled(operation_name)

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise _cancelled(operation_name)


def _cancelled(operation_name: str) -> RequestCancelledError:
    logger.info("Notification request cancelled", extra={"operation": operation_name})
    return RequestCancelledError("Request was cancelled", context={"operation": operation_name})
