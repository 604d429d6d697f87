from __future__ import annotations

from collections.abc import Callable

import pytest

from pincho.services.retry import RetryExecutor
from tests.helpers import RecordingSleep


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    """Backoff sleep that returns immediately and records delays."""
    return RecordingSleep()


@pytest.fixture
def make_executor(recording_sleep: RecordingSleep) -> Callable[..., RetryExecutor]:
    """Factory for executors that never actually sleep."""

    def factory(max_retries: int = 3, attempt_timeout: float | None = None) -> RetryExecutor:
        return RetryExecutor(
            max_retries=max_retries,
            attempt_timeout=attempt_timeout,
            sleep=recording_sleep,
        )

    return factory
