"""
Operation context management using ContextVars.

Tracks the id of the current logical call across async boundaries so every
physical attempt it makes can be correlated in logs.
"""

from __future__ import annotations

import contextvars
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

# Context variable for operation ID
operation_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "operation_id",
    default=None,
)


def get_operation_id() -> Optional[str]:
    """Get current operation ID from context."""
    return operation_id_var.get()


def generate_operation_id() -> str:
    """Generate a new unique operation ID."""
    return str(uuid.uuid4())


@contextmanager
def operation_scope(operation_id: str | None = None) -> Iterator[str]:
    """Bind an operation ID for the duration of one logical call."""
    token = operation_id_var.set(operation_id or generate_operation_id())
    try:
        yield operation_id_var.get() or ""
    finally:
        operation_id_var.reset(token)
