"""
Utilities for redacting credentials and ciphertext material from logs.

Request payloads may embed legacy ids, and headers carry the bearer token.
Both pass through these helpers before being attached to a log record.
"""

from __future__ import annotations

import re
from typing import Any

BEARER_PATTERN = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)

# Keys that should always be considered sensitive
SENSITIVE_KEYS = {
    "authorization",
    "token",
    "id",
    "user_id",
    "device_id",
    "encryption_password",
    "password",
    "iv",
}


def redact_sensitive_data(text: str) -> str:
    """Replace bearer tokens in a string with a placeholder."""
    return BEARER_PATTERN.sub(r"\1[REDACTED]", text)


def redact_dict(data: dict[str, Any]) -> dict[str, Any]:
    """
    Create a redacted copy of dictionary, hiding sensitive keys.

    Args:
        data: Payload or header mapping

    Returns:
        New dictionary with sensitive values replaced with [REDACTED]
    """
    redacted: dict[str, Any] = {}
    for key, value in data.items():
        if key.lower() in SENSITIVE_KEYS:
            redacted[key] = "[REDACTED]"
        elif isinstance(value, dict):
            redacted[key] = redact_dict(value)
        elif isinstance(value, str):
            redacted[key] = redact_sensitive_data(value)
        else:
            redacted[key] = value
    return redacted
