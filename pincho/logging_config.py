"""Structured logging configuration with JSON output."""

from __future__ import annotations

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

from pincho.utils.request_context import get_operation_id


class OperationIDFilter(logging.Filter):
    """Add the current logical call's operation ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add operation_id field to log record."""
        record.operation_id = get_operation_id() or "no-operation-id"
        return True


def configure_json_logging(
    log_level: str = "INFO",
    use_json: bool = True,
) -> None:
    """Configure application logging with optional JSON output.

    Intended for applications and scripts embedding the client; the library
    itself only emits records through module loggers.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        use_json: Whether to use JSON output (True) or text output (False)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setLevel(getattr(logging, log_level.upper()))
    stream_handler.addFilter(OperationIDFilter())

    if use_json:
        stream_handler.setFormatter(
            JsonFormatter(
                fmt="%(timestamp)s %(levelname)s %(name)s %(message)s %(operation_id)s",
                timestamp=True,
                rename_fields={"levelname": "level"},
            )
        )
    else:
        stream_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - [%(operation_id)s] - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root_logger.addHandler(stream_handler)

    # Suppress noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
