"""Structured logging configuration for the strois client."""

import json
import logging
import sys
from typing import Any, Mapping

from .utils.errors import sanitize_dict, sanitize_headers, sanitize_url

LOG_LEVELS = ["ERROR", "WARNING", "INFO", "DEBUG"]


def setup_structured_logging(level: int | str = logging.INFO) -> None:
    """Configure structured JSON logging on stdout.

    The library itself never calls this; applications and the CLI do.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def level_from_verbosity(verbosity: int) -> str:
    """Map a ``-v`` count to a logging level name."""
    return LOG_LEVELS[max(0, min(verbosity, len(LOG_LEVELS) - 1))]


def log_request_event(
    logger: logging.Logger,
    operation: str,
    method: str,
    url: str,
    bucket: str,
    key: str | None,
    status: int | None,
    duration: float,
    headers: Mapping[str, str] | None = None,
    **kwargs: Any,
) -> None:
    """Log a structured event for one executed S3 request.

    Request headers are included with their authentication values redacted.
    """
    log_data = {
        "operation": operation,
        "method": method,
        "url": sanitize_url(url),
        "bucket": bucket,
        "key": key,
        "status": status,
        "duration_seconds": round(duration, 6),
    }
    if headers is not None:
        log_data["headers"] = sanitize_headers(headers)
    log_data.update(sanitize_dict(kwargs))
    logger.debug(json.dumps(log_data))
