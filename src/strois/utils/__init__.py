"""Utility functions for the strois client."""

from .errors import (
    sanitize_dict,
    sanitize_error_message,
    sanitize_exception,
    sanitize_headers,
    sanitize_url,
)

__all__ = [
    "sanitize_dict",
    "sanitize_error_message",
    "sanitize_exception",
    "sanitize_headers",
    "sanitize_url",
]
