"""Redaction utilities keeping credentials out of logs and error messages."""

import re
from typing import Any, Mapping

REDACTED = "[REDACTED]"

# Query parameters of presigned URLs that carry credentials
SENSITIVE_QUERY_PARAMS = {
    "x-amz-credential",
    "x-amz-signature",
    "x-amz-security-token",
}

# Headers to redact completely
SENSITIVE_HEADERS = {
    "authorization",
    "x-amz-security-token",
}

# Patterns that might expose sensitive information in free text
SENSITIVE_PATTERNS = [
    r"(Credential=)[^,\s]+",
    r"(Signature=)[0-9a-fA-F]+",
    r"(X-Amz-Credential=)[^&\s]+",
    r"(X-Amz-Signature=)[^&\s]+",
    r"(X-Amz-Security-Token=)[^&\s]+",
    r"(secret[_\s]?(?:access[_\s]?)?key[:=\s]+)[^\s,;\)]+",
    r"(session[_\s]?token[:=\s]+)[^\s,;\)]+",
]


def sanitize_error_message(message: str) -> str:
    """Sanitize a message to remove signatures, credentials and tokens.

    Args:
        message: Original message

    Returns:
        Message with sensitive values redacted
    """
    sanitized = message
    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, rf"\1{REDACTED}", sanitized, flags=re.IGNORECASE)
    return sanitized


def sanitize_exception(error: BaseException) -> str:
    """Sanitize an exception message."""
    return sanitize_error_message(str(error))


def sanitize_url(url: str) -> str:
    """Redact the credential-bearing query parameters of a (presigned) URL."""
    if "?" not in url:
        return url
    base, _, query = url.partition("?")
    parts = []
    for pair in query.split("&"):
        name, sep, _value = pair.partition("=")
        if name.lower() in SENSITIVE_QUERY_PARAMS:
            parts.append(f"{name}{sep}{REDACTED}")
        else:
            parts.append(pair)
    return f"{base}?{'&'.join(parts)}"


def sanitize_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of the headers with authentication values redacted."""
    return {
        name: REDACTED if name.lower() in SENSITIVE_HEADERS else value
        for name, value in headers.items()
    }


def sanitize_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """Sanitize a dictionary by redacting sensitive fields.

    Args:
        data: Dictionary to sanitize
        sensitive_keys: Additional keys to redact

    Returns:
        Sanitized dictionary
    """
    all_sensitive = {"secret", "token", "signature", "authorization"} | (sensitive_keys or set())
    sanitized: dict[str, Any] = {}

    for key, value in data.items():
        key_lower = key.lower()
        if any(sensitive in key_lower for sensitive in all_sensitive):
            sanitized[key] = REDACTED
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, sensitive_keys)
        elif isinstance(value, str):
            sanitized[key] = sanitize_error_message(value)
        else:
            sanitized[key] = value

    return sanitized
