"""Descriptors of single S3 operations, independent of signing and transport."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Sequence

from .constants import MAX_KEY_LENGTH
from .errors import ConfigurationError

METHODS = frozenset({"GET", "PUT", "DELETE", "HEAD", "POST"})


def validate_object_key(key: str) -> str:
    """Check that an object key is usable.

    Raises:
        ConfigurationError: If the key is empty or longer than 1024 UTF-8 bytes
    """
    if not key:
        raise ConfigurationError("Object key must not be empty")
    if len(key.encode("utf-8")) > MAX_KEY_LENGTH:
        raise ConfigurationError(f"Object key exceeds {MAX_KEY_LENGTH} bytes")
    return key


@dataclass(frozen=True)
class Operation:
    """One S3 action: verb, target, query, headers and optional body.

    The key is the logical key; percent-encoding happens when the request is
    signed. Query parameters keep their order.
    """

    method: str
    key: str | None = None
    query: tuple[tuple[str, str], ...] = ()
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None

    def __post_init__(self) -> None:
        if self.method not in METHODS:
            raise ConfigurationError(f"Unsupported HTTP method {self.method!r}")
        if self.key is not None:
            validate_object_key(self.key)
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @classmethod
    def bucket_level(
        cls,
        method: str,
        query: Sequence[tuple[str, str]] = (),
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> Operation:
        """Build an operation addressing the bucket root."""
        return cls(method=method, query=tuple(query), headers=headers or {}, body=body)

    @classmethod
    def object_level(
        cls,
        method: str,
        key: str,
        query: Sequence[tuple[str, str]] = (),
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> Operation:
        """Build an operation addressing one object of the bucket."""
        return cls(method=method, key=key, query=tuple(query), headers=headers or {}, body=body)
