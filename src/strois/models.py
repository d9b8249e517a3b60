"""Records decoded from S3 responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ListedObject:
    """One entry of a bucket listing."""

    key: str
    last_modified: datetime | None
    etag: str | None
    size: int
    storage_class: str | None = None
    owner_id: str | None = None
    owner_display_name: str | None = None


@dataclass(frozen=True)
class ListObjectsPage:
    """One page of a ListObjectsV2 response."""

    name: str
    prefix: str
    contents: list[ListedObject] = field(default_factory=list)
    common_prefixes: list[str] = field(default_factory=list)
    key_count: int = 0
    max_keys: int | None = None
    is_truncated: bool = False
    continuation_token: str | None = None
    next_continuation_token: str | None = None
