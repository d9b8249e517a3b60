"""XML decoding of S3 fault envelopes and listings."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import datetime
from typing import Callable
from urllib.parse import unquote_plus
from xml.sax.saxutils import escape as xml_escape

from .constants import ENCODING_TYPE_URL, S3_XML_NAMESPACE
from .errors import DecodeError, S3Error, S3ErrorCode
from .models import ListedObject, ListObjectsPage


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element) -> dict[str, ET.Element]:
    """Index direct children by local name (last one wins)."""
    return {_local_name(child.tag): child for child in element}


def _text(children: dict[str, ET.Element], name: str) -> str | None:
    child = children.get(name)
    if child is None or child.text is None:
        return None
    return child.text


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def decode_fault(status_code: int, body: bytes) -> S3Error | None:
    """Decode an S3 fault envelope.

    Returns:
        The decoded S3Error, or None when the body is not a fault envelope
    """
    if not body.strip():
        return None
    try:
        root = ET.fromstring(body)
    except ET.ParseError:
        return None
    if _local_name(root.tag) != "Error":
        return None

    fields = _children(root)
    code = (_text(fields, "Code") or "").strip()
    if not code:
        return None

    return S3Error(
        code=S3ErrorCode(code),
        message=_text(fields, "Message") or "",
        status_code=status_code,
        request_id=_text(fields, "RequestId"),
        resource=_text(fields, "Resource"),
        bucket_name=_text(fields, "BucketName"),
        key=_text(fields, "Key"),
        host_id=_text(fields, "HostId"),
    )


def decode_listing(status_code: int, body: bytes) -> ListObjectsPage:
    """Decode a ListObjectsV2 result document.

    Raises:
        DecodeError: If the body is not a well-formed ListBucketResult
    """
    try:
        root = ET.fromstring(body)
    except ET.ParseError as exc:
        raise DecodeError(f"Could not parse listing: {exc}", status_code, body) from exc
    if _local_name(root.tag) != "ListBucketResult":
        raise DecodeError(
            f"Expected a ListBucketResult document, got <{_local_name(root.tag)}>",
            status_code,
            body,
        )

    fields = _children(root)
    url_encoded = (_text(fields, "EncodingType") or "").lower() == ENCODING_TYPE_URL

    def decode_name(value: str | None) -> str | None:
        if value is not None and url_encoded:
            return unquote_plus(value)
        return value

    try:
        contents = []
        common_prefixes = []
        for child in root:
            name = _local_name(child.tag)
            if name == "Contents":
                contents.append(_decode_entry(child, decode_name))
            elif name == "CommonPrefixes":
                prefix = decode_name(_text(_children(child), "Prefix"))
                if prefix is not None:
                    common_prefixes.append(prefix)

        key_count = _text(fields, "KeyCount")
        max_keys = _text(fields, "MaxKeys")
        return ListObjectsPage(
            name=_text(fields, "Name") or "",
            prefix=decode_name(_text(fields, "Prefix")) or "",
            contents=contents,
            common_prefixes=common_prefixes,
            key_count=int(key_count) if key_count is not None else len(contents),
            max_keys=int(max_keys) if max_keys is not None else None,
            is_truncated=(_text(fields, "IsTruncated") or "false").lower() == "true",
            continuation_token=_text(fields, "ContinuationToken"),
            next_continuation_token=_text(fields, "NextContinuationToken"),
        )
    except ValueError as exc:
        raise DecodeError(f"Malformed listing: {exc}", status_code, body) from exc


def _decode_entry(
    element: ET.Element, decode_name: Callable[[str | None], str | None]
) -> ListedObject:
    fields = _children(element)
    key = decode_name(_text(fields, "Key"))
    if key is None:
        raise ValueError("listing entry without a Key")

    owner_id = owner_display_name = None
    owner = fields.get("Owner")
    if owner is not None:
        owner_fields = _children(owner)
        owner_id = _text(owner_fields, "ID")
        owner_display_name = _text(owner_fields, "DisplayName")

    size = _text(fields, "Size")
    return ListedObject(
        key=key,
        last_modified=_parse_timestamp(_text(fields, "LastModified")),
        etag=_text(fields, "ETag"),
        size=int(size) if size is not None else 0,
        storage_class=_text(fields, "StorageClass"),
        owner_id=owner_id,
        owner_display_name=owner_display_name,
    )


def encode_create_bucket_configuration(region: str) -> bytes:
    """Encode the CreateBucketConfiguration body pinning a bucket to a region."""
    return (
        f'<CreateBucketConfiguration xmlns="{S3_XML_NAMESPACE}">'
        f"<LocationConstraint>{xml_escape(region)}</LocationConstraint>"
        "</CreateBucketConfiguration>"
    ).encode("utf-8")
