"""Resolution of raw HTTP responses into decoded values or typed errors.

The decision is made on the status code alone: a 2xx response is decoded
with the strategy chosen by the call site, anything else is decoded as an S3
fault envelope. Every resolution either returns the decoded value or raises
one of the errors from ``strois.errors``.
"""

from __future__ import annotations

import json
from typing import Any, Callable, NoReturn, TypeVar

from .codec import decode_fault, decode_listing
from .errors import DecodeError, UnexpectedResponseError
from .models import ListObjectsPage
from .transport import RawResponse

T = TypeVar("T")

Decoder = Callable[[RawResponse], T]


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def raise_for_fault(status_code: int, body: bytes) -> NoReturn:
    """Raise the error carried by a failed response.

    Raises:
        S3Error: If the body is an S3 fault envelope
        UnexpectedResponseError: If it is not (plain text, HTML, empty body)
    """
    error = decode_fault(status_code, body)
    if error is None:
        raise UnexpectedResponseError(status_code, body)
    raise error


def resolve(response: RawResponse, decode: Decoder[T]) -> T:
    """Decode a successful response, or raise the error a failed one carries."""
    if not is_success(response.status_code):
        raise_for_fault(response.status_code, response.body)
    return decode(response)


def as_bytes(response: RawResponse) -> bytes:
    return response.body


def as_text(response: RawResponse) -> str:
    """Decode the body as strict UTF-8."""
    try:
        return response.body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(
            f"Payload could not be converted to a string: {exc}",
            response.status_code,
            response.body,
        ) from exc


def as_json(response: RawResponse) -> Any:
    text = as_text(response)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"Payload is not valid JSON: {exc}", response.status_code, response.body) from exc


def as_listing(response: RawResponse) -> ListObjectsPage:
    return decode_listing(response.status_code, response.body)


def no_content(response: RawResponse) -> None:
    return None
