"""Synchronous HTTP transport built on httpx."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Mapping

import httpx

from .config import Context
from .constants import ACCEPT_ENCODING, USER_AGENT
from .errors import TransportError
from .signing import SignedRequest
from .utils.errors import sanitize_exception, sanitize_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawResponse:
    """Status, headers and fully read body of an HTTP exchange."""

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""


def build_http_client(context: Context) -> httpx.Client:
    """Create the httpx client used for a Context's requests."""
    timeout = httpx.Timeout(context.timeout, connect=context.connect_timeout or context.timeout)
    return httpx.Client(
        timeout=timeout,
        follow_redirects=context.follow_redirects,
        headers={"User-Agent": USER_AGENT},
    )


class Transport:
    """Executes signed requests, blocking until the response is read.

    Connection-level failures are raised as TransportError; HTTP error
    statuses are returned like any other response. Bodies are returned as
    stored: ``identity`` encoding is requested and a ``Content-Encoding``
    set on an object is never undone.
    """

    def __init__(self, http_client: httpx.Client) -> None:
        self.http_client = http_client

    def execute(self, request: SignedRequest) -> RawResponse:
        """Send a signed request and read the whole response body."""
        with self.stream(request) as response:
            body = b"".join(response.iter_raw())
            return RawResponse(
                status_code=response.status_code,
                headers=dict(response.headers),
                body=body,
            )

    @contextmanager
    def stream(self, request: SignedRequest) -> Iterator[httpx.Response]:
        """Send a signed request without reading the body.

        The yielded response has its status and headers available; the body
        is read with ``iter_raw`` by the caller before the block exits.
        """
        headers = {"Accept-Encoding": ACCEPT_ENCODING, **request.headers}
        try:
            with self.http_client.stream(
                request.method,
                request.url,
                headers=headers,
                content=request.body,
            ) as response:
                yield response
        except httpx.HTTPError as exc:
            raise self._transport_error(request, exc) from exc

    def close(self) -> None:
        self.http_client.close()

    @staticmethod
    def _transport_error(request: SignedRequest, exc: httpx.HTTPError) -> TransportError:
        message = f"{request.method} {sanitize_url(request.url)} failed: {sanitize_exception(exc)}"
        logger.warning(message)
        return TransportError(message)
