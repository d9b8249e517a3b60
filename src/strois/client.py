"""S3 client running the sign, execute and resolve pipeline."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Iterator, Mapping, TypeVar

import httpx

from . import metrics
from .config import Builder, Context
from .errors import DecodeError, S3Error, TransportError
from .logging import log_request_event
from .operation import Operation
from .resolver import Decoder, is_success, raise_for_fault, resolve
from .signing import RequestSigner, SignedRequest
from .transport import Transport, build_http_client

if TYPE_CHECKING:
    from .bucket import Bucket

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Client:
    """Synchronous S3 client bound to one Context.

    The client holds no mutable state besides the httpx connection pool, so
    one instance can serve several threads.
    """

    def __init__(self, context: Context, http_client: httpx.Client | None = None) -> None:
        """Initialize the client.

        Args:
            context: Endpoint and credential configuration
            http_client: Optional preconfigured httpx client (timeouts and
                redirect policy from the context are ignored when given)
        """
        self.context = context
        self.signer = RequestSigner(context)
        self.transport = Transport(http_client or build_http_client(context))

    @staticmethod
    def builder(endpoint: str) -> Builder:
        """Start configuring a client for the given endpoint."""
        return Builder(endpoint)

    def bucket(self, name: str) -> Bucket:
        """Return a handle on a bucket. This does not create the bucket on S3."""
        from .bucket import Bucket

        return Bucket(self, name)

    def execute(self, name: str, bucket: str, operation: Operation, decode: Decoder[T]) -> T:
        """Sign, send and resolve one operation.

        Args:
            name: Operation name used in metrics and logs
            bucket: Target bucket
            operation: Operation to perform
            decode: Decoding strategy for a successful response

        Returns:
            The decoded payload

        Raises:
            TransportError: If the HTTP exchange failed
            S3Error: If the service rejected the request
            DecodeError: If the response did not have the expected shape
        """
        signed = self.signer.sign(operation, bucket, datetime.now(timezone.utc))
        start_time = time.time()
        try:
            response = self.transport.execute(signed)
        except TransportError:
            self._record(name, "transport_error", time.time() - start_time)
            metrics.transport_errors_total.labels(operation=name).inc()
            raise
        duration = time.time() - start_time
        self._log(name, bucket, operation, signed, response.status_code, response.headers, start_time)

        try:
            result = resolve(response, decode)
        except S3Error as e:
            self._record(name, "s3_error", duration)
            metrics.s3_errors_total.labels(code=e.code.value).inc()
            raise
        except DecodeError:
            self._record(name, "decode_error", duration)
            raise
        self._record(name, "success", duration)
        return result

    @contextmanager
    def stream(self, name: str, bucket: str, operation: Operation) -> Iterator[httpx.Response]:
        """Sign and send an operation, yielding the response before its body is read.

        Failed responses are buffered and raised as S3Error or
        UnexpectedResponseError before anything is yielded.
        """
        signed = self.signer.sign(operation, bucket, datetime.now(timezone.utc))
        start_time = time.time()
        try:
            with self.transport.stream(signed) as response:
                self._log(name, bucket, operation, signed, response.status_code, response.headers, start_time)
                if not is_success(response.status_code):
                    body = b"".join(response.iter_raw())
                    try:
                        raise_for_fault(response.status_code, body)
                    except S3Error as e:
                        self._record(name, "s3_error", time.time() - start_time)
                        metrics.s3_errors_total.labels(code=e.code.value).inc()
                        raise
                    except DecodeError:
                        self._record(name, "decode_error", time.time() - start_time)
                        raise
                yield response
        except TransportError:
            self._record(name, "transport_error", time.time() - start_time)
            metrics.transport_errors_total.labels(operation=name).inc()
            raise
        self._record(name, "success", time.time() - start_time)

    def presign(self, bucket: str, operation: Operation, expires_in: int | None = None) -> str:
        """Return a presigned URL for an operation, valid from now."""
        return self.signer.presign(operation, bucket, datetime.now(timezone.utc), expires_in)

    def close(self) -> None:
        """Release the underlying connection pool."""
        self.transport.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Client(endpoint={self.context.endpoint!r}, region={self.context.region!r})"

    @staticmethod
    def _log(
        name: str,
        bucket: str,
        operation: Operation,
        signed: SignedRequest,
        status: int,
        response_headers: Mapping[str, str],
        start_time: float,
    ) -> None:
        log_request_event(
            logger,
            operation=name,
            method=signed.method,
            url=signed.url,
            bucket=bucket,
            key=operation.key,
            status=status,
            duration=time.time() - start_time,
            headers=signed.headers,
            request_id=response_headers.get("x-amz-request-id"),
        )

    @staticmethod
    def _record(name: str, result: str, duration: float) -> None:
        metrics.requests_total.labels(operation=name, result=result).inc()
        metrics.request_duration_seconds.labels(operation=name).observe(duration)
