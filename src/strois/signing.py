"""SigV4 request signing and URL construction."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Mapping, Sequence
from urllib.parse import quote, urlsplit

from botocore.auth import SIGV4_TIMESTAMP, S3SigV4Auth, S3SigV4QueryAuth, SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials

from .config import Context, validate_bucket_name
from .constants import SERVICE_NAME
from .operation import Operation

logger = logging.getLogger(__name__)

_UNRESERVED = "-_.~"


@dataclass(frozen=True)
class SignedRequest:
    """A fully addressed, authenticated HTTP request.

    Signatures are time-scoped: execute it right away and never reuse it.
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None


def encode_query(query: Sequence[tuple[str, str]]) -> str:
    """Percent-encode query parameters per RFC 3986, keeping their order."""
    return "&".join(
        f"{quote(name, safe=_UNRESERVED)}={quote(value, safe=_UNRESERVED)}"
        for name, value in query
    )


def encode_key(key: str) -> str:
    """Percent-encode an object key for the URL path, keeping ``/``.

    ``.`` and ``..`` segments are encoded too, otherwise the HTTP client
    would resolve them and send a different path than the one signed.
    """
    return "/".join(
        segment.replace(".", "%2E") if segment in (".", "..") else quote(segment, safe="")
        for segment in key.split("/")
    )


class RequestSigner:
    """Turns Operations into SigV4-signed requests for one Context."""

    def __init__(self, context: Context) -> None:
        self.context = context
        self._credentials = Credentials(context.key, context.secret, context.session_token)
        parts = urlsplit(context.endpoint)
        self._scheme = parts.scheme
        self._netloc = parts.netloc
        self._base_path = parts.path.rstrip("/")

    def url_for(
        self,
        bucket: str,
        key: str | None = None,
        query: Sequence[tuple[str, str]] = (),
    ) -> str:
        """Build the URL of a bucket or object for the configured addressing style.

        Path style gives ``endpoint/bucket/key``; virtual-hosted style gives
        ``bucket.endpoint/key``.
        """
        validate_bucket_name(bucket)
        resource = "/" + encode_key(key) if key is not None else "/"
        if self.context.path_style:
            url = f"{self._scheme}://{self._netloc}{self._base_path}/{bucket}{resource}"
        else:
            url = f"{self._scheme}://{bucket}.{self._netloc}{self._base_path}{resource}"
        if query:
            url = f"{url}?{encode_query(query)}"
        return url

    def sign(self, operation: Operation, bucket: str, now: datetime) -> SignedRequest:
        """Sign an operation with the Authorization header scheme.

        Args:
            operation: Operation to sign
            bucket: Target bucket name
            now: Signing time; callers pass a fresh timestamp for every request

        Returns:
            The signed request
        """
        request = AWSRequest(
            method=operation.method,
            url=self.url_for(bucket, operation.key, operation.query),
            headers=dict(operation.headers),
            data=operation.body,
        )
        auth = S3SigV4Auth(self._credentials, SERVICE_NAME, self.context.region)
        self._apply(auth, request, now)
        return SignedRequest(
            method=operation.method,
            url=request.url,
            headers={name: value for name, value in request.headers.items()},
            body=operation.body,
        )

    def presign(
        self,
        operation: Operation,
        bucket: str,
        now: datetime,
        expires_in: int | None = None,
    ) -> str:
        """Produce a query-authenticated URL for an operation.

        Args:
            operation: Operation to presign (its body is not part of the signature)
            bucket: Target bucket name
            now: Signing time
            expires_in: Validity in seconds (defaults to the context's actions_expires_in)

        Returns:
            Presigned URL
        """
        expires = expires_in if expires_in is not None else self.context.actions_expires_in
        request = AWSRequest(
            method=operation.method,
            url=self.url_for(bucket, operation.key, operation.query),
            headers=dict(operation.headers),
        )
        auth = S3SigV4QueryAuth(self._credentials, SERVICE_NAME, self.context.region, expires=expires)
        self._apply(auth, request, now)
        return request.url

    @staticmethod
    def _apply(auth: SigV4Auth, request: AWSRequest, now: datetime) -> None:
        # Same steps as SigV4Auth.add_auth, with the timestamp supplied by the caller.
        request.context["timestamp"] = now.astimezone(timezone.utc).strftime(SIGV4_TIMESTAMP)
        auth._modify_request_before_signing(request)
        canonical_request = auth.canonical_request(request)
        string_to_sign = auth.string_to_sign(request, canonical_request)
        signature = auth.signature(string_to_sign, request)
        auth._inject_signature_to_request(request, signature)
        logger.debug(f"Signed {request.method} request at {request.context['timestamp']}")
