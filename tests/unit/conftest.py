"""Shared fixtures: an in-memory S3 server behind httpx.MockTransport."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from urllib.parse import quote, urlsplit

import httpx
import pytest

from strois.client import Client
from strois.config import Context
from strois.signing import SignedRequest

S3_NS = "http://s3.amazonaws.com/doc/2006-03-01/"


def fault_xml(code: str, message: str, resource: str = "", request_id: str = "req-1") -> bytes:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f"<Error><Code>{code}</Code><Message>{message}</Message>"
        f"<Resource>{resource}</Resource><RequestId>{request_id}</RequestId></Error>"
    ).encode("utf-8")


class FakeS3:
    """Minimal S3 server keeping buckets and objects in memory.

    Buckets are read from the host (``bucket.localhost``) or from the first
    path segment. Requests signed through a client attached with ``attach``
    are checked against what reaches the wire.
    """

    def __init__(self, host: str = "localhost") -> None:
        self.host = host
        self.buckets: dict[str, dict[str, bytes]] = {}
        self.requests: list[httpx.Request] = []
        self.signed: list[SignedRequest] = []

    def attach(self, client: Client) -> Client:
        """Record every request the client signs."""
        sign = client.signer.sign

        def recording_sign(*args, **kwargs) -> SignedRequest:
            signed = sign(*args, **kwargs)
            self.signed.append(signed)
            return signed

        client.signer.sign = recording_sign
        return client

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not request.headers.get("authorization", "").startswith("AWS4-HMAC-SHA256"):
            return self._fault(403, "AccessDenied", "Access Denied.", request.url.path)
        if self.signed and not self._matches_signed(request, self.signed[-1]):
            return self._fault(
                403,
                "SignatureDoesNotMatch",
                "The request signature we calculated does not match the signature you provided.",
                request.url.path,
            )

        host = request.url.host
        if host.endswith(f".{self.host}"):
            bucket, key = host[: -len(self.host) - 1], request.url.path[1:]
        else:
            bucket, _, key = request.url.path.lstrip("/").partition("/")
        if key:
            return self._object(request, bucket, key)
        return self._bucket(request, bucket)

    @staticmethod
    def _matches_signed(request: httpx.Request, signed: SignedRequest) -> bool:
        expected = urlsplit(signed.url)
        target = expected.path + (f"?{expected.query}" if expected.query else "")
        return (
            request.method == signed.method
            and request.url.host == expected.hostname
            and request.url.raw_path.decode("ascii") == target
        )

    def _fault(self, status: int, code: str, message: str, resource: str) -> httpx.Response:
        return httpx.Response(status, content=fault_xml(code, message, resource))

    def _bucket(self, request: httpx.Request, bucket: str) -> httpx.Response:
        resource = f"/{bucket}"
        if request.method == "PUT":
            if bucket in self.buckets:
                return self._fault(
                    409,
                    "BucketAlreadyOwnedByYou",
                    "Your previous request to create the named bucket succeeded and you already own it.",
                    resource,
                )
            self.buckets[bucket] = {}
            return httpx.Response(200)
        if bucket not in self.buckets:
            if request.method == "HEAD":
                return httpx.Response(404)
            return self._fault(404, "NoSuchBucket", "The specified bucket does not exist", resource)
        if request.method == "HEAD":
            return httpx.Response(200)
        if request.method == "DELETE":
            if self.buckets[bucket]:
                return self._fault(409, "BucketNotEmpty", "The bucket you tried to delete is not empty", resource)
            del self.buckets[bucket]
            return httpx.Response(204)
        if request.method == "GET":
            return self._list(request, bucket)
        return self._fault(405, "MethodNotAllowed", "The specified method is not allowed", resource)

    def _list(self, request: httpx.Request, bucket: str) -> httpx.Response:
        params = request.url.params
        prefix = params.get("prefix", "")
        max_keys = int(params.get("max-keys", "1000"))
        start = int(params.get("continuation-token", "0"))
        keys = sorted(key for key in self.buckets[bucket] if key.startswith(prefix))
        page = keys[start : start + max_keys]
        truncated = start + max_keys < len(keys)

        entries = "".join(
            "<Contents>"
            f"<Key>{quote(key, safe='/')}</Key>"
            "<LastModified>2024-01-01T00:00:00.000Z</LastModified>"
            f'<ETag>"etag-{index}"</ETag>'
            f"<Size>{len(self.buckets[bucket][key])}</Size>"
            "<StorageClass>STANDARD</StorageClass>"
            "</Contents>"
            for index, key in enumerate(page)
        )
        next_token = f"<NextContinuationToken>{start + max_keys}</NextContinuationToken>" if truncated else ""
        body = (
            f'<ListBucketResult xmlns="{S3_NS}">'
            f"<Name>{bucket}</Name><Prefix>{quote(prefix, safe='/')}</Prefix>"
            f"<KeyCount>{len(page)}</KeyCount><MaxKeys>{max_keys}</MaxKeys>"
            f"<EncodingType>url</EncodingType>"
            f"<IsTruncated>{'true' if truncated else 'false'}</IsTruncated>"
            f"{entries}{next_token}</ListBucketResult>"
        )
        return httpx.Response(200, content=body.encode("utf-8"))

    def _object(self, request: httpx.Request, bucket: str, key: str) -> httpx.Response:
        resource = f"/{bucket}/{key}"
        if bucket not in self.buckets:
            return self._fault(404, "NoSuchBucket", "The specified bucket does not exist", resource)
        objects = self.buckets[bucket]
        if request.method == "PUT":
            objects[key] = request.content
            return httpx.Response(200, headers={"ETag": '"etag"'})
        if request.method == "GET":
            if key not in objects:
                return self._fault(404, "NoSuchKey", "The specified key does not exist.", resource)
            return httpx.Response(200, content=objects[key])
        if request.method == "DELETE":
            objects.pop(key, None)
            return httpx.Response(204)
        return self._fault(405, "MethodNotAllowed", "The specified method is not allowed", resource)


@pytest.fixture
def fake_s3() -> FakeS3:
    return FakeS3()


@pytest.fixture
def context() -> Context:
    return Context(
        endpoint="http://localhost:9000",
        key="minioadmin",
        secret="minioadmin",
    )


@pytest.fixture
def client(context: Context, fake_s3: FakeS3) -> Client:
    http_client = httpx.Client(transport=httpx.MockTransport(fake_s3))
    with fake_s3.attach(Client(context, http_client=http_client)) as client:
        yield client


@pytest.fixture
def signing_time() -> datetime:
    return datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_client(context: Context):
    """Build clients over arbitrary MockTransport handlers, closing them afterwards."""
    clients: list[Client] = []

    def factory(handler, **overrides) -> Client:
        ctx = replace(context, **overrides) if overrides else context
        client = Client(ctx, http_client=httpx.Client(transport=httpx.MockTransport(handler)))
        clients.append(client)
        if isinstance(handler, FakeS3):
            handler.attach(client)
        return client

    yield factory
    for client in clients:
        client.close()
