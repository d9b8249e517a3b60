"""Bucket handle exposing the bucket and object operations."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, BinaryIO, Iterator

from .codec import encode_create_bucket_configuration
from .config import Builder, validate_bucket_name
from .constants import (
    DEFAULT_REGION,
    ENCODING_TYPE_URL,
    LIST_TYPE_V2,
    OP_CREATE_BUCKET,
    OP_DELETE_BUCKET,
    OP_DELETE_OBJECT,
    OP_GET_OBJECT,
    OP_HEAD_BUCKET,
    OP_LIST_OBJECTS,
    OP_PUT_OBJECT,
)
from .errors import S3Error, S3ErrorCode, UnexpectedResponseError
from .models import ListedObject, ListObjectsPage
from .operation import Operation
from .resolver import as_bytes, as_json, as_listing, as_text, no_content

if TYPE_CHECKING:
    from .client import Client

logger = logging.getLogger(__name__)

ALREADY_EXISTS_CODES = (S3ErrorCode.BucketAlreadyExists, S3ErrorCode.BucketAlreadyOwnedByYou)

DEFAULT_CHUNK_SIZE = 64 * 1024


class Bucket:
    """Handle on one bucket.

    The handle caches nothing about the remote bucket: every call goes to the
    server. Creating a handle does not create the bucket; see ``create`` and
    ``get_or_create`` for that.
    """

    def __init__(self, client: Client, name: str) -> None:
        self.client = client
        self.name = validate_bucket_name(name)

    @staticmethod
    def builder(endpoint: str) -> Builder:
        """Start configuring a bucket handle for the given endpoint."""
        return Builder(endpoint)

    def create(self) -> Bucket:
        """Create the bucket on S3.

        Raises:
            S3Error: BucketAlreadyExists or BucketAlreadyOwnedByYou if it exists
        """
        region = self.client.context.region
        body = encode_create_bucket_configuration(region) if region != DEFAULT_REGION else None
        operation = Operation.bucket_level("PUT", body=body)
        self.client.execute(OP_CREATE_BUCKET, self.name, operation, no_content)
        logger.info(f"Created bucket {self.name}")
        return self

    def get_or_create(self) -> Bucket:
        """Create the bucket, treating an already existing bucket as success."""
        try:
            return self.create()
        except S3Error as e:
            if e.code in ALREADY_EXISTS_CODES:
                logger.debug(f"Bucket {self.name} already exists ({e.code})")
                return self
            raise

    def delete(self) -> None:
        """Delete the bucket. It must be empty.

        Raises:
            S3Error: NoSuchBucket if the bucket does not exist
        """
        operation = Operation.bucket_level("DELETE")
        self.client.execute(OP_DELETE_BUCKET, self.name, operation, no_content)
        logger.info(f"Deleted bucket {self.name}")

    delete_bucket = delete

    def exists(self) -> bool:
        """Check whether the bucket exists."""
        operation = Operation.bucket_level("HEAD")
        try:
            self.client.execute(OP_HEAD_BUCKET, self.name, operation, no_content)
        except S3Error as e:
            if e.code == S3ErrorCode.NoSuchBucket:
                return False
            raise
        except UnexpectedResponseError as e:
            # HEAD responses carry no fault envelope
            if e.status_code == 404:
                return False
            raise
        return True

    def put_object(self, key: str, content: bytes, content_type: str | None = None) -> None:
        """Upload an object in a single request."""
        headers = {"Content-Type": content_type} if content_type else {}
        operation = Operation.object_level("PUT", key, headers=headers, body=bytes(content))
        self.client.execute(OP_PUT_OBJECT, self.name, operation, no_content)

    def get_object(self, key: str) -> bytes:
        """Download an object into memory."""
        operation = Operation.object_level("GET", key)
        return self.client.execute(OP_GET_OBJECT, self.name, operation, as_bytes)

    def get_object_string(self, key: str) -> str:
        """Download an object and decode it as UTF-8.

        Raises:
            DecodeError: If the object is not valid UTF-8
        """
        operation = Operation.object_level("GET", key)
        return self.client.execute(OP_GET_OBJECT, self.name, operation, as_text)

    def get_object_json(self, key: str) -> Any:
        """Download an object and decode it as JSON."""
        operation = Operation.object_level("GET", key)
        return self.client.execute(OP_GET_OBJECT, self.name, operation, as_json)

    @contextmanager
    def get_object_stream(self, key: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[Iterator[bytes]]:
        """Stream an object's content.

        Example:
            with bucket.get_object_stream("backup.tar") as chunks:
                for chunk in chunks:
                    ...
        """
        operation = Operation.object_level("GET", key)
        with self.client.stream(OP_GET_OBJECT, self.name, operation) as response:
            yield response.iter_raw(chunk_size)

    def get_object_to_writer(self, key: str, writer: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
        """Stream an object into a binary writer.

        Returns:
            Number of bytes written
        """
        written = 0
        with self.get_object_stream(key, chunk_size) as chunks:
            for chunk in chunks:
                writer.write(chunk)
                written += len(chunk)
        return written

    def delete_object(self, key: str) -> None:
        operation = Operation.object_level("DELETE", key)
        self.client.execute(OP_DELETE_OBJECT, self.name, operation, no_content)

    def list_objects_page(
        self,
        prefix: str = "",
        continuation_token: str | None = None,
        max_keys: int | None = None,
        delimiter: str | None = None,
    ) -> ListObjectsPage:
        """Fetch one page of a ListObjectsV2 listing.

        Args:
            prefix: Only list keys starting with this prefix
            continuation_token: Token from the previous page's next_continuation_token
            max_keys: Maximum number of keys in the page
            delimiter: Group keys sharing a prefix up to this delimiter into common_prefixes
        """
        query = [
            ("list-type", LIST_TYPE_V2),
            ("encoding-type", ENCODING_TYPE_URL),
            ("prefix", prefix),
        ]
        if continuation_token:
            query.append(("continuation-token", continuation_token))
        if max_keys is not None:
            query.append(("max-keys", str(max_keys)))
        if delimiter:
            query.append(("delimiter", delimiter))
        operation = Operation.bucket_level("GET", query=query)
        return self.client.execute(OP_LIST_OBJECTS, self.name, operation, as_listing)

    def list_objects(
        self,
        prefix: str = "",
        page_size: int | None = None,
        delimiter: str | None = None,
    ) -> Iterator[ListedObject]:
        """Iterate over every object under a prefix, fetching pages lazily.

        Errors are raised during iteration, when the failing page is fetched.
        """
        continuation_token = None
        while True:
            page = self.list_objects_page(
                prefix=prefix,
                continuation_token=continuation_token,
                max_keys=page_size,
                delimiter=delimiter,
            )
            yield from page.contents
            if not page.is_truncated:
                return
            if not page.next_continuation_token:
                logger.warning(f"Truncated listing of {self.name} without a continuation token")
                return
            continuation_token = page.next_continuation_token

    def presign_get_object(self, key: str, expires_in: int | None = None) -> str:
        """Return a presigned URL to download an object."""
        return self.client.presign(self.name, Operation.object_level("GET", key), expires_in)

    def presign_put_object(self, key: str, expires_in: int | None = None) -> str:
        """Return a presigned URL to upload an object."""
        return self.client.presign(self.name, Operation.object_level("PUT", key), expires_in)

    def __repr__(self) -> str:
        return f"Bucket(name={self.name!r}, client={self.client!r})"
