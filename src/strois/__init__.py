"""Synchronous S3 client built on botocore signing and httpx."""

from .bucket import Bucket
from .client import Client
from .config import Builder, Context
from .errors import (
    ConfigurationError,
    DecodeError,
    S3Error,
    S3ErrorCode,
    StroisError,
    TransportError,
    UnexpectedResponseError,
)
from .models import ListedObject, ListObjectsPage

__version__ = "0.1.0"

__all__ = [
    "Bucket",
    "Builder",
    "Client",
    "ConfigurationError",
    "Context",
    "DecodeError",
    "ListObjectsPage",
    "ListedObject",
    "S3Error",
    "S3ErrorCode",
    "StroisError",
    "TransportError",
    "UnexpectedResponseError",
]
