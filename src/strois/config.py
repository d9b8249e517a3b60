"""Endpoint and credential configuration."""

from __future__ import annotations

import ipaddress
import os
import re
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from .constants import (
    DEFAULT_ACTIONS_EXPIRES_IN,
    DEFAULT_REGION,
    DEFAULT_TIMEOUT_SECONDS,
    ENV_ACCESS_KEY,
    ENV_ENDPOINT,
    ENV_PATH_STYLE,
    ENV_REGION,
    ENV_SECRET_KEY,
    ENV_SESSION_TOKEN,
    ENV_TIMEOUT,
)
from .errors import ConfigurationError

if TYPE_CHECKING:
    import httpx

    from .bucket import Bucket
    from .client import Client

_BUCKET_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9.\-]{1,61}[a-z0-9]$")


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


def validate_endpoint(endpoint: str) -> str:
    """Check that the endpoint is an absolute http(s) URL with a host.

    Returns:
        The endpoint without its trailing slash

    Raises:
        ConfigurationError: If the endpoint is malformed
    """
    parts = urlsplit(endpoint)
    if parts.scheme not in ("http", "https"):
        raise ConfigurationError(f"Unsupported endpoint scheme in {endpoint!r}, expected http or https")
    if not parts.hostname:
        raise ConfigurationError(f"Endpoint {endpoint!r} has no host")
    if parts.query or parts.fragment:
        raise ConfigurationError(f"Endpoint {endpoint!r} must not carry a query or fragment")
    return endpoint.rstrip("/")


def validate_bucket_name(name: str) -> str:
    """Check a bucket name against the S3 naming rules.

    Raises:
        ConfigurationError: If the name is not a valid bucket name
    """
    if not _BUCKET_NAME_RE.match(name):
        raise ConfigurationError(
            f"Invalid bucket name {name!r}: expected 3-63 lowercase letters, digits, "
            "dots or hyphens, starting and ending with a letter or digit"
        )
    if ".." in name:
        raise ConfigurationError(f"Invalid bucket name {name!r}: consecutive dots")
    try:
        ipaddress.ip_address(name)
    except ValueError:
        return name
    raise ConfigurationError(f"Invalid bucket name {name!r}: formatted as an IP address")


@dataclass(frozen=True)
class Context:
    """Immutable endpoint, credential and transport configuration.

    A Context is shared read-only by every client and bucket handle built
    from it, so it is safe to use from several threads.
    """

    endpoint: str
    key: str
    secret: str = field(repr=False)
    session_token: str | None = field(default=None, repr=False)
    region: str = DEFAULT_REGION
    path_style: bool = True
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    connect_timeout: float | None = None
    follow_redirects: bool = False
    actions_expires_in: int = DEFAULT_ACTIONS_EXPIRES_IN

    def __post_init__(self) -> None:
        object.__setattr__(self, "endpoint", validate_endpoint(self.endpoint))
        if not self.key:
            raise ConfigurationError("An access key is required")
        if not self.secret:
            raise ConfigurationError("A secret key is required")
        if not self.region:
            raise ConfigurationError("The region must not be empty")
        if self.timeout <= 0:
            raise ConfigurationError("The timeout must be positive")
        if self.connect_timeout is not None and self.connect_timeout <= 0:
            raise ConfigurationError("The connect timeout must be positive")
        if self.actions_expires_in <= 0:
            raise ConfigurationError("actions_expires_in must be positive")


@dataclass(frozen=True)
class Builder:
    """Fluent, immutable configuration builder.

    Every setter returns a new builder; nothing is validated until
    ``build_context`` (or ``client`` / ``bucket``) is called.

    Example:
        bucket = (
            Builder("http://localhost:9000")
            .key("minioadmin")
            .secret("minioadmin")
            .with_url_path_style(True)
            .bucket("tamo")
        )
    """

    endpoint: str
    access_key: str | None = None
    secret_key: str | None = field(default=None, repr=False)
    session_token: str | None = field(default=None, repr=False)
    region_name: str = DEFAULT_REGION
    path_style: bool = True
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    connect_timeout_seconds: float | None = None
    follow_redirects_enabled: bool = False
    expires_in: int = DEFAULT_ACTIONS_EXPIRES_IN

    @classmethod
    def from_environment(cls) -> Builder:
        """Create a builder from the ``S3_*`` environment variables.

        Environment Variables:
            S3_ENDPOINT: Endpoint URL (required)
            S3_ACCESS_KEY: Access key ID
            S3_SECRET_KEY: Secret access key
            S3_SESSION_TOKEN: Optional session token
            S3_REGION: Region (default: us-east-1)
            S3_PATH_STYLE: Use path-style addressing (default: true)
            S3_TIMEOUT_SECONDS: Request timeout (default: 60)
        """
        endpoint = os.getenv(ENV_ENDPOINT)
        if not endpoint:
            raise ConfigurationError(f"{ENV_ENDPOINT} is not set")
        try:
            timeout = float(os.getenv(ENV_TIMEOUT, str(DEFAULT_TIMEOUT_SECONDS)))
        except ValueError as exc:
            raise ConfigurationError(f"{ENV_TIMEOUT} must be a number") from exc
        return cls(
            endpoint=endpoint,
            access_key=os.getenv(ENV_ACCESS_KEY),
            secret_key=os.getenv(ENV_SECRET_KEY),
            session_token=os.getenv(ENV_SESSION_TOKEN) or None,
            region_name=os.getenv(ENV_REGION, DEFAULT_REGION),
            path_style=_as_bool(os.getenv(ENV_PATH_STYLE), True),
            timeout_seconds=timeout,
        )

    def key(self, key: str) -> Builder:
        return replace(self, access_key=key)

    def secret(self, secret: str) -> Builder:
        return replace(self, secret_key=secret)

    def token(self, token: str) -> Builder:
        return replace(self, session_token=token)

    def maybe_token(self, token: str | None) -> Builder:
        return replace(self, session_token=token)

    def region(self, region: str) -> Builder:
        return replace(self, region_name=region)

    def with_url_path_style(self, path_style: bool) -> Builder:
        return replace(self, path_style=path_style)

    def timeout(self, seconds: float) -> Builder:
        return replace(self, timeout_seconds=seconds)

    def connect_timeout(self, seconds: float) -> Builder:
        return replace(self, connect_timeout_seconds=seconds)

    def follow_redirects(self, enabled: bool = True) -> Builder:
        return replace(self, follow_redirects_enabled=enabled)

    def actions_expires_in(self, seconds: int) -> Builder:
        return replace(self, expires_in=seconds)

    def build_context(self) -> Context:
        """Validate the collected options and produce a Context.

        Raises:
            ConfigurationError: If an option is missing or malformed
        """
        if not self.access_key or not self.secret_key:
            raise ConfigurationError("Both the access key and the secret key must be set")
        return Context(
            endpoint=self.endpoint,
            key=self.access_key,
            secret=self.secret_key,
            session_token=self.session_token,
            region=self.region_name,
            path_style=self.path_style,
            timeout=self.timeout_seconds,
            connect_timeout=self.connect_timeout_seconds,
            follow_redirects=self.follow_redirects_enabled,
            actions_expires_in=self.expires_in,
        )

    def client(self, http_client: httpx.Client | None = None) -> Client:
        """Create a Client from the builder."""
        from .client import Client

        return Client(self.build_context(), http_client=http_client)

    def bucket(self, name: str, http_client: httpx.Client | None = None) -> Bucket:
        """Create a Bucket handle. This does not create the bucket on S3."""
        return self.client(http_client=http_client).bucket(name)
