"""Exception types raised by the strois client."""

from __future__ import annotations

from enum import Enum


class S3ErrorCode(str, Enum):
    """Error codes documented by the S3 API.

    Codes the service returns that are not listed here are still accepted:
    ``S3ErrorCode("SomeNewCode")`` yields a pseudo-member carrying the raw
    string, with ``recognized`` set to False.
    """

    AccessDenied = "AccessDenied"
    AccountProblem = "AccountProblem"
    AllAccessDisabled = "AllAccessDisabled"
    AmbiguousGrantByEmailAddress = "AmbiguousGrantByEmailAddress"
    AuthorizationHeaderMalformed = "AuthorizationHeaderMalformed"
    BadDigest = "BadDigest"
    BucketAlreadyExists = "BucketAlreadyExists"
    BucketAlreadyOwnedByYou = "BucketAlreadyOwnedByYou"
    BucketNotEmpty = "BucketNotEmpty"
    CredentialsNotSupported = "CredentialsNotSupported"
    CrossLocationLoggingProhibited = "CrossLocationLoggingProhibited"
    EntityTooSmall = "EntityTooSmall"
    EntityTooLarge = "EntityTooLarge"
    ExpiredToken = "ExpiredToken"
    IllegalVersioningConfigurationException = "IllegalVersioningConfigurationException"
    IncompleteBody = "IncompleteBody"
    IncorrectNumberOfFilesInPostRequest = "IncorrectNumberOfFilesInPostRequest"
    InlineDataTooLarge = "InlineDataTooLarge"
    InternalError = "InternalError"
    InvalidAccessKeyId = "InvalidAccessKeyId"
    InvalidAddressingHeader = "InvalidAddressingHeader"
    InvalidArgument = "InvalidArgument"
    InvalidBucketName = "InvalidBucketName"
    InvalidBucketState = "InvalidBucketState"
    InvalidDigest = "InvalidDigest"
    InvalidLocationConstraint = "InvalidLocationConstraint"
    InvalidObjectState = "InvalidObjectState"
    InvalidPart = "InvalidPart"
    InvalidPartOrder = "InvalidPartOrder"
    InvalidPayer = "InvalidPayer"
    InvalidPolicyDocument = "InvalidPolicyDocument"
    InvalidRange = "InvalidRange"
    InvalidRequest = "InvalidRequest"
    InvalidSecurity = "InvalidSecurity"
    InvalidSOAPRequest = "InvalidSOAPRequest"
    InvalidStorageClass = "InvalidStorageClass"
    InvalidTargetBucketForLogging = "InvalidTargetBucketForLogging"
    InvalidToken = "InvalidToken"
    InvalidURI = "InvalidURI"
    KeyTooLongError = "KeyTooLongError"
    MalformedPOSTRequest = "MalformedPOSTRequest"
    MalformedXML = "MalformedXML"
    MaxMessageLengthExceeded = "MaxMessageLengthExceeded"
    MetadataTooLarge = "MetadataTooLarge"
    MethodNotAllowed = "MethodNotAllowed"
    MissingAttachment = "MissingAttachment"
    MissingContentLength = "MissingContentLength"
    MissingSecurityElement = "MissingSecurityElement"
    MissingSecurityHeader = "MissingSecurityHeader"
    NoLoggingStatusForKey = "NoLoggingStatusForKey"
    NoSuchBucket = "NoSuchBucket"
    NoSuchBucketPolicy = "NoSuchBucketPolicy"
    NoSuchKey = "NoSuchKey"
    NoSuchLifecycleConfiguration = "NoSuchLifecycleConfiguration"
    NoSuchUpload = "NoSuchUpload"
    NoSuchVersion = "NoSuchVersion"
    NotImplemented = "NotImplemented"
    NotSignedUp = "NotSignedUp"
    OperationAborted = "OperationAborted"
    PermanentRedirect = "PermanentRedirect"
    PreconditionFailed = "PreconditionFailed"
    Redirect = "Redirect"
    RestoreAlreadyInProgress = "RestoreAlreadyInProgress"
    RequestIsNotMultiPartContent = "RequestIsNotMultiPartContent"
    RequestTimeout = "RequestTimeout"
    RequestTimeTooSkewed = "RequestTimeTooSkewed"
    SignatureDoesNotMatch = "SignatureDoesNotMatch"
    ServiceUnavailable = "ServiceUnavailable"
    SlowDown = "SlowDown"
    TemporaryRedirect = "TemporaryRedirect"
    TokenRefreshRequired = "TokenRefreshRequired"
    TooManyBuckets = "TooManyBuckets"
    UnexpectedContent = "UnexpectedContent"
    UnresolvableGrantByEmailAddress = "UnresolvableGrantByEmailAddress"
    UserKeyMustBeSpecified = "UserKeyMustBeSpecified"

    @classmethod
    def _missing_(cls, value: object) -> S3ErrorCode | None:
        if not isinstance(value, str) or not value:
            return None
        pseudo_member = str.__new__(cls, value)
        pseudo_member._name_ = value
        pseudo_member._value_ = value
        return pseudo_member

    @property
    def recognized(self) -> bool:
        """Whether the code is one of the documented S3 error codes."""
        return self._name_ in type(self).__members__

    def __str__(self) -> str:
        return self.value


class StroisError(Exception):
    """Base class for every error raised by strois."""


class ConfigurationError(StroisError, ValueError):
    """Raised when an endpoint, bucket name or object key is malformed."""


class TransportError(StroisError):
    """Raised when the HTTP exchange itself failed (DNS, TLS, timeout, reset)."""


class DecodeError(StroisError):
    """Raised when a response body does not have the expected shape.

    Attributes:
        status_code: HTTP status of the response
        body: Raw response body
    """

    def __init__(self, message: str, status_code: int, body: bytes = b"") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UnexpectedResponseError(DecodeError):
    """A failed response whose body is not an S3 fault envelope.

    Proxies and load balancers in front of S3-compatible services often answer
    with plain text or HTML; the raw status and text are kept for diagnostics.
    """

    def __init__(self, status_code: int, body: bytes = b"") -> None:
        self.text = body.decode("utf-8", errors="replace")
        detail = self.text.strip() or "<empty body>"
        super().__init__(f"HTTP {status_code}: {detail}", status_code, body)


class S3Error(StroisError):
    """The service rejected the request with a fault envelope."""

    def __init__(
        self,
        code: S3ErrorCode,
        message: str,
        status_code: int,
        request_id: str | None = None,
        resource: str | None = None,
        bucket_name: str | None = None,
        key: str | None = None,
        host_id: str | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.request_id = request_id
        self.resource = resource
        self.bucket_name = bucket_name
        self.key = key
        self.host_id = host_id
        super().__init__(str(self))

    def __str__(self) -> str:
        text = f"{self.code}: {self.message}"
        target = self.bucket_name or self.resource
        if target:
            text += f" on {target}"
        return text

    def __repr__(self) -> str:
        return (
            f"S3Error(code={self.code.value!r}, status_code={self.status_code}, "
            f"request_id={self.request_id!r})"
        )
