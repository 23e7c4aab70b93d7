"""Error definitions for tinys3.

Recoverable failures derive from :class:`Error`. Server-reported failures
are :class:`S3Error` instances carrying an :class:`ErrorCode`. Signing with
anonymous credentials raises :class:`AnonymousCredentials`, which is not an
:class:`Error` subclass.
"""

from enum import Enum

import httpx


class Error(Exception):
    """Base class for all recoverable tinys3 errors."""


class InvalidRegion(Error, ValueError):
    """A region or endpoint string without an extractable host."""

    def __init__(self, value: str = "") -> None:
        super().__init__(f"invalid S3 region: {value!r}")
        self.value = value


class InvalidEtag(Error, ValueError):
    """A malformed ETag string."""

    def __init__(self, value: str = "") -> None:
        super().__init__(f"invalid S3 ETag: {value!r}")
        self.value = value


class InvalidMetadata(Error, ValueError):
    """A response header set missing or malforming a required header."""

    def __init__(self, message: str = "invalid metadata") -> None:
        super().__init__(message)


class InvalidHeaderValue(Error, ValueError):
    """A header value that cannot be sent in an HTTP request."""

    def __init__(self, name: str) -> None:
        super().__init__(f"invalid value for header {name}")
        self.name = name


class InvalidUrl(Error, ValueError):
    """A request URL could not be constructed."""


class TransportError(Error):
    """The HTTP transport failed before a response was received.

    Attributes:
        cause: The underlying httpx exception.
    """

    def __init__(self, cause: Exception) -> None:
        super().__init__(str(cause) or type(cause).__name__)
        self.cause = cause


class AnonymousCredentials(RuntimeError):
    """Signing was attempted without an access key and secret key."""

    def __init__(self) -> None:
        super().__init__("cannot sign a request without access key and secret key")


# -- Server-reported errors ---------------------------------------------------


class ErrorCode(Enum):
    """S3 error codes recognised by the client."""

    ACCESS_DENIED = "AccessDenied"
    BUCKET_ALREADY_EXISTS = "BucketAlreadyExists"
    BUCKET_ALREADY_OWNED_BY_YOU = "BucketAlreadyOwnedByYou"
    BUCKET_NOT_EMPTY = "BucketNotEmpty"
    NO_SUCH_BUCKET = "NoSuchBucket"
    NO_SUCH_KEY = "NoSuchKey"
    INVALID_BUCKET_NAME = "InvalidBucketName"
    INVALID_ACCESS_KEY_ID = "InvalidAccessKeyId"
    SIGNATURE_DOES_NOT_MATCH = "SignatureDoesNotMatch"
    REQUEST_TIME_TOO_SKEWED = "RequestTimeTooSkewed"
    INVALID_ARGUMENT = "InvalidArgument"
    INVALID_REQUEST = "InvalidRequest"
    INVALID_RANGE = "InvalidRange"
    ENTITY_TOO_LARGE = "EntityTooLarge"
    MALFORMED_XML = "MalformedXML"
    METHOD_NOT_ALLOWED = "MethodNotAllowed"
    MISSING_CONTENT_LENGTH = "MissingContentLength"
    PRECONDITION_FAILED = "PreconditionFailed"
    KEY_TOO_LONG = "KeyTooLongError"
    INTERNAL_ERROR = "InternalError"
    NOT_IMPLEMENTED = "NotImplemented"
    UNDEFINED = "Undefined"

    @classmethod
    def parse(cls, text: str) -> "ErrorCode":
        """Map an S3 ``<Code>`` value to an ErrorCode.

        Args:
            text: The raw error code string.

        Returns:
            The matching member, or ``UNDEFINED`` for unknown codes.
        """
        try:
            return cls(text)
        except ValueError:
            return cls.UNDEFINED

    def __str__(self) -> str:
        return self.value


class S3Error(Error):
    """An error reported by the S3 server.

    Attributes:
        code: The parsed error code.
        message: Server message, or the reason the body could not be decoded.
        http_status: The HTTP status of the response.
        resource: The resource reported by the server, if any.
        request_id: The server request id, if any.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        http_status: int = 0,
        resource: str = "",
        request_id: str = "",
    ) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
        self.http_status = http_status
        self.resource = resource
        self.request_id = request_id


# -- Explicit conversions -----------------------------------------------------


def from_transport(exc: Exception) -> Error:
    """Map an httpx failure onto the tinys3 error taxonomy.

    Args:
        exc: The exception raised by httpx (``HTTPError`` or ``InvalidURL``).

    Returns:
        An ``InvalidUrl`` for URL problems, else a ``TransportError``.
    """
    if isinstance(exc, (httpx.InvalidURL, httpx.UnsupportedProtocol)):
        return InvalidUrl(str(exc))
    return TransportError(exc)


_STATUS_CODES = {
    403: ErrorCode.ACCESS_DENIED,
    404: ErrorCode.NO_SUCH_KEY,
    405: ErrorCode.METHOD_NOT_ALLOWED,
    411: ErrorCode.MISSING_CONTENT_LENGTH,
    412: ErrorCode.PRECONDITION_FAILED,
    416: ErrorCode.INVALID_RANGE,
    500: ErrorCode.INTERNAL_ERROR,
    501: ErrorCode.NOT_IMPLEMENTED,
}


def error_from_status(status: int, message: str = "") -> S3Error:
    """Build an S3Error for a response that carried no body (e.g. HEAD)."""
    code = _STATUS_CODES.get(status, ErrorCode.UNDEFINED)
    return S3Error(code, message or f"HTTP status {status}", http_status=status)
