"""S3 bucket handle and object operations for tinys3.

A :class:`Bucket` scopes every request to one bucket name, region and set of
credentials. Requests are built with :class:`RequestBuilder`, signed, and
sent through an ``httpx.AsyncClient``. Non-success responses are decoded
into :class:`S3Error`.
"""

import logging
import time
from collections.abc import AsyncIterable
from dataclasses import dataclass
from enum import Enum

import httpx

from tinys3.credentials import Credentials
from tinys3.errors import (
    InvalidEtag,
    InvalidMetadata,
    S3Error,
    error_from_status,
    from_transport,
)
from tinys3.etag import Etag
from tinys3.object import Metadata, Object
from tinys3.region import Region
from tinys3.request import RequestBuilder
from tinys3.xml_utils import parse_error, render_create_bucket_configuration

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class StaticAcl(Enum):
    """Canned ACLs applied at bucket creation."""

    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"
    AUTHENTICATED_READ = "authenticated-read"


@dataclass(frozen=True)
class Configuration:
    """Bucket creation options.

    Attributes:
        acl: Canned ACL sent as ``X-Amz-Acl``.
        object_lock: Enable S3 Object Lock on the new bucket.
    """

    acl: StaticAcl = StaticAcl.PRIVATE
    object_lock: bool = False


class Bucket:
    """A handle to an S3 bucket.

    Constructing a Bucket performs no I/O; the bucket may or may not exist.
    Use :meth:`create` to create it on the server.

    Attributes:
        name: The bucket name.
        region: The region the bucket lives in.
        credentials: The credentials every request is signed with.
    """

    def __init__(
        self,
        name: str,
        region: Region,
        credentials: Credentials,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the bucket handle.

        Args:
            name: The bucket name.
            region: The bucket region.
            credentials: Signing credentials.
            client: Shared HTTP client; a private one is created (and closed
                by :meth:`aclose`) when omitted.
            timeout: Request timeout in seconds for a private client.
        """
        self.name = name
        self.region = region
        self.credentials = credentials
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "Bucket":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this bucket created it."""
        if self._owns_client:
            await self._client.aclose()

    def __repr__(self) -> str:
        return f"Bucket(name={self.name!r}, region={self.region!r})"

    # -- Bucket operations -----------------------------------------------------

    @classmethod
    async def create(
        cls,
        name: str,
        region: Region,
        credentials: Credentials,
        config: Configuration | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> "Bucket":
        """Create a bucket on the server.

        Implements: PUT /{bucket}

        Args:
            name: The bucket name.
            region: The region to create the bucket in.
            credentials: Signing credentials.
            config: Creation options (ACL, object lock).
            client: Optional shared HTTP client.
            timeout: Request timeout for a private client.

        Returns:
            A handle to the new bucket.

        Raises:
            S3Error: If the server refuses, e.g. BucketAlreadyOwnedByYou.
        """
        config = config or Configuration()
        bucket = cls(name, region, credentials, client=client, timeout=timeout)
        try:
            builder = bucket._builder("PUT").header("X-Amz-Acl", config.acl.value)
            if config.object_lock:
                builder.header("X-Amz-Bucket-Object-Lock-Enabled", "true")
            body = render_create_bucket_configuration(region.name)
            if body is None:
                request = builder.sign_empty(credentials)
            else:
                builder.content_type("application/xml")
                request = builder.sign_bytes(credentials, body.encode("utf-8"))
            response = await bucket._send(request)
            await bucket._check(response, 200)
        except BaseException:
            await bucket.aclose()
            raise
        logger.info("Created bucket %s in %s", name, region.signing_name)
        return bucket

    async def delete(self) -> None:
        """Delete the (empty) bucket.

        Implements: DELETE /{bucket}
        """
        request = self._builder("DELETE").sign_empty(self.credentials)
        response = await self._send(request)
        await self._check(response, 204)
        logger.info("Deleted bucket %s", self.name)

    # -- Object operations -----------------------------------------------------

    async def get_object(self, key: str) -> Object:
        """Fetch an object; its content is streamed.

        Implements: GET /{bucket}/{key}

        Raises:
            S3Error: E.g. NoSuchKey.
            InvalidMetadata: If the response lacks a valid ETag or length.
        """
        request = self._builder("GET", key).sign_empty(self.credentials)
        response = await self._send(request, stream=True)
        await self._check(response, 200)
        try:
            metadata = Metadata.from_headers(response.headers)
        except InvalidMetadata:
            await response.aclose()
            raise
        return Object(key, metadata, response)

    async def head_object(self, key: str) -> Metadata:
        """Fetch an object's metadata.

        Implements: HEAD /{bucket}/{key}
        """
        request = self._builder("HEAD", key).sign_empty(self.credentials)
        response = await self._send(request)
        await self._check(response, 200)
        return Metadata.from_headers(response.headers)

    async def put_object(
        self,
        key: str,
        content: AsyncIterable[bytes],
        size: int | None = None,
    ) -> Etag | None:
        """Upload an object from an async byte stream.

        Implements: PUT /{bucket}/{key}

        Args:
            key: The object key.
            content: Async iterable of body chunks.
            size: Total length, sent as Content-Length when known.

        Returns:
            The ETag reported by the server, if any.
        """
        request = self._builder("PUT", key).sign(self.credentials, content, size=size)
        response = await self._send(request)
        await self._check(response, 200)
        return _response_etag(response)

    async def put_object_bytes(self, key: str, data: bytes) -> Etag | None:
        """Upload an object from an in-memory buffer.

        Implements: PUT /{bucket}/{key}
        """
        request = self._builder("PUT", key).sign_bytes(self.credentials, data)
        response = await self._send(request)
        await self._check(response, 200)
        return _response_etag(response)

    async def delete_object(self, key: str) -> None:
        """Delete an object.

        Implements: DELETE /{bucket}/{key}
        """
        request = self._builder("DELETE", key).sign_empty(self.credentials)
        response = await self._send(request)
        await self._check(response, 204, 200)

    # -- Plumbing --------------------------------------------------------------

    def url(self, key: str | None = None) -> str:
        """Return ``{endpoint}/{bucket}[/{key}]``.

        Endpoints without a scheme are addressed over https.
        """
        endpoint = self.region.endpoint
        if "://" not in endpoint:
            endpoint = f"https://{endpoint}"
        if key is None:
            return f"{endpoint}/{self.name}"
        return f"{endpoint}/{self.name}/{key}"

    def _builder(self, method: str, key: str | None = None) -> RequestBuilder:
        return RequestBuilder(method, self.url(key)).region(self.region)

    async def _send(self, request: httpx.Request, stream: bool = False) -> httpx.Response:
        start = time.monotonic()
        try:
            response = await self._client.send(request, stream=stream)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise from_transport(exc) from exc
        duration_ms = round((time.monotonic() - start) * 1000, 2)
        logger.debug(
            "%s %s -> %d (%.2fms)",
            request.method,
            request.url,
            response.status_code,
            duration_ms,
            extra={
                "method": request.method,
                "url": str(request.url),
                "status": response.status_code,
                "bucket": self.name,
                "duration_ms": duration_ms,
            },
        )
        return response

    async def _check(self, response: httpx.Response, *expected: int) -> None:
        """Raise the decoded S3Error unless the status is one of ``expected``."""
        if response.status_code in expected:
            return
        try:
            body = await response.aread()
        except httpx.HTTPError as exc:
            raise from_transport(exc) from exc
        finally:
            await response.aclose()
        error: S3Error
        if body:
            error = parse_error(body, response.status_code)
        else:
            error = error_from_status(response.status_code)
        logger.warning(
            "%s %s failed: %s",
            response.request.method,
            response.request.url,
            error,
            extra={"status": response.status_code, "bucket": self.name},
        )
        raise error


def _response_etag(response: httpx.Response) -> Etag | None:
    raw = response.headers.get("ETag")
    if raw is None:
        return None
    try:
        return Etag.parse(raw)
    except InvalidEtag as exc:
        raise InvalidMetadata(f"invalid ETag header: {raw!r}") from exc
