"""Signed S3 request construction."""

from collections.abc import AsyncIterable
from datetime import datetime

import httpx

from tinys3 import __version__
from tinys3.credentials import Credentials
from tinys3.errors import InvalidUrl
from tinys3.region import US_EAST_1, Region
from tinys3.signing import Payload, check_header_value, sign

USER_AGENT = f"tinys3/{__version__}"


class RequestBuilder:
    """Collects method, URL and headers, then signs an ``httpx.Request``.

    Example::

        request = (
            RequestBuilder("PUT", f"{region.endpoint}/my-bucket")
            .region(region)
            .header("X-Amz-Acl", "private")
            .sign_empty(credentials)
        )

    Attributes:
        method: Upper-case HTTP method.
        url: The parsed request URL.
    """

    def __init__(self, method: str, url: str | httpx.URL, now: datetime | None = None) -> None:
        """Initialize the builder.

        Args:
            method: HTTP method.
            url: Absolute request URL.
            now: Fixed signing instant, for reproducible signatures.

        Raises:
            InvalidUrl: If ``url`` cannot be parsed.
        """
        self.method = method.upper()
        try:
            self.url = httpx.URL(url)
        except httpx.InvalidURL as exc:
            raise InvalidUrl(str(exc)) from exc
        self._region = US_EAST_1
        self._headers = httpx.Headers({"User-Agent": USER_AGENT})
        self._now = now

    def region(self, region: Region) -> "RequestBuilder":
        self._region = region
        return self

    def header(self, name: str, value: str) -> "RequestBuilder":
        """Set a header, replacing any previous value."""
        self._headers[name] = check_header_value(name, value)
        return self

    def content_type(self, content_type: str) -> "RequestBuilder":
        return self.header("Content-Type", content_type)

    # -- Finalizers --------------------------------------------------------------

    def sign(
        self,
        credentials: Credentials,
        content: AsyncIterable[bytes],
        size: int | None = None,
    ) -> httpx.Request:
        """Attach a streamed body and sign with ``UNSIGNED-PAYLOAD``.

        Args:
            credentials: Signing credentials.
            content: Async iterable of body chunks.
            size: Body length, sent as ``Content-Length`` when known.
        """
        if size is not None:
            self._headers["Content-Length"] = str(size)
        request = httpx.Request(self.method, self.url, headers=self._headers, content=content)
        return sign(self._region, credentials, request, Payload.UNSIGNED, now=self._now)

    def sign_bytes(self, credentials: Credentials, data: bytes) -> httpx.Request:
        """Attach an in-memory body and sign with ``UNSIGNED-PAYLOAD``."""
        request = httpx.Request(self.method, self.url, headers=self._headers, content=data)
        return sign(self._region, credentials, request, Payload.UNSIGNED, now=self._now)

    def sign_empty(self, credentials: Credentials) -> httpx.Request:
        """Sign a bodiless request with the empty-payload hash."""
        request = httpx.Request(self.method, self.url, headers=self._headers)
        return sign(self._region, credentials, request, Payload.EMPTY, now=self._now)
