"""S3 object and object metadata types."""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass
from enum import Enum

import httpx

from tinys3.errors import InvalidEtag, InvalidMetadata
from tinys3.etag import Etag

STORAGE_CLASS_HEADER = "X-Amz-Storage-Class"


class StorageClass(Enum):
    """S3 storage classes."""

    STANDARD = "STANDARD"
    REDUCED_REDUNDANCY = "REDUCED_REDUNDANCY"
    INTELLIGENT_TIERING = "INTELLIGENT_TIERING"
    GLACIER = "GLACIER"
    DEEP_ARCHIVE = "DEEP_ARCHIVE"


@dataclass(frozen=True)
class Metadata:
    """Object metadata taken from response headers.

    Attributes:
        etag: The object ETag.
        size: Content length in bytes.
        storage_class: Storage class; STANDARD when the header is absent.
    """

    etag: Etag
    size: int
    storage_class: StorageClass = StorageClass.STANDARD

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> Metadata:
        """Build metadata from a response header set.

        Args:
            headers: Case-insensitive response headers (e.g. ``httpx.Headers``).

        Raises:
            InvalidMetadata: If ``ETag`` or ``Content-Length`` is missing or
                malformed, or the storage class is unknown.
        """
        raw_etag = headers.get("ETag")
        if raw_etag is None:
            raise InvalidMetadata("missing ETag header")
        try:
            etag = Etag.parse(raw_etag)
        except InvalidEtag as exc:
            raise InvalidMetadata(f"invalid ETag header: {raw_etag!r}") from exc

        raw_size = headers.get("Content-Length")
        if raw_size is None:
            raise InvalidMetadata("missing Content-Length header")
        if not (raw_size.isascii() and raw_size.isdigit()):
            raise InvalidMetadata(f"invalid Content-Length header: {raw_size!r}")

        raw_class = headers.get(STORAGE_CLASS_HEADER)
        if raw_class is None:
            storage_class = StorageClass.STANDARD
        else:
            try:
                storage_class = StorageClass(raw_class)
            except ValueError as exc:
                raise InvalidMetadata(f"invalid storage class: {raw_class!r}") from exc

        return cls(etag=etag, size=int(raw_size), storage_class=storage_class)


class Object:
    """An object read from a bucket.

    The content is a streamed response body; iterate it once with
    :meth:`aiter_bytes`, read it with :meth:`read`, and :meth:`aclose` it
    (or use ``async with``) when done.
    """

    def __init__(self, name: str, metadata: Metadata, response: httpx.Response) -> None:
        self.name = name
        self.metadata = metadata
        self._response = response

    async def __aenter__(self) -> Object:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"Object(name={self.name!r}, metadata={self.metadata!r})"

    def aiter_bytes(self, chunk_size: int | None = None) -> AsyncIterator[bytes]:
        return self._response.aiter_bytes(chunk_size)

    async def read(self) -> bytes:
        return await self._response.aread()

    async def compute_etag(self) -> Etag:
        """Consume the content and compute its single-part ETag."""
        return await Etag.compute(self._response.aiter_bytes())

    async def aclose(self) -> None:
        await self._response.aclose()
