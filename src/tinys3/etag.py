"""S3 ETag parsing and computation.

Every S3 object has an ETag. Objects uploaded with a single request usually
carry the MD5 sum of their content. Objects assembled from a multipart
upload carry the MD5 sum of the concatenated part digests followed by a
``-N`` part-count suffix, where ``1 <= N <= 10000``.

ETags of objects encrypted with SSE-C or SSE-KMS are not content MD5 sums.
Treat an ETag as an opaque identity token, not as "the" content hash.

Examples::

    >>> Etag.parse("d41d8cd98f00b204e9800998ecf8427e").parts is None
    True
    >>> Etag.parse('"d41d8cd98f00b204e9800998ecf8427e-38"').parts
    38
    >>> str(Etag.compute_from(b"Hello World"))
    'b10a8db164e0754105b7a99be72e3fe5'
"""

import hashlib
import re
from collections.abc import AsyncIterable, Iterable
from dataclasses import dataclass
from typing import Any

from tinys3.errors import InvalidEtag

MAX_PARTS = 10000

# Read size for streaming computation
_CHUNK_SIZE = 64 * 1024

_HEX_RE = re.compile(r"[0-9a-fA-F]{32}")
_PARTS_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Etag:
    """A parsed or computed S3 ETag.

    Attributes:
        digest: The 16-byte MD5 digest.
        parts: The part count of a multipart ETag, or None.
    """

    digest: bytes
    parts: int | None = None

    def __post_init__(self) -> None:
        if len(self.digest) != 16:
            raise InvalidEtag(self.digest.hex())
        if self.parts is not None and not 1 <= self.parts <= MAX_PARTS:
            raise InvalidEtag(f"{self.digest.hex()}-{self.parts}")

    # -- Parsing ---------------------------------------------------------------

    @classmethod
    def parse(cls, text: str) -> "Etag":
        """Parse an ETag from its wire form.

        Surrounding double quotes are accepted but not required.

        Args:
            text: ``[\"]<32 hex>[-<1..10000>][\"]``.

        Returns:
            The parsed Etag.

        Raises:
            InvalidEtag: If ``text`` is not a valid ETag.
        """
        s = text
        if len(s) >= 2 and s.startswith('"') and s.endswith('"'):
            s = s[1:-1]

        if len(s) < 32:
            raise InvalidEtag(text)

        if len(s) == 32:
            return cls(_decode_hex(s, text))

        prefix, sep, suffix = s.partition("-")
        if not sep or len(prefix) != 32:
            raise InvalidEtag(text)
        digest = _decode_hex(prefix, text)
        if not _PARTS_RE.fullmatch(suffix):
            raise InvalidEtag(text)
        parts = int(suffix)
        if not 1 <= parts <= MAX_PARTS:
            raise InvalidEtag(text)
        return cls(digest, parts)

    # -- Computation -----------------------------------------------------------

    @classmethod
    def compute_from(cls, data: bytes) -> "Etag":
        """Compute the single-part ETag of an in-memory buffer."""
        return cls(hashlib.md5(data).digest())

    @classmethod
    def compute_blocking(cls, reader: Any) -> "Etag":
        """Compute the single-part ETag of a blocking byte stream.

        Reads until EOF.

        Args:
            reader: A binary file-like object with ``read(n)``, or an
                iterable of byte chunks.

        Returns:
            The MD5 ETag of all bytes read.
        """
        md5 = hashlib.md5()
        if hasattr(reader, "read"):
            while True:
                chunk = reader.read(_CHUNK_SIZE)
                if not chunk:
                    break
                md5.update(chunk)
        else:
            for chunk in reader:
                md5.update(chunk)
        return cls(md5.digest())

    @classmethod
    async def compute(cls, reader: Any) -> "Etag":
        """Compute the single-part ETag of an asynchronous byte stream.

        Awaits each chunk until EOF. If the surrounding task is cancelled the
        partial digest is dropped with the coroutine frame.

        Args:
            reader: An object with an awaitable ``read(n)``, or an async
                iterable of byte chunks (e.g. ``httpx.Response.aiter_bytes()``).

        Returns:
            The MD5 ETag of all bytes read.
        """
        md5 = hashlib.md5()
        if hasattr(reader, "read"):
            while True:
                chunk = await reader.read(_CHUNK_SIZE)
                if not chunk:
                    break
                md5.update(chunk)
        elif isinstance(reader, AsyncIterable):
            async for chunk in reader:
                md5.update(chunk)
        else:
            raise TypeError(f"not an asynchronous byte stream: {type(reader).__name__}")
        return cls(md5.digest())

    @classmethod
    def multipart(cls, part_etags: Iterable["Etag"]) -> "Etag":
        """Compose the ETag of an object assembled from uploaded parts.

        Args:
            part_etags: The single-part ETags of each part, in part order.

        Returns:
            MD5 of the concatenated part digests with the part count.

        Raises:
            InvalidEtag: If there are no parts, more than 10000 parts, or a
                part ETag is itself a multipart ETag.
        """
        md5 = hashlib.md5()
        count = 0
        for etag in part_etags:
            if etag.parts is not None:
                raise InvalidEtag(str(etag))
            md5.update(etag.digest)
            count += 1
        if not 1 <= count <= MAX_PARTS:
            raise InvalidEtag(f"{md5.hexdigest()}-{count}")
        return cls(md5.digest(), count)

    # -- Rendering -------------------------------------------------------------

    @property
    def hex(self) -> str:
        return self.digest.hex()

    @property
    def is_multipart(self) -> bool:
        return self.parts is not None

    def quoted(self) -> str:
        """Return the quoted form used in ``ETag``/``If-Match`` headers."""
        return f'"{self}"'

    def __str__(self) -> str:
        if self.parts is None:
            return self.hex
        return f"{self.hex}-{self.parts}"


def _decode_hex(s: str, original: str) -> bytes:
    if not _HEX_RE.fullmatch(s):
        raise InvalidEtag(original)
    return bytes.fromhex(s)
