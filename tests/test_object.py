"""Tests for object metadata parsing."""

import httpx
import pytest

from tinys3.errors import InvalidMetadata
from tinys3.etag import Etag
from tinys3.object import Metadata, Object, StorageClass

ETAG = "b10a8db164e0754105b7a99be72e3fe5"


def _headers(**extra: str) -> httpx.Headers:
    headers = httpx.Headers({"ETag": f'"{ETAG}"', "Content-Length": "11"})
    for name, value in extra.items():
        headers[name.replace("_", "-")] = value
    return headers


class TestMetadataFromHeaders:
    """Tests for Metadata.from_headers()."""

    def test_minimal(self):
        meta = Metadata.from_headers(_headers())
        assert meta.etag == Etag.parse(ETAG)
        assert meta.size == 11
        assert meta.storage_class is StorageClass.STANDARD

    def test_case_insensitive(self):
        meta = Metadata.from_headers(httpx.Headers({"etag": ETAG, "content-length": "0"}))
        assert meta.size == 0

    @pytest.mark.parametrize("value", [c.value for c in StorageClass])
    def test_storage_class(self, value):
        meta = Metadata.from_headers(_headers(X_Amz_Storage_Class=value))
        assert meta.storage_class.value == value

    def test_multipart_etag(self):
        meta = Metadata.from_headers(_headers(ETag=f'"{ETAG}-4"'))
        assert meta.etag.parts == 4

    def test_missing_etag(self):
        with pytest.raises(InvalidMetadata):
            Metadata.from_headers(httpx.Headers({"Content-Length": "11"}))

    def test_invalid_etag(self):
        with pytest.raises(InvalidMetadata):
            Metadata.from_headers(_headers(ETag="not-an-etag"))

    def test_missing_content_length(self):
        with pytest.raises(InvalidMetadata):
            Metadata.from_headers(httpx.Headers({"ETag": ETAG}))

    @pytest.mark.parametrize("value", ["-1", "abc", "1.5", "", "١"])
    def test_invalid_content_length(self, value):
        with pytest.raises(InvalidMetadata):
            Metadata.from_headers({"ETag": ETAG, "Content-Length": value})

    def test_unknown_storage_class(self):
        with pytest.raises(InvalidMetadata):
            Metadata.from_headers(_headers(X_Amz_Storage_Class="ONEZONE_COLD"))


class TestObject:
    """Tests for the streamed Object wrapper."""

    async def test_read_and_close(self):
        response = httpx.Response(200, content=b"Hello World")
        meta = Metadata.from_headers(_headers())
        async with Object("key", meta, response) as obj:
            assert await obj.read() == b"Hello World"
        assert response.is_closed

    async def test_compute_etag(self):
        response = httpx.Response(200, content=b"Hello World")
        obj = Object("key", Metadata.from_headers(_headers()), response)
        assert await obj.compute_etag() == obj.metadata.etag
