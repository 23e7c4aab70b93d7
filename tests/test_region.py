"""Tests for region and endpoint resolution."""

import pytest

from tinys3.errors import InvalidRegion
from tinys3.region import (
    US_EAST_1,
    US_EAST_2,
    US_WEST_1,
    US_WEST_2,
    Region,
    endpoint_host,
)


class TestKnownRegions:
    """Tests for the well-known AWS regions."""

    @pytest.mark.parametrize(
        "name,endpoint",
        [
            ("us-east-1", "https://s3.amazonaws.com"),
            ("us-east-2", "https://s3-us-east-2.amazonaws.com"),
            ("us-west-1", "https://s3-us-west-1.amazonaws.com"),
            ("us-west-2", "https://s3-us-west-2.amazonaws.com"),
        ],
    )
    def test_parse(self, name, endpoint):
        region = Region.parse(name)
        assert region.endpoint == endpoint
        assert region.name == name
        assert not region.custom
        assert str(region) == name

    def test_constants(self):
        assert Region.parse("us-east-1") is US_EAST_1
        assert Region.parse("us-east-2") is US_EAST_2
        assert Region.parse("us-west-1") is US_WEST_1
        assert Region.parse("us-west-2") is US_WEST_2

    def test_hosts(self):
        assert US_EAST_1.host == "s3.amazonaws.com"
        assert US_WEST_2.host == "s3-us-west-2.amazonaws.com"


class TestCustomEndpoints:
    """Tests for custom endpoint parsing."""

    @pytest.mark.parametrize(
        "value,endpoint,host",
        [
            ("192.168.102.55:9000", "192.168.102.55:9000", "192.168.102.55"),
            ("http://localhost:9000", "http://localhost:9000", "localhost"),
            ("https://minio.example.com", "https://minio.example.com", "minio.example.com"),
            ("storage.internal", "storage.internal", "storage.internal"),
            ("http://localhost:9000/some/path?x=1", "http://localhost:9000", "localhost"),
            ("  http://localhost:9000  ", "http://localhost:9000", "localhost"),
        ],
    )
    def test_parse(self, value, endpoint, host):
        region = Region.parse(value)
        assert region.custom
        assert region.endpoint == endpoint
        assert region.host == host

    def test_no_name_by_default(self):
        region = Region.parse("http://localhost:9000")
        assert region.name is None
        assert str(region) == ""
        assert region.signing_name == "us-east-1"

    def test_from_endpoint_with_name(self):
        region = Region.from_endpoint("http://localhost:9000", "eu-west-1")
        assert region.name == "eu-west-1"
        assert region.signing_name == "eu-west-1"
        assert region.custom

    def test_unknown_region_name_is_custom_host(self):
        """An unrecognized name is treated as a bare host."""
        region = Region.parse("eu-west-9")
        assert region.custom
        assert region.host == "eu-west-9"

    def test_equality(self):
        assert Region.parse("localhost:9000") == Region.parse("localhost:9000")
        assert Region.parse("localhost:9000") != Region.parse("localhost:9001")

    @pytest.mark.parametrize(
        "value",
        ["", "   ", "http://", "://host", "localhost:notaport", "http://:9000"],
    )
    def test_invalid(self, value):
        with pytest.raises(InvalidRegion):
            Region.parse(value)

    def test_invalid_region_is_value_error(self):
        with pytest.raises(ValueError):
            Region.parse("")


class TestEndpointHost:
    """Tests for endpoint_host()."""

    @pytest.mark.parametrize(
        "endpoint,host",
        [
            ("https://s3.amazonaws.com", "s3.amazonaws.com"),
            ("http://localhost:9000", "localhost"),
            ("localhost:9000", "localhost"),
            ("localhost", "localhost"),
            ("http://[::1]:9000", "[::1]"),
            ("[::1]:9000", "[::1]"),
            ("[::1]", "[::1]"),
        ],
    )
    def test_strip(self, endpoint, host):
        assert endpoint_host(endpoint) == host

    def test_ipv6_region_host(self):
        """Bracketed IPv6 endpoints keep the whole address as the host."""
        region = Region.parse("http://[::1]:9000")
        assert region.endpoint == "http://[::1]:9000"
        assert region.host == "[::1]"
