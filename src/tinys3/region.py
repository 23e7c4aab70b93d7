"""S3 regions and custom endpoints.

A :class:`Region` is either one of the well-known AWS regions or a custom
endpoint of the form ``[scheme://]host[:port]``, optionally carrying the
region name to sign with.
"""

import urllib.parse
from dataclasses import dataclass

from tinys3.errors import InvalidRegion

DEFAULT_REGION_NAME = "us-east-1"


@dataclass(frozen=True)
class Region:
    """An S3 region.

    Attributes:
        endpoint: The endpoint URL. For custom regions it may lack a scheme
            or a port, but always contains a host.
        name: The region name, or None for a custom endpoint without one.
        custom: True for custom endpoints.
    """

    endpoint: str
    name: str | None = None
    custom: bool = False

    @classmethod
    def parse(cls, value: str) -> "Region":
        """Parse a well-known region name or a custom endpoint.

        Args:
            value: ``us-east-1``-style region name or ``[scheme://]host[:port]``.

        Returns:
            The matching well-known Region, or a custom one.

        Raises:
            InvalidRegion: If ``value`` has no extractable host.
        """
        known = KNOWN_REGIONS.get(value)
        if known is not None:
            return known
        return cls.from_endpoint(value)

    @classmethod
    def from_endpoint(cls, endpoint: str, name: str | None = None) -> "Region":
        """Create a custom region from an endpoint string.

        Args:
            endpoint: ``[scheme://]host[:port]``; any path or query is dropped.
            name: Optional region name used for signing.

        Raises:
            InvalidRegion: If ``endpoint`` has no extractable host.
        """
        return cls(endpoint=parse_endpoint(endpoint), name=name, custom=True)

    @property
    def host(self) -> str:
        """The endpoint host without scheme or port."""
        return endpoint_host(self.endpoint)

    @property
    def signing_name(self) -> str:
        """The region name used in the signing scope."""
        return self.name or DEFAULT_REGION_NAME

    def __str__(self) -> str:
        return self.name or ""


US_EAST_1 = Region("https://s3.amazonaws.com", "us-east-1")
US_EAST_2 = Region("https://s3-us-east-2.amazonaws.com", "us-east-2")
US_WEST_1 = Region("https://s3-us-west-1.amazonaws.com", "us-west-1")
US_WEST_2 = Region("https://s3-us-west-2.amazonaws.com", "us-west-2")

# us-east-1 has no s3-us-east-1.amazonaws.com DNS record
KNOWN_REGIONS: dict[str, Region] = {
    region.name: region for region in (US_EAST_1, US_EAST_2, US_WEST_1, US_WEST_2)
}


def endpoint_host(endpoint: str) -> str:
    """Strip the scheme and port from an endpoint string.

    Args:
        endpoint: ``[scheme://]host[:port]``.

    Returns:
        The host part; the input itself when it has neither scheme nor port.
        IPv6 hosts keep their brackets.
    """
    n = endpoint.find("://")
    if n >= 0:
        endpoint = endpoint[n + 3 :]
    if endpoint.startswith("["):
        n = endpoint.find("]")
        if n >= 0:
            return endpoint[: n + 1]
    n = endpoint.find(":")
    if n >= 0:
        endpoint = endpoint[:n]
    return endpoint


def parse_endpoint(endpoint: str) -> str:
    """Normalize a custom endpoint to ``[scheme://]host[:port]``.

    The result is rebuilt from the parsed scheme, host and port, so
    user info, paths, queries and fragments never survive.

    Args:
        endpoint: The raw endpoint string.

    Returns:
        The normalized endpoint.

    Raises:
        InvalidRegion: If no host can be extracted.
    """
    raw = endpoint.strip()
    has_scheme = "://" in raw
    try:
        parts = urllib.parse.urlsplit(raw if has_scheme else "//" + raw)
        port = parts.port
    except ValueError:
        raise InvalidRegion(endpoint)

    host = _netloc_host(parts.netloc)
    if not host:
        raise InvalidRegion(endpoint)
    if has_scheme and not parts.scheme:
        raise InvalidRegion(endpoint)

    result = host
    if port is not None:
        result = f"{result}:{port}"
    if has_scheme:
        result = f"{parts.scheme}://{result}"
    return result


def _netloc_host(netloc: str) -> str:
    """Extract the host from a netloc, keeping its case and IPv6 brackets."""
    hostport = netloc.rpartition("@")[2]
    if hostport.startswith("["):
        end = hostport.find("]")
        return hostport[: end + 1] if end > 0 else ""
    return hostport.partition(":")[0]
