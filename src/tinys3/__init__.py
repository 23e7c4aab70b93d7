"""tinys3 - a minimal client for S3-compatible object storage."""

__version__ = "0.1.0"

from tinys3.bucket import Bucket, Configuration, StaticAcl  # noqa: E402
from tinys3.credentials import Credentials, CredentialsBuilder  # noqa: E402
from tinys3.errors import (  # noqa: E402
    AnonymousCredentials,
    Error,
    ErrorCode,
    InvalidEtag,
    InvalidHeaderValue,
    InvalidMetadata,
    InvalidRegion,
    InvalidUrl,
    S3Error,
    TransportError,
)
from tinys3.etag import Etag  # noqa: E402
from tinys3.object import Metadata, Object, StorageClass  # noqa: E402
from tinys3.region import US_EAST_1, US_EAST_2, US_WEST_1, US_WEST_2, Region  # noqa: E402

__all__ = [
    "AnonymousCredentials",
    "Bucket",
    "Configuration",
    "Credentials",
    "CredentialsBuilder",
    "Error",
    "ErrorCode",
    "Etag",
    "InvalidEtag",
    "InvalidHeaderValue",
    "InvalidMetadata",
    "InvalidRegion",
    "InvalidUrl",
    "Metadata",
    "Object",
    "Region",
    "S3Error",
    "StaticAcl",
    "StorageClass",
    "TransportError",
    "US_EAST_1",
    "US_EAST_2",
    "US_WEST_1",
    "US_WEST_2",
    "__version__",
]
