"""AWS Signature Version 4 request signing for tinys3.

Implements header-based SigV4 signing for S3 requests. Every header present
on the request when the canonical request is built is signed; the payload is
never hashed, so requests are signed either with the SHA-256 of the empty
string (bodiless requests) or with ``UNSIGNED-PAYLOAD``.

References:
    - https://docs.aws.amazon.com/AmazonS3/latest/API/sig-v4-header-based-auth.html
"""

import hashlib
import hmac
import logging
import urllib.parse
from collections.abc import Iterable
from datetime import datetime, timezone
from enum import Enum

import httpx

from tinys3.credentials import Credentials
from tinys3.errors import AnonymousCredentials, InvalidHeaderValue
from tinys3.region import Region

logger = logging.getLogger(__name__)

# Constants
ALGORITHM = "AWS4-HMAC-SHA256"
KEY_PREFIX = "AWS4"
SCOPE_TERMINATOR = "aws4_request"
SERVICE_NAME = "s3"
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"
EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

DATE_FORMAT = "%Y%m%d"
DATETIME_FORMAT = "%Y%m%dT%H%M%SZ"

AMZ_DATE = "X-Amz-Date"
AMZ_CONTENT_SHA256 = "X-Amz-Content-Sha256"
AMZ_SECURITY_TOKEN = "X-Amz-Security-Token"


class Payload(Enum):
    """The payload hash token placed in the canonical request."""

    EMPTY = EMPTY_SHA256
    UNSIGNED = UNSIGNED_PAYLOAD


# ---------------------------------------------------------------------------
# Request signing
# ---------------------------------------------------------------------------


def sign(
    region: Region,
    credentials: Credentials,
    request: httpx.Request,
    payload: Payload,
    now: datetime | None = None,
) -> httpx.Request:
    """Sign an outgoing request in place.

    Inserts ``X-Amz-Date``, ``Host``, ``X-Amz-Content-Sha256`` and, for
    temporary credentials, ``X-Amz-Security-Token``; then canonicalizes the
    resulting header set and adds the ``Authorization`` header.

    Args:
        region: The region whose host and name scope the signature.
        credentials: Credentials holding an access key and a secret key.
        request: The request to sign.
        payload: The payload hash token.
        now: The signing instant; defaults to the current UTC time. Aware
            instants are converted to UTC, naive ones are read as UTC.

    Returns:
        The same request, now carrying the signing headers.

    Raises:
        AnonymousCredentials: If the access key or secret key is missing.
        InvalidHeaderValue: If a header value cannot be sent over HTTP.
    """
    if not credentials.can_sign:
        raise AnonymousCredentials()

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        # Naive instants are taken to be UTC
        now = now.replace(tzinfo=timezone.utc)
    else:
        now = now.astimezone(timezone.utc)
    timestamp = now.strftime(DATETIME_FORMAT)
    date = now.strftime(DATE_FORMAT)

    headers = httpx.Headers(request.headers)
    headers[AMZ_DATE] = timestamp
    headers["Host"] = check_header_value("Host", region.host)
    headers[AMZ_CONTENT_SHA256] = payload.value
    token = credentials.token
    if token is not None:
        headers[AMZ_SECURITY_TOKEN] = check_header_value(AMZ_SECURITY_TOKEN, token)

    items = headers.multi_items()
    for name, value in items:
        check_header_value(name, value)

    canonical = build_canonical_request(request.method, request.url, items, payload.value)
    authorization = build_authorization(
        access_key=credentials.access_key,
        secret_key=credentials.secret_key,
        timestamp=timestamp,
        date=date,
        region=region.signing_name,
        canonical_request=canonical,
        header_names=[name for name, _ in items],
    )
    headers["Authorization"] = check_header_value("Authorization", authorization)

    request.headers = headers
    return request


def build_authorization(
    access_key: str,
    secret_key: str,
    timestamp: str,
    date: str,
    region: str,
    canonical_request: str,
    header_names: Iterable[str],
) -> str:
    """Assemble the ``Authorization`` header value.

    Args:
        access_key: The access key id.
        secret_key: The secret access key.
        timestamp: Signing instant (YYYYMMDDTHHMMSSZ).
        date: Signing date (YYYYMMDD) of the same instant.
        region: The region name of the scope.
        canonical_request: The canonical request string.
        header_names: Names of all headers in the canonical request.

    Returns:
        ``AWS4-HMAC-SHA256 Credential=...,SignedHeaders=...,Signature=...``.
    """
    scope = build_scope(date, region)
    string_to_sign = build_string_to_sign(timestamp, scope, canonical_request)
    logger.debug("SigV4 string to sign:\n%s", string_to_sign)

    signing_key = derive_signing_key(secret_key, date, region, SERVICE_NAME)
    signature = compute_signature(signing_key, string_to_sign)
    return (
        f"{ALGORITHM} Credential={access_key}/{scope},"
        f"SignedHeaders={signed_header_string(header_names)},"
        f"Signature={signature}"
    )


# ---------------------------------------------------------------------------
# Canonical request construction
# ---------------------------------------------------------------------------


def build_canonical_request(
    method: str,
    url: httpx.URL,
    headers: list[tuple[str, str]],
    payload_hash: str,
) -> str:
    """Build the canonical request string.

    Args:
        method: HTTP method (uppercase).
        url: The request URL.
        headers: Every header that will be sent, as (name, value) pairs.
        payload_hash: ``EMPTY_SHA256`` or ``UNSIGNED_PAYLOAD``.

    Returns:
        The canonical request string.
    """
    canonical = "\n".join(
        [
            method.upper(),
            canonical_uri(url.raw_path.partition(b"?")[0].decode("ascii")),
            canonical_query_string(url.params.multi_items()),
            canonical_header_string(headers),
            "",
            signed_header_string(name for name, _ in headers),
            payload_hash,
        ]
    )
    logger.debug("SigV4 canonical request:\n%s", canonical)
    return canonical


def canonical_uri(path: str) -> str:
    """Percent-encode a decoded URL path, leaving ``/`` unencoded.

    Args:
        path: The URL path as sent; percent-escapes are decoded before
            re-encoding.

    Returns:
        The canonical URI, ``/`` for an empty path.
    """
    decoded = urllib.parse.unquote(path)
    return _uri_encode(decoded, encode_slash=False) or "/"


def canonical_query_string(params: Iterable[tuple[str, str]]) -> str:
    """Build the canonical query string from decoded query pairs.

    Names and values are URI-encoded (``/`` included), sorted by encoded
    name then encoded value, and joined as ``name=value`` with ``&``.

    Args:
        params: Decoded (name, value) pairs.

    Returns:
        The canonical query string; empty when there are no pairs.
    """
    encoded = sorted(
        (_uri_encode(name, encode_slash=True), _uri_encode(value, encode_slash=True))
        for name, value in params
    )
    return "&".join(f"{name}={value}" for name, value in encoded)


def canonical_header_string(headers: Iterable[tuple[str, str]]) -> str:
    """Build the canonical header lines.

    Each header becomes ``lowercase-name:trimmed-value``; lines are sorted.
    Repeated header names are not merged.

    Args:
        headers: (name, value) pairs.

    Returns:
        The newline-joined canonical header lines.
    """
    lines = sorted(f"{name.lower()}:{value.strip()}" for name, value in headers)
    return "\n".join(lines)


def signed_header_string(names: Iterable[str]) -> str:
    """Return the sorted, ``;``-joined lowercase header names."""
    return ";".join(sorted({name.lower() for name in names}))


# ---------------------------------------------------------------------------
# String to sign and signing key
# ---------------------------------------------------------------------------


def build_scope(date: str, region: str) -> str:
    """Return ``date/region/s3/aws4_request``."""
    return f"{date}/{region}/{SERVICE_NAME}/{SCOPE_TERMINATOR}"


def build_string_to_sign(timestamp: str, scope: str, canonical_request: str) -> str:
    """Build the string to sign.

    Args:
        timestamp: ISO 8601 basic timestamp (YYYYMMDDTHHMMSSZ).
        scope: Credential scope (YYYYMMDD/region/s3/aws4_request).
        canonical_request: The assembled canonical request string.

    Returns:
        The string to sign.
    """
    canonical_hash = hashlib.sha256(canonical_request.encode("utf-8")).hexdigest()
    return f"{ALGORITHM}\n{timestamp}\n{scope}\n{canonical_hash}"


def derive_signing_key(secret_key: str, date: str, region: str, service: str) -> bytes:
    """Derive the SigV4 signing key via the HMAC-SHA256 chain.

    Args:
        secret_key: The secret access key.
        date: Date string (YYYYMMDD).
        region: AWS region.
        service: AWS service name.

    Returns:
        The 32-byte signing key.
    """
    k_date = hmac.new(
        (KEY_PREFIX + secret_key).encode("utf-8"),
        date.encode("utf-8"),
        hashlib.sha256,
    ).digest()
    k_region = hmac.new(k_date, region.encode("utf-8"), hashlib.sha256).digest()
    k_service = hmac.new(k_region, service.encode("utf-8"), hashlib.sha256).digest()
    k_signing = hmac.new(k_service, SCOPE_TERMINATOR.encode("utf-8"), hashlib.sha256).digest()
    return k_signing


def compute_signature(signing_key: bytes, string_to_sign: str) -> str:
    """Compute the final HMAC-SHA256 hex signature."""
    return hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uri_encode(s: str, encode_slash: bool = True) -> str:
    """S3-compatible URI encoding.

    Characters A-Z, a-z, 0-9, '-', '_', '.', '~' are not encoded.
    All other characters are percent-encoded with uppercase hex.
    Spaces become %20 (not +).

    Args:
        s: The string to encode.
        encode_slash: If True (default), '/' is encoded as %2F.

    Returns:
        The URI-encoded string.
    """
    safe = "-_.~" if encode_slash else "-_.~/"
    return urllib.parse.quote(s, safe=safe)


def check_header_value(name: str, value: str) -> str:
    """Check that a header value is printable ASCII without line breaks.

    Raises:
        InvalidHeaderValue: If the value cannot be sent as an HTTP header.
    """
    if not value.isascii() or any(c in value for c in "\r\n\0"):
        raise InvalidHeaderValue(name)
    return value
