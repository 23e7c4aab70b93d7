"""S3 XML helpers for tinys3.

Parses S3 error bodies and renders the small request bodies the client sends.
"""

from xml.etree import ElementTree
from xml.sax.saxutils import escape as _sax_escape

from tinys3.errors import ErrorCode, S3Error

S3_NAMESPACE = "http://s3.amazonaws.com/doc/2006-03-01/"


def _escape_xml(value: str) -> str:
    """Escape special XML characters in a string value."""
    return _sax_escape(str(value))


def _find_text(root: ElementTree.Element, tag: str) -> str | None:
    """Return the text of a direct child, with or without the S3 namespace."""
    elem = root.find(tag)
    if elem is None:
        elem = root.find(f"{{{S3_NAMESPACE}}}{tag}")
    if elem is None:
        return None
    return elem.text or ""


def parse_error(body: bytes | str, http_status: int = 0) -> S3Error:
    """Decode an S3 XML error response body.

    The expected shape is ``<Error><Code/><Message/>...</Error>``. Unknown
    codes and bodies that do not match this shape map to
    ``ErrorCode.UNDEFINED``.

    Args:
        body: The raw response body.
        http_status: The HTTP status of the response.

    Returns:
        The decoded S3Error (never raised here).
    """
    try:
        root = ElementTree.fromstring(body)
    except ElementTree.ParseError as exc:
        return S3Error(ErrorCode.UNDEFINED, f"malformed error response: {exc}", http_status)

    code_text = _find_text(root, "Code")
    message = _find_text(root, "Message")
    if code_text is None or message is None:
        return S3Error(
            ErrorCode.UNDEFINED,
            f"unexpected error response element <{root.tag}>",
            http_status,
        )

    code = ErrorCode.parse(code_text)
    if code is ErrorCode.UNDEFINED:
        message = f"Unknown S3 error code: {code_text}"
    return S3Error(
        code,
        message,
        http_status=http_status,
        resource=_find_text(root, "Resource") or "",
        request_id=_find_text(root, "RequestId") or "",
    )


def render_create_bucket_configuration(region: str | None) -> str | None:
    """Render a CreateBucketConfiguration body for PUT Bucket.

    The us-east-1 quirk: buckets in us-east-1 (or with no region) are
    created without a body; a LocationConstraint of ``us-east-1`` is
    rejected by AWS.

    Args:
        region: The bucket's region name.

    Returns:
        The XML body, or None when no body should be sent.
    """
    if not region or region == "us-east-1":
        return None
    return "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<CreateBucketConfiguration xmlns="{S3_NAMESPACE}">',
            f"<LocationConstraint>{_escape_xml(region)}</LocationConstraint>",
            "</CreateBucketConfiguration>",
        ]
    )
