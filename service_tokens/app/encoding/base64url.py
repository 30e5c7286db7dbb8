"""
Unpadded base64url codec used for JWT segments.
"""

import base64
import binascii
import re

from ..errors import MalformedBase64Error

_SEGMENT_RE = re.compile(r"[A-Za-z0-9_-]*")


def b64url_encode(data: bytes) -> str:
    """Encode bytes as base64url with the trailing ``=`` padding stripped."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(segment: str) -> bytes:
    """Decode an unpadded base64url segment.

    Only the canonical encoding of a byte string is accepted: characters
    outside the URL-safe alphabet, explicit padding, impossible lengths and
    set trailing bits all raise :class:`MalformedBase64Error`.
    """
    if not isinstance(segment, str) or _SEGMENT_RE.fullmatch(segment) is None:
        raise MalformedBase64Error("Segment contains characters outside the base64url alphabet")

    if len(segment) % 4 == 1:
        raise MalformedBase64Error("Segment has an impossible base64 length")

    try:
        data = base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))
    except (binascii.Error, ValueError) as e:
        raise MalformedBase64Error(f"Segment is not valid base64url: {e}") from e

    # Unused low bits in the last character must be zero.
    if b64url_encode(data) != segment:
        raise MalformedBase64Error("Segment is not canonically encoded")

    return data
