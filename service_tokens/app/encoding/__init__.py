"""
Segment encoding for compact JWT serialization.
"""

from .base64url import b64url_encode, b64url_decode

__all__ = ["b64url_encode", "b64url_decode"]
