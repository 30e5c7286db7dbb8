"""
HMAC signing package.

Maps the supported JWS algorithm names onto hashlib digests and signs or
verifies the literal signing input. The algorithm always comes from trusted
configuration, never from a token header.
"""

from .hmac_signer import Algorithm, sign, verify, resolve_algorithm

__all__ = ["Algorithm", "sign", "verify", "resolve_algorithm"]
