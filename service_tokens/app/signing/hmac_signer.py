"""
HMAC signer for the HS256, HS384 and HS512 algorithms.
"""

import hashlib
import hmac
from enum import Enum
from typing import Union

from ..errors import UnsupportedAlgorithmError


class Algorithm(str, Enum):
    """Supported JWS algorithms."""
    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"

    @property
    def digestmod(self):
        return _DIGESTS[self]

    @property
    def digest_size(self) -> int:
        return self.digestmod().digest_size


_DIGESTS = {
    Algorithm.HS256: hashlib.sha256,
    Algorithm.HS384: hashlib.sha384,
    Algorithm.HS512: hashlib.sha512,
}

Secret = Union[bytes, bytearray, str]


def resolve_algorithm(algorithm: Union[Algorithm, str]) -> Algorithm:
    """Map an algorithm name onto :class:`Algorithm`.

    Names are matched exactly; ``"hs256"`` or ``"none"`` are rejected.
    """
    if isinstance(algorithm, Algorithm):
        return algorithm
    if isinstance(algorithm, str):
        try:
            return Algorithm(algorithm)
        except ValueError:
            pass
    raise UnsupportedAlgorithmError(algorithm)


def _key_bytes(secret: Secret) -> bytes:
    if isinstance(secret, str):
        return secret.encode("utf-8")
    if isinstance(secret, (bytes, bytearray)):
        return bytes(secret)
    raise TypeError(f"Secret must be str or bytes, got {type(secret).__name__}")


def sign(algorithm: Union[Algorithm, str], secret: Secret, message: bytes) -> bytes:
    """Compute the raw HMAC digest of ``message``."""
    alg = resolve_algorithm(algorithm)
    return hmac.new(_key_bytes(secret), message, alg.digestmod).digest()


def verify(algorithm: Union[Algorithm, str], secret: Secret, message: bytes, signature: bytes) -> bool:
    """Check ``signature`` against the HMAC of ``message`` in constant time.

    A signature of the wrong length simply compares unequal; the comparison
    never short-circuits on content.
    """
    expected = sign(algorithm, secret, message)
    return hmac.compare_digest(expected, signature)
