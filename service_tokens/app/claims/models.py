"""
Registered claim names and claim callback types.
"""

from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple, Union


class Claim(str, Enum):
    """Registered claims handled by the claims pipeline."""
    EXP = "exp"
    NBF = "nbf"
    IAT = "iat"
    AUD = "aud"
    ISS = "iss"
    SUB = "sub"
    JTI = "jti"


# Iteration order for injection and validation.
RECOGNIZED_CLAIMS: Tuple[Claim, ...] = (
    Claim.EXP,
    Claim.NBF,
    Claim.IAT,
    Claim.AUD,
    Claim.ISS,
    Claim.SUB,
    Claim.JTI,
)


class _JsonNull:
    """Marker a producer returns to emit an explicit JSON ``null``."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "JSON_NULL"

    def __bool__(self) -> bool:
        return False


JSON_NULL = _JsonNull()

ClaimName = Union[Claim, str]

# claim(name, payload_so_far) -> value, None to omit
ClaimProducer = Callable[[Claim, Mapping[str, Any]], Any]

# validate_claim(name, payload) -> None when valid, otherwise the reason
ClaimValidator = Callable[[Claim, Mapping[str, Any]], Optional[str]]


def claim_name(name: ClaimName) -> str:
    """Return the wire name of a claim."""
    if isinstance(name, Claim):
        return name.value
    return str(name)


def normalize_skip(skip: Optional[Iterable[ClaimName]]) -> frozenset:
    """Turn a caller skip list into a set of wire names."""
    if skip is None:
        return frozenset()
    if isinstance(skip, (str, Claim)):
        skip = [skip]
    return frozenset(claim_name(name) for name in skip)
