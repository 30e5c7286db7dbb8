"""
Configuration facade contract for the token engine.

The engine never reads process-wide settings. It consumes an object that
supplies the secret, the algorithm, a JSON codec, and the claim producer and
validator callbacks.
"""

import json
from typing import Any, Mapping, Optional, Protocol, Union, runtime_checkable

from ..claims.models import Claim
from ..signing.hmac_signer import Algorithm, Secret


@runtime_checkable
class TokenConfig(Protocol):
    """Capabilities the token engine consumes."""

    def secret_key(self) -> Secret:
        ...

    def algorithm(self) -> Union[Algorithm, str]:
        ...

    def encode_json(self, data: Mapping[str, Any]) -> str:
        ...

    def decode_json(self, data: str) -> Any:
        ...

    def claim(self, name: Claim, payload: Mapping[str, Any]) -> Any:
        ...

    def validate_claim(self, name: Claim, payload: Mapping[str, Any]) -> Optional[str]:
        ...


def _reject_constant(value: str):
    raise ValueError(f"Invalid JSON constant: {value}")


class BaseTokenConfig:
    """Token configuration with a compact JSON codec and no claim policy.

    Subclasses override :meth:`claim` and :meth:`validate_claim` to add
    and check registered claims.
    """

    def __init__(self, secret_key: Secret, algorithm: Union[Algorithm, str] = Algorithm.HS256):
        self._secret_key = secret_key
        self._algorithm = algorithm

    def __repr__(self) -> str:
        algorithm = getattr(self._algorithm, "value", self._algorithm)
        return f"{type(self).__name__}(algorithm={algorithm}, secret_key='**********')"

    def secret_key(self) -> Secret:
        return self._secret_key

    def algorithm(self) -> Union[Algorithm, str]:
        return self._algorithm

    def encode_json(self, data: Mapping[str, Any]) -> str:
        return json.dumps(data, separators=(",", ":"), allow_nan=False)

    def decode_json(self, data: str) -> Any:
        return json.loads(data, parse_constant=_reject_constant)

    def claim(self, name: Claim, payload: Mapping[str, Any]) -> Any:
        return None

    def validate_claim(self, name: Claim, payload: Mapping[str, Any]) -> Optional[str]:
        return None
