"""
Token engine: encode and decode state machines for HMAC-signed JWTs.

Encode: BuildHeader -> RunInjection -> Serialize -> Base64Encode -> Sign -> Assemble
Decode: Split -> Base64Decode -> VerifySignature -> Deserialize -> RunValidation

Each step either succeeds or raises a single TokenError tagged with the
step name. The verification algorithm always comes from configuration; the
token header is never consulted to pick it.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from shared.logging import get_logger
from shared.metrics import TokenMetrics, get_metrics
from .claims import pipeline
from .claims.models import RECOGNIZED_CLAIMS, Claim, ClaimName
from .config.provider import TokenConfig
from .encoding.base64url import b64url_decode, b64url_encode
from .errors import (
    ConfigurationError, DeserializationError, MalformedTokenError,
    SerializationError, SignatureInvalidError, TokenError
)
from .signing.hmac_signer import Secret, resolve_algorithm, sign, verify

TOKEN_TYPE = "JWT"


@contextmanager
def _step(name: str):
    """Tag any TokenError raised inside the block with ``name``."""
    try:
        yield
    except TokenError as e:
        e.with_step(name)
        raise


def _to_bytes(serialized: Any) -> bytes:
    if isinstance(serialized, str):
        return serialized.encode("utf-8")
    if isinstance(serialized, (bytes, bytearray)):
        return bytes(serialized)
    raise SerializationError(
        f"JSON encoder returned {type(serialized).__name__}, expected str"
    )


class TokenEngine:
    """Encodes and decodes tokens using an injected configuration."""

    def __init__(
        self,
        config: TokenConfig,
        metrics: Optional[TokenMetrics] = None,
        recognized_claims: Iterable[Claim] = RECOGNIZED_CLAIMS,
    ):
        self.config = config
        self.metrics = metrics if metrics is not None else get_metrics()
        self.recognized_claims: Tuple[Claim, ...] = tuple(recognized_claims)
        self.logger = get_logger("tokens.engine")

    def _signing_material(self) -> Tuple[Any, Secret]:
        """Read the algorithm and secret once for the current call."""
        try:
            algorithm = self.config.algorithm()
            secret = self.config.secret_key()
        except TokenError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Configuration lookup failed: {e}") from e

        if not isinstance(secret, (str, bytes, bytearray)):
            raise ConfigurationError(
                f"Secret key must be str or bytes, got {type(secret).__name__}"
            )
        return algorithm, secret

    def encode(self, payload: Mapping[str, Any]) -> str:
        """Build a signed token from ``payload``.

        Registered claims the configuration produces are added unless the
        caller already supplied them.
        """
        algorithm_label = "unknown"

        with self.metrics.time_operation("encode"):
            try:
                with _step("LoadConfiguration"):
                    configured_algorithm, secret = self._signing_material()

                with _step("BuildHeader"):
                    algorithm = resolve_algorithm(configured_algorithm)
                    algorithm_label = algorithm.value
                    header = {"alg": algorithm.value, "typ": TOKEN_TYPE}

                with _step("RunInjection"):
                    if not isinstance(payload, Mapping):
                        raise SerializationError(
                            f"Payload must be a mapping, got {type(payload).__name__}"
                        )
                    claims = pipeline.inject(payload, self.config.claim, self.recognized_claims)

                with _step("Serialize"):
                    header_json = self._serialize(header)
                    payload_json = self._serialize(claims)

                with _step("Base64Encode"):
                    header_b64 = b64url_encode(header_json)
                    payload_b64 = b64url_encode(payload_json)

                with _step("Sign"):
                    signing_input = f"{header_b64}.{payload_b64}"
                    signature = sign(algorithm, secret, signing_input.encode("ascii"))

                with _step("Assemble"):
                    token = f"{signing_input}.{b64url_encode(signature)}"

            except TokenError as e:
                self.metrics.record_encode(algorithm_label, e.code.lower())
                self.logger.warning(
                    "Token encode failed",
                    code=e.code,
                    step=e.step,
                    algorithm=algorithm_label,
                    error=e.message
                )
                raise

        self.metrics.record_encode(algorithm_label, "ok")
        self.logger.debug("Token encoded", algorithm=algorithm_label, claim_count=len(claims))
        return token

    def decode(self, token: str, skip: Optional[Iterable[ClaimName]] = None) -> Dict[str, Any]:
        """Verify ``token`` and return its payload.

        ``skip`` names claims to leave unvalidated for this call, e.g. ``{"exp"}``
        when refreshing an expired token. The signature is always checked.
        """
        algorithm_label = "unknown"

        with self.metrics.time_operation("decode"):
            try:
                with _step("LoadConfiguration"):
                    configured_algorithm, secret = self._signing_material()
                    algorithm = resolve_algorithm(configured_algorithm)
                    algorithm_label = algorithm.value

                with _step("Split"):
                    header_b64, payload_b64, signature_b64 = self._split(token)

                with _step("Base64Decode"):
                    b64url_decode(header_b64)
                    payload_bytes = b64url_decode(payload_b64)
                    signature = b64url_decode(signature_b64)

                with _step("VerifySignature"):
                    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
                    if not verify(algorithm, secret, signing_input, signature):
                        raise SignatureInvalidError()

                with _step("Deserialize"):
                    claims = self._deserialize(payload_bytes)

                with _step("RunValidation"):
                    pipeline.validate(claims, self.config.validate_claim, skip, self.recognized_claims)

            except TokenError as e:
                self.metrics.record_decode(algorithm_label, e.code.lower())
                self.logger.warning(
                    "Token decode failed",
                    code=e.code,
                    step=e.step,
                    algorithm=algorithm_label,
                    error=e.message
                )
                raise

        self.metrics.record_decode(algorithm_label, "ok")
        self.logger.debug("Token decoded", algorithm=algorithm_label, sub=claims.get("sub"))
        return claims

    @staticmethod
    def _split(token: str) -> Tuple[str, str, str]:
        if not isinstance(token, str):
            raise MalformedTokenError(
                f"Token must be a string, got {type(token).__name__}"
            )

        segments = token.split(".")
        if len(segments) != 3:
            raise MalformedTokenError(
                f"Token must have 3 segments, got {len(segments)}",
                details={"segments": len(segments)}
            )
        return segments[0], segments[1], segments[2]

    def _serialize(self, data: Mapping[str, Any]) -> bytes:
        try:
            serialized = self.config.encode_json(data)
        except TokenError:
            raise
        except Exception as e:
            raise SerializationError(f"JSON encoding failed: {e}") from e
        return _to_bytes(serialized)

    def _deserialize(self, data: bytes) -> Dict[str, Any]:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DeserializationError("Payload is not valid UTF-8") from e

        try:
            claims = self.config.decode_json(text)
        except TokenError:
            raise
        except Exception as e:
            raise DeserializationError(f"JSON decoding failed: {e}") from e

        if not isinstance(claims, Mapping):
            raise DeserializationError(
                f"Payload must be a JSON object, got {type(claims).__name__}"
            )
        return dict(claims)


def encode(payload: Mapping[str, Any], config: TokenConfig) -> str:
    """Encode ``payload`` with a one-off engine for ``config``."""
    return TokenEngine(config).encode(payload)


def decode(token: str, config: TokenConfig, skip: Optional[Iterable[ClaimName]] = None) -> Dict[str, Any]:
    """Decode ``token`` with a one-off engine for ``config``."""
    return TokenEngine(config).decode(token, skip=skip)
