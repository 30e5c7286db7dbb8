"""
Token error taxonomy.

Every failure of an encode or decode call surfaces as exactly one of these
exceptions. ``details["step"]`` names the engine step that failed.
"""

from typing import Any, Dict, Optional

from shared.errors import TokenServiceException


class TokenError(TokenServiceException):
    """Base class for token encode/decode failures."""

    default_code = "TOKEN_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, code: Optional[str] = None):
        super().__init__(code or self.default_code, message, details)

    @property
    def step(self) -> Optional[str]:
        return self.details.get("step")

    def with_step(self, step: str) -> "TokenError":
        """Tag the error with the failing step unless already tagged."""
        self.details.setdefault("step", step)
        return self


class MalformedTokenError(TokenError):
    """Token does not have exactly three segments."""

    default_code = "MALFORMED_TOKEN"


class MalformedBase64Error(TokenError):
    """A segment is not valid unpadded base64url."""

    default_code = "MALFORMED_BASE64"


class UnsupportedAlgorithmError(TokenError):
    """Configured algorithm is not HS256, HS384 or HS512."""

    default_code = "UNSUPPORTED_ALGORITHM"

    def __init__(self, algorithm: Any, details: Optional[Dict[str, Any]] = None):
        self.algorithm = algorithm
        details = dict(details or {})
        details.setdefault("algorithm", str(algorithm))
        super().__init__(f"Unsupported algorithm: {algorithm}", details)


class SerializationError(TokenError):
    """Header or payload could not be JSON-encoded."""

    default_code = "SERIALIZATION_ERROR"


class DeserializationError(TokenError):
    """Payload bytes are not a JSON object."""

    default_code = "DESERIALIZATION_ERROR"


class SignatureInvalidError(TokenError):
    """Signature does not match the signing input."""

    default_code = "SIGNATURE_INVALID"

    def __init__(self, message: str = "Signature verification failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class ConfigurationError(TokenError):
    """The configuration facade failed to supply a secret or algorithm."""

    default_code = "CONFIGURATION_ERROR"


class ClaimError(TokenError):
    """Base class for errors attributed to a single claim."""

    def __init__(self, claim: str, reason: str, details: Optional[Dict[str, Any]] = None):
        self.claim = str(getattr(claim, "value", claim))
        self.reason = reason
        details = dict(details or {})
        details.setdefault("claim", self.claim)
        details.setdefault("reason", reason)
        super().__init__(f"{self.claim}: {reason}", details)


class ClaimInvalidError(ClaimError):
    """A claim failed validation on decode."""

    default_code = "CLAIM_INVALID"


class ClaimProductionError(ClaimError):
    """A claim producer raised while building the payload on encode."""

    default_code = "CLAIM_PRODUCTION_ERROR"
