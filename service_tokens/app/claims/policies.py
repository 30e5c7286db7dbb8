"""
Claim policy helpers and a standard registered-claims configuration.
"""

import time
import uuid
from typing import Any, Callable, Mapping, Optional, Union

from shared.config import TokenSettings
from ..config.provider import BaseTokenConfig
from ..errors import ConfigurationError
from ..signing.hmac_signer import Algorithm, Secret
from .models import Claim, ClaimName, claim_name


def get_current_time() -> int:
    """Current time as integer seconds since the epoch."""
    return int(time.time())


def _is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_time_claim(
    payload: Mapping[str, Any],
    name: ClaimName,
    message: str,
    predicate: Callable[[Any, int], bool],
    now: Optional[int] = None,
) -> Optional[str]:
    """Check a NumericDate claim with ``predicate(value, now)``.

    Returns None when the claim holds, ``message`` when the predicate fails,
    and a descriptive reason when the claim is missing or not a number.
    """
    key = claim_name(name)
    if key not in payload:
        return f"Missing {key}"

    value = payload[key]
    if not _is_numeric(value):
        return f"Invalid {key}: expected a numeric date"

    current = get_current_time() if now is None else now
    if predicate(value, current):
        return None
    return message


def validate_claim_value(
    payload: Mapping[str, Any],
    name: ClaimName,
    expected: Any,
    message: str,
) -> Optional[str]:
    """Check that a claim equals ``expected``.

    For ``aud`` a list of audiences is accepted when it contains ``expected``.
    """
    key = claim_name(name)
    if key not in payload:
        return f"Missing {key}"

    value = payload[key]
    if value == expected:
        return None
    if key == Claim.AUD.value and isinstance(value, list) and expected in value:
        return None
    return message


class StandardClaimsConfig(BaseTokenConfig):
    """Configuration that issues and checks the time, issuer and audience claims.

    On encode it adds ``exp`` (now + ttl), ``nbf`` and ``iat`` (now), ``iss``
    and ``aud`` when configured, and a random ``jti`` when enabled. ``sub`` is
    never produced; callers supply it.

    On decode ``exp`` must lie in the future, ``nbf`` and ``iat`` must not,
    both within ``leeway_seconds``. ``iss`` and ``aud`` must match when
    configured. ``sub`` and ``jti`` are not checked.
    """

    def __init__(
        self,
        secret_key: Secret,
        algorithm: Union[Algorithm, str] = Algorithm.HS256,
        *,
        ttl_seconds: int = 3600,
        leeway_seconds: int = 0,
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
        issue_jti: bool = True,
        clock: Callable[[], int] = get_current_time,
    ):
        super().__init__(secret_key, algorithm)
        self.ttl_seconds = ttl_seconds
        self.leeway_seconds = leeway_seconds
        self.issuer = issuer
        self.audience = audience
        self.issue_jti = issue_jti
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: TokenSettings) -> "StandardClaimsConfig":
        """Build a configuration from loaded settings."""
        secret = settings.secret_key.get_secret_value()
        if not secret:
            raise ConfigurationError(
                "Secret key is not configured",
                details={"setting": "TOKENS_SECRET_KEY"}
            )

        return cls(
            secret,
            settings.algorithm,
            ttl_seconds=settings.ttl_seconds,
            leeway_seconds=settings.leeway_seconds,
            issuer=settings.issuer,
            audience=settings.audience,
            issue_jti=settings.issue_jti,
        )

    def claim(self, name: Claim, payload: Mapping[str, Any]) -> Any:
        if name == Claim.EXP:
            return self.clock() + self.ttl_seconds
        if name in (Claim.NBF, Claim.IAT):
            return self.clock()
        if name == Claim.ISS:
            return self.issuer
        if name == Claim.AUD:
            return self.audience
        if name == Claim.JTI and self.issue_jti:
            return uuid.uuid4().hex
        return None

    def validate_claim(self, name: Claim, payload: Mapping[str, Any]) -> Optional[str]:
        now = self.clock()
        leeway = self.leeway_seconds

        if name == Claim.EXP:
            return validate_time_claim(
                payload, name, "Token expired",
                lambda expires_at, current: expires_at + leeway > current,
                now=now
            )
        if name == Claim.NBF:
            return validate_time_claim(
                payload, name, "Token not yet valid",
                lambda not_before, current: not_before - leeway <= current,
                now=now
            )
        if name == Claim.IAT:
            return validate_time_claim(
                payload, name, "Token issued in the future",
                lambda issued_at, current: issued_at - leeway <= current,
                now=now
            )
        if name == Claim.ISS and self.issuer is not None:
            return validate_claim_value(payload, name, self.issuer, "Invalid issuer")
        if name == Claim.AUD and self.audience is not None:
            return validate_claim_value(payload, name, self.audience, "Invalid audience")
        return None
