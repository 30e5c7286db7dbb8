"""
Claims pipeline: injects registered claims on encode and validates them on decode.

The pipeline imposes no policy. What a claim should hold is decided by the
producer and validator callbacks handed in by the configuration facade.
"""

from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional

from shared.logging import get_logger
from ..errors import ClaimInvalidError, ClaimProductionError, TokenError
from .models import (
    JSON_NULL, RECOGNIZED_CLAIMS, Claim, ClaimName, ClaimProducer, ClaimValidator,
    claim_name, normalize_skip
)

logger = get_logger("tokens.claims")


def inject(
    payload: Mapping[str, Any],
    producer: ClaimProducer,
    recognized_claims: Iterable[Claim] = RECOGNIZED_CLAIMS,
) -> Dict[str, Any]:
    """Return a copy of ``payload`` with produced claims added.

    Claims already present in ``payload`` are never overwritten. A producer
    result of ``None`` omits the claim; ``JSON_NULL`` stores an explicit null.
    Producers see the payload built so far as a read-only mapping.
    """
    result: Dict[str, Any] = dict(payload)
    view = MappingProxyType(result)

    for claim in recognized_claims:
        name = claim_name(claim)
        if name in result:
            continue

        try:
            value = producer(claim, view)
        except TokenError:
            raise
        except Exception as e:
            raise ClaimProductionError(name, f"producer raised {type(e).__name__}: {e}") from e

        if value is None:
            continue
        result[name] = None if value is JSON_NULL else value

    return result


def validate(
    payload: Mapping[str, Any],
    validator: ClaimValidator,
    skip: Optional[Iterable[ClaimName]] = None,
    recognized_claims: Iterable[Claim] = RECOGNIZED_CLAIMS,
) -> None:
    """Validate each recognized claim not in ``skip``.

    Stops at the first failing claim and raises :class:`ClaimInvalidError`
    for it. Failures are not aggregated.
    """
    skipped = normalize_skip(skip)
    view = MappingProxyType(dict(payload))

    for claim in recognized_claims:
        name = claim_name(claim)
        if name in skipped:
            continue

        try:
            outcome = validator(claim, view)
        except ClaimInvalidError:
            raise
        except Exception as e:
            raise ClaimInvalidError(name, f"validator raised {type(e).__name__}: {e}") from e

        if outcome is None or outcome is True:
            continue

        reason = f"Invalid {name}" if outcome is False else str(outcome)
        logger.debug("Claim rejected", claim=name, reason=reason)
        raise ClaimInvalidError(name, reason)
