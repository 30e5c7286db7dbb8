"""
Token service startup wiring.
"""

from typing import Optional

from shared.config import TokenSettings, get_settings
from shared.logging import configure_logging, get_logger
from shared.metrics import TokenMetrics
from .claims.policies import StandardClaimsConfig
from .engine import TokenEngine
from .validation.token_validator import TokenValidator


def create_engine(
    settings: Optional[TokenSettings] = None,
    metrics: Optional[TokenMetrics] = None,
) -> TokenEngine:
    """Create a token engine from settings.

    Configures logging, then builds the standard claims configuration.
    Settings are read here once; the engine itself never looks them up.
    """
    settings = settings or get_settings()
    configure_logging("tokens", settings.log_level)
    logger = get_logger("tokens.main")

    config = StandardClaimsConfig.from_settings(settings)
    engine = TokenEngine(config, metrics=metrics)

    logger.info(
        "Token engine created",
        env=settings.env,
        algorithm=settings.algorithm,
        ttl_seconds=settings.ttl_seconds,
        issuer=settings.issuer
    )
    return engine


def create_validator(
    settings: Optional[TokenSettings] = None,
    metrics: Optional[TokenMetrics] = None,
) -> TokenValidator:
    """Create a token validator from settings."""
    return TokenValidator(create_engine(settings, metrics))
