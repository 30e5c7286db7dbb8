"""
Shared configuration management for the token service.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class TokenSettings(BaseSettings):
    """Settings used to build the token configuration at startup."""

    model_config = SettingsConfigDict(
        env_prefix="TOKENS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Signing
    secret_key: SecretStr = Field(default=SecretStr(""))
    algorithm: Literal["HS256", "HS384", "HS512"] = Field(default="HS256")

    # Claims
    ttl_seconds: int = Field(default=3600, gt=0)
    leeway_seconds: int = Field(default=0, ge=0)
    issuer: Optional[str] = Field(default=None)
    audience: Optional[str] = Field(default=None)
    issue_jti: bool = Field(default=True)


@lru_cache(maxsize=1)
def get_settings() -> TokenSettings:
    """Get cached settings loaded from the environment."""
    return TokenSettings()
