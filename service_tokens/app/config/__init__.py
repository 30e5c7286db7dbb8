"""
Configuration facade consumed by the token engine.
"""

from .provider import TokenConfig, BaseTokenConfig

__all__ = ["TokenConfig", "BaseTokenConfig"]
