"""
Claims package.

Holds the registered claim names and the pipeline that injects them on
encode and validates them on decode. Policy (what a claim should hold)
lives in policies.py and in user-supplied configuration, never in the
pipeline itself.
"""

from .models import Claim, RECOGNIZED_CLAIMS, JSON_NULL, claim_name
from .pipeline import inject, validate

__all__ = ["Claim", "RECOGNIZED_CLAIMS", "JSON_NULL", "claim_name", "inject", "validate"]
