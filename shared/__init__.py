"""
Shared utilities for the token service.

This package aggregates common building blocks consumed by the service:

- config: Token settings via pydantic-settings
- logging: Structured logging with correlation context
- metrics: Prometheus counters for encode/decode outcomes
- errors: Base error types and responses

Any cross-cutting logic should live here to avoid import cycles. Do not
import from service_tokens into shared/.
"""
