"""
Shared metrics configuration for the token service.
"""

import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram


class TokenMetrics:
    """Metrics collector for token encode/decode operations."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry if registry is not None else REGISTRY
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up token metrics."""
        self._metrics["tokens_encoded_total"] = Counter(
            "tokens_encoded_total",
            "Total token encode calls",
            ["algorithm", "outcome"],
            registry=self.registry
        )

        self._metrics["tokens_decoded_total"] = Counter(
            "tokens_decoded_total",
            "Total token decode calls",
            ["algorithm", "outcome"],
            registry=self.registry
        )

        self._metrics["token_operation_duration_seconds"] = Histogram(
            "token_operation_duration_seconds",
            "Token operation duration in seconds",
            ["operation"],
            registry=self.registry
        )

    def record_encode(self, algorithm: str, outcome: str):
        """Record one encode call."""
        self._metrics["tokens_encoded_total"].labels(
            algorithm=algorithm,
            outcome=outcome
        ).inc()

    def record_decode(self, algorithm: str, outcome: str):
        """Record one decode call."""
        self._metrics["tokens_decoded_total"].labels(
            algorithm=algorithm,
            outcome=outcome
        ).inc()

    @contextmanager
    def time_operation(self, operation: str):
        """Time an operation."""
        start_time = time.time()
        try:
            yield
        finally:
            self._metrics["token_operation_duration_seconds"].labels(
                operation=operation
            ).observe(time.time() - start_time)

    def get_metric(self, name: str) -> Optional[Any]:
        """Get a metric by name."""
        return self._metrics.get(name)


_default_metrics: Optional[TokenMetrics] = None
_init_lock = threading.Lock()


def get_metrics() -> TokenMetrics:
    """Get the process-wide token metrics collector."""
    global _default_metrics
    with _init_lock:
        if _default_metrics is None:
            _default_metrics = TokenMetrics()
    return _default_metrics

