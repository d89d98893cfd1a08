"""
localtoken metrics.

Prometheus metrics for token issuance and verification outcomes, plus a
simple in-memory view for tests and debugging. The codec itself records
nothing; metrics are fed by TokenVerifier and by callers that issue tokens.
"""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

logger = logging.getLogger(__name__)


class TokenMetrics:
    """
    Metrics collector for token operations.

    Example:
        >>> metrics = TokenMetrics()
        >>> metrics.record_issued("AV~")
        >>> metrics.record_verification(valid=False, reason="decrypt_failed")
        >>> metrics.get_stats()["verifications_failure"]
        1
    """

    def __init__(self, namespace: str = "localtoken", registry: Optional[CollectorRegistry] = None):
        """
        Initialize metrics collector.

        Args:
            namespace: Metric name prefix.
            registry: Prometheus registry (a private one is created if None).
        """
        self._namespace = namespace
        self._lock = threading.Lock()
        self._counters: Dict[str, int] = {}
        self._duration_count = 0
        self._duration_total = 0.0

        self._registry = registry or CollectorRegistry()
        self._issued = Counter(
            f"{namespace}_tokens_issued_total",
            "Total number of tokens issued",
            ["prefix"],
            registry=self._registry,
        )
        self._verifications = Counter(
            f"{namespace}_verifications_total",
            "Total number of verification attempts",
            ["status", "reason"],
            registry=self._registry,
        )
        self._duration = Histogram(
            f"{namespace}_verification_duration_seconds",
            "Verification latency in seconds",
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1),
            registry=self._registry,
        )

    def _incr(self, key: str) -> None:
        self._counters[key] = self._counters.get(key, 0) + 1

    def record_issued(self, prefix: str) -> None:
        """Record a token issuance."""
        with self._lock:
            self._incr("issued")
            self._incr(f"issued_{prefix}")
        self._issued.labels(prefix=prefix).inc()

    def record_verification(self, valid: bool, reason: str) -> None:
        """Record a verification outcome."""
        status = "success" if valid else "failure"
        with self._lock:
            self._incr(f"verifications_{status}")
            self._incr(f"reason_{reason}")
        self._verifications.labels(status=status, reason=reason).inc()

    def record_verification_duration(self, duration_seconds: float) -> None:
        with self._lock:
            self._duration_count += 1
            self._duration_total += duration_seconds
        self._duration.observe(duration_seconds)

    @contextmanager
    def verification_timer(self):
        """Context manager for timing verifications."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record_verification_duration(time.perf_counter() - start)

    def get_stats(self) -> Dict[str, Any]:
        """Get current metrics as a dictionary."""
        with self._lock:
            stats: Dict[str, Any] = dict(self._counters)
            if self._duration_count:
                stats["verification_duration_avg"] = self._duration_total / self._duration_count
                stats["verification_duration_count"] = self._duration_count

        total = stats.get("verifications_success", 0) + stats.get("verifications_failure", 0)
        if total > 0:
            stats["verification_success_rate"] = stats.get("verifications_success", 0) / total
        return stats

    def get_prometheus_metrics(self) -> bytes:
        """Get metrics in Prometheus text format."""
        return generate_latest(self._registry)


# Global metrics instance
_global_metrics: Optional[TokenMetrics] = None


def get_metrics() -> TokenMetrics:
    """Get or create the global metrics instance."""
    global _global_metrics
    if _global_metrics is None:
        _global_metrics = TokenMetrics()
    return _global_metrics
