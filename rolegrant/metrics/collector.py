"""
Prometheus metrics integration for rolegrant.

This module provides Prometheus metrics collection and export for token
issuance, redemption and store persistence.
"""

import logging
from typing import Dict, Any
from dataclasses import dataclass

from prometheus_client import Counter, Gauge, CollectorRegistry, generate_latest

from ..common.utils import get_current_time


logger = logging.getLogger(__name__)


@dataclass
class MetricConfig:
    """Configuration for metrics collection."""

    enabled: bool = True
    namespace: str = "rolegrant"


class MetricsCollector:
    """Metrics collector for token lifecycle operations."""

    def __init__(self, config: MetricConfig = None):
        """
        Initialize metrics collector.

        Args:
            config: Metrics configuration
        """
        self.config = config or MetricConfig()
        # Private registry so several managers can live in one process
        self.registry = CollectorRegistry()
        self._metrics_cache: Dict[str, Any] = {}

        if not self.config.enabled:
            logger.info("Metrics collection disabled")
            return

        self._init_prometheus_metrics()
        logger.debug("Metrics collector initialized")

    def _init_prometheus_metrics(self):
        """Initialize all Prometheus metrics."""
        ns = self.config.namespace

        self.token_operations = Counter(
            f'{ns}_token_operations_total',
            'Total number of token lifecycle operations',
            ['operation', 'status'],
            registry=self.registry
        )

        self.active_tokens = Gauge(
            f'{ns}_active_tokens',
            'Number of tokens currently held in the store',
            registry=self.registry
        )

        self.persist_failures = Counter(
            f'{ns}_store_persist_failures_total',
            'Total number of failed store file rewrites',
            ['operation'],
            registry=self.registry
        )

    def record_token_operation(self, operation: str, status: str) -> None:
        """Record a token operation (issue, revoke, redeem, purge)."""
        if not self.config.enabled:
            return

        key = f"token_ops_{operation}_{status}"
        self._metrics_cache[key] = self._metrics_cache.get(key, 0) + 1
        self.token_operations.labels(operation=operation, status=status).inc()

        logger.debug(f"Recorded token operation: {operation} -> {status}")

    def record_persist_failure(self, operation: str) -> None:
        """Record a store rewrite that failed during an operation."""
        if not self.config.enabled:
            return

        key = f"persist_failures_{operation}"
        self._metrics_cache[key] = self._metrics_cache.get(key, 0) + 1
        self.persist_failures.labels(operation=operation).inc()

    def set_active_tokens(self, count: int) -> None:
        """Set the number of tokens in the store."""
        if not self.config.enabled:
            return

        self._metrics_cache["active_tokens"] = count
        self.active_tokens.set(count)

    def get_count(self, key: str) -> Any:
        """Read a cached metric value, 0 if never recorded."""
        return self._metrics_cache.get(key, 0)

    def export_prometheus_metrics(self) -> str:
        """Export metrics in Prometheus text format."""
        if not self.config.enabled:
            return "# Metrics disabled\n"

        return generate_latest(self.registry).decode('utf-8')

    def get_metrics_summary(self) -> Dict[str, Any]:
        """Get a summary of all collected metrics."""
        return {
            "enabled": self.config.enabled,
            "metrics_count": len(self._metrics_cache),
            "cached_metrics": self._metrics_cache.copy(),
            "timestamp": get_current_time().isoformat()
        }


def create_metrics_collector(enabled: bool = True,
                             namespace: str = "rolegrant") -> MetricsCollector:
    """
    Create a new metrics collector.

    Args:
        enabled: Enable metrics collection
        namespace: Prefix of every metric name

    Returns:
        MetricsCollector instance
    """
    return MetricsCollector(MetricConfig(enabled=enabled, namespace=namespace))
