"""
Metrics package for rolegrant.
"""

from .collector import (
    MetricConfig,
    MetricsCollector,
    create_metrics_collector,
)

__all__ = [
    "MetricConfig",
    "MetricsCollector",
    "create_metrics_collector",
]
