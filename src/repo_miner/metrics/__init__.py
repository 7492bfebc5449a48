"""Metric registry and engine."""

from .base import MetricId, MetricPlugin, MetricScope
from .engine import MetricEngine
from .registry import MetricRegistry, default_registry, resolve_metric_order

__all__ = [
    "MetricId",
    "MetricPlugin",
    "MetricScope",
    "MetricEngine",
    "MetricRegistry",
    "default_registry",
    "resolve_metric_order",
]
