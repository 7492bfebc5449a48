"""Metric catalogue and dependency ordering.

Metrics declare prerequisites by id. Ordering uses graphlib.TopologicalSorter
so cycles and missing prerequisites surface when a registry is validated,
before any AST is touched.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from graphlib import CycleError, TopologicalSorter
from typing import Optional

from ..exceptions import MetricConfigurationError, MetricCycleError, UnknownMetricError
from .base import MetricId, MetricPlugin
from .plugins import (
    AmwMetric,
    CycloMetric,
    LocMetric,
    MaxNestingMetric,
    MlocMetric,
    NoaMetric,
    NoavMetric,
    NomMetric,
    NProtMMetric,
    ParMetric,
    WmcMetric,
)


class MetricRegistry:
    """Metric plugins keyed by id; one plugin per id."""

    def __init__(self, plugins: Iterable[MetricPlugin] = ()):
        self._plugins: dict[MetricId, MetricPlugin] = {}
        for plugin in plugins:
            self.register(plugin)

    def register(self, plugin: MetricPlugin) -> None:
        if plugin.id in self._plugins:
            raise MetricConfigurationError(
                f"Metric '{plugin.id}' registered twice",
                details={"metric": str(plugin.id)},
            )
        self._plugins[plugin.id] = plugin

    def get(self, metric_id: MetricId) -> MetricPlugin:
        try:
            return self._plugins[metric_id]
        except KeyError:
            raise UnknownMetricError(str(metric_id))

    def ids(self) -> list[MetricId]:
        return list(self._plugins)

    def __contains__(self, metric_id: object) -> bool:
        return metric_id in self._plugins

    def __iter__(self) -> Iterator[MetricPlugin]:
        return iter(list(self._plugins.values()))

    def __len__(self) -> int:
        return len(self._plugins)


def default_registry() -> MetricRegistry:
    """All built-in metrics."""
    return MetricRegistry(
        [
            NProtMMetric(),
            MlocMetric(),
            CycloMetric(),
            MaxNestingMetric(),
            NoavMetric(),
            ParMetric(),
            NomMetric(),
            NoaMetric(),
            LocMetric(),
            WmcMetric(),
            AmwMetric(),
        ]
    )


def resolve_metric_order(
    registry: MetricRegistry, targets: Optional[Iterable[MetricId]] = None
) -> list[MetricPlugin]:
    """Plugins needed for ``targets`` (all when None), prerequisites first.

    Raises:
        UnknownMetricError: a target or prerequisite is not registered
        MetricCycleError: prerequisites form a cycle
    """
    wanted = registry.ids() if targets is None else list(targets)

    closure: dict[MetricId, MetricPlugin] = {}
    stack: list[tuple[MetricId, Optional[MetricId]]] = [(t, None) for t in wanted]
    while stack:
        metric_id, required_by = stack.pop()
        if metric_id in closure:
            continue
        if metric_id not in registry:
            raise UnknownMetricError(
                str(metric_id), required_by=str(required_by) if required_by else None
            )
        plugin = registry.get(metric_id)
        closure[metric_id] = plugin
        stack.extend((req, metric_id) for req in plugin.requires or ())

    ts: TopologicalSorter[MetricId] = TopologicalSorter()
    for metric_id, plugin in closure.items():
        ts.add(metric_id, *(plugin.requires or ()))

    try:
        order = list(ts.static_order())
    except CycleError as e:
        cycle = e.args[1] if len(e.args) > 1 else []
        raise MetricCycleError(str(m) for m in cycle) from e

    return [closure[metric_id] for metric_id in order]
