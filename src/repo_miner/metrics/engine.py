"""Metric engine: computes registered metrics over an AST in dependency order."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from ..exceptions import MetricComputationError, MinerError
from ..logging_config import get_logger
from ..syntax.models import AST
from .base import MetricId, MetricPlugin
from .registry import MetricRegistry, default_registry, resolve_metric_order

logger = get_logger(__name__)


class MetricEngine:
    """Runs metric plugins against ASTs.

    The full registry is ordered at construction, so a cyclic or incomplete
    registry fails before any computation. The engine holds no per-AST
    state; one instance can serve many ASTs and threads.
    """

    def __init__(self, registry: Optional[MetricRegistry] = None):
        self.registry = registry if registry is not None else default_registry()
        self._order = resolve_metric_order(self.registry)

    @property
    def order(self) -> list[MetricPlugin]:
        return list(self._order)

    def plan(self, targets: Optional[Iterable[MetricId]] = None) -> list[MetricPlugin]:
        """Plugins to run for ``targets`` (everything when None), in order."""
        if targets is None:
            return self.order
        return resolve_metric_order(self.registry, targets)

    def compute(self, ast: AST, targets: Optional[Iterable[MetricId]] = None) -> list[MetricId]:
        """Compute ``targets`` and their prerequisites on ``ast``.

        Returns:
            Ids computed, in execution order

        Raises:
            MetricComputationError: a plugin failed on this AST
        """
        plan = self.plan(targets)
        for plugin in plan:
            try:
                plugin.calculate(ast)
            except MinerError:
                raise
            except Exception as e:
                raise MetricComputationError(str(plugin.id), ast.path, repr(e)) from e
        logger.debug("Computed %d metrics for %s", len(plan), ast.path)
        return [plugin.id for plugin in plan]
