"""Base types for code-smell detectors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

from ..exceptions import MissingMetricError
from ..metrics.base import MetricId
from ..metrics.engine import MetricEngine
from ..syntax.models import AST, AbstractMethod, AbstractType


class SmellId(str, Enum):
    BRAIN_METHOD = "BRAIN_METHOD"
    COMPLEX_METHOD = "COMPLEX_METHOD"
    LONG_METHOD = "LONG_METHOD"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SmellVerdict:
    """One smell on one type: the members that triggered it and the thresholds used."""

    smell: SmellId
    members: tuple[str, ...]
    thresholds: Mapping[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "smell": self.smell.value,
            "members": list(self.members),
            "thresholds": dict(self.thresholds),
        }


class SmellDetector(ABC):
    """Threshold rule over method metrics.

    Subclasses set ``id`` and ``requires`` as class attributes and keep their
    thresholds in a frozen dataclass, so a tuned copy is one
    ``with_thresholds(...)`` call away.

    :meth:`detect` works on fresh ASTs too: any ``requires`` metric missing
    from a method is computed through ``engine`` (a default
    :class:`MetricEngine` when None) before the rule is evaluated.
    """

    id: SmellId
    requires: frozenset[MetricId] = frozenset()

    def __init__(self, thresholds: Any, engine: Optional[MetricEngine] = None):
        self.thresholds = thresholds
        self.engine = engine

    def detect(self, type_: AbstractType, ast: AST) -> Optional[SmellVerdict]:
        """Verdict for ``type_``, or None when no member is flagged."""
        self._ensure_metrics(type_, ast)
        return self._verdict(self.flagged(type_))

    @abstractmethod
    def flagged(self, type_: AbstractType) -> list[str]:
        """Names of the members of ``type_`` that trigger the rule."""

    @abstractmethod
    def get_thresholds(self) -> dict[str, float]:
        """Active thresholds keyed by metric name."""

    def with_thresholds(self, **overrides: Any) -> SmellDetector:
        return type(self)(replace(self.thresholds, **overrides), engine=self.engine)

    def _ensure_metrics(self, type_: AbstractType, ast: AST) -> None:
        missing = {
            metric_id
            for method in type_.methods
            for metric_id in self.requires
            if metric_id not in method.metrics
        }
        if not missing:
            return
        if self.engine is None:
            self.engine = MetricEngine()
        self.engine.compute(ast, sorted(missing, key=lambda m: m.value))

    def _verdict(self, flagged: list[str]) -> Optional[SmellVerdict]:
        if not flagged:
            return None
        return SmellVerdict(self.id, tuple(flagged), self.get_thresholds())

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.thresholds}>"


def metric(method: AbstractMethod, metric_id: MetricId) -> float:
    """Metric value on a method.

    Raises:
        MissingMetricError: the metric was never computed for ``method``
    """
    try:
        return method.metrics[metric_id]
    except KeyError:
        raise MissingMetricError(str(metric_id), method.name) from None
