"""BRAIN_METHOD: long, branchy, deeply nested methods touching many variables.

A method is flagged when all of the following hold:
- MLOC > mloc // 2 (the line threshold is halved before comparison)
- CYCLO >= cc
- MAXNESTING >= max_nesting
- NOAV > noav

Only classes and interfaces are inspected; enums and annotations never are.
"""

from __future__ import annotations

from typing import Optional

from ..config import BrainMethodThresholds
from ..metrics.base import MetricId
from ..metrics.engine import MetricEngine
from ..syntax.models import AbstractMethod, AbstractType, Archetype
from .base import SmellDetector, SmellId, metric


class BrainMethodDetector(SmellDetector):
    id = SmellId.BRAIN_METHOD
    requires = frozenset({MetricId.MLOC, MetricId.CYCLO, MetricId.MAXNESTING, MetricId.NOAV})

    def __init__(
        self,
        thresholds: Optional[BrainMethodThresholds] = None,
        engine: Optional[MetricEngine] = None,
    ):
        super().__init__(thresholds or BrainMethodThresholds(), engine)

    def is_brain_method(self, method: AbstractMethod) -> bool:
        t = self.thresholds
        return (
            metric(method, MetricId.MLOC) > t.mloc // 2
            and metric(method, MetricId.CYCLO) >= t.cc
            and metric(method, MetricId.MAXNESTING) >= t.max_nesting
            and metric(method, MetricId.NOAV) > t.noav
        )

    def flagged(self, type_: AbstractType) -> list[str]:
        if type_.archetype is not Archetype.CLASS_OR_INTERFACE:
            return []
        return [m.name for m in type_.methods if self.is_brain_method(m)]

    def get_thresholds(self) -> dict[str, float]:
        t = self.thresholds
        return {
            MetricId.MLOC.value: t.mloc,
            MetricId.CYCLO.value: t.cc,
            MetricId.NOAV.value: t.noav,
            MetricId.MAXNESTING.value: t.max_nesting,
        }
