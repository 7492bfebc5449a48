"""Single-metric method smells: COMPLEX_METHOD and LONG_METHOD."""

from __future__ import annotations

from typing import Optional

from ..config import ComplexMethodThresholds, LongMethodThresholds
from ..metrics.base import MetricId
from ..metrics.engine import MetricEngine
from ..syntax.models import AbstractType
from .base import SmellDetector, SmellId, metric


class ComplexMethodDetector(SmellDetector):
    """Methods with CYCLO >= cc."""

    id = SmellId.COMPLEX_METHOD
    requires = frozenset({MetricId.CYCLO})

    def __init__(
        self,
        thresholds: Optional[ComplexMethodThresholds] = None,
        engine: Optional[MetricEngine] = None,
    ):
        super().__init__(thresholds or ComplexMethodThresholds(), engine)

    def flagged(self, type_: AbstractType) -> list[str]:
        cc = self.thresholds.cc
        return [m.name for m in type_.methods if metric(m, MetricId.CYCLO) >= cc]

    def get_thresholds(self) -> dict[str, float]:
        return {MetricId.CYCLO.value: self.thresholds.cc}


class LongMethodDetector(SmellDetector):
    """Methods with MLOC > mloc."""

    id = SmellId.LONG_METHOD
    requires = frozenset({MetricId.MLOC})

    def __init__(
        self,
        thresholds: Optional[LongMethodThresholds] = None,
        engine: Optional[MetricEngine] = None,
    ):
        super().__init__(thresholds or LongMethodThresholds(), engine)

    def flagged(self, type_: AbstractType) -> list[str]:
        mloc = self.thresholds.mloc
        return [m.name for m in type_.methods if metric(m, MetricId.MLOC) > mloc]

    def get_thresholds(self) -> dict[str, float]:
        return {MetricId.MLOC.value: self.thresholds.mloc}
