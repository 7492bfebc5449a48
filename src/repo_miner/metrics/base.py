"""Base class for metric plugins."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

from ..syntax.models import AST


class MetricId(str, Enum):
    NProtM = "NProtM"
    MLOC = "MLOC"
    CYCLO = "CYCLO"
    MAXNESTING = "MAXNESTING"
    NOAV = "NOAV"
    PAR = "PAR"
    NOM = "NOM"
    NOA = "NOA"
    LOC = "LOC"
    WMC = "WMC"
    AMW = "AMW"

    def __str__(self) -> str:
        return self.value


class MetricScope(str, Enum):
    TYPE = "type"  # one value per type, in AbstractType.metrics
    METHOD = "method"  # one value per method, in AbstractMethod.metrics


class MetricPlugin(ABC):
    """A named metric with declared prerequisites.

    ``calculate`` writes only this metric's key, overwriting any earlier
    value, and may read only metrics listed in ``requires``.
    """

    id: MetricId
    description: str
    scope: MetricScope
    requires: tuple[MetricId, ...] = ()

    @abstractmethod
    def calculate(self, ast: AST) -> None: ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"
