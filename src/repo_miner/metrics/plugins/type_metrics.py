"""Per-type metrics: NProtM, NOM, NOA, LOC, WMC, AMW."""

from __future__ import annotations

from ...syntax.models import AST, AbstractType
from ...syntax.modifiers import is_protected_like
from ..base import MetricId, MetricPlugin, MetricScope


def protected_members(type_: AbstractType) -> int:
    """Methods plus fields that are protected or package-private."""
    members = sum(1 for m in type_.methods if is_protected_like(m.modifiers))
    members += sum(1 for f in type_.fields if is_protected_like(f.modifiers))
    return members


class NProtMMetric(MetricPlugin):
    id = MetricId.NProtM
    description = "Number of protected members"
    scope = MetricScope.TYPE

    def calculate(self, ast: AST) -> None:
        for type_ in ast.types:
            type_.metrics[self.id] = protected_members(type_)


class NomMetric(MetricPlugin):
    id = MetricId.NOM
    description = "Number of methods"
    scope = MetricScope.TYPE

    def calculate(self, ast: AST) -> None:
        for type_ in ast.types:
            type_.metrics[self.id] = len(type_.methods)


class NoaMetric(MetricPlugin):
    id = MetricId.NOA
    description = "Number of attributes"
    scope = MetricScope.TYPE

    def calculate(self, ast: AST) -> None:
        for type_ in ast.types:
            type_.metrics[self.id] = len(type_.fields)


class LocMetric(MetricPlugin):
    id = MetricId.LOC
    description = "Lines of code per type"
    scope = MetricScope.TYPE

    def calculate(self, ast: AST) -> None:
        for type_ in ast.types:
            span = type_.end_line - type_.start_line + 1 if type_.start_line > 0 else 0
            type_.metrics[self.id] = max(0, span)


class WmcMetric(MetricPlugin):
    id = MetricId.WMC
    description = "Weighted methods per class (sum of CYCLO)"
    scope = MetricScope.TYPE
    requires = (MetricId.CYCLO,)

    def calculate(self, ast: AST) -> None:
        for type_ in ast.types:
            type_.metrics[self.id] = sum(m.metrics[MetricId.CYCLO] for m in type_.methods)


class AmwMetric(MetricPlugin):
    id = MetricId.AMW
    description = "Average method weight (WMC / NOM)"
    scope = MetricScope.TYPE
    requires = (MetricId.WMC, MetricId.NOM)

    def calculate(self, ast: AST) -> None:
        for type_ in ast.types:
            nom = type_.metrics[MetricId.NOM]
            type_.metrics[self.id] = type_.metrics[MetricId.WMC] / nom if nom else 0.0
