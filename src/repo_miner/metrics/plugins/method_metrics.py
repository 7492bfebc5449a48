"""Per-method size and complexity metrics: MLOC, CYCLO, MAXNESTING, NOAV, PAR."""

from __future__ import annotations

from collections.abc import Callable

from ...syntax.models import AST, AbstractMethod, Statement, StatementKind
from ..base import MetricId, MetricPlugin, MetricScope

DECISION_KINDS = frozenset(
    {
        StatementKind.IF,
        StatementKind.ELSE_IF,
        StatementKind.FOR,
        StatementKind.FOREACH,
        StatementKind.WHILE,
        StatementKind.DO,
        StatementKind.CASE,
        StatementKind.CATCH,
        StatementKind.CONDITIONAL,
        StatementKind.BOOLEAN_OP,
    }
)

NESTING_KINDS = frozenset(
    {
        StatementKind.IF,
        StatementKind.ELSE_IF,
        StatementKind.FOR,
        StatementKind.FOREACH,
        StatementKind.WHILE,
        StatementKind.DO,
        StatementKind.SWITCH,
        StatementKind.TRY,
        StatementKind.WITH,
        StatementKind.CONDITIONAL,
    }
)


def method_lines(method: AbstractMethod) -> int:
    """Source line span of the method; 0 when extents are unknown."""
    if method.start_line <= 0 or method.end_line < method.start_line:
        return 0
    return method.end_line - method.start_line + 1


def cyclomatic_complexity(method: AbstractMethod) -> int:
    """McCabe's number: 1 + decision points."""
    return 1 + sum(1 for stmt in method.statements() if stmt.kind in DECISION_KINDS)


def _depth(statements: list[Statement], level: int) -> int:
    deepest = level
    for stmt in statements:
        nested = level + 1 if stmt.kind in NESTING_KINDS else level
        deepest = max(deepest, nested, _depth(stmt.children, nested))
    return deepest


def max_nesting(method: AbstractMethod) -> int:
    """Deepest control-structure nesting; top-level control structures are depth 1."""
    return _depth(method.body, 0)


def accessed_variables(method: AbstractMethod) -> set[str]:
    names: set[str] = set()
    for stmt in method.statements():
        names.update(stmt.variables)
    return names


class _PerMethodMetric(MetricPlugin):
    scope = MetricScope.METHOD
    measure: Callable[[AbstractMethod], float]

    def calculate(self, ast: AST) -> None:
        measure = type(self).measure
        for type_ in ast.types:
            for method in type_.methods:
                method.metrics[self.id] = measure(method)


class MlocMetric(_PerMethodMetric):
    id = MetricId.MLOC
    description = "Lines of code per method"
    measure = staticmethod(method_lines)


class CycloMetric(_PerMethodMetric):
    id = MetricId.CYCLO
    description = "McCabe cyclomatic complexity per method"
    measure = staticmethod(cyclomatic_complexity)


class MaxNestingMetric(_PerMethodMetric):
    id = MetricId.MAXNESTING
    description = "Maximum nesting level of control structures per method"
    measure = staticmethod(max_nesting)


class NoavMetric(_PerMethodMetric):
    id = MetricId.NOAV
    description = "Number of distinct accessed variables per method"
    measure = staticmethod(lambda method: len(accessed_variables(method)))


class ParMetric(_PerMethodMetric):
    id = MetricId.PAR
    description = "Number of parameters per method"
    measure = staticmethod(lambda method: len(method.parameters))
