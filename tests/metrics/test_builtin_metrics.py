"""Tests for the built-in metric catalogue."""

import textwrap

import pytest

from repo_miner.metrics import MetricEngine, MetricId
from repo_miner.metrics.plugins.method_metrics import max_nesting
from repo_miner.syntax import AbstractMethod, AbstractType, Statement, StatementKind, parse_source


def _compute(source):
    tree = parse_source(textwrap.dedent(source), "m.py")
    MetricEngine().compute(tree)
    return tree


class TestMethodMetrics:
    def test_synthetic_method(self, make_method, make_ast):
        method = make_method(lines=40, nesting=6, decisions=11, variables=6)
        tree = make_ast(AbstractType(name="T", methods=[method]))
        MetricEngine().compute(tree, [MetricId.MLOC, MetricId.CYCLO, MetricId.MAXNESTING, MetricId.NOAV])
        assert method.metrics == {
            MetricId.MLOC: 40,
            MetricId.CYCLO: 12,
            MetricId.MAXNESTING: 6,
            MetricId.NOAV: 6,
        }

    def test_unknown_extent_gives_zero_mloc(self, make_ast):
        method = AbstractMethod("m")
        tree = make_ast(AbstractType(name="T", methods=[method]))
        MetricEngine().compute(tree, [MetricId.MLOC])
        assert method.metrics[MetricId.MLOC] == 0

    def test_no_control_structures(self):
        assert max_nesting(AbstractMethod("m", body=[Statement(StatementKind.SIMPLE)])) == 0

    def test_else_if_same_depth_as_if(self):
        body = [
            Statement(StatementKind.IF, children=[Statement(StatementKind.SIMPLE)]),
            Statement(StatementKind.ELSE_IF, children=[Statement(StatementKind.SIMPLE)]),
        ]
        assert max_nesting(AbstractMethod("m", body=body)) == 1

    def test_python_method(self):
        tree = _compute(
            """\
            class Worker:
                def process(self, items, limit):
                    total = 0
                    for item in items:
                        if item > limit and item != 0:
                            total += item
                        elif item < 0:
                            while total:
                                total -= 1
                    return total
            """
        )
        (method,) = tree.types[0].methods
        assert method.metrics[MetricId.MLOC] == 9
        # for, if, and, elif, while
        assert method.metrics[MetricId.CYCLO] == 6
        assert method.metrics[MetricId.MAXNESTING] == 3
        assert method.metrics[MetricId.NOAV] == 4  # total, item, items, limit
        assert method.metrics[MetricId.PAR] == 2


class TestTypeMetrics:
    def test_python_type(self):
        tree = _compute(
            """\
            class Shape:
                sides = 0

                def __init__(self, name):
                    self.name = name
                    self._cache = None

                def _area(self):
                    return 0

                def describe(self, verbose):
                    if verbose:
                        return self.name
                    return ""
            """
        )
        metrics = tree.types[0].metrics
        assert metrics[MetricId.NOM] == 3
        assert metrics[MetricId.NOA] == 3
        assert metrics[MetricId.LOC] == 14
        assert metrics[MetricId.NProtM] == 2  # _area, _cache
        assert metrics[MetricId.WMC] == 4
        assert metrics[MetricId.AMW] == pytest.approx(4 / 3)

    def test_amw_without_methods(self):
        tree = _compute("class Empty:\n    pass\n")
        assert tree.types[0].metrics[MetricId.AMW] == 0.0
        assert tree.types[0].metrics[MetricId.WMC] == 0

    def test_enum_gets_metrics_too(self):
        tree = _compute(
            """\
            from enum import Enum

            class Color(Enum):
                RED = 1
                BLUE = 2
            """
        )
        assert tree.types[0].metrics[MetricId.NOA] == 2
