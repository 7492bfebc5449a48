"""Tests for metric registration, ordering and computation."""

import pytest

from repo_miner.exceptions import (
    MetricComputationError,
    MetricConfigurationError,
    MetricCycleError,
    UnknownMetricError,
)
from repo_miner.metrics import (
    MetricEngine,
    MetricId,
    MetricPlugin,
    MetricRegistry,
    MetricScope,
    default_registry,
    resolve_metric_order,
)
from repo_miner.syntax import AST, AbstractType


class RecordingMetric(MetricPlugin):
    """Writes a constant and records the order in which metrics ran."""

    scope = MetricScope.TYPE

    def __init__(self, metric_id, requires=(), log=None, value=1):
        self.id = metric_id
        self.description = f"test metric {metric_id}"
        self.requires = tuple(requires)
        self.log = log if log is not None else []
        self.value = value

    def calculate(self, ast):
        self.log.append(self.id)
        for type_ in ast.types:
            type_.metrics[self.id] = self.value


class ExplodingMetric(RecordingMetric):
    def calculate(self, ast):
        raise ZeroDivisionError("boom")


def _ast():
    return AST(path="a.py", types=[AbstractType(name="T")])


class TestRegistry:
    def test_duplicate_id_rejected(self):
        registry = MetricRegistry([RecordingMetric("A")])
        with pytest.raises(MetricConfigurationError):
            registry.register(RecordingMetric("A"))

    def test_get_unknown(self):
        with pytest.raises(UnknownMetricError):
            MetricRegistry().get("missing")

    def test_default_catalogue(self):
        registry = default_registry()
        assert set(registry.ids()) == set(MetricId)
        assert len(registry) == len(MetricId)


class TestResolveOrder:
    """Dependency ordering with graphlib."""

    @pytest.mark.parametrize("registration", [["A", "B", "C"], ["C", "B", "A"], ["B", "C", "A"]])
    def test_prerequisites_first(self, registration):
        plugins = {
            "A": RecordingMetric("A"),
            "B": RecordingMetric("B", requires=["A"]),
            "C": RecordingMetric("C", requires=["B"]),
        }
        registry = MetricRegistry(plugins[name] for name in registration)
        order = [p.id for p in resolve_metric_order(registry, ["C"])]
        assert order == ["A", "B", "C"]

    def test_targets_limit_closure(self):
        registry = MetricRegistry(
            [RecordingMetric("A"), RecordingMetric("B", requires=["A"]), RecordingMetric("X")]
        )
        assert [p.id for p in resolve_metric_order(registry, ["B"])] == ["A", "B"]

    def test_cycle(self):
        registry = MetricRegistry(
            [RecordingMetric("A", requires=["B"]), RecordingMetric("B", requires=["A"])]
        )
        with pytest.raises(MetricCycleError) as exc_info:
            resolve_metric_order(registry)
        assert set(exc_info.value.cycle) >= {"A", "B"}

    def test_missing_prerequisite(self):
        registry = MetricRegistry([RecordingMetric("A", requires=["Z"])])
        with pytest.raises(UnknownMetricError) as exc_info:
            resolve_metric_order(registry)
        assert exc_info.value.metric == "Z"
        assert exc_info.value.required_by == "A"

    def test_unknown_target(self):
        with pytest.raises(UnknownMetricError):
            resolve_metric_order(MetricRegistry(), ["NOPE"])

    def test_default_order_respects_requires(self):
        order = [p.id for p in resolve_metric_order(default_registry())]
        assert order.index(MetricId.CYCLO) < order.index(MetricId.WMC)
        assert order.index(MetricId.WMC) < order.index(MetricId.AMW)
        assert order.index(MetricId.NOM) < order.index(MetricId.AMW)


class TestMetricEngine:
    def test_compute_in_dependency_order(self):
        log = []
        registry = MetricRegistry(
            [
                RecordingMetric("C", requires=["B"], log=log),
                RecordingMetric("B", requires=["A"], log=log),
                RecordingMetric("A", log=log),
            ]
        )
        tree = _ast()
        computed = MetricEngine(registry).compute(tree, ["C"])
        assert computed == ["A", "B", "C"]
        assert log == ["A", "B", "C"]
        assert set(tree.types[0].metrics) == {"A", "B", "C"}

    def test_cyclic_registry_fails_before_computing(self):
        log = []
        registry = MetricRegistry(
            [
                RecordingMetric("A", requires=["B"], log=log),
                RecordingMetric("B", requires=["A"], log=log),
                RecordingMetric("free", log=log),
            ]
        )
        with pytest.raises(MetricCycleError):
            MetricEngine(registry)
        assert log == []

    def test_plugin_failure_wrapped(self):
        registry = MetricRegistry([ExplodingMetric("A")])
        with pytest.raises(MetricComputationError) as exc_info:
            MetricEngine(registry).compute(_ast())
        assert exc_info.value.metric == "A"
        assert exc_info.value.path == "a.py"
        assert isinstance(exc_info.value.__cause__, ZeroDivisionError)

    def test_recompute_overwrites(self):
        plugin = RecordingMetric("A", value=1)
        engine = MetricEngine(MetricRegistry([plugin]))
        tree = _ast()
        engine.compute(tree)
        plugin.value = 7
        engine.compute(tree)
        assert tree.types[0].metrics["A"] == 7

    def test_default_engine(self):
        engine = MetricEngine()
        assert len(engine.order) == len(MetricId)
