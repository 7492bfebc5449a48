"""Detector catalogue and the detection pass over one AST."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Optional

from ..config import MinerConfig
from ..exceptions import MinerError, SmellDetectionError
from ..logging_config import get_logger
from ..metrics.base import MetricId
from ..metrics.engine import MetricEngine
from ..syntax.models import AST, AbstractType
from .base import SmellDetector, SmellVerdict
from .brain_method import BrainMethodDetector
from .method_smells import ComplexMethodDetector, LongMethodDetector

logger = get_logger(__name__)


def default_detectors(config: Optional[MinerConfig] = None) -> list[SmellDetector]:
    """Every built-in detector, with thresholds from ``config``."""
    config = config or MinerConfig()
    return [
        BrainMethodDetector(config.brain_method),
        ComplexMethodDetector(config.complex_method),
        LongMethodDetector(config.long_method),
    ]


def required_metrics(detectors: Iterable[SmellDetector]) -> list[MetricId]:
    needed: set[MetricId] = set()
    for detector in detectors:
        needed.update(detector.requires)
    return sorted(needed, key=lambda m: m.value)


def detect_smells(
    ast: AST, detectors: Sequence[SmellDetector], engine: MetricEngine
) -> dict[AbstractType, list[SmellVerdict]]:
    """Run every detector on every type of ``ast``.

    The metrics the detectors need are computed through ``engine`` first.
    Results are keyed by the type object itself, so same-named types in one
    file keep separate verdicts. Types without verdicts are omitted.

    Raises:
        SmellDetectionError: a detector failed with an unexpected exception
    """
    if not detectors:
        return {}
    engine.compute(ast, required_metrics(detectors))

    results: dict[AbstractType, list[SmellVerdict]] = {}
    for type_ in ast.types:
        verdicts = [v for d in detectors if (v := _run(d, type_, ast)) is not None]
        if verdicts:
            results[type_] = verdicts
            logger.debug(
                "%s:%s %s", ast.path, type_.name, ", ".join(v.smell.value for v in verdicts)
            )
    return results


def _run(detector: SmellDetector, type_: AbstractType, ast: AST) -> Optional[SmellVerdict]:
    try:
        return detector.detect(type_, ast)
    except MinerError:
        raise
    except Exception as e:
        raise SmellDetectionError(str(detector.id), ast.path, repr(e)) from e
