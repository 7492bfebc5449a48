"""Code-smell detection over computed metrics."""

from .base import SmellDetector, SmellId, SmellVerdict
from .brain_method import BrainMethodDetector
from .method_smells import ComplexMethodDetector, LongMethodDetector
from .registry import default_detectors, detect_smells, required_metrics

__all__ = [
    "SmellDetector",
    "SmellId",
    "SmellVerdict",
    "BrainMethodDetector",
    "ComplexMethodDetector",
    "LongMethodDetector",
    "default_detectors",
    "detect_smells",
    "required_metrics",
]
