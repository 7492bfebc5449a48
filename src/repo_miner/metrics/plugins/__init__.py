"""Built-in metric plugins."""

from .method_metrics import (
    CycloMetric,
    MaxNestingMetric,
    MlocMetric,
    NoavMetric,
    ParMetric,
    cyclomatic_complexity,
    max_nesting,
    method_lines,
    accessed_variables,
)
from .type_metrics import AmwMetric, LocMetric, NoaMetric, NomMetric, NProtMMetric, WmcMetric

__all__ = [
    "CycloMetric",
    "MaxNestingMetric",
    "MlocMetric",
    "NoavMetric",
    "ParMetric",
    "AmwMetric",
    "LocMetric",
    "NoaMetric",
    "NomMetric",
    "NProtMMetric",
    "WmcMetric",
    "cyclomatic_complexity",
    "max_nesting",
    "method_lines",
    "accessed_variables",
]
