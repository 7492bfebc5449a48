"""Analysis-related exceptions: metric registry, metric computation, providers."""

from typing import Iterable, Optional

from .base import MinerError


class AnalysisError(MinerError):
    """Base class for metric and smell errors."""

    pass


class MetricConfigurationError(AnalysisError):
    """Raised when the metric registry cannot be ordered or is inconsistent."""

    pass


class MetricCycleError(MetricConfigurationError):
    """Raised when metric prerequisites form a cycle."""

    def __init__(self, cycle: Iterable[str]):
        members = list(cycle)
        super().__init__(
            "Metric dependency cycle detected",
            details={"cycle": " -> ".join(members)},
        )
        self.cycle = members


class UnknownMetricError(MetricConfigurationError):
    """Raised when a metric or prerequisite is not registered."""

    def __init__(self, metric: str, required_by: Optional[str] = None):
        details = {"metric": metric}
        if required_by is not None:
            details["required_by"] = required_by
        super().__init__(f"Unknown metric: {metric}", details=details)
        self.metric = metric
        self.required_by = required_by


class MetricComputationError(AnalysisError):
    """Raised when a metric plugin fails on an AST."""

    def __init__(self, metric: str, path: str, reason: str):
        super().__init__(
            f"Failed to compute {metric} for {path}",
            details={"metric": metric, "path": path, "reason": reason},
        )
        self.metric = metric
        self.path = path
        self.reason = reason


class ProviderError(AnalysisError):
    """Raised when the AST provider cannot produce trees for a checkout."""

    def __init__(self, root: str, reason: str, path: Optional[str] = None):
        details = {"root": root, "reason": reason}
        if path is not None:
            details["path"] = path
        super().__init__(f"Failed to build ASTs under {root}", details=details)
        self.root = root
        self.reason = reason
        self.path = path


class MissingMetricError(AnalysisError):
    """Raised when a detector reads a metric that was never computed."""

    def __init__(self, metric: str, member: str):
        super().__init__(
            f"Metric {metric} not computed for {member}",
            details={"metric": metric, "member": member},
        )
        self.metric = metric
        self.member = member


class SmellDetectionError(AnalysisError):
    """Raised when a smell detector fails on an AST."""

    def __init__(self, smell: str, path: str, reason: str):
        super().__init__(
            f"Failed to detect {smell} in {path}",
            details={"smell": smell, "path": path, "reason": reason},
        )
        self.smell = smell
        self.path = path
        self.reason = reason
