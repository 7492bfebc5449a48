"""Exception hierarchy for repo-miner."""

from .analysis import (
    AnalysisError,
    MetricComputationError,
    MetricConfigurationError,
    MetricCycleError,
    MissingMetricError,
    ProviderError,
    SmellDetectionError,
    UnknownMetricError,
)
from .base import MinerError
from .config import ConfigurationError, InvalidConfigError
from .mining import EmitError
from .scm import (
    AmbiguousReferenceError,
    CheckoutError,
    DiffComputationError,
    GitCommandError,
    HistoryReadError,
    ReferenceListError,
    RepositoryIOError,
    RepositoryNotFound,
    ScmError,
    SessionStateError,
)

__all__ = [
    "MinerError",
    "ScmError",
    "AmbiguousReferenceError",
    "RepositoryNotFound",
    "RepositoryIOError",
    "SessionStateError",
    "ReferenceListError",
    "HistoryReadError",
    "CheckoutError",
    "DiffComputationError",
    "GitCommandError",
    "AnalysisError",
    "MetricConfigurationError",
    "MetricCycleError",
    "UnknownMetricError",
    "MetricComputationError",
    "MissingMetricError",
    "SmellDetectionError",
    "ProviderError",
    "EmitError",
    "ConfigurationError",
    "InvalidConfigError",
]
