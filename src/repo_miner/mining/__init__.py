"""Mining orchestration: commits in, analysis records out."""

from .miner import RepositoryMiner
from .records import (
    CommitFailure,
    MiningReport,
    MiningStage,
    TypeAnalysis,
    file_path_hash,
)
from .sinks import AnalysisSink, JsonLinesSink, MemorySink

__all__ = [
    "RepositoryMiner",
    "CommitFailure",
    "MiningReport",
    "MiningStage",
    "TypeAnalysis",
    "file_path_hash",
    "AnalysisSink",
    "JsonLinesSink",
    "MemorySink",
]
