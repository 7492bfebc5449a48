"""Records produced by a mining run."""

from __future__ import annotations

import zlib
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from ..smells.base import SmellVerdict


class MiningStage(str, Enum):
    """Where in the per-commit pipeline a failure happened."""

    CHECKOUT = "CHECKOUT"
    DIFF = "DIFF"
    PARSE = "PARSE"
    METRICS = "METRICS"
    SMELLS = "SMELLS"
    EMIT = "EMIT"


def file_path_hash(path: str) -> int:
    """Stable unsigned CRC32 of a repo-relative POSIX path."""
    return zlib.crc32(path.encode("utf-8")) & 0xFFFFFFFF


@dataclass
class TypeAnalysis:
    """Metrics and smells of one type at one commit."""

    commit: str
    commit_date: datetime
    path: str
    file_hash: int
    type_name: str
    metrics: dict[str, float] = field(default_factory=dict)
    method_metrics: dict[str, dict[str, float]] = field(default_factory=dict)
    smells: list[SmellVerdict] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "commit": self.commit,
            "commit_date": self.commit_date.isoformat(),
            "path": self.path,
            "file_hash": self.file_hash,
            "type": self.type_name,
            "metrics": dict(self.metrics),
            "methods": {name: dict(values) for name, values in self.method_metrics.items()},
            "smells": [s.to_dict() for s in self.smells],
        }


@dataclass(frozen=True)
class CommitFailure:
    commit: str
    stage: MiningStage
    error: str
    path: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "commit": self.commit,
            "stage": self.stage.value,
            "path": self.path,
            "error": self.error,
        }


@dataclass
class MiningReport:
    """Outcome of :meth:`RepositoryMiner.mine` or ``mine_history``."""

    commits_analyzed: list[str] = field(default_factory=list)
    records_emitted: int = 0
    failures: list[CommitFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures
