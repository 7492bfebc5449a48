"""Destinations for mined commits and analysis records."""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Any, Optional, Protocol, Union

from ..logging_config import get_logger
from ..scm.models import Commit
from .records import TypeAnalysis

logger = get_logger(__name__)


class AnalysisSink(Protocol):
    def emit_commit(self, commit: Commit) -> None: ...

    def emit_analysis(self, record: TypeAnalysis) -> None: ...


class MemorySink:
    """Keeps everything in lists; handy for tests and library use."""

    def __init__(self) -> None:
        self.commits: list[Commit] = []
        self.analyses: list[TypeAnalysis] = []

    def emit_commit(self, commit: Commit) -> None:
        self.commits.append(commit)

    def emit_analysis(self, record: TypeAnalysis) -> None:
        self.analyses.append(record)


class JsonLinesSink:
    """Write one JSON document per line, tagged with ``"kind"``.

    Example:
        >>> with JsonLinesSink("out.jsonl") as sink:
        ...     RepositoryMiner(provider, sink).mine(".")
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._fh: Optional[IO[str]] = None
        self.lines_written = 0

    def open(self) -> JsonLinesSink:
        if self._fh is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = open(self.path, "w", encoding="utf-8")
        return self

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None
            logger.debug("Wrote %d lines to %s", self.lines_written, self.path)

    def __enter__(self) -> JsonLinesSink:
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def emit_commit(self, commit: Commit) -> None:
        self._write("commit", commit.to_dict())

    def emit_analysis(self, record: TypeAnalysis) -> None:
        self._write("analysis", record.to_dict())

    def _write(self, kind: str, payload: dict[str, Any]) -> None:
        fh = self.open()._fh
        assert fh is not None
        fh.write(json.dumps({"kind": kind, **payload}, default=str) + "\n")
        self.lines_written += 1
