"""Per-commit mining pipeline.

For each selected commit:
    1. resolve the commit (identities, dates, churn)
    2. check out its tree
    3. parse its tracked files with the AST provider
    4. compute metrics, then smells, per file
    5. emit the buffered ``TypeAnalysis`` records

Records reach the sink only once the whole commit succeeded. A failing
commit is recorded in the report and skipped unless ``fail_fast`` is set.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Optional, Union

from ..config import MinerConfig
from ..exceptions import AmbiguousReferenceError, EmitError, MinerError, ProviderError
from ..logging_config import get_logger
from ..metrics.engine import MetricEngine
from ..metrics.registry import MetricRegistry
from ..scm.git_session import GitSession
from ..scm.models import Commit, Reference
from ..smells.base import SmellDetector, SmellVerdict
from ..smells.registry import default_detectors, detect_smells
from ..syntax.models import AST, AbstractType
from ..syntax.protocols import AstProvider
from .records import CommitFailure, MiningReport, MiningStage, TypeAnalysis, file_path_hash
from .sinks import AnalysisSink

logger = get_logger(__name__)


class RepositoryMiner:
    """Mine structural facts (metrics, smells) and history facts from a repository.

    Args:
        provider: builds ASTs from a checked-out working tree
        sink: receives commits and analysis records
        config: mining configuration (defaults when None)
        registry: metric catalogue; validated here, so a cyclic registry
            fails before any repository is opened
        detectors: smell detectors; defaults to the built-in catalogue
            (none when ``config.include_smells`` is False)
    """

    def __init__(
        self,
        provider: AstProvider,
        sink: AnalysisSink,
        config: Optional[MinerConfig] = None,
        registry: Optional[MetricRegistry] = None,
        detectors: Optional[Sequence[SmellDetector]] = None,
    ):
        self.config = config or MinerConfig()
        self.provider = provider
        self.sink = sink
        self.engine = MetricEngine(registry)
        if detectors is not None:
            self.detectors = list(detectors)
        elif self.config.include_smells:
            self.detectors = default_detectors(self.config)
        else:
            self.detectors = []

    def mine(
        self,
        path: Union[str, Path],
        commits: Optional[Iterable[str]] = None,
        reference: Optional[str] = None,
        fail_fast: Optional[bool] = None,
    ) -> MiningReport:
        """Analyze commits of the repository at ``path``.

        Commits are the explicit ``commits`` ids, else those reachable from
        ``reference`` (full ref path, branch or tag name such as
        ``feature/login``, or the unambiguous text after its last ``/``),
        else every commit.

        Raises:
            AmbiguousReferenceError: ``reference`` names several refs
        """
        fail_fast = self.config.fail_fast if fail_fast is None else fail_fast
        report = MiningReport()
        session = GitSession(self.config).open(path)
        try:
            ids, resolved = self._select(session, commits, reference)
            logger.info("Mining %d commits in %s", len(ids), session.root)
            for index, commit_id in enumerate(ids, start=1):
                if not session.is_open:
                    logger.info("Reopening %s after failure", path)
                    session.open(path)
                logger.info("[%d/%d] %s", index, len(ids), commit_id[:12])
                self._mine_commit(session, commit_id, resolved.get(commit_id), report, fail_fast)
        finally:
            session.close()
        return report

    def mine_history(self, path: Union[str, Path]) -> MiningReport:
        """Emit every commit, with its churn, to ``sink.emit_commit``."""
        report = MiningReport()
        with GitSession(self.config).open(path) as session:
            for commit in session.iter_commits():
                self.sink.emit_commit(commit)
                report.commits_analyzed.append(commit.id)
        return report

    def _select(
        self,
        session: GitSession,
        commits: Optional[Iterable[str]],
        reference: Optional[str],
    ) -> tuple[list[str], dict[str, Commit]]:
        if commits is not None:
            return list(commits), {}

        if reference is not None:
            ref = _match_reference(session.list_references(), reference)
            if ref is None:
                logger.warning("Reference %s not found; nothing to mine", reference)
                return [], {}
            return session.list_commit_ids(ref), {}

        history = session.list_commits()
        return [c.id for c in history], {c.id: c for c in history}

    def _mine_commit(
        self,
        session: GitSession,
        commit_id: str,
        commit: Optional[Commit],
        report: MiningReport,
        fail_fast: bool,
    ) -> None:
        stage = MiningStage.DIFF
        path: Optional[str] = None
        try:
            if commit is None:
                commit = session.get_commit(commit_id)

            stage = MiningStage.CHECKOUT
            session.checkout(commit.id)

            stage = MiningStage.PARSE
            trees = self._parse(session.root, session.list_files(commit.id))

            records: list[TypeAnalysis] = []
            for tree in trees:
                path = tree.path
                stage = MiningStage.METRICS
                self.engine.compute(tree)
                smells: dict[AbstractType, list[SmellVerdict]] = {}
                if self.detectors:
                    stage = MiningStage.SMELLS
                    smells = detect_smells(tree, self.detectors, self.engine)
                records.extend(_records(commit, tree, smells))
            path = None

            stage = MiningStage.EMIT
            self._emit(commit_id, records)
        except MinerError as e:
            failure = CommitFailure(commit=commit_id, stage=stage, error=str(e), path=path)
            report.failures.append(failure)
            logger.warning("Skipping %s at %s: %s", commit_id[:12], stage.value, e)
            if fail_fast:
                raise
            return

        report.commits_analyzed.append(commit_id)
        report.records_emitted += len(records)

    def _parse(self, root: Path, paths: list[str]) -> list[AST]:
        try:
            return self.provider.parse_tree(root, paths)
        except MinerError:
            raise
        except Exception as e:
            raise ProviderError(str(root), repr(e)) from e

    def _emit(self, commit_id: str, records: list[TypeAnalysis]) -> None:
        try:
            for record in records:
                self.sink.emit_analysis(record)
        except MinerError:
            raise
        except Exception as e:
            raise EmitError(commit_id, repr(e)) from e


def _records(
    commit: Commit, tree: AST, smells: dict[AbstractType, list[SmellVerdict]]
) -> list[TypeAnalysis]:
    file_hash = file_path_hash(tree.path)
    return [
        TypeAnalysis(
            commit=commit.id,
            commit_date=commit.commit_date,
            path=tree.path,
            file_hash=file_hash,
            type_name=type_.name,
            metrics={str(k): v for k, v in type_.metrics.items()},
            method_metrics={
                m.name: {str(k): v for k, v in m.metrics.items()} for m in type_.methods
            },
            smells=list(smells.get(type_, [])),
        )
        for type_ in tree.types
    ]


def _match_reference(refs: Sequence[Reference], reference: str) -> Optional[Reference]:
    """Resolve ``reference`` the way git does for branch and tag names.

    A full ref path, ``refs/heads/<reference>`` or ``refs/tags/<reference>``
    wins over a match on the short name (the text after the last ``/``).

    Raises:
        AmbiguousReferenceError: more than one ref matches at the same level
    """
    qualified = {reference, f"refs/heads/{reference}", f"refs/tags/{reference}"}
    for candidates in (
        [r for r in refs if r.path in qualified],
        [r for r in refs if r.name == reference],
    ):
        if len(candidates) > 1:
            raise AmbiguousReferenceError(reference, sorted(r.path for r in candidates))
        if candidates:
            return candidates[0]
    return None
