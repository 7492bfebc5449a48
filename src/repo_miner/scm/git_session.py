"""History walker: one open git repository and everything needed to read it.

A :class:`GitSession` moves between two states. It is CLOSED until
:meth:`GitSession.open` succeeds and becomes CLOSED again on :meth:`close` or
when any operation fails; the failing operation releases every handle before
the error reaches the caller. Operations on a closed session raise
:class:`SessionStateError`.

Checkout and diff sequences share the repository's index and working tree,
so each operation runs under the session lock. Use one session per worker
for parallel mining.

Example:
    >>> with GitSession().open("/path/to/repo") as session:
    ...     for ref in session.list_references():
    ...         print(ref.name, len(session.list_commit_ids(ref)))
"""

from __future__ import annotations

import functools
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, Optional, TypeVar, Union

from ..config import MinerConfig
from ..exceptions import (
    CheckoutError,
    GitCommandError,
    HistoryReadError,
    ReferenceListError,
    RepositoryIOError,
    RepositoryNotFound,
    SessionStateError,
)
from ..logging_config import get_logger
from .churn import ChurnAnalyzer
from .models import Commit, PersonIdent, Reference, ReferenceType
from .runner import GitRunner, ObjectReader

logger = get_logger(__name__)

T = TypeVar("T")

# hash | parents | author name | email | date | committer name | email | date | body
_LOG_FORMAT = "%H%x00%P%x00%an%x00%ae%x00%aI%x00%cn%x00%ce%x00%cI%x00%B%x1e"
_RECORD_SEP = "\x1e"
_FIELD_SEP = "\x00"


@dataclass
class _SessionHandles:
    """Every resource a session holds; released together."""

    root: Path
    git_dir: Path
    runner: GitRunner
    objects: ObjectReader
    churn: ChurnAnalyzer

    def close(self) -> None:
        self.objects.close()


def _operation(name: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Guard a session method: require OPEN, serialize, auto-close on any error."""

    def decorator(fn: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(fn)
        def wrapper(self: GitSession, *args, **kwargs) -> T:
            handles = self._require_open(name)
            with self._lock:
                try:
                    return fn(self, handles, *args, **kwargs)
                except Exception as e:
                    self._fail(name, e)
                    raise

        return wrapper

    return decorator


class GitSession:
    """Read references, commits and churn from a git repository; check out trees."""

    def __init__(self, config: Optional[MinerConfig] = None):
        self.config = config or MinerConfig()
        self._handles: Optional[_SessionHandles] = None
        self._lock = threading.RLock()

    # ── lifecycle ──────────────────────────────────────────────────────

    @property
    def is_open(self) -> bool:
        return self._handles is not None

    @property
    def root(self) -> Path:
        return self._require_open("read root").root

    def open(self, path: Union[str, Path]) -> GitSession:
        """Open the repository at ``path``.

        Raises:
            RepositoryNotFound: no ``.git`` metadata at ``path``
            RepositoryIOError: git cannot read the metadata
            SessionStateError: the session is already open
        """
        if self._handles is not None:
            raise SessionStateError("open", "already open")

        root = Path(path).resolve()
        if not (root / ".git").exists():
            raise RepositoryNotFound(root)

        runner = GitRunner(root, timeout=self.config.git_timeout_seconds)
        try:
            git_dir = Path(runner.run(["rev-parse", "--absolute-git-dir"]).strip())
            objects = ObjectReader(root)
        except GitCommandError as e:
            raise RepositoryIOError(root, e.reason) from e

        self._handles = _SessionHandles(
            root=root,
            git_dir=git_dir,
            runner=runner,
            objects=objects,
            churn=ChurnAnalyzer(runner, self.config.binary_file_threshold),
        )
        logger.debug("Opened repository %s", root)
        return self

    def close(self) -> None:
        """Release all handles. A no-op on a closed session."""
        with self._lock:
            handles = self._handles
            if handles is None:
                return
            self._handles = None
            handles.close()
            logger.debug("Closed repository %s", handles.root)

    def __enter__(self) -> GitSession:
        self._require_open("enter context")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require_open(self, operation: str) -> _SessionHandles:
        handles = self._handles
        if handles is None:
            raise SessionStateError(operation, "closed")
        return handles

    def _fail(self, operation: str, error: Exception) -> None:
        logger.error("%s failed: %s", operation, error)
        self.close()

    # ── references ─────────────────────────────────────────────────────

    @_operation("list references")
    def list_references(self, handles: _SessionHandles) -> list[Reference]:
        """All local branches and tags, excluding the symbolic HEAD."""
        try:
            raw = handles.runner.run(
                ["for-each-ref", "--format=%(refname)%00%(objectname)%00%(*objectname)",
                 "refs/heads", "refs/tags"]
            )
        except GitCommandError as e:
            raise ReferenceListError(e.reason) from e

        refs: list[Reference] = []
        for line in raw.splitlines():
            if not line:
                continue
            path, target, peeled = (line.split(_FIELD_SEP) + ["", ""])[:3]
            if path == "HEAD" or path.endswith("/HEAD"):
                continue
            ref_type = ReferenceType.TAG if path.startswith("refs/tags/") else ReferenceType.BRANCH
            refs.append(Reference.from_path(path, ref_type, target=peeled or target))
        return refs

    # ── commits ────────────────────────────────────────────────────────

    @_operation("list commits")
    def list_commits(self, handles: _SessionHandles) -> list[Commit]:
        """Every commit reachable from any reference, newest first, with changes."""
        return list(self._read_commits(handles, ["--all"]))

    def iter_commits(self) -> Iterator[Commit]:
        """Lazy form of :meth:`list_commits`; auto-closes on failure like it."""
        handles = self._require_open("iterate commits")
        try:
            yield from self._read_commits(handles, ["--all"])
        except Exception as e:
            self._fail("iterate commits", e)
            raise

    @_operation("read commit")
    def get_commit(self, handles: _SessionHandles, commit_id: str) -> Commit:
        """A single commit with its changes."""
        commits = list(
            self._read_commits(handles, ["-1", "--no-walk", "--end-of-options", commit_id, "--"])
        )
        if not commits:
            raise HistoryReadError(f"commit not found: {commit_id}")
        return commits[0]

    @_operation("list commit ids")
    def list_commit_ids(self, handles: _SessionHandles, reference: Reference) -> list[str]:
        """Ids reachable from one reference, newest first.

        Tags are walked from their peeled target, branches from their tip.
        An unknown reference yields an empty list.
        """
        start = reference.target or self._peel(handles, reference.path)
        if start is None:
            logger.debug("Reference %s does not resolve to a commit", reference.path)
            return []
        try:
            raw = handles.runner.run(["rev-list", start])
        except GitCommandError as e:
            raise HistoryReadError(e.reason, reference=reference.path) from e
        return [line for line in raw.splitlines() if line]

    def _peel(self, handles: _SessionHandles, name: str) -> Optional[str]:
        try:
            info = handles.objects.info(f"{name}^{{commit}}")
        except GitCommandError as e:
            raise HistoryReadError(e.reason, reference=name) from e
        return info.oid if info else None

    def _read_commits(self, handles: _SessionHandles, rev_args: list[str]) -> Iterator[Commit]:
        try:
            raw = handles.runner.run(["log", f"--format={_LOG_FORMAT}", *rev_args])
        except GitCommandError as e:
            raise HistoryReadError(e.reason) from e

        for record in raw.split(_RECORD_SEP):
            record = record.lstrip("\n")
            if not record:
                continue
            yield self._parse_commit(handles, record)

    def _parse_commit(self, handles: _SessionHandles, record: str) -> Commit:
        parts = record.split(_FIELD_SEP, 8)
        if len(parts) != 9:
            raise HistoryReadError(f"malformed log record: {record[:60]!r}")
        sha, parents_raw, a_name, a_email, a_date, c_name, c_email, c_date, body = parts
        try:
            author = PersonIdent(a_name, a_email, datetime.fromisoformat(a_date))
            committer = PersonIdent(c_name, c_email, datetime.fromisoformat(c_date))
        except ValueError as e:
            raise HistoryReadError(f"bad date in {sha}: {e}") from e

        parents = tuple(parents_raw.split())
        with self._lock:
            changes = handles.churn.changes_for(sha, parents)
        return Commit(
            id=sha,
            message=body.rstrip("\n"),
            author=author,
            committer=committer,
            parents=parents,
            changes=tuple(changes),
        )

    # ── working tree ───────────────────────────────────────────────────

    @_operation("checkout")
    def checkout(self, handles: _SessionHandles, commit_id: str) -> None:
        """Force the working tree to ``commit_id``, discarding tracked changes.

        A stale ``index.lock`` left by an aborted checkout is removed first.
        """
        lock_file = handles.git_dir / "index.lock"
        if lock_file.exists():
            logger.warning("Removing stale lock file %s", lock_file)
            try:
                lock_file.unlink()
            except OSError as e:
                raise CheckoutError(commit_id, f"cannot remove {lock_file}: {e}") from e

        try:
            info = handles.objects.info(f"{commit_id}^{{commit}}")
        except GitCommandError as e:
            raise CheckoutError(commit_id, e.reason) from e
        if info is None:
            raise CheckoutError(commit_id, "does not resolve to a commit")

        try:
            handles.runner.run(["checkout", "--force", "--detach", info.oid])
        except GitCommandError as e:
            raise CheckoutError(commit_id, e.reason) from e
        logger.debug("Checked out %s", info.oid)

    @_operation("list files")
    def list_files(self, handles: _SessionHandles, commit_id: str) -> list[str]:
        """Repo-relative paths tracked in the tree of ``commit_id``.

        Untracked and ignored files of the working tree are never included.
        """
        try:
            raw = handles.runner.run(
                ["ls-tree", "-r", "-z", "--name-only", "--full-tree", "--end-of-options", commit_id]
            )
        except GitCommandError as e:
            raise HistoryReadError(e.reason) from e
        return [path for path in raw.split("\0") if path]
