"""Path-level changes and line churn of a commit against its first parent.

A commit is diffed against its first parent (root commits against the empty
tree) with rename and copy detection. Every difference becomes one
:class:`Change`; each change then gets a dedicated zero-context unified
diff. Patches git reports as binary, and patches whose changed content is
larger than the binary threshold, count as binary with 0/0 churn; the
``+``/``-`` lines of every other patch are counted.

Merge commits yield no changes at all: churn is never attributed to a merge,
so history comparisons stay stable across diverging parents.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from typing import Optional

from ..exceptions import DiffComputationError, GitCommandError
from ..logging_config import get_logger
from .models import Change, ChangeType
from .runner import GitRunner

logger = get_logger(__name__)

_STATUS_TYPES = {
    "A": ChangeType.ADD,
    "D": ChangeType.DELETE,
    "M": ChangeType.MODIFY,
    "T": ChangeType.MODIFY,  # type change (e.g. file -> symlink)
    "R": ChangeType.MOVE,
    "C": ChangeType.COPY,
}

_DIFF_FLAGS = ["--unified=0", "--no-color", "--no-ext-diff"]


def parse_name_status(raw: str) -> list[Change]:
    """Parse ``git diff-tree -z --name-status`` output into changes.

    Records are NUL separated: ``status NUL path`` or, for renames and
    copies, ``Rxxx NUL old NUL new``. Unknown statuses are skipped.
    """
    tokens = raw.split("\0")
    changes: list[Change] = []
    i = 0
    while i < len(tokens):
        status = tokens[i].strip()
        i += 1
        if not status:
            continue
        kind = _STATUS_TYPES.get(status[0])
        if kind in (ChangeType.MOVE, ChangeType.COPY):
            old_path, new_path = tokens[i], tokens[i + 1]
            i += 2
            changes.append(Change(path=new_path, old_path=old_path, type=kind))
        else:
            path = tokens[i]
            i += 1
            if kind is None:
                logger.debug("Skipping unknown diff status %r for %s", status, path)
                continue
            changes.append(Change(path=path, type=kind))
    return changes


def count_churn(patch: str) -> tuple[int, int]:
    """Count (added, removed) lines in a unified diff.

    ``---``/``+++`` file headers (and anything else before the first hunk of
    a file section) are not counted; inside a hunk every ``+`` or ``-`` line
    is, even when the content itself starts with ``++`` or ``--``.
    """
    added = 0
    removed = 0
    in_hunk = False
    for line in patch.splitlines():
        if line.startswith("diff --git "):
            in_hunk = False
        elif line.startswith("@@"):
            in_hunk = True
        elif not in_hunk:
            continue
        elif line.startswith("+"):
            added += 1
        elif line.startswith("-"):
            removed += 1
    return added, removed


def is_binary_patch(patch: str) -> bool:
    return any(
        line.startswith("Binary files ") or line == "GIT binary patch"
        for line in patch.splitlines()
    )


def changed_content_size(patch: str) -> int:
    """Bytes of added and removed content inside the hunks of ``patch``."""
    size = 0
    in_hunk = False
    for line in patch.splitlines():
        if line.startswith("diff --git "):
            in_hunk = False
        elif line.startswith("@@"):
            in_hunk = True
        elif in_hunk and line[:1] in ("+", "-"):
            size += len(line[1:].encode("utf-8")) + 1
    return size


class ChurnAnalyzer:
    """Compute the change list of a commit.

    Args:
        runner: git command runner for the repository
        binary_file_threshold: changes whose added plus removed content
            exceeds this many bytes are treated as binary and excluded from
            line counting (0 disables the rule)
    """

    def __init__(self, runner: GitRunner, binary_file_threshold: int = 2048):
        self.runner = runner
        self.binary_file_threshold = binary_file_threshold
        self._empty_tree: Optional[str] = None

    def empty_tree(self) -> str:
        if self._empty_tree is None:
            self._empty_tree = self.runner.run(
                ["hash-object", "-t", "tree", "--stdin"], input=""
            ).strip()
        return self._empty_tree

    def changes_for(self, commit_id: str, parents: Sequence[str]) -> list[Change]:
        """Changes of ``commit_id`` against its first parent; [] for merges."""
        if len(parents) > 1:
            return []

        try:
            base = parents[0] if parents else self.empty_tree()
            raw = self.runner.run(
                ["diff-tree", "-r", "-z", "--name-status", "-M", "-C", "--no-commit-id",
                 base, commit_id]
            )
        except GitCommandError as e:
            raise DiffComputationError(commit_id, e.reason) from e

        return [self._with_churn(change, base, commit_id) for change in parse_name_status(raw)]

    def _with_churn(self, change: Change, base: str, commit_id: str) -> Change:
        if change.type is ChangeType.MOVE:
            args = ["--literal-pathspecs", "diff", *_DIFF_FLAGS, "-M", base, commit_id, "--",
                    change.old_path or change.path, change.path]
        else:
            args = ["--literal-pathspecs", "diff", *_DIFF_FLAGS, "--no-renames",
                    base, commit_id, "--", change.path]

        try:
            patch = self.runner.run(args)
        except GitCommandError as e:
            raise DiffComputationError(commit_id, e.reason, path=change.path) from e

        if is_binary_patch(patch) or self._exceeds_threshold(patch):
            return replace(change, lines_added=0, lines_removed=0, binary=True)
        added, removed = count_churn(patch)
        return replace(change, lines_added=added, lines_removed=removed)

    def _exceeds_threshold(self, patch: str) -> bool:
        threshold = self.binary_file_threshold
        return threshold > 0 and changed_content_size(patch) > threshold
