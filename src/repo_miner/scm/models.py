"""Data models for version-control history: references, commits, changes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class ReferenceType(str, Enum):
    BRANCH = "BRANCH"
    TAG = "TAG"


class ChangeType(str, Enum):
    ADD = "ADD"
    DELETE = "DELETE"
    MODIFY = "MODIFY"
    COPY = "COPY"
    MOVE = "MOVE"


@dataclass(frozen=True)
class Reference:
    name: str  # text after the last "/"
    path: str  # e.g. refs/heads/main
    type: ReferenceType
    target: Optional[str] = None  # peeled commit id

    @classmethod
    def from_path(
        cls, path: str, ref_type: ReferenceType, target: Optional[str] = None
    ) -> Reference:
        return cls(name=path.rsplit("/", 1)[-1], path=path, type=ref_type, target=target)


@dataclass(frozen=True)
class PersonIdent:
    name: str
    email: str
    when: datetime


@dataclass(frozen=True)
class Change:
    """One path-level difference between a commit and its first parent.

    ``old_path`` is only set for COPY and MOVE. Binary changes are reported
    with zero line counts.
    """

    path: str
    type: ChangeType
    old_path: Optional[str] = None
    lines_added: int = 0
    lines_removed: int = 0
    binary: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "old_path": self.old_path,
            "type": self.type.value,
            "lines_added": self.lines_added,
            "lines_removed": self.lines_removed,
            "binary": self.binary,
        }


@dataclass(frozen=True)
class Commit:
    id: str
    message: str
    author: PersonIdent
    committer: PersonIdent
    parents: tuple[str, ...] = ()
    changes: tuple[Change, ...] = field(default_factory=tuple)

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @property
    def author_date(self) -> datetime:
        return self.author.when

    @property
    def commit_date(self) -> datetime:
        return self.committer.when

    @property
    def lines_added(self) -> int:
        return sum(c.lines_added for c in self.changes)

    @property
    def lines_removed(self) -> int:
        return sum(c.lines_removed for c in self.changes)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dict."""
        return {
            "id": self.id,
            "message": self.message,
            "author": {
                "name": self.author.name,
                "email": self.author.email,
                "when": self.author.when.isoformat(),
            },
            "committer": {
                "name": self.committer.name,
                "email": self.committer.email,
                "when": self.committer.when.isoformat(),
            },
            "parents": list(self.parents),
            "merge": self.is_merge,
            "changes": [c.to_dict() for c in self.changes],
        }
