"""Version-control errors: opening, listing, checking out, diffing."""

from pathlib import Path
from typing import Dict, Optional

from .base import MinerError


class ScmError(MinerError):
    """Base class for history walker and diff errors."""

    pass


class RepositoryNotFound(ScmError):
    """Raised when no git metadata exists at the given path."""

    def __init__(self, path: Path):
        super().__init__(
            f"Repository not found: {path}", details={"path": str(path)}
        )
        self.path = path


class RepositoryIOError(ScmError):
    """Raised when git metadata exists but cannot be read."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Cannot read repository: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason


class SessionStateError(ScmError):
    """Raised when a session is used in the wrong state (e.g. after close)."""

    def __init__(self, operation: str, state: str):
        super().__init__(
            f"Cannot {operation}: session is {state}",
            details={"operation": operation, "state": state},
        )
        self.operation = operation
        self.state = state


class ReferenceListError(ScmError):
    """Raised when branches or tags cannot be enumerated."""

    def __init__(self, reason: str):
        super().__init__("Failed to list references", details={"reason": reason})
        self.reason = reason


class HistoryReadError(ScmError):
    """Raised when commits cannot be enumerated or parsed."""

    def __init__(self, reason: str, reference: Optional[str] = None):
        details: Dict[str, str] = {"reason": reason}
        if reference is not None:
            details["reference"] = reference
        super().__init__("Failed to read history", details=details)
        self.reason = reason
        self.reference = reference


class CheckoutError(ScmError):
    """Raised when a commit cannot be resolved or materialized."""

    def __init__(self, commit: str, reason: str):
        super().__init__(
            f"Failed to check out {commit}",
            details={"commit": commit, "reason": reason},
        )
        self.commit = commit
        self.reason = reason


class DiffComputationError(ScmError):
    """Raised when a diff cannot be scanned or formatted."""

    def __init__(self, commit: str, reason: str, path: Optional[str] = None):
        details = {"commit": commit, "reason": reason}
        if path is not None:
            details["path"] = path
        super().__init__(f"Failed to diff {commit}", details=details)
        self.commit = commit
        self.reason = reason
        self.path = path


class GitCommandError(ScmError):
    """Raised when a git subprocess exits non-zero, times out, or cannot start."""

    def __init__(self, args: list[str], reason: str, returncode: Optional[int] = None):
        details = {"command": "git " + " ".join(args), "reason": reason}
        if returncode is not None:
            details["returncode"] = str(returncode)
        super().__init__("git command failed", details=details)
        self.args_list = args
        self.reason = reason
        self.returncode = returncode


class AmbiguousReferenceError(ScmError):
    """Raised when a reference name matches more than one branch or tag."""

    def __init__(self, reference: str, candidates: list[str]):
        super().__init__(
            f"Ambiguous reference: {reference}",
            details={"reference": reference, "candidates": ", ".join(candidates)},
        )
        self.reference = reference
        self.candidates = candidates
