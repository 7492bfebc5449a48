"""Orchestration exceptions."""

from .base import MinerError


class EmitError(MinerError):
    """Raised when a sink rejects the records of a commit."""

    def __init__(self, commit: str, reason: str):
        super().__init__(
            f"Failed to emit records of {commit}",
            details={"commit": commit, "reason": reason},
        )
        self.commit = commit
        self.reason = reason
