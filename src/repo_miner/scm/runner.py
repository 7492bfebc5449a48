"""Thin wrappers around the git CLI: one-shot commands and a batch object reader."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Optional

from ..exceptions import GitCommandError
from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ObjectInfo:
    oid: str
    type: str  # "commit" | "tree" | "blob" | "tag"
    size: int


class GitRunner:
    """Run git commands against one repository root."""

    def __init__(self, root: Path, timeout: int = 120):
        self.root = root
        self.timeout = timeout

    def run(self, args: list[str], input: Optional[str] = None) -> str:
        """Run ``git <args>`` and return stdout.

        Raises:
            GitCommandError: on non-zero exit, timeout, or when git cannot start
        """
        cmd = ["git", "-c", "core.quotepath=off", "-C", str(self.root), *args]
        logger.debug("git %s", " ".join(args))
        try:
            result = subprocess.run(
                cmd,
                input=input,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            raise GitCommandError(args, f"timed out after {self.timeout}s")
        except OSError as e:
            raise GitCommandError(args, str(e))

        if result.returncode != 0:
            raise GitCommandError(args, result.stderr.strip(), returncode=result.returncode)
        return result.stdout


class ObjectReader:
    """Long-lived ``git cat-file --batch-check`` process.

    Resolves object names (any rev-parse expression such as ``abc^{commit}``)
    to their id, type and size without spawning a process per lookup.
    Not thread-safe; callers hold the session lock.
    """

    def __init__(self, root: Path):
        self.root = root
        try:
            self._proc: Optional[subprocess.Popen[str]] = subprocess.Popen(
                ["git", "-C", str(root), "cat-file", "--batch-check"],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise GitCommandError(["cat-file", "--batch-check"], str(e))

    @property
    def closed(self) -> bool:
        return self._proc is None

    def info(self, name: str) -> Optional[ObjectInfo]:
        """Look up an object; None when it is missing or ambiguous.

        Raises:
            GitCommandError: if ``name`` spans lines (the batch protocol is
                line based) or the reader is not running
        """
        if "\n" in name or "\r" in name:
            raise GitCommandError(
                ["cat-file", "--batch-check"], f"object name spans lines: {name!r}"
            )
        proc = self._proc
        if proc is None or proc.poll() is not None:
            raise GitCommandError(["cat-file", "--batch-check"], "object reader is not running")

        stdin: IO[str] = proc.stdin  # type: ignore[assignment]
        stdout: IO[str] = proc.stdout  # type: ignore[assignment]
        try:
            stdin.write(name + "\n")
            stdin.flush()
            line = stdout.readline()
        except (BrokenPipeError, OSError) as e:
            raise GitCommandError(["cat-file", "--batch-check"], str(e))

        parts = line.split()
        if len(parts) != 3 or parts[1] in ("missing", "ambiguous"):
            return None
        return ObjectInfo(oid=parts[0], type=parts[1], size=int(parts[2]))

    def close(self) -> None:
        proc = self._proc
        if proc is None:
            return
        self._proc = None
        try:
            if proc.stdin:
                proc.stdin.close()
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()
        finally:
            if proc.stdout:
                proc.stdout.close()
