"""Shared test fixtures for repo-miner tests."""

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from repo_miner.syntax.models import (
    AST,
    AbstractMethod,
    AbstractType,
    Statement,
    StatementKind,
)


class GitRepo:
    """Throwaway git repository driven through the git CLI.

    Commit timestamps advance one minute per commit so history order is
    deterministic.
    """

    BASE_TIME = 1_700_000_000

    def __init__(self, root: Path, home: Path):
        self.root = root
        self._ticks = 0
        self._env = {
            **os.environ,
            "HOME": str(home),
            "GIT_CONFIG_NOSYSTEM": "1",
            "GIT_AUTHOR_NAME": "Alice",
            "GIT_AUTHOR_EMAIL": "alice@example.com",
            "GIT_COMMITTER_NAME": "Bob",
            "GIT_COMMITTER_EMAIL": "bob@example.com",
        }
        root.mkdir(parents=True, exist_ok=True)
        self.git("init", "-q")
        self.git("symbolic-ref", "HEAD", "refs/heads/main")
        self.git("config", "commit.gpgsign", "false")
        self.git("config", "tag.gpgsign", "false")

    def git(self, *args: str) -> str:
        result = subprocess.run(
            ["git", "-C", str(self.root), *args],
            env=self._env,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    def write(self, rel: str, content) -> Path:
        path = self.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
        return path

    def remove(self, rel: str) -> None:
        (self.root / rel).unlink()

    def _tick(self) -> dict:
        self._ticks += 1
        stamp = f"{self.BASE_TIME + self._ticks * 60} +0000"
        return {"GIT_AUTHOR_DATE": stamp, "GIT_COMMITTER_DATE": stamp}

    def commit(self, message: str) -> str:
        self.git("add", "-A")
        self._env.update(self._tick())
        self.git("commit", "-q", "--allow-empty", "-m", message)
        return self.head()

    def merge(self, branch: str, message: str = "merge") -> str:
        self._env.update(self._tick())
        self.git("merge", "-q", "--no-ff", "-m", message, branch)
        return self.head()

    def head(self) -> str:
        return self.git("rev-parse", "HEAD").strip()

    def show(self, commit: str, rel: str) -> str:
        return self.git("show", f"{commit}:{rel}")


@pytest.fixture
def make_repo(tmp_path):
    """Factory for throwaway git repositories; skips when git is missing."""
    if shutil.which("git") is None:
        pytest.skip("git not found")

    def factory(name: str = "repo") -> GitRepo:
        return GitRepo(tmp_path / name, home=tmp_path / "home")

    (tmp_path / "home").mkdir()
    return factory


@pytest.fixture
def repo(make_repo):
    return make_repo()


def _nested(kinds: list[StatementKind], variables: list[str] = ()) -> Statement:
    """A chain of statements, each nested inside the previous one."""
    node = Statement(StatementKind.SIMPLE, variables=list(variables))
    for kind in reversed(kinds):
        node = Statement(kind, children=[node])
    return node


def _make_method(
    name: str = "run",
    lines: int = 10,
    nesting: int = 0,
    decisions: int = 0,
    variables: int = 0,
    start_line: int = 1,
) -> AbstractMethod:
    """A synthetic method with exact MLOC, MAXNESTING, CYCLO and NOAV.

    ``decisions`` must be at least ``nesting``; the nesting chain is made of
    IF statements and the remaining decisions are top-level BOOLEAN_OPs.
    """
    assert decisions >= nesting
    body = []
    names = [f"v{i}" for i in range(variables)]
    if nesting:
        body.append(_nested([StatementKind.IF] * nesting, names))
    else:
        body.append(Statement(StatementKind.SIMPLE, variables=names))
    body.extend(Statement(StatementKind.BOOLEAN_OP) for _ in range(decisions - nesting))
    return AbstractMethod(
        name=name,
        start_line=start_line,
        end_line=start_line + lines - 1,
        body=body,
    )


def _make_ast(*types: AbstractType, path: str = "pkg/mod.py") -> AST:
    return AST(path=path, language="test", types=list(types))


@pytest.fixture
def make_method():
    return _make_method


@pytest.fixture
def make_ast():
    return _make_ast
