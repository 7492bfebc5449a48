"""Protocol for AST providers."""

from collections.abc import Iterable
from pathlib import Path
from typing import Optional, Protocol

from .models import AST


class AstProvider(Protocol):
    """Providers turn a checked-out working tree into one AST per source file.

    ``paths`` restricts parsing to those repo-relative files (the tracked
    files of the checked-out commit); when None the whole tree is walked.
    """

    language: str

    def parse_tree(self, root: Path, paths: Optional[Iterable[str]] = None) -> list[AST]: ...
