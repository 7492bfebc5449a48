"""Syntax models consumed by the metric engine.

An :class:`AST` is one source file: a forest of :class:`AbstractType` nodes,
each exclusively owning its methods and fields. Method bodies are reduced to
a tree of :class:`Statement` nodes, which is all the method metrics need:
    - kind: control structure or decision point (for CYCLO and MAXNESTING)
    - variables: names accessed by the statement itself (for NOAV)
    - start/end lines

Metric values are written into ``metrics`` maps on types and methods by the
metric plugins. Providers build these objects fresh for each commit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Optional

from .modifiers import Modifier

if TYPE_CHECKING:
    from ..metrics.base import MetricId


class Archetype(str, Enum):
    CLASS_OR_INTERFACE = "CLASS_OR_INTERFACE"
    ENUM = "ENUM"
    ANNOTATION = "ANNOTATION"


class StatementKind(str, Enum):
    IF = "IF"
    ELSE_IF = "ELSE_IF"
    FOR = "FOR"
    FOREACH = "FOREACH"
    WHILE = "WHILE"
    DO = "DO"
    SWITCH = "SWITCH"
    CASE = "CASE"
    TRY = "TRY"
    CATCH = "CATCH"
    CONDITIONAL = "CONDITIONAL"  # ternary expression
    BOOLEAN_OP = "BOOLEAN_OP"  # one per && / || operator
    WITH = "WITH"
    BLOCK = "BLOCK"
    SIMPLE = "SIMPLE"


@dataclass
class Statement:
    kind: StatementKind
    start_line: int = 0
    end_line: int = 0
    variables: list[str] = field(default_factory=list)
    children: list[Statement] = field(default_factory=list)

    def walk(self) -> Iterator[Statement]:
        """Pre-order traversal including self."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass
class AbstractField:
    name: str
    modifiers: Modifier = Modifier.NONE
    type_name: Optional[str] = None
    line: int = 0


@dataclass
class AbstractMethod:
    name: str
    modifiers: Modifier = Modifier.NONE
    parameters: list[str] = field(default_factory=list)
    start_line: int = 0
    end_line: int = 0
    body: list[Statement] = field(default_factory=list)
    metrics: dict[MetricId, float] = field(default_factory=dict)

    def statements(self) -> Iterator[Statement]:
        for stmt in self.body:
            yield from stmt.walk()


@dataclass(eq=False)
class AbstractType:
    """Class-like type; compared and hashed by identity."""

    name: str
    archetype: Archetype = Archetype.CLASS_OR_INTERFACE
    modifiers: Modifier = Modifier.NONE
    start_line: int = 0
    end_line: int = 0
    methods: list[AbstractMethod] = field(default_factory=list)
    fields: list[AbstractField] = field(default_factory=list)
    metrics: dict[MetricId, float] = field(default_factory=dict)


@dataclass
class AST:
    path: str  # repo-relative, POSIX separators
    language: str = "unknown"
    types: list[AbstractType] = field(default_factory=list)
