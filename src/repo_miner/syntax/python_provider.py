"""Python source provider built on the stdlib ``ast`` module.

Every ``class`` becomes an :class:`AbstractType` (nested classes are named
``Outer.Inner``). Visibility follows naming conventions:
    - ``__name`` -> private, ``_name`` -> protected
    - dunder names and everything else -> public
``@staticmethod``/``@classmethod`` add STATIC, ``@abstractmethod`` adds ABSTRACT.

Method bodies are reduced to :class:`Statement` trees. ``elif`` branches are
siblings of their ``if`` (same nesting level); ``and``/``or`` chains yield one
BOOLEAN_OP per operator; conditional expressions and comprehension filters
are decision points too.
"""

from __future__ import annotations

import ast
import builtins
from collections.abc import Iterable
from fnmatch import fnmatch
from pathlib import Path
from typing import Optional, Union

from ..exceptions import ProviderError
from ..logging_config import get_logger
from .models import (
    AST,
    AbstractField,
    AbstractMethod,
    AbstractType,
    Archetype,
    Statement,
    StatementKind,
)
from .modifiers import Modifier

logger = get_logger(__name__)

_BUILTIN_NAMES = frozenset(dir(builtins))
_RECEIVERS = frozenset({"self", "cls"})
_ENUM_BASES = frozenset({"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"})

FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]


def visibility(name: str) -> Modifier:
    if name.startswith("__") and name.endswith("__"):
        return Modifier.PUBLIC
    if name.startswith("__"):
        return Modifier.PRIVATE
    if name.startswith("_"):
        return Modifier.PROTECTED
    return Modifier.PUBLIC


def _decorator_name(node: ast.expr) -> str:
    if isinstance(node, ast.Call):
        node = node.func
    if isinstance(node, ast.Attribute):
        return node.attr
    if isinstance(node, ast.Name):
        return node.id
    return ""


def _base_name(node: ast.expr) -> str:
    if isinstance(node, ast.Attribute):
        return node.attr
    if isinstance(node, ast.Name):
        return node.id
    return ""


# ── expressions ────────────────────────────────────────────────────


def _variables(nodes: Iterable[Optional[ast.AST]]) -> list[str]:
    """Variable names accessed in the given nodes (``self.x`` kept qualified)."""
    found: list[str] = []
    for root in nodes:
        if root is None:
            continue
        called = {id(n.func) for n in ast.walk(root) if isinstance(n, ast.Call)}
        for node in ast.walk(root):
            if id(node) in called:
                continue
            if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name):
                if node.value.id in _RECEIVERS:
                    found.append(f"{node.value.id}.{node.attr}")
            elif isinstance(node, ast.Name):
                if node.id not in _RECEIVERS and node.id not in _BUILTIN_NAMES:
                    found.append(node.id)
            elif isinstance(node, (ast.MatchAs, ast.MatchStar)) and node.name:
                found.append(node.name)
            elif isinstance(node, ast.ExceptHandler) and node.name:
                found.append(node.name)
    return found


def _decision_points(node: Optional[ast.AST]) -> list[Statement]:
    """Decision points hidden in an expression (ternaries, boolean operators)."""
    if node is None:
        return []
    if isinstance(node, ast.IfExp):
        children = []
        for part in (node.test, node.body, node.orelse):
            children.extend(_decision_points(part))
        return [_stmt(StatementKind.CONDITIONAL, node, children=children)]
    if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
        return []

    points: list[Statement] = []
    if isinstance(node, ast.BoolOp):
        points.extend(
            _stmt(StatementKind.BOOLEAN_OP, node) for _ in range(len(node.values) - 1)
        )
    if isinstance(node, ast.comprehension):
        points.extend(_stmt(StatementKind.IF, cond) for cond in node.ifs)
    for child in ast.iter_child_nodes(node):
        if isinstance(child, ast.stmt):
            continue
        points.extend(_decision_points(child))
    return points


def _stmt(
    kind: StatementKind,
    node: ast.AST,
    variables: Optional[list[str]] = None,
    children: Optional[list[Statement]] = None,
) -> Statement:
    return Statement(
        kind=kind,
        start_line=getattr(node, "lineno", 0),
        end_line=getattr(node, "end_lineno", None) or getattr(node, "lineno", 0),
        variables=variables or [],
        children=children or [],
    )


# ── statements ─────────────────────────────────────────────────────


def convert_body(body: list[ast.stmt]) -> list[Statement]:
    result: list[Statement] = []
    for node in body:
        result.extend(_convert(node))
    return result


def _header(kind: StatementKind, node: ast.stmt, exprs: list[Optional[ast.AST]],
            body: list[Statement]) -> Statement:
    points: list[Statement] = []
    for expr in exprs:
        points.extend(_decision_points(expr))
    return _stmt(kind, node, variables=_variables(exprs), children=points + body)


def _convert(node: ast.stmt) -> list[Statement]:
    if isinstance(node, ast.If):
        return _convert_if(node, StatementKind.IF)

    if isinstance(node, (ast.For, ast.AsyncFor)):
        body = convert_body(node.body) + convert_body(node.orelse)
        return [_header(StatementKind.FOREACH, node, [node.target, node.iter], body)]

    if isinstance(node, ast.While):
        body = convert_body(node.body) + convert_body(node.orelse)
        return [_header(StatementKind.WHILE, node, [node.test], body)]

    if isinstance(node, (ast.With, ast.AsyncWith)):
        exprs: list[Optional[ast.AST]] = []
        for item in node.items:
            exprs.extend([item.context_expr, item.optional_vars])
        return [_header(StatementKind.WITH, node, exprs, convert_body(node.body))]

    if isinstance(node, (ast.Try, ast.TryStar)):
        children = convert_body(node.body)
        for handler in node.handlers:
            children.append(
                _stmt(
                    StatementKind.CATCH,
                    handler,
                    variables=_variables([handler.type]) + ([handler.name] if handler.name else []),
                    children=convert_body(handler.body),
                )
            )
        children.extend(convert_body(node.orelse))
        children.extend(convert_body(node.finalbody))
        return [_stmt(StatementKind.TRY, node, children=children)]

    if isinstance(node, ast.Match):
        cases = [
            _header(StatementKind.CASE, case.pattern, [case.pattern, case.guard],  # type: ignore[arg-type]
                    convert_body(case.body))
            for case in node.cases
        ]
        return [_header(StatementKind.SWITCH, node, [node.subject], cases)]

    if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
        return [_stmt(StatementKind.BLOCK, node, children=convert_body(node.body))]

    if isinstance(node, ast.ClassDef):
        return [_stmt(StatementKind.BLOCK, node)]

    return [_stmt(StatementKind.SIMPLE, node, variables=_variables([node]),
                  children=_decision_points(node))]


def _convert_if(node: ast.If, kind: StatementKind) -> list[Statement]:
    """An if statement followed by its elif chain, all at the same level."""
    orelse = node.orelse
    is_elif = (
        len(orelse) == 1
        and isinstance(orelse[0], ast.If)
        and orelse[0].col_offset == node.col_offset
    )
    body = convert_body(node.body)
    if not is_elif:
        body += convert_body(orelse)

    head = _header(kind, node, [node.test], body)
    if is_elif:
        return [head] + _convert_if(orelse[0], StatementKind.ELSE_IF)  # type: ignore[arg-type]
    return [head]


# ── classes ────────────────────────────────────────────────────────


def _method(node: FunctionNode) -> AbstractMethod:
    mods = visibility(node.name)
    decorators = {_decorator_name(d) for d in node.decorator_list}
    if decorators & {"staticmethod", "classmethod"}:
        mods |= Modifier.STATIC
    if "abstractmethod" in decorators:
        mods |= Modifier.ABSTRACT

    args = node.args
    params = [a.arg for a in (*args.posonlyargs, *args.args, *args.kwonlyargs)]
    if args.vararg:
        params.append(args.vararg.arg)
    if args.kwarg:
        params.append(args.kwarg.arg)
    if params and params[0] in _RECEIVERS and "staticmethod" not in decorators:
        params = params[1:]

    return AbstractMethod(
        name=node.name,
        modifiers=mods,
        parameters=params,
        start_line=node.lineno,
        end_line=node.end_lineno or node.lineno,
        body=convert_body(node.body),
    )


def _fields(cls: ast.ClassDef) -> list[AbstractField]:
    seen: dict[str, AbstractField] = {}

    def add(name: str, node: ast.AST, annotation: Optional[ast.expr] = None) -> None:
        if name not in seen:
            seen[name] = AbstractField(
                name=name,
                modifiers=visibility(name),
                type_name=ast.unparse(annotation) if annotation is not None else None,
                line=getattr(node, "lineno", 0),
            )

    for stmt in cls.body:
        if isinstance(stmt, ast.Assign):
            for target in stmt.targets:
                if isinstance(target, ast.Name):
                    add(target.id, stmt)
        elif isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
            add(stmt.target.id, stmt, stmt.annotation)

    for stmt in cls.body:
        if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)) and stmt.name == "__init__":
            for node in ast.walk(stmt):
                targets: list[ast.expr] = []
                annotation = None
                if isinstance(node, ast.Assign):
                    targets = node.targets
                elif isinstance(node, ast.AnnAssign):
                    targets = [node.target]
                    annotation = node.annotation
                for target in targets:
                    if (
                        isinstance(target, ast.Attribute)
                        and isinstance(target.value, ast.Name)
                        and target.value.id == "self"
                    ):
                        add(target.attr, node, annotation)
    return list(seen.values())


def _types(node: ast.ClassDef, prefix: str = "") -> list[AbstractType]:
    name = f"{prefix}{node.name}"
    archetype = (
        Archetype.ENUM
        if any(_base_name(b) in _ENUM_BASES for b in node.bases)
        else Archetype.CLASS_OR_INTERFACE
    )
    mods = visibility(node.name)
    if any(_base_name(b) in ("ABC", "Protocol") for b in node.bases):
        mods |= Modifier.ABSTRACT

    result = [
        AbstractType(
            name=name,
            archetype=archetype,
            modifiers=mods,
            start_line=node.lineno,
            end_line=node.end_lineno or node.lineno,
            methods=[
                _method(s) for s in node.body if isinstance(s, (ast.FunctionDef, ast.AsyncFunctionDef))
            ],
            fields=_fields(node),
        )
    ]
    for stmt in node.body:
        if isinstance(stmt, ast.ClassDef):
            result.extend(_types(stmt, prefix=f"{name}."))
    return result


def parse_source(source: str, path: str) -> AST:
    """Build an AST for one Python file.

    Raises:
        SyntaxError, ValueError: if the source cannot be parsed
    """
    tree = ast.parse(source, filename=path)
    types: list[AbstractType] = []
    for node in tree.body:
        if isinstance(node, ast.ClassDef):
            types.extend(_types(node))
    return AST(path=path, language="python", types=types)


class PythonAstProvider:
    """Parse every ``*.py`` file of a working tree."""

    language = "python"

    def __init__(self, exclude_patterns: Optional[list[str]] = None):
        self.exclude_patterns = list(exclude_patterns or [])

    def _should_skip(self, rel: Path) -> bool:
        if any(part.startswith(".") for part in rel.parts):
            return True
        posix = rel.as_posix()
        return any(fnmatch(posix, pattern) for pattern in self.exclude_patterns)

    def parse_tree(self, root: Path, paths: Optional[Iterable[str]] = None) -> list[AST]:
        """One AST per parsable Python file under ``root``, sorted by path.

        Only the repo-relative ``paths`` are considered when given; otherwise
        every ``*.py`` file under ``root`` is. Files with syntax errors are
        logged and skipped.

        Raises:
            ProviderError: if a file cannot be read
        """
        if paths is None:
            candidates = [p.relative_to(root) for p in root.rglob("*.py")]
        else:
            candidates = [Path(p) for p in paths if p.endswith(".py")]

        results: list[AST] = []
        for rel in sorted(candidates):
            file_path = root / rel
            if self._should_skip(rel) or not file_path.is_file():
                continue
            try:
                source = file_path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                raise ProviderError(str(root), str(e), path=rel.as_posix()) from e
            try:
                results.append(parse_source(source, rel.as_posix()))
            except (SyntaxError, ValueError) as e:
                logger.warning("Skipping unparsable file %s: %s", rel.as_posix(), e)
        return results
