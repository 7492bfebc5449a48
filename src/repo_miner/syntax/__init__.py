"""Syntax model consumed by the metric engine, plus the Python source provider."""

from .models import (
    AST,
    AbstractField,
    AbstractMethod,
    AbstractType,
    Archetype,
    Statement,
    StatementKind,
)
from .modifiers import Modifier, is_protected_like
from .protocols import AstProvider
from .python_provider import PythonAstProvider, parse_source

__all__ = [
    "AST",
    "AbstractField",
    "AbstractMethod",
    "AbstractType",
    "Archetype",
    "Statement",
    "StatementKind",
    "Modifier",
    "is_protected_like",
    "AstProvider",
    "PythonAstProvider",
    "parse_source",
]
