"""Member modifiers as a closed flag set with an OTHER bucket."""

from __future__ import annotations

from enum import Flag, auto
from typing import Iterable


class Modifier(Flag):
    NONE = 0
    PUBLIC = auto()
    PRIVATE = auto()
    PROTECTED = auto()
    STATIC = auto()
    FINAL = auto()
    ABSTRACT = auto()
    SYNCHRONIZED = auto()
    NATIVE = auto()
    TRANSIENT = auto()
    VOLATILE = auto()
    DEFAULT = auto()
    OTHER = auto()  # any keyword outside the closed set

    @classmethod
    def parse(cls, names: Iterable[str]) -> Modifier:
        """Build a flag from modifier keywords; unknown keywords map to OTHER."""
        result = cls.NONE
        for name in names:
            member = cls.__members__.get(name.strip().upper())
            if member is None or member is cls.NONE:
                result |= cls.OTHER
            else:
                result |= member
        return result

    def names(self) -> list[str]:
        return [m.name.lower() for m in Modifier if m is not Modifier.NONE and m in self]


def is_protected_like(modifiers: Modifier) -> bool:
    """True for protected members and for members with no public/private modifier.

    Package-private members deliberately count as protected.
    """
    if Modifier.PROTECTED in modifiers:
        return True
    return Modifier.PUBLIC not in modifiers and Modifier.PRIVATE not in modifiers
