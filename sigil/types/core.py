"""
Type representation for Sigil.

Types form a closed set of frozen variants. Equality is per variant:
base and list types compare structurally, domain and record types compare
by name only (nominal), so ``Email`` and ``String`` never unify.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class BaseType:
    """Built-in scalar: Boolean, Number, String or DateTime."""

    kind: str

    def __str__(self) -> str:
        return self.kind


@dataclass(frozen=True)
class ListType:
    """``List of T``"""

    element: "Type"

    def __str__(self) -> str:
        return f"List of {self.element}"


@dataclass(frozen=True)
class DomainType:
    """Nominal type; ``values`` is non-empty for a union of string literals."""

    name: str
    underlying: Optional["Type"] = field(default=None, compare=False)
    values: Tuple[str, ...] = field(default=(), compare=False)
    external: bool = field(default=False, compare=False)

    def __str__(self) -> str:
        return self.name

    def allows_literal(self, value: str) -> bool:
        return value in self.values


@dataclass(frozen=True)
class RecordType:
    """Nominal record. ``fields`` is filled after construction so records may refer to each other."""

    name: str
    fields: Dict[str, "Type"] = field(default_factory=dict, compare=False, repr=False)
    external: bool = field(default=False, compare=False)

    def __str__(self) -> str:
        return self.name

    def field_type(self, name: str) -> Optional["Type"]:
        return self.fields.get(name)


@dataclass(frozen=True)
class FunctionType:
    """Signature used for call resolution; ``returns`` is None for nothing."""

    params: Tuple["Type", ...] = ()
    returns: Optional["Type"] = None

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.params)
        return f"({params}) -> {stringify(self.returns)}"


@dataclass(frozen=True)
class ErrorType:
    """Placeholder for an expression that already produced a diagnostic.

    Compatible with every type so one mistake is reported once.
    """

    def __str__(self) -> str:
        return "<error>"


Type = Union[BaseType, ListType, DomainType, RecordType, FunctionType, ErrorType]


BOOLEAN = BaseType("Boolean")
NUMBER = BaseType("Number")
STRING = BaseType("String")
DATETIME = BaseType("DateTime")
ERROR = ErrorType()

BASE_TYPES: Dict[str, BaseType] = {
    t.kind: t for t in (BOOLEAN, NUMBER, STRING, DATETIME)
}

# "List" is reserved for the generic list constructor
BUILTIN_TYPE_NAMES = frozenset(BASE_TYPES) | {"List"}


def stringify(t: Optional[Type]) -> str:
    """Human-readable type name; ``None`` means the function returns nothing."""
    return "nothing" if t is None else str(t)


def is_error(t: Optional[Type]) -> bool:
    return isinstance(t, ErrorType)


def contains_error(t: Optional[Type]) -> bool:
    if isinstance(t, ErrorType):
        return True
    if isinstance(t, ListType):
        return contains_error(t.element)
    return False


def same_type(actual: Optional[Type], expected: Optional[Type]) -> bool:
    """Exact type equality, with :data:`ERROR` matching anything."""
    if contains_error(actual) or contains_error(expected):
        return True
    return actual == expected


__all__ = [
    "BaseType",
    "ListType",
    "DomainType",
    "RecordType",
    "FunctionType",
    "ErrorType",
    "Type",
    "BOOLEAN",
    "NUMBER",
    "STRING",
    "DATETIME",
    "ERROR",
    "BASE_TYPES",
    "BUILTIN_TYPE_NAMES",
    "stringify",
    "is_error",
    "contains_error",
    "same_type",
]
