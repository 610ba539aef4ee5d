"""Sigil type system and static type checker."""

from .checker import TypeChecker, check_types
from .core import (
    BASE_TYPES,
    BOOLEAN,
    DATETIME,
    ERROR,
    NUMBER,
    STRING,
    BaseType,
    DomainType,
    ErrorType,
    FunctionType,
    ListType,
    RecordType,
    Type,
    stringify,
)
from .scope import Binding, Scope

__all__ = [
    "TypeChecker",
    "check_types",
    "BASE_TYPES",
    "BOOLEAN",
    "DATETIME",
    "ERROR",
    "NUMBER",
    "STRING",
    "BaseType",
    "DomainType",
    "ErrorType",
    "FunctionType",
    "ListType",
    "RecordType",
    "Type",
    "stringify",
    "Binding",
    "Scope",
]
