"""Top-level declarations and the program root."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Union

from .expressions import Node, Purity
from .source_location import SourceSpan
from .statements import Statement


@dataclass
class TypeRef(Node):
    """A type as written in source: a name, or ``List of <element>``."""

    name: str
    element: Optional["TypeRef"] = None

    def describe(self) -> str:
        if self.element is not None:
            return f"{self.name} of {self.element.describe()}"
        return self.name


@dataclass
class Parameter(Node):
    name: str
    type_ref: TypeRef


@dataclass
class FunctionDecl(Node):
    name: str
    parameters: List[Parameter] = field(default_factory=list)
    return_type: Optional[TypeRef] = None
    purity: Purity = Purity.PURE
    body: List[Statement] = field(default_factory=list)
    name_span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)
    end_span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)
    resolved_purity: Optional[Purity] = field(default=None, init=False, compare=False, repr=False)

    @property
    def is_effectful(self) -> bool:
        return self.purity is Purity.EFFECTFUL


@dataclass
class TypeAliasDecl(Node):
    """``Define type X as String.`` or ``Define type X as "a" or "b".``"""

    name: str
    underlying: Optional[TypeRef] = None
    literals: List[str] = field(default_factory=list)


@dataclass
class RecordField(Node):
    name: str
    type_ref: TypeRef


@dataclass
class RecordDecl(Node):
    name: str
    fields: List[RecordField] = field(default_factory=list)


Declaration = Union[FunctionDecl, TypeAliasDecl, RecordDecl]


@dataclass
class Program(Node):
    """Parsed compilation unit; declarations in source order."""

    declarations: List[Declaration] = field(default_factory=list)

    def functions(self) -> Iterator[FunctionDecl]:
        return (decl for decl in self.declarations if isinstance(decl, FunctionDecl))

    def records(self) -> Iterator[RecordDecl]:
        return (decl for decl in self.declarations if isinstance(decl, RecordDecl))

    def type_aliases(self) -> Iterator[TypeAliasDecl]:
        return (decl for decl in self.declarations if isinstance(decl, TypeAliasDecl))


__all__ = [
    "TypeRef",
    "Parameter",
    "FunctionDecl",
    "TypeAliasDecl",
    "RecordField",
    "RecordDecl",
    "Declaration",
    "Program",
]
