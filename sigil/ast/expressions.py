"""Expression nodes.

The type checker fills ``resolved_type`` on every expression and
``target_kind``/``resolved_purity`` on calls. Annotations never change the
shape of the tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional, Union

from .source_location import SourceSpan

if TYPE_CHECKING:
    from sigil.types.core import Type


class Purity(str, Enum):
    """Effect label of a callable."""

    PURE = "pure"
    EFFECTFUL = "effectful"

    def __str__(self) -> str:
        return self.value


class CallTargetKind(str, Enum):
    """What a call name resolved to."""

    FUNCTION = "function"
    OPERATION = "operation"
    HELPER = "helper"
    CONVERSION = "conversion"


@dataclass
class Node:
    span: Optional[SourceSpan] = field(default=None, kw_only=True, compare=False, repr=False)

    @property
    def line(self) -> int:
        return self.span.line if self.span else 1

    @property
    def column(self) -> int:
        return self.span.column if self.span else 1


@dataclass
class Expression(Node):
    """Base class for all expression types."""

    resolved_type: Optional["Type"] = field(default=None, init=False, compare=False, repr=False)


@dataclass
class Literal(Expression):
    """String, number or boolean constant; ``literal_type`` is its base type name."""

    value: Union[str, int, float, bool]
    literal_type: str


@dataclass
class ListLiteral(Expression):
    elements: List[Expression] = field(default_factory=list)


@dataclass
class VariableRef(Expression):
    name: str


@dataclass
class UnaryOp(Expression):
    op: str
    operand: Expression


@dataclass
class BinaryOp(Expression):
    op: str
    left: Expression
    right: Expression


@dataclass
class CallExpr(Expression):
    callee: str
    args: List[Expression] = field(default_factory=list)
    callee_span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)
    target_kind: Optional[CallTargetKind] = field(default=None, init=False, compare=False, repr=False)
    resolved_purity: Optional[Purity] = field(default=None, init=False, compare=False, repr=False)


@dataclass
class FieldAccess(Expression):
    base: Expression
    field: str
    field_span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)


def literal_value(expr: Any) -> Optional[str]:
    """Return the string value when ``expr`` is a string literal."""

    if isinstance(expr, Literal) and expr.literal_type == "String":
        return str(expr.value)
    return None


__all__ = [
    "Purity",
    "CallTargetKind",
    "Node",
    "Expression",
    "Literal",
    "ListLiteral",
    "VariableRef",
    "UnaryOp",
    "BinaryOp",
    "CallExpr",
    "FieldAccess",
    "literal_value",
]
