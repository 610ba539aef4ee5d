"""Statement nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .expressions import Expression, Node
from .source_location import SourceSpan


@dataclass
class Statement(Node):
    """Base class for statements."""


@dataclass
class LetBinding(Statement):
    name: str
    init: Expression
    name_span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)


@dataclass
class If(Statement):
    condition: Expression
    then_block: List[Statement] = field(default_factory=list)
    otherwise_block: Optional[List[Statement]] = None


@dataclass
class ForEach(Statement):
    item_name: str
    iterable: Expression
    body: List[Statement] = field(default_factory=list)
    item_span: Optional[SourceSpan] = field(default=None, compare=False, repr=False)


@dataclass
class CallStatement(Statement):
    """``Call name with args.``; the call itself is kept as a :class:`CallExpr`."""

    call: Expression

    @property
    def callee(self) -> str:
        return self.call.callee  # type: ignore[attr-defined]

    @property
    def args(self) -> List[Expression]:
        return self.call.args  # type: ignore[attr-defined]


@dataclass
class Return(Statement):
    expr: Optional[Expression] = None


@dataclass
class ExpressionStatement(Statement):
    expr: Expression


__all__ = [
    "Statement",
    "LetBinding",
    "If",
    "ForEach",
    "CallStatement",
    "Return",
    "ExpressionStatement",
]
