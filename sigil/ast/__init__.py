"""AST node definitions for the Sigil language."""

from .declarations import (
    Declaration,
    FunctionDecl,
    Parameter,
    Program,
    RecordDecl,
    RecordField,
    TypeAliasDecl,
    TypeRef,
)
from .expressions import (
    BinaryOp,
    CallExpr,
    CallTargetKind,
    Expression,
    FieldAccess,
    ListLiteral,
    Literal,
    Node,
    Purity,
    UnaryOp,
    VariableRef,
    literal_value,
)
from .source_location import SourcePosition, SourceSpan
from .statements import (
    CallStatement,
    ExpressionStatement,
    ForEach,
    If,
    LetBinding,
    Return,
    Statement,
)

__all__ = [
    "SourcePosition",
    "SourceSpan",
    "Node",
    "Purity",
    "CallTargetKind",
    "Expression",
    "Literal",
    "ListLiteral",
    "VariableRef",
    "UnaryOp",
    "BinaryOp",
    "CallExpr",
    "FieldAccess",
    "literal_value",
    "Statement",
    "LetBinding",
    "If",
    "ForEach",
    "CallStatement",
    "Return",
    "ExpressionStatement",
    "TypeRef",
    "Parameter",
    "FunctionDecl",
    "TypeAliasDecl",
    "RecordField",
    "RecordDecl",
    "Declaration",
    "Program",
]
