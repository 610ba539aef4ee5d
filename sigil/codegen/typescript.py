"""
TypeScript backend.

Translates a fully checked program into one TypeScript module. The
translation is structural: each AST node variant has exactly one rule, and a
node that was never annotated by the checkers means an earlier phase is
broken, which raises :class:`~sigil.errors.InternalCompilerError`.

Output is deterministic: declarations keep source order, imports are sorted,
and nothing depends on hash ordering.
"""

from __future__ import annotations

import json
import logging
import math
from typing import TYPE_CHECKING, Callable, Dict, Iterator, List, Optional, Set

from sigil.ast import (
    BinaryOp,
    CallExpr,
    CallStatement,
    CallTargetKind,
    Expression,
    ExpressionStatement,
    FieldAccess,
    ForEach,
    FunctionDecl,
    If,
    LetBinding,
    ListLiteral,
    Literal,
    Program,
    Purity,
    RecordDecl,
    Return,
    Statement,
    TypeAliasDecl,
    TypeRef,
    UnaryOp,
    VariableRef,
)
from sigil.config import TargetLanguageConfig
from sigil.errors import InternalCompilerError
from sigil.types.core import BASE_TYPES, BaseType, DomainType, ListType, RecordType, Type

if TYPE_CHECKING:
    from sigil.registry import DomainRegistry

logger = logging.getLogger(__name__)

HEADER = "// Generated by sigil. Do not edit by hand."

BASE_TYPE_NAMES: Dict[str, str] = {
    "Boolean": "boolean",
    "Number": "number",
    "String": "string",
    "DateTime": "Date",
}

BINARY_OPERATORS: Dict[str, str] = {
    "or": "||",
    "and": "&&",
    "is": "===",
    "is not": "!==",
    "<": "<",
    ">": ">",
    "<=": "<=",
    ">=": ">=",
    "+": "+",
    "-": "-",
    "*": "*",
    "/": "/",
}

# TypeScript binding strength of the emitted operators
PRECEDENCE: Dict[str, int] = {
    "||": 1,
    "&&": 2,
    "===": 3,
    "!==": 3,
    "<": 4,
    ">": 4,
    "<=": 4,
    ">=": 4,
    "+": 5,
    "-": 5,
    "*": 6,
    "/": 6,
}

RESERVED_WORDS = frozenset({
    "any", "arguments", "as", "async", "await", "boolean", "break", "case", "catch", "class",
    "const", "continue", "debugger", "declare", "default", "delete", "do", "else", "enum",
    "eval", "export", "extends", "false", "finally", "for", "from", "function", "get", "if",
    "implements", "import", "in", "instanceof", "interface", "let", "module", "namespace",
    "never", "new", "null", "number", "object", "of", "package", "private", "protected",
    "public", "require", "return", "set", "static", "string", "super", "switch", "symbol",
    "this", "throw", "true", "try", "type", "typeof", "undefined", "unknown", "var", "void",
    "while", "with", "yield",
})

# Type names the emitted module relies on, plus predefined type keywords
RESERVED_TYPE_NAMES = RESERVED_WORDS | frozenset({"Array", "Date", "Promise", "ReadonlyArray", "bigint"})


def safe_identifier(name: str) -> str:
    """Append ``_`` to names TypeScript reserves."""
    return f"{name}_" if name in RESERVED_WORDS else name


def safe_type_name(name: str) -> str:
    """Append ``_`` to type names that would clash with TypeScript's own."""
    return f"{name}_" if name in RESERVED_TYPE_NAMES else name


def _import_clause(names: Set[str], rename: Callable[[str], str]) -> str:
    return ", ".join(
        f"{name} as {rename(name)}" if rename(name) != name else name
        for name in sorted(names)
    )


def _binding_names(statements: List[Statement]) -> Iterator[str]:
    for statement in statements:
        if isinstance(statement, LetBinding):
            yield statement.name
        elif isinstance(statement, If):
            yield from _binding_names(statement.then_block)
            yield from _binding_names(statement.otherwise_block or [])
        elif isinstance(statement, ForEach):
            yield statement.item_name
            yield from _binding_names(statement.body)


def format_number(value: object) -> str:
    if isinstance(value, bool):
        raise InternalCompilerError(f"Boolean {value!r} emitted as a number")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InternalCompilerError(f"Non-finite number literal {value!r}")
        if value.is_integer():
            return str(int(value))
        return repr(value)
    raise InternalCompilerError(f"Invalid number literal {value!r}")


def format_string(value: str) -> str:
    return json.dumps(value, ensure_ascii=True)


class TypeScriptEmitter:
    """Emit one TypeScript module for a checked program."""

    def __init__(self, registry: "DomainRegistry", config: Optional[TargetLanguageConfig] = None):
        self.registry = registry
        self.config = config or TargetLanguageConfig()
        self.lines: List[str] = []
        self.depth = 0
        self.type_imports: Set[str] = set()
        self.value_imports: Set[str] = set()
        # Sigil name -> emitted name, innermost scope last
        self.scopes: List[Dict[str, str]] = []
        self.module_names: Set[str] = set()
        self.taken: Set[str] = set()

    # ------------------------------------------------------------------
    # Output buffer
    # ------------------------------------------------------------------
    def line(self, text: str = "") -> None:
        self.lines.append(f"{self.config.indent * self.depth}{text}" if text else "")

    # ------------------------------------------------------------------
    # Module
    # ------------------------------------------------------------------
    def emit(self, program: Program) -> str:
        self.module_names = {safe_identifier(fn.name) for fn in program.functions()}
        self.module_names |= {safe_identifier(name) for name in self.registry.operations}
        self.module_names |= {safe_identifier(name) for name in self.registry.helpers}
        for index, decl in enumerate(program.declarations):
            if index:
                self.line()
            self.emit_declaration(decl)

        preamble: List[str] = []
        if self.config.header:
            preamble.append(HEADER)
        module = format_string(self.config.domain_module)
        if self.type_imports:
            preamble.append(f"import type {{ {_import_clause(self.type_imports, safe_type_name)} }} from {module};")
        if self.value_imports:
            preamble.append(f"import {{ {_import_clause(self.value_imports, safe_identifier)} }} from {module};")
        if preamble and self.lines:
            preamble.append("")
        text = "\n".join(preamble + self.lines) + "\n"
        logger.debug(
            "Emitted %d TypeScript lines (%d type imports, %d value imports)",
            len(self.lines), len(self.type_imports), len(self.value_imports),
        )
        return text

    def emit_declaration(self, decl: object) -> None:
        if isinstance(decl, TypeAliasDecl):
            self.emit_type_alias(decl)
        elif isinstance(decl, RecordDecl):
            self.emit_record(decl)
        elif isinstance(decl, FunctionDecl):
            self.emit_function(decl)
        else:
            raise InternalCompilerError(f"No TypeScript rule for declaration {type(decl).__name__}")

    def emit_type_alias(self, decl: TypeAliasDecl) -> None:
        if decl.literals:
            rendered = " | ".join(format_string(value) for value in decl.literals)
        elif decl.underlying is not None:
            rendered = self.type_ref(decl.underlying)
        else:
            raise InternalCompilerError(f"Type '{decl.name}' has neither literals nor an underlying type")
        self.line(f"export type {safe_type_name(decl.name)} = {rendered};")

    def emit_record(self, decl: RecordDecl) -> None:
        self.line(f"export interface {safe_type_name(decl.name)} {{")
        self.depth += 1
        for record_field in decl.fields:
            self.line(f"readonly {record_field.name}: {self.type_ref(record_field.type_ref)};")
        self.depth -= 1
        self.line("}")

    def emit_function(self, fn: FunctionDecl) -> None:
        if fn.resolved_purity is None:
            raise InternalCompilerError(f"Function '{fn.name}' reached the emitter without a resolved purity")
        self.scopes = [{p.name: safe_identifier(p.name) for p in fn.parameters}]
        self.taken = set(self.module_names) | set(self.scopes[0].values())
        self.taken |= {safe_identifier(name) for name in _binding_names(fn.body)}
        params = ", ".join(f"{self.scopes[0][p.name]}: {self.type_ref(p.type_ref)}" for p in fn.parameters)
        returns = self.type_ref(fn.return_type) if fn.return_type is not None else "void"
        name = safe_identifier(fn.name)
        if fn.resolved_purity is Purity.EFFECTFUL:
            self.line(f"export async function {name}({params}): Promise<{returns}> {{")
        else:
            self.line(f"export function {name}({params}): {returns} {{")
        self.emit_block(fn.body)
        self.line("}")
        self.scopes = []

    # ------------------------------------------------------------------
    # Local names
    # ------------------------------------------------------------------
    def bind_local(self, name: str) -> str:
        """Name a new local, renaming it when it shadows an enclosing one.

        TypeScript block scoping would otherwise let an inner ``const`` hide
        the outer binding for the whole block, including reads before it.
        """
        emitted = safe_identifier(name)
        if any(name in scope for scope in self.scopes):
            suffix = 1
            while f"{name}_{suffix}" in self.taken:
                suffix += 1
            emitted = f"{name}_{suffix}"
            self.taken.add(emitted)
        self.scopes[-1][name] = emitted
        return emitted

    def local_name(self, name: str) -> str:
        for scope in reversed(self.scopes):
            if name in scope:
                return scope[name]
        return safe_identifier(name)

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------
    def type_ref(self, ref: TypeRef) -> str:
        if ref.name == "List":
            if ref.element is None:
                raise InternalCompilerError("'List' type without an element type")
            return f"ReadonlyArray<{self.type_ref(ref.element)}>"
        if ref.name in BASE_TYPE_NAMES:
            return BASE_TYPE_NAMES[ref.name]
        registered = self.registry.types.get(ref.name)
        if registered is not None:
            return self.render_type(registered)
        return safe_type_name(ref.name)

    def render_type(self, t: Type) -> str:
        if isinstance(t, BaseType):
            return BASE_TYPE_NAMES[t.kind]
        if isinstance(t, ListType):
            return f"ReadonlyArray<{self.render_type(t.element)}>"
        if isinstance(t, (DomainType, RecordType)):
            if t.external:
                self.type_imports.add(t.name)
            return safe_type_name(t.name)
        raise InternalCompilerError(f"No TypeScript rendering for type {t!r}")

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------
    def emit_block(self, statements: List[Statement], scope: Optional[Dict[str, str]] = None) -> None:
        self.depth += 1
        self.scopes.append(scope if scope is not None else {})
        for statement in statements:
            self.emit_statement(statement)
        self.scopes.pop()
        self.depth -= 1

    def emit_statement(self, statement: Statement) -> None:
        if isinstance(statement, LetBinding):
            init = self.expression(statement.init)
            self.line(f"const {self.bind_local(statement.name)} = {init};")
        elif isinstance(statement, If):
            self.line(f"if ({self.expression(statement.condition)}) {{")
            self.emit_block(statement.then_block)
            if statement.otherwise_block is not None:
                self.line("} else {")
                self.emit_block(statement.otherwise_block)
            self.line("}")
        elif isinstance(statement, ForEach):
            iterable = self.expression(statement.iterable)
            self.scopes.append({})
            item = self.bind_local(statement.item_name)
            loop_scope = self.scopes.pop()
            self.line(f"for (const {item} of {iterable}) {{")
            self.emit_block(statement.body, loop_scope)
            self.line("}")
        elif isinstance(statement, CallStatement):
            self.line(f"{self.call(statement.call)};")
        elif isinstance(statement, Return):
            if statement.expr is None:
                self.line("return;")
            else:
                self.line(f"return {self.expression(statement.expr)};")
        elif isinstance(statement, ExpressionStatement):
            self.line(f"{self.expression(statement.expr)};")
        else:
            raise InternalCompilerError(f"No TypeScript rule for statement {type(statement).__name__}")

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------
    def expression(self, expr: Expression) -> str:
        if isinstance(expr, CallExpr):
            return self.call(expr)
        if expr.resolved_type is None:
            raise InternalCompilerError(
                f"{type(expr).__name__} at {expr.line}:{expr.column} reached the emitter without a type"
            )
        if isinstance(expr, Literal):
            if expr.literal_type == "String":
                return format_string(str(expr.value))
            if expr.literal_type == "Boolean":
                return "true" if expr.value else "false"
            return format_number(expr.value)
        if isinstance(expr, ListLiteral):
            return "[" + ", ".join(self.expression(element) for element in expr.elements) + "]"
        if isinstance(expr, VariableRef):
            return self.local_name(expr.name)
        if isinstance(expr, UnaryOp):
            operand = self.expression(expr.operand)
            if isinstance(expr.operand, BinaryOp) or (
                isinstance(expr.operand, UnaryOp) and expr.operand.op == expr.op
            ):
                operand = f"({operand})"
            return f"!{operand}" if expr.op == "not" else f"-{operand}"
        if isinstance(expr, BinaryOp):
            return self.binary(expr)
        if isinstance(expr, FieldAccess):
            base = self.expression(expr.base)
            if isinstance(expr.base, (BinaryOp, UnaryOp)) or self._is_awaited(expr.base):
                base = f"({base})"
            return f"{base}.{expr.field}"
        raise InternalCompilerError(f"No TypeScript rule for expression {type(expr).__name__}")

    def binary(self, expr: BinaryOp) -> str:
        operator = BINARY_OPERATORS.get(expr.op)
        if operator is None:
            raise InternalCompilerError(f"No TypeScript operator for '{expr.op}'")
        precedence = PRECEDENCE[operator]
        left = self._operand(expr.left, precedence, right_side=False)
        right = self._operand(expr.right, precedence, right_side=True)
        return f"{left} {operator} {right}"

    def _operand(self, expr: Expression, parent: int, *, right_side: bool) -> str:
        text = self.expression(expr)
        if isinstance(expr, BinaryOp):
            child = PRECEDENCE[BINARY_OPERATORS[expr.op]]
            if child < parent or (right_side and child == parent):
                return f"({text})"
        return text

    def _is_awaited(self, expr: Expression) -> bool:
        return (
            isinstance(expr, CallExpr)
            and expr.target_kind is not CallTargetKind.CONVERSION
            and expr.resolved_purity is Purity.EFFECTFUL
        )

    def call(self, call: CallExpr) -> str:
        if call.target_kind is None or call.resolved_purity is None:
            raise InternalCompilerError(
                f"Call to '{call.callee}' at {call.line}:{call.column} reached the emitter unresolved"
            )
        if call.target_kind is CallTargetKind.CONVERSION:
            if len(call.args) != 1:
                raise InternalCompilerError(f"Conversion '{call.callee}' with {len(call.args)} arguments")
            return f"({self._conversion_operand(call.args[0])} as {self.conversion_target(call.callee)})"
        if call.target_kind in (CallTargetKind.OPERATION, CallTargetKind.HELPER):
            self.value_imports.add(call.callee)
        args = ", ".join(self.expression(arg) for arg in call.args)
        text = f"{safe_identifier(call.callee)}({args})"
        if call.resolved_purity is Purity.EFFECTFUL:
            return f"await {text}"
        return text

    def _conversion_operand(self, expr: Expression) -> str:
        text = self.expression(expr)
        if isinstance(expr, (BinaryOp, UnaryOp)) or self._is_awaited(expr):
            return f"({text})"
        return text

    def conversion_target(self, name: str) -> str:
        if name in BASE_TYPES:
            return BASE_TYPE_NAMES[name]
        registered = self.registry.types.get(name)
        if registered is not None:
            return self.render_type(registered)
        return safe_type_name(name)


__all__ = [
    "TypeScriptEmitter",
    "safe_identifier",
    "safe_type_name",
    "format_number",
    "format_string",
    "RESERVED_WORDS",
    "RESERVED_TYPE_NAMES",
]
