"""
Static type checker for Sigil programs.

Runs after parsing and before the effect checker. Pass one collects every
type, record and function declaration so declarations may appear in any
order; pass two walks each function body with a fresh scope chain, infers
expression types, and records them on the AST (``resolved_type`` and, for
calls, ``target_kind``).

Every problem becomes a :class:`~sigil.diagnostics.Diagnostic`; the checker
never stops at the first error. Expressions that already failed get the
``ERROR`` type so a single mistake is reported once.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple, Union

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
    Node,
    Program,
    RecordDecl,
    Return,
    SourceSpan,
    Statement,
    TypeAliasDecl,
    TypeRef,
    UnaryOp,
    VariableRef,
    literal_value,
)
from sigil.budget import CompilationBudget
from sigil.diagnostics import Diagnostic, DiagnosticCode, Phase
from sigil.lang.keywords import suggest_name

from .core import (
    BASE_TYPES,
    BOOLEAN,
    BUILTIN_TYPE_NAMES,
    DATETIME,
    ERROR,
    NUMBER,
    STRING,
    BaseType,
    DomainType,
    FunctionType,
    ListType,
    RecordType,
    Type,
    contains_error,
    is_error,
    same_type,
    stringify,
)
from .scope import Scope

if TYPE_CHECKING:
    from sigil.registry import DomainRegistry

logger = logging.getLogger(__name__)

Declared = Union[FunctionDecl, TypeAliasDecl, RecordDecl]

LITERAL_TYPES = {"Number": NUMBER, "String": STRING, "Boolean": BOOLEAN}
ARITHMETIC_OPERATORS = ("-", "*", "/")
ORDERING_OPERATORS = ("<", ">", "<=", ">=")


def _quoted(values: Iterable[str]) -> str:
    return ", ".join(json.dumps(value) for value in values)


class TypeChecker:
    """
    Type checker for a single compilation.

    Instances hold per-compilation state and must not be shared between
    threads; the registry they read is immutable.
    """

    def __init__(self, registry: DomainRegistry, *, budget: Optional[CompilationBudget] = None):
        self.registry = registry
        self.budget = budget or CompilationBudget()
        self.diagnostics: List[Diagnostic] = []

        self.declared: Dict[str, Declared] = {}
        self.types: Dict[str, Type] = {}
        self.functions: Dict[str, FunctionDecl] = {}
        self.signatures: Dict[int, FunctionType] = {}
        self._alias_decls: Dict[str, TypeAliasDecl] = {}
        self._resolving: List[str] = []

        self.current_function: Optional[FunctionDecl] = None
        self.current_return: Optional[Type] = None

    # ====================================================================
    # Diagnostics
    # ====================================================================

    def error(
        self,
        code: str,
        message: str,
        at: Union[Node, SourceSpan, None],
        *,
        hint: Optional[str] = None,
    ) -> None:
        line, column = (at.line, at.column) if at is not None else (1, 1)
        self.diagnostics.append(
            Diagnostic.at(code, message, line=line, column=column, hint=hint, phase=Phase.TYPES)
        )

    def mismatch(self, message: str, at: Union[Node, SourceSpan, None], *, hint: Optional[str] = None) -> None:
        self.error(DiagnosticCode.TYPE_MISMATCH, message, at, hint=hint)

    # ====================================================================
    # Entry point
    # ====================================================================

    def check(self, program: Program) -> List[Diagnostic]:
        self.collect_declarations(program)
        for fn in program.functions():
            self.check_function(fn)
        logger.debug(
            "Type checked %d declarations: %d diagnostics",
            len(program.declarations), len(self.diagnostics),
        )
        return self.diagnostics

    # ====================================================================
    # Pass 1: declarations
    # ====================================================================

    def collect_declarations(self, program: Program) -> None:
        for decl in program.declarations:
            if not self._register_name(decl):
                continue
            if isinstance(decl, RecordDecl):
                self.types[decl.name] = RecordType(decl.name)
            elif isinstance(decl, TypeAliasDecl):
                self._alias_decls[decl.name] = decl
            elif isinstance(decl, FunctionDecl):
                self.functions[decl.name] = decl

        for name in list(self._alias_decls):
            self._define_alias(name)

        for decl in program.records():
            record = self.types.get(decl.name)
            if self.declared.get(decl.name) is not decl or not isinstance(record, RecordType):
                continue
            for record_field in decl.fields:
                if record_field.name in record.fields:
                    self.error(
                        DiagnosticCode.DUPLICATE_DECLARATION,
                        f"Record '{decl.name}' declares field '{record_field.name}' more than once",
                        record_field,
                        hint="Remove or rename the repeated field.",
                    )
                    continue
                record.fields[record_field.name] = self.resolve_type_ref(record_field.type_ref)

        for fn in program.functions():
            params = tuple(self.resolve_type_ref(param.type_ref) for param in fn.parameters)
            returns = self.resolve_type_ref(fn.return_type) if fn.return_type is not None else None
            self.signatures[id(fn)] = FunctionType(params, returns)

    def _register_name(self, decl: Declared) -> bool:
        at = getattr(decl, "name_span", None) or decl
        if decl.name == "<error>":
            return False
        if decl.name in BUILTIN_TYPE_NAMES:
            self.error(
                DiagnosticCode.DUPLICATE_DECLARATION,
                f"'{decl.name}' is a built-in type and cannot be redeclared",
                at,
                hint=f"Choose a different name than '{decl.name}'.",
            )
            return False
        if decl.name in self.registry.declared_names():
            self.error(
                DiagnosticCode.DUPLICATE_DECLARATION,
                f"'{decl.name}' is already declared in the domain registry",
                at,
                hint=f"Use the registry's '{decl.name}' directly or choose a different name.",
            )
            return False
        previous = self.declared.get(decl.name)
        if previous is not None:
            self.error(
                DiagnosticCode.DUPLICATE_DECLARATION,
                f"'{decl.name}' is already declared at line {previous.line}",
                at,
                hint="Each function, type and record needs a unique name.",
            )
            return False
        self.declared[decl.name] = decl
        return True

    def _define_alias(self, name: str) -> Type:
        if name in self.types:
            return self.types[name]
        decl = self._alias_decls[name]
        if name in self._resolving:
            self.error(
                DiagnosticCode.UNKNOWN_TYPE,
                f"Type '{name}' is defined in terms of itself",
                decl,
                hint="Define the type as a base type or a set of string literals.",
            )
            self.types[name] = ERROR
            return ERROR
        self._resolving.append(name)
        try:
            if decl.literals:
                defined: Type = DomainType(name, underlying=STRING, values=tuple(decl.literals))
            else:
                underlying = self.resolve_type_ref(decl.underlying) if decl.underlying is not None else ERROR
                defined = DomainType(name, underlying=underlying)
        finally:
            self._resolving.pop()
        self.types.setdefault(name, defined)
        return self.types[name]

    def known_type_names(self) -> List[str]:
        return sorted(set(BASE_TYPES) | set(self.types) | set(self._alias_decls) | set(self.registry.types))

    def lookup_type(self, name: str) -> Optional[Type]:
        if name in BASE_TYPES:
            return BASE_TYPES[name]
        if name in self.types:
            return self.types[name]
        if name in self._alias_decls:
            return self._define_alias(name)
        return self.registry.lookup_type(name)

    def resolve_type_ref(self, ref: TypeRef) -> Type:
        if ref.name == "List":
            if ref.element is None:
                self.error(
                    DiagnosticCode.UNKNOWN_TYPE,
                    "'List' needs an element type",
                    ref,
                    hint="Write 'List of <Type>', for example 'List of String'.",
                )
                return ERROR
            return ListType(self.resolve_type_ref(ref.element))
        resolved = self.lookup_type(ref.name)
        if resolved is not None:
            return resolved
        suggestion = suggest_name(ref.name, self.known_type_names())
        hint = f"Did you mean '{suggestion}'?" if suggestion else (
            "Declare it with 'Define type' or 'Define record', or add it to the domain registry."
        )
        self.error(DiagnosticCode.UNKNOWN_TYPE, f"Unknown type '{ref.name}'", ref, hint=hint)
        return ERROR

    # ====================================================================
    # Pass 2: function bodies
    # ====================================================================

    def check_function(self, fn: FunctionDecl) -> None:
        signature = self.signatures[id(fn)]
        self.current_function = fn
        self.current_return = signature.returns
        scope = Scope()
        for param, param_type in zip(fn.parameters, signature.params):
            self.bind(scope, param.name, param_type, param)

        returns = self.check_block(fn.body, scope)
        if fn.return_type is not None and not returns:
            self.error(
                DiagnosticCode.MISSING_RETURN,
                f"Function '{fn.name}' must return {stringify(signature.returns)} "
                f"but not every path ends in 'Return'",
                fn.name_span or fn,
                hint=(
                    f"Add 'Return <value>.' before 'End function.', or give every 'If' an "
                    f"'Otherwise:' branch that returns."
                ),
            )
        self.current_function = None
        self.current_return = None

    def bind(self, scope: Scope, name: str, type_: Type, at: Union[Node, SourceSpan, None]) -> None:
        # Local names share one namespace with callables in the emitted module.
        fn = self.functions.get(name)
        if fn is not None or self.registry.lookup_callable(name) is not None:
            where = f"at line {fn.line}" if fn is not None else "in the domain registry"
            self.error(
                DiagnosticCode.DUPLICATE_DECLARATION,
                f"'{name}' is already declared {where} as a function",
                at,
                hint=f"Local names cannot reuse a function name; choose a different name than '{name}'.",
            )
            type_ = ERROR
        span = at if isinstance(at, SourceSpan) else getattr(at, "span", None)
        existing = scope.bind(name, type_, span)
        if existing is not None:
            where = f" at line {existing.span.line}" if existing.span is not None else ""
            self.error(
                DiagnosticCode.REBIND,
                f"'{name}' is already bound in this scope{where}",
                at,
                hint=f"Bindings are immutable; choose a new name instead of rebinding '{name}'.",
            )

    def check_block(self, statements: List[Statement], scope: Scope) -> bool:
        """Check ``statements`` in ``scope``; return whether the block definitely returns."""
        returns = False
        for statement in statements:
            self.budget.check_time(statement.line, statement.column)
            if self.check_statement(statement, scope):
                returns = True
        return returns

    def check_statement(self, statement: Statement, scope: Scope) -> bool:
        if isinstance(statement, LetBinding):
            value_type = self.infer(statement.init, scope)
            self.bind(scope, statement.name, value_type, statement.name_span or statement)
            return False

        if isinstance(statement, If):
            self.expect_boolean(statement.condition, scope, "'If' condition")
            then_returns = self.check_block(statement.then_block, scope.child())
            if statement.otherwise_block is None:
                return False
            otherwise_returns = self.check_block(statement.otherwise_block, scope.child())
            return then_returns and otherwise_returns

        if isinstance(statement, ForEach):
            self.check_for_each(statement, scope)
            return False

        if isinstance(statement, CallStatement):
            self.check_call(statement.call, scope, as_value=False)
            return False

        if isinstance(statement, Return):
            self.check_return(statement, scope)
            return True

        if isinstance(statement, ExpressionStatement):
            if isinstance(statement.expr, CallExpr):
                self.check_call(statement.expr, scope, as_value=False)
            else:
                self.infer(statement.expr, scope)
            return False

        raise TypeError(f"Unsupported statement {type(statement).__name__}")

    def check_for_each(self, statement: ForEach, scope: Scope) -> None:
        iterable_type = self.infer(statement.iterable, scope)
        if isinstance(iterable_type, ListType):
            item_type = iterable_type.element
        else:
            item_type = ERROR
            if not is_error(iterable_type):
                self.mismatch(
                    f"'For each' expects a List of T, but '{statement.item_name}' would iterate "
                    f"over a value of type {iterable_type}",
                    statement.iterable,
                    hint="Iterate over a value whose type is 'List of <Type>'.",
                )
        body_scope = scope.child()
        self.bind(body_scope, statement.item_name, item_type, statement.item_span or statement)
        self.check_block(statement.body, body_scope)

    def check_return(self, statement: Return, scope: Scope) -> None:
        fn = self.current_function
        name = fn.name if fn is not None else "<unknown>"
        valued = fn is not None and fn.return_type is not None
        expected = self.current_return
        if statement.expr is None:
            if valued:
                self.mismatch(
                    f"'Return.' without a value in function '{name}', which returns {stringify(expected)}",
                    statement,
                    hint="Write 'Return <value>.'.",
                )
            return
        actual = self.infer(statement.expr, scope, expected if valued else None)
        if not valued:
            self.mismatch(
                f"Function '{name}' returns nothing, but this 'Return' has a value of type {actual}",
                statement.expr,
                hint=f"Write 'Return.' or declare the function 'returning {actual}'.",
            )
            return
        if expected is not None and not self.assignable(statement.expr, actual, expected):
            self.mismatch(
                f"Function '{name}' must return {expected}, but this returns {actual}",
                statement.expr,
                hint=self.conversion_hint(statement.expr, actual, expected),
            )

    # ====================================================================
    # Expressions
    # ====================================================================

    def infer(self, expr: Expression, scope: Scope, expected: Optional[Type] = None) -> Type:
        result = self._infer(expr, scope, expected)
        expr.resolved_type = result
        return result

    def _infer(self, expr: Expression, scope: Scope, expected: Optional[Type]) -> Type:
        if isinstance(expr, Literal):
            return LITERAL_TYPES[expr.literal_type]

        if isinstance(expr, ListLiteral):
            return self.infer_list(expr, scope, expected)

        if isinstance(expr, VariableRef):
            return self.infer_variable(expr, scope)

        if isinstance(expr, UnaryOp):
            if expr.op == "not":
                self.expect_boolean(expr.operand, scope, "operand of 'not'")
                return BOOLEAN
            operand = self.infer(expr.operand, scope)
            if not same_type(operand, NUMBER):
                self.mismatch(f"Unary '-' needs a Number, but the operand has type {operand}", expr.operand)
            return NUMBER

        if isinstance(expr, BinaryOp):
            return self.infer_binary(expr, scope)

        if isinstance(expr, CallExpr):
            result = self.check_call(expr, scope, as_value=True, expected=expected)
            return ERROR if result is None else result

        if isinstance(expr, FieldAccess):
            return self.infer_field(expr, scope)

        raise TypeError(f"Unsupported expression {type(expr).__name__}")

    def infer_list(self, expr: ListLiteral, scope: Scope, expected: Optional[Type]) -> Type:
        if not expr.elements:
            if isinstance(expected, ListType) or is_error(expected):
                return expected  # type: ignore[return-value]
            self.mismatch(
                "Cannot determine the element type of an empty list",
                expr,
                hint="Use '[]' only where a 'List of <Type>' is expected, such as an argument or a 'Return'.",
            )
            return ERROR
        element_expected = expected.element if isinstance(expected, ListType) else None
        element_type: Optional[Type] = None
        for element in expr.elements:
            actual = self.infer(element, scope, element_expected)
            if element_type is None:
                element_type = actual
                if element_expected is not None and self.assignable(element, actual, element_expected):
                    element_type = element_expected
            elif not self.assignable(element, actual, element_type):
                self.mismatch(
                    f"List elements must share one type: expected {element_type}, found {actual}",
                    element,
                    hint=self.conversion_hint(element, actual, element_type),
                )
        return ListType(element_type if element_type is not None else ERROR)

    def infer_variable(self, expr: VariableRef, scope: Scope) -> Type:
        binding = scope.lookup(expr.name)
        if binding is not None:
            return binding.type
        if self.callable_arity(expr.name) == 0:
            hint: Optional[str] = f"'{expr.name}' is a function; call it with 'Call {expr.name}'."
        else:
            suggestion = suggest_name(expr.name, list(scope.visible_names()))
            hint = f"Did you mean '{suggestion}'?" if suggestion else "Bind it first with 'Let'."
        self.error(DiagnosticCode.UNRESOLVED_NAME, f"Unknown name '{expr.name}'", expr, hint=hint)
        return ERROR

    def infer_field(self, expr: FieldAccess, scope: Scope) -> Type:
        base = self.infer(expr.base, scope)
        if is_error(base):
            return ERROR
        at = expr.field_span or expr
        if not isinstance(base, RecordType):
            self.mismatch(
                f"Cannot read field '{expr.field}' from a value of type {base}",
                at,
                hint="Field access needs a record value.",
            )
            return ERROR
        field_type = base.field_type(expr.field)
        if field_type is not None:
            return field_type
        suggestion = suggest_name(expr.field, list(base.fields))
        if suggestion:
            hint = f"Did you mean '{suggestion}'?"
        else:
            hint = f"Fields of '{base.name}': {', '.join(sorted(base.fields)) or 'none'}."
        self.error(
            DiagnosticCode.UNKNOWN_FIELD,
            f"Record '{base.name}' has no field '{expr.field}'",
            at,
            hint=hint,
        )
        return ERROR

    def infer_binary(self, expr: BinaryOp, scope: Scope) -> Type:
        op = expr.op
        if op in ("and", "or"):
            self.expect_boolean(expr.left, scope, f"left operand of '{op}'")
            self.expect_boolean(expr.right, scope, f"right operand of '{op}'")
            return BOOLEAN

        left = self.infer(expr.left, scope)
        right = self.infer(expr.right, scope, left)

        if op in ("is", "is not"):
            if not (self.assignable(expr.right, right, left) or self.assignable(expr.left, left, right)):
                self.mismatch(
                    f"Cannot compare {left} with {right} using '{op}'",
                    expr,
                    hint=self.comparison_hint(expr, left, right),
                )
            return BOOLEAN

        if op in ORDERING_OPERATORS:
            ordered = (same_type(left, NUMBER) and same_type(right, NUMBER)) or (
                same_type(left, DATETIME) and same_type(right, DATETIME)
            )
            if not ordered:
                self.mismatch(
                    f"'{op}' compares two Numbers or two DateTimes, not {left} and {right}",
                    expr,
                    hint=self.conversion_hint(expr.right, right, left),
                )
            return BOOLEAN

        if op == "+":
            for candidate in (NUMBER, STRING):
                if same_type(left, candidate) and same_type(right, candidate):
                    return candidate if not contains_error(left) else right
            self.mismatch(
                f"'+' adds two Numbers or joins two Strings, not {left} and {right}",
                expr,
                hint=self.conversion_hint(expr.right, right, left),
            )
            return ERROR

        if op in ARITHMETIC_OPERATORS:
            if not (same_type(left, NUMBER) and same_type(right, NUMBER)):
                self.mismatch(f"'{op}' needs two Numbers, not {left} and {right}", expr)
            return NUMBER

        raise TypeError(f"Unsupported operator {op!r}")

    def expect_boolean(self, expr: Expression, scope: Scope, what: str) -> None:
        actual = self.infer(expr, scope, BOOLEAN)
        if not same_type(actual, BOOLEAN):
            self.mismatch(
                f"The {what} must be Boolean, but has type {actual}",
                expr,
                hint="Compare values with 'is', 'is not', '<' or '>' to produce a Boolean.",
            )

    # ====================================================================
    # Calls
    # ====================================================================

    def callable_arity(self, name: str) -> Optional[int]:
        if name in self.functions:
            return len(self.functions[name].parameters)
        signature = self.registry.lookup_callable(name)
        return signature.arity if signature is not None else None

    def resolve_callee(self, name: str) -> Optional[Tuple[CallTargetKind, List[Tuple[str, Type]], Optional[Type]]]:
        """Return ``(kind, parameters, returns)`` for ``name`` or ``None``.

        Order: declared functions, registry helpers, registry operations,
        then conversions.
        """
        fn = self.functions.get(name)
        if fn is not None:
            signature = self.signatures[id(fn)]
            return CallTargetKind.FUNCTION, list(zip((p.name for p in fn.parameters), signature.params)), signature.returns
        helper = self.registry.helpers.get(name)
        if helper is not None:
            return CallTargetKind.HELPER, list(helper.parameters), helper.returns
        operation = self.registry.operations.get(name)
        if operation is not None:
            return CallTargetKind.OPERATION, list(operation.parameters), operation.returns
        target = self.lookup_type(name) if name not in BASE_TYPES else None
        if isinstance(target, DomainType) and target.underlying is not None:
            return CallTargetKind.CONVERSION, [("value", target.underlying)], target
        return None

    def check_call(
        self,
        call: CallExpr,
        scope: Scope,
        *,
        as_value: bool,
        expected: Optional[Type] = None,
    ) -> Optional[Type]:
        name = call.callee
        at = call.callee_span or call

        if name in BASE_TYPES:
            return self.check_base_conversion(call, scope)

        resolved = self.resolve_callee(name)
        if resolved is None:
            for arg in call.args:
                self.infer(arg, scope)
            self.report_unresolved_callee(call, scope)
            return ERROR

        kind, parameters, returns = resolved
        call.target_kind = kind
        if len(call.args) != len(parameters):
            self.error(
                DiagnosticCode.ARITY_MISMATCH,
                f"'{name}' expects {len(parameters)} argument(s) but was given {len(call.args)}",
                at,
                hint=f"Signature: {self.describe_signature(name, parameters)}.",
            )
            for arg in call.args:
                self.infer(arg, scope)
        else:
            for arg, (param_name, param_type) in zip(call.args, parameters):
                actual = self.infer(arg, scope, param_type)
                if not self.assignable(arg, actual, param_type):
                    target = f"'{name}'" if kind is not CallTargetKind.CONVERSION else f"conversion '{name} of'"
                    self.mismatch(
                        f"Argument '{param_name}' of {target} expects {param_type}, but was given {actual}",
                        arg,
                        hint=self.conversion_hint(arg, actual, param_type),
                    )

        if returns is None and as_value:
            self.mismatch(
                f"'{name}' returns nothing and cannot be used as a value",
                at,
                hint=f"Use it as a statement: 'Call {name}{' with ...' if parameters else ''}.'.",
            )
            return ERROR
        return returns

    def check_base_conversion(self, call: CallExpr, scope: Scope) -> Type:
        """``String of email`` turns a domain value back into its base type."""
        target = BASE_TYPES[call.callee]
        call.target_kind = CallTargetKind.CONVERSION
        if len(call.args) != 1:
            self.error(
                DiagnosticCode.ARITY_MISMATCH,
                f"Conversion '{call.callee} of' takes exactly 1 argument but was given {len(call.args)}",
                call.callee_span or call,
                hint=f"Write '{call.callee} of <value>'.",
            )
            for arg in call.args:
                self.infer(arg, scope)
            return target
        arg = call.args[0]
        actual = self.infer(arg, scope)
        if is_error(actual):
            return target
        if not (isinstance(actual, DomainType) and actual.underlying == target):
            self.mismatch(
                f"Conversion '{call.callee} of' needs a domain value whose underlying type is "
                f"{target}, but was given {actual}",
                arg,
                hint=None if actual != target else f"The value is already a {target}; remove the conversion.",
            )
        return target

    def report_unresolved_callee(self, call: CallExpr, scope: Scope) -> None:
        candidates = set(self.functions) | set(self.registry.operations) | set(self.registry.helpers)
        candidates |= {name for name, t in self.types.items() if isinstance(t, DomainType)}
        suggestion = suggest_name(call.callee, list(candidates))
        if suggestion:
            hint = f"Did you mean '{suggestion}'?"
        elif scope.lookup(call.callee) is not None:
            hint = f"'{call.callee}' is a variable, not a function."
        else:
            hint = "Declare it with 'Define function' or add it to the domain registry."
        target = self.lookup_type(call.callee)
        if target is not None:
            self.mismatch(
                f"Type '{call.callee}' has no underlying type to convert from",
                call.callee_span or call,
                hint="Only domain types with an underlying base type support '<Type> of <value>'.",
            )
            return
        self.error(
            DiagnosticCode.UNRESOLVED_NAME,
            f"Unknown function '{call.callee}'",
            call.callee_span or call,
            hint=hint,
        )

    @staticmethod
    def describe_signature(name: str, parameters: List[Tuple[str, Type]]) -> str:
        if not parameters:
            return name
        params = ", ".join(f"{param} as {type_}" for param, type_ in parameters)
        return f"{name} taking {params}"

    # ====================================================================
    # Compatibility
    # ====================================================================

    def assignable(self, expr: Expression, actual: Type, expected: Type) -> bool:
        if same_type(actual, expected):
            return True
        value = literal_value(expr)
        return value is not None and isinstance(expected, DomainType) and expected.allows_literal(value)

    def comparison_hint(self, expr: BinaryOp, left: Type, right: Type) -> Optional[str]:
        for literal_side, domain in ((expr.right, left), (expr.left, right)):
            value = literal_value(literal_side)
            if value is not None and isinstance(domain, DomainType) and domain.values:
                return f"'{domain.name}' allows only: {_quoted(domain.values)}."
        return self.conversion_hint(expr.right, right, left)

    def conversion_hint(self, expr: Optional[Expression], actual: Type, expected: Type) -> Optional[str]:
        """Suggest how to turn a value of ``actual`` into ``expected``."""
        if is_error(actual) or is_error(expected):
            return None
        value = literal_value(expr)
        if value is not None and isinstance(expected, DomainType) and expected.values:
            return f"'{expected.name}' allows only: {_quoted(expected.values)}."
        if isinstance(expected, DomainType) and expected.underlying == actual:
            return f"Convert explicitly with '{expected.name} of <value>'."
        if isinstance(actual, DomainType) and actual.underlying == expected and isinstance(expected, BaseType):
            return f"Convert explicitly with '{expected} of <value>'."
        for name in self._converters(actual, expected):
            return f"Use '{name} of <value>' to turn a {actual} into a {expected}."
        return None

    def _converters(self, actual: Type, expected: Type) -> List[str]:
        names = []
        for name, fn in self.functions.items():
            signature = self.signatures[id(fn)]
            if signature.params == (actual,) and signature.returns == expected:
                names.append(name)
        for name, helper in self.registry.helpers.items():
            if helper.function_type == FunctionType((actual,), expected):
                names.append(name)
        return sorted(names)


def check_types(
    program: Program,
    registry: DomainRegistry,
    *,
    budget: Optional[CompilationBudget] = None,
) -> List[Diagnostic]:
    """Type check ``program`` against ``registry``, annotating the AST in place."""
    return TypeChecker(registry, budget=budget).check(program)


__all__ = ["TypeChecker", "check_types"]
