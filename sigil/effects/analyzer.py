"""Whole-program purity analysis.

Every function carries a fixed purity label. A pure function may only call
callables that are pure and never reach an effectful one, directly or
through other functions. The checker resolves call names on its own so it
can run and be tested without the type checker.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Sequence

from sigil.ast import (
    BinaryOp,
    CallExpr,
    CallStatement,
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
    Return,
    Statement,
    UnaryOp,
    VariableRef,
)
from sigil.budget import CompilationBudget
from sigil.diagnostics import Diagnostic, DiagnosticCode, Phase
from sigil.lang.keywords import suggest_name
from sigil.registry import DomainRegistry
from sigil.types.core import BASE_TYPES, DomainType

from .graph import EffectGraph, EffectNode

logger = logging.getLogger(__name__)


def iter_expression_calls(expr: Optional[Expression]) -> Iterator[CallExpr]:
    """Yield every call in ``expr`` in source order."""
    if expr is None or isinstance(expr, (Literal, VariableRef)):
        return
    if isinstance(expr, CallExpr):
        yield expr
        for arg in expr.args:
            yield from iter_expression_calls(arg)
    elif isinstance(expr, BinaryOp):
        yield from iter_expression_calls(expr.left)
        yield from iter_expression_calls(expr.right)
    elif isinstance(expr, UnaryOp):
        yield from iter_expression_calls(expr.operand)
    elif isinstance(expr, FieldAccess):
        yield from iter_expression_calls(expr.base)
    elif isinstance(expr, ListLiteral):
        for element in expr.elements:
            yield from iter_expression_calls(element)


def iter_calls(statements: Sequence[Statement]) -> Iterator[CallExpr]:
    """Yield every call in a block, nested blocks included, in source order."""
    for statement in statements:
        if isinstance(statement, LetBinding):
            yield from iter_expression_calls(statement.init)
        elif isinstance(statement, If):
            yield from iter_expression_calls(statement.condition)
            yield from iter_calls(statement.then_block)
            yield from iter_calls(statement.otherwise_block or [])
        elif isinstance(statement, ForEach):
            yield from iter_expression_calls(statement.iterable)
            yield from iter_calls(statement.body)
        elif isinstance(statement, CallStatement):
            yield from iter_expression_calls(statement.call)
        elif isinstance(statement, Return):
            yield from iter_expression_calls(statement.expr)
        elif isinstance(statement, ExpressionStatement):
            yield from iter_expression_calls(statement.expr)


class EffectChecker:
    """Builds the effect graph for a program and reports purity violations."""

    def __init__(self, registry: DomainRegistry, *, budget: Optional[CompilationBudget] = None):
        self.registry = registry
        self.budget = budget or CompilationBudget()
        self.graph = EffectGraph()
        self.diagnostics: List[Diagnostic] = []
        self.functions: Dict[str, FunctionDecl] = {}
        self.conversions: Dict[str, bool] = {}

    def error(self, code: str, message: str, call: CallExpr, *, hint: Optional[str] = None) -> None:
        at = call.callee_span or call
        self.diagnostics.append(
            Diagnostic.at(code, message, line=at.line, column=at.column, hint=hint, phase=Phase.EFFECTS)
        )

    def check(self, program: Program) -> List[Diagnostic]:
        self.build_graph(program)
        for fn in program.functions():
            if self.functions.get(fn.name) is fn and not fn.is_effectful:
                self.check_pure_function(fn)
        logger.debug(
            "Effect graph: %d nodes, %d call sites, %d diagnostics",
            len(self.graph.nodes), sum(1 for _ in self.graph.edges()), len(self.diagnostics),
        )
        return self.diagnostics

    # ------------------------------------------------------------------
    # Graph construction
    # ------------------------------------------------------------------
    def build_graph(self, program: Program) -> None:
        for fn in program.functions():
            fn.resolved_purity = fn.purity
            if fn.name not in self.functions:
                self.functions[fn.name] = fn
                self.graph.add_node(EffectNode(fn.name, "function", fn.purity))
        for name in sorted(self.registry.operations):
            self.graph.add_node(EffectNode(name, "operation", Purity.EFFECTFUL))
        for name in sorted(self.registry.helpers):
            self.graph.add_node(EffectNode(name, "helper", Purity.PURE))

        conversions = set(BASE_TYPES)
        conversions.update(
            name for name, t in self.registry.types.items() if isinstance(t, DomainType) and t.underlying is not None
        )
        conversions.update(alias.name for alias in program.type_aliases())

        for fn in program.functions():
            if self.functions.get(fn.name) is not fn:
                continue
            self.budget.check_time(fn.line, fn.column)
            for call in iter_calls(fn.body):
                node = self.resolve(call.callee, conversions)
                if node is None:
                    self.report_unresolved(fn, call)
                    continue
                call.resolved_purity = node.purity
                self.graph.add_edge(fn.name, node.name, call)

    def resolve(self, name: str, conversions: set) -> Optional[EffectNode]:
        if name in self.functions:
            return self.graph.nodes[name]
        if name in self.registry.helpers or name in self.registry.operations:
            return self.graph.nodes[name]
        if name in conversions:
            return self.graph.add_node(EffectNode(name, "conversion", Purity.PURE))
        return None

    def report_unresolved(self, fn: FunctionDecl, call: CallExpr) -> None:
        candidates = [name for name, node in self.graph.nodes.items() if node.kind != "conversion"]
        suggestion = suggest_name(call.callee, candidates)
        hint = f"Did you mean '{suggestion}'?" if suggestion else (
            "Declare the function or add the operation to the domain registry."
        )
        self.error(
            DiagnosticCode.UNRESOLVED_CALL,
            f"Call target '{call.callee}' in function '{fn.name}' cannot be resolved",
            call,
            hint=hint,
        )

    # ------------------------------------------------------------------
    # Purity
    # ------------------------------------------------------------------
    def check_pure_function(self, fn: FunctionDecl) -> None:
        for site in self.graph.call_sites(fn.name):
            callee = self.graph.nodes[site.callee]
            if site.callee == fn.name or not self.graph.reaches_effect(site.callee):
                continue
            # A callee whose only route to an effect runs back through ``fn``
            # is already covered by the violation at ``fn``'s own call.
            route = self.graph.path_to_effect(site.callee, avoiding=fn.name)
            if not route:
                continue
            path = [fn.name] + route
            ultimate = self.graph.nodes[path[-1]]
            if callee.is_effectful:
                message = f"Pure function '{fn.name}' calls effectful {callee.label}"
            else:
                message = (
                    f"Pure function '{fn.name}' calls {callee.label}, which reaches effectful "
                    f"{ultimate.label} ({' -> '.join(path)})"
                )
            self.error(
                DiagnosticCode.PURITY_VIOLATION,
                message,
                site.call,
                hint=(
                    f"Declare it as 'Define effectful function {fn.name}', or move the call to "
                    f"'{ultimate.name}' into an effectful function."
                ),
            )


def check_effects(
    program: Program,
    registry: DomainRegistry,
    *,
    budget: Optional[CompilationBudget] = None,
) -> List[Diagnostic]:
    """Check the purity discipline of ``program``; annotates purity on the AST."""
    return EffectChecker(registry, budget=budget).check(program)


__all__ = ["EffectChecker", "check_effects", "iter_calls", "iter_expression_calls"]
