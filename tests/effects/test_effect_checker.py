from __future__ import annotations

import pytest

from sigil.ast import CallExpr, Purity
from sigil.effects import EffectGraph, EffectNode, check_effects, iter_calls


@pytest.fixture
def effects(parse_ok, registry):
    def _effects(source: str):
        program = parse_ok(source)
        return program, check_effects(program, registry)

    return _effects


def test_pure_function_calling_operation(effects) -> None:
    _, diagnostics = effects("""
Define function notify taking order as Order:
  Call send_email with order.customer_email, "hi".
End function.
""")
    assert len(diagnostics) == 1
    diagnostic = diagnostics[0]
    assert diagnostic.code == "SIGIL_PURITY_VIOLATION"
    assert diagnostic.message == "Pure function 'notify' calls effectful operation 'send_email'"
    assert (diagnostic.location.line, diagnostic.location.column) == (3, 8)
    assert diagnostic.hint.startswith("Declare it as 'Define effectful function notify'")


def test_effectful_function_may_call_operation(effects) -> None:
    program, diagnostics = effects("""
Define effectful function notify taking order as Order:
  Call send_email with order.customer_email, "hi".
End function.
""")
    assert diagnostics == []
    fn = program.declarations[0]
    assert fn.resolved_purity is Purity.EFFECTFUL
    assert fn.body[0].call.resolved_purity is Purity.EFFECTFUL


def test_transitive_violation_names_path(effects) -> None:
    _, diagnostics = effects("""
Define function a taking order as Order:
  Call b with order.
End function.
Define function b taking order as Order:
  Call send_email with order.customer_email, "hi".
End function.
""")
    assert [d.message for d in diagnostics] == [
        "Pure function 'a' calls function 'b', which reaches effectful operation 'send_email' "
        "(a -> b -> send_email)",
        "Pure function 'b' calls effectful operation 'send_email'",
    ]
    assert diagnostics[0].location.line == 3


def test_pure_function_calling_effectful_function(effects) -> None:
    _, diagnostics = effects("""
Define function a taking order as Order:
  Call persist with order.
End function.
Define effectful function persist taking order as Order:
  Call save_order with order.
End function.
""")
    assert [d.message for d in diagnostics] == ["Pure function 'a' calls effectful function 'persist'"]


def test_pure_recursion_is_legal(effects) -> None:
    _, diagnostics = effects("""
Define function even taking n as Number returning Boolean:
  If n is 0 then:
    Return true.
  End if.
  Return odd of n - 1.
End function.
Define function odd taking n as Number returning Boolean:
  If n is 0 then:
    Return false.
  End if.
  Return even of n - 1.
End function.
Define function countdown taking n as Number returning Number:
  Return countdown of n - 1.
End function.
""")
    assert diagnostics == []


def test_effectful_recursion_is_legal(effects) -> None:
    _, diagnostics = effects("""
Define effectful function retry taking order as Order:
  Call save_order with order.
  Call retry with order.
End function.
""")
    assert diagnostics == []


def test_cycle_reaching_an_effect(effects) -> None:
    _, diagnostics = effects("""
Define function ping taking order as Order:
  Call pong with order.
End function.
Define function pong taking order as Order:
  Call ping with order.
  Call save_order with order.
End function.
""")
    assert [d.message for d in diagnostics] == [
        "Pure function 'ping' calls function 'pong', which reaches effectful operation 'save_order' "
        "(ping -> pong -> save_order)",
        "Pure function 'pong' calls effectful operation 'save_order'",
    ]
    assert [d.location.line for d in diagnostics] == [3, 7]


def test_cycle_partner_with_its_own_effect_is_reported(effects) -> None:
    _, diagnostics = effects("""
Define function ping taking order as Order:
  Call pong with order.
  Call save_order with order.
End function.
Define function pong taking order as Order:
  Call ping with order.
  Call save_order with order.
End function.
""")
    assert [d.message for d in diagnostics] == [
        "Pure function 'ping' calls function 'pong', which reaches effectful operation 'save_order' "
        "(ping -> pong -> save_order)",
        "Pure function 'ping' calls effectful operation 'save_order'",
        "Pure function 'pong' calls function 'ping', which reaches effectful operation 'save_order' "
        "(pong -> ping -> save_order)",
        "Pure function 'pong' calls effectful operation 'save_order'",
    ]


def test_helpers_and_conversions_are_pure(effects) -> None:
    program, diagnostics = effects("""
Define type Sku as String.
Define function clean taking raw as String, email as Email returning String:
  Let normalized be normalize_email of raw.
  Let wrapped be Email of raw.
  Let sku be Sku of raw.
  Return String of email.
End function.
""")
    assert diagnostics == []
    calls = list(iter_calls(program.declarations[1].body))
    assert [call.callee for call in calls] == ["normalize_email", "Email", "Sku", "String"]
    assert all(call.resolved_purity is Purity.PURE for call in calls)


def test_unresolved_call_target(effects) -> None:
    _, diagnostics = effects("""
Define effectful function f:
  Call frob with 1.
  Call send_emial with 1.
End function.
""")
    assert [d.code for d in diagnostics] == ["SIGIL_UNRESOLVED_CALL", "SIGIL_UNRESOLVED_CALL"]
    assert diagnostics[0].message == "Call target 'frob' in function 'f' cannot be resolved"
    assert diagnostics[0].hint == "Declare the function or add the operation to the domain registry."
    assert diagnostics[1].hint == "Did you mean 'send_email'?"


def test_nested_calls_are_found(effects) -> None:
    _, diagnostics = effects("""
Define function f taking id as String returning Number:
  Return format_total of (load_order of id).total.
End function.
""")
    assert [d.message for d in diagnostics] == ["Pure function 'f' calls effectful operation 'load_order'"]


class TestEffectGraph:
    def build(self, edges):
        graph = EffectGraph()
        graph.add_node(EffectNode("io", "operation", Purity.EFFECTFUL))
        for caller, callee in edges:
            for name in (caller, callee):
                graph.add_node(EffectNode(name, "function", Purity.PURE))
            graph.add_edge(caller, callee, CallExpr(callee=callee))
        return graph

    def test_shortest_witness_path(self) -> None:
        graph = self.build([("a", "b"), ("b", "c"), ("c", "io"), ("a", "io")])
        assert graph.path_to_effect("a") == ["a", "io"]
        assert graph.path_to_effect("b") == ["b", "c", "io"]

    def test_cycles_without_effects_terminate(self) -> None:
        graph = self.build([("p", "q"), ("q", "p")])
        assert not graph.reaches_effect("p")
        assert graph.path_to_effect("p") == []

    def test_adding_edges_invalidates_reachability(self) -> None:
        graph = self.build([("p", "q")])
        assert not graph.reaches_effect("p")
        graph.add_edge("q", "io", CallExpr(callee="io"))
        assert graph.path_to_effect("p") == ["p", "q", "io"]

    def test_path_avoiding_a_node(self) -> None:
        graph = self.build([("a", "b"), ("b", "a"), ("b", "io"), ("c", "a"), ("c", "d"), ("d", "io")])
        assert graph.path_to_effect("a", avoiding="b") == []
        assert graph.path_to_effect("b", avoiding="a") == ["b", "io"]
        assert graph.path_to_effect("c", avoiding="b") == ["c", "d", "io"]
        assert graph.path_to_effect("a", avoiding="a") == []
