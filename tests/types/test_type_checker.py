from __future__ import annotations

import pytest

from sigil.ast import CallTargetKind
from sigil.registry import DomainRegistry
from sigil.types import BOOLEAN, STRING, DomainType, RecordType, check_types


@pytest.fixture
def check(parse_ok, registry):
    def _check(source: str, domain: DomainRegistry = None):
        program = parse_ok(source)
        diagnostics = check_types(program, domain if domain is not None else registry)
        return program, diagnostics

    return _check


def only(diagnostics):
    assert len(diagnostics) == 1, [str(d) for d in diagnostics]
    return diagnostics[0]


def test_well_typed_program_annotates_ast(check) -> None:
    program, diagnostics = check("""
Define function can_cancel taking order as Order returning Boolean:
  If order.status is "Pending" then:
    Return true.
  Otherwise:
    Return false.
  End if.
End function.
""")
    assert diagnostics == []
    condition = program.declarations[0].body[0].condition
    assert condition.resolved_type == BOOLEAN
    status_type = condition.left.resolved_type
    assert isinstance(status_type, DomainType)
    assert status_type.name == "OrderStatus"
    assert isinstance(condition.left.base.resolved_type, RecordType)


def test_rebinding_in_same_scope(check) -> None:
    _, diagnostics = check("""
Define function f returning Number:
  Let x be 1.
  Let x be 2.
  Return x.
End function.
""")
    diagnostic = only(diagnostics)
    assert diagnostic.code == "SIGIL_REBIND"
    assert diagnostic.message == "'x' is already bound in this scope at line 3"
    assert (diagnostic.location.line, diagnostic.location.column) == (4, 7)


def test_parameter_cannot_be_rebound(check) -> None:
    _, diagnostics = check("""
Define function f taking x as Number returning Number:
  Let x be 2.
  Return x.
End function.
""")
    assert only(diagnostics).code == "SIGIL_REBIND"


def test_shadowing_in_nested_block_is_legal(check) -> None:
    _, diagnostics = check("""
Define function f taking flag as Boolean returning Number:
  Let x be 1.
  If flag then:
    Let x be 2.
    Return x.
  End if.
  Return x.
End function.
""")
    assert diagnostics == []


def test_missing_return_on_some_path(check) -> None:
    _, diagnostics = check("""
Define function f taking flag as Boolean returning Number:
  If flag then:
    Return 1.
  End if.
End function.
""")
    diagnostic = only(diagnostics)
    assert diagnostic.code == "SIGIL_MISSING_RETURN"
    assert diagnostic.message == "Function 'f' must return Number but not every path ends in 'Return'"
    assert (diagnostic.location.line, diagnostic.location.column) == (2, 17)


def test_both_branches_returning_satisfies_return(check) -> None:
    _, diagnostics = check("""
Define function f taking flag as Boolean returning Number:
  If flag then:
    Return 1.
  Otherwise:
    Return 2.
  End if.
End function.
""")
    assert diagnostics == []


def test_for_each_over_non_list(check) -> None:
    _, diagnostics = check("""
Define function f taking n as Number:
  For each x in n:
    Return.
  End for.
End function.
""")
    diagnostic = only(diagnostics)
    assert diagnostic.code == "SIGIL_TYPE_MISMATCH"
    assert diagnostic.message == (
        "'For each' expects a List of T, but 'x' would iterate over a value of type Number"
    )


def test_for_each_over_registry_alias(check) -> None:
    program, diagnostics = check("""
Define effectful function save_all taking orders as Orders:
  For each order in orders:
    Call save_order with order.
  End for.
End function.
""")
    assert diagnostics == []
    call = program.declarations[0].body[0].body[0].call
    assert call.target_kind is CallTargetKind.OPERATION


def test_unknown_field_suggests_closest(check) -> None:
    _, diagnostics = check("""
Define function f taking order as Order returning OrderStatus:
  Return order.stauts.
End function.
""")
    diagnostic = only(diagnostics)
    assert diagnostic.code == "SIGIL_UNKNOWN_FIELD"
    assert diagnostic.message == "Record 'Order' has no field 'stauts'"
    assert diagnostic.hint == "Did you mean 'status'?"
    assert diagnostic.location.column == 16


def test_arity_mismatch_shows_signature(check) -> None:
    _, diagnostics = check("""
Define effectful function f taking order as Order:
  Call send_email with order.customer_email.
End function.
""")
    diagnostic = only(diagnostics)
    assert diagnostic.code == "SIGIL_ARITY_MISMATCH"
    assert diagnostic.message == "'send_email' expects 2 argument(s) but was given 1"
    assert diagnostic.hint == "Signature: send_email taking to as Email, body as String."


def test_domain_types_do_not_unify_with_base(check) -> None:
    _, diagnostics = check("""
Define effectful function f taking raw as String:
  Call send_email with raw, "hi".
End function.
""")
    diagnostic = only(diagnostics)
    assert diagnostic.code == "SIGIL_TYPE_MISMATCH"
    assert diagnostic.message == "Argument 'to' of 'send_email' expects Email, but was given String"
    assert diagnostic.hint == "Convert explicitly with 'Email of <value>'."


def test_explicit_conversions(check) -> None:
    program, diagnostics = check("""
Define effectful function f taking raw as String, email as Email returning String:
  Call send_email with (Email of raw), "hi".
  Return String of email.
End function.
""")
    assert diagnostics == []
    conversion = program.declarations[0].body[0].call.args[0]
    assert conversion.target_kind is CallTargetKind.CONVERSION
    assert program.declarations[0].body[1].expr.resolved_type == STRING


def test_comparison_with_literal_outside_domain(check) -> None:
    _, diagnostics = check("""
Define function f taking order as Order returning Boolean:
  Return order.status is "Lost".
End function.
""")
    diagnostic = only(diagnostics)
    assert diagnostic.message == "Cannot compare OrderStatus with String using 'is'"
    assert diagnostic.hint == "'OrderStatus' allows only: \"Pending\", \"Shipped\", \"Cancelled\"."


def test_comparing_domain_value_with_plain_string(check) -> None:
    _, diagnostics = check("""
Define function f taking order as Order returning Boolean:
  Return order.customer_email is "a@example.com".
End function.
""")
    assert only(diagnostics).hint == "Convert explicitly with 'Email of <value>'."


def test_source_literal_type(check) -> None:
    _, diagnostics = check("""
Define type Priority as "Low" or "High".
Define function default_priority returning Priority:
  Return "Low".
End function.
Define function urgent returning Priority:
  Return "Urgent".
End function.
""")
    diagnostic = only(diagnostics)
    assert diagnostic.message == "Function 'urgent' must return Priority, but this returns String"
    assert diagnostic.hint == "'Priority' allows only: \"Low\", \"High\"."


def test_source_domain_type_conversion(check) -> None:
    _, diagnostics = check("""
Define type Sku as String.
Define function to_sku taking raw as String returning Sku:
  Return Sku of raw.
End function.
""")
    assert diagnostics == []


def test_empty_list_needs_expected_type(check) -> None:
    _, diagnostics = check("""
Define function f returning List of Number:
  Let xs be [].
  Return [].
End function.
""")
    diagnostic = only(diagnostics)
    assert diagnostic.message == "Cannot determine the element type of an empty list"
    assert diagnostic.location.line == 3


def test_mixed_list_elements(check) -> None:
    _, diagnostics = check("""
Define function f returning List of Number:
  Return [1, "two"].
End function.
""")
    assert only(diagnostics).code == "SIGIL_TYPE_MISMATCH"


def test_nothing_returning_call_used_as_value(check) -> None:
    _, diagnostics = check("""
Define effectful function f taking order as Order:
  Let result be save_order of order.
End function.
""")
    diagnostic = only(diagnostics)
    assert diagnostic.message == "'save_order' returns nothing and cannot be used as a value"


def test_unknown_function_and_name(check) -> None:
    _, diagnostics = check("""
Define function f taking total as Number returning Number:
  Let y be frobnicate of 1.
  Return totl.
End function.
""")
    codes = [(d.code, d.message) for d in diagnostics]
    assert codes == [
        ("SIGIL_UNRESOLVED_NAME", "Unknown function 'frobnicate'"),
        ("SIGIL_UNRESOLVED_NAME", "Unknown name 'totl'"),
    ]
    assert diagnostics[1].hint == "Did you mean 'total'?"


def test_duplicate_declarations(check) -> None:
    _, diagnostics = check("""
Define function f:
  Return.
End function.
Define function f:
  Return.
End function.
Define type Email as String.
""")
    messages = [d.message for d in diagnostics]
    assert messages == [
        "'f' is already declared at line 2",
        "'Email' is already declared in the domain registry",
    ]
    assert {d.code for d in diagnostics} == {"SIGIL_DUPLICATE_DECLARATION"}


def test_unknown_type_suggestion(check) -> None:
    _, diagnostics = check("""
Define function f taking x as Strng:
  Return.
End function.
""")
    diagnostic = only(diagnostics)
    assert diagnostic.code == "SIGIL_UNKNOWN_TYPE"
    assert diagnostic.message == "Unknown type 'Strng'"
    assert diagnostic.hint == "Did you mean 'String'?"


def test_self_referential_type(check) -> None:
    _, diagnostics = check("Define type Loop as Loop.")
    diagnostic = only(diagnostics)
    assert diagnostic.message == "Type 'Loop' is defined in terms of itself"


def test_declarations_may_appear_in_any_order(check) -> None:
    _, diagnostics = check("""
Define function label taking p as Parcel returning String:
  Return describe of p.sku.
End function.
Define function describe taking sku as String returning String:
  Return "sku " + sku.
End function.
Define record Parcel:
  sku as String.
End record.
""")
    assert diagnostics == []


def test_return_value_from_function_without_return_type(check) -> None:
    _, diagnostics = check("""
Define function f:
  Return 1.
End function.
""")
    assert only(diagnostics).message == "Function 'f' returns nothing, but this 'Return' has a value of type Number"


def test_condition_must_be_boolean(check) -> None:
    _, diagnostics = check("""
Define function f taking n as Number:
  If n then:
    Return.
  End if.
End function.
""")
    assert only(diagnostics).message == "The 'If' condition must be Boolean, but has type Number"


def test_empty_registry(check) -> None:
    _, diagnostics = check("""
Define function f taking order as Order:
  Return.
End function.
""", DomainRegistry.empty())
    assert only(diagnostics).code == "SIGIL_UNKNOWN_TYPE"


def test_local_cannot_reuse_registry_callable_name(check) -> None:
    _, diagnostics = check("""
Define effectful function notify taking to as Email:
  Let send_email be "x".
  Call send_email with to, send_email.
End function.
""")
    diagnostic = only(diagnostics)
    assert diagnostic.code == "SIGIL_DUPLICATE_DECLARATION"
    assert diagnostic.message == "'send_email' is already declared in the domain registry as a function"
    assert (diagnostic.location.line, diagnostic.location.column) == (3, 7)
    assert "choose a different name than 'send_email'" in diagnostic.hint


def test_parameter_and_loop_item_cannot_reuse_function_names(check) -> None:
    _, diagnostics = check("""
Define function total taking n as Number returning Number:
  Return n.
End function.
Define function twice taking total as Number, xs as List of Number returning Number:
  For each format_total in xs:
    Let doubled be format_total * 2.
  End for.
  Return total * 2.
End function.
""")
    assert [(d.code, d.location.line) for d in diagnostics] == [
        ("SIGIL_DUPLICATE_DECLARATION", 5),
        ("SIGIL_DUPLICATE_DECLARATION", 6),
    ]
    assert diagnostics[0].message == "'total' is already declared at line 2 as a function"
    assert diagnostics[1].message == "'format_total' is already declared in the domain registry as a function"
