from __future__ import annotations

from sigil.budget import CompilationBudget
from sigil.config import CompilerLimits
from sigil.diagnostics import Phase
from sigil.lang.parser import parse_source


def syntax_errors(source: str):
    result = parse_source(source)
    assert not result.ok
    for diagnostic in result.diagnostics:
        assert diagnostic.code == "SIGIL_SYNTAX_ERROR"
    return result.diagnostics


def test_recovers_at_statement_boundaries() -> None:
    diagnostics = syntax_errors("""
Define function f:
  Let x be .
  Let y 2.
  Return.
End function.
""")
    assert [d.location.line for d in diagnostics] == [3, 4]
    assert diagnostics[0].message == "Expected an expression"
    assert diagnostics[0].hint == "A value is missing before the period."
    assert "expected 'be', found '2'" in diagnostics[1].message


def test_errors_in_several_functions_are_reported_together() -> None:
    result = parse_source("""
Define function f:
  Let x be .
End function.

Define function g:
  Let y 2.
End function.
""")
    assert [d.location.line for d in result.diagnostics] == [3, 7]
    assert [decl.name for decl in result.program.declarations] == ["f", "g"]


def test_stray_closer_and_mismatched_closer() -> None:
    diagnostics = syntax_errors("""
Define function f taking xs as List of Number:
  For each x in xs:
    Return.
  End if.
End function.
""")
    assert len(diagnostics) == 2
    stray, mismatched = diagnostics
    assert stray.message == "'End if' does not close any open construct"
    assert (stray.location.line, stray.location.column) == (5, 3)
    assert "Currently open: 'For each', 'Define function f'" in stray.hint
    assert mismatched.message == (
        "Mismatched block closer 'End function': 'For each' opened at line 3 is still open"
    )
    assert mismatched.location.line == 6
    assert "End for." in mismatched.hint


def test_unclosed_blocks_at_end_of_input() -> None:
    diagnostics = syntax_errors("""
Define function f taking x as Boolean:
  If x then:
    Return.
""")
    messages = [d.message for d in diagnostics]
    assert messages == [
        "Reached end of input while 'If' opened at line 3 is still open",
        "Reached end of input while 'Define function f' opened at line 2 is still open",
    ]
    assert diagnostics[0].hint == "Add 'End if.' to close 'If'."


def test_new_declaration_inside_open_function() -> None:
    diagnostics = syntax_errors("""
Define function f:
  Return.
Define function g:
  Return.
End function.
""")
    assert len(diagnostics) == 1
    assert diagnostics[0].message.startswith("New declaration starts while 'Define function f'")
    assert diagnostics[0].location.line == 4


def test_misspelt_statement_keyword() -> None:
    (diagnostic,) = syntax_errors("""
Define function f:
  let x be 1.
End function.
""")
    assert diagnostic.message == "Unknown statement starting with 'let'"
    assert diagnostic.hint == "Did you mean 'Let'? Keywords are case-sensitive."


def test_misspelt_declaration_keyword_at_top_level() -> None:
    diagnostics = syntax_errors("""
define function f:
End function.
Define function g:
  Return.
End function.
""")
    assert diagnostics[0].message == "Unexpected 'define' at top level"
    assert diagnostics[0].hint == "Did you mean 'Define'? Keywords are case-sensitive."


def test_otherwise_without_if() -> None:
    (diagnostic,) = syntax_errors("""
Define function f:
  Otherwise:
    Return.
End function.
""")
    assert diagnostic.message == "'Otherwise' without a matching 'If'"


def test_missing_terminator_names_next_token() -> None:
    (diagnostic,) = syntax_errors("""
Define function f:
  Let x be 1
  Return x.
End function.
""")
    assert diagnostic.message == "Missing '.' at the end of the 'Let x' binding"
    assert diagnostic.location.line == 4
    assert "'Return'" in diagnostic.hint


def test_chained_comparison_is_rejected() -> None:
    (diagnostic,) = syntax_errors("""
Define function f taking a as Number, b as Number, c as Number returning Boolean:
  Return a < b < c.
End function.
""")
    assert diagnostic.message == "Comparisons cannot be chained"


def test_duplicate_literal_in_type_declaration() -> None:
    (diagnostic,) = syntax_errors('Define type Flag as "on" or "off" or "on".')
    assert "'on' more than once" in diagnostic.message


def test_call_with_of_is_malformed() -> None:
    (diagnostic,) = syntax_errors("""
Define function f:
  Call g of 1.
End function.
""")
    assert diagnostic.message == "Malformed 'Call g'"
    assert diagnostic.hint == "Pass arguments with 'Call g with <args>.'."


def test_lex_error_becomes_single_diagnostic() -> None:
    result = parse_source('Define function f:\n  Let x be "oops\nEnd function.')
    assert len(result.diagnostics) == 1
    diagnostic = result.diagnostics[0]
    assert diagnostic.phase is Phase.LEX
    assert (diagnostic.location.line, diagnostic.location.column) == (2, 12)
    assert result.program.declarations == []


def test_nesting_limit_is_reported_as_diagnostic() -> None:
    budget = CompilationBudget(CompilerLimits(max_nesting_depth=5))
    result = parse_source("""
Define function f returning Number:
  Return ((((((((1)))))))).
End function.
""", budget=budget)
    assert [d.code for d in result.diagnostics] == ["SIGIL_RESOURCE_LIMIT"]
    assert result.diagnostics[0].phase is Phase.PARSE
    assert "max_nesting_depth" in result.diagnostics[0].hint


def test_node_limit_is_reported_as_diagnostic() -> None:
    budget = CompilationBudget(CompilerLimits(max_nodes=5))
    body = "\n".join(f"  Let v{i} be {i}." for i in range(10))
    result = parse_source(f"Define function f:\n{body}\nEnd function.", budget=budget)
    assert [d.code for d in result.diagnostics] == ["SIGIL_RESOURCE_LIMIT"]
