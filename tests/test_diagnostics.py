from __future__ import annotations

from sigil.diagnostics import Diagnostic, DiagnosticBag, DiagnosticCode, Phase
from sigil.errors import LexError, SigilError


def make(code: str, line: int, column: int, phase: Phase, message: str = "msg", hint=None) -> Diagnostic:
    return Diagnostic.at(code, message, line=line, column=column, hint=hint, phase=phase)


def test_bag_orders_by_phase_then_position() -> None:
    bag = DiagnosticBag([
        make(DiagnosticCode.PURITY_VIOLATION, 1, 1, Phase.EFFECTS),
        make(DiagnosticCode.TYPE_MISMATCH, 9, 3, Phase.TYPES),
        make(DiagnosticCode.REBIND, 2, 5, Phase.TYPES),
        make(DiagnosticCode.MISSING_RETURN, 2, 1, Phase.TYPES),
    ])
    assert bag.codes() == [
        "SIGIL_MISSING_RETURN",
        "SIGIL_REBIND",
        "SIGIL_TYPE_MISMATCH",
        "SIGIL_PURITY_VIOLATION",
    ]


def test_bag_keeps_exact_duplicates_once() -> None:
    bag = DiagnosticBag()
    first = make(DiagnosticCode.TYPE_MISMATCH, 3, 4, Phase.TYPES)
    bag.add(first)
    bag.add(make(DiagnosticCode.TYPE_MISMATCH, 3, 4, Phase.TYPES))
    bag.add(make(DiagnosticCode.TYPE_MISMATCH, 3, 4, Phase.TYPES, message="other"))
    assert len(bag) == 2
    assert bag.has_errors()
    assert not DiagnosticBag().has_errors()


def test_wire_shape_omits_missing_hint() -> None:
    with_hint = make(DiagnosticCode.REBIND, 4, 7, Phase.TYPES, message="'x' is bound", hint="Rename it.")
    without_hint = make(DiagnosticCode.SYNTAX_ERROR, 1, 2, Phase.PARSE, message="bad")
    assert with_hint.to_wire() == {
        "code": "SIGIL_REBIND",
        "message": "'x' is bound",
        "location": {"line": 4, "column": 7},
        "hint": "Rename it.",
    }
    assert without_hint.to_wire() == {
        "code": "SIGIL_SYNTAX_ERROR",
        "message": "bad",
        "location": {"line": 1, "column": 2},
    }


def test_string_form() -> None:
    diagnostic = make(DiagnosticCode.REBIND, 4, 7, Phase.TYPES, message="'x' is bound", hint="Rename it.")
    assert str(diagnostic) == "4:7 [SIGIL_REBIND] 'x' is bound Hint: Rename it."


def test_error_format_and_lex_conversion() -> None:
    error = SigilError("Broken registry", path="domain.json", line=3, column=1, code="X_CODE", hint="Fix it.")
    assert error.format() == "Broken registry (domain.json:3:1; X_CODE) Hint: Fix it."

    lex = LexError("Unexpected character '$'", line=2, column=9)
    diagnostic = lex.to_diagnostic()
    assert diagnostic.phase is Phase.LEX
    assert diagnostic.to_wire()["location"] == {"line": 2, "column": 9}
