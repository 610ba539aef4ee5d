"""Syntax error helpers for the Sigil parser.

The parser raises :class:`SyntaxFailure` to unwind out of a malformed
statement; the statement loop catches it, records the carried diagnostic and
resynchronises on the next statement boundary.
"""

from __future__ import annotations

from typing import List, Optional

from sigil.diagnostics import Diagnostic, DiagnosticCode, Phase

from ..lexer import Token


class SyntaxFailure(Exception):
    """Unwinds the parser to the nearest recovery point."""

    def __init__(self, diagnostic: Diagnostic):
        super().__init__(diagnostic.message)
        self.diagnostic = diagnostic


def create_syntax_error(
    message: str,
    token: Token,
    *,
    expected: Optional[List[str]] = None,
    hint: Optional[str] = None,
) -> Diagnostic:
    """Create a syntax diagnostic positioned at ``token``."""
    if expected:
        if len(expected) == 1:
            message = f"{message}: expected {expected[0]}, found {token.describe()}"
        else:
            message = f"{message}: expected one of {', '.join(expected)}, found {token.describe()}"
    return Diagnostic.at(
        DiagnosticCode.SYNTAX_ERROR,
        message,
        line=token.line,
        column=token.column,
        hint=hint,
        phase=Phase.PARSE,
    )


__all__ = ["SyntaxFailure", "create_syntax_error"]
