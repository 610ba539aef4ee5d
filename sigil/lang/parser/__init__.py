"""Sigil parser.

Usage:
    from sigil.lang.parser import parse_source

    result = parse_source(text)
    if result.ok:
        program = result.program
"""

from __future__ import annotations

from typing import Optional

from sigil.ast import Program
from sigil.budget import CompilationBudget
from sigil.errors import LexError

from ..lexer import tokenize
from .errors import SyntaxFailure, create_syntax_error
from .parse import BlockContext, BlockKind, ParseResult, SigilParser, parse


def parse_source(source: str, *, budget: Optional[CompilationBudget] = None) -> ParseResult:
    """Tokenize and parse ``source``; lexical errors become syntax diagnostics."""
    try:
        tokens = tokenize(source)
    except LexError as exc:
        return ParseResult(program=Program(), diagnostics=[exc.to_diagnostic()])
    return parse(tokens, budget=budget)


__all__ = [
    "BlockContext",
    "BlockKind",
    "ParseResult",
    "SigilParser",
    "SyntaxFailure",
    "create_syntax_error",
    "parse",
    "parse_source",
]
