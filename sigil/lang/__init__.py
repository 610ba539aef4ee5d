"""Sigil language front end: keywords, lexer and parser."""

from .keywords import RESERVED_KEYWORDS, suggest_keyword
from .lexer import Lexer, Token, TokenKind, tokenize
from .parser import ParseResult, SigilParser, parse, parse_source

__all__ = [
    "RESERVED_KEYWORDS",
    "suggest_keyword",
    "Lexer",
    "Token",
    "TokenKind",
    "tokenize",
    "ParseResult",
    "SigilParser",
    "parse",
    "parse_source",
]
