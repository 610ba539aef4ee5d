"""Lexical analyzer (tokenizer) for Sigil source.

Converts source text into a flat token stream. Whitespace, including newlines,
only separates tokens; block structure comes from keywords, not layout.

The period rule
---------------
``.`` has three meanings and is classified by its immediate neighbours:

1. Inside a number, a ``.`` directly followed by a digit is a decimal point
   (``3.5``). ``Return 3.`` is the number ``3`` followed by a terminator.
2. A ``.`` directly preceded by an identifier character, ``)`` or ``]`` and
   directly followed by the start of a non-keyword identifier is member
   access (``order.status``).
3. Every other ``.`` terminates a statement.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from sigil.ast.source_location import SourcePosition, SourceSpan
from sigil.errors import LexError

from .keywords import RESERVED_KEYWORDS


class TokenKind(Enum):
    """Token kinds for Sigil."""

    KEYWORD = "keyword"
    IDENTIFIER = "identifier"
    STRING = "string literal"
    NUMBER = "number literal"
    PUNCTUATION = "punctuation"
    TERMINATOR = "statement terminator"
    EOF = "end of input"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Token:
    """A single token with position information.

    ``lexeme`` is the raw source text; ``value`` holds the decoded string or
    numeric value for literals.
    """

    kind: TokenKind
    lexeme: str
    position: SourcePosition
    value: Union[str, int, float, None] = None
    end: Optional[SourcePosition] = None

    @property
    def line(self) -> int:
        return self.position.line

    @property
    def column(self) -> int:
        return self.position.column

    @property
    def span(self) -> SourceSpan:
        return SourceSpan(self.position, self.end or self.position)

    def is_keyword(self, *words: str) -> bool:
        return self.kind is TokenKind.KEYWORD and self.lexeme in words

    def is_punct(self, *symbols: str) -> bool:
        return self.kind is TokenKind.PUNCTUATION and self.lexeme in symbols

    def describe(self) -> str:
        if self.kind is TokenKind.EOF:
            return "end of input"
        if self.kind is TokenKind.TERMINATOR:
            return "'.'"
        if self.kind is TokenKind.STRING:
            return f'string "{self.value}"'
        return f"'{self.lexeme}'"

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.lexeme!r}, {self.line}:{self.column})"


_IDENT_START = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_")
_DIGITS = frozenset("0123456789")
_IDENT_CHARS = _IDENT_START | _DIGITS

_TWO_CHAR_PUNCT = ("<=", ">=")
_SINGLE_CHAR_PUNCT = frozenset(":,()[]+-*/<>")

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "\\": "\\"}


class Lexer:
    """Tokenizer for Sigil source code."""

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []

    def error(self, message: str, *, line: Optional[int] = None, column: Optional[int] = None,
              hint: Optional[str] = None) -> LexError:
        return LexError(
            message,
            line=line if line is not None else self.line,
            column=column if column is not None else self.column,
            hint=hint,
        )

    def peek(self, offset: int = 0) -> Optional[str]:
        pos = self.pos + offset
        if pos < len(self.source):
            return self.source[pos]
        return None

    def advance(self) -> Optional[str]:
        if self.pos >= len(self.source):
            return None
        char = self.source[self.pos]
        self.pos += 1
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return char

    def mark(self) -> SourcePosition:
        return SourcePosition(self.line, self.column, self.pos)

    # ------------------------------------------------------------------
    # Skipping
    # ------------------------------------------------------------------
    def skip_whitespace_and_comments(self) -> None:
        while True:
            char = self.peek()
            if char is not None and char in " \t\r\n":
                self.advance()
            elif char == "-" and self.peek(1) == "-":
                while self.peek() is not None and self.peek() != "\n":
                    self.advance()
            else:
                return

    # ------------------------------------------------------------------
    # Token readers
    # ------------------------------------------------------------------
    def read_string(self) -> Token:
        start = self.mark()
        self.advance()  # opening quote
        chars: List[str] = []
        while True:
            char = self.peek()
            if char is None or char == "\n":
                raise self.error(
                    "Unterminated string literal",
                    line=start.line,
                    column=start.column,
                    hint='Close the string with a matching \'"\' on the same line.',
                )
            if char == '"':
                self.advance()
                break
            if char == "\\":
                self.advance()
                escape = self.advance()
                if escape is None:
                    continue
                chars.append(_ESCAPES.get(escape, escape))
                continue
            chars.append(self.advance() or "")
        lexeme = self.source[start.offset:self.pos]
        return Token(TokenKind.STRING, lexeme, start, value="".join(chars), end=self.mark())

    def read_number(self) -> Token:
        start = self.mark()
        while self.peek() is not None and self.peek() in _DIGITS:
            self.advance()
        is_float = False
        nxt = self.peek(1)
        if self.peek() == "." and nxt is not None and nxt in _DIGITS:
            is_float = True
            self.advance()
            while self.peek() is not None and self.peek() in _DIGITS:
                self.advance()
        lexeme = self.source[start.offset:self.pos]
        if not math.isfinite(float(lexeme)):
            shown = lexeme if len(lexeme) <= 20 else f"{lexeme[:17]}..."
            raise self.error(
                f"Number literal {shown} is too large",
                line=start.line,
                column=start.column,
                hint="Numbers must fit in a 64-bit floating point value.",
            )
        value: Union[int, float] = float(lexeme) if is_float else int(lexeme)
        return Token(TokenKind.NUMBER, lexeme, start, value=value, end=self.mark())

    def read_word(self) -> Token:
        start = self.mark()
        while self.peek() is not None and self.peek() in _IDENT_CHARS:
            self.advance()
        lexeme = self.source[start.offset:self.pos]
        kind = TokenKind.KEYWORD if lexeme in RESERVED_KEYWORDS else TokenKind.IDENTIFIER
        return Token(kind, lexeme, start, end=self.mark())

    def read_period(self) -> Token:
        start = self.mark()
        kind = TokenKind.PUNCTUATION if self._is_member_access() else TokenKind.TERMINATOR
        self.advance()
        return Token(kind, ".", start, end=self.mark())

    def _is_member_access(self) -> bool:
        if self.pos == 0:
            return False
        before = self.source[self.pos - 1]
        after = self.peek(1)
        if before not in _IDENT_CHARS and before not in ")]":
            return False
        if after is None or after not in _IDENT_START:
            return False
        end = self.pos + 1
        while end < len(self.source) and self.source[end] in _IDENT_CHARS:
            end += 1
        return self.source[self.pos + 1:end] not in RESERVED_KEYWORDS

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def tokenize(self) -> List[Token]:
        while True:
            self.skip_whitespace_and_comments()
            char = self.peek()
            if char is None:
                break

            if char == '"':
                self.tokens.append(self.read_string())
            elif char in _DIGITS:
                self.tokens.append(self.read_number())
            elif char in _IDENT_START:
                self.tokens.append(self.read_word())
            elif char == ".":
                self.tokens.append(self.read_period())
            elif char + (self.peek(1) or "") in _TWO_CHAR_PUNCT:
                start = self.mark()
                lexeme = char + (self.peek(1) or "")
                self.advance()
                self.advance()
                self.tokens.append(Token(TokenKind.PUNCTUATION, lexeme, start, end=self.mark()))
            elif char in _SINGLE_CHAR_PUNCT:
                start = self.mark()
                self.advance()
                self.tokens.append(Token(TokenKind.PUNCTUATION, char, start, end=self.mark()))
            else:
                hint = None
                if char == "=":
                    hint = "Use 'is' to compare values and 'Let name be value.' to bind them."
                elif char == "'":
                    hint = "String literals use double quotes."
                raise self.error(f"Unexpected character {char!r}", hint=hint)

        eof = self.mark()
        self.tokens.append(Token(TokenKind.EOF, "", eof, end=eof))
        return self.tokens


def tokenize(source: str) -> List[Token]:
    """Tokenize Sigil source code, raising :class:`LexError` on malformed input."""
    return Lexer(source).tokenize()


__all__ = ["Token", "TokenKind", "Lexer", "tokenize"]
