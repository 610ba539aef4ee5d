"""Recursive descent parser for the Sigil language.

Block structure is keyword-delimited (``End function.``, ``End if.``,
``End for.``, ``End record.``), so the parser keeps an explicit stack of open
constructs. Closer diagnostics name the construct that is still open, and
errors inside a statement are recovered at the next statement boundary so a
single pass reports problems from several blocks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from sigil.ast import Declaration, Node, Program, SourceSpan, Statement
from sigil.budget import CompilationBudget
from sigil.diagnostics import Diagnostic, Phase
from sigil.errors import ResourceLimitExceeded

from ..keywords import CLOSER_KEYWORDS, STATEMENT_STARTERS, suggest_keyword
from ..lexer import Token, TokenKind
from .declarations import DeclarationParsingMixin
from .errors import SyntaxFailure, create_syntax_error
from .expressions import ExpressionParsingMixin
from .statements import StatementParsingMixin

logger = logging.getLogger(__name__)


class BlockKind(Enum):
    """Constructs that must be closed with ``End <closer>.``"""

    FUNCTION = "function"
    IF = "if"
    FOR = "for"
    RECORD = "record"

    @property
    def closer(self) -> str:
        return self.value


@dataclass
class BlockContext:
    """An open construct on the parser's block stack."""

    kind: BlockKind
    opener: Token
    label: str

    @property
    def closer_phrase(self) -> str:
        return f"End {self.kind.closer}."

    def describe(self) -> str:
        return f"'{self.label}' opened at line {self.opener.line}"


@dataclass
class ParseResult:
    program: Program
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics


class SigilParser(DeclarationParsingMixin, StatementParsingMixin, ExpressionParsingMixin):
    """
    Recursive descent parser for Sigil.

    Each ``parse_*`` method documents the production it implements.
    """

    def __init__(self, tokens: Sequence[Token], *, budget: Optional[CompilationBudget] = None):
        if not tokens or tokens[-1].kind is not TokenKind.EOF:
            raise ValueError("token stream must end with an EOF token")
        self.tokens = list(tokens)
        self.pos = 0
        self.budget = budget or CompilationBudget()
        self.blocks: List[BlockContext] = []
        self.diagnostics: List[Diagnostic] = []

    # ====================================================================
    # Token management
    # ====================================================================

    def peek(self, offset: int = 0) -> Token:
        pos = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[pos]

    def current(self) -> Token:
        return self.peek(0)

    def previous(self) -> Token:
        return self.tokens[max(self.pos - 1, 0)]

    def advance(self) -> Token:
        token = self.current()
        if token.kind is not TokenKind.EOF:
            self.pos += 1
        return token

    def at_end(self) -> bool:
        return self.current().kind is TokenKind.EOF

    def check_keyword(self, *words: str) -> bool:
        return self.current().is_keyword(*words)

    def check_punct(self, *symbols: str) -> bool:
        return self.current().is_punct(*symbols)

    def consume_keyword(self, *words: str) -> Optional[Token]:
        if self.check_keyword(*words):
            return self.advance()
        return None

    def consume_punct(self, *symbols: str) -> Optional[Token]:
        if self.check_punct(*symbols):
            return self.advance()
        return None

    def expect_keyword(self, word: str, *, context: str, hint: Optional[str] = None) -> Token:
        token = self.current()
        if token.is_keyword(word):
            return self.advance()
        if hint is None and token.kind is TokenKind.IDENTIFIER and suggest_keyword(token.lexeme) == word:
            hint = f"Keywords are case-sensitive; write '{word}' instead of '{token.lexeme}'."
        raise self.failure(f"Malformed {context}", token, expected=[f"'{word}'"], hint=hint)

    def expect_punct(self, symbol: str, *, context: str, hint: Optional[str] = None) -> Token:
        token = self.current()
        if token.is_punct(symbol):
            return self.advance()
        raise self.failure(f"Malformed {context}", token, expected=[f"'{symbol}'"], hint=hint)

    def expect_identifier(self, *, context: str, what: str = "a name") -> Token:
        token = self.current()
        if token.kind is TokenKind.IDENTIFIER:
            return self.advance()
        hint = None
        if token.kind is TokenKind.KEYWORD:
            hint = f"'{token.lexeme}' is a reserved keyword; choose a different name."
        raise self.failure(f"Malformed {context}", token, expected=[what], hint=hint)

    def expect_terminator(self, *, context: str) -> Token:
        token = self.current()
        if token.kind is TokenKind.TERMINATOR:
            return self.advance()
        raise self.failure(
            f"Missing '.' at the end of the {context}",
            token,
            hint=f"End the {context} with a period before {token.describe()}.",
        )

    # ====================================================================
    # Diagnostics and recovery
    # ====================================================================

    def failure(
        self,
        message: str,
        token: Token,
        *,
        expected: Optional[List[str]] = None,
        hint: Optional[str] = None,
    ) -> SyntaxFailure:
        return SyntaxFailure(create_syntax_error(message, token, expected=expected, hint=hint))

    def report(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    def synchronize(self, *, start: int, stop_at_colon: bool = False) -> bool:
        """Skip to the next statement boundary.

        Consumes through the next terminator, or stops before a block keyword
        (``End``, ``Otherwise``, ``Define``) or a statement keyword. Returns
        ``True`` when ``stop_at_colon`` is set and a header colon was consumed.
        """
        if self.pos == start:
            self.advance()
        while True:
            token = self.current()
            if token.kind is TokenKind.EOF:
                return False
            if token.kind is TokenKind.TERMINATOR:
                self.advance()
                return False
            if stop_at_colon and token.is_punct(":"):
                self.advance()
                return True
            if token.is_keyword("End", "Otherwise", "Define"):
                return False
            if token.kind is TokenKind.KEYWORD and token.lexeme in STATEMENT_STARTERS and token.lexeme != "Call":
                return False
            self.advance()

    def span_from(self, start: Token) -> SourceSpan:
        end_token = self.previous() if self.pos > 0 else start
        return SourceSpan(start.position, end_token.end or end_token.position)

    def track(self, node: Node, token: Token) -> Node:
        self.budget.count_node(token.line, token.column)
        return node

    # ====================================================================
    # Block stack
    # ====================================================================

    def open_block(self, kind: BlockKind, opener: Token, label: str) -> BlockContext:
        self.budget.enter(opener.line, opener.column)
        context = BlockContext(kind=kind, opener=opener, label=label)
        self.blocks.append(context)
        return context

    def pop_block(self, context: BlockContext) -> None:
        while self.blocks:
            top = self.blocks.pop()
            self.budget.exit()
            if top is context:
                return

    def closes_open_block(self, word: str) -> bool:
        return any(block.kind.closer == word for block in self.blocks)

    def parse_block(self, context: BlockContext, *, allow_otherwise: bool = False) -> List[Statement]:
        """
        Parse statements until a closer, ``Otherwise`` or end of input.

        Grammar:
            Block = { Statement } ;
        """
        statements: List[Statement] = []
        while True:
            token = self.current()
            if token.kind is TokenKind.EOF or token.is_keyword("Define"):
                return statements
            if token.is_keyword("Otherwise") and (
                allow_otherwise or any(block.kind is BlockKind.IF for block in self.blocks)
            ):
                return statements
            if token.is_keyword("End"):
                word = self.peek(1)
                if word.lexeme in CLOSER_KEYWORDS and not self.closes_open_block(word.lexeme):
                    self._skip_stray_closer(token, word)
                    continue
                return statements
            self.budget.check_time(token.line, token.column)
            statement = self.parse_statement_with_recovery()
            if statement is not None:
                statements.append(statement)

    def close_block(self, context: BlockContext) -> Optional[SourceSpan]:
        """Consume ``End <closer>.`` for ``context`` or report why it is missing."""
        token = self.current()
        try:
            if token.is_keyword("End"):
                word = self.peek(1)
                if word.lexeme == context.kind.closer:
                    self.advance()
                    self.advance()
                    self._expect_closer_period(word, context)
                    return SourceSpan(token.position, word.end or word.position)
                if word.lexeme in CLOSER_KEYWORDS:
                    self.report(create_syntax_error(
                        f"Mismatched block closer 'End {word.lexeme}': {context.describe()} is still open",
                        token,
                        hint=f"Add '{context.closer_phrase}' before 'End {word.lexeme}.' to close '{context.label}'.",
                    ))
                    return None
                self.report(create_syntax_error(
                    f"Incomplete block closer for {context.describe()}",
                    word if word.kind is not TokenKind.EOF else token,
                    expected=[f"'{context.kind.closer}'"],
                    hint=f"Write '{context.closer_phrase}' to close '{context.label}'.",
                ))
                self.advance()
                if self.current().kind is TokenKind.TERMINATOR:
                    self.advance()
                return None
            if token.kind is TokenKind.EOF:
                message = f"Reached end of input while {context.describe()} is still open"
            elif token.is_keyword("Define"):
                message = f"New declaration starts while {context.describe()} is still open"
            else:
                message = f"Unexpected {token.describe()} while {context.describe()} is still open"
            self.report(create_syntax_error(
                message,
                token,
                hint=f"Add '{context.closer_phrase}' to close '{context.label}'.",
            ))
            return None
        finally:
            self.pop_block(context)

    def _expect_closer_period(self, word: Token, context: BlockContext) -> None:
        if self.current().kind is TokenKind.TERMINATOR:
            self.advance()
            return
        self.report(create_syntax_error(
            f"Missing '.' after 'End {word.lexeme}'",
            self.current(),
            hint=f"Write '{context.closer_phrase}'.",
        ))

    def _skip_stray_closer(self, end_token: Token, word: Token) -> None:
        open_names = ", ".join(f"'{block.label}'" for block in reversed(self.blocks)) or "nothing"
        self.report(create_syntax_error(
            f"'End {word.lexeme}' does not close any open construct",
            end_token,
            hint=f"Currently open: {open_names}. Remove the stray 'End {word.lexeme}.'.",
        ))
        self.advance()
        self.advance()
        if self.current().kind is TokenKind.TERMINATOR:
            self.advance()

    # ====================================================================
    # Program
    # ====================================================================

    def parse(self) -> ParseResult:
        """
        Parse an entire compilation unit.

        Grammar:
            Program = { Declaration } , EOF ;
        """
        declarations: List[Declaration] = []
        first = self.current()
        try:
            while not self.at_end():
                token = self.current()
                if token.is_keyword("Define"):
                    declaration = self.parse_declaration_with_recovery()
                    if declaration is not None:
                        declarations.append(declaration)
                    continue
                self.report(self._unexpected_top_level(token))
                self._skip_to_next_declaration()
        except ResourceLimitExceeded as exc:
            logger.info("Parsing stopped: %s", exc.message)
            self.report(exc.to_diagnostic(Phase.PARSE))

        program = Program(declarations=declarations, span=self.span_from(first))
        logger.debug("Parsed %d declarations with %d syntax diagnostics", len(declarations), len(self.diagnostics))
        return ParseResult(program=program, diagnostics=list(self.diagnostics))

    def _unexpected_top_level(self, token: Token) -> Diagnostic:
        hint = "Top-level code must be a declaration: 'Define function', 'Define type' or 'Define record'."
        if token.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD):
            suggestion = suggest_keyword(token.lexeme)
            if suggestion == "Define":
                hint = "Did you mean 'Define'? Keywords are case-sensitive."
            elif token.lexeme == "End":
                hint = "This closer has no matching open construct; remove it."
        return create_syntax_error(f"Unexpected {token.describe()} at top level", token, hint=hint)

    def _skip_to_next_declaration(self) -> None:
        self.advance()
        while not self.at_end() and not self.check_keyword("Define"):
            self.advance()


def parse(tokens: Sequence[Token], *, budget: Optional[CompilationBudget] = None) -> ParseResult:
    """Parse ``tokens`` into a :class:`Program` plus any syntax diagnostics."""
    return SigilParser(tokens, budget=budget).parse()


__all__ = ["BlockKind", "BlockContext", "ParseResult", "SigilParser", "parse"]
