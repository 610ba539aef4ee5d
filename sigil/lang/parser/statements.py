"""Statement parsing methods for SigilParser."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from sigil.ast import (
    CallStatement,
    ExpressionStatement,
    ForEach,
    If,
    LetBinding,
    Return,
    Statement,
)

from ..keywords import STATEMENT_STARTERS, suggest_keyword
from ..lexer import Token, TokenKind
from .errors import SyntaxFailure

if TYPE_CHECKING:
    from .parse import SigilParser


class StatementParsingMixin:
    """Mixin with statement parsing methods."""

    def parse_statement_with_recovery(self: "SigilParser") -> Optional[Statement]:
        start = self.pos
        try:
            return self.parse_statement()
        except SyntaxFailure as failure:
            self.report(failure.diagnostic)
            self.synchronize(start=start)
            return None

    def parse_statement(self: "SigilParser") -> Statement:
        """
        Grammar:
            Statement = LetStmt | IfStmt | ForStmt | CallStmt | ReturnStmt
                      | Expression , "." ;
        """
        token = self.current()
        if token.is_keyword("Let"):
            return self.parse_let()
        if token.is_keyword("If"):
            return self.parse_if()
        if token.is_keyword("For"):
            return self.parse_for_each()
        if token.is_keyword("Call"):
            return self.parse_call_statement()
        if token.is_keyword("Return"):
            return self.parse_return()
        if token.is_keyword("Otherwise"):
            raise self.failure(
                "'Otherwise' without a matching 'If'",
                token,
                hint="'Otherwise:' may only follow the then-block of an 'If'.",
            )
        self._reject_misspelt_keyword(token)
        expr = self.parse_expression()
        self.expect_terminator(context="statement")
        return self.track(ExpressionStatement(expr=expr, span=self.span_from(token)), token)

    def _reject_misspelt_keyword(self: "SigilParser", token: Token) -> None:
        # Two bare words in a row never form an expression.
        if token.kind is not TokenKind.IDENTIFIER or self.peek(1).kind is not TokenKind.IDENTIFIER:
            return
        suggestion = suggest_keyword(token.lexeme, sorted(STATEMENT_STARTERS))
        hint = f"Did you mean '{suggestion}'? Keywords are case-sensitive." if suggestion else None
        raise self.failure(f"Unknown statement starting with '{token.lexeme}'", token, hint=hint)

    def parse_let(self: "SigilParser") -> LetBinding:
        """
        Grammar:
            LetStmt = "Let" , IDENT , "be" , Expression , "." ;
        """
        let_token = self.advance()
        name_token = self.expect_identifier(context="'Let' binding", what="a variable name")
        self.expect_keyword("be", context=f"'Let {name_token.lexeme}' binding",
                            hint=f"Write 'Let {name_token.lexeme} be <value>.'.")
        init = self.parse_expression()
        self.expect_terminator(context=f"'Let {name_token.lexeme}' binding")
        node = LetBinding(name=name_token.lexeme, init=init, name_span=name_token.span, span=self.span_from(let_token))
        return self.track(node, let_token)

    def parse_return(self: "SigilParser") -> Return:
        """
        Grammar:
            ReturnStmt = "Return" , [ Expression ] , "." ;
        """
        return_token = self.advance()
        expr = None
        if self.current().kind is not TokenKind.TERMINATOR:
            expr = self.parse_expression()
        self.expect_terminator(context="'Return' statement")
        return self.track(Return(expr=expr, span=self.span_from(return_token)), return_token)

    def parse_call_statement(self: "SigilParser") -> CallStatement:
        """
        Grammar:
            CallStmt = "Call" , IDENT , [ "with" , Args ] , "." ;
        """
        call_token = self.current()
        call = self.parse_call_keyword_expression()
        self.expect_terminator(context=f"'Call {call.callee}' statement")
        return self.track(CallStatement(call=call, span=self.span_from(call_token)), call_token)

    def parse_if(self: "SigilParser") -> Optional[If]:
        """
        Grammar:
            IfStmt = "If" , Expression , "then" , ":" , Block ,
                     [ "Otherwise" , ":" , Block ] , "End" , "if" , "." ;
        """
        from .parse import BlockKind

        if_token = self.advance()
        header_start = self.pos
        condition = None
        try:
            condition = self.parse_expression()
            self.expect_keyword("then", context="'If' header", hint="Write 'If <condition> then:'.")
            self.expect_punct(":", context="'If' header", hint="Write 'If <condition> then:'.")
        except SyntaxFailure as failure:
            if not self.synchronize(start=header_start, stop_at_colon=True):
                raise
            self.report(failure.diagnostic)

        context = self.open_block(BlockKind.IF, if_token, "If")
        then_block = self.parse_block(context, allow_otherwise=True)
        otherwise_block: Optional[List[Statement]] = None
        if self.check_keyword("Otherwise"):
            otherwise_token = self.advance()
            if not self.consume_punct(":"):
                self.report(self.failure(
                    "Malformed 'Otherwise' branch", self.current(), expected=["':'"],
                    hint="Write 'Otherwise:' before the else-block.",
                ).diagnostic)
            otherwise_block = self.parse_block(context, allow_otherwise=True)
            while self.check_keyword("Otherwise"):
                self.report(self.failure(
                    "Second 'Otherwise' in the same 'If'",
                    self.current(),
                    hint=f"The 'If' opened at line {if_token.line} already has an 'Otherwise' at line "
                         f"{otherwise_token.line}; nest another 'If' inside it instead.",
                ).diagnostic)
                self.advance()
                self.consume_punct(":")
                otherwise_block.extend(self.parse_block(context, allow_otherwise=True))
        self.close_block(context)
        if condition is None:
            return None
        node = If(
            condition=condition,
            then_block=then_block,
            otherwise_block=otherwise_block,
            span=self.span_from(if_token),
        )
        return self.track(node, if_token)

    def parse_for_each(self: "SigilParser") -> Optional[ForEach]:
        """
        Grammar:
            ForStmt = "For" , "each" , IDENT , "in" , Expression , ":" , Block ,
                      "End" , "for" , "." ;
        """
        from .parse import BlockKind

        for_token = self.advance()
        header_start = self.pos
        item_token: Optional[Token] = None
        iterable = None
        try:
            self.expect_keyword("each", context="'For' header", hint="Write 'For each <item> in <list>:'.")
            item_token = self.expect_identifier(context="'For each' header", what="a loop variable name")
            self.expect_keyword("in", context="'For each' header", hint="Write 'For each <item> in <list>:'.")
            iterable = self.parse_expression()
            self.expect_punct(":", context="'For each' header", hint="A loop header ends with ':'.")
        except SyntaxFailure as failure:
            if not self.synchronize(start=header_start, stop_at_colon=True):
                raise
            self.report(failure.diagnostic)

        context = self.open_block(BlockKind.FOR, for_token, "For each")
        body = self.parse_block(context)
        self.close_block(context)
        if item_token is None or iterable is None:
            return None
        node = ForEach(
            item_name=item_token.lexeme,
            iterable=iterable,
            body=body,
            item_span=item_token.span,
            span=self.span_from(for_token),
        )
        return self.track(node, for_token)


__all__ = ["StatementParsingMixin"]
