"""Expression parsing methods for SigilParser.

The expression grammar is deliberately small: left-associative binary
operators on a short precedence ladder, prefix ``not``/``-``, function
application (``name of args`` and ``Call name with args``) and field access.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from sigil.ast import (
    BinaryOp,
    CallExpr,
    Expression,
    FieldAccess,
    ListLiteral,
    Literal,
    UnaryOp,
    VariableRef,
)

from ..keywords import STATEMENT_STARTERS
from ..lexer import Token, TokenKind

if TYPE_CHECKING:
    from .parse import SigilParser


COMPARISON_OPERATORS = ("<", ">", "<=", ">=")
ADDITIVE_OPERATORS = ("+", "-")
MULTIPLICATIVE_OPERATORS = ("*", "/")


class ExpressionParsingMixin:
    """Mixin with expression parsing methods."""

    def parse_expression(self: "SigilParser") -> Expression:
        """
        Grammar:
            Expression = AndExpr , { "or" , AndExpr } ;
        """
        start = self.current()
        self.budget.enter(start.line, start.column)
        levels = 1
        try:
            left = self._parse_and()
            while self.check_keyword("or"):
                levels += self._descend(self.advance())
                right = self._parse_and()
                left = self._binary("or", left, right, start)
            return left
        finally:
            self._ascend(levels)

    def _descend(self: "SigilParser", token: Token) -> int:
        # Every operator on a left spine, prefix and field hop adds one level
        # of nesting to the tree that later phases walk recursively.
        self.budget.enter(token.line, token.column)
        return 1

    def _ascend(self: "SigilParser", levels: int) -> None:
        for _ in range(levels):
            self.budget.exit()

    def _binary(self: "SigilParser", op: str, left: Expression, right: Expression, start: Token) -> BinaryOp:
        node = BinaryOp(op=op, left=left, right=right, span=self.span_from(start))
        return self.track(node, start)

    def _parse_and(self: "SigilParser") -> Expression:
        """
        Grammar:
            AndExpr = Comparison , { "and" , Comparison } ;
        """
        start = self.current()
        left = self._parse_comparison()
        levels = 0
        try:
            while self.check_keyword("and"):
                levels += self._descend(self.advance())
                left = self._binary("and", left, self._parse_comparison(), start)
            return left
        finally:
            self._ascend(levels)

    def _parse_comparison(self: "SigilParser") -> Expression:
        """
        Grammar:
            Comparison = Additive , [ ( "is" , [ "not" ] | "<" | ">" | "<=" | ">=" ) , Additive ] ;
        """
        start = self.current()
        left = self._parse_additive()
        op = None
        if self.consume_keyword("is"):
            op = "is not" if self.consume_keyword("not") else "is"
        elif self.check_punct(*COMPARISON_OPERATORS):
            op = self.advance().lexeme
        if op is None:
            return left
        node = self._binary(op, left, self._parse_additive(), start)
        if self.check_keyword("is") or self.check_punct(*COMPARISON_OPERATORS):
            raise self.failure(
                "Comparisons cannot be chained",
                self.current(),
                hint="Combine separate comparisons with 'and'.",
            )
        return node

    def _parse_additive(self: "SigilParser") -> Expression:
        start = self.current()
        left = self._parse_term()
        levels = 0
        try:
            while self.check_punct(*ADDITIVE_OPERATORS):
                operator = self.advance()
                levels += self._descend(operator)
                left = self._binary(operator.lexeme, left, self._parse_term(), start)
            return left
        finally:
            self._ascend(levels)

    def _parse_term(self: "SigilParser") -> Expression:
        start = self.current()
        left = self._parse_unary()
        levels = 0
        try:
            while self.check_punct(*MULTIPLICATIVE_OPERATORS):
                operator = self.advance()
                levels += self._descend(operator)
                left = self._binary(operator.lexeme, left, self._parse_unary(), start)
            return left
        finally:
            self._ascend(levels)

    def _parse_unary(self: "SigilParser") -> Expression:
        """
        Grammar:
            Unary = { "not" | "-" } , Application ;
        """
        prefixes: List[Token] = []
        try:
            while self.check_keyword("not") or self.check_punct("-"):
                token = self.advance()
                self._descend(token)
                prefixes.append(token)
            operand = self._parse_application()
        finally:
            self._ascend(len(prefixes))
        for token in reversed(prefixes):
            op = "not" if token.lexeme == "not" else "-"
            operand = self.track(UnaryOp(op=op, operand=operand, span=self.span_from(token)), token)
        return operand

    def _parse_application(self: "SigilParser") -> Expression:
        """
        Grammar:
            Application = "Call" , IDENT , [ "with" , Args ]
                        | IDENT , "of" , Args
                        | Postfix ;
        """
        token = self.current()
        if token.is_keyword("Call"):
            return self.parse_call_keyword_expression()
        if token.kind is TokenKind.IDENTIFIER and self.peek(1).is_keyword("of"):
            self.advance()
            self.advance()
            args = self.parse_arguments()
            node = CallExpr(callee=token.lexeme, args=args, callee_span=token.span, span=self.span_from(token))
            return self.track(node, token)
        return self._parse_postfix()

    def parse_call_keyword_expression(self: "SigilParser") -> CallExpr:
        call_token = self.advance()
        name_token = self.expect_identifier(context="'Call'", what="a function name")
        args: List[Expression] = []
        if self.consume_keyword("with"):
            args = self.parse_arguments()
        elif self.check_keyword("of"):
            raise self.failure(
                f"Malformed 'Call {name_token.lexeme}'",
                self.current(),
                hint=f"Pass arguments with 'Call {name_token.lexeme} with <args>.'.",
            )
        node = CallExpr(callee=name_token.lexeme, args=args, callee_span=name_token.span,
                        span=self.span_from(call_token))
        return self.track(node, call_token)

    def parse_arguments(self: "SigilParser") -> List[Expression]:
        """
        Grammar:
            Args = Expression , { "," , Expression } ;
        """
        args = [self.parse_expression()]
        while self.consume_punct(","):
            args.append(self.parse_expression())
        return args

    def _parse_postfix(self: "SigilParser") -> Expression:
        """
        Grammar:
            Postfix = Primary , { DOT , IDENT } ;
        """
        start = self.current()
        expr = self._parse_primary()
        levels = 0
        try:
            while self.check_punct("."):
                levels += self._descend(self.advance())
                field_token = self.expect_identifier(context="field access", what="a field name")
                expr = self.track(
                    FieldAccess(base=expr, field=field_token.lexeme, field_span=field_token.span,
                                span=self.span_from(start)),
                    start,
                )
            return expr
        finally:
            self._ascend(levels)

    def _parse_primary(self: "SigilParser") -> Expression:
        """
        Grammar:
            Primary = NUMBER | STRING | "true" | "false" | IDENT
                    | "(" , Expression , ")"
                    | "[" , [ Expression , { "," , Expression } ] , "]" ;
        """
        token = self.current()
        if token.kind is TokenKind.NUMBER:
            self.advance()
            return self.track(Literal(value=token.value, literal_type="Number", span=token.span), token)
        if token.kind is TokenKind.STRING:
            self.advance()
            return self.track(Literal(value=token.value, literal_type="String", span=token.span), token)
        if token.is_keyword("true", "false"):
            self.advance()
            return self.track(Literal(value=token.lexeme == "true", literal_type="Boolean", span=token.span), token)
        if token.kind is TokenKind.IDENTIFIER:
            self.advance()
            return self.track(VariableRef(name=token.lexeme, span=token.span), token)
        if token.is_punct("("):
            self.advance()
            inner = self.parse_expression()
            self.expect_punct(")", context="parenthesised expression")
            return inner
        if token.is_punct("["):
            self.advance()
            elements: List[Expression] = []
            if not self.check_punct("]"):
                elements = self.parse_arguments()
            self.expect_punct("]", context="list literal", hint="Separate list elements with ',' and close with ']'.")
            return self.track(ListLiteral(elements=elements, span=self.span_from(token)), token)

        hint = None
        if token.kind is TokenKind.TERMINATOR:
            hint = "A value is missing before the period."
        elif token.kind is TokenKind.KEYWORD and token.lexeme in STATEMENT_STARTERS:
            hint = f"The previous statement may be missing its terminating '.' before '{token.lexeme}'."
        raise self.failure("Expected an expression", token, hint=hint)


__all__ = ["ExpressionParsingMixin"]
