"""Declaration parsing methods for SigilParser.

Handles ``Define function``, ``Define type`` and ``Define record`` as well as
type expressions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from sigil.ast import (
    Declaration,
    FunctionDecl,
    Parameter,
    Purity,
    RecordDecl,
    RecordField,
    TypeAliasDecl,
    TypeRef,
)

from ..lexer import Token, TokenKind
from .errors import SyntaxFailure, create_syntax_error

if TYPE_CHECKING:
    from .parse import SigilParser


class DeclarationParsingMixin:
    """Mixin with declaration parsing methods."""

    def parse_declaration_with_recovery(self: "SigilParser") -> Optional[Declaration]:
        start = self.pos
        try:
            return self.parse_declaration()
        except SyntaxFailure as failure:
            self.report(failure.diagnostic)
            self.synchronize(start=start)
            while not self.at_end() and not self.check_keyword("Define"):
                self.advance()
            return None

    def parse_declaration(self: "SigilParser") -> Declaration:
        """
        Grammar:
            Declaration = FunctionDecl | TypeDecl | RecordDecl ;
        """
        define = self.expect_keyword("Define", context="declaration")
        effectful = self.consume_keyword("effectful")
        token = self.current()
        if token.is_keyword("function"):
            return self.parse_function_declaration(define, effectful is not None)
        if effectful is not None:
            raise self.failure("Malformed effectful declaration", token, expected=["'function'"])
        if token.is_keyword("type"):
            return self.parse_type_declaration(define)
        if token.is_keyword("record"):
            return self.parse_record_declaration(define)
        raise self.failure(
            "Malformed declaration",
            token,
            expected=["'function'", "'effectful function'", "'type'", "'record'"],
        )

    # ------------------------------------------------------------------
    # Functions
    # ------------------------------------------------------------------
    def parse_function_declaration(self: "SigilParser", define: Token, effectful: bool) -> FunctionDecl:
        """
        Grammar:
            FunctionDecl = "Define" , [ "effectful" ] , "function" , IDENT ,
                           [ "taking" , Param , { "," , Param } ] ,
                           [ "returning" , Type ] , ":" , Block ,
                           "End" , "function" , "." ;
        """
        from .parse import BlockKind

        self.expect_keyword("function", context="function declaration")
        name_token = self.current()
        name = "<error>"
        parameters: List[Parameter] = []
        return_type: Optional[TypeRef] = None
        header_start = self.pos
        try:
            name = self.expect_identifier(context="function declaration", what="a function name").lexeme
            if self.consume_keyword("taking"):
                parameters.append(self.parse_parameter())
                while self.consume_punct(","):
                    parameters.append(self.parse_parameter())
            if self.consume_keyword("returning"):
                return_type = self.parse_type_ref()
            if self.check_keyword("taking"):
                raise self.failure(
                    "Malformed function declaration",
                    self.current(),
                    hint="Parameters come before the return type: 'taking x as T returning R:'.",
                )
            self.expect_punct(":", context=f"header of function '{name}'",
                              hint="A function header ends with ':' before its body.")
        except SyntaxFailure as failure:
            if not self.synchronize(start=header_start, stop_at_colon=True):
                raise
            self.report(failure.diagnostic)

        label = f"Define {'effectful ' if effectful else ''}function {name}"
        context = self.open_block(BlockKind.FUNCTION, define, label)
        body = self.parse_block(context)
        end_span = self.close_block(context)
        decl = FunctionDecl(
            name=name,
            parameters=parameters,
            return_type=return_type,
            purity=Purity.EFFECTFUL if effectful else Purity.PURE,
            body=body,
            name_span=name_token.span,
            end_span=end_span,
            span=self.span_from(define),
        )
        self.track(decl, define)
        return decl

    def parse_parameter(self: "SigilParser") -> Parameter:
        """
        Grammar:
            Param = IDENT , "as" , Type ;
        """
        name_token = self.expect_identifier(context="parameter list", what="a parameter name")
        self.expect_keyword("as", context=f"parameter '{name_token.lexeme}'",
                            hint=f"Declare parameters as '{name_token.lexeme} as <Type>'.")
        type_ref = self.parse_type_ref()
        return Parameter(name=name_token.lexeme, type_ref=type_ref, span=self.span_from(name_token))

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------
    def parse_type_ref(self: "SigilParser") -> TypeRef:
        """
        Grammar:
            Type = "List" , "of" , Type | IDENT ;
        """
        token = self.expect_identifier(context="type", what="a type name")
        if token.lexeme == "List" and self.consume_keyword("of"):
            self.budget.enter(token.line, token.column)
            try:
                element = self.parse_type_ref()
            finally:
                self.budget.exit()
            return TypeRef(name="List", element=element, span=self.span_from(token))
        return TypeRef(name=token.lexeme, span=token.span)

    def parse_type_declaration(self: "SigilParser", define: Token) -> TypeAliasDecl:
        """
        Grammar:
            TypeDecl = "Define" , "type" , IDENT , "as" ,
                       ( Type | STRING , { "or" , STRING } ) , "." ;
        """
        self.expect_keyword("type", context="type declaration")
        name = self.expect_identifier(context="type declaration", what="a type name").lexeme
        self.expect_keyword("as", context=f"type declaration '{name}'")
        if self.current().kind is TokenKind.STRING:
            literals = [str(self.advance().value)]
            while self.consume_keyword("or"):
                token = self.current()
                if token.kind is not TokenKind.STRING:
                    raise self.failure(f"Malformed type declaration '{name}'", token, expected=["a string literal"])
                literals.append(str(self.advance().value))
            duplicates = sorted({value for value in literals if literals.count(value) > 1})
            if duplicates:
                self.report(create_syntax_error(
                    f"Type '{name}' lists {', '.join(repr(value) for value in duplicates)} more than once",
                    define,
                    hint="Each literal may appear only once in a type declaration.",
                ))
            decl = TypeAliasDecl(name=name, literals=literals)
        else:
            decl = TypeAliasDecl(name=name, underlying=self.parse_type_ref())
        self.expect_terminator(context=f"type declaration '{name}'")
        decl.span = self.span_from(define)
        self.track(decl, define)
        return decl

    def parse_record_declaration(self: "SigilParser", define: Token) -> RecordDecl:
        """
        Grammar:
            RecordDecl = "Define" , "record" , IDENT , ":" ,
                         { IDENT , "as" , Type , "." } , "End" , "record" , "." ;
        """
        from .parse import BlockKind

        self.expect_keyword("record", context="record declaration")
        name = self.expect_identifier(context="record declaration", what="a record name").lexeme
        self.expect_punct(":", context=f"record declaration '{name}'")
        context = self.open_block(BlockKind.RECORD, define, f"Define record {name}")
        fields: List[RecordField] = []
        while True:
            token = self.current()
            if token.kind is TokenKind.EOF or token.is_keyword("End", "Define"):
                break
            start = self.pos
            try:
                field_token = self.expect_identifier(context=f"record '{name}'", what="a field name")
                self.expect_keyword("as", context=f"field '{field_token.lexeme}'")
                type_ref = self.parse_type_ref()
                self.expect_terminator(context=f"field '{field_token.lexeme}'")
                fields.append(RecordField(name=field_token.lexeme, type_ref=type_ref, span=self.span_from(field_token)))
            except SyntaxFailure as failure:
                self.report(failure.diagnostic)
                self.synchronize(start=start)
        self.close_block(context)
        decl = RecordDecl(name=name, fields=fields, span=self.span_from(define))
        self.track(decl, define)
        return decl


__all__ = ["DeclarationParsingMixin"]
