"""Typetag parser: recursive descent, one method per grammar production."""

from __future__ import annotations

from .ast import (
    BinaryOp,
    Call,
    Comment,
    Expr,
    ExprStmt,
    FuncDecl,
    Ident,
    IfStmt,
    IntLit,
    Param,
    Pos,
    Program,
    Stmt,
    StringLit,
    TypedValue,
)
from .errors import DEPTH_EXCEEDED, ParseError
from .tokens import (
    OP_IS,
    OP_IS_NOT,
    TK_COMMENT,
    TK_EOF,
    TK_IDENT,
    TK_INT,
    TK_OP,
    TK_STRING,
    Token,
)

# Type-name tokens accepted in a parameter declaration
PARAM_TYPES: set[str] = {"String", "Integer", "Unknown"}

# Type-name tokens that may start a Type[value] expression
TAG_TYPES: set[str] = {"String", "Integer"}


class Parser:
    """Recursive descent parser for typetag."""

    def __init__(self, tokens: list[Token]):
        self.tokens: list[Token] = tokens
        self.pos: int = 0

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        if self.pos >= len(self.tokens):
            return self.tokens[len(self.tokens) - 1]
        return self.tokens[self.pos]

    def advance(self) -> Token:
        tok = self.current()
        self.pos += 1
        return tok

    def at(self, value: str) -> bool:
        tok = self.current()
        return tok.type == TK_OP and tok.value == value

    def at_end(self) -> bool:
        return self.current().type == TK_EOF

    def expect(self, value: str, msg: str) -> Token:
        if not self.at(value):
            raise self.error(msg)
        return self.advance()

    def error(self, msg: str) -> ParseError:
        return ParseError(msg, self._pos())

    def _pos(self) -> Pos:
        tok = self.current()
        return Pos(tok.line, tok.col)

    # ── Top Level ────────────────────────────────────────────

    def parse_program(self) -> Program:
        statements: list[Stmt] = []
        while not self.at_end():
            statements.append(self.parse_stmt())
        return Program(statements)

    def parse_block(self, close_msg: str) -> list[Stmt]:
        """Statements up to the closing brace; the opening brace is already consumed."""
        body: list[Stmt] = []
        while not self.at("}") and not self.at_end():
            body.append(self.parse_stmt())
        self.expect("}", close_msg)
        return body

    # ── Statements ───────────────────────────────────────────

    def parse_stmt(self) -> Stmt:
        tok = self.current()
        if tok.type == "func":
            return self.parse_func_decl()
        if tok.type == "if":
            return self.parse_if_stmt()
        if tok.type == TK_COMMENT:
            self.advance()
            return Comment(Pos(tok.line, tok.col), tok.value)
        pos = self._pos()
        return ExprStmt(pos, self.parse_expr())

    def parse_func_decl(self) -> FuncDecl:
        pos = self._pos()
        self.advance()  # func
        name_tok = self.current()
        if name_tok.type != TK_IDENT:
            raise self.error("Expected function name after 'func' keyword")
        self.advance()
        self.expect("(", "Expected '(' after function name")
        params = self.parse_param_list()
        self.expect(")", "Expected ')' after parameters")
        self.expect("{", "Expected '{' after function declaration")
        body = self.parse_block("Expected '}' after function body")
        return FuncDecl(pos, name_tok.value, params, body)

    def parse_param_list(self) -> list[Param]:
        params: list[Param] = []
        if self.at(")"):
            return params
        while True:
            params.append(self.parse_param())
            if self.at(")"):
                return params
            self.expect(",", "Expected ',' between parameters")

    def parse_param(self) -> Param:
        pos = self._pos()
        name_tok = self.current()
        if name_tok.type != TK_IDENT:
            raise self.error("Expected parameter name")
        self.advance()
        self.expect(":", "Expected ':' after parameter name")
        type_tok = self.current()
        if type_tok.type not in PARAM_TYPES and type_tok.type != TK_IDENT:
            raise self.error("Expected type name after ':'")
        self.advance()
        return Param(pos, name_tok.value, type_tok.value)

    def parse_if_stmt(self) -> IfStmt:
        pos = self._pos()
        self.advance()  # if
        cond = self.parse_expr()
        self.expect("{", "Expected '{' after if condition")
        body = self.parse_block("Expected '}' after if body")
        return IfStmt(pos, cond, body)

    # ── Expressions ──────────────────────────────────────────

    def parse_expr(self) -> Expr:
        """Expr = Primary ( ('is' | 'is not') Primary )?"""
        left = self.parse_primary()
        if self.at(OP_IS) or self.at(OP_IS_NOT):
            op = self.advance().value
            right = self.parse_primary()
            return BinaryOp(left.pos, op, left, right)
        return left

    def parse_primary(self) -> Expr:
        """Parse a primary expression."""
        tok = self.current()
        pos = self._pos()

        # Literals
        if tok.type == TK_STRING:
            self.advance()
            return StringLit(pos, tok.value)
        if tok.type == TK_INT:
            self.advance()
            return IntLit(pos, tok.int_value)

        # Identifier or call
        if tok.type == TK_IDENT:
            self.advance()
            if self.at("("):
                self.advance()
                args = self.parse_arg_list()
                self.expect(")", "Expected ')' after function arguments")
                return Call(pos, tok.value, args)
            return Ident(pos, tok.value)

        # Type[value]
        if tok.type in TAG_TYPES:
            self.advance()
            self.expect("[", "Expected '[' after type name")
            value = self.parse_expr()
            self.expect("]", "Expected ']' after type value")
            return TypedValue(pos, tok.type, value)

        # True / False are captured as identifiers
        if tok.type == "True" or tok.type == "False":
            self.advance()
            return Ident(pos, tok.type)

        raise self.error("Unexpected token: " + tok.describe())

    def parse_arg_list(self) -> list[Expr]:
        args: list[Expr] = []
        if self.at(")"):
            return args
        while True:
            args.append(self.parse_expr())
            if self.at(")"):
                return args
            self.expect(",", "Expected ',' between arguments")


def parse_tokens(tokens: list[Token]) -> Program:
    """Parse a token list into a Program."""
    try:
        return Parser(tokens).parse_program()
    except RecursionError:
        raise ParseError(DEPTH_EXCEEDED) from None
