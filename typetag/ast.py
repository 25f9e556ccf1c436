"""Typetag AST: parse-time node definitions."""

from __future__ import annotations

from dataclasses import dataclass, field


# ============================================================
# POSITION
# ============================================================


@dataclass
class Pos:
    """Source position, 1-indexed."""

    line: int
    col: int


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass
class Expr:
    """Base for all expressions."""

    pos: Pos


@dataclass
class StringLit(Expr):
    """String literal, from String(text)."""

    value: str


@dataclass
class IntLit(Expr):
    """64-bit integer literal."""

    value: int


@dataclass
class Ident(Expr):
    """Identifier reference. True and False parse as identifiers too."""

    name: str


@dataclass
class Call(Expr):
    """name(args)."""

    name: str
    args: list[Expr]


@dataclass
class TypedValue(Expr):
    """Type[value]. A bare Ident value is a literal payload, not a lookup."""

    type_name: str
    value: Expr

    def literal_text(self) -> str | None:
        if isinstance(self.value, Ident):
            return self.value.name
        return None


@dataclass
class BinaryOp(Expr):
    """left is right, left is not right."""

    op: str
    left: Expr
    right: Expr


# ============================================================
# STATEMENTS
# ============================================================


@dataclass
class Stmt:
    """Base for all statements."""

    pos: Pos


@dataclass
class Param:
    """Function parameter with its declared type name, kept verbatim."""

    pos: Pos
    name: str
    type_name: str


@dataclass
class ExprStmt(Stmt):
    """Bare expression as statement."""

    expr: Expr


@dataclass
class FuncDecl(Stmt):
    """func name(params) { body }."""

    name: str
    params: list[Param]
    body: list[Stmt]


@dataclass
class IfStmt(Stmt):
    """if cond { body }."""

    cond: Expr
    body: list[Stmt]


@dataclass
class Comment(Stmt):
    """// text, kept as a no-op statement."""

    text: str


# ============================================================
# PROGRAM
# ============================================================


@dataclass
class Program:
    """Top-level program: ordered statements."""

    statements: list[Stmt] = field(default_factory=list)
    strict_keywords: bool = False
