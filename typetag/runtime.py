"""Typetag runtime: evaluate a checked program over a dynamically scoped environment."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import TextIO

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
from .errors import DEPTH_EXCEEDED, RuntimeFault
from .tokens import OP_IS, OP_IS_NOT, parse_int64


# ============================================================
# Values
# ============================================================


class Value:
    """A runtime value."""

    def to_string(self) -> str:
        raise NotImplementedError

    def debug(self) -> str:
        raise NotImplementedError


@dataclass
class VNil(Value):
    def to_string(self) -> str:
        return "null"

    def debug(self) -> str:
        return "Null"


@dataclass
class VBool(Value):
    value: bool

    def to_string(self) -> str:
        return "true" if self.value else "false"

    def debug(self) -> str:
        return "Boolean(" + self.to_string() + ")"


@dataclass
class VInt(Value):
    value: int

    def to_string(self) -> str:
        return str(self.value)

    def debug(self) -> str:
        return "Integer(" + str(self.value) + ")"


@dataclass
class VString(Value):
    value: str

    def to_string(self) -> str:
        return self.value

    def debug(self) -> str:
        return 'String("' + self.value + '")'


@dataclass
class VFunc(Value):
    """A declared function, captured by value; it never references its defining scope."""

    name: str
    params: list[Param]
    body: list[Stmt]

    def to_string(self) -> str:
        return "<function " + self.name + ">"

    def debug(self) -> str:
        return "Function(" + self.name + ")"


NULL = VNil()


def truthy(v: Value) -> bool:
    if isinstance(v, VBool):
        return v.value
    if isinstance(v, VNil):
        return False
    if isinstance(v, VInt):
        return v.value != 0
    if isinstance(v, VString):
        return v.value != ""
    return True


def values_equal(a: Value, b: Value) -> bool:
    """Structural equality for like scalar variants; everything else is unequal."""
    if isinstance(a, VString) and isinstance(b, VString):
        return a.value == b.value
    if isinstance(a, VInt) and isinstance(b, VInt):
        return a.value == b.value
    if isinstance(a, VBool) and isinstance(b, VBool):
        return a.value == b.value
    if isinstance(a, VNil) and isinstance(b, VNil):
        return True
    return False


# ============================================================
# Environment
# ============================================================


class Environment:
    """Stack of scopes; a call pushes onto the caller's stack, giving dynamic scoping."""

    def __init__(self) -> None:
        self._scopes: list[dict[str, Value]] = [{}]

    def push_scope(self) -> None:
        self._scopes.append({})

    def pop_scope(self) -> None:
        if len(self._scopes) == 1:
            raise RuntimeError("cannot pop the root scope")
        self._scopes.pop()

    def define(self, name: str, value: Value) -> None:
        self._scopes[-1][name] = value

    def lookup(self, name: str) -> Value | None:
        for scope in reversed(self._scopes):
            if name in scope:
                return scope[name]
        return None

    def get(self, name: str, pos: Pos | None = None) -> Value:
        value = self.lookup(name)
        if value is None:
            raise RuntimeFault("Undefined variable '" + name + "'", pos)
        return value

    def assign(self, name: str, value: Value) -> None:
        for scope in reversed(self._scopes):
            if name in scope:
                scope[name] = value
                return
        raise RuntimeFault("Undefined variable '" + name + "'")


def builtin_environment() -> Environment:
    env = Environment()
    env.define("print", VFunc("print", [], []))
    return env


# ============================================================
# Interpreter
# ============================================================


class Interpreter:
    def __init__(self, out: TextIO | None = None):
        self.out: TextIO = out if out is not None else sys.stdout
        self.env: Environment = builtin_environment()

    def run(self, program: Program) -> Value:
        return self.exec_block(program.statements)

    # ---- Statements --------------------------------------------------------

    def exec_block(self, stmts: list[Stmt]) -> Value:
        result: Value = NULL
        for stmt in stmts:
            result = self.exec_stmt(stmt)
        return result

    def exec_stmt(self, stmt: Stmt) -> Value:
        if isinstance(stmt, ExprStmt):
            return self.eval_expr(stmt.expr)
        if isinstance(stmt, FuncDecl):
            self.env.define(stmt.name, VFunc(stmt.name, stmt.params, stmt.body))
            return NULL
        if isinstance(stmt, IfStmt):
            if truthy(self.eval_expr(stmt.cond)):
                # The body shares the enclosing scope
                return self.exec_block(stmt.body)
            return NULL
        if isinstance(stmt, Comment):
            return NULL
        raise RuntimeFault("unhandled statement type", stmt.pos)

    # ---- Expressions -------------------------------------------------------

    def eval_expr(self, expr: Expr) -> Value:
        if isinstance(expr, StringLit):
            return VString(expr.value)
        if isinstance(expr, IntLit):
            return VInt(expr.value)
        if isinstance(expr, Ident):
            return self.env.get(expr.name, expr.pos)
        if isinstance(expr, Call):
            return self.eval_call(expr)
        if isinstance(expr, TypedValue):
            return self.eval_typed_value(expr)
        if isinstance(expr, BinaryOp):
            return self.eval_binary_op(expr)
        raise RuntimeFault("unhandled expression type", expr.pos)

    def eval_call(self, expr: Call) -> Value:
        fn = self.env.lookup(expr.name)
        if fn is None:
            raise RuntimeFault("Undefined function '" + expr.name + "'", expr.pos)
        if not isinstance(fn, VFunc):
            raise RuntimeFault("'" + expr.name + "' is not a function", expr.pos)

        # Dispatch is on the stored function name: a user function named
        # print is the built-in, whatever its declared params and body.
        if fn.name == "print":
            values = [self.eval_expr(a) for a in expr.args]
            for v in values:
                self.out.write(v.to_string() + "\n")
            return NULL

        if len(expr.args) != len(fn.params):
            raise RuntimeFault(
                "Expected "
                + str(len(fn.params))
                + " arguments but got "
                + str(len(expr.args)),
                expr.pos,
            )
        args = [self.eval_expr(a) for a in expr.args]
        self.env.push_scope()
        try:
            for p, v in zip(fn.params, args):
                self.env.define(p.name, v)
            return self.exec_block(fn.body)
        finally:
            self.env.pop_scope()

    def eval_typed_value(self, expr: TypedValue) -> Value:
        text = expr.literal_text()
        if text is not None:
            if expr.type_name == "String":
                return VString(text)
            if expr.type_name == "Integer":
                n = parse_int64(text)
                if n is None:
                    raise RuntimeFault(
                        "Cannot convert '" + text + "' to Integer", expr.pos
                    )
                return VInt(n)
        value = self.eval_expr(expr.value)
        if expr.type_name == "String" and isinstance(value, VString):
            return value
        if expr.type_name == "Integer" and isinstance(value, VInt):
            return value
        raise RuntimeFault(
            "Type mismatch: expected " + expr.type_name + ", got " + value.debug(),
            expr.pos,
        )

    def eval_binary_op(self, expr: BinaryOp) -> Value:
        left = self.eval_expr(expr.left)
        right = self.eval_expr(expr.right)
        if expr.op == OP_IS:
            return VBool(values_equal(left, right))
        if expr.op == OP_IS_NOT:
            return VBool(not values_equal(left, right))
        raise RuntimeFault("Unknown operator: " + expr.op, expr.pos)


# ============================================================
# Entry points
# ============================================================


@dataclass
class RunResult:
    exit_code: int
    stdout: str
    stderr: str


def interpret(program: Program, out: TextIO | None = None) -> None:
    """Evaluate a program, writing print output to out (default sys.stdout)."""
    try:
        Interpreter(out).run(program)
    except RecursionError:
        raise RuntimeFault(DEPTH_EXCEEDED) from None
