"""Typetag typechecker: gradual typing over a scope chain, failing on the first error."""

from __future__ import annotations

from dataclasses import dataclass

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
    Pos,
    Program,
    Stmt,
    StringLit,
    TypedValue,
)
from .errors import DEPTH_EXCEEDED, CheckError
from .tokens import OP_IS, OP_IS_NOT


# ============================================================
# TYPE REPRESENTATION
# ============================================================

TY_STRING: str = "String"
TY_INTEGER: str = "Integer"
TY_BOOLEAN: str = "Boolean"
TY_VOID: str = "Void"
TY_UNKNOWN: str = "Unknown"
TY_FUNCTION: str = "Function"


@dataclass
class Type:
    kind: str


@dataclass
class FnT(Type):
    params: list[Type]
    ret: Type


STRING_T: Type = Type(kind=TY_STRING)
INTEGER_T: Type = Type(kind=TY_INTEGER)
BOOLEAN_T: Type = Type(kind=TY_BOOLEAN)
VOID_T: Type = Type(kind=TY_VOID)
UNKNOWN_T: Type = Type(kind=TY_UNKNOWN)

_NAMED_TYPES: dict[str, Type] = {
    "String": STRING_T,
    "Integer": INTEGER_T,
    "Boolean": BOOLEAN_T,
    "Unknown": UNKNOWN_T,
}


def fn_type(params: list[Type], ret: Type) -> FnT:
    return FnT(kind=TY_FUNCTION, params=params, ret=ret)


def resolve_type_name(name: str) -> Type:
    """Map a declared type name to a Type; unrecognized names are Unknown."""
    return _NAMED_TYPES.get(name, UNKNOWN_T)


# ============================================================
# TYPE EQUALITY
# ============================================================


def type_eq(a: Type, b: Type) -> bool:
    if a.kind != b.kind:
        return False
    if isinstance(a, FnT) and isinstance(b, FnT):
        if len(a.params) != len(b.params):
            return False
        i = 0
        while i < len(a.params):
            if not type_eq(a.params[i], b.params[i]):
                return False
            i += 1
        return type_eq(a.ret, b.ret)
    return True


def is_compatible(actual: Type, expected: Type) -> bool:
    """Gradual compatibility: exact match, or either side Unknown."""
    if expected.kind == TY_UNKNOWN or actual.kind == TY_UNKNOWN:
        return True
    return type_eq(actual, expected)


def type_name(t: Type) -> str:
    if isinstance(t, FnT):
        params = ", ".join(type_name(p) for p in t.params)
        return "fn(" + params + ") -> " + type_name(t.ret)
    return t.kind


# ============================================================
# TYPE ENVIRONMENT
# ============================================================


class TypeEnv:
    """Stack of name -> Type scopes; the last scope is the innermost."""

    def __init__(self) -> None:
        self._scopes: list[dict[str, Type]] = [{}]

    def push_scope(self) -> None:
        self._scopes.append({})

    def pop_scope(self) -> None:
        self._scopes.pop()

    def define(self, name: str, typ: Type) -> None:
        self._scopes[-1][name] = typ

    def get(self, name: str) -> Type | None:
        for scope in reversed(self._scopes):
            if name in scope:
                return scope[name]
        return None


def builtin_type_env() -> TypeEnv:
    env = TypeEnv()
    env.define("print", fn_type([UNKNOWN_T], VOID_T))
    # identity-like stub: a call types as its first argument
    env.define("function", fn_type([UNKNOWN_T], UNKNOWN_T))
    return env


# ============================================================
# CHECKER
# ============================================================


class Checker:
    def __init__(self) -> None:
        self.env: TypeEnv = builtin_type_env()

    def error(self, msg: str, pos: Pos) -> CheckError:
        return CheckError(msg, pos)

    # ── Statement checking ────────────────────────────────────

    def check_program(self, program: Program) -> None:
        self.check_stmts(program.statements)

    def check_stmts(self, stmts: list[Stmt]) -> None:
        for s in stmts:
            self.check_stmt(s)

    def check_stmt(self, stmt: Stmt) -> Type:
        if isinstance(stmt, ExprStmt):
            return self.check_expr(stmt.expr)
        if isinstance(stmt, FuncDecl):
            self.check_func_decl(stmt)
            return VOID_T
        if isinstance(stmt, IfStmt):
            self.check_if_stmt(stmt)
            return VOID_T
        if isinstance(stmt, Comment):
            return VOID_T
        raise self.error("unhandled statement type", stmt.pos)

    def check_func_decl(self, decl: FuncDecl) -> None:
        param_types = [resolve_type_name(p.type_name) for p in decl.params]
        # Bound before the body is checked so recursive calls resolve
        self.env.define(decl.name, fn_type(param_types, VOID_T))
        self.env.push_scope()
        try:
            for p, pt in zip(decl.params, param_types):
                self.env.define(p.name, pt)
            self.check_stmts(decl.body)
        finally:
            self.env.pop_scope()

    def check_if_stmt(self, stmt: IfStmt) -> None:
        cond_type = self.check_expr(stmt.cond)
        if cond_type.kind != TY_BOOLEAN and cond_type.kind != TY_UNKNOWN:
            raise self.error(
                "If condition must be a boolean, got " + type_name(cond_type),
                stmt.cond.pos,
            )
        self.check_stmts(stmt.body)

    # ── Expression checking ───────────────────────────────────

    def check_expr(self, expr: Expr) -> Type:
        """Type-check an expression and return its type."""
        if isinstance(expr, StringLit):
            return STRING_T
        if isinstance(expr, IntLit):
            return INTEGER_T
        if isinstance(expr, Ident):
            return self.check_ident(expr)
        if isinstance(expr, Call):
            return self.check_call(expr)
        if isinstance(expr, TypedValue):
            return self.check_typed_value(expr)
        if isinstance(expr, BinaryOp):
            return self.check_binary_op(expr)
        raise self.error("unhandled expression type", expr.pos)

    def check_ident(self, expr: Ident) -> Type:
        typ = self.env.get(expr.name)
        if typ is None:
            raise self.error("Undefined variable '" + expr.name + "'", expr.pos)
        return typ

    def check_call(self, expr: Call) -> Type:
        func_type = self.env.get(expr.name)
        if func_type is None:
            raise self.error("Undefined function '" + expr.name + "'", expr.pos)

        # Built-ins are matched by name, whatever is bound to it
        if expr.name == "print":
            for arg in expr.args:
                self.check_expr(arg)
            return VOID_T
        if expr.name == "function":
            if expr.args:
                return self.check_expr(expr.args[0])
            return UNKNOWN_T

        if not isinstance(func_type, FnT):
            raise self.error("'" + expr.name + "' is not a function", expr.pos)
        if len(expr.args) != len(func_type.params):
            raise self.error(
                "Function '"
                + expr.name
                + "' expects "
                + str(len(func_type.params))
                + " arguments, got "
                + str(len(expr.args)),
                expr.pos,
            )
        i = 0
        while i < len(expr.args):
            arg_type = self.check_expr(expr.args[i])
            param_type = func_type.params[i]
            if not is_compatible(arg_type, param_type):
                raise self.error(
                    "Type mismatch: expected "
                    + type_name(param_type)
                    + ", got "
                    + type_name(arg_type),
                    expr.args[i].pos,
                )
            i += 1
        return func_type.ret

    def check_typed_value(self, expr: TypedValue) -> Type:
        expected = resolve_type_name(expr.type_name)
        # Type[ident] is a literal tag, the identifier is never resolved
        if expr.literal_text() is not None:
            return expected
        value_type = self.check_expr(expr.value)
        if not is_compatible(value_type, expected):
            raise self.error(
                "Type mismatch: expected "
                + type_name(expected)
                + ", got "
                + type_name(value_type),
                expr.pos,
            )
        return expected

    def check_binary_op(self, expr: BinaryOp) -> Type:
        self.check_expr(expr.left)
        self.check_expr(expr.right)
        if expr.op != OP_IS and expr.op != OP_IS_NOT:
            raise self.error("Unknown operator: " + expr.op, expr.pos)
        return BOOLEAN_T


# ============================================================
# PUBLIC API
# ============================================================


def check(program: Program) -> None:
    """Type-check a parsed Program. Raises CheckError on the first violation."""
    try:
        Checker().check_program(program)
    except RecursionError:
        raise CheckError(DEPTH_EXCEEDED) from None
