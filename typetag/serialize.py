"""Serialization of tokens and AST nodes to JSON-compatible dicts and JSON text."""

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
from .tokens import TK_INT, Token


def serialize(obj: object) -> object:
    """Recursively serialize an object to a JSON-compatible structure."""
    if obj is None:
        return None
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, int):
        return obj
    if isinstance(obj, str):
        return obj
    if isinstance(obj, (list, tuple)):
        return [serialize(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): serialize(v) for k, v in obj.items()}
    return _node_serialize(obj)


def _node_serialize(obj: object) -> object:
    if isinstance(obj, Pos):
        return {"line": obj.line, "col": obj.col}
    if isinstance(obj, Token):
        d: dict[str, object] = {
            "type": obj.type,
            "value": obj.value,
            "line": obj.line,
            "col": obj.col,
        }
        if obj.type == TK_INT:
            d["int_value"] = obj.int_value
        return d
    if isinstance(obj, Program):
        return program_to_dict(obj)
    if isinstance(obj, Param):
        return {
            "_type": "Param",
            "pos": serialize(obj.pos),
            "name": obj.name,
            "type_name": obj.type_name,
        }
    if isinstance(obj, Expr):
        return _serialize_expr(obj)
    if isinstance(obj, Stmt):
        return _serialize_stmt(obj)
    raise TypeError("cannot serialize " + type(obj).__name__)


def _serialize_expr(e: Expr) -> dict[str, object]:
    d: dict[str, object] = {"_type": type(e).__name__, "pos": serialize(e.pos)}
    if isinstance(e, StringLit):
        d["value"] = e.value
    elif isinstance(e, IntLit):
        d["value"] = e.value
    elif isinstance(e, Ident):
        d["name"] = e.name
    elif isinstance(e, Call):
        d["name"] = e.name
        d["args"] = serialize(e.args)
    elif isinstance(e, TypedValue):
        d["type_name"] = e.type_name
        d["value"] = serialize(e.value)
    elif isinstance(e, BinaryOp):
        d["op"] = e.op
        d["left"] = serialize(e.left)
        d["right"] = serialize(e.right)
    return d


def _serialize_stmt(s: Stmt) -> dict[str, object]:
    d: dict[str, object] = {"_type": type(s).__name__, "pos": serialize(s.pos)}
    if isinstance(s, ExprStmt):
        d["expr"] = serialize(s.expr)
    elif isinstance(s, FuncDecl):
        d["name"] = s.name
        d["params"] = serialize(s.params)
        d["body"] = serialize(s.body)
    elif isinstance(s, IfStmt):
        d["cond"] = serialize(s.cond)
        d["body"] = serialize(s.body)
    elif isinstance(s, Comment):
        d["text"] = s.text
    return d


def tokens_to_list(tokens: list[Token]) -> list[object]:
    return [serialize(t) for t in tokens]


def program_to_dict(program: Program) -> dict[str, object]:
    return {
        "_type": "Program",
        "strict_keywords": program.strict_keywords,
        "statements": serialize(program.statements),
    }


# --- JSON text (no json module) ---


def _json_escape(s: str) -> str:
    result: list[str] = []
    for c in s:
        if c == "\\":
            result.append("\\\\")
        elif c == '"':
            result.append('\\"')
        elif c == "\n":
            result.append("\\n")
        elif c == "\r":
            result.append("\\r")
        elif c == "\t":
            result.append("\\t")
        elif ord(c) < 0x20:
            result.append("\\u" + format(ord(c), "04x"))
        else:
            result.append(c)
    return "".join(result)


def _to_json(obj: object, indent: int, level: int) -> str:
    if obj is None:
        return "null"
    if isinstance(obj, bool):
        return "true" if obj else "false"
    if isinstance(obj, int):
        return str(obj)
    if isinstance(obj, str):
        return '"' + _json_escape(obj) + '"'
    pad = " " * (indent * (level + 1))
    pad_close = " " * (indent * level)
    if isinstance(obj, list):
        if len(obj) == 0:
            return "[]"
        parts = [pad + _to_json(x, indent, level + 1) for x in obj]
        return "[\n" + ",\n".join(parts) + "\n" + pad_close + "]"
    if isinstance(obj, dict):
        if len(obj) == 0:
            return "{}"
        parts = []
        for k, v in obj.items():
            key_str = '"' + _json_escape(str(k)) + '"'
            parts.append(pad + key_str + ": " + _to_json(v, indent, level + 1))
        return "{\n" + ",\n".join(parts) + "\n" + pad_close + "}"
    raise TypeError("cannot encode " + type(obj).__name__ + " as JSON")


def to_json(obj: object) -> str:
    """Serialize a JSON-compatible object to pretty-printed JSON."""
    return _to_json(serialize(obj), 2, 0)
