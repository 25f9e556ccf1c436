"""Typetag diagnostics: one error class per pipeline stage."""

from __future__ import annotations

from enum import Enum

from .ast import Pos


class ErrorKind(Enum):
    """Failure domain of a TypetagError."""

    SYNTAX = "syntax"
    TYPE = "type"
    RUNTIME = "runtime"


_LABELS: dict[ErrorKind, str] = {
    ErrorKind.SYNTAX: "parse error",
    ErrorKind.TYPE: "type error",
    ErrorKind.RUNTIME: "runtime error",
}


class TypetagError(Exception):
    """Base error for parsing, checking and evaluation."""

    kind: ErrorKind

    def __init__(self, msg: str, pos: Pos | None = None):
        if pos is None:
            super().__init__(msg)
        else:
            super().__init__(f"{msg} at line {pos.line} col {pos.col}")
        self.msg = msg
        self.pos = pos

    def report(self) -> str:
        """One-line diagnostic prefixed with the failure domain."""
        return _LABELS[self.kind] + ": " + str(self)


class ParseError(TypetagError):
    """Structural violation found by the parser."""

    kind = ErrorKind.SYNTAX


class CheckError(TypetagError):
    """Static type error."""

    kind = ErrorKind.TYPE


class RuntimeFault(TypetagError):
    """Error raised while evaluating a program."""

    kind = ErrorKind.RUNTIME


DEPTH_EXCEEDED: str = "maximum recursion depth exceeded"
