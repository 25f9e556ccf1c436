"""Typetag lexer, parser, typechecker and interpreter: public API."""

from __future__ import annotations

import io

from .ast import Program
from .check import check as check_program
from .errors import (
    CheckError as CheckError,
    ErrorKind as ErrorKind,
    ParseError as ParseError,
    RuntimeFault as RuntimeFault,
    TypetagError as TypetagError,
)
from .parse import parse_tokens
from .runtime import RunResult as RunResult, interpret
from .tokens import Token, tokenize as tokenize_source


def _extract_pragmas(source: str) -> bool:
    """Scan leading lines for pragma comments. Returns strict_keywords."""
    strict_keywords = False
    for line in source.split("\n"):
        stripped = line.strip()
        if stripped == "":
            continue
        if not stripped.startswith("//"):
            break
        body = stripped[2:].strip()
        if body == "pragma strict-keywords":
            strict_keywords = True
    return strict_keywords


def _resolve_strict(source: str, strict_keywords: bool | None) -> bool:
    if strict_keywords is None:
        return _extract_pragmas(source)
    return strict_keywords


def tokenize(source: str, strict_keywords: bool | None = None) -> list[Token]:
    """Tokenize source, honouring a strict-keywords pragma unless overridden."""
    return tokenize_source(source, _resolve_strict(source, strict_keywords))


def parse(source: str, strict_keywords: bool | None = None) -> Program:
    """Parse typetag source code into a Program AST."""
    strict = _resolve_strict(source, strict_keywords)
    program = parse_tokens(tokenize_source(source, strict))
    program.strict_keywords = strict
    return program


def check(source: str, strict_keywords: bool | None = None) -> None:
    """Parse and type-check source. Raises ParseError or CheckError."""
    check_program(parse(source, strict_keywords))


def run(source: str, strict_keywords: bool | None = None) -> RunResult:
    """Parse, check and evaluate source, capturing print output."""
    out = io.StringIO()
    try:
        program = parse(source, strict_keywords)
        check_program(program)
        interpret(program, out)
    except TypetagError as e:
        return RunResult(1, out.getvalue(), e.report() + "\n")
    return RunResult(0, out.getvalue(), "")
