"""Typetag CLI: check and run .tt files."""

from __future__ import annotations

import sys

from . import parse, tokenize
from .check import check
from .errors import TypetagError
from .runtime import interpret
from .serialize import program_to_dict, to_json, tokens_to_list


USAGE: str = """\
typetag [OPTIONS] FILE

Check and run a typetag (.tt) program. FILE may be - to read stdin.

Options:
  --tokens           Print the token list as JSON before running
  --ast              Print the AST as JSON before running
  --check            Stop after type checking
  --strict-keywords  Match 'is' and 'is not' as whole words only
  --help             Show this help message
"""


def _read_source(filepath: str) -> str | None:
    if filepath == "-":
        raw = sys.stdin.buffer.read()
    else:
        try:
            with open(filepath, "rb") as f:
                raw = f.read()
        except FileNotFoundError:
            print(
                "typetag: " + filepath + ": No such file or directory",
                file=sys.stderr,
            )
            return None
        except OSError as e:
            print("typetag: " + filepath + ": " + str(e), file=sys.stderr)
            return None
    try:
        return raw.decode("utf-8")
    except ValueError:
        print("typetag: " + filepath + ": invalid utf-8", file=sys.stderr)
        return None


def _report(e: TypetagError) -> int:
    print("typetag: " + e.report(), file=sys.stderr)
    return 1


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    filepath: str = ""
    dump_tokens = False
    dump_ast = False
    check_only = False
    strict_keywords: bool | None = None
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--tokens":
            dump_tokens = True
            i += 1
        elif arg == "--ast":
            dump_ast = True
            i += 1
        elif arg == "--check":
            check_only = True
            i += 1
        elif arg == "--strict-keywords":
            strict_keywords = True
            i += 1
        elif arg.startswith("-") and arg != "-":
            print("typetag: unknown flag '" + arg + "'", file=sys.stderr)
            return 2
        elif filepath == "":
            filepath = arg
            i += 1
        else:
            print("typetag: unexpected argument '" + arg + "'", file=sys.stderr)
            return 2
    if filepath == "":
        print("typetag: missing file argument", file=sys.stderr)
        return 2

    source = _read_source(filepath)
    if source is None:
        return 1

    if dump_tokens:
        print(to_json(tokens_to_list(tokenize(source, strict_keywords))))

    try:
        program = parse(source, strict_keywords)
    except TypetagError as e:
        return _report(e)

    if dump_ast:
        print(to_json(program_to_dict(program)))

    try:
        check(program)
    except TypetagError as e:
        return _report(e)
    if check_only:
        return 0

    try:
        interpret(program, sys.stdout)
    except TypetagError as e:
        sys.stdout.flush()
        return _report(e)
    return 0


if __name__ == "__main__":
    sys.exit(main())
