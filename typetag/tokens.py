"""Typetag tokenizer: lexes source into a flat token list.

The tokenizer never fails: characters it does not recognize are dropped and
scanning resumes with the next one.
"""

from __future__ import annotations


# Token type constants
TK_INT = "INT"
TK_STRING = "STRING"
TK_IDENT = "IDENT"
TK_OP = "OP"
TK_COMMENT = "COMMENT"
TK_EOF = "EOF"

TYPE_NAMES: set[str] = {
    "String",
    "Integer",
    "Unknown",
    "True",
    "False",
}

KEYWORDS: set[str] = TYPE_NAMES | {"if", "func"}

# Type names that take a parenthesized literal body: String(text), Integer(12)
LITERAL_TYPES: set[str] = {"String", "Integer"}

SYMBOLS: set[str] = {
    "[",
    "]",
    "{",
    "}",
    "(",
    ")",
    ":",
    ",",
}

OP_IS = "is"
OP_IS_NOT = "is not"

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class Token:
    """A token with type, value, and position."""

    def __init__(self, type_: str, value: str, line: int, col: int):
        self.type: str = type_
        self.value: str = value
        self.line: int = line
        self.col: int = col
        self.int_value: int = 0

    def __repr__(self) -> str:
        return (
            "Token("
            + self.type
            + ", "
            + repr(self.value)
            + ", "
            + str(self.line)
            + ", "
            + str(self.col)
            + ")"
        )

    def describe(self) -> str:
        """Short human-readable form used in parse errors."""
        if self.type == TK_EOF:
            return "end of input"
        if self.type == TK_IDENT:
            return "identifier '" + self.value + "'"
        if self.type == TK_STRING:
            return "string literal '" + self.value + "'"
        if self.type == TK_INT:
            return "integer literal " + str(self.int_value)
        if self.type == TK_COMMENT:
            return "comment"
        return "'" + self.value + "'"


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_word_char(c: str) -> bool:
    return c.isalnum() or c == "_"


def parse_int64(text: str) -> int | None:
    """Parse an optionally signed decimal 64-bit integer. None if it does not parse."""
    digits = text
    if digits.startswith("+") or digits.startswith("-"):
        digits = digits[1:]
    if digits == "":
        return None
    for c in digits:
        if not _is_digit(c):
            return None
    value = int(text)
    if value < INT64_MIN or value > INT64_MAX:
        return None
    return value


def tokenize(source: str, strict_keywords: bool = False) -> list[Token]:
    """Tokenize typetag source into a flat list ending with TK_EOF.

    By default `is` and `is not` are matched character by character as soon
    as an `i` is followed by `s`, even inside a longer word. With
    strict_keywords they are recognized only as whole words.
    """
    tokens: list[Token] = []
    pos = 0
    line = 1
    col = 1
    length = len(source)

    while pos < length:
        c = source[pos]

        # Newlines
        if c == "\n":
            pos += 1
            line += 1
            col = 1
            continue

        # Whitespace
        if c.isspace():
            pos += 1
            col += 1
            continue

        start_pos = pos
        start_line = line
        start_col = col

        # Line comment: //
        if c == "/" and pos + 1 < length and source[pos + 1] == "/":
            pos += 2
            col += 2
            while pos < length and source[pos] != "\n" and source[pos] != "\r":
                pos += 1
                col += 1
            text = source[start_pos + 2 : pos].strip()
            tokens.append(Token(TK_COMMENT, text, start_line, start_col))
            continue

        # Brackets, braces, parens, colon, comma
        if c in SYMBOLS:
            tokens.append(Token(TK_OP, c, start_line, start_col))
            pos += 1
            col += 1
            continue

        # Legacy is / is not: commits on "is" regardless of what follows
        if (
            not strict_keywords
            and c == "i"
            and pos + 1 < length
            and source[pos + 1] == "s"
        ):
            pos += 2
            col += 2
            # " not" is matched one character at a time; a partial match is
            # consumed and dropped
            matched = 0
            while matched < 4 and pos < length and source[pos] == " not"[matched]:
                pos += 1
                col += 1
                matched += 1
            op = OP_IS_NOT if matched == 4 else OP_IS
            tokens.append(Token(TK_OP, op, start_line, start_col))
            continue

        # Integer literal: maximal run of ASCII digits
        if _is_digit(c):
            while pos < length and _is_digit(source[pos]):
                pos += 1
                col += 1
            raw = source[start_pos:pos]
            tok = Token(TK_INT, raw, start_line, start_col)
            value = parse_int64(raw)
            tok.int_value = value if value is not None else 0
            tokens.append(tok)
            continue

        # Identifier, keyword, or String(...) / Integer(...) literal
        if c.isalpha():
            while pos < length and _is_word_char(source[pos]):
                pos += 1
                col += 1
            word = source[start_pos:pos]

            if word in LITERAL_TYPES and pos < length and source[pos] == "(":
                pos += 1
                col += 1
                body_start = pos
                while pos < length and source[pos] != ")":
                    if source[pos] == "\n":
                        line += 1
                        col = 1
                    else:
                        col += 1
                    pos += 1
                body = source[body_start:pos]
                if pos < length:
                    pos += 1  # skip closing )
                    col += 1
                if word == "String":
                    tokens.append(Token(TK_STRING, body, start_line, start_col))
                else:
                    tok = Token(TK_INT, body, start_line, start_col)
                    value = parse_int64(body)
                    tok.int_value = value if value is not None else 0
                    tokens.append(tok)
                continue

            if strict_keywords and word == OP_IS:
                look = pos
                while look < length and (source[look] == " " or source[look] == "\t"):
                    look += 1
                word_end = look
                while word_end < length and _is_word_char(source[word_end]):
                    word_end += 1
                if source[look:word_end] == "not":
                    col += word_end - pos
                    pos = word_end
                    tokens.append(Token(TK_OP, OP_IS_NOT, start_line, start_col))
                else:
                    tokens.append(Token(TK_OP, OP_IS, start_line, start_col))
                continue

            if word in KEYWORDS:
                tokens.append(Token(word, word, start_line, start_col))
            else:
                tokens.append(Token(TK_IDENT, word, start_line, start_col))
            continue

        # Anything else is dropped
        pos += 1
        col += 1

    tokens.append(Token(TK_EOF, "", line, col))
    return tokens
