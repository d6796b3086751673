"""Calc tokenizer: lexes source into a flat token list."""

from __future__ import annotations

from ..errors import TokenizeError

# Token type constants
TK_NUMBER = "NUMBER"
TK_IDENT = "IDENT"
TK_OP = "OP"
TK_EOF = "EOF"

SINGLE_OPS: set[str] = {
    "+",
    "-",
    "*",
    "/",
    "(",
    ")",
    ",",
}


class Token:
    """A token with type, value, and position."""

    def __init__(self, type_: str, value: str, line: int, col: int):
        self.type: str = type_
        self.value: str = value
        self.line: int = line
        self.col: int = col

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


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


def tokenize(source: str) -> list[Token]:
    """Tokenize calc source into a flat list ending with TK_EOF."""
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
        if c == " " or c == "\t" or c == "\r":
            pos += 1
            col += 1
            continue

        start_pos = pos
        start_line = line
        start_col = col

        # Number: digits, optional fraction, optional exponent. A leading
        # '.' is allowed when a digit follows it.
        if _is_digit(c) or (
            c == "." and pos + 1 < length and _is_digit(source[pos + 1])
        ):
            while pos < length and _is_digit(source[pos]):
                pos += 1
                col += 1
            if pos < length and source[pos] == ".":
                pos += 1
                col += 1
                while pos < length and _is_digit(source[pos]):
                    pos += 1
                    col += 1
            if pos < length and (source[pos] == "e" or source[pos] == "E"):
                pos += 1
                col += 1
                if pos < length and (source[pos] == "+" or source[pos] == "-"):
                    pos += 1
                    col += 1
                if pos >= length or not _is_digit(source[pos]):
                    raise TokenizeError("invalid float exponent", start_line, start_col)
                while pos < length and _is_digit(source[pos]):
                    pos += 1
                    col += 1
            raw = source[start_pos:pos]
            tokens.append(Token(TK_NUMBER, raw, start_line, start_col))
            continue

        # Identifier
        if _is_alpha(c):
            while pos < length and _is_alnum(source[pos]):
                pos += 1
                col += 1
            word = source[start_pos:pos]
            tokens.append(Token(TK_IDENT, word, start_line, start_col))
            continue

        if c in SINGLE_OPS:
            tokens.append(Token(TK_OP, c, start_line, start_col))
            pos += 1
            col += 1
            continue

        raise TokenizeError("unexpected character: " + repr(c), line, col)

    tokens.append(Token(TK_EOF, "", line, col))
    return tokens
