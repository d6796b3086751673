"""Diagnostics shared by every compilation phase."""

from __future__ import annotations


class CalcError(Exception):
    """Base error for tokenizing, parsing, and code generation."""

    def __init__(self, msg: str):
        self.msg: str = msg
        super().__init__(msg)


class SourceError(CalcError):
    """Error tied to a position in the source text, 1-indexed."""

    def __init__(self, msg: str, line: int, col: int):
        self.line: int = line
        self.col: int = col
        super().__init__(msg)
        self.args = (msg + " at line " + str(line) + " col " + str(col),)


class TokenizeError(SourceError):
    """Error during tokenization."""


class ParseError(SourceError):
    """Parse error with location info."""


class CodegenError(CalcError):
    """Code generation failed; no unit was produced."""


class UnboundIdentifier(CodegenError):
    """An identifier was reached with no way to resolve it."""

    def __init__(self, name: str):
        self.name: str = name
        super().__init__("unbound identifier '" + name + "'")


class UnsupportedConstruct(CodegenError):
    """A construct this compiler does not generate code for."""

    def __init__(self, description: str):
        self.description: str = description
        super().__init__("unsupported construct: " + description)


class EngineInvariantViolation(CodegenError):
    """The operand stack did not hold exactly one value after traversal.

    Always a compiler defect, never caused by a well-formed tree.
    """

    def __init__(self, residual: int):
        self.residual: int = residual
        super().__init__(
            "operand stack holds " + str(residual) + " values after traversal, expected 1"
        )


class BackendError(CalcError):
    """A backend was driven outside its contract."""
