"""Calc AST: expression tree node definitions."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, Union


# ============================================================
# OPERATORS
# ============================================================


class OpKind(enum.Enum):
    """The four arithmetic operators. Closed: the parser, printer and
    compiler all match on it exhaustively."""

    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"

    @property
    def symbol(self) -> str:
        return self.value

    @classmethod
    def from_symbol(cls, symbol: str) -> OpKind:
        return cls(symbol)


# ============================================================
# NODES
# ============================================================


class Atom:
    """Base for leaf nodes."""


@dataclass(frozen=True)
class Number(Atom):
    """Float64 literal."""

    value: float


@dataclass(frozen=True)
class Ident(Atom):
    """Reference to a named value."""

    name: str


@dataclass(frozen=True)
class BinaryOp:
    """left op right. Owns both operands."""

    op: OpKind
    left: Expr
    right: Expr


@dataclass(frozen=True)
class FunctionCall:
    """name(arguments...). Arguments are evaluated left to right."""

    name: str
    arguments: tuple[Expr, ...]

    def __init__(self, name: str, arguments: Iterable[Expr] = ()):
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "arguments", tuple(arguments))


Expr = Union[Number, Ident, BinaryOp, FunctionCall]


# ============================================================
# BUILDERS
# ============================================================


def atom(value: float | int | str) -> Atom:
    """Convert a primitive literal: numbers become Number, strings Ident."""
    if isinstance(value, bool):
        raise TypeError("bool is not a numeric literal")
    if isinstance(value, (int, float)):
        return Number(float(value))
    if isinstance(value, str):
        return Ident(value)
    raise TypeError("cannot convert " + type(value).__name__ + " to an atom")


def _operand(value: Expr | float | int | str) -> Expr:
    if isinstance(value, (Number, Ident, BinaryOp, FunctionCall)):
        return value
    return atom(value)


def binary(
    op: OpKind, left: Expr | float | int | str, right: Expr | float | int | str
) -> BinaryOp:
    return BinaryOp(op, _operand(left), _operand(right))


def add(left: Expr | float | int | str, right: Expr | float | int | str) -> BinaryOp:
    return binary(OpKind.ADD, left, right)


def sub(left: Expr | float | int | str, right: Expr | float | int | str) -> BinaryOp:
    return binary(OpKind.SUBTRACT, left, right)


def mult(left: Expr | float | int | str, right: Expr | float | int | str) -> BinaryOp:
    return binary(OpKind.MULTIPLY, left, right)


def div(left: Expr | float | int | str, right: Expr | float | int | str) -> BinaryOp:
    return binary(OpKind.DIVIDE, left, right)


def call(name: str, *arguments: Expr | float | int | str) -> FunctionCall:
    return FunctionCall(name, [_operand(a) for a in arguments])
