"""Calc printer: converts an AST back into calc source text.

Parenthesizes only where precedence or left associativity requires it, so
`parse(to_source(e)) == e` for any tree of finite numbers. Non-finite
numbers render as the identifiers `inf` and `nan`, which `math_scope()`
defines.
"""

from __future__ import annotations

import math

from .ast import Atom, BinaryOp, Expr, FunctionCall, Ident, Number, OpKind
from .visit import Visitor, walk_binary_op, walk_function_call


def to_source(expr: Expr) -> str:
    """Render an `Expr` as calc source text."""
    return _Printer().render(expr)


class _Printer(Visitor):
    # Expression precedence (higher binds tighter)
    _PREC_SUM: int = 1
    _PREC_PRODUCT: int = 2
    _PREC_PRIMARY: int = 3

    _BIN_PREC: dict[OpKind, int] = {
        OpKind.ADD: _PREC_SUM,
        OpKind.SUBTRACT: _PREC_SUM,
        OpKind.MULTIPLY: _PREC_PRODUCT,
        OpKind.DIVIDE: _PREC_PRODUCT,
    }

    def __init__(self) -> None:
        self._stack: list[tuple[str, int]] = []

    def render(self, expr: Expr) -> str:
        self._stack = []
        self.visit_expr(expr)
        text, _ = self._stack.pop()
        return text

    def visit_atom(self, atom: Atom) -> None:
        if isinstance(atom, Number):
            self._stack.append((_render_number(atom.value), self._PREC_PRIMARY))
            return
        if isinstance(atom, Ident):
            self._stack.append((atom.name, self._PREC_PRIMARY))
            return
        raise TypeError("unhandled atom type: " + type(atom).__name__)

    def visit_binary_op(self, b: BinaryOp) -> None:
        walk_binary_op(self, b)
        right, right_prec = self._stack.pop()
        left, left_prec = self._stack.pop()
        prec = self._BIN_PREC[b.op]
        if left_prec < prec:
            left = "(" + left + ")"
        # Left associative: an equal-precedence right operand needs parens.
        if right_prec <= prec:
            right = "(" + right + ")"
        self._stack.append((left + " " + b.op.symbol + " " + right, prec))

    def visit_function_call(self, f: FunctionCall) -> None:
        walk_function_call(self, f)
        n = len(f.arguments)
        args: list[str] = []
        for text, _ in self._stack[len(self._stack) - n :]:
            args.append(text)
        del self._stack[len(self._stack) - n :]
        self._stack.append((f.name + "(" + ", ".join(args) + ")", self._PREC_PRIMARY))


def _render_number(value: float) -> str:
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return repr(value)
