"""Syntax tree traversal.

Each method of `Visitor` is a hook that can be overridden to customize what
happens at the corresponding kind of node. By default every hook recursively
visits the node's substructure, so all consumers agree on one evaluation
order: operands left before right, call arguments left to right.

An override that still wants the default recursion calls the matching
`walk_*()` function; otherwise traversal stops at that node.
"""

from __future__ import annotations

from .ast import Atom, BinaryOp, Expr, FunctionCall


class Visitor:
    """Base class for AST traversals. Subclasses own any state."""

    def visit_expr(self, e: Expr) -> None:
        walk_expr(self, e)

    def visit_binary_op(self, b: BinaryOp) -> None:
        walk_binary_op(self, b)

    def visit_function_call(self, f: FunctionCall) -> None:
        walk_function_call(self, f)

    def visit_atom(self, atom: Atom) -> None:
        pass


def walk_expr(visitor: Visitor, e: Expr) -> None:
    """Call `visit_atom`, `visit_function_call` or `visit_binary_op`
    depending on the kind of node."""
    if isinstance(e, Atom):
        visitor.visit_atom(e)
        return
    if isinstance(e, BinaryOp):
        visitor.visit_binary_op(e)
        return
    if isinstance(e, FunctionCall):
        visitor.visit_function_call(e)
        return
    raise TypeError("unhandled expr type: " + type(e).__name__)


def walk_binary_op(visitor: Visitor, b: BinaryOp) -> None:
    """Visit the left operand fully, then the right."""
    visitor.visit_expr(b.left)
    visitor.visit_expr(b.right)


def walk_function_call(visitor: Visitor, f: FunctionCall) -> None:
    for arg in f.arguments:
        visitor.visit_expr(arg)
