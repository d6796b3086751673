"""Visitor traversal order and override tests."""

import pytest

from calc.syntax.ast import Atom, BinaryOp, FunctionCall, Ident, Number, add, call, mult, sub
from calc.syntax.visit import Visitor, walk_binary_op, walk_expr


class Trace(Visitor):
    """Records atoms in the order the default traversal reaches them."""

    def __init__(self) -> None:
        self.seen: list[str] = []

    def visit_atom(self, atom: Atom) -> None:
        if isinstance(atom, Number):
            self.seen.append(repr(atom.value))
        else:
            self.seen.append(atom.name)


class PostOrder(Trace):
    """Also records operators and calls after their substructure."""

    def visit_binary_op(self, b: BinaryOp) -> None:
        walk_binary_op(self, b)
        self.seen.append(b.op.symbol)

    def visit_function_call(self, f: FunctionCall) -> None:
        super().visit_function_call(f)
        self.seen.append(f.name + "/" + str(len(f.arguments)))


NESTED = sub(add(5, mult(sub(3, 2), "x")), call("sin", 90.0))


def test_default_traversal_is_left_to_right():
    t = Trace()
    t.visit_expr(NESTED)
    assert t.seen == ["5.0", "3.0", "2.0", "x", "90.0"]


def test_post_order_places_operators_after_operands():
    t = PostOrder()
    t.visit_expr(NESTED)
    assert t.seen == ["5.0", "3.0", "2.0", "-", "x", "*", "+", "90.0", "sin/1", "-"]


def test_call_arguments_visited_in_order():
    t = Trace()
    t.visit_expr(call("f", "a", 2, call("g", "b"), "c"))
    assert t.seen == ["a", "2.0", "b", "c"]


def test_default_visitor_is_a_no_op():
    Visitor().visit_expr(NESTED)


def test_override_without_walk_stops_traversal():
    class Shallow(Trace):
        def visit_binary_op(self, b: BinaryOp) -> None:
            self.seen.append("op")

    t = Shallow()
    t.visit_expr(add(1, add(2, 3)))
    assert t.seen == ["op"]


def test_overriding_visit_expr_bypasses_hooks():
    class Counter(Trace):
        def visit_expr(self, e) -> None:
            self.seen.append(type(e).__name__)

    t = Counter()
    t.visit_expr(add(1, 2))
    assert t.seen == ["BinaryOp"]


def test_walk_expr_dispatches_by_kind():
    t = PostOrder()
    walk_expr(t, Ident("q"))
    walk_expr(t, call("f"))
    walk_expr(t, add(1, 2))
    assert t.seen == ["q", "f/0", "1.0", "2.0", "+"]


def test_walk_expr_rejects_non_nodes():
    with pytest.raises(TypeError):
        walk_expr(Trace(), 3.0)


def test_traversal_does_not_mutate_tree():
    before = sub(add(5, mult(sub(3, 2), "x")), call("sin", 90.0))
    PostOrder().visit_expr(before)
    assert before == NESTED
