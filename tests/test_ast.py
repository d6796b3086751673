"""AST construction and equality tests."""

from dataclasses import FrozenInstanceError

import pytest

from calc.syntax.ast import (
    BinaryOp,
    FunctionCall,
    Ident,
    Number,
    OpKind,
    add,
    atom,
    call,
    div,
    mult,
    sub,
)


def test_atom_from_float():
    assert atom(3.14) == Number(3.14)


def test_atom_from_int_is_float():
    got = atom(3)
    assert got == Number(3.0)
    assert isinstance(got.value, float)


def test_atom_from_string_is_ident():
    assert atom("x") == Ident("x")


def test_atom_rejects_bool():
    with pytest.raises(TypeError):
        atom(True)


def test_atom_rejects_other_types():
    with pytest.raises(TypeError):
        atom([1.0])


@pytest.mark.parametrize(
    "builder,kind",
    [(add, OpKind.ADD), (sub, OpKind.SUBTRACT), (mult, OpKind.MULTIPLY), (div, OpKind.DIVIDE)],
)
def test_builders_make_binary_ops(builder, kind):
    got = builder(Number(1.0), Ident("a"))
    assert got == BinaryOp(kind, Number(1.0), Ident("a"))


def test_builders_accept_literals():
    assert mult("a", 5) == BinaryOp(OpKind.MULTIPLY, Ident("a"), Number(5.0))


def test_no_validation_on_construction():
    # Any two subtrees combine, even calls to functions nobody defines.
    got = div(call("nope"), sub(Ident("y"), call("f", 1, 2, 3)))
    assert isinstance(got, BinaryOp)


def test_function_call_arguments_keep_order():
    f = FunctionCall("f", [Number(1.0), Ident("b"), Number(3.0)])
    assert f.arguments == (Number(1.0), Ident("b"), Number(3.0))


def test_function_call_accepts_any_iterable():
    f = FunctionCall("f", (Number(float(i)) for i in range(3)))
    assert len(f.arguments) == 3


def test_function_call_may_be_empty():
    assert FunctionCall("rand").arguments == ()


def test_equality_is_structural():
    a = sub(add(5, mult(sub(3, 2), "x")), call("sin", 90.0))
    b = sub(add(5, mult(sub(3, 2), "x")), call("sin", 90.0))
    assert a == b
    assert a is not b


def test_equality_sees_operand_order():
    assert sub(3, 2) != sub(2, 3)


def test_equality_sees_operator():
    assert add(1, 2) != mult(1, 2)


def test_equality_sees_argument_order():
    assert call("f", 1, 2) != call("f", 2, 1)


def test_nodes_are_immutable():
    b = add(1, 2)
    with pytest.raises(FrozenInstanceError):
        b.left = Number(5.0)


def test_opkind_symbols_round_trip():
    for kind in OpKind:
        assert OpKind.from_symbol(kind.symbol) is kind


def test_opkind_is_closed():
    assert [k.symbol for k in OpKind] == ["+", "-", "*", "/"]
    with pytest.raises(ValueError):
        OpKind.from_symbol("%")
