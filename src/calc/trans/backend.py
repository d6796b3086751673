"""Backend contract and the entry shape every compiled unit has.

A backend turns the operations the compiler emits into something that can
be invoked. Every unit it finalizes satisfies the entry contract: named
`ENTRYPOINT`, no parameters, returns one float64, and a straight-line body
ending in exactly one return.

Subclasses implement the `_`-prefixed hooks. The public methods enforce the
order in which a unit is built:

    create_unit -> position_at_entry -> (const_float | emit_binary |
    emit_call)* -> emit_return -> finalize
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Sequence

from ..errors import BackendError
from ..syntax.ast import OpKind

ENTRYPOINT: str = "calc_main"

F64: str = "f64"


@dataclass(frozen=True)
class Signature:
    """Parameter and result types of a unit."""

    params: tuple[str, ...]
    result: str

    def display(self) -> str:
        return "fn(" + ", ".join(self.params) + ") -> " + self.result


ENTRY_SIGNATURE = Signature((), F64)

# Unit-building states
ST_IDLE = "idle"
ST_CREATED = "created"
ST_BODY = "body"
ST_RETURNED = "returned"
ST_FINALIZED = "finalized"

# A backend-native value handle; opaque to the compiler.
Value = Any

# What `finalize()` hands back: callable with no arguments, yields a float.
Unit = Callable[[], float]


class Backend:
    """Base class for code generation backends. One unit per instance."""

    def __init__(self) -> None:
        self.state: str = ST_IDLE
        self.unit_name: str = ""

    # ── Contract ────────────────────────────────────────────

    def create_unit(self, name: str, signature: Signature) -> None:
        self._require(ST_IDLE, "create a unit")
        if signature != ENTRY_SIGNATURE:
            raise BackendError(
                "unit '"
                + name
                + "' must have signature "
                + ENTRY_SIGNATURE.display()
                + ", got "
                + signature.display()
            )
        self._create_unit(name, signature)
        self.unit_name = name
        self.state = ST_CREATED

    def position_at_entry(self) -> None:
        self._require(ST_CREATED, "position the cursor")
        self._position_at_entry()
        self.state = ST_BODY

    def const_float(self, value: float) -> Value:
        self._require(ST_BODY, "emit a constant")
        return self._const_float(float(value))

    def emit_binary(self, op: OpKind, left: Value, right: Value) -> Value:
        self._require(ST_BODY, "emit " + op.name.lower())
        return self._emit_binary(op, left, right)

    def emit_call(self, name: str, args: Sequence[Value]) -> Value:
        self._require(ST_BODY, "emit a call to '" + name + "'")
        return self._emit_call(name, list(args))

    def emit_return(self, value: Value) -> None:
        self._require(ST_BODY, "emit a return")
        self._emit_return(value)
        self.state = ST_RETURNED

    def finalize(self) -> Unit:
        if self.state == ST_BODY:
            raise BackendError("cannot finalize '" + self.unit_name + "': body has no return")
        self._require(ST_RETURNED, "finalize")
        unit = self._finalize()
        self.state = ST_FINALIZED
        return unit

    def _require(self, state: str, action: str) -> None:
        if self.state != state:
            raise BackendError(
                "cannot " + action + " while backend is " + self.state + ", expected " + state
            )

    # ── Hooks ───────────────────────────────────────────────

    def _create_unit(self, name: str, signature: Signature) -> None:
        raise NotImplementedError

    def _position_at_entry(self) -> None:
        raise NotImplementedError

    def _const_float(self, value: float) -> Value:
        raise NotImplementedError

    def _emit_binary(self, op: OpKind, left: Value, right: Value) -> Value:
        raise NotImplementedError

    def _emit_call(self, name: str, args: list[Value]) -> Value:
        raise NotImplementedError

    def _emit_return(self, value: Value) -> None:
        raise NotImplementedError

    def _finalize(self) -> Unit:
        raise NotImplementedError
