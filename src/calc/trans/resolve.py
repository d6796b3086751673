"""Name resolution for identifiers and function calls.

The compiler has no scoping rules of its own. It hands every identifier
and every call to a `Resolver`; with no resolver configured, identifiers
fail with `UnboundIdentifier` and calls with `UnsupportedConstruct`.
"""

from __future__ import annotations

import math
from typing import Mapping, Sequence

from ..errors import UnboundIdentifier, UnsupportedConstruct
from .backend import Backend, Value


class Resolver:
    """Base class for name resolution strategies."""

    def resolve_ident(self, name: str, backend: Backend) -> Value:
        raise UnboundIdentifier(name)

    def resolve_call(self, name: str, args: Sequence[Value], backend: Backend) -> Value:
        raise UnsupportedConstruct("call to '" + name + "'")


class Scope(Resolver):
    """Resolves identifiers to named constants and calls to known functions.

    `constants` maps names to values, emitted as float constants.
    `functions` maps names to arities; a known call is emitted through
    `Backend.emit_call`, leaving the backend to bind the symbol.
    """

    def __init__(
        self,
        constants: Mapping[str, float] | None = None,
        functions: Mapping[str, int] | None = None,
    ):
        self.constants: dict[str, float] = dict(constants or {})
        self.functions: dict[str, int] = dict(functions or {})

    def define(self, name: str, value: float) -> None:
        self.constants[name] = float(value)

    def resolve_ident(self, name: str, backend: Backend) -> Value:
        if name not in self.constants:
            raise UnboundIdentifier(name)
        return backend.const_float(self.constants[name])

    def resolve_call(self, name: str, args: Sequence[Value], backend: Backend) -> Value:
        if name not in self.functions:
            raise UnsupportedConstruct("call to unknown function '" + name + "'")
        arity = self.functions[name]
        if len(args) != arity:
            raise UnsupportedConstruct(
                "function '"
                + name
                + "' takes "
                + str(arity)
                + " argument"
                + ("" if arity == 1 else "s")
                + ", got "
                + str(len(args))
            )
        return backend.emit_call(name, args)


MATH_CONSTANTS: dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
    "tau": math.tau,
    "inf": math.inf,
    "nan": math.nan,
}

MATH_FUNCTIONS: dict[str, int] = {
    "sin": 1,
    "cos": 1,
    "tan": 1,
    "asin": 1,
    "acos": 1,
    "atan": 1,
    "exp": 1,
    "log": 1,
    "log10": 1,
    "sqrt": 1,
    "fabs": 1,
    "floor": 1,
    "ceil": 1,
    "pow": 2,
    "atan2": 2,
    "fmod": 2,
}


def math_scope() -> Scope:
    """A fresh scope with the C math library's common constants and functions."""
    return Scope(MATH_CONSTANTS, MATH_FUNCTIONS)
