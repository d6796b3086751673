"""Straight-line register bytecode backend, executed in Python.

Value handles are register indexes. Each instruction writes exactly one
fresh register, so the body is in SSA form and runs top to bottom.
Arithmetic follows IEEE-754: dividing by zero yields an infinity or NaN
instead of raising.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Mapping

from ..errors import BackendError
from ..syntax.ast import OpKind
from .backend import Backend, Signature

# Opcodes
OP_CONST = "const"
OP_FADD = "fadd"
OP_FSUB = "fsub"
OP_FMUL = "fmul"
OP_FDIV = "fdiv"
OP_CALL = "call"
OP_RET = "ret"

BINARY_OPCODES: dict[OpKind, str] = {
    OpKind.ADD: OP_FADD,
    OpKind.SUBTRACT: OP_FSUB,
    OpKind.MULTIPLY: OP_FMUL,
    OpKind.DIVIDE: OP_FDIV,
}


def _fdiv(a: float, b: float) -> float:
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _fmod(a: float, b: float) -> float:
    if b == 0.0 or math.isinf(a):
        return math.nan
    return math.fmod(a, b)


def _is_odd_integer(x: float) -> bool:
    return math.isfinite(x) and x == math.floor(x) and math.fmod(x, 2.0) != 0.0


def _fpow(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        # The sign of an overflowed result follows the base only for odd
        # integer exponents.
        if a < 0.0 and _is_odd_integer(b):
            return -math.inf
        return math.inf
    except ValueError:
        # pow(±0, y < 0) is a pole: ±inf for odd integer y, +inf otherwise.
        if a == 0.0 and b < 0.0:
            return math.copysign(math.inf, a) if _is_odd_integer(b) else math.inf
        return math.nan


def _guarded(fn: Callable[[float], float]) -> Callable[[float], float]:
    """Wrap a math function to return NaN or inf the way libm does."""

    def call(x: float) -> float:
        try:
            return fn(x)
        except OverflowError:
            return math.inf
        except ValueError:
            if fn is math.log or fn is math.log10:
                if x == 0.0:
                    return -math.inf
            return math.nan

    return call


MATH_LIBRARY: dict[str, Callable[..., float]] = {
    "sin": _guarded(math.sin),
    "cos": _guarded(math.cos),
    "tan": _guarded(math.tan),
    "asin": _guarded(math.asin),
    "acos": _guarded(math.acos),
    "atan": math.atan,
    "exp": _guarded(math.exp),
    "log": _guarded(math.log),
    "log10": _guarded(math.log10),
    "sqrt": _guarded(math.sqrt),
    "fabs": math.fabs,
    "floor": lambda x: x if math.isinf(x) or math.isnan(x) else float(math.floor(x)),
    "ceil": lambda x: x if math.isinf(x) or math.isnan(x) else float(math.ceil(x)),
    "pow": _fpow,
    "atan2": math.atan2,
    "fmod": _fmod,
}


@dataclass
class Instr:
    """dest = opcode operands. `ret` has no dest and one operand."""

    opcode: str
    dest: int | None
    operands: tuple[int, ...] = ()
    value: float = 0.0
    name: str = ""

    def display(self) -> str:
        if self.opcode == OP_CONST:
            return "%" + str(self.dest) + " = const " + repr(self.value)
        regs = ", ".join("%" + str(r) for r in self.operands)
        if self.opcode == OP_RET:
            return "ret " + regs
        if self.opcode == OP_CALL:
            return "%" + str(self.dest) + " = call " + self.name + "(" + regs + ")"
        return "%" + str(self.dest) + " = " + self.opcode + " " + regs


class Program:
    """A finalized unit: straight-line code plus the functions it calls."""

    def __init__(
        self, name: str, code: list[Instr], functions: Mapping[str, Callable[..., float]]
    ):
        self.name: str = name
        self.code: list[Instr] = code
        self.functions: dict[str, Callable[..., float]] = dict(functions)

    def __call__(self) -> float:
        regs: dict[int, float] = {}
        for instr in self.code:
            op = instr.opcode
            if op == OP_CONST:
                regs[instr.dest] = instr.value
            elif op == OP_FADD:
                regs[instr.dest] = regs[instr.operands[0]] + regs[instr.operands[1]]
            elif op == OP_FSUB:
                regs[instr.dest] = regs[instr.operands[0]] - regs[instr.operands[1]]
            elif op == OP_FMUL:
                regs[instr.dest] = regs[instr.operands[0]] * regs[instr.operands[1]]
            elif op == OP_FDIV:
                regs[instr.dest] = _fdiv(regs[instr.operands[0]], regs[instr.operands[1]])
            elif op == OP_CALL:
                args = [regs[r] for r in instr.operands]
                regs[instr.dest] = float(self.functions[instr.name](*args))
            elif op == OP_RET:
                return regs[instr.operands[0]]
            else:
                raise BackendError("unknown opcode: " + op)
        raise BackendError("unit '" + self.name + "' fell off the end without a return")

    def listing(self) -> str:
        lines = ["define f64 @" + self.name + "() {", "entry:"]
        for instr in self.code:
            lines.append("  " + instr.display())
        lines.append("}")
        return "\n".join(lines) + "\n"


class BytecodeBackend(Backend):
    """Builds a `Program`. Calls bind against `functions` (math by default)."""

    def __init__(self, functions: Mapping[str, Callable[..., float]] | None = None):
        super().__init__()
        self.functions: dict[str, Callable[..., float]] = dict(
            MATH_LIBRARY if functions is None else functions
        )
        self.code: list[Instr] = []
        self._next_reg: int = 0

    def _fresh(self) -> int:
        reg = self._next_reg
        self._next_reg += 1
        return reg

    def _check(self, reg: object) -> int:
        if not isinstance(reg, int) or reg < 0 or reg >= self._next_reg:
            raise BackendError("not a value of this unit: " + repr(reg))
        return reg

    def _create_unit(self, name: str, signature: Signature) -> None:
        self.code = []
        self._next_reg = 0

    def _position_at_entry(self) -> None:
        pass

    def _const_float(self, value: float) -> int:
        reg = self._fresh()
        self.code.append(Instr(OP_CONST, reg, value=value))
        return reg

    def _emit_binary(self, op: OpKind, left: object, right: object) -> int:
        operands = (self._check(left), self._check(right))
        reg = self._fresh()
        self.code.append(Instr(BINARY_OPCODES[op], reg, operands))
        return reg

    def _emit_call(self, name: str, args: list[object]) -> int:
        if name not in self.functions:
            raise BackendError("no function '" + name + "' to call")
        operands = tuple(self._check(a) for a in args)
        reg = self._fresh()
        self.code.append(Instr(OP_CALL, reg, operands, name=name))
        return reg

    def _emit_return(self, value: object) -> None:
        self.code.append(Instr(OP_RET, None, (self._check(value),)))

    def _finalize(self) -> Program:
        return Program(self.unit_name, self.code, self.functions)
