"""LLVM backend: builds IR with llvmlite and JIT-compiles it with MCJIT.

The unit becomes `define double @calc_main()` with one `entry` block.
`sqrt` and `fabs` lower to LLVM intrinsics; every other call is declared as
an external `double (double, ...)` and bound to the C math library's
symbol of the same name.
"""

from __future__ import annotations

import ctypes
import ctypes.util
import logging

import llvmlite
import llvmlite.binding as llvm
import llvmlite.ir as ir

from ..errors import BackendError
from ..syntax.ast import OpKind
from .backend import Backend, Signature

_logger = logging.getLogger(__name__)

MODULE_NAME = "calc"

INTRINSICS: dict[str, str] = {
    "sqrt": "llvm.sqrt",
    "fabs": "llvm.fabs",
}

_initialized = False
_libm: ctypes.CDLL | None = None


def _initialize() -> None:
    global _initialized
    if _initialized:
        return
    # Releases from 0.45 on set up the LLVM core themselves and reject
    # an explicit initialize().
    if _llvmlite_version() < (0, 45):
        llvm.initialize()
    llvm.initialize_native_target()
    llvm.initialize_native_asmprinter()
    _initialized = True


def _llvmlite_version() -> tuple[int, int]:
    major, minor = llvmlite.__version__.split(".")[:2]
    return int(major), int("".join(c for c in minor if c.isdigit()))


def _bind_external(name: str) -> None:
    """Make `name` from the C math library visible to the JIT linker."""
    global _libm
    if _libm is None:
        # find_library returns None when there is no separate libm, in which
        # case CDLL(None) searches the running process.
        _libm = ctypes.CDLL(ctypes.util.find_library("m"))
    try:
        fn = getattr(_libm, name)
    except AttributeError:
        raise BackendError("no math library symbol '" + name + "'") from None
    llvm.add_symbol(name, ctypes.cast(fn, ctypes.c_void_p).value)


class JitFunction:
    """A JIT-compiled entry unit. Keeps its execution engine alive."""

    def __init__(self, name: str, ir_text: str, engine: llvm.ExecutionEngine, address: int):
        self.name: str = name
        self.ir: str = ir_text
        self.address: int = address
        self._engine = engine
        self._cfunc = ctypes.CFUNCTYPE(ctypes.c_double)(address)

    def __call__(self) -> float:
        return float(self._cfunc())

    def __repr__(self) -> str:
        return "<JitFunction " + self.name + " at " + hex(self.address) + ">"


class LLVMBackend(Backend):
    """Emit LLVM IR; `finalize()` returns a `JitFunction`."""

    def __init__(self, opt_level: int = 0):
        super().__init__()
        if opt_level < 0 or opt_level > 3:
            raise BackendError("optimization level must be 0-3, got " + str(opt_level))
        _initialize()
        self.opt_level: int = opt_level
        self.double: ir.DoubleType = ir.DoubleType()
        self.module: ir.Module = ir.Module(name=MODULE_NAME)
        self.function: ir.Function | None = None
        self.block: ir.Block | None = None
        self.builder: ir.IRBuilder | None = None
        self._externals: list[str] = []

    def _create_unit(self, name: str, signature: Signature) -> None:
        # Every unit is fn() -> f64.
        fnty = ir.FunctionType(self.double, [])
        self.function = ir.Function(self.module, fnty, name=name)
        self.block = self.function.append_basic_block(name="entry")
        self.builder = ir.IRBuilder()

    def _position_at_entry(self) -> None:
        self.builder.position_at_end(self.block)

    def _const_float(self, value: float) -> ir.Constant:
        return ir.Constant(self.double, value)

    def _emit_binary(self, op: OpKind, left: ir.Value, right: ir.Value) -> ir.Value:
        if op == OpKind.ADD:
            return self.builder.fadd(left, right, name="addtmp")
        if op == OpKind.SUBTRACT:
            return self.builder.fsub(left, right, name="subtmp")
        if op == OpKind.MULTIPLY:
            return self.builder.fmul(left, right, name="multmp")
        if op == OpKind.DIVIDE:
            return self.builder.fdiv(left, right, name="divtmp")
        raise BackendError("unhandled operator: " + op.name)

    def _emit_call(self, name: str, args: list[ir.Value]) -> ir.Value:
        callee = self._declare(name, len(args))
        return self.builder.call(callee, args, name="calltmp")

    def _declare(self, name: str, arity: int) -> ir.Function:
        fnty = ir.FunctionType(self.double, [self.double] * arity)
        if name in INTRINSICS:
            return self.module.declare_intrinsic(INTRINSICS[name], [self.double], fnty)
        existing = self.module.globals.get(name)
        if existing is not None:
            if existing is self.function or existing.ftype != fnty:
                raise BackendError("cannot call '" + name + "' with " + str(arity) + " arguments")
            return existing
        self._externals.append(name)
        return ir.Function(self.module, fnty, name=name)

    def _emit_return(self, value: ir.Value) -> None:
        self.builder.ret(value)

    def _finalize(self) -> JitFunction:
        ir_text = str(self.module)
        try:
            llvm_mod = llvm.parse_assembly(ir_text)
            llvm_mod.verify()
        except RuntimeError as e:
            raise BackendError("invalid module: " + str(e)) from e
        for name in self._externals:
            _bind_external(name)
        target = llvm.Target.from_default_triple()
        target_machine = target.create_target_machine(opt=self.opt_level)
        engine = llvm.create_mcjit_compiler(llvm_mod, target_machine)
        engine.finalize_object()
        address = engine.get_function_address(self.unit_name)
        if address == 0:
            raise BackendError("JIT produced no code for '" + self.unit_name + "'")
        _logger.debug("jit compiled %s at %#x (opt=%d)", self.unit_name, address, self.opt_level)
        return JitFunction(self.unit_name, ir_text, engine, address)
