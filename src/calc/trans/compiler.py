"""Tree-to-stack-machine code generation.

`Compiler` walks an expression once in post-order. Every atom pushes one
backend value onto the operand stack; every operator pops its operands and
pushes the value the backend emitted for it. A well-formed tree therefore
leaves exactly one value behind, which becomes the unit's return value.
"""

from __future__ import annotations

import logging

from ..errors import EngineInvariantViolation, UnboundIdentifier, UnsupportedConstruct
from ..syntax.ast import Atom, BinaryOp, Expr, FunctionCall, Ident, Number
from ..syntax.visit import Visitor, walk_binary_op, walk_function_call
from .backend import ENTRY_SIGNATURE, ENTRYPOINT, Backend, Unit, Value
from .resolve import Resolver

_logger = logging.getLogger(__name__)


class Compiler(Visitor):
    """Compile one `Expr` into one backend unit.

    Not safe to share between concurrent compilations: the operand stack
    and the backend cursor belong to the compilation in progress.
    """

    def __init__(
        self,
        backend: Backend,
        resolver: Resolver | None = None,
        logger: logging.Logger | None = None,
    ):
        self.backend: Backend = backend
        self.resolver: Resolver | None = resolver
        self.logger: logging.Logger = logger if logger is not None else _logger
        self.stack: list[Value] = []

    def compile(self, expr: Expr) -> Unit:
        """Generate the entry unit for `expr` and return it finalized."""
        self.stack = []
        self.logger.debug("creating unit %s %s", ENTRYPOINT, ENTRY_SIGNATURE.display())
        self.backend.create_unit(ENTRYPOINT, ENTRY_SIGNATURE)
        self.backend.position_at_entry()

        self.visit_expr(expr)

        if len(self.stack) != 1:
            raise EngineInvariantViolation(len(self.stack))
        self.backend.emit_return(self.stack.pop())
        unit = self.backend.finalize()
        self.logger.debug("finalized unit %s", ENTRYPOINT)
        return unit

    # ── Visitor hooks ───────────────────────────────────────

    def visit_atom(self, atom: Atom) -> None:
        if isinstance(atom, Number):
            self.logger.debug("const %r", atom.value)
            self.stack.append(self.backend.const_float(atom.value))
            return
        if isinstance(atom, Ident):
            if self.resolver is None:
                raise UnboundIdentifier(atom.name)
            self.logger.debug("resolve %s", atom.name)
            self.stack.append(self.resolver.resolve_ident(atom.name, self.backend))
            return
        raise TypeError("unhandled atom type: " + type(atom).__name__)

    def visit_binary_op(self, b: BinaryOp) -> None:
        walk_binary_op(self, b)
        right = self._pop()
        left = self._pop()
        self.logger.debug("binary %s", b.op.name.lower())
        self.stack.append(self.backend.emit_binary(b.op, left, right))

    def visit_function_call(self, f: FunctionCall) -> None:
        if self.resolver is None:
            raise UnsupportedConstruct("call to '" + f.name + "' with no resolver")
        walk_function_call(self, f)
        n = len(f.arguments)
        if len(self.stack) < n:
            raise EngineInvariantViolation(len(self.stack))
        args = self.stack[len(self.stack) - n :]
        del self.stack[len(self.stack) - n :]
        self.logger.debug("call %s/%d", f.name, n)
        self.stack.append(self.resolver.resolve_call(f.name, args, self.backend))

    def _pop(self) -> Value:
        if not self.stack:
            raise EngineInvariantViolation(0)
        return self.stack.pop()


def translate(
    expr: Expr,
    backend: Backend,
    resolver: Resolver | None = None,
    logger: logging.Logger | None = None,
) -> Unit:
    """Run the code generation phase with a fresh compiler."""
    log = logger if logger is not None else _logger
    log.info("Starting the compilation phase")
    unit = Compiler(backend, resolver, log).compile(expr)
    log.info("Finished the compilation phase")
    return unit
