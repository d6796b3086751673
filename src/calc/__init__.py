"""calc: compile arithmetic expressions to a zero-argument float function."""

from __future__ import annotations

import logging

from .errors import (
    BackendError as BackendError,
    CalcError as CalcError,
    CodegenError as CodegenError,
    EngineInvariantViolation as EngineInvariantViolation,
    ParseError as ParseError,
    TokenizeError as TokenizeError,
    UnboundIdentifier as UnboundIdentifier,
    UnsupportedConstruct as UnsupportedConstruct,
)
from .syntax import Expr, parse as parse, to_source as to_source
from .trans import Backend, BytecodeBackend, Resolver, translate
from .trans.backend import Unit

BACKENDS: list[str] = ["llvm", "bytecode"]


def make_backend(name: str, opt_level: int = 0) -> Backend:
    """Create a fresh backend by name. The LLVM one needs llvmlite."""
    if name == "llvm":
        from .trans.llvm import LLVMBackend

        return LLVMBackend(opt_level)
    if name == "bytecode":
        return BytecodeBackend()
    raise ValueError("unknown backend '" + name + "', expected one of: " + ", ".join(BACKENDS))


def compile_expr(
    source: str | Expr,
    backend: Backend | None = None,
    resolver: Resolver | None = None,
    logger: logging.Logger | None = None,
) -> Unit:
    """Parse (if given text) and compile an expression into an invocable unit."""
    expr = parse(source) if isinstance(source, str) else source
    if backend is None:
        backend = make_backend("llvm")
    return translate(expr, backend, resolver, logger)


def evaluate(
    source: str | Expr,
    backend: Backend | None = None,
    resolver: Resolver | None = None,
) -> float:
    """Compile an expression and run it once."""
    return compile_expr(source, backend, resolver)()
