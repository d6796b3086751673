"""Generate code for a valid calc expression."""

from __future__ import annotations

from .backend import (
    ENTRY_SIGNATURE as ENTRY_SIGNATURE,
    ENTRYPOINT as ENTRYPOINT,
    Backend as Backend,
    Signature as Signature,
)
from .bytecode import BytecodeBackend as BytecodeBackend, Program as Program
from .compiler import Compiler as Compiler, translate as translate
from .resolve import Resolver as Resolver, Scope as Scope, math_scope as math_scope
