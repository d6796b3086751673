"""calc CLI: compile and run an arithmetic expression."""

from __future__ import annotations

import logging
import sys

from . import BACKENDS, make_backend
from .errors import BackendError, CodegenError, ParseError, TokenizeError
from .syntax import parse, to_source
from .syntax.ast import Expr
from .trans import Scope, math_scope, translate

EMITS: list[str] = ["value", "ir", "ast", "source"]

USAGE: str = """\
calc [OPTIONS] [EXPR]

Compile EXPR (or stdin) and print its value.

Options:
  --backend NAME     Code generator: llvm, bytecode (default: llvm)
  --emit WHAT        value, ir, ast, source (default: value)
  -O LEVEL           LLVM optimization level 0-3 (default: 0)
  -D NAME=VALUE      Define a named constant (repeatable)
  --no-math          Do not predefine math constants and functions
  -v, --verbose      Log each compilation step to stderr
  --help             Show this help message
  --                 Treat the remaining arguments as the expression
"""


class Options:
    """Parsed command-line settings."""

    def __init__(self) -> None:
        self.backend: str = "llvm"
        self.emit: str = "value"
        self.opt_level: int = 0
        self.defines: dict[str, float] = {}
        self.math: bool = True
        self.verbose: bool = False
        self.source: str | None = None


def _usage_error(msg: str) -> int:
    print("calc: " + msg, file=sys.stderr)
    return 2


def parse_args(args: list[str]) -> Options | int:
    """Parse argv into Options, or return an exit code to stop with."""
    opts = Options()
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        if arg in ("--backend", "--emit", "-O", "-D") and i + 1 >= len(args):
            return _usage_error("missing value for " + arg)
        if arg == "--backend":
            if args[i + 1] not in BACKENDS:
                return _usage_error("unknown backend '" + args[i + 1] + "'")
            opts.backend = args[i + 1]
            i += 2
        elif arg == "--emit":
            if args[i + 1] not in EMITS:
                return _usage_error("unknown emit kind '" + args[i + 1] + "'")
            opts.emit = args[i + 1]
            i += 2
        elif arg == "-O" or (arg.startswith("-O") and len(arg) == 3):
            level = args[i + 1] if arg == "-O" else arg[2:]
            if level not in ("0", "1", "2", "3"):
                return _usage_error("optimization level must be 0-3, got '" + level + "'")
            opts.opt_level = int(level)
            i += 2 if arg == "-O" else 1
        elif arg == "-D":
            define = args[i + 1]
            name, sep, value = define.partition("=")
            if sep == "" or name == "":
                return _usage_error("expected NAME=VALUE, got '" + define + "'")
            try:
                opts.defines[name] = float(value)
            except ValueError:
                return _usage_error("invalid value for '" + name + "': '" + value + "'")
            i += 2
        elif arg == "--no-math":
            opts.math = False
            i += 1
        elif arg == "-v" or arg == "--verbose":
            opts.verbose = True
            i += 1
        elif arg == "--":
            if i + 1 < len(args) and opts.source is None:
                opts.source = " ".join(args[i + 1 :])
            elif i + 1 < len(args):
                return _usage_error("unexpected argument '" + args[i + 1] + "'")
            break
        elif arg.startswith("-") and len(arg) > 1 and not _looks_like_expr(arg):
            return _usage_error("unknown flag '" + arg + "'")
        elif opts.source is None:
            opts.source = arg
            i += 1
        else:
            return _usage_error("unexpected argument '" + arg + "'")
    return opts


def _looks_like_expr(arg: str) -> bool:
    """'-3 + 4' and '-pi' are expressions. Known flags are matched first."""
    c = arg[1]
    return c.isdigit() or c.isalpha() or c == "." or c == "(" or " " in arg


def _scope(opts: Options) -> Scope:
    scope = math_scope() if opts.math else Scope()
    for name, value in opts.defines.items():
        scope.define(name, value)
    return scope


def run(opts: Options) -> int:
    if opts.source is None:
        source = sys.stdin.read()
    else:
        source = opts.source

    try:
        expr: Expr = parse(source)
    except (TokenizeError, ParseError) as e:
        print("calc: parse error: " + str(e), file=sys.stderr)
        return 1

    if opts.emit == "ast":
        print(repr(expr))
        return 0
    if opts.emit == "source":
        print(to_source(expr))
        return 0

    try:
        backend = make_backend(opts.backend, opts.opt_level)
        unit = translate(expr, backend, _scope(opts))
    except CodegenError as e:
        print("calc: codegen error: " + str(e), file=sys.stderr)
        return 1
    except BackendError as e:
        print("calc: backend error: " + str(e), file=sys.stderr)
        return 1

    if opts.emit == "ir":
        text = unit.ir if opts.backend == "llvm" else unit.listing()
        print(text, end="")
        return 0
    print(repr(unit()))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    parsed = parse_args(args)
    if isinstance(parsed, int):
        return parsed
    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    return run(parsed)


if __name__ == "__main__":
    sys.exit(main())
