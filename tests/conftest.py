"""Pytest configuration for the calc test suite."""

from pathlib import Path

import pytest

from calc.syntax.ast import BinaryOp, FunctionCall, Ident, Number, OpKind
from calc.trans.backend import Backend, Signature

TESTS_DIR = Path(__file__).parent


class RecordingBackend(Backend):
    """Logs every emitted operation instead of generating code.

    Values are register names ("%0", "%1", ...) so tests can follow which
    operands fed which instruction. `finalize()` returns the log.
    """

    def __init__(self) -> None:
        super().__init__()
        self.ops: list[tuple] = []
        self._next = 0

    def _fresh(self) -> str:
        name = "%" + str(self._next)
        self._next += 1
        return name

    def _create_unit(self, name: str, signature: Signature) -> None:
        self.ops.append(("create_unit", name, signature))

    def _position_at_entry(self) -> None:
        self.ops.append(("position",))

    def _const_float(self, value: float) -> str:
        dest = self._fresh()
        self.ops.append(("const", value, dest))
        return dest

    def _emit_binary(self, op: OpKind, left: str, right: str) -> str:
        dest = self._fresh()
        self.ops.append((op.name.lower(), left, right, dest))
        return dest

    def _emit_call(self, name: str, args: list[str]) -> str:
        dest = self._fresh()
        self.ops.append(("call", name, tuple(args), dest))
        return dest

    def _emit_return(self, value: str) -> None:
        self.ops.append(("ret", value))

    def _finalize(self) -> list[tuple]:
        self.ops.append(("finalize",))
        return self.ops


def read_tests_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse a .tests file into (name, input, expected) tuples.

    Format:

        === test name
        input lines
        ---
        expected lines
        ---
    """
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            test_input = "\n".join(input_lines)
            expected = "\n".join(expected_lines).strip()
            result.append((test_name, test_input, expected))
        else:
            i += 1
    return result


def discover_tests(subdir: str) -> list[tuple[str, str, str]]:
    """Find all cases under tests/<subdir>, returns (test_id, input, expected)."""
    results = []
    for test_file in sorted((TESTS_DIR / subdir).glob("*.tests")):
        for name, input_code, expected in read_tests_file(test_file):
            results.append((test_file.stem + "/" + name, input_code, expected))
    return results


@pytest.fixture
def recorder() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture(params=["bytecode", "llvm"])
def backend_name(request) -> str:
    """Runs a test once per backend; llvm is skipped without llvmlite."""
    if request.param == "llvm":
        pytest.importorskip("llvmlite")
    return request.param


def random_tree(rng, depth: int, idents: bool = True, calls: bool = True, arities=None):
    """Build an arbitrary well-formed tree of at most `depth` levels.

    With `arities` (name -> argument count), calls only use those names
    with their declared argument counts.
    """
    if depth <= 0 or rng.random() < 0.25:
        if idents and rng.random() < 0.2:
            return Ident(rng.choice(["x", "y", "pi"]))
        return Number(float(rng.randint(-50, 50)) / rng.choice([1, 2, 4, 8]))
    if calls and rng.random() < 0.15:
        if arities is None:
            name, n = rng.choice(["f", "g", "h"]), rng.randint(0, 3)
        else:
            name = rng.choice(sorted(arities))
            n = arities[name]
        args = [random_tree(rng, depth - 1, idents, calls, arities) for _ in range(n)]
        return FunctionCall(name, args)
    op = rng.choice(list(OpKind))
    left = random_tree(rng, depth - 1, idents, calls, arities)
    right = random_tree(rng, depth - 1, idents, calls, arities)
    return BinaryOp(op, left, right)
