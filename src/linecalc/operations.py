"""Operation set, arity and the parsed-instruction value."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final


class Operation(Enum):
    ERROR = "error"
    SET = "set"
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    REMAINDER = "remainder"
    NEGATE = "negate"
    POWER = "power"
    SQUARE_ROOT = "sqrt"


_UNARY: Final[frozenset[Operation]] = frozenset({Operation.NEGATE, Operation.SQUARE_ROOT})
_BINARY: Final[frozenset[Operation]] = frozenset(
    {
        Operation.SET,
        Operation.ADD,
        Operation.SUBTRACT,
        Operation.MULTIPLY,
        Operation.DIVIDE,
        Operation.REMAINDER,
        Operation.POWER,
    }
)

# Single-character operator tokens. Digits map to SET separately since they
# are not consumed by the recognizer.
SYMBOLS: Final[dict[str, Operation]] = {
    "+": Operation.ADD,
    "-": Operation.SUBTRACT,
    "*": Operation.MULTIPLY,
    "/": Operation.DIVIDE,
    "%": Operation.REMAINDER,
    "_": Operation.NEGATE,
    "^": Operation.POWER,
}

KEYWORDS: Final[dict[str, Operation]] = {
    "SQRT": Operation.SQUARE_ROOT,
}


def arity(op: Operation) -> int:
    if op is Operation.ERROR:
        return 0
    if op in _UNARY:
        return 1
    if op in _BINARY:
        return 2
    # Operation is a closed enum; every member is listed above.
    raise AssertionError(f"unhandled operation {op!r}")


@dataclass(frozen=True)
class Instruction:
    """A fully parsed line: operator, fold flag and the literal arguments."""

    op: Operation
    fold: bool
    arguments: tuple[float, ...] = ()
    source: str = ""

    @property
    def arity(self) -> int:
        return arity(self.op)
