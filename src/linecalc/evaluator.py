"""Accumulator evaluation for single calculator lines."""

from __future__ import annotations

import math
from typing import Callable, Final

from .diagnostics import Diagnostic, DiagnosticSink, default_sink
from .errors import LineCalcError, SquareRootDomainError, ZeroDivisorError
from .operations import Operation, arity
from .parser import expect_end, iter_arguments, recognize_operation


def _is_odd_integer(x: float) -> bool:
    return math.isfinite(x) and x == math.floor(x) and math.fmod(x, 2.0) != 0.0


def c_pow(base: float, exponent: float) -> float:
    """``math.pow`` that returns ``nan``/``inf`` where C ``pow`` would."""
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and _is_odd_integer(exponent):
            return -math.inf
        return math.inf
    except ValueError:
        if base == 0 and exponent < 0:
            if _is_odd_integer(exponent):
                return math.copysign(math.inf, base)
            return math.inf
        return math.nan


def _divide(left: float, right: float) -> float:
    if right == 0:
        raise ZeroDivisorError("division", right)
    return left / right


def _remainder(left: float, right: float) -> float:
    if right == 0:
        raise ZeroDivisorError("remainder", right)
    try:
        return math.fmod(left, right)
    except ValueError:
        # C fmod of an infinite dividend is nan.
        return math.nan


_BINARY_OPS: Final[dict[Operation, Callable[[float, float], float]]] = {
    Operation.SET: lambda _left, right: right,
    Operation.ADD: lambda left, right: left + right,
    Operation.SUBTRACT: lambda left, right: left - right,
    Operation.MULTIPLY: lambda left, right: left * right,
    Operation.DIVIDE: _divide,
    Operation.REMAINDER: _remainder,
    Operation.POWER: c_pow,
}


def apply_unary(op: Operation, current: float) -> float:
    if op is Operation.NEGATE:
        return -current
    if op is Operation.SQUARE_ROOT:
        if current > 0:
            return math.sqrt(current)
        raise SquareRootDomainError(current)
    raise AssertionError(f"not a unary operation: {op!r}")


def apply_binary(op: Operation, left: float, right: float) -> float:
    try:
        fn = _BINARY_OPS[op]
    except KeyError:
        raise AssertionError(f"not a binary operation: {op!r}") from None
    return fn(left, right)


def evaluate_line(current: float, line: str) -> float:
    """Apply ``line`` to ``current`` and return the new accumulator.

    Raises the first ``LineCalcError`` met, in line order. Nothing is
    applied partially: a failing fold step discards the earlier ones.
    """
    op, fold, cursor = recognize_operation(line)
    n = arity(op)
    if n == 1:
        expect_end(line, cursor)
        return apply_unary(op, current)
    if n == 2:
        value = current
        for argument in iter_arguments(line, cursor, fold=fold):
            value = apply_binary(op, value, argument)
        return value
    # recognize_operation raises instead of returning ERROR.
    raise AssertionError(f"operation without arity: {op!r}")


def process_line(current: float, line: str, *, sink: DiagnosticSink | None = None) -> float:
    """Non-raising form of ``evaluate_line``.

    Errors are reported to ``sink`` (the logging sink by default) and the
    accumulator is returned unchanged.
    """
    try:
        return evaluate_line(current, line)
    except LineCalcError as err:
        (sink or default_sink()).report(Diagnostic.from_error(err, line))
        return current
