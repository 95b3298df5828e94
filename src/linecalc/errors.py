"""Structured error types for line parsing and evaluation."""

from __future__ import annotations


class LineCalcError(Exception):
    """Base class for structured linecalc errors."""

    kind = "error"
    fatal = True

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class LineParseError(LineCalcError):
    """Failure while recognizing the operator or scanning an argument."""

    def __init__(
        self,
        message: str,
        start: int,
        end: int,
        found: str | None = None,
    ) -> None:
        super().__init__(message)
        self.start = start
        self.end = end
        self.found = found

    def __str__(self) -> str:
        found = ""
        if self.found is not None:
            found = f"; found {self.found!r}"
        return f"{self.message} at span [{self.start}, {self.end}){found}"


class UnknownOperationError(LineParseError):
    kind = "unknown-operation"

    def __init__(self, line: str, start: int, consumed: int) -> None:
        super().__init__(f"Unknown operation {line!r}", start, start + consumed, found=line[start : start + consumed] or None)
        self.consumed = consumed


class FoldSyntaxError(LineParseError):
    kind = "fold-syntax"


class MissingArgumentError(LineParseError):
    kind = "missing-argument"


class LiteralError(LineParseError):
    kind = "literal"


class UnexpectedSuffixError(LineParseError):
    kind = "unexpected-suffix"


class LineRuntimeError(LineCalcError):
    """Arithmetic failure after a successful parse."""


class ZeroDivisorError(LineRuntimeError):
    kind = "zero-divisor"

    def __init__(self, operation: str, divisor: float) -> None:
        super().__init__(f"Bad right argument for {operation}: {divisor:g}")
        self.operation = operation
        self.divisor = divisor


class SquareRootDomainError(LineRuntimeError):
    """Square root of a non-positive accumulator; the value is left as is."""

    kind = "sqrt-domain"
    fatal = False

    def __init__(self, value: float) -> None:
        super().__init__(f"Bad argument for SQRT: {value:g}")
        self.value = value
