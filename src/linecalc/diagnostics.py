"""Pluggable reporting sinks for recoverable line errors."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Literal, Protocol, TextIO

from .errors import LineCalcError

logger = logging.getLogger("linecalc")

Severity = Literal["error", "warning"]


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    message: str
    line: str
    kind: str = "error"

    @classmethod
    def from_error(cls, err: LineCalcError, line: str) -> "Diagnostic":
        return cls(
            severity="error" if err.fatal else "warning",
            message=str(err),
            line=line,
            kind=err.kind,
        )


class DiagnosticSink(Protocol):
    def report(self, diagnostic: Diagnostic) -> None: ...


class LoggingSink:
    """Default sink: forwards diagnostics to the ``linecalc`` logger."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or logger

    def report(self, diagnostic: Diagnostic) -> None:
        level = logging.ERROR if diagnostic.severity == "error" else logging.WARNING
        self.log.log(level, "%s (line %r)", diagnostic.message, diagnostic.line)


class StreamSink:
    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stderr

    def report(self, diagnostic: Diagnostic) -> None:
        print(diagnostic.message, file=self.stream)


@dataclass
class CollectingSink:
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def report(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    @property
    def kinds(self) -> list[str]:
        return [d.kind for d in self.diagnostics]

    def clear(self) -> None:
        self.diagnostics.clear()


_DEFAULT_SINK = LoggingSink()


def default_sink() -> DiagnosticSink:
    return _DEFAULT_SINK
