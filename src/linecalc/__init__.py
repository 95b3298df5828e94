"""linecalc public API."""

from .diagnostics import CollectingSink, Diagnostic, DiagnosticSink, LoggingSink, StreamSink
from .errors import (
    FoldSyntaxError,
    LineCalcError,
    LineParseError,
    LineRuntimeError,
    LiteralError,
    MissingArgumentError,
    SquareRootDomainError,
    UnexpectedSuffixError,
    UnknownOperationError,
    ZeroDivisorError,
)
from .evaluator import evaluate_line, process_line
from .operations import Instruction, Operation, arity
from .parser import parse_line

try:
    from .ir import CompiledLine, LineIR, compile_cache_stats, compile_line, lower_line, process_batch
except ModuleNotFoundError as exc:
    if exc.name and exc.name.startswith("jax"):
        _jax_import_error = exc

        def lower_line(*_args, **_kwargs):
            raise ModuleNotFoundError(
                "jax is required for lower_line(). Install runtime deps first."
            ) from _jax_import_error

        def compile_line(*_args, **_kwargs):
            raise ModuleNotFoundError(
                "jax is required for compile_line(). Install runtime deps first."
            ) from _jax_import_error

        def compile_cache_stats(*_args, **_kwargs):
            raise ModuleNotFoundError(
                "jax is required for compile_cache_stats(). Install runtime deps first."
            ) from _jax_import_error

        def process_batch(*_args, **_kwargs):
            raise ModuleNotFoundError(
                "jax is required for process_batch(). Install runtime deps first."
            ) from _jax_import_error

        class CompiledLine:  # pragma: no cover - import-time fallback
            def __init__(self, *_args, **_kwargs) -> None:
                raise ModuleNotFoundError(
                    "jax is required for CompiledLine(). Install runtime deps first."
                ) from _jax_import_error

        class LineIR:  # pragma: no cover - import-time fallback
            def __init__(self, *_args, **_kwargs) -> None:
                raise ModuleNotFoundError(
                    "jax is required for LineIR(). Install runtime deps first."
                ) from _jax_import_error

    else:
        raise

__all__ = [
    "process_line",
    "evaluate_line",
    "parse_line",
    "arity",
    "Operation",
    "Instruction",
    "lower_line",
    "compile_line",
    "compile_cache_stats",
    "process_batch",
    "CompiledLine",
    "LineIR",
    "Diagnostic",
    "DiagnosticSink",
    "LoggingSink",
    "StreamSink",
    "CollectingSink",
    "LineCalcError",
    "LineParseError",
    "LineRuntimeError",
    "UnknownOperationError",
    "FoldSyntaxError",
    "MissingArgumentError",
    "LiteralError",
    "UnexpectedSuffixError",
    "ZeroDivisorError",
    "SquareRootDomainError",
]
