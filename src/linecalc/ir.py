"""JAX lowering of parsed lines for batches of accumulators."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Callable, Final

import jax
import jax.numpy as jnp

from .diagnostics import Diagnostic, DiagnosticSink, default_sink
from .errors import LineCalcError, SquareRootDomainError, ZeroDivisorError
from .operations import Operation, arity
from .parser import expect_end, iter_arguments, recognize_operation

_COMPILE_CACHE_MAX: Final[int] = max(1, int(os.environ.get("LINECALC_COMPILE_CACHE_MAX", "256")))
_COMPILED_LINE_CACHE: dict[str, "LineIR"] = {}
_COMPILED_LINE_CACHE_STATS: dict[str, int] = {"hits": 0, "misses": 0, "evictions": 0}

_NODE_OPS: Final[dict[Operation, str]] = {
    Operation.SET: "set",
    Operation.ADD: "add",
    Operation.SUBTRACT: "sub",
    Operation.MULTIPLY: "mul",
    Operation.DIVIDE: "div",
    Operation.REMAINDER: "rem",
    Operation.POWER: "pow",
    Operation.NEGATE: "neg",
    Operation.SQUARE_ROOT: "sqrt",
}


def _sqrt_positive(x: jnp.ndarray) -> jnp.ndarray:
    # Non-positive accumulators stay as they are.
    positive = x > 0
    return jnp.where(positive, jnp.sqrt(jnp.where(positive, x, 1)), x)


_UNARY_KERNELS: Final[dict[str, Callable[[jnp.ndarray], jnp.ndarray]]] = {
    "neg": lambda x: -x,
    "sqrt": _sqrt_positive,
}

_BINARY_KERNELS: Final[dict[str, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]]] = {
    "set": lambda w, x: jnp.broadcast_to(x, jnp.shape(w)).astype(w.dtype),
    "add": lambda w, x: w + x,
    "sub": lambda w, x: w - x,
    "mul": lambda w, x: w * x,
    "div": lambda w, x: w / x,
    "rem": jnp.fmod,
    "pow": jnp.power,
}


@dataclass(frozen=True)
class IRNode:
    """Single SSA-like node; node 0 is always the accumulator input."""

    id: int
    op: str
    inputs: tuple[int, ...] = ()
    value: float | None = None


@dataclass(frozen=True)
class LineIR:
    nodes: tuple[IRNode, ...]
    output: int
    operation: Operation
    source: str = ""


class _Lowerer:
    def __init__(self) -> None:
        self.nodes: list[IRNode] = []

    def _add(self, op: str, *, inputs: tuple[int, ...] = (), value: float | None = None) -> int:
        node_id = len(self.nodes)
        self.nodes.append(IRNode(id=node_id, op=op, inputs=inputs, value=value))
        return node_id

    def lower(self, line: str) -> LineIR:
        # Lowered while scanning: the first failure in line order is raised.
        op, fold, cursor = recognize_operation(line)
        acc = self._add("acc")
        node_op = _NODE_OPS[op]
        if arity(op) == 1:
            expect_end(line, cursor)
            out = self._add(node_op, inputs=(acc,))
            return LineIR(nodes=tuple(self.nodes), output=out, operation=op, source=line)

        out = acc
        for argument in iter_arguments(line, cursor, fold=fold):
            if node_op in {"div", "rem"} and argument == 0:
                raise ZeroDivisorError("division" if node_op == "div" else "remainder", argument)
            const = self._add("const", value=argument)
            out = self._add(node_op, inputs=(out, const))
        return LineIR(nodes=tuple(self.nodes), output=out, operation=op, source=line)


def _as_float_array(value) -> jnp.ndarray:
    arr = jnp.asarray(value)
    if not jnp.issubdtype(arr.dtype, jnp.floating):
        arr = arr.astype(jnp.result_type(float))
    return arr


def evaluate_ir(ir: LineIR, accumulators) -> jnp.ndarray:
    """Execute lowered IR with ``jax.numpy`` operations."""
    values: list[jnp.ndarray | None] = [None] * len(ir.nodes)
    for node in ir.nodes:
        if node.op == "acc":
            values[node.id] = _as_float_array(accumulators)
        elif node.op == "const":
            values[node.id] = jnp.asarray(node.value, dtype=values[0].dtype)
        elif node.op in _UNARY_KERNELS:
            values[node.id] = _UNARY_KERNELS[node.op](values[node.inputs[0]])
        elif node.op in _BINARY_KERNELS:
            values[node.id] = _BINARY_KERNELS[node.op](values[node.inputs[0]], values[node.inputs[1]])
        else:
            raise AssertionError(f"unknown IR op {node.op!r}")
    return values[ir.output]


def lower_line(line: str, *, use_cache: bool = True) -> LineIR:
    """Parse ``line`` and lower it to IR. Raises ``LineCalcError`` on bad lines."""
    if use_cache:
        cached = _COMPILED_LINE_CACHE.get(line)
        if cached is not None:
            _COMPILED_LINE_CACHE_STATS["hits"] += 1
            return cached
        _COMPILED_LINE_CACHE_STATS["misses"] += 1

    ir = _Lowerer().lower(line)
    if use_cache:
        if len(_COMPILED_LINE_CACHE) >= _COMPILE_CACHE_MAX:
            _COMPILED_LINE_CACHE.pop(next(iter(_COMPILED_LINE_CACHE)))
            _COMPILED_LINE_CACHE_STATS["evictions"] += 1
        _COMPILED_LINE_CACHE[line] = ir
    return ir


@dataclass
class CompiledLine:
    """Callable wrapper around lowered IR with an optional ``jax.jit``."""

    ir: LineIR
    _jitted: Callable | None = field(default=None, init=False, repr=False)

    @property
    def source(self) -> str:
        return self.ir.source

    def __call__(self, accumulators) -> jnp.ndarray:
        return evaluate_ir(self.ir, accumulators)

    def jit(self) -> Callable:
        if self._jitted is None:
            ir = self.ir
            self._jitted = jax.jit(lambda accumulators: evaluate_ir(ir, accumulators))
        return self._jitted


def compile_line(line: str, *, use_cache: bool = True) -> CompiledLine:
    return CompiledLine(ir=lower_line(line, use_cache=use_cache))


def compile_cache_stats(*, reset: bool = False) -> dict[str, float | int]:
    hits = _COMPILED_LINE_CACHE_STATS["hits"]
    misses = _COMPILED_LINE_CACHE_STATS["misses"]
    total = hits + misses
    stats: dict[str, float | int] = {
        "hits": hits,
        "misses": misses,
        "evictions": _COMPILED_LINE_CACHE_STATS["evictions"],
        "size": len(_COMPILED_LINE_CACHE),
        "max_size": _COMPILE_CACHE_MAX,
        "hit_rate": float(hits / total) if total else 0.0,
    }
    if reset:
        _COMPILED_LINE_CACHE.clear()
        for key in _COMPILED_LINE_CACHE_STATS:
            _COMPILED_LINE_CACHE_STATS[key] = 0
    return stats


def process_batch(accumulators, line: str, *, sink: DiagnosticSink | None = None) -> jnp.ndarray:
    """Apply ``line`` to every accumulator in the batch.

    A line that fails to parse or lower leaves the whole batch unchanged.
    Square roots of non-positive or nan elements keep those elements and produce a
    single warning.
    """
    sink = sink or default_sink()
    values = _as_float_array(accumulators)
    try:
        compiled = compile_line(line)
    except LineCalcError as err:
        sink.report(Diagnostic.from_error(err, line))
        return values

    if compiled.ir.operation is Operation.SQUARE_ROOT:
        bad = int(jnp.count_nonzero(~(values > 0)))
        if bad:
            sink.report(
                Diagnostic(
                    severity="warning",
                    message=f"Bad argument for SQRT in {bad} element(s)",
                    line=line,
                    kind=SquareRootDomainError.kind,
                )
            )
    return compiled(values)
