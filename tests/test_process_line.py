from __future__ import annotations

import io
import math
import unittest

from linecalc import (
    CollectingSink,
    SquareRootDomainError,
    StreamSink,
    ZeroDivisorError,
    evaluate_line,
    process_line,
)
from linecalc.errors import MissingArgumentError, UnknownOperationError


class ProcessLineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.sink = CollectingSink()

    def _run(self, current: float, line: str) -> float:
        return process_line(current, line, sink=self.sink)

    def test_single_binary_operations(self) -> None:
        cases = [
            (3, "+ 5", 8.0),
            (3, "+5", 8.0),
            (3, "- 5", -2.0),
            (3, "* 5", 15.0),
            (3, "/ 4", 0.75),
            (7, "% 3", 1.0),
            (-7, "% 3", -1.0),
            (2, "^ 10", 1024.0),
            (9, "^ 0.5", 3.0),
            (123, "5", 5.0),
            (123, "5.5", 5.5),
            (1, "+   2", 3.0),
        ]
        for current, line, expected in cases:
            with self.subTest(line=line, current=current):
                self.assertAlmostEqual(self._run(current, line), expected)
        self.assertEqual(self.sink.diagnostics, [])

    def test_fold_operations(self) -> None:
        cases = [
            (0, "(+) 1 2 3", 6.0),
            (0, "(+) 1 2 3   ", 6.0),
            (0, "(+)1", 1.0),
            (0, "(+)  1   2", 3.0),
            (1, "(*) 2 3 4", 24.0),
            (10, "(-) 1 2", 7.0),
            (100, "(/) 2 5", 10.0),
            (100, "(%) 7 3", 2.0),
            (2, "(^) 2 3", 64.0),
            (0, "(+) 1234567890 1", 1234567891.0),
        ]
        for current, line, expected in cases:
            with self.subTest(line=line):
                self.assertAlmostEqual(self._run(current, line), expected)
        self.assertEqual(self.sink.diagnostics, [])

    def test_negate(self) -> None:
        self.assertEqual(self._run(5, "_"), -5)
        self.assertEqual(self._run(5, "(_)"), -5)
        for x in (0.0, 2.5, -17.0, 1e300):
            with self.subTest(x=x):
                self.assertEqual(self._run(self._run(x, "_"), "_"), x)

    def test_square_root(self) -> None:
        self.assertEqual(self._run(16, "SQRT"), 4.0)
        self.assertEqual(self.sink.diagnostics, [])

    def test_square_root_of_non_positive_is_identity_with_warning(self) -> None:
        for x in (-4.0, 0.0):
            with self.subTest(x=x):
                self.sink.clear()
                self.assertEqual(self._run(x, "SQRT"), x)
                self.assertEqual(self.sink.kinds, ["sqrt-domain"])
                self.assertEqual(self.sink.diagnostics[0].severity, "warning")

    def test_zero_divisor_leaves_accumulator(self) -> None:
        for line in ("/0", "/ 0", "/ 0.0", "%0", "(/) 2 0", "(%) 3 0 1"):
            with self.subTest(line=line):
                self.sink.clear()
                self.assertEqual(self._run(8.0, line), 8.0)
                self.assertEqual(self.sink.kinds, ["zero-divisor"])

    def test_fold_is_all_or_nothing(self) -> None:
        self.assertEqual(self._run(1.0, "(+) 1 2 x"), 1.0)
        self.assertEqual(self.sink.kinds, ["missing-argument"])
        self.sink.clear()
        self.assertEqual(self._run(1.0, "(+) 1 2 3x"), 1.0)
        self.assertEqual(self.sink.kinds, ["literal"])

    def test_first_failure_in_line_order_is_reported(self) -> None:
        self.assertEqual(self._run(1.0, "(/) 0 x"), 1.0)
        self.assertEqual(self.sink.kinds, ["zero-divisor"])

    def test_error_lines_never_change_the_accumulator(self) -> None:
        cases = {
            "": "unknown-operation",
            "x": "unknown-operation",
            "S": "unknown-operation",
            "SQ": "unknown-operation",
            "SQR": "unknown-operation",
            "(": "unknown-operation",
            "(x)": "unknown-operation",
            "(+ 1": "fold-syntax",
            "(5)": "fold-syntax",
            "+": "missing-argument",
            "+ ": "missing-argument",
            "+ x": "missing-argument",
            "(+)": "missing-argument",
            "(+)   ": "missing-argument",
            "+ 5x": "literal",
            "+ 5 6": "literal",
            "+ 5 ": "literal",
            "(+) 1\t2": "literal",
            "+ 12345678901": "literal",
            "SQRTX": "unexpected-suffix",
            "_ 1": "unexpected-suffix",
            "(_) ": "unexpected-suffix",
        }
        for line, kind in cases.items():
            with self.subTest(line=line):
                self.sink.clear()
                self.assertEqual(self._run(7.25, line), 7.25)
                self.assertEqual(self.sink.kinds, [kind])
                self.assertEqual(self.sink.diagnostics[0].severity, "error")
                self.assertEqual(self.sink.diagnostics[0].line, line)

    def test_power_follows_c_semantics(self) -> None:
        self.assertTrue(math.isnan(self._run(-4.0, "^ 0.5")))
        self.assertEqual(self._run(10.0, "^ 400"), math.inf)
        self.assertEqual(self._run(-10.0, "^ 401"), -math.inf)
        self.assertEqual(self.sink.diagnostics, [])

    def test_remainder_of_infinite_accumulator_is_nan(self) -> None:
        huge = self._run(9999999999.0, "^ 1000")
        self.assertEqual(huge, math.inf)
        self.assertTrue(math.isnan(self._run(huge, "% 3")))
        self.assertTrue(math.isnan(self._run(-math.inf, "(%) 2 3")))
        self.assertEqual(self.sink.diagnostics, [])

    def test_non_finite_accumulators_never_raise(self) -> None:
        inf, nan = math.inf, math.nan
        expected = {
            "+ 1": {inf: inf, -inf: -inf, "nan": nan},
            "- 1": {inf: inf, -inf: -inf, "nan": nan},
            "* 0": {inf: nan, -inf: nan, "nan": nan},
            "/ 2": {inf: inf, -inf: -inf, "nan": nan},
            "% 3": {inf: nan, -inf: nan, "nan": nan},
            "(%) 2 3": {inf: nan, -inf: nan, "nan": nan},
            "^ 2": {inf: inf, -inf: inf, "nan": nan},
            "_": {inf: -inf, -inf: inf, "nan": nan},
            "SQRT": {inf: inf, -inf: -inf, "nan": nan},
        }
        for line, results in expected.items():
            for key, want in results.items():
                current = nan if key == "nan" else key
                with self.subTest(line=line, current=current):
                    self.sink.clear()
                    got = self._run(current, line)
                    self.assertIsInstance(got, float)
                    if math.isnan(want):
                        self.assertTrue(math.isnan(got))
                    else:
                        self.assertEqual(got, want)
                    if line == "SQRT" and not current > 0:
                        self.assertEqual(self.sink.kinds, ["sqrt-domain"])
                        self.assertEqual(self.sink.diagnostics[0].severity, "warning")
                    else:
                        self.assertEqual(self.sink.diagnostics, [])

    def test_default_sink_logs(self) -> None:
        with self.assertLogs("linecalc", level="ERROR") as logs:
            self.assertEqual(process_line(1.0, "x"), 1.0)
        self.assertIn("Unknown operation", logs.output[0])

        with self.assertLogs("linecalc", level="WARNING") as logs:
            self.assertEqual(process_line(-1.0, "SQRT"), -1.0)
        self.assertIn("WARNING", logs.output[0])
        self.assertIn("SQRT", logs.output[0])

    def test_stream_sink(self) -> None:
        stream = io.StringIO()
        self.assertEqual(process_line(2.0, "/0", sink=StreamSink(stream)), 2.0)
        self.assertEqual(stream.getvalue(), "Bad right argument for division: 0\n")


class EvaluateLineTests(unittest.TestCase):
    def test_returns_new_value(self) -> None:
        self.assertEqual(evaluate_line(3, "+ 5"), 8.0)

    def test_raises_structured_errors(self) -> None:
        with self.assertRaises(ZeroDivisorError) as ctx:
            evaluate_line(1.0, "/0")
        self.assertEqual(ctx.exception.operation, "division")
        with self.assertRaises(SquareRootDomainError) as ctx:
            evaluate_line(-1.0, "SQRT")
        self.assertFalse(ctx.exception.fatal)
        with self.assertRaises(MissingArgumentError):
            evaluate_line(1.0, "(+)")
        with self.assertRaises(UnknownOperationError):
            evaluate_line(1.0, "?")


if __name__ == "__main__":
    unittest.main()
