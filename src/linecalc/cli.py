"""Thread an accumulator through calculator lines read from files or stdin."""

from __future__ import annotations

import argparse
import fileinput
import logging
import sys
from collections.abc import Iterable
from typing import TextIO

from .diagnostics import DiagnosticSink, LoggingSink, logger
from .evaluator import process_line


def run_lines(
    lines: Iterable[str],
    *,
    initial: float = 0.0,
    out: TextIO | None = None,
    sink: DiagnosticSink | None = None,
    echo: bool = True,
) -> float:
    current = initial
    for raw in lines:
        line = raw.rstrip("\r\n")
        current = process_line(current, line, sink=sink)
        logger.debug("%r -> %r", line, current)
        if echo and out is not None:
            print(repr(current), file=out)
    return current


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("files", nargs="*", help="input files; stdin when omitted")
    parser.add_argument("--initial", type=float, default=0.0, help="starting accumulator value")
    parser.add_argument("--quiet", action="store_true", help="only print the final accumulator")
    parser.add_argument("-v", "--verbose", action="store_true", help="log at DEBUG level")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    with fileinput.input(files=args.files or ("-",)) as lines:
        final = run_lines(
            lines,
            initial=args.initial,
            out=sys.stdout,
            sink=LoggingSink(),
            echo=not args.quiet,
        )
    if args.quiet:
        print(repr(final))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
