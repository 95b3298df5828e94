"""Scanning of bounded decimal literals and inter-argument whitespace."""

from __future__ import annotations

import os
from typing import Final

from .errors import LiteralError

MAX_DECIMAL_DIGITS: Final[int] = 10
_LENIENT_SPACE: Final[bool] = os.environ.get("LINECALC_LENIENT_SPACE", "0") == "1"
_DIGITS: Final[str] = "0123456789"


def skip_ws(line: str, start: int) -> int:
    i = start
    while i < len(line) and line[i].isspace():
        i += 1
    return i


def scan_number(
    line: str,
    start: int,
    *,
    fold: bool,
    lenient_space: bool | None = None,
) -> tuple[float, int]:
    """Scan a decimal literal starting at ``start``.

    Returns ``(value, end)`` where ``end`` is the first unconsumed index.
    ``end == start`` without an exception means nothing was there to scan.

    At most ``MAX_DECIMAL_DIGITS`` digit characters are read. A single space
    ends the literal under fold; without fold it is rejected unless
    ``lenient_space`` (default: ``LINECALC_LENIENT_SPACE``) is set.
    """
    if lenient_space is None:
        lenient_space = _LENIENT_SPACE

    value = 0.0
    fraction = 1.0
    integer = True
    count = 0
    i = start
    while i < len(line) and count < MAX_DECIMAL_DIGITS:
        ch = line[i]
        if ch in _DIGITS:
            digit = ord(ch) - ord("0")
            if integer:
                value = value * 10 + digit
            else:
                fraction /= 10
                value += digit * fraction
            count += 1
            i += 1
        elif ch == ".":
            integer = False
            i += 1
        elif ch == " " and (fold or lenient_space):
            break
        else:
            raise LiteralError(
                f"Argument parsing error at {i}: {line[i:]!r}",
                start,
                i,
                found=ch,
            )

    separated = (fold or lenient_space) and i < len(line) and line[i].isspace()
    if count >= MAX_DECIMAL_DIGITS and i < len(line) and not separated:
        raise LiteralError(
            f"Argument isn't fully parsed, suffix left: {line[i:]!r}",
            start,
            i,
            found=line[i],
        )
    return value, i
