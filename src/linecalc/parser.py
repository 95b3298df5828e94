"""Operator recognition and argument iteration for single calculator lines."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from .errors import FoldSyntaxError, MissingArgumentError, LiteralError, UnexpectedSuffixError, UnknownOperationError
from .lexer import scan_number, skip_ws
from .operations import KEYWORDS, SYMBOLS, Instruction, Operation, arity

_FOLD_OPEN = "("
_FOLD_CLOSE = ")"
_KEYWORD_INITIALS = frozenset(keyword[0] for keyword in KEYWORDS)
_KEYWORDS_LONGEST_FIRST = tuple(sorted(KEYWORDS.items(), key=lambda item: -len(item[0])))


def _match_keyword(line: str, start: int) -> tuple[Operation | None, int]:
    """Longest-match lookup against ``KEYWORDS``.

    Returns the operation and its length on a full match; otherwise ``None``
    and the number of characters a character-by-character matcher would have
    consumed before giving up (the matched prefix plus the offending one).
    """
    best = 0
    for keyword, op in _KEYWORDS_LONGEST_FIRST:
        matched = 0
        while matched < len(keyword) and start + matched < len(line) and line[start + matched] == keyword[matched]:
            matched += 1
        if matched == len(keyword):
            return op, matched
        best = max(best, matched)
    return None, best + 1


@dataclass
class _LineParser:
    line: str
    index: int = 0
    fold: bool = False

    def _at_end(self) -> bool:
        return self.index >= len(self.line)

    def _unknown(self, start: int, consumed: int) -> UnknownOperationError:
        # The leading "(" has already been consumed when folding.
        rewind = consumed + (1 if self.fold else 0)
        self.index -= rewind
        return UnknownOperationError(self.line, self.index, rewind)

    def _close_fold(self, op: Operation) -> Operation:
        if not self.fold:
            return op
        at = self.index
        if self._at_end():
            raise FoldSyntaxError(f"Incorrect folded operation specified {self.line!r}", at, at, found="EOL")
        ch = self.line[self.index]
        self.index += 1
        if ch != _FOLD_CLOSE:
            raise FoldSyntaxError(f"Incorrect folded operation specified {self.line!r}", at, self.index, found=ch)
        return op

    def recognize(self) -> Operation:
        if self.line.startswith(_FOLD_OPEN, self.index):
            self.fold = True
            self.index += 1
        start = self.index
        if self._at_end():
            self.index += 1
            raise self._unknown(start, 1)

        ch = self.line[self.index]
        if "0" <= ch <= "9":
            # A leading digit already belongs to the argument.
            return self._close_fold(Operation.SET)
        if ch in SYMBOLS:
            self.index += 1
            return self._close_fold(SYMBOLS[ch])
        if ch in _KEYWORD_INITIALS:
            op, consumed = _match_keyword(self.line, start)
            self.index += consumed
            if op is None:
                raise self._unknown(start, consumed)
            return self._close_fold(op)
        self.index += 1
        raise self._unknown(start, 1)

    def expect_end(self) -> None:
        if not self._at_end():
            raise UnexpectedSuffixError(
                f"Unexpected suffix for a unary operation: {self.line[self.index:]!r}",
                self.index,
                len(self.line),
                found=self.line[self.index :],
            )

    def arguments(self) -> Iterator[float]:
        applied = 0
        while True:
            self.index = skip_ws(self.line, self.index)
            start = self.index
            try:
                value, end = scan_number(self.line, start, fold=self.fold)
            except LiteralError as err:
                if err.end == start:
                    raise MissingArgumentError("No argument for a binary operation", start, start, found=err.found) from err
                self.index = err.end
                raise
            self.index = end
            if end == start:
                # Trailing whitespace after the last folded argument is fine.
                if self.fold and self._at_end() and applied >= 1:
                    return
                raise MissingArgumentError("No argument for a binary operation", start, start, found="EOL")
            applied += 1
            yield value
            if not self.fold or self._at_end():
                return


def recognize_operation(line: str, cursor: int = 0) -> tuple[Operation, bool, int]:
    """Classify the operator at the start of ``line``.

    Returns ``(operation, fold, cursor)`` with the cursor positioned at the
    first argument character. Raises ``UnknownOperationError`` or
    ``FoldSyntaxError``.
    """
    parser = _LineParser(line, index=cursor)
    op = parser.recognize()
    return op, parser.fold, parser.index


def iter_arguments(line: str, cursor: int, *, fold: bool) -> Iterator[float]:
    """Lazily yield the literal arguments of a binary or folded line."""
    return _LineParser(line, index=cursor, fold=fold).arguments()


def expect_end(line: str, cursor: int) -> None:
    _LineParser(line, index=cursor).expect_end()


def parse_line(line: str) -> Instruction:
    """Parse a whole line, materializing every argument."""
    parser = _LineParser(line)
    op = parser.recognize()
    if arity(op) == 1:
        parser.expect_end()
        return Instruction(op=op, fold=parser.fold, source=line)
    return Instruction(op=op, fold=parser.fold, arguments=tuple(parser.arguments()), source=line)
