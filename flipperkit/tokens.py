"""Whitespace token reading with line counting for table description files."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Pattern

_SPACE = re.compile(r"\s*")
_WORD = re.compile(r"\S+")
_INT = re.compile(r"[+-]?\d+")
_FLOAT = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class LoaderError(Exception):
    """A table description could not be parsed."""

    def __init__(self, message: str, line: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (at line {self.line})"


@dataclass
class FileVersion:
    """The version declared at the top of a table file."""

    major: int = 0
    minor: int = 2
    micro: int = 0

    def compare(self, major: int, minor: int, micro: int) -> int:
        """Return -1, 0 or 1 as this version is below, equal to or above the given one."""
        mine = (self.major, self.minor, self.micro)
        other = (major, minor, micro)
        return (mine > other) - (mine < other)


class TokenReader:
    """Reads words and numbers from lines of text, counting lines as they are consumed.

    A number that cannot be read makes the rest of its line be discarded and
    reading continue on the next line.
    """

    def __init__(self, lines: Iterable[str]) -> None:
        if isinstance(lines, str):
            lines = lines.splitlines()
        self._lines = iter(lines)
        self._buffer = ""
        self._pos = 0
        self.line_number = 0

    def _advance_line(self) -> bool:
        try:
            line = next(self._lines)
        except StopIteration:
            return False
        self._buffer = line
        self._pos = 0
        self.line_number += 1
        return True

    def _extract(self, pattern: Pattern[str]) -> str | None:
        while True:
            pos = _SPACE.match(self._buffer, self._pos).end()
            if pos < len(self._buffer):
                match = pattern.match(self._buffer, pos)
                if match:
                    self._pos = match.end()
                    return match.group()
            if not self._advance_line():
                self._pos = len(self._buffer)
                return None

    def next_word(self) -> str | None:
        """Return the next whitespace-separated word, or None at end of input."""
        return self._extract(_WORD)

    def next_int(self) -> int:
        """Return the next integer; raise LoaderError at end of input."""
        text = self._extract(_INT)
        if text is None:
            raise LoaderError("unexpected end of input, expecting an integer", self.line_number)
        return int(text)

    def next_float(self) -> float:
        """Return the next number; raise LoaderError at end of input."""
        text = self._extract(_FLOAT)
        if text is None:
            raise LoaderError("unexpected end of input, expecting a number", self.line_number)
        return float(text)

    def expect(self, word: str) -> None:
        """Read the next word and raise LoaderError unless it equals ``word``."""
        token = self.next_word()
        if token != word:
            found = "" if token is None else token
            raise LoaderError(
                f"Parse error, unexpected token '{found}' expecting '{word}'",
                self.line_number,
            )

    def skip_block(self) -> None:
        """Skip a brace-delimited block, nested blocks included."""
        self.expect("{")
        depth = 1
        while depth > 0:
            token = self.next_word()
            if token is None:
                raise LoaderError("unexpected end of input inside block", self.line_number)
            if token == "{":
                depth += 1
            elif token == "}":
                depth -= 1