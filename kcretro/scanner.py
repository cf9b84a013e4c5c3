"""Character-level scanning of command text: blanks, numbers and line references."""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum

BAD_LINE_NUMBER = "Bad line or group number"
MAX_GROUP = 99
MAX_LINE = 99


class FocalError(Exception):
    """A diagnostic raised while scanning, parsing or running a program."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RefKind(Enum):
    """The shape of a line reference."""

    ALL = 0
    GROUP = 1
    LINE = 2
    NONE = 3


@dataclass(frozen=True)
class LineRef:
    """A parsed line reference such as ``ALL``, ``3`` or ``3.14``."""

    kind: RefKind
    group: int = 0
    line: int = 0


def is_digit(c: str) -> bool:
    """True for a single ASCII decimal digit."""
    return len(c) == 1 and c in string.digits


def is_alpha(c: str) -> bool:
    """True for a single ASCII letter."""
    return len(c) == 1 and c in string.ascii_letters


def is_alnum(c: str) -> bool:
    """True for a single ASCII letter or digit."""
    return is_digit(c) or is_alpha(c)


class Cursor:
    """A read position in a line of text.

    Reading past the end yields the empty string, which plays the part of
    the end-of-line marker; the position may step one past the end and be
    stepped back with :meth:`unread`.
    """

    def __init__(self, text: str, pos: int = 0) -> None:
        self.text = text
        self.pos = pos

    def peek(self) -> str:
        """Return the character at the position without consuming it."""
        if 0 <= self.pos < len(self.text):
            return self.text[self.pos]
        return ""

    def advance(self) -> str:
        """Consume and return the character at the position."""
        c = self.peek()
        self.pos += 1
        return c

    def unread(self) -> None:
        """Step back one character."""
        self.pos -= 1

    def at_end(self) -> bool:
        """True when nothing is left to read."""
        return self.pos >= len(self.text)

    def next_nonblank(self) -> str:
        """Consume blanks and tabs and return the next character, consumed."""
        while True:
            c = self.advance()
            if c not in (" ", "\t"):
                return c

    def skip_alpha(self) -> None:
        """Consume a run of letters."""
        while is_alpha(self.peek()):
            self.pos += 1

    def read_number(self, c: str) -> int:
        """Read an unsigned decimal number whose first, consumed, character is ``c``."""
        n = 0
        while is_digit(c):
            n = 10 * n + int(c)
            c = self.advance()
        self.unread()
        return n

    def read_line_ref(self, c: str | None = None) -> LineRef:
        """Read a line reference; ``c`` is its consumed first character, if any."""
        if c is None:
            c = self.next_nonblank()
        if c in ("", ";"):
            self.unread()
            return LineRef(RefKind.NONE)
        if c in ("A", "a"):
            self.skip_alpha()
            return LineRef(RefKind.ALL)
        if not is_digit(c):
            raise FocalError(BAD_LINE_NUMBER)
        group = self.read_number(c)
        if not 1 <= group <= MAX_GROUP:
            raise FocalError(BAD_LINE_NUMBER)
        if self.peek() != ".":
            return LineRef(RefKind.GROUP, group, 0)
        self.advance()
        line = self.read_number(self.advance())
        if line == 0:
            return LineRef(RefKind.GROUP, group, 0)
        if not 1 <= line <= MAX_LINE:
            raise FocalError(BAD_LINE_NUMBER)
        return LineRef(RefKind.LINE, group, line)