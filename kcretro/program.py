"""The stored program: numbered lines kept in group and line order."""

from __future__ import annotations

import bisect
from dataclasses import dataclass

from kcretro.scanner import FocalError, LineRef, RefKind


@dataclass(frozen=True)
class ProgramLine:
    """One stored line of program text."""

    group: int
    number: int
    text: str

    @property
    def key(self) -> tuple[int, int]:
        return (self.group, self.number)


def format_line(line):
    """Render a line as ``GG.LL text``."""
    return f"{line.group:02d}.{line.number:02d} {line.text}"


class Program:
    """An ordered collection of program lines."""

    def __init__(self) -> None:
        self._lines: list[ProgramLine] = []

    def __iter__(self):
        return iter(list(self._lines))

    def __len__(self):
        return len(self._lines)

    def _keys(self) -> list[tuple[int, int]]:
        return [line.key for line in self._lines]

    def insert(self, group, number, text):
        """Store a line, replacing one with the same number; empty text only deletes."""
        if not (1 <= group <= 99 and 1 <= number <= 99):
            raise ValueError(f"line number out of range: {group}.{number}")
        self.delete(group, number)
        if not text:
            return None
        line = ProgramLine(group, number, text)
        index = bisect.bisect_left(self._keys(), line.key)
        self._lines.insert(index, line)
        return line

    def delete(self, group, number):
        """Remove one line; return whether it was there."""
        line = self.find(group, number)
        if line is None:
            return False
        self._lines.remove(line)
        return True

    def erase(self, ref, current=None):
        """Erase the lines ``ref`` selects; erasing ``current`` is an error."""
        if ref.kind is RefKind.NONE:
            return
        kept = []
        remaining = list(self._lines)
        for position, line in enumerate(remaining):
            selected = ref.kind is RefKind.ALL or (
                line.group == ref.group
                and (ref.kind is RefKind.GROUP or line.number == ref.line)
            )
            if not selected:
                kept.append(line)
                continue
            if current is not None and line is current:
                self._lines = kept + remaining[position:]
                raise FocalError("Erasing current line")
        self._lines = kept

    def clear(self):
        """Remove every line."""
        self._lines = []

    def find(self, group, number):
        """Return the line with this number, or None."""
        keys = self._keys()
        index = bisect.bisect_left(keys, (group, number))
        if index < len(keys) and keys[index] == (group, number):
            return self._lines[index]
        return None

    def first(self):
        """Return the first line, or None for an empty program."""
        return self._lines[0] if self._lines else None

    def first_in_group(self, group):
        """Return the first line of ``group``, or None."""
        keys = self._keys()
        index = bisect.bisect_left(keys, (group, 0))
        if index < len(keys) and keys[index][0] == group:
            return self._lines[index]
        return None

    def next_line(self, line):
        """Return the line that follows ``line``, or None at the end."""
        index = bisect.bisect_right(self._keys(), line.key)
        return self._lines[index] if index < len(self._lines) else None

    def _start(self, ref: LineRef) -> int:
        keys = self._keys()
        index = bisect.bisect_left(keys, (ref.group, 0))
        if index >= len(keys) or keys[index][0] != ref.group:
            raise FocalError("Line not found")
        if ref.kind is RefKind.LINE:
            # The search for the line runs on past the end of its group.
            while index < len(keys) and self._lines[index].number != ref.line:
                index += 1
            if index >= len(keys):
                raise FocalError("Line not found")
        return index

    def listing(self, ref=None):
        """Return the text of the lines ``ref`` selects, groups separated by blank lines."""
        if ref is None:
            ref = LineRef(RefKind.ALL)
        index = 0
        if ref.kind not in (RefKind.NONE, RefKind.ALL):
            index = self._start(ref)
        out = []
        lines = self._lines
        while index < len(lines):
            line = lines[index]
            out.append(format_line(line) + "\n")
            if ref.kind is RefKind.LINE:
                break
            index += 1
            if index < len(lines):
                following = lines[index].group
                if ref.kind is RefKind.GROUP and following != ref.group:
                    break
                if following != line.group:
                    out.append("\n")
        return "".join(out)