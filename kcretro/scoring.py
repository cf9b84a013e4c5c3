"""Scoring rules of the block-breaking game: points, extra lives and the bonus countdown."""

from __future__ import annotations

from collections.abc import Iterator

POINTS_EXTRA_LIFE = 10000
START_LIVES = 5
FIRST_START_BONUS = 400
BONUS_DIGITS = 3
MAX_BONUS = 999


def string_to_bcd(text):
    """Convert a decimal string into unpacked BCD bytes: ``"123"`` gives ``01 02 03``."""
    if not all("0" <= ch <= "9" for ch in text):
        raise ValueError(f"not a decimal number: {text!r}")
    return bytes(ord(ch) - 0x30 for ch in text)


def points_per_stone(stone_count):
    """Points a stone is worth in a room holding ``stone_count`` stones."""
    if stone_count < 10:
        return 250
    return 2500 // stone_count


def next_start_bonus(bonus):
    """The starting bonus of the next room, given the current one."""
    if bonus < 950:
        return bonus + 50
    if bonus == 950:
        return MAX_BONUS
    return bonus


def kc_color(code):
    """The KC colour byte for a stone code or logical colour code: foreground from the low nibble, white background."""
    return ((code & 0x0F) << 3 | 0x07) & 0xFF


class BonusCounter:
    """A three-digit decimal bonus kept as unpacked BCD digits."""

    def __init__(self, start=FIRST_START_BONUS):
        if not 0 <= start <= MAX_BONUS:
            raise ValueError(f"bonus out of range: {start}")
        self._digits = list(string_to_bcd(f"{start:0{BONUS_DIGITS}d}"))

    def is_zero(self):
        """True when every digit is zero."""
        return not any(self._digits)

    def decrement(self):
        """Count down by one; a zero counter wraps round to 999."""
        for index in reversed(range(BONUS_DIGITS)):
            if self._digits[index] > 0:
                self._digits[index] -= 1
                return
            self._digits[index] = 9

    def drain(self) -> Iterator[int]:
        """Empty the counter digit by digit, lowest first, yielding the points each step is worth."""
        increment = 1
        for index in reversed(range(BONUS_DIGITS)):
            while self._digits[index] > 0:
                self._digits[index] -= 1
                yield increment
            increment *= 10

    def digits(self):
        """The digits, most significant first."""
        return tuple(self._digits)

    def value(self):
        """The counter as an integer."""
        result = 0
        for digit in self._digits:
            result = result * 10 + digit
        return result


class Score:
    """Points collected and lives left, with an extra life at every ten thousand points."""

    def __init__(self, lives=START_LIVES):
        self.lives = lives
        self.points = 0
        self.next_life = POINTS_EXTRA_LIFE

    def add(self, points):
        """Add points; return True when this earned an extra life."""
        self.points += points
        if self.points > self.next_life:
            self.lives += 1
            self.next_life += POINTS_EXTRA_LIFE
            return True
        return False