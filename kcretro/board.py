"""The playing field of the block-breaking game: tiles, ball motion and collision checks."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, IntEnum

SPACE = 0x20
SCREEN_COLUMNS = 40
PIXEL_BASE_COLUMN = 0x80
COLUMN_STRIDE = 0x100
ADDRESS_MASK = 0xFFFF
LAST_SHIFT = 7


class Tile(Enum):
    """What a room code puts on the field; the high nibble selects it."""

    AIR = 0x00
    WALL1 = 0x10
    WALL2 = 0x20
    SKULL = 0x30
    COLOR_CHANGER = 0x40
    PUSHER = 0x50
    STONE = 0x60


class Vertical(IntEnum):
    """Vertical flight direction of the ball."""

    UP = 0
    DOWN = 1


class Horizontal(IntEnum):
    """Horizontal flight direction of the ball."""

    NEUTRAL = 0
    RIGHT = 1
    LEFT = 2


def classify(code):
    """The tile a room code stands for; unknown high nibbles are air."""
    try:
        return Tile(code & 0xF0)
    except ValueError:
        return Tile.AIR


def vram_offset(pixel_address):
    """The character offset in video RAM for a pixel RAM address."""
    row = (pixel_address & 0xFF) >> 3
    column = (((pixel_address >> 8) & 0xFF) - PIXEL_BASE_COLUMN) & 0xFF
    return SCREEN_COLUMNS * row + column


def pixel_address(vram_offset):
    """The first pixel (or colour) RAM address of a character offset in video RAM."""
    if vram_offset < 0:
        raise ValueError(f"negative video RAM offset: {vram_offset}")
    row, column = divmod(vram_offset, SCREEN_COLUMNS)
    return ((column + PIXEL_BASE_COLUMN) * 256 + row * 8) & ADDRESS_MASK


class Board:
    """A rectangular grid of character codes, indexed by column and row."""

    def __init__(self, cells: Iterable[Iterable[int] | str]) -> None:
        rows = []
        for row in cells:
            if isinstance(row, str):
                rows.append(tuple(ord(ch) for ch in row))
            else:
                rows.append(tuple(int(code) for code in row))
        widths = {len(row) for row in rows}
        if len(widths) > 1:
            raise ValueError("board rows differ in length")
        self._rows = tuple(rows)
        self.height = len(rows)
        self.width = widths.pop() if widths else 0

    def cell(self, column, row):
        """The character code at a position."""
        if not (0 <= column < self.width and 0 <= row < self.height):
            raise IndexError(f"position outside the board: {column}, {row}")
        return self._rows[row][column]

    def is_free(self, column, row):
        """True when the position holds a space."""
        return self.cell(column, row) == SPACE


class Ball:
    """The ball's pixel RAM address and its bit shift to the right within a column."""

    def __init__(self, position):
        if not 0 <= position <= ADDRESS_MASK:
            raise ValueError(f"address out of range: {position:#x}")
        self.position = position
        self.shift = 0

    def step(self, vertical, horizontal):
        """Move one pixel up or down and, unless neutral, one bit left or right."""
        vertical = Vertical(vertical)
        horizontal = Horizontal(horizontal)
        delta = -1 if vertical is Vertical.UP else 1
        position = self.position + delta
        if horizontal is Horizontal.LEFT:
            if self.shift == 0:
                self.shift = LAST_SHIFT
                position -= COLUMN_STRIDE
            else:
                self.shift -= 1
        elif horizontal is Horizontal.RIGHT:
            if self.shift == LAST_SHIFT:
                self.shift = 0
                position += COLUMN_STRIDE
            else:
                self.shift += 1
        self.position = position & ADDRESS_MASK

    def is_aligned(self):
        """True when the ball sits exactly on a character row."""
        return (self.position & 0x07) == 0

    @property
    def cell(self):
        """The (column, row) of the character the ball's address lies in."""
        row, column = divmod(vram_offset(self.position), SCREEN_COLUMNS)
        return column, row


@dataclass(frozen=True)
class Collision:
    """The outcome of a collision check: new directions and the cells that were hit."""

    vertical: Vertical
    horizontal: Horizontal
    main: tuple[int, int] | None = None
    side: tuple[int, int] | None = None
    above: bool = False
    below: bool = False
    left: bool = False
    right: bool = False
    diagonal: bool = False


def check_collisions(board, column, row, vertical, horizontal):
    """Check the cells round an aligned ball and work out where it bounces."""
    vertical = Vertical(vertical)
    horizontal = Horizontal(horizontal)
    state = {
        "vertical": vertical,
        "horizontal": horizontal,
        "main": None,
        "side": None,
        "above": False,
        "below": False,
        "left": False,
        "right": False,
        "diagonal": False,
    }
    dy = -1 if vertical is Vertical.UP else 1

    # the cell straight ahead, above or below
    if not board.is_free(column, row + dy):
        state["vertical"] = Vertical.DOWN if vertical is Vertical.UP else Vertical.UP
        state["above" if vertical is Vertical.UP else "below"] = True
        state["main"] = (column, row + dy)

    if horizontal is not Horizontal.NEUTRAL:
        dx = -1 if horizontal is Horizontal.LEFT else 1
        away = Horizontal.RIGHT if horizontal is Horizontal.LEFT else Horizontal.LEFT
        flag = "left" if horizontal is Horizontal.LEFT else "right"
        if not board.is_free(column + dx, row):
            state["horizontal"] = away
            state[flag] = True
            state["side"] = (column + dx, row)
        ahead_hit = state["above"] or state["below"]
        if not ahead_hit and not state[flag] and not board.is_free(column + dx, row + dy):
            state["vertical"] = Vertical.DOWN if vertical is Vertical.UP else Vertical.UP
            state["horizontal"] = away
            state["diagonal"] = True
            state["side"] = (column + dx, row + dy)

    return Collision(**state)