"""The symbol table of variables, arrays and built-in functions."""

from __future__ import annotations

import math
import random
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum

from kcretro.scanner import FocalError

N_HASH = 255
MAX_NAME = 15


class SymbolKind(IntEnum):
    """What a symbol names."""

    SCALAR = 0
    ARRAY = 1
    FUNCTION = 2


@dataclass(eq=False)
class Symbol:
    """One entry in the symbol table."""

    name: str
    kind: SymbolKind
    subscript: int = 0
    value: float = 0.0
    func: Callable[[float], float] | None = None


def _name_hash(name: str) -> int:
    data = name.encode("latin-1", "replace")
    first = data[0] if data else 0
    second = data[1] if len(data) > 1 else 0
    return (second << 5) + first


def _bucket(name: str, kind: SymbolKind, subscript: int) -> int:
    key = _name_hash(name)
    if kind == SymbolKind.ARRAY:
        key += subscript << 3
    return key & N_HASH


class SymbolTable:
    """Hashed symbol table; each array element is a symbol of its own."""

    def __init__(self) -> None:
        self._buckets: list[list[Symbol]] = [[] for _ in range(N_HASH + 1)]

    def lookup(self, name, kind, subscript=0):
        """Return the matching symbol, or None."""
        name = name[:MAX_NAME]
        for sym in self._buckets[_bucket(name, kind, subscript)]:
            if (
                sym.kind == kind
                and (kind != SymbolKind.ARRAY or sym.subscript == subscript)
                and sym.name == name
            ):
                return sym
        return None

    def get_or_create(self, name, kind, subscript=0):
        """Return the matching symbol, creating it with value 0 if missing."""
        name = name[:MAX_NAME]
        sym = self.lookup(name, kind, subscript)
        if sym is None:
            sym = Symbol(name, SymbolKind(kind), subscript)
            self._buckets[_bucket(name, kind, subscript)].insert(0, sym)
        return sym

    def add_function(self, name, func):
        """Enter a built-in function under ``name``."""
        sym = Symbol(name[:MAX_NAME], SymbolKind.FUNCTION, 0, func=func)
        self._buckets[_bucket(sym.name, sym.kind, 0)].insert(0, sym)
        return sym

    def erase(self):
        """Drop the symbols of every bucket but the last, as the erase command does."""
        for index in range(N_HASH):
            self._buckets[index] = []

    def dump(self):
        """Describe the occupied buckets, one line each."""
        lines = []
        for index in range(N_HASH):
            bucket = self._buckets[index]
            if not bucket:
                continue
            parts = [
                f"{s.name}({s.subscript})" if s.kind == SymbolKind.ARRAY else s.name
                for s in bucket
            ]
            lines.append(f"{index:3d}: " + " ".join(parts) + " $")
        return lines


def _guarded(func: Callable[[float], float]) -> Callable[[float], float]:
    def call(arg: float) -> float:
        try:
            return func(arg)
        except OverflowError:
            return math.inf
        except ValueError:
            return math.nan

    return call


def _flog(arg: float) -> float:
    if arg == 0.0:
        return -math.inf
    if arg < 0.0:
        return math.nan
    return math.log(arg)


def fsqt(arg):
    """Square root; negative arguments are an error."""
    if arg < 0.0:
        raise FocalError("Fsqt < 0.0")
    return math.sqrt(arg)


def fabt(arg):
    """Absolute value."""
    return -arg if arg < 0 else arg


def fsgn(arg):
    """Sign: -1.0 for negatives, 1.0 otherwise (zero included)."""
    if arg < 0:
        return -1.0
    # Zero, negative zero and NaN all count as non-negative.
    return 1.0


def fitr(arg):
    """Integer part, truncated toward zero."""
    if arg < 0:
        return -float(math.floor(-arg))
    if arg == 0:
        return 0.0
    return float(math.floor(arg))


def install_builtins(table, rng=None):
    """Enter the built-in functions under lower- and upper-case names."""
    generator = rng if rng is not None else random.Random()
    functions = [
        ("fsin", _guarded(math.sin)),
        ("fcos", _guarded(math.cos)),
        ("fexp", _guarded(math.exp)),
        ("flog", _flog),
        ("fatn", math.atan),
        ("fsqt", fsqt),
        ("fabs", fabt),
        ("fsgn", fsgn),
        ("fitr", fitr),
        ("fran", lambda _arg: generator.random()),
    ]
    for name, func in functions:
        table.add_function(name, func)
        table.add_function(name.upper(), func)
    return table