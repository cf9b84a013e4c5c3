"""The FOCAL command interpreter: direct commands, stored programs and expressions."""

from __future__ import annotations

import argparse
import math
import os
import re
import sys
from dataclasses import dataclass
from enum import Enum

from kcretro.program import Program, ProgramLine, format_line
from kcretro.scanner import Cursor, FocalError, RefKind, is_alnum, is_alpha, is_digit
from kcretro.symbols import Symbol, SymbolKind, SymbolTable, install_builtins

MAX_NAME = 15
MAX_NUMBER = 19
DEFAULT_FORMAT = "%9.4f"
EXPONENT_FORMAT = "%6e"
PROMPT = "*"

_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class _Mode(Enum):
    TOP = 0
    DO_LINE = 1
    DO_GROUP = 2
    DO_ALL = 3
    FOR = 4


@dataclass
class _Frame:
    """A saved execution state on the control stack."""

    mode: _Mode
    line: ProgramLine | None
    text: str
    pos: int
    symbol: Symbol | None = None
    limit: float = 0.0
    step: float = 0.0


def _atof(text: str) -> float:
    match = _FLOAT_PREFIX.match(text)
    return float(match.group(1)) if match else 0.0


def _divide(a: float, b: float) -> float:
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _power(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        if a < 0 and b.is_integer() and int(b) % 2:
            return -math.inf
        return math.inf
    except ValueError:
        if a == 0 and b < 0:
            return math.inf
        return math.nan


class Interpreter:
    """Runs FOCAL commands against a stored program and a symbol table."""

    def __init__(self, stdin=None, stdout=None, rng=None):
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.program = Program()
        self.symbols = install_builtins(SymbolTable(), rng)
        self.finished = False
        self._format = DEFAULT_FORMAT
        self._command = ""
        self._cursor = Cursor("")
        self._line: ProgramLine | None = None
        self._mode = _Mode.TOP
        self._control: list[_Frame] = []
        self._for_symbol: Symbol | None = None
        self._for_limit = 0.0
        self._for_step = 0.0
        self._commands = {
            "a": self._ask,
            "c": self._comment,
            "d": self._do,
            "e": self._erase,
            "f": self._for,
            "g": self._goto,
            "i": self._if,
            "l": self._library,
            "t": self._type,
            "r": self._return,
            "s": self._set,
            "w": self._write,
            "x": self._dump,
        }

    # ------------------------------------------------------------------ public

    def execute(self, command):
        """Run one command line; a numbered line is stored in the program instead.

        A diagnostic is written to the output and the FocalError re-raised.
        """
        self._command = command.split("\n", 1)[0]
        self._mode = _Mode.TOP
        self._line = None
        self._cursor = Cursor(self._command)
        try:
            c = self._nonblank()
            if c:
                if is_digit(c):
                    self._inject(c)
                else:
                    self._cursor.unread()
                    self._process()
        except FocalError as err:
            self._report(err.message)
            self._control.clear()
            raise

    def evaluate(self, expression):
        """Evaluate an expression against the current symbols."""
        self._command = expression
        self._line = None
        self._cursor = Cursor(expression)
        return self._expression()

    def run(self):
        """Prompt for and execute commands until quit or end of input."""
        while not self.finished:
            self.stdout.write(PROMPT)
            text = self.stdin.readline()
            if not text:
                self.stdout.write("\n")
                break
            try:
                self.execute(text)
            except FocalError:
                continue

    # ------------------------------------------------------------- scanning

    def _nonblank(self) -> str:
        return self._cursor.next_nonblank()

    def _report(self, message: str) -> None:
        parts = [f"{message}!\n"]
        if self._line is not None:
            parts.append(format_line(self._line) + "\n")
            parts.append("      ")
        else:
            parts.append(f"*{self._command}\n ")
        parts.append(" " * max(self._cursor.pos, 0))
        parts.append("^\n")
        self.stdout.write("".join(parts))

    # ------------------------------------------------------- control stack

    def _push(self) -> None:
        frame = _Frame(self._mode, self._line, self._cursor.text, self._cursor.pos)
        if self._mode is _Mode.FOR:
            frame.symbol = self._for_symbol
            frame.limit = self._for_limit
            frame.step = self._for_step
        self._control.append(frame)

    def _pop(self) -> None:
        frame = self._control.pop()
        self._cursor = Cursor(frame.text, frame.pos)
        self._line = frame.line
        self._mode = frame.mode
        if frame.mode is _Mode.FOR:
            self._for_symbol = frame.symbol
            self._for_limit = frame.limit
            self._for_step = frame.step

    def _pop_do(self) -> None:
        if not self._control:
            raise FocalError("Return not in do")
        self._pop()

    def _pop_for(self) -> None:
        if not self._control:
            raise FocalError("For stack botch")
        self._pop()

    def _clear_fors(self, symbol: Symbol) -> None:
        if self._mode is _Mode.FOR and self._for_symbol is symbol:
            self._pop_for()
            return
        for index, frame in reversed(list(enumerate(self._control))):
            if frame.mode is _Mode.FOR and frame.symbol is symbol:
                del self._control[index]
                break

    def _repeat_for(self) -> bool:
        symbol = self._for_symbol
        symbol.value += self._for_step
        if (self._for_step > 0.0 and symbol.value <= self._for_limit) or (
            self._for_step < 0.0 and symbol.value >= self._for_limit
        ):
            frame = self._control[-1]
            self._line = frame.line
            self._cursor = Cursor(frame.text, frame.pos)
            return True
        self._pop_for()
        return False

    def _jump(self, line: ProgramLine) -> None:
        self._line = line
        self._cursor = Cursor(line.text)

    def _first_line(self) -> ProgramLine:
        line = self.program.first()
        if line is None:
            self._line = None
            raise FocalError("No program")
        return line

    # ------------------------------------------------------------ dispatch

    def _process(self) -> None:
        previous_group = 0
        while True:
            c = self._nonblank()
            while c == ";":
                c = self._nonblank()
            if c == "":
                if self._mode is _Mode.FOR and self._repeat_for():
                    continue
                if self._line is not None:
                    previous_group = self._line.group
                    self._line = self.program.next_line(self._line)
                    if self._line is not None:
                        self._cursor = Cursor(self._line.text)
                if self._line is None:
                    if self._mode is _Mode.TOP:
                        return
                    self._pop_do()
                elif self._mode is _Mode.DO_LINE or (
                    self._mode is _Mode.DO_GROUP and previous_group != self._line.group
                ):
                    self._pop_do()
                continue
            self._cursor.skip_alpha()
            command = c.lower() if is_alpha(c) else c
            if command == "q":
                if self._line is None:
                    self.finished = True
                return
            handler = self._commands.get(command)
            if handler is None:
                raise FocalError("Illegal command")
            handler()

    # ------------------------------------------------------------ commands

    def _comment(self) -> None:
        self._cursor.pos = len(self._cursor.text)

    def _do(self) -> None:
        ref = self._cursor.read_line_ref()
        self._push()
        if ref.kind in (RefKind.NONE, RefKind.ALL):
            self._jump(self._first_line())
            self._mode = _Mode.DO_ALL
            return
        if ref.kind is RefKind.GROUP:
            line = self.program.first_in_group(ref.group)
            if line is None:
                raise FocalError("Bad line number")
            self._jump(line)
            self._mode = _Mode.DO_GROUP
            return
        line = self.program.find(ref.group, ref.line)
        if line is None:
            raise FocalError("Bad line number")
        self._jump(line)
        self._mode = _Mode.DO_LINE

    def _erase(self) -> None:
        ref = self._cursor.read_line_ref()
        if ref.kind is RefKind.NONE:
            self.symbols.erase()
        else:
            self.program.erase(ref, current=self._line)

    def _for(self) -> None:
        symbol = self._symbol()
        self._clear_fors(symbol)
        if self._nonblank() != "=":
            raise FocalError("Missing = sign")
        symbol.value = self._expression()
        if self._nonblank() != ",":
            raise FocalError("Missing comma")
        limit = self._expression()
        c = self._nonblank()
        if c == ";":
            step = 1.0
        elif c == ",":
            step = self._expression()
            if self._nonblank() != ";":
                raise FocalError("Missing semi")
        else:
            raise FocalError("Bad for")
        self._push()
        self._for_symbol = symbol
        self._for_limit = limit
        self._for_step = step
        self._mode = _Mode.FOR

    def _goto(self) -> None:
        ref = self._cursor.read_line_ref()
        if ref.kind is RefKind.NONE:
            self._jump(self._first_line())
            return
        if ref.kind is RefKind.LINE:
            line = self.program.find(ref.group, ref.line)
            if line is not None:
                self._jump(line)
                return
        raise FocalError("Bad line number")

    def _skip_branch(self) -> bool:
        cursor = self._cursor
        while cursor.peek() not in ("", ",", ";"):
            cursor.advance()
        if cursor.peek() != ",":
            return False
        cursor.advance()
        return True

    def _if(self) -> None:
        value = self._expression()
        if value >= 0.0:
            if not self._skip_branch():
                return
            if value != 0.0 and not self._skip_branch():
                return
        ref = self._cursor.read_line_ref()
        if ref.kind is RefKind.LINE:
            line = self.program.find(ref.group, ref.line)
            if line is not None:
                self._jump(line)
                return
        raise FocalError("Bad line number")

    def _return(self) -> None:
        while self._mode is _Mode.FOR:
            self._pop_for()
        self._pop_do()

    def _set(self) -> None:
        symbol = self._symbol()
        if self._nonblank() != "=":
            raise FocalError("Missing = sign")
        symbol.value = self._expression()

    def _write(self) -> None:
        ref = self._cursor.read_line_ref()
        self.stdout.write(self.program.listing(ref))

    def _dump(self) -> None:
        for text in self.symbols.dump():
            self.stdout.write(text + "\n")

    def _ask(self) -> None:
        cursor = self._cursor
        while (c := self._nonblank()) not in ("", ";"):
            if c == '"':
                while (c := cursor.advance()) not in ("", '"'):
                    self.stdout.write(c)
                if c != "":
                    continue
                raise FocalError('Missing `"\' in ask')
            if c == ",":
                continue
            cursor.unread()
            symbol = self._symbol()
            self.stdout.write(": ")
            answer = self.stdin.readline()
            if not answer:
                self.stdout.write("\n")
                raise FocalError("EOF in ask")
            symbol.value = _atof(answer)
        cursor.unread()

    def _type(self) -> None:
        cursor = self._cursor
        while (c := self._nonblank()) not in ("", ";"):
            if c == "%":
                c = self._nonblank()
                if c in ("", ";", ","):
                    self._format = EXPONENT_FORMAT
                    cursor.unread()
                    continue
                width = cursor.read_number(c)
                if self._nonblank() != ".":
                    raise FocalError("Missing . in format")
                places = cursor.read_number(self._nonblank())
                self._format = f"%{width}.{places}f"
                continue
            if c == ",":
                continue
            if c == "!":
                self.stdout.write("\n")
                continue
            if c == "#":
                self.stdout.write("\r")
                continue
            if c == '"':
                while (c := cursor.advance()) not in ("", '"'):
                    self.stdout.write(c)
                if c == "":
                    raise FocalError('Missing `"\' in type')
                continue
            cursor.unread()
            self.stdout.write(self._format % self._expression())
        cursor.unread()

    def _inject(self, c: str) -> None:
        ref = self._cursor.read_line_ref(c)
        if ref.kind is not RefKind.LINE:
            raise FocalError("Illegal line number")
        text = ""
        if self._nonblank():
            self._cursor.unread()
            text = self._cursor.text[self._cursor.pos:]
        self.program.insert(ref.group, ref.line, text)

    # ------------------------------------------------------------- library

    def _library(self) -> None:
        cursor = self._cursor
        sub = self._nonblank()
        if sub not in ("c", "s", "l", "d"):
            raise FocalError("Bad library command")
        cursor.skip_alpha()
        while cursor.peek() in (" ", "\t"):
            cursor.advance()
        if sub != "l" and cursor.at_end():
            raise FocalError("Missing file name")
        name = cursor.text[cursor.pos:]
        cursor.pos = len(cursor.text)
        if sub == "c":
            self._call(name)
        elif sub == "d":
            try:
                os.remove(name)
            except OSError:
                raise FocalError("Cannot delete") from None
        elif sub == "l":
            self._list(name or ".")
        else:
            self._save(name)

    def _call(self, name: str) -> None:
        try:
            with open(name, encoding="latin-1") as handle:
                content = handle.read()
        except OSError:
            raise FocalError("Cannot open") from None
        self.program.clear()
        saved = self._cursor
        # Only lines ended by a newline are read; an unterminated tail is dropped.
        for text in content.split("\n")[:-1]:
            self._cursor = Cursor(text)
            c = self._nonblank()
            if c:
                if not is_digit(c):
                    raise FocalError("Direct line in call")
                self._inject(c)
        self._cursor = saved

    def _save(self, name: str) -> None:
        try:
            with open(name, "w", encoding="latin-1") as handle:
                handle.write(self.program.listing(None))
        except OSError:
            raise FocalError("Cannot create") from None

    def _list(self, path: str) -> None:
        try:
            names = sorted(os.listdir(path))
        except OSError:
            raise FocalError("Bad directory") from None
        for name in names:
            self.stdout.write(name + "\n")

    # --------------------------------------------------------- expressions

    def _expression(self) -> float:
        c = self._nonblank()
        if c in ("+", "-"):
            value = self._primary()
            if c == "-":
                value = -value
        else:
            self._cursor.unread()
            value = self._primary()
        while (c := self._nonblank()) in ("+", "-"):
            operand = self._primary()
            value = value + operand if c == "+" else value - operand
        self._cursor.unread()
        return value

    def _primary(self) -> float:
        value = self._term()
        while (c := self._nonblank()) in ("*", "/", "^"):
            operand = self._term()
            if c == "*":
                value = value * operand
            elif c == "/":
                value = _divide(value, operand)
            else:
                value = _power(value, operand)
        self._cursor.unread()
        return value

    def _read_name(self, c: str) -> tuple[str, str]:
        chars = []
        while True:
            if len(chars) < MAX_NAME:
                chars.append(c)
            c = self._cursor.advance()
            if not is_alnum(c):
                return "".join(chars), c

    def _skip_blanks(self, c: str) -> str:
        while c in (" ", "\t"):
            c = self._cursor.advance()
        return c

    def _subscript(self, message: str) -> int:
        value = self._expression()
        if self._nonblank() != ")" or not math.isfinite(value):
            raise FocalError(message)
        return int(value)

    def _number(self, c: str) -> float:
        cursor = self._cursor
        has_sign = True
        has_exponent = False
        has_dot = c == "."
        chars = []
        while True:
            if len(chars) >= MAX_NUMBER:
                raise FocalError("Number too long")
            chars.append(c)
            c = cursor.advance()
            if c == ".":
                if has_dot:
                    break
                has_dot = True
            elif c == "e":
                if has_exponent:
                    break
                has_exponent = True
                has_sign = False
                has_dot = True
            elif c in ("+", "-"):
                if has_sign:
                    break
                has_sign = True
            elif not is_digit(c):
                break
        cursor.unread()
        return _atof("".join(chars))

    def _term(self) -> float:
        c = self._nonblank()
        if c in ("(", "[", "<"):
            value = self._expression()
            closing = chr(ord(c) + 1)
            if closing != ")":
                closing = chr(ord(c) + 2)
            if self._nonblank() != closing:
                raise FocalError("Mismatched enclosures")
            return value
        if c == "." or is_digit(c):
            return self._number(c)
        if not is_alpha(c):
            raise FocalError("Expression syntax")
        name, c = self._read_name(c)
        if name[0] in ("f", "F"):
            function = self.symbols.lookup(name, SymbolKind.FUNCTION, 0)
            if function is not None:
                if self._skip_blanks(c) != "(":
                    raise FocalError("Missing `(' for function")
                argument = self._expression()
                if self._nonblank() != ")":
                    raise FocalError("Missing `)' for function")
                return function.func(argument)
        kind = SymbolKind.SCALAR
        subscript = 0
        if self._skip_blanks(c) == "(":
            kind = SymbolKind.ARRAY
            subscript = self._subscript("Missing ) in subscript")
        else:
            self._cursor.unread()
        symbol = self.symbols.lookup(name, kind, subscript)
        if symbol is None:
            raise FocalError("Undefined variable")
        return symbol.value

    def _symbol(self) -> Symbol:
        c = self._nonblank()
        if not is_alpha(c):
            raise FocalError("Missing variable")
        name, c = self._read_name(c)
        kind = SymbolKind.SCALAR
        subscript = 0
        if self._skip_blanks(c) == "(":
            kind = SymbolKind.ARRAY
            subscript = self._subscript("Bad subscript")
        else:
            self._cursor.unread()
        return self.symbols.get_or_create(name, kind, subscript)


def main(argv=None):
    """Start an interactive session on standard input and output."""
    parser = argparse.ArgumentParser(prog="focal", description="Interactive FOCAL interpreter.")
    parser.parse_args(argv)
    Interpreter().run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())