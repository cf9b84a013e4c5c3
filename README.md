# kcretro

kcretro holds two things:

- an interpreter for **FOCAL**, the interpretive language of the PDP-8 era
- the rules of a brick-breaking game: bonus and score keeping, board tiles,
  ball movement and ball collisions

It needs nothing beyond the Python standard library and runs on Python 3.10
or later.

## Installation

```
pip install .
```

Install with the `test` extra to run the test suite:

```
pip install .[test]
pytest
```

## The FOCAL interpreter

Start the interactive interpreter:

```
focal
```

At the `*` prompt you type commands. Direct commands run at once. A line that
begins with a line number such as `01.10` is stored in the program instead;
a line number with no text after it deletes that line.

```
*01.10 SET X=1
*01.20 TYPE X*2, !
*DO ALL
   2.0000
*QUIT
```

Commands are recognised by their first letter, in either case:

| Command   | Meaning                                                        |
|-----------|----------------------------------------------------------------|
| `ASK`     | prompt with `: ` and read numbers into variables               |
| `COMMENT` | ignore the rest of the line                                    |
| `DO`      | run a line, a group, or the whole program (`DO` or `DO ALL`)   |
| `ERASE`   | with no argument clear the variables; else delete a line, a group or `ALL` |
| `FOR`     | `FOR I=1,10; ...` loop, with an optional step: `FOR I=10,1,-1; ...` |
| `GOTO`    | jump to a line, or to the start of the program                 |
| `IF`      | `IF (expr) neg,zero,pos` jumps to one of up to three lines     |
| `LIBRARY` | file commands, see below                                       |
| `QUIT`    | stop the running program; at the prompt, leave the interpreter |
| `RETURN`  | return from a `DO`                                             |
| `SET`     | assign a variable or array element: `SET A(3)=2`               |
| `TYPE`    | print expressions, `"strings"`, `!` newline, `#` carriage return; `%w.d` sets a fixed format, a bare `%` an exponent format |
| `WRITE`   | list the program, a group or a line                            |
| `X`       | list the symbol table                                          |

Numbers are printed with the format `%9.4f` until `TYPE` changes it.
Expressions use `+ - * / ^` and the brackets `()`, `[]` and `<>`.

The `LIBRARY` command takes a sub-command given by a **lower-case** letter:

| Form           | Meaning                                           |
|----------------|---------------------------------------------------|
| `L c file`     | clear the program and load numbered lines from a file |
| `L s file`     | save the program listing to a file                |
| `L d file`     | delete a file                                     |
| `L l [dir]`    | list the names in a directory (default `.`)       |

The built-in functions are `FSIN`, `FCOS`, `FEXP`, `FLOG`, `FATN`, `FSQT`,
`FABS`, `FSGN`, `FITR` and `FRAN`, in upper or lower case.

When a command fails, the interpreter prints the message, shows the line with
a caret at the point where scanning stopped, and returns to the prompt.

### From Python

```python
import io
from kcretro.interpreter import Interpreter

out = io.StringIO()
focal = Interpreter(stdin=io.StringIO(), stdout=out, rng=None)
focal.execute("SET A=3")
print(focal.evaluate("A^2 + 1"))   # 10.0
focal.execute('TYPE "A=", A, !')
print(out.getvalue())              # A=   3.0000
```

`Interpreter.execute` raises `kcretro.scanner.FocalError` after writing the
diagnostic; `Interpreter.run` reads commands from its `stdin` until `QUIT`
or end of input. `rng` may be a `random.Random` used by `FRAN`.

The lower-level pieces live in `kcretro.scanner` (`Cursor`, `LineRef`,
`RefKind`, `FocalError`), `kcretro.symbols` (`SymbolTable`, `Symbol`,
`SymbolKind`, `install_builtins`) and `kcretro.program` (`Program`,
`ProgramLine`, `format_line`).

## Game rules

`kcretro.scoring` covers bonus and score keeping:

```python
from kcretro.scoring import BonusCounter, Score, points_per_stone, next_start_bonus

bonus = BonusCounter(400)
bonus.decrement()
print(bonus.value())            # 399
print(points_per_stone(25))     # 100
print(next_start_bonus(950))    # 999

score = Score(lives=5)
score.add(250)                  # True only when an extra life was earned
```

`BonusCounter.drain()` empties the counter and yields the points each step is
worth; `string_to_bcd` and `kc_color` convert digits and colour codes.

`kcretro.board` describes the playing field: `Board` with `cell` and
`is_free`, `classify` to turn a cell code into a `Tile`, `Ball` with `step`
and `is_aligned`, `vram_offset` and `pixel_address` to convert between
screen addresses, and `check_collisions`, which returns a `Collision` saying
which way the ball bounces next and which cells it hit.

## What is not included

The game is not playable: kcretro has no screen drawing, sound, keyboard
handling or game loop, only the rules above as plain functions and classes.