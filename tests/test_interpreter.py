import io
import math
import random

import pytest

from kcretro.interpreter import Interpreter, main
from kcretro.scanner import FocalError


def make(stdin_text="", rng=None):
    out = io.StringIO()
    return Interpreter(io.StringIO(stdin_text), out, rng), out


def expect_error(interp, command, message):
    with pytest.raises(FocalError) as info:
        interp.execute(command)
    assert info.value.message == message


def test_precedence():
    interp, _ = make()
    assert interp.evaluate("2+3*4") == 2 + 3 * 4
    assert interp.evaluate("-2+5") == -2 + 5
    assert interp.evaluate("2^10") == 2**10


def test_enclosures_are_equivalent():
    interp, _ = make()
    assert interp.evaluate("[1+2]*<3>") == interp.evaluate("(1+2)*(3)")
    with pytest.raises(FocalError, match="Mismatched enclosures"):
        interp.evaluate("(1+2]")


def test_number_forms():
    interp, _ = make()
    assert interp.evaluate("1.5e2") == 1.5e2
    assert interp.evaluate(".5") == 0.5


def test_division_by_zero_is_infinite():
    interp, _ = make()
    assert interp.evaluate("1/0") == math.inf


def test_undefined_variable():
    interp, _ = make()
    with pytest.raises(FocalError, match="Undefined variable"):
        interp.evaluate("a")


def test_set_and_type():
    interp, out = make()
    interp.execute("s a=4")
    interp.execute("t a")
    assert out.getvalue() == "%9.4f" % 4


def test_type_string_and_newline():
    interp, out = make()
    interp.execute('t "hi"!')
    assert out.getvalue() == "hi\n"


def test_type_format_persists():
    interp, out = make()
    interp.execute("t %5.1, 2")
    interp.execute("t 3")
    assert out.getvalue() == "%5.1f" % 2 + "%5.1f" % 3


def test_type_exponent_format():
    interp, out = make()
    interp.execute("t %, 2")
    assert out.getvalue() == "%6e" % 2


def test_write_listing_separates_groups():
    interp, out = make()
    interp.execute("1.10 t 1")
    interp.execute("2.10 t 2")
    interp.execute("w")
    assert out.getvalue() == "01.10 t 1\n\n02.10 t 2\n"


def test_for_with_do_group():
    interp, _ = make()
    interp.execute("1.10 s x=x+i")
    interp.execute("2.10 s x=1000")
    interp.execute("s x=0")
    interp.execute("f i=1,4; d 1")
    assert interp.evaluate("x") == sum(range(1, 5))


def test_for_at_top_level():
    interp, _ = make()
    interp.execute("s t=0")
    interp.execute("f i=1,3; s t=t+i")
    assert interp.evaluate("t") == 1 + 2 + 3


def test_for_with_negative_step():
    interp, _ = make()
    interp.execute("s n=0")
    interp.execute("f i=10,1,-3; s n=n+1")
    assert interp.evaluate("n") == len(range(10, 0, -3))


def test_for_without_body_is_error():
    interp, _ = make()
    expect_error(interp, "f i=1,3", "Bad for")


def test_goto_skips_lines():
    interp, _ = make()
    interp.execute("1.10 s y=1; g 1.30")
    interp.execute("1.20 s y=2")
    interp.execute("1.30 s z=y")
    interp.execute("g")
    assert interp.evaluate("z") == interp.evaluate("y") == 1


@pytest.mark.parametrize("value,expected", [("-1", 1), ("0", 2), ("1", 3)])
def test_if_branches(value, expected):
    interp, _ = make()
    interp.execute("2.10 s r=1; q")
    interp.execute("2.20 s r=2; q")
    interp.execute("2.30 s r=3; q")
    interp.execute(f"s v={value}")
    interp.execute("i (v) 2.10, 2.20, 2.30")
    assert interp.evaluate("r") == expected
    assert interp.finished is False


def test_return_ends_do():
    interp, _ = make()
    interp.execute("3.10 s c=c+1; r")
    interp.execute("3.20 s c=100")
    interp.execute("s c=0")
    interp.execute("d 3")
    assert interp.evaluate("c") == 1


def test_quit_at_top_level():
    interp, _ = make()
    interp.execute("q")
    assert interp.finished is True


def test_erase_line_and_symbols():
    interp, out = make()
    interp.execute("1.10 t 1")
    interp.execute("1.20 t 2")
    interp.execute("e 1.10")
    interp.execute("w")
    assert out.getvalue() == "01.20 t 2\n"
    interp.execute("s a=1")
    interp.execute("e")
    with pytest.raises(FocalError, match="Undefined variable"):
        interp.evaluate("a")


def test_erasing_current_line():
    interp, _ = make()
    interp.execute("1.10 e 1.10")
    expect_error(interp, "d 1.10", "Erasing current line")
    assert len(interp.program) == 1


def test_diagnostic_for_direct_command():
    interp, out = make()
    expect_error(interp, "zzz", "Illegal command")
    text = out.getvalue()
    assert text.startswith("Illegal command!\n*zzz\n")
    assert text.endswith("^\n")


def test_diagnostic_for_stored_line():
    interp, out = make()
    interp.execute("1.10 t zz")
    expect_error(interp, "d 1", "Undefined variable")
    assert out.getvalue().startswith("Undefined variable!\n01.10 t zz\n")


@pytest.mark.parametrize(
    "command,message",
    [
        ("d 5", "Bad line number"),
        ("g", "No program"),
        ("r", "Return not in do"),
        ("5 t 1", "Illegal line number"),
        ("s 1=2", "Missing variable"),
        ("s a 2", "Missing = sign"),
    ],
)
def test_command_errors(command, message):
    interp, _ = make()
    expect_error(interp, command, message)


def test_comment_skips_rest_of_line():
    interp, _ = make()
    interp.execute("c hello; s a=1")
    with pytest.raises(FocalError, match="Undefined variable"):
        interp.evaluate("a")


def test_ask_reads_value():
    interp, out = make("7\n")
    interp.execute('a "N"x')
    assert interp.evaluate("x") == 7
    assert out.getvalue() == "N: "


def test_ask_at_end_of_input():
    interp, _ = make("")
    expect_error(interp, "a x", "EOF in ask")


def test_arrays():
    interp, _ = make()
    interp.execute("s a(2)=5")
    interp.execute("s a(3)=6")
    assert interp.evaluate("a(2)") == 5
    assert interp.evaluate("a(3)") == 6
    with pytest.raises(FocalError, match="Undefined variable"):
        interp.evaluate("a(4)")


def test_builtin_functions():
    interp, _ = make()
    assert interp.evaluate("fsqt(16)") == math.sqrt(16)
    assert interp.evaluate("FABS(-3)") == 3
    with pytest.raises(FocalError, match="Fsqt"):
        interp.evaluate("fsqt(-1)")


def test_random_function_uses_generator():
    interp, _ = make(rng=random.Random(1))
    assert interp.evaluate("fran(0)") == random.Random(1).random()


def test_dump_lists_symbols():
    interp, out = make()
    interp.execute("s ab=1")
    interp.execute("x")
    lines = out.getvalue().splitlines()
    assert any(" ab" in line for line in lines)
    assert all(line.endswith(" $") for line in lines)


def test_library_save_and_call_round_trip(tmp_path):
    path = tmp_path / "prog.foc"
    first, out1 = make()
    first.execute("1.10 t 1")
    first.execute("2.10 s a=2")
    first.execute(f"l s {path}")
    second, out2 = make()
    second.execute("9.10 t 9")
    second.execute(f"l c {path}")
    first.execute("w")
    second.execute("w")
    assert out2.getvalue() == out1.getvalue()


def test_library_delete(tmp_path):
    path = tmp_path / "gone.foc"
    path.write_text("1.10 t 1\n")
    interp, _ = make()
    interp.execute(f"l d {path}")
    assert not path.exists()
    expect_error(interp, f"l d {path}", "Cannot delete")


def test_library_list(tmp_path):
    (tmp_path / "b.txt").write_text("")
    (tmp_path / "a.txt").write_text("")
    interp, out = make()
    interp.execute(f"l l {tmp_path}")
    assert out.getvalue() == "a.txt\nb.txt\n"


def test_library_errors(tmp_path):
    interp, _ = make()
    expect_error(interp, f"l c {tmp_path / 'missing'}", "Cannot open")
    expect_error(interp, "l x", "Bad library command")
    expect_error(interp, "l c", "Missing file name")
    direct = tmp_path / "direct.foc"
    direct.write_text("t 1\n")
    expect_error(interp, f"l c {direct}", "Direct line in call")


def test_run_until_quit():
    interp, out = make("s a=2\nt a\nq\n")
    interp.run()
    assert out.getvalue() == "**" + "%9.4f" % 2 + "*"
    assert interp.finished is True


def test_run_continues_after_error_and_ends_at_eof():
    interp, out = make("zzz\nt 1\n")
    interp.run()
    text = out.getvalue()
    assert "Illegal command!" in text
    assert text.endswith("%9.4f" % 1 + "*\n")


def test_main(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("q\n"))
    assert main([]) == 0
    assert capsys.readouterr().out == "*"