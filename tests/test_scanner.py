import pytest

from kcretro.scanner import (
    BAD_LINE_NUMBER,
    Cursor,
    FocalError,
    LineRef,
    RefKind,
    is_alnum,
    is_alpha,
    is_digit,
)


def test_next_nonblank_skips_blanks_and_tabs():
    cur = Cursor(" \t x")
    assert cur.next_nonblank() == "x"
    assert cur.at_end()


def test_advance_past_end_yields_empty_and_unread_restores():
    cur = Cursor("a")
    assert cur.advance() == "a"
    assert cur.advance() == ""
    cur.unread()
    assert cur.pos == 1
    assert cur.peek() == ""


def test_read_number_stops_before_non_digit():
    cur = Cursor("123;")
    assert cur.read_number(cur.advance()) == 123
    assert cur.peek() == ";"


def test_read_number_to_end_of_text():
    cur = Cursor("42")
    assert cur.read_number(cur.advance()) == 42
    assert cur.at_end()


def test_line_ref_full_line():
    assert Cursor("1.2").read_line_ref() == LineRef(RefKind.LINE, 1, 2)


def test_line_ref_with_given_first_char():
    cur = Cursor("5.07 T X")
    c = cur.advance()
    assert cur.read_line_ref(c) == LineRef(RefKind.LINE, 5, 7)
    assert cur.peek() == " "


def test_line_ref_group():
    assert Cursor("3").read_line_ref() == LineRef(RefKind.GROUP, 3, 0)


def test_line_ref_group_with_zero_line():
    assert Cursor("3.0").read_line_ref() == LineRef(RefKind.GROUP, 3, 0)


@pytest.mark.parametrize("text", ["a", "ALL", "all;"])
def test_line_ref_all_consumes_word(text):
    cur = Cursor(text)
    assert cur.read_line_ref().kind is RefKind.ALL
    assert not is_alpha(cur.peek())


def test_line_ref_none_at_end_leaves_position():
    cur = Cursor("   ")
    assert cur.read_line_ref().kind is RefKind.NONE
    assert cur.at_end()
    assert cur.peek() == ""


def test_line_ref_none_before_semicolon():
    cur = Cursor(" ;T")
    assert cur.read_line_ref().kind is RefKind.NONE
    assert cur.peek() == ";"


@pytest.mark.parametrize("text", ["0", "100", "x", "1.100", "-1"])
def test_bad_line_refs(text):
    with pytest.raises(FocalError) as info:
        Cursor(text).read_line_ref()
    assert info.value.message == BAD_LINE_NUMBER


def test_character_classes_reject_empty_and_non_ascii():
    assert not is_digit("")
    assert not is_alpha("")
    assert not is_alpha("é")
    assert is_alnum("z") and is_alnum("7")