import pytest

from stermcore.config import Config
from stermcore.glyph import Attr, SelectionType, Snap, WinMode, truecolor
from stermcore.screen import TermMode
from stermcore.terminal import Terminal, define_color


def make(cols=20, rows=5, config=None):
    out = bytearray()
    printed = []
    term = Terminal(cols, rows, config=config, writer=out.extend, printer=printed.append)
    return term, out, printed


def row_text(term, y):
    return "".join(chr(g.u) for g in term.screen.line(y)).rstrip()


def test_plain_text_moves_cursor():
    term, _, _ = make()
    assert term.write(b"hi") == 2
    assert row_text(term, 0) == "hi"
    assert term.cursor.x == 2


def test_cursor_position_and_report():
    term, out, _ = make()
    term.write(b"\x1b[3;5H")
    assert (term.cursor.x, term.cursor.y) == (4, 2)
    term.write(b"\x1b[6n")
    assert bytes(out) == b"\x1b[3;5R"


def test_status_report_and_identification():
    term, out, _ = make()
    term.write(b"\x1b[5n")
    assert bytes(out) == b"\x1b[0n"
    out.clear()
    term.write(b"\x1b[c")
    assert bytes(out) == Config().vtiden


def test_sgr_sets_and_resets_attributes():
    cfg = Config()
    term, _, _ = make(config=cfg)
    term.write(b"\x1b[1;31m")
    assert term.cursor.attr.mode & Attr.BOLD
    assert term.cursor.attr.fg == 1
    term.write(b"\x1b[0m")
    assert not term.cursor.attr.mode & Attr.BOLD
    assert term.cursor.attr.fg == cfg.defaultfg


def test_sgr_extended_colours():
    term, _, _ = make()
    term.write(b"\x1b[38;2;10;20;30m")
    assert term.cursor.attr.fg == truecolor(10, 20, 30)
    term.write(b"\x1b[48;5;200m")
    assert term.cursor.attr.bg == 200
    term.write(b"\x1b[38;5;300m")
    assert term.cursor.attr.fg == truecolor(10, 20, 30)


def test_define_color_consumes_parameters():
    assert define_color([38, 5, 100], 0) == (100, 2)
    assert define_color([38, 2, 1, 2, 3], 0) == (truecolor(1, 2, 3), 4)
    assert define_color([38, 2, 1], 0) == (None, 0)


def test_osc_titles():
    term, _, _ = make()
    term.write(b"\x1b]0;hello\x07")
    assert term.window.title == "hello"
    assert term.window.icon_title == "hello"
    term.write(b"\x1b]2;abc\x1b\\")
    assert term.window.title == "abc"
    assert term.window.icon_title == "hello"


def test_osc52_requires_window_ops():
    term, _, _ = make()
    term.write(b"\x1b]52;c;aGVsbG8=\x07")
    assert term.window.clipboard is None
    allowed, _, _ = make(config=Config(allowwindowops=True))
    allowed.write(b"\x1b]52;c;aGVsbG8=\x07")
    assert allowed.window.clipboard == "hello"


def test_osc4_set_and_query_colour():
    term, out, _ = make()
    term.write(b"\x1b]4;1;#ff0000\x07")
    term.write(b"\x1b]4;1;?\x07")
    assert bytes(out) == b"\x1b]4;1;rgb:ffff/0000/0000\x07"


def test_alternate_screen_round_trip():
    term, _, _ = make()
    term.write(b"hi\x1b[?1049h")
    assert term.mode & TermMode.ALTSCREEN
    assert row_text(term, 0) == ""
    term.write(b"zz\x1b[?1049l")
    assert not term.mode & TermMode.ALTSCREEN
    assert row_text(term, 0) == "hi"
    assert term.cursor.x == 2


def test_insert_mode_shifts_text():
    term, _, _ = make()
    term.write(b"abc\r\x1b[4hX")
    assert row_text(term, 0) == "Xabc"


def test_autowrap_marks_line():
    term, _, _ = make(cols=5)
    term.write(b"abcdef")
    assert row_text(term, 0) == "abcde"
    assert row_text(term, 1) == "f"
    assert term.screen.line(0)[4].mode & Attr.WRAP


def test_erase_display():
    term, _, _ = make()
    term.write(b"one\r\ntwo\x1b[2J")
    assert all(row_text(term, y) == "" for y in range(term.screen.row))


def test_repeat_last_character():
    term, _, _ = make()
    term.write(b"a\x1b[3b")
    assert row_text(term, 0) == "aaaa"


def test_tab_moves_to_tab_stop():
    cfg = Config()
    term, _, _ = make(config=cfg)
    term.write(b"\t")
    assert term.cursor.x == cfg.tabspaces


def test_newline_mode_affects_input_and_output():
    term, out, _ = make()
    term.write(b"ab\x1b[20h\n")
    assert term.cursor.x == 0
    term.send(b"a\rb")
    assert bytes(out) == b"a\r\nb"


def test_echo_mode_shows_sent_text():
    term, out, _ = make()
    term.write(b"\x1b[12l")
    term.send(b"x", True)
    assert row_text(term, 0) == "x"
    assert bytes(out) == b"x"


def test_incomplete_utf8_is_left_over():
    term, _, _ = make()
    assert term.write(b"a\xc3") == 1
    assert term.write("é".encode()) == 2
    assert row_text(term, 0) == "aé"


def test_wide_character_occupies_two_cells():
    term, _, _ = make()
    term.write("世".encode())
    line = term.screen.line(0)
    assert line[0].mode & Attr.WIDE
    assert line[1].mode == Attr.WDUMMY
    assert term.cursor.x == 2


def test_dec_graphics_charset():
    term, _, _ = make()
    term.write(b"\x1b(0q\x1b(Bq")
    assert row_text(term, 0) == "─q"


def test_show_ctrl_uses_caret_notation():
    term, _, _ = make()
    term.write(b"\x01", True)
    assert row_text(term, 0) == "^A"


def test_print_mode_and_dumps():
    term, _, printed = make()
    term.write(b"\x1b[5iab")
    assert b"".join(printed) == b"ab"
    printed.clear()
    term.write(b"\x1b[4i")
    term.dump_line(0)
    assert b"".join(printed) == b"ab\n"
    printed.clear()
    term.dump()
    assert b"".join(printed).count(b"\n") == term.screen.row


def test_toggle_printer():
    term, _, printed = make()
    term.toggle_printer()
    assert term.mode & TermMode.PRINT
    assert term.write(b"ab") == 2
    assert b"".join(printed) == b"ab"
    term.toggle_printer()
    assert not term.mode & TermMode.PRINT
    assert term.write(b"c") == 1
    assert b"".join(printed) == b"ab"
    assert row_text(term, 0) == "abc"


def test_dump_selection():
    term, _, printed = make()
    term.write(b"hello")
    term.selection.start(0, 0, Snap.NONE)
    term.selection.extend(4, 0, SelectionType.REGULAR, False)
    term.selection.extend(4, 0, SelectionType.REGULAR, True)
    term.dump_selection()
    assert b"".join(printed) == b"hello"


def test_full_reset_restores_title_and_cursor():
    term, _, _ = make()
    term.write(b"\x1b]2;abc\x07\x1b[?25lxyz")
    assert term.window.mode & WinMode.HIDE
    term.write(b"\x1bc")
    assert term.window.title == term.window.default_title
    assert not term.window.mode & WinMode.HIDE
    assert row_text(term, 0) == ""
    assert (term.cursor.x, term.cursor.y) == (0, 0)


def test_cursor_style():
    term, _, _ = make()
    term.write(b"\x1b[4 q")
    assert term.window.cursor_style == 4
    term.write(b"\x1b[9 q")
    assert term.window.cursor_style == 4


def test_screen_alignment_test():
    term, _, _ = make(cols=4, rows=2)
    term.write(b"\x1b#8")
    assert row_text(term, 0) == "EEEE"
    assert row_text(term, 1) == "EEEE"


def test_utf8_mode_can_be_switched_off():
    term, _, _ = make()
    assert term.write(b"\x1b%@") == 3
    assert not term.mode & TermMode.UTF8
    assert term.write(b"\xc3\xa9") == 2
    assert row_text(term, 0) == "\u00c3\u00a9"
    assert term.write(b"\x1b%G") == 3
    assert term.mode & TermMode.UTF8
    assert term.write("é".encode()) == 2
    assert row_text(term, 0) == "\u00c3\u00a9é"


def test_scroll_region_and_scrolling():
    term, _, _ = make(rows=3)
    term.write(b"a\r\nb\r\nc\r\nd")
    assert [row_text(term, y) for y in range(3)] == ["b", "c", "d"]
    term.write(b"\x1b[2;3r")
    assert (term.screen.top, term.screen.bot) == (1, 2)
    assert (term.cursor.x, term.cursor.y) == (0, 0)


def test_mouse_modes():
    term, _, _ = make()
    term.write(b"\x1b[?1003h")
    assert term.window.pointer_motion
    assert term.window.mode & WinMode.MOUSEMANY
    term.write(b"\x1b[?1000h")
    assert not term.window.pointer_motion
    assert term.window.mode & WinMode.MOUSE == WinMode.MOUSEBTN


def test_keyboard_lock_mode():
    term, _, _ = make()
    assert term.write(b"\x1b[2h") == 4
    assert term.window.mode & WinMode.KBDLOCK
    assert term.write(b"\x1b[2l") == 4
    assert not term.window.mode & WinMode.KBDLOCK
    assert row_text(term, 0) == ""


def test_bell_outside_string():
    term, _, _ = make()
    term.write(b"\x07\x07")
    assert term.window.bells == 2


def test_resize_rejects_bad_size():
    term, _, _ = make()
    with pytest.raises(ValueError):
        term.resize(0, 5)
    term.resize(30, 10)
    assert (term.screen.col, term.screen.row) == (30, 10)