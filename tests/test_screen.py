import pytest

from stermcore.config import Config
from stermcore.glyph import Attr, Glyph
from stermcore.screen import GRAPHIC0, Screen, TermMode

COLS = 10
ROWS = 5
HIST = 20
SPACE = ord(" ")


@pytest.fixture
def cfg():
    return Config()


@pytest.fixture
def screen(cfg):
    return Screen(COLS, ROWS, cfg, history=HIST)


def put(screen, text, y, x=0):
    for offset, ch in enumerate(text):
        screen.set_char(ord(ch), screen.cursor.attr, x + offset, y)


def row_text(screen, y):
    return "".join(chr(g.u) for g in screen.line(y)[: screen.col])


def test_new_screen_is_blank(screen, cfg):
    for y in range(ROWS):
        line = screen.line(y)
        assert len(line) == COLS
        assert all(g.u == SPACE for g in line)
        assert all(g.fg == cfg.defaultfg and g.bg == cfg.defaultbg for g in line)
    assert (screen.cursor.x, screen.cursor.y) == (0, 0)
    assert screen.mode == TermMode.WRAP | TermMode.UTF8
    assert (screen.top, screen.bot) == (0, ROWS - 1)


def test_invalid_sizes_raise(cfg):
    with pytest.raises(ValueError):
        Screen(0, ROWS, cfg, history=HIST)
    with pytest.raises(ValueError):
        Screen(COLS, HIST + 1, cfg, history=HIST)
    screen = Screen(COLS, ROWS, cfg, history=HIST)
    with pytest.raises(ValueError):
        screen.resize(COLS, 0)


def test_tabs(cfg):
    screen = Screen(20, ROWS, cfg, history=HIST)
    screen.put_tab(1)
    assert screen.cursor.x == cfg.tabspaces
    screen.put_tab(1)
    assert screen.cursor.x == 2 * cfg.tabspaces
    screen.put_tab(1)
    assert screen.cursor.x == screen.col - 1
    screen.move_to(cfg.tabspaces, 0)
    screen.put_tab(-1)
    assert screen.cursor.x == 0


def test_move_to_clamps(screen):
    screen.move_to(-5, 100)
    assert (screen.cursor.x, screen.cursor.y) == (0, ROWS - 1)
    screen.move_to(100, -3)
    assert (screen.cursor.x, screen.cursor.y) == (COLS - 1, 0)


def test_move_absolute_with_origin(screen):
    screen.set_scroll(1, 3)
    screen.cursor.origin = True
    screen.move_absolute(0, 0)
    assert screen.cursor.y == screen.top
    screen.move_absolute(0, ROWS)
    assert screen.cursor.y == screen.bot


def test_set_scroll_orders_and_clamps(screen):
    screen.set_scroll(3, 1)
    assert (screen.top, screen.bot) == (1, 3)
    screen.set_scroll(-4, 99)
    assert (screen.top, screen.bot) == (0, ROWS - 1)


def test_set_char_stores_a_copy(screen):
    attr = Glyph(fg=1, bg=2, mode=Attr.BOLD)
    screen.set_char(ord("A"), attr, 3, 1)
    cell = screen.line(1)[3]
    assert (cell.u, cell.fg, cell.bg, cell.mode) == (ord("A"), 1, 2, Attr.BOLD)
    attr.fg = 9
    assert cell.fg == 1
    assert screen.dirty[1] is True


def test_graphic_charset(screen):
    screen.trantbl[0] = GRAPHIC0
    screen.set_char(ord("q"), screen.cursor.attr, 0, 0)
    screen.set_char(ord("a"), screen.cursor.attr, 1, 0)
    screen.set_char(ord("1"), screen.cursor.attr, 2, 0)
    assert row_text(screen, 0)[:3] == "─▒1"


def test_overwriting_wide_and_dummy_cells(screen):
    line = screen.line(0)
    line[2] = Glyph(u=ord("W"), mode=Attr.WIDE)
    line[3] = Glyph(u=0, mode=Attr.WDUMMY)
    screen.set_char(ord("x"), screen.cursor.attr, 2, 0)
    assert line[3].u == SPACE
    assert not line[3].mode & Attr.WDUMMY

    line[5] = Glyph(u=ord("W"), mode=Attr.WIDE)
    line[6] = Glyph(u=0, mode=Attr.WDUMMY)
    screen.set_char(ord("y"), screen.cursor.attr, 6, 0)
    assert line[5].u == SPACE
    assert not line[5].mode & Attr.WIDE


def test_scroll_up_keeps_history(screen):
    put(screen, "A", 0)
    screen.scroll_up(0, 1)
    assert screen.line(0)[0].u == SPACE
    screen.scrollback_up(1)
    assert screen.scroll_offset == 1
    assert screen.line(0)[0].u == ord("A")
    screen.scrollback_down(1)
    assert screen.scroll_offset == 0
    assert screen.line(0)[0].u == SPACE


def test_scrollback_without_history_stays(screen):
    screen.scrollback_up(-1)
    assert screen.scroll_offset == 0


def test_scrollback_ignored_on_alt_screen(screen):
    put(screen, "A", 0)
    screen.scroll_up(0, 1)
    screen.swap_screen()
    screen.scrollback_up(1)
    assert screen.scroll_offset == 0


def test_scroll_down(screen):
    put(screen, "A", 0)
    screen.scroll_down(0, 1)
    assert screen.line(0)[0].u == SPACE
    assert screen.line(1)[0].u == ord("A")


def test_scroll_up_respects_region(screen):
    put(screen, "T", 0)
    put(screen, "A", 1)
    put(screen, "B", 2)
    put(screen, "Z", 4)
    screen.set_scroll(1, 3)
    screen.scroll_up(1, 1)
    assert screen.line(0)[0].u == ord("T")
    assert screen.line(1)[0].u == ord("B")
    assert screen.line(3)[0].u == SPACE
    assert screen.line(4)[0].u == ord("Z")


def test_insert_blank_and_delete_char(screen):
    put(screen, "ABC", 0)
    screen.insert_blank(1)
    assert row_text(screen, 0).rstrip() == " ABC"
    screen.delete_char(1)
    screen.delete_char(1)
    assert row_text(screen, 0).rstrip() == "BC"
    assert screen.line(0)[COLS - 1].u == SPACE


def test_line_length(screen):
    put(screen, "ABC", 0)
    assert screen.line_length(0) == len("ABC")
    assert screen.line_length(1) == 0
    screen.line(1)[COLS - 1].mode = Attr.WRAP
    assert screen.line_length(1) == COLS


def test_clear_region_swaps_and_uses_cursor_colours(screen):
    put(screen, "ABCD", 0)
    screen.cursor.attr = Glyph(fg=3, bg=4)
    screen.clear_region(2, 0, 0, 0)
    line = screen.line(0)
    assert [g.u for g in line[:4]] == [SPACE, SPACE, SPACE, ord("D")]
    assert all(g.fg == 3 and g.bg == 4 for g in line[:3])


def test_save_and_load_cursor(screen):
    screen.move_to(4, 3)
    screen.cursor.attr.fg = 5
    screen.save_cursor()
    screen.move_to(0, 0)
    screen.cursor.attr.fg = 1
    screen.load_cursor()
    assert (screen.cursor.x, screen.cursor.y, screen.cursor.attr.fg) == (4, 3, 5)


def test_swap_screen(screen):
    put(screen, "P", 0)
    screen.swap_screen()
    assert screen.mode & TermMode.ALTSCREEN
    assert screen.line(0)[0].u == SPACE
    put(screen, "Q", 0)
    screen.swap_screen()
    assert screen.line(0)[0].u == ord("P")


def test_resize_grow(screen, cfg):
    screen.resize(20, ROWS + 1)
    assert all(len(screen.line(y)) == 20 for y in range(ROWS + 1))
    assert all(g.u == SPACE for g in screen.line(ROWS))
    assert [i for i, t in enumerate(screen.tabs) if t] == [
        cfg.tabspaces,
        2 * cfg.tabspaces,
    ]
    assert screen.dirty == [True] * (ROWS + 1)


def test_resize_shrink_keeps_cursor_line(screen):
    put(screen, "Q", ROWS - 1)
    screen.move_to(COLS - 1, ROWS - 1)
    screen.resize(5, 3)
    assert (screen.cursor.x, screen.cursor.y) == (4, 2)
    assert screen.line(2)[0].u == ord("Q")


def test_attr_set_and_dirty_attr(screen):
    assert screen.attr_set(Attr.BLINK) is False
    screen.set_char(ord("b"), Glyph(mode=Attr.BLINK), 0, 0)
    assert screen.attr_set(Attr.BLINK) is True
    screen.dirty = [False] * ROWS
    screen.set_dirty_attr(Attr.BLINK)
    assert screen.dirty[0] is True
    assert screen.dirty[1:] == [False] * (ROWS - 1)


def test_new_line_scrolls_at_bottom(screen):
    put(screen, "A", ROWS - 1)
    screen.move_to(3, ROWS - 1)
    screen.new_line(True)
    assert (screen.cursor.x, screen.cursor.y) == (0, ROWS - 1)
    assert screen.line(ROWS - 2)[0].u == ord("A")
    screen.move_to(3, 0)
    screen.new_line(False)
    assert (screen.cursor.x, screen.cursor.y) == (3, 1)


def test_insert_and_delete_lines(screen):
    put(screen, "A", 1)
    screen.move_to(0, 1)
    screen.insert_blank_line(1)
    assert screen.line(2)[0].u == ord("A")
    screen.delete_line(1)
    assert screen.line(1)[0].u == ord("A")


def test_insert_line_outside_region_does_nothing(screen):
    put(screen, "A", 4)
    screen.set_scroll(0, 2)
    screen.move_to(0, 4)
    screen.insert_blank_line(1)
    assert screen.line(4)[0].u == ord("A")


def test_set_dirty_clamps(screen):
    screen.dirty = [False] * ROWS
    screen.set_dirty(-3, 1)
    assert screen.dirty == [True, True] + [False] * (ROWS - 2)


class Recorder:
    def __init__(self, hit):
        self.hit = hit
        self.cleared = 0
        self.scrolls = []

    def selected(self, x, y):
        return (x, y) == self.hit

    def clear(self):
        self.cleared += 1

    def scroll(self, orig, n):
        self.scrolls.append((orig, n))


def test_selection_hooks(screen):
    hooks = Recorder((1, 0))
    screen.selection = hooks
    screen.clear_region(0, 0, 2, 0)
    assert hooks.cleared == 1
    screen.scroll_up(0, 1)
    screen.scroll_down(0, 1)
    assert hooks.scrolls == [(0, -1), (0, 1)]


def test_reset_restores_defaults(screen, cfg):
    screen.swap_screen()
    screen.mode |= TermMode.INSERT
    screen.set_scroll(1, 2)
    screen.trantbl[0] = GRAPHIC0
    screen.reset()
    assert screen.mode == TermMode.WRAP | TermMode.UTF8
    assert (screen.top, screen.bot) == (0, ROWS - 1)
    assert screen.trantbl[0] != GRAPHIC0
    assert screen.cursor.attr.fg == cfg.defaultfg