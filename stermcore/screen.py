"""Screen state: line ring buffers, cursor, scroll region, tab stops and dirtiness."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntFlag
from typing import Optional, Protocol

from .config import Config
from .glyph import HISTSIZE, Attr, Glyph

GRAPHIC0 = "0"
"""Charset designator of the DEC special graphics set."""

USA = "B"
"""Charset designator of plain US ASCII."""

_SPACE = ord(" ")

# DEC special graphics for 0x41..0x7e; None leaves the character as it is.
_VT100_GRAPHICS: tuple[Optional[str], ...] = (
    "↑", "↓", "→", "←", "█", "▚", "☃",  # A - G
    None, None, None, None, None, None, None, None,  # H - O
    None, None, None, None, None, None, None, None,  # P - W
    None, None, None, None, None, None, None, " ",  # X - _
    "◆", "▒", "␉", "␌", "␍", "␊", "°", "±",  # ` - g
    "␤", "␋", "┘", "┐", "┌", "└", "┼", "⎺",  # h - o
    "⎻", "─", "⎼", "⎽", "├", "┤", "┴", "┬",  # p - w
    "│", "≤", "≥", "π", "≠", "£", "·",  # x - ~
)


class TermMode(IntFlag):
    """Terminal-wide mode flags."""

    NONE = 0
    WRAP = 1 << 0
    INSERT = 1 << 1
    ALTSCREEN = 1 << 2
    CRLF = 1 << 3
    ECHO = 1 << 4
    PRINT = 1 << 5
    UTF8 = 1 << 6


@dataclass
class TCursor:
    """Cursor position, the attributes new characters get and its state."""

    attr: Glyph = field(default_factory=Glyph)
    x: int = 0
    y: int = 0
    wrapnext: bool = False
    origin: bool = False


class _SelectionHooks(Protocol):
    def selected(self, x: int, y: int) -> bool: ...

    def clear(self) -> None: ...

    def scroll(self, orig: int, n: int) -> None: ...


@dataclass
class _LineBuffer:
    lines: list[Optional[list[Glyph]]]
    cur: int = 0
    off: int = 0
    saved: TCursor = field(default_factory=TCursor)

    @property
    def size(self) -> int:
        return len(self.lines)


def _copy_cursor(cursor: TCursor) -> TCursor:
    return replace(cursor, attr=cursor.attr.copy())


def _blank(attr: Glyph) -> Glyph:
    return Glyph(u=_SPACE, mode=Attr.NULL, fg=attr.fg, bg=attr.bg)


def _blank_line(attr: Glyph, length: int) -> list[Glyph]:
    return [_blank(attr) for _ in range(length)]


def _clamp(value: int, low: int, high: int) -> int:
    return low if value < low else high if value > high else value


def _without(mode: Attr, flag: Attr) -> Attr:
    return Attr(int(mode) & ~int(flag))


class Screen:
    """The character grid of a terminal, with scrollback and an alternate screen."""

    def __init__(
        self,
        cols: int,
        rows: int,
        config: Optional[Config] = None,
        history: int = HISTSIZE,
    ) -> None:
        if history < 1:
            raise ValueError(f"history must hold at least one line: {history}")
        self.config = config if config is not None else Config()
        self.history = history
        self.row = 0
        self.col = 0
        self.linelen = 0
        self._screens = (_LineBuffer([None] * history), _LineBuffer([]))
        self.dirty: list[bool] = []
        self.tabs: list[bool] = []
        self.cursor = TCursor()
        self.top = 0
        self.bot = 0
        self.mode = TermMode.NONE
        self.trantbl = [USA] * 4
        self.charset = 0
        self.icharset = 0
        self.selection: Optional[_SelectionHooks] = None
        self.resize(cols, rows)
        self.reset()

    # ring buffer access

    @property
    def _active(self) -> _LineBuffer:
        return self._screens[1 if self.mode & TermMode.ALTSCREEN else 0]

    def _offset(self, y: int) -> int:
        buf = self._active
        return (y + buf.cur - buf.off + buf.size) % buf.size

    def line(self, y: int) -> Optional[list[Glyph]]:
        """Return row ``y`` of the visible screen (None for unused history)."""
        return self._active.lines[self._offset(y)]

    def _set_line(self, y: int, line: Optional[list[Glyph]]) -> None:
        self._active.lines[self._offset(y)] = line

    def _ensure_line(self, y: int) -> None:
        if self.line(y) is None:
            self._set_line(y, [Glyph() for _ in range(self.linelen)])

    def _swap_lines(self, a: int, b: int) -> None:
        first, second = self.line(a), self.line(b)
        self._set_line(a, second)
        self._set_line(b, first)

    @property
    def scroll_offset(self) -> int:
        """How many lines the active screen is scrolled back into history."""
        return self._active.off

    @scroll_offset.setter
    def scroll_offset(self, value: int) -> None:
        self._active.off = value

    def _selscroll(self, orig: int, n: int) -> None:
        if self.selection is not None:
            self.selection.scroll(orig, n)

    # size and reset

    def resize(self, cols: int, rows: int) -> None:
        """Change the grid to ``cols`` x ``rows``, keeping the cursor's line."""
        if cols < 1 or rows < 1 or rows > self.history:
            raise ValueError(f"cannot resize to {cols}x{rows}")

        primary, alt = self._screens
        attr = self.cursor.attr
        minrow = min(rows, self.row)
        linelen = max(cols, self.linelen)

        if rows <= self.cursor.y:
            primary.cur = (primary.cur - rows + self.cursor.y + 1) % primary.size

        if linelen > self.linelen:
            grow = linelen - self.linelen
            for line in primary.lines:
                if line is not None:
                    line.extend(_blank(attr) for _ in range(grow))
            for line in alt.lines[:minrow]:
                if line is not None:
                    line.extend(_blank(attr) for _ in range(grow))

        j = primary.cur
        for i in range(rows):
            if primary.lines[j] is None or i >= self.row:
                primary.lines[j] = _blank_line(attr, linelen)
            j = (j + 1) % primary.size

        alt.cur = 0
        alt.lines = alt.lines[:rows] + [
            _blank_line(attr, linelen) for _ in range(self.row, rows)
        ]

        self.dirty = [True] * rows
        old_col = self.col
        self.tabs = self.tabs[:cols] + [False] * (cols - len(self.tabs))
        if cols > old_col:
            stop = old_col
            while True:
                stop -= 1
                if not (stop > 0 and not self.tabs[stop]):
                    break
            stop += self.config.tabspaces
            while stop < cols:
                self.tabs[stop] = True
                stop += self.config.tabspaces

        self.col = cols
        self.row = rows
        self.linelen = linelen
        self.set_scroll(0, rows - 1)
        self.move_to(self.cursor.x, self.cursor.y)
        self.full_dirty()

    def reset(self) -> None:
        """Clear both screens and restore tabs, modes, charsets and cursors."""
        cfg = self.config
        blank = Glyph(fg=cfg.defaultfg, bg=cfg.defaultbg)
        self.tabs = [False] * self.col
        for i in range(cfg.tabspaces, self.col, cfg.tabspaces):
            self.tabs[i] = True
        self.top = 0
        self.bot = self.row - 1
        self.mode = TermMode.WRAP | TermMode.UTF8
        self.trantbl = [USA] * 4
        self.charset = 0

        for buf in self._screens:
            buf.saved = TCursor(attr=Glyph(fg=cfg.defaultfg, bg=cfg.defaultbg))
            buf.cur = 0
            buf.off = 0
            for j in range(buf.size):
                buf.lines[j] = _blank_line(blank, self.col) if j < self.row else None
        self.load_cursor()
        self.linelen = self.col
        self.full_dirty()

    # dirtiness

    def set_dirty(self, top: int, bot: int) -> None:
        """Mark rows ``top`` to ``bot`` (clamped to the screen) for redraw."""
        top = _clamp(top, 0, self.row - 1)
        bot = _clamp(bot, 0, self.row - 1)
        for i in range(top, bot + 1):
            self.dirty[i] = True

    def full_dirty(self) -> None:
        """Mark every row for redraw."""
        self.set_dirty(0, self.row - 1)

    def _attr_rows(self, attr: Attr):
        y = self._offset(0)
        buf = self._active
        for i in range(self.row - 1):
            line = buf.lines[y]
            if line is not None and any(g.mode & attr for g in line[: self.col - 1]):
                yield i
            y = (y + 1) % buf.size

    def attr_set(self, attr: Attr) -> bool:
        """Tell whether any visible cell carries ``attr``."""
        return next(self._attr_rows(attr), None) is not None

    def set_dirty_attr(self, attr: Attr) -> None:
        """Mark for redraw every row holding a cell with ``attr``."""
        for i in list(self._attr_rows(attr)):
            self.set_dirty(i, i)

    # editing

    def clear_region(self, x1: int, y1: int, x2: int, y2: int) -> None:
        """Blank a rectangle with the cursor's colours."""
        if x1 > x2:
            x1, x2 = x2, x1
        if y1 > y2:
            y1, y2 = y2, y1
        x1 = _clamp(x1, 0, self.linelen - 1)
        x2 = _clamp(x2, 0, self.linelen - 1)
        y1 = _clamp(y1, 0, self.row - 1)
        y2 = _clamp(y2, 0, self.row - 1)

        buf = self._active
        pos = self._offset(y1)
        attr = self.cursor.attr
        sel = self.selection
        for y in range(y1, y2 + 1):
            self.dirty[y] = True
            line = buf.lines[pos]
            for x in range(x1, x2 + 1):
                if sel is not None and sel.selected(x, y):
                    sel.clear()
                line[x] = _blank(attr)
            pos = (pos + 1) % buf.size

    def scroll_down(self, orig: int, n: int) -> None:
        """Scroll rows ``orig`` to the region bottom down by ``n`` lines."""
        n = _clamp(n, 0, self.bot - orig + 1)
        for i in range(-n, 0):
            self._ensure_line(i)
        for i in range(self.bot + 1, self.row):
            self._swap_lines(i, i - n)
        for i in range(orig):
            self._swap_lines(i, i - n)
        buf = self._active
        buf.cur = (buf.cur + buf.size - n) % buf.size
        self.clear_region(0, orig, self.linelen - 1, orig + n - 1)
        self.set_dirty(orig + n - 1, self.bot)
        self._selscroll(orig, n)

    def scroll_up(self, orig: int, n: int) -> None:
        """Scroll rows ``orig`` to the region bottom up by ``n`` lines."""
        n = _clamp(n, 0, self.bot - orig + 1)
        for i in range(self.row, self.row + n):
            self._ensure_line(i)
        for i in range(orig - 1, -1, -1):
            self._swap_lines(i, i + n)
        for i in range(self.row - 1, self.bot, -1):
            self._swap_lines(i, i + n)
        buf = self._active
        buf.cur = (buf.cur + n) % buf.size
        self.clear_region(0, self.bot - n + 1, self.linelen - 1, self.bot)
        self.set_dirty(orig, self.bot - n + 1)
        self._selscroll(orig, -n)

    def set_scroll(self, top: int, bot: int) -> None:
        """Set the scrolling region, clamped and ordered."""
        top = _clamp(top, 0, self.row - 1)
        bot = _clamp(bot, 0, self.row - 1)
        if top > bot:
            top, bot = bot, top
        self.top = top
        self.bot = bot

    def move_to(self, x: int, y: int) -> None:
        """Move the cursor, keeping it inside the screen or origin region."""
        if self.cursor.origin:
            miny, maxy = self.top, self.bot
        else:
            miny, maxy = 0, self.row - 1
        self.cursor.wrapnext = False
        self.cursor.x = _clamp(x, 0, self.col - 1)
        self.cursor.y = _clamp(y, miny, maxy)

    def move_absolute(self, x: int, y: int) -> None:
        """Move the cursor to a position relative to the origin, if set."""
        self.move_to(x, y + (self.top if self.cursor.origin else 0))

    def new_line(self, first_col: bool) -> None:
        """Advance one line, scrolling at the region bottom."""
        y = self.cursor.y
        if y == self.bot:
            self.scroll_up(self.top, 1)
        else:
            y += 1
        self.move_to(0 if first_col else self.cursor.x, y)

    def insert_blank(self, n: int) -> None:
        """Insert ``n`` blank cells at the cursor, shifting the rest right."""
        x, y = self.cursor.x, self.cursor.y
        n = _clamp(n, 0, self.col - x)
        dst, src = x + n, x
        size = self.col - dst
        line = self.line(y)
        line[dst:dst + size] = [g.copy() for g in line[src:src + size]]
        self.clear_region(src, y, dst - 1, y)

    def delete_char(self, n: int) -> None:
        """Delete ``n`` cells at the cursor, shifting the rest left."""
        x, y = self.cursor.x, self.cursor.y
        n = _clamp(n, 0, self.col - x)
        dst, src = x, x + n
        size = self.col - src
        line = self.line(y)
        line[dst:dst + size] = [g.copy() for g in line[src:src + size]]
        self.clear_region(self.col - n, y, self.col - 1, y)

    def insert_blank_line(self, n: int) -> None:
        """Insert ``n`` blank lines at the cursor row, inside the region."""
        if self.top <= self.cursor.y <= self.bot:
            self.scroll_down(self.cursor.y, n)

    def delete_line(self, n: int) -> None:
        """Delete ``n`` lines at the cursor row, inside the region."""
        if self.top <= self.cursor.y <= self.bot:
            self.scroll_up(self.cursor.y, n)

    def put_tab(self, n: int) -> None:
        """Move the cursor ``n`` tab stops forward (or back when negative)."""
        x = self.cursor.x
        if n > 0:
            while x < self.col and n:
                n -= 1
                x += 1
                while x < self.col and not self.tabs[x]:
                    x += 1
        elif n < 0:
            while x > 0 and n:
                n += 1
                x -= 1
                while x > 0 and not self.tabs[x]:
                    x -= 1
        self.cursor.x = _clamp(x, 0, self.col - 1)

    def line_length(self, y: int) -> int:
        """Length of row ``y`` without trailing blanks; full width if wrapped."""
        length = self.col
        line = self.line(y)
        if line[length - 1].mode & Attr.WRAP:
            return length
        while length > 0 and line[length - 1].u == _SPACE:
            length -= 1
        return length

    def set_char(self, rune: int, attr: Glyph, x: int, y: int) -> None:
        """Store ``rune`` with ``attr`` at ``(x, y)``, applying the charset."""
        line = self.line(y)
        if self.trantbl[self.charset] == GRAPHIC0 and 0x41 <= rune <= 0x7E:
            replacement = _VT100_GRAPHICS[rune - 0x41]
            if replacement is not None:
                rune = ord(replacement)

        cell = line[x]
        if cell.mode & Attr.WIDE:
            if x + 1 < self.col:
                line[x + 1].u = _SPACE
                line[x + 1].mode = _without(line[x + 1].mode, Attr.WDUMMY)
        elif cell.mode & Attr.WDUMMY:
            line[x - 1].u = _SPACE
            line[x - 1].mode = _without(line[x - 1].mode, Attr.WIDE)

        self.dirty[y] = True
        new = attr.copy()
        new.u = rune
        line[x] = new

    # cursor and screens

    def save_cursor(self) -> None:
        """Remember the cursor for the active screen."""
        self._active.saved = _copy_cursor(self.cursor)

    def load_cursor(self) -> None:
        """Restore the cursor remembered for the active screen."""
        self.cursor = _copy_cursor(self._active.saved)
        self.move_to(self.cursor.x, self.cursor.y)

    def swap_screen(self) -> None:
        """Switch between the primary and the alternate screen."""
        self.mode ^= TermMode.ALTSCREEN
        self.full_dirty()

    def scrollback_up(self, n: int) -> None:
        """View ``n`` lines further back (negative: that many pages)."""
        if self.mode & TermMode.ALTSCREEN:
            return
        buf = self._active
        if n < 0:
            n = -n * self.row
        n = min(n, buf.size - self.row - buf.off)
        while self.line(-n) is None:
            n -= 1
        buf.off += n
        self._selscroll(0, n)
        self.full_dirty()

    def scrollback_down(self, n: int) -> None:
        """View ``n`` lines closer to the present (negative: pages)."""
        if self.mode & TermMode.ALTSCREEN:
            return
        buf = self._active
        if n < 0:
            n = -n * self.row
        n = min(n, buf.off)
        buf.off -= n
        self._selscroll(0, -n)
        self.full_dirty()