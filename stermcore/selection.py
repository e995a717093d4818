"""Mouse selection over the screen: snapping, hit testing and text extraction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .codec import utf8_encode
from .glyph import Attr, Glyph, SelectionMode, SelectionType, Snap
from .screen import Screen, TermMode

_SPACE = ord(" ")


@dataclass
class _Point:
    x: int = 0
    y: int = 0


class Selection:
    """The current selection on a screen.

    ``ob``/``oe`` are the original corners as the user gave them, ``nb``/``ne``
    the normalized (ordered and snapped) beginning and end. The selection
    attaches itself to the screen so that edits and scrolls keep it in step.
    """

    def __init__(self, screen: Screen) -> None:
        self.screen = screen
        self.mode = SelectionMode.IDLE
        self.sel_type = SelectionType.REGULAR
        self.snap_kind = Snap.NONE
        self.nb = _Point()
        self.ne = _Point()
        self.ob = _Point(-1, 0)
        self.oe = _Point()
        self.alt = False
        screen.selection = self

    def _alt_active(self) -> bool:
        return bool(self.screen.mode & TermMode.ALTSCREEN)

    def _is_delim(self, rune: int) -> bool:
        return rune != 0 and chr(rune) in self.screen.config.worddelimiters

    def start(self, col: int, row: int, snap: Snap) -> None:
        """Begin a new selection at ``(col, row)`` with the given snapping."""
        self.clear()
        self.mode = SelectionMode.EMPTY
        self.sel_type = SelectionType.REGULAR
        self.alt = self._alt_active()
        self.snap_kind = Snap(snap)
        self.ob = _Point(col, row)
        self.oe = _Point(col, row)
        self.normalize()
        if self.snap_kind != Snap.NONE:
            self.mode = SelectionMode.READY
        self.screen.set_dirty(self.nb.y, self.ne.y)

    def extend(self, col: int, row: int, sel_type: SelectionType, done: bool) -> None:
        """Move the free end of the selection; ``done`` finishes it."""
        if self.mode == SelectionMode.IDLE:
            return
        if done and self.mode == SelectionMode.EMPTY:
            self.clear()
            return

        old_ey, old_ex = self.oe.y, self.oe.x
        old_sby, old_sey = self.nb.y, self.ne.y
        old_type = self.sel_type

        self.oe = _Point(col, row)
        self.normalize()
        self.sel_type = SelectionType(sel_type)

        if (
            old_ey != self.oe.y
            or old_ex != self.oe.x
            or old_type != self.sel_type
            or self.mode == SelectionMode.EMPTY
        ):
            self.screen.set_dirty(min(self.nb.y, old_sby), max(self.ne.y, old_sey))

        self.mode = SelectionMode.IDLE if done else SelectionMode.READY

    def normalize(self) -> None:
        """Order the corners into ``nb``/``ne``, snap them and fit line ends."""
        ob, oe = self.ob, self.oe
        if self.sel_type == SelectionType.REGULAR and ob.y != oe.y:
            nbx = ob.x if ob.y < oe.y else oe.x
            nex = oe.x if ob.y < oe.y else ob.x
        else:
            nbx = min(ob.x, oe.x)
            nex = max(ob.x, oe.x)
        nby = min(ob.y, oe.y)
        ney = max(ob.y, oe.y)

        self.nb = _Point(*self.snap(nbx, nby, -1))
        self.ne = _Point(*self.snap(nex, ney, +1))

        # expand selection over line breaks
        if self.sel_type == SelectionType.RECTANGULAR:
            return
        length = self.screen.line_length(self.nb.y)
        if length < self.nb.x:
            self.nb.x = length
        if self.screen.line_length(self.ne.y) <= self.ne.x:
            self.ne.x = self.screen.col - 1

    def selected(self, x: int, y: int) -> bool:
        """Tell whether the cell ``(x, y)`` lies inside the selection."""
        if (
            self.mode == SelectionMode.EMPTY
            or self.ob.x == -1
            or self.alt != self._alt_active()
        ):
            return False
        nb, ne = self.nb, self.ne
        if self.sel_type == SelectionType.RECTANGULAR:
            return nb.y <= y <= ne.y and nb.x <= x <= ne.x
        return (
            nb.y <= y <= ne.y
            and (y != nb.y or x >= nb.x)
            and (y != ne.y or x <= ne.x)
        )

    def snap(self, x: int, y: int, direction: int) -> tuple[int, int]:
        """Move ``(x, y)`` outward to a word or line boundary; return the result."""
        scr = self.screen
        cols, rows = scr.col, scr.row
        if self.snap_kind == Snap.WORD:
            prev: Glyph = scr.line(y)[x]
            prev_delim = self._is_delim(prev.u)
            while True:
                newx = x + direction
                newy = y
                if not 0 <= newx <= cols - 1:
                    newy += direction
                    newx = (newx + cols) % cols
                    if not 0 <= newy <= rows - 1:
                        break
                    yt, xt = (y, x) if direction > 0 else (newy, newx)
                    if not scr.line(yt)[xt].mode & Attr.WRAP:
                        break

                if newx >= scr.line_length(newy):
                    break

                cell = scr.line(newy)[newx]
                delim = self._is_delim(cell.u)
                if not cell.mode & Attr.WDUMMY and (
                    delim != prev_delim or (delim and cell.u != prev.u)
                ):
                    break

                x, y = newx, newy
                prev, prev_delim = cell, delim
        elif self.snap_kind == Snap.LINE:
            x = 0 if direction < 0 else cols - 1
            if direction < 0:
                while y > 0 and scr.line(y - 1)[cols - 1].mode & Attr.WRAP:
                    y += direction
            elif direction > 0:
                while y < rows - 1 and scr.line(y)[cols - 1].mode & Attr.WRAP:
                    y += direction
        return x, y

    def get_text(self) -> Optional[str]:
        """Return the selected text with line breaks as ``\\n``, or None."""
        if self.ob.x == -1:
            return None
        scr = self.screen
        rect = self.sel_type == SelectionType.RECTANGULAR
        out = bytearray()
        for y in range(self.nb.y, self.ne.y + 1):
            linelen = scr.line_length(y)
            if linelen == 0:
                out += b"\n"
                continue
            line = scr.line(y)
            if rect:
                start, lastx = self.nb.x, self.ne.x
            else:
                start = self.nb.x if self.nb.y == y else 0
                lastx = self.ne.x if self.ne.y == y else scr.col - 1
            last = min(lastx, linelen - 1)
            while last >= start and line[last].u == _SPACE:
                last -= 1

            for cell in line[start:last + 1]:
                if not cell.mode & Attr.WDUMMY:
                    out += utf8_encode(cell.u)

            # Copied text uses '\n'; pasted text gets '\r' instead.
            tail_wraps = last >= 0 and bool(line[last].mode & Attr.WRAP)
            if (y < self.ne.y or lastx >= linelen) and (not tail_wraps or rect):
                out += b"\n"
        return out.decode("utf-8", errors="replace")

    def clear(self) -> None:
        """Drop the selection and mark its rows for redraw."""
        if self.ob.x == -1:
            return
        self.mode = SelectionMode.IDLE
        self.ob.x = -1
        self.screen.set_dirty(self.nb.y, self.ne.y)

    def scroll(self, orig: int, n: int) -> None:
        """Follow a scroll of ``n`` lines starting at row ``orig``."""
        if self.ob.x == -1 or self.alt != self._alt_active():
            return
        scr = self.screen
        begins_inside = orig <= self.nb.y <= scr.bot
        ends_inside = orig <= self.ne.y <= scr.bot
        if begins_inside != ends_inside:
            self.clear()
        elif begins_inside:
            self.ob.y += n
            self.oe.y += n
            if (
                self.ob.y < scr.top
                or self.ob.y > scr.bot
                or self.oe.y < scr.top
                or self.oe.y > scr.bot
            ):
                self.clear()
            else:
                self.normalize()