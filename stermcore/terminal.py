"""The terminal state machine: bytes from the child in, screen updates and replies out."""

from __future__ import annotations

import logging
import re
import string
import sys
from collections.abc import Callable, Sequence
from enum import IntFlag
from typing import Optional

from wcwidth import wcwidth

from .codec import UTF_SIZ, base64_decode, utf8_decode, utf8_encode
from .config import Config
from .escapes import ESC_BUF_SIZ, CSIEscape, STREscape
from .glyph import HISTSIZE, Attr, Glyph, WinMode, truecolor
from .screen import GRAPHIC0, USA, Screen, TCursor, TermMode
from .selection import Selection
from .tty import crlf_translate

_log = logging.getLogger(__name__)

_SPACE = ord(" ")
_ATOI = re.compile(rb"[ \t\n\v\f\r]*([+-]?[0-9]+)")
_HEX = set(string.hexdigits)

_X_COLOR_NAMES = {
    "black": (0, 0, 0),
    "red3": (205, 0, 0),
    "green3": (0, 205, 0),
    "yellow3": (205, 205, 0),
    "blue2": (0, 0, 238),
    "magenta3": (205, 0, 205),
    "cyan3": (0, 205, 205),
    "gray90": (229, 229, 229),
    "grey90": (229, 229, 229),
    "gray50": (127, 127, 127),
    "grey50": (127, 127, 127),
    "red": (255, 0, 0),
    "green": (0, 255, 0),
    "yellow": (255, 255, 0),
    "blue": (0, 0, 255),
    "magenta": (255, 0, 255),
    "cyan": (0, 255, 255),
    "white": (255, 255, 255),
}


class _Esc(IntFlag):
    NONE = 0
    START = 1
    CSI = 2
    STR = 4
    ALTCHARSET = 8
    STR_END = 16
    TEST = 32
    UTF8 = 64


def _is_c0(u: int) -> bool:
    return 0 <= u <= 0x1F or u == 0x7F


def _is_c1(u: int) -> bool:
    return 0x80 <= u <= 0x9F


def _is_control(u: int) -> bool:
    return _is_c0(u) or _is_c1(u)


def _atoi(data: bytes) -> int:
    found = _ATOI.match(data)
    return int(found.group(1)) if found else 0


def _text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _without(mode: Attr, flags: Attr) -> Attr:
    return Attr(int(mode) & ~int(flags))


def _parse_color(name: str) -> Optional[tuple[int, int, int]]:
    name = name.strip()
    if name.startswith("#"):
        digits = name[1:]
        if len(digits) not in (3, 6, 9, 12) or not set(digits) <= _HEX:
            return None
        n = len(digits) // 3
        return tuple(  # type: ignore[return-value]
            (int(digits[i * n:(i + 1) * n], 16) << (16 - 4 * n)) >> 8 for i in range(3)
        )
    if name.lower().startswith("rgb:"):
        parts = name[4:].split("/")
        if len(parts) != 3 or not all(1 <= len(p) <= 4 and set(p) <= _HEX for p in parts):
            return None
        return tuple(  # type: ignore[return-value]
            (int(p, 16) * 0xFFFF // (16 ** len(p) - 1)) >> 8 for p in parts
        )
    return _X_COLOR_NAMES.get(name.lower().replace(" ", ""))


def _sixd(x: int) -> int:
    return 0 if x == 0 else (0x3737 + 0x2828 * x) >> 8


class Window:
    """Window-side state that escape sequences change: titles, modes, colours, clipboard."""

    def __init__(self, config: Optional[Config] = None, title: str = "st") -> None:
        self.config = config if config is not None else Config()
        self.default_title = title
        self.title = title
        self.icon_title = title
        self.mode = WinMode.NUMLOCK
        self.cursor_style = self.config.cursorshape
        self.pointer_motion = False
        self.bells = 0
        self.primary: Optional[str] = None
        self.clipboard: Optional[str] = None
        self._colors: dict[int, tuple[int, int, int]] = {}

    def set_title(self, text: Optional[str]) -> None:
        self.title = text or self.default_title

    def set_icon_title(self, text: Optional[str]) -> None:
        self.icon_title = text or self.default_title

    def bell(self) -> None:
        self.bells += 1

    def set_mode(self, on: bool, flags: WinMode) -> None:
        if on:
            self.mode |= flags
        else:
            self.mode = WinMode(int(self.mode) & ~int(flags))

    def set_pointer_motion(self, on: bool) -> None:
        self.pointer_motion = bool(on)

    def set_cursor(self, style: int) -> bool:
        """Set the cursor style 0..7; return False for an unknown style."""
        if not 0 <= style <= 7:
            return False
        self.cursor_style = style
        return True

    def set_selection(self, text: str) -> None:
        self.primary = text

    def clip_copy(self) -> None:
        self.clipboard = self.primary

    def _resolve(self, index: int, name: Optional[str]) -> Optional[tuple[int, int, int]]:
        if name is None:
            if 16 <= index <= 255:
                if index < 6 * 6 * 6 + 16:
                    i = index - 16
                    return _sixd((i // 36) % 6), _sixd((i // 6) % 6), _sixd(i % 6)
                grey = (0x0808 + 0x0A0A * (index - (6 * 6 * 6 + 16))) >> 8
                return grey, grey, grey
            name = self.config.color_name(index)
            if name is None:
                return None
        return _parse_color(name)

    def color(self, index: int) -> Optional[tuple[int, int, int]]:
        """Return the 8-bit RGB of palette entry ``index``, or None."""
        if not 0 <= index < self.config.palette_size:
            return None
        if index in self._colors:
            return self._colors[index]
        return self._resolve(index, None)

    def set_color_name(self, index: int, name: Optional[str]) -> bool:
        """Change palette entry ``index`` (None: its default); False on failure."""
        if not 0 <= index < self.config.palette_size:
            return False
        rgb = self._resolve(index, name)
        if rgb is None:
            return False
        self._colors[index] = rgb
        return True

    def load_colors(self) -> None:
        """Return every palette entry to its configured value."""
        self._colors.clear()


def define_color(args: Sequence[int], index: int) -> tuple[Optional[int], int]:
    """Read an extended colour (``38;5;n`` or ``38;2;r;g;b``) starting at ``index``.

    Returns the colour (None when invalid) and the index of the last
    parameter consumed.
    """
    count = len(args)

    def at(i: int) -> int:
        return args[i] if 0 <= i < count else 0

    kind = at(index + 1)
    if kind == 2:
        if index + 4 >= count:
            _log.warning("erresc(38): Incorrect number of parameters (%d)", index)
            return None, index
        r, g, b = at(index + 2), at(index + 3), at(index + 4)
        index += 4
        if not all(0 <= v <= 255 for v in (r, g, b)):
            _log.warning("erresc: bad rgb color (%d,%d,%d)", r, g, b)
            return None, index
        return truecolor(r, g, b), index
    if kind == 5:
        if index + 2 >= count:
            _log.warning("erresc(38): Incorrect number of parameters (%d)", index)
            return None, index
        index += 2
        if not 0 <= at(index) <= 255:
            _log.warning("erresc: bad fgcolor %d", at(index))
            return None, index
        return at(index), index
    _log.warning("erresc(38): gfx attr %d unknown", at(index))
    return None, index


def _stdout_printer(data: bytes) -> None:
    sys.stdout.buffer.write(data)
    sys.stdout.buffer.flush()


class Terminal:
    """Interprets the child's output onto a :class:`Screen`.

    Replies meant for the child go to ``writer``; printer output (media copy
    and print mode) goes to ``printer``.
    """

    def __init__(
        self,
        cols: int,
        rows: int,
        config: Optional[Config] = None,
        writer: Optional[Callable[[bytes], None]] = None,
        printer: Optional[Callable[[bytes], None]] = None,
        window: Optional[Window] = None,
        history: int = HISTSIZE,
    ) -> None:
        self.config = config if config is not None else Config()
        self.screen = Screen(cols, rows, self.config, history)
        self.selection = Selection(self.screen)
        self.window = window if window is not None else Window(self.config)
        self.output = bytearray()
        self._writer = writer if writer is not None else self.output.extend
        self._printer: Optional[Callable[[bytes], None]] = (
            printer if printer is not None else _stdout_printer
        )
        self.esc = _Esc.NONE
        self.csi = CSIEscape()
        self.strseq = STREscape()
        self.lastc = 0

    @property
    def cursor(self) -> TCursor:
        return self.screen.cursor

    @property
    def mode(self) -> TermMode:
        return self.screen.mode

    def _set_mode_bit(self, on: bool, flag: TermMode) -> None:
        if on:
            self.screen.mode |= flag
        else:
            self.screen.mode = TermMode(int(self.screen.mode) & ~int(flag))

    # output to the child and the printer

    def send(self, data: bytes, may_echo: bool = False) -> None:
        """Send bytes to the child, echoing and translating CR as the modes say."""
        data = bytes(data)
        if may_echo and self.screen.mode & TermMode.ECHO:
            self.write(data, True)
        if self.screen.mode & TermMode.CRLF:
            data = crlf_translate(data)
        self._writer(data)

    def _print(self, data: bytes) -> None:
        if self._printer is None:
            return
        try:
            self._printer(data)
        except OSError as exc:
            _log.error("Error writing to output file: %s", exc)
            self._printer = None

    def toggle_printer(self) -> None:
        """Switch print mode on or off."""
        self.screen.mode ^= TermMode.PRINT

    def dump_line(self, n: int) -> None:
        """Send row ``n`` to the printer."""
        scr = self.screen
        line = scr.line(n)
        end = min(scr.line_length(n), scr.col) - 1
        if end != 0 or line[0].u != _SPACE:
            self._print(b"".join(utf8_encode(g.u) for g in line[:end + 1]))
        self._print(b"\n")

    def dump(self) -> None:
        """Send the whole screen to the printer."""
        for y in range(self.screen.row):
            self.dump_line(y)

    def dump_selection(self) -> None:
        """Send the selected text to the printer."""
        text = self.selection.get_text()
        if text is not None:
            self._print(text.encode("utf-8"))

    # state changes

    def reset(self) -> None:
        """Reset the screen, modes and charsets."""
        self.screen.reset()

    def resize(self, cols: int, rows: int) -> None:
        """Resize the screen."""
        self.screen.resize(cols, rows)

    def _cursor(self, save: bool) -> None:
        if save:
            self.screen.save_cursor()
        else:
            self.screen.load_cursor()

    def set_attr(self, args: Sequence[int]) -> None:
        """Apply SGR parameters to the cursor's attributes."""
        cfg = self.config
        attr = self.cursor.attr
        count = len(args)
        i = 0
        while i < count:
            a = args[i]
            if a == 0:
                attr.mode = _without(
                    attr.mode,
                    Attr.BOLD | Attr.FAINT | Attr.ITALIC | Attr.UNDERLINE
                    | Attr.BLINK | Attr.REVERSE | Attr.INVISIBLE | Attr.STRUCK,
                )
                attr.fg = cfg.defaultfg
                attr.bg = cfg.defaultbg
            elif a == 1:
                attr.mode |= Attr.BOLD
            elif a == 2:
                attr.mode |= Attr.FAINT
            elif a == 3:
                attr.mode |= Attr.ITALIC
            elif a == 4:
                attr.mode |= Attr.UNDERLINE
            elif a in (5, 6):
                attr.mode |= Attr.BLINK
            elif a == 7:
                attr.mode |= Attr.REVERSE
            elif a == 8:
                attr.mode |= Attr.INVISIBLE
            elif a == 9:
                attr.mode |= Attr.STRUCK
            elif a == 22:
                attr.mode = _without(attr.mode, Attr.BOLD | Attr.FAINT)
            elif a == 23:
                attr.mode = _without(attr.mode, Attr.ITALIC)
            elif a == 24:
                attr.mode = _without(attr.mode, Attr.UNDERLINE)
            elif a == 25:
                attr.mode = _without(attr.mode, Attr.BLINK)
            elif a == 27:
                attr.mode = _without(attr.mode, Attr.REVERSE)
            elif a == 28:
                attr.mode = _without(attr.mode, Attr.INVISIBLE)
            elif a == 29:
                attr.mode = _without(attr.mode, Attr.STRUCK)
            elif a in (38, 48):
                color, i = define_color(args, i)
                if color is not None:
                    if a == 38:
                        attr.fg = color
                    else:
                        attr.bg = color
            elif a == 39:
                attr.fg = cfg.defaultfg
            elif a == 49:
                attr.bg = cfg.defaultbg
            elif 30 <= a <= 37:
                attr.fg = a - 30
            elif 40 <= a <= 47:
                attr.bg = a - 40
            elif 90 <= a <= 97:
                attr.fg = a - 90 + 8
            elif 100 <= a <= 107:
                attr.bg = a - 100 + 8
            else:
                _log.warning("erresc(default): gfx attr %d unknown %s", a, self.csi.dump())
            i += 1

    def set_mode(self, priv: bool, set_: bool, args: Sequence[int]) -> None:
        """Set or reset the ANSI (or, with ``priv``, DEC private) modes in ``args``."""
        scr = self.screen
        win = self.window
        set_ = bool(set_)
        for a in args:
            if priv:
                if a == 1:
                    win.set_mode(set_, WinMode.APPCURSOR)
                elif a == 5:
                    win.set_mode(set_, WinMode.REVERSE)
                elif a == 6:
                    scr.cursor.origin = set_
                    scr.move_absolute(0, 0)
                elif a == 7:
                    self._set_mode_bit(set_, TermMode.WRAP)
                elif a in (0, 2, 3, 4, 8, 18, 19, 42, 12):
                    pass
                elif a == 25:
                    win.set_mode(not set_, WinMode.HIDE)
                elif a in (9, 1000, 1002, 1003):
                    flag = {
                        9: WinMode.MOUSEX10,
                        1000: WinMode.MOUSEBTN,
                        1002: WinMode.MOUSEMOTION,
                        1003: WinMode.MOUSEMANY,
                    }[a]
                    win.set_pointer_motion(set_ if a == 1003 else False)
                    win.set_mode(False, WinMode.MOUSE)
                    win.set_mode(set_, flag)
                elif a == 1004:
                    win.set_mode(set_, WinMode.FOCUS)
                elif a == 1006:
                    win.set_mode(set_, WinMode.MOUSESGR)
                elif a == 1034:
                    win.set_mode(set_, WinMode.EIGHT_BIT)
                elif a in (1049, 47, 1047):
                    if not self.config.allowaltscreen:
                        continue
                    if a == 1049:
                        self._cursor(set_)
                    alt = bool(scr.mode & TermMode.ALTSCREEN)
                    if alt:
                        scr.clear_region(0, 0, scr.col - 1, scr.row - 1)
                    if set_ != alt:
                        scr.swap_screen()
                    if a == 1049:
                        self._cursor(set_)
                elif a == 1048:
                    self._cursor(set_)
                elif a == 2004:
                    win.set_mode(set_, WinMode.BRCKTPASTE)
                elif a in (1001, 1005, 1015):
                    pass
                else:
                    _log.warning("erresc: unknown private set/reset mode %d", a)
            else:
                if a == 0:
                    pass
                elif a == 2:
                    win.set_mode(set_, WinMode.KBDLOCK)
                elif a == 4:
                    self._set_mode_bit(set_, TermMode.INSERT)
                elif a == 12:
                    self._set_mode_bit(not set_, TermMode.ECHO)
                elif a == 20:
                    self._set_mode_bit(set_, TermMode.CRLF)
                else:
                    _log.warning("erresc: unknown set/reset mode %d", a)

    # sequence handlers

    def csi_handle(self, csi: CSIEscape) -> None:
        """Carry out a parsed CSI sequence."""
        scr = self.screen
        cur = scr.cursor
        args = csi.args
        arg0 = args[0]
        one = arg0 or 1
        final = csi.mode[0]
        known = True

        if final == "@":
            scr.insert_blank(one)
        elif final == "A":
            scr.move_to(cur.x, cur.y - one)
        elif final in ("B", "e"):
            scr.move_to(cur.x, cur.y + one)
        elif final == "i":
            if arg0 == 0:
                self.dump()
            elif arg0 == 1:
                self.dump_line(cur.y)
            elif arg0 == 2:
                self.dump_selection()
            elif arg0 == 4:
                self._set_mode_bit(False, TermMode.PRINT)
            elif arg0 == 5:
                self._set_mode_bit(True, TermMode.PRINT)
        elif final == "c":
            if arg0 == 0:
                self.send(self.config.vtiden, False)
        elif final == "b":
            count = min(max(arg0, 1), 65535)
            if self.lastc:
                for _ in range(count):
                    self.put(self.lastc)
        elif final in ("C", "a"):
            scr.move_to(cur.x + one, cur.y)
        elif final == "D":
            scr.move_to(cur.x - one, cur.y)
        elif final == "E":
            scr.move_to(0, cur.y + one)
        elif final == "F":
            scr.move_to(0, cur.y - one)
        elif final == "g":
            if arg0 == 0:
                scr.tabs[cur.x] = False
            elif arg0 == 3:
                scr.tabs = [False] * scr.col
            else:
                known = False
        elif final in ("G", "`"):
            scr.move_to(one - 1, cur.y)
        elif final in ("H", "f"):
            scr.move_absolute((args[1] or 1) - 1, one - 1)
        elif final == "I":
            scr.put_tab(one)
        elif final == "J":
            if arg0 == 0:
                scr.clear_region(cur.x, cur.y, scr.col - 1, cur.y)
                if cur.y < scr.row - 1:
                    scr.clear_region(0, cur.y + 1, scr.col - 1, scr.row - 1)
            elif arg0 == 1:
                if cur.y > 0:
                    scr.clear_region(0, 0, scr.col - 1, cur.y - 1)
                scr.clear_region(0, cur.y, cur.x, cur.y)
            elif arg0 == 2:
                scr.clear_region(0, 0, scr.col - 1, scr.row - 1)
            else:
                known = False
        elif final == "K":
            if arg0 == 0:
                scr.clear_region(cur.x, cur.y, scr.col - 1, cur.y)
            elif arg0 == 1:
                scr.clear_region(0, cur.y, cur.x, cur.y)
            elif arg0 == 2:
                scr.clear_region(0, cur.y, scr.col - 1, cur.y)
        elif final == "S":
            if not csi.priv:
                scr.scroll_up(scr.top, one)
        elif final == "T":
            scr.scroll_down(scr.top, one)
        elif final == "L":
            scr.insert_blank_line(one)
        elif final == "l":
            self.set_mode(csi.priv, False, args[:csi.narg])
        elif final == "M":
            scr.delete_line(one)
        elif final == "X":
            scr.clear_region(cur.x, cur.y, cur.x + one - 1, cur.y)
        elif final == "P":
            scr.delete_char(one)
        elif final == "Z":
            scr.put_tab(-one)
        elif final == "d":
            scr.move_absolute(cur.x, one - 1)
        elif final == "h":
            self.set_mode(csi.priv, True, args[:csi.narg])
        elif final == "m":
            self.set_attr(args[:csi.narg])
        elif final == "n":
            if arg0 == 5:
                self.send(b"\x1b[0n", False)
            elif arg0 == 6:
                self.send(f"\x1b[{cur.y + 1};{cur.x + 1}R".encode(), False)
            else:
                known = False
        elif final == "r":
            if csi.priv:
                known = False
            else:
                scr.set_scroll(one - 1, (args[1] or scr.row) - 1)
                scr.move_absolute(0, 0)
        elif final == "s":
            scr.save_cursor()
        elif final == "u":
            if csi.priv:
                known = False
            else:
                scr.load_cursor()
        elif final == " ":
            known = csi.mode[1] == "q" and self.window.set_cursor(arg0)
        else:
            known = False

        if not known:
            _log.warning("erresc: unknown csi %s", csi.dump())

    def _osc_color_response(self, num: int, index: int, is_osc4: bool) -> None:
        rgb = self.window.color(num if is_osc4 else index)
        if rgb is None:
            _log.warning(
                "erresc: failed to fetch %s color %d",
                "osc4" if is_osc4 else "osc",
                num if is_osc4 else index,
            )
            return
        r, g, b = rgb
        reply = (
            f"\x1b]{'4;' if is_osc4 else ''}{num};"
            f"rgb:{r:02x}{r:02x}/{g:02x}{g:02x}/{b:02x}{b:02x}\x07"
        ).encode()
        if len(reply) >= 32:
            _log.error(
                "error: truncation occurred while printing %s response",
                "osc4" if is_osc4 else "osc",
            )
            return
        self.send(reply, True)

    def str_handle(self) -> None:
        """Carry out the collected string sequence."""
        cfg = self.config
        win = self.window
        seq = self.strseq
        self.esc = _Esc(int(self.esc) & ~int(_Esc.STR_END | _Esc.STR))
        seq.parse()
        args = seq.args
        narg = len(args)
        par = _atoi(args[0]) if narg else 0

        if seq.type == "]":
            if par == 0:
                if narg > 1:
                    win.set_title(_text(args[1]))
                    win.set_icon_title(_text(args[1]))
                return
            if par == 1:
                if narg > 1:
                    win.set_icon_title(_text(args[1]))
                return
            if par == 2:
                if narg > 1:
                    win.set_title(_text(args[1]))
                return
            if par == 52:
                if narg > 2 and cfg.allowwindowops:
                    win.set_selection(_text(base64_decode(args[2])))
                    win.clip_copy()
                return
            if par in (10, 11, 12):
                if narg >= 2:
                    index, what = {
                        10: (cfg.defaultfg, "foreground"),
                        11: (cfg.defaultbg, "background"),
                        12: (cfg.defaultcs, "cursor"),
                    }[par]
                    name = _text(args[1])
                    if name == "?":
                        self._osc_color_response(par, index, False)
                    elif not win.set_color_name(index, name):
                        _log.warning("erresc: invalid %s color: %s", what, name)
                    else:
                        self.screen.full_dirty()
                    return
            elif par in (4, 104) and not (par == 4 and narg < 3):
                name = _text(args[2]) if par == 4 else None
                j = _atoi(args[1]) if narg > 1 else -1
                if name == "?":
                    self._osc_color_response(j, 0, True)
                elif not win.set_color_name(j, name):
                    if par == 104 and narg <= 1:
                        win.load_colors()
                        return
                    _log.warning("erresc: invalid color j=%d, p=%s", j, name or "(null)")
                else:
                    self.screen.full_dirty()
                return
        elif seq.type == "k":
            win.set_title(_text(args[0]) if args else None)
            return
        elif seq.type in ("P", "_", "^"):
            return

        _log.warning("erresc: unknown str %s", seq.dump())

    def _str_sequence(self, code: int) -> None:
        kind = {0x90: "P", 0x9F: "_", 0x9E: "^", 0x9D: "]"}.get(code, chr(code))
        self.strseq = STREscape(type=kind)
        self.esc |= _Esc.STR

    def control_code(self, code: int) -> None:
        """Carry out a C0 or C1 control character."""
        scr = self.screen
        cur = scr.cursor
        if code == 0x09:
            scr.put_tab(1)
            return
        if code == 0x08:
            scr.move_to(cur.x - 1, cur.y)
            return
        if code == 0x0D:
            scr.move_to(0, cur.y)
            return
        if code in (0x0A, 0x0B, 0x0C):
            scr.new_line(bool(scr.mode & TermMode.CRLF))
            return
        if code == 0x1B:
            self.csi = CSIEscape()
            self.esc = _Esc(int(self.esc) & ~int(_Esc.CSI | _Esc.ALTCHARSET | _Esc.TEST))
            self.esc |= _Esc.START
            return
        if code in (0x0E, 0x0F):
            scr.charset = 1 - (code - 0x0E)
            return
        if code in (0x05, 0x00, 0x11, 0x13, 0x7F):
            return
        if code in (0x90, 0x9D, 0x9E, 0x9F):
            self._str_sequence(code)
            return

        if code == 0x07:
            if self.esc & _Esc.STR_END:
                self.str_handle()
            else:
                self.window.bell()
        elif code in (0x1A, 0x18):
            if code == 0x1A:
                scr.set_char(ord("?"), cur.attr, cur.x, cur.y)
            self.csi = CSIEscape()
        elif code == 0x85:
            scr.new_line(True)
        elif code == 0x88:
            scr.tabs[cur.x] = True
        elif code == 0x9A:
            self.send(self.config.vtiden, False)
        # only CAN, SUB, BEL and C1 characters interrupt a sequence
        self.esc = _Esc(int(self.esc) & ~int(_Esc.STR_END | _Esc.STR))

    def esc_handle(self, code: int) -> bool:
        """Handle the byte after ESC; True when the sequence is complete."""
        scr = self.screen
        cur = scr.cursor
        ch = chr(code)
        if ch == "[":
            self.esc |= _Esc.CSI
            return False
        if ch == "#":
            self.esc |= _Esc.TEST
            return False
        if ch == "%":
            self.esc |= _Esc.UTF8
            return False
        if ch in "P_^]k":
            self._str_sequence(code)
            return False
        if ch in "()*+":
            scr.icharset = code - ord("(")
            self.esc |= _Esc.ALTCHARSET
            return False
        if ch in "no":
            scr.charset = 2 + (code - ord("n"))
        elif ch == "D":
            if cur.y == scr.bot:
                scr.scroll_up(scr.top, 1)
            else:
                scr.move_to(cur.x, cur.y + 1)
        elif ch == "E":
            scr.new_line(True)
        elif ch == "H":
            scr.tabs[cur.x] = True
        elif ch == "M":
            if cur.y == scr.top:
                scr.scroll_down(scr.top, 1)
            else:
                scr.move_to(cur.x, cur.y - 1)
        elif ch == "Z":
            self.send(self.config.vtiden, False)
        elif ch == "c":
            self.reset()
            self.window.set_title(None)
            self.window.load_colors()
            self.window.set_mode(False, WinMode.HIDE)
        elif ch == "=":
            self.window.set_mode(True, WinMode.APPKEYPAD)
        elif ch == ">":
            self.window.set_mode(False, WinMode.APPKEYPAD)
        elif ch == "7":
            scr.save_cursor()
        elif ch == "8":
            scr.load_cursor()
        elif ch == "\\":
            if self.esc & _Esc.STR_END:
                self.str_handle()
        else:
            shown = ch if 0x20 <= code <= 0x7E else "."
            _log.warning("erresc: unknown sequence ESC 0x%02X '%s'", code & 0xFF, shown)
        return True

    def _define_utf8(self, code: int) -> None:
        if code == ord("G"):
            self._set_mode_bit(True, TermMode.UTF8)
        elif code == ord("@"):
            self._set_mode_bit(False, TermMode.UTF8)

    def _define_charset(self, code: int) -> None:
        ch = chr(code)
        if ch in (GRAPHIC0, USA):
            self.screen.trantbl[self.screen.icharset] = ch
        else:
            _log.warning("esc unhandled charset: ESC ( %s", ch)

    def _dec_test(self, code: int) -> None:
        if code == ord("8"):
            scr = self.screen
            for x in range(scr.col):
                for y in range(scr.row):
                    scr.set_char(ord("E"), scr.cursor.attr, x, y)

    # input

    def put(self, rune: int) -> None:
        """Process one character from the child."""
        scr = self.screen
        control = _is_control(rune)
        width = 1
        if rune < 127 or not scr.mode & TermMode.UTF8:
            encoded = bytes([rune & 0xFF])
        else:
            encoded = utf8_encode(rune)
            if not control and rune <= 0x10FFFF:
                width = wcwidth(chr(rune))
                if width == -1:
                    width = 1

        if scr.mode & TermMode.PRINT:
            self._print(encoded)

        # A string sequence swallows everything up to its terminator.
        if self.esc & _Esc.STR:
            if rune in (0x07, 0x18, 0x1A, 0x1B) or _is_c1(rune):
                self.esc = _Esc(int(self.esc) & ~int(_Esc.START | _Esc.STR))
                self.esc |= _Esc.STR_END
            else:
                self.strseq.buf += encoded
                return

        if control:
            if scr.mode & TermMode.UTF8 and _is_c1(rune):
                return
            self.control_code(rune)
            if not self.esc:
                self.lastc = 0
            return
        if self.esc & _Esc.START:
            if self.esc & _Esc.CSI:
                self.csi.buf.append(rune & 0xFF)
                if 0x40 <= rune <= 0x7E or len(self.csi.buf) >= ESC_BUF_SIZ - 1:
                    self.esc = _Esc.NONE
                    self.csi.parse()
                    self.csi_handle(self.csi)
                return
            if self.esc & _Esc.UTF8:
                self._define_utf8(rune)
            elif self.esc & _Esc.ALTCHARSET:
                self._define_charset(rune)
            elif self.esc & _Esc.TEST:
                self._dec_test(rune)
            elif not self.esc_handle(rune):
                return
            self.esc = _Esc.NONE
            return

        cur = scr.cursor
        if self.selection.selected(cur.x, cur.y):
            self.selection.clear()

        line = scr.line(cur.y)
        if scr.mode & TermMode.WRAP and cur.wrapnext:
            line[cur.x].mode |= Attr.WRAP
            scr.new_line(True)
            cur = scr.cursor
            line = scr.line(cur.y)

        if scr.mode & TermMode.INSERT and cur.x + width < scr.col:
            moved = [g.copy() for g in line[cur.x:scr.col - width]]
            line[cur.x + width:scr.col] = moved
            line[cur.x].mode = _without(line[cur.x].mode, Attr.WIDE)

        if cur.x + width > scr.col:
            if scr.mode & TermMode.WRAP:
                scr.new_line(True)
            else:
                scr.move_to(scr.col - width, cur.y)
            cur = scr.cursor

        scr.set_char(rune, cur.attr, cur.x, cur.y)
        self.lastc = rune
        line = scr.line(cur.y)

        if width == 2:
            line[cur.x].mode |= Attr.WIDE
            if cur.x + 1 < scr.col:
                if line[cur.x + 1].mode == Attr.WIDE and cur.x + 2 < scr.col:
                    line[cur.x + 2].u = _SPACE
                    line[cur.x + 2].mode = _without(line[cur.x + 2].mode, Attr.WDUMMY)
                line[cur.x + 1].u = 0
                line[cur.x + 1].mode = Attr.WDUMMY
        if cur.x + width < scr.col:
            scr.move_to(cur.x + width, cur.y)
        else:
            cur.wrapnext = True

    def write(self, data: bytes, show_ctrl: bool = False) -> int:
        """Process bytes from the child; return how many were consumed.

        An incomplete UTF-8 sequence at the end is left unconsumed. With
        ``show_ctrl``, control characters are shown in caret notation.
        """
        scr = self.screen
        data = bytes(data)
        if scr.scroll_offset:
            scr.scroll_offset = 0
            scr.full_dirty()

        n = 0
        while n < len(data):
            if scr.mode & TermMode.UTF8:
                rune, size = utf8_decode(data[n:n + UTF_SIZ])
                if size == 0:
                    break
            else:
                rune, size = data[n], 1
            if show_ctrl and _is_control(rune):
                if rune & 0x80:
                    rune &= 0x7F
                    self.put(ord("^"))
                    self.put(ord("["))
                elif rune not in (0x0A, 0x0D, 0x09):
                    rune ^= 0x40
                    self.put(ord("^"))
            self.put(rune)
            n += size
        return n