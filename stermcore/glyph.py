"""Screen cell representation and the flag sets shared across the terminal."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum, IntFlag

HISTSIZE = 2000
"""Number of lines kept in the primary screen's ring buffer."""

_TRUECOLOR_BIT = 1 << 24


class Attr(IntFlag):
    """Per-cell rendering attributes."""

    NULL = 0
    BOLD = 1 << 0
    FAINT = 1 << 1
    ITALIC = 1 << 2
    UNDERLINE = 1 << 3
    BLINK = 1 << 4
    REVERSE = 1 << 5
    INVISIBLE = 1 << 6
    STRUCK = 1 << 7
    WRAP = 1 << 8
    WIDE = 1 << 9
    WDUMMY = 1 << 10
    BOLD_FAINT = BOLD | FAINT


class WinMode(IntFlag):
    """Window-level mode flags driven by escape sequences and input."""

    NONE = 0
    VISIBLE = 1 << 0
    FOCUSED = 1 << 1
    APPKEYPAD = 1 << 2
    MOUSEBTN = 1 << 3
    MOUSEMOTION = 1 << 4
    REVERSE = 1 << 5
    KBDLOCK = 1 << 6
    HIDE = 1 << 7
    APPCURSOR = 1 << 8
    MOUSESGR = 1 << 9
    EIGHT_BIT = 1 << 10
    BLINK = 1 << 11
    FBLINK = 1 << 12
    FOCUS = 1 << 13
    MOUSEX10 = 1 << 14
    MOUSEMANY = 1 << 15
    BRCKTPASTE = 1 << 16
    NUMLOCK = 1 << 17
    MOUSE = MOUSEBTN | MOUSEMOTION | MOUSEX10 | MOUSEMANY


class SelectionMode(IntEnum):
    IDLE = 0
    EMPTY = 1
    READY = 2


class SelectionType(IntEnum):
    REGULAR = 1
    RECTANGULAR = 2


class Snap(IntEnum):
    NONE = 0
    WORD = 1
    LINE = 2


@dataclass
class Glyph:
    """One character cell: code point, attributes and colours."""

    u: int = 0
    mode: Attr = Attr.NULL
    fg: int = 0
    bg: int = 0

    def copy(self) -> "Glyph":
        """Return an independent copy of this cell."""
        return replace(self)


def truecolor(r: int, g: int, b: int) -> int:
    """Pack an RGB triple into a colour value flagged as direct colour."""
    return _TRUECOLOR_BIT | (r << 16) | (g << 8) | b


def is_truecolor(color: int) -> bool:
    """Tell whether a colour value is a packed RGB colour, not a palette index."""
    return bool(color & _TRUECOLOR_BIT)