"""Keyboard modifier masks, keysyms and the table of special-key strings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, IntFlag

from .glyph import SelectionType, WinMode


class Mod(IntFlag):
    """Modifier state bits as reported with key and button events."""

    NONE = 0
    SHIFT = 1 << 0
    LOCK = 1 << 1
    CONTROL = 1 << 2
    MOD1 = 1 << 3
    MOD2 = 1 << 4
    MOD3 = 1 << 5
    MOD4 = 1 << 6
    MOD5 = 1 << 7
    SWITCH = (1 << 13) | (1 << 14)


ANY_MOD = 0xFFFFFFFF
"""Mask that matches whatever modifiers are held."""

NO_MOD = 0
"""Mask that matches only when no (relevant) modifier is held."""

IGNORE_MOD = int(Mod.MOD2 | Mod.SWITCH)
"""State bits ignored when matching: num lock and keyboard layout group."""

FORCE_MOUSE_MOD = int(Mod.SHIFT)
"""Modifier that forces selection and shortcuts while mouse reporting is on."""

SELECTION_MASKS = {SelectionType.RECTANGULAR: int(Mod.MOD1)}
"""Modifier masks choosing a selection type; others give a regular selection."""


class Keysym(IntEnum):
    """Symbols of the keys that have special strings."""

    ISO_LEFT_TAB = 0xFE20
    BACKSPACE = 0xFF08
    TAB = 0xFF09
    RETURN = 0xFF0D
    PAUSE = 0xFF13
    ESCAPE = 0xFF1B
    HOME = 0xFF50
    LEFT = 0xFF51
    UP = 0xFF52
    RIGHT = 0xFF53
    DOWN = 0xFF54
    PRIOR = 0xFF55
    NEXT = 0xFF56
    END = 0xFF57
    BEGIN = 0xFF58
    PRINT = 0xFF61
    INSERT = 0xFF63
    BREAK = 0xFF6B
    NUM_LOCK = 0xFF7F
    KP_ENTER = 0xFF8D
    KP_HOME = 0xFF95
    KP_LEFT = 0xFF96
    KP_UP = 0xFF97
    KP_RIGHT = 0xFF98
    KP_DOWN = 0xFF99
    KP_PRIOR = 0xFF9A
    KP_NEXT = 0xFF9B
    KP_END = 0xFF9C
    KP_BEGIN = 0xFF9D
    KP_INSERT = 0xFF9E
    KP_DELETE = 0xFF9F
    KP_MULTIPLY = 0xFFAA
    KP_ADD = 0xFFAB
    KP_SEPARATOR = 0xFFAC
    KP_SUBTRACT = 0xFFAD
    KP_DECIMAL = 0xFFAE
    KP_DIVIDE = 0xFFAF
    KP_0 = 0xFFB0
    KP_1 = 0xFFB1
    KP_2 = 0xFFB2
    KP_3 = 0xFFB3
    KP_4 = 0xFFB4
    KP_5 = 0xFFB5
    KP_6 = 0xFFB6
    KP_7 = 0xFFB7
    KP_8 = 0xFFB8
    KP_9 = 0xFFB9
    F1 = 0xFFBE
    F2 = 0xFFBF
    F3 = 0xFFC0
    F4 = 0xFFC1
    F5 = 0xFFC2
    F6 = 0xFFC3
    F7 = 0xFFC4
    F8 = 0xFFC5
    F9 = 0xFFC6
    F10 = 0xFFC7
    F11 = 0xFFC8
    F12 = 0xFFC9
    F13 = 0xFFCA
    F14 = 0xFFCB
    F15 = 0xFFCC
    F16 = 0xFFCD
    F17 = 0xFFCE
    F18 = 0xFFCF
    F19 = 0xFFD0
    F20 = 0xFFD1
    F21 = 0xFFD2
    F22 = 0xFFD3
    F23 = 0xFFD4
    F24 = 0xFFD5
    F25 = 0xFFD6
    F26 = 0xFFD7
    F27 = 0xFFD8
    F28 = 0xFFD9
    F29 = 0xFFDA
    F30 = 0xFFDB
    F31 = 0xFFDC
    F32 = 0xFFDD
    F33 = 0xFFDE
    F34 = 0xFFDF
    F35 = 0xFFE0
    DELETE = 0xFFFF


@dataclass(frozen=True)
class Key:
    """One entry of the special-key table.

    ``appkey`` and ``appcursor`` are three-valued: 0 means indifferent,
    positive requires the application mode on, negative requires it off.
    An ``appkey`` of 2 additionally requires num lock to be off.
    """

    keysym: int
    mask: int
    string: bytes
    appkey: int = 0
    appcursor: int = 0


MAPPED_KEYS: frozenset[int] = frozenset({-1})
"""Keysyms outside the function-key range that are looked up in the table."""

_S = int(Mod.SHIFT)
_C = int(Mod.CONTROL)
_A = int(Mod.MOD1)
_M3 = int(Mod.MOD3)
_M4 = int(Mod.MOD4)
_ANY = ANY_MOD
_NO = NO_MOD
K = Keysym

KEYS: tuple[Key, ...] = tuple(
    Key(*entry)
    for entry in (
        (K.KP_HOME, _S, b"\x1b[2J", 0, -1),
        (K.KP_HOME, _S, b"\x1b[1;2H", 0, +1),
        (K.KP_HOME, _ANY, b"\x1b[H", 0, -1),
        (K.KP_HOME, _ANY, b"\x1b[1~", 0, +1),
        (K.KP_UP, _ANY, b"\x1bOx", +1, 0),
        (K.KP_UP, _ANY, b"\x1b[A", 0, -1),
        (K.KP_UP, _ANY, b"\x1bOA", 0, +1),
        (K.KP_DOWN, _ANY, b"\x1bOr", +1, 0),
        (K.KP_DOWN, _ANY, b"\x1b[B", 0, -1),
        (K.KP_DOWN, _ANY, b"\x1bOB", 0, +1),
        (K.KP_LEFT, _ANY, b"\x1bOt", +1, 0),
        (K.KP_LEFT, _ANY, b"\x1b[D", 0, -1),
        (K.KP_LEFT, _ANY, b"\x1bOD", 0, +1),
        (K.KP_RIGHT, _ANY, b"\x1bOv", +1, 0),
        (K.KP_RIGHT, _ANY, b"\x1b[C", 0, -1),
        (K.KP_RIGHT, _ANY, b"\x1bOC", 0, +1),
        (K.KP_PRIOR, _S, b"\x1b[5;2~", 0, 0),
        (K.KP_PRIOR, _ANY, b"\x1b[5~", 0, 0),
        (K.KP_BEGIN, _ANY, b"\x1b[E", 0, 0),
        (K.KP_END, _C, b"\x1b[J", -1, 0),
        (K.KP_END, _C, b"\x1b[1;5F", +1, 0),
        (K.KP_END, _S, b"\x1b[K", -1, 0),
        (K.KP_END, _S, b"\x1b[1;2F", +1, 0),
        (K.KP_END, _ANY, b"\x1b[4~", 0, 0),
        (K.KP_NEXT, _S, b"\x1b[6;2~", 0, 0),
        (K.KP_NEXT, _ANY, b"\x1b[6~", 0, 0),
        (K.KP_INSERT, _S, b"\x1b[2;2~", +1, 0),
        (K.KP_INSERT, _S, b"\x1b[4l", -1, 0),
        (K.KP_INSERT, _C, b"\x1b[L", -1, 0),
        (K.KP_INSERT, _C, b"\x1b[2;5~", +1, 0),
        (K.KP_INSERT, _ANY, b"\x1b[4h", -1, 0),
        (K.KP_INSERT, _ANY, b"\x1b[2~", +1, 0),
        (K.KP_DELETE, _C, b"\x1b[M", -1, 0),
        (K.KP_DELETE, _C, b"\x1b[3;5~", +1, 0),
        (K.KP_DELETE, _S, b"\x1b[2K", -1, 0),
        (K.KP_DELETE, _S, b"\x1b[3;2~", +1, 0),
        (K.KP_DELETE, _ANY, b"\x1b[P", -1, 0),
        (K.KP_DELETE, _ANY, b"\x1b[3~", +1, 0),
        (K.KP_MULTIPLY, _ANY, b"\x1bOj", +2, 0),
        (K.KP_ADD, _ANY, b"\x1bOk", +2, 0),
        (K.KP_ENTER, _ANY, b"\x1bOM", +2, 0),
        (K.KP_ENTER, _ANY, b"\r", -1, 0),
        (K.KP_SUBTRACT, _ANY, b"\x1bOm", +2, 0),
        (K.KP_DECIMAL, _ANY, b"\x1bOn", +2, 0),
        (K.KP_DIVIDE, _ANY, b"\x1bOo", +2, 0),
        (K.KP_0, _ANY, b"\x1bOp", +2, 0),
        (K.KP_1, _ANY, b"\x1bOq", +2, 0),
        (K.KP_2, _ANY, b"\x1bOr", +2, 0),
        (K.KP_3, _ANY, b"\x1bOs", +2, 0),
        (K.KP_4, _ANY, b"\x1bOt", +2, 0),
        (K.KP_5, _ANY, b"\x1bOu", +2, 0),
        (K.KP_6, _ANY, b"\x1bOv", +2, 0),
        (K.KP_7, _ANY, b"\x1bOw", +2, 0),
        (K.KP_8, _ANY, b"\x1bOx", +2, 0),
        (K.KP_9, _ANY, b"\x1bOy", +2, 0),
        (K.UP, _S, b"\x1b[1;2A", 0, 0),
        (K.UP, _A, b"\x1b[1;3A", 0, 0),
        (K.UP, _S | _A, b"\x1b[1;4A", 0, 0),
        (K.UP, _C, b"\x1b[1;5A", 0, 0),
        (K.UP, _S | _C, b"\x1b[1;6A", 0, 0),
        (K.UP, _C | _A, b"\x1b[1;7A", 0, 0),
        (K.UP, _S | _C | _A, b"\x1b[1;8A", 0, 0),
        (K.UP, _ANY, b"\x1b[A", 0, -1),
        (K.UP, _ANY, b"\x1bOA", 0, +1),
        (K.DOWN, _S, b"\x1b[1;2B", 0, 0),
        (K.DOWN, _A, b"\x1b[1;3B", 0, 0),
        (K.DOWN, _S | _A, b"\x1b[1;4B", 0, 0),
        (K.DOWN, _C, b"\x1b[1;5B", 0, 0),
        (K.DOWN, _S | _C, b"\x1b[1;6B", 0, 0),
        (K.DOWN, _C | _A, b"\x1b[1;7B", 0, 0),
        (K.DOWN, _S | _C | _A, b"\x1b[1;8B", 0, 0),
        (K.DOWN, _ANY, b"\x1b[B", 0, -1),
        (K.DOWN, _ANY, b"\x1bOB", 0, +1),
        (K.LEFT, _S, b"\x1b[1;2D", 0, 0),
        (K.LEFT, _A, b"\x1b[1;3D", 0, 0),
        (K.LEFT, _S | _A, b"\x1b[1;4D", 0, 0),
        (K.LEFT, _C, b"\x1b[1;5D", 0, 0),
        (K.LEFT, _S | _C, b"\x1b[1;6D", 0, 0),
        (K.LEFT, _C | _A, b"\x1b[1;7D", 0, 0),
        (K.LEFT, _S | _C | _A, b"\x1b[1;8D", 0, 0),
        (K.LEFT, _ANY, b"\x1b[D", 0, -1),
        (K.LEFT, _ANY, b"\x1bOD", 0, +1),
        (K.RIGHT, _S, b"\x1b[1;2C", 0, 0),
        (K.RIGHT, _A, b"\x1b[1;3C", 0, 0),
        (K.RIGHT, _S | _A, b"\x1b[1;4C", 0, 0),
        (K.RIGHT, _C, b"\x1b[1;5C", 0, 0),
        (K.RIGHT, _S | _C, b"\x1b[1;6C", 0, 0),
        (K.RIGHT, _C | _A, b"\x1b[1;7C", 0, 0),
        (K.RIGHT, _S | _C | _A, b"\x1b[1;8C", 0, 0),
        (K.RIGHT, _ANY, b"\x1b[C", 0, -1),
        (K.RIGHT, _ANY, b"\x1bOC", 0, +1),
        (K.ISO_LEFT_TAB, _S, b"\x1b[Z", 0, 0),
        (K.RETURN, _A, b"\x1b\r", 0, 0),
        (K.RETURN, _ANY, b"\r", 0, 0),
        (K.INSERT, _S, b"\x1b[4l", -1, 0),
        (K.INSERT, _S, b"\x1b[2;2~", +1, 0),
        (K.INSERT, _C, b"\x1b[L", -1, 0),
        (K.INSERT, _C, b"\x1b[2;5~", +1, 0),
        (K.INSERT, _ANY, b"\x1b[4h", -1, 0),
        (K.INSERT, _ANY, b"\x1b[2~", +1, 0),
        (K.DELETE, _C, b"\x1b[M", -1, 0),
        (K.DELETE, _C, b"\x1b[3;5~", +1, 0),
        (K.DELETE, _S, b"\x1b[2K", -1, 0),
        (K.DELETE, _S, b"\x1b[3;2~", +1, 0),
        (K.DELETE, _ANY, b"\x1b[P", -1, 0),
        (K.DELETE, _ANY, b"\x1b[3~", +1, 0),
        (K.BACKSPACE, _NO, b"\x7f", 0, 0),
        (K.BACKSPACE, _A, b"\x1b\x7f", 0, 0),
        (K.HOME, _S, b"\x1b[2J", 0, -1),
        (K.HOME, _S, b"\x1b[1;2H", 0, +1),
        (K.HOME, _ANY, b"\x1b[H", 0, -1),
        (K.HOME, _ANY, b"\x1b[1~", 0, +1),
        (K.END, _C, b"\x1b[J", -1, 0),
        (K.END, _C, b"\x1b[1;5F", +1, 0),
        (K.END, _S, b"\x1b[K", -1, 0),
        (K.END, _S, b"\x1b[1;2F", +1, 0),
        (K.END, _ANY, b"\x1b[4~", 0, 0),
        (K.PRIOR, _C, b"\x1b[5;5~", 0, 0),
        (K.PRIOR, _S, b"\x1b[5;2~", 0, 0),
        (K.PRIOR, _ANY, b"\x1b[5~", 0, 0),
        (K.NEXT, _C, b"\x1b[6;5~", 0, 0),
        (K.NEXT, _S, b"\x1b[6;2~", 0, 0),
        (K.NEXT, _ANY, b"\x1b[6~", 0, 0),
        (K.F1, _NO, b"\x1bOP", 0, 0),
        (K.F1, _S, b"\x1b[1;2P", 0, 0),
        (K.F1, _C, b"\x1b[1;5P", 0, 0),
        (K.F1, _M4, b"\x1b[1;6P", 0, 0),
        (K.F1, _A, b"\x1b[1;3P", 0, 0),
        (K.F1, _M3, b"\x1b[1;4P", 0, 0),
        (K.F2, _NO, b"\x1bOQ", 0, 0),
        (K.F2, _S, b"\x1b[1;2Q", 0, 0),
        (K.F2, _C, b"\x1b[1;5Q", 0, 0),
        (K.F2, _M4, b"\x1b[1;6Q", 0, 0),
        (K.F2, _A, b"\x1b[1;3Q", 0, 0),
        (K.F2, _M3, b"\x1b[1;4Q", 0, 0),
        (K.F3, _NO, b"\x1bOR", 0, 0),
        (K.F3, _S, b"\x1b[1;2R", 0, 0),
        (K.F3, _C, b"\x1b[1;5R", 0, 0),
        (K.F3, _M4, b"\x1b[1;6R", 0, 0),
        (K.F3, _A, b"\x1b[1;3R", 0, 0),
        (K.F3, _M3, b"\x1b[1;4R", 0, 0),
        (K.F4, _NO, b"\x1bOS", 0, 0),
        (K.F4, _S, b"\x1b[1;2S", 0, 0),
        (K.F4, _C, b"\x1b[1;5S", 0, 0),
        (K.F4, _M4, b"\x1b[1;6S", 0, 0),
        (K.F4, _A, b"\x1b[1;3S", 0, 0),
        (K.F5, _NO, b"\x1b[15~", 0, 0),
        (K.F5, _S, b"\x1b[15;2~", 0, 0),
        (K.F5, _C, b"\x1b[15;5~", 0, 0),
        (K.F5, _M4, b"\x1b[15;6~", 0, 0),
        (K.F5, _A, b"\x1b[15;3~", 0, 0),
        (K.F6, _NO, b"\x1b[17~", 0, 0),
        (K.F6, _S, b"\x1b[17;2~", 0, 0),
        (K.F6, _C, b"\x1b[17;5~", 0, 0),
        (K.F6, _M4, b"\x1b[17;6~", 0, 0),
        (K.F6, _A, b"\x1b[17;3~", 0, 0),
        (K.F7, _NO, b"\x1b[18~", 0, 0),
        (K.F7, _S, b"\x1b[18;2~", 0, 0),
        (K.F7, _C, b"\x1b[18;5~", 0, 0),
        (K.F7, _M4, b"\x1b[18;6~", 0, 0),
        (K.F7, _A, b"\x1b[18;3~", 0, 0),
        (K.F8, _NO, b"\x1b[19~", 0, 0),
        (K.F8, _S, b"\x1b[19;2~", 0, 0),
        (K.F8, _C, b"\x1b[19;5~", 0, 0),
        (K.F8, _M4, b"\x1b[19;6~", 0, 0),
        (K.F8, _A, b"\x1b[19;3~", 0, 0),
        (K.F9, _NO, b"\x1b[20~", 0, 0),
        (K.F9, _S, b"\x1b[20;2~", 0, 0),
        (K.F9, _C, b"\x1b[20;5~", 0, 0),
        (K.F9, _M4, b"\x1b[20;6~", 0, 0),
        (K.F9, _A, b"\x1b[20;3~", 0, 0),
        (K.F10, _NO, b"\x1b[21~", 0, 0),
        (K.F10, _S, b"\x1b[21;2~", 0, 0),
        (K.F10, _C, b"\x1b[21;5~", 0, 0),
        (K.F10, _M4, b"\x1b[21;6~", 0, 0),
        (K.F10, _A, b"\x1b[21;3~", 0, 0),
        (K.F11, _NO, b"\x1b[23~", 0, 0),
        (K.F11, _S, b"\x1b[23;2~", 0, 0),
        (K.F11, _C, b"\x1b[23;5~", 0, 0),
        (K.F11, _M4, b"\x1b[23;6~", 0, 0),
        (K.F11, _A, b"\x1b[23;3~", 0, 0),
        (K.F12, _NO, b"\x1b[24~", 0, 0),
        (K.F12, _S, b"\x1b[24;2~", 0, 0),
        (K.F12, _C, b"\x1b[24;5~", 0, 0),
        (K.F12, _M4, b"\x1b[24;6~", 0, 0),
        (K.F12, _A, b"\x1b[24;3~", 0, 0),
        (K.F13, _NO, b"\x1b[1;2P", 0, 0),
        (K.F14, _NO, b"\x1b[1;2Q", 0, 0),
        (K.F15, _NO, b"\x1b[1;2R", 0, 0),
        (K.F16, _NO, b"\x1b[1;2S", 0, 0),
        (K.F17, _NO, b"\x1b[15;2~", 0, 0),
        (K.F18, _NO, b"\x1b[17;2~", 0, 0),
        (K.F19, _NO, b"\x1b[18;2~", 0, 0),
        (K.F20, _NO, b"\x1b[19;2~", 0, 0),
        (K.F21, _NO, b"\x1b[20;2~", 0, 0),
        (K.F22, _NO, b"\x1b[21;2~", 0, 0),
        (K.F23, _NO, b"\x1b[23;2~", 0, 0),
        (K.F24, _NO, b"\x1b[24;2~", 0, 0),
        (K.F25, _NO, b"\x1b[1;5P", 0, 0),
        (K.F26, _NO, b"\x1b[1;5Q", 0, 0),
        (K.F27, _NO, b"\x1b[1;5R", 0, 0),
        (K.F28, _NO, b"\x1b[1;5S", 0, 0),
        (K.F29, _NO, b"\x1b[15;5~", 0, 0),
        (K.F30, _NO, b"\x1b[17;5~", 0, 0),
        (K.F31, _NO, b"\x1b[18;5~", 0, 0),
        (K.F32, _NO, b"\x1b[19;5~", 0, 0),
        (K.F33, _NO, b"\x1b[20;5~", 0, 0),
        (K.F34, _NO, b"\x1b[21;5~", 0, 0),
        (K.F35, _NO, b"\x1b[23;5~", 0, 0),
    )
)
"""Special keys, searched in order; catch-all masks come last for each key."""


def match(mask: int, state: int) -> bool:
    """Tell whether a modifier ``state`` satisfies ``mask``.

    Num lock and the layout group bits are ignored; ``ANY_MOD`` matches
    every state.
    """
    return int(mask) == ANY_MOD or int(mask) == int(state) & ~IGNORE_MOD


def kmap(keysym: int, state: int, mode: WinMode) -> bytes | None:
    """Return the string a special key sends, or None if it has none.

    ``mode`` supplies the keypad, cursor-key and num-lock settings.
    """
    keysym = int(keysym)
    if keysym not in MAPPED_KEYS and (keysym & 0xFFFF) < 0xFD00:
        return None

    appkeypad = bool(mode & WinMode.APPKEYPAD)
    appcursor = bool(mode & WinMode.APPCURSOR)
    numlock = bool(mode & WinMode.NUMLOCK)

    for key in KEYS:
        if key.keysym != keysym or not match(key.mask, state):
            continue
        if (key.appkey < 0) if appkeypad else (key.appkey > 0):
            continue
        if numlock and key.appkey == 2:
            continue
        if (key.appcursor < 0) if appcursor else (key.appcursor > 0):
            continue
        return key.string
    return None