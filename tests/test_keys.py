import pytest

from stermcore.glyph import WinMode
from stermcore.keys import (
    ANY_MOD,
    KEYS,
    NO_MOD,
    Key,
    Keysym,
    Mod,
    kmap,
)
from stermcore.keys import match as key_match

_MODES = [
    WinMode.NONE,
    WinMode.APPKEYPAD,
    WinMode.APPCURSOR,
    WinMode.APPKEYPAD | WinMode.APPCURSOR,
    WinMode.NUMLOCK,
    WinMode.NUMLOCK | WinMode.APPKEYPAD,
    WinMode.NUMLOCK | WinMode.APPCURSOR,
    WinMode.NUMLOCK | WinMode.APPKEYPAD | WinMode.APPCURSOR,
]

# A modifier bit that no table entry names explicitly.
_UNUSED_STATE = 1 << 12


def test_any_mod_matches_every_state():
    assert key_match(ANY_MOD, Mod.SHIFT | Mod.CONTROL)
    assert key_match(ANY_MOD, 0)


def test_match_ignores_numlock_and_group():
    assert key_match(Mod.SHIFT, Mod.SHIFT | Mod.MOD2)
    assert key_match(NO_MOD, Mod.SWITCH)
    assert not key_match(Mod.SHIFT, Mod.CONTROL)
    assert not key_match(NO_MOD, Mod.SHIFT)


def test_cursor_keys_normal_and_application_mode():
    assert kmap(Keysym.UP, 0, WinMode.NONE) == b"\x1b[A"
    assert kmap(Keysym.UP, 0, WinMode.APPCURSOR) == b"\x1bOA"
    assert kmap(Keysym.LEFT, 0, WinMode.NONE) == b"\x1b[D"
    assert kmap(Keysym.LEFT, 0, WinMode.APPCURSOR) == b"\x1bOD"


@pytest.mark.parametrize(
    "state, expected",
    [
        (Mod.SHIFT, b"\x1b[1;2A"),
        (Mod.MOD1, b"\x1b[1;3A"),
        (Mod.CONTROL, b"\x1b[1;5A"),
        (Mod.SHIFT | Mod.CONTROL | Mod.MOD1, b"\x1b[1;8A"),
    ],
)
def test_modified_up_arrow(state, expected):
    assert kmap(Keysym.UP, state, WinMode.NONE) == expected


def test_numlock_state_bit_is_ignored():
    assert kmap(Keysym.UP, Mod.MOD2, WinMode.NONE) == b"\x1b[A"


def test_keypad_digit_needs_application_keypad_without_numlock():
    assert kmap(Keysym.KP_1, 0, WinMode.NONE) is None
    assert kmap(Keysym.KP_1, 0, WinMode.APPKEYPAD) == b"\x1bOq"
    assert kmap(Keysym.KP_1, 0, WinMode.APPKEYPAD | WinMode.NUMLOCK) is None


def test_keypad_enter():
    assert kmap(Keysym.KP_ENTER, 0, WinMode.NONE) == b"\r"
    assert kmap(Keysym.KP_ENTER, 0, WinMode.APPKEYPAD) == b"\x1bOM"


def test_backspace_and_return():
    assert kmap(Keysym.BACKSPACE, 0, WinMode.NONE) == b"\x7f"
    assert kmap(Keysym.BACKSPACE, Mod.MOD1, WinMode.NONE) == b"\x1b\x7f"
    assert kmap(Keysym.BACKSPACE, Mod.CONTROL, WinMode.NONE) is None
    assert kmap(Keysym.RETURN, Mod.MOD1, WinMode.NONE) == b"\x1b\r"
    assert kmap(Keysym.RETURN, Mod.CONTROL, WinMode.NONE) == b"\r"


def test_function_keys():
    assert kmap(Keysym.F1, 0, WinMode.NONE) == b"\x1bOP"
    assert kmap(Keysym.F1, Mod.SHIFT, WinMode.NONE) == b"\x1b[1;2P"
    assert kmap(Keysym.F13, 0, WinMode.NONE) == kmap(Keysym.F1, Mod.SHIFT, 0)
    assert kmap(Keysym.F5, 0, WinMode.NONE) == b"\x1b[15~"


def test_insert_depends_on_keypad_mode():
    assert kmap(Keysym.INSERT, 0, WinMode.NONE) == b"\x1b[4h"
    assert kmap(Keysym.INSERT, 0, WinMode.APPKEYPAD) == b"\x1b[2~"


def test_ordinary_keys_have_no_string():
    assert kmap(ord("a"), 0, WinMode.NONE) is None
    assert kmap(ord("A"), Mod.SHIFT, WinMode.NONE) is None


def test_function_key_range_has_no_gaps():
    values = [Keysym[f"F{n}"] for n in range(1, 36)]
    assert values == list(range(Keysym.F1, Keysym.F1 + 35))
    assert Keysym.F1 == 0xFFBE
    assert kmap(Keysym.F1 + 12, 0, WinMode.NONE) == b"\x1b[1;2P"
    assert kmap(Keysym.F1 + 34, 0, WinMode.NONE) == b"\x1b[23;5~"


def test_catch_all_entries_come_last_for_each_key():
    seen_any = set()
    for key in KEYS:
        if key_match(key.mask, _UNUSED_STATE):
            seen_any.add(key.keysym)
        else:
            assert key.keysym not in seen_any
    assert Keysym.UP in seen_any


def test_every_table_entry_is_reachable():
    for key in KEYS:
        assert isinstance(key, Key) and key.string
        assert (key.keysym & 0xFFFF) >= 0xFD00
        state = 0 if key.mask == ANY_MOD else key.mask
        results = [kmap(key.keysym, state, mode) for mode in _MODES]
        assert key.string in results


def test_table_entry_is_immutable():
    key = KEYS[0]
    with pytest.raises(AttributeError):
        key.string = b"x"
    assert kmap(key.keysym, key.mask, WinMode.NONE) == b"\x1b[2J"