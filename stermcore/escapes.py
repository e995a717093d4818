"""Buffers and parsers for CSI and string (OSC, DCS, APC, PM) escape sequences."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from .codec import UTF_SIZ

ESC_BUF_SIZ = 128 * UTF_SIZ
"""Longest CSI sequence body kept before it is forced to end."""

ESC_ARG_SIZ = 16
"""Most numeric arguments a CSI sequence may carry."""

STR_BUF_SIZ = ESC_BUF_SIZ
"""Initial capacity hint for string sequences."""

STR_ARG_SIZ = ESC_ARG_SIZ
"""Most ``;``-separated fields a string sequence is split into."""

_LONG_MAX = 2**63 - 1
_LONG_MIN = -(2**63)
_NUMBER = re.compile(rb"[ \t\n\v\f\r]*([+-]?[0-9]+)")
_SEMICOLON = ord(";")
_COLON = ord(":")


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _render_byte(byte: int) -> str:
    if 0x20 <= byte <= 0x7E:
        return chr(byte)
    if byte == 0x0A:
        return "(\\n)"
    if byte == 0x0D:
        return "(\\r)"
    if byte == 0x1B:
        return "(\\e)"
    return f"({byte:02x})"


@dataclass
class CSIEscape:
    """A control sequence introduced by ``ESC [``.

    ``buf`` holds the raw bytes after the introducer. After :meth:`parse`,
    ``args`` holds the numeric parameters (unused slots are 0), ``narg``
    how many were given, ``priv`` whether the ``?`` marker was present and
    ``mode`` the final byte and the byte after it ("" when absent).
    """

    buf: bytearray = field(default_factory=bytearray)
    priv: bool = False
    args: list[int] = field(default_factory=lambda: [0] * ESC_ARG_SIZ)
    narg: int = 0
    mode: tuple[str, str] = ("", "")

    def parse(self) -> None:
        """Split the raw buffer into parameters and the final mode bytes."""
        data = bytes(self.buf)
        end = len(data)
        pos = 0
        self.narg = 0
        if data[:1] == b"?":
            self.priv = True
            pos = 1

        sep = _SEMICOLON
        while pos < end:
            found = _NUMBER.match(data, pos)
            if found:
                value = int(found.group(1))
                nxt = found.end()
            else:
                value = 0
                nxt = pos
            if value >= _LONG_MAX or value <= _LONG_MIN:
                value = -1
            self.args[self.narg] = _to_int32(value)
            self.narg += 1
            pos = nxt
            current = data[pos] if pos < end else 0
            if sep == _SEMICOLON and current == _COLON:
                sep = _COLON  # a colon may replace the separator once
            if current != sep or self.narg == ESC_ARG_SIZ:
                break
            pos += 1

        first = data[pos] if pos < end else 0
        pos += 1
        second = data[pos] if pos < end else 0
        self.mode = (chr(first) if first else "", chr(second) if second else "")

    def dump(self) -> str:
        """Render the sequence readably for diagnostics."""
        return "ESC[" + "".join(_render_byte(byte) for byte in self.buf)


@dataclass
class STREscape:
    """A string sequence (OSC, DCS, APC, PM or the old title form).

    ``type`` is the introducing character and ``buf`` the collected body;
    :meth:`parse` fills ``args`` with the ``;``-separated fields.
    """

    type: str = ""
    buf: bytearray = field(default_factory=bytearray)
    args: list[bytes] = field(default_factory=list)

    @property
    def narg(self) -> int:
        """Number of fields found by the last parse."""
        return len(self.args)

    def parse(self) -> None:
        """Split the body at ``;`` into at most ``STR_ARG_SIZ`` fields.

        A NUL byte ends the body; an empty body gives no fields.
        """
        data = bytes(self.buf).split(b"\0", 1)[0]
        self.args = data.split(b";")[:STR_ARG_SIZ] if data else []

    def dump(self) -> str:
        """Render the sequence readably for diagnostics."""
        out = ["ESC", self.type]
        for byte in self.buf:
            if byte == 0:
                return "".join(out)
            out.append(_render_byte(byte))
        out.append("ESC\\")
        return "".join(out)