"""Tolerant UTF-8 and base64 decoding as used by the terminal's input path."""

from __future__ import annotations

UTF_INVALID = 0xFFFD
UTF_SIZ = 4

_UTFBYTE = (0x80, 0x00, 0xC0, 0xE0, 0xF0)
_UTFMASK = (0xC0, 0x80, 0xE0, 0xF0, 0xF8)
_UTFMIN = (0, 0, 0x80, 0x800, 0x10000)
_UTFMAX = (0x10FFFF, 0x7F, 0x7FF, 0xFFFF, 0x10FFFF)


def _decode_byte(byte: int) -> tuple[int, int]:
    """Return the payload bits of a byte and its class (0 = continuation)."""
    for kind, (mask, marker) in enumerate(zip(_UTFMASK, _UTFBYTE)):
        if byte & mask == marker:
            return byte & ~mask & 0xFF, kind
    return 0, len(_UTFMASK)


def utf8_validate(rune: int, size: int) -> tuple[int, int]:
    """Check a code point against the range of a sequence of ``size`` bytes.

    Returns the code point (replaced by U+FFFD when out of range or a
    surrogate) and the number of bytes needed to encode it.
    """
    if not 0 <= size <= UTF_SIZ:
        raise ValueError(f"sequence size out of range: {size}")
    if not _UTFMIN[size] <= rune <= _UTFMAX[size] or 0xD800 <= rune <= 0xDFFF:
        rune = UTF_INVALID
    length = 1
    while rune > _UTFMAX[length]:
        length += 1
    return rune, length


def utf8_decode(data: bytes) -> tuple[int, int]:
    """Decode the first character of ``data``.

    Returns ``(rune, consumed)``. ``consumed`` is 0 when the data is empty or
    holds only the start of a sequence; invalid input yields U+FFFD.
    """
    if not data:
        return UTF_INVALID, 0
    decoded, length = _decode_byte(data[0])
    if not 1 <= length <= UTF_SIZ:
        return UTF_INVALID, 1
    seen = 1
    for byte in data[1:length]:
        bits, kind = _decode_byte(byte)
        decoded = (decoded << 6) | bits
        if kind != 0:
            return UTF_INVALID, seen
        seen += 1
    if seen < length:
        return UTF_INVALID, 0
    rune, _ = utf8_validate(decoded, length)
    return rune, length


def utf8_encode(rune: int) -> bytes:
    """Encode a code point, substituting U+FFFD for invalid ones."""
    rune, length = utf8_validate(rune, 0)
    if length > UTF_SIZ:
        return b""
    out = bytearray(length)
    for i in range(length - 1, 0, -1):
        out[i] = (_UTFBYTE[0] | (rune & ~_UTFMASK[0])) & 0xFF
        rune >>= 6
    out[0] = (_UTFBYTE[length] | (rune & ~_UTFMASK[length])) & 0xFF
    return bytes(out)


_B64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_B64_DIGITS = {ord(ch): value for value, ch in enumerate(_B64_ALPHABET)}
_B64_DIGITS[ord("=")] = -1


def _printable(byte: int) -> bool:
    return 0x20 <= byte <= 0x7E


def base64_decode(text: str | bytes) -> bytes:
    """Decode base64 leniently.

    Non-printable characters are skipped, missing padding is assumed, unknown
    characters count as zero, and decoding stops at the first padding.
    """
    src = text.encode("utf-8") if isinstance(text, str) else bytes(text)
    pos = 0
    out = bytearray()

    def next_digit() -> int:
        nonlocal pos
        while pos < len(src) and not _printable(src[pos]):
            pos += 1
        if pos >= len(src):
            return -1
        byte = src[pos]
        pos += 1
        return _B64_DIGITS.get(byte, 0)

    while pos < len(src):
        a, b, c, d = next_digit(), next_digit(), next_digit(), next_digit()
        if a == -1 or b == -1:
            break
        out.append(((a << 2) | ((b & 0x30) >> 4)) & 0xFF)
        if c == -1:
            break
        out.append((((b & 0x0F) << 4) | ((c & 0x3C) >> 2)) & 0xFF)
        if d == -1:
            break
        out.append((((c & 0x03) << 6) | d) & 0xFF)
    return bytes(out)