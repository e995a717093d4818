"""Terminal emulator core: escape parsing, screen buffer, selection, key mapping and pty handling."""

__version__ = "0.9.2"

__all__ = [
    "codec",
    "config",
    "escapes",
    "glyph",
    "keys",
    "options",
    "screen",
    "selection",
    "terminal",
    "tty",
]