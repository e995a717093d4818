"""Compile-time style defaults for the terminal: appearance, shell and palette."""

from __future__ import annotations

from dataclasses import dataclass

_NAMED_COLORS = (
    # 8 normal colours
    "black",
    "red3",
    "green3",
    "yellow3",
    "blue2",
    "magenta3",
    "cyan3",
    "gray90",
    # 8 bright colours
    "gray50",
    "red",
    "green",
    "yellow",
    "#5c5cff",
    "magenta",
    "cyan",
    "white",
)

_EXTRA_COLORS = (
    "#cccccc",
    "#555555",
    "gray90",  # default foreground colour
    "#000000",  # default background colour
)

DEFAULT_COLORNAMES: tuple[str | None, ...] = (
    _NAMED_COLORS + (None,) * (256 - len(_NAMED_COLORS)) + _EXTRA_COLORS
)
"""Palette names: 16 named entries, 240 computed ones (None), then extras."""


@dataclass
class Config:
    """Terminal settings with the stock defaults."""

    font: str = (
        "JetBrainsMono Nerd Font Mono:pixelsize=21:antialias=true:autohint=true"
    )
    borderpx: int = 0
    shell: str = "/bin/sh"
    utmp: str | None = None
    scroll: str | None = None
    stty_args: str = "stty raw pass8 nl -echo -iexten -cstopb 38400"
    vtiden: bytes = b"\x1b[?6c"
    cwscale: float = 1.0
    chscale: float = 1.0
    worddelimiters: str = " "
    doubleclicktimeout: int = 300
    tripleclicktimeout: int = 600
    allowaltscreen: bool = True
    allowwindowops: bool = False
    minlatency: float = 2
    maxlatency: float = 33
    blinktimeout: int = 800
    cursorthickness: int = 2
    bellvolume: int = 0
    termname: str = "st-256color"
    tabspaces: int = 8
    alpha: float = 0.77
    colornames: tuple[str | None, ...] = DEFAULT_COLORNAMES
    defaultfg: int = 258
    defaultbg: int = 259
    defaultcs: int = 256
    defaultrcs: int = 257
    cursorshape: int = 2
    cols: int = 80
    rows: int = 24
    mousefg: int = 7
    mousebg: int = 0
    defaultattr: int = 11

    def __post_init__(self) -> None:
        if not -100 <= self.bellvolume <= 100:
            raise ValueError(
                f"bell volume must lie between -100 and 100: {self.bellvolume}"
            )
        if self.tabspaces < 1:
            raise ValueError(f"tab width must be positive: {self.tabspaces}")
        self.colornames = tuple(self.colornames)

    @property
    def palette_size(self) -> int:
        """Number of palette slots: at least 256, more if extra names exist."""
        return max(len(self.colornames), 256)

    def color_name(self, index: int) -> str | None:
        """Return the configured name of palette entry ``index``.

        Entries without a name (the computed 256-colour cube and greys)
        give None; an index outside the palette raises IndexError.
        """
        if not 0 <= index < self.palette_size:
            raise IndexError(f"colour index out of range: {index}")
        if index >= len(self.colornames):
            return None
        return self.colornames[index]