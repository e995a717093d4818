# stermcore

This is the core of a simple terminal emulator. It takes the byte stream that
a child program writes and turns it into a grid of glyphs. It also holds the
key, selection and pseudo-terminal logic that a display layer needs.

## What it provides

- `stermcore.terminal.Terminal` interprets the child's output. It covers
  UTF-8 decoding, C0/C1 control codes, CSI sequences and string sequences.
  CSI support includes cursor movement, erasing, insert and delete, scrolling
  regions, modes and SGR attributes with 256-colour and truecolour. String
  sequences are OSC titles, OSC 4/10/11/12/104 colours and OSC 52 clipboard.
  It also handles tab stops, DEC special graphics and print mode.
  - Replies to the child go to the `writer` callable, or to `term.output`
    when none is given. Examples are device attributes, cursor position
    reports and colour queries.
  - Printer output from media copy and print mode goes to the `printer`
    callable. By default that is standard output.
- `stermcore.terminal.Window` records the window-side state that escape
  sequences change: titles, window modes, cursor style, bell count,
  primary/clipboard text and palette overrides.
- `stermcore.terminal.define_color` reads `38;5;n` / `38;2;r;g;b` style
  colour parameters.
- `stermcore.screen.Screen` holds the screen lines in a ring buffer. It keeps
  a scrollback history and an alternate screen, and tracks saved cursors,
  tab stops and dirty lines.
- `stermcore.selection.Selection` handles regular and rectangular selections
  with word and line snapping, and extracts the selected text.
- `stermcore.tty.Pty` spawns a shell on a new pseudo-terminal, or opens an
  existing tty line and configures it with `stty`. It reads, writes in small
  chunks, resizes and sends a hangup.
- `stermcore.tty` also has helpers:
  - `choose_program` picks the child's command line.
  - `stty_command` builds the `stty` command line for a tty line.
  - `crlf_translate` converts each CR into CR LF.
- `stermcore.keys.kmap` maps a keysym and modifier state to the bytes a
  program expects. It honours application keypad, cursor-key and num-lock
  modes. `stermcore.keys.match` tests modifier masks.
- `stermcore.codec` decodes UTF-8 and base64 leniently.
- `stermcore.escapes` contains `CSIEscape` and `STREscape`, which parse and
  dump escape sequences.
- `stermcore.options.parse_args` parses clustered single-dash short options.
  It raises `UsageError` when an option that needs a value gets none.
- `stermcore.config.Config` holds the defaults: palette names, default
  colours, tab width, TERM name, shell, word delimiters and the
  identification string.
- `stermcore.glyph` defines `Glyph` and the attribute and mode flags.

## What it does not do

There is no window, font rendering or drawing. There is no event loop and no
command to run. To get an interactive terminal, a program has to supply these
itself and connect a `Terminal` to a `Pty`.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
from stermcore.terminal import Terminal

term = Terminal(cols=80, rows=24)
term.write(b"hello\r\n\x1b[1;31mworld\x1b[0m\x1b[6n")

print(term.screen.cursor.x, term.screen.cursor.y)   # 5 1
line = term.screen.line(0)
print("".join(chr(g.u) for g in line).rstrip())      # hello
print(bytes(term.output))                            # b'\x1b[2;6R'
```