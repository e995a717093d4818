"""The child process and its pseudo-terminal, or a serial line used directly."""

from __future__ import annotations

import errno
import fcntl
import logging
import os
import pwd
import select
import signal
import struct
import subprocess
import termios
from collections.abc import Sequence
from typing import Optional

from .config import Config

_log = logging.getLogger(__name__)

_BUFSIZ = 8192
_ARG_MAX = 4096
_WRITE_LIMIT = 256


def choose_program(
    args: Optional[Sequence[str]],
    shell: str,
    scroll: Optional[str],
    utmp: Optional[str],
) -> list[str]:
    """Pick the command line of the child.

    Explicit ``args`` win, then the scroll program (wrapping utmp or the
    shell), then utmp, then the shell.
    """
    if args:
        return list(args)
    if scroll:
        return [scroll, utmp if utmp else shell]
    if utmp:
        return [utmp]
    return [shell]


def stty_command(stty_args: str, args: Optional[Sequence[str]]) -> str:
    """Build the stty command line for a serial line, checking its length."""
    room = _ARG_MAX - len(stty_args.encode())
    if room < 1:
        raise ValueError("incorrect stty parameters")
    parts = [stty_args]
    for arg in args or ():
        size = len(arg.encode())
        if size > room - 1:
            raise ValueError("stty parameter length too long")
        parts.append(arg)
        room -= size + 1
    return " ".join(parts)


def crlf_translate(data: bytes) -> bytes:
    """Turn every carriage return into CR LF, as a tty in newline mode does."""
    return bytes(data).replace(b"\r", b"\r\n")


def _take_controlling_tty() -> None:
    fcntl.ioctl(0, termios.TIOCSCTTY, 0)


class Pty:
    """A terminal connection: a pseudo-terminal with a child, or an open line."""

    def __init__(self, config: Optional[Config] = None) -> None:
        self.config = config if config is not None else Config()
        self.fd: Optional[int] = None
        self.process: Optional[subprocess.Popen] = None
        self._pending = bytearray()

    def __enter__(self) -> "Pty":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _require_fd(self) -> int:
        if self.fd is None:
            raise ValueError("terminal is not open")
        return self.fd

    def spawn(self, shell: Optional[str] = None, args: Optional[Sequence[str]] = None) -> int:
        """Start the child on a new pseudo-terminal; return the master fd."""
        if self.fd is not None:
            raise RuntimeError("terminal already open")
        try:
            pw = pwd.getpwuid(os.getuid())
        except KeyError:
            raise OSError("who are you?") from None

        sh = os.environ.get("SHELL")
        if sh is None:
            sh = pw.pw_shell or (shell if shell is not None else self.config.shell)
        argv = choose_program(args, sh, self.config.scroll, self.config.utmp)

        env = dict(os.environ)
        for name in ("COLUMNS", "LINES", "TERMCAP"):
            env.pop(name, None)
        env.update(
            LOGNAME=pw.pw_name,
            USER=pw.pw_name,
            SHELL=sh,
            HOME=pw.pw_dir,
            TERM=self.config.termname,
        )

        master, slave = os.openpty()
        try:
            self.process = subprocess.Popen(
                argv,
                stdin=slave,
                stdout=slave,
                stderr=slave,
                env=env,
                start_new_session=True,
                preexec_fn=_take_controlling_tty,
            )
        except BaseException:
            os.close(master)
            raise
        finally:
            os.close(slave)
        self.fd = master
        return master

    def open_line(self, line: str, stty_extra: Optional[Sequence[str]] = None) -> int:
        """Use an existing tty device such as a serial line; return its fd."""
        if self.fd is not None:
            raise RuntimeError("terminal already open")
        command = stty_command(self.config.stty_args, stty_extra)
        fd = os.open(line, os.O_RDWR)
        result = subprocess.run(command, shell=True, stdin=fd, check=False)
        if result.returncode != 0:
            _log.warning("Couldn't call stty")
        self.fd = fd
        return fd

    def _reap(self) -> None:
        if self.process is None:
            return
        try:
            code = self.process.wait(timeout=1)
        except subprocess.TimeoutExpired:
            return
        if code > 0:
            raise ChildProcessError(f"child exited with status {code}")
        if code < 0:
            raise ChildProcessError(f"child terminated due to signal {-code}")

    def _read_fd(self, fd: int) -> bytes:
        try:
            data = os.read(fd, _BUFSIZ)
        except OSError as exc:
            if exc.errno != errno.EIO:
                raise
            data = b""
        if not data:
            self._reap()
        return data

    def _drain(self) -> int:
        chunk = self._read_fd(self._require_fd())
        self._pending += chunk
        return len(chunk)

    def read(self) -> bytes:
        """Read what the child wrote; b"" at end of input.

        Raises ChildProcessError when the child ended unsuccessfully.
        """
        fd = self._require_fd()
        if self._pending:
            data = bytes(self._pending)
            self._pending.clear()
            return data
        return self._read_fd(fd)

    def write(self, data: bytes) -> None:
        """Send bytes to the child in small pieces, draining its output meanwhile."""
        fd = self._require_fd()
        view = memoryview(bytes(data))
        limit = _WRITE_LIMIT
        while view:
            readable, writable, _ = select.select([fd], [fd], [])
            if writable:
                written = os.write(fd, view[:limit])
                if written < len(view):
                    # The line is filling up: empty it before going on.
                    if len(view) < limit:
                        limit = self._drain()
                    view = view[written:]
                else:
                    break
            if readable:
                limit = self._drain()
            if limit == 0:
                return

    def resize(self, rows: int, cols: int, width: int, height: int) -> None:
        """Tell the terminal its size in cells and pixels."""
        fd = self._require_fd()
        size = struct.pack("HHHH", rows, cols, width, height)
        try:
            fcntl.ioctl(fd, termios.TIOCSWINSZ, size)
        except OSError as exc:
            _log.warning("Couldn't set window size: %s", exc)

    def hangup(self) -> None:
        """Send SIGHUP to the child, if it is still running."""
        if self.process is not None and self.process.poll() is None:
            self.process.send_signal(signal.SIGHUP)

    def close(self) -> None:
        """Close the terminal descriptor."""
        if self.fd is not None:
            os.close(self.fd)
            self.fd = None
        self._pending.clear()