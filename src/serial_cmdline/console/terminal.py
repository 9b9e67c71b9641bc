"""
The local TTY as a command stream.

Puts stdin into raw mode so every keystroke (including Enter as '\\r') reaches
the command line unchanged, and polls it with select() so reads never block.
"""

import os
import select
import sys
import termios
import tty
from typing import Any, List, Optional, TextIO

from serial_cmdline.stream import Stream

CTRL_C = 0x03
DELETE = 0x7F
BACKSPACE = 0x08


class TerminalStream(Stream):
    """Raw-mode terminal adapter.

    Most terminals send DEL for the backspace key; it is passed on as a
    backspace. Ctrl-C arrives as a byte in raw mode and is raised as
    KeyboardInterrupt.
    """

    def __init__(
        self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None
    ) -> None:
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._old_settings: Optional[List[Any]] = None
        self._pending: List[int] = []

    def __enter__(self) -> "TerminalStream":
        if self._stdin.isatty():
            self._old_settings = termios.tcgetattr(self._stdin)
            fd = self._stdin.fileno()
            tty.setraw(fd)
            # Keep output processing so "\n" still returns the carriage
            attrs = termios.tcgetattr(fd)
            attrs[1] |= termios.OPOST
            termios.tcsetattr(fd, termios.TCSANOW, attrs)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._old_settings is not None:
            termios.tcsetattr(self._stdin, termios.TCSADRAIN, self._old_settings)
            self._old_settings = None

    def _poll(self) -> None:
        if self._pending:
            return
        ready, _, _ = select.select([self._stdin], [], [], 0)
        if not ready:
            return
        data = os.read(self._stdin.fileno(), 1024)
        for byte in data:
            if byte == CTRL_C:
                raise KeyboardInterrupt
            self._pending.append(BACKSPACE if byte == DELETE else byte)

    def available(self) -> int:
        self._poll()
        return len(self._pending)

    def read(self) -> int:
        self._poll()
        if not self._pending:
            return -1
        return self._pending.pop(0)

    def write(self, data: bytes) -> int:
        self._stdout.buffer.write(data)
        self._stdout.flush()
        return len(data)
