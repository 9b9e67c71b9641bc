"""
Line buffer and editor.

Turns raw bytes into command lines with terminal-like editing: echo,
backspace, tab-to-space and recall of the previous line. The editor never
stores the terminator; a carriage return turns the buffer into the accepted
line and reports it to the caller.
"""

from enum import Enum
from typing import List, Optional

from serial_cmdline.stream import Stream

BACKSPACE = 0x08
TAB = 0x09
LINE_FEED = 0x0A
CARRIAGE_RETURN = 0x0D
RECALL = 0x04  # ctrl-D

# One character per input byte
INPUT_ENCODING = "latin-1"

PROMPT = "> "

ERASE_SEQUENCE = b"\b \b"
NEWLINE = b"\n"

# Characters stripped by Arduino String.trim()
WHITESPACE = " \t\n\r\v\f"


class EditorState(str, Enum):
    """Whether the editor is waiting for the first byte of a new line."""

    awaiting_line = "awaiting_line"
    accumulating = "accumulating"


def split_words(line: str) -> List[str]:
    """Split a line into words: maximal runs of non-space characters."""
    return [word for word in line.split(" ") if word]


class LineEditor:
    """Accumulates bytes into a line and applies the editing rules."""

    def __init__(self, stream: Stream, echo: bool = True, prompt: str = PROMPT) -> None:
        self.stream = stream
        self.echo = echo
        self.prompt = prompt
        self.state = EditorState.awaiting_line
        self._buffer: List[str] = []
        self._last_line = ""

    @property
    def buffer(self) -> str:
        """Input typed so far on the current line."""
        return "".join(self._buffer)

    @property
    def last_line(self) -> str:
        """The most recently accepted line, trimmed."""
        return self._last_line

    def begin_line(self) -> None:
        """Entry action: (re)prompt and start a fresh buffer if a line just ended."""
        if self.state is not EditorState.awaiting_line:
            return
        if self.echo:
            self.stream.print(self.prompt)
        self._buffer.clear()
        self.state = EditorState.accumulating

    def feed(self, byte: int) -> Optional[str]:
        """Apply one input byte.

        Returns:
            The accepted (trimmed) line when byte is the terminator, else None.
        """
        if byte == BACKSPACE:
            if self._buffer:
                self._buffer.pop()
                self._emit(ERASE_SEQUENCE)
        elif byte == CARRIAGE_RETURN:
            self._emit(NEWLINE)
            self.state = EditorState.awaiting_line
            self._last_line = self.buffer.strip(WHITESPACE)
            self._buffer.clear()
            return self._last_line
        elif byte == LINE_FEED:
            pass
        elif byte == TAB:
            self._buffer.append(" ")
            self._emit(b" ")
        elif byte == RECALL:
            if not self._buffer and self._last_line:
                self._buffer.extend(self._last_line)
                self._emit(self._last_line.encode(INPUT_ENCODING))
        else:
            self._buffer.append(chr(byte))
            self._emit(bytes([byte]))
        return None

    def cancel(self) -> None:
        """Drop the partial line; the next begin_line() prompts again."""
        self._buffer.clear()
        self.state = EditorState.awaiting_line

    def get_word(self, index: int = 0) -> str:
        """Return word number index of the accepted line, or "" if absent."""
        words = split_words(self._last_line)
        if 0 <= index < len(words):
            return words[index]
        return ""

    def get_command_line(self) -> str:
        return self._last_line

    def _emit(self, data: bytes) -> None:
        if self.echo:
            self.stream.write(data)
