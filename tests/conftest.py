from typing import List, Optional

import pytest

from serial_cmdline.command_line import CommandLine
from serial_cmdline.runtime_config import RuntimeConfig
from serial_cmdline.stream import BufferStream, Stream


class RecordingHandler:
    """Handler that records each call and optionally returns a response."""

    def __init__(self, response: Optional[str] = None):
        self.response = response
        self.calls: List[List[str]] = []

    def __call__(self, cmd: CommandLine, stream: Stream) -> Optional[str]:
        words = []
        i = 0
        while cmd.get_word(i):
            words.append(cmd.get_word(i))
            i += 1
        self.calls.append(words)
        return self.response

    @property
    def called(self) -> bool:
        return bool(self.calls)


class MockConsole:
    """Mock console for testing."""

    def __init__(self, command_line: CommandLine, config: RuntimeConfig):
        self.command_line = command_line
        self.config = config
        self.run_called = False

    async def run(self) -> None:
        self.run_called = True


@pytest.fixture
def stream() -> BufferStream:
    return BufferStream()


@pytest.fixture
def command_line(stream: BufferStream) -> CommandLine:
    return CommandLine(stream, echo=False)
