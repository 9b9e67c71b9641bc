"""Line-oriented command interpreter for byte streams such as serial ports."""

from serial_cmdline.command_line import PROMPT, CommandLine
from serial_cmdline.dispatcher import MAX_HANDLERS, CommandContext, CommandHandler
from serial_cmdline.editor import EditorState
from serial_cmdline.stream import BufferStream, SerialStream, Stream

__all__ = [
    "CommandLine",
    "CommandContext",
    "CommandHandler",
    "EditorState",
    "MAX_HANDLERS",
    "PROMPT",
    "Stream",
    "BufferStream",
    "SerialStream",
]
