"""
Console subpackage: polling loop, headless runner, local REPL, rendering and key bindings.
"""

from serial_cmdline.console.console import (
    ConsoleInterface,
    HeadlessConsole,
    PollingConsole,
    ReplConsole,
)

__all__ = ["ConsoleInterface", "HeadlessConsole", "PollingConsole", "ReplConsole"]
