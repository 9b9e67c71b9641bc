"""
Runtime configuration for serial-cmdline.

This module provides:
- load_envs(): load SERIAL_CMDLINE_PORT, SERIAL_CMDLINE_BAUDRATE and SERIAL_CMDLINE_LOG_LEVEL
  from a .env file if they are not already present in the environment.
- RuntimeConfig: a dataclass holding runtime settings (mode, port, baud rate, echo, polling).
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values, find_dotenv

from serial_cmdline.dispatcher import MAX_HANDLERS

# Environment variable names
PORT_ENV: str = "SERIAL_CMDLINE_PORT"
BAUDRATE_ENV: str = "SERIAL_CMDLINE_BAUDRATE"
LOG_LEVEL_ENV: str = "SERIAL_CMDLINE_LOG_LEVEL"

DEFAULT_BAUDRATE: int = 9600
DEFAULT_POLL_INTERVAL: float = 0.01


def load_envs(env_file: Optional[str] = None) -> None:
    """
    Load SERIAL_CMDLINE_PORT, SERIAL_CMDLINE_BAUDRATE and SERIAL_CMDLINE_LOG_LEVEL from a
    .env file into the process environment if they are not already set.

    Without env_file, a .env found from the working directory is read on top of
    <config dir>/.env.
    """
    if env_file:
        env_values = dotenv_values(env_file)
    else:
        env_values = {
            **dotenv_values(get_config_dir() / ".env"),
            **dotenv_values(find_dotenv(usecwd=True)),
        }
    for key in (PORT_ENV, BAUDRATE_ENV, LOG_LEVEL_ENV):
        if not os.environ.get(key):
            val = env_values.get(key)
            if val:
                os.environ[key] = str(val)


class ModeChoice(str, Enum):
    """Where the command line reads its input from."""

    serial = "serial"
    terminal = "terminal"
    repl = "repl"


@dataclass(frozen=True)
class RuntimeConfig:
    """
    Holds runtime configuration for serial-cmdline.

    Attributes:
        mode: Which stream/console pair to run.
        port: Serial device path (serial mode only).
        baudrate: Serial baud rate.
        echo: Whether typed characters are echoed back on the stream.
        poll_interval: Seconds between run() calls in the polling loop.
        command: A single command line to run headless, then exit.
        max_handlers: Capacity of the command table.
    """

    mode: ModeChoice = ModeChoice.serial
    port: Optional[str] = None
    baudrate: int = DEFAULT_BAUDRATE
    echo: bool = True
    poll_interval: float = DEFAULT_POLL_INTERVAL
    command: Optional[str] = None
    max_handlers: int = MAX_HANDLERS


def get_config_dir() -> Path:
    """
    Return the serial-cmdline config directory under XDG_CONFIG_HOME or fallback to ~/.config.
    """
    config_home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return config_home / "serial_cmdline"


def get_data_dir() -> Path:
    """
    Return the serial-cmdline data directory under XDG_DATA_HOME or fallback to ~/.local/share.
    """
    data_home = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return data_home / "serial_cmdline"
