"""
Byte streams the command line reads from and writes to.

The command line only needs three things from a stream: how many bytes are
waiting, the next byte, and a way to write bytes back. Everything else
(buffering, flow control, port settings) belongs to the concrete adapter.
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Deque, List, Optional

import serial
from serial.tools import list_ports

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"


class Stream(ABC):
    """Raw byte I/O capability used by the command line."""

    encoding: str = DEFAULT_ENCODING

    @abstractmethod
    def available(self) -> int:
        """Return the number of bytes that can be read without blocking."""
        pass

    @abstractmethod
    def read(self) -> int:
        """Return the next byte, or -1 if nothing is waiting."""
        pass

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Write raw bytes; return the number of bytes written."""
        pass

    def print(self, text: str) -> int:
        """Encode text with the stream encoding and write it."""
        return self.write(text.encode(self.encoding, errors="replace"))

    def close(self) -> None:
        pass

    def __enter__(self) -> "Stream":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


class BufferStream(Stream):
    """In-memory loopback stream.

    Input is queued with feed(); everything written is kept until drained.
    """

    def __init__(self, data: bytes = b"", encoding: str = DEFAULT_ENCODING) -> None:
        self.encoding = encoding
        self._input: Deque[int] = deque(data)
        self._output = bytearray()

    def feed(self, data: bytes) -> None:
        """Queue bytes to be read."""
        self._input.extend(data)

    def available(self) -> int:
        return len(self._input)

    def read(self) -> int:
        if not self._input:
            return -1
        return self._input.popleft()

    def write(self, data: bytes) -> int:
        self._output.extend(data)
        return len(data)

    def getvalue(self) -> bytes:
        """Return everything written so far."""
        return bytes(self._output)

    def drain(self) -> bytes:
        """Return everything written so far and forget it."""
        data = bytes(self._output)
        self._output.clear()
        return data


class SerialStream(Stream):
    """Stream backed by a pyserial port."""

    def __init__(self, port: Any, encoding: str = DEFAULT_ENCODING) -> None:
        self.port = port
        self.encoding = encoding

    @classmethod
    def open(
        cls,
        device: str,
        baudrate: int = 9600,
        encoding: str = DEFAULT_ENCODING,
    ) -> "SerialStream":
        """Open a serial device for non-blocking reads.

        Raises:
            serial.SerialException: if the device cannot be opened.
        """
        port = serial.Serial(port=device, baudrate=baudrate, timeout=0)
        port.reset_input_buffer()
        logger.info(f"Opened serial port {device} at {baudrate} baud")
        return cls(port, encoding=encoding)

    def available(self) -> int:
        return int(self.port.in_waiting)

    def read(self) -> int:
        data = self.port.read(1)
        if not data:
            return -1
        return data[0]

    def write(self, data: bytes) -> int:
        written: Optional[int] = self.port.write(data)
        self.port.flush()
        return written if written is not None else len(data)

    def close(self) -> None:
        if self.port.is_open:
            self.port.close()
            logger.info(f"Closed serial port {self.port.port}")


def list_serial_ports() -> List[str]:
    """Return the device names of the serial ports on this machine."""
    return sorted(info.device for info in list_ports.comports())
