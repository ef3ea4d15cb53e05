"""
Serial Transport Adapter

Wraps a bidirectional byte stream with a mutable read timeout. The
protocol layer relies on three outcomes of a read only: data, an empty
result on timeout, or TransportClosedError when the device is gone.

Author: Scanner System Development
Created: October 2026
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import serial

from core.exceptions import TransportError, TransportClosedError

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Abstract byte-stream transport with a settable read timeout"""

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Write some of ``data``; returns the number of bytes accepted"""
        pass

    @abstractmethod
    def read_available(self) -> bytes:
        """
        Read whatever is available within the current timeout

        Returns:
            The bytes read, or b"" if the timeout expired

        Raises:
            TransportClosedError: If the stream has been closed
            TransportError: On any other I/O failure
        """
        pass

    @abstractmethod
    def set_timeout(self, seconds: float) -> None:
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    def __enter__(self) -> 'Transport':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class SerialTransport(Transport):
    """Transport over a pyserial port"""

    def __init__(self, port: serial.Serial):
        self.port = port

    @classmethod
    def open(cls, port_name: str, baudrate: int = 115200) -> 'SerialTransport':
        """Open a serial device by name"""
        logger.info(f"🔌 Opening serial port {port_name} at {baudrate} baud")
        try:
            port = serial.Serial(
                port=port_name,
                baudrate=baudrate,
                timeout=0,
                write_timeout=1.0,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE
            )
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Cannot open serial port {port_name}: {e}") from e
        return cls(port)

    @property
    def name(self) -> Optional[str]:
        return getattr(self.port, 'port', None)

    def write(self, data: bytes) -> int:
        self._require_open()
        try:
            written = self.port.write(data)
        except serial.SerialTimeoutException as e:
            raise TransportError(f"Serial write timed out: {e}", error_code="WRITE_TIMEOUT") from e
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Serial write failed: {e}") from e
        return written if written is not None else len(data)

    def read_available(self) -> bytes:
        self._require_open()
        try:
            return self.port.read(max(1, self.port.in_waiting))
        except serial.SerialException as e:
            # pyserial reports a vanished device as "readiness to read but no data"
            raise TransportClosedError(f"Serial port closed: {e}") from e
        except OSError as e:
            raise TransportError(f"Serial read failed: {e}") from e

    def set_timeout(self, seconds: float) -> None:
        self._require_open()
        try:
            self.port.timeout = seconds
        except (serial.SerialException, ValueError) as e:
            raise TransportError(f"Cannot set serial timeout: {e}") from e

    def close(self) -> None:
        if self.port is not None and self.port.is_open:
            logger.info(f"🔌 Closing serial port {self.name}")
            self.port.close()

    def _require_open(self):
        if self.port is None or not self.port.is_open:
            raise TransportClosedError("Serial port is not open")
