"""
Line-Based Command/Response Protocol

The scanner firmware has no framing beyond newlines and no length
prefix: each command is one ASCII line and is answered by exactly one
line, either ``OK`` or an error message. This module owns that exchange.

Design Principles:
- One command at a time (blocking)
- Stale input drained before every command
- Bounded polling for the acknowledgment line
- No retries: every failure goes back to the caller

Author: Scanner System Development
Created: October 2026
"""

import logging
import threading
from typing import Any, Dict

from core.exceptions import ProtocolError, ProtocolTimeoutError, TransportError
from communication.transport import Transport

logger = logging.getLogger(__name__)

SUCCESS_TOKEN = b"OK\n"

# A device still talking after this much stale input is not idle
MAX_FLUSH_BYTES = 4096

LASER_ON = "ff"
LASER_OFF = "00"


def encode_motion(offset: int) -> bytes:
    """Relative turntable move as a sign-prefixed hex line, e.g. ``+40\\n``"""
    return f"{offset:+x}\n".encode("ascii")


def encode_laser(tag: str, on: bool) -> bytes:
    """Laser command: wiring tag followed by the intensity byte, e.g. ``rff\\n``"""
    return f"{tag}{LASER_ON if on else LASER_OFF}\n".encode("ascii")


class LineProtocol:
    """
    Command/acknowledgment exchange over a Transport

    Key Features:
    - Synchronous command execution (one at a time)
    - Partial writes retried until the whole line is sent
    - Timeout counted in fixed polling slices
    - Device error lines surfaced verbatim as ProtocolError
    """

    def __init__(self, transport: Transport, poll_ms: int = 1):
        if poll_ms < 1:
            raise ValueError("poll_ms must be at least 1")

        self.transport = transport
        self.poll_ms = poll_ms
        self.command_lock = threading.RLock()

        self.stats: Dict[str, Any] = {
            'commands_sent': 0,
            'acks_received': 0,
            'errors': 0,
            'timeouts': 0,
        }

    def flush_input(self) -> int:
        """
        Discard any bytes already buffered on the stream

        Returns:
            Number of bytes discarded

        Raises:
            ProtocolError: The device kept sending past MAX_FLUSH_BYTES
        """
        self.transport.set_timeout(0)
        discarded = 0
        while True:
            chunk = self.transport.read_available()
            if not chunk:
                break
            discarded += len(chunk)
            if discarded > MAX_FLUSH_BYTES:
                raise ProtocolError(f"Device kept sending after {discarded} stale bytes",
                                    response=chunk, error_code="FLUSH_OVERRUN")
        if discarded:
            logger.debug(f"🧹 Discarded {discarded} stale bytes")
        return discarded

    def send_and_await(self, command: bytes, timeout_ms: int) -> None:
        """
        Send one command line and wait for its acknowledgment

        Args:
            command: Newline-terminated command line
            timeout_ms: Maximum wait for the response line

        Raises:
            ProtocolError: Device replied with anything other than OK
            ProtocolTimeoutError: No complete line within timeout_ms
            TransportError: The link failed (TransportClosedError if the device vanished)
        """
        if not command.endswith(b"\n"):
            raise ValueError(f"Command must be newline-terminated: {command!r}")

        with self.command_lock:
            self.flush_input()

            logger.debug(f"📤 Sending: {command.rstrip()!r}")
            self._write_all(command)
            self.stats['commands_sent'] += 1

            self._await_ok(timeout_ms)

    def _write_all(self, data: bytes):
        view = memoryview(data)
        while view:
            written = self.transport.write(bytes(view))
            if written <= 0:
                raise TransportError(f"Write stalled with {len(view)} bytes unsent",
                                     error_code="WRITE_STALLED")
            view = view[written:]

    def _await_ok(self, timeout_ms: int):
        self.transport.set_timeout(self.poll_ms / 1000.0)

        buffer = bytearray()
        waited = 0
        while waited + self.poll_ms <= timeout_ms:
            buffer += self.transport.read_available()

            if buffer.endswith(b"\n"):
                if buffer == SUCCESS_TOKEN:
                    self.stats['acks_received'] += 1
                    logger.debug("📥 OK")
                    return

                response = bytes(buffer[:-1])
                self.stats['errors'] += 1
                message = response.decode("ascii", errors="replace")
                logger.warning(f"❌ Device error: {message}")
                raise ProtocolError(message, response=response)

            waited += self.poll_ms

        self.stats['timeouts'] += 1
        logger.warning(f"⏰ No response within {timeout_ms} ms (partial: {bytes(buffer)!r})")
        raise ProtocolTimeoutError(timeout_ms, response=bytes(buffer))

    def get_statistics(self) -> Dict[str, Any]:
        """Get protocol statistics"""
        stats = self.stats.copy()
        stats['success_rate'] = stats['acks_received'] / max(1, stats['commands_sent'])
        return stats

    def close(self):
        self.transport.close()
