"""
Shared fixtures: a scripted in-memory transport standing in for the
scanner's serial port, and a stub camera.
"""

from collections import deque
from typing import List, Optional

import pytest

from communication.transport import Transport
from core.exceptions import CameraCaptureError, TransportClosedError

# Script entry meaning "the device vanished"
EOF = object()


class FakeTransport(Transport):
    """
    Scripted transport

    Each complete command line written pops the next entry of ``script``:
    bytes (the reply), a list of byte chunks (a reply split across reads),
    None (no reply at all) or EOF.
    """

    def __init__(self, script: Optional[list] = None, stale: bytes = b"", max_write: Optional[int] = None):
        self.script = deque(script or [])
        self.incoming = deque([stale] if stale else [])
        self.max_write = max_write
        self.pending = bytearray()
        self.lines: List[bytes] = []
        self.write_calls = 0
        self.timeouts: List[float] = []
        self.closed = False

    def write(self, data: bytes) -> int:
        self.write_calls += 1
        accepted = data if self.max_write is None else data[:self.max_write]
        self.pending += accepted
        while b"\n" in self.pending:
            line, _, rest = bytes(self.pending).partition(b"\n")
            self.pending = bytearray(rest)
            self.lines.append(line + b"\n")
            self._queue_reply()
        return len(accepted)

    def _queue_reply(self):
        if not self.script:
            return
        reply = self.script.popleft()
        if reply is None:
            return
        if isinstance(reply, list):
            self.incoming.extend(reply)
        else:
            self.incoming.append(reply)

    def read_available(self) -> bytes:
        if self.closed:
            raise TransportClosedError("closed")
        if not self.incoming:
            return b""
        chunk = self.incoming.popleft()
        if chunk is EOF:
            raise TransportClosedError("Serial port closed")
        return chunk

    def set_timeout(self, seconds: float) -> None:
        self.timeouts.append(seconds)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_transport():
    return FakeTransport


class StubCamera:
    """Capture function returning a distinct frame per call"""

    def __init__(self, fail_on: Optional[int] = None):
        self.calls: List[str] = []
        self.fail_on = fail_on

    def __call__(self, camera_path: str) -> bytes:
        self.calls.append(camera_path)
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            raise CameraCaptureError("No frame received")
        return f"frame{len(self.calls)}".encode()


@pytest.fixture
def camera():
    return StubCamera()


@pytest.fixture
def no_sleep(monkeypatch):
    """Skip the settle delay"""
    delays = []
    monkeypatch.setattr("device.session.time.sleep", delays.append)
    return delays
