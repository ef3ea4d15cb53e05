"""
Device Session for the Laser Turntable Scanner

Owns the turntable position, the laser state and the camera path for
one scanning run. All motion is relative on the wire; the session keeps
the absolute position and only updates it once the device has
acknowledged the move.

Author: Scanner System Development
Created: October 2026
"""

import logging
import time
from typing import Any, Dict, Optional

from camera.capture import CaptureFunction, capture_frame
from communication.protocol import LineProtocol, encode_laser, encode_motion
from communication.transport import SerialTransport, Transport
from core.config_manager import ConfigManager, DeviceTimings
from core.exceptions import DeviceIdentityError, ProtocolError
from core.types import Frame, MAX_POSITION, Side

logger = logging.getLogger(__name__)


class DeviceSession:
    """
    Stateful connection to one scanner

    Use ``DeviceSession.connect`` (or ``open``) rather than the constructor:
    they run the handshake, which also guarantees both lasers start off.
    """

    def __init__(self,
                 protocol: LineProtocol,
                 camera_path: str,
                 capture: CaptureFunction = capture_frame,
                 timings: Optional[DeviceTimings] = None):
        self.protocol = protocol
        self.camera_path = camera_path
        self.capture = capture
        self.timings = timings or DeviceTimings()

        self.turntable_position = 0
        self.laser_state: Dict[Side, bool] = {Side.LEFT: False, Side.RIGHT: False}

    @classmethod
    def connect(cls,
                transport: Transport,
                camera_path: str,
                capture: CaptureFunction = capture_frame,
                timings: Optional[DeviceTimings] = None) -> 'DeviceSession':
        """
        Handshake with the device on an open transport

        Raises:
            DeviceIdentityError: The device answered the first command, but not as expected
            TransportError: The link itself failed
        """
        timings = timings or DeviceTimings()
        session = cls(LineProtocol(transport, poll_ms=timings.poll_ms), camera_path, capture, timings)
        session.handshake()
        return session

    @classmethod
    def open(cls,
             port_name: str,
             camera_path: str,
             config: Optional[ConfigManager] = None,
             capture: CaptureFunction = capture_frame) -> 'DeviceSession':
        """Open the serial port by name and handshake"""
        config = config or ConfigManager.defaults()
        timings = config.get_device_config()
        transport = SerialTransport.open(port_name, timings.baudrate)
        try:
            return cls.connect(transport, camera_path, capture, timings)
        except Exception:
            transport.close()
            raise

    def handshake(self):
        """Identify the device by switching both lasers off"""
        try:
            self.protocol.flush_input()
            self.set_laser(Side.LEFT, False)
        except ProtocolError as e:
            logger.error(f"❌ Handshake rejected: {e}")
            raise DeviceIdentityError() from e
        self.set_laser(Side.RIGHT, False)
        logger.info(f"✅ Scanner connected (camera {self.camera_path})")

    def set_laser(self, side: Side, on: bool):
        """Switch one laser fully on or off"""
        command = encode_laser(self.timings.wiring[side], on)
        self.protocol.send_and_await(command, self.timings.laser_timeout_ms)
        self.laser_state[side] = on
        logger.debug(f"🔦 {side.value} laser {'on' if on else 'off'}")

    def all_lasers_off(self):
        for side in Side:
            self.set_laser(side, False)

    def move_to(self, position: int) -> int:
        """
        Rotate the turntable to an absolute position

        Returns:
            The new position

        Raises:
            ValueError: Position outside the 16-bit range
            ProtocolError: Move rejected or not confirmed in time; position unchanged
        """
        if not 0 <= position <= MAX_POSITION:
            raise ValueError(f"Turntable position {position:#x} outside 0..{MAX_POSITION:#x}")

        offset = position - self.turntable_position
        if offset == 0:
            return position

        logger.debug(f"🔄 Moving {self.turntable_position:#06x} -> {position:#06x} ({offset:+x})")
        self.protocol.send_and_await(encode_motion(offset), self.timings.motion_timeout_ms(offset))
        self.turntable_position = position
        return position

    def capture_frame(self) -> Frame:
        return self.capture(self.camera_path)

    def capture_triplet_at(self, position: int, side: Optional[Side]) -> Frame:
        """
        Capture one frame at a position, optionally with a laser on

        The laser is switched off only after the frame is taken, and is
        switched off even if the capture fails.
        """
        self.move_to(position)
        if side is not None:
            self.set_laser(side, True)

        try:
            time.sleep(self.timings.settle_ms / 1000.0)
            frame = self.capture_frame()
        except Exception:
            if side is not None:
                self._laser_off_after_failure(side)
            raise

        if side is not None:
            self.set_laser(side, False)
        return frame

    def _laser_off_after_failure(self, side: Side):
        try:
            self.set_laser(side, False)
        except Exception as e:
            logger.error(f"❌ Could not switch {side.value} laser off after failed capture: {e}")

    def get_state(self) -> Dict[str, Any]:
        return {
            'turntable_position': self.turntable_position,
            'camera_path': self.camera_path,
            'lasers': {side.value: on for side, on in self.laser_state.items()},
        }

    def close(self):
        """Switch the lasers off (best-effort) and release the transport"""
        try:
            if any(self.laser_state.values()):
                self.all_lasers_off()
        except Exception as e:
            logger.warning(f"⚠️ Lasers may still be on: {e}")
        finally:
            self.protocol.close()
            logger.info("🔌 Scanner session closed")

    def __enter__(self) -> 'DeviceSession':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
