"""
Scan Sequencer

Sweeps one turntable revolution. At every angular position it captures
an ambient frame, a left-laser frame and a right-laser frame, in that
order, and writes each one to its own file.

A failure anywhere aborts the run. Files already written stay on disk,
so a directory from an aborted run may hold incomplete positions.
"""

import logging
from pathlib import Path
from typing import Iterator, List, Optional

from core.exceptions import FrameWriteError
from core.types import Frame, ImageKind, REVOLUTION, Side
from device.session import DeviceSession
from scanning.scan_state import ScanState
from storage.naming import format_frame_name

logger = logging.getLogger(__name__)

# Capture order at each position
TRIPLET: tuple = (None, Side.LEFT, Side.RIGHT)


def positions(increment: int, revolution: int = REVOLUTION) -> Iterator[int]:
    """
    Positions visited by a run, starting at home

    The last one may fall short of a full revolution when the increment
    does not divide it evenly.
    """
    if increment <= 0:
        raise ValueError(f"Angular increment must be positive, got {increment}")
    return iter(range(0, revolution, increment))


class ScanSequencer:
    """Drives a DeviceSession through one full revolution"""

    def __init__(self, session: DeviceSession, state: Optional[ScanState] = None):
        self.session = session
        self.state = state or ScanState()

    def run(self, file_root: str, angular_increment: int) -> List[str]:
        """
        Capture the full revolution

        Args:
            file_root: Path prefix for frame files, e.g. 'scan-data/scan'
            angular_increment: Device units between positions

        Returns:
            Paths of every frame written, in capture order

        Raises:
            ValueError: Non-positive increment
            ScanExecutionError: The sequencer already ran
            ProtocolError, TransportError, CameraCaptureError, FrameWriteError:
                whatever aborted the run
        """
        stops = list(positions(angular_increment))
        self.state.start(len(stops))

        try:
            for position in stops:
                logger.info(f"Scan at {position:04x} ({self.state.progress.completion_percentage:.0f}%)")
                for side in TRIPLET:
                    frame = self.session.capture_triplet_at(position, side)
                    path = format_frame_name(file_root, position, ImageKind.for_side(side))
                    self._write_frame(path, frame)
                    self.state.record_frame(position, path)
                self.state.record_position(position)
        except Exception as e:
            self.state.fail(e)
            raise

        self.state.complete()
        return list(self.state.progress.written_paths)

    def _write_frame(self, path: str, frame: Frame):
        try:
            Path(path).write_bytes(frame)
        except OSError as e:
            raise FrameWriteError(f"Cannot write frame {path}: {e}", module="storage") from e
        logger.debug(f"💾 Wrote {path} ({len(frame)} bytes)")
