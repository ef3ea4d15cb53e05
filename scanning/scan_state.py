"""
Scan State Management

Tracks the sequencer's state machine (IDLE -> SWEEPING -> DONE, or
FAILED on abort), progress through the revolution and run timing.
There is no pause or cancel: a run completes or aborts on first error.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from core.exceptions import ScanExecutionError

logger = logging.getLogger(__name__)


class ScanStatus(Enum):
    """Scan execution status"""
    IDLE = "idle"
    SWEEPING = "sweeping"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ScanProgress:
    """Current scan progress information"""
    total_positions: int = 0
    positions_visited: int = 0
    frames_written: int = 0
    current_position: Optional[int] = None
    written_paths: List[str] = field(default_factory=list)

    @property
    def completion_percentage(self) -> float:
        if self.total_positions == 0:
            return 0.0
        return 100.0 * self.positions_visited / self.total_positions


@dataclass
class ScanTiming:
    """Scan timing information"""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    def start(self):
        self.start_time = datetime.now()

    def complete(self):
        self.end_time = datetime.now()

    @property
    def elapsed_time(self) -> float:
        """Total elapsed time in seconds"""
        if self.start_time is None:
            return 0.0
        end = self.end_time or datetime.now()
        return (end - self.start_time).total_seconds()


class ScanState:
    """State of one scanning run"""

    def __init__(self):
        self.status = ScanStatus.IDLE
        self.progress = ScanProgress()
        self.timing = ScanTiming()
        self.error: Optional[BaseException] = None

    def start(self, total_positions: int):
        if self.status != ScanStatus.IDLE:
            raise ScanExecutionError(f"Cannot start scan from status {self.status.value}",
                                     module="scanning")
        self.status = ScanStatus.SWEEPING
        self.progress.total_positions = total_positions
        self.timing.start()
        logger.info(f"Scan started: {total_positions} positions")

    def record_frame(self, position: int, path: str):
        self.progress.current_position = position
        self.progress.frames_written += 1
        self.progress.written_paths.append(path)

    def record_position(self, position: int):
        self.progress.current_position = position
        self.progress.positions_visited += 1

    def complete(self):
        self._require_sweeping()
        self.status = ScanStatus.DONE
        self.timing.complete()
        logger.info(f"Scan completed: {self.progress.frames_written} frames "
                    f"in {self.timing.elapsed_time:.1f}s")

    def fail(self, error: BaseException):
        self._require_sweeping()
        self.status = ScanStatus.FAILED
        self.error = error
        self.timing.complete()
        logger.error(f"Scan aborted at position {self.progress.current_position}: {error}")

    def _require_sweeping(self):
        if self.status != ScanStatus.SWEEPING:
            raise ScanExecutionError(f"Scan is not running (status {self.status.value})",
                                     module="scanning")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'total_positions': self.progress.total_positions,
            'positions_visited': self.progress.positions_visited,
            'frames_written': self.progress.frames_written,
            'current_position': self.progress.current_position,
            'completion_percentage': self.progress.completion_percentage,
            'elapsed_time': self.timing.elapsed_time,
            'error': str(self.error) if self.error else None,
        }
