"""
Scanning Module

Sequencing of a full-revolution triplet scan and its run state.
"""

from scanning.scan_state import ScanProgress, ScanState, ScanStatus, ScanTiming
from scanning.sequencer import ScanSequencer, positions

__all__ = [
    'ScanProgress',
    'ScanState',
    'ScanStatus',
    'ScanTiming',
    'ScanSequencer',
    'positions',
]
