"""
Core Data Types for Scanner System

Defines common value types shared by the device session, the scan
sequencer and the image-set tooling.
"""

from enum import Enum

# Device units per full turntable rotation
REVOLUTION = 0x1900

# Turntable positions are unsigned 16-bit values
MAX_POSITION = 0xFFFF

# One captured image in YUYV 4:2:2; immutable once captured
Frame = bytes


class Side(Enum):
    """
    Laser mount, relative to the camera's point of view (not the user's).
    """
    LEFT = "left"
    RIGHT = "right"


class ImageKind(Enum):
    """Classification of a captured frame; the value is its file letter"""
    NONE = "N"   # both lasers off, filter on (ambient)
    LEFT = "L"   # left laser on, filter on
    RIGHT = "R"  # right laser on, filter on
    RAW = "W"    # both lasers off, filter off

    @classmethod
    def for_side(cls, side: "Side | None") -> "ImageKind":
        """Kind of frame captured with the given laser active (None = ambient)"""
        if side is None:
            return cls.NONE
        return cls.LEFT if side is Side.LEFT else cls.RIGHT

    @property
    def letter(self) -> str:
        return self.value
