"""
Scan Frame File Naming

Raw frames are stored flat, one file per shot:
``<root><4 lowercase hex digits of position><kind letter>.yuv``,
e.g. ``scan-data/scan0040L.yuv``.
"""

import functools
import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

from core.types import ImageKind

FRAME_EXTENSION = "yuv"


def format_frame_name(file_root: str, position: int, kind: ImageKind,
                      extension: str = FRAME_EXTENSION) -> str:
    return f"{file_root}{position:04x}{kind.letter}.{extension}"


@dataclass(frozen=True)
class FramePattern:
    """Compiled matcher for frame filenames (matched at the end of the name)"""
    extension: str = FRAME_EXTENSION

    @functools.cached_property
    def regex(self) -> Pattern[str]:
        letters = "".join(kind.letter for kind in ImageKind)
        return re.compile(rf"([0-9a-f]{{4}})([{letters}])\.{re.escape(self.extension)}$")

    def parse(self, name: str) -> Optional[Tuple[int, ImageKind]]:
        match = self.regex.search(name)
        if match is None:
            return None
        return int(match.group(1), 16), ImageKind(match.group(2))


@functools.lru_cache(maxsize=None)
def default_pattern() -> FramePattern:
    return FramePattern()


def parse_frame_name(name: str, pattern: Optional[FramePattern] = None) -> Optional[Tuple[int, ImageKind]]:
    """
    Parse a frame filename into (position, kind)

    >>> parse_frame_name("scan190aL.yuv")
    (6410, <ImageKind.LEFT: 'L'>)
    >>> parse_frame_name("readme.txt") is None
    True
    """
    return (pattern or default_pattern()).parse(name)
