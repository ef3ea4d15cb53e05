"""
Image-Set Indexer

Rebuilds, from a directory of raw frame files, which files belong to
which turntable position and which kind of shot each one is. A scan
that aborted part-way leaves incomplete positions behind, so consumers
should only process entries reported as complete.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from core.exceptions import ImageSetError
from core.types import ImageKind
from storage.naming import FramePattern, default_pattern

logger = logging.getLogger(__name__)


@dataclass
class ImageSetEntry:
    """Paths of the frames captured at one turntable position"""
    left: Optional[str] = None
    right: Optional[str] = None
    none: Optional[str] = None
    raw: Optional[str] = None

    _FIELDS = {
        ImageKind.LEFT: 'left',
        ImageKind.RIGHT: 'right',
        ImageKind.NONE: 'none',
        ImageKind.RAW: 'raw',
    }

    def get(self, kind: ImageKind) -> Optional[str]:
        return getattr(self, self._FIELDS[kind])

    def set(self, kind: ImageKind, path: str):
        setattr(self, self._FIELDS[kind], path)

    def is_complete(self) -> bool:
        """Left, right and ambient present; raw is never required"""
        return self.left is not None and self.right is not None and self.none is not None

    def missing(self) -> List[ImageKind]:
        return [kind for kind in (ImageKind.NONE, ImageKind.LEFT, ImageKind.RIGHT)
                if self.get(kind) is None]


class ImageSet:
    """Mapping of turntable position -> ImageSetEntry"""

    def __init__(self, entries: Optional[Dict[int, ImageSetEntry]] = None):
        self.entries: Dict[int, ImageSetEntry] = entries if entries is not None else {}

    @classmethod
    def build(cls, directory: Union[str, Path], pattern: Optional[FramePattern] = None) -> 'ImageSet':
        """
        Index every frame file in a directory

        Unrecognized filenames are logged and skipped. If two files map to the
        same (position, kind), the one listed later wins.

        Raises:
            ImageSetError: If the directory cannot be listed
        """
        pattern = pattern or default_pattern()
        directory = Path(directory)

        try:
            names = os.listdir(directory)
        except OSError as e:
            raise ImageSetError(f"Cannot read scan directory {directory}: {e}", module="storage") from e

        image_set = cls()
        for name in names:
            parsed = pattern.parse(name)
            if parsed is None:
                logger.info(f"Ignoring path {name}")
                continue
            position, kind = parsed
            image_set.add(position, kind, str(directory / name))

        logger.info(f"📁 Indexed {directory}: {image_set.summary()}")
        return image_set

    def add(self, position: int, kind: ImageKind, path: str):
        self.entries.setdefault(position, ImageSetEntry()).set(kind, path)

    def __getitem__(self, position: int) -> ImageSetEntry:
        return self.entries[position]

    def __contains__(self, position: int) -> bool:
        return position in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self.entries))

    def items(self) -> Iterator[Tuple[int, ImageSetEntry]]:
        for position in sorted(self.entries):
            yield position, self.entries[position]

    def complete_entries(self) -> List[Tuple[int, ImageSetEntry]]:
        return [(p, e) for p, e in self.items() if e.is_complete()]

    def incomplete_entries(self) -> List[Tuple[int, ImageSetEntry]]:
        return [(p, e) for p, e in self.items() if not e.is_complete()]

    def summary(self) -> Dict[str, int]:
        complete = len(self.complete_entries())
        return {
            'positions': len(self.entries),
            'complete': complete,
            'incomplete': len(self.entries) - complete,
        }
