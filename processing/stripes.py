"""
Laser Stripe Extraction

Turns the raw triplets of an indexed scan into laser-only images: the
ambient frame is subtracted from each illuminated frame so that only the
projected stripe remains.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

import cv2
import numpy as np

from core.exceptions import FrameFormatError, FrameWriteError, IoError
from core.types import ImageKind
from processing.image import MemImage
from processing.pipeline import luma_plane, subtract_planes
from storage.image_set import ImageSet, ImageSetEntry

logger = logging.getLogger(__name__)

# (origin, size) in pixels
Region = Tuple[Tuple[int, int], Tuple[int, int]]


@dataclass
class StripePair:
    position: int
    left: np.ndarray
    right: np.ndarray


class StripeExtractor:
    """Derives left/right stripe planes from complete image-set entries"""

    def __init__(self, resolution: Tuple[int, int] = (1280, 1024), region: Optional[Region] = None):
        self.resolution = resolution
        self.region = region

    def load_luma(self, path: Union[str, Path]) -> np.ndarray:
        try:
            frame = Path(path).read_bytes()
        except OSError as e:
            raise IoError(f"Cannot read frame {path}: {e}", module="processing") from e

        try:
            plane = luma_plane(frame, self.resolution)
        except ValueError as e:
            raise FrameFormatError(f"Truncated or oversized frame {path}: {e}", module="processing") from e
        if self.region is None:
            return plane

        origin, size = self.region
        view = MemImage.from_buffer(plane.ravel(), self.resolution).sub_image(origin, size)
        return view.to_array()

    def extract(self, position: int, entry: ImageSetEntry) -> StripePair:
        if not entry.is_complete():
            missing = ", ".join(kind.name for kind in entry.missing())
            raise ValueError(f"Position {position:04x} is incomplete (missing {missing})")

        ambient = self.load_luma(entry.get(ImageKind.NONE))
        left = subtract_planes(self.load_luma(entry.get(ImageKind.LEFT)), ambient)
        right = subtract_planes(self.load_luma(entry.get(ImageKind.RIGHT)), ambient)
        return StripePair(position=position, left=left, right=right)

    def dump(self, image_set: ImageSet, out_dir: Union[str, Path]) -> List[Path]:
        """
        Write stripe<pppp>L.png / stripe<pppp>R.png for every complete position

        Incomplete positions, and positions whose frames are not full
        frames (left behind by an aborted scan), are skipped with a warning.
        """
        out_dir = Path(out_dir)
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FrameWriteError(f"Cannot create stripe directory {out_dir}: {e}", module="processing") from e

        for position, entry in image_set.incomplete_entries():
            missing = ", ".join(kind.name for kind in entry.missing())
            logger.warning(f"⚠️ Skipping incomplete position {position:04x} (missing {missing})")

        written = []
        for position, entry in image_set.complete_entries():
            try:
                pair = self.extract(position, entry)
            except FrameFormatError as e:
                logger.warning(f"⚠️ Skipping position {position:04x}: {e}")
                continue
            for letter, plane in (("L", pair.left), ("R", pair.right)):
                path = out_dir / f"stripe{position:04x}{letter}.png"
                if not cv2.imwrite(str(path), plane):
                    raise FrameWriteError(f"Cannot write stripe image {path}", module="processing")
                written.append(path)
            logger.debug(f"Stripes written for {position:04x}")

        logger.info(f"Dumped {len(written)} stripe images to {out_dir}")
        return written
