"""
2D views over flat sample buffers.
"""

from dataclasses import dataclass
from typing import Any, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class MemImage:
    """
    A width x height window onto a flat, row-major buffer

    Sub-images share the parent's buffer; nothing is copied until
    ``to_array`` is called.
    """
    data: Sequence[Any]
    size: Tuple[int, int]
    stride: int
    origin: Tuple[int, int] = (0, 0)
    offset: int = 0

    @classmethod
    def from_buffer(cls, data: Sequence[Any], size: Tuple[int, int]) -> 'MemImage':
        width, height = size
        if len(data) < width * height:
            raise ValueError(f"Buffer of {len(data)} samples too small for {width}x{height}")
        return cls(data=data, size=size, stride=width)

    def __getitem__(self, location: Tuple[int, int]) -> Any:
        x, y = location
        width, height = self.size
        if not (0 <= x < width and 0 <= y < height):
            raise IndexError(f"Pixel ({x}, {y}) outside {width}x{height} image")
        return self.data[self.offset + y * self.stride + x]

    def sub_image(self, origin: Tuple[int, int], size: Tuple[int, int]) -> 'MemImage':
        """View of a rectangle; ``origin`` is relative to this image"""
        ox, oy = origin
        width, height = size
        if ox < 0 or oy < 0 or ox + width > self.size[0] or oy + height > self.size[1]:
            raise ValueError(f"Region {origin}+{size} outside {self.size[0]}x{self.size[1]} image")
        return MemImage(
            data=self.data,
            size=size,
            stride=self.stride,
            origin=(self.origin[0] + ox, self.origin[1] + oy),
            offset=self.offset + oy * self.stride + ox,
        )

    def to_array(self) -> np.ndarray:
        data = self.data
        if isinstance(data, (bytes, bytearray, memoryview)):
            data = np.frombuffer(data, dtype=np.uint8)
        else:
            data = np.asarray(data)

        width, height = self.size
        rows = [data[self.offset + y * self.stride:self.offset + y * self.stride + width]
                for y in range(height)]
        if not rows:
            return np.empty((0, width), dtype=data.dtype)
        return np.stack(rows)
