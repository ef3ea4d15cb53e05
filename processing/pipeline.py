"""
Pixel Pipeline

Lazy, stateless transforms over sample sequences. Neither is tied to a
sample width: they work on any iterable of comparable values, including
plain ints and numpy scalars. Each call returns a fresh generator, so a
transform can be re-run by calling it again on a fresh iterable.
"""

from typing import Iterable, Iterator, Tuple, TypeVar

import numpy as np

T = TypeVar("T")


def strip_chroma(samples: Iterable[T]) -> Iterator[T]:
    """
    Drop the chroma samples of an interleaved luma/chroma stream

    Keeps every even-indexed element (YUYV -> YY, 4:2:2 -> 4:0:0).

    >>> list(strip_chroma([10, 1, 20, 2]))
    [10, 20]
    """
    it = iter(samples)
    for value in it:
        yield value
        next(it, None)  # discard


def saturating_subtract(minuend: Iterable[T], subtrahend: Iterable[T]) -> Iterator[T]:
    """
    Pairwise ``m - s`` clamped at the element type's zero

    Stops at the shorter input.

    >>> list(saturating_subtract([3, 9], [5, 4]))
    [0, 5]
    """
    for m, s in zip(minuend, subtrahend):
        yield m - s if m >= s else type(m)()


def luma_plane(frame: bytes, resolution: Tuple[int, int]) -> np.ndarray:
    """
    Luma plane of a YUYV frame as a (height, width) uint8 array

    Vectorized equivalent of ``strip_chroma`` for whole frames.
    """
    width, height = resolution
    expected = width * height * 2
    if len(frame) != expected:
        raise ValueError(f"Frame is {len(frame)} bytes, expected {expected} for {width}x{height} YUYV")
    samples = np.frombuffer(frame, dtype=np.uint8)
    return samples[0::2].reshape(height, width)


def subtract_planes(minuend: np.ndarray, subtrahend: np.ndarray) -> np.ndarray:
    """Vectorized ``saturating_subtract`` for equal-shape image planes"""
    if minuend.shape != subtrahend.shape:
        raise ValueError(f"Shape mismatch: {minuend.shape} vs {subtrahend.shape}")
    out = np.zeros_like(minuend)
    np.subtract(minuend, subtrahend, out=out, where=minuend >= subtrahend)
    return out
