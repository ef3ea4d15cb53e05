"""
Pixel preprocessing: chroma stripping, saturating subtraction and
laser-stripe extraction from scan triplets.
"""

from processing.image import MemImage
from processing.pipeline import luma_plane, saturating_subtract, strip_chroma, subtract_planes
from processing.stripes import StripeExtractor, StripePair

__all__ = [
    'MemImage',
    'luma_plane',
    'saturating_subtract',
    'strip_chroma',
    'subtract_planes',
    'StripeExtractor',
    'StripePair',
]
