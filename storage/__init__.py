"""
Scan file storage: frame naming and the post-scan image-set index.
"""

from storage.image_set import ImageSet, ImageSetEntry
from storage.naming import FramePattern, default_pattern, format_frame_name, parse_frame_name

__all__ = [
    'ImageSet',
    'ImageSetEntry',
    'FramePattern',
    'default_pattern',
    'format_frame_name',
    'parse_frame_name',
]
