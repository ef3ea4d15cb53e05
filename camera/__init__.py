"""
Camera capture for the scanner (single raw frames over V4L2).
"""

from camera.capture import capture_frame, make_capture, CaptureFunction, DEFAULT_CAMERA_CONFIG

__all__ = ['capture_frame', 'make_capture', 'CaptureFunction', 'DEFAULT_CAMERA_CONFIG']
