"""
Single-Frame V4L2 Capture

Each call opens the capture device, configures it for raw YUYV at the
fixed scan resolution, grabs exactly one frame and releases the device.
The returned Frame is the untouched 4:2:2 interleaved buffer.

Author: Scanner System Development
Created: October 2026
"""

import logging
from typing import Callable, Optional

import cv2

from core.config_manager import CameraConfig
from core.exceptions import CameraCaptureError
from core.types import Frame

logger = logging.getLogger(__name__)

DEFAULT_CAMERA_CONFIG = CameraConfig(
    device='/dev/video1',
    resolution=(1280, 1024),
    fourcc='YUYV',
    frame_interval=(2, 15),  # 7.5 fps
)

# capture(camera_path) -> Frame
CaptureFunction = Callable[[str], Frame]


def capture_frame(camera_path: str, config: Optional[CameraConfig] = None) -> Frame:
    """
    Capture one raw frame from a V4L2 device

    Args:
        camera_path: Device node, e.g. '/dev/video1'
        config: Resolution/format settings (defaults to 1280x1024 YUYV @ 7.5 fps)

    Returns:
        Raw YUYV bytes, width * height * 2 long

    Raises:
        CameraCaptureError: If the device cannot be opened or read
    """
    config = config or DEFAULT_CAMERA_CONFIG
    width, height = config.resolution

    camera = cv2.VideoCapture(camera_path, cv2.CAP_V4L2)
    try:
        if not camera.isOpened():
            raise CameraCaptureError(f"Cannot open camera {camera_path}", error_code="OPEN")

        camera.set(cv2.CAP_PROP_FOURCC, cv2.VideoWriter_fourcc(*config.fourcc))
        camera.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        camera.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        camera.set(cv2.CAP_PROP_FPS, config.fps)
        camera.set(cv2.CAP_PROP_BUFFERSIZE, 1)
        # Hand back the sensor buffer as-is instead of BGR
        camera.set(cv2.CAP_PROP_CONVERT_RGB, 0)

        ok, image = camera.read()
        if not ok or image is None:
            raise CameraCaptureError(f"No frame received from {camera_path}", error_code="READ")

        frame = image.tobytes()
        if len(frame) != config.frame_size:
            raise CameraCaptureError(
                f"Unexpected frame size from {camera_path}: "
                f"{len(frame)} bytes, expected {config.frame_size}",
                error_code="FORMAT"
            )

        logger.debug(f"📸 Captured {len(frame)} bytes from {camera_path}")
        return frame
    finally:
        camera.release()


def make_capture(config: CameraConfig) -> CaptureFunction:
    """Bind a camera configuration into a capture(camera_path) callable"""
    def capture(camera_path: str) -> Frame:
        return capture_frame(camera_path, config)
    return capture
