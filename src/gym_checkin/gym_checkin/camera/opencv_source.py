"""OpenCV-backed frame source.

Usage:
    source = OpenCVFrameSource(CameraConfig(device_id=0))
    handle = source.open()
    try:
        frame = source.next_frame(handle)
    finally:
        source.close(handle)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import cv2

from ..core.constants import DEFAULT_CAMERA_HEIGHT, DEFAULT_CAMERA_WIDTH
from ..core.exceptions import CameraPermissionDeniedError, CameraReadError, NoCameraDeviceError
from .source import ImageBuffer, StreamHandle

logger = logging.getLogger(__name__)

_PERMISSION_MARKERS = ("permission", "not authorized", "authorization", "access denied")


@dataclass
class CameraConfig:
    """Cấu hình camera."""

    device_id: int = 0
    width: int = DEFAULT_CAMERA_WIDTH
    height: int = DEFAULT_CAMERA_HEIGHT
    buffer_size: int = 1
    warmup_frames: int = 2
    max_failed_reads: int = 5


class OpenCVFrameSource:
    """Frame source over ``cv2.VideoCapture``.

    A single attempt is made to open the device: camera errors are terminal for
    a scan session, so there is no retry loop here.
    """

    def __init__(self, config: Optional[CameraConfig] = None):
        self.config = config or CameraConfig()

    def open(self) -> StreamHandle:
        try:
            cap = cv2.VideoCapture(self.config.device_id)
        except cv2.error as e:
            message = str(e).lower()
            if any(marker in message for marker in _PERMISSION_MARKERS):
                raise CameraPermissionDeniedError("Camera access was denied") from e
            raise NoCameraDeviceError(f"Camera {self.config.device_id} is not available") from e

        if not cap.isOpened():
            cap.release()
            raise NoCameraDeviceError(f"Camera {self.config.device_id} is not available")

        try:
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)
            cap.set(cv2.CAP_PROP_BUFFERSIZE, self.config.buffer_size)

            # First frames from many webcams are dark or empty.
            for _ in range(self.config.warmup_frames):
                cap.read()
        except cv2.error as e:
            cap.release()
            raise NoCameraDeviceError(f"Camera {self.config.device_id} failed to start: {e}") from e

        width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)) or self.config.width
        height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)) or self.config.height
        logger.info("Camera %s opened: %dx%d", self.config.device_id, width, height)
        return StreamHandle(width=width, height=height, resource=cap)

    def next_frame(self, handle: StreamHandle) -> Optional[ImageBuffer]:
        if handle.closed or handle.resource is None:
            return None
        ok, frame = handle.resource.read()
        if not ok or frame is None:
            handle.failed_reads += 1
            if handle.failed_reads >= self.config.max_failed_reads:
                raise CameraReadError(f"Camera {self.config.device_id} stopped delivering frames")
            return None
        handle.failed_reads = 0
        return frame

    def close(self, handle: StreamHandle) -> None:
        if handle.closed:
            return
        handle.closed = True
        if handle.resource is not None:
            handle.resource.release()
            handle.resource = None
        logger.info("Camera stream %s released", handle.handle_id)
