"""Still image capture.

A capture surface produces one file-addressable still per call, either from an
uploaded base64 image or from a frame grabbed off a local camera.
"""

import logging
from pathlib import Path
from typing import Union

import cv2

from .errors import CaptureError
from ..utils.image import ImageProcessingError, decode_base64_image, write_still

logger = logging.getLogger(__name__)


class CaptureSurface:
    """Produces a still image on demand."""

    def capture(self) -> Path:
        """Return the path of a freshly captured still.

        Raises:
            CaptureError: If no image could be produced.
        """
        raise NotImplementedError


class Base64ImageCapture(CaptureSurface):
    """Still taken from an uploaded base64 image."""

    def __init__(self, payload: str, capture_dir: Union[str, Path]):
        self.payload = payload
        self.capture_dir = Path(capture_dir)

    def capture(self) -> Path:
        try:
            image = decode_base64_image(self.payload)
            return write_still(image, self.capture_dir, prefix="upload")
        except ImageProcessingError as e:
            raise CaptureError(str(e)) from e
        except OSError as e:
            raise CaptureError(f"Failed to store uploaded image: {e}") from e


class CameraCapture(CaptureSurface):
    """Still grabbed from a local camera through OpenCV."""

    def __init__(self, camera_index: int, capture_dir: Union[str, Path], warmup_frames: int = 3):
        self.camera_index = int(camera_index)
        self.capture_dir = Path(capture_dir)
        self.warmup_frames = max(0, int(warmup_frames))

    def capture(self) -> Path:
        cap = cv2.VideoCapture(self.camera_index)
        try:
            if not cap.isOpened():
                raise CaptureError(f"Failed to open camera {self.camera_index}")

            # Let exposure settle before keeping a frame.
            for _ in range(self.warmup_frames):
                cap.read()

            ok, frame = cap.read()
            if not ok or frame is None:
                raise CaptureError(f"Failed to read a frame from camera {self.camera_index}")
        finally:
            cap.release()

        try:
            path = write_still(frame, self.capture_dir, prefix="camera")
        except (ImageProcessingError, OSError) as e:
            raise CaptureError(str(e)) from e
        logger.info(f"Captured still from camera {self.camera_index}: {path}")
        return path
