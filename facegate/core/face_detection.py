"""Face detection module.

This module wraps the face_recognition (dlib) detector and reduces its output
to a tagged DetectionOutcome: either NoFace or Detected with the bounding box
of the first face found.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np
from fastapi.concurrency import run_in_threadpool

from ..models.types import BoundingBox, Detected, DetectionOutcome, NoFace

logger = logging.getLogger(__name__)

# face_recognition reports boxes as (top, right, bottom, left)
Location = Tuple[int, int, int, int]
ImageLoader = Callable[[str], np.ndarray]
FaceLocator = Callable[[np.ndarray], Sequence[Location]]


def location_to_box(location: Location) -> BoundingBox:
    """Convert a (top, right, bottom, left) location to a BoundingBox."""
    top, right, bottom, left = location
    return BoundingBox(
        left=float(left),
        top=float(top),
        width=float(max(0, right - left)),
        height=float(max(0, bottom - top)),
    )


class FaceDetector:
    """Locates faces in still images."""

    SUPPORTED_MODELS = ("hog", "cnn")

    def __init__(
        self,
        model: str = "hog",
        upsample: int = 1,
        loader: Optional[ImageLoader] = None,
        locator: Optional[FaceLocator] = None,
    ):
        """Initialize the detector.

        Args:
            model: face_recognition detection model, "hog" or "cnn".
            upsample: How many times to upsample the image looking for faces.
            loader: Reads an image path into an RGB array. Defaults to
                face_recognition.load_image_file.
            locator: Finds face locations in an RGB array. Defaults to
                face_recognition.face_locations with `model` and `upsample`.
        """
        if model not in self.SUPPORTED_MODELS:
            raise ValueError(f"Unsupported detection model '{model}'")
        self.model = model
        self.upsample = int(upsample)
        self._loader = loader or self._load_image_file
        self._locator = locator or self._face_locations

    def _load_image_file(self, path: str) -> np.ndarray:
        import face_recognition

        return face_recognition.load_image_file(path)

    def _face_locations(self, image: np.ndarray) -> List[Location]:
        import face_recognition

        return face_recognition.face_locations(
            image, number_of_times_to_upsample=self.upsample, model=self.model
        )

    def detect(self, image_path: Union[str, Path]) -> DetectionOutcome:
        """Detect the face in a still image.

        Args:
            image_path: Path of the captured still.

        Returns:
            NoFace when no face could be located, including an unreadable image
            or a detector error. Otherwise Detected with the first face's box
            and the number of faces found.
        """
        try:
            image = self._loader(str(image_path))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read image {image_path}: {e}")
            return NoFace(reason="Captured image could not be read")

        try:
            locations = list(self._locator(image))
        except Exception as e:
            logger.warning(f"Face detector failed on {image_path}: {e}", exc_info=True)
            return NoFace(reason="Face detection failed")

        if not locations:
            logger.info("No face detected")
            return NoFace()

        if len(locations) > 1:
            logger.info(f"Found {len(locations)} faces, using the first one")

        box = location_to_box(locations[0])
        logger.info(f"Face box: left={box.left}, top={box.top}, {box.width}x{box.height}")
        return Detected(box=box, face_count=len(locations))

    async def detect_async(self, image_path: Union[str, Path]) -> DetectionOutcome:
        """Run detect() in the worker thread pool."""
        return await run_in_threadpool(self.detect, image_path)
