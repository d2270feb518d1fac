"""Reduction of a face detection to its stored geometry."""

from ..models.types import Detected, FaceProfile


def extract(detection: Detected) -> FaceProfile:
    """Return [left, top, width, height] of the detected face box.

    Raises:
        TypeError: If `detection` is not a `Detected` outcome.
    """
    if not isinstance(detection, Detected):
        raise TypeError(f"Cannot extract a profile from {type(detection).__name__}")
    box = detection.box
    return FaceProfile(float(box.left), float(box.top), float(box.width), float(box.height))
