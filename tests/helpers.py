"""Test doubles for the capture and detection collaborators."""
from pathlib import Path

from facegate.core.capture import CaptureSurface
from facegate.core.errors import CaptureError


def location(left, top, width, height):
    """Build a face_recognition (top, right, bottom, left) location."""
    return (top, left + width, top + height, left)


class ScriptedLocator:
    """Returns queued face locations, one list per call."""

    def __init__(self):
        self.queue = []
        self.calls = 0

    def push(self, *locations):
        self.queue.append(list(locations))

    def __call__(self, image):
        self.calls += 1
        if not self.queue:
            return []
        return self.queue.pop(0)


class StillCapture(CaptureSurface):
    """Writes a tiny placeholder still into a directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.taken = []

    def capture(self) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / f"still_{len(self.taken)}.jpg"
        path.write_bytes(b"still")
        self.taken.append(path)
        return path


class FailingCapture(CaptureSurface):
    def capture(self) -> Path:
        raise CaptureError("camera unavailable")
