"""Core face detection and matching functionality"""
from .capture import Base64ImageCapture, CameraCapture, CaptureSurface
from .errors import (
    FaceGateError,
    CaptureError,
    StorageError,
    DegenerateProfileError,
    SessionBusyError,
)
from .extractor import extract
from .face_detection import FaceDetector
from .matcher import FaceMatcher, DEFAULT_THRESHOLD
from .session import FaceSession, build_session
from .store import KeyValueStore, ProfileStore

__all__ = [
    'Base64ImageCapture',
    'CameraCapture',
    'CaptureSurface',
    'FaceGateError',
    'CaptureError',
    'StorageError',
    'DegenerateProfileError',
    'SessionBusyError',
    'extract',
    'FaceDetector',
    'FaceMatcher',
    'DEFAULT_THRESHOLD',
    'FaceSession',
    'build_session',
    'KeyValueStore',
    'ProfileStore',
]
