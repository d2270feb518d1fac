"""
Shared pytest fixtures for facegate tests.

Detection runs through FaceDetector with an injected loader and locator so the
tests need neither a camera nor the dlib models.
"""
import base64

import cv2
import numpy as np
import pytest

from facegate.core.face_detection import FaceDetector
from facegate.core.matcher import FaceMatcher
from facegate.core.session import FaceSession
from facegate.core.store import KeyValueStore, ProfileStore

from helpers import ScriptedLocator, StillCapture


@pytest.fixture
def kv(tmp_path):
    return KeyValueStore(tmp_path / "prefs" / "preferences.json")


@pytest.fixture
def profile_store(kv):
    return ProfileStore(kv)


@pytest.fixture
def matcher(profile_store):
    return FaceMatcher(profile_store, threshold=80.0)


@pytest.fixture
def locator():
    return ScriptedLocator()


@pytest.fixture
def detector(locator):
    return FaceDetector(
        loader=lambda path: np.zeros((8, 8, 3), dtype=np.uint8),
        locator=locator,
    )


@pytest.fixture
def session(detector, matcher):
    return FaceSession(detector, matcher)


@pytest.fixture
def still_capture(tmp_path):
    return StillCapture(tmp_path / "stills")


@pytest.fixture
def image_b64():
    ok, buf = cv2.imencode(".jpg", np.full((16, 16, 3), 127, dtype=np.uint8))
    assert ok
    return base64.b64encode(buf.tobytes()).decode("ascii")
