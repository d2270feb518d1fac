"""Data models and type definitions"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Union
from typing_extensions import NotRequired, TypedDict


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned face rectangle in image pixel coordinates."""

    left: float
    top: float
    width: float
    height: float

    def __post_init__(self):
        for name in ('left', 'top', 'width', 'height'):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"Bounding box {name} must be finite, got {value}")
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Bounding box size must be non-negative, got {self.width}x{self.height}"
            )


class FaceProfile(NamedTuple):
    """Reference geometry of a registered face, ordered [left, top, width, height]."""

    left: float
    top: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True)
class NoFace:
    reason: str = "No face detected"


@dataclass(frozen=True)
class Detected:
    box: BoundingBox
    face_count: int = 1


DetectionOutcome = Union[NoFace, Detected]


class MatchDecision(str, Enum):
    MATCH = "match"
    NO_MATCH = "no_match"


class SessionState(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    PROCESSING = "processing"


class PipelineStatus(str, Enum):
    REGISTERED = "registered"
    MATCH = "match"
    NO_MATCH = "no_match"
    NOT_REGISTERED = "not_registered"
    NO_FACE = "no_face"
    DEGENERATE_PROFILE = "degenerate_profile"
    CAPTURE_FAILED = "capture_failed"


@dataclass(frozen=True)
class PipelineResult:
    status: PipelineStatus
    notice: str
    match_percentage: Optional[float] = None
    profile: Optional[FaceProfile] = None


# Wire types

class Box(TypedDict):
    left: float
    top: float
    width: float
    height: float

class RegisterRequest(TypedDict):
    image: NotRequired[str]
    replace: NotRequired[bool]

class DetectRequest(TypedDict):
    image: NotRequired[str]

class PipelineResponse(TypedDict):
    status: str
    notice: str
    registered: bool
    matchPercentage: Optional[float]
    face: Optional[Box]
    navigate: Optional[str]

class StatusResponse(TypedDict):
    registered: bool
    registerEnabled: bool
    detectEnabled: bool
    state: str
    threshold: float

class HomeResponse(TypedDict):
    title: str
    message: str

class ErrorResponse(TypedDict):
    error: str
    traceback: Optional[str]
