"""Data models and type definitions"""
from .types import (
    BoundingBox,
    FaceProfile,
    NoFace,
    Detected,
    DetectionOutcome,
    MatchDecision,
    SessionState,
    PipelineStatus,
    PipelineResult,
    Box,
    RegisterRequest,
    DetectRequest,
    PipelineResponse,
    StatusResponse,
    HomeResponse,
    ErrorResponse,
)

__all__ = [
    'BoundingBox',
    'FaceProfile',
    'NoFace',
    'Detected',
    'DetectionOutcome',
    'MatchDecision',
    'SessionState',
    'PipelineStatus',
    'PipelineResult',
    'Box',
    'RegisterRequest',
    'DetectRequest',
    'PipelineResponse',
    'StatusResponse',
    'HomeResponse',
    'ErrorResponse',
]
