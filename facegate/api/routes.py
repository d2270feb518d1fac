"""Face gate API routes.

This module provides the endpoints behind the two user actions, "Register"
and "Detect", plus session status, the home view reached on a successful
match and clearing of the registered profile.
"""

import logging
import traceback
from fastapi import APIRouter, Depends, HTTPException, status
from typing import Dict, Optional
from ..config import get_settings
from ..core.capture import Base64ImageCapture, CameraCapture, CaptureSurface
from ..core.errors import SessionBusyError, StorageError
from ..core.session import FaceSession, build_session
from ..models.types import (
    DetectRequest,
    ErrorResponse,
    HomeResponse,
    PipelineResponse,
    PipelineResult,
    PipelineStatus,
    RegisterRequest,
    StatusResponse,
)

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter()

_session: Optional[FaceSession] = None


def get_session() -> FaceSession:
    """Return the process-wide session, building it on first use.

    Raises:
        HTTPException: 500 with an error payload if the stored profile cannot
            be read.
    """
    global _session
    if _session is None:
        try:
            _session = build_session(get_settings())
        except StorageError as e:
            raise _storage_failure(e)
    return _session


def _capture_surface(image: Optional[str]) -> CaptureSurface:
    settings = get_settings()
    if image:
        return Base64ImageCapture(image, settings.capture_dir)
    return CameraCapture(
        settings.camera_index,
        settings.capture_dir,
        warmup_frames=settings.camera_warmup_frames,
    )


def _to_response(result: PipelineResult, session: FaceSession) -> Dict:
    face = None
    if result.profile is not None:
        face = dict(result.profile._asdict())
    percentage = None
    if result.match_percentage is not None:
        percentage = round(float(result.match_percentage), 2)
    return {
        'status': result.status.value,
        'notice': result.notice,
        'registered': session.matcher.is_registered(),
        'matchPercentage': percentage,
        'face': face,
        'navigate': 'home' if result.status is PipelineStatus.MATCH else None,
    }


def _storage_failure(e: StorageError) -> HTTPException:
    error_details: ErrorResponse = {
        'error': str(e),
        'traceback': traceback.format_exc()
    }
    logger.error(f"Storage failure: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=error_details
    )


@router.get("/status", response_model=StatusResponse)
async def get_status(session: FaceSession = Depends(get_session)) -> Dict:
    """Report whether a face is registered and which actions are enabled."""
    registered = session.matcher.is_registered()
    return {
        'registered': registered,
        'registerEnabled': not registered,
        'detectEnabled': True,
        'state': session.state.value,
        'threshold': session.matcher.threshold,
    }


@router.post("/register", response_model=PipelineResponse)
async def register_face(
    request_data: RegisterRequest,
    session: FaceSession = Depends(get_session),
) -> Dict:
    """Capture a face and store it as the registered profile.

    Args:
        request_data: Optional base64 image (the local camera is used when
            absent) and a `replace` flag allowing an existing profile to be
            overwritten.

    Returns:
        Pipeline outcome with the stored face box on success.

    Raises:
        HTTPException: 409 if a face is already registered and `replace` is
            not set, or if a capture is in progress; 500 on storage failure.
    """
    if session.matcher.is_registered() and not request_data.get('replace', False):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A face is already registered"
        )

    try:
        logger.info("Registering face...")
        result = await session.register(_capture_surface(request_data.get('image')))
    except SessionBusyError as e:
        logger.warning(f"Rejected register request: {str(e)}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except StorageError as e:
        raise _storage_failure(e)

    logger.info(f"Register outcome: {result.status.value}")
    return _to_response(result, session)


@router.post("/detect", response_model=PipelineResponse)
async def detect_face(
    request_data: DetectRequest,
    session: FaceSession = Depends(get_session),
) -> Dict:
    """Capture a face and check it against the registered profile.

    Args:
        request_data: Optional base64 image; the local camera is used when
            absent.

    Returns:
        Pipeline outcome. A match carries `navigate: "home"`.

    Raises:
        HTTPException: 409 if a capture is in progress, 422 if either face
            box is degenerate.
    """
    try:
        logger.info("Detecting face...")
        result = await session.recognize(_capture_surface(request_data.get('image')))
    except SessionBusyError as e:
        logger.warning(f"Rejected detect request: {str(e)}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    logger.info(f"Detect outcome: {result.status.value}")
    if result.status is PipelineStatus.DEGENERATE_PROFILE:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=result.notice
        )
    return _to_response(result, session)


@router.get("/home", response_model=HomeResponse)
async def home() -> Dict:
    return {'title': 'Home', 'message': 'Welcome home!'}


@router.delete("/profile", status_code=status.HTTP_204_NO_CONTENT)
async def delete_profile(session: FaceSession = Depends(get_session)) -> None:
    """Clear the registered profile so a new face can be registered."""
    if session.busy:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A capture is already in progress"
        )
    try:
        if session.matcher.reset():
            logger.info("Registered face profile cleared")
    except StorageError as e:
        raise _storage_failure(e)
