"""Capture session.

A FaceSession runs one capture -> detect -> extract -> register/decide pipeline
at a time. Its state moves Idle -> Capturing -> Processing -> Idle; a request
arriving while the state is not Idle is rejected with SessionBusyError.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from fastapi.concurrency import run_in_threadpool

from .capture import CaptureSurface
from .errors import CaptureError, DegenerateProfileError, SessionBusyError
from .extractor import extract
from .face_detection import FaceDetector
from .matcher import FaceMatcher
from .store import KeyValueStore, ProfileStore
from ..config import Settings
from ..models.types import (
    FaceProfile,
    MatchDecision,
    NoFace,
    PipelineResult,
    PipelineStatus,
    SessionState,
)

logger = logging.getLogger(__name__)


class FaceSession:
    """Owns the in-flight flag and drives the recognition pipeline."""

    def __init__(self, detector: FaceDetector, matcher: FaceMatcher, keep_captures: bool = False):
        self.detector = detector
        self.matcher = matcher
        self.keep_captures = keep_captures
        self._state = SessionState.IDLE

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state is not SessionState.IDLE

    async def register(self, capture: CaptureSurface) -> PipelineResult:
        """Capture a face and store it as the registered profile.

        Raises:
            SessionBusyError: If another capture is in flight.
            StorageError: If the profile cannot be persisted.
        """
        return await self._run(capture, self._register_profile)

    async def recognize(self, capture: CaptureSurface) -> PipelineResult:
        """Capture a face and decide whether it matches the registered profile.

        Raises:
            SessionBusyError: If another capture is in flight.
        """
        return await self._run(capture, self._recognize_profile)

    def _register_profile(self, profile: FaceProfile) -> PipelineResult:
        self.matcher.register(profile)
        return PipelineResult(
            status=PipelineStatus.REGISTERED,
            notice="Face registered.",
            profile=profile,
        )

    def _recognize_profile(self, profile: FaceProfile) -> PipelineResult:
        if not self.matcher.is_registered():
            logger.info("No registered face found")
            return PipelineResult(
                status=PipelineStatus.NOT_REGISTERED,
                notice="No registered face found.",
                match_percentage=0.0,
                profile=profile,
            )

        try:
            percentage, decision = self.matcher.evaluate(profile)
        except DegenerateProfileError as e:
            logger.warning(f"Comparison failed: {e}")
            return PipelineResult(
                status=PipelineStatus.DEGENERATE_PROFILE,
                notice=str(e),
                profile=profile,
            )

        if decision is MatchDecision.MATCH:
            return PipelineResult(
                status=PipelineStatus.MATCH,
                notice="Face recognized.",
                match_percentage=percentage,
                profile=profile,
            )
        return PipelineResult(
            status=PipelineStatus.NO_MATCH,
            notice="Face not recognized.",
            match_percentage=percentage,
            profile=profile,
        )

    async def _run(
        self,
        capture: CaptureSurface,
        handle: Callable[[FaceProfile], PipelineResult],
    ) -> PipelineResult:
        if self.busy:
            raise SessionBusyError(f"A capture is already in progress ({self._state.value})")

        self._state = SessionState.CAPTURING
        still: Optional[Path] = None
        try:
            try:
                still = await run_in_threadpool(capture.capture)
            except CaptureError as e:
                logger.warning(f"Capture failed: {e}")
                return PipelineResult(status=PipelineStatus.CAPTURE_FAILED, notice=f"Capture failed: {e}")

            self._state = SessionState.PROCESSING
            outcome = await self.detector.detect_async(still)
            if isinstance(outcome, NoFace):
                return PipelineResult(status=PipelineStatus.NO_FACE, notice=outcome.reason)

            return handle(extract(outcome))
        finally:
            if still is not None and not self.keep_captures:
                still.unlink(missing_ok=True)
            self._state = SessionState.IDLE


def build_session(settings: Settings) -> FaceSession:
    """Wire the default detector, profile store and matcher.

    Raises:
        StorageError: If a persisted profile exists but cannot be read.
    """
    detector = FaceDetector(model=settings.detection_model, upsample=settings.upsample_times)
    store = ProfileStore(KeyValueStore(settings.store_path))
    matcher = FaceMatcher(store, threshold=settings.match_threshold)
    return FaceSession(detector, matcher)
