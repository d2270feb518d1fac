"""Face matching against the single registered profile.

Matching compares bounding-box areas only: the match percentage is the
candidate's box area as a share of the stored box area. It ignores position
and rotation, so any object of the same apparent size passes.
"""

import logging
import math
from typing import Optional, Tuple

from .errors import DegenerateProfileError
from .store import ProfileStore
from ..models.types import FaceProfile, MatchDecision

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 80.0


class FaceMatcher:
    """Holds the registered profile and decides whether a candidate matches it."""

    def __init__(self, store: ProfileStore, threshold: float = DEFAULT_THRESHOLD):
        """Load the persisted profile, if any.

        Args:
            store: Profile persistence.
            threshold: Minimum match percentage for acceptance.

        Raises:
            ValueError: If `threshold` is not a positive number.
            StorageError: If the persisted profile cannot be read.
        """
        threshold = float(threshold)
        if not math.isfinite(threshold) or threshold <= 0:
            raise ValueError(f"Match threshold must be a positive percentage, got {threshold}")
        self.store = store
        self.threshold = threshold
        self._profile: Optional[FaceProfile] = store.load()
        if self._profile is not None:
            logger.info("Loaded registered face profile")

    @property
    def stored_profile(self) -> Optional[FaceProfile]:
        return self._profile

    def is_registered(self) -> bool:
        return self._profile is not None

    def register(self, profile: FaceProfile) -> None:
        """Persist `profile`, replacing any registered one.

        Raises:
            ValueError: If a value is non-finite or the size is negative.
            StorageError: If the profile cannot be written.
        """
        profile = FaceProfile(*(float(v) for v in profile))
        self.store.save(profile)
        self._profile = profile

    def reset(self) -> bool:
        """Forget the registered profile. Returns whether one existed."""
        existed = self.store.clear() or self._profile is not None
        self._profile = None
        return existed

    def compare(self, candidate: FaceProfile) -> float:
        """Return the candidate's box area as a percentage of the stored box area.

        Returns 0.0 when no profile is registered.

        Raises:
            DegenerateProfileError: If either box has zero area.
        """
        stored = self._profile
        if stored is None:
            return 0.0

        stored_area = stored.area
        candidate_area = candidate.area
        if stored_area <= 0:
            raise DegenerateProfileError("Registered face box has zero area")
        if candidate_area <= 0:
            raise DegenerateProfileError("Detected face box has zero area")

        return candidate_area / stored_area * 100

    def evaluate(
        self, candidate: FaceProfile, threshold: Optional[float] = None
    ) -> Tuple[float, MatchDecision]:
        """Return the match percentage and the decision drawn from it.

        An unregistered matcher yields (0.0, NO_MATCH) whatever the threshold.

        Raises:
            DegenerateProfileError: If either box has zero area.
        """
        if threshold is None:
            threshold = self.threshold
        if not self.is_registered():
            return 0.0, MatchDecision.NO_MATCH
        percentage = self.compare(candidate)
        decision = MatchDecision.MATCH if percentage >= threshold else MatchDecision.NO_MATCH
        logger.info(f"Match percentage {percentage:.2f}% (threshold {threshold}%): {decision.value}")
        return percentage, decision

    def decide(self, candidate: FaceProfile, threshold: Optional[float] = None) -> MatchDecision:
        """Match iff a profile is registered and compare(candidate) >= threshold.

        Raises:
            DegenerateProfileError: If either box has zero area.
        """
        return self.evaluate(candidate, threshold)[1]
