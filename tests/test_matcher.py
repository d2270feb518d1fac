import math

import pytest

from facegate.core.errors import DegenerateProfileError
from facegate.core.matcher import FaceMatcher
from facegate.core.store import KeyValueStore, ProfileStore
from facegate.models.types import FaceProfile, MatchDecision

STORED = FaceProfile(10.0, 10.0, 100.0, 100.0)


def test_same_size_elsewhere_is_full_match(matcher):
    matcher.register(STORED)

    candidate = FaceProfile(50.0, 50.0, 100.0, 100.0)
    assert matcher.compare(candidate) == 100.0
    assert matcher.decide(candidate, 80.0) is MatchDecision.MATCH


def test_smaller_face_is_no_match(matcher):
    matcher.register(STORED)

    candidate = FaceProfile(10.0, 10.0, 70.0, 70.0)
    assert matcher.compare(candidate) == pytest.approx(49.0)
    assert matcher.decide(candidate, 80.0) is MatchDecision.NO_MATCH


def test_unregistered_compares_to_zero(matcher):
    assert not matcher.is_registered()
    assert matcher.compare(FaceProfile(1.0, 2.0, 30.0, 40.0)) == 0.0
    assert matcher.decide(FaceProfile(1.0, 2.0, 30.0, 40.0)) is MatchDecision.NO_MATCH


def test_unregistered_zero_area_candidate_is_zero(matcher):
    assert matcher.compare(FaceProfile(0.0, 0.0, 0.0, 0.0)) == 0.0


@pytest.mark.parametrize("k", [0.5, 1.5, 3.0])
def test_compare_scales_with_square_of_factor(matcher, k):
    matcher.register(STORED)
    candidate = FaceProfile(5.0, 7.0, 60.0, 90.0)
    scaled = FaceProfile(candidate.left, candidate.top, candidate.width * k, candidate.height * k)

    assert matcher.compare(scaled) == pytest.approx(k ** 2 * matcher.compare(candidate))


def test_compare_ignores_position(matcher):
    matcher.register(STORED)
    base = matcher.compare(FaceProfile(0.0, 0.0, 80.0, 90.0))

    assert matcher.compare(FaceProfile(300.0, -20.0, 80.0, 90.0)) == pytest.approx(base)

    matcher.register(FaceProfile(500.0, 400.0, 100.0, 100.0))
    assert matcher.compare(FaceProfile(0.0, 0.0, 80.0, 90.0)) == pytest.approx(base)


def test_degenerate_stored_profile_raises(matcher):
    matcher.register(FaceProfile(10.0, 10.0, 0.0, 100.0))

    with pytest.raises(DegenerateProfileError):
        matcher.compare(FaceProfile(0.0, 0.0, 50.0, 50.0))
    with pytest.raises(DegenerateProfileError):
        matcher.decide(FaceProfile(0.0, 0.0, 50.0, 50.0))


def test_degenerate_candidate_raises(matcher):
    matcher.register(STORED)

    with pytest.raises(DegenerateProfileError):
        matcher.compare(FaceProfile(0.0, 0.0, 50.0, 0.0))


def test_threshold_is_inclusive(matcher):
    matcher.register(STORED)
    candidate = FaceProfile(0.0, 0.0, 80.0, 100.0)

    assert matcher.compare(candidate) == pytest.approx(80.0)
    assert matcher.decide(candidate) is MatchDecision.MATCH
    assert matcher.decide(candidate, 80.5) is MatchDecision.NO_MATCH


def test_register_twice_keeps_profile(matcher, profile_store):
    matcher.register(STORED)
    matcher.register(STORED)

    assert matcher.stored_profile == STORED
    assert profile_store.load() == STORED


def test_reregister_overwrites(matcher, profile_store):
    matcher.register(STORED)
    replacement = FaceProfile(1.0, 2.0, 3.0, 4.0)
    matcher.register(replacement)

    assert profile_store.load() == replacement


def test_self_match_after_reload(kv):
    profile = FaceProfile(12.5, 40.25, 133.0, 151.75)
    FaceMatcher(ProfileStore(kv)).register(profile)

    reloaded = FaceMatcher(ProfileStore(KeyValueStore(kv.path)))
    assert reloaded.is_registered()
    result = reloaded.compare(profile)
    assert result == 100.0
    assert math.isfinite(result)


def test_reset_clears_registration(matcher, profile_store):
    matcher.register(STORED)

    assert matcher.reset() is True
    assert not matcher.is_registered()
    assert profile_store.load() is None
    assert matcher.reset() is False


@pytest.mark.parametrize("threshold", [0.0, -5.0])
def test_unregistered_never_matches_at_low_thresholds(matcher, threshold):
    assert matcher.decide(FaceProfile(1.0, 2.0, 3.0, 4.0), threshold) is MatchDecision.NO_MATCH
    assert matcher.evaluate(FaceProfile(1.0, 2.0, 3.0, 4.0), threshold) == (0.0, MatchDecision.NO_MATCH)


@pytest.mark.parametrize("threshold", [0.0, -1.0, math.nan])
def test_non_positive_threshold_is_rejected(profile_store, threshold):
    with pytest.raises(ValueError):
        FaceMatcher(profile_store, threshold=threshold)


def test_evaluate_returns_percentage_with_decision(matcher):
    matcher.register(STORED)

    percentage, decision = matcher.evaluate(FaceProfile(0.0, 0.0, 90.0, 100.0))

    assert percentage == pytest.approx(90.0)
    assert decision is MatchDecision.MATCH


@pytest.mark.parametrize(
    "profile",
    [
        FaceProfile(0.0, 0.0, math.nan, 10.0),
        FaceProfile(math.inf, 0.0, 10.0, 10.0),
        FaceProfile(0.0, 0.0, -10.0, 10.0),
    ],
)
def test_invalid_profile_is_not_registered(matcher, kv, profile):
    matcher.register(STORED)

    with pytest.raises(ValueError):
        matcher.register(profile)

    assert matcher.stored_profile == STORED
    assert FaceMatcher(ProfileStore(KeyValueStore(kv.path))).stored_profile == STORED
