import asyncio
import time
from types import SimpleNamespace

import pytest

from handshake_camera import estimator
from handshake_camera.errors import EstimationError, ResourceUnavailableError
from handshake_camera.estimator import MediaPipeKeypointSource
from tests.helpers import make_frame


class FakeHands:
    """Stand-in for mediapipe Hands with a scripted process()."""

    def __init__(self, delay=0.0, error=None, results=None):
        self.delay = delay
        self.error = error
        self.results = results
        self.calls = 0
        self.closed = False

    def process(self, rgb):
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.results

    def close(self):
        self.closed = True


def _one_hand_results(x=0.5, y=0.5):
    landmarks = SimpleNamespace(landmark=[SimpleNamespace(x=x, y=y, z=0.0) for _ in range(21)])
    handedness = SimpleNamespace(classification=[SimpleNamespace(label="Left", score=0.9)])
    return SimpleNamespace(multi_hand_landmarks=[landmarks], multi_handedness=[handedness])


def test_estimate_without_model_is_rejected():
    source = MediaPipeKeypointSource()
    with pytest.raises(EstimationError, match="not loaded"):
        asyncio.run(source.estimate(make_frame()))


def test_estimate_returns_pixel_hands():
    source = MediaPipeKeypointSource()
    source.open(hands=FakeHands(results=_one_hand_results()))
    try:
        hands = asyncio.run(source.estimate(make_frame(width=6, height=4)))
    finally:
        source.close()

    assert len(hands) == 1
    assert hands[0].wrist.x == 3.0
    assert hands[0].wrist.y == 2.0
    assert source.get_stats()["successes"] == 1


def test_estimate_timeout_becomes_estimation_error():
    source = MediaPipeKeypointSource(timeout=0.05)
    source.open(hands=FakeHands(delay=0.5, results=_one_hand_results()))
    try:
        with pytest.raises(EstimationError, match="timed out"):
            asyncio.run(source.estimate(make_frame()))
    finally:
        source.close()

    stats = source.get_stats()
    assert stats["failures"] == 1
    assert stats["consecutive_failures"] == 1


def test_model_error_is_wrapped():
    source = MediaPipeKeypointSource()
    source.open(hands=FakeHands(error=RuntimeError("graph error")))
    try:
        with pytest.raises(EstimationError, match="graph error") as excinfo:
            asyncio.run(source.estimate(make_frame()))
    finally:
        source.close()

    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert source.get_stats()["failures"] == 1


def test_success_resets_consecutive_failures():
    model = FakeHands(error=RuntimeError("graph error"))
    source = MediaPipeKeypointSource()
    source.open(hands=model)
    try:
        with pytest.raises(EstimationError):
            asyncio.run(source.estimate(make_frame()))
        model.error = None
        model.results = _one_hand_results()
        asyncio.run(source.estimate(make_frame()))
    finally:
        source.close()

    stats = source.get_stats()
    assert stats["consecutive_failures"] == 0
    assert stats["total_processed"] == 2


def test_open_failure_is_resource_unavailable(monkeypatch):
    def broken_hands(**kwargs):
        raise RuntimeError("model file missing")

    fake_mp = SimpleNamespace(solutions=SimpleNamespace(hands=SimpleNamespace(Hands=broken_hands)))
    monkeypatch.setattr(estimator, "mp", fake_mp)

    with pytest.raises(ResourceUnavailableError, match="model file missing"):
        MediaPipeKeypointSource().open()


def test_close_releases_model():
    model = FakeHands()
    source = MediaPipeKeypointSource()
    source.open(hands=model)
    source.close()
    assert model.closed
    assert source.hands is None
