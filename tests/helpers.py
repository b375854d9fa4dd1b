"""Fakes and builders shared by the handshake pipeline tests."""

import asyncio

import numpy as np

from handshake_camera.camera import FrameGate
from handshake_camera.display import HeadlessDisplay
from handshake_camera.keypoints import Hand, Keypoint, LANDMARK_NAMES

# Symmetric offsets so the centroid is exactly the hand center
_OFFSETS = [(0, 0)] + [(s * dx, s * dy) for dx, dy in [
    (3, 1), (5, 2), (7, 4), (9, 6), (2, 8), (4, 10), (6, 12), (1, 14), (8, 3), (10, 5)
] for s in (1, -1)]


def make_hand(cx: float, cy: float, handedness: str = "Right") -> Hand:
    """21-keypoint hand whose centroid and wrist both sit at (cx, cy)."""
    keypoints = [
        Keypoint(name=name, x=cx + dx, y=cy + dy)
        for name, (dx, dy) in zip(LANDMARK_NAMES, _OFFSETS)
    ]
    return Hand(keypoints=keypoints, handedness=handedness, score=0.9)


def make_frame(width: int = 6, height: int = 4) -> np.ndarray:
    """Small BGR frame with a distinct value at every pixel."""
    values = np.arange(width * height * 3, dtype=np.uint8)
    return values.reshape((height, width, 3))


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeCamera:
    def __init__(self, frame=None, fail=False):
        self.frame = make_frame() if frame is None else frame
        self.fail = fail
        self.reads = 0
        self.frame_gate = FrameGate()
        self.opened = False
        self.released = False

    def open(self):
        self.opened = True

    def read(self):
        self.reads += 1
        if self.fail:
            return None
        return self.frame

    def release(self):
        self.released = True


class FakeKeypointSource:
    """
    Scripted keypoint source.

    `script(call_index)` returns the hands for that call or raises.
    If `gate` is set, every call waits for it before answering.
    """

    def __init__(self, script, gate=None):
        self.script = script
        self.gate = gate
        self.calls = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self.entered = None
        self.closed = False

    def open(self):
        pass

    def close(self):
        self.closed = True

    def get_stats(self):
        return {"calls": self.calls}

    async def estimate(self, frame):
        self.calls += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.entered is not None:
                self.entered.set()
            if self.gate is not None:
                await self.gate.wait()
            else:
                await asyncio.sleep(0)
            return self.script(self.calls)
        finally:
            self.in_flight -= 1


class RecordingDisplay(HeadlessDisplay):
    """Headless display that also remembers when photos arrived."""

    def __init__(self, clock=None):
        super().__init__()
        self.clock = clock
        self.frames = 0
        self.photo_times = []
        self.photos = []

    def show_frame(self, frame, hands, result, mirror):
        super().show_frame(frame, hands, result, mirror)
        self.frames += 1

    def show_photo(self, photo):
        super().show_photo(photo)
        self.photos.append(photo)
        if self.clock is not None:
            self.photo_times.append(self.clock())
