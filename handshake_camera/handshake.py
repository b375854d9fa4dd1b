"""
Handshake Evaluation - Decides per frame whether two hands are shaking.

Each hand is reduced to one representative point (centroid of its valid
keypoints, or its wrist) and the Euclidean distance between the two points
is compared against a fixed pixel threshold.
"""

import math
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import numpy as np

from .config import ANCHOR_CENTROID, ANCHOR_WRIST, ANCHORS
from .keypoints import DetectionFrame, Hand, Keypoint

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


# ============================================================================
# Geometry Helpers
# ============================================================================

def distance_2d(a: Point, b: Point) -> float:
    """Euclidean distance between two 2D points."""
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return math.hypot(dx, dy)


def keypoint_center(keypoints: Iterable[Keypoint]) -> Optional[Point]:
    """Mean position of the valid keypoints, or None if there are none."""
    pts = [(kp.x, kp.y) for kp in keypoints if kp is not None and kp.is_valid()]
    if not pts:
        return None
    c = np.mean(np.asarray(pts, dtype=np.float64), axis=0)
    return float(c[0]), float(c[1])


@dataclass(frozen=True)
class HandshakeResult:
    """
    Outcome of evaluating one detection frame.

    Attributes:
        is_handshake: True if the two hands are closer than the threshold
        metric: Distance between the representative points in pixels,
            None if the frame was not evaluated
        points: The two representative points, for overlay rendering
    """
    is_handshake: bool
    metric: Optional[float] = None
    points: Optional[Tuple[Point, Point]] = None

    @classmethod
    def none(cls) -> 'HandshakeResult':
        return cls(is_handshake=False, metric=None, points=None)


class HandshakeEvaluator:
    """
    Stateless two-hand proximity check.

    Only frames with exactly two hands are evaluated. A hand with no usable
    representative point degrades the frame to "no handshake".
    """

    def __init__(self, threshold: float = 100.0, anchor: str = ANCHOR_CENTROID):
        """
        Initialize HandshakeEvaluator.

        Args:
            threshold: Strict upper bound on hand distance in pixels
            anchor: "centroid" (mean of valid keypoints) or "wrist"
        """
        if anchor not in ANCHORS:
            raise ValueError(f"Unknown anchor {anchor!r}")
        self.threshold = threshold
        self.anchor = anchor

    def representative_point(self, hand: Hand) -> Optional[Point]:
        """Single point standing in for the whole hand."""
        if self.anchor == ANCHOR_WRIST:
            wrist = hand.wrist
            return (wrist.x, wrist.y) if wrist is not None else None
        return keypoint_center(hand.keypoints)

    def evaluate(self, hands: DetectionFrame) -> HandshakeResult:
        if hands is None or len(hands) != 2:
            return HandshakeResult.none()

        p1 = self.representative_point(hands[0])
        p2 = self.representative_point(hands[1])
        if p1 is None or p2 is None:
            logger.debug("Hand without usable keypoints, skipping handshake check")
            return HandshakeResult.none()

        dist = distance_2d(p1, p2)
        if not math.isfinite(dist):
            return HandshakeResult(is_handshake=False, metric=None, points=(p1, p2))

        logger.debug(f"Hands Distance: {dist:.2f}px")
        return HandshakeResult(
            is_handshake=dist < self.threshold,
            metric=dist,
            points=(p1, p2),
        )
