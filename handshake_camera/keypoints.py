"""
Hand keypoint data model.

A detected hand is a list of named 2D keypoints in pixel coordinates.
The model may report partial or non-finite points; they are kept here as
reported and filtered by consumers through Keypoint.is_valid().
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

# ============================================================================
# MediaPipe Landmark Indices
# ============================================================================

WRIST = 0
THUMB_CMC, THUMB_MCP, THUMB_IP, THUMB_TIP = 1, 2, 3, 4
INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP = 5, 6, 7, 8
MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP = 9, 10, 11, 12
RING_MCP, RING_PIP, RING_DIP, RING_TIP = 13, 14, 15, 16
PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP = 17, 18, 19, 20

# Index-aligned with the model output
LANDMARK_NAMES = (
    "wrist",
    "thumb_cmc", "thumb_mcp", "thumb_ip", "thumb_tip",
    "index_finger_mcp", "index_finger_pip", "index_finger_dip", "index_finger_tip",
    "middle_finger_mcp", "middle_finger_pip", "middle_finger_dip", "middle_finger_tip",
    "ring_finger_mcp", "ring_finger_pip", "ring_finger_dip", "ring_finger_tip",
    "pinky_finger_mcp", "pinky_finger_pip", "pinky_finger_dip", "pinky_finger_tip",
)

WRIST_NAME = LANDMARK_NAMES[WRIST]


@dataclass(frozen=True)
class Keypoint:
    """A named 2D point in pixel coordinates."""
    name: str
    x: float
    y: float
    score: Optional[float] = None

    def is_valid(self) -> bool:
        """True if both coordinates are finite numbers."""
        try:
            return math.isfinite(self.x) and math.isfinite(self.y)
        except TypeError:
            return False


@dataclass
class Hand:
    """
    One detected hand in one frame.

    Attributes:
        keypoints: Keypoints in model order (may contain None or invalid points)
        handedness: "Left" / "Right" as reported by the model, if known
        score: Handedness confidence, if known
    """
    keypoints: List[Optional[Keypoint]] = field(default_factory=list)
    handedness: Optional[str] = None
    score: Optional[float] = None

    def valid_keypoints(self) -> List[Keypoint]:
        """Keypoints that are present and have finite coordinates."""
        return [kp for kp in self.keypoints if kp is not None and kp.is_valid()]

    def get(self, name: str) -> Optional[Keypoint]:
        """Look up a valid keypoint by name."""
        for kp in self.valid_keypoints():
            if kp.name == name:
                return kp
        return None

    @property
    def wrist(self) -> Optional[Keypoint]:
        return self.get(WRIST_NAME)


# A DetectionFrame is simply the list of hands returned for one video frame
DetectionFrame = Sequence[Hand]


def hands_from_results(results, width: int, height: int, max_hands: int = 2) -> List[Hand]:
    """
    Convert MediaPipe hand results into pixel-space Hands.

    Args:
        results: MediaPipe Hands.process() result
        width: Frame width in pixels
        height: Frame height in pixels
        max_hands: Maximum number of hands to return

    Returns:
        List of Hand, possibly empty
    """
    landmark_lists = getattr(results, "multi_hand_landmarks", None) or []
    handedness_lists = getattr(results, "multi_handedness", None) or []

    hands = []
    for i, hand_landmarks in enumerate(landmark_lists[:max_hands]):
        keypoints = []
        for idx, lm in enumerate(hand_landmarks.landmark):
            name = LANDMARK_NAMES[idx] if idx < len(LANDMARK_NAMES) else f"landmark_{idx}"
            keypoints.append(Keypoint(name=name, x=lm.x * width, y=lm.y * height))

        label = None
        score = None
        if i < len(handedness_lists) and hasattr(handedness_lists[i], "classification"):
            classification = handedness_lists[i].classification[0]
            label = classification.label
            score = float(classification.score)

        hands.append(Hand(keypoints=keypoints, handedness=label, score=score))
    return hands
