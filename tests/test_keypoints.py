from types import SimpleNamespace

from handshake_camera.keypoints import (
    LANDMARK_NAMES,
    WRIST_NAME,
    Hand,
    Keypoint,
    hands_from_results,
)


def _landmarks(n=21, x=0.5, y=0.25):
    return SimpleNamespace(landmark=[SimpleNamespace(x=x, y=y, z=0.0) for _ in range(n)])


def _handedness(label, score):
    return SimpleNamespace(classification=[SimpleNamespace(label=label, score=score)])


def test_keypoint_validity():
    assert Keypoint("a", 1.0, 2.0).is_valid()
    assert not Keypoint("a", float("nan"), 2.0).is_valid()
    assert not Keypoint("a", 1.0, float("-inf")).is_valid()
    assert not Keypoint("a", None, 2.0).is_valid()


def test_hand_lookup_ignores_invalid_points():
    hand = Hand(keypoints=[
        Keypoint("wrist", float("nan"), 1.0),
        None,
        Keypoint("thumb_tip", 3.0, 4.0),
    ])
    assert hand.wrist is None
    assert hand.get("thumb_tip") == Keypoint("thumb_tip", 3.0, 4.0)
    assert len(hand.valid_keypoints()) == 1


def test_landmark_names():
    assert len(LANDMARK_NAMES) == 21
    assert WRIST_NAME == "wrist"
    assert LANDMARK_NAMES[8] == "index_finger_tip"
    assert LANDMARK_NAMES[20] == "pinky_finger_tip"


def test_hands_from_results_scales_to_pixels():
    results = SimpleNamespace(
        multi_hand_landmarks=[_landmarks(x=0.5, y=0.25), _landmarks(x=0.1, y=0.9)],
        multi_handedness=[_handedness("Left", 0.97), _handedness("Right", 0.88)],
    )
    hands = hands_from_results(results, width=640, height=480)

    assert len(hands) == 2
    assert hands[0].handedness == "Left"
    assert hands[0].score == 0.97
    assert hands[0].wrist == Keypoint("wrist", 320.0, 120.0)
    assert hands[1].handedness == "Right"
    assert hands[1].keypoints[20].name == "pinky_finger_tip"
    assert hands[1].keypoints[20].x == 64.0


def test_hands_from_results_empty():
    results = SimpleNamespace(multi_hand_landmarks=None, multi_handedness=None)
    assert hands_from_results(results, 640, 480) == []


def test_hands_from_results_respects_max_hands():
    results = SimpleNamespace(
        multi_hand_landmarks=[_landmarks(), _landmarks(), _landmarks()],
        multi_handedness=[],
    )
    hands = hands_from_results(results, 100, 100, max_hands=2)
    assert len(hands) == 2
    assert hands[0].handedness is None
