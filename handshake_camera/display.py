"""
Display collaborators - present live preview and captured photos.

Both displays expose the same calls:
    show_frame(frame, hands, result, mirror)  - frame loop, drawing only
    show_photo(photo)                         - frame loop
    poll()                                    - app run loop, window events and keys
"""

import logging
from typing import Optional, Sequence

import cv2
import numpy as np

from .capture import CapturedPhoto, mirror_flip
from .handshake import HandshakeResult
from .keypoints import Hand

logger = logging.getLogger(__name__)

PREVIEW_WINDOW = "Handshake Camera"
PHOTO_WINDOW = "Captured Photo"


class HeadlessDisplay:
    """Keeps the latest photo in memory; no windows."""

    def __init__(self):
        self.last_photo: Optional[CapturedPhoto] = None
        self.last_result: Optional[HandshakeResult] = None
        self.photo_count = 0
        self.quit_requested = False

    def show_frame(self, frame: np.ndarray, hands: Sequence[Hand],
                   result: HandshakeResult, mirror: bool) -> None:
        self.last_result = result

    def show_photo(self, photo: CapturedPhoto) -> None:
        self.last_photo = photo
        self.photo_count += 1
        logger.info(f"Photo #{self.photo_count} ready ({photo.width}x{photo.height})")

    def poll(self) -> None:
        pass

    def close(self) -> None:
        pass


class PreviewWindow(HeadlessDisplay):
    """
    OpenCV preview with keypoint overlay, plus a window for the last photo.

    The preview is flipped with the same mirror policy as the captured photo,
    and keypoints are drawn in the flipped coordinates so labels stay readable.
    """

    def __init__(self):
        super().__init__()
        self.font = cv2.FONT_HERSHEY_SIMPLEX
        cv2.namedWindow(PREVIEW_WINDOW, cv2.WINDOW_NORMAL)

    def show_frame(self, frame: np.ndarray, hands: Sequence[Hand],
                   result: HandshakeResult, mirror: bool) -> None:
        super().show_frame(frame, hands, result, mirror)

        preview = mirror_flip(frame) if mirror else frame.copy()
        w = preview.shape[1]

        def to_preview(x: float, y: float):
            return int(round(w - x if mirror else x)), int(round(y))

        # Keypoints
        for hand in hands:
            for kp in hand.valid_keypoints():
                px, py = to_preview(kp.x, kp.y)
                cv2.circle(preview, (px, py), 5, (255, 255, 255), -1, cv2.LINE_AA)
                cv2.putText(preview, kp.name, (px + 8, py), self.font, 0.3, (255, 255, 255), 1)

        # Distance readout
        if result.metric is not None:
            color = (0, 255, 0) if result.is_handshake else (0, 0, 0)
            cv2.putText(
                preview,
                f"Hands Distance: {result.metric:.2f}px",
                (10, 20),
                self.font, 0.6, color, 2
            )
            if result.points is not None:
                a, b = (to_preview(*p) for p in result.points)
                cv2.line(preview, a, b, color, 2, cv2.LINE_AA)

        cv2.imshow(PREVIEW_WINDOW, preview)

    def poll(self) -> None:
        """Pump window events and read q/Esc."""
        key = cv2.waitKey(1) & 0xFF
        if key in (27, ord('q')):
            logger.info("Quit requested")
            self.quit_requested = True

    def show_photo(self, photo: CapturedPhoto) -> None:
        super().show_photo(photo)
        cv2.imshow(PHOTO_WINDOW, photo.pixels)

    def close(self) -> None:
        cv2.destroyAllWindows()
