"""
Camera Source - OpenCV capture with per-frame validation.

Broken reads are filtered out by FrameGate before any frame reaches the
hand model or the photo capture path.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from .errors import ResourceUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class FrameValidationResult:
    """Result of frame validation."""
    valid: bool
    reason: str
    frame: Optional[np.ndarray] = None


class FrameGate:
    """
    Frame quality gate for camera reads.

    Validates:
    - cap.read() success
    - Frame not empty/None
    - Frame has correct shape (H, W, 3)
    """

    def __init__(self):
        self._total_invalid_count: int = 0
        self._total_valid_count: int = 0
        self._last_reason: str = "ok"

    def validate(self, ok: bool, frame: Optional[np.ndarray]) -> FrameValidationResult:
        """
        Validate a frame from cap.read().

        Args:
            ok: The boolean return value from cap.read()
            frame: The frame array from cap.read()

        Returns:
            FrameValidationResult with valid flag, reason, and frame if valid.
        """
        if not ok:
            return self._invalid("read_failed")
        if frame is None:
            return self._invalid("frame_none")
        if frame.size == 0:
            return self._invalid("empty_frame")
        if len(frame.shape) != 3:
            return self._invalid("invalid_dims")
        if frame.shape[2] != 3:
            return self._invalid("invalid_channels")

        self._total_valid_count += 1
        self._last_reason = "ok"
        return FrameValidationResult(True, "ok", frame)

    def _invalid(self, reason: str) -> FrameValidationResult:
        self._total_invalid_count += 1
        if reason != self._last_reason:
            logger.warning(f"Invalid camera frame: {reason}")
        self._last_reason = reason
        return FrameValidationResult(False, reason)

    def get_stats(self) -> dict:
        """Get validation statistics."""
        total = self._total_valid_count + self._total_invalid_count
        return {
            "total_frames": total,
            "valid_frames": self._total_valid_count,
            "invalid_frames": self._total_invalid_count,
            "valid_rate": self._total_valid_count / total if total > 0 else 0.0,
        }


class CameraSource:
    """
    Live frames from an OpenCV camera device.

    The facing mode is not a property of the device here; it only decides
    mirroring and is kept in HandshakeConfig.
    """

    def __init__(self, camera_index: int = 0, resolution: Tuple[int, int] = (640, 480)):
        self.camera_index = camera_index
        self.resolution = resolution
        self.frame_gate = FrameGate()
        self.cap: Optional[cv2.VideoCapture] = None
        self._size: Tuple[int, int] = (0, 0)

    def open(self) -> None:
        """
        Open the camera device.

        Raises:
            ResourceUnavailableError: If the device cannot be opened
        """
        logger.info(f"Opening camera index: {self.camera_index}")
        self.cap = cv2.VideoCapture(self.camera_index)
        if not self.cap.isOpened():
            self.cap.release()
            self.cap = None
            raise ResourceUnavailableError(f"Failed to open camera {self.camera_index}")

        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.resolution[0])
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.resolution[1])

        width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        fps = self.cap.get(cv2.CAP_PROP_FPS)
        self._size = (width, height)
        logger.info(f"Camera opened: {width}x{height} @ {fps:.1f} fps")

    @property
    def is_open(self) -> bool:
        return self.cap is not None and self.cap.isOpened()

    @property
    def size(self) -> Tuple[int, int]:
        """Frame (width, height) as reported by the device."""
        return self._size

    def read(self) -> Optional[np.ndarray]:
        """Read one validated BGR frame, or None if the read was unusable."""
        if self.cap is None:
            return None
        ok, frame = self.cap.read()
        result = self.frame_gate.validate(ok, frame)
        if not result.valid:
            return None
        self._size = (result.frame.shape[1], result.frame.shape[0])
        return result.frame

    def release(self) -> None:
        if self.cap is not None:
            self.cap.release()
            self.cap = None
