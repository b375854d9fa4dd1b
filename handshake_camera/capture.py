"""
Photo Capture - Snapshots the current frame into a still photo.

The raw camera frame is never mirrored by the camera stack, while the
preview of a front camera is. The mirror policy lives here so preview and
photo always agree on what the user saw.
"""

import time
import logging
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from .config import FACING_USER
from .errors import CaptureError

logger = logging.getLogger(__name__)


def mirror_for_facing(facing_mode: str) -> bool:
    """Front ("user") cameras are previewed and captured mirrored."""
    return facing_mode == FACING_USER


def mirror_flip(image: np.ndarray) -> np.ndarray:
    """Reflect an image across its vertical axis into a new array."""
    return cv2.flip(image, 1)


@dataclass(frozen=True)
class CapturedPhoto:
    """
    Immutable still photo.

    Attributes:
        pixels: Read-only BGR pixel buffer (H, W, 3)
        width: Width in pixels
        height: Height in pixels
        mirrored: Whether the horizontal flip has been applied
        captured_at: Wall-clock capture time (seconds since epoch)
    """
    pixels: np.ndarray
    width: int
    height: int
    mirrored: bool = False
    captured_at: float = 0.0


class PhotoCapture:
    """Produces CapturedPhoto values from live frames."""

    def __init__(self):
        self._captured_count = 0
        self._failed_count = 0

    def capture(self, frame: Optional[np.ndarray], mirror: bool) -> CapturedPhoto:
        """
        Copy the frame and optionally mirror it.

        Args:
            frame: Raw, unmirrored BGR frame from the camera
            mirror: Apply a horizontal flip to the copy

        Returns:
            CapturedPhoto owning its own pixel buffer

        Raises:
            CaptureError: If the frame is missing or not an image
        """
        self._check_frame(frame)

        # Copy first so the live frame is never touched
        pixels = np.array(frame, copy=True)
        if mirror:
            pixels = mirror_flip(pixels)
        pixels.setflags(write=False)

        h, w = pixels.shape[:2]
        self._captured_count += 1
        return CapturedPhoto(
            pixels=pixels,
            width=w,
            height=h,
            mirrored=mirror,
            captured_at=time.time(),
        )

    def _check_frame(self, frame) -> None:
        if frame is None:
            self._failed_count += 1
            raise CaptureError("No frame to capture")
        if not isinstance(frame, np.ndarray) or frame.size == 0:
            self._failed_count += 1
            raise CaptureError("Frame is empty or not an image")
        if frame.ndim not in (2, 3):
            self._failed_count += 1
            raise CaptureError(f"Unexpected frame shape {frame.shape}")

    def get_stats(self) -> dict:
        return {
            "captured": self._captured_count,
            "failed": self._failed_count,
        }
