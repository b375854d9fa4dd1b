"""
Keypoint Source - MediaPipe hand landmark estimation.

The model is treated as an opaque, possibly slow oracle. Its blocking
process() call runs on a dedicated worker thread so the frame loop can
await it without stalling the event loop.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import cv2
import mediapipe as mp
import numpy as np

from .errors import EstimationError, ResourceUnavailableError
from .keypoints import Hand, hands_from_results

logger = logging.getLogger(__name__)


class KeypointSource(ABC):
    """Anything that turns a BGR frame into detected hands."""

    @abstractmethod
    async def estimate(self, frame: np.ndarray) -> List[Hand]:
        """Detect hands in a frame. Raises EstimationError on failure."""

    def close(self) -> None:
        pass


class MediaPipeKeypointSource(KeypointSource):
    """
    MediaPipe Hands wrapped as an async keypoint source.

    A single worker thread serializes access to the MediaPipe graph, which
    is not safe to call concurrently.
    """

    def __init__(
        self,
        max_hands: int = 2,
        model_complexity: int = 0,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        timeout: Optional[float] = None,
    ):
        """
        Initialize MediaPipeKeypointSource.

        Args:
            max_hands: Maximum number of hands to detect
            model_complexity: 0 (lite) or 1 (full)
            min_detection_confidence: Detection confidence threshold
            min_tracking_confidence: Tracking confidence threshold
            timeout: Seconds to wait for one estimation, None to wait forever
        """
        self.max_hands = max_hands
        self.model_complexity = model_complexity
        self.min_detection_confidence = min_detection_confidence
        self.min_tracking_confidence = min_tracking_confidence
        self.timeout = timeout

        self.hands = None
        self._executor: Optional[ThreadPoolExecutor] = None

        self._consecutive_failures = 0
        self._total_failures = 0
        self._total_successes = 0

    def open(self, hands=None) -> None:
        """
        Load the hand model.

        Args:
            hands: Already constructed model with process()/close(); a MediaPipe
                Hands instance is created when omitted

        Raises:
            ResourceUnavailableError: If MediaPipe cannot create the model
        """
        if hands is not None:
            self.hands = hands
        else:
            self.hands = self._create_model()

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mediapipe")
        logger.info("Model Loaded.")

    def _create_model(self):
        try:
            return mp.solutions.hands.Hands(
                static_image_mode=False,
                max_num_hands=self.max_hands,
                model_complexity=self.model_complexity,
                min_detection_confidence=self.min_detection_confidence,
                min_tracking_confidence=self.min_tracking_confidence,
            )
        except Exception as e:
            raise ResourceUnavailableError(f"Failed to load hand model: {e}") from e

    async def estimate(self, frame: np.ndarray) -> List[Hand]:
        if self.hands is None or self._executor is None:
            raise EstimationError("Hand model is not loaded")

        h, w = frame.shape[:2]
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(self._executor, self._process, frame)

        try:
            if self.timeout is not None:
                results = await asyncio.wait_for(future, self.timeout)
            else:
                results = await future
        except asyncio.TimeoutError as e:
            self._mark_failure()
            raise EstimationError(f"Hand estimation timed out after {self.timeout:.3f}s") from e
        except Exception as e:
            self._mark_failure()
            raise EstimationError(f"MediaPipe processing error: {e}") from e

        self._consecutive_failures = 0
        self._total_successes += 1
        return hands_from_results(results, w, h, self.max_hands)

    def _process(self, frame: np.ndarray):
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        return self.hands.process(rgb)

    def _mark_failure(self) -> None:
        self._consecutive_failures += 1
        self._total_failures += 1

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        if self.hands is not None:
            self.hands.close()
            self.hands = None

    def get_stats(self) -> dict:
        """Get processing statistics."""
        total = self._total_successes + self._total_failures
        return {
            "total_processed": total,
            "successes": self._total_successes,
            "failures": self._total_failures,
            "success_rate": self._total_successes / total if total > 0 else 0.0,
            "consecutive_failures": self._consecutive_failures,
        }
