"""
Runtime configuration for the handshake camera.

Values come from three layers, lowest priority first: dataclass defaults,
environment variables (HandshakeConfig.from_env) and command line flags.

Environment Variables:
    HANDSHAKE_THRESHOLD: Hand distance in pixels that counts as a handshake (default: 100)
    COOLDOWN_MS: Minimum time between two photos in milliseconds (default: 3000)
    FACING_MODE: "user" (front camera, mirrored) or "environment" (default: user)
    MAX_HANDS: Maximum number of hands the model tracks (default: 2)
    HANDSHAKE_ANCHOR: "centroid" or "wrist" representative point (default: centroid)
    CAMERA_INDEX: OpenCV camera device index (default: 0)
    ESTIMATION_TIMEOUT_MS: Timeout for one model call, unset means no timeout
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

FACING_USER = "user"
FACING_ENVIRONMENT = "environment"
FACING_MODES = (FACING_USER, FACING_ENVIRONMENT)

ANCHOR_CENTROID = "centroid"
ANCHOR_WRIST = "wrist"
ANCHORS = (ANCHOR_CENTROID, ANCHOR_WRIST)


@dataclass
class HandshakeConfig:
    """
    Static configuration of one handshake camera session.

    Attributes:
        handshake_threshold: Distance in pixels below which two hands count
            as a handshake. Calibrated for the centroid anchor at 640x480;
            the wrist anchor usually needs a larger value.
        cooldown_ms: Minimum interval between two captured photos.
        facing_mode: "user" for a front camera (preview and photo mirrored)
            or "environment" for a rear camera.
        max_hands: Maximum number of hands the model reports.
        anchor: Representative point per hand, "centroid" or "wrist".
        camera_index: OpenCV camera device index.
        resolution: Requested capture resolution (width, height).
        rate: Upper bound on frame loop ticks per second.
        estimation_timeout_ms: Timeout for one model call, None for no timeout.
        min_detection_confidence: MediaPipe detection confidence.
        min_tracking_confidence: MediaPipe tracking confidence.
        model_complexity: MediaPipe model complexity (0 = lite).
        show_preview: Whether to open OpenCV preview windows.
    """
    handshake_threshold: float = 100.0
    cooldown_ms: int = 3000
    facing_mode: str = FACING_USER
    max_hands: int = 2
    anchor: str = ANCHOR_CENTROID
    camera_index: int = 0
    resolution: Tuple[int, int] = (640, 480)
    rate: float = 30.0
    estimation_timeout_ms: Optional[int] = None
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    model_complexity: int = 0
    show_preview: bool = True

    def __post_init__(self):
        if not self.handshake_threshold > 0:
            raise ValueError(f"handshake_threshold must be > 0, got {self.handshake_threshold}")
        if self.cooldown_ms < 0:
            raise ValueError(f"cooldown_ms must be >= 0, got {self.cooldown_ms}")
        if self.facing_mode not in FACING_MODES:
            raise ValueError(f"facing_mode must be one of {FACING_MODES}, got {self.facing_mode!r}")
        if self.max_hands < 1:
            raise ValueError(f"max_hands must be >= 1, got {self.max_hands}")
        if self.anchor not in ANCHORS:
            raise ValueError(f"anchor must be one of {ANCHORS}, got {self.anchor!r}")
        if self.rate <= 0:
            raise ValueError(f"rate must be > 0, got {self.rate}")
        if self.estimation_timeout_ms is not None and self.estimation_timeout_ms <= 0:
            raise ValueError(
                f"estimation_timeout_ms must be > 0 or None, got {self.estimation_timeout_ms}"
            )

    @property
    def estimation_timeout(self) -> Optional[float]:
        """Estimation timeout in seconds, or None."""
        if self.estimation_timeout_ms is None:
            return None
        return self.estimation_timeout_ms / 1000.0

    @classmethod
    def from_env(cls, environ=None) -> 'HandshakeConfig':
        """Build a config from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        defaults = cls()

        timeout = env.get("ESTIMATION_TIMEOUT_MS")
        return cls(
            handshake_threshold=float(env.get("HANDSHAKE_THRESHOLD", defaults.handshake_threshold)),
            cooldown_ms=int(env.get("COOLDOWN_MS", defaults.cooldown_ms)),
            facing_mode=env.get("FACING_MODE", defaults.facing_mode),
            max_hands=int(env.get("MAX_HANDS", defaults.max_hands)),
            anchor=env.get("HANDSHAKE_ANCHOR", defaults.anchor),
            camera_index=int(env.get("CAMERA_INDEX", defaults.camera_index)),
            estimation_timeout_ms=int(timeout) if timeout else None,
        )
