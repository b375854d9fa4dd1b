"""
Exception types raised across the handshake pipeline.

Only ResourceUnavailableError is fatal; everything else is logged by the
frame loop, which keeps running.
"""


class HandshakeCameraError(Exception):
    """Base class for all handshake camera errors."""


class EstimationError(HandshakeCameraError):
    """Keypoint estimation failed or timed out for one frame."""


class CaptureError(HandshakeCameraError):
    """A still photo could not be produced from the current frame."""


class ResourceUnavailableError(HandshakeCameraError):
    """Camera or hand model could not be acquired at startup."""
