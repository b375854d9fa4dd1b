"""
Frame Loop - The per-frame handshake pipeline.

One tick:
    camera frame -> keypoint source -> handshake evaluator
                 -> cooldown gate -> photo capture -> display

Ticks never overlap: the next tick is scheduled only after the previous
one has fully completed, successfully or not. stop() takes effect between
ticks; an estimation already in flight is allowed to finish but its result
is thrown away.
"""

import asyncio
import enum
import logging
import time
from typing import Callable, Optional

from .capture import PhotoCapture
from .cooldown import CooldownGate
from .errors import CaptureError, EstimationError
from .handshake import HandshakeEvaluator

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds."""
    return time.monotonic() * 1000.0


class RunState(enum.Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class FrameLoop:
    """
    Scheduler and state machine for the handshake pipeline.

    Owns the run state and the pending tick handle. Must be started from
    inside a running asyncio event loop.
    """

    def __init__(
        self,
        camera,
        keypoint_source,
        evaluator: HandshakeEvaluator,
        cooldown: CooldownGate,
        capture: PhotoCapture,
        display,
        mirror: bool = False,
        rate: float = 30.0,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize FrameLoop.

        Args:
            camera: Object with read() -> frame or None
            keypoint_source: Object with async estimate(frame) -> list of Hand
            evaluator: Handshake decision for one frame
            cooldown: Debounce between captures
            capture: Produces photos from frames
            display: Object with show_frame(...) and show_photo(photo)
            mirror: Whether photos (and preview) are mirrored
            rate: Maximum ticks per second
            clock: Millisecond clock used for the cooldown
        """
        self.camera = camera
        self.keypoint_source = keypoint_source
        self.evaluator = evaluator
        self.cooldown = cooldown
        self.capture = capture
        self.display = display
        self.mirror = mirror
        self._interval = 1.0 / rate
        self._clock = clock or monotonic_ms

        # State
        self._state = RunState.STOPPED
        self._session = 0
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._handle: Optional[asyncio.Handle] = None
        self._tick_task: Optional[asyncio.Task] = None

        # Statistics
        self._ticks = 0
        self._estimation_failures = 0
        self._tick_errors = 0
        self._handshakes = 0
        self._captures = 0
        self._capture_failures = 0
        self._discarded = 0

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is RunState.RUNNING

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Stopped -> Running and schedule the first tick. No-op if running."""
        if self._state is RunState.RUNNING:
            return

        self._loop = asyncio.get_running_loop()
        self._state = RunState.RUNNING
        self._session += 1
        logger.info("Frame loop started")

        # A tick from the previous session may still be awaiting the model;
        # it discards its result and schedules the next tick itself.
        if self._tick_task is None:
            self._schedule(0.0)

    def stop(self) -> None:
        """Running -> Stopped and cancel the pending tick. No-op if stopped."""
        if self._state is RunState.STOPPED:
            return

        self._state = RunState.STOPPED
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        logger.info("Frame loop stopped")

    async def join(self) -> None:
        """Wait for the tick currently in flight, if any."""
        task = self._tick_task
        if task is not None and not task.done():
            await asyncio.wait({task})

    def _schedule(self, delay: float) -> None:
        if delay > 0:
            self._handle = self._loop.call_later(delay, self._begin_tick)
        else:
            self._handle = self._loop.call_soon(self._begin_tick)

    def _begin_tick(self) -> None:
        self._handle = None
        if self._state is not RunState.RUNNING:
            return
        self._tick_task = self._loop.create_task(self._run_tick())

    async def _run_tick(self) -> None:
        started = time.monotonic()
        try:
            await self.tick()
        except asyncio.CancelledError:
            self._tick_task = None
            raise
        except Exception as e:
            self._tick_errors += 1
            logger.exception(f"Error in frame loop: {e}")

        self._tick_task = None
        if self._state is RunState.RUNNING:
            elapsed = time.monotonic() - started
            self._schedule(max(0.0, self._interval - elapsed))

    def _is_current(self, session: int) -> bool:
        return self._state is RunState.RUNNING and self._session == session

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def tick(self) -> None:
        """Run the pipeline once for the current camera frame."""
        session = self._session
        self._ticks += 1

        frame = self.camera.read()
        if frame is None:
            return

        try:
            hands = await self.keypoint_source.estimate(frame)
        except EstimationError as e:
            self._estimation_failures += 1
            logger.warning(f"Skipping frame: {e}")
            return

        if not self._is_current(session):
            self._discarded += 1
            logger.debug("Discarding estimation result from a stopped session")
            return

        result = self.evaluator.evaluate(hands)
        self.display.show_frame(frame, hands, result, self.mirror)

        if not result.is_handshake:
            return
        self._handshakes += 1

        if not self.cooldown.try_trigger(self._clock()):
            return

        logger.info(f"Handshake detected! (distance {result.metric:.2f}px)")

        # A failed capture keeps the cooldown consumed
        try:
            photo = self.capture.capture(frame, self.mirror)
        except CaptureError as e:
            self._capture_failures += 1
            logger.warning(f"Capture failed: {e}")
            return

        self._captures += 1
        self.display.show_photo(photo)

    def get_stats(self) -> dict:
        return {
            "state": self._state.value,
            "ticks": self._ticks,
            "estimation_failures": self._estimation_failures,
            "tick_errors": self._tick_errors,
            "handshakes": self._handshakes,
            "captures": self._captures,
            "capture_failures": self._capture_failures,
            "discarded": self._discarded,
        }
