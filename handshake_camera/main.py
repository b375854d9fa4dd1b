#!/usr/bin/env python3
"""
Handshake Camera - Main Entry Point

Opens the camera and the MediaPipe hand model, then runs the frame loop
until the user quits. Every time two hands meet (a handshake) a photo is
captured, at most once per cooldown window.

Usage:
    python -m handshake_camera.main --camera 0
    python -m handshake_camera.main --facing environment --threshold 120 --cooldown 5000
    python -m handshake_camera.main --no-preview --debug
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import Optional

from .camera import CameraSource
from .capture import PhotoCapture, mirror_for_facing
from .config import ANCHORS, FACING_MODES, HandshakeConfig
from .cooldown import CooldownGate
from .display import HeadlessDisplay, PreviewWindow
from .errors import ResourceUnavailableError
from .estimator import MediaPipeKeypointSource
from .frame_loop import FrameLoop
from .handshake import HandshakeEvaluator

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class HandshakeCameraApp:
    """
    Wires the camera, hand model, handshake pipeline and display together.

    Resource acquisition happens in start(); a failure there is fatal and
    the frame loop never reaches Running.
    """

    def __init__(self, config: HandshakeConfig):
        self.config = config

        self.camera = CameraSource(config.camera_index, config.resolution)
        self.keypoint_source = MediaPipeKeypointSource(
            max_hands=config.max_hands,
            model_complexity=config.model_complexity,
            min_detection_confidence=config.min_detection_confidence,
            min_tracking_confidence=config.min_tracking_confidence,
            timeout=config.estimation_timeout,
        )
        self.capture = PhotoCapture()
        self.display: Optional[HeadlessDisplay] = None
        self.frame_loop: Optional[FrameLoop] = None
        self._stop_requested = False

    async def start(self) -> None:
        """Acquire resources and start the frame loop."""
        logger.info("Starting Handshake Camera...")

        self.camera.open()
        try:
            self.keypoint_source.open()
        except ResourceUnavailableError:
            self.camera.release()
            raise

        self.display = PreviewWindow() if self.config.show_preview else HeadlessDisplay()

        self.frame_loop = FrameLoop(
            camera=self.camera,
            keypoint_source=self.keypoint_source,
            evaluator=HandshakeEvaluator(self.config.handshake_threshold, self.config.anchor),
            cooldown=CooldownGate(self.config.cooldown_ms),
            capture=self.capture,
            display=self.display,
            mirror=mirror_for_facing(self.config.facing_mode),
            rate=self.config.rate,
        )
        self.frame_loop.start()
        logger.info(
            f"Handshake Camera started (threshold={self.config.handshake_threshold}px, "
            f"cooldown={self.config.cooldown_ms}ms, facing={self.config.facing_mode}, "
            f"anchor={self.config.anchor})"
        )

    def request_stop(self) -> None:
        self._stop_requested = True

    async def run(self) -> None:
        """Wait until a quit is requested or the loop stops."""
        while not self._stop_requested:
            if self.frame_loop is None or not self.frame_loop.running:
                break
            if self.display is not None:
                self.display.poll()
                if self.display.quit_requested:
                    break
            await asyncio.sleep(0.05)

    async def stop(self) -> None:
        """Stop the loop and release every resource."""
        logger.info("Stopping Handshake Camera...")

        if self.frame_loop is not None:
            self.frame_loop.stop()
            await self.frame_loop.join()
            logger.info(f"Frame loop stats: {self.frame_loop.get_stats()}")
            logger.info(f"Cooldown stats: {self.frame_loop.cooldown.get_stats()}")

        logger.info(f"Frame gate stats: {self.camera.frame_gate.get_stats()}")
        logger.info(f"MediaPipe stats: {self.keypoint_source.get_stats()}")
        logger.info(f"Capture stats: {self.capture.get_stats()}")

        self.keypoint_source.close()
        self.camera.release()

        if self.display is not None:
            self.display.close()
            self.display = None

        logger.info("Handshake Camera stopped")


async def main_async(config: HandshakeConfig) -> int:
    """Async main entry point."""
    app = HandshakeCameraApp(config)

    # Handle shutdown signals
    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.info("Shutdown signal received")
        app.request_stop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            pass

    try:
        await app.start()
    except ResourceUnavailableError as e:
        logger.error(f"Startup failed: {e}")
        return 1

    try:
        await app.run()
    finally:
        await app.stop()
    return 0


def build_parser(defaults: HandshakeConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Capture a photo whenever two hands meet in front of the camera",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--camera",
        type=int,
        default=defaults.camera_index,
        help="Camera device index",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=defaults.resolution[0],
        help="Requested frame width",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=defaults.resolution[1],
        help="Requested frame height",
    )
    parser.add_argument(
        "--facing",
        choices=FACING_MODES,
        default=defaults.facing_mode,
        help="Camera facing mode; 'user' mirrors preview and photos",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=defaults.handshake_threshold,
        help="Hand distance (px) below which a handshake is detected",
    )
    parser.add_argument(
        "--cooldown",
        type=int,
        default=defaults.cooldown_ms,
        help="Minimum time (ms) between two photos",
    )
    parser.add_argument(
        "--anchor",
        choices=ANCHORS,
        default=defaults.anchor,
        help="Representative point per hand",
    )
    parser.add_argument(
        "--max-hands",
        type=int,
        default=defaults.max_hands,
        help="Maximum number of hands to track",
    )
    parser.add_argument(
        "--rate",
        type=float,
        default=defaults.rate,
        help="Maximum frame loop rate (Hz)",
    )
    parser.add_argument(
        "--estimation-timeout",
        type=int,
        default=defaults.estimation_timeout_ms,
        help="Timeout (ms) for one hand estimation; unset waits forever",
    )
    parser.add_argument(
        "--model-complexity",
        type=int,
        choices=(0, 1),
        default=defaults.model_complexity,
        help="MediaPipe model complexity (0 = lite)",
    )
    parser.add_argument(
        "--no-preview",
        action="store_true",
        help="Run without OpenCV windows",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> HandshakeConfig:
    return HandshakeConfig(
        handshake_threshold=args.threshold,
        cooldown_ms=args.cooldown,
        facing_mode=args.facing,
        max_hands=args.max_hands,
        anchor=args.anchor,
        camera_index=args.camera,
        resolution=(args.width, args.height),
        rate=args.rate,
        estimation_timeout_ms=args.estimation_timeout,
        model_complexity=args.model_complexity,
        show_preview=not args.no_preview,
    )


def main() -> None:
    """Main entry point."""
    parser = build_parser(HandshakeConfig.from_env())
    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    try:
        sys.exit(asyncio.run(main_async(config)))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
