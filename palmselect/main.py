"""
Main application for touchless five-option selection.
"""
import argparse
import asyncio
import logging
import time
from typing import Optional

import cv2
import numpy as np

from .config import Cfg, load_config
from .detection import DetectionProcessor
from .feedback_mock import MockFeedback
from .gestures import InteractionStateMachine
from .tracker import HandsTracker, draw_landmarks
from .types import InteractionState, MAX_SELECTION, MIN_SELECTION

logger = logging.getLogger(__name__)

STATE_COLORS = {
    InteractionState.IDLE: (200, 200, 200),
    InteractionState.SELECT_HOLD: (0, 200, 255),
    InteractionState.CONFIRM: (0, 255, 255),
    InteractionState.ACTIVATED: (0, 255, 0),
    InteractionState.ERROR: (0, 0, 255),
}


class DwellSelectApp:
    """Main application class for dwell-based option selection."""

    def __init__(self, config: Cfg):
        """Initialize the application with configuration."""
        self.config = config
        self.tracker = HandsTracker(
            model_path=self.config.mediapipe.model_path,
            num_hands=self.config.mediapipe.num_hands,
            min_detection_conf=self.config.mediapipe.min_detection_confidence,
            min_tracking_conf=self.config.mediapipe.min_tracking_confidence
        )
        self.feedback = MockFeedback()
        self.processor = DetectionProcessor(self.config)
        self.machine = InteractionStateMachine(
            self.config,
            progress_sink=self.feedback,
            activation_sink=self.feedback,
            status_sink=self.feedback
        )
        self.cap: Optional[cv2.VideoCapture] = None
        self.last_frame: Optional[np.ndarray] = None
        self.paused = False
        self.running = False
        self._open_camera()

    def _open_camera(self) -> None:
        self.cap = cv2.VideoCapture(self.config.camera.index)
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.camera.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.camera.height)
        self.cap.set(cv2.CAP_PROP_FPS, self.config.camera.fps)

        if not self.cap.isOpened():
            raise RuntimeError(f"Failed to open camera {self.config.camera.index}")
        logger.info(f"📷 Camera {self.config.camera.index} started")

    def _close_camera(self) -> None:
        # Detection state must not outlive the frame source
        self.processor.stop()
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info("📷 Camera stopped")

    def toggle_pause(self) -> None:
        """Stop or restart capture, the way a hidden browser tab would."""
        if self.paused:
            self._open_camera()
        else:
            self._close_camera()
        self.paused = not self.paused

    def _on_tick_done(self, task: asyncio.Task) -> None:
        """Stop the frame loop when the tick task dies on its own."""
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"❌ Tick loop failed: {error!r}")
            self.running = False

    async def _tick_loop(self) -> None:
        """Fixed-rate tick driving the interaction state machine."""
        interval_s = self.config.interaction.tick_interval_ms / 1000.0
        while self.running:
            self.machine.tick(self.processor.snapshot, time.monotonic())
            await asyncio.sleep(interval_s)

    async def run(self):
        """Run the main application loop."""
        print(f"Starting {self.config.display.window_name}")
        print("🖐️  Gesture Selection:")
        print("  - Hold an open palm to wake")
        print("  - Hold 1-5 fingers to pick an option")
        print("  - Keep holding to confirm")
        print("Press 'r' to reset, 'p' to pause camera, 'q' to quit")

        self.running = True
        tick_task = asyncio.create_task(self._tick_loop())
        tick_task.add_done_callback(self._on_tick_done)

        try:
            while self.running:
                if self.paused:
                    paused_frame = self.paused_frame()
                    if paused_frame is not None:
                        cv2.imshow(self.config.display.window_name, paused_frame)
                    self._handle_key(cv2.waitKey(50) & 0xFF)
                    await asyncio.sleep(0.05)
                    continue

                ret, frame = self.cap.read()
                if not ret:
                    logger.warning("Failed to read frame from camera")
                    break

                t_now = time.monotonic()
                landmarks = self.tracker.process(frame, int(t_now * 1000))
                self.processor.on_observation(
                    hand_present=landmarks is not None,
                    landmarks=landmarks,
                    t_now=t_now
                )

                cv2.imshow(self.config.display.window_name, self.compose_frame(frame, landmarks))
                self._handle_key(cv2.waitKey(1) & 0xFF)

                # Let the tick task run between frames
                await asyncio.sleep(0)
        finally:
            self.running = False
            tick_task.cancel()
            try:
                await tick_task
            except asyncio.CancelledError:
                pass
            finally:
                self._close_camera()
                self.tracker.close()
                cv2.destroyAllWindows()

    def _handle_key(self, key: int) -> None:
        if key == ord('q'):
            self.running = False
        elif key == ord('r'):
            self.machine.reset()
        elif key == ord('p'):
            self.toggle_pause()

    def compose_frame(self, frame: np.ndarray, landmarks) -> np.ndarray:
        """Mirror the camera frame, draw landmarks and the overlay."""
        if self.config.display.mirror:
            frame = cv2.flip(frame, 1)
        if landmarks and self.config.display.show_landmarks:
            frame = draw_landmarks(frame, landmarks, mirror=self.config.display.mirror)
        # Overlay-free copy for the paused view
        self.last_frame = frame.copy()
        return self.render_overlay(frame)

    def paused_frame(self) -> Optional[np.ndarray]:
        """Last camera image with a fresh overlay, or None before the first frame."""
        if self.last_frame is None:
            return None
        return self.render_overlay(self.last_frame.copy())

    def render_overlay(self, frame: np.ndarray) -> np.ndarray:
        """Draw state label, option buttons and the dwell progress ring."""
        height, width = frame.shape[:2]
        state = self.machine.state
        color = STATE_COLORS[state]
        snapshot = self.processor.snapshot

        cv2.putText(frame, f"STATE: {state.name}", (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.7, color, 2)
        detail = "No hand detected"
        if snapshot.hand_detected:
            detail = f"Fingers: {snapshot.finger_count if snapshot.finger_count is not None else '-'}"
            if snapshot.full_palm:
                detail += " | Palm"
        cv2.putText(frame, detail, (10, 60), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)

        # Option buttons along the bottom edge
        box_w = width // (MAX_SELECTION + 1)
        for option in range(MIN_SELECTION, MAX_SELECTION + 1):
            x0 = option * box_w - box_w // 2
            y0 = height - 70
            active = option == self.machine.selection
            cv2.rectangle(frame, (x0, y0), (x0 + box_w - 10, y0 + 50),
                          (0, 255, 0) if active else (255, 255, 255), -1 if active else 2)
            cv2.putText(frame, str(option), (x0 + box_w // 2 - 12, y0 + 35),
                        cv2.FONT_HERSHEY_SIMPLEX, 1.0, (0, 0, 0) if active else (255, 255, 255), 2)

        # Progress ring
        center = (width - 60, 60)
        cv2.circle(frame, center, 38, (80, 80, 80), 4)
        if self.machine.progress > 0:
            cv2.ellipse(frame, center, (38, 38), -90, 0, 360 * self.machine.progress, color, 4)

        if self.paused:
            cv2.putText(frame, "PAUSED", (width // 2 - 60, height // 2), cv2.FONT_HERSHEY_SIMPLEX, 1.2, (0, 0, 255), 3)

        return frame


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Touchless five-option selection with dwell gestures")
    parser.add_argument("--config", help="Path to a YAML config file (defaults to the packaged config)")
    parser.add_argument("--strategy", choices=["duration", "majority"],
                        help="Override the stability filter strategy")
    return parser.parse_args(argv)


async def main(argv=None):
    """Entry point for the application."""
    args = parse_args(argv)
    config = load_config(args.config)
    if args.strategy:
        config.stability.strategy = args.strategy

    logging.basicConfig(
        level=getattr(logging, config.logging.level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    app = DwellSelectApp(config)
    await app.run()


def cli():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nApplication interrupted by user")


if __name__ == "__main__":
    cli()
