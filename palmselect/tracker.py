"""
MediaPipe hand landmark tracking and landmark drawing.
"""
import logging
from pathlib import Path
from typing import Optional, List, Tuple

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python as mp_python
from mediapipe.tasks.python import vision

from .types import Landmark, Landmarks

logger = logging.getLogger(__name__)

# Bones drawn between landmarks
HAND_CONNECTIONS = [
    (0, 1), (1, 2), (2, 3), (3, 4),
    (0, 5), (5, 6), (6, 7), (7, 8),
    (5, 9), (9, 10), (10, 11), (11, 12),
    (9, 13), (13, 14), (14, 15), (15, 16),
    (13, 17), (17, 18), (18, 19), (19, 20),
    (0, 17),
]


class HandsTracker:
    """Hand landmark tracker using the MediaPipe Tasks hand landmarker."""

    def __init__(self, model_path: str, num_hands: int = 1,
                 min_detection_conf: float = 0.7, min_tracking_conf: float = 0.7):
        """
        Initialize the hands tracker.

        Args:
            model_path: Path to the hand_landmarker.task model bundle
            num_hands: Maximum number of hands to detect
            min_detection_conf: Minimum confidence for hand detection
            min_tracking_conf: Minimum confidence for hand tracking
        """
        self.model_path = Path(model_path)
        if not self.model_path.exists():
            raise FileNotFoundError(
                f"Hand landmarker model not found: {self.model_path} "
                "(download hand_landmarker.task from the MediaPipe model zoo)"
            )

        options = vision.HandLandmarkerOptions(
            base_options=mp_python.BaseOptions(model_asset_path=str(self.model_path)),
            running_mode=vision.RunningMode.VIDEO,
            num_hands=num_hands,
            min_hand_detection_confidence=min_detection_conf,
            min_tracking_confidence=min_tracking_conf,
        )
        self.landmarker = vision.HandLandmarker.create_from_options(options)
        self._last_timestamp_ms = -1
        logger.info(f"✅ Hand landmarker loaded from {self.model_path}")

    def process(self, frame_bgr: np.ndarray, timestamp_ms: int) -> Optional[List[Landmark]]:
        """
        Process a frame and return hand landmarks.

        Args:
            frame_bgr: Input frame in BGR format
            timestamp_ms: Frame timestamp; must increase between calls

        Returns:
            List of 21 (x, y, z) coordinates in [0..1] range, or None if no hand detected
        """
        # VIDEO mode rejects non-increasing timestamps
        timestamp_ms = max(timestamp_ms, self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms

        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
        result = self.landmarker.detect_for_video(mp_image, timestamp_ms)

        if result.hand_landmarks:
            # Only the first detected hand is interpreted
            return [(lm.x, lm.y, lm.z) for lm in result.hand_landmarks[0]]

        return None

    def close(self) -> None:
        """Release the landmarker."""
        self.landmarker.close()


def draw_landmarks(frame: np.ndarray, landmarks: Landmarks, mirror: bool = False) -> np.ndarray:
    """
    Draw hand landmarks and bones on the frame.

    Args:
        frame: Input frame
        landmarks: List of (x, y[, z]) coordinates in [0..1] range
        mirror: Set when the frame has already been flipped horizontally

    Returns:
        Frame with landmarks drawn
    """
    height, width = frame.shape[:2]

    def to_px(point: Landmark) -> Tuple[int, int]:
        x = 1.0 - point[0] if mirror else point[0]
        return int(x * width), int(point[1] * height)

    for start, end in HAND_CONNECTIONS:
        cv2.line(frame, to_px(landmarks[start]), to_px(landmarks[end]), (255, 255, 255), 1)
    for point in landmarks:
        cv2.circle(frame, to_px(point), 3, (0, 255, 0), -1)

    return frame
