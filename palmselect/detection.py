"""
Frame-arrival processing: classify each observation, stabilize it and publish
a snapshot for the interaction state machine.
"""
import logging
from typing import Optional

from .config import Cfg
from .landmarks import count_fingers, is_full_palm, landmarks_in_frame
from .stability import StabilityFilter, make_stability_filter
from .timing import elapsed_ms
from .types import DetectionSnapshot, Landmarks, NO_DETECTION, RawSignal

logger = logging.getLogger(__name__)


class DetectionProcessor:
    """
    Sole writer of detection state.

    Every observation produces a new frozen ``DetectionSnapshot`` that replaces
    the previous one in a single assignment, so a tick reading ``snapshot`` never
    sees a half-updated value.
    """

    def __init__(self, cfg: Cfg, stability_filter: Optional[StabilityFilter] = None):
        """Initialize the processor with configuration and an optional filter override."""
        self.cfg = cfg
        self.filter = stability_filter or make_stability_filter(cfg.stability)
        self.snapshot: DetectionSnapshot = NO_DETECTION
        self.last_raw: Optional[RawSignal] = None
        self.last_hand_time: Optional[float] = None
        self._out_of_frame_since: Optional[float] = None

    def classify(self, landmarks: Landmarks) -> RawSignal:
        """Derive the raw finger count and palm flag from one set of landmarks."""
        finger_count = count_fingers(
            landmarks,
            thumb_distance_threshold=self.cfg.classifier.thumb_distance_threshold,
            closed_fist_short_circuit=self.cfg.classifier.closed_fist_short_circuit
        )
        return RawSignal(finger_count=finger_count, is_palm=is_full_palm(finger_count))

    def on_observation(self, hand_present: bool, landmarks: Optional[Landmarks],
                       t_now: float, valid: bool = True) -> DetectionSnapshot:
        """
        Process one frame's hand detection result.

        Args:
            hand_present: Whether the detector found a hand
            landmarks: 21 landmarks of the first hand, or None
            t_now: Current timestamp in seconds
            valid: Externally supplied gesture validity flag

        Returns:
            The newly published snapshot
        """
        if not hand_present or not landmarks:
            self._clear()
            return self.snapshot

        self.last_hand_time = t_now
        raw = self.classify(landmarks)
        self.last_raw = raw
        stable = self.filter.observe(raw, t_now)

        gesture_valid = valid and not self._out_of_frame_expired(landmarks, t_now)

        self.snapshot = DetectionSnapshot(
            hand_detected=True,
            full_palm=stable.is_palm,
            finger_count=stable.finger_count,
            gesture_valid=gesture_valid,
            last_hand_time=t_now
        )
        return self.snapshot

    def _out_of_frame_expired(self, landmarks: Landmarks, t_now: float) -> bool:
        """
        True once the hand has stayed outside the frame margin for a whole
        stabilization window. Single stray frames at the edge are tolerated.
        """
        interaction = self.cfg.interaction
        if not interaction.out_of_frame_invalid:
            return False
        if landmarks_in_frame(landmarks, margin=interaction.out_of_frame_margin):
            self._out_of_frame_since = None
            return False
        if self._out_of_frame_since is None:
            self._out_of_frame_since = t_now
            logger.debug("Hand left the frame")
        return elapsed_ms(self._out_of_frame_since, t_now) >= self.cfg.stability.stable_time_ms

    def stop(self) -> None:
        """Frame source stopped: drop all detection state immediately."""
        self._clear()
        logger.info("⏹️  Detection stopped, hand state cleared")

    def _clear(self) -> None:
        self.filter.reset()
        self.last_raw = None
        self._out_of_frame_since = None
        self.snapshot = DetectionSnapshot(
            hand_detected=False,
            full_palm=False,
            finger_count=None,
            last_hand_time=self.last_hand_time
        )
