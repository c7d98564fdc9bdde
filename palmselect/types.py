"""
Type definitions for the dwell-selection gesture system.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Sequence, Tuple, runtime_checkable


# Normalized (x, y) or (x, y, z) point, one of the 21 MediaPipe hand landmarks
Landmark = Tuple[float, ...]
Landmarks = Sequence[Landmark]


class InteractionState(Enum):
    """States of the dwell interaction."""
    IDLE = "IDLE"
    SELECT_HOLD = "SELECT_HOLD"
    CONFIRM = "CONFIRM"
    ACTIVATED = "ACTIVATED"
    ERROR = "ERROR"


@dataclass(frozen=True)
class RawSignal:
    """Unfiltered classification of a single observation."""
    finger_count: int  # 0..5
    is_palm: bool


@dataclass(frozen=True)
class StableSignal:
    """Debounced classification; finger_count is None until stable or outside 1..5."""
    finger_count: Optional[int]
    is_palm: bool


MIN_SELECTION = 1
MAX_SELECTION = 5

EMPTY_SIGNAL = StableSignal(finger_count=None, is_palm=False)


@dataclass(frozen=True)
class DetectionSnapshot:
    """Everything the state machine reads on a tick, published as one value."""
    hand_detected: bool
    full_palm: bool
    finger_count: Optional[int]
    gesture_valid: bool = True
    last_hand_time: Optional[float] = None  # seconds, same clock as t_now


NO_DETECTION = DetectionSnapshot(hand_detected=False, full_palm=False, finger_count=None)


@runtime_checkable
class ProgressSink(Protocol):
    """Receives dwell completion as a ratio in [0, 1]."""

    def on_progress(self, ratio: float) -> None:
        ...


@runtime_checkable
class ActivationSink(Protocol):
    """Receives the confirmed selection."""

    def on_activate(self, selection: int) -> None:
        ...


@runtime_checkable
class StatusSink(Protocol):
    """Receives state and selection changes for UI labelling."""

    def on_state_change(self, state: InteractionState, selection: Optional[int]) -> None:
        ...
