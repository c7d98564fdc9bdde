"""
Palm Select

Touchless selection of one of five options: an open palm wakes the system,
a held finger count picks an option and a continued hold confirms it.
"""

__version__ = "0.1.0"

from .types import (
    InteractionState,
    RawSignal,
    StableSignal,
    DetectionSnapshot,
    ProgressSink,
    ActivationSink,
    StatusSink,
)
from .errors import ConfigError, InvalidTransitionError
from .config import load_config, Cfg
from .landmarks import count_fingers, is_full_palm
from .stability import (
    StabilityFilter,
    DurationStabilityFilter,
    MajorityVoteStabilityFilter,
    make_stability_filter,
)
from .detection import DetectionProcessor
from .gestures import InteractionStateMachine
from .feedback_mock import MockFeedback

__all__ = [
    "InteractionState",
    "RawSignal",
    "StableSignal",
    "DetectionSnapshot",
    "ProgressSink",
    "ActivationSink",
    "StatusSink",
    "ConfigError",
    "InvalidTransitionError",
    "load_config",
    "Cfg",
    "count_fingers",
    "is_full_palm",
    "StabilityFilter",
    "DurationStabilityFilter",
    "MajorityVoteStabilityFilter",
    "make_stability_filter",
    "DetectionProcessor",
    "InteractionStateMachine",
    "MockFeedback",
]
