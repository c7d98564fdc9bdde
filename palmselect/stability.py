"""
Temporal stability filters that turn a jittery per-frame finger count into a
trustworthy value.
"""
import logging
from abc import ABC, abstractmethod
from collections import Counter, deque
from typing import Deque, Generic, Optional, TypeVar

from .config import StabilityConfig
from .errors import ConfigError
from .types import EMPTY_SIGNAL, MAX_SELECTION, MIN_SELECTION, RawSignal, StableSignal
from .timing import elapsed_ms

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _selectable(count: Optional[int]) -> Optional[int]:
    """Keep only counts that map to one of the five options."""
    if count is not None and MIN_SELECTION <= count <= MAX_SELECTION:
        return count
    return None


class StabilityFilter(ABC):
    """
    Common interface of the stability strategies.

    ``observe`` is called once per observation. Passing ``None`` means the hand
    was lost: all history is discarded and the empty signal is returned.
    """

    def __init__(self):
        self._current: StableSignal = EMPTY_SIGNAL

    @property
    def current(self) -> StableSignal:
        """Last emitted stable signal."""
        return self._current

    def observe(self, raw: Optional[RawSignal], t_now: float) -> StableSignal:
        if raw is None:
            self.reset()
            return self._current
        self._current = self._observe(raw, t_now)
        return self._current

    def reset(self) -> None:
        """Forget all candidates and history."""
        self._clear()
        self._current = EMPTY_SIGNAL
        logger.debug(f"{type(self).__name__} reset")

    @abstractmethod
    def _observe(self, raw: RawSignal, t_now: float) -> StableSignal:
        ...

    @abstractmethod
    def _clear(self) -> None:
        ...


class _Candidate(Generic[T]):
    """A value together with the time it was first seen unchanged."""

    def __init__(self):
        self.value: Optional[T] = None
        self.since: Optional[float] = None

    def update(self, value: T, t_now: float, stable_time_ms: float) -> Optional[T]:
        """Track ``value`` and return it once it has held for ``stable_time_ms``."""
        if self.since is None or value != self.value:
            self.value = value
            self.since = t_now
        if elapsed_ms(self.since, t_now) >= stable_time_ms:
            return self.value
        return None

    def clear(self) -> None:
        self.value = None
        self.since = None


class DurationStabilityFilter(StabilityFilter):
    """
    Accept a value only after it has stayed unchanged for ``stable_time_ms``.

    The finger count and the open-palm flag are windowed independently.
    """

    def __init__(self, stable_time_ms: float = 400):
        super().__init__()
        self.stable_time_ms = stable_time_ms
        self._finger = _Candidate[int]()
        self._palm = _Candidate[bool]()

    def _observe(self, raw: RawSignal, t_now: float) -> StableSignal:
        count = self._finger.update(raw.finger_count, t_now, self.stable_time_ms)
        palm = self._palm.update(raw.is_palm, t_now, self.stable_time_ms)
        return StableSignal(finger_count=_selectable(count), is_palm=palm is True)

    def _clear(self) -> None:
        self._finger.clear()
        self._palm.clear()


class MajorityVoteStabilityFilter(StabilityFilter):
    """
    Accept the most frequent count among the last ``history_size`` observations
    once it has at least ``stable_threshold`` votes.
    """

    def __init__(self, history_size: int = 8, stable_threshold: int = 6):
        super().__init__()
        self.history_size = history_size
        self.stable_threshold = stable_threshold
        self._fingers: Deque[int] = deque(maxlen=history_size)
        self._palms: Deque[bool] = deque(maxlen=history_size)

    def _observe(self, raw: RawSignal, t_now: float) -> StableSignal:
        self._fingers.append(raw.finger_count)
        self._palms.append(raw.is_palm)

        count = None
        votes = Counter(value for value in self._fingers if value is not None)
        if votes:
            # most_common keeps first-seen order among ties
            winner, winner_votes = votes.most_common(1)[0]
            if winner_votes >= self.stable_threshold:
                count = winner

        palm = sum(self._palms) >= self.stable_threshold
        return StableSignal(finger_count=_selectable(count), is_palm=palm)

    def _clear(self) -> None:
        self._fingers.clear()
        self._palms.clear()


def make_stability_filter(cfg: StabilityConfig) -> StabilityFilter:
    """Build the stability strategy named in the configuration."""
    if cfg.strategy == "duration":
        return DurationStabilityFilter(stable_time_ms=cfg.stable_time_ms)
    if cfg.strategy == "majority":
        return MajorityVoteStabilityFilter(
            history_size=cfg.history_size,
            stable_threshold=cfg.stable_threshold
        )
    raise ConfigError(f"Unknown stability strategy '{cfg.strategy}'")
