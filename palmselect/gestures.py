"""
Dwell interaction state machine that converts stabilized hand signals into a
confirmed selection.
"""
import logging
from typing import Callable, Dict, FrozenSet, Optional, Tuple

from .config import Cfg
from .errors import InvalidTransitionError
from .timing import elapsed_ms
from .types import (
    ActivationSink,
    DetectionSnapshot,
    InteractionState,
    MAX_SELECTION,
    MIN_SELECTION,
    ProgressSink,
    StatusSink,
)

logger = logging.getLogger(__name__)

S = InteractionState

# Allowed transitions. IDLE is reachable from every state through reset().
TRANSITIONS: Dict[InteractionState, FrozenSet[InteractionState]] = {
    S.IDLE: frozenset({S.SELECT_HOLD}),
    S.SELECT_HOLD: frozenset({S.IDLE, S.CONFIRM, S.ERROR}),
    S.CONFIRM: frozenset({S.IDLE, S.ACTIVATED}),
    S.ACTIVATED: frozenset({S.IDLE}),
    S.ERROR: frozenset({S.IDLE}),
}

INVALID_GESTURE = "invalid_gesture"


class InteractionStateMachine:
    """
    Tick-driven controller for the wake / select / confirm dwell sequence.

    Features:
    - Open palm held for the wake duration arms selection
    - A stable 1-5 finger count held for the select duration picks an option
    - The selection is confirmed after the confirm duration and activated once
    - Hand loss during selection is tolerated for the grace period
    - Invalid gestures (e.g. hand leaving the frame) park the machine in ERROR
    """

    def __init__(self, cfg: Cfg,
                 progress_sink: Optional[ProgressSink] = None,
                 activation_sink: Optional[ActivationSink] = None,
                 status_sink: Optional[StatusSink] = None):
        """Initialize the state machine with configuration and output sinks."""
        self.cfg = cfg
        self.progress_sink = progress_sink
        self.activation_sink = activation_sink
        self.status_sink = status_sink

        self.state = S.IDLE
        self.selection: Optional[int] = None
        self.progress = 0.0
        self.last_error: Optional[str] = None
        self.activation_count = 0

        # Dwell timers, in seconds on the caller's clock
        self.wake_started_at: Optional[float] = None
        self.select_started_at: Optional[float] = None
        self.confirm_started_at: Optional[float] = None

        self._handlers: Dict[InteractionState, Callable[[DetectionSnapshot, float], None]] = {
            S.IDLE: self._tick_idle,
            S.SELECT_HOLD: self._tick_select_hold,
            S.CONFIRM: self._tick_confirm,
            S.ACTIVATED: self._tick_activated,
            S.ERROR: self._tick_error,
        }
        missing = set(InteractionState) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No tick handler for {sorted(s.name for s in missing)}")

        self._last_status: Tuple[InteractionState, Optional[int]] = (self.state, self.selection)

    def tick(self, snapshot: DetectionSnapshot, t_now: float) -> InteractionState:
        """
        Advance the machine by one tick.

        Args:
            snapshot: Latest detection snapshot
            t_now: Current timestamp in seconds

        Returns:
            The state after this tick
        """
        self._handlers[self.state](snapshot, t_now)
        self._notify_status()
        return self.state

    def reset(self) -> None:
        """Return to IDLE from any state, dropping timers and selection."""
        if self.state is not S.IDLE:
            self._transition(S.IDLE)
        self._clear_timers()
        self.selection = None
        self.last_error = None
        self._set_progress(0.0)
        self._notify_status()

    # State handlers

    def _tick_idle(self, snapshot: DetectionSnapshot, t_now: float) -> None:
        if not (snapshot.hand_detected and snapshot.full_palm):
            # No partial credit survives a single bad tick
            self.wake_started_at = None
            self._set_progress(0.0)
            return

        if self.wake_started_at is None:
            self.wake_started_at = t_now

        elapsed = elapsed_ms(self.wake_started_at, t_now)
        wake_ms = self.cfg.interaction.wake_duration_ms
        self._set_progress(elapsed / wake_ms)

        if elapsed >= wake_ms:
            self._transition(S.SELECT_HOLD)
            self.wake_started_at = None
            self.select_started_at = None
            self.selection = None
            self._set_progress(0.0)

    def _tick_select_hold(self, snapshot: DetectionSnapshot, t_now: float) -> None:
        if not snapshot.hand_detected:
            last_seen = snapshot.last_hand_time
            grace_ms = self.cfg.interaction.grace_period_ms
            if last_seen is None or elapsed_ms(last_seen, t_now) > grace_ms:
                logger.info("👋 Hand lost beyond grace period")
                self._return_to_idle()
            else:
                self._set_progress(self.progress)
            return

        if not snapshot.gesture_valid:
            self._enter_error()
            return

        count = snapshot.finger_count
        if count is None or not MIN_SELECTION <= count <= MAX_SELECTION:
            # No dwell credit without a valid reading
            self.selection = None
            self.select_started_at = None
            self._set_progress(0.0)
            return

        if count != self.selection:
            # Switching targets forfeits prior progress
            self.selection = count
            self.select_started_at = t_now

        elapsed = elapsed_ms(self.select_started_at, t_now)
        select_ms = self.cfg.interaction.select_duration_ms
        self._set_progress(elapsed / select_ms)

        if elapsed >= select_ms:
            self._transition(S.CONFIRM)
            self.select_started_at = None
            self.confirm_started_at = t_now
            self._set_progress(0.0)

    def _tick_confirm(self, snapshot: DetectionSnapshot, t_now: float) -> None:
        # Finger count is not re-checked while confirming
        elapsed = elapsed_ms(self.confirm_started_at, t_now)
        confirm_ms = self.cfg.interaction.confirm_duration_ms
        self._set_progress(elapsed / confirm_ms)

        if elapsed >= confirm_ms:
            self._transition(S.ACTIVATED)
            self.confirm_started_at = None
            self._activate()
            self._set_progress(0.0)

    def _tick_activated(self, snapshot: DetectionSnapshot, t_now: float) -> None:
        # Terminal until reset()
        pass

    def _tick_error(self, snapshot: DetectionSnapshot, t_now: float) -> None:
        if not snapshot.hand_detected or snapshot.gesture_valid:
            self.last_error = None
            self._transition(S.IDLE)

    # Helpers

    def _transition(self, target: InteractionState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise InvalidTransitionError(self.state, target)
        logger.info(f"🔄 {self.state.name} -> {target.name} (selection={self.selection})")
        self.state = target

    def _return_to_idle(self) -> None:
        self._transition(S.IDLE)
        self._clear_timers()
        self.selection = None
        self._set_progress(0.0)

    def _enter_error(self) -> None:
        logger.warning(f"⚠️  Invalid gesture while selecting {self.selection}")
        self._transition(S.ERROR)
        self._clear_timers()
        self.selection = None
        self.last_error = INVALID_GESTURE
        self._set_progress(0.0)

    def _activate(self) -> None:
        self.activation_count += 1
        logger.info(f"✅ Activated option {self.selection}")
        if self.activation_sink is not None:
            self.activation_sink.on_activate(self.selection)

    def _clear_timers(self) -> None:
        self.wake_started_at = None
        self.select_started_at = None
        self.confirm_started_at = None

    def _set_progress(self, ratio: float) -> None:
        self.progress = min(max(ratio, 0.0), 1.0)
        if self.progress_sink is not None:
            self.progress_sink.on_progress(self.progress)

    def _notify_status(self) -> None:
        status = (self.state, self.selection)
        if status == self._last_status:
            return
        self._last_status = status
        if self.status_sink is not None:
            self.status_sink.on_state_change(self.state, self.selection)
