"""
Mock feedback sink that prints progress, state and activations instead of
driving a real UI.
"""
import logging
from typing import Optional

from .types import InteractionState

logger = logging.getLogger(__name__)


class MockFeedback:
    """Console feedback implementing the progress, activation and status sinks."""
    
    def __init__(self, verbose_progress: bool = False):
        """Initialize the mock feedback."""
        self.verbose_progress = verbose_progress
        self.progress = 0.0
        self.state = InteractionState.IDLE
        self.selection: Optional[int] = None
        self.progress_count = 0
        self.activation_count = 0
        self.last_activation: Optional[int] = None
    
    def on_progress(self, ratio: float) -> None:
        """Remember the latest dwell ratio."""
        self.progress_count += 1
        self.progress = ratio
        if self.verbose_progress:
            print(f"[MockFeedback] Progress: {ratio:.0%}")
    
    def on_activate(self, selection: int) -> None:
        """Print the activation instead of vibrating or navigating."""
        self.activation_count += 1
        self.last_activation = selection
        print(f"[MockFeedback] Activated: option {selection} (call #{self.activation_count})")
    
    def on_state_change(self, state: InteractionState, selection: Optional[int]) -> None:
        """Log the state label shown to the user."""
        self.state = state
        self.selection = selection
        logger.info(f"STATE: {state.name} selection={selection}")
    
    def reset_counters(self) -> None:
        """Reset call counters for testing."""
        self.progress_count = 0
        self.activation_count = 0
        self.last_activation = None
