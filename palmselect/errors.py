"""
Exceptions raised by the dwell-selection system.
"""


class ConfigError(ValueError):
    """Configuration value is missing or out of range."""


class InvalidTransitionError(RuntimeError):
    """State machine attempted a transition not present in its table."""

    def __init__(self, source, target):
        super().__init__(f"Transition {source.name} -> {target.name} is not allowed")
        self.source = source
        self.target = target
