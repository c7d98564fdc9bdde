"""
Time helpers shared by the stability filter and the state machine.
"""


def elapsed_ms(since: float, t_now: float) -> float:
    """
    Milliseconds between two timestamps given in seconds.

    Rounded to a microsecond so that float subtraction noise cannot push an
    exact dwell boundary (e.g. 1.8s after start) just below its threshold.
    """
    return round((t_now - since) * 1000.0, 3)
