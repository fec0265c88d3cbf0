"""
Conversion between absolute end times and stored remaining durations.

Saving converts `end_time` into the time left at `now`; loading adds the
stored time left onto the new clock's `now`. Wall-clock alignment is lost,
remaining time is not.
"""


def remaining_from_end(end_time: float, now: float) -> float:
    """Time left until `end_time`, never negative."""
    return max(0.0, end_time - now)


def end_from_remaining(remaining: float, now: float) -> float:
    """Absolute end time for a duration that has `remaining` seconds left."""
    return remaining + now


def is_running(end_time: float, now: float) -> bool:
    """True while a timer still has time left and is worth persisting."""
    return remaining_from_end(end_time, now) > 0
