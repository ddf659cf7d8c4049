"""
Timestamp utility functions for subtitle timecodes.

SRT uses a comma before the milliseconds, WebVTT a dot; both allow the
hour field to be omitted.
"""

from typing import Optional


def timecode_to_seconds(hours: Optional[str], minutes: str, seconds: str, millis: str) -> float:
    """
    Convert the captured parts of a timecode to seconds (float).

    Examples:
        (None, "00", "01", "000") -> 1.0
        ("01", "30", "45", "123") -> 5445.123
    """
    hours_value = int(hours) if hours else 0
    return hours_value * 3600 + int(minutes) * 60 + int(seconds) + int(millis) / 1000
