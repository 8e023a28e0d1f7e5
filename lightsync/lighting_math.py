"""
Time-of-day and channel arithmetic shared by the color engines.

Times are minutes since midnight in [0, 1440) and wrap at midnight.
"""

import math
from datetime import datetime

MINUTES_PER_DAY = 1440


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation."""
    return a + (b - a) * t


def round_half_up(x: float) -> int:
    """Round to nearest integer, .5 rounds up (127.5 -> 128)."""
    return math.floor(x + 0.5)


def clamp_channel(value: float) -> int:
    """Clamp a color channel to the valid 0-255 range."""
    return max(0, min(255, int(value)))


def scale_brightness(channel: float, brightness: int) -> int:
    """
    Scale a color channel by brightness.

    Args:
        channel: Channel value (0-255, may be fractional)
        brightness: Brightness level (0-255)

    Returns:
        round(channel * brightness / 255), clamped to 0-255
    """
    return clamp_channel(round_half_up(channel * brightness / 255))


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    """
    Parse "#RRGGBB" (leading '#' optional) into an (r, g, b) tuple.

    Raises:
        ValueError: If the digits are not valid hexadecimal
    """
    packed = int(value.replace("#", ""), 16)
    return (packed >> 16) & 255, (packed >> 8) & 255, packed & 255


def time_to_minutes(value: str) -> int:
    """Convert "HH:MM" (24-hour) to minutes since midnight."""
    hours, minutes = (int(part) for part in value.split(":"))
    return hours * 60 + minutes


def minutes_since_midnight(moment: datetime) -> int:
    """Wall-clock minute of day for a datetime (seconds are ignored)."""
    return moment.hour * 60 + moment.minute


def cyclic_elapsed(now: int, start: int) -> int:
    """
    Minutes from start forward to now, wrapping at midnight.

    Also used for cyclic durations: cyclic_elapsed(end, start).
    A zero-length interval yields 0, never a negative value.
    """
    return (now - start + MINUTES_PER_DAY) % MINUTES_PER_DAY
