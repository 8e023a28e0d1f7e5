"""
Auto-daylight color curve.

Maps time of day onto a sunrise -> noon -> sunset gradient:

    06:00  sunrise (255, 150, 50)
    12:00  noon    (255, 255, 255)
    18:00  sunset  (255, 100, 100)

Outside 06:00-18:00 a fixed night color (20, 20, 60) is used.
Between those points the curve follows intensity = sin(angle), where the
angle sweeps 0 -> 180 degrees across the 12-hour day, so intensity rises
0 -> 1 -> 0 and peaks at noon. Before noon intensity pulls sunrise toward
noon; after noon (1 - intensity) pulls noon toward sunset.

Every result, night included, is scaled by the user's brightness.
"""

import math
from datetime import datetime

from lightsync.color import NIGHT_COLOR, NOON_COLOR, SUNRISE_COLOR, SUNSET_COLOR, RGBColor
from lightsync.config import DEFAULT_BRIGHTNESS
from lightsync.lighting_math import lerp, minutes_since_midnight, round_half_up
from lightsync.logger import logger

DAY_START_HOUR = 6.0
NOON_HOUR = 12.0
DAY_END_HOUR = 18.0


def daylight_intensity(hour: float) -> float:
    """
    Sine hump over the daylight window.

    Args:
        hour: Fractional hour within [6, 18)

    Returns:
        0.0 at 06:00, 1.0 at 12:00, approaching 0.0 toward 18:00
    """
    angle_deg = (hour - DAY_START_HOUR) / (DAY_END_HOUR - DAY_START_HOUR) * 180
    angle_rad = angle_deg * math.pi / 180
    return math.sin(angle_rad)


def compute_daylight_color(minutes_of_day: float, brightness: int | None = None) -> RGBColor:
    """
    Compute the ambient color for a time of day.

    Args:
        minutes_of_day: Minutes since midnight (0-1439)
        brightness: Brightness 0-255 (None = full brightness)

    Returns:
        RGBColor scaled by brightness
    """
    if brightness is None:
        brightness = DEFAULT_BRIGHTNESS

    hour = minutes_of_day / 60

    if hour < DAY_START_HOUR or hour >= DAY_END_HOUR:
        return NIGHT_COLOR.scaled(brightness)

    intensity = daylight_intensity(hour)

    if hour < NOON_HOUR:
        channels = [
            lerp(start, end, intensity)
            for start, end in zip(SUNRISE_COLOR.as_tuple(), NOON_COLOR.as_tuple())
        ]
    else:
        channels = [
            noon - (1 - intensity) * (noon - sunset)
            for noon, sunset in zip(NOON_COLOR.as_tuple(), SUNSET_COLOR.as_tuple())
        ]

    color = RGBColor.from_channels(*(round_half_up(c) for c in channels))
    return color.scaled(brightness)


def daylight_color_at(moment: datetime, brightness: int | None = None) -> RGBColor:
    """Daylight color for the wall-clock time of a datetime."""
    minutes = minutes_since_midnight(moment)
    color = compute_daylight_color(minutes, brightness)
    logger.debug(f"Daylight color at {moment:%H:%M} (brightness={brightness}): {color.as_tuple()}")
    return color
