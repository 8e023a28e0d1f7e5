"""
Light timer fade engine.

A timer window has four boundaries on the 24-hour clock:

    fadeIn -> peakStart -> peakEnd -> fadeOut

Between fadeIn and peakStart the color ramps up from black, between
peakStart and peakEnd it is held at full color, and between peakEnd and
fadeOut it ramps back down. All intervals are cyclic (mod 1440 minutes),
so windows may span midnight.

Windows are checked in stored order and the first one containing "now"
decides the output. No match means the timer has no opinion (None).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lightsync.color import RGBColor
from lightsync.config import DEFAULT_BRIGHTNESS
from lightsync.lighting_math import cyclic_elapsed, round_half_up, time_to_minutes

TIME_PATTERN = r"^([01]?\d|2[0-3]):[0-5]\d$"
HEX_COLOR_PATTERN = r"^#?[0-9A-Fa-f]{6}$"


# ============================================================================
# Data Structures
# ============================================================================

class TimerWindow(BaseModel):
    """Single fade-in / peak / fade-out window."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    fade_in: str = Field(..., alias="fadeIn", pattern=TIME_PATTERN, description="Fade-in start (HH:MM)")
    peak_start: str = Field(..., alias="peakStart", pattern=TIME_PATTERN, description="Full color from (HH:MM)")
    peak_end: str = Field(..., alias="peakEnd", pattern=TIME_PATTERN, description="Full color until (HH:MM)")
    fade_out: str = Field(..., alias="fadeOut", pattern=TIME_PATTERN, description="Fade-out end (HH:MM)")
    color: str = Field(..., pattern=HEX_COLOR_PATTERN, description="Target color (#RRGGBB)")


class TimerConfig(BaseModel):
    """Ordered timer windows plus the master enable flag."""
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    windows: list[TimerWindow] = Field(default_factory=list)

    @classmethod
    def from_settings(cls, timers: dict[str, Any]) -> "TimerConfig":
        """
        Build from a stored timers block.

        Args:
            timers: {"lightTimerEnabled": bool, "lightTimers": [...], ...}

        Raises:
            pydantic.ValidationError: If a stored window is malformed
        """
        windows = timers.get("lightTimers")
        if not isinstance(windows, list):
            windows = []
        return cls(enabled=bool(timers.get("lightTimerEnabled")), windows=windows)


class TimerPhase(str, Enum):
    FADE_IN = "fade_in"
    PEAK = "peak"
    FADE_OUT = "fade_out"


@dataclass(frozen=True)
class WindowState:
    """Where "now" falls inside a window and how much of the color to emit."""
    phase: TimerPhase
    factor: float


@dataclass(frozen=True)
class ActiveWindow:
    index: int
    window: TimerWindow
    state: WindowState


# ============================================================================
# Classification
# ============================================================================

def in_peak(now: int, peak_start: int, peak_end: int) -> bool:
    """True if now lies in [peak_start, peak_end), wrapping at midnight."""
    if peak_start <= peak_end:
        return peak_start <= now < peak_end
    return now >= peak_start or now < peak_end


def classify(now: int, window: TimerWindow) -> WindowState | None:
    """
    Classify a minute of day against one window.

    Fade-in is checked first, then peak, then fade-out. A zero-length fade
    phase is never entered.

    Args:
        now: Minutes since midnight
        window: Timer window to test

    Returns:
        WindowState, or None if now is outside the window
    """
    fade_in = time_to_minutes(window.fade_in)
    peak_start = time_to_minutes(window.peak_start)
    peak_end = time_to_minutes(window.peak_end)
    fade_out = time_to_minutes(window.fade_out)

    fade_in_duration = cyclic_elapsed(peak_start, fade_in)
    fade_in_elapsed = cyclic_elapsed(now, fade_in)
    if fade_in_elapsed < fade_in_duration:
        return WindowState(TimerPhase.FADE_IN, fade_in_elapsed / fade_in_duration)

    if in_peak(now, peak_start, peak_end):
        return WindowState(TimerPhase.PEAK, 1.0)

    fade_out_duration = cyclic_elapsed(fade_out, peak_end)
    fade_out_elapsed = cyclic_elapsed(now, peak_end)
    if fade_out_elapsed < fade_out_duration:
        return WindowState(TimerPhase.FADE_OUT, 1 - fade_out_elapsed / fade_out_duration)

    return None


def find_active_window(now: int, config: TimerConfig) -> ActiveWindow | None:
    """First window (in stored order) that contains now."""
    for index, window in enumerate(config.windows):
        state = classify(now, window)
        if state is not None:
            return ActiveWindow(index=index, window=window, state=state)
    return None


# ============================================================================
# Color
# ============================================================================

def compute_timer_color(
    now: int,
    config: TimerConfig,
    brightness: int | None = None,
) -> RGBColor | None:
    """
    Compute the light timer color for a minute of day.

    Args:
        now: Minutes since midnight
        config: Timer configuration (read only)
        brightness: Brightness 0-255 (None = full brightness)

    Returns:
        Faded/peak RGBColor, or None if the timer is disabled, has no
        windows, or no window is active
    """
    if not config.enabled or not config.windows:
        return None

    active = find_active_window(now, config)
    if active is None:
        return None

    if brightness is None:
        brightness = DEFAULT_BRIGHTNESS

    target = RGBColor.from_hex(active.window.color)
    factor = active.state.factor

    return RGBColor.from_channels(
        *(round_half_up(channel * factor * brightness / 255) for channel in target.as_tuple())
    )
