"""
Per-user light settings stored in UserRecord.settings.

Layout of the settings dict:

    {
        "r": 255, "g": 128, "b": 0, "brightness": 200, "filter": "...",
        "autoDaylight": false,
        "timers": {
            "lightTimerEnabled": true,
            "co2TimerEnabled": false,
            "lightTimers": [{"fadeIn": "06:00", ...}],
            "co2Timers": [...]
        }
    }

Auto-daylight and the light timer both drive the same output, so turning
auto-daylight on switches an enabled light timer off. Callers get told when
that happened so they can show a notice.
"""

from typing import Any, Optional

from lightsync.config import DEFAULT_BRIGHTNESS
from lightsync.light_timer import TimerConfig, TimerWindow
from lightsync.logger import logger

LIGHT_SETTING_KEYS = ("r", "g", "b", "brightness", "filter")


def read_brightness(settings: dict[str, Any]) -> int:
    """Stored brightness, or full brightness when missing or zero."""
    return settings.get("brightness") or DEFAULT_BRIGHTNESS


def merge_light_settings(settings: dict[str, Any], updates: dict[str, Any]) -> None:
    """
    Merge manual color fields into settings.

    Only r, g, b, brightness and filter are taken from updates; everything
    else in settings (timers, autoDaylight) is left alone.
    """
    for key in LIGHT_SETTING_KEYS:
        if key in updates:
            settings[key] = updates[key]


def disable_light_timer_for_daylight(settings: dict[str, Any]) -> bool:
    """
    Switch off the light timer if auto-daylight is on.

    Returns:
        True if an enabled light timer was switched off
    """
    if settings.get("autoDaylight") is not True:
        return False

    timers = settings.setdefault("timers", {})
    if timers.get("lightTimerEnabled") is True:
        timers["lightTimerEnabled"] = False
        logger.info("Light timer disabled because auto-daylight is enabled")
        return True

    return False


def set_auto_daylight(settings: dict[str, Any], enabled: bool) -> bool:
    """
    Store the auto-daylight flag.

    Args:
        settings: User settings (modified in place)
        enabled: New auto-daylight state

    Returns:
        True if enabling auto-daylight forced the light timer off
    """
    settings["autoDaylight"] = enabled
    return disable_light_timer_for_daylight(settings)


def save_timer_settings(
    settings: dict[str, Any],
    *,
    auto_daylight: Optional[bool],
    light_timer_enabled: Optional[bool],
    co2_timer_enabled: Optional[bool],
    light_timers: Optional[list[TimerWindow]],
    co2_timers: Optional[list[dict[str, Any]]],
) -> bool:
    """
    Replace the timers block and optionally the auto-daylight flag.

    A non-bool auto_daylight keeps the stored flag (default False). The
    light timer is only forced off when this save turns auto-daylight on.

    Returns:
        True if the light timer was forced off by auto-daylight
    """
    if isinstance(auto_daylight, bool):
        settings["autoDaylight"] = auto_daylight
    else:
        settings["autoDaylight"] = settings.get("autoDaylight") or False

    timers = settings.setdefault("timers", {})
    timers["lightTimerEnabled"] = light_timer_enabled
    timers["co2TimerEnabled"] = co2_timer_enabled
    timers["lightTimers"] = (
        [window.model_dump(by_alias=True) for window in light_timers]
        if light_timers is not None else None
    )
    timers["co2Timers"] = co2_timers

    if auto_daylight is not True:
        return False
    return disable_light_timer_for_daylight(settings)


def timer_config_for(settings: dict[str, Any]) -> Optional[TimerConfig]:
    """
    Timer engine configuration from stored settings.

    Returns:
        TimerConfig, or None if the user has no timers block

    Raises:
        pydantic.ValidationError: If stored windows are malformed
    """
    timers = settings.get("timers")
    if not timers:
        return None
    return TimerConfig.from_settings(timers)
