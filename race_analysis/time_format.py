"""
Lap Time Units and Formatting for Race Telemetry Lap Analysis

Logger exports record time either in seconds or in milliseconds. This module
guesses the unit of a set of lap times from their magnitude, normalizes them
to milliseconds, and formats durations and deltas as M:SS.mmm strings.
"""

import math
from enum import Enum
from typing import List, Optional, Sequence, Tuple
from . import constants


class TimeUnit(str, Enum):
    """Unit of a collection of lap time values."""

    SECONDS = "seconds"
    MILLISECONDS = "milliseconds"
    UNKNOWN = "unknown"


def detect_time_unit(values: Sequence[float]) -> TimeUnit:
    """
    Guess whether lap times are in seconds or milliseconds.

    A mean between 60 and 600 reads as seconds (1 to 10 minute laps), a mean
    between 60000 and 600000 as milliseconds. Anything else is ambiguous.

    Args:
        values: Lap time values.

    Returns:
        The detected TimeUnit; UNKNOWN for empty or ambiguous input.
    """
    if len(values) == 0:
        return TimeUnit.UNKNOWN

    mean = sum(values) / len(values)
    low, high = constants.SECONDS_RANGE
    if low <= mean <= high:
        return TimeUnit.SECONDS
    low, high = constants.MILLISECONDS_RANGE
    if low <= mean <= high:
        return TimeUnit.MILLISECONDS
    return TimeUnit.UNKNOWN


def normalize_to_milliseconds(value: float, unit: TimeUnit) -> float:
    """Convert value to milliseconds; only SECONDS values are scaled."""
    if unit == TimeUnit.SECONDS:
        return value * 1000
    return value


def normalize_lap_times(lap_times: Sequence[Optional[float]]) -> Tuple[TimeUnit, List[Optional[float]]]:
    """
    Detect the unit of a session's lap times and convert them to milliseconds.

    Unknown lap times (None) are ignored for detection and stay None. With an
    UNKNOWN unit the values are returned unchanged.

    Args:
        lap_times: Lap time per lap, None where unknown.

    Returns:
        Tuple of (detected unit, normalized lap times).
    """
    known = [t for t in lap_times if t is not None]
    unit = detect_time_unit(known)
    normalized = [
        None if t is None else normalize_to_milliseconds(t, unit)
        for t in lap_times
    ]
    return unit, normalized


def format_lap_time(ms: float) -> str:
    """
    Format milliseconds as M:SS.mmm (e.g. 83456 -> "1:23.456").

    Negative durations render as "0:00.000". Sub-millisecond digits are
    truncated after rounding away float noise, so 127999.99999999999 reads
    as 2:08.000.
    """
    if ms < 0:
        return "0:00.000"

    total_ms = math.floor(round(ms, 6))
    minutes, rem = divmod(total_ms, 60000)
    seconds, millis = divmod(rem, 1000)
    return f"{minutes}:{seconds:02d}.{millis:03d}"


def format_time_difference(diff_ms: float) -> str:
    """Format a lap time delta in milliseconds with a leading "+" or "-"."""
    prefix = "+" if diff_ms >= 0 else "-"
    return f"{prefix}{format_lap_time(abs(diff_ms))}"


def format_time_auto(value: float, unit: str = "auto") -> str:
    """
    Format a lap time whose unit may not be known.

    Args:
        value: Lap time.
        unit: "seconds", "milliseconds", or "auto". With "auto", values in
              the 60-600 range are taken as seconds and everything else as
              milliseconds.

    Returns:
        Formatted M:SS.mmm string.
    """
    if unit == "auto":
        low, high = constants.SECONDS_RANGE
        if low <= value <= high:
            value = value * 1000
    elif unit == "seconds":
        value = value * 1000
    elif unit != "milliseconds":
        raise ValueError(f"Unknown time unit: {unit}")
    return format_lap_time(value)
