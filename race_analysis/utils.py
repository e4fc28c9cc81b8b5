"""
Utility Functions for Race Telemetry Lap Analysis

This module provides helper functions for numeric coercion, rounding, and
sorting used throughout the analysis pipeline.
"""

import re
import numbers
import numpy as np
from typing import List, Optional, Union


def is_number(value) -> bool:
    """
    Check whether a telemetry value is a usable finite number.

    Booleans are rejected even though they subclass int, and NaN/Inf are
    rejected because pandas uses NaN for empty CSV cells.

    Args:
        value: Any telemetry cell value.

    Returns:
        True if value is a real, finite number.
    """
    if isinstance(value, (bool, np.bool_)):
        return False
    if not isinstance(value, numbers.Real):
        return False
    return bool(np.isfinite(value))


def to_number(value) -> Optional[float]:
    """
    Return value as a float if it is a usable number, otherwise None.

    Args:
        value: Any telemetry cell value.

    Returns:
        Float value, or None for missing, non-numeric, NaN or Inf values.
    """
    if not is_number(value):
        return None
    return float(value)


def round_float(value, digits: int = 3) -> Optional[float]:
    """
    Round a float value, handling None, NaN, and Inf.

    Args:
        value: Value to round.
        digits: Number of decimal places. Default 3.

    Returns:
        Rounded float, or None if value is None, NaN, or Inf.
    """
    if value is None or (isinstance(value, float) and (np.isnan(value) or np.isinf(value))):
        return None
    return round(float(value), digits)


def natural_sort_key(text: str) -> List[Union[int, str]]:
    """
    Build a case-insensitive sort key that orders embedded numbers numerically.

    "Channel 2" sorts before "Channel 10".
    """
    return [
        int(part) if part.isdigit() else part.lower()
        for part in re.split(r"(\d+)", text)
    ]
