"""
Column Discovery for Race Telemetry Lap Analysis

Logger exports name their channels freely ("GPS Latitude", "Lat (deg)",
"Speed (mph)", ...). This module resolves which headers hold latitude,
longitude, time and speed once per session, into an explicit mapping that
callers can inspect and override, and extracts validated GPS points.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Mapping, Optional, Sequence
from . import constants
from . import utils
from .geometry import GeoPoint, is_valid_point

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnMapping:
    """Header names for the channels the lap engine needs."""

    lat: Optional[str] = None
    lon: Optional[str] = None
    time: Optional[str] = None
    speed: Optional[str] = None

    @property
    def has_gps(self) -> bool:
        return self.lat is not None and self.lon is not None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"lat": self.lat, "lon": self.lon, "time": self.time, "speed": self.speed}


def _find_header(headers: Iterable[str], aliases: Sequence[str],
                 first_row: Optional[Mapping] = None,
                 exact: Sequence[str] = ()) -> Optional[str]:
    """
    Return the first header matching any alias as a case-insensitive substring.

    When first_row is given, only headers whose first value is numeric qualify.
    """
    for header in headers:
        lowered = str(header).lower()
        if not (any(alias in lowered for alias in aliases) or lowered in exact):
            continue
        if first_row is not None and not utils.is_number(first_row.get(header)):
            continue
        return header
    return None


def find_speed_key(headers: Iterable[str]) -> Optional[str]:
    """
    Find a speed-like channel by name.

    Args:
        headers: Channel names to search, in order.

    Returns:
        First header containing "speed" or "velocity" (or named "spd"),
        or None if no header matches.
    """
    return _find_header(headers, constants.SPEED_ALIASES, exact=constants.SPEED_EXACT_NAMES)


def resolve_columns(samples: Sequence[Mapping],
                    overrides: Optional[Mapping[str, Optional[str]]] = None) -> ColumnMapping:
    """
    Build a ColumnMapping from the headers of the first sample.

    Latitude and longitude must hold a numeric value in the first row to be
    picked; time and speed are matched by name only. Overrides replace the
    discovered value for each key they contain ("lat", "lon", "time", "speed").

    Args:
        samples: Parsed telemetry rows.
        overrides: Optional explicit header names.

    Returns:
        The resolved ColumnMapping. Fields are None where nothing matched.
    """
    mapping = ColumnMapping()

    if samples:
        first_row = samples[0]
        headers = list(first_row.keys())
        mapping = ColumnMapping(
            lat=_find_header(headers, constants.LAT_ALIASES, first_row),
            lon=_find_header(headers, constants.LON_ALIASES, first_row),
            time=_find_header(headers, constants.TIME_ALIASES),
            speed=find_speed_key(headers),
        )

    if overrides:
        unknown = set(overrides) - {"lat", "lon", "time", "speed"}
        if unknown:
            raise ValueError(f"Unknown column override(s): {sorted(unknown)}")
        mapping = replace(mapping, **overrides)

    logger.debug("Resolved columns: %s", mapping)
    return mapping


def extract_gps_points(samples: Sequence[Mapping], columns: ColumnMapping) -> List[GeoPoint]:
    """
    Extract in-range GPS points from telemetry rows.

    Rows with missing, non-numeric or out-of-range coordinates are skipped.

    Args:
        samples: Parsed telemetry rows.
        columns: Resolved column mapping.

    Returns:
        List of GeoPoint in sample order. Empty if the mapping has no GPS.
    """
    if not columns.has_gps:
        return []

    points = []
    for row in samples:
        lat, lon = row.get(columns.lat), row.get(columns.lon)
        if is_valid_point(lat, lon):
            points.append(GeoPoint(float(lat), float(lon)))

    skipped = len(samples) - len(points)
    if skipped:
        logger.debug("Skipped %d rows without a valid GPS fix", skipped)
    return points


def available_channels(samples: Sequence[Mapping]) -> List[str]:
    """
    List numeric channels suitable for charting.

    Exact coordinate headers ("lat", "Longitude", ...) are excluded, named GPS
    channels such as "GPS Speed" are kept.

    Args:
        samples: Parsed telemetry rows.

    Returns:
        Channel names sorted with numbers in natural order.
    """
    if not samples:
        return []

    first_row = samples[0]
    channels = [
        key for key in first_row
        if utils.is_number(first_row[key]) and str(key).lower() not in constants.GPS_EXACT_NAMES
    ]
    return sorted(channels, key=lambda key: utils.natural_sort_key(str(key)))
