"""
Geographic Geometry for Race Telemetry Lap Analysis

This module provides great-circle distance and start/finish line proximity
tests on latitude/longitude coordinates.
"""

import numpy as np
from typing import NamedTuple
from . import constants
from . import utils


class GeoPoint(NamedTuple):
    """A latitude/longitude pair in degrees."""

    lat: float
    lon: float


def is_valid_point(lat, lon) -> bool:
    """
    Check that a coordinate pair is numeric and within geographic range.

    Args:
        lat: Latitude value in degrees.
        lon: Longitude value in degrees.

    Returns:
        True if -90 <= lat <= 90 and -180 <= lon <= 180.
    """
    if not (utils.is_number(lat) and utils.is_number(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    Uses the Haversine formula to compute distance along the surface of a
    sphere. Coordinates are not range-checked here.

    Args:
        a: First point.
        b: Second point.

    Returns:
        Distance in meters between the two points.
    """
    lat1_rad, lon1_rad = np.deg2rad(a[0]), np.deg2rad(a[1])
    lat2_rad, lon2_rad = np.deg2rad(b[0]), np.deg2rad(b[1])

    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad

    h = np.sin(dlat / 2) ** 2 + np.cos(lat1_rad) * np.cos(lat2_rad) * np.sin(dlon / 2) ** 2
    c = 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))

    return float(constants.EARTH_RADIUS_M * c)


def latlon_to_xy(point: GeoPoint, ref: GeoPoint) -> np.ndarray:
    """
    Convert a point to local Cartesian coordinates around a reference point.

    Uses a simple equirectangular projection approximation: longitude offsets
    are scaled by the cosine of the reference latitude. Only distances between
    nearby points (tens of meters) are meaningful.

    Args:
        point: Point to project.
        ref: Origin of the local frame.

    Returns:
        Array of (x, y) in meters, where x is east and y is north.
    """
    x = (point[1] - ref[1]) * constants.METERS_PER_DEGREE * np.cos(np.deg2rad(ref[0]))
    y = (point[0] - ref[0]) * constants.METERS_PER_DEGREE
    return np.array([x, y], dtype=float)


def distance_to_segment_m(p: GeoPoint, seg_start: GeoPoint, seg_end: GeoPoint) -> float:
    """
    Distance in meters from a point to a short line segment.

    The projection parameter is clamped to [0, 1], so the nearest point is
    always on the segment. A zero-length segment degrades to a point distance.

    Args:
        p: Point to test.
        seg_start: First end of the segment.
        seg_end: Second end of the segment.

    Returns:
        Approximate distance in meters.
    """
    pm = latlon_to_xy(p, seg_start)
    am = latlon_to_xy(seg_start, seg_start)
    bm = latlon_to_xy(seg_end, seg_start)

    ap = pm - am
    ab = bm - am
    len_sq = float(np.dot(ab, ab))

    if len_sq == 0:
        return float(np.hypot(*ap))

    t = np.clip(np.dot(ap, ab) / len_sq, 0.0, 1.0)
    nearest = am + t * ab
    return float(np.hypot(*(pm - nearest)))


def is_point_near_segment(p: GeoPoint, seg_start: GeoPoint, seg_end: GeoPoint,
                          threshold_m: float = constants.START_FINISH_THRESHOLD_M) -> bool:
    """
    Check if a point lies within threshold_m of a start/finish line segment.

    Points with a missing or non-numeric coordinate are never near the line.

    Args:
        p: Point to test.
        seg_start: First end of the segment.
        seg_end: Second end of the segment.
        threshold_m: Maximum distance in meters. Default 10.

    Returns:
        True if the point-to-segment distance is <= threshold_m.
    """
    if not (utils.is_number(p[0]) and utils.is_number(p[1])):
        return False
    return distance_to_segment_m(p, seg_start, seg_end) <= threshold_m
