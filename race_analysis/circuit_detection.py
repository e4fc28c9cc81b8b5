"""
Circuit Detection for Race Telemetry Lap Analysis

This module matches a GPS trace to a known circuit by comparing the trace
centroid against each circuit's center point.
"""

import logging
import numpy as np
from typing import Optional, Sequence
from . import constants
from .circuits import CircuitRegistry, default_registry
from .geometry import GeoPoint, haversine_m

logger = logging.getLogger(__name__)


def compute_centroid(points: Sequence[GeoPoint]) -> Optional[GeoPoint]:
    """
    Compute the unweighted mean position of a point set.

    Args:
        points: GPS points (already range-validated).

    Returns:
        Centroid as a GeoPoint, or None if points is empty.
    """
    if len(points) == 0:
        return None
    coords = np.asarray(points, dtype=float)
    lat, lon = coords.mean(axis=0)
    return GeoPoint(float(lat), float(lon))


def detect_circuit(points: Sequence[GeoPoint],
                   registry: Optional[CircuitRegistry] = None,
                   max_distance_m: float = constants.CIRCUIT_MATCH_RADIUS_M) -> Optional[str]:
    """
    Identify which known circuit a GPS trace was recorded at.

    The nearest circuit center to the trace centroid wins, but only if it is
    strictly closer than max_distance_m. Equidistant circuits resolve to the
    first one in registry order.

    Args:
        points: GPS points of the session.
        registry: Circuits to match against. Defaults to the built-in set.
        max_distance_m: Acceptance radius in meters. Default 5000.

    Returns:
        Name of the matched circuit, or None if points is empty or no circuit
        is within range.
    """
    centroid = compute_centroid(points)
    if centroid is None:
        return None

    if registry is None:
        registry = default_registry()

    best_name = None
    best_distance = np.inf

    for circuit in registry:
        distance = haversine_m(centroid, circuit.center)
        if distance < best_distance:
            best_name = circuit.name
            best_distance = distance

    if best_name is None or best_distance >= max_distance_m:
        logger.debug("No circuit within %.0f m of centroid %s", max_distance_m, centroid)
        return None

    logger.debug("Matched circuit %s (%.1f m from centroid)", best_name, best_distance)
    return best_name
