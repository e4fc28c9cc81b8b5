"""Shared fixtures and synthetic telemetry traces."""

from __future__ import annotations

import math

import pytest

from race_analysis.circuits import Circuit, CircuitRegistry, default_registry
from race_analysis.geometry import GeoPoint

LAGUNA_START = GeoPoint(36.5844, -121.7536)

# Circle of ~300 m radius whose northernmost point is the Laguna Seca
# start/finish line; consecutive samples are ~19 m apart at 100 samples/lap.
_RADIUS_DEG = 0.0027


def circle_point(fraction: float, start: GeoPoint = LAGUNA_START) -> GeoPoint:
    """Point at fraction (0..1) of the way around the test circle."""
    center_lat = start.lat - _RADIUS_DEG
    r_lon = _RADIUS_DEG / math.cos(math.radians(center_lat))
    theta = 2 * math.pi * fraction
    return GeoPoint(center_lat + _RADIUS_DEG * math.cos(theta),
                    start.lon + r_lon * math.sin(theta))


def make_circle_session(
    lap_dts: tuple[float, ...] = (1.0, 0.95, 0.98),
    samples_per_lap: int = 100,
    extra_samples: int = 20,
) -> list[dict]:
    """Laps around the test circle with a time, speed and throttle channel.

    lap_dts gives the sample interval of each lap in seconds; extra_samples
    are driven after the last full lap at the last lap's pace.
    """
    samples = []
    t = 0.0
    total = len(lap_dts) * samples_per_lap + extra_samples
    for idx in range(total):
        lap = min(idx // samples_per_lap, len(lap_dts) - 1)
        dt = lap_dts[lap]
        point = circle_point((idx % samples_per_lap) / samples_per_lap)
        samples.append({
            "Time (s)": round(t, 3),
            "Latitude": point.lat,
            "Longitude": point.lon,
            "Speed (km/h)": round(19.0 / dt * 3.6, 2),
            "Throttle (%)": 100 if idx % 10 else 40,
            "RPM": 6000 + idx % 7,
        })
        t += dt
    return samples


def make_hit_trace(n: int, hits: list[int], start: GeoPoint = LAGUNA_START) -> list[dict]:
    """Trace that sits ~110 m south of the line except at the hit indices."""
    away = GeoPoint(start.lat - 0.001, start.lon)
    return [
        {"lat": start.lat if idx in hits else away.lat,
         "lon": start.lon if idx in hits else away.lon,
         "time": float(idx)}
        for idx in range(n)
    ]


@pytest.fixture
def laguna() -> Circuit:
    return default_registry()["Laguna Seca"]


@pytest.fixture
def circle_session() -> list[dict]:
    return make_circle_session()


@pytest.fixture
def single_circuit_registry() -> CircuitRegistry:
    start = GeoPoint(45.0, 7.0)
    return CircuitRegistry([
        Circuit("Test Ring", start, (start, GeoPoint(45.0003, 6.9997)), zoom=16),
    ])
