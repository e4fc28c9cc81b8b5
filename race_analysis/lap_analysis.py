"""
Lap Analysis for Race Telemetry Lap Analysis

This module handles lap detection (start/finish line crossings, or a fixed
three-way split when no circuit is known), lap comparison, the theoretical
best lap estimate, sector splits, and channel resampling for lap overlays.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence
from . import constants
from . import utils
from .circuits import Circuit
from .geometry import GeoPoint, haversine_m, is_point_near_segment, is_valid_point
from .lap_metrics import LapData, LapSegment, build_lap_data

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LapComparison:
    """Lap time difference of one lap against a base lap."""

    lap_number: int
    base_lap_number: int
    time_diff: float
    percentage: float


@dataclass(frozen=True)
class TheoreticalBest:
    """Estimated fastest achievable lap, derived from the best real lap."""

    time: float
    improvement: float
    base_lap_number: int


@dataclass(frozen=True)
class SectorSplit:
    """Timing of one equal-distance sector within a lap."""

    sector_number: int
    start_index: int
    end_index: int
    distance_m: float
    time: Optional[float]


def fallback_segments(sample_count: int,
                      lap_count: int = constants.FALLBACK_LAP_COUNT) -> List[LapSegment]:
    """
    Split a session into equal pseudo-laps when no circuit is known.

    Each chunk is sample_count // lap_count samples long; the last chunk ends
    at sample_count - 1. Empty chunks are skipped, so fewer than lap_count
    samples yields no laps.

    Args:
        sample_count: Number of samples in the session.
        lap_count: Number of chunks. Default 3.

    Returns:
        List of LapSegment numbered 1..lap_count.
    """
    size = sample_count // lap_count
    segments = []
    lap_number = 1

    for i in range(lap_count):
        start_idx = i * size
        end_idx = min((i + 1) * size, sample_count - 1)
        if end_idx - start_idx > 0:
            segments.append(LapSegment(lap_number, start_idx, end_idx))
            lap_number += 1

    return segments


def gps_segments(samples: Sequence[Mapping], circuit: Circuit, lat_key: Optional[str],
                 lon_key: Optional[str],
                 min_lap_samples: int = constants.MIN_LAP_SAMPLES,
                 threshold_m: float = constants.START_FINISH_THRESHOLD_M) -> List[LapSegment]:
    """
    Segment a session into laps at start/finish line crossings.

    A sample within threshold_m of the start/finish line closes the current
    lap only if more than min_lap_samples samples have passed since the lap
    started, which ignores repeated hits while the car sits near the line.
    The remainder after the last crossing becomes a final lap ending at the
    last index when it is longer than min_lap_samples; otherwise it is
    dropped as a partial lap.

    Args:
        samples: Parsed telemetry rows.
        circuit: Circuit whose start/finish line is used.
        lat_key: Latitude channel name.
        lon_key: Longitude channel name.
        min_lap_samples: Minimum samples per lap. Default 30.
        threshold_m: Start/finish proximity in meters. Default 10.

    Returns:
        List of half-open LapSegment ranges.
    """
    n = len(samples)
    segments = []
    lap_number = 1
    current_start_idx = 0
    line_start, line_end = circuit.start_finish

    for idx in range(1, n):
        sample = samples[idx]
        point = GeoPoint(sample.get(lat_key), sample.get(lon_key))

        if not is_point_near_segment(point, line_start, line_end, threshold_m):
            continue

        if idx - current_start_idx > min_lap_samples:
            segments.append(LapSegment(lap_number, current_start_idx, idx))
            logger.debug("Lap %d closed at sample %d", lap_number, idx)
            lap_number += 1
            current_start_idx = idx

    # Trailing lap
    end_idx = n - 1
    if current_start_idx < end_idx:
        if end_idx - current_start_idx > min_lap_samples:
            segments.append(LapSegment(lap_number, current_start_idx, end_idx))
        else:
            logger.debug("Dropped partial lap of %d samples", end_idx - current_start_idx)

    return segments


def detect_laps(samples: Sequence[Mapping], circuit: Optional[Circuit],
                lat_key: Optional[str], lon_key: Optional[str],
                time_key: Optional[str] = None, *,
                speed_key: Optional[str] = None,
                min_lap_samples: int = constants.MIN_LAP_SAMPLES,
                threshold_m: float = constants.START_FINISH_THRESHOLD_M,
                rng: Optional[np.random.Generator] = None) -> List[LapData]:
    """
    Detect laps and compute their metrics.

    With a circuit, laps are split at start/finish line crossings. Without
    one, the session is split into three equal pseudo-laps so that lap views
    always have something to show.

    Args:
        samples: Parsed telemetry rows, in recording order.
        circuit: Detected circuit, or None.
        lat_key: Latitude channel name.
        lon_key: Longitude channel name.
        time_key: Timestamp channel name, or None.
        speed_key: Speed channel name, or None to match by name.
        min_lap_samples: Minimum samples per GPS lap. Default 30.
        threshold_m: Start/finish proximity in meters. Default 10.
        rng: Optional numpy Generator for placeholder lap times.

    Returns:
        List of LapData ordered by lap number.
    """
    if not samples:
        return []

    if circuit is None:
        logger.warning("No circuit; splitting %d samples into %d pseudo-laps",
                       len(samples), constants.FALLBACK_LAP_COUNT)
        segments = fallback_segments(len(samples))
    else:
        segments = gps_segments(samples, circuit, lat_key, lon_key,
                                min_lap_samples=min_lap_samples, threshold_m=threshold_m)

    laps = [
        build_lap_data(
            segment.lap_number,
            segment.start_index,
            segment.end_index,
            samples[segment.start_index:segment.end_index],
            time_key=time_key,
            speed_key=speed_key,
            rng=rng,
        )
        for segment in segments
    ]

    logger.info("Detected %d laps (%s)", len(laps), circuit.name if circuit else "fallback")
    return laps


def best_lap(laps: Sequence[LapData]) -> Optional[LapData]:
    """Return the fastest lap with a known lap time, or None."""
    timed = [lap for lap in laps if lap.lap_time is not None]
    if not timed:
        return None
    return min(timed, key=lambda lap: lap.lap_time)


def best_theoretical_lap(laps: Sequence[LapData],
                         factor: float = constants.THEORETICAL_BEST_FACTOR) -> Optional[TheoreticalBest]:
    """
    Estimate the fastest achievable lap time.

    This is a coarse estimate (the best lap scaled by factor), not a sum of
    best sectors.

    Args:
        laps: Detected laps.
        factor: Share of the best lap time considered achievable. Default 0.98.

    Returns:
        TheoreticalBest, or None with fewer than two timed laps.
    """
    timed = [lap for lap in laps if lap.lap_time is not None]
    if len(timed) < 2:
        return None

    reference = best_lap(timed)
    time = reference.lap_time * factor
    return TheoreticalBest(
        time=time,
        improvement=reference.lap_time - time,
        base_lap_number=reference.lap_number,
    )


def compare_laps(laps: Sequence[LapData], lap_numbers: Sequence[int]) -> List[LapComparison]:
    """
    Compare selected laps against the first selected lap.

    Args:
        laps: Detected laps.
        lap_numbers: Selected lap numbers; the first one is the base lap.

    Returns:
        One LapComparison per other selected lap. Laps that are unknown or have
        no lap time are skipped; an unknown or untimed base lap gives [].
    """
    if len(lap_numbers) < 2:
        return []

    by_number = {lap.lap_number: lap for lap in laps}
    base = by_number.get(lap_numbers[0])
    if base is None or not base.lap_time:
        return []

    comparisons = []
    for lap_number in lap_numbers[1:]:
        lap = by_number.get(lap_number)
        if lap is None or lap.lap_time is None:
            continue
        diff = lap.lap_time - base.lap_time
        comparisons.append(LapComparison(
            lap_number=lap_number,
            base_lap_number=base.lap_number,
            time_diff=diff,
            percentage=diff / base.lap_time * 100,
        ))

    return comparisons


def compute_sector_splits(lap: LapData, lat_key: str, lon_key: str,
                          time_key: Optional[str] = None,
                          sectors: int = constants.DEFAULT_SECTOR_COUNT) -> List[SectorSplit]:
    """
    Split a lap into equal-distance sectors and time each one.

    Distance is accumulated between consecutive valid GPS fixes. Sector
    boundary times are interpolated between the samples on either side.

    Args:
        lap: Detected lap.
        lat_key: Latitude channel name.
        lon_key: Longitude channel name.
        time_key: Timestamp channel name. Without it, sector times are None.
        sectors: Number of sectors. Default 3.

    Returns:
        List of SectorSplit, empty if the lap has no distance to split.
    """
    fixes = [
        (idx, sample) for idx, sample in enumerate(lap.data)
        if is_valid_point(sample.get(lat_key), sample.get(lon_key))
    ]
    if len(fixes) < 2 or sectors < 1:
        return []

    distances = [0.0]
    for (_, prev), (_, curr) in zip(fixes, fixes[1:]):
        step = haversine_m(GeoPoint(prev[lat_key], prev[lon_key]),
                           GeoPoint(curr[lat_key], curr[lon_key]))
        distances.append(distances[-1] + step)

    lap_distance = distances[-1]
    if lap_distance <= 0:
        return []

    times = [utils.to_number(sample.get(time_key)) if time_key else None for _, sample in fixes]
    has_time = all(t is not None for t in times)

    splits = []
    sector_start_pos = 0
    last_boundary_time = times[0]

    for sector in range(1, sectors + 1):
        boundary = lap_distance * sector / sectors
        # First fix at or past the boundary
        pos = int(np.searchsorted(distances, boundary, side="left"))
        pos = min(pos, len(fixes) - 1)

        sector_time = None
        if has_time:
            prev_pos = max(pos - 1, 0)
            span = distances[pos] - distances[prev_pos]
            ratio = 0.0 if span == 0 else (boundary - distances[prev_pos]) / span
            boundary_time = times[prev_pos] + ratio * (times[pos] - times[prev_pos])
            sector_time = boundary_time - last_boundary_time
            last_boundary_time = boundary_time

        splits.append(SectorSplit(
            sector_number=sector,
            start_index=lap.start_index + fixes[sector_start_pos][0],
            end_index=lap.start_index + fixes[pos][0],
            distance_m=lap_distance / sectors,
            time=sector_time,
        ))
        sector_start_pos = pos

    return splits


def resample_lap_channel(lap: LapData, channel: str, points: int = 100) -> List[float]:
    """
    Resample one channel of a lap onto a fixed number of points.

    Laps of different sample counts can then be overlaid point for point.
    Missing or non-numeric values read as 0.

    Args:
        lap: Detected lap.
        channel: Channel name.
        points: Number of output points. Default 100.

    Returns:
        List of points values, empty if the lap has no samples.
    """
    if not lap.data or points < 1:
        return []

    values = np.array([utils.to_number(sample.get(channel)) or 0.0 for sample in lap.data],
                      dtype=float)
    positions = np.linspace(0, len(values) - 1, points)
    return np.interp(positions, np.arange(len(values)), values).tolist()


def laps_to_records(laps: Sequence[LapData]) -> List[Dict]:
    """Convert laps to JSON-ready dictionaries without their raw samples."""
    return [lap.to_dict() for lap in laps]
