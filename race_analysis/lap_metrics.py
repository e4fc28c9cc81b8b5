"""
Lap Metrics for Race Telemetry Lap Analysis

This module turns a lap's sample slice into a LapData record with lap time
and speed statistics.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence, Tuple
from . import constants
from . import utils
from .columns import find_speed_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LapSegment:
    """A contiguous index range over the session's samples."""

    lap_number: int
    start_index: int
    end_index: int


@dataclass(frozen=True)
class LapData:
    """
    A detected lap with its metrics and the samples it covers.

    lap_time is None when no usable timestamps exist. lap_time_estimated is
    True only when a placeholder time was drawn from a random generator.
    """

    lap_number: int
    start_index: int
    end_index: int
    lap_time: Optional[float]
    max_speed: float
    avg_speed: float
    data: Tuple[Mapping, ...]
    lap_time_estimated: bool = False

    @property
    def sample_count(self) -> int:
        return len(self.data)

    def to_dict(self, include_data: bool = False) -> Dict:
        record = {
            "lap_number": self.lap_number,
            "start_index": self.start_index,
            "end_index": self.end_index,
            "lap_time": utils.round_float(self.lap_time),
            "lap_time_estimated": self.lap_time_estimated,
            "max_speed": utils.round_float(self.max_speed),
            "avg_speed": utils.round_float(self.avg_speed),
            "sample_count": self.sample_count,
        }
        if include_data:
            record["data"] = [dict(sample) for sample in self.data]
        return record


def compute_lap_time(samples: Sequence[Mapping], time_key: Optional[str]) -> Optional[float]:
    """
    Compute lap time as the difference of the last and first timestamps.

    Args:
        samples: Lap sample slice.
        time_key: Timestamp channel name, or None.

    Returns:
        Lap time in the timestamp channel's own unit, or None if there is no
        time channel, fewer than 2 samples, or a non-numeric end value.
    """
    if not time_key or len(samples) < 2:
        return None

    start = utils.to_number(samples[0].get(time_key))
    end = utils.to_number(samples[-1].get(time_key))
    if start is None or end is None:
        return None
    return end - start


def compute_speed_stats(samples: Sequence[Mapping],
                        speed_key: Optional[str] = None) -> Tuple[float, float]:
    """
    Compute max and mean of the strictly positive speed values in a lap.

    Args:
        samples: Lap sample slice.
        speed_key: Speed channel name. If None, the first speed-like header of
                   the first sample is used.

    Returns:
        Tuple of (max_speed, avg_speed); (0.0, 0.0) if no positive values.
    """
    if not samples:
        return 0.0, 0.0

    if speed_key is None:
        speed_key = find_speed_key(samples[0].keys())
        if speed_key is None:
            return 0.0, 0.0

    speeds = [utils.to_number(sample.get(speed_key)) for sample in samples]
    positive = np.array([s for s in speeds if s is not None and s > 0], dtype=float)

    if positive.size == 0:
        return 0.0, 0.0
    return float(positive.max()), float(positive.mean())


def build_lap_data(lap_number: int, start_index: int, end_index: int,
                   samples: Sequence[Mapping], time_key: Optional[str] = None,
                   speed_key: Optional[str] = None,
                   rng: Optional[np.random.Generator] = None) -> LapData:
    """
    Build a LapData record for one lap.

    Without usable timestamps the lap time is None. Passing rng restores the
    demo behavior of filling it with a placeholder drawn uniformly from
    PLACEHOLDER_LAP_TIME_S; such laps are flagged lap_time_estimated.

    Args:
        lap_number: 1-based lap number.
        start_index: Index of the lap's first sample in the session.
        end_index: End index of the lap in the session.
        samples: The lap's sample slice.
        time_key: Timestamp channel name, or None.
        speed_key: Speed channel name, or None to match by name.
        rng: Optional numpy Generator for placeholder lap times.

    Returns:
        Immutable LapData record.
    """
    lap_time = compute_lap_time(samples, time_key)
    estimated = False

    if lap_time is None and rng is not None:
        low, high = constants.PLACEHOLDER_LAP_TIME_S
        lap_time = float(rng.uniform(low, high))
        estimated = True
        logger.warning("Lap %d has no usable timestamps; using placeholder %.3f s",
                       lap_number, lap_time)

    max_speed, avg_speed = compute_speed_stats(samples, speed_key)

    return LapData(
        lap_number=lap_number,
        start_index=start_index,
        end_index=end_index,
        lap_time=lap_time,
        max_speed=max_speed,
        avg_speed=avg_speed,
        data=tuple(samples),
        lap_time_estimated=estimated,
    )
