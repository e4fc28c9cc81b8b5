"""Tests for race_analysis/lap_analysis.py."""

from __future__ import annotations

import numpy as np
import pytest

from conftest import make_circle_session, make_hit_trace
from race_analysis.lap_analysis import (
    best_lap,
    best_theoretical_lap,
    compare_laps,
    compute_sector_splits,
    detect_laps,
    fallback_segments,
    gps_segments,
    resample_lap_channel,
)
from race_analysis.lap_metrics import LapSegment, build_lap_data


def _timed_lap(lap_number: int, lap_time: float | None):
    samples = [{"t": 0.0}, {"t": lap_time}]
    return build_lap_data(lap_number, 0, 2, samples, time_key="t")


class TestFallbackSegments:
    def test_three_chunks_of_300(self):
        segments = fallback_segments(300)
        assert segments == [
            LapSegment(1, 0, 100),
            LapSegment(2, 100, 200),
            LapSegment(3, 200, 299),
        ]

    def test_remainder_absorbed_by_last_chunk(self):
        segments = fallback_segments(302)
        assert [(s.start_index, s.end_index) for s in segments] == [(0, 100), (100, 200), (200, 300)]

    @pytest.mark.parametrize("n", [0, 1, 2])
    def test_too_few_samples(self, n):
        assert fallback_segments(n) == []

    def test_three_samples(self):
        assert fallback_segments(3) == [LapSegment(1, 0, 1), LapSegment(2, 1, 2)]


class TestDetectLapsFallback:
    def test_no_circuit_gives_three_laps(self):
        samples = [{"time": float(i), "speed": 10.0} for i in range(300)]
        laps = detect_laps(samples, None, "lat", "lon", "time")

        assert [lap.lap_number for lap in laps] == [1, 2, 3]
        ends = [lap.end_index for lap in laps]
        assert ends == sorted(ends)
        assert laps[0].start_index == 0
        assert laps[-1].end_index == 299
        for prev, nxt in zip(laps, laps[1:]):
            assert prev.end_index == nxt.start_index
        assert laps[0].lap_time == 99.0
        assert laps[0].data[0] is samples[0]

    def test_empty_input(self, laguna):
        assert detect_laps([], None, "lat", "lon") == []
        assert detect_laps([], laguna, "lat", "lon") == []


class TestDetectLapsGps:
    def test_circle_session(self, laguna, circle_session):
        laps = detect_laps(circle_session, laguna, "Latitude", "Longitude", "Time (s)")

        assert [(lap.start_index, lap.end_index) for lap in laps] == [
            (0, 100), (100, 200), (200, 300),
        ]
        assert [lap.lap_time for lap in laps] == pytest.approx([99.0, 94.05, 97.02], abs=1e-3)
        assert all(lap.sample_count == 100 for lap in laps)

    def test_trailing_partial_lap_dropped(self, laguna, circle_session):
        # 20 samples after the last crossing
        laps = detect_laps(circle_session, laguna, "Latitude", "Longitude")
        assert laps[-1].end_index == 300

    def test_trailing_lap_kept_when_long_enough(self, laguna):
        samples = make_circle_session(lap_dts=(1.0, 1.0), extra_samples=60)
        laps = detect_laps(samples, laguna, "Latitude", "Longitude", "Time (s)")
        assert [(lap.start_index, lap.end_index) for lap in laps] == [
            (0, 100), (100, 200), (200, 259),
        ]
        assert laps[-1].sample_count == 59

    def test_double_crossing_within_ten_samples(self, laguna):
        samples = make_hit_trace(60, hits=[50, 55])
        laps = detect_laps(samples, laguna, "lat", "lon", "time")
        assert [(lap.start_index, lap.end_index) for lap in laps] == [(0, 50)]

    def test_repeated_hits_near_line_give_one_boundary(self, laguna):
        samples = make_hit_trace(120, hits=list(range(40, 50)))
        segments = gps_segments(samples, laguna, "lat", "lon")
        assert [s.start_index for s in segments] == [0, 40]
        assert all(s.end_index - s.start_index > 30 for s in segments)

    def test_minimum_lap_guard_boundary(self, laguna):
        assert gps_segments(make_hit_trace(40, hits=[30]), laguna, "lat", "lon") == [
            LapSegment(1, 0, 39),
        ]
        assert gps_segments(make_hit_trace(40, hits=[31]), laguna, "lat", "lon") == [
            LapSegment(1, 0, 31),
        ]

    def test_trailing_lap_threshold(self, laguna):
        # 30 samples after the crossing is not enough, 31 is
        short = gps_segments(make_hit_trace(72, hits=[41]), laguna, "lat", "lon")
        long = gps_segments(make_hit_trace(73, hits=[41]), laguna, "lat", "lon")
        assert short == [LapSegment(1, 0, 41)]
        assert long == [LapSegment(1, 0, 41), LapSegment(2, 41, 72)]

    def test_first_sample_is_not_a_crossing(self, laguna):
        segments = gps_segments(make_hit_trace(35, hits=[0]), laguna, "lat", "lon")
        assert segments == [LapSegment(1, 0, 34)]

    def test_missing_coordinates_are_not_crossings(self, laguna):
        samples = make_hit_trace(100, hits=[50])
        samples[50]["lat"] = None
        assert gps_segments(samples, laguna, "lat", "lon") == [LapSegment(1, 0, 99)]

    def test_missing_gps_columns(self, laguna):
        samples = [{"time": float(i)} for i in range(50)]
        assert gps_segments(samples, laguna, None, None) == [LapSegment(1, 0, 49)]

    def test_configurable_minimum(self, laguna):
        samples = make_hit_trace(30, hits=[10, 20])
        laps = detect_laps(samples, laguna, "lat", "lon", min_lap_samples=5)
        assert [(lap.start_index, lap.end_index) for lap in laps] == [(0, 10), (10, 20), (20, 29)]

    def test_segments_strictly_increasing(self, laguna, circle_session):
        laps = detect_laps(circle_session, laguna, "Latitude", "Longitude")
        for prev, nxt in zip(laps, laps[1:]):
            assert nxt.lap_number == prev.lap_number + 1
            assert nxt.start_index >= prev.end_index


class TestBestLaps:
    def test_best_lap_ignores_unknown_times(self):
        laps = [_timed_lap(1, 95.0), _timed_lap(2, None), _timed_lap(3, 93.5)]
        assert best_lap(laps).lap_number == 3

    def test_best_lap_none(self):
        assert best_lap([]) is None
        assert best_lap([_timed_lap(1, None)]) is None

    def test_theoretical_best(self):
        laps = [_timed_lap(1, 100.0), _timed_lap(2, 90.0)]
        result = best_theoretical_lap(laps)
        assert result.time == pytest.approx(88.2)
        assert result.improvement == pytest.approx(1.8)
        assert result.base_lap_number == 2

    def test_theoretical_best_needs_two_laps(self):
        assert best_theoretical_lap([_timed_lap(1, 90.0)]) is None
        assert best_theoretical_lap([_timed_lap(1, 90.0), _timed_lap(2, None)]) is None


class TestCompareLaps:
    def test_against_first_selected(self):
        laps = [_timed_lap(1, 100.0), _timed_lap(2, 98.0), _timed_lap(3, 101.5)]
        result = compare_laps(laps, [1, 2, 3])
        assert [c.lap_number for c in result] == [2, 3]
        assert result[0].time_diff == pytest.approx(-2.0)
        assert result[0].percentage == pytest.approx(-2.0)
        assert result[1].time_diff == pytest.approx(1.5)
        assert all(c.base_lap_number == 1 for c in result)

    def test_needs_two_selected(self):
        assert compare_laps([_timed_lap(1, 100.0)], [1]) == []

    def test_unknown_laps_skipped(self):
        laps = [_timed_lap(1, 100.0), _timed_lap(2, None)]
        assert compare_laps(laps, [1, 2, 7]) == []
        assert compare_laps(laps, [7, 1]) == []
        assert compare_laps(laps, [2, 1]) == []


class TestSectorSplits:
    def test_equal_pace_sectors(self, laguna, circle_session):
        lap = detect_laps(circle_session, laguna, "Latitude", "Longitude", "Time (s)")[0]
        splits = compute_sector_splits(lap, "Latitude", "Longitude", "Time (s)")

        assert [s.sector_number for s in splits] == [1, 2, 3]
        assert sum(s.time for s in splits) == pytest.approx(lap.lap_time, abs=1e-6)
        assert [s.time for s in splits] == pytest.approx([33.0, 33.0, 33.0], abs=0.05)
        assert splits[0].start_index == lap.start_index
        assert splits[-1].end_index == lap.end_index - 1

    def test_without_time_channel(self, laguna, circle_session):
        lap = detect_laps(circle_session, laguna, "Latitude", "Longitude")[0]
        splits = compute_sector_splits(lap, "Latitude", "Longitude", sectors=4)
        assert len(splits) == 4
        assert all(s.time is None for s in splits)
        assert sum(s.distance_m for s in splits) > 1800

    def test_no_gps(self):
        lap = build_lap_data(1, 0, 3, [{"t": 0.0}, {"t": 1.0}, {"t": 2.0}], time_key="t")
        assert compute_sector_splits(lap, "lat", "lon", "t") == []


class TestResampleLapChannel:
    def test_linear_channel(self):
        samples = [{"rpm": float(i)} for i in range(100)]
        lap = build_lap_data(1, 0, 100, samples)
        assert resample_lap_channel(lap, "rpm", points=3) == pytest.approx([0.0, 49.5, 99.0])
        assert len(resample_lap_channel(lap, "rpm")) == 100

    def test_missing_values_read_as_zero(self):
        lap = build_lap_data(1, 0, 2, [{"rpm": None}, {"rpm": 10.0}])
        assert resample_lap_channel(lap, "rpm", points=2) == [0.0, 10.0]
        assert np.allclose(resample_lap_channel(lap, "throttle", points=2), [0.0, 0.0])

    def test_empty_lap(self):
        assert resample_lap_channel(build_lap_data(1, 0, 0, []), "rpm") == []
