"""
Session Builder for Race Telemetry Lap Analysis

This module orchestrates the complete analysis pipeline, combining all
processing steps to build a session payload for the viewer.
"""

import logging
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence
from . import circuit_detection
from . import columns as columns_mod
from . import data_loading
from . import lap_analysis
from . import time_format
from . import utils
from .circuits import CircuitRegistry, default_registry
from .config import EngineConfig

logger = logging.getLogger(__name__)


def build_session_payload(samples: Sequence[Mapping],
                          registry: Optional[CircuitRegistry] = None,
                          columns: Optional[Mapping[str, Optional[str]]] = None,
                          circuit_name: Optional[str] = None,
                          config: Optional[EngineConfig] = None) -> Dict:
    """
    Build the complete session payload for a set of telemetry rows.

    Main entry point that runs the lap engine:
    1. Resolves the lat/lon/time/speed columns
    2. Detects the circuit from the GPS centroid (unless circuit_name is given)
    3. Detects laps and computes their metrics, falling back to pseudo-laps
       when a known circuit yields no complete lap
    4. Normalizes lap times to milliseconds and formats them
    5. Picks the best lap and the theoretical best estimate

    Args:
        samples: Parsed telemetry rows.
        registry: Circuits to match against. Defaults to the built-in set.
        columns: Optional header overrides ("lat", "lon", "time", "speed").
        circuit_name: Force a circuit instead of detecting one.
        config: Engine settings. Defaults to EngineConfig().

    Returns:
        Dictionary containing:
        - circuit: matched circuit dict, or None
        - columns: resolved column mapping
        - time_unit: detected lap time unit
        - laps: list of lap dicts (no raw samples)
        - best_lap: number of the fastest timed lap, or None
        - theoretical_best: estimate dict, or None
        - channels: chartable numeric channels
        - sample_count: number of input rows

    Raises:
        UnknownCircuitError: If circuit_name is not in the registry.
    """
    if registry is None:
        registry = default_registry()
    config = config or EngineConfig()
    mapping = columns_mod.resolve_columns(samples, columns)

    if circuit_name is not None:
        circuit = registry[circuit_name]
    else:
        points = columns_mod.extract_gps_points(samples, mapping)
        circuit = registry.get(circuit_detection.detect_circuit(
            points, registry, max_distance_m=config.circuit_match_radius_m))

    lap_options = dict(
        speed_key=mapping.speed,
        min_lap_samples=config.min_lap_samples,
        threshold_m=config.start_finish_threshold_m,
        rng=config.placeholder_rng(),
    )
    laps = lap_analysis.detect_laps(
        samples, circuit, mapping.lat, mapping.lon, mapping.time, **lap_options)

    # A known circuit with no complete lap still gets pseudo-laps to show
    if circuit is not None and not laps:
        logger.warning("No laps found at %s; using pseudo-laps", circuit.name)
        laps = lap_analysis.detect_laps(
            samples, None, mapping.lat, mapping.lon, mapping.time, **lap_options)

    unit, lap_times_ms = time_format.normalize_lap_times([lap.lap_time for lap in laps])
    if unit == time_format.TimeUnit.UNKNOWN and laps:
        logger.warning("Could not tell lap time unit; lap times left as recorded")

    lap_records = []
    for lap, lap_time_ms in zip(laps, lap_times_ms):
        record = lap.to_dict()
        record["lap_time_ms"] = utils.round_float(lap_time_ms)
        record["lap_time_display"] = (
            time_format.format_lap_time(lap_time_ms) if lap_time_ms is not None else None
        )
        lap_records.append(record)

    fastest = lap_analysis.best_lap(laps)
    theoretical = lap_analysis.best_theoretical_lap(laps)
    theoretical_payload = None
    if theoretical is not None:
        theoretical_ms = time_format.normalize_to_milliseconds(theoretical.time, unit)
        theoretical_payload = {
            "lap_time": utils.round_float(theoretical.time),
            "improvement": utils.round_float(theoretical.improvement),
            "base_lap": theoretical.base_lap_number,
            "lap_time_display": time_format.format_lap_time(theoretical_ms),
        }

    return {
        "circuit": circuit.to_dict() if circuit else None,
        "columns": mapping.to_dict(),
        "time_unit": unit.value,
        "laps": lap_records,
        "best_lap": fastest.lap_number if fastest else None,
        "theoretical_best": theoretical_payload,
        "channels": columns_mod.available_channels(samples),
        "sample_count": len(samples),
    }


def analyze_csv(data_file: Path, **kwargs) -> Dict:
    """
    Load a telemetry CSV and build its session payload.

    Args:
        data_file: Path to the CSV export.
        **kwargs: Passed on to build_session_payload().

    Returns:
        Session payload dictionary.

    Raises:
        TelemetryLoadError: If the file cannot be read or has no rows.
    """
    samples = data_loading.load_telemetry_csv(data_file)
    payload = build_session_payload(samples, **kwargs)
    payload["source"] = Path(data_file).name
    return payload
