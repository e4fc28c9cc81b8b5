"""
Race Telemetry Lap Analysis Module

This module identifies the circuit a data logger session was recorded at,
splits the session into laps, and computes lap timing and speed statistics.

This file serves as the public entry point and re-exports the functions of
the individual modules.
"""

# Import constants
from .constants import DATA_DIR, DEFAULT_DATA_FILE

# Import configuration
from .config import (
    EngineConfig,
    configure_logging,
)

# Import exceptions
from .exceptions import (
    RaceAnalysisError,
    TelemetryLoadError,
    UnknownCircuitError,
)

# Import geometry functions
from .geometry import (
    GeoPoint,
    is_valid_point,
    haversine_m,
    latlon_to_xy,
    distance_to_segment_m,
    is_point_near_segment,
)

# Import circuit registry
from .circuits import (
    Circuit,
    CircuitRegistry,
    DEFAULT_CIRCUITS,
    default_registry,
)

# Import column discovery functions
from .columns import (
    ColumnMapping,
    resolve_columns,
    find_speed_key,
    extract_gps_points,
    available_channels,
)

# Import circuit detection functions
from .circuit_detection import (
    compute_centroid,
    detect_circuit,
)

# Import lap metrics
from .lap_metrics import (
    LapSegment,
    LapData,
    compute_lap_time,
    compute_speed_stats,
    build_lap_data,
)

# Import lap analysis functions
from .lap_analysis import (
    LapComparison,
    TheoreticalBest,
    SectorSplit,
    fallback_segments,
    gps_segments,
    detect_laps,
    best_lap,
    best_theoretical_lap,
    compare_laps,
    compute_sector_splits,
    resample_lap_channel,
    laps_to_records,
)

# Import time formatting functions
from .time_format import (
    TimeUnit,
    detect_time_unit,
    normalize_to_milliseconds,
    normalize_lap_times,
    format_lap_time,
    format_time_difference,
    format_time_auto,
)

# Import data loading functions
from .data_loading import (
    load_telemetry_frame,
    frame_to_samples,
    load_telemetry_csv,
    list_datasets,
)

# Import session builder functions
from .session import (
    build_session_payload,
    analyze_csv,
)

__all__ = [
    # Constants
    "DATA_DIR",
    "DEFAULT_DATA_FILE",
    # Configuration
    "EngineConfig",
    "configure_logging",
    # Exceptions
    "RaceAnalysisError",
    "TelemetryLoadError",
    "UnknownCircuitError",
    # Geometry
    "GeoPoint",
    "is_valid_point",
    "haversine_m",
    "latlon_to_xy",
    "distance_to_segment_m",
    "is_point_near_segment",
    # Circuits
    "Circuit",
    "CircuitRegistry",
    "DEFAULT_CIRCUITS",
    "default_registry",
    # Columns
    "ColumnMapping",
    "resolve_columns",
    "find_speed_key",
    "extract_gps_points",
    "available_channels",
    # Circuit detection
    "compute_centroid",
    "detect_circuit",
    # Lap metrics
    "LapSegment",
    "LapData",
    "compute_lap_time",
    "compute_speed_stats",
    "build_lap_data",
    # Lap analysis
    "LapComparison",
    "TheoreticalBest",
    "SectorSplit",
    "fallback_segments",
    "gps_segments",
    "detect_laps",
    "best_lap",
    "best_theoretical_lap",
    "compare_laps",
    "compute_sector_splits",
    "resample_lap_channel",
    "laps_to_records",
    # Time formatting
    "TimeUnit",
    "detect_time_unit",
    "normalize_to_milliseconds",
    "normalize_lap_times",
    "format_lap_time",
    "format_time_difference",
    "format_time_auto",
    # Data loading
    "load_telemetry_frame",
    "frame_to_samples",
    "load_telemetry_csv",
    "list_datasets",
    # Session builder
    "build_session_payload",
    "analyze_csv",
]
