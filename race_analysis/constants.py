"""
Constants for Race Telemetry Lap Analysis

This module defines the fixed engine constants and path defaults used
throughout the lap detection pipeline.
"""

from pathlib import Path

# Telemetry CSV folder is one level up from race_analysis/
DATA_DIR = Path(__file__).parent.parent / "data"
DEFAULT_DATA_FILE = DATA_DIR / "sample_session.csv"

# Geometry
EARTH_RADIUS_M = 6371000.0
METERS_PER_DEGREE = 111320.0  # at the equator

# Circuit detection
CIRCUIT_MATCH_RADIUS_M = 5000.0

# Lap detection
START_FINISH_THRESHOLD_M = 10.0
MIN_LAP_SAMPLES = 30
FALLBACK_LAP_COUNT = 3
DEFAULT_SECTOR_COUNT = 3

# Placeholder lap time range in seconds, only used with an explicit generator
PLACEHOLDER_LAP_TIME_S = (60.0, 90.0)

# Theoretical best lap is estimated as a fixed share of the best lap
THEORETICAL_BEST_FACTOR = 0.98

# Time unit heuristic bounds (mean lap time)
SECONDS_RANGE = (60.0, 600.0)
MILLISECONDS_RANGE = (60000.0, 600000.0)

# Header discovery (case-insensitive substrings)
LAT_ALIASES = ("lat",)
LON_ALIASES = ("lon", "lng")
TIME_ALIASES = ("time",)
SPEED_ALIASES = ("speed", "velocity")
SPEED_EXACT_NAMES = ("spd",)
GPS_EXACT_NAMES = ("lat", "latitude", "lon", "longitude", "lng")
