"""
Runtime Configuration for Race Telemetry Lap Analysis

Engine settings default to the constants module and can be overridden with
environment variables:

    RACE_DATA_DIR                   folder scanned for telemetry CSV files
    RACE_MIN_LAP_SAMPLES            minimum samples per GPS lap (30)
    RACE_START_FINISH_THRESHOLD_M   start/finish proximity in meters (10)
    RACE_CIRCUIT_MATCH_RADIUS_M     circuit match radius in meters (5000)
    RACE_PLACEHOLDER_SEED           seed for placeholder lap times; unset
                                    means unknown lap times stay unknown
    RACE_LOG_LEVEL                  logging level for the app and CLI (INFO)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import numpy as np
from . import constants

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)


@dataclass(frozen=True)
class EngineConfig:
    """Tunable settings for one analysis run."""

    data_dir: Path = field(default_factory=lambda: Path(os.getenv("RACE_DATA_DIR", constants.DATA_DIR)))
    min_lap_samples: int = field(
        default_factory=lambda: _env_int("RACE_MIN_LAP_SAMPLES", constants.MIN_LAP_SAMPLES))
    start_finish_threshold_m: float = field(
        default_factory=lambda: _env_float("RACE_START_FINISH_THRESHOLD_M",
                                           constants.START_FINISH_THRESHOLD_M))
    circuit_match_radius_m: float = field(
        default_factory=lambda: _env_float("RACE_CIRCUIT_MATCH_RADIUS_M",
                                           constants.CIRCUIT_MATCH_RADIUS_M))
    placeholder_seed: Optional[int] = field(
        default_factory=lambda: _env_int("RACE_PLACEHOLDER_SEED", None))
    log_level: str = field(default_factory=lambda: os.getenv("RACE_LOG_LEVEL", "INFO"))

    def placeholder_rng(self) -> Optional[np.random.Generator]:
        """Return a seeded generator if placeholder lap times are enabled."""
        if self.placeholder_seed is None:
            return None
        return np.random.default_rng(self.placeholder_seed)


def configure_logging(level="INFO") -> None:
    """
    Install a stream handler on the package logger.

    Library modules only create loggers; entry points (app, CLI) call this.
    Calling it again just updates the level.
    """
    logger = logging.getLogger("race_analysis")
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
