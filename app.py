"""
FastAPI Web Application for Race Telemetry Lap Analysis

This module provides a REST API over the lap engine: known circuits, stored
telemetry datasets, and ad-hoc analysis of an uploaded CSV export.
"""

import logging
from typing import Dict, Optional
from fastapi import FastAPI, HTTPException, Query, Request
from race_analysis import analyze_telemetry


# ============================================================================
# APPLICATION SETUP
# ============================================================================

config = analyze_telemetry.EngineConfig()
analyze_telemetry.configure_logging(config.log_level)
logger = logging.getLogger("race_analysis.app")

app = FastAPI(title="Race Telemetry Lap Analysis")


def column_overrides(lat: Optional[str], lon: Optional[str], time: Optional[str],
                     speed: Optional[str]) -> Dict[str, str]:
    """Collect the column names given as query parameters."""
    given = {"lat": lat, "lon": lon, "time": time, "speed": speed}
    return {key: value for key, value in given.items() if value}


# ============================================================================
# SESSION LOADING & CACHING
# ============================================================================

# Cache for analyzed datasets (dataset_filename -> session payload)
session_cache: Dict[str, dict] = {}


def load_session(dataset_filename: Optional[str] = None) -> dict:
    """
    Load and analyze a stored telemetry dataset.

    Sessions are cached to avoid reprocessing on subsequent requests.

    Args:
        dataset_filename: Name of the CSV file in the data folder. If None,
                          uses the default dataset.

    Returns:
        Session payload from build_session_payload().

    Raises:
        HTTPException: 404 if the dataset does not exist, 500 if analysis
        fails.
    """
    if dataset_filename is None:
        dataset_filename = analyze_telemetry.DEFAULT_DATA_FILE.name

    if dataset_filename in session_cache:
        return session_cache[dataset_filename]

    data_file = config.data_dir / dataset_filename
    if data_file.name != dataset_filename or not data_file.is_file():
        raise HTTPException(status_code=404, detail=f"Dataset not found: {dataset_filename}")

    try:
        session = analyze_telemetry.analyze_csv(data_file, config=config)
    except analyze_telemetry.RaceAnalysisError as exc:
        logger.exception("Failed to analyze %s", dataset_filename)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to load telemetry: {exc}"
        ) from exc

    session_cache[dataset_filename] = session
    return session


# ============================================================================
# API ROUTES - REFERENCE DATA
# ============================================================================

@app.get("/api/circuits")
def get_circuits():
    """
    Get the known circuits.

    Returns:
        List of circuit dictionaries (name, center, start_finish, zoom).
    """
    return [circuit.to_dict() for circuit in analyze_telemetry.default_registry()]


@app.get("/api/datasets")
def get_datasets():
    """
    Get list of stored telemetry datasets.

    Returns:
        List of dictionaries with 'filename' and 'display_name' keys.
    """
    return analyze_telemetry.list_datasets(config.data_dir)


# ============================================================================
# API ROUTES - DATA RETRIEVAL
# ============================================================================

@app.get("/api/session")
def get_session(dataset: Optional[str] = Query(None, description="Dataset filename to load")):
    """
    Get the complete session payload for a stored dataset.

    Args:
        dataset: Optional dataset filename. If not provided, uses default.

    Returns:
        Dictionary containing circuit, columns, laps and lap statistics.
    """
    return load_session(dataset)


@app.get("/api/laps")
def get_laps(dataset: Optional[str] = Query(None, description="Dataset filename to load")):
    """
    Get the detected laps for a stored dataset.

    Args:
        dataset: Optional dataset filename. If not provided, uses default.

    Returns:
        List of lap dictionaries.
    """
    return load_session(dataset)["laps"]


# ============================================================================
# API ROUTES - ANALYSIS
# ============================================================================

@app.post("/api/analyze")
async def analyze_upload(
    request: Request,
    circuit: Optional[str] = Query(None, description="Force a known circuit"),
    lat: Optional[str] = Query(None, description="Latitude column"),
    lon: Optional[str] = Query(None, description="Longitude column"),
    time: Optional[str] = Query(None, description="Time column"),
    speed: Optional[str] = Query(None, description="Speed column"),
):
    """
    Analyze a CSV export sent as the raw request body.

    Returns:
        Session payload for the uploaded data.

    Raises:
        HTTPException: 400 if the CSV cannot be parsed or the circuit is
        unknown.
    """
    body = await request.body()

    try:
        samples = analyze_telemetry.load_telemetry_csv(body)
        return analyze_telemetry.build_session_payload(
            samples,
            columns=column_overrides(lat, lon, time, speed),
            circuit_name=circuit,
            config=config,
        )
    except analyze_telemetry.RaceAnalysisError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


# ============================================================================
# RUN INSTRUCTIONS
# ============================================================================
# Run with: uvicorn app:app --reload
