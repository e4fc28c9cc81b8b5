"""
Data Loading and Parsing for Race Telemetry Lap Analysis

This module loads data logger CSV exports into pandas and converts them into
the list-of-row-mappings form the lap engine works on.
"""

import io
import logging
import pandas as pd
from pathlib import Path
from typing import Dict, List, Union
from .exceptions import TelemetryLoadError

logger = logging.getLogger(__name__)

CsvSource = Union[str, Path, bytes, io.IOBase]


def _coerce_numeric(df: pd.DataFrame) -> pd.DataFrame:
    """
    Convert numeric-looking cells of text columns to numbers.

    Cells that do not parse keep their original text, so a column with a few
    stray labels still exposes its numeric readings.
    """
    df = df.copy()
    for column in df.columns:
        if pd.api.types.is_numeric_dtype(df[column]):
            continue
        numeric = pd.to_numeric(df[column], errors="coerce")
        if numeric.notna().any():
            df[column] = numeric.astype(object).where(numeric.notna(), df[column].astype(object))
    return df


def load_telemetry_frame(source: CsvSource) -> pd.DataFrame:
    """
    Read a telemetry CSV export into a DataFrame.

    The first line is the header. Blank lines and malformed lines (wrong
    field count) are skipped, and header names are stripped of surrounding
    whitespace.

    Args:
        source: Path, raw CSV bytes, or an open text/binary file.

    Returns:
        DataFrame with numeric columns parsed.

    Raises:
        TelemetryLoadError: If the file is missing, unparsable, or has no rows.
    """
    if isinstance(source, bytes):
        source = io.BytesIO(source)

    try:
        df = pd.read_csv(source, skip_blank_lines=True, on_bad_lines="skip")
    except FileNotFoundError as exc:
        raise TelemetryLoadError(f"Telemetry file not found: {source}") from exc
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise TelemetryLoadError(f"Could not parse telemetry CSV: {exc}") from exc

    if df.empty:
        raise TelemetryLoadError("Telemetry CSV contains no data rows.")

    df.columns = [str(column).strip() for column in df.columns]
    df = _coerce_numeric(df)

    logger.info("Loaded %d samples with %d channels", len(df), len(df.columns))
    return df


def frame_to_samples(df: pd.DataFrame) -> List[Dict]:
    """
    Convert a DataFrame to a list of row dictionaries.

    Empty cells (NaN) become None.

    Args:
        df: Telemetry DataFrame.

    Returns:
        One dictionary per row, keyed by header.
    """
    cleaned = df.astype(object).where(df.notna(), None)
    return cleaned.to_dict(orient="records")


def load_telemetry_csv(source: CsvSource) -> List[Dict]:
    """Load a telemetry CSV export as a list of row dictionaries."""
    return frame_to_samples(load_telemetry_frame(source))


def list_datasets(data_dir: Path) -> List[Dict[str, str]]:
    """
    Discover telemetry CSV files in a folder.

    Args:
        data_dir: Folder to scan.

    Returns:
        List of dictionaries with 'filename' and 'display_name' keys, sorted
        by filename. Empty if the folder does not exist.
    """
    data_dir = Path(data_dir)
    datasets = []

    if not data_dir.exists():
        return datasets

    for file_path in data_dir.glob("*.csv"):
        display_name = file_path.stem.replace("_", " ").title()
        datasets.append({
            "filename": file_path.name,
            "display_name": display_name,
        })

    datasets.sort(key=lambda x: x["filename"])
    return datasets
