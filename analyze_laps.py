"""
Command Line Lap Report for Race Telemetry CSV Exports

Detects the circuit and laps of a data logger export and prints a lap table,
or the full session payload as JSON.

Usage:
    python analyze_laps.py session.csv
    python analyze_laps.py session.csv --circuit "Laguna Seca" --time "GPS Time"
    python analyze_laps.py session.csv --json
"""

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional
from race_analysis import analyze_telemetry


def format_lap_table(session: Dict) -> List[str]:
    """
    Render the laps of a session payload as text lines.

    Args:
        session: Payload from build_session_payload().

    Returns:
        Lines of the table, including header and summary.
    """
    circuit = session["circuit"]["name"] if session["circuit"] else "unknown (fallback laps)"
    lines = [
        f"Circuit: {circuit}",
        f"Samples: {session['sample_count']}   Lap time unit: {session['time_unit']}",
        "",
        f"{'Lap':>4}  {'Samples':>8}  {'Lap time':>10}  {'Max speed':>10}  {'Avg speed':>10}",
        "-" * 50,
    ]

    for lap in session["laps"]:
        lap_time = lap["lap_time_display"] or "--"
        if lap["lap_time_estimated"]:
            lap_time += "*"
        marker = "  best" if lap["lap_number"] == session["best_lap"] else ""
        lines.append(
            f"{lap['lap_number']:>4}  {lap['sample_count']:>8}  {lap_time:>10}  "
            f"{lap['max_speed']:>10.1f}  {lap['avg_speed']:>10.1f}{marker}"
        )

    theoretical = session["theoretical_best"]
    if theoretical:
        lines.append("")
        lines.append(
            f"Theoretical best: {theoretical['lap_time_display']} "
            f"(from lap {theoretical['base_lap']})"
        )
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Detect circuit and laps in a race telemetry CSV export"
    )
    parser.add_argument(
        "data_file",
        type=str,
        help="Path to telemetry CSV file"
    )
    parser.add_argument(
        "--circuit",
        type=str,
        default=None,
        help="Use this known circuit instead of detecting one"
    )
    parser.add_argument("--lat", type=str, default=None, help="Latitude column")
    parser.add_argument("--lon", type=str, default=None, help="Longitude column")
    parser.add_argument("--time", type=str, default=None, help="Time column")
    parser.add_argument("--speed", type=str, default=None, help="Speed column")
    parser.add_argument(
        "--placeholder-seed",
        type=int,
        default=None,
        help="Fill missing lap times with seeded placeholder values"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the session payload as JSON"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level (default: WARNING)"
    )

    args = parser.parse_args(argv)
    analyze_telemetry.configure_logging(args.log_level)

    data_file = Path(args.data_file)
    if not data_file.exists():
        print(f"Error: Data file not found: {data_file}", file=sys.stderr)
        return 1

    overrides = {
        key: value
        for key, value in (("lat", args.lat), ("lon", args.lon),
                           ("time", args.time), ("speed", args.speed))
        if value
    }
    config = analyze_telemetry.EngineConfig()
    if args.placeholder_seed is not None:
        config = replace(config, placeholder_seed=args.placeholder_seed)

    try:
        session = analyze_telemetry.analyze_csv(
            data_file, columns=overrides, circuit_name=args.circuit, config=config
        )
    except analyze_telemetry.RaceAnalysisError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(session, indent=2))
    else:
        print("\n".join(format_lap_table(session)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
