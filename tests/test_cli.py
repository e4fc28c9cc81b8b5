"""Tests for the analyze_laps command line report."""

from __future__ import annotations

import json

import pandas as pd
import pytest

from analyze_laps import format_lap_table, main
from conftest import make_circle_session


@pytest.fixture
def session_csv(tmp_path):
    path = tmp_path / "laguna.csv"
    pd.DataFrame(make_circle_session()).to_csv(path, index=False)
    return path


def test_lap_table(session_csv, capsys):
    assert main([str(session_csv)]) == 0
    out = capsys.readouterr().out
    assert "Circuit: Laguna Seca" in out
    assert "1:34.050" in out
    assert "best" in out
    assert "Theoretical best:" in out


def test_json_output(session_csv, capsys):
    assert main([str(session_csv), "--json"]) == 0
    session = json.loads(capsys.readouterr().out)
    assert session["source"] == "laguna.csv"
    assert len(session["laps"]) == 3


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.csv")]) == 1
    assert "not found" in capsys.readouterr().err


def test_unknown_circuit(session_csv, capsys):
    assert main([str(session_csv), "--circuit", "Monza"]) == 1
    assert "Unknown circuit: Monza" in capsys.readouterr().err


def test_placeholder_times_marked(tmp_path, capsys):
    path = tmp_path / "no_time.csv"
    pd.DataFrame([{"Speed": 50.0} for _ in range(90)]).to_csv(path, index=False)

    assert main([str(path), "--placeholder-seed", "7"]) == 0
    out = capsys.readouterr().out
    assert "unknown (fallback laps)" in out
    assert out.count("*") == 3


def test_format_lap_table_without_times():
    session = {
        "circuit": None,
        "sample_count": 90,
        "time_unit": "unknown",
        "laps": [{
            "lap_number": 1, "sample_count": 30, "lap_time_display": None,
            "lap_time_estimated": False, "max_speed": 0.0, "avg_speed": 0.0,
        }],
        "best_lap": None,
        "theoretical_best": None,
    }
    lines = format_lap_table(session)
    assert lines[0] == "Circuit: unknown (fallback laps)"
    assert "--" in lines[-1]
