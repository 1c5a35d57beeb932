"""Tests for the renderer module."""

from __future__ import annotations

import json
import os
import tempfile
from datetime import date

from repo_pulse.models import ActivityStats, AnalysisResult, PeriodStats
from repo_pulse.renderer import format_number, render_csv, render_json, render_report


def _make_result(**kwargs) -> AnalysisResult:
    defaults = dict(
        repository="test-repo",
        period="daily",
        start=date(2024, 1, 1),
        end=date(2024, 1, 2),
        stats=[
            PeriodStats(label="2024-01-01", date=date(2024, 1, 1), commits=2, additions=150,
                        deletions=15, files_changed=3),
            PeriodStats(label="2024-01-02", date=date(2024, 1, 2), commits=1, additions=30,
                        deletions=3, files_changed=1),
        ],
    )
    defaults.update(kwargs)
    return AnalysisResult(**defaults)


def test_format_number():
    assert format_number(0) == "0"
    assert format_number(1_234_567) == "1,234,567"
    assert format_number(-1_234_567) == "-1,234,567"


def test_render_report_no_error(capsys):
    """render_report should print the header, rows and a TOTAL row."""
    render_report(_make_result())
    captured = capsys.readouterr()
    assert "test-repo" in captured.out
    assert "2024-01-01" in captured.out
    assert "TOTAL" in captured.out
    assert "Commits" in captured.out


def test_render_report_formats_large_numbers(capsys):
    stats = [PeriodStats(label="2024-01-01", date=date(2024, 1, 1), commits=1_000,
                         additions=1_234_567, deletions=12_345, files_changed=9_999)]
    render_report(_make_result(stats=stats, end=date(2024, 1, 1)))
    captured = capsys.readouterr()
    assert "1,234,567" in captured.out
    assert "1,222,222" in captured.out


def test_render_report_shows_activity(capsys):
    activity = ActivityStats()
    activity.record(0, 10)
    render_report(_make_result(), activity)
    captured = capsys.readouterr()
    assert "Activity by Weekday" in captured.out
    assert "Mon" in captured.out


def test_render_report_skips_empty_activity(capsys):
    render_report(_make_result(), ActivityStats())
    captured = capsys.readouterr()
    assert "Activity by Weekday" not in captured.out


def test_render_json(capsys):
    """render_json should output valid JSON with YYYY-MM-DD dates."""
    render_json(_make_result())
    captured = capsys.readouterr()
    data = json.loads(captured.out)
    assert data["repository"] == "test-repo"
    assert data["from"] == "2024-01-01"
    assert data["to"] == "2024-01-02"
    assert data["stats"][0]["net_lines"] == 135
    assert data["total"]["commits"] == 3
    assert data["total"]["net_lines"] == 162


def test_render_csv(capsys):
    """render_csv should output a header and one row per bucket."""
    render_csv(_make_result())
    captured = capsys.readouterr()
    lines = [line.strip() for line in captured.out.strip().split("\n")]
    assert lines[0] == "period,date,commits,additions,deletions,net_lines,files_changed"
    assert lines[1] == "2024-01-01,2024-01-01,2,150,15,135,3"
    assert lines[2] == "2024-01-02,2024-01-02,1,30,3,27,1"
    assert len(lines) == 3


def test_render_csv_weekly_labels(capsys):
    stats = [PeriodStats(label="2024-W01", date=date(2024, 1, 1), commits=4, additions=1, deletions=9)]
    render_csv(_make_result(period="weekly", stats=stats))
    captured = capsys.readouterr()
    assert "2024-W01,2024-01-01,4,1,9,-8,0" in captured.out


def test_render_json_to_file():
    """render_json should write to file when output_file is specified."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        path = f.name
    try:
        render_json(_make_result(), output_file=path)
        with open(path) as f:
            data = json.loads(f.read())
        assert data["repository"] == "test-repo"
    finally:
        os.unlink(path)


def test_render_csv_to_file():
    """render_csv should write to file when output_file is specified."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False) as f:
        path = f.name
    try:
        render_csv(_make_result(), output_file=path)
        with open(path) as f:
            content = f.read()
        assert "2024-01-02,2024-01-02,1,30,3,27,1" in content
    finally:
        os.unlink(path)


def test_render_report_to_file():
    """render_report should write to file when output_file is specified."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".txt", delete=False) as f:
        path = f.name
    try:
        render_report(_make_result(), output_file=path)
        with open(path) as f:
            content = f.read()
        assert "test-repo" in content
        assert "TOTAL" in content
    finally:
        os.unlink(path)
