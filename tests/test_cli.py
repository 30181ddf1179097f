"""
Tests for the PropTrail command-line interface.

We use `typer.testing.CliRunner` to invoke the app in-process against small
event files written to `tmp_path`.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from proptrail import cli
from proptrail.cli import app


@pytest.fixture(autouse=True)  # type: ignore[misc]
def wide_console(monkeypatch: pytest.MonkeyPatch) -> None:
    """Render tables wide enough that cell text is never wrapped."""
    monkeypatch.setattr(cli, "console", Console(width=200))


@pytest.fixture  # type: ignore[misc]
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture  # type: ignore[misc]
def events_file(tmp_path: Path) -> Path:
    rows = [
        {
            "property_id": "prop-1",
            "type": "listed",
            "title": "Listed for sale",
            "description": "Asking 450k",
            "timestamp": "2024-01-05T10:00:00Z",
        },
        {
            "property_id": "prop-1",
            "type": "price_decrease",
            "title": "Price reduced",
            "description": "Now 425k",
            "timestamp": "2024-02-01T10:00:00Z",
            "data": {"old_price": 450000, "new_price": 425000},
        },
        {
            "property_id": "prop-2",
            "type": "note_added",
            "title": "Seller call",
            "description": "Asked about price",
            "timestamp": "2024-02-03T10:00:00Z",
        },
    ]
    path = tmp_path / "events.json"
    path.write_text(json.dumps(rows), encoding="utf-8")
    return path


def test_cli_help_shows_usage(runner: CliRunner) -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0, f"Help failed: {result.output}"
    assert "PropTrail" in result.output
    for command in ("properties", "timeline", "search", "analytics", "export"):
        assert command in result.output


def test_missing_file_is_a_usage_error(runner: CliRunner) -> None:
    result = runner.invoke(app, ["timeline", "ghost.json", "--property", "p"])
    assert result.exit_code != 0
    assert "does not exist" in result.output


def test_timeline_command(runner: CliRunner, events_file: Path) -> None:
    result = runner.invoke(app, ["timeline", str(events_file), "--property", "prop-1"])
    assert result.exit_code == 0, result.output
    assert "Loaded 3 event(s)" in result.output
    assert "Price reduced" in result.output
    assert "Seller call" not in result.output
    assert "2 event(s) total" in result.output


def test_search_command(runner: CliRunner, events_file: Path) -> None:
    result = runner.invoke(app, ["search", str(events_file), "--keywords", "price"])
    assert result.exit_code == 0, result.output
    assert "2 matching event(s)" in result.output
    assert "Facets" in result.output


def test_properties_command(runner: CliRunner, events_file: Path) -> None:
    result = runner.invoke(app, ["properties", str(events_file)])
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    prop_1 = next(line for line in lines if "prop-1" in line)
    prop_2 = next(line for line in lines if "prop-2" in line)
    assert " 2 " in prop_1 and "2024-02-01 10:00" in prop_1
    assert " 1 " in prop_2 and "2024-02-03 10:00" in prop_2


def test_analytics_command(runner: CliRunner, events_file: Path) -> None:
    result = runner.invoke(app, ["analytics", str(events_file), "--property", "prop-1"])
    assert result.exit_code == 0, result.output
    assert "Days on market" in result.output

    absent = runner.invoke(app, ["analytics", str(events_file), "--property", "ghost"])
    assert absent.exit_code == 1


def test_export_command(runner: CliRunner, events_file: Path, tmp_path: Path) -> None:
    target = tmp_path / "out.csv"
    result = runner.invoke(
        app,
        ["export", str(events_file), "-p", "prop-1", "--format", "csv", "-o", str(target)],
    )
    assert result.exit_code == 0, result.output
    lines = target.read_text(encoding="utf-8").split("\n")
    assert len(lines) == 3
    assert lines[1].startswith('"2024-02-01T10:00:00+00:00","price_decrease"')


def test_export_rejects_unknown_format(
    runner: CliRunner, events_file: Path, tmp_path: Path
) -> None:
    result = runner.invoke(
        app,
        ["export", str(events_file), "-p", "prop-1", "-f", "xml", "-o", str(tmp_path / "x")],
    )
    assert result.exit_code == 1
    assert "Unsupported format" in result.output
