"""
Smoke tests for the command line interface (in-memory store only).
"""

import pytest
from typer.testing import CliRunner

from supervitre.cli.app import app

runner = CliRunner()

FAR_MONDAY = "2099-01-05"


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "config.yaml"
    path.write_text("timezone: America/Toronto\nservice_duration_hours: 4\n", encoding="utf-8")
    return str(path)


def test_estimate(config_file):
    result = runner.invoke(app, ["estimate", "--windows", "10", "--stories", "2", "--config", config_file])

    assert result.exit_code == 0
    assert "$100 - $230" in result.output


def test_estimate_rejects_bad_input(config_file):
    result = runner.invoke(app, ["estimate", "--windows", "none", "--config", config_file])
    assert result.exit_code == 1


def test_slots_mock(config_file):
    result = runner.invoke(app, ["slots", FAR_MONDAY, "--mock", "--config", config_file])

    assert result.exit_code == 0
    assert "9:00 AM" in result.output
    assert "4:00 PM" in result.output


def test_slots_closed_day(config_file):
    result = runner.invoke(app, ["slots", "2099-01-04", "--mock", "--config", config_file])

    assert result.exit_code == 0
    assert "Closed" in result.output


def test_book_mock(config_file):
    result = runner.invoke(
        app,
        [
            "book", FAR_MONDAY, "9:00 AM",
            "--first-name", "Olivier",
            "--last-name", "Gagnon",
            "--email", "olivier@example.com",
            "--phone", "438-555-0190",
            "--address", "45 Avenue Laurier E",
            "--city", "Montréal",
            "--zip-code", "H2T 1E9",
            "--mock",
            "--config", config_file,
        ],
    )

    assert result.exit_code == 0
    assert "Reservation confirmed" in result.output
    assert "SV" in result.output


def test_book_past_slot_asks_for_another_time(config_file):
    result = runner.invoke(
        app,
        [
            "book", "2000-01-03", "9:00 AM",
            "--first-name", "Olivier",
            "--last-name", "Gagnon",
            "--email", "olivier@example.com",
            "--phone", "438-555-0190",
            "--address", "45 Avenue Laurier E",
            "--city", "Montréal",
            "--zip-code", "H2T 1E9",
            "--mock",
            "--config", config_file,
        ],
    )

    assert result.exit_code == 2
    assert "no longer available" in result.output


def test_missing_explicit_config(tmp_path):
    result = runner.invoke(app, ["hours", "--config", str(tmp_path / "nope.yaml")])
    assert result.exit_code == 1


def test_hours(config_file):
    result = runner.invoke(app, ["hours", "--config", config_file])

    assert result.exit_code == 0
    assert "Sunday: closed" in result.output
