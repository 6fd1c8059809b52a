"""Tests for the cadence CLI commands."""

import json
import logging
from datetime import timedelta

import pytest
import typer
from typer.testing import CliRunner

from cadence.consts import VERSION
from cadence.domain.models import Rating
from cadence.interface.cli import app, humanize, parse_rating

runner = CliRunner()


# --- Helpers ---


@pytest.mark.parametrize(
    "value,expected",
    [
        ("1", Rating.AGAIN),
        ("again", Rating.AGAIN),
        ("Hard", Rating.HARD),
        ("3", Rating.GOOD),
        (" EASY ", Rating.EASY),
    ],
)
def test_parse_rating(value, expected):
    assert parse_rating(value) is expected


@pytest.mark.parametrize("value", ["0", "5", "ok", ""])
def test_parse_rating_rejects(value):
    with pytest.raises(typer.BadParameter):
        parse_rating(value)


def test_humanize():
    assert humanize(timedelta(minutes=10)) == "10m"
    assert humanize(timedelta(hours=5)) == "5h"
    assert humanize(timedelta(days=29)) == "29d"


# --- Root commands ---


def test_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "preview" in result.stdout
    assert "simulate" in result.stdout


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert VERSION in result.stdout


# --- simulate ---


def test_simulate_json(mock_home):
    result = runner.invoke(app, ["simulate", "good", "good", "--no-fuzz", "--json"])
    assert result.exit_code == 0

    logs = json.loads(result.stdout)
    assert [log["rating"] for log in logs] == [3, 3]
    assert [log["state"] for log in logs] == [0, 1]
    assert [log["scheduled_days"] for log in logs] == [0, 2]
    assert logs[0]["stability"] == 2.4


def test_simulate_table(mock_home):
    result = runner.invoke(app, ["simulate", "3", "easy", "again", "--no-fuzz"])
    assert result.exit_code == 0
    assert "Rating" in result.stdout
    assert "Final: Relearning" in result.stdout
    assert "lapses 1" in result.stdout


def test_simulate_seed_is_reproducible(mock_home):
    args = ["simulate", "easy", "good", "good", "good", "--seed", "7", "--json"]
    first = json.loads(runner.invoke(app, args).stdout)
    second = json.loads(runner.invoke(app, args).stdout)
    assert [log["scheduled_days"] for log in first] == [log["scheduled_days"] for log in second]


def test_simulate_bad_rating(mock_home):
    result = runner.invoke(app, ["simulate", "good", "banana"])
    assert result.exit_code != 0
    assert "banana" in result.output


# --- preview ---


def test_preview_new_card(mock_home):
    result = runner.invoke(app, ["preview", "--no-fuzz", "--json"])
    assert result.exit_code == 0

    data = json.loads(result.stdout)
    assert set(data) == {"again", "hard", "good", "easy"}
    assert data["good"]["state"] == "learning"
    assert data["good"]["interval"] == "10m"
    assert data["easy"]["state"] == "review"
    assert data["easy"]["interval"] == "6d"


def test_preview_review_card(mock_home):
    result = runner.invoke(
        app,
        [
            "preview",
            "--state",
            "review",
            "--stability",
            "10",
            "--difficulty",
            "5",
            "--elapsed",
            "10",
            "--no-fuzz",
            "--json",
        ],
    )
    assert result.exit_code == 0

    data = json.loads(result.stdout)
    assert data["again"]["state"] == "relearning"
    assert data["good"]["scheduled_days"] == 29
    assert data["hard"]["scheduled_days"] <= data["good"]["scheduled_days"]
    assert data["easy"]["scheduled_days"] > data["good"]["scheduled_days"]


def test_preview_table(mock_home):
    result = runner.invoke(
        app, ["preview", "--state", "review", "--stability", "10", "--difficulty", "5"]
    )
    assert result.exit_code == 0
    assert "Relearning" in result.stdout


def test_preview_retention_override(mock_home):
    result = runner.invoke(
        app,
        [
            "preview",
            "--state",
            "review",
            "--stability",
            "10",
            "--difficulty",
            "5",
            "--elapsed",
            "10",
            "--retention",
            "0.8",
            "--no-fuzz",
            "--json",
        ],
    )
    assert result.exit_code == 0
    assert json.loads(result.stdout)["good"]["scheduled_days"] > 29


def test_preview_missing_memory_state(mock_home):
    result = runner.invoke(app, ["preview", "--state", "review"])
    assert result.exit_code == 1
    assert "Error" in result.output


def test_preview_unknown_state(mock_home):
    result = runner.invoke(app, ["preview", "--state", "forgotten"])
    assert result.exit_code != 0


def test_preview_bad_retention(mock_home):
    result = runner.invoke(app, ["preview", "--retention", "1.5"])
    assert result.exit_code == 1
    assert "Invalid parameter set" in result.output


# --- config ---


def test_config_show(mock_home):
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["request_retention"] == 0.9
    assert data["maximum_interval"] == 36500
    assert "verbose" not in data


def test_config_show_reads_toml(mock_home):
    config_dir = mock_home / ".config" / "cadence"
    config_dir.mkdir(parents=True)
    (config_dir / "config.toml").write_text("request_retention = 0.85\n", encoding="utf-8")

    result = runner.invoke(app, ["config", "show"])
    assert json.loads(result.stdout)["request_retention"] == 0.85


def test_config_check(mock_home):
    result = runner.invoke(app, ["config", "check"])
    assert result.exit_code == 0
    assert "OK: model 4.0" in result.stdout


def test_config_check_reports_bad_weights(mock_home, monkeypatch):
    monkeypatch.setenv("CADENCE_WEIGHTS", "[1.0]")
    result = runner.invoke(app, ["config", "check"])
    assert result.exit_code == 1
    assert "17 weights" in result.output


def test_verbose_flag_sets_log_level(mock_home):
    result = runner.invoke(app, ["-vv", "version"])
    assert result.exit_code == 0
    assert logging.getLogger().level == logging.DEBUG
    logging.getLogger().setLevel(logging.WARNING)


@pytest.mark.parametrize(
    "args",
    [["config", "check"], ["config", "show"], ["simulate", "good"], ["preview"]],
    ids=["config_check", "config_show", "simulate", "preview"],
)
def test_malformed_env_reports_error(mock_home, monkeypatch, args):
    monkeypatch.setenv("CADENCE_MAXIMUM_INTERVAL", "abc")
    result = runner.invoke(app, args)
    assert result.exit_code == 1
    assert "Error: Invalid configuration" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)
