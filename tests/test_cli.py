import json

import pytest
from typer.testing import CliRunner

from slotwise.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    monkeypatch.delenv("SLOTWISE_DB", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_suggest_stored_task_json():
    runner.invoke(app, ["init", "--timezone", "America/Toronto"])
    result = runner.invoke(app, ["add", "Draft", "-d", "90", "-p", "2", "-e", "4"])
    assert "Added 'Draft' as T-1" in result.stdout

    result = runner.invoke(app, ["suggest", "T-1", "--json", "--days", "1", "--now", "2026-03-04T06:00"])
    assert result.exit_code == 0, result.stdout
    slots = json.loads(result.stdout)
    assert len(slots) == 10
    assert slots[0]["start"] == "2026-03-04T08:00:00-05:00"
    assert slots[0]["end"] == "2026-03-04T09:30:00-05:00"
    assert slots[0]["score"] == 100
    assert slots[0]["confidence"] == "high"
    assert "Peak morning productivity - best time for focused work" in slots[0]["reasons"]


def test_suggest_ad_hoc_table():
    result = runner.invoke(app, ["suggest", "-d", "30", "--now", "2026-03-04T06:00", "--limit", "3"])
    assert result.exit_code == 0, result.stdout
    assert "Suggested slots" in result.stdout
    assert "08:00" in result.stdout


def test_suggest_without_task_fails():
    result = runner.invoke(app, ["suggest"])
    assert result.exit_code == 1


def test_suggest_unknown_task():
    result = runner.invoke(app, ["suggest", "T-9"])
    assert result.exit_code == 1
    assert "not found" in result.stdout


def test_suggest_rejects_invalid_duration():
    result = runner.invoke(app, ["suggest", "-d", "0"])
    assert result.exit_code == 1
    assert "Duration must be positive" in result.stdout


def test_suggest_zero_days():
    result = runner.invoke(app, ["suggest", "-d", "30", "--days", "0"])
    assert result.exit_code == 0
    assert "No open slots" in result.stdout


def test_add_rejects_bad_priority():
    result = runner.invoke(app, ["add", "Oops", "-d", "30", "-p", "7"])
    assert result.exit_code == 1
    assert "Priority must be 1-5" in result.stdout


def test_init_rejects_unknown_zone():
    result = runner.invoke(app, ["init", "--timezone", "Nowhere/Special"])
    assert result.exit_code == 1


def test_list_and_delete():
    runner.invoke(app, ["add", "Gym", "-d", "60", "--tag", "health"])
    result = runner.invoke(app, ["list"])
    assert "Gym" in result.stdout

    result = runner.invoke(app, ["list", "--tag", "work"])
    assert "No tasks match" in result.stdout

    result = runner.invoke(app, ["delete", "Gym (T-1)"])
    assert result.exit_code == 0
    assert "Deleted T-1" in result.stdout
    assert "No tasks found" in runner.invoke(app, ["list"]).stdout


def test_profile():
    result = runner.invoke(app, ["profile"])
    assert result.exit_code == 0
    assert "Energy Profile" in result.stdout
    assert "09:00" in result.stdout


def test_log_energy_and_insights():
    assert "No energy logs" in runner.invoke(app, ["insights"]).stdout

    runner.invoke(app, ["log-energy", "5", "--at", "2026-03-04T09:00"])
    runner.invoke(app, ["log-energy", "2", "--at", "2026-03-04T14:00"])
    result = runner.invoke(app, ["insights"])
    assert result.exit_code == 0
    assert "Average:  3.5 (Good)" in result.stdout
    assert "9AM" in result.stdout
    assert "2PM" in result.stdout

    result = runner.invoke(app, ["profile", "--observed"])
    assert "Observed Energy Profile" in result.stdout


def test_log_energy_rejects_out_of_range():
    result = runner.invoke(app, ["log-energy", "6"])
    assert result.exit_code == 1
    assert "1-5" in result.stdout


def test_suggest_with_observed_profile():
    # A slump logged at 08:00 drops that hour below the usable threshold
    runner.invoke(app, ["log-energy", "1", "--at", "2026-03-03T08:00"])
    result = runner.invoke(
        app, ["suggest", "-d", "30", "--days", "1", "--now", "2026-03-04T06:00", "--observed", "--json"]
    )
    hours = [s["start"][11:13] for s in json.loads(result.stdout)]
    assert "08" not in hours
    assert hours[0] == "09"
