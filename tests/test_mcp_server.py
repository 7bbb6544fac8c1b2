import json

import pytest

from slotwise import mcp_server


@pytest.fixture(autouse=True)
def db(tmp_path, monkeypatch):
    path = tmp_path / "db.json"
    monkeypatch.setenv("SLOTWISE_DB", str(path))
    return path


def test_get_energy_profile():
    buckets = json.loads(mcp_server.get_energy_profile())
    assert len(buckets) == 24
    assert buckets[9] == {"hour": 9, "energy_level": 5, "productivity": 90}


def test_rank_slots_ad_hoc():
    result = json.loads(mcp_server.rank_slots(90, priority=2, energy_level=4, now="2026-03-04T06:00"))
    assert len(result) == 10
    assert result[0]["start"] == "2026-03-04T08:00:00+00:00"
    assert result[0]["start_display"] == "Wed Mar 04, 08:00"
    assert result[0]["confidence"] == "high"


def test_rank_slots_validation_error():
    assert mcp_server.rank_slots(0).startswith("Error:")
    assert mcp_server.rank_slots(30, priority=8).startswith("Error:")
    assert mcp_server.rank_slots(30, lookahead_days=-2).startswith("Error:")


def test_add_suggest_delete():
    assert mcp_server.add_task("Deep work", 120, priority=4, energy_level=5) == "Added 'Deep work' as T-1"
    listed = json.loads(mcp_server.list_tasks())
    assert listed[0]["id"] == "T-1"
    assert listed[0]["duration_minutes"] == 120

    slots = json.loads(mcp_server.suggest_for_task("T-1", now="2026-03-04T06:00"))
    assert slots[0]["end"] == "2026-03-04T10:00:00+00:00"

    assert mcp_server.delete_task("T-1") == "Deleted T-1."
    assert mcp_server.list_tasks() == "No tasks found."
    assert mcp_server.suggest_for_task("T-1").startswith("Error:")


def test_add_task_rejects_invalid_input():
    assert mcp_server.add_task("Bad", 30, energy_level=0).startswith("Error:")
    assert mcp_server.add_task("Bad", 30, deadline="next week").startswith("Error:")
    assert mcp_server.list_tasks() == "No tasks found."


def test_list_tasks_tag_filter():
    mcp_server.add_task("Groceries", 45, tags=["errands"])
    assert json.loads(mcp_server.list_tasks(tag_filter="Errands"))[0]["name"] == "Groceries"
    assert mcp_server.list_tasks(tag_filter="work") == "No matching tasks."


def test_log_energy_and_insights():
    assert mcp_server.log_energy(7).startswith("Error:")
    mcp_server.log_energy(4, "2026-03-04T10:00")
    mcp_server.log_energy(2, "2026-03-04T13:00")

    insights = json.loads(mcp_server.get_energy_insights())
    assert insights["log_count"] == 2
    assert insights["average"] == 3.0
    assert insights["peak_hour"] == 10
    assert insights["dip_hour"] == 13

    observed = json.loads(mcp_server.get_energy_profile(observed=True))
    assert observed[10] == {"hour": 10, "energy_level": 4, "productivity": 75}
    assert observed[13] == {"hour": 13, "energy_level": 2, "productivity": 40}
