"""MCP server for slotwise: exposes energy profiles and slot suggestions to AI assistants."""

from __future__ import annotations

import json
from datetime import datetime

from mcp.server.fastmcp import FastMCP

from slotwise.energy import energy_insights as compute_insights
from slotwise.energy import get_energy_profile as default_profile
from slotwise.energy import observed_profile
from slotwise.errors import SlotwiseError
from slotwise.models import CandidateSlot, EnergyLog, SchedulerConfig, StoredTask, TaskDescriptor
from slotwise.persistence import Store
from slotwise.ranker import confidence, explain_slot
from slotwise.ranker import rank_slots as rank
from slotwise.ranker import validate_task

mcp = FastMCP(
    "slotwise",
    instructions="""\
slotwise suggests when to do a task based on how energetic the user usually \
is at each hour of the day. Tasks have a duration (minutes), a priority \
(1 = can wait, 5 = urgent) and optionally the energy they demand (1-5).

Key concepts:
- **Energy profile**: 24 hourly buckets with an energy level (1-5) and a \
productivity score (0-100). The default curve peaks 8-11, dips 12-14, \
recovers 15-17 and tapers through the evening.
- **Observed profile**: the default curve with hours the user has logged \
energy for replaced by their logged average. Pass observed=true to use it.
- **Suggestions**: on-the-hour starts in hours with energy >= 3, scored by \
productivity plus bonuses, best first. Suggestions are advisory; nothing is \
booked.

When the user asks when to do something, prefer suggest_for_task for a saved \
task or rank_slots for a one-off. When they report how they feel, use \
log_energy.\
""",
)


def _get_store() -> Store:
    return Store()


def _now(config: SchedulerConfig, now_iso: str | None) -> datetime:
    tz = config.zone()
    if not now_iso:
        return datetime.now(tz)
    dt = datetime.fromisoformat(now_iso)
    return dt if dt.tzinfo else dt.replace(tzinfo=tz)


def _slot_to_dict(s: CandidateSlot, task: TaskDescriptor) -> dict:
    d = s.to_dict()
    d["start_display"] = s.start.strftime("%a %b %d, %H:%M")
    d["confidence"] = confidence(s.score)
    d["reasons"] = explain_slot(s, task)
    return d


def _suggest(task: TaskDescriptor, config: SchedulerConfig, logs: list[EnergyLog], observed: bool,
             lookahead_days: int | None, now_iso: str | None) -> str:
    tz = config.zone()
    profile = observed_profile(logs, tz) if observed else None
    slots = rank(
        task,
        _now(config, now_iso),
        config.lookahead_days if lookahead_days is None else lookahead_days,
        tz=tz,
        profile=profile,
        respect_deadline=config.respect_deadline,
        limit=config.max_results,
    )
    return json.dumps([_slot_to_dict(s, task) for s in slots], indent=2)


# ---------------------------------------------------------------------------
# Read tools
# ---------------------------------------------------------------------------


@mcp.tool()
def get_energy_profile(observed: bool = False) -> str:
    """Get the 24-hour energy profile.

    Args:
        observed: Blend in the user's logged energy levels instead of the default curve
    """
    store = _get_store()
    config, _, logs = store.load()
    config = config or SchedulerConfig()
    try:
        prof = observed_profile(logs, config.zone()) if observed else default_profile()
    except SlotwiseError as e:
        return f"Error: {e}"
    return json.dumps(prof.to_list(), indent=2)


@mcp.tool()
def rank_slots(
    duration_minutes: int,
    priority: int = 3,
    energy_level: int | None = None,
    deadline: str | None = None,
    lookahead_days: int | None = None,
    observed: bool = False,
    now: str | None = None,
) -> str:
    """Suggest time slots for a one-off task, best first.

    Args:
        duration_minutes: Estimated duration in minutes
        priority: 1 (can wait) to 5 (urgent)
        energy_level: Energy the task demands, 1-5 (omit for no preference)
        deadline: Deadline (YYYY-MM-DD or ISO timestamp)
        lookahead_days: Days to search (defaults to the configured lookahead)
        observed: Rank against the user's logged energy
        now: Override the current time (ISO timestamp), mainly for testing
    """
    store = _get_store()
    config, _, logs = store.load()
    config = config or SchedulerConfig()
    stored = StoredTask("adhoc", "adhoc", duration_minutes, priority, energy_level, deadline)
    try:
        task = stored.descriptor(config.zone())
        return _suggest(task, config, logs, observed, lookahead_days, now)
    except ValueError as e:
        return f"Error: {e}"


@mcp.tool()
def suggest_for_task(task_id: str, observed: bool = False, now: str | None = None) -> str:
    """Suggest time slots for a saved task, best first.

    Args:
        task_id: Task ID (e.g. "T-3")
        observed: Rank against the user's logged energy
        now: Override the current time (ISO timestamp), mainly for testing
    """
    store = _get_store()
    config, tasks, logs = store.load()
    config = config or SchedulerConfig()
    if task_id not in tasks:
        return f"Error: task {task_id} not found."
    try:
        task = tasks[task_id].descriptor(config.zone())
        return _suggest(task, config, logs, observed, None, now)
    except ValueError as e:
        return f"Error: {e}"


@mcp.tool()
def list_tasks(tag_filter: str | None = None) -> str:
    """List saved tasks.

    Args:
        tag_filter: Filter by specific tag (e.g. "errands")
    """
    store = _get_store()
    _, tasks, _ = store.load()
    if not tasks:
        return "No tasks found."

    filtered = list(tasks.values())
    if tag_filter:
        q = tag_filter.lower()
        filtered = [t for t in filtered if any(q == tag.lower() for tag in t.tags)]
    if not filtered:
        return "No matching tasks."

    return json.dumps([{"id": t.id, **t.to_dict()} for t in filtered], indent=2)


@mcp.tool()
def get_energy_insights() -> str:
    """Summarize logged energy: average, peak and dip hours, and trend."""
    store = _get_store()
    config, _, logs = store.load()
    config = config or SchedulerConfig()
    try:
        result = compute_insights(logs, config.zone())
    except SlotwiseError as e:
        return f"Error: {e}"
    return json.dumps(result.to_dict(), indent=2)


# ---------------------------------------------------------------------------
# Write tools
# ---------------------------------------------------------------------------


@mcp.tool()
def add_task(
    name: str,
    duration_minutes: int,
    priority: int = 3,
    energy_level: int | None = None,
    deadline: str | None = None,
    tags: list[str] | None = None,
) -> str:
    """Add a new task.

    Args:
        name: Task name/title
        duration_minutes: Estimated duration in minutes
        priority: 1 (can wait) to 5 (urgent)
        energy_level: Energy the task demands, 1-5 (omit for no preference)
        deadline: Deadline (YYYY-MM-DD or ISO timestamp)
        tags: List of context tags (e.g. ["errands", "deep-work"])
    """
    store = _get_store()
    config, tasks, logs = store.load()
    try:
        validate_task(TaskDescriptor(duration_minutes, priority, energy_level))
        if deadline:
            datetime.fromisoformat(deadline)
    except ValueError as e:
        return f"Error: {e}"

    tid = store.generate_id(tasks)
    tasks[tid] = StoredTask(
        id=tid,
        name=name,
        duration_minutes=duration_minutes,
        priority=priority,
        energy_level=energy_level,
        deadline=deadline,
        tags=tags or [],
    )
    store.save(config, tasks, logs)
    return f"Added '{name}' as {tid}"


@mcp.tool()
def delete_task(task_id: str) -> str:
    """Delete a saved task.

    Args:
        task_id: Task ID (e.g. "T-3")
    """
    store = _get_store()
    config, tasks, logs = store.load()
    if task_id not in tasks:
        return f"Error: task {task_id} not found."
    del tasks[task_id]
    store.save(config, tasks, logs)
    return f"Deleted {task_id}."


@mcp.tool()
def log_energy(level: int, timestamp: str | None = None) -> str:
    """Record how energetic the user feels.

    Args:
        level: Energy level, 1 (drained) to 5 (peak)
        timestamp: When (ISO timestamp); defaults to now
    """
    store = _get_store()
    config, tasks, logs = store.load()
    if not 1 <= level <= 5:
        return f"Error: energy level must be 1-5, got {level}."
    try:
        when = _now(config or SchedulerConfig(), timestamp)
    except ValueError as e:
        return f"Error: {e}"
    logs.append(EnergyLog(level=level, timestamp=when))
    store.save(config, tasks, logs)
    return f"Energy level {level}/5 logged at {when.isoformat()}."


def main():
    """Entry point for the MCP server."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
