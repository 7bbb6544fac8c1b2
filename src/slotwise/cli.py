"""Typer CLI for slotwise."""

from __future__ import annotations

import json
import logging
from datetime import datetime, tzinfo
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from slotwise.energy import energy_insights, format_hour, get_energy_profile, observed_profile
from slotwise.errors import SlotwiseError
from slotwise.models import EnergyLog, SchedulerConfig, StoredTask, TaskDescriptor
from slotwise.persistence import Store
from slotwise.ranker import confidence, explain_slot, rank_slots, validate_task

app = typer.Typer(
    name="slotwise",
    help="Energy-aware time slot suggestions for your tasks.",
    no_args_is_help=True,
)
console = Console()


def _get_store() -> Store:
    return Store()


def _complete_task_id(incomplete: str) -> list[str]:
    """Shell completion for task IDs. Matches against both ID and name."""
    try:
        _, tasks, _ = Store().load()
    except (OSError, ValueError):
        return []
    q = incomplete.lower()
    return [f"{t.name} ({tid})" for tid, t in tasks.items() if q in tid.lower() or q in t.name.lower()]


def _parse_task_id(task_id_arg: str) -> str:
    """Extracts the ID if the user used the autocompleted 'Name (ID)' format."""
    if "(" in task_id_arg and task_id_arg.endswith(")"):
        return task_id_arg.split("(")[-1].strip(")")
    return task_id_arg.strip()


def _zone(config: SchedulerConfig) -> tzinfo:
    try:
        return config.zone()
    except SlotwiseError as e:
        console.print(f"[red]{e}. Run 'slotwise init --timezone <zone>'.[/red]")
        raise typer.Exit(1)


def _parse_moment(value: str, tz: tzinfo) -> datetime:
    """Parse an ISO timestamp; naive values are read in *tz*."""
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        console.print(f"[red]Invalid timestamp '{value}'. Use ISO format (YYYY-MM-DDTHH:MM).[/red]")
        raise typer.Exit(1)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz)
    return dt


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def init(
    timezone: Annotated[str, typer.Option(help="IANA time zone, e.g. America/Toronto")] = "UTC",
    lookahead: Annotated[int, typer.Option(help="Days to look ahead when suggesting slots")] = 7,
    max_results: Annotated[int, typer.Option(help="Number of suggestions to show")] = 10,
    respect_deadline: Annotated[bool, typer.Option(help="Drop slots that end after a task's deadline")] = False,
) -> None:
    """Initialize (or reinitialize) scheduler settings."""
    store = _get_store()
    _, tasks, logs = store.load()
    config = SchedulerConfig(
        timezone=timezone,
        lookahead_days=lookahead,
        max_results=max_results,
        respect_deadline=respect_deadline,
    )
    _zone(config)
    if lookahead < 0 or max_results <= 0:
        console.print("[red]Lookahead must be >= 0 and max results must be positive.[/red]")
        raise typer.Exit(1)
    store.save(config, tasks, logs)
    console.print(f"[green]Settings saved. Time zone: {timezone}[/green]")


@app.command()
def add(
    name: str,
    duration: Annotated[int, typer.Option("--duration", "-d", help="Estimated duration in minutes")],
    priority: Annotated[int, typer.Option("--priority", "-p", help="1 (can wait) to 5 (urgent)")] = 3,
    energy: Annotated[Optional[int], typer.Option("--energy", "-e", help="Energy the task demands (1-5)")] = None,
    deadline: Annotated[Optional[str], typer.Option(help="Deadline (YYYY-MM-DD or ISO timestamp)")] = None,
    tags: Annotated[Optional[list[str]], typer.Option("--tag", "-t", help="Context tags")] = None,
) -> None:
    """Add a new task."""
    store = _get_store()
    config, tasks, logs = store.load()

    try:
        validate_task(TaskDescriptor(duration, priority, energy))
    except SlotwiseError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    if deadline:
        try:
            datetime.fromisoformat(deadline)
        except ValueError:
            console.print(f"[red]Invalid deadline '{deadline}'. Use YYYY-MM-DD.[/red]")
            raise typer.Exit(1)

    tid = store.generate_id(tasks)
    tasks[tid] = StoredTask(
        id=tid,
        name=name,
        duration_minutes=duration,
        priority=priority,
        energy_level=energy,
        deadline=deadline,
        tags=tags or [],
    )
    store.save(config, tasks, logs)
    console.print(f"[green]Added '{name}' as {tid}[/green]")


@app.command("list")
def list_tasks(
    tag: Annotated[Optional[str], typer.Option("--tag", "-t", help="Filter by tag")] = None,
) -> None:
    """List all tasks."""
    store = _get_store()
    _, tasks, _ = store.load()
    if not tasks:
        console.print("No tasks found.")
        return

    filtered = list(tasks.values())
    if tag:
        qt = tag.lower()
        filtered = [t for t in filtered if any(qt == tg.lower() for tg in t.tags)]
    if not filtered:
        console.print("No tasks match the filter.")
        return

    table = Table(title="Tasks")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Minutes")
    table.add_column("Priority")
    table.add_column("Energy")
    table.add_column("Deadline")
    table.add_column("Tags")
    for t in filtered:
        table.add_row(
            t.id,
            t.name,
            str(t.duration_minutes),
            str(t.priority),
            str(t.energy_level) if t.energy_level is not None else "-",
            t.deadline or "-",
            ", ".join(t.tags) or "-",
        )
    console.print(table)


@app.command()
def delete(task_id: Annotated[str, typer.Argument(autocompletion=_complete_task_id)]) -> None:
    """Delete a task."""
    task_id = _parse_task_id(task_id)
    store = _get_store()
    config, tasks, logs = store.load()
    if task_id not in tasks:
        console.print(f"[red]Task {task_id} not found.[/red]")
        raise typer.Exit(1)
    del tasks[task_id]
    store.save(config, tasks, logs)
    console.print(f"[green]Deleted {task_id}.[/green]")


@app.command()
def profile(
    observed: Annotated[bool, typer.Option("--observed", help="Blend in your logged energy levels")] = False,
) -> None:
    """Show the hour-by-hour energy profile."""
    store = _get_store()
    config, _, logs = store.load()
    config = config or SchedulerConfig()

    if observed:
        try:
            prof = observed_profile(logs, _zone(config))
        except SlotwiseError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
    else:
        prof = get_energy_profile()

    table = Table(title="Observed Energy Profile" if observed else "Energy Profile")
    table.add_column("Hour")
    table.add_column("Energy")
    table.add_column("Productivity")
    for b in prof:
        style = "bold green" if b.energy_level >= 4 else ("dim" if b.energy_level <= 2 else None)
        table.add_row(
            f"{b.hour:02d}:00",
            f"{'█' * b.energy_level} {b.energy_level}",
            str(b.productivity),
            style=style,
        )
    console.print(table)


@app.command("log-energy")
def log_energy(
    level: Annotated[int, typer.Argument(help="How energetic you feel, 1-5")],
    at: Annotated[Optional[str], typer.Option("--at", help="When (ISO timestamp); defaults to now")] = None,
) -> None:
    """Record your current energy level."""
    store = _get_store()
    config, tasks, logs = store.load()
    tz = _zone(config or SchedulerConfig())

    if not 1 <= level <= 5:
        console.print(f"[red]Energy level must be 1-5, got {level}[/red]")
        raise typer.Exit(1)

    timestamp = _parse_moment(at, tz) if at else datetime.now(tz)
    logs.append(EnergyLog(level=level, timestamp=timestamp))
    store.save(config, tasks, logs)
    console.print(f"[green]Energy level {level}/5 logged at {timestamp.strftime('%a %b %d, %H:%M')}.[/green]")


@app.command()
def insights() -> None:
    """Summarize your logged energy: average, peak and dip hours, trend."""
    store = _get_store()
    config, _, logs = store.load()
    if not logs:
        console.print("No energy logs yet. Use 'slotwise log-energy <level>'.")
        return

    result = energy_insights(logs, _zone(config or SchedulerConfig()))
    trend_text = {
        "up": "[green]trending up[/green]",
        "down": "[red]trending down - consider more rest[/red]",
        "stable": "stable",
    }[result.trend]

    console.print("\n[bold underline]Energy Insights[/bold underline]\n")
    console.print(f"  Logs:     {result.log_count}")
    console.print(f"  Average:  {result.average:.1f} ({result.label})")
    console.print(f"  Peak:     around {format_hour(result.peak_hour)}")
    if result.dip_hour is not None:
        console.print(f"  Dip:      around {format_hour(result.dip_hour)} - schedule low-energy tasks then")
    console.print(f"  Trend:    {trend_text}")
    console.print()


@app.command()
def suggest(
    task_id: Annotated[Optional[str], typer.Argument(autocompletion=_complete_task_id, help="Stored task to place")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Ad-hoc task duration in minutes")] = None,
    priority: Annotated[int, typer.Option("--priority", "-p", help="Ad-hoc task priority (1-5)")] = 3,
    energy: Annotated[Optional[int], typer.Option("--energy", "-e", help="Ad-hoc task energy demand (1-5)")] = None,
    days: Annotated[Optional[int], typer.Option("--days", help="Lookahead in days (default from settings)")] = None,
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", help="Max suggestions (default from settings)")] = None,
    observed: Annotated[bool, typer.Option("--observed", help="Rank against your logged energy")] = False,
    now: Annotated[Optional[str], typer.Option("--now", help="Pretend the current time is this (ISO)")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Suggest the best time slots for a task."""
    store = _get_store()
    config, tasks, logs = store.load()
    config = config or SchedulerConfig()
    tz = _zone(config)

    if task_id is not None:
        task_id = _parse_task_id(task_id)
        if task_id not in tasks:
            console.print(f"[red]Task {task_id} not found.[/red]")
            raise typer.Exit(1)
        stored = tasks[task_id]
        task = stored.descriptor(tz)
        title = f"Suggested slots for {stored.id}: {stored.name}"
    elif duration is not None:
        task = TaskDescriptor(duration, priority, energy)
        title = f"Suggested slots for a {duration}-minute task"
    else:
        console.print("[red]Give a task ID or --duration for an ad-hoc task.[/red]")
        raise typer.Exit(1)

    current = _parse_moment(now, tz) if now else datetime.now(tz)
    try:
        prof = observed_profile(logs, tz) if observed else None
        slots = rank_slots(
            task,
            current,
            config.lookahead_days if days is None else days,
            tz=tz,
            profile=prof,
            respect_deadline=config.respect_deadline,
            limit=config.max_results if limit is None else limit,
        )
    except SlotwiseError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if as_json:
        out = []
        for s in slots:
            d = s.to_dict()
            d["confidence"] = confidence(s.score)
            d["reasons"] = explain_slot(s, task)
            out.append(d)
        typer.echo(json.dumps(out, indent=2))
        return

    if not slots:
        console.print("No open slots in the lookahead window.")
        return

    table = Table(title=title)
    table.add_column("#")
    table.add_column("Start", no_wrap=True)
    table.add_column("End")
    table.add_column("Score")
    table.add_column("Confidence")
    table.add_column("Why")
    for i, s in enumerate(slots, 1):
        conf = confidence(s.score)
        style = {"high": "bold green", "medium": None, "low": "dim"}[conf]
        table.add_row(
            str(i),
            s.start.strftime("%a %b %d, %H:%M"),
            s.end.strftime("%H:%M"),
            f"{s.score:g}",
            conf,
            "; ".join(explain_slot(s, task)),
            style=style,
        )
    console.print(table)


if __name__ == "__main__":
    app()
