"""Slot ranking: enumerate hourly start times over a lookahead window and score them."""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, timezone, tzinfo

from slotwise.energy import get_energy_profile
from slotwise.errors import InvalidDuration, InvalidLookahead, InvalidRange, SlotwiseError
from slotwise.models import CandidateSlot, EnergyProfile, HourBucket, TaskDescriptor

logger = logging.getLogger(__name__)

DEFAULT_LOOKAHEAD_DAYS = 7
DEFAULT_LIMIT = 10
MIN_SLOT_ENERGY = 3
ENERGY_MATCH_BONUS = 20
MAX_SCORE = 100


def validate_task(task: TaskDescriptor) -> None:
    """Raise a SlotwiseError subclass if *task* can't be ranked."""
    if task.estimated_duration_minutes <= 0:
        raise InvalidDuration(
            f"Duration must be positive, got {task.estimated_duration_minutes} minutes"
        )
    if not 1 <= task.priority <= 5:
        raise InvalidRange(f"Priority must be 1-5, got {task.priority}")
    if task.energy_level is not None and not 1 <= task.energy_level <= 5:
        raise InvalidRange(f"Energy level must be 1-5, got {task.energy_level}")


def score_slot(bucket: HourBucket, task: TaskDescriptor) -> float:
    """Productivity, plus an energy-match bonus and a priority term, capped at 100.

    The priority term is (6 - priority) * 5, so low-priority tasks get the
    larger bonus.
    """
    score = bucket.productivity
    if task.energy_level is not None and abs(bucket.energy_level - task.energy_level) <= 1:
        score += ENERGY_MATCH_BONUS
    score += (6 - task.priority) * 5
    return min(MAX_SCORE, score)


def _add_elapsed(start: datetime, delta: timedelta) -> datetime:
    """Add real elapsed time; aware datetimes would otherwise add on the wall clock."""
    if start.tzinfo is None:
        return start + delta
    return (start.astimezone(timezone.utc) + delta).astimezone(start.tzinfo)


def _align_deadline(deadline: datetime | None, tz: tzinfo | None) -> datetime | None:
    """Read a naive deadline in *tz*; an aware deadline can't be compared with naive times."""
    if deadline is None:
        return None
    if deadline.tzinfo is None:
        return deadline.replace(tzinfo=tz) if tz is not None else deadline
    if tz is None:
        raise SlotwiseError("Deadline has a time zone but the slots don't; pass tz or an aware now")
    return deadline


def rank_slots(
    task: TaskDescriptor,
    now: datetime,
    lookahead_days: int = DEFAULT_LOOKAHEAD_DAYS,
    *,
    tz: tzinfo | None = None,
    profile: EnergyProfile | None = None,
    respect_deadline: bool = False,
    limit: int = DEFAULT_LIMIT,
) -> list[CandidateSlot]:
    """Top-ranked start times for *task* over the next *lookahead_days* days.

    Candidates start on the hour at every profile hour with energy >= 3,
    on each day from the local date of *now*. Only starts strictly after
    *now* are kept. Results are sorted by score, highest first; equal
    scores keep earlier-day, earlier-hour order.

    *tz* is the zone the hours are read in. It defaults to now's own tzinfo;
    a naive *now* with a *tz* is taken as wall-clock time in that zone.
    With *respect_deadline*, slots ending after task.deadline are dropped.
    """
    validate_task(task)
    if lookahead_days < 0:
        raise InvalidLookahead(f"Lookahead must be >= 0 days, got {lookahead_days}")
    if limit <= 0:
        raise SlotwiseError(f"Result limit must be positive, got {limit}")

    if tz is None:
        tz = now.tzinfo
    elif now.tzinfo is None:
        now = now.replace(tzinfo=tz)
    else:
        now = now.astimezone(tz)

    if profile is None:
        profile = get_energy_profile()
    duration = timedelta(minutes=task.estimated_duration_minutes)

    deadline = _align_deadline(task.deadline, tz) if respect_deadline else None

    usable = [b for b in profile if b.energy_level >= MIN_SLOT_ENERGY]
    today = now.date()
    candidates: list[CandidateSlot] = []

    for d in range(lookahead_days):
        day = today + timedelta(days=d)
        for bucket in usable:
            start = datetime.combine(day, time(bucket.hour), tzinfo=tz)
            if start <= now:
                continue
            end = _add_elapsed(start, duration)
            if deadline is not None and end > deadline:
                continue
            candidates.append(
                CandidateSlot(
                    start=start,
                    end=end,
                    score=score_slot(bucket, task),
                    energy_level=bucket.energy_level,
                    productivity=bucket.productivity,
                )
            )

    # sorted() is stable, so ties stay in enumeration order
    ranked = sorted(candidates, key=lambda c: c.score, reverse=True)
    logger.debug(
        "Ranked %d candidates over %d days, returning %d",
        len(candidates),
        lookahead_days,
        min(limit, len(ranked)),
    )
    return ranked[:limit]


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------


def confidence(score: float) -> str:
    if score >= 80:
        return "high"
    if score >= 60:
        return "medium"
    return "low"


def explain_slot(slot: CandidateSlot, task: TaskDescriptor) -> list[str]:
    """Human-readable reasons a slot was suggested."""
    reasons: list[str] = []
    hour = slot.start.hour

    if slot.score > 85:
        reasons.append("Optimal time based on your energy patterns")
    if 8 <= hour <= 11 and slot.energy_level >= 4:
        reasons.append("Peak morning productivity - best time for focused work")
    if 15 <= hour <= 17 and slot.energy_level >= 4:
        reasons.append("Afternoon energy peak - great for important tasks")
    if 18 <= hour <= 22:
        reasons.append("Evening slot - good for creative or flexible work")
    if task.energy_level is not None and abs(slot.energy_level - task.energy_level) <= 1:
        reasons.append("Matches the task's energy demand")
    if slot.start.weekday() >= 5:
        reasons.append("Weekend time - flexible schedule")
    if task.deadline is not None:
        deadline = _align_deadline(task.deadline, slot.end.tzinfo)
        if slot.end <= deadline <= _add_elapsed(slot.end, timedelta(days=1)):
            reasons.append("Due soon - prioritize this time slot")

    return reasons or ["Available time slot"]
