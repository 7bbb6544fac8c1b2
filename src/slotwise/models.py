"""Energy profile, task and slot models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Iterator
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from slotwise.errors import SlotwiseError


@dataclass(frozen=True)
class HourBucket:
    """Expected energy and productivity for one hour of the day."""

    hour: int
    energy_level: int
    productivity: int


class EnergyProfile:
    """Exactly one HourBucket per hour 0-23, in hour order."""

    def __init__(self, buckets: list[HourBucket] | tuple[HourBucket, ...]):
        buckets = tuple(buckets)
        if [b.hour for b in buckets] != list(range(24)):
            raise ValueError("Energy profile needs one bucket per hour 0-23, in order")
        self._buckets = buckets

    def __getitem__(self, hour: int) -> HourBucket:
        return self._buckets[hour]

    def __iter__(self) -> Iterator[HourBucket]:
        return iter(self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EnergyProfile):
            return NotImplemented
        return self._buckets == other._buckets

    def __repr__(self) -> str:
        return f"EnergyProfile({list(self._buckets)!r})"

    def to_list(self) -> list[dict]:
        return [
            {"hour": b.hour, "energy_level": b.energy_level, "productivity": b.productivity}
            for b in self._buckets
        ]


@dataclass(frozen=True)
class TaskDescriptor:
    """What the ranker needs to know about a task."""

    estimated_duration_minutes: int
    priority: int
    energy_level: int | None = None
    deadline: datetime | None = None  # not enforced unless respect_deadline is set


@dataclass(frozen=True)
class CandidateSlot:
    """A ranked (start, end) window for placing one task."""

    start: datetime
    end: datetime
    score: float
    energy_level: int
    productivity: int

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "score": self.score,
            "energy_level": self.energy_level,
            "productivity": self.productivity,
        }


@dataclass
class EnergyLog:
    """A self-reported energy level at a point in time."""

    level: int
    timestamp: datetime

    def to_dict(self) -> dict:
        return {"level": self.level, "timestamp": self.timestamp.isoformat()}

    @classmethod
    def from_dict(cls, d: dict) -> EnergyLog:
        return cls(level=d["level"], timestamp=datetime.fromisoformat(d["timestamp"]))


@dataclass
class SchedulerConfig:
    """User-level settings stored alongside tasks."""

    timezone: str = "UTC"
    lookahead_days: int = 7
    max_results: int = 10
    respect_deadline: bool = False

    def zone(self) -> tzinfo:
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise SlotwiseError(f"Unknown time zone '{self.timezone}'") from None

    def to_dict(self) -> dict:
        return {
            "timezone": self.timezone,
            "lookahead_days": self.lookahead_days,
            "max_results": self.max_results,
            "respect_deadline": self.respect_deadline,
        }

    @classmethod
    def from_dict(cls, d: dict) -> SchedulerConfig:
        return cls(
            timezone=d.get("timezone", "UTC"),
            lookahead_days=d.get("lookahead_days", 7),
            max_results=d.get("max_results", 10),
            respect_deadline=d.get("respect_deadline", False),
        )


@dataclass
class StoredTask:
    """A task saved in the local store."""

    id: str
    name: str
    duration_minutes: int
    priority: int = 3
    energy_level: int | None = None
    deadline: str | None = None
    tags: list[str] = field(default_factory=list)

    def descriptor(self, tz: tzinfo | None = None) -> TaskDescriptor:
        """Build the ranker input; date-only or naive deadlines are read in *tz*."""
        deadline = None
        if self.deadline:
            deadline = datetime.fromisoformat(self.deadline)
            # A bare date means the end of that day
            if "T" not in self.deadline and " " not in self.deadline:
                deadline = deadline.replace(hour=23, minute=59, second=59)
            if deadline.tzinfo is None and tz is not None:
                deadline = deadline.replace(tzinfo=tz)
        return TaskDescriptor(
            estimated_duration_minutes=self.duration_minutes,
            priority=self.priority,
            energy_level=self.energy_level,
            deadline=deadline,
        )

    def to_dict(self) -> dict:
        d = {
            "name": self.name,
            "duration_minutes": self.duration_minutes,
            "priority": self.priority,
            "energy_level": self.energy_level,
            "deadline": self.deadline,
        }
        if self.tags:
            d["tags"] = self.tags
        return d

    @classmethod
    def from_dict(cls, task_id: str, d: dict) -> StoredTask:
        return cls(
            id=task_id,
            name=d["name"],
            duration_minutes=d["duration_minutes"],
            priority=d.get("priority", 3),
            energy_level=d.get("energy_level"),
            deadline=d.get("deadline"),
            tags=d.get("tags", []),
        )
