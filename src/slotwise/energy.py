"""Day-shaped energy model: the default phase curve, observed curves and insights."""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import tzinfo

from slotwise.errors import InvalidRange
from slotwise.models import EnergyLog, EnergyProfile, HourBucket

logger = logging.getLogger(__name__)

# (first_hour, last_hour, energy_level, productivity), inclusive, first match wins
DAY_PHASES: list[tuple[int, int, int, int]] = [
    (8, 11, 5, 90),
    (12, 14, 2, 40),
    (15, 17, 4, 75),
    (18, 22, 3, 60),
]
OFF_HOURS = (1, 20)

# Productivity the phase table pairs with each energy level
PRODUCTIVITY_BY_LEVEL = {5: 90, 4: 75, 3: 60, 2: 40, 1: 20}


def hour_bucket(hour: int) -> HourBucket:
    """Look up the default energy/productivity for an hour of the day."""
    if not 0 <= hour <= 23:
        raise ValueError(f"Hour must be 0-23, got {hour}")
    for first, last, energy, productivity in DAY_PHASES:
        if first <= hour <= last:
            return HourBucket(hour, energy, productivity)
    return HourBucket(hour, *OFF_HOURS)


def get_energy_profile() -> EnergyProfile:
    """The default 24-hour profile."""
    return EnergyProfile([hour_bucket(h) for h in range(24)])


def _local_hour(log: EnergyLog, tz: tzinfo | None) -> int:
    ts = log.timestamp
    if tz is not None and ts.tzinfo is not None:
        ts = ts.astimezone(tz)
    return ts.hour


def _check_levels(logs: list[EnergyLog]) -> None:
    for log in logs:
        if not 1 <= log.level <= 5:
            raise InvalidRange(f"Energy level must be 1-5, got {log.level}")


def hourly_averages(logs: list[EnergyLog], tz: tzinfo | None = None) -> dict[int, float]:
    """Mean logged level per local hour, for hours that have logs."""
    _check_levels(logs)
    by_hour: dict[int, list[int]] = defaultdict(list)
    for log in logs:
        by_hour[_local_hour(log, tz)].append(log.level)
    return {h: sum(levels) / len(levels) for h, levels in sorted(by_hour.items())}


def observed_profile(logs: list[EnergyLog], tz: tzinfo | None = None) -> EnergyProfile:
    """Profile with logged hours replaced by their observed energy.

    Hours without any log keep the default phase values, so the result has
    the same shape as get_energy_profile() and can be handed to the ranker.
    """
    averages = hourly_averages(logs, tz)
    buckets = []
    for h in range(24):
        if h in averages:
            level = min(5, max(1, math.floor(averages[h] + 0.5)))
            buckets.append(HourBucket(h, level, PRODUCTIVITY_BY_LEVEL[level]))
        else:
            buckets.append(hour_bucket(h))
    logger.debug("Observed profile built from %d logs over %d hours", len(logs), len(averages))
    return EnergyProfile(buckets)


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------


@dataclass
class EnergyInsights:
    """Summary of a user's logged energy."""

    log_count: int
    average: float | None = None
    label: str | None = None
    peak_hour: int | None = None
    dip_hour: int | None = None
    trend: str | None = None

    def to_dict(self) -> dict:
        return {
            "log_count": self.log_count,
            "average": round(self.average, 2) if self.average is not None else None,
            "label": self.label,
            "peak_hour": self.peak_hour,
            "dip_hour": self.dip_hour,
            "trend": self.trend,
        }


def energy_label(level: float) -> str:
    if level >= 4.5:
        return "Excellent"
    if level >= 3.5:
        return "Good"
    if level >= 2.5:
        return "Moderate"
    if level >= 1.5:
        return "Low"
    return "Very Low"


def _trend(levels: list[int], window: int = 7) -> str:
    recent = levels[-window:]
    old = levels[:window]
    recent_avg = sum(recent) / len(recent)
    old_avg = sum(old) / len(old)
    if recent_avg > old_avg + 0.3:
        return "up"
    if recent_avg < old_avg - 0.3:
        return "down"
    return "stable"


def energy_insights(logs: list[EnergyLog], tz: tzinfo | None = None) -> EnergyInsights:
    """Average, peak/dip hours and trend of the logged energy levels."""
    if not logs:
        return EnergyInsights(log_count=0)

    averages = hourly_averages(logs, tz)
    ordered = sorted(logs, key=lambda log: log.timestamp)
    levels = [log.level for log in ordered]
    avg = sum(levels) / len(levels)

    # Stable sort over hour order: on ties the peak is the earliest hour, the dip the latest
    ranked = sorted(averages, key=lambda h: averages[h], reverse=True)
    peak = ranked[0]
    dip = ranked[-1] if len(ranked) > 1 else None

    return EnergyInsights(
        log_count=len(logs),
        average=avg,
        label=energy_label(avg),
        peak_hour=peak,
        dip_hour=dip,
        trend=_trend(levels),
    )


def format_hour(hour: int) -> str:
    """12-hour clock label, e.g. 9 -> '9AM', 0 -> '12AM'."""
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}{suffix}"
