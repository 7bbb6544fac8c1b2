"""Energy-aware time slot ranking."""

from .energy import energy_insights, get_energy_profile, observed_profile
from .errors import InvalidDuration, InvalidLookahead, InvalidRange, SlotwiseError
from .models import CandidateSlot, EnergyLog, EnergyProfile, HourBucket, TaskDescriptor
from .ranker import confidence, explain_slot, rank_slots, score_slot

__all__ = [
    # Energy
    "get_energy_profile",
    "observed_profile",
    "energy_insights",
    # Ranking
    "rank_slots",
    "score_slot",
    "confidence",
    "explain_slot",
    # Models
    "CandidateSlot",
    "EnergyLog",
    "EnergyProfile",
    "HourBucket",
    "TaskDescriptor",
    # Errors
    "SlotwiseError",
    "InvalidDuration",
    "InvalidRange",
    "InvalidLookahead",
]
