"""Profile dataclass: the canonical, normalized matching attributes of one person."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class RecoveryStage(str, Enum):
    EARLY = "early"
    STABILIZING = "stabilizing"
    STABLE = "stable"
    LONG_TERM = "long-term"


# Ordering used for stage proximity.
STAGE_ORDER = [
    RecoveryStage.EARLY,
    RecoveryStage.STABILIZING,
    RecoveryStage.STABLE,
    RecoveryStage.LONG_TERM,
]


class SmokingStatus(str, Enum):
    NON_SMOKER = "non_smoker"
    OUTDOOR_ONLY = "outdoor_only"
    OCCASIONAL = "occasional"
    REGULAR = "regular"
    FORMER_SMOKER = "former_smoker"


NON_SMOKING_STATUSES = (SmokingStatus.NON_SMOKER, SmokingStatus.FORMER_SMOKER)

DEAL_BREAKER_FIELDS = (
    "deal_breaker_substance_use",
    "deal_breaker_financial_issues",
    "deal_breaker_pets",
    "deal_breaker_smoking",
    "deal_breaker_loudness",
    "deal_breaker_uncleanliness",
)


@dataclass(frozen=True)
class Profile:
    """One person's matching attributes after normalization.

    Built by ``normalize`` from a raw store record and never mutated; an
    update goes back to the store and a fresh Profile is normalized on the
    next read. Set-like fields are tuples of unique strings in first-seen
    order, never None.

    Groups:
        Identity / derived: user_id, first_name, age, primary_location
        Location, budget, recovery, lifestyle, schedule, communication
        Safety (smoking, pets), interests, timing, gender
        Deal breakers: one boolean per vetoable dimension
        Status: is_active, profile_completed, completion_percentage
    """

    user_id: str

    # ── Identity & derived ──────────────────────────────────────────────
    first_name: str = "Anonymous"
    date_of_birth: Optional[date] = None
    age: Optional[int] = None

    # ── Location ────────────────────────────────────────────────────────
    primary_city: Optional[str] = None
    primary_state: Optional[str] = None  # exactly 2 letters, upper-case
    primary_location: Optional[str] = None
    search_radius_miles: int = 30

    # ── Budget ──────────────────────────────────────────────────────────
    budget_min: Optional[int] = None
    budget_max: Optional[int] = None

    # ── Recovery ────────────────────────────────────────────────────────
    recovery_stage: Optional[RecoveryStage] = None
    recovery_methods: tuple[str, ...] = ()
    program_types: tuple[str, ...] = ()
    primary_issues: tuple[str, ...] = ()
    spiritual_affiliation: Optional[str] = None
    substance_free_home_required: bool = True
    want_recovery_support: bool = False
    comfortable_discussing_recovery: bool = False
    attend_meetings_together: bool = False

    # ── Lifestyle (1-5 scales) ──────────────────────────────────────────
    social_level: int = 3
    cleanliness_level: int = 3
    noise_tolerance: int = 3

    # ── Schedule ────────────────────────────────────────────────────────
    work_schedule: Optional[str] = None
    bedtime_preference: Optional[str] = None
    early_riser: bool = False
    night_owl: bool = False

    # ── Communication ───────────────────────────────────────────────────
    communication_style: Optional[str] = None
    conflict_resolution_style: Optional[str] = None
    chore_sharing_style: Optional[str] = None

    # ── Safety ──────────────────────────────────────────────────────────
    smoking_status: Optional[SmokingStatus] = None
    pets_owned: bool = False
    pets_comfortable: bool = True
    financially_stable: bool = True

    # ── Interests & goals ───────────────────────────────────────────────
    interests: tuple[str, ...] = ()
    important_qualities: tuple[str, ...] = ()
    short_term_goals: Optional[str] = None
    long_term_vision: Optional[str] = None
    additional_interests: Optional[str] = None
    about_me: Optional[str] = None
    looking_for: Optional[str] = None

    # ── Timing ──────────────────────────────────────────────────────────
    move_in_date: Optional[date] = None
    lease_duration: Optional[str] = None

    # ── Gender ──────────────────────────────────────────────────────────
    gender_identity: Optional[str] = None
    preferred_roommate_gender: Optional[str] = None
    gender_inclusive: bool = False

    # ── Deal breakers ───────────────────────────────────────────────────
    deal_breaker_substance_use: bool = False
    deal_breaker_financial_issues: bool = True
    deal_breaker_pets: bool = False
    deal_breaker_smoking: bool = False
    deal_breaker_loudness: bool = False
    deal_breaker_uncleanliness: bool = False

    # ── Status ──────────────────────────────────────────────────────────
    is_active: bool = True
    profile_completed: bool = False
    completion_percentage: int = 0

    # Canonical field names the raw record explicitly supplied.
    present_fields: frozenset[str] = field(default_factory=frozenset)

    def has(self, name: str) -> bool:
        return name in self.present_fields

    @property
    def has_location(self) -> bool:
        return bool(self.primary_location or self.primary_city or self.primary_state)

    @property
    def smokes(self) -> bool:
        return self.smoking_status is not None and self.smoking_status not in NON_SMOKING_STATUSES
