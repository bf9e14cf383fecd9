"""Per-factor compatibility scorers.

Every scorer takes two normalized profiles and returns an int in [0, 100].
Scorers are pure and symmetric: ``score(a, b) == score(b, a)``. Missing
comparison data yields a neutral default (50 unless noted) rather than an
error. One-sided vetoes live in ``dealbreakers``, not here.

Composite factors blend sub-scores with fixed sub-weights; sub-scores that
cannot be computed are dropped and the remaining weights renormalized.
"""

from __future__ import annotations

import re
from typing import Callable, Optional, Sequence

from ..data.schema import STAGE_ORDER, Profile, RecoveryStage, SmokingStatus
from ..utils import clamp_score, round_half_up

NEUTRAL = 50

# ── Sub-weights ──────────────────────────────────────────────────────────────

RECOVERY_CORE_WEIGHTS = {"stage": 0.40, "methods": 0.35, "issues": 0.25}
LIFESTYLE_CORE_WEIGHTS = {"social": 0.35, "cleanliness": 0.35, "noise": 0.30}
RECOVERY_ENVIRONMENT_WEIGHTS = {"substance_free": 0.50, "spiritual": 0.30, "support": 0.20}
SCHEDULE_WEIGHTS = {"bedtime": 0.40, "work": 0.35, "sleep": 0.25}
COMMUNICATION_WEIGHTS = {"communication": 0.40, "conflict": 0.35, "chores": 0.25}
# Pet cross-checks weighted evenly in both directions.
HOUSING_SAFETY_WEIGHTS = {"smoking": 0.50, "pets_a_side": 0.25, "pets_b_side": 0.25}
SHARED_INTERESTS_WEIGHTS = {"interests": 0.60, "qualities": 0.40}
TIMING_WEIGHTS = {"move_in": 0.60, "lease": 0.40}

SCALE_POINTS_PER_LEVEL = 25

# ── Lookup tables ────────────────────────────────────────────────────────────

STAGE_STEP_SCORES = {0: 100, 1: 80, 2: 60, 3: 40}

BEDTIME_COMPATIBLE = {
    "early": {"moderate"},
    "moderate": {"early", "late"},
    "late": {"moderate"},
    "varies": {"early", "moderate", "late"},
}

WORK_SCHEDULE_COMPATIBLE = {
    "traditional_9_5": {"flexible", "student"},
    "flexible": {"traditional_9_5", "student", "irregular"},
    "student": {"traditional_9_5", "flexible", "irregular"},
    "early_morning": {"night_shift"},  # opposite shifts share the space well
    "night_shift": {"early_morning"},
}

COMMUNICATION_STYLE_SCORES = {
    frozenset({"direct", "diplomatic"}): 75,
    frozenset({"direct", "expressive"}): 80,
    frozenset({"direct", "reserved"}): 45,
    frozenset({"direct", "written"}): 65,
    frozenset({"diplomatic", "reserved"}): 80,
    frozenset({"diplomatic", "expressive"}): 70,
    frozenset({"diplomatic", "written"}): 75,
    frozenset({"reserved", "expressive"}): 40,
    frozenset({"reserved", "written"}): 85,
    frozenset({"expressive", "written"}): 50,
}

CONFLICT_RESOLUTION_SCORES = {
    frozenset({"direct_discussion", "compromise"}): 90,
    frozenset({"direct_discussion", "mediation"}): 75,
    frozenset({"direct_discussion", "cooling_off"}): 60,
    frozenset({"direct_discussion", "avoidance"}): 25,
    frozenset({"compromise", "mediation"}): 85,
    frozenset({"compromise", "cooling_off"}): 75,
    frozenset({"compromise", "avoidance"}): 40,
    frozenset({"mediation", "cooling_off"}): 70,
    frozenset({"mediation", "avoidance"}): 45,
    frozenset({"cooling_off", "avoidance"}): 55,
}

CHORE_SHARING_SCORES = {
    frozenset({"equal_split", "rotating_schedule"}): 90,
    frozenset({"equal_split", "assigned_tasks"}): 80,
    frozenset({"equal_split", "flexible"}): 60,
    frozenset({"equal_split", "clean_as_you_go"}): 70,
    frozenset({"rotating_schedule", "assigned_tasks"}): 80,
    frozenset({"rotating_schedule", "flexible"}): 55,
    frozenset({"rotating_schedule", "clean_as_you_go"}): 65,
    frozenset({"assigned_tasks", "flexible"}): 50,
    frozenset({"assigned_tasks", "clean_as_you_go"}): 65,
    frozenset({"flexible", "clean_as_you_go"}): 80,
}

UNKNOWN_STYLE_PAIR = 60

SMOKING_SCORES = {
    frozenset({SmokingStatus.NON_SMOKER, SmokingStatus.OUTDOOR_ONLY}): 70,
    frozenset({SmokingStatus.NON_SMOKER, SmokingStatus.OCCASIONAL}): 40,
    frozenset({SmokingStatus.NON_SMOKER, SmokingStatus.REGULAR}): 20,
    frozenset({SmokingStatus.OUTDOOR_ONLY, SmokingStatus.OCCASIONAL}): 80,
    frozenset({SmokingStatus.OUTDOOR_ONLY, SmokingStatus.REGULAR}): 60,
    frozenset({SmokingStatus.OCCASIONAL, SmokingStatus.REGULAR}): 70,
    frozenset({SmokingStatus.FORMER_SMOKER, SmokingStatus.NON_SMOKER}): 90,
    frozenset({SmokingStatus.FORMER_SMOKER, SmokingStatus.OUTDOOR_ONLY}): 60,
    frozenset({SmokingStatus.FORMER_SMOKER, SmokingStatus.OCCASIONAL}): 35,
    frozenset({SmokingStatus.FORMER_SMOKER, SmokingStatus.REGULAR}): 20,
}

SPIRITUAL_GROUPS = [
    {"christian-protestant", "christian-catholic"},
    {"spiritual-not-religious", "agnostic"},
    {"agnostic", "atheist"},
]

SPIRITUAL_CONFLICTS = {
    frozenset({"christian-protestant", "muslim"}),
    frozenset({"christian-catholic", "muslim"}),
    frozenset({"christian-protestant", "atheist"}),
    frozenset({"christian-catholic", "atheist"}),
    frozenset({"muslim", "atheist"}),
    frozenset({"jewish", "muslim"}),
}

SPIRITUAL_UNSPECIFIED = 75

FLEXIBLE_LEASES = {"flexible", "month_to_month"}

NO_GENDER_PREFERENCE = {"no_preference", "no-preference", "any", "either", "none", "no preference"}
GENDER_SYNONYMS = {
    "woman": "female",
    "women": "female",
    "man": "male",
    "men": "male",
    "nonbinary": "non-binary",
    "non binary": "non-binary",
    "non_binary": "non-binary",
}
GENDER_OPEN_SCORE = 100
GENDER_UNKNOWN_SCORE = 50
GENDER_INCLUSIVE_BONUS = 10

MOVE_IN_BUCKETS = ((7, 100), (30, 80), (60, 60))
MOVE_IN_FAR = 40

TEXT_BOTH, TEXT_ONE, TEXT_NEITHER = 75, 60, 50


# ── Helpers ──────────────────────────────────────────────────────────────────


def overlap_score(items_a: Sequence[str], items_b: Sequence[str], default: Optional[int] = NEUTRAL) -> Optional[int]:
    """Shared elements relative to the union, as 0-100. ``default`` if either side is empty."""
    sa, sb = set(items_a), set(items_b)
    if not sa or not sb:
        return default
    return round_half_up(len(sa & sb) / len(sa | sb) * 100)


def shared_items(items_a: Sequence[str], items_b: Sequence[str]) -> list[str]:
    """Items of ``items_a`` also in ``items_b``, in ``items_a`` order."""
    sb = set(items_b)
    return [item for item in items_a if item in sb]


def scale_similarity(level_a: int, level_b: int) -> int:
    return max(0, 100 - SCALE_POINTS_PER_LEVEL * abs(level_a - level_b))


def blend(parts: dict[str, Optional[float]], weights: dict[str, float], default: int = NEUTRAL) -> int:
    """Weighted mean over the parts that are not None, renormalized."""
    num = 0.0
    den = 0.0
    for key, value in parts.items():
        if value is None:
            continue
        num += value * weights[key]
        den += weights[key]
    if den == 0:
        return default
    return clamp_score(num / den)


def pair_score(value_a: Optional[str], value_b: Optional[str], table: dict, unknown: int = UNKNOWN_STYLE_PAIR) -> Optional[int]:
    """Symmetric lookup in a pairwise compatibility table."""
    if not value_a or not value_b:
        return None
    if value_a == value_b:
        return 100
    return table.get(frozenset({value_a, value_b}), unknown)


def _either_lists(table: dict[str, set[str]], value_a: str, value_b: str) -> bool:
    return value_b in table.get(value_a, set()) or value_a in table.get(value_b, set())


def _has_text(profile: Profile, *names: str) -> bool:
    return any((getattr(profile, name) or "").strip() for name in names)


def _text_presence_score(a: Profile, b: Profile, *names: str) -> int:
    present = _has_text(a, *names) + _has_text(b, *names)
    return (TEXT_NEITHER, TEXT_ONE, TEXT_BOTH)[present]


# ── Location ─────────────────────────────────────────────────────────────────


def _state_of(profile: Profile) -> Optional[str]:
    if profile.primary_state:
        return profile.primary_state.lower()
    if profile.primary_location and "," in profile.primary_location:
        tail = profile.primary_location.rsplit(",", 1)[1].strip()
        if len(tail) == 2 and tail.isalpha():
            return tail.lower()
    return None


def _contains(outer: str, inner: str) -> bool:
    return re.search(rf"(?<![a-z0-9]){re.escape(inner)}(?![a-z0-9])", outer) is not None


def location_score(a: Profile, b: Profile) -> int:
    """Exact/same city+state 100, containment 85, same state 75, else 40; unknown 50."""
    if not a.has_location or not b.has_location:
        return NEUTRAL

    loc_a = (a.primary_location or "").strip().lower()
    loc_b = (b.primary_location or "").strip().lower()
    if loc_a and loc_a == loc_b:
        return 100

    city_a = (a.primary_city or "").strip().lower()
    city_b = (b.primary_city or "").strip().lower()
    state_a, state_b = _state_of(a), _state_of(b)
    if city_a and city_a == city_b and state_a and state_a == state_b:
        return 100

    if loc_a and loc_b and (_contains(loc_a, loc_b) or _contains(loc_b, loc_a)):
        return 85

    if state_a and state_a == state_b:
        return 75

    return 40


# ── Budget ───────────────────────────────────────────────────────────────────

BUDGET_STEP_DOLLARS = 50
BUDGET_POINTS_PER_STEP = 2


def budget_score(a: Profile, b: Profile) -> int:
    """100 minus 2 points per full $50 between the two maximum budgets."""
    if a.budget_max is None or b.budget_max is None:
        return NEUTRAL
    diff = abs(a.budget_max - b.budget_max)
    return max(0, 100 - (diff // BUDGET_STEP_DOLLARS) * BUDGET_POINTS_PER_STEP)


# ── Recovery ─────────────────────────────────────────────────────────────────


def stage_distance(stage_a: Optional[RecoveryStage], stage_b: Optional[RecoveryStage]) -> Optional[int]:
    if stage_a is None or stage_b is None:
        return None
    return abs(STAGE_ORDER.index(stage_a) - STAGE_ORDER.index(stage_b))


def recovery_stage_score(a: Profile, b: Profile) -> Optional[int]:
    steps = stage_distance(a.recovery_stage, b.recovery_stage)
    return None if steps is None else STAGE_STEP_SCORES[steps]


def recovery_core_score(a: Profile, b: Profile) -> int:
    parts = {
        "stage": recovery_stage_score(a, b),
        "methods": overlap_score(a.recovery_methods, b.recovery_methods, default=None),
        "issues": overlap_score(a.primary_issues, b.primary_issues, default=None),
    }
    return blend(parts, RECOVERY_CORE_WEIGHTS)


def spiritual_score(affiliation_a: Optional[str], affiliation_b: Optional[str]) -> int:
    if not affiliation_a or not affiliation_b:
        return SPIRITUAL_UNSPECIFIED
    if affiliation_a == affiliation_b:
        return 100
    for group in SPIRITUAL_GROUPS:
        if affiliation_a in group and affiliation_b in group:
            return 90
    if "spiritual-not-religious" in (affiliation_a, affiliation_b):
        return 70
    if "other" in (affiliation_a, affiliation_b):
        return 65
    if frozenset({affiliation_a, affiliation_b}) in SPIRITUAL_CONFLICTS:
        return 35
    return 60


SUPPORT_FLAGS = ("want_recovery_support", "comfortable_discussing_recovery", "attend_meetings_together")


def recovery_environment_score(a: Profile, b: Profile) -> int:
    support = [100 if getattr(a, f) == getattr(b, f) else 50 for f in SUPPORT_FLAGS]
    parts = {
        "substance_free": 100 if a.substance_free_home_required == b.substance_free_home_required else 0,
        "spiritual": spiritual_score(a.spiritual_affiliation, b.spiritual_affiliation),
        "support": sum(support) / len(support),
    }
    return blend(parts, RECOVERY_ENVIRONMENT_WEIGHTS)


# ── Lifestyle & schedule ─────────────────────────────────────────────────────


def lifestyle_core_score(a: Profile, b: Profile) -> int:
    parts = {
        "social": scale_similarity(a.social_level, b.social_level),
        "cleanliness": scale_similarity(a.cleanliness_level, b.cleanliness_level),
        "noise": scale_similarity(a.noise_tolerance, b.noise_tolerance),
    }
    return blend(parts, LIFESTYLE_CORE_WEIGHTS)


def bedtime_score(a: Profile, b: Profile) -> Optional[int]:
    if not a.bedtime_preference or not b.bedtime_preference:
        return None
    if a.bedtime_preference == b.bedtime_preference:
        return 100
    return 75 if _either_lists(BEDTIME_COMPATIBLE, a.bedtime_preference, b.bedtime_preference) else 25


def work_schedule_score(a: Profile, b: Profile) -> Optional[int]:
    if not a.work_schedule or not b.work_schedule:
        return None
    if a.work_schedule == b.work_schedule:
        return 100
    return 75 if _either_lists(WORK_SCHEDULE_COMPATIBLE, a.work_schedule, b.work_schedule) else 50


def sleep_pattern_score(a: Profile, b: Profile) -> int:
    matches = [a.early_riser == b.early_riser, a.night_owl == b.night_owl]
    return round_half_up(sum(100 if m else 40 for m in matches) / len(matches))


def schedule_score(a: Profile, b: Profile) -> int:
    parts = {
        "bedtime": bedtime_score(a, b),
        "work": work_schedule_score(a, b),
        "sleep": sleep_pattern_score(a, b),
    }
    return blend(parts, SCHEDULE_WEIGHTS)


# ── Communication ────────────────────────────────────────────────────────────


def communication_score(a: Profile, b: Profile) -> int:
    parts = {
        "communication": pair_score(a.communication_style, b.communication_style, COMMUNICATION_STYLE_SCORES),
        "conflict": pair_score(a.conflict_resolution_style, b.conflict_resolution_style, CONFLICT_RESOLUTION_SCORES),
        "chores": pair_score(a.chore_sharing_style, b.chore_sharing_style, CHORE_SHARING_SCORES),
    }
    return blend(parts, COMMUNICATION_WEIGHTS)


# ── Housing safety ───────────────────────────────────────────────────────────


def smoking_score(a: Profile, b: Profile) -> Optional[int]:
    if a.smoking_status is None or b.smoking_status is None:
        return None
    if a.smoking_status == b.smoking_status:
        return 100
    return SMOKING_SCORES.get(frozenset({a.smoking_status, b.smoking_status}), NEUTRAL)


def pet_tolerance(holder: Profile, other: Profile) -> int:
    """How well ``holder`` tolerates ``other``'s pets."""
    if not other.pets_owned:
        return 100
    return 100 if holder.pets_comfortable else 0


def housing_safety_score(a: Profile, b: Profile) -> int:
    parts = {
        "smoking": smoking_score(a, b),
        "pets_a_side": pet_tolerance(a, b),
        "pets_b_side": pet_tolerance(b, a),
    }
    return blend(parts, HOUSING_SAFETY_WEIGHTS)


# ── Gender ───────────────────────────────────────────────────────────────────


def _gender(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return GENDER_SYNONYMS.get(value, value)


def gender_direction_score(holder: Profile, other: Profile) -> int:
    """Whether ``other`` satisfies ``holder``'s stated roommate-gender preference.

    0 is a hard incompatibility; 100 means the preference is met or absent;
    50 means the preference cannot be checked for lack of data.
    """
    pref = _gender(holder.preferred_roommate_gender)
    if pref is None or pref in NO_GENDER_PREFERENCE:
        return GENDER_OPEN_SCORE
    own, theirs = _gender(holder.gender_identity), _gender(other.gender_identity)
    if theirs is None:
        return GENDER_UNKNOWN_SCORE
    if pref == "same_gender":
        if own is None:
            return GENDER_UNKNOWN_SCORE
        return 100 if own == theirs else 0
    if pref == "different_gender":
        if own is None:
            return GENDER_UNKNOWN_SCORE
        return 100 if own != theirs else 0
    return 100 if pref == theirs else 0


def gender_preferences_score(a: Profile, b: Profile) -> int:
    """Hard filter: either side's unmet preference makes the pair 0."""
    score = min(gender_direction_score(a, b), gender_direction_score(b, a))
    if score > 0 and a.gender_inclusive and b.gender_inclusive:
        score = min(100, score + GENDER_INCLUSIVE_BONUS)
    return score


# ── Interests, timing, goals ─────────────────────────────────────────────────


def shared_interests_score(a: Profile, b: Profile) -> int:
    parts = {
        "interests": overlap_score(a.interests, b.interests, default=None),
        "qualities": overlap_score(a.important_qualities, b.important_qualities, default=None),
    }
    return blend(parts, SHARED_INTERESTS_WEIGHTS)


def move_in_score(a: Profile, b: Profile) -> Optional[int]:
    if a.move_in_date is None or b.move_in_date is None:
        return None
    days = abs((a.move_in_date - b.move_in_date).days)
    for limit, score in MOVE_IN_BUCKETS:
        if days <= limit:
            return score
    return MOVE_IN_FAR


def lease_score(a: Profile, b: Profile) -> Optional[int]:
    if not a.lease_duration or not b.lease_duration:
        return None
    if a.lease_duration == b.lease_duration:
        return 100
    if a.lease_duration in FLEXIBLE_LEASES or b.lease_duration in FLEXIBLE_LEASES:
        return 75
    return 50


def timing_score(a: Profile, b: Profile) -> int:
    parts = {"move_in": move_in_score(a, b), "lease": lease_score(a, b)}
    return blend(parts, TIMING_WEIGHTS)


def goals_score(a: Profile, b: Profile) -> int:
    # Presence heuristic only; the text itself is not compared.
    return _text_presence_score(a, b, "short_term_goals", "long_term_vision")


def extended_score(a: Profile, b: Profile) -> int:
    return _text_presence_score(a, b, "additional_interests", "looking_for")


Scorer = Callable[[Profile, Profile], int]

FACTOR_SCORERS: dict[str, Scorer] = {
    "location": location_score,
    "budget": budget_score,
    "recovery_core": recovery_core_score,
    "lifestyle_core": lifestyle_core_score,
    "recovery_environment": recovery_environment_score,
    "gender_preferences": gender_preferences_score,
    "schedule": schedule_score,
    "communication": communication_score,
    "housing_safety": housing_safety_score,
    "shared_interests": shared_interests_score,
    "timing": timing_score,
    "goals": goals_score,
    "extended": extended_score,
}


def score_factors(a: Profile, b: Profile, scorers: Optional[dict[str, Scorer]] = None) -> dict[str, int]:
    """Run every factor scorer on the pair."""
    scorers = scorers or FACTOR_SCORERS
    return {name: scorer(a, b) for name, scorer in scorers.items()}
