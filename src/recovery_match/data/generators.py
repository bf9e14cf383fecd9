"""Synthetic roommate-profile generation for tests and demos.

Raw records are shaped like profile-store rows, warts included: keys are
a mix of snake_case, camelCase and legacy column names, numbers are
sometimes stringified, and a small share of records carry bad values
(invalid state, out-of-range scales, inverted budgets) so the normalizer
is exercised end to end.

Generation is deterministic for a given seed.
"""

from __future__ import annotations

import dataclasses
import random
from datetime import date, timedelta
from typing import Any, Optional

from .normalize import LEGACY_ALIASES, camel_case, normalize_many
from .schema import STAGE_ORDER, Profile, RecoveryStage, SmokingStatus

# ── Attribute pools ──────────────────────────────────────────────────────────

CITIES = [
    ("Austin", "TX"), ("Houston", "TX"), ("Dallas", "TX"),
    ("Los Angeles", "CA"), ("San Diego", "CA"), ("Oakland", "CA"),
    ("Brooklyn", "NY"), ("Buffalo", "NY"), ("Chicago", "IL"),
    ("Denver", "CO"), ("Seattle", "WA"), ("Nashville", "TN"),
    ("Boston", "MA"), ("Portland", "OR"), ("Phoenix", "AZ"),
    ("Atlanta", "GA"), ("Miami", "FL"), ("Tampa", "FL"),
]

FIRST_NAMES = [
    "Alex", "Jordan", "Sam", "Taylor", "Morgan", "Casey", "Riley", "Jamie",
    "Avery", "Quinn", "Drew", "Robin", "Dana", "Chris", "Pat", "Lee",
]

RECOVERY_METHODS = [
    "12-step", "smart-recovery", "therapy", "medication-assisted",
    "faith-based", "holistic", "peer-support", "outpatient",
]

PROGRAM_TYPES = [
    "AA", "NA", "SMART Recovery", "Celebrate Recovery", "Refuge Recovery",
    "LifeRing", "outpatient program", "sober living",
]

PRIMARY_ISSUES = [
    "alcohol", "opioids", "stimulants", "cannabis",
    "prescription-drugs", "gambling", "multiple-substances",
]

SPIRITUAL_AFFILIATIONS = [
    "christian-protestant", "christian-catholic", "muslim", "jewish", "buddhist",
    "spiritual-not-religious", "agnostic", "atheist", "other",
]

WORK_SCHEDULES = [
    "traditional_9_5", "flexible", "early_morning", "night_shift",
    "student", "irregular", "unemployed",
]
BEDTIMES = ["early", "moderate", "late", "varies"]
LEASE_DURATIONS = ["month_to_month", "3_months", "6_months", "12_months", "24_months", "flexible"]

COMMUNICATION_STYLES = ["direct", "diplomatic", "reserved", "expressive", "written"]
CONFLICT_STYLES = ["direct_discussion", "compromise", "mediation", "cooling_off", "avoidance"]
CHORE_STYLES = ["equal_split", "rotating_schedule", "assigned_tasks", "flexible", "clean_as_you_go"]

SMOKING_VALUES = [s.value for s in SmokingStatus]
SMOKING_WEIGHTS = [55, 12, 10, 8, 15]  # non, outdoor, occasional, regular, former

GENDERS = ["female", "male", "non-binary"]
GENDER_PREFERENCES = ["no_preference", "same_gender", "different_gender", "female", "male"]
GENDER_PREFERENCE_WEIGHTS = [45, 30, 5, 10, 10]

INTERESTS = [
    "hiking", "cooking", "reading", "gaming", "music", "art", "yoga",
    "meditation", "fitness", "movies", "volunteering", "gardening",
    "board games", "running", "journaling", "photography",
]

IMPORTANT_QUALITIES = [
    "honesty", "respect", "reliability", "cleanliness", "quietness",
    "supportiveness", "humor", "communication", "boundaries", "accountability",
]

SHORT_TERM_GOALS = [
    "Find stable housing close to work",
    "Stay consistent with meetings and build a routine",
    "Save for a car",
    "Finish my certification program",
]

LONG_TERM_VISIONS = [
    "Own a home and mentor people new to recovery",
    "Build a career in peer support",
    "Go back to school and reconnect with family",
]

# Keys written under a legacy column name when restyling a record.
_LEGACY_STYLE_RATE = 0.3
_CAMEL_STYLE_RATE = 0.3
_STRINGIFY_RATE = 0.3
_BAD_FIELD_RATE = 0.05


def _sample(pool: list[str], k: int, rng: random.Random) -> list[str]:
    return rng.sample(pool, min(k, len(pool)))


def _restyle(record: dict[str, Any], rng: random.Random) -> dict[str, Any]:
    """Rename keys the way mixed-vintage store rows spell them."""
    styled = {}
    for key, value in record.items():
        legacy = LEGACY_ALIASES.get(key)
        if legacy and key != "user_id" and rng.random() < _LEGACY_STYLE_RATE:
            key = legacy[0]
        if rng.random() < _CAMEL_STYLE_RATE:
            key = camel_case(key)
        styled[key] = value
    return styled


def _maybe_str(value: Any, rng: random.Random) -> Any:
    return str(value) if rng.random() < _STRINGIFY_RATE else value


def generate_raw_records(n: int, seed: int = 42, start: date = date(2026, 1, 1)) -> list[dict[str, Any]]:
    """Generate ``n`` store-shaped raw profile records.

    Args:
        n: Number of records.
        seed: RNG seed.
        start: Anchor for birth and move-in dates.
    """
    rng = random.Random(seed)
    records = []

    for i in range(n):
        city, state = rng.choice(CITIES)
        age = rng.randint(19, 64)
        dob = start - timedelta(days=age * 365 + rng.randint(0, 364))
        budget_max = rng.randrange(500, 2001, 25)
        budget_min = max(300, budget_max - rng.randrange(100, 501, 50))
        smoking = rng.choices(SMOKING_VALUES, weights=SMOKING_WEIGHTS)[0]
        cleanliness = rng.randint(1, 5)
        noise = rng.randint(1, 5)

        record: dict[str, Any] = {
            "user_id": f"user-{i:04d}",
            "first_name": rng.choice(FIRST_NAMES),
            "date_of_birth": dob.isoformat(),
            "primary_city": city,
            "primary_state": state,
            "search_radius_miles": _maybe_str(rng.choice([10, 20, 30, 50]), rng),
            "budget_min": _maybe_str(budget_min, rng),
            "budget_max": _maybe_str(budget_max, rng),
            "recovery_stage": rng.choice([s.value for s in STAGE_ORDER]),
            "recovery_methods": _sample(RECOVERY_METHODS, rng.randint(1, 3), rng),
            "program_types": _sample(PROGRAM_TYPES, rng.randint(1, 2), rng),
            "primary_issues": _sample(PRIMARY_ISSUES, rng.randint(1, 2), rng),
            "spiritual_affiliation": rng.choice(SPIRITUAL_AFFILIATIONS),
            "substance_free_home_required": rng.random() < 0.9,
            "want_recovery_support": rng.random() < 0.6,
            "comfortable_discussing_recovery": rng.random() < 0.7,
            "attend_meetings_together": rng.random() < 0.3,
            "social_level": _maybe_str(rng.randint(1, 5), rng),
            "cleanliness_level": cleanliness,
            "noise_tolerance": noise,
            "work_schedule": rng.choice(WORK_SCHEDULES),
            "bedtime_preference": rng.choice(BEDTIMES),
            "early_riser": rng.random() < 0.4,
            "night_owl": rng.random() < 0.3,
            "communication_style": rng.choice(COMMUNICATION_STYLES),
            "conflict_resolution_style": rng.choice(CONFLICT_STYLES),
            "chore_sharing_style": rng.choice(CHORE_STYLES),
            "smoking_status": smoking,
            "pets_owned": rng.random() < 0.25,
            "pets_comfortable": rng.random() < 0.75,
            "financially_stable": rng.random() < 0.9,
            "interests": _sample(INTERESTS, rng.randint(2, 5), rng),
            "important_qualities": _sample(IMPORTANT_QUALITIES, rng.randint(2, 4), rng),
            "move_in_date": (start + timedelta(days=rng.randint(0, 120))).isoformat(),
            "lease_duration": rng.choice(LEASE_DURATIONS),
            "gender_identity": rng.choices(GENDERS, weights=[48, 47, 5])[0],
            "preferred_roommate_gender": rng.choices(GENDER_PREFERENCES, weights=GENDER_PREFERENCE_WEIGHTS)[0],
            "gender_inclusive": rng.random() < 0.4,
            "deal_breaker_substance_use": rng.random() < 0.5,
            "deal_breaker_financial_issues": rng.random() < 0.8,
            "deal_breaker_pets": rng.random() < 0.15,
            "deal_breaker_smoking": smoking in ("non_smoker", "former_smoker") and rng.random() < 0.5,
            "deal_breaker_loudness": noise <= 2 and rng.random() < 0.5,
            "deal_breaker_uncleanliness": cleanliness >= 4 and rng.random() < 0.5,
            "is_active": rng.random() < 0.95,
            "profile_completed": rng.random() < 0.85,
            "completion_percentage": _maybe_str(rng.randint(60, 100), rng),
        }

        if rng.random() < 0.6:
            record["short_term_goals"] = rng.choice(SHORT_TERM_GOALS)
        if rng.random() < 0.4:
            record["long_term_vision"] = rng.choice(LONG_TERM_VISIONS)
        if rng.random() < 0.3:
            record["looking_for"] = "Someone steady who respects quiet hours"

        # Bad data the normalizer must absorb.
        if rng.random() < _BAD_FIELD_RATE:
            record["primary_state"] = {"TX": "Texas", "CA": "California"}.get(state, "N/A")
        if rng.random() < _BAD_FIELD_RATE:
            record["cleanliness_level"] = rng.choice([0, 7, "high"])
        if rng.random() < _BAD_FIELD_RATE:
            record["budget_min"] = budget_max + 200
        if rng.random() < _BAD_FIELD_RATE:
            record["interests"] = ", ".join(record["interests"])

        records.append(_restyle(record, rng))

    return records


def generate_profiles(n: int, seed: int = 42, today: Optional[date] = None) -> list[Profile]:
    """Generate and normalize ``n`` profiles."""
    return normalize_many(generate_raw_records(n, seed), today=today)


# ── Contrast pairs (attribute flip) ──────────────────────────────────────────

FLIP_TYPES = ["smoking", "pets", "stage", "location", "gender_preference", "substance_free"]


def flip_attribute(profile: Profile, flip_type: str, rng: random.Random) -> Profile:
    """Copy ``profile`` with one attribute flipped to a clashing value."""
    changes: dict[str, Any] = {}

    if flip_type == "smoking":
        changes["smoking_status"] = SmokingStatus.NON_SMOKER if profile.smokes else SmokingStatus.REGULAR

    elif flip_type == "pets":
        changes["pets_owned"] = not profile.pets_owned

    elif flip_type == "stage":
        idx = STAGE_ORDER.index(profile.recovery_stage) if profile.recovery_stage else 0
        changes["recovery_stage"] = RecoveryStage.LONG_TERM if idx <= 1 else RecoveryStage.EARLY

    elif flip_type == "location":
        city, state = rng.choice([c for c in CITIES if c[1] != profile.primary_state])
        changes.update(primary_city=city, primary_state=state, primary_location=f"{city}, {state}")

    elif flip_type == "gender_preference":
        # Prefer a gender other than the profile's own, so the copy rejects the original.
        changes["preferred_roommate_gender"] = rng.choice(
            [g for g in GENDERS if g != profile.gender_identity]
        )

    elif flip_type == "substance_free":
        changes["substance_free_home_required"] = not profile.substance_free_home_required

    else:
        raise ValueError(f"Unknown flip type: {flip_type}")

    return dataclasses.replace(
        profile,
        user_id=f"{profile.user_id}-flip-{flip_type}",
        present_fields=profile.present_fields | set(changes),
        **changes,
    )
