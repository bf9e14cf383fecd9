"""Raw store record -> canonical Profile.

All naming-variant reconciliation happens here: records coming out of the
profile store mix snake_case and camelCase keys, legacy column names,
stringified numbers and nulls. Everything downstream reads canonical
``Profile`` attributes only.

Normalization is tolerant. A bad field is dropped (or clamped) to its
default and logged at DEBUG; only a record that is not a mapping, or that
has no user id, yields ``None``.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import re
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Optional

from .schema import Profile, RecoveryStage, SmokingStatus

logger = logging.getLogger("recovery_match")

# ── Field tables ─────────────────────────────────────────────────────────────

# Legacy / alternate column names, tried after the canonical snake_case name
# and its camelCase spelling.
LEGACY_ALIASES: dict[str, tuple[str, ...]] = {
    "user_id": ("id",),
    "primary_city": ("preferred_city", "city"),
    "primary_state": ("preferred_state", "state"),
    "primary_location": ("location", "preferred_location"),
    "search_radius_miles": ("search_radius",),
    "budget_min": ("price_range_min",),
    "budget_max": ("price_range_max",),
    "program_types": ("program_type",),
    "noise_tolerance": ("noise_level",),
    "chore_sharing_style": ("chore_sharing_preference",),
    "gender_identity": ("gender",),
    "preferred_roommate_gender": ("gender_preference",),
    "substance_free_home_required": ("substance_free_required",),
    "lease_duration": ("lease_length",),
}

STRING_FIELDS = (
    "first_name",
    "primary_city",
    "primary_location",
    "short_term_goals",
    "long_term_vision",
    "additional_interests",
    "about_me",
    "looking_for",
)

# Categorical strings compared by value: lower-cased.
CATEGORY_FIELDS = (
    "spiritual_affiliation",
    "work_schedule",
    "bedtime_preference",
    "communication_style",
    "conflict_resolution_style",
    "chore_sharing_style",
    "lease_duration",
    "gender_identity",
    "preferred_roommate_gender",
)

LIST_FIELDS = (
    "recovery_methods",
    "program_types",
    "primary_issues",
    "interests",
    "important_qualities",
)

SCALE_FIELDS = ("social_level", "cleanliness_level", "noise_tolerance")

BOOL_FIELDS = (
    "substance_free_home_required",
    "want_recovery_support",
    "comfortable_discussing_recovery",
    "attend_meetings_together",
    "early_riser",
    "night_owl",
    "pets_owned",
    "pets_comfortable",
    "financially_stable",
    "gender_inclusive",
    "deal_breaker_substance_use",
    "deal_breaker_financial_issues",
    "deal_breaker_pets",
    "deal_breaker_smoking",
    "deal_breaker_loudness",
    "deal_breaker_uncleanliness",
    "is_active",
    "profile_completed",
)

DATE_FIELDS = ("date_of_birth", "move_in_date")

# Old free-form ``deal_breakers`` lists, mapped onto the boolean flags when
# the flag itself is absent from the record.
LEGACY_DEAL_BREAKER_KEYWORDS: dict[str, tuple[str, ...]] = {
    "deal_breaker_substance_use": ("substance", "drug", "alcohol", "drinking"),
    "deal_breaker_financial_issues": ("financ", "rent", "money"),
    "deal_breaker_pets": ("pet",),
    "deal_breaker_smoking": ("smok",),
    "deal_breaker_loudness": ("loud", "noise", "noisy"),
    "deal_breaker_uncleanliness": ("unclean", "messy", "dirty", "mess"),
}

_TRUE_STRINGS = {"true", "t", "yes", "y", "1", "on"}
_FALSE_STRINGS = {"false", "f", "no", "n", "0", "off"}

_DEFAULTS = {f.name: f.default for f in dataclasses.fields(Profile) if f.default is not dataclasses.MISSING}


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def aliases_for(name: str) -> tuple[str, ...]:
    """Raw keys tried, in order, for a canonical field."""
    keys = [name, camel_case(name)]
    for legacy in LEGACY_ALIASES.get(name, ()):
        keys.extend([legacy, camel_case(legacy)])
    return tuple(dict.fromkeys(keys))


def _lookup(raw: Mapping, name: str) -> Any:
    """First non-empty value among the aliases of ``name`` (None if none)."""
    for key in aliases_for(name):
        value = raw.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


# ── Coercion helpers ─────────────────────────────────────────────────────────


def parse_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip().replace(",", "").lstrip("$")
        try:
            value = float(text)
        except ValueError:
            return None
    if isinstance(value, float):
        # NaN, +/-inf and strings past float range ("9" * 400 -> inf)
        return int(round(value)) if math.isfinite(value) else None
    return None


def parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return None


def parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()[:10]
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None
    return None


def sanitize_list(value: Any) -> Optional[tuple[str, ...]]:
    """List or comma-separated string -> tuple of unique trimmed entries.

    Returns None when the value is neither (caller falls back to empty).
    """
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple, set, frozenset)):
        items = value
    else:
        return None
    cleaned = []
    for item in items:
        if item is None:
            continue
        text = str(item).strip()
        if text:
            cleaned.append(text)
    return tuple(dict.fromkeys(cleaned))


def parse_state(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    text = value.strip()
    if len(text) == 2 and text.isalpha():
        return text.upper()
    return None


def parse_recovery_stage(value: Any) -> Optional[RecoveryStage]:
    if isinstance(value, RecoveryStage):
        return value
    if not isinstance(value, str):
        return None
    text = re.sub(r"[\s_]+", "-", value.strip().lower())
    try:
        return RecoveryStage(text)
    except ValueError:
        return None


def parse_smoking_status(value: Any) -> Optional[SmokingStatus]:
    if isinstance(value, SmokingStatus):
        return value
    if not isinstance(value, str):
        return None
    text = re.sub(r"[\s\-]+", "_", value.strip().lower())
    if text == "nonsmoker":
        text = "non_smoker"
    try:
        return SmokingStatus(text)
    except ValueError:
        return None


def calculate_age(date_of_birth: Optional[date], today: Optional[date] = None) -> Optional[int]:
    """Whole years since ``date_of_birth``; None if absent or in the future."""
    if date_of_birth is None:
        return None
    today = today or date.today()
    if date_of_birth > today:
        return None
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def _nested_first_name(raw: Mapping) -> Optional[str]:
    nested = raw.get("registrant_profiles") or raw.get("registrantProfiles")
    if isinstance(nested, Mapping):
        name = nested.get("first_name") or nested.get("firstName")
        if isinstance(name, str) and name.strip():
            return name.strip()
    return None


# ── Normalizer ───────────────────────────────────────────────────────────────


def normalize(raw: Any, today: Optional[date] = None) -> Optional[Profile]:
    """Convert a raw store record into a Profile.

    Args:
        raw: Key-value record from the profile store.
        today: Reference date for age computation (defaults to date.today()).

    Returns:
        A best-effort Profile, or None if ``raw`` is not a mapping or has no
        user id.
    """
    if not isinstance(raw, Mapping):
        logger.debug(f"Skipping non-mapping profile record: {type(raw).__name__}")
        return None

    raw_id = _lookup(raw, "user_id")
    if raw_id is None or isinstance(raw_id, (bool, Mapping, list)):
        logger.debug("Skipping profile record without a user id")
        return None
    user_id = str(raw_id).strip()

    values: dict[str, Any] = {"user_id": user_id}
    present = {"user_id"}

    def accept(name: str, value: Any) -> None:
        values[name] = value
        present.add(name)

    # Free text
    for name in STRING_FIELDS:
        value = _lookup(raw, name)
        if value is None and name == "first_name":
            value = _nested_first_name(raw)
        if isinstance(value, str):
            accept(name, value.strip())
        elif value is not None:
            logger.debug(f"{user_id}: dropping non-text {name}={value!r}")

    for name in CATEGORY_FIELDS:
        value = _lookup(raw, name)
        if isinstance(value, str):
            accept(name, value.strip().lower())
        elif value is not None:
            logger.debug(f"{user_id}: dropping non-text {name}={value!r}")

    for name in LIST_FIELDS:
        value = _lookup(raw, name)
        if value is None:
            continue
        items = sanitize_list(value)
        if items is None:
            logger.debug(f"{user_id}: dropping malformed list {name}={value!r}")
            continue
        accept(name, items)

    for name in SCALE_FIELDS:
        value = _lookup(raw, name)
        if value is None:
            continue
        level = parse_int(value)
        if level is None:
            logger.debug(f"{user_id}: dropping unparseable {name}={value!r}")
            continue
        if not 1 <= level <= 5:
            logger.debug(f"{user_id}: clamping {name}={level} into 1-5")
        accept(name, max(1, min(5, level)))

    for name in BOOL_FIELDS:
        value = _lookup(raw, name)
        if value is None:
            continue
        flag = parse_bool(value)
        if flag is None:
            logger.debug(f"{user_id}: dropping unparseable {name}={value!r}")
            continue
        accept(name, flag)

    for name in DATE_FIELDS:
        value = _lookup(raw, name)
        if value is None:
            continue
        parsed = parse_date(value)
        if parsed is None:
            logger.debug(f"{user_id}: dropping invalid date {name}={value!r}")
            continue
        accept(name, parsed)

    # Enumerations
    value = _lookup(raw, "recovery_stage")
    if value is not None:
        stage = parse_recovery_stage(value)
        if stage is None:
            logger.debug(f"{user_id}: unknown recovery_stage={value!r}")
        else:
            accept("recovery_stage", stage)

    value = _lookup(raw, "smoking_status")
    if value is not None:
        status = parse_smoking_status(value)
        if status is None:
            logger.debug(f"{user_id}: unknown smoking_status={value!r}")
        else:
            accept("smoking_status", status)

    # Location
    value = _lookup(raw, "primary_state")
    if value is not None:
        state = parse_state(value)
        if state is None:
            logger.debug(f"{user_id}: dropping invalid primary_state={value!r}")
        else:
            accept("primary_state", state)

    value = _lookup(raw, "search_radius_miles")
    if value is not None:
        radius = parse_int(value)
        if radius is None or radius <= 0:
            logger.debug(f"{user_id}: dropping invalid search_radius_miles={value!r}")
        else:
            accept("search_radius_miles", radius)

    # Budget
    for name in ("budget_min", "budget_max"):
        value = _lookup(raw, name)
        if value is None:
            continue
        amount = parse_int(value)
        if amount is None or amount < 0 or (name == "budget_max" and amount == 0):
            logger.debug(f"{user_id}: dropping invalid {name}={value!r}")
            continue
        accept(name, amount)
    if (
        values.get("budget_min") is not None
        and values.get("budget_max") is not None
        and values["budget_min"] > values["budget_max"]
    ):
        logger.debug(
            f"{user_id}: budget_min {values['budget_min']} > budget_max {values['budget_max']}, dropping budget_min"
        )
        del values["budget_min"]
        present.discard("budget_min")

    value = _lookup(raw, "completion_percentage")
    if value is not None:
        pct = parse_int(value)
        if pct is None:
            logger.debug(f"{user_id}: dropping unparseable completion_percentage={value!r}")
        else:
            accept("completion_percentage", max(0, min(100, pct)))

    _apply_legacy_deal_breakers(raw, values, present)

    # Derived fields
    values["age"] = calculate_age(values.get("date_of_birth"), today)
    if "primary_location" not in values:
        city, state = values.get("primary_city"), values.get("primary_state")
        if city and state:
            values["primary_location"] = f"{city}, {state}"
        elif city or state:
            values["primary_location"] = city or state

    values["present_fields"] = frozenset(present)
    return Profile(**values)


def _apply_legacy_deal_breakers(raw: Mapping, values: dict[str, Any], present: set[str]) -> None:
    legacy = sanitize_list(_lookup(raw, "deal_breakers") or ())
    if not legacy:
        return
    lowered = [item.lower() for item in legacy]
    for name, keywords in LEGACY_DEAL_BREAKER_KEYWORDS.items():
        if name in present:
            continue
        if any(k in item for item in lowered for k in keywords):
            values[name] = True
            present.add(name)


def normalize_many(records: Iterable[Any], today: Optional[date] = None) -> list[Profile]:
    """Normalize a batch, dropping records that cannot become a Profile."""
    profiles = []
    skipped = 0
    for record in records:
        profile = normalize(record, today=today)
        if profile is None:
            skipped += 1
            continue
        profiles.append(profile)
    if skipped:
        logger.debug(f"Skipped {skipped} unusable profile records")
    return profiles


def _to_raw(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, tuple):
        return list(value)
    return value


def profile_to_record(profile: Profile, include_defaults: bool = False) -> dict[str, Any]:
    """Re-extract a raw snake_case record from a Profile.

    With ``include_defaults=False`` only explicitly supplied fields are
    emitted, so ``normalize(profile_to_record(p)) == p``. Derived fields
    (age, a composed primary_location) are never emitted.
    """
    record: dict[str, Any] = {}
    for f in dataclasses.fields(Profile):
        name = f.name
        if name in ("age", "present_fields"):
            continue
        if name not in profile.present_fields and not (include_defaults and name != "primary_location"):
            continue
        record[name] = _to_raw(getattr(profile, name))
    return record


def default_for(name: str) -> Any:
    """Documented default of a canonical field."""
    return _DEFAULTS.get(name)
