"""Matchability checks on normalized profiles."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from .schema import Profile

logger = logging.getLogger("recovery_match")

REQUIRED_FIELDS = ("user_id", "recovery_stage", "budget_max")

RECOMMENDED_FIELDS = (
    "age",
    "gender_identity",
    "cleanliness_level",
    "noise_tolerance",
    "social_level",
    "smoking_status",
    "interests",
)

MISSING_REQUIRED_PENALTY = 25
MISSING_RECOMMENDED_PENALTY = 5


@dataclass(frozen=True)
class ProfileValidation:
    is_valid: bool
    missing: tuple[str, ...] = ()
    missing_recommended: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    score: int = 100


def _is_missing(profile: Profile, name: str) -> bool:
    if name == "age":
        return profile.age is None
    if name in ("cleanliness_level", "noise_tolerance", "social_level"):
        # Scales always carry a value; only an explicit answer counts.
        return not profile.has(name)
    value = getattr(profile, name)
    return value is None or value == "" or value == ()


def validate_profile_for_matching(profile: Profile, today: Optional[date] = None) -> ProfileValidation:
    today = today or date.today()
    missing = tuple(name for name in REQUIRED_FIELDS if _is_missing(profile, name))
    missing_recommended = tuple(name for name in RECOMMENDED_FIELDS if _is_missing(profile, name))

    warnings = []
    if missing_recommended:
        warnings.append(f"Missing recommended fields: {', '.join(missing_recommended)}")
    if not profile.profile_completed:
        warnings.append("Profile marked as incomplete")
    if not profile.is_active:
        warnings.append("Profile is not active")
    if profile.move_in_date is not None and profile.move_in_date < today:
        warnings.append(f"Move-in date {profile.move_in_date.isoformat()} is in the past")

    score = max(
        0,
        100
        - len(missing) * MISSING_REQUIRED_PENALTY
        - len(missing_recommended) * MISSING_RECOMMENDED_PENALTY,
    )
    return ProfileValidation(
        is_valid=not missing,
        missing=missing,
        missing_recommended=missing_recommended,
        warnings=tuple(warnings),
        score=score,
    )


def filter_matchable_profiles(
    profiles: Iterable[Profile],
    require_completed: bool = True,
    require_active: bool = True,
    min_validation_score: int = 70,
    today: Optional[date] = None,
) -> list[Profile]:
    """Keep only profiles with enough data to be worth scoring."""
    kept = []
    for profile in profiles:
        validation = validate_profile_for_matching(profile, today=today)
        if not validation.is_valid:
            logger.debug(f"Profile {profile.user_id} failed validation: missing {list(validation.missing)}")
            continue
        if require_completed and not profile.profile_completed:
            logger.debug(f"Profile {profile.user_id} not completed")
            continue
        if require_active and not profile.is_active:
            logger.debug(f"Profile {profile.user_id} not active")
            continue
        if validation.score < min_validation_score:
            logger.debug(f"Profile {profile.user_id} validation score too low: {validation.score}")
            continue
        kept.append(profile)
    return kept
