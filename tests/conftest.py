"""Shared fixtures: a fully filled-in raw record and a profile factory."""

from datetime import date

import pytest

from recovery_match.data.normalize import normalize

TODAY = date(2026, 6, 1)


def base_record(user_id: str = "u1", **overrides) -> dict:
    record = {
        "user_id": user_id,
        "first_name": "Sam",
        "date_of_birth": "1998-03-15",  # 28 on TODAY
        "primary_city": "Austin",
        "primary_state": "TX",
        "budget_min": 700,
        "budget_max": 1000,
        "recovery_stage": "stable",
        "recovery_methods": ["12-step", "therapy"],
        "program_types": ["AA"],
        "primary_issues": ["alcohol"],
        "spiritual_affiliation": "agnostic",
        "substance_free_home_required": True,
        "want_recovery_support": True,
        "comfortable_discussing_recovery": True,
        "attend_meetings_together": False,
        "social_level": 3,
        "cleanliness_level": 4,
        "noise_tolerance": 2,
        "work_schedule": "traditional_9_5",
        "bedtime_preference": "moderate",
        "early_riser": True,
        "night_owl": False,
        "communication_style": "direct",
        "conflict_resolution_style": "direct_discussion",
        "chore_sharing_style": "equal_split",
        "smoking_status": "non_smoker",
        "pets_owned": False,
        "pets_comfortable": True,
        "financially_stable": True,
        "interests": ["hiking", "cooking", "reading"],
        "important_qualities": ["honesty", "respect"],
        "short_term_goals": "Find stable housing near work",
        "long_term_vision": "Mentor people new to recovery",
        "additional_interests": "Volunteering at the food bank",
        "looking_for": "A quiet, supportive roommate",
        "move_in_date": "2026-07-01",
        "lease_duration": "12_months",
        "gender_identity": "female",
        "preferred_roommate_gender": "no_preference",
        "gender_inclusive": True,
        "deal_breaker_substance_use": True,
        "deal_breaker_financial_issues": True,
        "deal_breaker_pets": False,
        "deal_breaker_smoking": False,
        "deal_breaker_loudness": False,
        "deal_breaker_uncleanliness": False,
        "is_active": True,
        "profile_completed": True,
        "completion_percentage": 95,
    }
    record.update(overrides)
    return record


@pytest.fixture
def make_profile():
    """Factory: ``make_profile("id", field=value, ...)`` -> normalized Profile."""

    def _make(user_id: str = "u1", **overrides):
        return normalize(base_record(user_id, **overrides), today=TODAY)

    return _make
