"""Tests for raw record normalization."""

from dataclasses import FrozenInstanceError
from datetime import date

import pytest

from recovery_match.data.normalize import (
    aliases_for,
    calculate_age,
    default_for,
    normalize,
    normalize_many,
    parse_bool,
    parse_int,
    profile_to_record,
    sanitize_list,
)
from recovery_match.data.schema import Profile, RecoveryStage, SmokingStatus

from conftest import TODAY, base_record


class TestIdentity:
    def test_non_mapping_returns_none(self):
        assert normalize(None) is None
        assert normalize(["user_id", "x"]) is None
        assert normalize("u1") is None

    def test_missing_user_id_returns_none(self):
        assert normalize({"first_name": "Sam"}) is None
        assert normalize({"user_id": "   "}) is None

    def test_legacy_id_key(self):
        p = normalize({"id": 42})
        assert p.user_id == "42"

    def test_camel_case_user_id(self):
        assert normalize({"userId": "abc"}).user_id == "abc"


class TestKeyReconciliation:
    def test_camel_case_fields(self):
        p = normalize({"userId": "u1", "budgetMax": "1,200", "recoveryStage": "Long Term"})
        assert p.budget_max == 1200
        assert p.recovery_stage == RecoveryStage.LONG_TERM

    def test_legacy_aliases(self):
        p = normalize({
            "user_id": "u1",
            "noise_level": 4,
            "preferred_city": "Austin",
            "preferred_state": "tx",
            "gender": "Female",
            "program_type": ["AA", "NA"],
        })
        assert p.noise_tolerance == 4
        assert p.primary_city == "Austin"
        assert p.primary_state == "TX"
        assert p.primary_location == "Austin, TX"
        assert p.gender_identity == "female"
        assert p.program_types == ("AA", "NA")

    def test_snake_case_wins_over_alias(self):
        p = normalize({"user_id": "u1", "noise_tolerance": 2, "noise_level": 5})
        assert p.noise_tolerance == 2

    def test_blank_value_falls_through_to_alias(self):
        p = normalize({"user_id": "u1", "primary_city": "  ", "city": "Denver"})
        assert p.primary_city == "Denver"

    def test_aliases_order(self):
        keys = aliases_for("primary_city")
        assert keys[:2] == ("primary_city", "primaryCity")
        assert "preferred_city" in keys and "preferredCity" in keys

    def test_nested_first_name(self):
        p = normalize({"user_id": "u1", "registrant_profiles": {"first_name": "Ana"}})
        assert p.first_name == "Ana"


class TestCoercion:
    def test_parse_int(self):
        assert parse_int("850") == 850
        assert parse_int("$1,250") == 1250
        assert parse_int(12.6) == 13
        assert parse_int("abc") is None
        assert parse_int(True) is None

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan"), "Infinity", "-inf", "NaN", "9" * 400])
    def test_parse_int_non_finite(self, value):
        assert parse_int(value) is None

    def test_non_finite_numbers_in_record(self):
        p = normalize({
            "user_id": "u1",
            "budget_max": "Infinity",
            "social_level": float("inf"),
            "completion_percentage": "9" * 400,
            "search_radius_miles": float("nan"),
        })
        assert p.budget_max is None
        assert not p.has("budget_max")
        assert not p.has("social_level")
        assert not p.has("completion_percentage")
        assert not p.has("search_radius_miles")

    def test_parse_bool(self):
        assert parse_bool("yes") is True
        assert parse_bool("FALSE") is False
        assert parse_bool(1) is True
        assert parse_bool("maybe") is None

    def test_bool_strings_in_record(self):
        p = normalize({"user_id": "u1", "pets_owned": "yes", "pets_comfortable": "false"})
        assert p.pets_owned is True
        assert p.pets_comfortable is False

    def test_sanitize_list(self):
        assert sanitize_list("hiking, , cooking,hiking") == ("hiking", "cooking")
        assert sanitize_list([" yoga ", None, "", "art"]) == ("yoga", "art")
        assert sanitize_list(5) is None

    def test_malformed_list_falls_back_to_empty(self):
        p = normalize({"user_id": "u1", "interests": 17})
        assert p.interests == ()
        assert not p.has("interests")

    def test_smoking_status_spellings(self):
        assert normalize({"user_id": "u1", "smoking_status": "Non-Smoker"}).smoking_status == SmokingStatus.NON_SMOKER
        assert normalize({"user_id": "u1", "smoking_status": "outdoor only"}).smoking_status == SmokingStatus.OUTDOOR_ONLY
        assert normalize({"user_id": "u1", "smoking_status": "sometimes"}).smoking_status is None

    def test_unknown_stage_is_absent(self):
        p = normalize({"user_id": "u1", "recovery_stage": "thriving"})
        assert p.recovery_stage is None

    def test_date_objects_and_strings(self):
        p = normalize({"user_id": "u1", "move_in_date": "2026-07-01T00:00:00Z"})
        assert p.move_in_date == date(2026, 7, 1)
        p = normalize({"user_id": "u1", "move_in_date": date(2026, 8, 1)})
        assert p.move_in_date == date(2026, 8, 1)


class TestConstraintRepair:
    def test_invalid_state_dropped(self):
        p = normalize({"user_id": "u1", "primary_city": "Austin", "primary_state": "Texas"})
        assert p.primary_state is None
        assert p.primary_location == "Austin"

    def test_inverted_budget_drops_min(self):
        p = normalize({"user_id": "u1", "budget_min": 1500, "budget_max": 900})
        assert p.budget_min is None
        assert p.budget_max == 900

    def test_zero_budget_max_dropped(self):
        assert normalize({"user_id": "u1", "budget_max": 0}).budget_max is None

    @pytest.mark.parametrize("raw, expected", [(7, 5), (0, 1), ("2", 2), (-3, 1)])
    def test_scale_clamped(self, raw, expected):
        assert normalize({"user_id": "u1", "cleanliness_level": raw}).cleanliness_level == expected

    def test_unparseable_scale_keeps_default(self):
        p = normalize({"user_id": "u1", "social_level": "very"})
        assert p.social_level == 3
        assert not p.has("social_level")

    def test_completion_clamped(self):
        assert normalize({"user_id": "u1", "completion_percentage": "140"}).completion_percentage == 100


class TestAge:
    def test_birthday_not_yet_reached(self):
        assert calculate_age(date(2000, 6, 2), date(2026, 6, 1)) == 25

    def test_on_birthday(self):
        assert calculate_age(date(2000, 6, 1), date(2026, 6, 1)) == 26

    def test_future_birth_date(self):
        assert calculate_age(date(2030, 1, 1), date(2026, 6, 1)) is None

    def test_invalid_date_of_birth(self):
        p = normalize({"user_id": "u1", "date_of_birth": "not-a-date"}, today=TODAY)
        assert p.age is None
        assert p.date_of_birth is None

    def test_age_from_record(self):
        p = normalize(base_record(), today=TODAY)
        assert p.age == 28


class TestDefaults:
    def test_minimal_record_gets_defaults(self):
        p = normalize({"user_id": "u1"})
        assert p.first_name == "Anonymous"
        assert p.search_radius_miles == 30
        assert p.pets_comfortable is True
        assert p.substance_free_home_required is True
        assert p.deal_breaker_financial_issues is True
        assert p.deal_breaker_pets is False
        assert p.social_level == 3
        assert p.interests == ()
        assert p.recovery_methods == ()
        assert p.budget_max is None
        assert p.present_fields == frozenset({"user_id"})

    def test_default_for(self):
        assert default_for("financially_stable") is True
        assert default_for("cleanliness_level") == 3
        assert default_for("budget_max") is None

    def test_legacy_deal_breaker_list(self):
        p = normalize({"user_id": "u1", "deal_breakers": ["Pets", "smoking indoors"]})
        assert p.deal_breaker_pets is True
        assert p.deal_breaker_smoking is True
        assert p.deal_breaker_loudness is False

    def test_explicit_flag_beats_legacy_list(self):
        p = normalize({"user_id": "u1", "deal_breakers": "pets", "deal_breaker_pets": False})
        assert p.deal_breaker_pets is False


class TestRoundTrip:
    def test_full_record_round_trip(self):
        p = normalize(base_record(), today=TODAY)
        assert normalize(profile_to_record(p), today=TODAY) == p

    def test_partial_record_emits_only_supplied_fields(self):
        p = normalize({"userId": "u1", "budgetMax": "900", "city": "Denver"})
        assert profile_to_record(p) == {"user_id": "u1", "primary_city": "Denver", "budget_max": 900}

    def test_round_trip_fills_defaults(self):
        p = normalize({"user_id": "u1", "interests": "art, yoga"})
        again = normalize(profile_to_record(p))
        assert again.interests == ("art", "yoga")
        assert again.pets_comfortable is True
        assert again == p

    def test_include_defaults(self):
        record = profile_to_record(normalize({"user_id": "u1"}), include_defaults=True)
        assert record["pets_comfortable"] is True
        assert record["interests"] == []
        assert "age" not in record
        assert "primary_location" not in record

    def test_idempotent(self):
        raw = base_record(interests="hiking, cooking", budget_max="1,000")
        assert normalize(raw, today=TODAY) == normalize(raw, today=TODAY)

    def test_profile_is_frozen(self):
        p = normalize({"user_id": "u1"})
        with pytest.raises(FrozenInstanceError):
            p.budget_max = 10  # type: ignore[misc]
        assert isinstance(p, Profile)


class TestNormalizeMany:
    def test_drops_unusable_records(self):
        profiles = normalize_many([{"user_id": "a"}, None, {"name": "x"}, {"id": "b"}])
        assert [p.user_id for p in profiles] == ["a", "b"]
