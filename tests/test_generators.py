"""Tests for synthetic profile generation and attribute flips."""

import random

import pytest

from recovery_match.data.generators import FLIP_TYPES, flip_attribute, generate_profiles, generate_raw_records
from recovery_match.data.normalize import LEGACY_ALIASES, camel_case, normalize_many
from recovery_match.scoring.factors import gender_preferences_score

from conftest import TODAY

FLIPPED_FIELD = {
    "smoking": "smoking_status",
    "pets": "pets_owned",
    "stage": "recovery_stage",
    "location": "primary_state",
    "gender_preference": "preferred_roommate_gender",
    "substance_free": "substance_free_home_required",
}


class TestRawRecords:
    def test_deterministic(self):
        assert generate_raw_records(20, seed=7) == generate_raw_records(20, seed=7)

    def test_different_seeds_differ(self):
        assert generate_raw_records(20, seed=1) != generate_raw_records(20, seed=2)

    def test_count(self):
        assert len(generate_raw_records(35)) == 35

    def test_mixed_key_styles(self):
        keys = {key for record in generate_raw_records(50) for key in record}
        legacy = {alias for names in LEGACY_ALIASES.values() for alias in names}
        legacy |= {camel_case(alias) for alias in legacy}
        assert any(key != key.lower() for key in keys)
        assert keys & legacy


class TestGenerateProfiles:
    def test_every_record_normalizes(self):
        records = generate_raw_records(100)
        assert len(normalize_many(records, today=TODAY)) == 100

    def test_ids_unique_and_ordered(self):
        profiles = generate_profiles(30, today=TODAY)
        assert [p.user_id for p in profiles] == [f"user-{i:04d}" for i in range(30)]

    def test_values_in_range(self):
        for p in generate_profiles(100, today=TODAY):
            assert p.cleanliness_level is None or 1 <= p.cleanliness_level <= 5
            if p.budget_min is not None and p.budget_max is not None:
                assert p.budget_min <= p.budget_max
            assert p.age is None or 18 <= p.age <= 70


class TestFlipAttribute:
    @pytest.mark.parametrize("flip_type", FLIP_TYPES)
    def test_flip_changes_field(self, make_profile, flip_type):
        original = make_profile("a")
        flipped = flip_attribute(original, flip_type, random.Random(0))
        field = FLIPPED_FIELD[flip_type]
        assert getattr(flipped, field) != getattr(original, field)
        assert field in flipped.present_fields
        assert flipped.user_id == f"a-flip-{flip_type}"

    def test_other_fields_untouched(self, make_profile):
        original = make_profile("a")
        flipped = flip_attribute(original, "pets", random.Random(0))
        assert flipped.budget_max == original.budget_max
        assert flipped.interests == original.interests

    def test_gender_flip_rejects_original(self, make_profile):
        original = make_profile("a")
        flipped = flip_attribute(original, "gender_preference", random.Random(3))
        assert gender_preferences_score(original, flipped) == 0

    def test_unknown_flip(self, make_profile):
        with pytest.raises(ValueError):
            flip_attribute(make_profile("a"), "astrology", random.Random(0))
