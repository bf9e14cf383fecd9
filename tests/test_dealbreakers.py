"""Tests for the deal-breaker evaluator."""

from recovery_match.data.schema import Profile, SmokingStatus
from recovery_match.scoring.dealbreakers import check_deal_breakers
from recovery_match.scoring.engine import calculate_compatibility


class TestAbsoluteRules:
    def test_substance_use(self):
        a = Profile("a", deal_breaker_substance_use=True)
        b = Profile("b", substance_free_home_required=False)
        assert check_deal_breakers(a, b).absolute == ("substance_use",)

    def test_financial_issues(self):
        a = Profile("a")  # deal_breaker_financial_issues defaults on
        b = Profile("b", financially_stable=False)
        result = check_deal_breakers(a, b)
        assert result.absolute == ("financial_issues",)
        assert result.has_absolute

    def test_flag_off_means_no_veto(self):
        a = Profile("a", deal_breaker_financial_issues=False)
        b = Profile("b", financially_stable=False, deal_breaker_financial_issues=False)
        assert check_deal_breakers(a, b).absolute == ()


class TestStrongRules:
    def test_pets_veto_independent_of_scores(self, make_profile):
        a = make_profile("a", deal_breaker_pets=True)
        b = make_profile("b", pets_owned=True)
        assert "pets" in check_deal_breakers(a, b).strong
        result = calculate_compatibility(a, b)
        assert result.overall_score >= 90
        assert "pets" in result.deal_breakers.strong

    def test_bidirectional(self):
        a = Profile("a", pets_owned=True)
        b = Profile("b", deal_breaker_pets=True)
        assert check_deal_breakers(a, b).strong == ("pets",)
        assert check_deal_breakers(b, a).strong == ("pets",)

    def test_smoking_ignores_former_smokers(self):
        a = Profile("a", deal_breaker_smoking=True)
        assert check_deal_breakers(a, Profile("b", smoking_status=SmokingStatus.FORMER_SMOKER)).strong == ()
        assert check_deal_breakers(a, Profile("b", smoking_status=SmokingStatus.OUTDOOR_ONLY)).strong == ("smoking",)

    def test_loudness_threshold(self):
        a = Profile("a", deal_breaker_loudness=True)
        assert check_deal_breakers(a, Profile("b", noise_tolerance=4)).strong == ("loudness",)
        assert check_deal_breakers(a, Profile("b", noise_tolerance=3)).strong == ()

    def test_uncleanliness_threshold(self):
        a = Profile("a", deal_breaker_uncleanliness=True)
        assert check_deal_breakers(a, Profile("b", cleanliness_level=2)).strong == ("uncleanliness",)
        assert check_deal_breakers(a, Profile("b", cleanliness_level=3)).strong == ()


class TestViolations:
    def test_rule_listed_once_with_both_directions(self):
        a = Profile("a", deal_breaker_pets=True, pets_owned=True)
        b = Profile("b", deal_breaker_pets=True, pets_owned=True)
        result = check_deal_breakers(a, b)
        assert result.strong == ("pets",)
        assert [(v.holder_id, v.other_id) for v in result.violations] == [("a", "b"), ("b", "a")]

    def test_absolute_and_strong_together(self):
        a = Profile("a", deal_breaker_substance_use=True, deal_breaker_smoking=True)
        b = Profile("b", substance_free_home_required=False, smoking_status=SmokingStatus.REGULAR)
        result = check_deal_breakers(a, b)
        assert result.absolute == ("substance_use",)
        assert result.strong == ("smoking",)
        assert result.to_dict() == {"absolute": ["substance_use"], "strong": ["smoking"]}

    def test_clean_pair(self, make_profile):
        result = check_deal_breakers(make_profile("a"), make_profile("b"))
        assert result.absolute == ()
        assert result.strong == ()
        assert result.violations == ()
