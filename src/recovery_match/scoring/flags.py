"""Human-readable green / yellow / red flags for a scored pair.

Flags come from three sources, emitted in this order:

1. Factor scores against per-factor thresholds, walking tiers core → low.
2. Deal breakers (always red; absolute ones prefixed ``INCOMPATIBLE:``).
3. Raw profile fields, for specifics a score cannot carry (exact age gap,
   shared recovery methods by name, budget delta in dollars).

No bucket ever holds the same message twice.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from ..config import FlagConfig, MatchingConfig
from ..data.schema import Profile, SmokingStatus
from .dealbreakers import DealBreakerResult, check_deal_breakers
from .factors import shared_items, stage_distance

FACTOR_LABELS = {
    "location": "location",
    "budget": "budget",
    "recovery_core": "recovery",
    "lifestyle_core": "lifestyle",
    "recovery_environment": "recovery environment",
    "gender_preferences": "gender preference",
    "schedule": "schedule",
    "communication": "communication",
    "housing_safety": "home safety",
    "shared_interests": "shared interests",
    "timing": "move-in timing",
    "goals": "goals",
}

RED_MESSAGES = {
    "location": "Very different target areas",
    "budget": "Different budget expectations",
    "recovery_core": "Different recovery approaches or stages",
    "lifestyle_core": "Significantly different lifestyle preferences",
    "recovery_environment": "Different expectations for a recovery-supportive home",
    "gender_preferences": "Incompatible gender preferences",
    "schedule": "Conflicting daily schedules",
    "communication": "Clashing communication and conflict styles",
    "housing_safety": "Smoking or pet conflicts in the home",
    "shared_interests": "Few shared interests or values",
    "timing": "Move-in timing far apart",
    "goals": "Goals not yet described",
}

ABSOLUTE_MESSAGES = {
    "substance_use": "INCOMPATIBLE: substance-free home requirement conflict",
    "financial_issues": "INCOMPATIBLE: financial reliability conflict",
}

STRONG_MESSAGES = {
    "pets": "Pet deal breaker: one roommate has pets",
    "smoking": "Smoking deal breaker: one roommate smokes",
    "loudness": "Noise deal breaker: one roommate prefers a loud home",
    "uncleanliness": "Cleanliness deal breaker: one roommate keeps a messy home",
}

FAR_STAGE_STEPS = 2
MIN_COMMON_INTERESTS = 2


@dataclass(frozen=True)
class FlagSet:
    green: tuple[str, ...] = ()
    yellow: tuple[str, ...] = ()
    red: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {"green": list(self.green), "yellow": list(self.yellow), "red": list(self.red)}


class _Collector:
    def __init__(self):
        self.green: list[str] = []
        self.yellow: list[str] = []
        self.red: list[str] = []

    def add(self, bucket: str, message: str):
        target = getattr(self, bucket)
        if message not in target:
            target.append(message)

    def freeze(self) -> FlagSet:
        return FlagSet(tuple(self.green), tuple(self.yellow), tuple(self.red))


def _score_flags(out: _Collector, scores: Mapping[str, int], config: MatchingConfig):
    thresholds = config.flags.thresholds
    for members in config.scoring.tiers.values():
        for factor in members:
            score = scores.get(factor)
            if score is None or factor not in thresholds:
                continue
            t = thresholds[factor]
            label = FACTOR_LABELS.get(factor, factor.replace("_", " "))
            if score >= t.green_min:
                if score == 100:
                    out.add("green", f"Perfect {label} match")
                else:
                    out.add("green", f"Excellent {label} compatibility")
            elif score <= t.red_max:
                out.add("red", RED_MESSAGES.get(factor, f"Poor {label} compatibility"))
            else:
                out.add("yellow", f"Moderate {label} compatibility")


def _deal_breaker_flags(out: _Collector, deal_breakers: DealBreakerResult):
    for rule in deal_breakers.absolute:
        out.add("red", ABSOLUTE_MESSAGES.get(rule, f"INCOMPATIBLE: {rule.replace('_', ' ')}"))
    for rule in deal_breakers.strong:
        out.add("red", STRONG_MESSAGES.get(rule, f"Deal breaker: {rule.replace('_', ' ')}"))


def _age_flags(out: _Collector, a: Profile, b: Profile, cfg: FlagConfig):
    if a.age is None or b.age is None:
        return
    gap = abs(a.age - b.age)
    if gap <= cfg.similar_age_years:
        out.add("green", f"Very similar ages ({a.age} and {b.age})")
    elif gap > cfg.large_age_gap_years:
        out.add("red", f"Large age difference ({gap} years)")
    elif gap > cfg.age_gap_caution_years:
        out.add("yellow", f"Noticeable age difference ({gap} years)")


def _budget_flags(out: _Collector, a: Profile, b: Profile, cfg: FlagConfig):
    if a.budget_max is None or b.budget_max is None:
        return
    delta = abs(a.budget_max - b.budget_max)
    if delta == 0:
        out.add("green", f"Identical maximum budgets (${a.budget_max})")
    elif delta <= cfg.close_budget_dollars:
        out.add("green", f"Budgets within ${delta} of each other")
    elif delta >= cfg.large_budget_gap_dollars:
        out.add("red", f"Budget gap of ${delta}")
    else:
        out.add("yellow", f"Budget gap of ${delta}")


def _raw_field_flags(out: _Collector, a: Profile, b: Profile, cfg: FlagConfig):
    _age_flags(out, a, b, cfg)

    methods = shared_items(a.recovery_methods, b.recovery_methods)
    if methods:
        out.add("green", f"Shared recovery methods: {', '.join(methods[:cfg.max_named_items])}")
    programs = shared_items(a.program_types, b.program_types)
    if programs:
        out.add("green", f"Shared recovery programs: {', '.join(programs[:cfg.max_named_items])}")

    _budget_flags(out, a, b, cfg)

    interests = shared_items(a.interests, b.interests)
    if len(interests) >= MIN_COMMON_INTERESTS:
        out.add("green", f"Common interests: {', '.join(interests[:cfg.max_named_items])}")

    statuses = {a.smoking_status, b.smoking_status}
    if statuses == {SmokingStatus.NON_SMOKER, SmokingStatus.REGULAR}:
        out.add("red", "Non-smoker matched with regular smoker")
    elif statuses == {SmokingStatus.NON_SMOKER}:
        out.add("green", "Both non-smoking")

    steps = stage_distance(a.recovery_stage, b.recovery_stage)
    if steps == 0:
        out.add("green", f"Same recovery stage ({a.recovery_stage.value})")
    elif steps is not None and steps > FAR_STAGE_STEPS:
        out.add("red", f"Recovery stages far apart ({a.recovery_stage.value} and {b.recovery_stage.value})")


def generate_flags(
    a: Profile,
    b: Profile,
    score_breakdown: Mapping[str, int],
    deal_breakers: Optional[DealBreakerResult] = None,
    config: Optional[MatchingConfig] = None,
) -> FlagSet:
    config = config or MatchingConfig()
    if deal_breakers is None:
        deal_breakers = check_deal_breakers(a, b)

    out = _Collector()
    _score_flags(out, score_breakdown, config)
    _deal_breaker_flags(out, deal_breakers)
    _raw_field_flags(out, a, b, config.flags)
    return out.freeze()
