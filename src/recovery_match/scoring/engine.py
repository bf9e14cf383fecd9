"""Pairwise compatibility: scorers → aggregator → deal breakers → flags."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

from ..config import MatchingConfig
from ..data.schema import Profile
from .aggregate import aggregate
from .dealbreakers import DealBreakerResult, check_deal_breakers
from .factors import score_factors
from .flags import FlagSet, generate_flags

logger = logging.getLogger("recovery_match")

LEVEL_THRESHOLDS = [
    (80, "excellent"),
    (65, "good"),
    (50, "moderate"),
    (35, "low"),
]

# Legacy consumer key -> canonical factor.
LEGACY_KEYS = {
    "recovery": "recovery_core",
    "lifestyle": "lifestyle_core",
    "gender": "gender_preferences",
    "interests": "shared_interests",
    "preferences": "housing_safety",
}


def compatibility_level(score: int) -> str:
    for threshold, level in LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return "poor"


@dataclass(frozen=True)
class CompatibilityResult:
    user_a_id: str
    user_b_id: str
    overall_score: int
    score_breakdown: dict[str, int] = field(default_factory=dict)
    priority_breakdown: dict[str, int] = field(default_factory=dict)
    green_flags: tuple[str, ...] = ()
    yellow_flags: tuple[str, ...] = ()
    red_flags: tuple[str, ...] = ()
    deal_breakers: DealBreakerResult = field(default_factory=DealBreakerResult)
    algorithm_version: str = ""

    @property
    def level(self) -> str:
        return compatibility_level(self.overall_score)

    @property
    def flags(self) -> FlagSet:
        return FlagSet(self.green_flags, self.yellow_flags, self.red_flags)

    def to_dict(self) -> dict:
        return {
            "user_a_id": self.user_a_id,
            "user_b_id": self.user_b_id,
            "overall_score": self.overall_score,
            "level": self.level,
            "score_breakdown": dict(self.score_breakdown),
            "priority_breakdown": dict(self.priority_breakdown),
            "green_flags": list(self.green_flags),
            "yellow_flags": list(self.yellow_flags),
            "red_flags": list(self.red_flags),
            "deal_breakers": self.deal_breakers.to_dict(),
            "algorithm_version": self.algorithm_version,
        }


def calculate_compatibility(a: Profile, b: Profile, config: Optional[MatchingConfig] = None) -> CompatibilityResult:
    """Full compatibility result for one pair. Pure and deterministic."""
    config = config or MatchingConfig()

    breakdown = score_factors(a, b)
    agg = aggregate(breakdown, config.scoring)
    deal_breakers = check_deal_breakers(a, b)
    flags = generate_flags(a, b, breakdown, deal_breakers, config)

    logger.debug(
        f"Scored {a.user_id} vs {b.user_id}: {agg.overall_score} "
        f"(absolute={list(deal_breakers.absolute)}, strong={list(deal_breakers.strong)})"
    )

    return CompatibilityResult(
        user_a_id=a.user_id,
        user_b_id=b.user_id,
        overall_score=agg.overall_score,
        score_breakdown=breakdown,
        priority_breakdown=agg.priority_breakdown,
        green_flags=flags.green,
        yellow_flags=flags.yellow,
        red_flags=flags.red,
        deal_breakers=deal_breakers,
        algorithm_version=config.algorithm_version,
    )


def to_legacy_breakdown(score_breakdown: Mapping[str, int]) -> dict[str, int]:
    """Canonical breakdown plus the old duplicate keys some consumers still read."""
    out = dict(score_breakdown)
    for legacy, canonical in LEGACY_KEYS.items():
        if canonical in score_breakdown:
            out[legacy] = score_breakdown[canonical]
    return out
