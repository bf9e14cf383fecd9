"""Weighted aggregation of factor scores into an overall score and tier averages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

import numpy as np

from ..config import ScoringConfig
from ..utils import round_half_up

EMPTY_TIER_SCORE = 50


@dataclass(frozen=True)
class AggregateResult:
    overall_score: int
    priority_breakdown: dict[str, int] = field(default_factory=dict)


def aggregate(scores: Mapping[str, Optional[int]], config: Optional[ScoringConfig] = None) -> AggregateResult:
    """Collapse per-factor scores into an overall score.

    ``overall = round(sum(score*weight) / sum(weight))`` over the factors that
    have both a score and a weight. A factor that is absent (or None) drops out
    of numerator and denominator alike. With nothing scored the overall score
    is 0, which callers read as "insufficient data".

    The priority breakdown is the plain mean of the scored factors in each
    tier, or 50 for a tier with none.
    """
    config = config or ScoringConfig()

    present = [
        (scores[name], weight)
        for name, weight in config.weights.items()
        if scores.get(name) is not None and weight > 0
    ]
    if present:
        values = np.array([s for s, _ in present], dtype=float)
        weights = np.array([w for _, w in present], dtype=float)
        overall = round_half_up(float(np.dot(values, weights) / weights.sum()))
    else:
        overall = 0

    breakdown = {}
    for tier, members in config.tiers.items():
        tier_scores = [scores[f] for f in members if scores.get(f) is not None]
        breakdown[tier] = round_half_up(float(np.mean(tier_scores))) if tier_scores else EMPTY_TIER_SCORE

    return AggregateResult(overall_score=max(0, min(100, overall)), priority_breakdown=breakdown)
