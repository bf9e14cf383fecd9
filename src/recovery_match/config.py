"""Pydantic config models + YAML loading."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger("recovery_match")

ALGORITHM_VERSION = "2.1.0"


class Factor(str, Enum):
    LOCATION = "location"
    BUDGET = "budget"
    RECOVERY_CORE = "recovery_core"
    LIFESTYLE_CORE = "lifestyle_core"
    RECOVERY_ENVIRONMENT = "recovery_environment"
    GENDER_PREFERENCES = "gender_preferences"
    SCHEDULE = "schedule"
    COMMUNICATION = "communication"
    HOUSING_SAFETY = "housing_safety"
    SHARED_INTERESTS = "shared_interests"
    TIMING = "timing"
    GOALS = "goals"
    EXTENDED = "extended"


class Tier(str, Enum):
    CORE = "core"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FlagThreshold(BaseModel):
    green_min: int = Field(ge=0, le=100)
    red_max: int = Field(ge=0, le=100)


class ScoringConfig(BaseModel):
    # Core ~70, high ~25, medium ~4, low ~1. Must total 100.
    weights: dict[str, int] = {
        "location": 18,
        "budget": 16,
        "recovery_core": 18,
        "lifestyle_core": 18,
        "recovery_environment": 6,
        "gender_preferences": 6,
        "schedule": 5,
        "communication": 4,
        "housing_safety": 4,
        "shared_interests": 2,
        "timing": 1,
        "goals": 1,
        "extended": 1,
    }
    tiers: dict[str, list[str]] = {
        "core": ["location", "budget", "recovery_core", "lifestyle_core"],
        "high": [
            "recovery_environment",
            "gender_preferences",
            "schedule",
            "communication",
            "housing_safety",
        ],
        "medium": ["shared_interests", "timing", "goals"],
        "low": ["extended"],
    }
    # A score of 0 on any of these excludes the pairing at ranking time.
    hard_filters: list[str] = ["gender_preferences"]


class FlagConfig(BaseModel):
    thresholds: dict[str, FlagThreshold] = {
        "location": FlagThreshold(green_min=85, red_max=35),
        "budget": FlagThreshold(green_min=80, red_max=40),
        "recovery_core": FlagThreshold(green_min=80, red_max=45),
        "lifestyle_core": FlagThreshold(green_min=80, red_max=40),
        "recovery_environment": FlagThreshold(green_min=75, red_max=35),
        "gender_preferences": FlagThreshold(green_min=90, red_max=30),
        "schedule": FlagThreshold(green_min=75, red_max=35),
        "communication": FlagThreshold(green_min=75, red_max=40),
        "housing_safety": FlagThreshold(green_min=80, red_max=30),
        "shared_interests": FlagThreshold(green_min=70, red_max=30),
        "timing": FlagThreshold(green_min=75, red_max=35),
        "goals": FlagThreshold(green_min=70, red_max=35),
    }
    similar_age_years: int = 3
    age_gap_caution_years: int = 10
    large_age_gap_years: int = 15
    close_budget_dollars: int = 100
    large_budget_gap_dollars: int = 500
    max_named_items: int = 2


class RankingFilters(BaseModel):
    min_score: int = Field(default=50, ge=0, le=100)
    max_results: int = Field(default=20, ge=1)
    hide_already_matched: bool = True
    hide_requests_sent: bool = True
    require_completed: bool = True
    require_active: bool = True
    recovery_stage: Optional[str] = None
    age_range: Optional[str] = None  # "26-35" or "46-"
    location: Optional[str] = None
    exclude_red_flags: list[str] = []
    require_green_flags: list[str] = []
    prioritize_factors: list[str] = []


class RankingConfig(BaseModel):
    filters: RankingFilters = RankingFilters()
    priority_bonuses: dict[str, int] = {
        "location": 12,
        "recovery_core": 10,
        "lifestyle_core": 8,
        "budget": 8,
        "recovery_environment": 6,
        "gender_preferences": 6,
        "shared_interests": 4,
    }
    priority_bonus_min_score: int = 80
    max_workers: int = 8


class CacheConfig(BaseModel):
    expiry_minutes: float = 15.0
    max_entries: int = 1024


class MatchingConfig(BaseModel):
    name: str = "default"
    algorithm_version: str = ALGORITHM_VERSION
    scoring: ScoringConfig = ScoringConfig()
    flags: FlagConfig = FlagConfig()
    ranking: RankingConfig = RankingConfig()
    cache: CacheConfig = CacheConfig()


def validate_config(cfg: MatchingConfig) -> list[str]:
    """Return a list of configuration issues (empty if valid)."""
    issues = []
    known = {f.value for f in Factor}
    weights = cfg.scoring.weights

    unknown = sorted(set(weights) - known)
    if unknown:
        issues.append(f"Unknown factors in weights: {', '.join(unknown)}")

    total = sum(weights.values())
    if total != 100:
        issues.append(f"Factor weights total {total}, should be 100")

    if any(w < 0 for w in weights.values()):
        issues.append("Factor weights must be non-negative")

    seen: dict[str, str] = {}
    for tier, members in cfg.scoring.tiers.items():
        if tier not in {t.value for t in Tier}:
            issues.append(f"Unknown tier: {tier}")
        for factor in members:
            if factor in seen:
                issues.append(f"Factor {factor} is in both {seen[factor]} and {tier} tiers")
            seen[factor] = tier
    for factor in weights:
        if factor not in seen:
            issues.append(f"Factor {factor} is not assigned to a tier")

    for factor, t in cfg.flags.thresholds.items():
        if factor not in known:
            issues.append(f"Unknown factor in flag thresholds: {factor}")
        if t.green_min <= t.red_max:
            issues.append(
                f"Flag thresholds for {factor} overlap: green_min {t.green_min} <= red_max {t.red_max}"
            )

    for factor in cfg.scoring.hard_filters:
        if factor not in known:
            issues.append(f"Unknown hard-filter factor: {factor}")

    return issues


def load_config(path: str | Path) -> MatchingConfig:
    """Load config from YAML, merging with defaults."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    cfg = MatchingConfig(**raw)
    for issue in validate_config(cfg):
        logger.warning(f"Config {path.name}: {issue}")
    return cfg
