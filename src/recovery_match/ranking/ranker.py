"""Rank candidate roommates for one subject profile.

Pipeline: attribute pre-filter → parallel pairwise scoring → hard exclusion
(absolute deal breakers, hard-filter factors at 0) → score and flag filters
→ priority bonuses → sort → truncate.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Iterable, Optional

from ..config import MatchingConfig, RankingFilters
from ..data.normalize import parse_recovery_stage
from ..data.schema import Profile
from ..scoring.engine import LEGACY_KEYS, CompatibilityResult, calculate_compatibility
from .cache import MatchCache

logger = logging.getLogger("recovery_match")

PROGRESS_EVERY = 100

# Priority names accepted from older clients, on top of the legacy breakdown keys.
PRIORITY_ALIASES = {**LEGACY_KEYS, "spiritual": "recovery_environment"}


@dataclass(frozen=True)
class RankedMatch:
    profile: Profile
    result: CompatibilityResult
    priority_bonus: int = 0
    is_request_sent: bool = False
    is_already_matched: bool = False

    @property
    def user_id(self) -> str:
        return self.profile.user_id

    @property
    def adjusted_score(self) -> int:
        return self.result.overall_score + self.priority_bonus


def parse_age_range(text: str) -> tuple[Optional[int], Optional[int]]:
    """'26-35' -> (26, 35); '46-' -> (46, None). Unparseable bounds are None."""
    low, _, high = text.partition("-")
    return _to_int(low), _to_int(high)


def _to_int(text: str) -> Optional[int]:
    text = text.strip().rstrip("+")
    return int(text) if text.isdigit() else None


def _passes_attribute_filters(candidate: Profile, filters: RankingFilters) -> bool:
    if filters.recovery_stage:
        wanted = parse_recovery_stage(filters.recovery_stage)
        if wanted is not None and candidate.recovery_stage != wanted:
            return False

    if filters.age_range:
        low, high = parse_age_range(filters.age_range)
        if candidate.age is None:
            return False
        if low is not None and candidate.age < low:
            return False
        if high is not None and candidate.age > high:
            return False

    if filters.location and filters.location.strip():
        needle = filters.location.strip().lower()
        if needle not in (candidate.primary_location or "").lower():
            return False

    return True


def prefilter_candidates(
    subject: Profile,
    candidates: Iterable[Profile],
    filters: RankingFilters,
    excluded: frozenset[str] | set[str] = frozenset(),
    sent: frozenset[str] | set[str] = frozenset(),
) -> list[Profile]:
    kept = []
    for c in candidates:
        if c.user_id == subject.user_id:
            continue
        if filters.require_completed and not c.profile_completed:
            continue
        if filters.require_active and not c.is_active:
            continue
        if filters.hide_already_matched and c.user_id in excluded:
            continue
        if filters.hide_requests_sent and c.user_id in sent:
            continue
        if not _passes_attribute_filters(c, filters):
            continue
        kept.append(c)
    return kept


def is_hard_excluded(result: CompatibilityResult, config: MatchingConfig) -> bool:
    if result.deal_breakers.has_absolute:
        return True
    return any(result.score_breakdown.get(f) == 0 for f in config.scoring.hard_filters)


def _passes_flag_filters(result: CompatibilityResult, filters: RankingFilters) -> bool:
    red = [f.lower() for f in result.red_flags]
    for term in filters.exclude_red_flags:
        if any(term.lower() in flag for flag in red):
            return False
    green = [f.lower() for f in result.green_flags]
    for term in filters.require_green_flags:
        if not any(term.lower() in flag for flag in green):
            return False
    return True


def priority_bonus(result: CompatibilityResult, factors: Iterable[str], config: MatchingConfig) -> int:
    """Bonus for each prioritized factor that scored at least the bonus floor."""
    bonus = 0
    for factor in factors:
        factor = PRIORITY_ALIASES.get(factor, factor)
        score = result.score_breakdown.get(factor)
        if score is not None and score >= config.ranking.priority_bonus_min_score:
            bonus += config.ranking.priority_bonuses.get(factor, 0)
    return bonus


def score_candidates(
    subject: Profile,
    candidates: list[Profile],
    config: MatchingConfig,
    max_workers: Optional[int] = None,
) -> dict[str, CompatibilityResult]:
    """Score every candidate against the subject on a thread pool."""
    results: dict[str, CompatibilityResult] = {}
    if not candidates:
        return results
    total = len(candidates)
    workers = max(1, min(max_workers or config.ranking.max_workers, total))

    with ThreadPoolExecutor(max_workers=workers) as executor:
        future_to_id = {
            executor.submit(calculate_compatibility, subject, c, config): c.user_id
            for c in candidates
        }
        for done, future in enumerate(as_completed(future_to_id), start=1):
            results[future_to_id[future]] = future.result()
            if done % PROGRESS_EVERY == 0:
                logger.info(f"  Scoring progress: {done}/{total} ({done * 100 // total}%)")
    return results


def rank_candidates(
    subject: Profile,
    candidates: Iterable[Profile],
    filters: Optional[RankingFilters] = None,
    config: Optional[MatchingConfig] = None,
    excluded: Optional[set[str]] = None,
    sent: Optional[set[str]] = None,
    max_workers: Optional[int] = None,
    cache: Optional[MatchCache] = None,
) -> list[RankedMatch]:
    """Ranked, filtered matches for ``subject``, best first.

    Ties on adjusted score break on user id so the order is stable.
    """
    config = config or MatchingConfig()
    filters = filters or config.ranking.filters
    excluded = excluded or set()
    sent = sent or set()

    if cache is not None:
        cached = cache.get(subject.user_id, filters)
        if cached is not None:
            logger.debug(f"{subject.user_id}: using cached ranking")
            return cached

    pool = prefilter_candidates(subject, candidates, filters, excluded, sent)
    logger.info(f"Ranking {len(pool)} candidates for {subject.user_id}")
    results = score_candidates(subject, pool, config, max_workers=max_workers)

    matches = []
    hard_excluded = 0
    for candidate in pool:
        result = results[candidate.user_id]
        if is_hard_excluded(result, config):
            hard_excluded += 1
            continue
        if result.overall_score < filters.min_score:
            continue
        if not _passes_flag_filters(result, filters):
            continue
        matches.append(
            RankedMatch(
                profile=candidate,
                result=result,
                priority_bonus=priority_bonus(result, filters.prioritize_factors, config),
                is_request_sent=candidate.user_id in sent,
                is_already_matched=candidate.user_id in excluded,
            )
        )

    matches.sort(key=lambda m: (-m.adjusted_score, m.user_id))
    matches = matches[: filters.max_results]
    logger.info(
        f"{subject.user_id}: {len(matches)} matches "
        f"({hard_excluded} hard-excluded, {len(pool)} scored)"
    )

    if cache is not None:
        cache.put(subject.user_id, filters, matches)
    return matches
