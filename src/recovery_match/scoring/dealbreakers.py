"""Deal-breaker evaluation, kept apart from scoring.

A deal breaker is one profile's stated veto checked against the other
profile's attributes. Each rule runs in both directions independently. The
result is advisory: callers decide whether an ``absolute`` entry excludes the
pairing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..data.schema import Profile

LOUD_NOISE_TOLERANCE = 4
UNCLEAN_LEVEL = 2


@dataclass(frozen=True)
class Violation:
    rule: str
    holder_id: str  # whose deal breaker it is
    other_id: str


@dataclass(frozen=True)
class DealBreakerResult:
    absolute: tuple[str, ...] = ()
    strong: tuple[str, ...] = ()
    violations: tuple[Violation, ...] = ()

    @property
    def has_absolute(self) -> bool:
        return bool(self.absolute)

    def to_dict(self) -> dict:
        return {"absolute": list(self.absolute), "strong": list(self.strong)}


Rule = Callable[[Profile, Profile], bool]

# rule name -> predicate(holder, other)
ABSOLUTE_RULES: dict[str, Rule] = {
    "substance_use": lambda holder, other: (
        holder.deal_breaker_substance_use and not other.substance_free_home_required
    ),
    "financial_issues": lambda holder, other: (
        holder.deal_breaker_financial_issues and not other.financially_stable
    ),
}

STRONG_RULES: dict[str, Rule] = {
    "pets": lambda holder, other: holder.deal_breaker_pets and other.pets_owned,
    "smoking": lambda holder, other: holder.deal_breaker_smoking and other.smokes,
    "loudness": lambda holder, other: (
        holder.deal_breaker_loudness and other.noise_tolerance >= LOUD_NOISE_TOLERANCE
    ),
    "uncleanliness": lambda holder, other: (
        holder.deal_breaker_uncleanliness and other.cleanliness_level <= UNCLEAN_LEVEL
    ),
}


def _evaluate(rules: dict[str, Rule], a: Profile, b: Profile) -> tuple[list[str], list[Violation]]:
    names: list[str] = []
    violations: list[Violation] = []
    for name, rule in rules.items():
        for holder, other in ((a, b), (b, a)):
            if rule(holder, other):
                violations.append(Violation(name, holder.user_id, other.user_id))
                if name not in names:
                    names.append(name)
    return names, violations


def check_deal_breakers(a: Profile, b: Profile) -> DealBreakerResult:
    absolute, abs_violations = _evaluate(ABSOLUTE_RULES, a, b)
    strong, strong_violations = _evaluate(STRONG_RULES, a, b)
    return DealBreakerResult(
        absolute=tuple(absolute),
        strong=tuple(strong),
        violations=tuple(abs_violations + strong_violations),
    )
