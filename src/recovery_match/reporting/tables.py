"""Console table formatting for compatibility results and rankings."""

from __future__ import annotations

from typing import Sequence

from tabulate import tabulate

from ..config import MatchingConfig
from ..ranking.ranker import RankedMatch
from ..scoring.engine import CompatibilityResult
from ..scoring.summary import summarize

SHORT_NAMES = {
    "location": "Location",
    "budget": "Budget",
    "recovery_core": "Recovery",
    "lifestyle_core": "Lifestyle",
    "recovery_environment": "Rec. Env",
    "gender_preferences": "Gender",
    "schedule": "Schedule",
    "communication": "Comm.",
    "housing_safety": "Safety",
    "shared_interests": "Interests",
    "timing": "Timing",
    "goals": "Goals",
    "extended": "Extended",
}

RANKING_FACTORS = ["location", "budget", "recovery_core", "lifestyle_core"]


def format_breakdown_table(
    result: CompatibilityResult,
    config: MatchingConfig | None = None,
    tablefmt: str = "grid",
) -> str:
    """Per-factor scores with weight and tier, plus the overall line."""
    config = config or MatchingConfig()
    tier_of = {f: tier for tier, members in config.scoring.tiers.items() for f in members}

    headers = ["Factor", "Tier", "Weight", "Score"]
    rows = []
    for factor, score in result.score_breakdown.items():
        rows.append([
            SHORT_NAMES.get(factor, factor),
            tier_of.get(factor, "-"),
            config.scoring.weights.get(factor, 0),
            score,
        ])
    rows.append(["Overall", result.level, sum(config.scoring.weights.values()), result.overall_score])
    return tabulate(rows, headers=headers, tablefmt=tablefmt)


def format_flags(result: CompatibilityResult) -> str:
    lines = []
    for label, flags in (("+", result.green_flags), ("~", result.yellow_flags), ("-", result.red_flags)):
        lines.extend(f"  [{label}] {flag}" for flag in flags)
    return "\n".join(lines) if lines else "  (no flags)"


def format_summary(result: CompatibilityResult) -> str:
    summary = summarize(result)
    lines = [
        f"{result.user_a_id} x {result.user_b_id}: {summary.overall_score} ({summary.level})",
        f"  {summary.description}",
        f"  {summary.recommendation}",
        f"  {summary.overall_insight}",
    ]
    marks = {"positive": "+", "consideration": "~"}
    lines.extend(f"  [{marks[i.type]}] {i.category}: {i.message}" for i in summary.insights)
    lines.append("  Next steps:")
    lines.extend(f"    - {step}" for step in summary.next_steps)
    return "\n".join(lines)


def format_ranking_table(matches: Sequence[RankedMatch], tablefmt: str = "grid") -> str:
    """One row per ranked candidate, best first."""
    headers = ["#", "User", "Name", "Location", "Score", "Bonus", "Level"]
    headers += [SHORT_NAMES[f] for f in RANKING_FACTORS]
    headers += ["Red", "Sent"]

    rows = []
    for rank, m in enumerate(matches, start=1):
        row = [
            rank,
            m.user_id,
            m.profile.first_name,
            m.profile.primary_location or "-",
            m.result.overall_score,
            f"+{m.priority_bonus}" if m.priority_bonus else "",
            m.result.level,
        ]
        row += [m.result.score_breakdown.get(f, "-") for f in RANKING_FACTORS]
        row += [len(m.result.red_flags), "yes" if m.is_request_sent else ""]
        rows.append(row)
    return tabulate(rows, headers=headers, tablefmt=tablefmt)
