"""Plain-language summary and next steps for a compatibility result."""

from __future__ import annotations

from dataclasses import dataclass

from .engine import CompatibilityResult

DESCRIPTIONS = {
    "excellent": "Highly compatible - strong potential for a successful roommate relationship",
    "good": "Good compatibility - many shared values and preferences",
    "moderate": "Moderate compatibility - some areas align well, others may need discussion",
    "low": "Lower compatibility - significant differences to consider",
    "poor": "Poor compatibility - many fundamental differences",
}

RECOMMENDATIONS = {
    "excellent": "Strong match! Consider reaching out to start a conversation.",
    "good": "Good potential match. Review the compatibility details and consider connecting.",
    "moderate": "Moderate match. Consider if the differences are manageable for your situation.",
    "low": "Lower compatibility. Carefully review the red flags before proceeding.",
    "poor": "Poor match. Consider looking for more compatible roommates.",
}

INCOMPATIBLE_RECOMMENDATION = "Not recommended: one of you has a deal breaker the other cannot meet."

NEXT_STEPS_HIGH = 70
NEXT_STEPS_MID = 50

OVERALL_INSIGHTS = [
    (80, "This appears to be an excellent potential match with strong compatibility across multiple areas."),
    (65, "This looks like a good potential match with solid compatibility in key areas."),
    (50, "This could be a workable match, though you'll want to discuss the areas where you differ."),
]
OVERALL_INSIGHT_LOW = (
    "This match has significant differences that would require careful consideration and open communication."
)

# factor -> (category, positive_min, consideration_below, positive text, consideration text)
# A consideration_below of None means the factor only ever reports positives.
FACTOR_INSIGHTS = [
    (
        "recovery_core", "recovery", 80, 50,
        "You both are at similar stages in your recovery journey, which can provide mutual "
        "understanding and support.",
        "You're at different stages in recovery. Consider how this might affect your living dynamic.",
    ),
    (
        "lifestyle_core", "lifestyle", 75, 40,
        "Your daily routines and lifestyle preferences align well, which can reduce potential conflicts.",
        "Your lifestyle preferences differ significantly. Open communication about expectations "
        "will be important.",
    ),
    (
        "location", "location", 80, 40,
        "You have compatible location preferences, making it easier to find housing in areas you both like.",
        "Your preferred locations differ significantly. You may need to compromise on location.",
    ),
    (
        "budget", "budget", 80, 50,
        "You have similar budget ranges, making it easier to find affordable housing together.",
        "Your budget expectations differ. Discuss how to handle cost-sharing and housing choices.",
    ),
    (
        "recovery_environment", "spiritual", 80, 40,
        "Shared home-environment expectations and spiritual outlook can provide additional common ground.",
        "You have different expectations for the home environment or different spiritual perspectives. "
        "Respect for each other's beliefs will be important.",
    ),
    (
        "shared_interests", "interests", 60, None,
        "Shared interests can help build friendship and make living together more enjoyable.",
        None,
    ),
]


@dataclass(frozen=True)
class Insight:
    type: str  # "positive" or "consideration"
    category: str
    message: str


@dataclass(frozen=True)
class MatchSummary:
    overall_score: int
    level: str
    description: str
    recommendation: str
    next_steps: tuple[str, ...]
    overall_insight: str = ""
    insights: tuple[Insight, ...] = ()
    green_flags: tuple[str, ...] = ()
    red_flags: tuple[str, ...] = ()


def overall_insight(score: int) -> str:
    for threshold, text in OVERALL_INSIGHTS:
        if score >= threshold:
            return text
    return OVERALL_INSIGHT_LOW


def match_insights(score_breakdown: dict[str, int]) -> list[Insight]:
    """Positive and consideration notes for the factors that stand out.

    Factors missing from the breakdown, or scoring between the two bands,
    produce nothing.
    """
    insights = []
    for factor, category, positive_min, consideration_below, positive, consideration in FACTOR_INSIGHTS:
        score = score_breakdown.get(factor)
        if score is None:
            continue
        if score >= positive_min:
            insights.append(Insight("positive", category, positive))
        elif consideration_below is not None and score < consideration_below:
            insights.append(Insight("consideration", category, consideration))
    return insights


def next_steps(score: int, red_flag_count: int) -> list[str]:
    if score >= NEXT_STEPS_HIGH:
        return [
            "Send a match request to start the conversation",
            "Share your housing timeline and preferences",
            "Discuss your recovery goals and support needs",
        ]
    if score >= NEXT_STEPS_MID:
        steps = [
            "Review the compatibility details carefully",
            "Consider if the differences are manageable",
        ]
        if red_flag_count > 0:
            steps.append("Discuss the potential concerns openly if you proceed")
        steps.append("Send a match request if you're comfortable with the compatibility level")
        return steps
    return [
        "Consider looking for more compatible matches",
        "If interested despite lower compatibility, plan for extensive communication",
        "Ensure you're both clear about expectations and boundaries",
    ]


def summarize(result: CompatibilityResult) -> MatchSummary:
    level = result.level
    if result.deal_breakers.has_absolute:
        recommendation = INCOMPATIBLE_RECOMMENDATION
    else:
        recommendation = RECOMMENDATIONS[level]
    return MatchSummary(
        overall_score=result.overall_score,
        level=level,
        description=DESCRIPTIONS[level],
        recommendation=recommendation,
        next_steps=tuple(next_steps(result.overall_score, len(result.red_flags))),
        overall_insight=overall_insight(result.overall_score),
        insights=tuple(match_insights(result.score_breakdown)),
        green_flags=result.green_flags,
        red_flags=result.red_flags,
    )
