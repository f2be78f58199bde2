from __future__ import annotations

from typing import Collection, List, Mapping, Optional

from core.readiness.models import ScoreResult, ScoringTable, Tier


# used when no active question is in the table
FALLBACK_MAX_POSSIBLE = 40

# lower bounds, inclusive, highest first
TIER_THRESHOLDS = [
    (75, Tier.LEADER),
    (40, Tier.STRATEGIC),
    (0, Tier.EARLY),
]


def clamp(x: int, lo: int = 0, hi: int = 100) -> int:
    return max(lo, min(hi, x))


def to_percentage(raw_score: int, max_possible: int) -> int:
    """raw/max as a 0..100 integer, rounding halves up."""
    if max_possible <= 0:
        max_possible = FALLBACK_MAX_POSSIBLE
    return clamp((raw_score * 200 + max_possible) // (2 * max_possible))


def tier_for(percentage: int) -> Tier:
    for lo, tier in TIER_THRESHOLDS:
        if percentage >= lo:
            return tier
    return Tier.EARLY


def score(
    submission: Mapping[str, Optional[str]],
    table: ScoringTable,
    active: Optional[Collection[str]] = None,
) -> ScoreResult:
    """
    Score one quiz submission against the scoring table.

    A question counts toward the denominator only when it is active: present
    as a key in `submission`, or listed in `active` when the caller knows
    exactly which questions its form presented. Empty or unknown labels add
    nothing to the raw score. Never raises for well-typed input.
    """
    active_ids = set(submission) if active is None else set(active)

    raw_score = 0
    max_possible = 0
    answered: List[str] = []
    unmatched: List[str] = []

    for question in table.questions:
        if question.id not in active_ids:
            continue
        max_possible += question.max_points

        label = submission.get(question.id)
        if not isinstance(label, str) or not label.strip():
            continue

        points = question.points_for(label)
        if points is None:
            unmatched.append(question.id)
            continue
        raw_score += points
        answered.append(question.id)

    if max_possible == 0:
        max_possible = FALLBACK_MAX_POSSIBLE

    percentage = to_percentage(raw_score, max_possible)

    return ScoreResult(
        raw_score=raw_score,
        max_possible=max_possible,
        percentage=percentage,
        tier=tier_for(percentage),
        answered=tuple(sorted(answered)),
        unmatched=tuple(sorted(unmatched)),
    )
