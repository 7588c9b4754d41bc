from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .schemas import FeedbackItem, ImpactTier

BUG_POINTS = 20
NON_BUG_POINTS = 15
TIER_POINTS = {"enterprise": 30, "pro": 15}
DEFAULT_TIER_POINTS = 5

HIGH_THRESHOLD = 75
MEDIUM_THRESHOLD = 40
MAX_SCORE = 100


@dataclass(frozen=True)
class ImpactScore:
    score: int
    tier: ImpactTier
    enterprise_count: int


def normalized_tier(item: FeedbackItem) -> str:
    return (item.customer_tier or "").strip().lower()


def volume_bonus(count: int) -> int:
    if count >= 5:
        return 30
    if count >= 3:
        return 15
    if count >= 2:
        return 5
    return 0


def impact_tier(score: int) -> ImpactTier:
    if score >= HIGH_THRESHOLD:
        return "high"
    if score >= MEDIUM_THRESHOLD:
        return "medium"
    return "low"


def score_cluster(items: Sequence[FeedbackItem], is_high_impact: bool = False) -> ImpactScore:
    """Score a validated cluster from issue type, customer tier and volume.

    A high-impact label can lift the score to the high threshold but never lowers it.
    """
    score = 0
    enterprise_count = 0
    for item in items:
        score += BUG_POINTS if item.category == "bug" else NON_BUG_POINTS
        tier = normalized_tier(item)
        score += TIER_POINTS.get(tier, DEFAULT_TIER_POINTS)
        if tier == "enterprise":
            enterprise_count += 1

    score += volume_bonus(len(items))
    score = max(0, min(score, MAX_SCORE))

    if is_high_impact and score < HIGH_THRESHOLD:
        score = HIGH_THRESHOLD

    return ImpactScore(score=score, tier=impact_tier(score), enterprise_count=enterprise_count)
