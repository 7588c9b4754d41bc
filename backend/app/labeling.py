"""Theme labeling for validated clusters, with a deterministic local fallback."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import logging
from typing import Any, Callable, Sequence

from .schemas import Category, ClusterLabel, FeedbackItem

logger = logging.getLogger(__name__)

MAX_LABEL_EXAMPLES = 5

Labeler = Callable[[list[str], Category], Any]


def majority_category(items: Sequence[FeedbackItem]) -> Category:
    bug_count = sum(1 for item in items if item.category == "bug")
    return "bug" if bug_count > len(items) / 2 else "feature"


def fallback_label(texts: Sequence[str], category: Category) -> ClusterLabel:
    count = len(texts)
    prefix = f"{count} reports about" if category == "bug" else f"{count} requests for"
    first = texts[0] if texts else ""
    keywords = " ".join(first.split()[:3]) or "improvement"
    return ClusterLabel(
        title=f"{prefix} {keywords}",
        description=first or keywords,
        category=category,
        is_high_impact=count >= 3,
        rationale=f"Based on {count} similar feedback items",
    )


def label_group(texts: Sequence[str], category: Category, label: Labeler | None) -> ClusterLabel:
    """Label one group, substituting the fallback when the labeler fails.

    The returned label always carries the group's majority ``category``.
    """
    if label is None:
        return fallback_label(texts, category)

    try:
        result = ClusterLabel.model_validate(label(list(texts[:MAX_LABEL_EXAMPLES]), category))
    except Exception as exc:
        logger.warning("Labeling failed for %d-item %s cluster, using fallback: %s", len(texts), category, exc)
        return fallback_label(texts, category)
    return result.model_copy(update={"category": category})


def label_groups(
    groups: Sequence[tuple[Sequence[str], Category]],
    label: Labeler | None,
    max_workers: int = 1,
) -> list[ClusterLabel]:
    """Label each ``(texts, category)`` group; results keep the input order."""
    if max_workers <= 1 or len(groups) <= 1 or label is None:
        return [label_group(texts, category, label) for texts, category in groups]

    with ThreadPoolExecutor(max_workers=min(max_workers, len(groups))) as executor:
        return list(executor.map(lambda group: label_group(group[0], group[1], label), groups))
