from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Callable, Iterable, Sequence

import numpy as np

from .clustering import (
    MIN_PARTITION_ITEMS,
    choose_cluster_count,
    group_assignments,
    partition_vectors,
    validate_groups,
)
from .config import LABELING_MAX_WORKERS
from .errors import EmbeddingProviderError
from .labeling import Labeler, label_groups, majority_category
from .openai_client import embed_texts, label_cluster
from .schemas import (
    AnalysisSnapshot,
    CategorySummary,
    Cluster,
    ClusterLabel,
    ClusteringResult,
    FeedbackItem,
)
from .scoring import normalized_tier, score_cluster

logger = logging.getLogger(__name__)

Embedder = Callable[[list[str]], Sequence[Sequence[float]]]

MAX_EXAMPLES = 3
DEGENERATE_SCORE = 50
DEGENERATE_TITLE_CHARS = 30


def _singleton_clusters(items: list[FeedbackItem]) -> ClusteringResult:
    clusters = [
        Cluster(
            id=f"cluster-{idx}",
            title=item.text[:DEGENERATE_TITLE_CHARS] + "...",
            description=item.text,
            category="bug" if item.category == "bug" else "feature",
            impact_score=DEGENERATE_SCORE,
            impact_tier="high" if item.category == "bug" else "medium",
            feedback_count=1,
            enterprise_count=1 if normalized_tier(item) == "enterprise" else 0,
            examples=[item.text],
            feedback_ids=[item.id],
        )
        for idx, item in enumerate(items)
    ]
    return ClusteringResult(clusters=clusters, unclustered=[])


def _check_embeddings(embeddings: Sequence[Sequence[float]], n_items: int) -> None:
    if len(embeddings) != n_items:
        raise EmbeddingProviderError(f"Expected {n_items} embeddings, got {len(embeddings)}")
    dimensions = {len(vector) for vector in embeddings}
    if len(dimensions) != 1 or 0 in dimensions:
        raise EmbeddingProviderError(f"Embeddings must share one non-zero dimension, got {sorted(dimensions)}")


def _build_cluster(cluster_id: str, members: list[FeedbackItem], label: ClusterLabel) -> Cluster:
    impact = score_cluster(members, is_high_impact=label.is_high_impact)
    return Cluster(
        id=cluster_id,
        title=label.title,
        description=label.description,
        category=label.category,
        impact_score=impact.score,
        impact_tier=impact.tier,
        feedback_count=len(members),
        enterprise_count=impact.enterprise_count,
        examples=[item.text for item in members[:MAX_EXAMPLES]],
        feedback_ids=[item.id for item in members],
    )


def rank_clusters(clusters: Iterable[Cluster]) -> list[Cluster]:
    return sorted(clusters, key=lambda cluster: cluster.impact_score, reverse=True)


def cluster_feedback_items(
    feedback_items: Iterable[FeedbackItem],
    embed: Embedder = embed_texts,
    label: Labeler | None = label_cluster,
    rng: np.random.Generator | None = None,
    max_workers: int = LABELING_MAX_WORKERS,
) -> ClusteringResult:
    """Group feedback into ranked opportunity clusters.

    ``embed`` is called once for the whole batch and any error it raises is
    propagated. ``label`` is called per surviving cluster; its failures fall
    back to a locally generated label. Pass ``label=None`` to skip it entirely
    and ``rng`` to make centroid seeding reproducible.
    """
    items = list(feedback_items)
    if not items:
        return ClusteringResult()

    if len(items) < MIN_PARTITION_ITEMS:
        logger.info("Only %d feedback items, returning singleton clusters", len(items))
        return _singleton_clusters(items)

    texts = [item.text for item in items]
    embeddings = embed(texts)
    _check_embeddings(embeddings, len(items))

    n_clusters = choose_cluster_count(len(items))
    assignments = partition_vectors(embeddings, n_clusters, rng=rng)
    groups, unclustered_indexes = validate_groups(group_assignments(assignments))
    logger.info(
        "Partitioned %d feedback items into %d groups (%d kept, %d unclustered items)",
        len(items),
        n_clusters,
        len(groups),
        len(unclustered_indexes),
    )

    members_by_group = {group_id: [items[idx] for idx in indexes] for group_id, indexes in groups.items()}
    labels = label_groups(
        [
            ([item.text for item in members], majority_category(members))
            for members in members_by_group.values()
        ],
        label,
        max_workers=max_workers,
    )

    clusters = [
        _build_cluster(f"cluster-{group_id}", members, cluster_label)
        for (group_id, members), cluster_label in zip(members_by_group.items(), labels)
    ]
    return ClusteringResult(
        clusters=rank_clusters(clusters),
        unclustered=[items[idx].id for idx in unclustered_indexes],
    )


def build_analysis_snapshot(
    feedback_items: Sequence[FeedbackItem],
    result: ClusteringResult,
) -> AnalysisSnapshot:
    bugs = sum(1 for item in feedback_items if item.category == "bug")
    features = sum(1 for item in feedback_items if item.category == "feature")
    return AnalysisSnapshot(
        generated_at=datetime.now(timezone.utc),
        feedback_count=len(feedback_items),
        summary=CategorySummary(bugs=bugs, features=features, other=len(feedback_items) - bugs - features),
        clusters=result.clusters,
        unclustered=result.unclustered,
    )
