"""Cosine k-means partitioning of feedback embeddings and group validation."""

from __future__ import annotations

from collections import defaultdict
import logging
from typing import Sequence

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

logger = logging.getLogger(__name__)

MIN_PARTITION_ITEMS = 3
MIN_CLUSTERS = 3
MAX_CLUSTERS = 10
MAX_ITERATIONS = 10
MIN_GROUP_SIZE = 2


def choose_cluster_count(
    n_rows: int,
    min_clusters: int = MIN_CLUSTERS,
    max_clusters: int = MAX_CLUSTERS,
) -> int:
    return max(min_clusters, min(max_clusters, n_rows // 3))


def _recompute_centroids(
    matrix: np.ndarray,
    assignments: np.ndarray,
    centroids: np.ndarray,
) -> np.ndarray:
    updated = centroids.copy()
    for cluster in range(len(centroids)):
        members = assignments == cluster
        # Empty clusters keep their previous centroid.
        if members.any():
            updated[cluster] = matrix[members].mean(axis=0)
    return updated


def partition_vectors(
    vectors: Sequence[Sequence[float]],
    n_clusters: int,
    rng: np.random.Generator | None = None,
    max_iterations: int = MAX_ITERATIONS,
) -> list[int]:
    """Assign every vector to one of ``n_clusters`` groups.

    Centroids are seeded from ``n_clusters`` distinct vectors drawn from ``rng``
    and refined by alternating cosine-similarity assignment with a mean update,
    stopping once assignments are stable or ``max_iterations`` is reached.
    Returns the group index of each vector, in input order.
    """
    matrix = np.asarray(vectors, dtype=float)
    if matrix.ndim != 2 or matrix.shape[0] == 0:
        raise ValueError("vectors must be a non-empty 2D sequence")
    n_rows = matrix.shape[0]
    if not 1 <= n_clusters <= n_rows:
        raise ValueError(f"n_clusters must be between 1 and {n_rows}, got {n_clusters}")

    if rng is None:
        rng = np.random.default_rng()
    seeds = np.asarray(rng.choice(n_rows, size=n_clusters, replace=False), dtype=int)
    centroids = matrix[seeds].copy()

    assignments = np.full(n_rows, -1, dtype=int)
    for iteration in range(max_iterations):
        # argmax keeps the first centroid on ties
        updated = cosine_similarity(matrix, centroids).argmax(axis=1)
        if np.array_equal(updated, assignments):
            logger.debug("Partition converged after %d iterations", iteration)
            break
        assignments = updated
        centroids = _recompute_centroids(matrix, assignments, centroids)

    return [int(label) for label in assignments]


def group_assignments(assignments: Sequence[int]) -> dict[int, list[int]]:
    grouped: dict[int, list[int]] = defaultdict(list)
    for idx, label in enumerate(assignments):
        grouped[int(label)].append(idx)
    return dict(grouped)


def validate_groups(
    groups: dict[int, list[int]],
    min_size: int = MIN_GROUP_SIZE,
) -> tuple[dict[int, list[int]], list[int]]:
    """Split groups into surviving ones and the indexes of undersized ones.

    Surviving groups are ordered by their first member; unclustered indexes are
    returned in input order.
    """
    kept: dict[int, list[int]] = {}
    unclustered: list[int] = []
    for label, indexes in sorted(groups.items(), key=lambda item: min(item[1])):
        if len(indexes) >= min_size:
            kept[label] = sorted(indexes)
        else:
            unclustered.extend(indexes)
    return kept, sorted(unclustered)
