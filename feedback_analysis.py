"""Cluster customer feedback into ranked opportunities from the command line."""

from __future__ import annotations

import argparse
import logging

import numpy as np

from backend.app.config import LABELING_MAX_WORKERS, configure_logging
from backend.app.hashing_embedder import HashingEmbedder
from backend.app.openai_client import embed_texts, label_cluster
from backend.app.pipeline import build_analysis_snapshot, cluster_feedback_items
from backend.app.schemas import AnalysisSnapshot, AnalyzeRequest
from feedback_ingestion import load_feedback_csv, load_feedback_json

logger = logging.getLogger(__name__)


def analyze_file(
    csv_path: str | None = None,
    json_path: str | None = None,
    offline: bool = False,
    seed: int | None = None,
    workers: int = LABELING_MAX_WORKERS,
) -> AnalysisSnapshot:
    if (csv_path is None) == (json_path is None):
        raise ValueError("Provide exactly one of csv_path or json_path")

    items = load_feedback_csv(csv_path) if csv_path else load_feedback_json(json_path)
    request = AnalyzeRequest(items=items)

    result = cluster_feedback_items(
        request.items,
        embed=HashingEmbedder() if offline else embed_texts,
        label=None if offline else label_cluster,
        rng=np.random.default_rng(seed),
        max_workers=workers,
    )
    return build_analysis_snapshot(request.items, result)


def main() -> None:
    parser = argparse.ArgumentParser(description="Cluster feedback into ranked opportunities.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--csv", help="Path to a CSV with a 'text' column (optional: id, category, customer_tier, source).")
    source.add_argument("--json", help="Path to a JSON list of feedback objects.")
    parser.add_argument("--offline", action="store_true", help="Use local hashing embeddings and fallback labels.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for centroid initialisation.")
    parser.add_argument("--workers", type=int, default=LABELING_MAX_WORKERS, help="Concurrent labeling calls.")
    args = parser.parse_args()

    configure_logging()
    snapshot = analyze_file(
        csv_path=args.csv,
        json_path=args.json,
        offline=args.offline,
        seed=args.seed,
        workers=args.workers,
    )
    logger.info("Found %d clusters, %d unclustered items", len(snapshot.clusters), len(snapshot.unclustered))
    print(snapshot.model_dump_json(by_alias=True, indent=2))


if __name__ == "__main__":
    main()
