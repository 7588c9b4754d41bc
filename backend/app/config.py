"""Runtime settings for the clustering engine, read from the environment."""

from __future__ import annotations

import logging
import os

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
LABELING_MODEL = os.getenv("LABELING_MODEL", "gpt-4o-mini")
OPENAI_TIMEOUT_SECONDS = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "30"))

# Upper bound on concurrent labeling calls per analysis
LABELING_MAX_WORKERS = int(os.getenv("LABELING_MAX_WORKERS", "4"))

# Unset means centroids are seeded from system entropy
CLUSTER_SEED = int(os.environ["CLUSTER_SEED"]) if os.getenv("CLUSTER_SEED") else None

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
