from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
import numpy as np

from .config import API_HOST, API_PORT, CLUSTER_SEED, LABELING_MAX_WORKERS, LOG_LEVEL, configure_logging
from .openai_client import embed_texts, label_cluster
from .pipeline import build_analysis_snapshot, cluster_feedback_items
from .schemas import AnalysisSnapshot, AnalyzeRequest

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Feedback Opportunity Engine", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


LAST_RUN: dict[str, AnalysisSnapshot | None] = {"analysis": None}


def _cluster_rng() -> np.random.Generator:
    return np.random.default_rng(CLUSTER_SEED)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/analyze", response_model=AnalysisSnapshot)
def analyze(request: AnalyzeRequest) -> AnalysisSnapshot:
    try:
        result = cluster_feedback_items(
            request.items,
            embed=embed_texts,
            label=label_cluster,
            rng=_cluster_rng(),
            max_workers=LABELING_MAX_WORKERS,
        )
    except Exception as exc:
        logger.exception("Analysis of %d feedback items failed", len(request.items))
        raise HTTPException(status_code=500, detail="Analysis failed") from exc

    snapshot = build_analysis_snapshot(request.items, result)
    LAST_RUN["analysis"] = snapshot
    return snapshot


@app.get("/analysis/latest")
def latest_analysis() -> Any:
    snapshot = LAST_RUN["analysis"]
    if snapshot is None:
        return {"status": "pending"}
    return snapshot.model_dump(mode="json", by_alias=True)


def serve() -> None:
    import uvicorn

    uvicorn.run(app, host=API_HOST, port=API_PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    serve()
