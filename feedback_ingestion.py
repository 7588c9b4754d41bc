"""Load feedback items from CSV or JSON files for the clustering engine."""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd

from backend.app.schemas import FeedbackItem

REQUIRED_COLUMNS = {"text"}
KNOWN_CATEGORIES = {"bug", "feature", "other"}
TIER_COLUMNS = ("customer_tier", "customerTier", "tier")


def _clean(value: object) -> str | None:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    text = str(value).strip()
    return text or None


def _normalize_category(value: object) -> str | None:
    category = _clean(value)
    if category is None:
        return None
    category = category.lower()
    return category if category in KNOWN_CATEGORIES else "other"


def _fallback_id(position: int, taken: set[str]) -> str:
    candidate = f"row-{position}"
    suffix = 1
    while candidate in taken:
        suffix += 1
        candidate = f"row-{position}-{suffix}"
    return candidate


def load_feedback_csv(csv_path: str | Path) -> list[FeedbackItem]:
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {', '.join(sorted(missing))}")

    df["text"] = df["text"].astype(str).str.strip()
    df = df[df["text"] != ""].reset_index(drop=True)
    tier_column = next((column for column in TIER_COLUMNS if column in df.columns), None)
    # Generated ids must not collide with ids given explicitly elsewhere in the file
    taken = {value for value in (_clean(raw) for raw in df.get("id", [])) if value}

    items: list[FeedbackItem] = []
    for position, row in df.iterrows():
        item_id = _clean(row.get("id"))
        if item_id is None:
            item_id = _fallback_id(position + 1, taken)
            taken.add(item_id)
        items.append(
            FeedbackItem(
                id=item_id,
                text=row["text"],
                category=_normalize_category(row.get("category")),
                customer_tier=_clean(row[tier_column]) if tier_column else None,
                source=_clean(row.get("source")),
            )
        )
    return items


def load_feedback_json(json_path: str | Path) -> list[FeedbackItem]:
    with open(json_path, "r", encoding="utf-8") as fh:
        payload = json.load(fh)

    if not isinstance(payload, list):
        raise ValueError("Feedback JSON must be a list of feedback objects")
    return [FeedbackItem.model_validate(entry) for entry in payload]
