from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator
from pydantic.alias_generators import to_camel

Category = Literal["bug", "feature"]
ImpactTier = Literal["high", "medium", "low"]
FeedbackText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FeedbackItem(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    text: FeedbackText
    category: Literal["bug", "feature", "other"] | None = None
    customer_tier: str | None = None
    source: str | None = None


class ClusterLabel(CamelModel):
    """Theme label returned by the labeling collaborator (or the local fallback)."""

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category: Category
    is_high_impact: bool
    rationale: str = ""


class Cluster(CamelModel):
    id: str
    title: str
    description: str
    category: Category
    impact_score: int = Field(..., ge=0, le=100)
    impact_tier: ImpactTier
    feedback_count: int = Field(..., ge=1)
    enterprise_count: int = Field(..., ge=0)
    examples: list[str] = Field(default_factory=list, max_length=3)
    feedback_ids: list[str]


class ClusteringResult(CamelModel):
    clusters: list[Cluster] = Field(default_factory=list)
    unclustered: list[str] = Field(default_factory=list)


class CategorySummary(CamelModel):
    bugs: int = Field(0, ge=0)
    features: int = Field(0, ge=0)
    other: int = Field(0, ge=0)


class AnalysisSnapshot(ClusteringResult):
    generated_at: datetime
    feedback_count: int = Field(..., ge=0)
    summary: CategorySummary


class AnalyzeRequest(CamelModel):
    items: list[FeedbackItem]

    @model_validator(mode="after")
    def _ids_are_unique(self) -> "AnalyzeRequest":
        counts = Counter(item.id for item in self.items)
        duplicates = sorted(feedback_id for feedback_id, count in counts.items() if count > 1)
        if duplicates:
            raise ValueError(f"Duplicate feedback ids: {', '.join(duplicates)}")
        return self
