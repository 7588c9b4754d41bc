from __future__ import annotations

from openai import OpenAI

from . import config
from .errors import LabelingProviderError
from .schemas import Category, ClusterLabel

LABEL_PROMPT = """Analyze these customer feedback items about a software product:

- {examples}

Category: {category_name}

Generate:
1. A concise title (3-5 words) that captures the theme
2. A description (1-2 sentences) explaining the issue/opportunity
3. Whether this is HIGH impact (affects many users or blocks work)
4. A brief rationale for your assessment

Return as JSON with keys: title, description, category, isHighImpact, rationale
"""


def get_openai_client() -> OpenAI:
    api_key = config.OPENAI_API_KEY
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY is not set")
    return OpenAI(api_key=api_key, timeout=config.OPENAI_TIMEOUT_SECONDS, max_retries=0)


def embed_texts(texts: list[str], model: str = config.EMBEDDING_MODEL) -> list[list[float]]:
    if not texts:
        return []

    client = get_openai_client()
    response = client.embeddings.create(model=model, input=texts)
    return [item.embedding for item in sorted(response.data, key=lambda item: item.index)]


def label_cluster(
    examples: list[str],
    category: Category,
    model: str = config.LABELING_MODEL,
) -> ClusterLabel:
    prompt = LABEL_PROMPT.format(
        examples="\n- ".join(examples),
        category_name="Bug reports" if category == "bug" else "Feature requests",
    )

    client = get_openai_client()
    response = client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": "You summarize clusters of product feedback. Reply with JSON only."},
            {"role": "user", "content": prompt},
        ],
        response_format={"type": "json_object"},
    )
    content = response.choices[0].message.content if response.choices else None
    if not content:
        raise LabelingProviderError("Labeling model returned an empty response")
    return ClusterLabel.model_validate_json(content)
