"""Deterministic offline embeddings built from hashed, TF-IDF weighted tokens."""

from __future__ import annotations

from collections import Counter
import hashlib
import math
import re
from typing import Sequence

import numpy as np

TOKEN_RE = re.compile(r"[a-zA-Z0-9']+")


class HashingEmbedder:
    """Embeds a batch of texts without any network access.

    Each token lands in a stable md5 bucket, weighted by term frequency and the
    batch's inverse document frequency; rows are unit-normalised.
    """

    def __init__(self, dimensions: int = 128) -> None:
        if dimensions < 8:
            raise ValueError("Embedding dimension should be at least 8")
        self.dimensions = dimensions

    def __call__(self, texts: Sequence[str]) -> list[list[float]]:
        return self.embed(texts)

    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        tokenized = [self._tokenize(text) for text in texts]
        idf = self._compute_idf(tokenized)
        matrix = np.zeros((len(tokenized), self.dimensions), dtype=float)
        for row, tokens in enumerate(tokenized):
            counts = Counter(tokens)
            for token, count in counts.items():
                matrix[row, self._stable_bucket(token)] += (count / len(tokens)) * idf[token]

        norms = np.linalg.norm(matrix, axis=1, keepdims=True)
        norms[norms == 0] = 1.0
        return (matrix / norms).tolist()

    def _tokenize(self, text: str) -> list[str]:
        return [token.lower() for token in TOKEN_RE.findall(text)]

    def _compute_idf(self, tokenized_texts: Sequence[Sequence[str]]) -> dict[str, float]:
        doc_count = len(tokenized_texts)
        doc_freq: Counter[str] = Counter()
        for tokens in tokenized_texts:
            doc_freq.update(set(tokens))
        return {
            token: math.log((1 + doc_count) / (1 + freq)) + 1
            for token, freq in doc_freq.items()
        }

    def _stable_bucket(self, token: str) -> int:
        digest = hashlib.md5(token.encode("utf-8"), usedforsecurity=False).digest()
        return int.from_bytes(digest[:4], "big") % self.dimensions
