class EmbeddingProviderError(RuntimeError):
    """Raised when the embedding collaborator breaks its contract."""


class LabelingProviderError(RuntimeError):
    """Raised when the labeling collaborator returns nothing usable."""
