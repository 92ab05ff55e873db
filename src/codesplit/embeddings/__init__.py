"""
Embedding providers and the dataset embedding stage.

The default implementation delegates to LangChain embedding wrappers so the
provider (local FastEmbed models or OpenAI-compatible endpoints) is picked by
configuration.
"""

from .providers import EmbeddingAdapter, EmbeddingProviderFactory
from .stage import add_embedding_column, embed_chunk_dataset, embed_query, embed_texts

__all__ = [
    "EmbeddingAdapter",
    "EmbeddingProviderFactory",
    "add_embedding_column",
    "embed_chunk_dataset",
    "embed_query",
    "embed_texts",
]
