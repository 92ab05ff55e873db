"""
Abstractions for embedding providers.

This module wires LangChain embeddings, making it straightforward to plug
different vendors by configuration.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Protocol

from ..logger import get_logger
from ..settings import settings

log = get_logger(__name__)


class EmbeddingAdapter(Protocol):
    """Protocol representing a pluggable embeddings client."""

    def embed_documents(self, texts: Iterable[str]) -> List[List[float]]:
        ...

    def embed_query(self, text: str) -> List[float]:
        ...


class EmbeddingProviderFactory:
    """Factory that returns embedding clients based on configuration."""

    @staticmethod
    def create(provider: str | None = None, model: str | None = None) -> EmbeddingAdapter:
        provider_name = (provider or settings.embedding_provider).lower()

        if provider_name == "fastembed":
            try:
                from langchain_community.embeddings import FastEmbedEmbeddings  # type: ignore
            except ImportError as exc:  # pragma: no cover - optional dependency
                raise RuntimeError(
                    "fastembed is required for local embeddings. "
                    "Install it or select a different embedding provider."
                ) from exc

            embed_model = model or settings.embedding_model
            log.info("initializing_fastembed_embeddings", model=embed_model)
            return FastEmbedEmbeddings(
                model_name=embed_model,
                batch_size=max(1, settings.embedding_batch_size),
            )

        if provider_name in {"openai", "lmstudio"} or provider_name.startswith("openai"):
            from langchain_openai import OpenAIEmbeddings  # type: ignore

            embed_model = model or settings.embedding_model
            log.info("initializing_openai_embeddings", model=embed_model)
            kwargs: dict[str, Any] = {
                "model": embed_model,
                "encoding_format": "float",
            }
            if settings.embedding_api_base:
                kwargs["base_url"] = settings.embedding_api_base
            if settings.embedding_api_key:
                kwargs["api_key"] = settings.embedding_api_key
            if provider_name != "openai":
                kwargs["tiktoken_enabled"] = False
            return OpenAIEmbeddings(**kwargs)

        raise NotImplementedError(f"Embedding provider not yet supported: {provider_name}")
