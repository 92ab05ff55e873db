"""
Source tree indexing workflow orchestration.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from ..dataset import write_chunk_dataset
from ..embeddings import EmbeddingAdapter, EmbeddingProviderFactory, embed_chunk_dataset
from ..ingestion import SkippedFile
from ..logger import get_logger
from ..settings import settings
from ..storage import MilvusVectorStore

log = get_logger(__name__)

CHUNKS_FILENAME = "chunks.parquet"
EMBEDDINGS_FILENAME = "embeddings.parquet"


@dataclass
class IndexingCallbacks:
    stage: Optional[Callable[[str], None]] = None
    skip: Optional[Callable[[SkippedFile], None]] = None
    embed_progress: Optional[Callable[[int, int], None]] = None
    insert_progress: Optional[Callable[[int, int], None]] = None


@dataclass
class IndexingResult:
    root: Path
    chunk_count: int
    embeddings_indexed: int
    collection: str
    chunks_path: Path
    embeddings_path: Path
    skipped: List[SkippedFile] = field(default_factory=list)


class IndexerService:
    """High-level service that chains chunking, embedding, and storage."""

    def __init__(
        self,
        workspace: Optional[Path] = None,
        vector_store: Optional[MilvusVectorStore] = None,
        embedding_client: Optional[EmbeddingAdapter] = None,
        ignore_patterns: Optional[Sequence[str]] = None,
    ) -> None:
        self.workspace = workspace or settings.workspace_root
        self.vector_store = vector_store or MilvusVectorStore()
        self._embedding_client = embedding_client
        self.ignore_patterns = tuple(
            settings.ignore_patterns if ignore_patterns is None else ignore_patterns
        )

    @property
    def embedding_client(self) -> EmbeddingAdapter:
        if self._embedding_client is None:
            self._embedding_client = EmbeddingProviderFactory.create()
        return self._embedding_client

    def index_directory(
        self,
        root: Union[str, Path],
        callbacks: Optional[IndexingCallbacks] = None,
    ) -> IndexingResult:
        """Chunk, embed and load every supported file under ``root``."""
        cb = callbacks or IndexingCallbacks()
        root_path = Path(root)
        self.workspace.mkdir(parents=True, exist_ok=True)
        chunks_path = self.workspace / CHUNKS_FILENAME
        embeddings_path = self.workspace / EMBEDDINGS_FILENAME
        skipped: List[SkippedFile] = []

        def on_skip(item: SkippedFile) -> None:
            skipped.append(item)
            if cb.skip:
                cb.skip(item)

        if cb.stage:
            cb.stage("chunk_started")
        chunk_count = write_chunk_dataset(
            root_path,
            chunks_path,
            on_skip=on_skip,
            ignore_patterns=self.ignore_patterns,
        )
        if cb.stage:
            cb.stage("chunk_completed")

        if cb.stage:
            cb.stage("embedding_started")
        embed_chunk_dataset(
            chunks_path,
            embeddings_path,
            client=self.embedding_client,
            progress=cb.embed_progress,
        )
        if cb.stage:
            cb.stage("embedding_completed")

        if cb.stage:
            cb.stage("insert_started")
        inserted = self.vector_store.index_dataset(embeddings_path, progress=cb.insert_progress)
        if cb.stage:
            cb.stage("insert_completed")

        log.info(
            "directory_indexed",
            root=str(root_path),
            chunks=chunk_count,
            inserted=inserted,
            skipped=len(skipped),
            collection=self.vector_store.collection_name,
        )
        return IndexingResult(
            root=root_path,
            chunk_count=chunk_count,
            embeddings_indexed=inserted,
            collection=self.vector_store.collection_name,
            chunks_path=chunks_path,
            embeddings_path=embeddings_path,
            skipped=skipped,
        )
