"""
Embedding stage: adds a vector column to a stored chunk dataset.
"""
from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Union

import pyarrow as pa
import pyarrow.parquet as pq

from ..dataset import EMBEDDING_FIELD, DatasetError, discard_output, read_chunk_dataset
from ..logger import get_logger
from ..settings import settings
from .providers import EmbeddingAdapter, EmbeddingProviderFactory

log = get_logger(__name__)

PathLike = Union[str, Path]
ProgressCallback = Callable[[int, int], None]


def _batch_size(batch_size: Optional[int]) -> int:
    size = batch_size if batch_size is not None else settings.embedding_batch_size
    return max(1, size)


def embed_texts(
    texts: List[str],
    client: EmbeddingAdapter,
    batch_size: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
) -> List[List[float]]:
    """Embed ``texts`` in batches, one vector per input, order preserved."""
    total = len(texts)
    if progress:
        progress(0, total)
    size = _batch_size(batch_size)
    vectors: List[List[float]] = []
    for start in range(0, total, size):
        batch = texts[start : start + size]
        embedded = client.embed_documents(batch)
        if len(embedded) != len(batch):
            raise ValueError(
                f"Embedding provider returned {len(embedded)} vectors for {len(batch)} texts"
            )
        vectors.extend(embedded)
        if progress:
            progress(len(vectors), total)
    return vectors


def add_embedding_column(
    table: pa.Table,
    client: EmbeddingAdapter,
    batch_size: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
) -> pa.Table:
    if "text" not in table.column_names:
        raise DatasetError("Dataset has no 'text' column to embed")
    texts = [value if value is not None else "" for value in table.column("text").to_pylist()]
    vectors = embed_texts(texts, client, batch_size=batch_size, progress=progress)
    column = pa.array(vectors, type=EMBEDDING_FIELD.type)
    if EMBEDDING_FIELD.name in table.column_names:
        index = table.column_names.index(EMBEDDING_FIELD.name)
        return table.set_column(index, EMBEDDING_FIELD, column)
    return table.append_column(EMBEDDING_FIELD, column)


def embed_chunk_dataset(
    input_uri: PathLike,
    output_uri: PathLike,
    client: Optional[EmbeddingAdapter] = None,
    batch_size: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
) -> int:
    """Read the chunk dataset at ``input_uri``, embed its text, write ``output_uri``.

    Returns the number of rows written.
    """
    table = read_chunk_dataset(input_uri)
    output_path = Path(output_uri)
    try:
        sink = output_path.open("wb")
    except OSError as exc:
        raise DatasetError(f"Unable to create output file {output_path}: {exc}") from exc

    try:
        with sink:
            embedder = client or EmbeddingProviderFactory.create()
            log.info("embedding_dataset", source=str(input_uri), rows=table.num_rows)
            embedded = add_embedding_column(table, embedder, batch_size=batch_size, progress=progress)
            try:
                pq.write_table(embedded, sink)
            except (OSError, pa.ArrowException) as exc:
                raise DatasetError(f"Unable to write embedding dataset {output_path}: {exc}") from exc
    except Exception:
        discard_output(output_path)
        raise

    log.info("embedding_dataset_written", path=str(output_path), rows=embedded.num_rows)
    return embedded.num_rows


def embed_query(text: str, client: Optional[EmbeddingAdapter] = None) -> List[float]:
    """Embed a single search string with the configured provider."""
    embedder = client or EmbeddingProviderFactory.create()
    return list(embedder.embed_query(text))
