"""
Chunk dataset assembly and persistence.

Drains a chunk stream into six parallel columns and stores them as Parquet.
"""
from .assembler import (
    ChunkColumns,
    DatasetError,
    discard_output,
    extract_chunks,
    read_chunk_dataset,
    write_chunk_dataset,
)
from .schema import CHUNK_COLUMNS, CHUNK_SCHEMA, EMBEDDING_FIELD

__all__ = [
    "CHUNK_COLUMNS",
    "CHUNK_SCHEMA",
    "ChunkColumns",
    "DatasetError",
    "EMBEDDING_FIELD",
    "discard_output",
    "extract_chunks",
    "read_chunk_dataset",
    "write_chunk_dataset",
]
