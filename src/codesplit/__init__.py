"""
codesplit: syntax-aware chunking of source trees for semantic code search.

The main entry points are :func:`extract_chunks`, which returns the chunk
dataset of a directory tree as an Arrow table, and
:func:`write_chunk_dataset`, which stores it as Parquet.
"""

from .chunking import ChunkError, ChunkRecord
from .dataset import DatasetError, extract_chunks, read_chunk_dataset, write_chunk_dataset
from .ingestion import ChunkStream, SkippedFile
from .version import __version__

__all__ = [
    "ChunkError",
    "ChunkRecord",
    "ChunkStream",
    "DatasetError",
    "SkippedFile",
    "__version__",
    "extract_chunks",
    "read_chunk_dataset",
    "write_chunk_dataset",
]
