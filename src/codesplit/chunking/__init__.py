"""
Chunking utilities for semantic code indexing.

Tree-sitter grammars drive a weight-bounded splitter whose output is turned
into line-accurate chunk records, one file at a time.
"""

from .file_chunker import ChunkError, ChunkRecord, chunk_file
from .languages import Language, get_languages, language_for_extension, language_for_path
from .splitter import SplitChunk, SplitError, Splitter, word_count

__all__ = [
    "ChunkError",
    "ChunkRecord",
    "Language",
    "SplitChunk",
    "SplitError",
    "Splitter",
    "chunk_file",
    "get_languages",
    "language_for_extension",
    "language_for_path",
    "word_count",
]
