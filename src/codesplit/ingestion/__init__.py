"""
Source tree ingestion.

Walks a directory tree lazily and streams the chunk records of every
supported file it finds.
"""
from .stream import ChunkStream, SkippedFile, StreamStats
from .walker import DEFAULT_IGNORE_PATTERNS, DirectoryWalker

__all__ = [
    "ChunkStream",
    "DEFAULT_IGNORE_PATTERNS",
    "DirectoryWalker",
    "SkippedFile",
    "StreamStats",
]
