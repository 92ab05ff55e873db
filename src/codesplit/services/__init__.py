"""
Service layer orchestrators for the code indexing pipeline.
"""

from .indexer import IndexerService, IndexingCallbacks, IndexingResult

__all__ = ["IndexerService", "IndexingCallbacks", "IndexingResult"]
