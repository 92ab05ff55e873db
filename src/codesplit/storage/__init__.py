"""
Vector store loading for embedded chunk datasets.
"""

from .milvus_store import MilvusVectorStore, build_collection_schema

__all__ = ["MilvusVectorStore", "build_collection_schema"]
