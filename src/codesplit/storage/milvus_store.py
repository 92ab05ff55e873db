"""
Milvus vector storage integration.

Loads Arrow tables (usually the embedded chunk dataset) into a Milvus
collection. The collection is created from the first table's schema when it
does not exist yet; later tables are appended to it. A local file URI such as
``./codesplit_milvus.db`` runs against Milvus Lite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import pyarrow as pa
from pymilvus import CollectionSchema, DataType, MilvusClient, MilvusException  # type: ignore

from ..dataset import read_chunk_dataset
from ..logger import get_logger
from ..settings import settings

log = get_logger(__name__)

PRIMARY_KEY_FIELD = "id"
VARCHAR_MAX_LENGTH = 65535


def _is_float_list(arrow_type: pa.DataType) -> bool:
    return (
        pa.types.is_list(arrow_type)
        or pa.types.is_large_list(arrow_type)
        or pa.types.is_fixed_size_list(arrow_type)
    ) and pa.types.is_floating(arrow_type.value_type)


def _is_text(arrow_type: pa.DataType) -> bool:
    return pa.types.is_string(arrow_type) or pa.types.is_large_string(arrow_type)


def _vector_dimension(table: pa.Table, column_name: str) -> int:
    arrow_type = table.schema.field(column_name).type
    if pa.types.is_fixed_size_list(arrow_type):
        return arrow_type.list_size
    for value in table.column(column_name).to_pylist():
        if value:
            return len(value)
    raise ValueError(f"Cannot infer vector dimension: column '{column_name}' has no values")


def build_collection_schema(table: pa.Table) -> CollectionSchema:
    """Translate an Arrow schema into a Milvus schema with an auto-id primary key."""
    if PRIMARY_KEY_FIELD in table.column_names:
        raise ValueError(f"Column name '{PRIMARY_KEY_FIELD}' is reserved for the primary key")

    schema = MilvusClient.create_schema(auto_id=True, enable_dynamic_field=False)
    schema.add_field(PRIMARY_KEY_FIELD, DataType.INT64, is_primary=True)
    has_vector = False
    for field in table.schema:
        arrow_type = field.type
        if _is_text(arrow_type):
            schema.add_field(field.name, DataType.VARCHAR, max_length=VARCHAR_MAX_LENGTH)
        elif pa.types.is_boolean(arrow_type):
            schema.add_field(field.name, DataType.BOOL)
        elif pa.types.is_integer(arrow_type):
            schema.add_field(field.name, DataType.INT64)
        elif pa.types.is_floating(arrow_type):
            schema.add_field(field.name, DataType.DOUBLE)
        elif _is_float_list(arrow_type):
            dim = _vector_dimension(table, field.name)
            schema.add_field(field.name, DataType.FLOAT_VECTOR, dim=dim)
            has_vector = True
        else:
            raise ValueError(f"Unsupported column type for '{field.name}': {arrow_type}")

    if not has_vector:
        raise ValueError("A Milvus collection needs at least one float list column")
    return schema


def vector_fields(table: pa.Table) -> List[str]:
    return [field.name for field in table.schema if _is_float_list(field.type)]


def fit_text_values(rows: List[Dict[str, Any]], columns: List[str]) -> int:
    """Truncate string values in place to the VARCHAR byte limit.

    Returns the number of values shortened.
    """
    truncated = 0
    for index, row in enumerate(rows):
        for column in columns:
            value = row.get(column)
            if value is None:
                continue
            encoded = value.encode("utf-8")
            if len(encoded) <= VARCHAR_MAX_LENGTH:
                continue
            # Cutting inside a multi-byte character leaves a partial tail; drop it.
            row[column] = encoded[:VARCHAR_MAX_LENGTH].decode("utf-8", errors="ignore")
            truncated += 1
            log.warning(
                "milvus_value_truncated",
                column=column,
                row=index,
                file=row.get("file_path"),
                size=len(encoded),
                limit=VARCHAR_MAX_LENGTH,
            )
    return truncated


class MilvusVectorStore:
    """Thin wrapper around PyMilvus for our embedding workload."""

    def __init__(
        self,
        uri: Optional[str] = None,
        collection_name: Optional[str] = None,
        metric_type: str = "IP",
    ) -> None:
        self.uri = uri or settings.milvus_uri
        self.collection_name = collection_name or settings.milvus_collection
        self.metric_type = metric_type
        self._client: Optional[MilvusClient] = None

    def connect(self) -> MilvusClient:
        """Open the Milvus connection using the configured URI."""
        if self._client is None:
            log.info("connecting_milvus", uri=self.uri)
            self._client = MilvusClient(
                uri=self.uri,
                user=settings.milvus_username or "",
                password=settings.milvus_password or "",
            )
        return self._client

    @property
    def client(self) -> MilvusClient:
        if self._client is None:
            raise RuntimeError("Milvus client is not initialized. Call connect() first.")
        return self._client

    def collection_exists(self) -> bool:
        """Probe for the collection; a failed probe counts as absent."""
        try:
            return bool(self.client.has_collection(self.collection_name))
        except MilvusException as exc:
            log.warning(
                "milvus_collection_probe_failed",
                collection=self.collection_name,
                error=str(exc),
            )
            return False

    def _create_collection(self, table: pa.Table) -> None:
        schema = build_collection_schema(table)
        index_params = self.client.prepare_index_params()
        for name in vector_fields(table):
            index_params.add_index(
                field_name=name,
                index_type="AUTOINDEX",
                metric_type=self.metric_type,
            )
        log.info(
            "creating_milvus_collection",
            collection=self.collection_name,
            fields=table.column_names,
        )
        self.client.create_collection(
            collection_name=self.collection_name,
            schema=schema,
            index_params=index_params,
            consistency_level="Strong",
        )

    def index_table(
        self,
        table: pa.Table,
        progress: Optional[Callable[[int, int], None]] = None,
    ) -> int:
        """Create the collection from ``table`` or append ``table`` to it.

        Returns the number of rows inserted.
        """
        self.connect()
        if table.num_rows == 0:
            # An empty table carries no vector dimension to build a schema from.
            log.info("no_rows_to_index", collection=self.collection_name)
            if progress:
                progress(0, 0)
            return 0

        if self.collection_exists():
            log.info("appending_to_milvus_collection", collection=self.collection_name)
        else:
            self._create_collection(table)

        rows: List[Dict[str, Any]] = table.to_pylist()
        fit_text_values(rows, [field.name for field in table.schema if _is_text(field.type)])
        total = len(rows)
        log.info("inserting_rows", collection=self.collection_name, count=total)
        if progress:
            progress(0, total)

        batch_size = max(1, settings.milvus_insert_batch_size)
        inserted = 0
        for start in range(0, total, batch_size):
            batch = rows[start : start + batch_size]
            self.client.insert(collection_name=self.collection_name, data=batch)
            inserted += len(batch)
            if progress:
                progress(inserted, total)
        return inserted

    def index_dataset(
        self,
        input_uri: Union[str, Path],
        progress: Optional[Callable[[int, int], None]] = None,
    ) -> int:
        """Load the Parquet dataset at ``input_uri`` into the collection."""
        return self.index_table(read_chunk_dataset(input_uri), progress=progress)

    def count(self) -> int:
        result = self.client.query(
            collection_name=self.collection_name,
            filter="",
            output_fields=["count(*)"],
        )
        return int(result[0]["count(*)"]) if result else 0

    def search(self, vector: list[float], field_name: str = "embedding", top_k: int = 10) -> list:
        """Run a raw vector search."""
        return self.client.search(
            collection_name=self.collection_name,
            data=[vector],
            anns_field=field_name,
            limit=top_k,
            output_fields=["file_path", "file_name", "start_line", "end_line", "text"],
        )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
