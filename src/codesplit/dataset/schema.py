"""Arrow schemas of the chunk and embedding datasets."""

from __future__ import annotations

import pyarrow as pa

CHUNK_COLUMNS = ("file_path", "file_name", "start_line", "end_line", "text", "size")

CHUNK_SCHEMA = pa.schema(
    [
        pa.field("file_path", pa.string()),
        pa.field("file_name", pa.string()),
        pa.field("start_line", pa.uint64()),
        pa.field("end_line", pa.uint64()),
        pa.field("text", pa.string()),
        pa.field("size", pa.uint64()),
    ]
)

EMBEDDING_FIELD = pa.field("embedding", pa.list_(pa.float32()))
