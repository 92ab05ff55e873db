"""
Assembly of the chunk dataset from a directory tree.

The chunk stream is drained once, in a single pass, into parallel column
lists. Only records with text become rows.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

import pyarrow as pa
import pyarrow.parquet as pq

from ..chunking import ChunkRecord
from ..ingestion import ChunkStream
from ..ingestion.stream import SkipCallback
from ..logger import get_logger
from .schema import CHUNK_SCHEMA

log = get_logger(__name__)

PathLike = Union[str, Path]


class DatasetError(Exception):
    """The dataset could not be built, read or written."""


@dataclass
class ChunkColumns:
    """Column-wise accumulator for chunk records."""

    file_paths: List[str] = field(default_factory=list)
    file_names: List[str] = field(default_factory=list)
    start_lines: List[int] = field(default_factory=list)
    end_lines: List[int] = field(default_factory=list)
    texts: List[str] = field(default_factory=list)
    sizes: List[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.texts)

    def append(self, record: ChunkRecord) -> bool:
        """Add ``record`` as a row; records without text are dropped."""
        if record.text is None:
            return False
        self.file_paths.append(record.file_path)
        self.file_names.append(record.file_name)
        self.start_lines.append(record.start_line)
        self.end_lines.append(record.end_line)
        self.texts.append(record.text)
        self.sizes.append(record.size)
        return True

    def extend(self, records: Iterable[ChunkRecord]) -> None:
        for record in records:
            self.append(record)

    def to_table(self) -> pa.Table:
        try:
            return pa.Table.from_arrays(
                [
                    pa.array(self.file_paths, type=pa.string()),
                    pa.array(self.file_names, type=pa.string()),
                    pa.array(self.start_lines, type=pa.uint64()),
                    pa.array(self.end_lines, type=pa.uint64()),
                    pa.array(self.texts, type=pa.string()),
                    pa.array(self.sizes, type=pa.uint64()),
                ],
                schema=CHUNK_SCHEMA,
            )
        except (pa.ArrowException, OverflowError) as exc:
            raise DatasetError(f"Unable to assemble chunk table: {exc}") from exc


def _drain(stream: ChunkStream) -> ChunkColumns:
    columns = ChunkColumns()
    try:
        columns.extend(stream)
    finally:
        stream.close()
    stats = stream.stats
    log.info(
        "chunks_collected",
        rows=len(columns),
        chunks=stats.chunks_emitted,
        files=stats.files_seen,
        files_chunked=stats.files_chunked,
        files_unsupported=stats.files_unsupported,
        files_failed=stats.files_failed,
        directories_skipped=stats.directories_skipped,
    )
    return columns


def discard_output(path: Path) -> None:
    """Remove a partially written output file."""
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        log.warning("output_cleanup_failed", path=str(path), error=str(exc))


def extract_chunks(
    root: PathLike,
    on_skip: Optional[SkipCallback] = None,
    ignore_patterns: Sequence[str] = (),
) -> pa.Table:
    """Chunk every supported file under ``root`` into an Arrow table.

    Unreadable directories and files are skipped; files that fail to chunk
    are reported through ``on_skip``.
    """
    stream = ChunkStream(root, on_skip=on_skip, ignore_patterns=ignore_patterns)
    return _drain(stream).to_table()


def write_chunk_dataset(
    root: PathLike,
    output_uri: PathLike,
    on_skip: Optional[SkipCallback] = None,
    ignore_patterns: Sequence[str] = (),
) -> int:
    """Chunk ``root`` and store the rows as Parquet at ``output_uri``.

    The output file is created before the traversal starts so an unusable
    destination fails fast. Returns the number of rows written.
    """
    output_path = Path(output_uri)
    try:
        sink = output_path.open("wb")
    except OSError as exc:
        raise DatasetError(f"Unable to create output file {output_path}: {exc}") from exc

    try:
        with sink:
            stream = ChunkStream(root, on_skip=on_skip, ignore_patterns=ignore_patterns)
            table = _drain(stream).to_table()
            try:
                pq.write_table(table, sink)
            except (OSError, pa.ArrowException) as exc:
                raise DatasetError(f"Unable to write chunk dataset {output_path}: {exc}") from exc
    except Exception:
        discard_output(output_path)
        raise

    log.info("dataset_written", path=str(output_path), rows=table.num_rows)
    return table.num_rows


def read_chunk_dataset(uri: PathLike) -> pa.Table:
    try:
        return pq.read_table(str(uri))
    except (OSError, pa.ArrowException) as exc:
        raise DatasetError(f"Unable to read dataset {uri}: {exc}") from exc
