"""
Pull-based stream of chunk records for a whole directory tree.

Each pull hands out a buffered record of the file processed last, or walks on
to the next file and chunks it. Only one file's records are held at a time.
Per-file failures are reported through a diagnostic callback and never stop
the stream.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Deque, Optional, Sequence, Union

from ..chunking import ChunkError, ChunkRecord, chunk_file, language_for_path
from ..logger import get_logger
from .walker import DirectoryWalker

log = get_logger(__name__)


@dataclass(frozen=True)
class SkippedFile:
    """A file that contributed no chunks because it could not be processed."""

    path: Path
    reason: str


@dataclass
class StreamStats:
    files_seen: int = 0
    files_chunked: int = 0
    files_unsupported: int = 0
    files_failed: int = 0
    directories_skipped: int = 0
    chunks_emitted: int = 0


SkipCallback = Callable[[SkippedFile], None]


class ChunkStream:
    """Iterator of :class:`ChunkRecord` for every supported file under ``root``.

    Records whose text is empty are passed through; dropping them is up to
    the consumer.
    """

    def __init__(
        self,
        root: Union[str, Path],
        on_skip: Optional[SkipCallback] = None,
        ignore_patterns: Sequence[str] = (),
    ) -> None:
        self.walker = DirectoryWalker(root, ignore_patterns=ignore_patterns)
        self.on_skip = on_skip
        self.stats = StreamStats()
        self._pending: Deque[ChunkRecord] = deque()

    def __iter__(self) -> "ChunkStream":
        return self

    def __next__(self) -> ChunkRecord:
        while not self._pending:
            try:
                path = next(self.walker)
            except StopIteration:
                self.stats.directories_skipped = self.walker.directories_skipped
                raise
            self._pending.extend(self._process(path))
        self.stats.chunks_emitted += 1
        return self._pending.popleft()

    def close(self) -> None:
        """Abandon the traversal and release the open directory cursor."""
        self._pending.clear()
        self.walker.close()
        self.stats.directories_skipped = self.walker.directories_skipped

    def _process(self, path: Path) -> list[ChunkRecord]:
        self.stats.files_seen += 1
        language = language_for_path(path)
        if language is None:
            self.stats.files_unsupported += 1
            return []
        try:
            records = chunk_file(path, language)
        except ChunkError as exc:
            self.stats.files_failed += 1
            log.warning("chunk_file_failed", file=str(path), error=exc.reason)
            if self.on_skip:
                self.on_skip(SkippedFile(path=path, reason=exc.reason))
            return []
        self.stats.files_chunked += 1
        return records
