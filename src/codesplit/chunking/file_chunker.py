"""
Conversion of a single source file into line-accurate chunk records.

The splitter works on raw bytes and reports byte and row spans; the records
carry the text of the lines inside each row span so downstream consumers
never need the original file.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..logger import get_logger
from .languages import Language
from .splitter import SplitError

log = get_logger(__name__)


class ChunkError(Exception):
    """A file could not be read or split."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass(frozen=True)
class ChunkRecord:
    """One chunk of one file, ready to become a dataset row.

    ``end_line`` is exclusive. ``text`` is ``None`` when the covered lines
    hold nothing but whitespace; such records are never written out.
    """

    file_path: str
    file_name: str
    start_line: int
    end_line: int
    text: Optional[str]
    size: int


@dataclass
class SourceFile:
    """Raw bytes of a file and the same content split into lines."""

    path: Path
    data: bytes
    lines: List[str]


def split_lines(text: str) -> List[str]:
    """Split ``text`` on line feeds the way the syntax tree counts rows.

    A final line feed does not start an extra empty line and a carriage
    return before a line feed is dropped.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def read_source(path: Path) -> SourceFile:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ChunkError(path, f"unable to read file: {exc}") from exc
    text = data.decode("utf-8", errors="replace")
    return SourceFile(path=path, data=data, lines=split_lines(text))


def _join_lines(lines: List[str], start: int, end: int) -> Optional[str]:
    text = "\n".join(lines[start:end])
    if not text.strip():
        return None
    return text


def chunk_file(path: Path, language: Language) -> List[ChunkRecord]:
    """Split ``path`` with the splitter of ``language``.

    Raises :class:`ChunkError` when the file cannot be read or parsed.
    Records keep the splitter's order and row spans.
    """
    source = read_source(path)
    try:
        chunks = language.splitter.split(source.data)
    except (SplitError, ValueError, UnicodeError, RecursionError) as exc:
        raise ChunkError(path, f"{language.name} splitter failed: {exc}") from exc

    file_path = str(path)
    file_name = path.name
    records = [
        ChunkRecord(
            file_path=file_path,
            file_name=file_name,
            start_line=chunk.start_row,
            end_line=chunk.end_row,
            text=_join_lines(source.lines, chunk.start_row, chunk.end_row),
            size=chunk.size,
        )
        for chunk in chunks
    ]
    log.debug(
        "file_chunked",
        file=file_path,
        language=language.name,
        lines=len(source.lines),
        chunks=len(records),
    )
    return records
