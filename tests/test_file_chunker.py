from pathlib import Path

import pytest

from codesplit.chunking.file_chunker import ChunkError, chunk_file, read_source, split_lines
from codesplit.chunking.languages import Language
from codesplit.chunking.splitter import SplitChunk, SplitError


class StaticSplitter:
    def __init__(self, chunks=None, error=None) -> None:
        self.chunks = chunks or []
        self.error = error

    def split(self, code: bytes):
        if self.error:
            raise self.error
        return self.chunks


def _language(splitter) -> Language:
    return Language(name="static", extensions=frozenset({"txt"}), splitter=splitter)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("", []),
        ("a", ["a"]),
        ("a\nb", ["a", "b"]),
        ("a\nb\n", ["a", "b"]),
        ("a\r\nb\r\n", ["a", "b"]),
        ("a\n\n", ["a", ""]),
        ("\n", [""]),
    ],
)
def test_split_lines(text: str, expected: list[str]) -> None:
    assert split_lines(text) == expected


def test_read_source_keeps_bytes_and_lines_in_sync(tmp_path: Path) -> None:
    sample = tmp_path / "sample.py"
    sample.write_bytes(b"first\nsecond \xff\n")
    source = read_source(sample)
    assert source.data == b"first\nsecond \xff\n"
    assert source.lines == ["first", "second \ufffd"]


def test_missing_file_raises_chunk_error(tmp_path: Path) -> None:
    with pytest.raises(ChunkError) as excinfo:
        chunk_file(tmp_path / "missing.py", _language(StaticSplitter()))
    assert excinfo.value.path == tmp_path / "missing.py"


def test_splitter_failure_raises_chunk_error(tmp_path: Path) -> None:
    sample = tmp_path / "broken.txt"
    sample.write_text("content\n")
    language = _language(StaticSplitter(error=SplitError("no tree")))
    with pytest.raises(ChunkError, match="no tree"):
        chunk_file(sample, language)


def test_records_follow_splitter_rows(tmp_path: Path) -> None:
    sample = tmp_path / "notes.txt"
    sample.write_text("alpha\nbeta\ngamma\n")
    splitter = StaticSplitter(
        chunks=[
            SplitChunk(start_byte=0, end_byte=10, start_row=0, end_row=2, size=2),
            SplitChunk(start_byte=11, end_byte=16, start_row=2, end_row=3, size=1),
        ]
    )
    records = chunk_file(sample, _language(splitter))

    assert [(r.start_line, r.end_line, r.size) for r in records] == [(0, 2, 2), (2, 3, 1)]
    assert [r.text for r in records] == ["alpha\nbeta", "gamma"]
    assert all(r.file_path == str(sample) for r in records)
    assert all(r.file_name == "notes.txt" for r in records)


def test_blank_chunk_text_is_absent(tmp_path: Path) -> None:
    sample = tmp_path / "blank.txt"
    sample.write_text("\n   \ncode\n")
    splitter = StaticSplitter(
        chunks=[SplitChunk(start_byte=0, end_byte=5, start_row=0, end_row=2, size=1)]
    )
    (record,) = chunk_file(sample, _language(splitter))
    assert record.text is None


def test_text_is_stored_untrimmed(tmp_path: Path) -> None:
    sample = tmp_path / "indented.txt"
    sample.write_text("\n    body\n")
    splitter = StaticSplitter(
        chunks=[SplitChunk(start_byte=0, end_byte=10, start_row=0, end_row=2, size=1)]
    )
    (record,) = chunk_file(sample, _language(splitter))
    assert record.text == "\n    body"


def test_rust_function_is_chunked(tmp_path: Path) -> None:
    pytest.importorskip("tree_sitter_language_pack")
    from codesplit.chunking.languages import get_language_by_name

    sample = tmp_path / "test_file.rs"
    sample.write_text('\nfn main() {\n    println!("Processing file test");\n}\n')
    records = chunk_file(sample, get_language_by_name("rust"))

    assert records
    first = records[0]
    assert first.file_path == str(sample)
    assert "fn main()" in first.text
    assert first.size > 0
    lines = split_lines(sample.read_text())
    for record in records:
        assert 0 <= record.start_line <= record.end_line <= len(lines)
        assert "\n".join(lines[record.start_line : record.end_line]) == record.text


def test_empty_file_has_no_records(tmp_path: Path) -> None:
    pytest.importorskip("tree_sitter_language_pack")
    from codesplit.chunking.languages import get_language_by_name

    sample = tmp_path / "empty.py"
    sample.write_text("")
    assert chunk_file(sample, get_language_by_name("python")) == []
