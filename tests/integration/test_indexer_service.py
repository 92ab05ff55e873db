from pathlib import Path

import pyarrow as pa
import pytest

pytest.importorskip("tree_sitter_language_pack")

from codesplit.dataset import read_chunk_dataset  # noqa: E402
from codesplit.services import IndexerService, IndexingCallbacks  # noqa: E402


class DummyEmbedding:
    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [[float(len(text)), 1.0] for text in texts]

    def embed_query(self, text: str) -> list[float]:
        return [float(len(text)), 1.0]


class DummyVectorStore:
    def __init__(self) -> None:
        self.collection_name = "test_codebases"
        self.tables: list[pa.Table] = []

    def index_dataset(self, input_uri, progress=None) -> int:
        table = read_chunk_dataset(input_uri)
        self.tables.append(table)
        if progress:
            progress(table.num_rows, table.num_rows)
        return table.num_rows


def test_indexer_service_integration(tmp_path: Path) -> None:
    source_repo = tmp_path / "demo_src"
    (source_repo / "pkg").mkdir(parents=True)
    (source_repo / "example.py").write_text(
        'def greet(name: str) -> str:\n    return f"Hello {name}"\n'
    )
    (source_repo / "pkg" / "lib.rs").write_text("pub fn add(a: i32, b: i32) -> i32 {\n    a + b\n}\n")
    (source_repo / "README.md").write_text("# demo\n")

    vector_store = DummyVectorStore()
    service = IndexerService(
        workspace=tmp_path / "workspace",
        vector_store=vector_store,
        embedding_client=DummyEmbedding(),
    )
    stages: list[str] = []

    result = service.index_directory(source_repo, callbacks=IndexingCallbacks(stage=stages.append))

    assert result.chunk_count == 2
    assert result.embeddings_indexed == 2
    assert result.collection == "test_codebases"
    assert result.skipped == []
    assert stages == [
        "chunk_started",
        "chunk_completed",
        "embedding_started",
        "embedding_completed",
        "insert_started",
        "insert_completed",
    ]
    assert result.chunks_path.exists()
    (table,) = vector_store.tables
    assert "embedding" in table.column_names
    assert sorted(table.column("file_name").to_pylist()) == ["example.py", "lib.rs"]
