import os
from pathlib import Path

import pytest

from codesplit import settings as settings_module
from codesplit.settings import AppSettings, load_settings


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("CODESPLIT_"):
            monkeypatch.delenv(key)
    return tmp_path


def test_defaults_without_config(isolated_config: Path) -> None:
    loaded = load_settings()
    assert isinstance(loaded, AppSettings)
    assert loaded.splitter_max_size == 512
    assert loaded.embedding_batch_size == 32
    assert loaded.milvus_collection == "codebases"
    assert loaded.ignore_patterns == []


def test_toml_sections_are_flattened(isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = isolated_config / "custom.toml"
    config.write_text(
        """
[workspace]
root = "./out"

[splitter]
max_size = 64

[ingestion]
ignore_patterns = [".git", "node_modules"]

[embedding]
provider = "openai"
model = "text-embedding-3-small"
batch_size = 8
api_key = ""

[milvus]
uri = "./index.db"
collection = "repos"
insert_batch_size = 16

[logging]
level = "debug"
json = true

[environment]
tokenizers_parallelism = false
"""
    )
    monkeypatch.setenv("CODESPLIT_CONFIG_PATH", str(config))
    monkeypatch.setenv("TOKENIZERS_PARALLELISM", "unset")

    loaded = load_settings()

    assert loaded.workspace_root == Path("./out")
    assert loaded.splitter_max_size == 64
    assert loaded.ignore_patterns == [".git", "node_modules"]
    assert loaded.embedding_provider == "openai"
    assert loaded.embedding_model == "text-embedding-3-small"
    assert loaded.embedding_batch_size == 8
    assert loaded.embedding_api_key is None
    assert loaded.milvus_uri == "./index.db"
    assert loaded.milvus_collection == "repos"
    assert loaded.milvus_insert_batch_size == 16
    assert loaded.log_level == "debug"
    assert loaded.log_json is True
    assert os.environ["TOKENIZERS_PARALLELISM"] == "false"


def test_environment_variables_are_read(isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CODESPLIT_SPLITTER_MAX_SIZE", "128")
    monkeypatch.setenv("CODESPLIT_MILVUS_URI", "http://localhost:19530")

    loaded = load_settings()

    assert loaded.splitter_max_size == 128
    assert loaded.milvus_uri == "http://localhost:19530"


def test_blank_values_become_none() -> None:
    assert settings_module._blank_to_none("  ") is None
    assert settings_module._blank_to_none("key") == "key"
    assert settings_module._blank_to_none(3) == 3
