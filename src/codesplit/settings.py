"""
Centralized application settings.

Values come from ``codesplit_settings.toml`` (or the file named by
``CODESPLIT_CONFIG_PATH``), then ``CODESPLIT_*`` environment variables.
"""
from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Project-wide settings loaded from env or .env files."""

    model_config = SettingsConfigDict(
        env_prefix="CODESPLIT_",
        env_nested_delimiter="__",
        extra="allow",
    )

    workspace_root: Path = Path("./workspace")
    splitter_max_size: int = 512
    ignore_patterns: List[str] = []
    embedding_provider: str = "fastembed"
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    embedding_batch_size: int = 32
    embedding_api_base: Optional[str] = None
    embedding_api_key: Optional[str] = None
    milvus_uri: str = "./codesplit_milvus.db"
    milvus_collection: str = "codebases"
    milvus_username: Optional[str] = None
    milvus_password: Optional[str] = None
    milvus_insert_batch_size: int = 128
    log_level: str = "INFO"
    log_json: bool = False


_CONFIG_ENV_VAR = "CODESPLIT_CONFIG_PATH"
_DEFAULT_CONFIG_FILE = Path("codesplit_settings.toml")
_PROVIDER_ENV_MAPPING = {
    "openai_api_key": "OPENAI_API_KEY",
}


def _load_toml_config() -> Dict[str, Any]:
    """Load configuration from the primary TOML file on disk."""
    candidates: List[Path] = []
    config_override = os.getenv(_CONFIG_ENV_VAR)
    if config_override:
        candidates.append(Path(config_override))
    candidates.append(_DEFAULT_CONFIG_FILE)

    for candidate in candidates:
        if candidate.is_file():
            with candidate.open("rb") as handle:
                return tomllib.load(handle)
    return {}


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def _flatten_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Translate grouped TOML sections into AppSettings keyword arguments."""
    data: Dict[str, Any] = {}

    workspace = raw.get("workspace", {})
    if "root" in workspace:
        data["workspace_root"] = workspace["root"]

    splitter = raw.get("splitter", {})
    if "max_size" in splitter:
        data["splitter_max_size"] = int(splitter["max_size"])

    ingestion = raw.get("ingestion", {})
    if "ignore_patterns" in ingestion:
        data["ignore_patterns"] = list(ingestion["ignore_patterns"])

    embedding = raw.get("embedding", {})
    if embedding:
        if "provider" in embedding:
            data["embedding_provider"] = embedding["provider"]
        if "model" in embedding:
            data["embedding_model"] = embedding["model"]
        if "batch_size" in embedding:
            data["embedding_batch_size"] = embedding["batch_size"]
        if "api_base" in embedding:
            data["embedding_api_base"] = _blank_to_none(embedding["api_base"])
        if "api_key" in embedding:
            data["embedding_api_key"] = _blank_to_none(embedding["api_key"])

    milvus = raw.get("milvus", {})
    if "uri" in milvus:
        data["milvus_uri"] = milvus["uri"]
    if "collection" in milvus:
        data["milvus_collection"] = milvus["collection"]
    if "username" in milvus:
        data["milvus_username"] = _blank_to_none(milvus["username"])
    if "password" in milvus:
        data["milvus_password"] = _blank_to_none(milvus["password"])
    if "insert_batch_size" in milvus:
        data["milvus_insert_batch_size"] = milvus["insert_batch_size"]

    logging_section = raw.get("logging", {})
    if "level" in logging_section:
        data["log_level"] = str(logging_section["level"])
    if "json" in logging_section:
        data["log_json"] = bool(logging_section["json"])

    return data


def _apply_environment_overrides(raw: Dict[str, Any]) -> None:
    env_section = raw.get("environment", {})
    tokenizers_parallelism = env_section.get("tokenizers_parallelism")
    if tokenizers_parallelism is not None:
        os.environ["TOKENIZERS_PARALLELISM"] = str(tokenizers_parallelism).lower()

    providers = raw.get("providers", {})
    for key, env_name in _PROVIDER_ENV_MAPPING.items():
        value = providers.get(key)
        if value:
            os.environ[env_name] = value


def load_settings() -> AppSettings:
    raw = _load_toml_config()
    _apply_environment_overrides(raw)
    flattened = _flatten_config(raw)
    return AppSettings(**flattened)


settings = load_settings()
