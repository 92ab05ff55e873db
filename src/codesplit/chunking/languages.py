"""
Registry of the languages the chunker understands.

Each entry binds a set of file-name extensions to a tree-sitter grammar and
the splitter built on it. The table is built on first use and never changes
afterwards; adding a language means adding one row to ``_LANGUAGE_TABLE``.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, FrozenSet, Optional, Tuple, Union

from ..logger import get_logger
from ..settings import settings
from .splitter import Splitter, word_count

log = get_logger(__name__)

# (language name, grammar name, extensions)
_LANGUAGE_TABLE: Tuple[Tuple[str, str, Tuple[str, ...]], ...] = (
    ("javascript", "javascript", ("js", "mjs", "cjs", "jsx")),
    ("rust", "rust", ("rs",)),
    ("python", "python", ("py", "pyi")),
    ("typescript", "typescript", ("ts", "mts", "cts")),
    ("tsx", "tsx", ("tsx",)),
)


@dataclass(frozen=True)
class Language:
    """A supported language and the splitter used for its files."""

    name: str
    extensions: FrozenSet[str]
    splitter: Splitter


def _load_grammar(grammar_name: str):
    """Load a prebuilt tree-sitter grammar from ``tree_sitter_language_pack``."""
    try:
        from tree_sitter_language_pack import get_language  # type: ignore
    except ImportError as exc:  # pragma: no cover - runtime configuration issue
        raise RuntimeError(
            "tree_sitter_language_pack is required for prebuilt grammars. "
            "Install it via `pip install tree-sitter-language-pack`."
        ) from exc

    try:
        return get_language(grammar_name)
    except Exception as exc:  # pragma: no cover - broken grammar install
        raise RuntimeError(f"Unable to load tree-sitter grammar: {grammar_name}") from exc


@lru_cache(maxsize=1)
def get_languages() -> Tuple[Language, ...]:
    """Return every registered language, building the registry on first call."""
    languages = []
    for name, grammar_name, extensions in _LANGUAGE_TABLE:
        splitter = Splitter(
            _load_grammar(grammar_name),
            sizer=word_count,
            max_size=settings.splitter_max_size,
        )
        languages.append(
            Language(name=name, extensions=frozenset(extensions), splitter=splitter)
        )
    log.debug("language_registry_built", languages=[lang.name for lang in languages])
    return tuple(languages)


@lru_cache(maxsize=1)
def _extension_index() -> Dict[str, Language]:
    index: Dict[str, Language] = {}
    for language in get_languages():
        for extension in sorted(language.extensions):
            # First registered language wins on a clash.
            index.setdefault(extension, language)
    return index


def _normalize_extension(extension: str) -> str:
    return extension.lstrip(".").lower()


def language_for_extension(extension: str) -> Optional[Language]:
    """Look up the language registered for ``extension`` (``"py"`` or ``".py"``)."""
    key = _normalize_extension(extension)
    if not key:
        return None
    return _extension_index().get(key)


def language_for_path(path: Union[str, Path]) -> Optional[Language]:
    """Resolve the language of ``path`` from its final suffix.

    Paths without a suffix, dotfiles such as ``.bashrc`` included, have no
    language.
    """
    suffix = Path(path).suffix
    if not suffix:
        return None
    return language_for_extension(suffix)


def get_language_by_name(name: str) -> Language:
    for language in get_languages():
        if language.name == name:
            return language
    raise KeyError(f"Unknown language: {name}")
