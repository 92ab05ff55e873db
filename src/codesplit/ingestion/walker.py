"""
Lazy discovery of the regular files below a root directory.

The walker keeps a stack of directories still to visit and at most one open
directory cursor, so memory stays flat however deep or wide the tree is.
"""
from __future__ import annotations

import fnmatch
import os
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

from ..logger import get_logger

log = get_logger(__name__)

DEFAULT_IGNORE_PATTERNS: Sequence[str] = (
    ".git",
    ".hg",
    ".svn",
    ".idea",
    ".vscode",
    "__pycache__",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    ".venv",
    "venv",
    "node_modules",
    "target",
    "dist",
)


class DirectoryWalker:
    """Iterator over the regular files reachable from ``root``.

    Order follows the filesystem's directory enumeration and is not stable
    across platforms. Directories that cannot be listed are skipped and
    counted in :attr:`directories_skipped`. Symlinked directories are not
    descended into, so no directory is visited twice.
    """

    def __init__(
        self,
        root: Union[str, Path],
        ignore_patterns: Sequence[str] = (),
    ) -> None:
        self.root = Path(root)
        self.ignore_patterns = tuple(ignore_patterns)
        self.directories_skipped = 0
        self._directories: List[Path] = [self.root]
        self._entries: Optional[Iterator[os.DirEntry]] = None

    def __iter__(self) -> "DirectoryWalker":
        return self

    def __next__(self) -> Path:
        while True:
            if self._entries is not None:
                entry = self._next_entry()
                if entry is None:
                    continue
                path = self._classify(entry)
                if path is not None:
                    return path
                continue

            if not self._directories:
                raise StopIteration
            self._entries = self._open_directory(self._directories.pop())

    def close(self) -> None:
        """Release the open directory cursor and drop pending directories."""
        self._close_entries()
        self._directories.clear()

    def _open_directory(self, directory: Path) -> Optional[Iterator[os.DirEntry]]:
        try:
            return os.scandir(directory)
        except OSError:
            self.directories_skipped += 1
            log.debug("directory_skipped", directory=str(directory))
            return None

    def _next_entry(self) -> Optional[os.DirEntry]:
        entries = self._entries
        if entries is None:
            return None
        try:
            return next(entries)
        except StopIteration:
            self._close_entries()
        except OSError:
            # The directory vanished or failed mid-listing; give up on it.
            self.directories_skipped += 1
            self._close_entries()
        return None

    def _close_entries(self) -> None:
        if self._entries is not None:
            close = getattr(self._entries, "close", None)
            if close is not None:
                close()
            self._entries = None

    def _is_ignored(self, name: str) -> bool:
        return any(fnmatch.fnmatch(name, pattern) for pattern in self.ignore_patterns)

    def _classify(self, entry: os.DirEntry) -> Optional[Path]:
        """Queue sub-directories and return regular files; ignore the rest."""
        if self._is_ignored(entry.name):
            return None
        try:
            if entry.is_dir(follow_symlinks=False):
                self._directories.append(Path(entry.path))
                return None
            if entry.is_file():
                return Path(entry.path)
        except OSError:
            return None
        return None
