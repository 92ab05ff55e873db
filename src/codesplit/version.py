"""Version lookup for installed and source-tree copies of codesplit."""

from __future__ import annotations

from functools import lru_cache
from importlib import metadata, resources

_DISTRIBUTION = "codesplit"


@lru_cache(maxsize=1)
def get_version() -> str:
    """Installed distribution version, else the bundled ``VERSION`` file."""
    try:
        return metadata.version(_DISTRIBUTION)
    except metadata.PackageNotFoundError:
        pass
    try:
        return resources.files(__package__).joinpath("VERSION").read_text(encoding="utf-8").strip()
    except (FileNotFoundError, ModuleNotFoundError):
        return "unknown"


__version__ = get_version()
