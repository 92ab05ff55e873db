"""
structlog setup for codesplit.

Events are emitted through structlog and rendered by stdlib logging handlers,
so chunking diagnostics and third-party library messages land in the same
stream. Importing a codesplit module never touches the logging setup; entry
points call :func:`configure_logging` or :func:`redirect_logging_to_file`.
Level and rendering default to the ``[logging]`` settings.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

import structlog
from structlog.stdlib import BoundLogger, ProcessorFormatter
from structlog.typing import Processor

from .settings import settings

LevelLike = Union[int, str, None]

_SHARED_PROCESSORS: tuple[Processor, ...] = (
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.TimeStamper(fmt="iso"),
)


def resolve_level(level: LevelLike) -> int:
    """Turn ``"debug"``, ``logging.DEBUG`` or ``None`` (settings) into a level number."""
    if level is None:
        level = settings.log_level
    if isinstance(level, int):
        return level
    levels = logging.getLevelNamesMapping()
    try:
        return levels[level.strip().upper()]
    except KeyError:
        raise ValueError(f"Unknown log level: {level!r}") from None


def _install_structlog(min_level: int) -> None:
    structlog.configure(
        processors=_SHARED_PROCESSORS + (ProcessorFormatter.wrap_for_formatter,),
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _formatter(json_output: Optional[bool]) -> ProcessorFormatter:
    if json_output is None:
        json_output = settings.log_json
    renderer: Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    return ProcessorFormatter(processor=renderer, foreign_pre_chain=_SHARED_PROCESSORS)


def configure_logging(
    level: LevelLike = None,
    enable_console: bool = True,
    console_level: LevelLike = None,
    json_output: Optional[bool] = None,
) -> None:
    """
    Route codesplit events to stderr.

    Parameters
    ----------
    level:
        Root threshold, as a number or a name. Defaults to ``settings.log_level``.
    enable_console:
        False installs a null handler, silencing all output.
    console_level:
        Separate threshold for the stderr handler; falls back to ``level``.
    json_output:
        One JSON object per event instead of key=value lines. Defaults to
        ``settings.log_json``.
    """
    root_level = resolve_level(level)
    _install_structlog(root_level)
    logging.captureWarnings(True)

    if enable_console:
        stderr = logging.StreamHandler()
        stderr.setLevel(resolve_level(console_level) if console_level is not None else root_level)
        stderr.setFormatter(_formatter(json_output))
        handler: logging.Handler = stderr
    else:
        handler = logging.NullHandler()

    logging.basicConfig(level=root_level, handlers=[handler], force=True)


def get_logger(name: Optional[str] = None) -> BoundLogger:
    return structlog.get_logger(name)


def redirect_logging_to_file(
    path: Path, level: LevelLike = None, json_output: Optional[bool] = None
) -> None:
    """Write every event to ``path`` (truncated), dropping the current handlers."""
    root_level = resolve_level(level)
    _install_structlog(root_level)
    path.parent.mkdir(parents=True, exist_ok=True)
    sink = logging.FileHandler(path, mode="w", encoding="utf-8")
    sink.setFormatter(_formatter(json_output))
    logging.basicConfig(level=root_level, handlers=[sink], force=True)
