"""Structured logging for the pet battle engine.

Engines log through structlog. Every entry carries the application name and
version, and entries emitted while a battle is running also carry the
battle session id bound by BattleSession.

Output is human-readable in debug mode and JSON otherwise, unless the caller
chooses explicitly. Settings supply the defaults:

    PETBATTLE_LOG_LEVEL: Minimum level that is emitted.
    PETBATTLE_DEBUG: Console output when true, JSON when false.

Example:
    >>> from petbattle.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> get_logger(__name__).info("Battle started", player="Thunder Pup")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

    from petbattle.core.config import Settings


BATTLE_CONTEXT_KEYS: tuple[str, ...] = ("battle_session",)
"""Context keys owned by a running battle; removed when it is torn down."""

_log_file: TextIO | None = None


class AppContextProcessor:
    """Stamp each entry with the application name and version."""

    def __init__(self, app_name: str, app_version: str) -> None:
        self.app_name = app_name
        self.app_version = app_version

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", self.app_name)
        event_dict.setdefault("version", self.app_version)
        return event_dict


def build_processors(settings: Settings, *, json_format: bool) -> list[Processor]:
    """Processor chain for the given output format.

    Args:
        settings: Supplies the app name and version stamped on entries.
        json_format: JSON lines when True, colored console output otherwise.

    Returns:
        The processors, ending in a renderer.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        AppContextProcessor(settings.app_name, settings.app_version),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_format:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    return processors


def configure_logging(
    *,
    level: str | None = None,
    json_format: bool | None = None,
    log_file: str | Path | None = None,
    settings: Settings | None = None,
) -> None:
    """Configure structlog for the whole process.

    Args:
        level: Minimum level name. Defaults to settings.log_level.
        json_format: Force JSON (True) or console (False) output. Defaults to
            JSON outside debug mode.
        log_file: Append entries to this file instead of stdout.
        settings: Application settings. Defaults to get_settings().
    """
    global _log_file  # noqa: PLW0603

    if settings is None:
        from petbattle.core.config import get_settings

        settings = get_settings()

    level_name = (level or settings.log_level).upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        log_level = logging.INFO
    if json_format is None:
        json_format = settings.is_production

    close_log_file()
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        _log_file = path.open("a", encoding="utf-8")
        logger_factory: Any = structlog.WriteLoggerFactory(file=_log_file)
    else:
        logger_factory = structlog.PrintLoggerFactory()

    structlog.configure(
        processors=build_processors(settings, json_format=json_format or log_file is not None),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=logger_factory,
        # a cached logger would keep writing to a file closed by the next call
        cache_logger_on_first_use=log_file is None,
    )

    # sqlite3 runs in worker threads; keep asyncio's own chatter out of battle logs
    logging.getLogger("asyncio").setLevel(max(log_level, logging.WARNING))


def close_log_file() -> None:
    """Close the file opened by configure_logging(log_file=...), if any."""
    global _log_file  # noqa: PLW0603
    if _log_file is not None:
        _log_file.close()
        _log_file = None


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger, typically with __name__."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind key-value pairs to every subsequent entry in this context.

    Example:
        >>> bind_context(battle_session="a1b2c3")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_battle_context() -> None:
    """Remove the keys a running battle bound, leaving any others."""
    structlog.contextvars.unbind_contextvars(*BATTLE_CONTEXT_KEYS)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


__all__ = [
    "BATTLE_CONTEXT_KEYS",
    "AppContextProcessor",
    "build_processors",
    "configure_logging",
    "close_log_file",
    "get_logger",
    "bind_context",
    "unbind_battle_context",
    "clear_context",
]
