from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from time2eat_offline.config.models import LoggingSettings

# aiohttp logs every connection at INFO; the agent reports its own fetch outcomes.
_NOISY_LOGGERS = ("aiohttp.access", "aiohttp.client", "asyncio")


def _resolve_level(level_name: str) -> int:
    level = logging.getLevelNamesMapping().get(level_name.upper())
    if level is None:
        raise ValueError(f"Invalid logging level: {level_name}")
    return level


def init_logging(settings: LoggingSettings) -> None:
    """
    Initialize agent logging.

    Installs a console handler and, when a file path is configured, a daily
    rotating file handler. Existing root handlers are replaced so repeated CLI
    invocations in one process do not duplicate output.
    """

    root_logger = logging.getLogger()
    level = _resolve_level(settings.level)
    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(
        fmt="[%(asctime)s][%(levelname)s][%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    file_path = settings.file.path.strip()
    if not file_path:
        return

    try:
        file_path_obj = Path(file_path)
        file_path_obj.parent.mkdir(parents=True, exist_ok=True)

        file_handler = TimedRotatingFileHandler(
            filename=str(file_path_obj),
            when="midnight",
            interval=1,
            backupCount=settings.file.rotation.backup_count,
            encoding="utf-8",
        )
        file_handler.suffix = "%Y-%m-%d"
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    except OSError:
        root_logger.error(
            "File logging handler failed to initialize path=%s",
            file_path,
            exc_info=True,
        )


__all__ = ["init_logging"]
