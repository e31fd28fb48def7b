"""
Logging configuration for the import tooling.

Every module logs through the shared loguru ``logger``. Entry points call
``setup_logging`` once at startup; the level and optional log file come from
LOG_LEVEL / LOG_FILE unless overridden on the command line.
"""

import sys
from pathlib import Path
from typing import TextIO

from loguru import logger

from jingledb.config import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging(
    level: str | None = None,
    log_file: Path | str | None = None,
    stream: TextIO | None = None,
) -> list[int]:
    """
    Replace loguru's handlers with the console sink and an optional file sink.

    Args:
        level: Log level; defaults to LOG_LEVEL
        log_file: Rotating log file; defaults to LOG_FILE (none when unset)
        stream: Console stream, stderr by default

    Returns:
        The ids of the added handlers
    """
    level = (level or settings.importer.log_level).upper()
    log_file = log_file or settings.importer.log_file

    logger.remove()
    handler_ids = [
        logger.add(
            stream or sys.stderr,
            level=level,
            format=CONSOLE_FORMAT,
            colorize=stream is None,
        )
    ]

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler_ids.append(
            logger.add(
                log_file,
                level=level,
                format=FILE_FORMAT,
                rotation=settings.importer.log_rotation,
                retention=settings.importer.log_retention,
                compression="gz",
                encoding="utf-8",
            )
        )

    logger.debug(f"Logging configured: level={level}, file={log_file or '-'}")
    return handler_ids
