from __future__ import annotations

"""Loguru sinks for the monday-poll server.

``monday_poll.server.run`` calls :func:`setup_logger` once before uvicorn
starts.  Components log through the shared ``loguru.logger`` with a
bracketed tag (``[CLEANER]``, ``[SURVEYOR]``, ``[APP]``, ``[API]``, ``[DB]``),
so sweeps and storage failures can be grepped out of ``app.log``.  Tests
never call it and keep Loguru's default stderr sink.
"""
import sys
from pathlib import Path
from typing import Literal

from loguru import logger

from monday_poll.settings import settings

_INITIALISED = False

_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {message}"


def setup_logger(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] | None = None
) -> None:
    """Route server logs to ``LOG_DIR`` and stderr; later calls do nothing.

    *level* only affects stderr and defaults to ``settings.LOG_LEVEL``.
    ``app.log`` always records sweeps (INFO), and ``debug.log`` also records
    debounced skips and per-request summaries (DEBUG).
    """

    global _INITIALISED
    if _INITIALISED:
        return

    if level is None:
        level = settings.LOG_LEVEL.upper()  # type: ignore[assignment]

    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.remove()

    # enqueue: request handlers and aiosqlite worker threads log concurrently
    logger.add(log_dir / "app.log", level="INFO", format=_FILE_FORMAT, rotation="1 MB", retention="10 days", enqueue=True)
    logger.add(log_dir / "debug.log", level="DEBUG", format=_FILE_FORMAT, rotation="10 MB", retention="3 days", enqueue=True)

    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss}</green> <level>{level: <8}</level> <level>{message}</level>",
        colorize=True,
    )

    logger.info("Logging to {} (stderr level: {})", log_dir, level)

    _INITIALISED = True
