"""Logging shared by the API process and the export CLI.

Everything is routed through the root logger so that uvicorn's request logs,
the reporting pipeline and the MongoDB adapter end up in the same stream (and
in ``LOG_FILE`` when one is configured).
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# pymongo logs every heartbeat and pool event at DEBUG.
QUIET_LOGGERS = ("pymongo", "pymongo.connection", "pymongo.serverSelection", "pymongo.topology")

# uvicorn installs its own handlers; they are dropped so records propagate to root.
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def resolve_level(level: str | int | None) -> int:
    if isinstance(level, int):
        return level
    name = str(level or "").strip().upper()
    return logging.getLevelNamesMapping().get(name, logging.INFO)


def _attach(root: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)


def _log_file_attached(root: logging.Logger, path: Path) -> bool:
    target = str(path.resolve())
    return any(
        getattr(handler, "baseFilename", None) == target
        for handler in root.handlers
        if isinstance(handler, logging.FileHandler)
    )


def configure_logging(level: str | int = "INFO", log_file: Optional[str] = None) -> int:
    """Set up the root logger and return the effective numeric level.

    Safe to call repeatedly (app startup, tests, CLI): existing handlers are
    re-levelled, never duplicated.
    """

    numeric_level = resolve_level(level)
    root = logging.getLogger()
    root.setLevel(numeric_level)
    for handler in root.handlers:
        handler.setLevel(numeric_level)
    if not root.handlers:
        _attach(root, logging.StreamHandler(), numeric_level)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        if not _log_file_attached(root, path):
            _attach(root, logging.FileHandler(path, encoding="utf-8"), numeric_level)

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))
    return numeric_level
