from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from kraftokase_mcp.config import Settings

SERVICE_NAME = "kraftokase-mcp"
TASK_LOGGER_NAME = "kraftokase_mcp.tasks"

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_MAX_BYTES = 5 * 1024 * 1024

logger = logging.getLogger(__name__)
task_logger = logging.getLogger(TASK_LOGGER_NAME)

_installed_handlers: list[tuple[logging.Logger, logging.Handler]] = []


def _rotating_handler(path: Path, *, level: int, backup_count: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=str(path),
        maxBytes=_MAX_BYTES,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def _install(target: logging.Logger, handler: logging.Handler) -> None:
    target.addHandler(handler)
    _installed_handlers.append((target, handler))


def configure_logging(settings: Settings) -> None:
    """Install console and rotating file handlers for the service.

    Calling this again removes the handlers from the previous call first, so
    the application factory can run more than once in one process (tests).
    """
    while _installed_handlers:
        target, handler = _installed_handlers.pop()
        target.removeHandler(handler)
        handler.close()

    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    if not settings.is_production:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
        _install(root, console)

    if not settings.LOG_DIR:
        return

    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    _install(root, _rotating_handler(log_dir / "error.log", level=logging.ERROR, backup_count=5))
    _install(root, _rotating_handler(log_dir / "combined.log", level=logging.DEBUG, backup_count=5))
    _install(task_logger, _rotating_handler(log_dir / "tasks.log", level=logging.INFO, backup_count=10))


def _dump(details: dict[str, Any]) -> str:
    return json.dumps(details, default=str, sort_keys=True)


def log_task(task: str, **details: Any) -> None:
    task_logger.info("Task executed: %s %s", task, _dump({"service": SERVICE_NAME, **details}))


def log_error(exc: BaseException, **context: Any) -> None:
    logger.error("Error occurred: %s %s", exc, _dump(context), exc_info=exc)
