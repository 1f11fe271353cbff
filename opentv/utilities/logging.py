"""Centralized logging configuration for opentv.

Provides structured logging with console and file output.
Call setup_logging() once at application startup.

Usage:
    # At startup
    from opentv.utilities.logging import setup_logging
    setup_logging()

    # In any module (standard Python pattern)
    import logging
    logger = logging.getLogger(__name__)
    logger.info("[MODULE] Something happened: %s", value)

Environment variables:
    LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
    LOG_DIR: Directory for log files (default: <app data dir>/logs)
    LOG_FORMAT: "text" or "json" (default: text)
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Track if logging has been configured
_configured = False


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
            "thread": record.threadName,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def _get_log_dir() -> Path:
    """Determine log directory."""
    if env_dir := os.getenv("LOG_DIR"):
        return Path(env_dir)

    # Logs live beside the database in the per-OS data directory
    from opentv.config import Config

    return Config.get_data_dir() / "logs"


def _get_log_level() -> int:
    """Get log level from environment."""
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def _get_formatter(use_json: bool = False) -> logging.Formatter:
    """Get the appropriate formatter."""
    if use_json:
        return JSONFormatter()

    return logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _rotating_handler(
    path: Path, level: int, backup_count: int, formatter: logging.Formatter
) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: str | None = None,
    log_dir: str | Path | None = None,
    use_json: bool | None = None,
) -> None:
    """Initialize the logging system.

    Call this once at application startup, before open_database(), so
    schema and migration messages are captured. Later calls are no-ops.

    Args:
        log_level: Override LOG_LEVEL env var
        log_dir: Override LOG_DIR env var
        use_json: Override LOG_FORMAT env var (True for JSON output)
    """
    global _configured
    if _configured:
        return

    level = getattr(logging, (log_level or "").upper(), None) or _get_log_level()
    log_path = Path(log_dir) if log_dir else _get_log_dir()
    if use_json is None:
        use_json = os.getenv("LOG_FORMAT", "text").lower() == "json"

    log_path.mkdir(parents=True, exist_ok=True)
    formatter = _get_formatter(use_json)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)
    # Everything goes to the main file; errors are duplicated into their own
    root_logger.addHandler(
        _rotating_handler(log_path / "opentv.log", logging.DEBUG, 3, formatter)
    )
    root_logger.addHandler(
        _rotating_handler(log_path / "opentv_errors.log", logging.ERROR, 2, formatter)
    )

    _configured = True

    from opentv.config import VERSION, Config

    logger = logging.getLogger("opentv")
    logger.info("[STARTUP] opentv %s", VERSION)
    logger.info("[STARTUP] Database: %s", Config.get_database_path())
    logger.info(
        "[STARTUP] Log directory: %s (%s, %s)",
        log_path,
        logging.getLevelName(level),
        "json" if use_json else "text",
    )
