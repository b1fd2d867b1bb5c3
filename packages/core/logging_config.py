from __future__ import annotations

import logging
import logging.config
import os
from typing import Any, Dict, Optional


def _log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def _log_destination() -> str:
    return os.getenv("LOG_DESTINATION", "stdout").lower()


def _log_file_path() -> Optional[str]:
    return os.getenv("LOG_FILE")


def _ticker_log_level() -> str:
    # the ticker runs every second; job-level INFO lines would flood the log
    return os.getenv("TICKER_LOG_LEVEL", "WARNING").upper()


def _handler(destination: str, level: str) -> Dict[str, Any]:
    if destination == "file":
        log_file = _log_file_path()
        if not log_file:
            raise RuntimeError("LOG_FILE is required when LOG_DESTINATION=file")
        return {
            "class": "logging.FileHandler",
            "level": level,
            "filename": log_file,
            "encoding": "utf-8",
            "formatter": "standard",
        }
    stream = "ext://sys.stdout" if destination == "stdout" else "ext://sys.stderr"
    return {
        "class": "logging.StreamHandler",
        "level": level,
        "stream": stream,
        "formatter": "standard",
    }


def configure_logging(level: Optional[str] = None) -> None:
    level = (level or _log_level()).upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
                }
            },
            "handlers": {"default": _handler(_log_destination(), level)},
            "loggers": {
                "breaktime": {"level": level},
                "apscheduler": {"level": _ticker_log_level()},
            },
            "root": {"handlers": ["default"], "level": level},
        }
    )
