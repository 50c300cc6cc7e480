"""Process logging for builds and the preview server."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

from blog_gen.config import bounded_int_env

DEFAULT_LOG_PATH = Path("work/logs/blog_gen.log")
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
# Python-Markdown logs every extension load at DEBUG.
NOISY_LOGGERS: dict[str, str] = {"MARKDOWN": "WARNING"}
DISABLED_PATHS = frozenset({"", "-", "off", "none"})

_CONFIGURED = False


@dataclass(frozen=True)
class LoggingSettings:
    """Console level plus optional rotating file output."""

    level: int = logging.INFO
    log_path: Path | None = DEFAULT_LOG_PATH
    max_bytes: int = 2 * 1024 * 1024
    backup_count: int = 5
    access_level: int = logging.WARNING


def _level(raw: str | None, default: int) -> int:
    name = (raw or "").strip().upper()
    value = logging.getLevelName(name) if name else default
    return value if isinstance(value, int) else default


def load_logging_settings(env: Mapping[str, str] | None = None) -> LoggingSettings:
    """Resolve `BLOG_GEN_LOG_*` variables; a log path of `-` or `off` disables the file."""
    source = os.environ if env is None else env
    raw_path = source.get("BLOG_GEN_LOG_PATH")
    if raw_path is None:
        log_path: Path | None = DEFAULT_LOG_PATH
    elif raw_path.strip().lower() in DISABLED_PATHS:
        log_path = None
    else:
        log_path = Path(raw_path.strip())
    return LoggingSettings(
        level=_level(source.get("BLOG_GEN_LOG_LEVEL"), logging.INFO),
        log_path=log_path,
        max_bytes=bounded_int_env(
            source,
            "BLOG_GEN_LOG_MAX_BYTES",
            2 * 1024 * 1024,
            minimum=64 * 1024,
            maximum=50 * 1024 * 1024,
        ),
        backup_count=bounded_int_env(
            source, "BLOG_GEN_LOG_BACKUP_COUNT", 5, minimum=1, maximum=60
        ),
        access_level=_level(source.get("BLOG_GEN_ACCESS_LOG_LEVEL"), logging.WARNING),
    )


def _build_handlers(settings: LoggingSettings) -> list[logging.Handler]:
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_path is not None:
        settings.log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                filename=settings.log_path,
                maxBytes=settings.max_bytes,
                backupCount=settings.backup_count,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_runtime_logging(settings: LoggingSettings | None = None) -> None:
    """Install console and rotating file handlers on the root logger once per process."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = settings or load_logging_settings()
    root = logging.getLogger()
    root.setLevel(resolved.level)
    root.handlers.clear()
    for handler in _build_handlers(resolved):
        root.addHandler(handler)

    for name, level_name in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(level_name)
    logging.getLogger("uvicorn.access").setLevel(resolved.access_level)

    _CONFIGURED = True
    logging.getLogger(__name__).debug(
        "logging.configured level=%s file=%s",
        logging.getLevelName(resolved.level),
        resolved.log_path or "disabled",
    )
