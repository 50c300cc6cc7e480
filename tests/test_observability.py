from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from blog_gen.adapters import observability


@contextmanager
def _isolated_root_logging() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    try:
        yield root
    finally:
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)


def test_configure_runtime_logging_writes_rotating_file(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    log_path = tmp_path / "logs" / "blog.log"
    monkeypatch.setattr(observability, "_CONFIGURED", False)
    monkeypatch.setenv("BLOG_GEN_LOG_PATH", str(log_path))
    monkeypatch.setenv("BLOG_GEN_LOG_LEVEL", "debug")
    monkeypatch.setenv("BLOG_GEN_LOG_BACKUP_COUNT", "500")
    with _isolated_root_logging() as root:
        observability.configure_runtime_logging()
        file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
        assert root.level == logging.DEBUG
        assert len(file_handlers) == 1
        assert file_handlers[0].backupCount == 60
        assert logging.getLogger("MARKDOWN").level == logging.WARNING

        logging.getLogger("blog_gen.test").info("site.build documents=1")
        file_handlers[0].flush()
    assert "site.build documents=1" in log_path.read_text(encoding="utf-8")


def test_configure_runtime_logging_runs_once(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(observability, "_CONFIGURED", False)
    monkeypatch.setenv("BLOG_GEN_LOG_PATH", str(tmp_path / "once.log"))
    with _isolated_root_logging() as root:
        observability.configure_runtime_logging()
        handlers = list(root.handlers)
        observability.configure_runtime_logging()
        assert root.handlers == handlers


def test_load_logging_settings_reads_environment() -> None:
    settings = observability.load_logging_settings(
        {
            "BLOG_GEN_LOG_LEVEL": "nonsense",
            "BLOG_GEN_LOG_PATH": "off",
            "BLOG_GEN_LOG_MAX_BYTES": "1",
            "BLOG_GEN_ACCESS_LOG_LEVEL": "error",
        }
    )
    assert settings.level == logging.INFO
    assert settings.log_path is None
    assert settings.max_bytes == 64 * 1024
    assert settings.access_level == logging.ERROR
    assert observability.load_logging_settings({}).log_path == observability.DEFAULT_LOG_PATH


def test_disabled_log_path_installs_console_only(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(observability, "_CONFIGURED", False)
    with _isolated_root_logging() as root:
        observability.configure_runtime_logging(observability.LoggingSettings(log_path=None))
        assert not any(isinstance(h, RotatingFileHandler) for h in root.handlers)
        assert len(root.handlers) == 1
