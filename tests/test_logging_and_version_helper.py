from __future__ import annotations

import io
import logging

import pytest

from overlay_config import logging_utils
from overlay_config import version as version_module


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, False),
        ("1", True),
        ("TRUE", True),
        (" on ", True),
        ("0", False),
        ("off", False),
        ("maybe", False),
    ],
)
def test_is_dev_build_reads_env_switch(monkeypatch, value, expected):
    if value is None:
        monkeypatch.delenv(version_module.DEV_MODE_ENV_VAR, raising=False)
    else:
        monkeypatch.setenv(version_module.DEV_MODE_ENV_VAR, value)
    assert version_module.is_dev_build() is expected


def test_dev_mode_forces_debug_level(monkeypatch):
    monkeypatch.setenv(version_module.DEV_MODE_ENV_VAR, "1")
    monkeypatch.setenv(logging_utils.LOG_LEVEL_ENV_VAR, "ERROR")
    assert logging_utils.resolve_log_level() == logging.DEBUG


def test_resolve_log_level_prefers_debug_flag(monkeypatch):
    monkeypatch.setenv(version_module.DEV_MODE_ENV_VAR, "0")
    monkeypatch.setenv(logging_utils.LOG_LEVEL_ENV_VAR, "ERROR")
    assert logging_utils.resolve_log_level(debug=True) == logging.DEBUG
    assert logging_utils.resolve_log_level() == logging.ERROR


@pytest.mark.parametrize("hint, expected", [("10", logging.DEBUG), ("info", logging.INFO), ("bogus", logging.WARNING)])
def test_resolve_log_level_reads_env_hint(monkeypatch, hint, expected):
    monkeypatch.setenv(version_module.DEV_MODE_ENV_VAR, "0")
    monkeypatch.setenv(logging_utils.LOG_LEVEL_ENV_VAR, hint)
    assert logging_utils.resolve_log_level(logging.WARNING) == expected


def test_configure_logger_attaches_handlers_once(tmp_path):
    stream = io.StringIO()
    name = "WebOverlay.TestConfigure"
    logger = logging_utils.configure_logger(name, "test", logging.INFO, stream=stream, log_dir=tmp_path)
    logging_utils.configure_logger(name, "test", logging.INFO, stream=stream, log_dir=tmp_path)
    try:
        assert len(logger.handlers) == 2
        assert logger.propagate is False
        logger.info("hello %s", "overlay")
        for handler in logger.handlers:
            handler.flush()
        assert "[test] INFO hello overlay" in stream.getvalue()
        log_text = (tmp_path / logging_utils.HOST_LOG_FILENAME).read_text(encoding="utf-8")
        assert "hello overlay" in log_text
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()


def test_build_rotating_file_handler_respects_retention(tmp_path):
    handler = logging_utils.build_rotating_file_handler(
        tmp_path / "logs",
        "host.log",
        retention=0,
        max_bytes=1024,
    )
    try:
        assert handler.backupCount == 0
        assert (tmp_path / "logs").is_dir()
    finally:
        handler.close()


def test_configure_logger_defaults_to_stderr(capsys):
    name = "WebOverlay.TestStderr"
    logger = logging_utils.configure_logger(name, "stderr-test", logging.WARNING)
    try:
        logger.warning("to stderr")
        captured = capsys.readouterr()
        assert "[stderr-test] WARNING to stderr" in captured.err
        replacement = io.StringIO()
        logger.handlers[0].setStream(replacement)
        logger.warning("redirected")
        assert "redirected" in replacement.getvalue()
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
