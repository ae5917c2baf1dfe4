from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional, TextIO

from overlay_config.version import is_dev_build

ROOT_LOGGER_NAME = "WebOverlay"
LOG_LEVEL_ENV_VAR = "WEB_OVERLAY_LOG_LEVEL"
HOST_LOG_FILENAME = "overlay-host.log"
HOST_LOG_MAX_BYTES = 512 * 1024
HOST_LOG_RETENTION = 3


def _coerce_level(value: Any) -> Optional[int]:
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    attr = getattr(logging, text.upper(), None)
    if isinstance(attr, int):
        return int(attr)
    return None


def resolve_log_level(default: int = logging.WARNING, *, debug: bool = False) -> int:
    """Pick the logger level from the debug flag, dev mode and the env hint."""
    if debug or is_dev_build():
        return logging.DEBUG
    env_level = _coerce_level(os.getenv(LOG_LEVEL_ENV_VAR))
    if env_level is not None:
        return env_level
    return default


def build_rotating_file_handler(
    log_dir: Path,
    filename: str,
    *,
    retention: int,
    max_bytes: int,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler, creating ``log_dir`` if needed."""
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / filename,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    handler.setLevel(logging.DEBUG)
    return handler


def configure_logger(
    name: str,
    tag: str,
    level: int,
    *,
    stream: Optional[TextIO] = None,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Attach the stream (and optional file) handler to ``name`` once."""
    logger = logging.getLogger(name)
    logger.setLevel(level)
    formatter = logging.Formatter(f"[%(asctime)s] [{tag}] %(levelname)s %(message)s", "%H:%M:%S")
    if not any(getattr(handler, "_web_overlay_stream", False) for handler in logger.handlers):
        handler = logging.StreamHandler(stream)
        handler._web_overlay_stream = True  # type: ignore[attr-defined]
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    if log_dir is not None and not any(getattr(handler, "_web_overlay_file", False) for handler in logger.handlers):
        try:
            file_handler = build_rotating_file_handler(
                log_dir,
                HOST_LOG_FILENAME,
                retention=HOST_LOG_RETENTION,
                max_bytes=HOST_LOG_MAX_BYTES,
                formatter=formatter,
            )
        except OSError as exc:
            logger.warning("File logging unavailable in %s: %s", log_dir, exc)
        else:
            file_handler._web_overlay_file = True  # type: ignore[attr-defined]
            logger.addHandler(file_handler)
    logger.propagate = False
    return logger
