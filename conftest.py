from __future__ import annotations

import logging

import pytest

from overlay_config.logging_utils import ROOT_LOGGER_NAME


@pytest.fixture(autouse=True)
def _reset_overlay_logger():
    """Undo handler/propagation changes made by CLI and host entry points."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(logger.handlers)
    propagate = logger.propagate
    level = logger.level
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.propagate = propagate
    logger.setLevel(level)
