"""Central version identifier for web-overlay."""
from __future__ import annotations

import os
from typing import Optional

__all__ = ["__version__", "is_dev_build", "DEV_MODE_ENV_VAR"]

__version__ = "0.1.11"
DEV_MODE_ENV_VAR = "WEB_OVERLAY_DEV_MODE"


def _coerce_bool(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def is_dev_build() -> bool:
    """Return True when ``WEB_OVERLAY_DEV_MODE`` asks for forced debug logging."""
    return _coerce_bool(os.getenv(DEV_MODE_ENV_VAR))
