"""Start-up dispatch and position relay for the overlay host process."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Dict, Optional, Sequence

from overlay_client.window_registry import OverlayRegistry
from overlay_config.definitions import entry_id, find_definition
from overlay_config.errors import OverlayNotFoundError
from overlay_config.store import OverlayStore

_DEBUG_ENV_KEYS = (
    "DESKTOP_SESSION",
    "XDG_CURRENT_DESKTOP",
    "XDG_SESSION_TYPE",
    "WAYLAND_DISPLAY",
    "DISPLAY",
    "QT_QPA_PLATFORM",
)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="web-overlay host process")
    parser.add_argument("--overlay-id", dest="overlay_id", help="Run only the overlay with this id")
    parser.add_argument("--config", help="Path to config file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def quit_on_last_window_closed(platform: Optional[str] = None) -> bool:
    """Non-Darwin hosts exit once their last window closes; macOS hosts stay up."""
    return (platform or sys.platform) != "darwin"


def display_environment(environ: Optional[Dict[str, str]] = None) -> Dict[str, Optional[str]]:
    source = os.environ if environ is None else environ
    return {key: source.get(key) for key in _DEBUG_ENV_KEYS}


def start_overlays(
    registry: OverlayRegistry,
    store: OverlayStore,
    overlay_id: Optional[str],
    logger: logging.Logger,
) -> int:
    """Create the windows this host is responsible for.

    With an id, exactly that overlay is created and a missing definition
    raises :class:`OverlayNotFoundError` before anything is created. Without
    one, every stored overlay is created in order; an empty list is fine.
    Returns the number of windows created.
    """
    definitions = store.load_overlays()
    if overlay_id is not None:
        definition = find_definition(definitions, overlay_id)
        if definition is None:
            raise OverlayNotFoundError(overlay_id)
        registry.create_overlay(definition)
        logger.debug('Started overlay "%s"', overlay_id)
        return 1
    logger.debug("Loaded %d overlay definition(s) from %s", len(definitions), store.path)
    if not definitions:
        logger.info("No overlays configured in %s", store.path)
    for definition in definitions:
        registry.create_overlay(definition)
    return len(definitions)


class PositionRelay:
    """Write window moves back into the stored overlay entry.

    The stored list is re-read on every move and only the moved entry's
    ``position`` is rewritten; other entries and unknown keys are left alone.
    Moves for ids that are no longer stored are dropped.
    """

    def __init__(self, store: OverlayStore, logger: logging.Logger) -> None:
        self._store = store
        self._logger = logger

    def __call__(self, overlay_id: str, x: int, y: int) -> None:
        self.handle_position(overlay_id, x, y)

    def handle_position(self, overlay_id: str, x: int, y: int) -> bool:
        entries = self._store.load_overlay_entries()
        entry = next((item for item in entries if entry_id(item) == overlay_id), None)
        if entry is None:
            self._logger.debug("Dropping move for unknown overlay %s", overlay_id)
            return False
        position = entry.get("position")
        if isinstance(position, dict):
            position.update(x=int(x), y=int(y))
        else:
            entry["position"] = {"x": int(x), "y": int(y)}
        self._store.save_overlay_entries(entries)
        self._logger.debug("Stored position for %s: %d, %d", overlay_id, x, y)
        return True


def run_host(
    args: argparse.Namespace,
    registry: OverlayRegistry,
    store: OverlayStore,
    logger: logging.Logger,
) -> bool:
    """Apply the start-up state; False means the host must exit immediately."""
    if args.debug:
        logger.debug("Process environment: %s", display_environment())
    try:
        start_overlays(registry, store, args.overlay_id, logger)
    except OverlayNotFoundError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        logger.error("%s; host exiting", exc)
        return False
    return True


def parse_host_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = build_arg_parser()
    # Options this parser does not know (e.g. -platform xcb) are handed to QApplication.
    args, unknown = parser.parse_known_args(argv)
    args.qt_args = list(unknown)
    return args
