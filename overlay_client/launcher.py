"""Entry point for the overlay host process."""
from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Sequence

from PyQt6.QtWidgets import QApplication

from overlay_client.host import PositionRelay, parse_host_args, quit_on_last_window_closed, run_host
from overlay_client.overlay_window import create_overlay_window
from overlay_client.window_registry import OverlayRegistry
from overlay_config.logging_utils import ROOT_LOGGER_NAME, configure_logger, resolve_log_level
from overlay_config.store import OverlayStore, resolve_config_path

_HOST_LOGGER = logging.getLogger("WebOverlay.Host")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_host_args(sys.argv[1:] if argv is None else argv)

    config_path = resolve_config_path(args.config)
    configure_logger(
        ROOT_LOGGER_NAME,
        "host",
        resolve_log_level(logging.INFO, debug=args.debug),
        log_dir=config_path.parent / "logs",
    )
    _HOST_LOGGER.info(
        "Starting overlay host (pid=%s, overlay=%s)",
        os.getpid(),
        args.overlay_id or "<all>",
    )
    _HOST_LOGGER.debug("Resolved config path to %s", config_path)

    store = OverlayStore(config_path)
    app = QApplication([sys.argv[0], *args.qt_args])
    app.setQuitOnLastWindowClosed(quit_on_last_window_closed())
    registry = OverlayRegistry(
        create_overlay_window,
        _HOST_LOGGER,
        position_sink=PositionRelay(store, _HOST_LOGGER),
    )
    if not run_host(args, registry, store, _HOST_LOGGER):
        return 1

    exit_code = app.exec()
    registry.close_all_overlays()
    _HOST_LOGGER.info("Overlay host exiting with code %s", exit_code)
    return int(exit_code)


if __name__ == "__main__":
    raise SystemExit(main())
