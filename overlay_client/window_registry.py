"""Registry of live overlay windows inside one host process.

Windows are reached only through the handle protocol below, so the registry
never imports Qt. All handlers run on the host's single event loop, so the
mapping needs no locking.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol

from overlay_client.overlay_urls import effective_url
from overlay_config.definitions import OverlayDefinition, WindowGeometry

PositionSink = Callable[[str, int, int], None]


class _Signal(Protocol):
    def connect(self, slot: Callable[..., Any]) -> Any: ...


class WindowHandle(Protocol):
    closed: _Signal
    load_failed: _Signal
    console_message: _Signal
    moved: _Signal

    def load_url(self, url: str) -> None: ...
    def close(self) -> Any: ...


class WindowFactory(Protocol):
    def __call__(
        self,
        geometry: WindowGeometry,
        opacity: float,
        click_through: bool,
        always_on_top: bool,
        title: str,
    ) -> WindowHandle: ...


class OverlayRegistry:
    """Map overlay ids to their live window handles."""

    def __init__(
        self,
        window_factory: WindowFactory,
        logger: logging.Logger,
        *,
        position_sink: Optional[PositionSink] = None,
    ) -> None:
        self._window_factory = window_factory
        self._logger = logger
        self._position_sink = position_sink
        self._windows: Dict[str, WindowHandle] = {}

    def __contains__(self, overlay_id: object) -> bool:
        return overlay_id in self._windows

    def __len__(self) -> int:
        return len(self._windows)

    def get(self, overlay_id: str) -> Optional[WindowHandle]:
        return self._windows.get(overlay_id)

    def ids(self) -> List[str]:
        return list(self._windows)

    def create_overlay(self, definition: OverlayDefinition) -> WindowHandle:
        """Create, wire and load a window for ``definition``.

        A window already registered under the same id is replaced, not
        closed; callers avoid creating duplicates.
        """
        overlay_id = definition.id
        url = effective_url(definition)
        self._logger.debug(
            "Creating overlay id=%s name=%s url=%s ws_uri=%s",
            overlay_id,
            definition.name,
            definition.url,
            definition.ws_uri,
        )
        handle = self._window_factory(
            definition.geometry,
            definition.opacity,
            definition.click_through,
            definition.always_on_top,
            definition.title,
        )
        handle.closed.connect(lambda: self._handle_closed(overlay_id, handle))
        handle.load_failed.connect(
            lambda code, description: self._handle_load_failed(overlay_id, url, code, description)
        )
        handle.console_message.connect(lambda level, text: self._handle_console_message(overlay_id, level, text))
        handle.moved.connect(lambda x, y: self._handle_moved(overlay_id, x, y))
        self._windows[overlay_id] = handle
        self._logger.debug("Constructed overlay URL for %s: %s", overlay_id, url)
        handle.load_url(url)
        return handle

    def close_overlay(self, overlay_id: str) -> None:
        """Request the window to close; the closed notification deregisters it."""
        handle = self._windows.get(overlay_id)
        if handle is None:
            return
        handle.close()

    def close_all_overlays(self) -> None:
        for handle in list(self._windows.values()):
            handle.close()
        self._windows.clear()

    # Notification handlers -------------------------------------------------

    def _handle_closed(self, overlay_id: str, handle: WindowHandle) -> None:
        # A replaced window closing must not evict its successor.
        if self._windows.get(overlay_id) is handle:
            del self._windows[overlay_id]
            self._logger.debug("Overlay %s closed", overlay_id)

    def _handle_load_failed(self, overlay_id: str, url: str, code: int, description: str) -> None:
        self._logger.error(
            "Failed to load URL for overlay %s: url=%s code=%s description=%s",
            overlay_id,
            url,
            code,
            description,
        )

    def _handle_console_message(self, overlay_id: str, level: int, text: str) -> None:
        self._logger.debug("Page console [%s] level=%s: %s", overlay_id, level, text)

    def _handle_moved(self, overlay_id: str, x: int, y: int) -> None:
        if self._position_sink is not None:
            self._position_sink(overlay_id, x, y)
