from __future__ import annotations

import logging

import pytest

from overlay_client.window_registry import OverlayRegistry
from overlay_config.definitions import OverlayDefinition, Position, Size


class _Signal:
    def __init__(self) -> None:
        self._slots = []

    def connect(self, slot) -> None:
        self._slots.append(slot)

    def emit(self, *args) -> None:
        for slot in list(self._slots):
            slot(*args)


class _StubWindow:
    def __init__(self, geometry, opacity, click_through, always_on_top, title) -> None:
        self.geometry = geometry
        self.opacity = opacity
        self.click_through = click_through
        self.always_on_top = always_on_top
        self.title = title
        self.loaded = []
        self.close_calls = 0
        self.closed = _Signal()
        self.load_failed = _Signal()
        self.console_message = _Signal()
        self.moved = _Signal()

    def load_url(self, url: str) -> None:
        self.loaded.append(url)

    def close(self) -> bool:
        self.close_calls += 1
        self.closed.emit()
        return True


class _Factory:
    def __init__(self) -> None:
        self.windows = []

    def __call__(self, *args):
        window = _StubWindow(*args)
        self.windows.append(window)
        return window


def _definition(overlay_id: str = "hud", **overrides) -> OverlayDefinition:
    values = dict(
        id=overlay_id,
        url="https://example.com/hud",
        name="Heads Up",
        position=Position(x=15, y=25),
        size=Size(width=640, height=120),
        opacity=0.6,
        click_through=False,
        always_on_top=True,
    )
    values.update(overrides)
    return OverlayDefinition(**values)


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("WebOverlay.Host.test")


def test_create_overlay_applies_definition(logger: logging.Logger) -> None:
    factory = _Factory()
    registry = OverlayRegistry(factory, logger)

    handle = registry.create_overlay(_definition())

    assert handle is factory.windows[0]
    assert (handle.geometry.x, handle.geometry.y, handle.geometry.width, handle.geometry.height) == (15, 25, 640, 120)
    assert handle.opacity == 0.6
    assert handle.click_through is False
    assert handle.always_on_top is True
    assert handle.title == "Heads Up"
    assert handle.loaded == ["https://example.com/hud"]
    assert "hud" in registry
    assert registry.get("hud") is handle


def test_create_overlay_appends_websocket_parameter(logger: logging.Logger) -> None:
    factory = _Factory()
    registry = OverlayRegistry(factory, logger)

    registry.create_overlay(_definition(ws_uri="ws://localhost:9000"))

    assert factory.windows[0].loaded == ["https://example.com/hud?OVERLAY_WS=ws%3A%2F%2Flocalhost%3A9000"]


def test_close_overlay_deregisters_through_notification(logger: logging.Logger) -> None:
    registry = OverlayRegistry(_Factory(), logger)
    handle = registry.create_overlay(_definition())

    registry.close_overlay("hud")

    assert handle.close_calls == 1
    assert "hud" not in registry
    registry.close_overlay("hud")
    assert handle.close_calls == 1


def test_user_closed_window_leaves_registry(logger: logging.Logger) -> None:
    registry = OverlayRegistry(_Factory(), logger)
    handle = registry.create_overlay(_definition())

    handle.closed.emit()

    assert len(registry) == 0


def test_replaced_window_closing_keeps_successor(logger: logging.Logger) -> None:
    registry = OverlayRegistry(_Factory(), logger)
    first = registry.create_overlay(_definition())
    second = registry.create_overlay(_definition())

    first.closed.emit()

    assert registry.get("hud") is second


def test_close_all_overlays(logger: logging.Logger) -> None:
    registry = OverlayRegistry(_Factory(), logger)
    handles = [registry.create_overlay(_definition(overlay_id)) for overlay_id in ("a", "b")]

    registry.close_all_overlays()

    assert [handle.close_calls for handle in handles] == [1, 1]
    assert registry.ids() == []


def test_load_failure_is_logged(logger: logging.Logger, caplog: pytest.LogCaptureFixture) -> None:
    registry = OverlayRegistry(_Factory(), logger)
    handle = registry.create_overlay(_definition())

    with caplog.at_level(logging.ERROR, logger=logger.name):
        handle.load_failed.emit(-3, "Host not found")

    assert "Failed to load URL for overlay hud" in caplog.text
    assert "Host not found" in caplog.text
    assert "hud" in registry


def test_moves_reach_position_sink(logger: logging.Logger) -> None:
    moves = []
    registry = OverlayRegistry(_Factory(), logger, position_sink=lambda *args: moves.append(args))
    handle = registry.create_overlay(_definition())

    handle.moved.emit(300, 400)

    assert moves == [("hud", 300, 400)]
