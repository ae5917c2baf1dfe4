"""Frameless, translucent PyQt6 window rendering one overlay URL."""
from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QPoint, Qt, QTimer, QUrl, pyqtSignal
from PyQt6.QtGui import QCloseEvent, QColor, QMoveEvent
from PyQt6.QtWebEngineCore import QWebEngineLoadingInfo, QWebEnginePage
from PyQt6.QtWebEngineWidgets import QWebEngineView
from PyQt6.QtWidgets import QWidget

from overlay_config.definitions import WindowGeometry


class _OverlayPage(QWebEnginePage):
    """Page that forwards JavaScript console output as a signal."""

    console_message = pyqtSignal(int, str)

    def javaScriptConsoleMessage(self, level, message, line_number, source_id):  # noqa: N802 - Qt override
        self.console_message.emit(int(level.value), f"{message} ({source_id}:{line_number})")


class OverlayWindow(QWebEngineView):
    """Top-level overlay window.

    Emits ``closed`` from its close event, ``load_failed(code, description)``
    when the page fails to load, ``console_message(level, text)`` for page
    console output and ``moved(x, y)`` once a move settles.
    """

    closed = pyqtSignal()
    load_failed = pyqtSignal(int, str)
    console_message = pyqtSignal(int, str)
    moved = pyqtSignal(int, int)

    _MOVE_DEBOUNCE_MS = 250

    def __init__(
        self,
        geometry: WindowGeometry,
        opacity: float,
        click_through: bool,
        always_on_top: bool,
        title: str,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._click_through = click_through
        self._last_reported = QPoint(geometry.x, geometry.y)

        page = _OverlayPage(self)
        page.setBackgroundColor(QColor(0, 0, 0, 0))
        page.console_message.connect(self.console_message)
        page.loadingChanged.connect(self._on_loading_changed)
        self.setPage(page)

        self._move_timer = QTimer(self)
        self._move_timer.setSingleShot(True)
        self._move_timer.setInterval(self._MOVE_DEBOUNCE_MS)
        self._move_timer.timeout.connect(self._emit_moved)

        self.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose, True)
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground, True)
        self.setAttribute(Qt.WidgetAttribute.WA_ShowWithoutActivating, True)
        window_flags = Qt.WindowType.FramelessWindowHint | Qt.WindowType.Tool | Qt.WindowType.Window
        if always_on_top:
            window_flags |= Qt.WindowType.WindowStaysOnTopHint
        if click_through:
            window_flags |= Qt.WindowType.WindowTransparentForInput | Qt.WindowType.WindowDoesNotAcceptFocus
        self.setWindowFlags(window_flags)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, click_through)
        if click_through:
            self.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        self.setStyleSheet("background: transparent;")
        self.setWindowTitle(title)
        self.setWindowOpacity(max(0.0, min(float(opacity), 1.0)))
        self.setGeometry(geometry.x, geometry.y, geometry.width, geometry.height)

    def load_url(self, url: str) -> None:
        self.load(QUrl(url))

    def showEvent(self, event) -> None:  # noqa: N802 - Qt override
        super().showEvent(event)
        # Some platforms drop the flag set before the native window existed.
        handle = self.windowHandle()
        if handle is not None and self._click_through:
            handle.setFlag(Qt.WindowType.WindowTransparentForInput, True)

    def moveEvent(self, event: QMoveEvent) -> None:  # noqa: N802 - Qt override
        super().moveEvent(event)
        self._move_timer.start()

    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802 - Qt override
        self._move_timer.stop()
        super().closeEvent(event)
        if event.isAccepted():
            self.closed.emit()

    def _emit_moved(self) -> None:
        position = self.pos()
        if position == self._last_reported:
            return
        self._last_reported = QPoint(position)
        self.moved.emit(position.x(), position.y())

    def _on_loading_changed(self, info: QWebEngineLoadingInfo) -> None:
        if info.status() == QWebEngineLoadingInfo.LoadStatus.LoadFailedStatus:
            self.load_failed.emit(int(info.errorCode()), str(info.errorString()))


def create_overlay_window(
    geometry: WindowGeometry,
    opacity: float,
    click_through: bool,
    always_on_top: bool,
    title: str,
) -> OverlayWindow:
    """Window primitive used by the registry: build, show and return a window."""
    window = OverlayWindow(geometry, opacity, click_through, always_on_top, title)
    window.show()
    return window
