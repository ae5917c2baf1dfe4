"""Overlay definitions and global settings as persisted in the store."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

_LOGGER = logging.getLogger("WebOverlay.Config")

DEFAULT_X = 100
DEFAULT_Y = 100
DEFAULT_WIDTH = 400
DEFAULT_HEIGHT = 300
DEFAULT_OPACITY = 0.9
DEFAULT_CLICK_THROUGH = True
DEFAULT_ALWAYS_ON_TOP = False


def _coerce_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(numeric):
        return default
    return int(numeric)


def _coerce_float(value: Any, default: float, *, minimum: float, maximum: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(numeric):
        return default
    return max(minimum, min(numeric, maximum))


def _coerce_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        token = value.strip().lower()
        if token in {"1", "true", "yes", "on"}:
            return True
        if token in {"0", "false", "no", "off"}:
            return False
        return default
    return bool(value)


def _coerce_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class Position:
    x: int = DEFAULT_X
    y: int = DEFAULT_Y


@dataclass(frozen=True)
class Size:
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT


@dataclass(frozen=True)
class WindowGeometry:
    """Pixel rectangle handed to the window primitive."""

    x: int
    y: int
    width: int
    height: int


@dataclass
class OverlayDefinition:
    """Persisted configuration for one overlay window.

    ``id`` is the only handle the controller and host use to address the
    overlay. ``ws_uri`` stays separate from ``url`` on disk; it is only merged
    into the load target when a window is created.
    """

    id: str
    url: str
    name: str = ""
    ws_uri: Optional[str] = None
    position: Position = field(default_factory=Position)
    size: Size = field(default_factory=Size)
    opacity: float = DEFAULT_OPACITY
    click_through: bool = DEFAULT_CLICK_THROUGH
    always_on_top: bool = DEFAULT_ALWAYS_ON_TOP

    def __post_init__(self) -> None:
        if not self.name:
            self.name = self.id

    @property
    def title(self) -> str:
        return self.name or self.id

    @property
    def geometry(self) -> WindowGeometry:
        return WindowGeometry(self.position.x, self.position.y, self.size.width, self.size.height)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "OverlayDefinition":
        """Build a definition from a stored JSON object.

        Raises ``ValueError`` when the payload has no usable ``id``.
        """
        overlay_id = _coerce_optional_str(payload.get("id"))
        if overlay_id is None:
            raise ValueError("overlay definition is missing an id")
        position = payload.get("position")
        if not isinstance(position, Mapping):
            position = {}
        size = payload.get("size")
        if not isinstance(size, Mapping):
            size = {}
        return cls(
            id=overlay_id,
            url=str(payload.get("url") or ""),
            name=_coerce_optional_str(payload.get("name")) or overlay_id,
            ws_uri=_coerce_optional_str(payload.get("wsUri")),
            position=Position(
                x=_coerce_int(position.get("x"), DEFAULT_X),
                y=_coerce_int(position.get("y"), DEFAULT_Y),
            ),
            size=Size(
                width=_coerce_int(size.get("width"), DEFAULT_WIDTH),
                height=_coerce_int(size.get("height"), DEFAULT_HEIGHT),
            ),
            opacity=_coerce_float(payload.get("opacity"), DEFAULT_OPACITY, minimum=0.0, maximum=1.0),
            click_through=_coerce_bool(payload.get("clickThrough"), DEFAULT_CLICK_THROUGH),
            always_on_top=_coerce_bool(payload.get("alwaysOnTop"), DEFAULT_ALWAYS_ON_TOP),
        )

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "url": self.url,
        }
        if self.ws_uri:
            payload["wsUri"] = self.ws_uri
        payload.update(
            {
                "position": {"x": int(self.position.x), "y": int(self.position.y)},
                "size": {"width": int(self.size.width), "height": int(self.size.height)},
                "opacity": float(self.opacity),
                "clickThrough": bool(self.click_through),
                "alwaysOnTop": bool(self.always_on_top),
            }
        )
        return payload


@dataclass
class GlobalSettings:
    """Defaults applied by the controller when a definition is created."""

    start_with_system: bool = False
    default_opacity: float = DEFAULT_OPACITY
    default_click_through: bool = DEFAULT_CLICK_THROUGH

    @classmethod
    def from_payload(cls, payload: Any) -> "GlobalSettings":
        if not isinstance(payload, Mapping):
            return cls()
        return cls(
            start_with_system=_coerce_bool(payload.get("startWithSystem"), False),
            default_opacity=_coerce_float(
                payload.get("defaultOpacity"), DEFAULT_OPACITY, minimum=0.0, maximum=1.0
            ),
            default_click_through=_coerce_bool(payload.get("defaultClickThrough"), DEFAULT_CLICK_THROUGH),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "startWithSystem": bool(self.start_with_system),
            "defaultOpacity": float(self.default_opacity),
            "defaultClickThrough": bool(self.default_click_through),
        }


def parse_definitions(entries: Any) -> List[OverlayDefinition]:
    """Coerce the stored ``overlays`` value, skipping unusable entries."""
    if not isinstance(entries, list):
        if entries is not None:
            _LOGGER.warning("Stored overlays value is not a list (%s); treating as empty", type(entries).__name__)
        return []
    definitions: List[OverlayDefinition] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            _LOGGER.warning("Skipping overlay entry %d: not an object", index)
            continue
        try:
            definitions.append(OverlayDefinition.from_payload(entry))
        except ValueError as exc:
            _LOGGER.warning("Skipping overlay entry %d: %s", index, exc)
    return definitions


def find_definition(definitions: Iterable[OverlayDefinition], overlay_id: str) -> Optional[OverlayDefinition]:
    for definition in definitions:
        if definition.id == overlay_id:
            return definition
    return None


def entry_id(entry: Any) -> Optional[str]:
    """Return the id a stored overlay entry would load under, or None."""
    if not isinstance(entry, Mapping):
        return None
    return _coerce_optional_str(entry.get("id"))
