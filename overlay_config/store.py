"""JSON file store holding overlay definitions and global settings.

The controller and every host process open the same file independently. There
is no locking: each ``set`` rewrites the whole document, so concurrent writers
race and the last one wins.
"""
from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from overlay_config.definitions import GlobalSettings, OverlayDefinition, parse_definitions

_LOGGER = logging.getLogger("WebOverlay.Config")

CONFIG_ENV_VAR = "WEB_OVERLAY_CONFIG"
OVERLAYS_KEY = "overlays"
SETTINGS_KEY = "globalSettings"


def default_config_path() -> Path:
    return Path.home() / ".config" / "web-overlay" / "config.json"


def resolve_config_path(arg_path: Optional[Union[str, Path]] = None) -> Path:
    if arg_path:
        return Path(arg_path).expanduser().resolve()
    env_override = os.getenv(CONFIG_ENV_VAR)
    if env_override:
        return Path(env_override).expanduser().resolve()
    return default_config_path()


def default_document() -> Dict[str, Any]:
    return {
        OVERLAYS_KEY: [],
        SETTINGS_KEY: GlobalSettings().to_payload(),
    }


class OverlayStore:
    """Key/value view over the config document at ``path``."""

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_document(self) -> Dict[str, Any]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            _LOGGER.debug("Config not found at %s; using defaults", self._path)
            return default_document()
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            _LOGGER.warning("Failed to parse %s; using defaults (%s)", self._path, exc)
            return default_document()
        if not isinstance(data, dict):
            _LOGGER.warning("Config at %s is not a JSON object; using defaults", self._path)
            return default_document()
        return data

    def _write_document(self, document: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(document, indent=2), encoding="utf-8")

    def get(self, key: str) -> Any:
        document = self._read_document()
        if key in document:
            return document[key]
        return copy.deepcopy(default_document().get(key))

    def set(self, key: str, value: Any) -> None:
        document = self._read_document()
        document[key] = value
        self._write_document(document)

    def load_overlays(self) -> List[OverlayDefinition]:
        return parse_definitions(self.get(OVERLAYS_KEY))

    def load_overlay_entries(self) -> List[Any]:
        """Return the stored ``overlays`` list exactly as written on disk.

        Edits go through this list so entries the loader skips, and keys it
        does not know, survive a rewrite.
        """
        entries = self.get(OVERLAYS_KEY)
        if not isinstance(entries, list):
            return []
        return entries

    def save_overlay_entries(self, entries: Sequence[Any]) -> None:
        self.set(OVERLAYS_KEY, list(entries))

    def save_overlays(self, definitions: Sequence[OverlayDefinition]) -> None:
        self.save_overlay_entries([definition.to_payload() for definition in definitions])

    def load_settings(self) -> GlobalSettings:
        return GlobalSettings.from_payload(self.get(SETTINGS_KEY))

    def save_settings(self, settings: GlobalSettings) -> None:
        self.set(SETTINGS_KEY, settings.to_payload())
