from __future__ import annotations

import json
from pathlib import Path

import pytest

from overlay_config import store as store_module
from overlay_config.definitions import GlobalSettings, OverlayDefinition, Position
from overlay_config.store import OverlayStore


def _read(path: Path) -> dict[str, object]:
    return json.loads(path.read_text(encoding="utf-8"))


def test_missing_file_reads_defaults(tmp_path: Path) -> None:
    store = OverlayStore(tmp_path / "config.json")

    assert store.get("overlays") == []
    assert store.get("globalSettings") == {
        "startWithSystem": False,
        "defaultOpacity": 0.9,
        "defaultClickThrough": True,
    }
    assert store.load_overlays() == []
    assert not (tmp_path / "config.json").exists()


def test_set_creates_parent_directories_and_keeps_other_keys(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "dir" / "config.json"
    store = OverlayStore(path)

    store.set("globalSettings", {"startWithSystem": True, "defaultOpacity": 0.5, "defaultClickThrough": False})
    store.set("overlays", [{"id": "a", "url": "file:///a.html"}])

    document = _read(path)
    assert document["overlays"] == [{"id": "a", "url": "file:///a.html"}]
    assert document["globalSettings"]["startWithSystem"] is True


def test_invalid_json_falls_back_to_defaults(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    store = OverlayStore(path)

    with caplog.at_level("WARNING", logger="WebOverlay.Config"):
        assert store.get("overlays") == []
    assert any("Failed to parse" in record.getMessage() for record in caplog.records)


def test_non_object_document_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    assert OverlayStore(path).load_settings() == GlobalSettings()


def test_overlays_round_trip_in_camel_case(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    store = OverlayStore(path)
    definitions = [
        OverlayDefinition(id="one", url="https://example.com", ws_uri="ws://localhost:9000"),
        OverlayDefinition(id="two", url="file:///two.html", name="Second", click_through=False),
    ]

    store.save_overlays(definitions)

    stored = _read(path)["overlays"]
    assert [entry["id"] for entry in stored] == ["one", "two"]
    assert stored[0]["wsUri"] == "ws://localhost:9000"
    assert "wsUri" not in stored[1]
    assert stored[1]["clickThrough"] is False
    assert store.load_overlays() == definitions


def test_position_update_persists(tmp_path: Path) -> None:
    store = OverlayStore(tmp_path / "config.json")
    store.save_overlays([OverlayDefinition(id="one", url="u")])

    definitions = store.load_overlays()
    definitions[0].position = Position(5, 6)
    store.save_overlays(definitions)

    assert store.load_overlays()[0].position == Position(5, 6)


def test_settings_round_trip(tmp_path: Path) -> None:
    store = OverlayStore(tmp_path / "config.json")
    settings = GlobalSettings(start_with_system=True, default_opacity=0.4, default_click_through=False)

    store.save_settings(settings)

    assert store.load_settings() == settings


def test_resolve_config_path_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_path = tmp_path / "env.json"
    arg_path = tmp_path / "arg.json"
    monkeypatch.setenv(store_module.CONFIG_ENV_VAR, str(env_path))

    assert store_module.resolve_config_path(str(arg_path)) == arg_path.resolve()
    assert store_module.resolve_config_path(None) == env_path.resolve()

    monkeypatch.delenv(store_module.CONFIG_ENV_VAR)
    assert store_module.resolve_config_path(None) == store_module.default_config_path()
    assert store_module.default_config_path().parts[-3:] == (".config", "web-overlay", "config.json")


def test_overlay_entries_are_returned_unparsed(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    entries = [{"id": "a", "url": "u", "custom": 1}, {"url": "no-id"}, 3]
    path.write_text(json.dumps({"overlays": entries}), encoding="utf-8")
    store = OverlayStore(path)

    assert store.load_overlay_entries() == entries
    assert [definition.id for definition in store.load_overlays()] == ["a"]

    store.save_overlay_entries(store.load_overlay_entries())
    assert json.loads(path.read_text(encoding="utf-8"))["overlays"] == entries


def test_overlay_entries_non_list_reads_empty(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"overlays": {"id": "a"}}), encoding="utf-8")

    assert OverlayStore(path).load_overlay_entries() == []
