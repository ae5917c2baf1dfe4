"""Controller actions over the overlay store and host processes."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional

from overlay_config.definitions import (
    DEFAULT_ALWAYS_ON_TOP,
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    DEFAULT_X,
    DEFAULT_Y,
    OverlayDefinition,
    Position,
    Size,
    entry_id,
    find_definition,
    parse_definitions,
)
from overlay_config.errors import DuplicateIdError, HostSpawnError, OverlayNotFoundError
from overlay_config.store import OverlayStore
from overlay_controller import process_matcher
from overlay_controller.host_spawn import spawn_host_process
from overlay_controller.process_matcher import TerminateResult

_LOGGER = logging.getLogger("WebOverlay.Controller")

SpawnFunc = Callable[..., None]


def list_overlays(store: OverlayStore) -> List[OverlayDefinition]:
    return store.load_overlays()


def add_overlay(
    store: OverlayStore,
    overlay_id: str,
    url: str,
    *,
    ws_uri: Optional[str] = None,
    name: Optional[str] = None,
    x: Optional[int] = None,
    y: Optional[int] = None,
    width: Optional[int] = None,
    height: Optional[int] = None,
    opacity: Optional[float] = None,
    click_through: Optional[bool] = None,
    always_on_top: Optional[bool] = None,
) -> OverlayDefinition:
    """Append a new definition; options left as None take the defaults.

    Opacity and click-through defaults come from the stored global settings.
    Raises :class:`DuplicateIdError` without touching the store when the id is
    already configured.
    """
    entries = store.load_overlay_entries()
    definitions = parse_definitions(entries)
    if find_definition(definitions, overlay_id) is not None:
        raise DuplicateIdError(overlay_id)
    settings = store.load_settings()
    definition = OverlayDefinition(
        id=overlay_id,
        url=url,
        name=name or overlay_id,
        ws_uri=ws_uri or None,
        position=Position(
            x=DEFAULT_X if x is None else x,
            y=DEFAULT_Y if y is None else y,
        ),
        size=Size(
            width=DEFAULT_WIDTH if width is None else width,
            height=DEFAULT_HEIGHT if height is None else height,
        ),
        opacity=settings.default_opacity if opacity is None else opacity,
        click_through=settings.default_click_through if click_through is None else click_through,
        always_on_top=DEFAULT_ALWAYS_ON_TOP if always_on_top is None else always_on_top,
    )
    entries.append(definition.to_payload())
    store.save_overlay_entries(entries)
    _LOGGER.debug("Added overlay %s -> %s", overlay_id, url)
    return definition


def remove_overlay(store: OverlayStore, overlay_id: str) -> OverlayDefinition:
    """Drop the entry for ``overlay_id``; every other stored entry is kept as is."""
    entries = store.load_overlay_entries()
    removed = find_definition(parse_definitions(entries), overlay_id)
    if removed is None:
        raise OverlayNotFoundError(overlay_id)
    store.save_overlay_entries([entry for entry in entries if entry_id(entry) != overlay_id])
    _LOGGER.debug("Removed overlay %s", overlay_id)
    return removed


def start_overlays(
    store: OverlayStore,
    overlay_id: Optional[str] = None,
    *,
    debug: bool = False,
    spawn: Optional[SpawnFunc] = None,
) -> List[str]:
    """Spawn one detached host process per overlay being started.

    Returns the ids that were launched, in store order. Success only means
    the processes were launched, not that any window is visible yet.
    """
    spawn_fn = spawn or spawn_host_process
    definitions = store.load_overlays()
    if overlay_id is not None:
        if find_definition(definitions, overlay_id) is None:
            raise OverlayNotFoundError(overlay_id)
        targets = [overlay_id]
    else:
        targets = [definition.id for definition in definitions]
    config_path: Path = store.path
    for target in targets:
        try:
            spawn_fn(target, config_path=config_path, debug=debug)
        except OSError as exc:
            raise HostSpawnError(target, exc) from exc
    return targets


def stop_overlays(
    overlay_id: Optional[str] = None,
    *,
    process_iter: Optional[process_matcher.ProcessIter] = None,
) -> TerminateResult:
    """Terminate running host processes for one overlay or for all of them.

    The store is not consulted: whatever matches the process pattern is
    stopped, even if its definition has since been removed.
    """
    if overlay_id is not None:
        pattern = process_matcher.pattern_for_id(overlay_id)
    else:
        pattern = process_matcher.pattern_for_all()
        if _LOGGER.isEnabledFor(logging.DEBUG):
            for descriptor in process_matcher.list_matching(pattern, process_iter=process_iter):
                _LOGGER.debug("Found overlay host pid=%s: %s", descriptor.pid, descriptor.command_line)
    return process_matcher.terminate_matching(pattern, process_iter=process_iter, logger=_LOGGER)
