"""Load-target helpers for overlay windows."""
from __future__ import annotations

from urllib.parse import urlencode

from overlay_config.definitions import OverlayDefinition

WS_QUERY_PARAM = "OVERLAY_WS"


def effective_url(definition: OverlayDefinition) -> str:
    """Return the URL a window should load for ``definition``.

    When a WebSocket URI is configured it is appended as an encoded
    ``OVERLAY_WS`` query parameter, ahead of any fragment.
    """
    if not definition.ws_uri:
        return definition.url
    base, hash_mark, fragment = definition.url.partition("#")
    separator = "&" if "?" in base else "?"
    if base.endswith(("?", "&")):
        separator = ""
    query = urlencode({WS_QUERY_PARAM: definition.ws_uri})
    return f"{base}{separator}{query}{hash_mark}{fragment}"
