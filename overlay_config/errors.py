"""Errors raised by overlay definition lookups and edits."""
from __future__ import annotations


class OverlayError(Exception):
    """Base class for overlay definition errors reported to the user."""

    def __init__(self, overlay_id: str, message: str) -> None:
        super().__init__(message)
        self.overlay_id = overlay_id


class DuplicateIdError(OverlayError):
    """Raised when adding a definition whose id is already configured."""

    def __init__(self, overlay_id: str) -> None:
        super().__init__(overlay_id, f'Overlay with ID "{overlay_id}" already exists')


class OverlayNotFoundError(OverlayError, LookupError):
    """Raised when no definition carries the requested id."""

    def __init__(self, overlay_id: str) -> None:
        super().__init__(overlay_id, f'Overlay with ID "{overlay_id}" not found')


class HostSpawnError(OverlayError):
    """Raised when a host process for an overlay cannot be launched."""

    def __init__(self, overlay_id: str, reason: object) -> None:
        super().__init__(overlay_id, f'Failed to start overlay "{overlay_id}": {reason}')
