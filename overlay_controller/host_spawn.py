"""Launch overlay host processes detached from the controller."""
from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

ROOT_DIR = Path(__file__).resolve().parents[1]

HOST_MODULE = "overlay_client.launcher"
HOST_SCRIPT_SUFFIX = "overlay_client/launcher.py"
OVERLAY_ID_FLAG = "--overlay-id"
CONFIG_FLAG = "--config"
DEBUG_FLAG = "--debug"

_LOGGER = logging.getLogger("WebOverlay.Controller")


def build_host_command(
    overlay_id: Optional[str],
    *,
    config_path: Optional[Path] = None,
    debug: bool = False,
    python_command: Optional[Sequence[str]] = None,
) -> List[str]:
    """Return the argv for a host process.

    The overlay id always follows the host module token so the process matcher
    can find it again from an unrelated controller invocation.
    """
    command = list(python_command or [sys.executable])
    command.extend(["-m", HOST_MODULE])
    if overlay_id is not None:
        command.extend([OVERLAY_ID_FLAG, overlay_id])
    if config_path is not None:
        command.extend([CONFIG_FLAG, str(config_path)])
    if debug:
        command.append(DEBUG_FLAG)
    return command


def build_host_environment(base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    env = dict(os.environ if base is None else base)
    if sys.platform.startswith("linux"):
        # Window placement needs X11; Wayland ignores client-side positioning.
        env.setdefault("QT_QPA_PLATFORM", "xcb")
        env.setdefault("QT_WAYLAND_DISABLE_WINDOWDECORATION", "1")
    return env


def spawn_host_process(
    overlay_id: Optional[str],
    *,
    config_path: Optional[Path] = None,
    debug: bool = False,
) -> None:
    """Start a host process and forget about it.

    The child gets its own session so it outlives the controller; its pid is
    deliberately not kept. Raises ``OSError`` when the interpreter cannot be
    launched.
    """
    command = build_host_command(overlay_id, config_path=config_path, debug=debug)
    _LOGGER.debug("Spawning overlay host via %s", command)
    kwargs: Dict[str, Any] = {
        "cwd": str(ROOT_DIR),
        "env": build_host_environment(),
        "stdin": subprocess.DEVNULL,
        "close_fds": True,
    }
    if not debug:
        kwargs.update(stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    if os.name == "nt":
        creation_flags = getattr(subprocess, "DETACHED_PROCESS", 0) | getattr(
            subprocess, "CREATE_NEW_PROCESS_GROUP", 0
        )
        if creation_flags:
            kwargs["creationflags"] = creation_flags
    else:
        kwargs["start_new_session"] = True
    process = subprocess.Popen(command, **kwargs)
    _LOGGER.debug("Overlay host launched (pid=%s)", getattr(process, "pid", "?"))
