"""Find and terminate overlay host processes by their command line.

Host processes are spawned detached and nothing records their pids, so a later
controller invocation re-derives a pattern from the overlay id and scans the
live process table for it.
"""
from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

import psutil

from overlay_controller.host_spawn import HOST_MODULE, HOST_SCRIPT_SUFFIX, OVERLAY_ID_FLAG

_LOGGER = logging.getLogger("WebOverlay.Matcher")

# pkill-style exit statuses.
EXIT_TERMINATED = 0
EXIT_NONE_FOUND = 1
EXIT_FAILED = 3

ProcessIter = Callable[..., Iterable["psutil.Process"]]


def _is_host_marker(token: str) -> bool:
    normalised = token.replace("\\", "/")
    return token == HOST_MODULE or normalised.endswith(HOST_SCRIPT_SUFFIX)


@dataclass(frozen=True)
class ProcessPattern:
    """Command-line pattern for host processes.

    ``overlay_id`` of None matches any host started with the overlay-selection
    flag; otherwise the flag must be followed by exactly that id.
    """

    overlay_id: Optional[str] = None

    def matches(self, cmdline: Sequence[str]) -> bool:
        tokens = list(cmdline)
        marker_index = next((index for index, token in enumerate(tokens) if _is_host_marker(token)), None)
        if marker_index is None:
            return False
        remaining = tokens[marker_index + 1 :]
        for index, token in enumerate(remaining):
            if token == OVERLAY_ID_FLAG:
                if self.overlay_id is None:
                    return True
                if index + 1 < len(remaining) and remaining[index + 1] == self.overlay_id:
                    return True
            elif token.startswith(OVERLAY_ID_FLAG + "="):
                if self.overlay_id is None:
                    return True
                if token[len(OVERLAY_ID_FLAG) + 1 :] == self.overlay_id:
                    return True
        return False

    def __str__(self) -> str:
        target = self.overlay_id if self.overlay_id is not None else "*"
        return f"{HOST_MODULE} ... {OVERLAY_ID_FLAG} {target}"


def pattern_for_all() -> ProcessPattern:
    return ProcessPattern()


def pattern_for_id(overlay_id: str) -> ProcessPattern:
    return ProcessPattern(overlay_id=overlay_id)


@dataclass(frozen=True)
class ProcessDescriptor:
    pid: int
    name: str
    cmdline: Tuple[str, ...]

    @property
    def command_line(self) -> str:
        return " ".join(self.cmdline)


class TerminateStatus(enum.Enum):
    TERMINATED = "terminated"
    NONE_FOUND = "none_found"
    FAILED = "failed"


@dataclass
class TerminateResult:
    status: TerminateStatus
    exit_status: int
    terminated: List[int] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def _iter_candidates(pattern: ProcessPattern, process_iter: ProcessIter) -> Iterator[Tuple["psutil.Process", ProcessDescriptor]]:
    own_pid = os.getpid()
    for proc in process_iter(["pid", "name", "cmdline"]):
        # process_iter fills .info itself and skips processes that vanish
        # mid-scan; denied fields come back as None.
        info = getattr(proc, "info", None) or {}
        pid = info.get("pid")
        if pid is None:
            continue
        if pid == own_pid:
            continue
        cmdline = info.get("cmdline") or []
        if not pattern.matches(cmdline):
            continue
        yield proc, ProcessDescriptor(pid=int(pid), name=str(info.get("name") or ""), cmdline=tuple(cmdline))


def list_matching(pattern: ProcessPattern, *, process_iter: Optional[ProcessIter] = None) -> Iterator[ProcessDescriptor]:
    """Yield a one-shot snapshot of processes matching ``pattern``."""
    for _proc, descriptor in _iter_candidates(pattern, process_iter or psutil.process_iter):
        yield descriptor


def terminate_matching(
    pattern: ProcessPattern,
    *,
    process_iter: Optional[ProcessIter] = None,
    logger: Optional[logging.Logger] = None,
) -> TerminateResult:
    """Send SIGTERM to every process matching ``pattern``.

    Signalling failures do not stop the remaining matches from being
    signalled, and nothing is retried.
    """
    log = logger or _LOGGER
    terminated: List[int] = []
    errors: List[str] = []
    for proc, descriptor in _iter_candidates(pattern, process_iter or psutil.process_iter):
        log.debug("Terminating overlay host pid=%s: %s", descriptor.pid, descriptor.command_line)
        try:
            proc.terminate()
        except psutil.NoSuchProcess:
            # Exited between the scan and the signal.
            terminated.append(descriptor.pid)
        except psutil.Error as exc:
            log.warning("Failed to terminate overlay host pid=%s: %s", descriptor.pid, exc)
            errors.append(f"pid {descriptor.pid}: {exc}")
        else:
            terminated.append(descriptor.pid)
    if errors:
        return TerminateResult(TerminateStatus.FAILED, EXIT_FAILED, terminated, errors)
    if terminated:
        return TerminateResult(TerminateStatus.TERMINATED, EXIT_TERMINATED, terminated, errors)
    log.debug("No overlay host matched %s", pattern)
    return TerminateResult(TerminateStatus.NONE_FOUND, EXIT_NONE_FOUND, terminated, errors)
