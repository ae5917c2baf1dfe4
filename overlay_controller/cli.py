#!/usr/bin/env python3
"""Command-line front end: list, add, remove, start and stop overlays."""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional, Sequence

from overlay_config.definitions import OverlayDefinition
from overlay_config.errors import OverlayError
from overlay_config.logging_utils import ROOT_LOGGER_NAME, configure_logger, resolve_log_level
from overlay_config.store import OverlayStore, resolve_config_path
from overlay_config.version import __version__
from overlay_controller import actions
from overlay_controller.process_matcher import TerminateStatus

SEPARATOR = "-------------------"


def _opacity(value: str) -> float:
    try:
        numeric = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid opacity: {value!r}") from None
    if not 0.0 <= numeric <= 1.0:
        raise argparse.ArgumentTypeError(f"opacity must be between 0 and 1, got {value}")
    return numeric


def _flag(value: bool) -> str:
    return str(bool(value)).lower()


def _format_definition(definition: OverlayDefinition) -> List[str]:
    return [
        f"ID: {definition.id}",
        f"Name: {definition.name}",
        f"URL: {definition.url}",
        f"WebSocket: {definition.ws_uri or 'None'}",
        f"Position: {definition.position.x}, {definition.position.y}",
        f"Size: {definition.size.width}x{definition.size.height}",
        f"Opacity: {definition.opacity}",
        f"Click-through: {_flag(definition.click_through)}",
        f"Always on top: {_flag(definition.always_on_top)}",
        SEPARATOR,
    ]


def _error(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


def _cmd_list(store: OverlayStore, _args: argparse.Namespace) -> int:
    definitions = actions.list_overlays(store)
    if not definitions:
        print("No overlays configured.")
        return 0
    print("\nConfigured Overlays:")
    for definition in definitions:
        print()
        print("\n".join(_format_definition(definition)))
    return 0


def _cmd_add(store: OverlayStore, args: argparse.Namespace) -> int:
    actions.add_overlay(
        store,
        args.id,
        args.url,
        ws_uri=args.ws_uri,
        name=args.name,
        x=args.x,
        y=args.y,
        width=args.width,
        height=args.height,
        opacity=args.opacity,
        click_through=args.click_through,
        always_on_top=args.always_on_top,
    )
    print(f'Added overlay "{args.id}"')
    return 0


def _cmd_remove(store: OverlayStore, args: argparse.Namespace) -> int:
    actions.remove_overlay(store, args.id)
    print(f'Removed overlay "{args.id}"')
    return 0


def _cmd_start(store: OverlayStore, args: argparse.Namespace) -> int:
    started = actions.start_overlays(store, args.id, debug=args.debug)
    if args.id is not None:
        print(f'Started overlay "{args.id}"')
    elif not started:
        print("No overlays configured.")
    else:
        for overlay_id in started:
            print(f'Started overlay "{overlay_id}"')
        print("Started all overlays")
    return 0


def _cmd_stop(_store: OverlayStore, args: argparse.Namespace) -> int:
    if args.id is None:
        print("Attempting to stop all overlays...")
    result = actions.stop_overlays(args.id)
    if result.status is TerminateStatus.TERMINATED:
        print(f'Stopped overlay "{args.id}"' if args.id is not None else "Stopped all overlays")
        return 0
    if result.status is TerminateStatus.NONE_FOUND:
        if args.id is not None:
            print(f'No running process found for overlay "{args.id}"')
        else:
            print("No running overlays found")
        return 0
    target = f'overlay "{args.id}"' if args.id is not None else "overlays"
    print(f"Error stopping {target} (exit code {result.exit_status})", file=sys.stderr)
    for detail in result.errors:
        print(f"  {detail}", file=sys.stderr)
    return result.exit_status


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=argparse.SUPPRESS, help="Path to config file")

    parser = argparse.ArgumentParser(
        prog="web-overlay",
        description="A configurable overlay window manager",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", default=None, help="Path to config file")
    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True

    list_parser = subparsers.add_parser("list", parents=[common], help="List all configured overlays")
    list_parser.set_defaults(handler=_cmd_list)

    add_parser = subparsers.add_parser("add", parents=[common], help="Add a new overlay")
    add_parser.add_argument("id", help="Unique identifier for the overlay")
    add_parser.add_argument("url", help="URL for the overlay content")
    add_parser.add_argument("--ws-uri", dest="ws_uri", help="WebSocket URI for the overlay")
    add_parser.add_argument("--name", help="Display name for the overlay")
    add_parser.add_argument("--x", type=int, help="X position (default 100)")
    add_parser.add_argument("--y", type=int, help="Y position (default 100)")
    add_parser.add_argument("--width", type=int, help="Window width (default 400)")
    add_parser.add_argument("--height", type=int, help="Window height (default 300)")
    add_parser.add_argument("--opacity", type=_opacity, help="Window opacity (0-1)")
    add_parser.add_argument(
        "--no-click-through",
        dest="click_through",
        action="store_const",
        const=False,
        default=None,
        help="Disable click-through",
    )
    add_parser.add_argument(
        "--always-on-top",
        dest="always_on_top",
        action="store_true",
        help="Keep window always on top",
    )
    add_parser.set_defaults(handler=_cmd_add)

    remove_parser = subparsers.add_parser("remove", parents=[common], help="Remove an overlay")
    remove_parser.add_argument("id", help="ID of the overlay to remove")
    remove_parser.set_defaults(handler=_cmd_remove)

    start_parser = subparsers.add_parser("start", parents=[common], help="Start an overlay")
    start_parser.add_argument("id", nargs="?", help="ID of the overlay to start (omit for all)")
    start_parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    start_parser.set_defaults(handler=_cmd_start)

    stop_parser = subparsers.add_parser("stop", parents=[common], help="Stop an overlay")
    stop_parser.add_argument("id", nargs="?", help="ID of the overlay to stop (omit for all)")
    stop_parser.set_defaults(handler=_cmd_stop)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logger(ROOT_LOGGER_NAME, "controller", resolve_log_level())

    store = OverlayStore(resolve_config_path(args.config))
    try:
        return args.handler(store, args)
    except OverlayError as exc:
        _error(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
