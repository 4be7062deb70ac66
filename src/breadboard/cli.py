"""Breadboard command-line interface."""

import argparse
import logging
import os
import sys

from .logging_config import setup_logging
from .models import DEFAULT_FILE
from .state import Navigator
from .storage import load_or_new, write_file
from .view import build_view


def cmd_show(args: argparse.Namespace) -> None:
    """Print the board outline."""
    store, error = load_or_new(args.file)
    if error:
        sys.exit(error)
    navigator = Navigator(store)
    navigator.navigate_state().collapsed = args.collapsed
    # No selection: nothing is highlighted in the printout.
    navigator.navigate_state().place_index = None
    view = build_view(navigator)
    print(f"{store.name} ({len(store.places)} places)")
    if not store.places:
        print("(no places yet)")
        return
    for row in view.rows:
        print(row.text)


def cmd_add(args: argparse.Namespace) -> None:
    """Append a place and save."""
    store, error = load_or_new(args.file)
    if error:
        sys.exit(error)
    name = args.name.strip()
    if not name:
        sys.exit("Place name cannot be empty.")
    store.add_place(name)
    try:
        write_file(args.file, store)
    except OSError as e:
        sys.exit(f"Could not save {args.file}: {e}")
    print(f"Added: {name}")


def cmd_path(args: argparse.Namespace) -> None:
    print(os.path.abspath(args.file))


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    p = argparse.ArgumentParser(
        prog="breadboard", description="Sketch UI flows as places and affordances."
    )
    p.add_argument(
        "-f",
        "--file",
        default=DEFAULT_FILE,
        help=f"Path to the board file (default: ./{DEFAULT_FILE})",
    )
    p.add_argument("--log-file", help="Append log records to this file")
    p.add_argument("--debug", action="store_true", help="Log at DEBUG level")
    sub = p.add_subparsers(dest="cmd")

    s_show = sub.add_parser("show", help="Print the board outline")
    s_show.add_argument("--collapsed", action="store_true", help="One line per place")
    s_show.set_defaults(func=cmd_show)

    s_add = sub.add_parser("add", help="Append a new place")
    s_add.add_argument("name", help="Place name, quoted if it has spaces")
    s_add.set_defaults(func=cmd_add)

    s_path = sub.add_parser("path", help="Show the absolute path to the board file")
    s_path.set_defaults(func=cmd_path)

    return p


def main(argv=None) -> None:
    """CLI entry point. Launches TUI if no subcommand given."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.debug else logging.INFO
    setup_logging(level=level, log_file=args.log_file, console=args.cmd is not None and args.debug)

    if args.cmd is None:
        from .tui import main as tui_main

        tui_main(args.file)
    else:
        args.func(args)


if __name__ == "__main__":
    main()
