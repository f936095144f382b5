#!/usr/bin/env python3
"""piemme - A terminal prompt manager with a modal editor."""

from __future__ import annotations

import argparse
import sys

from . import __version__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="piemme",
        description="A terminal prompt manager with a modal editor",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # list
    list_parser = subparsers.add_parser("list", help="List saved prompts")
    list_parser.add_argument("--archived", action="store_true", help="List archived prompts instead")

    # show / copy share their options
    for name, help_text in (
        ("show", "Print a prompt with references and commands resolved"),
        ("copy", "Copy a resolved prompt to the clipboard"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("name", help="Prompt name")
        sub.add_argument("--raw", action="store_true", help="Use the text exactly as written")
        sub.add_argument("--yes", "-y", action="store_true", help="Run commands without asking")

    # safe-mode
    safe_parser = subparsers.add_parser("safe-mode", help="Ask before running commands in prompts")
    safe_parser.add_argument("state", choices=["on", "off"], help="New safe mode state")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # No command = launch TUI
    if args.command is None:
        from .app import PiemmeApp

        app = PiemmeApp()
        app.run()
        return 0

    # Import commands lazily to speed up --help
    from .commands import cmd_copy, cmd_list, cmd_safe_mode, cmd_show

    if args.command == "list":
        return cmd_list(args)
    if args.command == "show":
        return cmd_show(args)
    if args.command == "copy":
        return cmd_copy(args)
    if args.command == "safe-mode":
        return cmd_safe_mode(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
