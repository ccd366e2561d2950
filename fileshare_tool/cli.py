"""Command-line argument parsing for the fileshare tool."""

from __future__ import annotations

import argparse
from typing import List, Optional

from .commands import VERSION

COMMANDS = {
    "upload": "Upload files or folders from current directory (default)",
    "delete": "Delete files from the server",
    "password": "Configure password protection for downloads",
    "setup": "Configure SSH key and server settings",
    "about": "Display application information",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fileshare",
        description="CLI tool for securely transferring large files and folders",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    sub = parser.add_subparsers(dest="command", metavar="command")
    for name, help_text in COMMANDS.items():
        sub.add_parser(name, help=help_text, description=help_text)
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    args = build_parser().parse_args(argv)
    if args.command is None:
        args.command = "upload"
    return args


__all__ = ["COMMANDS", "build_parser", "parse_args"]
