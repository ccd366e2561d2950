"""Terminal output helpers built on rich."""

from __future__ import annotations

import time
from typing import Iterable, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .remote import RemoteEntry

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

SEPARATOR = "=" * 80
BAR_WIDTH = 50


def _message(icon: str, style: str, text: str, target: Optional[Console] = None) -> None:
    out = target or console
    out.print()
    out.print(f"[{style}]{icon} {escape(text)}[/]")
    out.print()


def info(text: str) -> None:
    _message("\\[*]", "cyan", text)


def success(text: str) -> None:
    _message("\\[+]", "green", text)


def warning(text: str) -> None:
    _message("\\[!]", "yellow", text)


def error(text: str) -> None:
    _message("\\[X]", "red", text, err_console)


def separator() -> None:
    console.print(SEPARATOR, markup=False)


def heading(title: str) -> None:
    console.print()
    console.print(f"[cyan]=== {escape(title)} ===[/]")
    console.print()


def field(label: str, value: object) -> None:
    console.print(f"[bright_black]{escape(label)}:[/] {escape(str(value))}")


def details(title: str, fields: Iterable[Tuple[Optional[str], object]]) -> None:
    """Labeled block framed by separators; a ``None`` label prints a sub-header."""
    console.print()
    separator()
    console.print(f"[cyan]  {escape(title)}[/]")
    separator()
    console.print()
    for label, value in fields:
        if label is None:
            console.print()
            console.print(f"[bold]{escape(str(value))}[/]")
            console.print()
        else:
            field(label, value)
    console.print()
    separator()
    console.print()


def format_bytes(num: int) -> str:
    if num <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB", "TB"]
    idx = 0
    while num >= 1024 ** (idx + 1) and idx < len(units) - 1:
        idx += 1
    value = round(num / (1024 ** idx), 2)
    if value == int(value):
        value = int(value)
    return f"{value} {units[idx]}"


def render_bar(current: int, total: int, width: int = BAR_WIDTH) -> Tuple[str, int]:
    percent = 100 if total <= 0 else min(100, int(current * 100 / total))
    filled = percent * width // 100
    return "█" * filled + "░" * (width - filled), percent


class ProgressBar:
    """Single-line progress bar redrawn in place with a carriage return."""

    def __init__(self, step: int = 5, target: Optional[Console] = None):
        self.step = step
        self.console = target or console
        self.last_percent: Optional[int] = None

    def update(self, current: int, total: int, name: str) -> None:
        bar, percent = render_bar(current, total)
        done = total <= 0 or current >= total
        if self.last_percent is not None and not done and percent < self.last_percent + self.step:
            return
        if done and self.last_percent == 100:
            return
        self.last_percent = percent
        self.console.file.write("\r")
        self.console.print(f"[cyan]\\[*][/] Uploading {escape(name)}: {escape('[' + bar + ']')} {percent}%", end="", soft_wrap=True)
        self.console.file.flush()

    def finish(self) -> None:
        if self.last_percent is not None:
            self.console.print()


def access_url(label: str, url: str) -> None:
    console.print(f"[cyan]{escape(label)}[/]")
    console.print(f"[bold]{escape(url)}[/]")
    console.print()


def upload_complete(name: str, url: str) -> None:
    success(f"Upload complete: {name}")
    access_url("Access your file at:", url)


def remote_listing(entries: Sequence[RemoteEntry]) -> None:
    table = Table(title="Files on server", show_header=True, header_style="bold cyan")
    table.add_column("No.", justify="right")
    table.add_column("Name")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    for idx, entry in enumerate(entries, start=1):
        name = f"{entry.name}/" if entry.is_dir else entry.name
        size = "" if entry.is_dir else format_bytes(entry.size)
        modified = time.strftime("%Y-%m-%d %H:%M", time.localtime(entry.modified)) if entry.modified else ""
        table.add_row(str(idx), escape(name), size, modified)
    console.print(table)


def result_list(names: List[str], style: str) -> None:
    for name in names:
        console.print(f"[{style}]  - [/]{escape(name)}")
    console.print()


__all__ = [
    "console",
    "err_console",
    "SEPARATOR",
    "info",
    "success",
    "warning",
    "error",
    "separator",
    "heading",
    "field",
    "details",
    "format_bytes",
    "render_bar",
    "ProgressBar",
    "access_url",
    "upload_complete",
    "remote_listing",
    "result_list",
]
