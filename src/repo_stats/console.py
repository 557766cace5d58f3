from __future__ import annotations

import time

from rich.console import Console
from rich.markup import escape

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

_quiet = False


def set_quiet(quiet: bool) -> None:
    global _quiet
    _quiet = quiet


def repo_tag(label: str) -> str:
    return f"[cyan]{escape(label)}[/cyan]"


def elapsed(start: float) -> str:
    return f"[grey50]({int((time.monotonic() - start) * 1000)}ms)[/grey50]"


def progress(message: str) -> None:
    if not _quiet:
        console.print(f"[grey50]→[/grey50] {message}")


def success(message: str) -> None:
    if not _quiet:
        console.print(f"[green]✓[/green] {message}")


def warn(message: str) -> None:
    if not _quiet:
        console.print(f"[yellow]⚠[/yellow] {message}")


def failure(message: str) -> None:
    err_console.print(f"[red]✗[/red] {message}")
