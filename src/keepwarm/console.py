"""Centralized terminal output for keepwarm.

Key principle: stderr for status/progress, stdout for data.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console

# stderr console for status messages (ping results, warnings)
err_console = Console(stderr=True)

# stdout console for data output (health payloads, status JSON)
out_console = Console()


def success(message: str, *, console: Console | None = None) -> None:
    """Print a success message (green checkmark) to stderr."""
    c = console or err_console
    c.print(f"[green]  ✓ {message}[/green]")


def error(message: str, *, console: Console | None = None) -> None:
    """Print an error message (red X) to stderr."""
    c = console or err_console
    c.print(f"[red]  ✗ {message}[/red]")


def info(message: str, *, console: Console | None = None) -> None:
    """Print an info message (dim) to stderr."""
    c = console or err_console
    c.print(f"[dim]  {message}[/dim]")


def print_json(data: Any, *, console: Console | None = None) -> None:
    """Print a JSON payload to stdout."""
    c = console or out_console
    c.print_json(json.dumps(data, default=str))
