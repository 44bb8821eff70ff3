"""Rich formatting helpers for the Baton CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from baton.orchestrator.models import RunResult


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def format_run(result: RunResult, console: Console, *, transcript: bool = True) -> None:
    """Display a finished run: the transcript, or only the final answer."""
    if transcript:
        from baton.formatting import pprint_run_result

        pprint_run_result(result, file=console.file)
        return
    if result.content:
        console.print(result.content, markup=False, highlight=False)
    else:
        console.print("[dim](no answer)[/dim]")


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
