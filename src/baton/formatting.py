"""Pretty-print support for baton run output.

Uses rich library for formatted terminal output.
All functions accept their target object and print to a rich Console.

To avoid circular imports, this module does NOT import domain models
at module level. Functions access object attributes dynamically.
"""
from __future__ import annotations

from typing import Any

from rich.console import Console, Group
from rich.markup import escape
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

_ROLE_STYLES: dict[str, tuple[str, str]] = {
    "system": ("System", "yellow"),
    "user": ("User", "blue"),
    "assistant": ("Assistant", "green"),
    "tool": ("Tool Result", "magenta"),
}


def _make_console(file: Any = None) -> Console:
    """Create a Console, optionally writing to a file-like object."""
    if file is not None:
        return Console(file=file, force_terminal=False, width=100)
    return Console()


def _message_panel(msg: Any, *, abbreviate: bool) -> Panel:
    content = msg.content or ""
    if abbreviate and len(content) > 200:
        content = content[:197] + "..."

    title, border = _ROLE_STYLES.get(msg.role, (msg.role.title(), "white"))
    if msg.role == "assistant" and msg.sender:
        title = f"{title} ({msg.sender})"

    if msg.role == "assistant" and msg.tool_calls:
        parts: list[Any] = []
        if content:
            parts.append(Markdown(content))
            parts.append(Text(""))
        for tc in msg.tool_calls:
            call_text = Text()
            call_text.append(f"{tc.name}", style="bold cyan")
            call_text.append("(", style="dim")
            call_text.append(", ".join(f"{k}={v!r}" for k, v in tc.arguments.items()), style="white")
            call_text.append(")", style="dim")
            call_text.append(f"  [{tc.id}]", style="dim")
            parts.append(call_text)
        body: Any = Group(*parts) if len(parts) > 1 else parts[0]
        title = f"Tool Call ({msg.sender})" if msg.sender else "Tool Call"
        border = "cyan"
    elif msg.role == "assistant":
        body = Markdown(content) if content else Text("(empty)")
    elif msg.role == "tool":
        is_error = bool(msg.metadata and msg.metadata.get("is_error"))
        title = f"{'Tool Error' if is_error else title}: {msg.name} [{msg.tool_call_id}]"
        border = "red" if is_error else border
        body = Text(content)
    elif msg.is_handoff_record:
        title, border = "Handoff", "bright_white"
        body = Text(content, style="bold")
    else:
        body = Text(content)

    return Panel(body, title=f"[bold]{escape(title)}[/bold]", border_style=border)


def pprint_messages(messages: Any, *, abbreviate: bool = False, file: Any = None) -> None:
    """Render messages as a chat transcript with one panel per message."""
    console = _make_console(file)
    for msg in messages:
        console.print(_message_panel(msg, abbreviate=abbreviate))


def pprint_run_result(result: Any, *, abbreviate: bool = False, file: Any = None) -> None:
    """Render the full run history, then a summary table."""
    console = _make_console(file)
    for msg in result.history:
        console.print(_message_panel(msg, abbreviate=abbreviate))

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="dim")
    table.add_column("Value")
    table.add_row("stop reason", Text(result.stop_reason.value, style="bold"))
    table.add_row("turns", str(result.turns))
    table.add_row("active agent", Text(result.agent.name))
    handoffs = result.handoffs
    if handoffs:
        table.add_row(
            "handoffs", Text(", ".join(m.content.removeprefix("Handoff: ") for m in handoffs))
        )
    if result.context_variables:
        table.add_row("context", Text(", ".join(sorted(result.context_variables))))
    console.print(table)
