import json
from typing import Any, Optional

from rich.console import Console

from channel_repl.channel.decoder import format_tx

console = Console()


def format_result(result: Any) -> str:
    """Render an operation result for display; strings are shown verbatim."""
    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2, default=str)


def print_newline() -> None:
    console.print()


def render_detail(text: str) -> None:
    """Print dimmed text without interpreting markup inside it."""
    console.print(text, style="grey50", markup=False, highlight=False)


def render_notice(title: str, encoded: str, style: str = "bold yellow") -> None:
    """Render a titled notification followed by the decoded transaction."""
    console.print(f"[{style}]{title}[/{style}]")
    render_detail(format_tx(encoded))
    console.print()


def render_error(message: str, detail: Optional[str] = None) -> None:
    console.print(message, style="bold red", markup=False, highlight=False)
    if detail:
        render_detail(detail)


def render_status(status: str) -> None:
    console.print(status, style="bold red", markup=False, highlight=False)


def render_heading(title: str, hint: Optional[str] = None) -> None:
    if hint:
        console.print(f"[bold]{title}[/bold] [grey50]{hint}[/grey50]")
    else:
        console.print(f"[bold]{title}[/bold]")
