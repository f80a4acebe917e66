"""
Console output for the n8n-backup CLI.

Status lines share one rich console; message text is escaped so container
names and paths are never read as markup.
"""

from typing import Optional, Sequence, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

console = Console()

# (symbol, style) per status line kind
_MARKERS = {
    "success": ("✓", "green"),
    "error": ("✗", "red"),
    "warning": ("⚠", "yellow"),
    "info": ("→", "cyan"),
}

Column = Tuple[str, str, Optional[int]]


def _status(kind: str, message: str) -> None:
    symbol, style = _MARKERS[kind]
    console.print(f"[{style}]{symbol}[/{style}] {escape(message)}")


def print_success(message: str):
    _status("success", message)


def print_error(message: str):
    _status("error", message)


def print_warning(message: str):
    _status("warning", message)


def print_info(message: str):
    _status("info", message)


def print_header(title: str, subtitle: str = ""):
    """Boxed title, e.g. above the show-config listing."""
    body = f"[bold cyan]{escape(title)}[/bold cyan]"
    if subtitle:
        body += f"\n[dim]{escape(subtitle)}[/dim]"
    console.print(Panel(body, border_style="cyan"))


def print_separator():
    console.print()
    console.rule(style="dim")


def create_table(title: str, columns: Sequence[Column]) -> Table:
    """Table with a bold header row; columns are (name, style, width)."""
    table = Table(title=title, header_style="bold cyan")
    for name, style, width in columns:
        table.add_column(name, style=style, width=width)
    return table


def prompt_secret(message: str) -> str:
    """Hidden input; raises EOFError when stdin is not a terminal."""
    return Prompt.ask(message, password=True)
