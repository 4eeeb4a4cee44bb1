"""Status console used by every operation.

Wraps a rich ``Console`` with one method per line style (success, error,
warning, info, tip). Remote messages are escaped so that brackets in an API
error never get parsed as rich markup.
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule


class DebugConsole:
    """Prefixed, colored status lines on top of rich."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓ {escape(message)}[/green]")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗ ERROR: {escape(message)}[/red]")

    def warn(self, message: str) -> None:
        self.console.print(f"[yellow]⚠ WARN: {escape(message)}[/yellow]")

    def info(self, message: str) -> None:
        self.console.print(f"[cyan]ℹ INFO: {escape(message)}[/cyan]")

    def tip(self, message: str) -> None:
        self.console.print(f"[magenta]💡 TIP: {escape(message)}[/magenta]")

    def header(self, title: str) -> None:
        self.console.print(Rule(f"[bold blue]{escape(title)}[/bold blue]", style="blue"))

    def section(self, title: str) -> None:
        self.console.print()
        self.console.print(f"[bold]{escape(title)}[/bold]")

    def print(self, *args, **kwargs) -> None:
        self.console.print(*args, **kwargs)

    def clear(self) -> None:
        self.console.clear()
