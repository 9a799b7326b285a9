"""Interactive choice of one application from a list."""

from typing import Callable

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

INVALID_SELECTION = "Invalid selection. Please try again."


def render_menu(apps: list[str]) -> Table:
    """Build the numbered application menu."""
    table = Table(title="Select an app to sign:", box=box.SIMPLE, title_justify="left")
    table.add_column("#", style="bold cyan", justify="right")
    table.add_column("Application", style="white")
    for idx, app in enumerate(apps, 1):
        table.add_row(str(idx), escape(app))
    return table


def choose(
    apps: list[str],
    ask: Callable[[str], str] | None = None,
    console: Console | None = None
) -> str:
    """
    Ask the operator to pick one application.
    
    Args:
        apps: Candidates, shown in order
        ask: Returns the operator's answer to a prompt (defaults to reading the terminal)
        console: Where the menu is printed
    
    Returns:
        The chosen application path
    
    Raises:
        ValueError: If ``apps`` is empty
    """
    if not apps:
        raise ValueError("No applications to choose from")
    
    console = console or Console(stderr=True)
    if ask is None:
        def ask(prompt: str) -> str:
            return Prompt.ask(prompt, console=console, default="", show_default=False)
    
    console.print(render_menu(apps))
    
    while True:
        answer = ask(f"Number (1-{len(apps)})").strip()
        if answer.isdecimal() and 1 <= int(answer) <= len(apps):
            return apps[int(answer) - 1]
        console.print(f"[yellow]{INVALID_SELECTION}[/yellow]")
