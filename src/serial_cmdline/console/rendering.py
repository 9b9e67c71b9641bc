import os

from rich.console import Console
from rich.panel import Panel

console = Console()


def clear_terminal() -> None:
    """Clear the terminal screen."""
    os.system("cls" if os.name == "nt" else "clear")


def render_banner(title: str, details: dict[str, str]) -> None:
    """Print the startup panel."""
    lines = [f"[bold cyan]╭─ {title} ─╮[/bold cyan]", ""]
    for label, value in details.items():
        lines.append(f"[dim]{label}:[/dim] [dim cyan]{value}[/dim cyan]")
    console.print(Panel("\n".join(lines), expand=False))


def render_output(text: str) -> None:
    """Print command output exactly as the handler produced it."""
    if text:
        console.print(text, end="", markup=False, highlight=False)


def render_error(message: str) -> None:
    console.print(f"[bold red]error: {message}[/bold red]")
    console.print()
