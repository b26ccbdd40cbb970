"""Console output helpers for the vroom CLI.

Usage:
    from vroomctl.console import console, print_error, print_success

    print_success("VROOM container started")
    print_error("Something went wrong")
"""

from rich.console import Console
from rich.panel import Panel

console = Console()
err_console = Console(stderr=True)


def print_success(message: str) -> None:
    """Print a success message (green checkmark)."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message (red X) to stderr."""
    err_console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message (yellow warning sign)."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message (blue info sign)."""
    console.print(f"[blue]ℹ[/blue] {message}")


def print_remedy(problem: str, command: str) -> None:
    """Print a problem and the vroom command that resolves it, boxed in red."""
    content = f"{problem}\n\nRun this first:\n\n    [bold]{command}[/bold]"
    err_console.print(Panel(content, title="vroom", border_style="red"))


__all__ = [
    "console",
    "err_console",
    "print_success",
    "print_error",
    "print_warning",
    "print_info",
    "print_remedy",
]
