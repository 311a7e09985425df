"""Rich-based output utilities for the sandpatch CLI."""

from rich.console import Console

# Shared console instances
console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def print_error(message: str) -> None:
    """Print an error message in red to stderr."""
    err_console.print(f"[bold red]Error:[/bold red] {message}", markup=True)


def print_success(message: str) -> None:
    console.print(f"[green]{message}[/green]")


def print_info(message: str) -> None:
    console.print(f"[dim]{message}[/dim]")
