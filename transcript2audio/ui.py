"""
UI module for transcript2audio package.

Contains console output and the progress display used while audio is generated.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

console = Console()
error_console = Console(stderr=True, soft_wrap=True)


@contextmanager
def progress_context(total: Optional[int] = None, out: Optional[Console] = None) -> Iterator[Progress]:
    """
    Context manager for a transient Rich progress display.

    Args:
        total: Total number of items (None for indeterminate progress)
        out: Console to render on (defaults to the shared console)

    Yields:
        Progress instance; print through ``progress.console`` while it is live
    """
    columns = [SpinnerColumn(), TextColumn("{task.description}")]
    if total:
        columns.append(BarColumn())
    columns.append(TimeElapsedColumn())
    with Progress(*columns, transient=True, console=out or console) as progress:
        yield progress


def print_error(messages) -> None:
    """Print an error and its causes, one per line, to stderr."""
    head, *causes = messages
    error_console.print(f"[bold red]Error:[/bold red] {escape(head)}", highlight=False)
    for cause in causes:
        error_console.print(f"  caused by: {cause}", highlight=False, markup=False)
