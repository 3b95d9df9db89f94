"""Terminal progress display for the CLI.

Everything here draws on stderr so stdout stays clean for summaries, and
draws nothing at all when quiet or when stderr is not a terminal.

Usage:
    from mindmap_layout.cli.progress import annealing_progress, spinner

    with spinner("Reading graph...", quiet=args.quiet):
        graph = load_graph(path)

    with annealing_progress(quiet=args.quiet) as callback:
        optimizer.optimize(progress_callback=callback)
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager

from mindmap_layout.progress import ProgressCallback


def is_terminal() -> bool:
    """Check if stderr is attached to a terminal."""
    return sys.stderr.isatty()


@contextmanager
def spinner(desc: str = "Processing...", quiet: bool = False):
    """Show a spinner while a step without measurable progress runs."""
    if quiet or not is_terminal():
        yield
        return

    from rich.live import Live
    from rich.spinner import Spinner

    with Live(Spinner("dots", text=desc), console=_stderr_console(), transient=True):
        yield


@contextmanager
def annealing_progress(quiet: bool = False) -> Iterator[ProgressCallback]:
    """Yield a progress callback that moves a rich bar through the anneal.

    The bar's description follows the latest report message, which carries
    the current temperature and cost. The callback never cancels by itself;
    wrap it with :func:`mindmap_layout.progress.cancel_when` for that.
    """
    if quiet or not is_terminal():

        def silent(progress: float, message: str, cancelable: bool) -> bool:
            return True

        yield silent
        return

    from rich.progress import (
        BarColumn,
        Progress,
        SpinnerColumn,
        TaskProgressColumn,
        TextColumn,
        TimeElapsedColumn,
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=_stderr_console(),
    ) as bar:
        task = bar.add_task("Annealing", total=1.0)

        def update(progress: float, message: str, cancelable: bool) -> bool:
            bar.update(task, completed=max(0.0, progress), description=message)
            return True

        yield update


def _stderr_console():
    from rich.console import Console

    return Console(stderr=True)
