"""
Progress reporting and cancellation for annealing runs.

The annealer reports once per batch with ``(progress, message, cancelable)``,
where progress runs from 0.0 to 1.0 over the temperature levels. A callback
that returns False stops the run before the next batch; the layout is left
consistent and can still be extracted.

Callbacks go straight to ``LayoutOptimizer.optimize``, or are installed for
a whole block with :class:`ProgressContext`::

    def on_progress(progress: float, message: str, cancelable: bool) -> bool:
        print(f"{progress:.0%} {message}")
        return True

    with ProgressContext(callback=on_progress):
        optimizer.optimize()

The CLI draws a rich bar through ``mindmap_layout.cli.progress`` or, with
``--format json``, streams :func:`create_json_callback` lines on stderr.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from contextvars import ContextVar
from typing import TextIO, TypeAlias

# Returns False to cancel, True to continue
ProgressCallback: TypeAlias = Callable[[float, str, bool], bool]

_current_progress: ContextVar[ProgressCallback | None] = ContextVar(
    "current_progress", default=None
)


def get_current_callback() -> ProgressCallback | None:
    """Callback installed by the innermost active ProgressContext, if any."""
    return _current_progress.get()


def report_progress(progress: float, message: str, cancelable: bool = True) -> bool:
    """Send one report to the context callback.

    Returns:
        The callback's answer, or True when no context is active.
    """
    callback = get_current_callback()
    if callback is None:
        return True
    return callback(progress, message, cancelable)


class ProgressContext:
    """Install a callback for every report made inside a ``with`` block.

    Contexts nest; leaving one restores the callback of the enclosing block.
    Once the callback has answered False, :meth:`report` keeps answering
    False without calling it again.
    """

    def __init__(self, callback: ProgressCallback | None = None):
        self._callback = callback
        self._token = None
        self._cancelled = False

    def __enter__(self) -> ProgressContext:
        self._token = _current_progress.set(self._callback)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _current_progress.reset(self._token)
            self._token = None

    def report(self, progress: float, message: str, cancelable: bool = True) -> bool:
        if self._cancelled:
            return False
        if self._callback is None:
            return True
        if not self._callback(progress, message, cancelable):
            self._cancelled = True
            return False
        return True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def cancel_when(
    callback: ProgressCallback, should_continue: Callable[[], bool]
) -> ProgressCallback:
    """Wrap *callback* so cancelable reports also stop once *should_continue* is False.

    The wrapped callback still sees every report. The CLI uses this to turn
    Ctrl-C into a clean stop between batches.
    """

    def wrapped(progress: float, message: str, cancelable: bool) -> bool:
        keep_going = callback(progress, message, cancelable)
        if cancelable:
            return keep_going and should_continue()
        return keep_going

    return wrapped


def create_json_callback(file: TextIO | None = None) -> ProgressCallback:
    """Write each report as one JSON object per line.

    Lines look like ``{"event": "progress", "progress": 0.25, "message": "..."}``
    and go to stderr unless *file* is given, so stdout stays free for the
    run summary.
    """

    def json_callback(progress: float, message: str, cancelable: bool) -> bool:
        record = {"event": "progress", "progress": round(progress, 4), "message": message}
        print(json.dumps(record), file=file or sys.stderr, flush=True)
        return True

    return json_callback
