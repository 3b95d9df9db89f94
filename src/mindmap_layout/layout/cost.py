"""Connection cost of a lattice arrangement.

The cost of a directed edge is the Manhattan distance between the centers
of the two cells' *current* rectangles (not the nodes' real sizes). The
layout cost sums every edge once, from its source side, so it is never
negative.

:func:`compound_cost` covers both edge directions of one cell and is only
used to evaluate a candidate move incrementally.
"""

from __future__ import annotations

from typing import Iterable

from .grid import Cell, Layout


def distance(a: Cell, b: Cell) -> float:
    """Manhattan distance between the centers of two cells."""
    ax, ay = a.rect.center
    bx, by = b.rect.center
    return abs(ax - bx) + abs(ay - by)


def _connection_cost(layout: Layout, cell: Cell, connections: Iterable[int]) -> float:
    cells = layout.cells
    return sum(distance(cell, cells[cid]) for cid in connections)


def out_cost(layout: Layout, cell: Cell) -> float:
    """Cost of the edges leaving *cell*."""
    return _connection_cost(layout, cell, cell.outgoing)


def compound_cost(layout: Layout, cell: Cell) -> float:
    """Cost of every edge touching *cell*, incoming and outgoing."""
    return _connection_cost(layout, cell, cell.incoming) + _connection_cost(
        layout, cell, cell.outgoing
    )


def total_cost(layout: Layout) -> float:
    """Aggregate cost of the whole layout."""
    return sum(out_cost(layout, layout.cells[cid]) for cid in layout.active)
