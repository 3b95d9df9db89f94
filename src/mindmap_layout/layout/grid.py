"""Grid builder: the lattice the annealer optimizes.

The lattice is sized from the aggregate node footprint and a target aspect
ratio. Every node is dropped into one cell on a zero-gap pitch of
``MIN_NODE_WIDTH x MIN_NODE_HEIGHT``; the configured spacing is added back
by the extractor once optimization is done.

Storage is an arena: :attr:`Layout.cells` holds every :class:`Cell` and
everything else (row slots, adjacency, the active list) refers to cells by
their integer id. Adjacency is fixed at build time; the annealer only moves
cell ids between row slots and updates cell rectangles.

Usage::

    layout = build_layout(graph, aspect_ratio=1.0, min_edge_length=20.0)
    layout.rows, layout.cols, len(layout.active)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..exceptions import GraphContractError, LayoutGeometryError

if TYPE_CHECKING:
    from ..graph import LayoutGraph

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MIN_NODE_WIDTH = 200
"""Minimum node width; horizontal lattice pitch."""

MIN_NODE_HEIGHT = 75
"""Minimum node height; vertical lattice pitch."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class Rect:
    """Axis-aligned rectangle (top-left corner plus size)."""

    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.w / 2, self.y + self.h / 2)

    def copy(self) -> Rect:
        return Rect(self.x, self.y, self.w, self.h)


@dataclass
class Cell:
    """One lattice slot, optionally holding a node.

    Attributes:
        id: Position of this cell in :attr:`Layout.cells`.
        rect: Current rectangle (always on the lattice pitch until extraction).
        stash: Rectangle saved by the last tentative move, for reverting.
        node: The node held by this cell, or None for open lattice space.
        outgoing: Ids of cells this cell's node has edges to.
        incoming: Ids of cells with edges to this cell's node.
    """

    id: int
    rect: Rect
    stash: Rect = field(default_factory=Rect)
    node: Any = None
    outgoing: list[int] = field(default_factory=list)
    incoming: list[int] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.node is not None

    def push_rect(self) -> None:
        self.stash = self.rect.copy()

    def pop_rect(self) -> None:
        self.rect = self.stash.copy()


@dataclass
class Row:
    """A horizontal run of lattice slots sharing one Y position.

    ``slots[i]`` is the id of the cell currently in column *i*.
    """

    y: float
    slots: list[int] = field(default_factory=list)
    x: float = 0.0


@dataclass
class Layout:
    """The whole lattice.

    Attributes:
        cells: Arena of every cell, indexed by cell id.
        rows: Rows in top-to-bottom order.
        active: Ids of cells holding a node, in build order.
        min_edge_length: Spacing the extractor re-introduces between cells.
        extracted: Set once the extractor has written node locations.
    """

    cells: list[Cell] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)
    active: list[int] = field(default_factory=list)
    min_edge_length: float = 0.0
    extracted: bool = False

    @property
    def cols(self) -> int:
        return len(self.rows[0].slots) if self.rows else 0

    @property
    def cell_count(self) -> int:
        return sum(len(row.slots) for row in self.rows)

    def cell(self, cell_id: int) -> Cell:
        return self.cells[cell_id]

    def slot_assignment(self) -> list[list[int]]:
        """Snapshot of which cell occupies each slot."""
        return [list(row.slots) for row in self.rows]


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def lattice_dimensions(
    sizes: list[tuple[float, float]],
    aspect_ratio: float,
    min_edge_length: float,
) -> tuple[int, int]:
    """Compute ``(rows, cols)`` for nodes of the given sizes.

    The footprint of a node is its size grown by *min_edge_length* in both
    directions. The lattice gets the target aspect ratio over the total
    footprint, with one spare row and column. When nodes are smaller than
    the pitch the footprint can undercount, so columns are widened until
    every node has a slot.

    Raises:
        LayoutGeometryError: On bad parameters or a zero footprint.
    """
    if not (math.isfinite(aspect_ratio) and aspect_ratio > 0):
        raise LayoutGeometryError(
            "Aspect ratio must be positive and finite",
            context={"aspect_ratio": aspect_ratio},
        )
    if not (math.isfinite(min_edge_length) and min_edge_length >= 0):
        raise LayoutGeometryError(
            "Minimum edge length must be finite and not negative",
            context={"min_edge_length": min_edge_length},
        )
    if not sizes:
        return (1, 1)

    area = sum((w + min_edge_length) * (h + min_edge_length) for w, h in sizes)
    if not math.isfinite(area):
        raise LayoutGeometryError(
            "Total node footprint is not finite",
            context={"nodes": len(sizes), "min_edge_length": min_edge_length},
            suggestions=["Check node sizes for infinite or NaN values"],
        )
    if area <= 0:
        raise LayoutGeometryError(
            "Total node footprint is zero; cannot size the layout lattice",
            context={"nodes": len(sizes), "min_edge_length": min_edge_length},
            suggestions=["Give nodes a non-zero size or use a positive minimum edge length"],
        )

    height = math.sqrt(area / aspect_ratio)
    width = area / height if height > 0 else math.inf
    if not math.isfinite(width):
        raise LayoutGeometryError(
            "Aspect ratio is too extreme for the node footprint",
            context={"aspect_ratio": aspect_ratio, "area": area},
        )

    rows = int(height / (MIN_NODE_HEIGHT + min_edge_length)) + 1
    cols = int(width / (MIN_NODE_WIDTH + min_edge_length)) + 1
    if rows * cols < len(sizes):
        cols = math.ceil(len(sizes) / rows)
    return (rows, cols)


def build_layout(
    graph: LayoutGraph,
    aspect_ratio: float,
    min_edge_length: float,
) -> Layout:
    """Build the initial lattice from a graph snapshot.

    Nodes are consumed from the end of the node list and assigned row-major
    until the list is exhausted; remaining cells stay empty.

    Raises:
        LayoutGeometryError: If the lattice size cannot be derived.
        GraphContractError: If an edge references a node with no cell.
    """
    nodes = list(graph.nodes())
    rows, cols = lattice_dimensions(
        [tuple(n.size()) for n in nodes], aspect_ratio, min_edge_length
    )

    layout = Layout(min_edge_length=min_edge_length)
    node_to_cell: dict[int, int] = {}

    for j in range(rows):
        row = Row(y=float(j * MIN_NODE_HEIGHT))
        for i in range(cols):
            cell = Cell(
                id=len(layout.cells),
                rect=Rect(
                    x=row.x + i * MIN_NODE_WIDTH,
                    y=row.y,
                    w=MIN_NODE_WIDTH,
                    h=MIN_NODE_HEIGHT,
                ),
            )
            layout.cells.append(cell)
            row.slots.append(cell.id)

            if nodes:
                cell.node = nodes.pop()
                node_to_cell[cell.node.index()] = cell.id
                layout.active.append(cell.id)
        layout.rows.append(row)

    for edge in graph.edges():
        source = node_to_cell.get(edge.source_index)
        target = node_to_cell.get(edge.target_index)
        if source is None or target is None:
            raise GraphContractError(
                "Edge references a node with no layout cell",
                context={"source": edge.source_index, "target": edge.target_index},
                suggestions=["Make sure every edge endpoint is in the graph's node list"],
            )
        layout.cells[source].outgoing.append(target)
        layout.cells[target].incoming.append(source)

    logger.info(
        "Built %dx%d layout lattice: %d active cells, aspect_ratio=%s, min_edge_length=%s",
        rows,
        cols,
        len(layout.active),
        aspect_ratio,
        min_edge_length,
    )
    return layout
