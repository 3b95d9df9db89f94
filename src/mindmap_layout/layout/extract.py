"""Write the optimized lattice back onto the graph nodes.

The grid builder packs cells with no gaps. Extraction spreads them out
again by ``min_edge_length`` per row and column, measures the bounding box
of the whole lattice and centers it on the origin.

Node locations are offset by half the lattice pitch, not by half of each
node's own size, so nodes larger than the pitch keep their top-left
aligned to the cell.
"""

from __future__ import annotations

import logging

from ..exceptions import OptimizerStateError
from .grid import MIN_NODE_HEIGHT, MIN_NODE_WIDTH, Layout

logger = logging.getLogger(__name__)


def extract(layout: Layout) -> tuple[float, float]:
    """Apply spacing and set the final location of every node.

    Extraction changes the cell rectangles, so it can only run once per
    layout.

    Returns:
        ``(width, height)`` of the spaced-out lattice.

    Raises:
        OptimizerStateError: If the layout was already extracted.
    """
    if layout.extracted:
        raise OptimizerStateError(
            "Layout has already been extracted",
            suggestions=["Call initialize() again to build a fresh layout"],
        )

    spacing = layout.min_edge_length
    max_width = 0.0
    max_height = 0.0
    for j, row in enumerate(layout.rows):
        for i, cell_id in enumerate(row.slots):
            rect = layout.cells[cell_id].rect
            rect.x += i * spacing
            rect.y += j * spacing
            max_width = max(max_width, rect.x + rect.w)
            max_height = max(max_height, rect.y + rect.h)

    for cell_id in layout.active:
        cell = layout.cells[cell_id]
        cell.node.set_location(
            MIN_NODE_WIDTH / 2 + cell.rect.x - max_width / 2,
            MIN_NODE_HEIGHT / 2 + cell.rect.y - max_height / 2,
        )

    layout.extracted = True
    logger.info(
        "Extracted %d node locations, layout size %sx%s",
        len(layout.active),
        max_width,
        max_height,
    )
    return (max_width, max_height)
