"""LayoutOptimizer: build, optimize and extract in one object.

Usage::

    from mindmap_layout.layout import LayoutOptimizer

    optimizer = LayoutOptimizer(graph, seed=42)
    optimizer.initialize(aspect_ratio=16 / 9, min_edge_length=20.0)
    stats = optimizer.optimize()
    optimizer.extract()

Every call to :meth:`initialize` snapshots the graph again; there is no
incremental re-layout.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..exceptions import OptimizerStateError
from ..progress import ProgressCallback
from .annealer import Annealer, AnnealingSchedule, AnnealingStats
from .cost import total_cost
from .extract import extract as extract_layout
from .grid import Layout, build_layout
from .random_source import RandomSource, make_random_source

if TYPE_CHECKING:
    from ..graph import LayoutGraph

logger = logging.getLogger(__name__)


class LayoutOptimizer:
    """Automatic layout of a graph on a grid via simulated annealing.

    Args:
        graph: Node/edge collaborator. Node locations are written only by
            :meth:`extract`.
        schedule: Annealing schedule; defaults to the standard constants.
        seed: A :class:`RandomSource` or integer seed. One source is used
            for every run made by this optimizer.
    """

    def __init__(
        self,
        graph: LayoutGraph,
        schedule: AnnealingSchedule | None = None,
        seed: RandomSource | int | None = None,
    ) -> None:
        self.graph = graph
        self.schedule = schedule or AnnealingSchedule()
        self.random = make_random_source(seed)
        self._layout: Layout | None = None

    @property
    def layout(self) -> Layout:
        if self._layout is None:
            raise OptimizerStateError(
                "Layout optimizer is not initialized",
                suggestions=["Call initialize(aspect_ratio, min_edge_length) first"],
            )
        return self._layout

    @property
    def cost(self) -> float:
        """Current aggregate connection cost of the layout."""
        return total_cost(self.layout)

    def initialize(self, aspect_ratio: float, min_edge_length: float) -> None:
        """Build the lattice from the current node/edge snapshot."""
        logger.info(
            "Initializing layout optimizer: aspect_ratio=%s, min_edge_length=%s",
            aspect_ratio,
            min_edge_length,
        )
        self._layout = build_layout(self.graph, aspect_ratio, min_edge_length)

    def optimize(self, progress_callback: ProgressCallback | None = None) -> AnnealingStats:
        """Run a full anneal on the current arrangement.

        Calling again starts a fresh anneal from the already optimized
        arrangement.
        """
        layout = self.layout
        if layout.extracted:
            raise OptimizerStateError(
                "Cannot optimize a layout that has already been extracted",
                suggestions=["Call initialize() again to build a fresh layout"],
            )
        annealer = Annealer(layout, self.schedule, self.random)
        return annealer.run(progress_callback)

    def extract(self) -> tuple[float, float]:
        """Write final node locations, centered on the origin.

        Returns:
            ``(width, height)`` of the laid-out lattice.
        """
        return extract_layout(self.layout)

    def run(
        self,
        aspect_ratio: float,
        min_edge_length: float,
        progress_callback: ProgressCallback | None = None,
    ) -> AnnealingStats:
        """Convenience wrapper: initialize, optimize and extract."""
        self.initialize(aspect_ratio, min_edge_length)
        stats = self.optimize(progress_callback)
        self.extract()
        return stats
