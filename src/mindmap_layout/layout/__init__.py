"""
Grid-based automatic layout for mind-map graphs.

Places rectangular nodes on a lattice so that connected nodes end up close
together, using simulated annealing over pairwise cell swaps:

- grid: lattice construction from the graph snapshot
- cost: Manhattan connection cost
- annealer: Metropolis swap loop with plateau-based cooling
- extract: spacing, centering and write-back of node locations

Usage:
    from mindmap_layout.layout import LayoutOptimizer

    optimizer = LayoutOptimizer(graph, seed=42)
    optimizer.run(aspect_ratio=1.0, min_edge_length=20.0)
"""

from .annealer import Annealer, AnnealingSchedule, AnnealingStats, Change
from .cost import compound_cost, distance, out_cost, total_cost
from .extract import extract
from .grid import MIN_NODE_HEIGHT, MIN_NODE_WIDTH, Cell, Layout, Rect, Row, build_layout
from .optimizer import LayoutOptimizer
from .random_source import NumpyRandomSource, RandomSource, make_random_source

__all__ = [
    "LayoutOptimizer",
    "Annealer",
    "AnnealingSchedule",
    "AnnealingStats",
    "Change",
    "Cell",
    "Layout",
    "Rect",
    "Row",
    "build_layout",
    "extract",
    "compound_cost",
    "distance",
    "out_cost",
    "total_cost",
    "NumpyRandomSource",
    "RandomSource",
    "make_random_source",
    "MIN_NODE_WIDTH",
    "MIN_NODE_HEIGHT",
]
