"""
mindmap-layout: automatic grid layout for mind-map graphs.

Places rectangular nodes connected by directed edges on a 2D plane so that
connected nodes end up close together, using simulated annealing on a
grid lattice.

Modules:
    layout: lattice builder, cost model, annealer and extractor
    graph: graph collaborator protocols and an in-memory mind-map graph
    config: TOML configuration files
    progress: progress reporting and cancellation callbacks
    exceptions: error hierarchy

Quick Start::

    from mindmap_layout import LayoutOptimizer, MindMapGraph, Node

    graph = MindMapGraph()
    for i in range(3):
        graph.add_node(Node(i))
    graph.add_edge(0, 1)
    graph.add_edge(1, 2)

    optimizer = LayoutOptimizer(graph, seed=42)
    optimizer.initialize(aspect_ratio=1.0, min_edge_length=20.0)
    stats = optimizer.optimize()
    optimizer.extract()
"""

__version__ = "0.1.0"

from mindmap_layout.exceptions import (
    ConfigurationError,
    GraphContractError,
    LayoutGeometryError,
    MindMapLayoutError,
    OptimizerStateError,
    ValidationError,
)
from mindmap_layout.graph import Edge, LayoutEdge, LayoutGraph, LayoutNode, MindMapGraph, Node
from mindmap_layout.layout import (
    AnnealingSchedule,
    AnnealingStats,
    LayoutOptimizer,
    NumpyRandomSource,
)

__all__ = [
    "__version__",
    # Optimizer
    "LayoutOptimizer",
    "AnnealingSchedule",
    "AnnealingStats",
    "NumpyRandomSource",
    # Graph
    "MindMapGraph",
    "Node",
    "Edge",
    "LayoutGraph",
    "LayoutNode",
    "LayoutEdge",
    # Errors
    "MindMapLayoutError",
    "ValidationError",
    "GraphContractError",
    "LayoutGeometryError",
    "OptimizerStateError",
    "ConfigurationError",
]
