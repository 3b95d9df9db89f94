"""Pytest fixtures for mindmap-layout tests."""

import pytest

from mindmap_layout.graph import MindMapGraph, Node
from mindmap_layout.layout.grid import Layout, build_layout


def make_graph(count: int, edges=(), width: float = 40.0, height: float = 40.0) -> MindMapGraph:
    """Create a graph of *count* equally sized nodes indexed 0..count-1."""
    graph = MindMapGraph()
    for i in range(count):
        graph.add_node(Node(i, width=width, height=height, text=f"node {i}"))
    for source, target in edges:
        graph.add_edge(source, target)
    return graph


class ScriptedRandom:
    """Random source that replays fixed integer and float sequences."""

    def __init__(self, ints=(), floats=()):
        self.ints = list(ints)
        self.floats = list(floats)

    def randbelow(self, n: int) -> int:
        value = self.ints.pop(0)
        assert 0 <= value < n, f"scripted value {value} out of range for {n}"
        return value

    def random(self) -> float:
        return self.floats.pop(0)


@pytest.fixture
def graph_factory():
    """Factory for small test graphs."""
    return make_graph


@pytest.fixture
def scripted_random():
    """The ScriptedRandom class, for replaying exact random draws."""
    return ScriptedRandom


@pytest.fixture
def pair_layout() -> Layout:
    """Two 40x40 nodes joined by one edge: a 1x2 lattice."""
    return build_layout(make_graph(2, [(0, 1)]), aspect_ratio=1.0, min_edge_length=10.0)


@pytest.fixture
def chain_graph() -> MindMapGraph:
    """Three 40x40 nodes in a chain 0 -> 1 -> 2."""
    return make_graph(3, [(0, 1), (1, 2)])


@pytest.fixture
def chain_layout(chain_graph) -> Layout:
    """The chain graph on a 2x2 lattice.

    Initial slots (row, column):
        (0, 0): node 2   (0, 1): node 1
        (1, 0): node 0   (1, 1): empty
    """
    return build_layout(chain_graph, aspect_ratio=1.0, min_edge_length=10.0)
