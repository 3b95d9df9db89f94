"""Tests for the layout lattice builder.

Covers:
- Lattice dimensions from footprint area and aspect ratio
- Widening the lattice when small nodes undercount the footprint
- Node-to-cell assignment order and cell rectangles
- Adjacency mirroring the input edges
- Fail-fast on malformed graphs and degenerate geometry
"""

from __future__ import annotations

import pytest

from mindmap_layout.exceptions import GraphContractError, LayoutGeometryError
from mindmap_layout.graph import Edge, Node
from mindmap_layout.layout.grid import (
    MIN_NODE_HEIGHT,
    MIN_NODE_WIDTH,
    build_layout,
    lattice_dimensions,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class _RawGraph:
    """Graph double that accepts any edge, including broken ones."""

    def __init__(self, nodes, edges):
        self._nodes = nodes
        self._edges = edges

    def nodes(self):
        return self._nodes

    def edges(self):
        return self._edges


def _cell_of(layout, index):
    for cid in layout.active:
        if layout.cells[cid].node.index() == index:
            return layout.cells[cid]
    raise AssertionError(f"node {index} not placed")


# ---------------------------------------------------------------------------
# Dimensions
# ---------------------------------------------------------------------------


class TestLatticeDimensions:
    """Test rows/cols derived from the node footprint."""

    def test_square_aspect_ratio(self):
        """Ten default-size nodes with 20 spacing give a 5x3 lattice."""
        sizes = [(float(MIN_NODE_WIDTH), float(MIN_NODE_HEIGHT))] * 10
        assert lattice_dimensions(sizes, 1.0, 20.0) == (5, 3)

    def test_wide_aspect_ratio(self):
        """A wide target ratio trades rows for columns."""
        sizes = [(float(MIN_NODE_WIDTH), float(MIN_NODE_HEIGHT))] * 10
        assert lattice_dimensions(sizes, 4.0, 20.0) == (3, 5)

    def test_capacity_covers_every_node(self):
        """Lattice capacity is never smaller than the node count."""
        for count in range(1, 30):
            sizes = [(10.0, 10.0)] * count
            rows, cols = lattice_dimensions(sizes, 1.0, 0.0)
            assert rows * cols >= count

    def test_small_nodes_widen_columns(self):
        """Nodes smaller than the pitch still each get a slot."""
        assert lattice_dimensions([(40.0, 40.0)] * 2, 1.0, 10.0) == (1, 2)

    def test_no_nodes(self):
        """An empty graph gets a single empty cell."""
        assert lattice_dimensions([], 1.0, 10.0) == (1, 1)

    def test_zero_footprint_raises(self):
        """Zero-size nodes with no spacing cannot size a lattice."""
        with pytest.raises(LayoutGeometryError, match="footprint is zero"):
            lattice_dimensions([(0.0, 0.0)], 1.0, 0.0)

    @pytest.mark.parametrize("ratio", [0.0, -1.0, float("nan"), float("inf")])
    def test_bad_aspect_ratio_raises(self, ratio):
        with pytest.raises(LayoutGeometryError, match="Aspect ratio"):
            lattice_dimensions([(40.0, 40.0)], ratio, 10.0)

    @pytest.mark.parametrize("length", [-1.0, float("nan"), float("inf")])
    def test_bad_edge_length_raises(self, length):
        with pytest.raises(LayoutGeometryError, match="edge length"):
            lattice_dimensions([(40.0, 40.0)], 1.0, length)

    def test_infinite_node_size_raises(self):
        with pytest.raises(LayoutGeometryError, match="not finite"):
            lattice_dimensions([(float("inf"), 40.0)], 1.0, 10.0)


# ---------------------------------------------------------------------------
# Build
# ---------------------------------------------------------------------------


class TestBuildLayout:
    """Test the initial lattice contents."""

    def test_two_node_lattice(self, pair_layout):
        """Two connected nodes: two cells, both active."""
        assert pair_layout.cell_count == 2
        assert len(pair_layout.rows) == 1
        assert pair_layout.cols == 2
        assert len(pair_layout.active) == 2
        assert pair_layout.min_edge_length == 10.0

    def test_nodes_consumed_from_end(self, chain_layout):
        """The last node lands in the first cell, row-major."""
        slots = chain_layout.slot_assignment()
        cells = chain_layout.cells
        assert cells[slots[0][0]].node.index() == 2
        assert cells[slots[0][1]].node.index() == 1
        assert cells[slots[1][0]].node.index() == 0
        assert cells[slots[1][1]].node is None

    def test_active_cells_in_build_order(self, chain_layout):
        assert [chain_layout.cells[c].node.index() for c in chain_layout.active] == [2, 1, 0]

    def test_cells_on_zero_gap_pitch(self, chain_layout):
        """Cell rectangles sit on the lattice pitch with no spacing."""
        for j, row in enumerate(chain_layout.rows):
            assert row.y == j * MIN_NODE_HEIGHT
            for i, cid in enumerate(row.slots):
                rect = chain_layout.cells[cid].rect
                assert (rect.x, rect.y) == (i * MIN_NODE_WIDTH, j * MIN_NODE_HEIGHT)
                assert (rect.w, rect.h) == (MIN_NODE_WIDTH, MIN_NODE_HEIGHT)

    def test_empty_cells_are_inactive(self, chain_layout):
        empty = [c for c in chain_layout.cells if not c.is_active]
        assert len(empty) == 1
        assert empty[0].outgoing == []
        assert empty[0].incoming == []

    def test_adjacency_mirrors_edges(self, chain_layout):
        """Every edge appears as outgoing on the source and incoming on the target."""
        c0 = _cell_of(chain_layout, 0)
        c1 = _cell_of(chain_layout, 1)
        c2 = _cell_of(chain_layout, 2)
        assert c0.outgoing == [c1.id]
        assert c1.incoming == [c0.id]
        assert c1.outgoing == [c2.id]
        assert c2.incoming == [c1.id]
        assert c0.incoming == []
        assert c2.outgoing == []

    def test_each_node_in_exactly_one_cell(self, graph_factory):
        graph = graph_factory(13, [(0, i) for i in range(1, 13)], width=200, height=75)
        layout = build_layout(graph, 1.5, 20.0)
        placed = [layout.cells[c].node.index() for c in layout.active]
        assert sorted(placed) == list(range(13))
        assert sum(1 for c in layout.cells if c.is_active) == 13

    def test_empty_graph(self, graph_factory):
        layout = build_layout(graph_factory(0), 1.0, 10.0)
        assert layout.cell_count == 1
        assert layout.active == []

    def test_edge_to_unknown_node_raises(self):
        """An edge whose endpoint has no cell is a contract violation."""
        graph = _RawGraph([Node(0), Node(1)], [Edge(0, 1), Edge(1, 99)])
        with pytest.raises(GraphContractError) as exc_info:
            build_layout(graph, 1.0, 10.0)
        assert exc_info.value.context == {"source": 1, "target": 99}

    def test_zero_footprint_graph_raises(self):
        graph = _RawGraph([Node(0, width=0, height=0)], [])
        with pytest.raises(LayoutGeometryError):
            build_layout(graph, 1.0, 0.0)

