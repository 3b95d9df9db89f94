"""Graph collaborator interface and an in-memory mind-map graph.

The layout engine never owns the authoritative node/edge list. It reads a
:class:`LayoutGraph` snapshot: a stable ordered node sequence, each node
exposing its index, size and a mutable location, plus a directed edge
sequence. Host applications implement the protocols on their own types;
:class:`MindMapGraph` is a small ready-made implementation used by the CLI
and the tests.

Usage::

    from mindmap_layout.graph import MindMapGraph, Node

    graph = MindMapGraph()
    graph.add_node(Node(0, text="root"))
    graph.add_node(Node(1, text="child"))
    graph.add_edge(0, 1)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence, runtime_checkable

from .exceptions import GraphContractError, ValidationError
from .layout.grid import MIN_NODE_HEIGHT, MIN_NODE_WIDTH

# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class LayoutNode(Protocol):
    """A node as seen by the layout engine."""

    def index(self) -> int: ...

    def size(self) -> tuple[float, float]: ...

    def location(self) -> tuple[float, float]: ...

    def set_location(self, x: float, y: float) -> None: ...


class LayoutEdge(Protocol):
    """A directed edge between two node indices."""

    @property
    def source_index(self) -> int: ...

    @property
    def target_index(self) -> int: ...


class LayoutGraph(Protocol):
    """Read access to the node and edge snapshot."""

    def nodes(self) -> Sequence[LayoutNode]: ...

    def edges(self) -> Sequence[LayoutEdge]: ...


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------


@dataclass
class Node:
    """A mind-map node.

    Attributes:
        node_index: Stable integer index, unique within a graph.
        width: Node width. Defaults to the minimum node width.
        height: Node height. Defaults to the minimum node height.
        x: Current X location (node center).
        y: Current Y location (node center).
        text: Node label.
    """

    node_index: int
    width: float = float(MIN_NODE_WIDTH)
    height: float = float(MIN_NODE_HEIGHT)
    x: float = 0.0
    y: float = 0.0
    text: str = ""

    def index(self) -> int:
        return self.node_index

    def size(self) -> tuple[float, float]:
        return (self.width, self.height)

    def location(self) -> tuple[float, float]:
        return (self.x, self.y)

    def set_location(self, x: float, y: float) -> None:
        self.x = x
        self.y = y


@dataclass(frozen=True)
class Edge:
    """A directed edge from ``source_index`` to ``target_index``."""

    source_index: int
    target_index: int


@dataclass
class MindMapGraph:
    """Ordered node store with a directed edge list.

    Nodes keep insertion order; that order is the "stable ordered node
    list" the grid builder consumes.
    """

    _nodes: dict[int, Node] = field(default_factory=dict)
    _edges: list[Edge] = field(default_factory=list)

    def add_node(self, node: Node) -> Node:
        """Add a node. Raises GraphContractError on a duplicate index."""
        if node.node_index in self._nodes:
            raise GraphContractError(
                f"Duplicate node index {node.node_index}",
                context={"index": node.node_index},
                suggestions=["Give every node a unique index"],
            )
        self._nodes[node.node_index] = node
        return node

    def add_edge(self, source_index: int, target_index: int) -> Edge:
        """Add a directed edge between two existing nodes."""
        for role, idx in (("source", source_index), ("target", target_index)):
            if idx not in self._nodes:
                raise GraphContractError(
                    f"Edge {role} references unknown node {idx}",
                    context={"source": source_index, "target": target_index},
                    suggestions=["Add both nodes before connecting them"],
                )
        edge = Edge(source_index, target_index)
        self._edges.append(edge)
        return edge

    def get(self, index: int) -> Node:
        return self._nodes[index]

    def nodes(self) -> list[Node]:
        return list(self._nodes.values())

    def edges(self) -> list[Edge]:
        return list(self._edges)

    def __len__(self) -> int:
        return len(self._nodes)

    # -----------------------------------------------------------------------
    # JSON exchange format
    # -----------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MindMapGraph:
        """Build a graph from the CLI's JSON exchange format.

        Every problem in *data* is collected and reported in one
        :class:`ValidationError`.
        """
        errors: list[str] = []
        graph = cls()

        raw_nodes = data.get("nodes", [])
        raw_edges = data.get("edges", [])
        if not isinstance(raw_nodes, list):
            errors.append("'nodes' must be a list")
            raw_nodes = []
        if not isinstance(raw_edges, list):
            errors.append("'edges' must be a list")
            raw_edges = []

        for i, raw in enumerate(raw_nodes):
            if not isinstance(raw, dict) or "index" not in raw:
                errors.append(f"nodes[{i}]: missing 'index'")
                continue
            try:
                node = Node(
                    node_index=int(raw["index"]),
                    width=float(raw.get("width", MIN_NODE_WIDTH)),
                    height=float(raw.get("height", MIN_NODE_HEIGHT)),
                    x=float(raw.get("x", 0.0)),
                    y=float(raw.get("y", 0.0)),
                    text=str(raw.get("text", "")),
                )
            except (TypeError, ValueError) as e:
                errors.append(f"nodes[{i}]: {e}")
                continue
            if node.width < 0 or node.height < 0:
                errors.append(f"nodes[{i}]: negative size {node.width}x{node.height}")
                continue
            if node.node_index in graph._nodes:
                errors.append(f"nodes[{i}]: duplicate index {node.node_index}")
                continue
            graph._nodes[node.node_index] = node

        for i, raw in enumerate(raw_edges):
            if not isinstance(raw, dict) or "source" not in raw or "target" not in raw:
                errors.append(f"edges[{i}]: 'source' and 'target' are required")
                continue
            try:
                source, target = int(raw["source"]), int(raw["target"])
            except (TypeError, ValueError) as e:
                errors.append(f"edges[{i}]: {e}")
                continue
            missing = [idx for idx in (source, target) if idx not in graph._nodes]
            if missing:
                errors.append(f"edges[{i}]: unknown node(s) {missing}")
                continue
            graph._edges.append(Edge(source, target))

        if errors:
            raise ValidationError(errors)
        return graph

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [
                {
                    "index": n.node_index,
                    "width": n.width,
                    "height": n.height,
                    "x": n.x,
                    "y": n.y,
                    "text": n.text,
                }
                for n in self._nodes.values()
            ],
            "edges": [{"source": e.source_index, "target": e.target_index} for e in self._edges],
        }
