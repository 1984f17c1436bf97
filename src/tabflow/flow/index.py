"""Adjacency indexing over a flow graph snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from tabflow.flow.graph import FlowGraph, Node

logger = structlog.get_logger()


@dataclass
class AdjacencyIndex:
    """Forward and (optionally) reverse adjacency of a graph.

    Successor lists keep edge declaration order. Nodes without outgoing
    edges have no key in ``forward``.

    Attributes:
        forward: Node ID to ordered target IDs.
        reverse: Node ID to ordered source IDs (empty unless requested).
    """

    forward: dict[str, list[str]] = field(default_factory=dict)
    reverse: dict[str, list[str]] = field(default_factory=dict)

    def successors(self, node_id: str) -> list[str]:
        return self.forward.get(node_id, [])

    def predecessors(self, node_id: str) -> list[str]:
        return self.reverse.get(node_id, [])

    def has_outgoing(self, node_id: str) -> bool:
        return bool(self.forward.get(node_id))

    def has_incoming(self, node_id: str) -> bool:
        return bool(self.reverse.get(node_id))


def build_adjacency(graph: FlowGraph, *, reverse: bool = False) -> AdjacencyIndex:
    """Index the edges of a graph.

    Edges whose endpoints do not both exist in the graph are ignored.

    Args:
        graph: Graph snapshot.
        reverse: Also build the target-to-sources mapping.

    Returns:
        AdjacencyIndex for the graph.
    """
    known = set(graph.node_ids)
    index = AdjacencyIndex()

    for edge in graph.edges:
        if edge.source not in known or edge.target not in known:
            continue
        if edge.is_self_loop:
            logger.debug("Self loop edge", node_id=edge.source)
        index.forward.setdefault(edge.source, []).append(edge.target)
        if reverse:
            index.reverse.setdefault(edge.target, []).append(edge.source)

    return index


def nodes_in_edge_order(graph: FlowGraph) -> list[Node]:
    """List nodes in connection order.

    Roots are nodes with outgoing edges and no incoming edges, taken in
    declaration order. From each root the graph is walked depth first,
    emitting every node once. Isolated nodes and nodes only reachable
    through a cycle with no root are not listed.
    """
    index = build_adjacency(graph, reverse=True)
    nodes = graph.node_map()
    visited: set[str] = set()
    ordered: list[Node] = []

    roots = [
        n.id
        for n in graph.nodes
        if index.has_outgoing(n.id) and not index.has_incoming(n.id)
    ]

    for root in roots:
        # Iterative pre-order DFS; successors pushed reversed to keep edge order
        stack = [root]
        while stack:
            node_id = stack.pop()
            if node_id in visited:
                continue
            visited.add(node_id)
            ordered.append(nodes[node_id])
            stack.extend(
                n for n in reversed(index.successors(node_id)) if n not in visited
            )

    return ordered
