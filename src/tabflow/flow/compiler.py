"""Compile a flow graph into an ordered list of engine operations."""

from __future__ import annotations

from collections import deque

import structlog

from tabflow.flow.graph import FlowGraph
from tabflow.flow.index import build_adjacency
from tabflow.flow.params import CompiledOperation
from tabflow.flow.registry import ResolverTable

logger = structlog.get_logger()


def summarize_operations(operations: list[CompiledOperation]) -> str:
    """One-line ``op(parameter)`` summary of a compiled flow."""
    return ",".join(op.label for op in operations)


class ExecutionCompiler:
    """Turns a graph snapshot into compiled operations.

    Nodes are visited breadth first from the start node, following edges
    in declaration order. Structural nodes and nodes with no resolvable
    configuration contribute nothing. The compiler never raises; a
    malformed graph just yields fewer operations.
    """

    def __init__(self, resolvers: ResolverTable) -> None:
        self.resolvers = resolvers

    def compile(self, graph: FlowGraph) -> list[CompiledOperation]:
        """Compile a graph.

        Args:
            graph: Graph snapshot; not required to have been validated.

        Returns:
            Operations in visitation order (possibly empty).
        """
        start_nodes = graph.start_nodes()
        if not start_nodes:
            logger.warning("No start node found")
            return []

        index = build_adjacency(graph)
        nodes = graph.node_map()
        operations: list[CompiledOperation] = []
        visited: set[str] = set()
        queue: deque[str] = deque([start_nodes[0].id])

        while queue:
            node_id = queue.popleft()
            if node_id in visited:
                continue
            visited.add(node_id)

            node = nodes[node_id]
            if not node.is_structural:
                operation = self.resolvers.resolve(node.kind, node_id)
                if operation is not None:
                    operations.append(operation)
                else:
                    logger.debug("Skipping unconfigured node", node_id=node_id, kind=node.kind)

            queue.extend(n for n in index.successors(node_id) if n not in visited)

        logger.info(
            "Compiled flow",
            count=len(operations),
            operations=summarize_operations(operations),
        )
        return operations


def compile_flow(graph: FlowGraph, resolvers: ResolverTable) -> list[CompiledOperation]:
    """Compile ``graph`` with a one-off compiler."""
    return ExecutionCompiler(resolvers).compile(graph)
