"""Execution path validation for flow graphs."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

from tabflow.flow.graph import FlowGraph, Node
from tabflow.flow.index import build_adjacency

logger = structlog.get_logger()


class ValidationReason(str, Enum):
    """Why a flow graph failed validation."""

    NO_START = "no_start"
    MULTI_START = "multi_start"
    NO_LEAF_NODE = "no_leaf_node"
    NO_PATH = "no_path"

    @property
    def message(self) -> str:
        """Guidance text to show the user."""
        return _REASON_MESSAGES[self]


_REASON_MESSAGES: dict[ValidationReason, str] = {
    ValidationReason.NO_START: "The flow needs a <Start> node.",
    ValidationReason.MULTI_START: "The flow can only have one <Start> node.",
    ValidationReason.NO_LEAF_NODE: "The flow has no final node; every node has an outgoing connection.",
    ValidationReason.NO_PATH: "No complete path leads from <Start> to a final node.",
}


@dataclass
class ValidationResult:
    """Verdict of a path validation.

    Attributes:
        valid: Whether a start-to-leaf path exists.
        path: Nodes of the discovered path (empty on failure).
        reason: Failure reason, None when valid.
    """

    valid: bool
    path: list[Node] = field(default_factory=list)
    reason: ValidationReason | None = None

    def __bool__(self) -> bool:
        """Return validity."""
        return self.valid

    @property
    def path_ids(self) -> list[str]:
        return [n.id for n in self.path]

    @property
    def message(self) -> str:
        if self.reason is None:
            return ""
        return self.reason.message

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"valid": self.valid, "path": self.path_ids}
        if self.reason is not None:
            data["reason"] = self.reason.value
        return data


def _fail(reason: ValidationReason) -> ValidationResult:
    logger.debug("Flow validation failed", reason=reason.value)
    return ValidationResult(valid=False, reason=reason)


def validate_execution_path(graph: FlowGraph) -> ValidationResult:
    """Check that a graph describes a terminating run from a single start.

    Breadth-first search from the start node; the first dequeued node
    without outgoing edges ends the search and the path used to reach it
    is returned. Only that one branch is checked: a graph whose start
    fans out into a good chain and a dead-end branch is still valid.

    Args:
        graph: Graph snapshot.

    Returns:
        ValidationResult with the discovered path or a reason code.
    """
    start_nodes = graph.start_nodes()
    if not start_nodes:
        return _fail(ValidationReason.NO_START)
    if len(start_nodes) > 1:
        return _fail(ValidationReason.MULTI_START)

    start = start_nodes[0]
    index = build_adjacency(graph)

    # A start node with no outgoing edges is its own leaf
    leaves = [n for n in graph.nodes if not index.has_outgoing(n.id)]
    if not leaves:
        return _fail(ValidationReason.NO_LEAF_NODE)

    nodes = graph.node_map()
    visited = {start.id}
    queue: deque[tuple[str, list[str]]] = deque([(start.id, [start.id])])

    while queue:
        node_id, path = queue.popleft()

        successors = index.successors(node_id)
        if not successors:
            logger.debug("Flow validation passed", path=path)
            return ValidationResult(valid=True, path=[nodes[pid] for pid in path])

        for successor in successors:
            if successor not in visited:
                visited.add(successor)
                queue.append((successor, [*path, successor]))

    return _fail(ValidationReason.NO_PATH)
