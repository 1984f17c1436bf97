"""Flow graph models: nodes, edges and the graph snapshot."""

from __future__ import annotations

from enum import Enum
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from tabflow.flow.constants import START_KIND, STRUCTURAL_KINDS


class NodeKind(str, Enum):
    """Known node kinds.

    The set is open: ``Node.kind`` is a plain string so editors can
    introduce kinds that have no member here.
    """

    START = "start"
    END = "end"
    SELECT = "select"
    FILTER = "filter"
    STR = "str"
    RENAME = "rename"


class Position(BaseModel):
    """Canvas position of a node (editor only)."""

    x: float = 0.0
    y: float = 0.0


class Node(BaseModel):
    """A single node of a flow graph.

    Attributes:
        id: Unique identifier within the graph.
        kind: Node kind tag (start, end, select, filter, str, rename, ...).
        label: Display label.
        position: Canvas position.
    """

    id: str = Field(..., min_length=1)
    kind: str = Field(..., min_length=1)
    label: str = ""
    position: Position = Field(default_factory=Position)

    @field_validator("kind", mode="before")
    @classmethod
    def normalize_kind(cls, v: Any) -> Any:
        """Accept NodeKind members as well as raw strings."""
        if isinstance(v, NodeKind):
            return v.value
        return v

    @property
    def is_start(self) -> bool:
        return self.kind == START_KIND

    @property
    def is_structural(self) -> bool:
        """Whether the node marks a pipeline boundary (start/end)."""
        return self.kind in STRUCTURAL_KINDS


class Edge(BaseModel):
    """A directed connection from ``source`` to ``target``."""

    source: str
    target: str
    id: str | None = None

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


class FlowGraph(BaseModel):
    """Snapshot of a flow graph.

    Edge order is significant: it is the tie-break order for every
    traversal over the graph. Cycles, disconnected nodes and dangling
    edges are allowed at rest; validity is decided by the validator.

    Attributes:
        nodes: Nodes in declaration order.
        edges: Edges in declaration order.
    """

    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    @field_validator("nodes")
    @classmethod
    def validate_nodes(cls, v: list[Node]) -> list[Node]:
        """Validate node list."""
        ids = [n.id for n in v]
        if len(ids) != len(set(ids)):
            msg = "Duplicate node IDs found"
            raise ValueError(msg)

        return v

    @property
    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]

    def get_node(self, node_id: str) -> Node | None:
        """Get a node by ID."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def node_map(self) -> dict[str, Node]:
        """Map node IDs to nodes."""
        return {n.id: n for n in self.nodes}

    def start_nodes(self) -> list[Node]:
        """All nodes of kind ``start``, in declaration order."""
        return [n for n in self.nodes if n.is_start]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump(mode="json", exclude_none=True)

    def to_yaml(self) -> str:
        """Serialize to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    @classmethod
    def from_yaml(cls, yaml_content: str) -> FlowGraph:
        """Parse a graph from YAML content.

        Raises:
            ValueError: If the YAML is invalid.
        """
        try:
            data = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            msg = f"Invalid YAML: {e}"
            raise ValueError(msg) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            msg = "Graph YAML must be a mapping"
            raise ValueError(msg)

        return cls.model_validate(data)
