"""Flow documents: one graph snapshot plus its stage records."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, Field, ValidationError

from tabflow.exceptions import FlowLoadError
from tabflow.flow.graph import FlowGraph
from tabflow.flow.registry import ResolverTable, StageConfigRegistry

logger = structlog.get_logger()


class FlowDocument(BaseModel):
    """A flow as exchanged between the editor and tabflow.

    Attributes:
        graph: Nodes and edges.
        stages: Raw stage records grouped by kind (select, filter, ...).
    """

    graph: FlowGraph = Field(default_factory=FlowGraph)
    stages: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)

    def build_resolvers(self, resolvers: ResolverTable | None = None) -> ResolverTable:
        """Load the stage records into a resolver table.

        Records for kinds with no registered registry are ignored.

        Args:
            resolvers: Table to populate; defaults to the built-in kinds.

        Raises:
            StageConfigError: If a record is invalid for its kind.
        """
        table = resolvers if resolvers is not None else ResolverTable.with_defaults()
        for kind, records in self.stages.items():
            registry = table.get(kind)
            if not isinstance(registry, StageConfigRegistry):
                logger.warning("Ignoring records for unknown stage kind", kind=kind)
                continue
            for record in records:
                registry.add(record)
        return table

    def to_dict(self) -> dict[str, Any]:
        data = self.graph.to_dict()
        data["stages"] = self.stages
        return data

    def to_yaml(self) -> str:
        """Serialize to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def save(self, path: Path) -> None:
        path.write_text(self.to_yaml())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FlowDocument:
        """Build a document from the flat ``nodes/edges/stages`` mapping."""
        graph = FlowGraph.model_validate(
            {"nodes": data.get("nodes") or [], "edges": data.get("edges") or []}
        )
        return cls(graph=graph, stages=data.get("stages") or {})

    @classmethod
    def from_yaml(cls, yaml_content: str, *, path: Path | None = None) -> FlowDocument:
        """Parse a document from YAML content.

        Raises:
            FlowLoadError: If the YAML or its schema is invalid.
        """
        try:
            data = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            msg = f"Invalid YAML: {e}"
            raise FlowLoadError(msg, path=path) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            msg = "Flow YAML must be a mapping"
            raise FlowLoadError(msg, path=path)

        try:
            return cls.from_dict(data)
        except ValidationError as e:
            msg = f"Invalid flow document: {e}"
            raise FlowLoadError(msg, path=path) from e

    @classmethod
    def load(cls, path: Path) -> FlowDocument:
        """Load a document from a YAML file.

        Raises:
            FlowLoadError: If the file is missing or invalid.
        """
        if not path.exists():
            msg = f"Flow file not found: {path}"
            raise FlowLoadError(msg, path=path)
        return cls.from_yaml(path.read_text(), path=path)
