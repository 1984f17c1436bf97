"""Flow graph model, validation and compilation."""

from tabflow.flow.compiler import ExecutionCompiler, compile_flow, summarize_operations
from tabflow.flow.document import FlowDocument
from tabflow.flow.graph import Edge, FlowGraph, Node, NodeKind, Position
from tabflow.flow.index import AdjacencyIndex, build_adjacency, nodes_in_edge_order
from tabflow.flow.params import (
    CompiledOperation,
    FilterParams,
    RenameParams,
    SelectParams,
    StrParams,
)
from tabflow.flow.registry import (
    ConfigurationResolver,
    ResolverTable,
    StageConfigRegistry,
)
from tabflow.flow.validator import (
    ValidationReason,
    ValidationResult,
    validate_execution_path,
)

__all__ = [
    "AdjacencyIndex",
    "CompiledOperation",
    "ConfigurationResolver",
    "Edge",
    "ExecutionCompiler",
    "FilterParams",
    "FlowDocument",
    "FlowGraph",
    "Node",
    "NodeKind",
    "Position",
    "RenameParams",
    "ResolverTable",
    "SelectParams",
    "StageConfigRegistry",
    "StrParams",
    "ValidationReason",
    "ValidationResult",
    "build_adjacency",
    "compile_flow",
    "nodes_in_edge_order",
    "summarize_operations",
    "validate_execution_path",
]
