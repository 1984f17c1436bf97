"""Unit tests for the flow graph models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from tabflow.flow.compiler import ExecutionCompiler
from tabflow.flow.graph import Edge, FlowGraph, Node, NodeKind
from tabflow.flow.registry import ResolverTable
from tabflow.flow.validator import validate_execution_path


class TestNodeKind:
    """Tests for NodeKind enum."""

    def test_all_kinds_exist(self):
        """Test that all expected node kinds exist."""
        assert NodeKind.START.value == "start"
        assert NodeKind.END.value == "end"
        assert NodeKind.SELECT.value == "select"
        assert NodeKind.FILTER.value == "filter"
        assert NodeKind.STR.value == "str"
        assert NodeKind.RENAME.value == "rename"


class TestNode:
    """Tests for Node model."""

    def test_enum_kind_is_stored_as_string(self):
        node = Node(id="a", kind=NodeKind.FILTER)
        assert node.kind == "filter"
        assert node.kind == NodeKind.FILTER

    def test_unknown_kind_is_accepted(self):
        node = Node(id="a", kind="dedupe")
        assert node.kind == "dedupe"
        assert not node.is_structural

    def test_structural_kinds(self):
        assert Node(id="s", kind="start").is_structural
        assert Node(id="e", kind="end").is_structural
        assert Node(id="s", kind="start").is_start
        assert not Node(id="x", kind="select").is_structural

    def test_empty_id_rejected(self):
        with pytest.raises(ValidationError):
            Node(id="", kind="start")

    def test_default_payload(self):
        node = Node(id="a", kind="select")
        assert node.label == ""
        assert node.position.x == 0.0
        assert node.position.y == 0.0


class TestEdge:
    """Tests for Edge model."""

    def test_self_loop_is_allowed(self):
        edge = Edge(source="a", target="a")
        assert edge.is_self_loop

    def test_regular_edge(self):
        edge = Edge(source="a", target="b", id="e1")
        assert not edge.is_self_loop
        assert edge.id == "e1"


class TestFlowGraph:
    """Tests for FlowGraph model."""

    def test_empty_graph(self):
        graph = FlowGraph()
        assert graph.nodes == []
        assert graph.edges == []
        assert graph.start_nodes() == []

    def test_duplicate_node_ids_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate node IDs"):
            FlowGraph(nodes=[Node(id="a", kind="start"), Node(id="a", kind="end")])

    def test_large_chain_validates_and_compiles(self):
        selects = [f"sel{i}" for i in range(500)]
        ids = ["start", *selects]
        graph = FlowGraph(
            nodes=[Node(id="start", kind="start")]
            + [Node(id=node_id, kind="select") for node_id in selects],
            edges=[Edge(source=s, target=t) for s, t in zip(ids, ids[1:])],
        )
        assert len(graph.nodes) == 501

        result = validate_execution_path(graph)
        assert result.valid
        assert result.path_ids == ids

        table = ResolverTable.with_defaults()
        for node_id in selects:
            table["select"].add({"id": node_id, "column": "name"})
        operations = ExecutionCompiler(table).compile(graph)
        assert [op.node_id for op in operations] == selects

    def test_dangling_edges_allowed(self):
        graph = FlowGraph(
            nodes=[Node(id="a", kind="start")],
            edges=[Edge(source="a", target="ghost")],
        )
        assert len(graph.edges) == 1

    def test_get_node(self, linear_graph):
        assert linear_graph.get_node("sel").kind == "select"
        assert linear_graph.get_node("missing") is None

    def test_start_nodes_in_declaration_order(self, build_graph):
        graph = build_graph([("s2", "start"), ("x", "select"), ("s1", "start")], [])
        assert [n.id for n in graph.start_nodes()] == ["s2", "s1"]

    def test_yaml_round_trip_keeps_edge_order(self, build_graph):
        graph = build_graph(
            [("s", "start"), ("b", "end"), ("a", "end")],
            [("s", "b"), ("s", "a")],
        )
        loaded = FlowGraph.from_yaml(graph.to_yaml())
        assert [(e.source, e.target) for e in loaded.edges] == [("s", "b"), ("s", "a")]
        assert loaded.node_ids == ["s", "b", "a"]

    def test_from_yaml_rejects_non_mapping(self):
        with pytest.raises(ValueError, match="mapping"):
            FlowGraph.from_yaml("- a\n- b\n")

    def test_from_yaml_rejects_invalid_yaml(self):
        with pytest.raises(ValueError, match="Invalid YAML"):
            FlowGraph.from_yaml("nodes: [unclosed")
