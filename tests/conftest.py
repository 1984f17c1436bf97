"""Pytest fixtures for tabflow tests."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

import pytest
import structlog

from tabflow.config import EngineType, TabflowConfig
from tabflow.engine.fake import FakeEngine
from tabflow.flow.document import FlowDocument
from tabflow.flow.graph import Edge, FlowGraph, Node
from tabflow.flow.registry import ResolverTable


def _make_graph(nodes: list[tuple[str, str]], edges: list[tuple[str, str]]) -> FlowGraph:
    """Build a graph from ``(id, kind)`` and ``(source, target)`` pairs."""
    return FlowGraph(
        nodes=[Node(id=node_id, kind=kind) for node_id, kind in nodes],
        edges=[Edge(source=s, target=t) for s, t in edges],
    )


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo logging configuration done by CLI tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def build_graph():
    """Factory building a graph from (id, kind) and (source, target) pairs."""
    return _make_graph


@pytest.fixture
def linear_graph() -> FlowGraph:
    """start -> sel -> flt -> end."""
    return _make_graph(
        [("start", "start"), ("sel", "select"), ("flt", "filter"), ("end", "end")],
        [("start", "sel"), ("sel", "flt"), ("flt", "end")],
    )


@pytest.fixture
def resolvers() -> ResolverTable:
    """Default resolver table with records for ``sel`` and ``flt``."""
    table = ResolverTable.with_defaults()
    table["select"].add({"id": "sel", "column": "name|city"})
    table["filter"].add(
        {"id": "flt", "mode": "equal", "column": "city", "value": "Paris", "logic": "and"}
    )
    return table


@pytest.fixture
def flow_document() -> FlowDocument:
    """A complete four-stage flow."""
    return FlowDocument.from_dict(
        {
            "nodes": [
                {"id": "start", "kind": "start"},
                {"id": "pick", "kind": "select"},
                {"id": "only_fr", "kind": "filter"},
                {"id": "tidy", "kind": "str"},
                {"id": "ren", "kind": "rename"},
                {"id": "end", "kind": "end"},
            ],
            "edges": [
                {"source": "start", "target": "pick"},
                {"source": "pick", "target": "only_fr"},
                {"source": "only_fr", "target": "tidy"},
                {"source": "tidy", "target": "ren"},
                {"source": "ren", "target": "end"},
            ],
            "stages": {
                "select": [{"id": "pick", "column": "name|city|country"}],
                "filter": [
                    {"id": "only_fr", "mode": "equal", "column": "country", "value": "FR"}
                ],
                "str": [{"id": "tidy", "mode": "trim", "column": "name"}],
                "rename": [{"id": "ren", "column": "city", "value": "town"}],
            },
        }
    )


@pytest.fixture
def flow_file(tmp_path: Path, flow_document: FlowDocument) -> Path:
    """The ``flow_document`` fixture saved as YAML."""
    path = tmp_path / "flow.yaml"
    flow_document.save(path)
    return path


@pytest.fixture
def input_file(tmp_path: Path) -> Path:
    """A small CSV input file."""
    path = tmp_path / "data.csv"
    path.write_text("name,city,country\n Ann ,Paris,FR\nBob,Berlin,DE\n")
    return path


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def fake_config() -> TabflowConfig:
    return TabflowConfig.default(EngineType.FAKE)
