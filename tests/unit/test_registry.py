"""Unit tests for stage registries and the resolver table."""

from __future__ import annotations

import pytest

from tabflow.exceptions import StageConfigError
from tabflow.flow.params import CompiledOperation, RenameParams, SelectParams
from tabflow.flow.registry import ConfigurationResolver, ResolverTable, StageConfigRegistry


@pytest.fixture
def select_registry() -> StageConfigRegistry[SelectParams]:
    return StageConfigRegistry("select", SelectParams)


class TestStageConfigRegistry:
    def test_add_and_get(self, select_registry):
        stored = select_registry.add({"id": "n1", "column": "a|b"})
        assert isinstance(stored, SelectParams)
        assert select_registry.get("n1") is stored
        assert "n1" in select_registry
        assert len(select_registry) == 1

    def test_get_missing_is_none(self, select_registry):
        assert select_registry.get("nope") is None

    def test_add_replaces_existing(self, select_registry):
        select_registry.add({"id": "n1", "column": "a"})
        select_registry.add({"id": "n1", "column": "b"})
        assert len(select_registry) == 1
        assert select_registry.get("n1").column == "b"

    def test_add_without_id_ignored(self, select_registry):
        assert select_registry.add({"column": "a"}) is None
        assert select_registry.add({"id": "", "column": "a"}) is None
        assert len(select_registry) == 0

    def test_add_typed_record(self, select_registry):
        params = SelectParams(id="n1", column="a")
        assert select_registry.add(params) is params

    def test_wrong_typed_record_rejected(self, select_registry):
        with pytest.raises(StageConfigError) as exc_info:
            select_registry.add(RenameParams(id="n1", column="a", value="b"))
        assert exc_info.value.kind == "select"
        assert exc_info.value.node_id == "n1"

    def test_wrong_op_rejected(self, select_registry):
        with pytest.raises(StageConfigError, match="Invalid select record"):
            select_registry.add({"id": "n1", "op": "rename", "column": "a"})

    def test_invalid_fields_rejected(self, select_registry):
        with pytest.raises(StageConfigError) as exc_info:
            select_registry.add({"id": "n1"})
        assert exc_info.value.node_id == "n1"

    def test_remove(self, select_registry):
        select_registry.add({"id": "n1", "column": "a"})
        select_registry.remove("n1")
        select_registry.remove("n1")
        assert "n1" not in select_registry

    def test_cleanup_drops_orphans(self, select_registry):
        for node_id in ("keep", "gone1", "gone2"):
            select_registry.add({"id": node_id, "column": "a"})
        removed = select_registry.cleanup(["keep", "other"])
        assert removed == ["gone1", "gone2"]
        assert select_registry.node_ids == ["keep"]

    def test_resolve(self, select_registry):
        select_registry.add({"id": "n1", "column": "a"})
        assert select_registry.resolve("n1") == CompiledOperation(
            node_id="n1", op="select", parameters={"column": "a"}
        )
        assert select_registry.resolve("n2") is None

    def test_is_a_resolver(self, select_registry):
        assert isinstance(select_registry, ConfigurationResolver)


class _UpperResolver:
    """Resolver for a custom kind, configured by callback."""

    kind = "upper"

    def resolve(self, node_id: str) -> CompiledOperation | None:
        return CompiledOperation(node_id=node_id, op="str", parameters={"mode": "upper"})


class TestResolverTable:
    def test_defaults(self):
        table = ResolverTable.with_defaults()
        assert table.kinds == ["select", "filter", "str", "rename"]
        assert all(isinstance(table[k], StageConfigRegistry) for k in table.kinds)

    def test_resolve_unknown_kind(self):
        assert ResolverTable.with_defaults().resolve("pivot", "n1") is None

    def test_register_custom_kind(self):
        table = ResolverTable.with_defaults()
        table.register(_UpperResolver())
        assert "upper" in table
        assert table.resolve("upper", "n9").parameters == {"mode": "upper"}

    def test_register_replaces(self):
        table = ResolverTable.with_defaults()
        replacement = StageConfigRegistry("select", SelectParams)
        table.register(replacement)
        assert table.get("select") is replacement
        assert len(table.kinds) == 4
