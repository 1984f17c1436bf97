"""Stage configuration registries and the resolver table."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

import structlog
from pydantic import ValidationError

from tabflow.exceptions import StageConfigError
from tabflow.flow.params import (
    CompiledOperation,
    FilterParams,
    RenameParams,
    SelectParams,
    StageParamsBase,
    StrParams,
)

logger = structlog.get_logger()

P = TypeVar("P", bound=StageParamsBase)


@runtime_checkable
class ConfigurationResolver(Protocol):
    """Resolves a node of one kind into a compiled operation.

    Returning None means the node has no configuration and is skipped.
    """

    kind: str

    def resolve(self, node_id: str) -> CompiledOperation | None: ...


class StageConfigRegistry(Generic[P]):
    """Records of one stage kind, keyed by node ID.

    Records are validated into ``params_type`` on the way in. The
    registry is not kept in sync with the graph: it may hold records for
    deleted nodes and miss records for nodes never configured.

    Attributes:
        kind: Node kind this registry serves.
        params_type: Parameter model for the kind.
    """

    def __init__(self, kind: str, params_type: type[P]) -> None:
        self.kind = kind
        self.params_type = params_type
        self._records: dict[str, P] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._records

    @property
    def node_ids(self) -> list[str]:
        return list(self._records)

    def add(self, record: P | dict[str, Any]) -> P | None:
        """Insert or replace the record for a node.

        Args:
            record: Typed record or raw mapping (``op`` defaults to the kind).

        Returns:
            The stored record, or None if the record has no node ID.

        Raises:
            StageConfigError: If the record does not fit this kind.
        """
        if isinstance(record, dict):
            if not record.get("id"):
                return None
            data = {"op": self.kind, **record}
            try:
                params = self.params_type.model_validate(data)
            except ValidationError as e:
                msg = f"Invalid {self.kind} record for node '{record['id']}': {e}"
                raise StageConfigError(msg, kind=self.kind, node_id=record["id"]) from e
        elif isinstance(record, self.params_type):
            params = record
        else:
            msg = f"Expected {self.params_type.__name__}, got {type(record).__name__}"
            raise StageConfigError(msg, kind=self.kind, node_id=getattr(record, "id", ""))

        self._records[params.id] = params
        return params

    def get(self, node_id: str) -> P | None:
        """Get the record for a node, None when absent."""
        return self._records.get(node_id)

    def remove(self, node_id: str) -> None:
        """Remove the record for a node (no-op when absent)."""
        self._records.pop(node_id, None)

    def cleanup(self, valid_node_ids: Iterable[str]) -> list[str]:
        """Drop records whose node no longer exists.

        Returns:
            IDs of the removed records.
        """
        keep = set(valid_node_ids)
        removed = [node_id for node_id in self._records if node_id not in keep]
        for node_id in removed:
            del self._records[node_id]
        if removed:
            logger.debug("Removed orphaned stage records", kind=self.kind, node_ids=removed)
        return removed

    def resolve(self, node_id: str) -> CompiledOperation | None:
        params = self.get(node_id)
        if params is None:
            return None
        return CompiledOperation.from_params(params)


class ResolverTable:
    """Maps node kinds to their configuration resolvers."""

    def __init__(self, resolvers: Iterable[ConfigurationResolver] = ()) -> None:
        self._resolvers: dict[str, ConfigurationResolver] = {}
        for resolver in resolvers:
            self.register(resolver)

    def register(self, resolver: ConfigurationResolver) -> None:
        """Register (or replace) the resolver for ``resolver.kind``."""
        self._resolvers[resolver.kind] = resolver

    def get(self, kind: str) -> ConfigurationResolver | None:
        return self._resolvers.get(kind)

    def __getitem__(self, kind: str) -> ConfigurationResolver:
        return self._resolvers[kind]

    def __contains__(self, kind: object) -> bool:
        return kind in self._resolvers

    @property
    def kinds(self) -> list[str]:
        return list(self._resolvers)

    def resolve(self, kind: str, node_id: str) -> CompiledOperation | None:
        """Resolve a node; None for unknown kinds or missing records."""
        resolver = self._resolvers.get(kind)
        if resolver is None:
            return None
        return resolver.resolve(node_id)

    @classmethod
    def with_defaults(cls) -> ResolverTable:
        """Table with empty select, filter, str and rename registries."""
        return cls(
            [
                StageConfigRegistry("select", SelectParams),
                StageConfigRegistry("filter", FilterParams),
                StageConfigRegistry("str", StrParams),
                StageConfigRegistry("rename", RenameParams),
            ]
        )
