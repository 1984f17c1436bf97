"""Stage parameter models and the compiled operation record."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tabflow.flow.constants import (
    DEFAULT_FILTER_LOGIC,
    FILTER_LOGICS,
    FILTER_MODES,
    IN_PLACE_STR_MODES,
    VALUE_SEPARATOR,
)


def split_values(value: str) -> list[str]:
    """Split a pipe separated value, dropping blanks and duplicates."""
    seen: list[str] = []
    for part in value.split(VALUE_SEPARATOR):
        part = part.strip()
        if part and part not in seen:
            seen.append(part)
    return seen


class StageParamsBase(BaseModel):
    """Common fields of every stage record.

    Attributes:
        id: ID of the node the record belongs to.
        op: Operation name, also the discriminator.
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)

    def parameters(self) -> dict[str, str]:
        """Parameters sent to the engine: set fields other than id/op."""
        data = self.model_dump(exclude={"id", "op"}, exclude_none=True)
        return {k: str(v) for k, v in data.items()}


class SelectParams(StageParamsBase):
    """Keep only the listed columns (pipe separated)."""

    op: Literal["select"] = "select"
    column: str = Field(..., min_length=1)

    @property
    def columns(self) -> list[str]:
        return split_values(self.column)


class FilterParams(StageParamsBase):
    """Row filter on one column.

    Attributes:
        mode: Comparison mode (equal, contains, gt, between, ...).
        column: Column to test.
        value: Comparison value; pipe separated values match any of them.
        logic: How the filter combines with the others (and / or).
    """

    op: Literal["filter"] = "filter"
    mode: str
    column: str = Field(..., min_length=1)
    value: str = ""
    logic: str = DEFAULT_FILTER_LOGIC

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v: str) -> str:
        if v not in FILTER_MODES:
            msg = f"Unknown filter mode: {v}"
            raise ValueError(msg)
        return v

    @field_validator("logic", mode="before")
    @classmethod
    def normalize_logic(cls, v: Any) -> str:
        """Lowercase the logic; anything unrecognised means "or"."""
        if not isinstance(v, str):
            return DEFAULT_FILTER_LOGIC
        v = v.lower()
        return v if v in FILTER_LOGICS else DEFAULT_FILTER_LOGIC

    @property
    def values(self) -> list[str]:
        return split_values(self.value)


class StrParams(StageParamsBase):
    """String transform on one column."""

    op: Literal["str"] = "str"
    mode: str = Field(..., min_length=1)
    column: str = Field(..., min_length=1)
    comparand: str | None = None
    replacement: str | None = None
    newcol: str | None = None

    @property
    def produces_new_column(self) -> bool:
        return self.mode not in IN_PLACE_STR_MODES


class RenameParams(StageParamsBase):
    """Rename ``column`` to ``value``."""

    op: Literal["rename"] = "rename"
    column: str = Field(..., min_length=1)
    value: str = Field(..., min_length=1)


class CompiledOperation(BaseModel):
    """One resolved operation of a compiled flow.

    Attributes:
        node_id: Node the operation was compiled from.
        op: Operation name.
        parameters: String parameters for the engine.
    """

    model_config = ConfigDict(frozen=True)

    node_id: str
    op: str
    parameters: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_params(cls, params: StageParamsBase) -> CompiledOperation:
        return cls(node_id=params.id, op=params.op, parameters=params.parameters())  # type: ignore[attr-defined]

    @property
    def label(self) -> str:
        """Short ``op(mode or column)`` form used in trace output."""
        detail = self.parameters.get("mode") or self.parameters.get("column", "")
        return f"{self.op}({detail})"

    def to_dict(self) -> dict[str, Any]:
        """Wire form handed to the engine."""
        return {"op": self.op, "parameters": dict(self.parameters)}
