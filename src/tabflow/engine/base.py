"""Engine boundary: request/response types and the engine protocol."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from tabflow.flow.params import CompiledOperation


@dataclass
class EngineRequest:
    """One pipeline run handed to the engine.

    Attributes:
        path: Input file (CSV or Excel).
        operations: Compiled operations, in execution order.
        output: Output file; the engine picks one when None.
    """

    path: Path
    operations: list[CompiledOperation] = field(default_factory=list)
    output: Path | None = None

    def to_payload(self) -> dict[str, Any]:
        """JSON-serializable request body."""
        return {
            "path": str(self.path),
            "output": str(self.output) if self.output else None,
            "operations": [op.to_dict() for op in self.operations],
        }


@dataclass
class EngineResponse:
    """Engine answer for one run.

    Attributes:
        success: Whether the engine finished the run.
        rows: Rows written, when reported.
        output: File written, when reported.
        error: Error message if failed.
        elapsed_ms: Engine-side duration.
    """

    success: bool
    rows: int | None = None
    output: Path | None = None
    error: str | None = None
    elapsed_ms: int = 0

    def __bool__(self) -> bool:
        """Return success status."""
        return self.success

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> EngineResponse:
        """Build a response from the engine's JSON answer.

        A missing or null ``elapsed_ms`` counts as 0.

        Raises:
            ValueError: If ``rows`` or ``elapsed_ms`` is not a number.
            TypeError: If ``rows`` or ``elapsed_ms`` has an unusable type.
        """
        output = data.get("output")
        rows = data.get("rows")
        return cls(
            success=bool(data.get("success", False)),
            rows=int(rows) if rows is not None else None,
            output=Path(output) if output else None,
            error=data.get("error"),
            elapsed_ms=int(data.get("elapsed_ms") or 0),
        )


@runtime_checkable
class Engine(Protocol):
    """Executes compiled operations against a file."""

    @property
    def name(self) -> str: ...

    def run(self, request: EngineRequest) -> EngineResponse: ...
