"""Flow runner: validate, compile and hand a flow to the engine."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from tabflow.config import TabflowConfig
from tabflow.engine import Engine, EngineRequest, EngineResponse, create_engine
from tabflow.flow.compiler import ExecutionCompiler, summarize_operations
from tabflow.flow.document import FlowDocument
from tabflow.flow.params import CompiledOperation
from tabflow.flow.registry import ResolverTable, StageConfigRegistry
from tabflow.flow.validator import ValidationResult, validate_execution_path

logger = structlog.get_logger()


@dataclass
class FlowRunResult:
    """Result of one flow run.

    Attributes:
        success: Whether the engine processed the flow.
        validation: Path validation verdict.
        operations: Compiled operations.
        response: Engine response, None if the engine was not called.
        error: Error message if failed.
        duration_ms: Wall time of the run.
    """

    success: bool
    validation: ValidationResult
    operations: list[CompiledOperation] = field(default_factory=list)
    response: EngineResponse | None = None
    error: str | None = None
    duration_ms: int = 0

    def __bool__(self) -> bool:
        """Return success status."""
        return self.success

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "validation": self.validation.to_dict(),
            "operations": [op.to_dict() for op in self.operations],
            "error": self.error,
            "duration_ms": self.duration_ms,
        }


class FlowRunner:
    """Runs flow documents against an engine.

    Validation failures and empty flows stop the run before the engine
    is called; they are reported in the result, not raised.
    """

    def __init__(self, config: TabflowConfig, engine: Engine | None = None) -> None:
        """Initialize the runner.

        Args:
            config: tabflow configuration.
            engine: Engine to use; built from ``config.engine`` when None.
        """
        self.config = config
        self.engine = engine if engine is not None else create_engine(config.engine)

    def prepare(self, document: FlowDocument) -> tuple[ValidationResult, list[CompiledOperation]]:
        """Validate and compile a document without running it."""
        resolvers = document.build_resolvers()
        if self.config.flow.cleanup_orphans:
            self._cleanup_orphans(resolvers, document.graph.node_ids)

        validation = validate_execution_path(document.graph)
        operations = ExecutionCompiler(resolvers).compile(document.graph)
        return validation, operations

    def run(
        self,
        document: FlowDocument,
        input_path: Path,
        output_path: Path | None = None,
    ) -> FlowRunResult:
        """Run a flow.

        Args:
            document: Flow to run.
            input_path: File the engine should read.
            output_path: File the engine should write.

        Returns:
            FlowRunResult with the run status.

        Raises:
            EngineError: If the engine cannot be reached.
        """
        log = logger.bind(
            input=str(input_path),
            engine=self.engine.name,
            node_count=len(document.graph.nodes),
        )
        log.info("Starting flow run")
        start_time = time.perf_counter()

        validation, operations = self.prepare(document)
        result = FlowRunResult(success=False, validation=validation, operations=operations)

        if not validation and self.config.flow.stop_on_invalid:
            result.error = validation.message
            log.warning("Flow is not runnable", reason=validation.reason.value if validation.reason else None)
            result.duration_ms = self._elapsed_ms(start_time)
            return result

        if not operations and not self.config.flow.allow_empty:
            result.error = "Flow has no configured operations"
            log.warning("Nothing to run")
            result.duration_ms = self._elapsed_ms(start_time)
            return result

        log.info("Sending flow to engine", operations=summarize_operations(operations))
        request = EngineRequest(path=input_path, operations=operations, output=output_path)
        response = self.engine.run(request)

        result.response = response
        result.success = response.success
        result.error = response.error
        result.duration_ms = self._elapsed_ms(start_time)

        log.info(
            "Flow run finished",
            success=result.success,
            rows=response.rows,
            duration_ms=result.duration_ms,
        )
        return result

    @staticmethod
    def _cleanup_orphans(resolvers: ResolverTable, node_ids: list[str]) -> None:
        for kind in resolvers.kinds:
            registry = resolvers[kind]
            if isinstance(registry, StageConfigRegistry):
                registry.cleanup(node_ids)

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.perf_counter() - start_time) * 1000)
