"""Engine reached through an external binary speaking JSON on stdio."""

from __future__ import annotations

import json
import os
import subprocess
import time

import structlog

from tabflow.engine.base import EngineRequest, EngineResponse
from tabflow.exceptions import EngineError

logger = structlog.get_logger()


class CommandEngine:
    """Runs the external engine once per request.

    The request payload is written to the process's stdin as JSON; the
    process answers with one JSON object on stdout.

    Example:
        >>> engine = CommandEngine("tabflow-engine", args=["run"])
        >>> response = engine.run(EngineRequest(path=Path("data.csv"), operations=ops))
    """

    def __init__(
        self,
        binary: str,
        *,
        args: list[str] | None = None,
        timeout: int = 600,
        env: dict[str, str] | None = None,
    ) -> None:
        """Initialize the command engine.

        Args:
            binary: Engine executable.
            args: Extra arguments passed before the payload is sent.
            timeout: Timeout in seconds for one run.
            env: Environment variables (merged with current env).
        """
        self.binary = binary
        self.args = args or []
        self.timeout = timeout
        self.env = env or {}

    @property
    def name(self) -> str:
        """Name of the engine."""
        return "command"

    @property
    def command(self) -> list[str]:
        return [self.binary, *self.args]

    def run(self, request: EngineRequest) -> EngineResponse:
        """Send one request to the engine.

        Raises:
            EngineError: If the process cannot start, times out, or
                answers with something other than a well-formed JSON
                object.
        """
        command = self.command
        log = logger.bind(command=command, path=str(request.path))
        log.info("Running engine", operations=len(request.operations))

        full_env = os.environ.copy()
        full_env.update(self.env)

        start = time.perf_counter()
        try:
            result = subprocess.run(
                command,
                input=json.dumps(request.to_payload()),
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=full_env,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            log.error("Engine timed out", timeout=self.timeout)
            msg = f"Engine timed out after {self.timeout}s"
            raise EngineError(msg, engine_name=self.name, command=command) from e
        except OSError as e:
            log.error("Engine failed to start", error=str(e))
            msg = f"Failed to start engine: {e}"
            raise EngineError(msg, engine_name=self.name, command=command) from e

        duration_ms = int((time.perf_counter() - start) * 1000)
        log = log.bind(returncode=result.returncode, duration_ms=duration_ms)

        if result.returncode != 0 and not result.stdout.strip():
            error = result.stderr.strip() or f"Engine exited with code {result.returncode}"
            log.warning("Engine run failed", error=error)
            return EngineResponse(success=False, error=error, elapsed_ms=duration_ms)

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            msg = f"Engine returned invalid JSON: {e}"
            raise EngineError(
                msg,
                engine_name=self.name,
                command=command,
                returncode=result.returncode,
            ) from e

        if not isinstance(data, dict):
            msg = "Engine response must be a JSON object"
            raise EngineError(
                msg,
                engine_name=self.name,
                command=command,
                returncode=result.returncode,
            )

        try:
            response = EngineResponse.from_payload(data)
        except (TypeError, ValueError) as e:
            msg = f"Engine returned malformed response: {e}"
            raise EngineError(
                msg,
                engine_name=self.name,
                command=command,
                returncode=result.returncode,
            ) from e

        if result.returncode != 0:
            response.success = False
        if not response.elapsed_ms:
            response.elapsed_ms = duration_ms

        log.info("Engine run finished", success=response.success, rows=response.rows)
        return response
