"""Fake engine for testing and dry runs."""

from __future__ import annotations

from collections.abc import Callable

import structlog

from tabflow.engine.base import EngineRequest, EngineResponse

logger = structlog.get_logger()


class FakeEngine:
    """An engine that records requests instead of processing files.

    Responses come from ``responder`` when given, otherwise a success
    reporting the request's output path.

    Example:
        >>> engine = FakeEngine()
        >>> engine.run(EngineRequest(path=Path("in.csv"))).success
        True
        >>> len(engine.requests)
        1
    """

    def __init__(
        self,
        *,
        responder: Callable[[EngineRequest], EngineResponse] | None = None,
        fail_with: str | None = None,
    ) -> None:
        """Initialize the fake engine.

        Args:
            responder: Optional callback producing the response.
            fail_with: If set, every run fails with this error message.
        """
        self._responder = responder
        self._fail_with = fail_with
        self.requests: list[EngineRequest] = []

    @property
    def name(self) -> str:
        """Name of the engine."""
        return "fake"

    @property
    def last_request(self) -> EngineRequest | None:
        return self.requests[-1] if self.requests else None

    def run(self, request: EngineRequest) -> EngineResponse:
        self.requests.append(request)
        logger.debug(
            "Fake engine run",
            path=str(request.path),
            operations=len(request.operations),
        )

        if self._responder is not None:
            return self._responder(request)
        if self._fail_with is not None:
            return EngineResponse(success=False, error=self._fail_with)
        return EngineResponse(success=True, output=request.output)
