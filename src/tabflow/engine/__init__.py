"""External engine boundary."""

from __future__ import annotations

from tabflow.config import EngineConfig, EngineType
from tabflow.engine.base import Engine, EngineRequest, EngineResponse
from tabflow.engine.command import CommandEngine
from tabflow.engine.fake import FakeEngine
from tabflow.exceptions import ConfigError


def create_engine(config: EngineConfig) -> Engine:
    """Create the engine described by ``config``.

    Raises:
        ConfigError: If a command engine has no binary.
    """
    if config.type == EngineType.FAKE:
        return FakeEngine()

    if not config.binary:
        msg = "Command engine requires a binary"
        raise ConfigError(msg, field="engine.binary")

    return CommandEngine(
        config.binary,
        args=config.args,
        timeout=config.timeout,
        env=config.env,
    )


__all__ = [
    "CommandEngine",
    "Engine",
    "EngineRequest",
    "EngineResponse",
    "FakeEngine",
    "create_engine",
]
