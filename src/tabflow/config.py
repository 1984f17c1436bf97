"""Configuration schema for tabflow."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from tabflow.exceptions import ConfigError


class EngineType(str, Enum):
    """Supported engine types."""

    COMMAND = "command"
    FAKE = "fake"


class EngineConfig(BaseModel):
    """Configuration for the external engine.

    Attributes:
        type: The engine type.
        binary: Path or name of the engine binary (type=command).
        args: Additional arguments for the binary.
        timeout: Timeout in seconds for one run.
        env: Extra environment variables for the engine process.
    """

    type: EngineType = EngineType.COMMAND
    binary: str = ""
    args: list[str] = Field(default_factory=list)
    timeout: int = Field(default=600, ge=1)
    env: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def default_binary(self) -> EngineConfig:
        """Fill in the default binary for command engines."""
        if not self.binary and self.type == EngineType.COMMAND:
            self.binary = "tabflow-engine"
        return self


class FlowConfig(BaseModel):
    """Flow handling behavior.

    Attributes:
        stop_on_invalid: Refuse to run flows that fail path validation.
        cleanup_orphans: Drop stage records whose node is gone before compiling.
        allow_empty: Call the engine even when no operation was compiled.
    """

    stop_on_invalid: bool = True
    cleanup_orphans: bool = False
    allow_empty: bool = False


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Minimum log level.
        json_output: Render log events as JSON lines instead of console text.
    """

    level: Literal["debug", "info", "warning", "error"] = "info"
    json_output: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def lowercase_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.lower()
        return v


class TabflowConfig(BaseModel):
    """Complete tabflow configuration.

    Example:
        >>> config = TabflowConfig.default(EngineType.FAKE)
        >>> config.engine.type
        <EngineType.FAKE: 'fake'>
    """

    version: str = "1.0"
    engine: EngineConfig = Field(default_factory=EngineConfig)
    flow: FlowConfig = Field(default_factory=FlowConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def to_yaml(self) -> str:
        """Serialize the config to YAML.

        Returns:
            YAML string representation.
        """
        data = self.model_dump(mode="json")
        return yaml.dump(data, default_flow_style=False, sort_keys=False)

    def save(self, path: Path) -> None:
        """Save the config to a YAML file.

        Args:
            path: Path to save the file.
        """
        path.write_text(self.to_yaml())

    @classmethod
    def from_yaml(cls, yaml_content: str, *, path: Path | None = None) -> TabflowConfig:
        """Parse config from YAML content.

        Args:
            yaml_content: YAML string to parse.
            path: Source file, for error reporting.

        Returns:
            Parsed TabflowConfig instance.

        Raises:
            ConfigError: If the YAML or its schema is invalid.
        """
        try:
            data: Any = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            msg = f"Invalid YAML: {e}"
            raise ConfigError(msg, config_path=path) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            msg = "Config YAML must be a mapping"
            raise ConfigError(msg, config_path=path)

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            msg = f"Invalid config: {e}"
            raise ConfigError(msg, config_path=path) from e

    @classmethod
    def load(cls, path: Path) -> TabflowConfig:
        """Load config from a YAML file.

        Raises:
            ConfigError: If the file doesn't exist or is invalid.
        """
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise ConfigError(msg, config_path=path)
        return cls.from_yaml(path.read_text(), path=path)

    @classmethod
    def default(cls, engine_type: EngineType = EngineType.COMMAND) -> TabflowConfig:
        """Create a default configuration."""
        return cls(engine=EngineConfig(type=engine_type))
