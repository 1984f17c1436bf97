"""Custom exceptions for tabflow."""

from pathlib import Path


class TabflowError(Exception):
    """Base exception for all tabflow errors."""

    pass


class ConfigError(TabflowError):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_path: Path | None = None,
        field: str = "",
    ) -> None:
        super().__init__(message)
        self.config_path = config_path
        self.field = field


class FlowLoadError(TabflowError):
    """Raised when a flow document cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path


class StageConfigError(TabflowError):
    """Raised when a stage record is rejected at the registry boundary."""

    def __init__(
        self,
        message: str,
        *,
        kind: str = "",
        node_id: str = "",
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.node_id = node_id


class EngineError(TabflowError):
    """Raised when the external engine cannot be reached or answers garbage."""

    def __init__(
        self,
        message: str,
        *,
        engine_name: str = "",
        command: list[str] | None = None,
        returncode: int | None = None,
    ) -> None:
        super().__init__(message)
        self.engine_name = engine_name
        self.command = command or []
        self.returncode = returncode
