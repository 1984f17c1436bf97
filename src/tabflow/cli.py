"""CLI interface for tabflow."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import structlog
import typer

from tabflow import __version__
from tabflow.config import EngineType, TabflowConfig
from tabflow.exceptions import TabflowError
from tabflow.flow.compiler import ExecutionCompiler
from tabflow.flow.document import FlowDocument
from tabflow.flow.index import nodes_in_edge_order
from tabflow.flow.validator import validate_execution_path
from tabflow.runner import FlowRunner

app = typer.Typer(
    name="tabflow",
    help="Validate, compile and run tabular-data flow graphs",
    no_args_is_help=True,
)

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(level: str = "warning", *, json_output: bool = False) -> None:
    """Configure structlog for CLI output (to stderr)."""
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_LEVELS[level]),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"tabflow version {__version__}")
        raise typer.Exit()


def _load_config(config: Path | None) -> TabflowConfig:
    if config is None:
        return TabflowConfig.default()
    return TabflowConfig.load(config)


def _load_document(flow: Path) -> FlowDocument:
    try:
        return FlowDocument.load(flow)
    except TabflowError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e


FlowArg = Annotated[
    Path,
    typer.Argument(
        help="Path to the flow YAML file",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
]


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            "-l",
            help="Log level (debug, info, warning, error)",
        ),
    ] = "warning",
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log at debug level (overrides --log-level)"),
    ] = False,
) -> None:
    """tabflow - flow graph compiler for tabular-data pipelines."""
    level = log_level.lower()
    if level not in _LEVELS:
        typer.echo(f"Error: Unknown log level: {log_level}", err=True)
        raise typer.Exit(2)
    if verbose:
        level = "debug"
    configure_logging(level)


@app.command()
def validate(
    flow: FlowArg,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Check that the flow has one start node and a path to a final node."""
    document = _load_document(flow)
    result = validate_execution_path(document.graph)

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    elif result:
        typer.echo(typer.style("Flow is valid.", fg=typer.colors.GREEN))
        typer.echo(f"Path: {' -> '.join(result.path_ids)}")
    else:
        typer.echo(typer.style("Flow is invalid.", fg=typer.colors.RED))
        typer.echo(f"Reason: {result.reason.value if result.reason else ''}")
        typer.echo(result.message)

    if not result:
        raise typer.Exit(1)


@app.command("compile")
def compile_command(
    flow: FlowArg,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Print the operations the flow compiles to, in execution order."""
    document = _load_document(flow)
    try:
        resolvers = document.build_resolvers()
    except TabflowError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    operations = ExecutionCompiler(resolvers).compile(document.graph)

    if json_output:
        typer.echo(json.dumps([op.to_dict() for op in operations], indent=2))
        return

    if not operations:
        typer.echo("No operations.")
        return

    for i, op in enumerate(operations, 1):
        params = ", ".join(f"{k}={v}" for k, v in op.parameters.items())
        typer.echo(f"  {i:>2}. {op.op:8} [{op.node_id}] {params}")


@app.command()
def order(flow: FlowArg) -> None:
    """List nodes in connection order."""
    document = _load_document(flow)
    for node in nodes_in_edge_order(document.graph):
        label = f"  {node.label}" if node.label else ""
        typer.echo(f"{node.id:20} {node.kind:8}{label}")


@app.command()
def run(
    flow: FlowArg,
    input_path: Annotated[
        Path,
        typer.Argument(
            help="Input CSV/Excel file",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output file"),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to tabflow.yaml config file",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Use the fake engine instead of the real one"),
    ] = False,
) -> None:
    """Validate, compile and run a flow on a file."""
    try:
        cfg = _load_config(config)
        if config is not None:
            configure_logging(cfg.logging.level, json_output=cfg.logging.json_output)
        if dry_run:
            cfg.engine.type = EngineType.FAKE

        document = _load_document(flow)
        result = FlowRunner(cfg).run(document, input_path, output)
    except TabflowError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    if result:
        typer.echo(typer.style("Run succeeded.", fg=typer.colors.GREEN))
        if result.response and result.response.rows is not None:
            typer.echo(f"Rows: {result.response.rows}")
        if result.response and result.response.output:
            typer.echo(f"Output: {result.response.output}")
        return

    typer.echo(typer.style("Run failed.", fg=typer.colors.RED))
    if result.error:
        typer.echo(result.error)
    raise typer.Exit(1)


@app.command("init-config")
def init_config(
    path: Annotated[
        Path,
        typer.Argument(help="Where to write the config file"),
    ] = Path("tabflow.yaml"),
    engine: Annotated[
        EngineType,
        typer.Option("--engine", "-e", help="Engine type (command, fake)"),
    ] = EngineType.COMMAND,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing file"),
    ] = False,
) -> None:
    """Write a default configuration file."""
    if path.exists() and not force:
        typer.echo(f"Error: {path} already exists (use --force)", err=True)
        raise typer.Exit(1)

    TabflowConfig.default(engine).save(path)
    typer.echo(f"Wrote {path}")


if __name__ == "__main__":
    app()
