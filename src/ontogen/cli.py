"""ontogen CLI - typer application entry point."""

from __future__ import annotations

import atexit
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ontogen.config import DEFAULT_CONFIG_FILE, GeneratorConfigError, load_config
from ontogen.generator import GenerationCache, GeneratorError, GraphGenerator, StderrReporter
from ontogen.graph import GraphOperationError
from ontogen.models import GenerationReport
from ontogen.observability import close_file_logging, configure_logging, get_logger

app = typer.Typer(
    name="ontogen",
    help="ontogen: random concept graphs for property-based testing.",
    no_args_is_help=True,
)
console = Console()
log = get_logger(__name__)

# Default directory for --log output
DEFAULT_LOG_DIR = Path("logs")


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log_enabled: Annotated[
        bool,
        typer.Option(
            "--log",
            help="Enable file logging to ./logs/generation.jsonl.",
        ),
    ] = False,
) -> None:
    """ontogen: random concept graphs for property-based testing."""
    if log_enabled:
        configure_logging(verbosity=verbose, log_to_file=True, log_dir=DEFAULT_LOG_DIR)
        atexit.register(close_file_logging)
    else:
        configure_logging(verbosity=verbose)


def _resolve_config_path(config_path: Path | None) -> Path | None:
    """Use the given path, or ./ontogen.yaml if it exists."""
    if config_path is not None:
        return config_path
    default = Path(DEFAULT_CONFIG_FILE)
    return default if default.exists() else None


@app.command()
def generate(
    size: Annotated[
        int,
        typer.Option("--size", "-n", min=0, help="Number of successful mutations."),
    ] = 10,
    seed: Annotated[
        int | None,
        typer.Option("--seed", "-s", help="Seed for a reproducible graph."),
    ] = None,
    open_on_completion: Annotated[
        bool | None,
        typer.Option(
            "--open/--closed",
            help="Leave the graph open or closed (default: config, else random).",
            show_default=False,
        ),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help=f"Config file (default: ./{DEFAULT_CONFIG_FILE})."),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print a JSON report instead of tables."),
    ] = False,
) -> None:
    """Generate one random graph and print how it was built."""
    try:
        config = load_config(_resolve_config_path(config_path))
    except (GeneratorConfigError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    if seed is not None:
        config = replace(config, seed=seed)
    generator = GraphGenerator(config, cache=GenerationCache(), reporter=StderrReporter())
    if open_on_completion is not None:
        generator.set_open(open_on_completion)

    try:
        graph = generator.generate(size)
    except (GeneratorError, GraphOperationError) as e:
        log.error("generate_failed", error=str(e))
        console.print(f"[red]Error:[/red] Generation failed: {e}")
        raise typer.Exit(1) from None

    trace = generator.last_trace()
    assert trace is not None
    report = GenerationReport.from_generation(graph, trace, generator.last_stats)

    if as_json:
        typer.echo(report.model_dump_json(indent=2))
        return

    state = "[green]open[/green]" if report.open else "[yellow]closed[/yellow]"
    console.print(
        Panel(
            Text(str(trace).rstrip("\n")),
            title=f"Graph [bold]{report.keyspace}[/bold] ({state})",
            expand=False,
        ),
        highlight=False,
    )

    counts = Table(title="Concepts")
    counts.add_column("Kind", style="cyan")
    counts.add_column("Count", justify="right")
    for kind, count in report.concept_counts.items():
        counts.add_row(kind, str(count))
    console.print(counts)

    applied = Table(title=f"Mutations ({report.attempts} attempts)")
    applied.add_column("Mutation", style="cyan")
    applied.add_column("Applied", justify="right")
    for kind, count in sorted(report.applied.items()):
        applied.add_row(kind, str(count))
    console.print(applied)


@app.command()
def version() -> None:
    """Show version information."""
    from ontogen import __version__

    console.print(f"ontogen v{__version__}")
