"""CLI for the map shootout.

Provides a rich command-line interface using Typer for:
- Running the benchmark matrix
- Summarizing result files
- Listing built-in map implementations
- Writing a sample configuration
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer
from rich.console import Console
from rich.table import Table

from map_shootout.core.config import load_config
from map_shootout.core.schemas import ShootoutConfig
from map_shootout.implementations.builtin import BUILTIN_IMPLEMENTATIONS
from map_shootout.results.sink import ResultSink
from map_shootout.results.storage import compare_implementations, load_results, summarize
from map_shootout.runner import RunSummary, ShootoutRunner
from map_shootout.utils.logging import setup_logging

if TYPE_CHECKING:
    import pandas as pd

app = typer.Typer(
    name="map-shootout",
    help="Map implementation shootout",
    add_completion=False,
)

console = Console()
# Status output of `run` goes to stderr so results can be streamed to stdout
err_console = Console(stderr=True)

STDOUT_MARKER = "-"


@app.command()
def run(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to shootout configuration file (YAML/JSON)"
    ),
    output: str | None = typer.Option(
        None, "--output", "-o", help="Result file, or '-' for stdout (overrides config)"
    ),
    max_size: int | None = typer.Option(None, "--max-size", help="Largest dataset size"),
    step: int | None = typer.Option(None, "--step", help="Dataset size decrement"),
    seed: int | None = typer.Option(None, "--seed", help="Seed for key generation"),
    implementations: list[str] | None = typer.Option(
        None, "--implementation", "-i", help="Implementation name or module:attribute path"
    ),
    filters: list[str] | None = typer.Option(
        None, "--filter", "-k", help="Only run cases whose path contains this text"
    ),
    append: bool = typer.Option(False, "--append", help="Append to the result file"),
    log_level: str = typer.Option("INFO", "--log-level", "-l", help="Logging level"),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file in addition to console"
    ),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Output logs in JSON format (for programmatic parsing)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate config without running"),
) -> None:
    """Run the benchmark matrix and write one TSV row per case."""
    setup_logging(
        level=log_level, log_file=log_file, json_format=json_logs, rich_console=not json_logs
    )

    overrides: dict[str, Any] = {}
    if output is not None and output != STDOUT_MARKER:
        overrides["output_path"] = Path(output)
    if max_size is not None:
        overrides["max_size"] = max_size
    if step is not None:
        overrides["size_step"] = step
    if seed is not None:
        overrides["seed"] = seed
    if implementations:
        overrides["implementations"] = implementations

    try:
        base = load_config(config) if config is not None else ShootoutConfig()
        shootout_config = ShootoutConfig.model_validate({**base.model_dump(), **overrides})
        runner = ShootoutRunner(shootout_config)
    except (OSError, ValueError, TypeError, ImportError) as e:
        err_console.print(f"[bold red]Error loading config: {e}[/]")
        raise typer.Exit(1) from e

    _show_config_summary(shootout_config, runner)

    if dry_run:
        err_console.print("[bold green]Configuration is valid![/]")
        return

    err_console.print("[bold blue]Starting shootout...[/]")
    if output == STDOUT_MARKER:
        summary = runner.run(ResultSink(sys.stdout), filters=filters or ())
    else:
        with ResultSink.open(shootout_config.output_path, append=append) as sink:
            summary = runner.run(sink, filters=filters or ())

    _show_run_summary(summary)
    if not summary.ok:
        raise typer.Exit(1)


@app.command()
def report(
    results: Path = typer.Option(Path("data.tsv"), "--results", "-r", help="Result file"),
    output_format: str = typer.Option(
        "table", "--format", "-f", help="Output format: table, compare, csv, json"
    ),
) -> None:
    """Summarize a result file."""
    try:
        df = load_results(results)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]{e}[/]")
        raise typer.Exit(1) from e

    if output_format == "table":
        _show_summary_table(summarize(df), title=f"Results: {results}")
    elif output_format == "compare":
        typer.echo(compare_implementations(df).to_string())
    elif output_format == "csv":
        typer.echo(summarize(df).to_csv(index=False), nl=False)
    elif output_format == "json":
        typer.echo(summarize(df).to_json(orient="records", indent=2))
    else:
        console.print(f"[bold red]Unknown format: {output_format}[/]")
        raise typer.Exit(1)


@app.command("implementations")
def list_implementations() -> None:
    """List built-in map implementations."""
    table = Table(title="Built-in Implementations")
    table.add_column("Name", style="cyan")
    table.add_column("Class", style="white")
    for name, impl in BUILTIN_IMPLEMENTATIONS.items():
        table.add_row(name, type(impl).__name__)
    console.print(table)


@app.command()
def init_config(
    output: Path = typer.Option(
        Path("shootout.yaml"), "--output", "-o", help="Output configuration file"
    ),
) -> None:
    """Generate a sample configuration file."""
    sample_config = """\
# Map Shootout Configuration
name: "Map Shootout"
description: "Built-in mappings under insert, delete, read and iteration workloads"

# Tab-separated results, one row per case, no header
output_path: "data.tsv"

# Dataset sizes run from max_size down to (excluding) zero
max_size: 3000000
size_step: 200000

# String key lengths in code points; small keys are prefixes of large keys
large_string_length: 64
small_string_length: 16

key_types:
  - largeString
  - smallString
  - int64

# Built-in names or module:attribute paths to MapImplementation objects
implementations:
  - dict
  - OrderedDict
  - SortedDict

# Seed key generation and shuffling for a reproducible run (null = random)
seed: null

# Request a garbage collection before each measured operation
gc_hint: true
"""
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(sample_config)
    console.print(f"[bold green]Sample configuration written to {output}[/]")


def _show_config_summary(config: ShootoutConfig, runner: ShootoutRunner) -> None:
    """Display a summary of the shootout configuration."""
    table = Table(title="Shootout Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    sizes = config.dataset_sizes
    table.add_row("Name", config.name)
    if config.description:
        table.add_row("Description", config.description)
    table.add_row("Implementations", ", ".join(impl.name for impl in runner.implementations))
    table.add_row("Key Types", ", ".join(k.value for k in config.key_types))
    table.add_row("Dataset Sizes", f"{len(sizes)} ({sizes[0]:,} down to {sizes[-1]:,})")
    table.add_row("Cases", f"{runner.builder.expected_case_count():,}")
    table.add_row("Output", str(config.output_path))
    table.add_row("Seed", "random" if config.seed is None else str(config.seed))

    err_console.print(table)


def _show_run_summary(summary: RunSummary) -> None:
    color = "green" if summary.ok else "red"
    err_console.print(
        f"\n[bold {color}]Completed {summary.completed} cases, "
        f"{summary.failed} failed, {summary.skipped} skipped "
        f"in {summary.duration_seconds:.1f}s[/]"
    )
    for path in summary.failures:
        err_console.print(f"  [red]FAILED[/] {path}")


def _show_summary_table(summary: pd.DataFrame, title: str) -> None:
    """Display aggregated results."""
    table = Table(title=title)
    table.add_column("Key Type", style="cyan")
    table.add_column("Workload", style="white")
    table.add_column("Implementation", style="green")
    table.add_column("Size", justify="right")
    table.add_column("Runs", justify="right")
    table.add_column("Mean (ms)", justify="right", style="bold")
    table.add_column("Memory Delta (MB)", justify="right")

    for row in summary.itertuples(index=False):
        table.add_row(
            row.key_label,
            row.workload_label,
            row.implementation,
            f"{row.dataset_size:,}",
            str(row.runs),
            f"{row.mean_elapsed_ms:.3f}",
            f"{row.mean_memory_delta_mb:.2f}",
        )

    console.print(table)


if __name__ == "__main__":
    app()
