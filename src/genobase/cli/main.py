"""
Main CLI interface for the genobase build pipeline.

This module provides the command-line interface using Click.
"""

import functools
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.table import Table
from loguru import logger

from ..build import BuildDispatcher, default_strategies
from ..config.settings import Settings, get_settings
from ..core.exceptions import GenobaseError
from ..core.types import BuildOptions, BuildTarget
from ..utils.logging import setup_logging

console = Console()


def setup_cli_logging(settings: Settings, verbose: bool = False, quiet: bool = False) -> None:
    """Setup logging for CLI."""
    if quiet:
        level = "ERROR"
    elif verbose:
        level = "DEBUG"
    else:
        level = settings.logging.level

    setup_logging(
        level=level,
        log_file=settings.logging.log_file,
        enable_json=settings.logging.enable_json_logging,
        rotation=settings.logging.log_rotation,
    )


def handle_errors(func):
    """Decorator to handle CLI errors gracefully."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except GenobaseError as e:
            console.print(f"[red]Error: {e.message}[/red]")
            sys.exit(1)
        except Exception as e:
            console.print(f"[red]Unexpected error: {e}[/red]")
            logger.exception("Unexpected error in CLI")
            sys.exit(1)
    return wrapper


@click.group()
@click.version_option(package_name="genobase-builder")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--quiet", "-q", is_flag=True, help="Enable quiet mode")
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Configuration file path")
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool, config: Optional[str]):
    """
    genobase - build normalized genomic reference data for the knowledge store.
    """
    ctx.ensure_object(dict)
    settings = Settings.load_config(Path(config)) if config else get_settings()
    ctx.obj["settings"] = settings
    setup_cli_logging(settings, verbose, quiet)


@main.command()
@click.option("--data", "-d", "targets", required=True, multiple=True,
              help="Build target, repeat for several: " + ", ".join(t.value for t in BuildTarget))
@click.option("--input", "-i", "input_path", required=True, type=click.Path(),
              help="Input file or directory, depending on the target")
@click.option("--output", "-o", required=True, type=click.Path(),
              help="Existing output directory")
@click.option("--species", "-s", default="Homo sapiens", show_default=True,
              help="Species scientific name, common name or id. protein and ppi keep only "
                   "this species, so they use the default when it is omitted")
@click.option("--assembly", "-a", help="Assembly, required by clinvar (GRCh37 or GRCh38)")
@click.option("--reference-genome-file", type=click.Path(),
              help="Reference genome FASTA, required by gene")
@click.pass_context
@handle_errors
def build(
    ctx: click.Context,
    targets: Tuple[str, ...],
    input_path: str,
    output: str,
    species: str,
    assembly: Optional[str],
    reference_genome_file: Optional[str],
):
    """
    Build one or more reference datasets into OUTPUT.

    Targets run one at a time; each reads the same --input.
    """
    settings: Settings = ctx.obj["settings"]
    dispatcher = BuildDispatcher(settings)
    options = BuildOptions(species=species, assembly=assembly, reference_genome_file=reference_genome_file)

    if len(targets) == 1:
        reports = [dispatcher.execute(targets[0], input_path, output, species, options)]
    else:
        reports = dispatcher.execute_many(targets, {t: input_path for t in targets}, output, species, options)

    table = Table(title="Build Results")
    table.add_column("Target", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Output", style="yellow")
    table.add_column("Time (s)", style="magenta")
    for report in reports:
        table.add_row(
            report.target.value,
            "✓" if report.success else f"✗ {report.error_message}",
            report.entity or "(per chromosome)",
            f"{report.execution_time:.2f}" if report.execution_time is not None else "N/A",
        )
    console.print(table)

    failed = [r for r in reports if not r.success]
    if len(reports) < len(targets) or (failed and settings.build.fail_on_parse_error):
        sys.exit(1)


@main.command()
@click.pass_context
def targets(ctx: click.Context):
    """List build targets and their input requirements."""
    table = Table(title="Build Targets")
    table.add_column("Target", style="cyan")
    table.add_column("Input", style="green")
    table.add_column("Mandatory options", style="yellow")
    table.add_column("Output", style="magenta")

    for strategy in default_strategies(ctx.obj["settings"]).values():
        spec = strategy.input_spec
        table.add_row(
            strategy.target.value,
            spec.kind.value,
            ", ".join(o.value for o in spec.mandatory_options) or "-",
            (strategy.entity or "(per chromosome)") if strategy.implemented else "not implemented",
        )
    console.print(table)


@main.command()
@click.pass_context
def species(ctx: click.Context):
    """List the configured species catalog."""
    table = Table(title="Species")
    table.add_column("Id", style="cyan")
    table.add_column("Scientific name", style="green")
    table.add_column("Common name", style="yellow")
    table.add_column("Assemblies", style="magenta")

    for sp in ctx.obj["settings"].species:
        table.add_row(sp.id, sp.scientific_name, sp.common_name, ", ".join(sp.assemblies))
    console.print(table)


if __name__ == "__main__":
    main()
