#!/usr/bin/env python3
"""
DEG Sanity Checker CLI

Command-line interface for screening gene-expression count tables before
differential expression analysis. Reports low replicate numbers, sparse
genes, unbalanced library sizes, batch confounding and extreme effect sizes.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from . import __version__
from .demo import demo_rows
from .pipeline import load_metadata, run_sanity_check, run_sanity_check_files
from .report import grade_report, print_report
from .utils import setup_logging

app = typer.Typer(
    name="deg-sanity",
    help="DEG Sanity Checker - quality control for differential expression input",
    add_completion=False,
)

console = Console()

STRICT_EXIT_CODE = 2


# Global options
def version_callback(value: bool):
    if value:
        console.print(f"DEG Sanity Checker v{__version__}")
        raise typer.Exit()


def verbose_callback(value: bool):
    if value:
        setup_logging(level=logging.DEBUG)
    else:
        setup_logging(level=logging.INFO)


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    ),
    verbose: bool = typer.Option(
        False, "--verbose",
        callback=verbose_callback,
        help="Enable verbose logging"
    ),
):
    """DEG Sanity Checker CLI"""
    pass


@app.command()
def check(
    counts: Path = typer.Argument(..., help="Count matrix (CSV/TSV, genes x samples)"),
    metadata: Optional[Path] = typer.Option(None, help="Sample metadata table"),
    batch_column: Optional[str] = typer.Option(None, help="Metadata batch column name"),
    fold_changes: Optional[Path] = typer.Option(None, help="DE results table with log2 fold changes"),
    fc_column: str = typer.Option("log2FoldChange", help="Fold change column name"),
    seed: Optional[int] = typer.Option(None, help="Seed for placeholder fold changes"),
    config: Optional[Path] = typer.Option(None, help="YAML file overriding QC thresholds"),
    json_out: Optional[Path] = typer.Option(None, help="Write JSON report"),
    tsv_out: Optional[Path] = typer.Option(None, help="Write findings TSV"),
    html_out: Optional[Path] = typer.Option(None, help="Write HTML report"),
    plot_out: Optional[Path] = typer.Option(None, help="Write library size chart"),
    strict: bool = typer.Option(False, help=f"Exit with code {STRICT_EXIT_CODE} on critical issues"),
):
    """Run QC checks on a count matrix."""
    console.print(f"[bold blue]Checking {counts.name}[/bold blue]")

    try:
        result = run_sanity_check_files(
            counts_file=counts,
            metadata_file=metadata,
            fold_change_file=fold_changes,
            fold_change_column=fc_column,
            batch_column=batch_column,
            config_file=config,
            seed=seed,
            json_out=json_out,
            tsv_out=tsv_out,
            html_out=html_out,
            plot_out=plot_out,
        )
    except (ValueError, OSError) as e:
        console.print(f"[bold red]Error in QC analysis: {e}[/bold red]")
        sys.exit(1)

    print_report(result.report, result.matrix.sample_names, console=console)
    for kind, path in result.outputs.items():
        console.print(f"{kind.upper()} saved to: {path}")

    if strict and grade_report(result.report).letter == "C":
        raise typer.Exit(code=STRICT_EXIT_CODE)


@app.command()
def demo(
    seed: Optional[int] = typer.Option(None, help="Seed for placeholder fold changes"),
):
    """Run the checks on a small built-in matrix."""
    console.print("[bold blue]Running demo analysis[/bold blue]")

    result = run_sanity_check(demo_rows(), seed=seed)
    print_report(result.report, result.matrix.sample_names, console=console)


@app.command()
def validate_metadata(
    metadata: Path = typer.Argument(..., help="Metadata table to validate"),
    batch_column: Optional[str] = typer.Option(None, help="Batch column name"),
):
    """Validate a metadata table and summarize its batches."""
    console.print("[bold blue]Validating metadata[/bold blue]")

    try:
        table = load_metadata(metadata, batch_column)
    except (ValueError, OSError) as e:
        console.print(f"[bold red]Metadata validation failed: {e}[/bold red]")
        sys.exit(1)

    batches = table.distinct_batches()
    console.print("[bold green]Metadata is valid![/bold green]")
    console.print(f"Found {table.sample_count} samples in {len(batches)} batches: {', '.join(batches)}")


if __name__ == "__main__":
    app()
