"""
Reporting module.

Turns a QCReport into a grade, a terminal summary, and JSON, TSV or HTML
files.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import pandas as pd
from jinja2 import Environment, PackageLoader, select_autoescape
from rich.console import Console
from rich.table import Table

from . import __version__
from .models import QCReport, Severity
from .utils import console as default_console
from .utils import ensure_parent_dir, format_number, save_metrics_json

logger = logging.getLogger(__name__)

SEVERITY_STYLE = {
    Severity.ERROR: ("CRITICAL ISSUES", "red", "▸"),
    Severity.WARNING: ("WARNINGS", "yellow", "▸"),
    Severity.PASS: ("PASSED", "green", "✓"),
}


@dataclass(frozen=True)
class Grade:
    letter: str
    summary: str
    style: str


def grade_report(report: QCReport) -> Grade:
    """Letter grade from the number of critical flags and warnings."""
    if not report.flags and not report.warnings:
        return Grade("A+", "Analysis quality excellent", "green")
    if not report.flags:
        return Grade("B", "Minor issues detected", "yellow")
    return Grade("C", "Critical issues require attention", "red")


def findings_frame(report: QCReport) -> pd.DataFrame:
    """One row per finding, critical first."""
    return pd.DataFrame(
        [{"severity": f.severity.value, "message": f.message} for f in report.findings],
        columns=["severity", "message"],
    )


def library_size_frame(report: QCReport, sample_names=None) -> pd.DataFrame:
    """Library sizes with their share of the largest library."""
    if sample_names is None:
        sample_names = [f"S{i + 1}" for i in range(len(report.library_sizes))]
    df = pd.DataFrame({"sample": list(sample_names), "library_size": list(report.library_sizes)})
    largest = df["library_size"].max()
    df["relative_size"] = df["library_size"] / largest if largest > 0 else 0.0
    return df


def print_report(
    report: QCReport,
    sample_names=None,
    console: Optional[Console] = None,
) -> None:
    """Print findings, library sizes and grade to the terminal."""
    console = console or default_console

    for severity, findings in (
        (Severity.ERROR, report.flags),
        (Severity.WARNING, report.warnings),
        (Severity.PASS, report.passed),
    ):
        if not findings:
            continue
        title, color, marker = SEVERITY_STYLE[severity]
        console.print(f"[bold {color}]{title}[/bold {color}]")
        for finding in findings:
            console.print(f"  [{color}]{marker}[/{color}] {finding.message}")

    if report.skipped:
        console.print(f"[dim]Not applicable: {', '.join(report.skipped)}[/dim]")

    table = Table(title="Library Size Distribution")
    table.add_column("Sample")
    table.add_column("Library size", justify="right")
    table.add_column("Relative", justify="right")
    for _, row in library_size_frame(report, sample_names).iterrows():
        table.add_row(
            str(row["sample"]),
            format_number(row["library_size"], precision=1),
            f"{row['relative_size'] * 100:.0f}%",
        )
    console.print(table)

    grade = grade_report(report)
    console.print(f"[bold {grade.style}]Grade: {grade.letter}[/bold {grade.style}] - {grade.summary}")


def write_json_report(report: QCReport, output_file: Union[str, Path]) -> Path:
    record = report.to_dict()
    grade = grade_report(report)
    record["grade"] = {"letter": grade.letter, "summary": grade.summary}
    save_metrics_json(record, output_file)
    logger.info(f"JSON report saved to {output_file}")
    return Path(output_file)


def write_findings_tsv(report: QCReport, output_file: Union[str, Path]) -> Path:
    output_file = ensure_parent_dir(output_file)
    findings_frame(report).to_csv(output_file, sep="\t", index=False)
    logger.info(f"Findings table saved to {output_file}")
    return output_file


def generate_html_report(
    report: QCReport,
    output_file: Union[str, Path],
    title: str = "DEG Sanity Check",
    sample_names=None,
    plot_file: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Render the QC report to a standalone HTML file.

    Args:
        report: QC report to render
        output_file: Output HTML file
        title: Page title
        sample_names: Optional labels for the library-size bars
        plot_file: Optional library-size chart to embed by relative path

    Returns:
        Path to the written HTML file
    """
    logger.info("Generating HTML report")
    output_file = ensure_parent_dir(output_file)

    env = Environment(
        loader=PackageLoader("deg_sanity", "templates"),
        autoescape=select_autoescape(["html", "xml"]),
    )
    template = env.get_template("report.html")

    plot_src = None
    if plot_file is not None:
        plot_path = Path(plot_file).resolve()
        try:
            plot_src = plot_path.relative_to(output_file.resolve().parent).as_posix()
        except ValueError:
            plot_src = plot_path.as_uri()

    html = template.render(
        title=title,
        report=report,
        grade=grade_report(report),
        libraries=library_size_frame(report, sample_names).to_dict("records"),
        plot_src=plot_src,
        version=__version__,
        generated=datetime.now().strftime("%Y-%m-%d %H:%M"),
    )

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(html)

    logger.info(f"HTML report saved to {output_file}")
    return output_file
