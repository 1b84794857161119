"""
File-level entry point for the QC engine.

Reads the count matrix, optional metadata and optional fold changes from
disk, runs the QC checks and writes the requested outputs.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

import numpy as np

from .config import QCThresholds, load_thresholds
from .models import CountMatrix, MetadataTable, QCReport, Rows
from .qc import analyze
from .report import generate_html_report, grade_report, write_findings_tsv, write_json_report
from .utils import read_delimited_rows, read_fold_changes
from .viz import plot_library_sizes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SanityCheckResult:
    report: QCReport
    matrix: CountMatrix
    outputs: Dict[str, Path]


def load_metadata(
    metadata_file: Union[str, Path], batch_column: Optional[Union[int, str]] = None
) -> MetadataTable:
    # Command-line values arrive as strings; digits select a column index
    if isinstance(batch_column, str) and batch_column.isdigit():
        batch_column = int(batch_column)
    metadata = MetadataTable.from_rows(read_delimited_rows(metadata_file), batch_column=batch_column)
    logger.info(
        f"Loaded metadata for {metadata.sample_count} samples "
        f"in {len(metadata.distinct_batches())} batches"
    )
    return metadata


def run_sanity_check(
    count_rows: Rows,
    metadata: Optional[MetadataTable] = None,
    fold_changes: Optional[Sequence[float]] = None,
    seed: Optional[int] = None,
    thresholds: Optional[QCThresholds] = None,
    json_out: Optional[Path] = None,
    tsv_out: Optional[Path] = None,
    html_out: Optional[Path] = None,
    plot_out: Optional[Path] = None,
) -> SanityCheckResult:
    """
    Run the QC checks and write any requested outputs.

    Args:
        count_rows: Tokenized count matrix rows, header first
        metadata: Optional sample metadata
        fold_changes: Optional per-gene log2 fold changes
        seed: Seed for placeholder fold changes when none are given
        thresholds: QC thresholds
        json_out: JSON report path
        tsv_out: Findings TSV path
        html_out: HTML report path
        plot_out: Library size chart path

    Returns:
        SanityCheckResult with the report and paths of written files
    """
    matrix = CountMatrix.from_rows(count_rows)
    logger.info(f"Checking {matrix.gene_count} genes x {matrix.sample_count} samples")

    if metadata is not None:
        unmatched = metadata.unmatched_samples(matrix)
        if unmatched:
            logger.warning(
                f"{len(unmatched)} metadata samples not in count matrix "
                f"(e.g. {unmatched[0]}); batches are checked by metadata row"
            )

    rng = np.random.default_rng(seed) if seed is not None and fold_changes is None else None
    report = analyze(
        matrix,
        metadata,
        fold_changes=fold_changes,
        rng=rng,
        thresholds=thresholds or load_thresholds(),
    )
    grade = grade_report(report)
    logger.info(
        f"{len(report.flags)} critical, {len(report.warnings)} warnings, "
        f"{len(report.passed)} passed; grade {grade.letter}"
    )

    outputs: Dict[str, Path] = {}
    if json_out is not None:
        outputs["json"] = write_json_report(report, json_out)
    if tsv_out is not None:
        outputs["tsv"] = write_findings_tsv(report, tsv_out)
    if plot_out is not None:
        outputs["plot"] = plot_library_sizes(report, plot_out, matrix.sample_names)
    if html_out is not None:
        outputs["html"] = generate_html_report(
            report,
            html_out,
            sample_names=matrix.sample_names,
            plot_file=outputs.get("plot"),
        )

    return SanityCheckResult(report=report, matrix=matrix, outputs=outputs)


def run_sanity_check_files(
    counts_file: Union[str, Path],
    metadata_file: Optional[Union[str, Path]] = None,
    fold_change_file: Optional[Union[str, Path]] = None,
    fold_change_column: str = "log2FoldChange",
    batch_column: Optional[Union[int, str]] = None,
    config_file: Optional[Union[str, Path]] = None,
    **kwargs,
) -> SanityCheckResult:
    """Read inputs from disk and run ``run_sanity_check``."""
    logger.info(f"Reading count matrix {counts_file}")
    count_rows = read_delimited_rows(counts_file)
    metadata = load_metadata(metadata_file, batch_column) if metadata_file else None
    fold_changes = (
        read_fold_changes(fold_change_file, fold_change_column) if fold_change_file else None
    )
    return run_sanity_check(
        count_rows,
        metadata=metadata,
        fold_changes=fold_changes,
        thresholds=load_thresholds(config_file),
        **kwargs,
    )
