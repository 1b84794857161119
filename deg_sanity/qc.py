"""
Quality control engine for count matrices.

This module provides the individual QC checks run before a differential
expression analysis (sample size, sparsity, library-size balance, batch
confounding and extreme effect sizes) and ``analyze``, which runs them all
and collects their findings into a QCReport.

The engine is pure: it never logs, never retries and never touches files.
Any input problem raises a QCError and no report is produced.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .config import QCThresholds
from .errors import DegenerateLibrarySize, UnparsableCell
from .models import CountMatrix, Finding, MetadataTable, QCReport, Rows, Severity

BATCH_CHECK = "batch_confounding"
FOLD_CHANGE_CHECK = "extreme_fold_change"
FOLD_CHANGE_KIND = "log2 fold change"

DEFAULT_THRESHOLDS = QCThresholds()

# Means at or below this are treated as zero
_MEAN_EPSILON = 1e-12


def parse_count(
    value: str,
    gene: Optional[str] = None,
    sample: Optional[str] = None,
    kind: str = "count",
) -> float:
    """
    Parse one count cell.

    Raises:
        UnparsableCell: If the cell is not a finite number
    """
    try:
        number = float(str(value).strip())
    except ValueError:
        raise UnparsableCell(value, gene, sample, kind=kind) from None
    if not math.isfinite(number):
        raise UnparsableCell(value, gene, sample, kind=kind)
    return number


def parse_counts(matrix: CountMatrix) -> np.ndarray:
    """Parse every sample cell into a genes x samples float array."""
    values = np.empty((matrix.gene_count, matrix.sample_count), dtype=float)
    for i, (gene, row) in enumerate(zip(matrix.gene_ids, matrix.cells)):
        for j, cell in enumerate(row):
            values[i, j] = parse_count(cell, gene, matrix.sample_names[j])
    return values


def check_sample_size(sample_count: int, thresholds: QCThresholds = DEFAULT_THRESHOLDS) -> Finding:
    if sample_count < thresholds.min_samples:
        return Finding(Severity.ERROR, f"Low sample size (n={sample_count}). Need ≥3 per group.")
    if sample_count < thresholds.adequate_samples:
        return Finding(
            Severity.WARNING,
            f"Marginal sample size (n={sample_count}). Power may be limited.",
        )
    return Finding(Severity.PASS, f"Sample size adequate (n={sample_count}).")


def sparse_gene_percent(counts: np.ndarray, zero_fraction: float = 0.8) -> float:
    """
    Percentage of genes whose fraction of zero counts exceeds zero_fraction.

    Returns:
        Percentage rounded to one decimal
    """
    n_genes, n_samples = counts.shape
    zeros_per_gene = (counts == 0).sum(axis=1)
    sparse_genes = int((zeros_per_gene / n_samples > zero_fraction).sum())
    percent = Decimal(100.0 * sparse_genes / n_genes)
    # Ties round half up, as the one-decimal display does
    return float(percent.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def check_sparsity(zero_percent: float, thresholds: QCThresholds = DEFAULT_THRESHOLDS) -> Finding:
    """Classify the percentage of mostly-zero genes."""
    share = f"{thresholds.sparse_gene_zero_fraction * 100:g}%"
    if zero_percent > thresholds.sparsity_error_percent:
        return Finding(
            Severity.ERROR,
            f"{zero_percent:.1f}% genes have >{share} zeros. Poor sequencing depth.",
        )
    if zero_percent > thresholds.sparsity_warning_percent:
        return Finding(
            Severity.WARNING,
            f"{zero_percent:.1f}% genes have >{share} zeros. Consider filtering.",
        )
    return Finding(Severity.PASS, f"Low-expression genes: {zero_percent:.1f}% (acceptable)")


def library_sizes(counts: np.ndarray) -> np.ndarray:
    """Total counts per sample column."""
    return counts.sum(axis=0)


def library_size_stats(sizes: Sequence[float]) -> Tuple[float, float, float, float]:
    """
    Mean, max, min and coefficient of variation of library sizes.

    CV uses the population standard deviation.

    Raises:
        DegenerateLibrarySize: If the mean is zero, negative or not finite
    """
    sizes = np.asarray(sizes, dtype=float)
    mean = float(sizes.mean())
    if not math.isfinite(mean) or mean <= _MEAN_EPSILON:
        raise DegenerateLibrarySize(mean)
    cv = float(sizes.std(ddof=0)) / mean
    return mean, float(sizes.max()), float(sizes.min()), cv


def check_library_sizes(
    sizes: Sequence[float], thresholds: QCThresholds = DEFAULT_THRESHOLDS
) -> Finding:
    """Flag unbalanced sequencing depth from max/min ratio, then CV."""
    _, max_lib, min_lib, cv = library_size_stats(sizes)

    if min_lib == 0:
        return Finding(
            Severity.ERROR,
            "Library size ratio unbounded (empty library). Normalization critical.",
        )

    ratio = max_lib / min_lib
    if ratio > thresholds.library_ratio_max:
        return Finding(Severity.ERROR, f"Library size ratio {ratio:.1f}x. Normalization critical.")
    if cv > thresholds.library_cv_max:
        return Finding(Severity.WARNING, f"Library size CV={cv * 100:.1f}%. Check normalization.")
    return Finding(Severity.PASS, f"Library sizes balanced (CV={cv * 100:.1f}%)")


def check_batch_confounding(metadata: MetadataTable) -> Optional[Finding]:
    """
    Look for batch labels that coincide with individual samples.

    Returns:
        A finding, or None when there is at most one batch
    """
    n_batches = len(metadata.distinct_batches())
    if n_batches <= 1:
        return None
    if n_batches == metadata.sample_count:
        return Finding(Severity.WARNING, "Each sample has unique batch. Confounded with condition.")
    return Finding(Severity.PASS, "Batch structure detected. Ensure batch correction.")


def simulate_fold_changes(
    rng: np.random.Generator, count: int = 50, spread: float = 12.0
) -> np.ndarray:
    """
    Placeholder log2 fold changes drawn uniformly from (-spread/2, spread/2).

    These values are unrelated to the count matrix. With the default spread
    they can never exceed the default extreme threshold of 8.
    """
    return (rng.random(count) - 0.5) * spread


def check_extreme_fold_changes(
    fold_changes: Sequence[float], thresholds: QCThresholds = DEFAULT_THRESHOLDS
) -> Finding:
    values = np.asarray([parse_count(v, kind=FOLD_CHANGE_KIND) for v in fold_changes], dtype=float)
    limit = thresholds.extreme_log2fc
    n_extreme = int((np.abs(values) > limit).sum())
    if n_extreme > thresholds.extreme_gene_count:
        return Finding(
            Severity.WARNING,
            f"{n_extreme} genes with |log2FC| > {limit:g}. Verify biological relevance.",
        )
    return Finding(Severity.PASS, "No extreme fold changes detected")


def analyze(
    matrix: Union[CountMatrix, Rows],
    metadata: Optional[Union[MetadataTable, Rows]] = None,
    fold_changes: Optional[Sequence[float]] = None,
    rng: Optional[np.random.Generator] = None,
    thresholds: Optional[QCThresholds] = None,
) -> QCReport:
    """
    Run every QC check on a count matrix.

    Args:
        matrix: CountMatrix or tokenized rows (header first)
        metadata: Optional MetadataTable or tokenized rows
        fold_changes: Per-gene log2 fold changes for the effect-size check
        rng: Random source for placeholder fold changes, used only when
            fold_changes is not given
        thresholds: QC thresholds, defaults when omitted

    Returns:
        QCReport with findings in check order

    Raises:
        QCError: On malformed, empty or unparsable input
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    if not isinstance(matrix, CountMatrix):
        matrix = CountMatrix.from_rows(matrix)
    if metadata is not None and not isinstance(metadata, MetadataTable):
        metadata = MetadataTable.from_rows(metadata)

    counts = parse_counts(matrix)
    sizes = library_sizes(counts)

    findings: List[Finding] = []
    skipped: List[str] = []

    findings.append(check_sample_size(matrix.sample_count, thresholds))
    findings.append(
        check_sparsity(sparse_gene_percent(counts, thresholds.sparse_gene_zero_fraction), thresholds)
    )
    findings.append(check_library_sizes(sizes, thresholds))

    if metadata is not None and metadata.sample_count >= 1:
        batch_finding = check_batch_confounding(metadata)
        if batch_finding is not None:
            findings.append(batch_finding)
    else:
        skipped.append(BATCH_CHECK)

    if fold_changes is None and rng is not None:
        fold_changes = simulate_fold_changes(
            rng,
            thresholds.simulated_fold_change_count,
            thresholds.simulated_fold_change_spread,
        )
    if fold_changes is not None:
        findings.append(check_extreme_fold_changes(fold_changes, thresholds))
    else:
        skipped.append(FOLD_CHANGE_CHECK)

    return QCReport.from_findings(findings, sizes, matrix.sample_count, skipped)
