"""
Data model for the DEG sanity checker.

This module defines the count matrix and metadata tables handed to the
QC engine, the findings it emits and the report that collects them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .errors import EmptyMatrix, MalformedMatrix, MalformedMetadata

Rows = Sequence[Sequence[str]]

DEFAULT_BATCH_COLUMN = 2


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    PASS = "pass"


@dataclass(frozen=True)
class Finding:
    """Single QC finding."""
    severity: Severity
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"severity": self.severity.value, "message": self.message}


@dataclass(frozen=True)
class CountMatrix:
    """
    Genes x samples table of raw count strings.

    Cells are kept unparsed so the engine can report the exact cell that
    fails to parse.
    """
    sample_names: Tuple[str, ...]
    gene_ids: Tuple[str, ...]
    cells: Tuple[Tuple[str, ...], ...]

    @classmethod
    def from_rows(cls, rows: Rows, gene_column: int = 0) -> "CountMatrix":
        """
        Build a count matrix from tokenized rows.

        Args:
            rows: Header row followed by gene rows
            gene_column: Index of the gene identifier column

        Returns:
            CountMatrix

        Raises:
            MalformedMatrix: If the table is not rectangular or has no samples
            EmptyMatrix: If the header has no gene rows below it
        """
        rows = [list(row) for row in rows]
        if len(rows) == 0:
            raise MalformedMatrix("Count matrix has no rows")

        width = len(rows[0])
        if width < 2:
            raise MalformedMatrix(f"Count matrix header needs at least one sample column, got {rows[0]}")
        if not 0 <= gene_column < width:
            raise MalformedMatrix(f"Gene column {gene_column} outside header of width {width}")

        if len(rows) == 1:
            raise EmptyMatrix("Count matrix has a header but no gene rows")

        for line_no, row in enumerate(rows[1:], start=2):
            if len(row) != width:
                raise MalformedMatrix(
                    f"Row {line_no} has {len(row)} cells, header has {width}"
                )

        sample_idx = [i for i in range(width) if i != gene_column]
        header = rows[0]
        return cls(
            sample_names=tuple(str(header[i]) for i in sample_idx),
            gene_ids=tuple(str(row[gene_column]) for row in rows[1:]),
            cells=tuple(tuple(str(row[i]) for i in sample_idx) for row in rows[1:]),
        )

    @property
    def sample_count(self) -> int:
        return len(self.sample_names)

    @property
    def gene_count(self) -> int:
        return len(self.gene_ids)

    def column(self, j: int) -> Tuple[str, ...]:
        """Raw cells of sample column j."""
        return tuple(row[j] for row in self.cells)


@dataclass(frozen=True)
class MetadataTable:
    """Sample metadata with an explicit batch column."""
    samples: Tuple[str, ...]
    batches: Tuple[str, ...]
    batch_column: int = DEFAULT_BATCH_COLUMN

    @classmethod
    def from_rows(
        cls,
        rows: Rows,
        batch_column: Optional[Union[int, str]] = None,
        sample_column: int = 0,
    ) -> "MetadataTable":
        """
        Build a metadata table from tokenized rows.

        The batch column is looked up by header name when given as a string.
        Without an explicit column a header cell named ``batch`` is used,
        falling back to column index 2.

        Raises:
            MalformedMetadata: If the batch column cannot be resolved or a
                sample row is too short to hold it
        """
        rows = [list(row) for row in rows]
        if len(rows) == 0:
            raise MalformedMetadata("Metadata table has no rows")
        if len(rows) == 1:
            # Header only: no samples, so there is no batch column to check
            return cls(samples=(), batches=())

        header = [str(cell).strip() for cell in rows[0]]
        batch_idx = _resolve_batch_column(header, batch_column)

        samples = []
        batches = []
        for line_no, row in enumerate(rows[1:], start=2):
            if len(row) <= max(batch_idx, sample_column):
                raise MalformedMetadata(
                    f"Metadata row {line_no} has {len(row)} cells, "
                    f"batch column is {batch_idx}"
                )
            samples.append(str(row[sample_column]).strip())
            batches.append(str(row[batch_idx]).strip())

        return cls(samples=tuple(samples), batches=tuple(batches), batch_column=batch_idx)

    @property
    def sample_count(self) -> int:
        return len(self.samples)

    def distinct_batches(self) -> List[str]:
        """Distinct batch labels in first-seen order."""
        return list(dict.fromkeys(self.batches))

    def unmatched_samples(self, matrix: CountMatrix) -> List[str]:
        """Metadata sample ids that do not name a count matrix sample."""
        known = set(matrix.sample_names)
        return [s for s in self.samples if s not in known]


def _resolve_batch_column(header: List[str], batch_column: Optional[Union[int, str]]) -> int:
    if isinstance(batch_column, str):
        lowered = [cell.lower() for cell in header]
        if batch_column.lower() not in lowered:
            raise MalformedMetadata(f"Batch column {batch_column!r} not in metadata header {header}")
        return lowered.index(batch_column.lower())

    if batch_column is None:
        lowered = [cell.lower() for cell in header]
        if "batch" in lowered:
            return lowered.index("batch")
        batch_column = DEFAULT_BATCH_COLUMN

    if batch_column < 0 or batch_column >= len(header):
        raise MalformedMetadata(
            f"Batch column {batch_column} outside metadata header of width {len(header)}"
        )
    return batch_column


@dataclass(frozen=True)
class QCReport:
    """Findings of one analysis, bucketed by severity in check order."""
    flags: Tuple[Finding, ...]
    warnings: Tuple[Finding, ...]
    passed: Tuple[Finding, ...]
    library_sizes: Tuple[float, ...]
    sample_count: int
    skipped: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_findings(
        cls,
        findings: Sequence[Finding],
        library_sizes: Sequence[float],
        sample_count: int,
        skipped: Sequence[str] = (),
    ) -> "QCReport":
        buckets: Dict[Severity, List[Finding]] = {s: [] for s in Severity}
        for finding in findings:
            buckets[finding.severity].append(finding)
        return cls(
            flags=tuple(buckets[Severity.ERROR]),
            warnings=tuple(buckets[Severity.WARNING]),
            passed=tuple(buckets[Severity.PASS]),
            library_sizes=tuple(float(x) for x in library_sizes),
            sample_count=int(sample_count),
            skipped=tuple(skipped),
        )

    @property
    def findings(self) -> Tuple[Finding, ...]:
        return self.flags + self.warnings + self.passed

    def to_dict(self) -> Dict[str, Any]:
        """Serializable record; key names match the published report format."""
        return {
            "flags": [f.to_dict() for f in self.flags],
            "warnings": [f.to_dict() for f in self.warnings],
            "passed": [f.to_dict() for f in self.passed],
            "librarySizes": list(self.library_sizes),
            "sampleCount": self.sample_count,
            "skipped": list(self.skipped),
        }
