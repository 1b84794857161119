"""
Error types raised while screening a count matrix.

Every error aborts the analysis as a whole; no partial report is produced.
"""

from typing import Optional


class QCError(ValueError):
    """Base class for input problems that make a QC report meaningless."""


class MalformedMatrix(QCError):
    """Fewer than two rows, no sample columns, or rows of inconsistent length."""


class EmptyMatrix(QCError):
    """Header present but no gene rows."""


class MalformedMetadata(QCError):
    """Metadata table is missing its batch column or has short rows."""


class UnparsableCell(QCError):
    """A sample cell that is not a finite number."""

    def __init__(
        self,
        value: str,
        gene: Optional[str] = None,
        sample: Optional[str] = None,
        kind: str = "count",
    ):
        self.value = value
        self.gene = gene
        self.sample = sample
        self.kind = kind
        where = ""
        if gene is not None and sample is not None:
            where = f" (gene {gene!r}, sample {sample!r})"
        elif sample is not None:
            where = f" (column {sample!r})"
        super().__init__(f"Cannot parse {kind} {value!r}{where}")


class DegenerateLibrarySize(QCError):
    """Mean library size is zero or not finite, so CV is undefined."""

    def __init__(self, mean: float):
        self.mean = mean
        super().__init__(f"Mean library size is {mean}; coefficient of variation is undefined")
