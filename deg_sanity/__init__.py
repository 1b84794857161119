"""
DEG Sanity Checker - quality control for gene-expression count tables.
"""

__version__ = "1.0.0"

from .errors import (
    DegenerateLibrarySize,
    EmptyMatrix,
    MalformedMatrix,
    MalformedMetadata,
    QCError,
    UnparsableCell,
)
from .models import CountMatrix, Finding, MetadataTable, QCReport, Severity
from .qc import analyze

__all__ = [
    "analyze",
    "CountMatrix",
    "MetadataTable",
    "Finding",
    "QCReport",
    "Severity",
    "QCError",
    "MalformedMatrix",
    "EmptyMatrix",
    "MalformedMetadata",
    "UnparsableCell",
    "DegenerateLibrarySize",
]
