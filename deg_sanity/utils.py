"""
Utility functions for the DEG sanity checker.

This module provides common utility functions used across the package,
including logging setup, file validation and table ingestion.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Union

import json
import pandas as pd
from rich.console import Console
from rich.logging import RichHandler

from .errors import UnparsableCell

logger = logging.getLogger(__name__)

console = Console()

# Ingestion accepts comma- and tab-delimited tables alike
DELIMITER = re.compile(r"[,\t]")


def setup_logging(level: int = logging.INFO) -> None:
    """
    Set up logging with Rich handler for colored output.

    Args:
        level: Logging level (default: INFO)
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
        force=True,
    )


def validate_file_exists(file_path: Union[str, Path]) -> Path:
    """
    Validate that a file exists and return Path object.

    Args:
        file_path: Path to file

    Returns:
        Path object if file exists

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    return path


def ensure_parent_dir(file_path: Union[str, Path]) -> Path:
    """Create the parent directory of an output file if needed."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def split_rows(text: str) -> List[List[str]]:
    """
    Tokenize delimited text into rows of cells.

    Blank lines are dropped; cells are stripped of surrounding whitespace.
    Rows are not padded, so ragged input stays ragged.
    """
    rows = []
    for line in text.splitlines():
        if not line.strip():
            continue
        rows.append([cell.strip() for cell in DELIMITER.split(line)])
    return rows


def read_delimited_rows(file_path: Union[str, Path]) -> List[List[str]]:
    """
    Read a comma- or tab-delimited table into rows of string cells.

    Args:
        file_path: Path to table

    Returns:
        List of rows, header first
    """
    path = validate_file_exists(file_path)
    with open(path, "r", encoding="utf-8-sig") as f:
        rows = split_rows(f.read())
    logger.debug(f"Read {len(rows)} rows from {path}")
    return rows


def read_fold_changes(
    file_path: Union[str, Path], column: str = "log2FoldChange"
) -> List[float]:
    """
    Read per-gene log2 fold changes from a delimited results table.

    Missing values (e.g. genes filtered by independent filtering) are dropped.

    Raises:
        ValueError: If the column is absent
        UnparsableCell: If a value is not numeric
    """
    path = validate_file_exists(file_path)
    df = pd.read_csv(path, sep=None, engine="python")
    if column not in df.columns:
        raise ValueError(f"Column '{column}' not found in {path}; columns are {list(df.columns)}")

    values = df[column].dropna()
    numeric = pd.to_numeric(values, errors="coerce")
    bad = values[numeric.isna()]
    if len(bad) > 0:
        raise UnparsableCell(str(bad.iloc[0]), sample=column, kind="log2 fold change")

    logger.info(f"Loaded {len(numeric)} fold changes from {path}")
    return numeric.astype(float).tolist()


def save_metrics_json(metrics: Dict[str, Any], output_file: Union[str, Path]) -> None:
    """
    Save metrics dictionary to JSON file.

    Args:
        metrics: Dictionary of metrics
        output_file: Output JSON file path
    """
    with open(ensure_parent_dir(output_file), "w", encoding="utf-8") as f:
        json.dump(metrics, f, indent=2, ensure_ascii=False)


def format_number(num: Union[int, float], precision: int = 2) -> str:
    """
    Format number with appropriate precision and units.

    Args:
        num: Number to format
        precision: Decimal precision

    Returns:
        Formatted number string
    """
    if num >= 1e9:
        return f"{num/1e9:.{precision}f}B"
    elif num >= 1e6:
        return f"{num/1e6:.{precision}f}M"
    elif num >= 1e3:
        return f"{num/1e3:.{precision}f}K"
    else:
        return f"{num:.{precision}f}"
