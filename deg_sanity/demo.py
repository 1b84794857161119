"""
Built-in demo count matrix.
"""

from typing import List

DEMO_MATRIX: List[List[str]] = [
    ["gene", "sample1", "sample2", "sample3", "sample4", "sample5", "sample6"],
    ["GAPDH", "5420", "5890", "5120", "5340", "5670", "5230"],
    ["TP53", "3200", "3450", "3100", "890", "920", "850"],
    ["MYC", "1200", "1150", "1340", "2100", "2340", "2210"],
]


def demo_rows() -> List[List[str]]:
    """Fresh copy of the demo matrix rows."""
    return [list(row) for row in DEMO_MATRIX]
