"""
Visualization module.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import matplotlib.pyplot as plt
import seaborn as sns

from .models import QCReport
from .report import grade_report, library_size_frame
from .utils import ensure_parent_dir

logger = logging.getLogger(__name__)

GRADE_COLORS = {"green": "#16a34a", "yellow": "#ca8a04", "red": "#dc2626"}


def plot_library_sizes(
    report: QCReport,
    output_file: Union[str, Path],
    sample_names: Optional[Sequence[str]] = None,
    dpi: int = 150,
) -> Path:
    """
    Bar chart of library sizes, colored by the report grade.

    Args:
        report: QC report
        output_file: Output image file (format from suffix)
        sample_names: Optional bar labels, S1..Sn by default
        dpi: Image resolution

    Returns:
        Path to the saved figure
    """
    logger.info("Plotting library size distribution")
    output_file = ensure_parent_dir(output_file)

    df = library_size_frame(report, sample_names)
    grade = grade_report(report)

    sns.set_theme(style="whitegrid")
    fig, ax = plt.subplots(figsize=(max(4, 0.6 * len(df) + 2), 4))
    try:
        sns.barplot(data=df, x="sample", y="library_size", color=GRADE_COLORS[grade.style], ax=ax)
        mean_size = df["library_size"].mean()
        ax.axhline(mean_size, color="black", linestyle="--", linewidth=1, label="mean")
        ax.set_xlabel("Sample")
        ax.set_ylabel("Library size (total counts)")
        ax.set_title(f"Library Size Distribution (grade {grade.letter})")
        ax.legend(loc="upper right")
        if len(df) > 12:
            ax.tick_params(axis="x", labelrotation=90)
        fig.tight_layout()
        fig.savefig(output_file, dpi=dpi)
    finally:
        plt.close(fig)

    logger.info(f"Library size plot saved to {output_file}")
    return output_file
