#!/usr/bin/env python3
"""
DEG Sanity Checker - Test Data Generator

Generates small synthetic count matrices and metadata tables for testing.
Sparsity and library-size spread can be dialed in so each QC check can be
pushed into a chosen severity bucket.
"""

import argparse
import random
from pathlib import Path
from typing import List, Optional, Sequence


class CountMatrixGenerator:
    """Generate synthetic count matrices for testing."""

    def __init__(self, seed: int = 42):
        """
        Initialize count matrix generator.

        Args:
            seed: Random seed for reproducibility
        """
        self.rng = random.Random(seed)

        # Common housekeeping genes first, then numbered genes
        self.gene_names = ['GAPDH', 'ACTB', 'TUBB', 'RPL13A', 'HPRT1']

    def _gene_name(self, i: int) -> str:
        if i < len(self.gene_names):
            return self.gene_names[i]
        return f'GENE{i:03d}'

    def generate_rows(
        self,
        n_genes: int = 20,
        n_samples: int = 6,
        sparse_genes: int = 0,
        library_scale: Optional[Sequence[float]] = None,
        base_count: int = 1000,
    ) -> List[List[str]]:
        """
        Generate count matrix rows.

        Dense genes have strictly positive counts in every sample; sparse
        genes have a single non-zero sample, so their zero fraction is
        above 0.8 whenever n_samples is at least 6.

        Args:
            n_genes: Number of gene rows
            n_samples: Number of sample columns
            sparse_genes: How many of the genes are mostly zero
            library_scale: Per-sample multiplier applied to dense counts
            base_count: Typical dense count

        Returns:
            Rows with header first
        """
        if library_scale is None:
            library_scale = [1.0] * n_samples
        header = ['gene'] + [f's{j + 1}' for j in range(n_samples)]
        rows = [header]

        for i in range(n_genes):
            if i < sparse_genes:
                counts = [0] * n_samples
                counts[self.rng.randrange(n_samples)] = self.rng.randint(1, 20)
            else:
                counts = [
                    max(1, int(self.rng.randint(base_count // 2, base_count * 3 // 2) * library_scale[j]))
                    for j in range(n_samples)
                ]
            rows.append([self._gene_name(i)] + [str(c) for c in counts])

        return rows

    def generate_metadata(
        self, samples: Sequence[str], batches: Sequence[str]
    ) -> List[List[str]]:
        """Metadata rows: sample_id, condition, batch."""
        rows = [['sample_id', 'condition', 'batch']]
        for j, (sample, batch) in enumerate(zip(samples, batches)):
            condition = 'control' if j < len(samples) / 2 else 'treated'
            rows.append([sample, condition, batch])
        return rows

    def write_table(self, rows: List[List[str]], output_file: Path, delimiter: str = '\t') -> Path:
        output_file = Path(output_file)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with open(output_file, 'w') as f:
            for row in rows:
                f.write(delimiter.join(row) + '\n')
        return output_file


def create_sample_data(output_dir: Path, seed: int = 42) -> List[Path]:
    """
    Create a complete test dataset: counts, metadata and fold changes.

    Args:
        output_dir: Directory to create test data

    Returns:
        Paths of the written files
    """
    output_dir = Path(output_dir)
    generator = CountMatrixGenerator(seed)

    counts = generator.generate_rows(n_genes=50, n_samples=12, sparse_genes=5)
    samples = counts[0][1:]
    batches = [f'batch{j % 3 + 1}' for j in range(len(samples))]
    metadata = generator.generate_metadata(samples, batches)

    fold_changes = [['gene', 'log2FoldChange']]
    for row in counts[1:]:
        fold_changes.append([row[0], f'{generator.rng.uniform(-3, 3):.3f}'])

    return [
        generator.write_table(counts, output_dir / 'counts.tsv'),
        generator.write_table(metadata, output_dir / 'metadata.tsv'),
        generator.write_table(fold_changes, output_dir / 'fold_changes.tsv'),
    ]


def main():
    """Command-line interface for test data generation."""
    parser = argparse.ArgumentParser(
        description='Generate synthetic test data for the DEG sanity checker'
    )
    parser.add_argument(
        '--output-dir', '-o',
        type=Path,
        default=Path.cwd() / 'test_data',
        help='Output directory for test data'
    )
    parser.add_argument(
        '--seed', '-s',
        type=int,
        default=42,
        help='Random seed for reproducibility'
    )

    args = parser.parse_args()

    for path in create_sample_data(args.output_dir, args.seed):
        print(f"Wrote {path}")


if __name__ == '__main__':
    main()
