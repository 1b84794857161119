"""
DEG Sanity Checker - input handling tests

Table ingestion, schema adaptation and threshold configuration.
"""

import pytest

from deg_sanity.config import QCThresholds, load_thresholds
from deg_sanity.errors import MalformedMetadata, UnparsableCell
from deg_sanity.models import CountMatrix, MetadataTable
from deg_sanity.utils import read_delimited_rows, read_fold_changes, split_rows


class TestIngestion:
    """Delimited text to rows."""

    def test_split_rows_mixed_delimiters(self):
        rows = split_rows("gene,s1\ts2\nGAPDH, 10\t20\n\n")
        assert rows == [["gene", "s1", "s2"], ["GAPDH", "10", "20"]]

    def test_split_rows_keeps_ragged_rows(self):
        rows = split_rows("gene\ts1\ts2\nA\t1\n")
        assert [len(r) for r in rows] == [3, 2]

    def test_read_csv_file(self, tmp_path):
        counts = tmp_path / "counts.csv"
        counts.write_text("gene,s1,s2\r\nA,1,2\r\nB,3,4\r\n")
        assert read_delimited_rows(counts) == [["gene", "s1", "s2"], ["A", "1", "2"], ["B", "3", "4"]]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_delimited_rows(tmp_path / "nonexistent.tsv")

    def test_read_fold_changes_drops_missing(self, tmp_path):
        results = tmp_path / "de.tsv"
        results.write_text("gene\tbaseMean\tlog2FoldChange\nA\t10\t1.5\nB\t3\tNA\nC\t8\t-9.25\n")
        assert read_fold_changes(results) == [1.5, -9.25]

    def test_read_fold_changes_custom_column(self, tmp_path):
        results = tmp_path / "de.csv"
        results.write_text("gene,logFC\nA,0.5\nB,2\n")
        assert read_fold_changes(results, column="logFC") == [0.5, 2.0]

    def test_read_fold_changes_missing_column(self, tmp_path):
        results = tmp_path / "de.tsv"
        results.write_text("gene\tlogFC\nA\t1\n")
        with pytest.raises(ValueError, match="log2FoldChange"):
            read_fold_changes(results)

    def test_read_fold_changes_rejects_text(self, tmp_path):
        results = tmp_path / "de.tsv"
        results.write_text("gene\tlog2FoldChange\nA\t1\nB\thigh\n")
        with pytest.raises(UnparsableCell, match="Cannot parse log2 fold change 'high'"):
            read_fold_changes(results)


class TestCountMatrix:
    """Count matrix schema."""

    def test_named_roles(self):
        matrix = CountMatrix.from_rows([["gene", "a", "b"], ["X", "1", "2"], ["Y", "3", "4"]])
        assert matrix.sample_names == ("a", "b")
        assert matrix.gene_ids == ("X", "Y")
        assert matrix.column(1) == ("2", "4")
        assert matrix.sample_count == 2
        assert matrix.gene_count == 2

    def test_gene_column_elsewhere(self):
        matrix = CountMatrix.from_rows([["a", "b", "gene"], ["1", "2", "X"]], gene_column=2)
        assert matrix.sample_names == ("a", "b")
        assert matrix.gene_ids == ("X",)
        assert matrix.cells == (("1", "2"),)


class TestMetadataTable:
    """Metadata schema."""

    def test_batch_column_found_by_name(self):
        rows = [["sample", "batch", "condition"], ["s1", "b1", "ctrl"], ["s2", "b2", "trt"]]
        table = MetadataTable.from_rows(rows)
        assert table.batch_column == 1
        assert table.batches == ("b1", "b2")

    def test_default_batch_column_index(self):
        rows = [["sample", "condition", "run"], ["s1", "ctrl", "r1"], ["s2", "trt", "r1"]]
        table = MetadataTable.from_rows(rows)
        assert table.batch_column == 2
        assert table.distinct_batches() == ["r1"]

    def test_explicit_batch_column_name(self):
        rows = [["sample", "Lane", "run"], ["s1", "L1", "r1"], ["s2", "L2", "r1"]]
        assert MetadataTable.from_rows(rows, batch_column="lane").batches == ("L1", "L2")

    def test_unknown_batch_column(self):
        with pytest.raises(MalformedMetadata):
            MetadataTable.from_rows([["sample", "condition"], ["s1", "ctrl"]], batch_column="batch")

    def test_header_too_narrow_for_default(self):
        with pytest.raises(MalformedMetadata):
            MetadataTable.from_rows([["sample", "condition"], ["s1", "ctrl"]])

    def test_short_sample_row(self):
        rows = [["sample", "condition", "batch"], ["s1", "ctrl", "b1"], ["s2", "trt"]]
        with pytest.raises(MalformedMetadata):
            MetadataTable.from_rows(rows)

    def test_unmatched_samples(self):
        matrix = CountMatrix.from_rows([["gene", "s1", "s2"], ["X", "1", "2"]])
        table = MetadataTable.from_rows(
            [["sample", "condition", "batch"], ["s1", "c", "b1"], ["s9", "c", "b2"]]
        )
        assert table.unmatched_samples(matrix) == ["s9"]


class TestConfig:
    """Threshold configuration."""

    def test_packaged_defaults_match_dataclass(self):
        assert load_thresholds() == QCThresholds()

    def test_yaml_override(self, tmp_path):
        config = tmp_path / "thresholds.yml"
        config.write_text("min_samples: 4\nlibrary_cv_max: 0.25\n")
        thresholds = load_thresholds(config)
        assert thresholds.min_samples == 4
        assert thresholds.library_cv_max == 0.25
        assert thresholds.adequate_samples == 10

    def test_unknown_key(self, tmp_path):
        config = tmp_path / "thresholds.yml"
        config.write_text("min_sample: 4\n")
        with pytest.raises(ValueError, match="Unknown threshold"):
            load_thresholds(config)

    def test_non_numeric_value(self):
        with pytest.raises(ValueError):
            QCThresholds().updated({"library_ratio_max": "large"})

    def test_non_mapping_file(self, tmp_path):
        config = tmp_path / "thresholds.yml"
        config.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError):
            load_thresholds(config)
