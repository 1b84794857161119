"""Shared fixtures for the DEG sanity checker tests."""

import sys
from pathlib import Path

import pytest

# Make the test data generator importable regardless of pytest import mode
sys.path.insert(0, str(Path(__file__).parent))

from generate_test_data import CountMatrixGenerator  # noqa: E402

from deg_sanity.demo import demo_rows  # noqa: E402


@pytest.fixture
def generator():
    return CountMatrixGenerator(seed=123)


@pytest.fixture
def demo_matrix():
    return demo_rows()


def constant_matrix(n_samples: int, n_genes: int = 3, count: str = "100"):
    """Rows of identical counts: balanced libraries, no zeros."""
    header = ["gene"] + [f"s{j + 1}" for j in range(n_samples)]
    return [header] + [[f"G{i}"] + [count] * n_samples for i in range(n_genes)]


@pytest.fixture
def balanced_matrix():
    return constant_matrix


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
