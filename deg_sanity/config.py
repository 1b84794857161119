"""
Threshold configuration for the QC checks.

Defaults ship as package data in ``data/default_thresholds.yml``; a user
YAML file may override any subset of them.
"""

from dataclasses import dataclass, fields, replace
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .utils import validate_file_exists


@dataclass(frozen=True)
class QCThresholds:
    min_samples: int = 6
    adequate_samples: int = 10
    sparse_gene_zero_fraction: float = 0.8
    sparsity_error_percent: float = 50.0
    sparsity_warning_percent: float = 30.0
    library_ratio_max: float = 10.0
    library_cv_max: float = 0.5
    extreme_log2fc: float = 8.0
    extreme_gene_count: int = 5
    simulated_fold_change_count: int = 50
    simulated_fold_change_spread: float = 12.0

    def updated(self, overrides: Dict[str, Any]) -> "QCThresholds":
        """
        Return a copy with overrides applied.

        Raises:
            ValueError: On unknown keys or values of the wrong type
        """
        known = {f.name: f for f in fields(self)}
        unknown = sorted(set(overrides) - set(known))
        if unknown:
            raise ValueError(f"Unknown threshold keys: {unknown}")

        coerced = {}
        for key, value in overrides.items():
            caster = int if known[key].type is int else float
            try:
                coerced[key] = caster(value)
            except (TypeError, ValueError):
                raise ValueError(f"Threshold {key!r} must be numeric, got {value!r}")
        return replace(self, **coerced)


def _read_yaml(text: str, source: str) -> Dict[str, Any]:
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Threshold file {source} must contain a mapping")
    return data


def load_thresholds(config_file: Optional[Union[str, Path]] = None) -> QCThresholds:
    """
    Load QC thresholds.

    Args:
        config_file: Optional YAML file overriding the packaged defaults

    Returns:
        QCThresholds
    """
    default_text = resources.files("deg_sanity").joinpath("data/default_thresholds.yml").read_text()
    thresholds = QCThresholds().updated(_read_yaml(default_text, "default_thresholds.yml"))

    if config_file is not None:
        path = validate_file_exists(config_file)
        thresholds = thresholds.updated(_read_yaml(path.read_text(), str(path)))

    return thresholds
