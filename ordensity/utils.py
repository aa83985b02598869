"""Shared utilities for ORdensity workflows."""

from __future__ import annotations

import os
from pathlib import Path

import numpy as np
import pandas as pd


def ensure_dir(path: str) -> None:
    """Create a directory (and parents) if it does not exist."""
    if path == "":
        return
    os.makedirs(path, exist_ok=True)


def read_expression_table(path: str | Path) -> pd.DataFrame:
    """Read a genes x samples CSV whose first column holds gene ids.

    Args:
        path: CSV file path.

    Returns:
        Float DataFrame indexed by gene id.
    """
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Input file '{csv_path}' not found.")
    table = pd.read_csv(csv_path, index_col=0)
    if table.empty:
        raise ValueError(f"Input file '{csv_path}' holds no expression values.")
    try:
        values = table.astype(float)
    except ValueError as exc:
        raise ValueError(f"Non-numeric expression values in '{csv_path}': {exc}") from exc
    if not np.all(np.isfinite(values.to_numpy())):
        raise ValueError(f"Expression values in '{csv_path}' contain NaN/inf.")
    values.index = values.index.astype(str)
    return values
