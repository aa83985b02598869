"""Small pure helpers for core computations."""

from __future__ import annotations

import numpy as np


def finite_1d(name: str, values: np.ndarray) -> np.ndarray:
    arr = np.asarray(values, dtype=float).ravel()
    if arr.size == 0:
        raise ValueError(f"{name} must be non-empty.")
    if not np.isfinite(arr).all():
        raise ValueError(f"{name} must be finite.")
    return arr


def finite_2d(name: str, values: np.ndarray) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.ndim == 1:
        arr = arr.reshape(-1, 1)
    if arr.ndim != 2:
        raise ValueError(f"{name} must be a 2D matrix, got shape {arr.shape}.")
    if arr.size == 0:
        raise ValueError(f"{name} must be non-empty.")
    if not np.isfinite(arr).all():
        raise ValueError(f"{name} must be finite.")
    return arr


def estimated_matrix_nbytes(n_rows: int, itemsize: int = 8) -> int:
    """Bytes taken by a dense square float matrix of side `n_rows`."""
    return int(n_rows) * int(n_rows) * int(itemsize)


def format_nbytes(nbytes: int) -> str:
    size = float(nbytes)
    for unit in ("bytes", "Kb", "Mb"):
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} Gb"
