"""Robust outlyingness index from a distance matrix."""

from __future__ import annotations

import numpy as np

from ordensity.core.types import DegenerateDataError


def global_scale(distances: np.ndarray) -> float:
    """Robust geometric variability: half the squared median of all entries."""
    d = np.asarray(distances, dtype=float)
    return float(np.median(d) ** 2 / 2.0)


def inlier_index(distances: np.ndarray) -> np.ndarray:
    """Robust inlier index `I_i = vg / median(row_i)^2` for every row.

    The zero self-distance stays in each row, and in the global median.
    """
    d = np.asarray(distances, dtype=float)
    if d.ndim != 2 or d.shape[0] != d.shape[1]:
        raise ValueError(f"distances must be a square matrix, got shape {d.shape}.")
    if d.shape[0] == 0:
        raise ValueError("distances must be non-empty.")

    vg = global_scale(d)
    if vg == 0.0:
        raise DegenerateDataError("Median pairwise distance is zero; outlyingness is undefined.")
    row_medians = np.median(d, axis=1)
    zero_rows = np.flatnonzero(row_medians == 0.0)
    if zero_rows.size:
        raise DegenerateDataError(
            f"Median distance is zero for {zero_rows.size} row(s) "
            f"(first at row {int(zero_rows[0])}); outlyingness is undefined."
        )
    return vg / row_medians**2


def outlyingness_index(distances: np.ndarray) -> np.ndarray:
    """Outlyingness `OR_i = 1 / I_i`; large values mark atypical rows."""
    return 1.0 / inlier_index(distances)
