"""Weighted quantile-difference encoding of two-condition expression data."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ordensity.core.types import DegenerateDataError
from ordensity.core.utils import finite_1d, finite_2d


def row_quantiles(values: np.ndarray, probs: Sequence[float]) -> np.ndarray:
    """Per-row quantiles with linear interpolation, shape (rows, len(probs))."""
    arr = np.asarray(values, dtype=float)
    q = np.quantile(arr, np.asarray(probs, dtype=float), axis=1)
    return np.ascontiguousarray(q.T)


def quantile_differences_weighted(
    positive: np.ndarray,
    negative: np.ndarray,
    probs: Sequence[float],
    weights: Sequence[float],
    *,
    scale: bool = False,
) -> np.ndarray:
    """Encode each gene as weighted differences of condition quantiles.

    Args:
        positive: Genes x samples matrix for the positive condition.
        negative: Genes x samples matrix for the negative condition.
        probs: Ordered quantile levels.
        weights: One weight per quantile level.
        scale: Divide each gene's differences by the larger of the two
            ranges spanned by the first and last quantile levels.

    Returns:
        Genes x len(probs) matrix of weighted quantile differences.

    Raises:
        DegenerateDataError: If `scale` is set and some gene has a zero range
            in both conditions.
    """
    pos = finite_2d("positive", positive)
    neg = finite_2d("negative", negative)
    if pos.shape[0] != neg.shape[0]:
        raise ValueError(
            f"Condition matrices must have the same number of genes ({pos.shape[0]} != {neg.shape[0]})."
        )
    p = finite_1d("probs", probs)
    w = finite_1d("weights", weights)
    if p.size != w.size:
        raise ValueError("probs and weights lengths do not match.")

    q_pos = row_quantiles(pos, p)
    q_neg = row_quantiles(neg, p)
    diffs = q_pos - q_neg

    if scale:
        range_pos = q_pos[:, -1] - q_pos[:, 0]
        range_neg = q_neg[:, -1] - q_neg[:, 0]
        max_range = np.maximum(range_pos, range_neg)
        if np.any(max_range == 0.0):
            bad = np.flatnonzero(max_range == 0.0)
            raise DegenerateDataError(
                f"Can't scale the data: zero quantile range for {bad.size} gene(s) "
                f"(first at row {int(bad[0])})."
            )
        diffs = diffs / max_range[:, None]

    return diffs * w[None, :]
