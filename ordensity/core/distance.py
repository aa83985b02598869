"""Pairwise Euclidean distances between feature rows."""

from __future__ import annotations

import numpy as np
from scipy.spatial.distance import pdist, squareform

from ordensity.core.utils import finite_2d


def pairwise_distances(features: np.ndarray) -> np.ndarray:
    """Return the full symmetric (rows x rows) Euclidean distance matrix.

    The result is dense; its size grows with the square of the row count.
    """
    x = finite_2d("features", features)
    if x.shape[0] == 1:
        return np.zeros((1, 1), dtype=float)
    return squareform(pdist(x, metric="euclidean"))
