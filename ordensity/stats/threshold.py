"""Cut-point selection from the pooled permutation null."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from ordensity.core.utils import finite_1d


@dataclass(frozen=True)
class ThresholdSelection:
    """Cut-point and the observations beyond it.

    - `cut_rank`: 1-based rank of the cut-point in the sorted pooled null.
    - `exceedance_genes` / `exceedance_replicates`: one entry per null
      (gene, replicate) pair above the cut-point, replicate-major.
    """

    cut_point: float
    cut_rank: int
    candidates: np.ndarray
    exceedance_genes: np.ndarray
    exceedance_replicates: np.ndarray

    @property
    def n_candidates(self) -> int:
        return int(self.candidates.sum())

    @property
    def n_exceedances(self) -> int:
        return int(self.exceedance_genes.size)

    @property
    def candidate_indices(self) -> np.ndarray:
        return np.flatnonzero(self.candidates)


def cut_rank(alpha: float, n_genes: int, n_replicates: int) -> int:
    """1-based rank `floor((1 - alpha) * genes * B)` of the cut-point."""
    return int(math.floor((1.0 - float(alpha)) * int(n_genes) * int(n_replicates)))


def select_threshold(
    observed: np.ndarray,
    null_outlyingness: np.ndarray,
    alpha: float,
) -> ThresholdSelection:
    """Pick the global `(1 - alpha)` percentile of the null and flag genes above it.

    Args:
        observed: Outlyingness of every gene on the real split.
        null_outlyingness: Genes x B matrix of permutation outlyingness.
        alpha: Significance level.

    Returns:
        ThresholdSelection with a strict `>` comparison against the cut-point.
    """
    obs = finite_1d("observed", observed)
    null = np.asarray(null_outlyingness, dtype=float)
    if null.ndim != 2 or null.shape[0] != obs.size:
        raise ValueError(
            f"null_outlyingness must have shape ({obs.size}, B), got {null.shape}."
        )
    if null.shape[1] == 0:
        raise ValueError("null_outlyingness must contain at least one replicate.")

    n_genes, n_b = null.shape
    rank = cut_rank(alpha, n_genes, n_b)
    pooled = np.sort(null.ravel(), kind="stable")
    idx = min(max(rank, 1), pooled.size) - 1
    cut = float(pooled[idx])

    candidates = obs > cut
    rep_idx, gene_idx = np.nonzero(null.T > cut)
    return ThresholdSelection(
        cut_point=cut,
        cut_rank=int(rank),
        candidates=candidates,
        exceedance_genes=gene_idx.astype(int),
        exceedance_replicates=rep_idx.astype(int),
    )
