"""False-positive density in the K-neighbourhood of candidate genes."""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from functools import partial

import numpy as np

from ordensity.core.distance import pairwise_distances
from ordensity.parallel import parallel_map


@dataclass(frozen=True)
class NeighbourhoodEstimate:
    """Fold-averaged false-positive statistics per candidate gene.

    - `fold_stats`: candidates x 3 x folds array of (FP count, density, radius).
    - `p0`: expected share of null points among the members of a fold.
    """

    fold_stats: np.ndarray
    fp_mean: np.ndarray
    fp_min: np.ndarray
    fp_max: np.ndarray
    density_mean: np.ndarray
    radius_mean: np.ndarray
    p0: float
    p_candidates: float
    numneighbours: int

    @property
    def expected_false_positives(self) -> float:
        return float(self.p0 * self.numneighbours)

    @property
    def dif_exp(self) -> np.ndarray:
        return self.fp_mean - self.expected_false_positives


def neighbourhood_density(
    distances: np.ndarray,
    is_null: np.ndarray,
    k: int,
) -> tuple[float, float, float]:
    """FP count, density and radius of the `k` nearest members.

    Args:
        distances: Distances from one point to every other member (self excluded).
        is_null: Boolean labels aligned with `distances`, True for null points.
        k: Neighbour count.

    Returns:
        `(fp_count, fp_count / radius, radius)` where `radius` is the distance
        to the k-th nearest member. With no other member the radius is NaN.
    """
    d = np.asarray(distances, dtype=float).ravel()
    labels = np.asarray(is_null, dtype=bool).ravel()
    if d.size != labels.size:
        raise ValueError("distances and is_null must have the same length.")
    if d.size == 0:
        return 0.0, 0.0, float("nan")
    k_eff = min(int(k), d.size)
    order = np.argsort(d, kind="stable")[:k_eff]
    radius = float(d[order[-1]])
    fp_count = float(np.sum(labels[order]))
    if radius == 0.0:
        density = 0.0 if fp_count == 0.0 else float("inf")
    else:
        density = fp_count / radius
    return fp_count, density, radius


def fold_statistics(
    fold_index: int,
    *,
    candidate_features: np.ndarray,
    null_features: np.ndarray,
    fold_of_null: np.ndarray,
    k: int,
) -> np.ndarray:
    """Candidates x 3 statistics for one fold of the null exceedances."""
    in_fold = null_features[fold_of_null == int(fold_index)]
    n_cand = int(candidate_features.shape[0])
    mixed = np.vstack([candidate_features, in_fold])
    is_null = np.concatenate(
        [np.zeros(n_cand, dtype=bool), np.ones(in_fold.shape[0], dtype=bool)]
    )
    dmix = pairwise_distances(mixed)

    out = np.zeros((n_cand, 3), dtype=float)
    for i in range(n_cand):
        others = np.arange(mixed.shape[0]) != i
        out[i] = neighbourhood_density(dmix[i, others], is_null[others], k)
    return out


def assign_folds(n_items: int, n_folds: int, rng: np.random.Generator) -> np.ndarray:
    """Independent uniform fold label in [0, n_folds) for each item."""
    return rng.integers(0, int(n_folds), size=int(n_items))


def expected_null_share(n_candidates: int, n_exceedances: int, n_folds: int) -> tuple[float, float]:
    """Return `(p0, p_candidates)` for one fold of size `n_exceedances / n_folds`."""
    per_fold = float(n_exceedances) / float(n_folds)
    total = float(n_candidates) + per_fold
    if total == 0.0:
        return 0.0, 0.0
    return per_fold / total, float(n_candidates) / total


def estimate_fp_neighbourhood(
    candidate_features: np.ndarray,
    null_features: np.ndarray,
    *,
    n_folds: int,
    numneighbours: int,
    rng: np.random.Generator,
    parallel: bool = False,
    n_jobs: int = 0,
    logger: logging.Logger | None = None,
) -> NeighbourhoodEstimate:
    """Average false-positive neighbourhood statistics over random folds.

    Each null exceedance joins one fold at random. Within a fold, every
    candidate's `numneighbours` nearest members of (candidates + fold
    exceedances) are inspected; null members count as false positives.
    """
    log = logger or logging.getLogger("ordensity")
    cand = np.asarray(candidate_features, dtype=float)
    null = np.asarray(null_features, dtype=float)
    if cand.ndim != 2:
        raise ValueError("candidate_features must be a 2D matrix.")
    if null.ndim != 2 or (null.shape[0] > 0 and null.shape[1] != cand.shape[1]):
        raise ValueError("null_features must be a 2D matrix with the candidates' width.")
    n_folds_i = int(n_folds)
    k = int(numneighbours)
    if n_folds_i < 1 or k < 1:
        raise ValueError("n_folds and numneighbours must be positive.")

    n_cand = int(cand.shape[0])
    n_null = int(null.shape[0])
    fold_of_null = assign_folds(n_null, n_folds_i, rng)
    p0, p_cand = expected_null_share(n_cand, n_null, n_folds_i)

    if n_cand == 0:
        empty = np.zeros(0, dtype=float)
        return NeighbourhoodEstimate(
            fold_stats=np.zeros((0, 3, n_folds_i), dtype=float),
            fp_mean=empty,
            fp_min=empty,
            fp_max=empty,
            density_mean=empty,
            radius_mean=empty,
            p0=p0,
            p_candidates=p_cand,
            numneighbours=k,
        )

    smallest_fold = int(np.bincount(fold_of_null, minlength=n_folds_i).min())
    if n_cand - 1 + smallest_fold < k:
        warnings.warn(
            f"numneighbours={k} exceeds the {n_cand - 1 + smallest_fold} points available "
            "in some fold; the neighbourhood is truncated there.",
            RuntimeWarning,
            stacklevel=2,
        )

    worker = partial(
        fold_statistics,
        candidate_features=cand,
        null_features=null if n_null else np.zeros((0, cand.shape[1]), dtype=float),
        fold_of_null=fold_of_null,
        k=k,
    )
    if parallel:
        log.info("Computing %d folds in parallel (n_jobs=%s).", n_folds_i, n_jobs)
        per_fold = parallel_map(worker, range(n_folds_i), n_jobs=n_jobs, logger=log)
    else:
        per_fold = [worker(f) for f in range(n_folds_i)]

    stats = np.stack(per_fold, axis=2)
    fp = stats[:, 0, :]
    return NeighbourhoodEstimate(
        fold_stats=stats,
        fp_mean=fp.mean(axis=1),
        fp_min=fp.min(axis=1),
        fp_max=fp.max(axis=1),
        density_mean=stats[:, 1, :].mean(axis=1),
        radius_mean=stats[:, 2, :].mean(axis=1),
        p0=p0,
        p_candidates=p_cand,
        numneighbours=k,
    )
