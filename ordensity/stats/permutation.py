"""Permutation null model for the outlyingness index."""

from __future__ import annotations

import logging
import time
from functools import partial
from typing import Sequence

import numpy as np

from ordensity.core.distance import pairwise_distances
from ordensity.core.encoding import quantile_differences_weighted
from ordensity.core.outlyingness import outlyingness_index
from ordensity.core.types import NullReplicate
from ordensity.parallel import parallel_map
from ordensity.seeding import replicate_rng


def split_pooled_samples(
    pooled: np.ndarray,
    n_positive: int,
    rng: np.random.Generator,
) -> tuple[np.ndarray, np.ndarray]:
    """Partition pooled columns without replacement into pseudo-positive/negative groups.

    Every column lands in exactly one group; the pseudo-positive group keeps the
    original positive sample count.
    """
    x = np.asarray(pooled, dtype=float)
    n_cases = int(x.shape[1])
    k = int(n_positive)
    if k <= 0 or k >= n_cases:
        raise ValueError(
            f"n_positive must lie in [1, {n_cases - 1}] for {n_cases} pooled samples, got {k}."
        )
    chosen = rng.choice(n_cases, size=k, replace=False)
    mask = np.zeros(n_cases, dtype=bool)
    mask[chosen] = True
    rest = np.flatnonzero(~mask)
    return x[:, chosen], x[:, rest]


def run_null_replicate(
    index: int,
    *,
    pooled: np.ndarray,
    n_positive: int,
    probs: Sequence[float],
    weights: Sequence[float],
    scale: bool,
    master_seed: int,
) -> NullReplicate:
    """Compute features and outlyingness for permutation replicate `index`."""
    rng = replicate_rng(master_seed, index)
    positives, negatives = split_pooled_samples(pooled, n_positive, rng)
    features = quantile_differences_weighted(positives, negatives, probs, weights, scale=scale)
    scores = outlyingness_index(pairwise_distances(features))
    return NullReplicate(index=int(index), features=features, outlyingness=scores)


def generate_null_replicates(
    positive: np.ndarray,
    negative: np.ndarray,
    *,
    n_replicates: int,
    probs: Sequence[float],
    weights: Sequence[float],
    scale: bool = False,
    master_seed: int = 0,
    parallel: bool = False,
    n_jobs: int = 0,
    logger: logging.Logger | None = None,
) -> list[NullReplicate]:
    """Build `n_replicates` permutation replicates of the pooled samples.

    Replicate `b` draws from a generator seeded by `(master_seed, b)` only, so
    sequential and parallel runs return identical replicates, in index order.
    """
    log = logger or logging.getLogger("ordensity")
    pos = np.asarray(positive, dtype=float)
    neg = np.asarray(negative, dtype=float)
    pooled = np.hstack([pos, neg])
    n_b = int(n_replicates)
    if n_b < 1:
        raise ValueError("n_replicates must be positive.")

    worker = partial(
        run_null_replicate,
        pooled=pooled,
        n_positive=int(pos.shape[1]),
        probs=tuple(probs),
        weights=tuple(weights),
        scale=bool(scale),
        master_seed=int(master_seed),
    )

    if parallel:
        log.info("Running %d permutation replicates in parallel (n_jobs=%s).", n_b, n_jobs)
        return parallel_map(worker, range(n_b), n_jobs=n_jobs, logger=log)

    replicates: list[NullReplicate] = []
    for b in range(n_b):
        t0 = time.perf_counter()
        replicates.append(worker(b))
        if b == 0:
            log.info(
                "A permutation replicate takes %.3f seconds, and %d replicates were requested.",
                time.perf_counter() - t0,
                n_b,
            )
    return replicates


def stack_null_outlyingness(replicates: Sequence[NullReplicate]) -> np.ndarray:
    """Genes x B matrix of null outlyingness scores, column b from replicate b."""
    ordered = sorted(replicates, key=lambda r: r.index)
    return np.column_stack([r.outlyingness for r in ordered])


def stack_null_features(replicates: Sequence[NullReplicate]) -> np.ndarray:
    """Genes x probs x B array of null feature matrices."""
    ordered = sorted(replicates, key=lambda r: r.index)
    return np.stack([r.features for r in ordered], axis=2)
