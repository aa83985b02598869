"""ORdensity computation: from two condition matrices to the candidate summary."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator, Sequence

import numpy as np
import pandas as pd

from ordensity.core.distance import pairwise_distances
from ordensity.core.encoding import quantile_differences_weighted
from ordensity.core.outlyingness import outlyingness_index
from ordensity.core.types import ORDensityConfig, ORDensityResult
from ordensity.core.utils import estimated_matrix_nbytes, finite_2d, format_nbytes
from ordensity.parallel import resolve_n_jobs
from ordensity.seeding import fold_assignment_rng, resolve_master_seed
from ordensity.stats.density import estimate_fp_neighbourhood
from ordensity.stats.permutation import (
    generate_null_replicates,
    stack_null_features,
    stack_null_outlyingness,
)
from ordensity.stats.threshold import select_threshold
from ordensity.summary import build_summary, default_gene_labels


@contextmanager
def _timed(logger: logging.Logger, stage: str) -> Iterator[None]:
    t0 = time.perf_counter()
    yield
    logger.debug("Time after %s: %.3f s", stage, time.perf_counter() - t0)


def _resolve_labels(cond1: Any, n_genes: int, labels: Sequence[str] | None) -> list[str]:
    if labels is not None:
        out = [str(x) for x in labels]
        if len(out) != n_genes:
            raise ValueError(f"labels has {len(out)} entries for {n_genes} genes.")
        return out
    if isinstance(cond1, pd.DataFrame):
        return [str(x) for x in cond1.index]
    return default_gene_labels(n_genes)


def validate_conditions(cond1: Any, cond2: Any) -> tuple[np.ndarray, np.ndarray]:
    """Return both condition matrices as finite float arrays with matching rows."""
    if np.asarray(cond1).size == 0:
        raise ValueError("There is no Exp_cond_1 data.")
    if np.asarray(cond2).size == 0:
        raise ValueError("There is no Exp_cond_2 data.")
    x = finite_2d("Exp_cond_1", cond1)
    y = finite_2d("Exp_cond_2", cond2)
    if x.shape[0] != y.shape[0]:
        raise ValueError(
            f"Exp_cond_1 and Exp_cond_2 number of rows do not match ({x.shape[0]} != {y.shape[0]})."
        )
    if x.shape[0] < 2:
        raise ValueError("At least two genes are required.")
    return x, y


def compute_ordensity(
    cond1: Any,
    cond2: Any,
    config: ORDensityConfig | None = None,
    *,
    labels: Sequence[str] | None = None,
    logger: logging.Logger | None = None,
    **overrides: Any,
) -> ORDensityResult:
    """Find potential differentially expressed genes between two conditions.

    Args:
        cond1: Genes x samples matrix for experimental condition 1 (positives).
        cond2: Genes x samples matrix for experimental condition 2 (negatives).
        config: Run parameters; defaults to `ORDensityConfig()`.
        labels: Gene ids; defaults to a DataFrame index or `Gene1..GeneN`.
        logger: Destination for progress messages.
        **overrides: Individual `ORDensityConfig` fields replacing `config`'s.

    Returns:
        ORDensityResult with the ordered candidate summary.
    """
    log = logger or logging.getLogger("ordensity")
    cfg = (config or ORDensityConfig()).with_overrides(**overrides)
    positives, negatives = validate_conditions(cond1, cond2)
    n_genes = int(positives.shape[0])
    gene_labels = _resolve_labels(cond1, n_genes, labels)
    master_seed = resolve_master_seed(cfg.seed, cfg.replicable)
    n_jobs = resolve_n_jobs(cfg.nprocs) if cfg.parallel else 1

    log.info(
        "An object of size %s is going to be created in memory per distance matrix. "
        "With parallel execution, up to %d of them may exist at the same time.",
        format_nbytes(estimated_matrix_nbytes(n_genes)),
        n_jobs,
    )
    if not cfg.replicable:
        log.info("Non-replicable run; drawn master seed %d.", master_seed)

    with _timed(log, "observed outlyingness"):
        observed_features = quantile_differences_weighted(
            positives, negatives, cfg.probs, cfg.weights, scale=cfg.scale
        )
        observed_or = outlyingness_index(pairwise_distances(observed_features))

    with _timed(log, "permutation replicates"):
        replicates = generate_null_replicates(
            positives,
            negatives,
            n_replicates=cfg.B,
            probs=cfg.probs,
            weights=cfg.weights,
            scale=cfg.scale,
            master_seed=master_seed,
            parallel=cfg.parallel,
            n_jobs=n_jobs,
            logger=log,
        )
        null_or = stack_null_outlyingness(replicates)
        null_features = stack_null_features(replicates)
        del replicates

    with _timed(log, "threshold selection"):
        selection = select_threshold(observed_or, null_or, cfg.alpha)
        exceedance_features = null_features[
            selection.exceedance_genes, :, selection.exceedance_replicates
        ]
    log.info(
        "Cut-point %.6g at rank %d; %d candidate genes, %d null exceedances.",
        selection.cut_point,
        selection.cut_rank,
        selection.n_candidates,
        selection.n_exceedances,
    )

    candidate_idx = selection.candidate_indices
    with _timed(log, "false-positive neighbourhoods"):
        estimate = estimate_fp_neighbourhood(
            observed_features[candidate_idx],
            exceedance_features,
            n_folds=cfg.n_folds,
            numneighbours=cfg.numneighbours,
            rng=fold_assignment_rng(master_seed),
            parallel=cfg.parallel,
            n_jobs=n_jobs,
            logger=log,
        )

    summary = build_summary(
        gene_index=candidate_idx,
        labels=gene_labels,
        outlyingness=observed_or[candidate_idx],
        dif_exp=estimate.dif_exp,
        fp_min=estimate.fp_min,
        fp_mean=estimate.fp_mean,
        fp_max=estimate.fp_max,
        density_mean=estimate.density_mean,
        radius_mean=estimate.radius_mean,
    )
    log.info("The ORdensity method has detected %d potential DE genes.", len(summary))

    return ORDensityResult(
        summary=summary,
        OR=summary["OR"].to_numpy(dtype=float),
        FP=summary["FP"].to_numpy(dtype=float),
        dFP=summary["dFP"].to_numpy(dtype=float),
        n_candidates=int(selection.n_candidates),
        p0=float(estimate.p0),
        p_candidates=float(estimate.p_candidates),
        numneighbours=int(cfg.numneighbours),
        cut_point=float(selection.cut_point),
        n_exceedances=int(selection.n_exceedances),
        metadata={
            "config": cfg.to_dict(),
            "master_seed": int(master_seed),
            "n_genes": n_genes,
            "n_positive": int(positives.shape[1]),
            "n_negative": int(negatives.shape[1]),
            "cut_rank": int(selection.cut_rank),
            "observed_OR": observed_or,
        },
    )
