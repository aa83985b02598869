"""Selection flags and cluster summaries of the potential DE genes.

Clustering is delegated to a partition service taking a square dissimilarity
matrix and a cluster count and returning one label per row. The default
service is SciPy average-linkage hierarchical clustering rather than
partitioning around medoids (PAM), so groupings can differ from a PAM-based
analysis of the same genes. Pass a medoid partition as `partition` to
reproduce one.
"""

from __future__ import annotations

from typing import Any, Callable

import numpy as np
import pandas as pd
from scipy.cluster.hierarchy import fcluster, linkage
from scipy.spatial.distance import squareform
from sklearn.metrics import silhouette_score

from ordensity.core.distance import pairwise_distances
from ordensity.core.types import ORDensityResult

PartitionFn = Callable[[np.ndarray, int], np.ndarray]

PROFILE_COLUMNS: tuple[str, ...] = ("OR", "FP", "dFP")
DEFAULT_NUMCLUSTOSEEK = 10


def hierarchical_partition(dissimilarity: np.ndarray, k: int) -> np.ndarray:
    """Average-linkage partition of a square dissimilarity matrix into at most `k` groups."""
    d = np.asarray(dissimilarity, dtype=float)
    n = int(d.shape[0])
    if n < 2 or int(k) <= 1:
        return np.zeros(n, dtype=int)
    tree = linkage(squareform(d, checks=False), method="average")
    return fcluster(tree, t=int(k), criterion="maxclust").astype(int) - 1


def standardized_profile(result: ORDensityResult) -> np.ndarray:
    """Column-standardized (OR, FP, dFP) matrix; constant columns are only centered.

    Infinite densities (zero radius) are clipped to the largest finite value in
    their column and undefined ones set to zero.
    """
    x = np.column_stack([result.OR, result.FP, result.dFP]).astype(float)
    if x.shape[0] == 0:
        return x.reshape(0, 3)
    for j in range(x.shape[1]):
        col = x[:, j]
        finite = col[np.isfinite(col)]
        top = float(finite.max()) if finite.size else 0.0
        x[:, j] = np.nan_to_num(col, nan=0.0, posinf=top, neginf=0.0)
    centered = x - x.mean(axis=0)
    sd = x.std(axis=0, ddof=1) if x.shape[0] > 1 else np.zeros(3)
    sd = np.where((sd > 0.0) & np.isfinite(sd), sd, 1.0)
    return centered / sd


def profile_dissimilarity(result: ORDensityResult) -> np.ndarray:
    profile = standardized_profile(result)
    if profile.shape[0] == 0:
        return np.zeros((0, 0), dtype=float)
    return pairwise_distances(profile)


def preclustered_data(result: ORDensityResult) -> pd.DataFrame:
    """Candidate genes with OR, FP, dFP and the strong/relaxed selection flags.

    `Strong` is "S" when FP is zero; `Relaxed` is "R" when FP is below the
    expected number of false-positive neighbours.
    """
    table = result.summary.loc[:, ["id", "OR", "FP", "dFP"]].copy()
    expected = result.expected_false_positives
    table["Strong"] = np.where(table["FP"].to_numpy() == 0.0, "S", "-")
    table["Relaxed"] = np.where(table["FP"].to_numpy() < expected, "R", "-")
    return table.reset_index(drop=True)


def silhouette_scores(
    result: ORDensityResult,
    numclustoseek: int = DEFAULT_NUMCLUSTOSEEK,
    *,
    partition: PartitionFn = hierarchical_partition,
) -> dict[int, float]:
    """Mean silhouette width for each admissible k in 2..numclustoseek."""
    d = profile_dissimilarity(result)
    n = int(d.shape[0])
    scores: dict[int, float] = {}
    for k in range(2, min(int(numclustoseek), n - 1) + 1):
        labels = np.asarray(partition(d, k))
        n_labels = int(np.unique(labels).size)
        if n_labels < 2 or n_labels > n - 1:
            continue
        scores[k] = float(silhouette_score(d, labels, metric="precomputed"))
    return scores


def find_best_k(
    result: ORDensityResult,
    numclustoseek: int = DEFAULT_NUMCLUSTOSEEK,
    *,
    partition: PartitionFn = hierarchical_partition,
) -> int:
    """Cluster count with the largest mean silhouette width (smallest k on ties)."""
    scores = silhouette_scores(result, numclustoseek, partition=partition)
    if not scores:
        return 1
    best = max(scores.values())
    return min(k for k, s in scores.items() if s == best)


def _numclustoseek(result: ORDensityResult) -> int:
    cfg = result.metadata.get("config", {})
    return int(cfg.get("numclustoseek", DEFAULT_NUMCLUSTOSEEK))


def cluster_labels(
    result: ORDensityResult,
    numclusters: int | None = None,
    *,
    partition: PartitionFn = hierarchical_partition,
) -> tuple[np.ndarray, int]:
    """Labels of the summary rows and the cluster count used.

    With `numclusters=None` the count comes from `find_best_k`.
    """
    k = (
        find_best_k(result, _numclustoseek(result), partition=partition)
        if numclusters is None
        else int(numclusters)
    )
    if k < 1:
        raise ValueError("numclusters must be positive.")
    d = profile_dissimilarity(result)
    if d.shape[0] == 0:
        return np.zeros(0, dtype=int), k
    if k > d.shape[0]:
        raise ValueError(f"numclusters={k} exceeds the {d.shape[0]} potential DE genes.")
    return np.asarray(partition(d, k), dtype=int), k


def _ordered_groups(labels: np.ndarray, outlyingness: np.ndarray) -> list[np.ndarray]:
    groups = [np.flatnonzero(labels == lab) for lab in np.unique(labels)]
    means = [float(np.mean(outlyingness[g])) for g in groups]
    order = sorted(range(len(groups)), key=lambda i: -means[i])
    return [groups[i] for i in order]


def find_de_genes(
    result: ORDensityResult,
    numclusters: int | None = None,
    *,
    partition: PartitionFn = hierarchical_partition,
) -> dict[str, Any]:
    """Cluster the potential DE genes; the first cluster has the largest mean OR.

    Returns:
        Dict with `neighbours`, `expectedFalsePositiveNeighbours` and
        `clusters`, a list of pre-clustered tables.
    """
    table = preclustered_data(result)
    labels, _ = cluster_labels(result, numclusters, partition=partition)
    clusters = [
        table.iloc[g].reset_index(drop=True)
        for g in _ordered_groups(labels, table["OR"].to_numpy(dtype=float))
    ]
    return {
        "neighbours": int(result.numneighbours),
        "expectedFalsePositiveNeighbours": result.expected_false_positives,
        "clusters": clusters,
    }


def summarize_clusters(
    result: ORDensityResult,
    numclusters: int | None = None,
    *,
    partition: PartitionFn = hierarchical_partition,
) -> dict[str, dict[str, Any]]:
    """Size, OR/FP/dFP mean and sd, and sorted gene ids of each cluster."""
    table = result.summary
    labels, _ = cluster_labels(result, numclusters, partition=partition)
    out: dict[str, dict[str, Any]] = {}
    for rank, g in enumerate(_ordered_groups(labels, result.OR), start=1):
        members = table.iloc[g]
        chars = pd.DataFrame(
            [
                [members[c].mean() for c in PROFILE_COLUMNS],
                [members[c].std(ddof=1) for c in PROFILE_COLUMNS],
            ],
            index=["mean", "sd"],
            columns=list(PROFILE_COLUMNS),
        )
        out[f"Cluster{rank}"] = {
            "numberOfGenes": int(len(members)),
            "CharacteristicsCluster": chars,
            "genes": sorted(members["id"].astype(str).tolist()),
        }
    return out
