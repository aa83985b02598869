"""Per-gene summary table for candidate genes."""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd

SUMMARY_COLUMNS: tuple[str, ...] = (
    "id",
    "OR",
    "DifExp",
    "minFP",
    "FP",
    "maxFP",
    "dFP",
    "radius",
    "gene_index",
)


def default_gene_labels(n_genes: int) -> list[str]:
    return [f"Gene{i + 1}" for i in range(int(n_genes))]


def summary_order(dif_exp: np.ndarray, outlyingness: np.ndarray) -> np.ndarray:
    """Row order by DifExp ascending, then OR descending; stable for full ties."""
    d = np.asarray(dif_exp, dtype=float)
    o = np.asarray(outlyingness, dtype=float)
    return np.lexsort((-o, d))


def sort_summary(table: pd.DataFrame) -> pd.DataFrame:
    order = summary_order(table["DifExp"].to_numpy(), table["OR"].to_numpy())
    return table.iloc[order].reset_index(drop=True)


def build_summary(
    *,
    gene_index: np.ndarray,
    labels: Sequence[str],
    outlyingness: np.ndarray,
    dif_exp: np.ndarray,
    fp_min: np.ndarray,
    fp_mean: np.ndarray,
    fp_max: np.ndarray,
    density_mean: np.ndarray,
    radius_mean: np.ndarray,
) -> pd.DataFrame:
    """Assemble the ordered candidate table.

    `gene_index` holds each candidate's row in the input matrices and selects
    its label; every other array is aligned with `gene_index`.
    """
    idx = np.asarray(gene_index, dtype=int).ravel()
    label_arr = np.asarray(list(labels), dtype=object)
    columns = {
        "OR": outlyingness,
        "DifExp": dif_exp,
        "minFP": fp_min,
        "FP": fp_mean,
        "maxFP": fp_max,
        "dFP": density_mean,
        "radius": radius_mean,
    }
    for name, values in columns.items():
        if np.asarray(values).size != idx.size:
            raise ValueError(f"Column '{name}' length does not match gene_index.")

    table = pd.DataFrame(
        {
            "id": [str(x) for x in label_arr[idx]] if idx.size else [],
            **{name: np.asarray(v, dtype=float).ravel() for name, v in columns.items()},
            "gene_index": idx,
        },
        columns=list(SUMMARY_COLUMNS),
    )
    table["id"] = table["id"].astype(object)
    return sort_summary(table)
