"""Figure factory for the potential DE genes."""

from __future__ import annotations

from pathlib import Path

import matplotlib.figure
import matplotlib.pyplot as plt
import numpy as np

from ordensity.core.types import ORDensityResult
from ordensity.plotting.styles import DEFAULT_PLOT_STYLE, PlotStyle
from ordensity.plotting.utils import save_figure
from ordensity.reporting import PartitionFn, cluster_labels, hierarchical_partition


def plot_candidates(
    result: ORDensityResult,
    *,
    numclusters: int | None = None,
    partition: PartitionFn = hierarchical_partition,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
    title: str = "Potential genes",
) -> matplotlib.figure.Figure:
    """Scatter OR against FP, coloured by cluster.

    Genes passing the relaxed selection are drawn as triangles; marker area
    shrinks as dFP grows.
    """
    labels, k = cluster_labels(result, numclusters, partition=partition)
    fp = np.asarray(result.FP, dtype=float)
    outl = np.asarray(result.OR, dtype=float)
    dfp = np.nan_to_num(np.asarray(result.dFP, dtype=float), nan=0.0, posinf=1e6)
    sizes = style.marker_scale / (0.5 + dfp)
    relaxed = fp < result.expected_false_positives
    cmap = plt.get_cmap("tab10")

    fig, ax = plt.subplots(figsize=style.figsize_candidates)
    for lab in range(k):
        in_cluster = labels == lab
        color = cmap(lab % 10)
        for mask, marker in ((in_cluster & relaxed, "^"), (in_cluster & ~relaxed, "o")):
            if not np.any(mask):
                continue
            ax.scatter(
                fp[mask],
                outl[mask],
                s=sizes[mask],
                marker=marker,
                facecolors="none",
                edgecolors=[color],
                alpha=style.alpha_points,
            )
        ax.scatter([], [], marker="o", color=color, label=f"cluster {lab + 1}")
    ax.set_xlabel("FP")
    ax.set_ylabel("OR")
    ax.set_title(title)
    if k > 0 and fp.size:
        ax.legend(loc="upper right")
    return fig


def plot_candidates_to_file(
    result: ORDensityResult,
    out_png: Path,
    *,
    numclusters: int | None = None,
    partition: PartitionFn = hierarchical_partition,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
) -> Path:
    fig = plot_candidates(result, numclusters=numclusters, partition=partition, style=style)
    save_figure(fig, out_png, style=style)
    return out_png
