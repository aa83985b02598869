"""Shared plotting style settings for deterministic figure outputs."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

import matplotlib
import matplotlib.pyplot as plt
import numpy as np


@dataclass(frozen=True)
class PlotStyle:
    """Centralized plotting defaults used by ORdensity figures."""

    dpi: int = 200
    figsize_candidates: tuple[float, float] = (7.0, 6.0)
    marker_scale: float = 40.0
    alpha_points: float = 0.85
    legend_fontsize: int = 8
    axis_label_fontsize: int = 10
    title_fontsize: int = 11


DEFAULT_PLOT_STYLE = PlotStyle()


def apply_plot_style(style: PlotStyle = DEFAULT_PLOT_STYLE) -> None:
    """Apply deterministic matplotlib rcParams for ORdensity plots."""
    plt.rcParams.update(
        {
            "figure.dpi": style.dpi,
            "savefig.dpi": style.dpi,
            "savefig.facecolor": "white",
            "font.family": "DejaVu Sans",
            "axes.titlesize": style.title_fontsize,
            "axes.labelsize": style.axis_label_fontsize,
            "legend.fontsize": style.legend_fontsize,
            "axes.grid": False,
        }
    )


def plot_style_dict(style: PlotStyle = DEFAULT_PLOT_STYLE) -> dict[str, Any]:
    """Return style + dependency versions for metadata manifests."""
    d = asdict(style)
    d["matplotlib_version"] = str(matplotlib.__version__)
    d["numpy_version"] = str(np.__version__)
    return d
