"""Shared plotting utilities used by figure factories."""

from __future__ import annotations

from pathlib import Path

import matplotlib.figure
import matplotlib.pyplot as plt

from ordensity.plotting.styles import DEFAULT_PLOT_STYLE, PlotStyle


def save_figure(
    fig: matplotlib.figure.Figure,
    out_path: Path,
    *,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
    close: bool = True,
) -> None:
    """Save figure deterministically and optionally close it."""
    out_path.parent.mkdir(parents=True, exist_ok=True)
    save_kwargs: dict[str, object] = {
        "dpi": style.dpi,
        "facecolor": "white",
        "pad_inches": 0.02,
    }
    fig.savefig(out_path, **save_kwargs)
    if close:
        plt.close(fig)
