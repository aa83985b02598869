"""Plotting API for ORdensity results."""

from ordensity.plotting.candidates import plot_candidates, plot_candidates_to_file
from ordensity.plotting.styles import (
    DEFAULT_PLOT_STYLE,
    PlotStyle,
    apply_plot_style,
    plot_style_dict,
)
from ordensity.plotting.utils import save_figure

__all__ = [
    "PlotStyle",
    "DEFAULT_PLOT_STYLE",
    "apply_plot_style",
    "plot_style_dict",
    "save_figure",
    "plot_candidates",
    "plot_candidates_to_file",
]
