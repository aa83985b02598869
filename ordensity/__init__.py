"""ORdensity public API."""

from ordensity._version import __version__
from ordensity.core.types import DegenerateDataError, ORDensityConfig, ORDensityResult
from ordensity.engine import compute_ordensity
from ordensity.reporting import (
    find_best_k,
    find_de_genes,
    preclustered_data,
    summarize_clusters,
)


def plot_candidates(*args, **kwargs):
    """Lazy wrapper to avoid importing matplotlib at import time."""
    from ordensity.plotting.candidates import plot_candidates as _plot_candidates

    return _plot_candidates(*args, **kwargs)


__all__ = [
    "__version__",
    "ORDensityConfig",
    "ORDensityResult",
    "DegenerateDataError",
    "compute_ordensity",
    "preclustered_data",
    "find_best_k",
    "find_de_genes",
    "summarize_clusters",
    "plot_candidates",
]
