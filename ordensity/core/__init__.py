"""Core compute subpackage."""

from ordensity.core.distance import pairwise_distances
from ordensity.core.encoding import quantile_differences_weighted, row_quantiles
from ordensity.core.outlyingness import global_scale, inlier_index, outlyingness_index
from ordensity.core.types import (
    DegenerateDataError,
    NullReplicate,
    ORDensityConfig,
    ORDensityResult,
)

__all__ = [
    "ORDensityConfig",
    "ORDensityResult",
    "NullReplicate",
    "DegenerateDataError",
    "quantile_differences_weighted",
    "row_quantiles",
    "pairwise_distances",
    "global_scale",
    "inlier_index",
    "outlyingness_index",
]
