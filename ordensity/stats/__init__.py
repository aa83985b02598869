"""Statistical utilities for ORdensity."""

from ordensity.stats.density import (
    NeighbourhoodEstimate,
    assign_folds,
    estimate_fp_neighbourhood,
    expected_null_share,
    neighbourhood_density,
)
from ordensity.stats.permutation import (
    generate_null_replicates,
    split_pooled_samples,
    stack_null_features,
    stack_null_outlyingness,
)
from ordensity.stats.threshold import ThresholdSelection, cut_rank, select_threshold

__all__ = [
    "split_pooled_samples",
    "generate_null_replicates",
    "stack_null_outlyingness",
    "stack_null_features",
    "ThresholdSelection",
    "cut_rank",
    "select_threshold",
    "NeighbourhoodEstimate",
    "assign_folds",
    "expected_null_share",
    "neighbourhood_density",
    "estimate_fp_neighbourhood",
]
