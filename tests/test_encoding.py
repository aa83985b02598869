import numpy as np
import pytest

from ordensity.core.encoding import quantile_differences_weighted, row_quantiles
from ordensity.core.types import DegenerateDataError

PROBS = (0.25, 0.5, 0.75)
WEIGHTS = (0.25, 0.5, 0.25)


def test_row_quantiles_linear_interpolation():
    x = np.array([[1.0, 2.0, 3.0, 4.0, 5.0], [5.0, 4.0, 3.0, 2.0, 1.0]])
    q = row_quantiles(x, PROBS)
    assert q.shape == (2, 3)
    assert np.allclose(q, [[2.0, 3.0, 4.0], [2.0, 3.0, 4.0]])


def test_weighted_differences_unscaled():
    pos = np.array([[1.0, 2.0, 3.0, 4.0, 5.0]])
    neg = np.zeros((1, 4))
    out = quantile_differences_weighted(pos, neg, PROBS, WEIGHTS)
    assert np.allclose(out, [[0.5, 1.5, 1.0]])


def test_weighted_differences_scaled_by_largest_range():
    pos = np.array([[1.0, 2.0, 3.0, 4.0, 5.0]])
    neg = np.zeros((1, 4))
    out = quantile_differences_weighted(pos, neg, PROBS, WEIGHTS, scale=True)
    # range of positives is 4 - 2 = 2, negatives have none
    assert np.allclose(out, [[0.25, 0.75, 0.5]])


def test_scale_uses_first_and_last_levels():
    pos = np.array([[0.0, 1.0, 2.0, 3.0, 4.0]])
    neg = np.zeros((1, 5))
    probs = (0.0, 0.5, 1.0)
    out = quantile_differences_weighted(pos, neg, probs, (1.0, 1.0, 1.0), scale=True)
    assert np.allclose(out, [[0.0, 0.5, 1.0]])


def test_zero_range_when_scaling_is_fatal():
    pos = np.array([[1.0, 2.0, 3.0], [2.0, 2.0, 2.0]])
    neg = np.array([[0.0, 1.0, 0.5], [2.0, 2.0, 2.0]])
    with pytest.raises(DegenerateDataError, match="Can't scale"):
        quantile_differences_weighted(pos, neg, PROBS, WEIGHTS, scale=True)
    out = quantile_differences_weighted(pos, neg, PROBS, WEIGHTS, scale=False)
    assert np.allclose(out[1], 0.0)


def test_input_validation():
    with pytest.raises(ValueError, match="same number of genes"):
        quantile_differences_weighted(np.ones((3, 4)), np.ones((2, 4)), PROBS, WEIGHTS)
    with pytest.raises(ValueError, match="lengths do not match"):
        quantile_differences_weighted(np.ones((3, 4)), np.ones((3, 4)), PROBS, (0.5, 0.5))
    bad = np.ones((2, 3))
    bad[0, 1] = np.nan
    with pytest.raises(ValueError, match="finite"):
        quantile_differences_weighted(bad, np.ones((2, 3)), PROBS, WEIGHTS)
