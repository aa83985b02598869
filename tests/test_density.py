import numpy as np
import pytest

from ordensity.stats.density import (
    assign_folds,
    estimate_fp_neighbourhood,
    expected_null_share,
    fold_statistics,
    neighbourhood_density,
)


def test_neighbourhood_density_all_null_neighbours():
    fp, dens, radius = neighbourhood_density(
        np.array([4.0, 1.0, 3.0, 2.0]), np.array([True, True, True, True]), 3
    )
    assert fp == 3.0
    assert radius == 3.0
    assert dens == pytest.approx(3.0 / 3.0)


def test_neighbourhood_density_counts_only_null_members():
    fp, dens, radius = neighbourhood_density(
        np.array([0.5, 1.0, 2.0, 4.0]), np.array([False, True, False, True]), 3
    )
    assert fp == 1.0
    assert radius == 2.0
    assert dens == pytest.approx(0.5)


def test_neighbourhood_density_ties_keep_input_order():
    fp, _, _ = neighbourhood_density(
        np.array([1.0, 1.0, 1.0]), np.array([False, True, True]), 1
    )
    assert fp == 0.0


def test_neighbourhood_density_zero_radius():
    assert neighbourhood_density(np.array([0.0, 3.0]), np.array([False, True]), 1)[1] == 0.0
    assert np.isinf(neighbourhood_density(np.array([0.0, 3.0]), np.array([True, False]), 1)[1])


def test_fold_statistics_excludes_self():
    cand = np.array([[0.0, 0.0], [100.0, 100.0]])
    null = np.array([[1.0, 0.0], [0.0, 2.0], [3.0, 0.0]])
    stats = fold_statistics(
        0, candidate_features=cand, null_features=null, fold_of_null=np.zeros(3, dtype=int), k=3
    )
    assert stats.shape == (2, 3)
    assert stats[0].tolist() == [3.0, 1.0, 3.0]


def test_all_null_neighbourhood_gives_k_over_radius():
    cand = np.array([[0.0, 0.0], [100.0, 100.0]])
    null = np.array([[1.0, 0.0], [0.0, 2.0], [3.0, 0.0]])
    est = estimate_fp_neighbourhood(
        cand, null, n_folds=1, numneighbours=3, rng=np.random.default_rng(0)
    )
    assert est.fp_mean[0] == 3.0
    assert est.radius_mean[0] == 3.0
    assert est.density_mean[0] == pytest.approx(3.0 / 3.0)
    assert est.fp_min[0] == est.fp_max[0] == 3.0
    assert est.p0 == pytest.approx(3.0 / 5.0)
    assert est.p_candidates == pytest.approx(2.0 / 5.0)
    assert est.dif_exp[0] == pytest.approx(3.0 - 0.6 * 3.0)


def test_estimate_averages_over_folds():
    rng = np.random.default_rng(1)
    cand = rng.normal(size=(6, 3)) + 4.0
    null = rng.normal(size=(40, 3))
    est = estimate_fp_neighbourhood(
        cand, null, n_folds=4, numneighbours=5, rng=np.random.default_rng(2)
    )
    assert est.fold_stats.shape == (6, 3, 4)
    assert np.allclose(est.fp_mean, est.fold_stats[:, 0, :].mean(axis=1))
    assert np.allclose(est.density_mean, est.fold_stats[:, 1, :].mean(axis=1))
    assert np.allclose(est.radius_mean, est.fold_stats[:, 2, :].mean(axis=1))
    assert np.all(est.fp_min <= est.fp_mean)
    assert np.all(est.fp_mean <= est.fp_max)
    assert est.p0 == pytest.approx(10.0 / 16.0)


def test_fold_assignment_is_reproducible_and_parallel_safe():
    rng = np.random.default_rng(5)
    cand = rng.normal(size=(5, 3)) + 2.0
    null = rng.normal(size=(30, 3))
    seq = estimate_fp_neighbourhood(
        cand, null, n_folds=3, numneighbours=4, rng=np.random.default_rng(8)
    )
    par = estimate_fp_neighbourhood(
        cand,
        null,
        n_folds=3,
        numneighbours=4,
        rng=np.random.default_rng(8),
        parallel=True,
        n_jobs=2,
    )
    assert np.array_equal(seq.fold_stats, par.fold_stats)
    labels = assign_folds(30, 3, np.random.default_rng(8))
    assert labels.min() >= 0 and labels.max() <= 2


def test_empty_candidate_set_is_not_an_error():
    est = estimate_fp_neighbourhood(
        np.zeros((0, 3)), np.ones((10, 3)), n_folds=2, numneighbours=3, rng=np.random.default_rng(0)
    )
    assert est.fp_mean.size == 0
    assert est.fold_stats.shape == (0, 3, 2)
    assert est.p0 == 1.0


def test_small_folds_warn_and_truncate_neighbourhood():
    cand = np.array([[0.0, 0.0], [1.0, 1.0]])
    null = np.array([[0.5, 0.0]])
    with pytest.warns(RuntimeWarning, match="numneighbours"):
        est = estimate_fp_neighbourhood(
            cand, null, n_folds=1, numneighbours=10, rng=np.random.default_rng(0)
        )
    assert est.fp_mean.tolist() == [1.0, 1.0]


def test_expected_null_share_edge_cases():
    assert expected_null_share(0, 0, 5) == (0.0, 0.0)
    assert expected_null_share(4, 0, 5) == (0.0, 1.0)
