import numpy as np
import pandas as pd

from ordensity.summary import (
    SUMMARY_COLUMNS,
    build_summary,
    default_gene_labels,
    sort_summary,
    summary_order,
)


def _table() -> pd.DataFrame:
    return build_summary(
        gene_index=np.array([4, 1, 7, 2]),
        labels=default_gene_labels(8),
        outlyingness=np.array([3.0, 9.0, 5.0, 4.0]),
        dif_exp=np.array([0.5, -1.0, 0.5, 2.0]),
        fp_min=np.array([0.0, 0.0, 0.0, 1.0]),
        fp_mean=np.array([1.0, 0.0, 1.0, 3.0]),
        fp_max=np.array([2.0, 0.0, 2.0, 4.0]),
        density_mean=np.array([0.5, 0.0, 0.4, 2.0]),
        radius_mean=np.array([2.0, 1.0, 2.5, 1.5]),
    )


def test_default_labels():
    assert default_gene_labels(3) == ["Gene1", "Gene2", "Gene3"]


def test_summary_sorted_by_difexp_then_or_descending():
    table = _table()
    assert list(table.columns) == list(SUMMARY_COLUMNS)
    assert table["id"].tolist() == ["Gene2", "Gene8", "Gene5", "Gene3"]
    assert table["gene_index"].tolist() == [1, 7, 4, 2]
    assert table["OR"].tolist() == [9.0, 5.0, 3.0, 4.0]


def test_resorting_is_a_no_op():
    table = _table()
    pd.testing.assert_frame_equal(sort_summary(table), table)
    pd.testing.assert_frame_equal(sort_summary(sort_summary(table)), table)


def test_full_ties_keep_input_order():
    order = summary_order(np.array([1.0, 1.0, 1.0]), np.array([2.0, 2.0, 2.0]))
    assert order.tolist() == [0, 1, 2]


def test_empty_summary():
    empty = np.zeros(0)
    table = build_summary(
        gene_index=np.zeros(0, dtype=int),
        labels=default_gene_labels(5),
        outlyingness=empty,
        dif_exp=empty,
        fp_min=empty,
        fp_mean=empty,
        fp_max=empty,
        density_mean=empty,
        radius_mean=empty,
    )
    assert table.empty
    assert list(table.columns) == list(SUMMARY_COLUMNS)
