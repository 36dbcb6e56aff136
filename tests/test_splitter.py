import math

import numpy as np
import pytest

from c45py import AttributeNotFoundError, ColumnType, Dataset
from c45py.splitter import MISSING_BRANCH, best_threshold, branch_keys, comparable, split, split_categorical


def test_categorical_split_partitions_rows(play_tennis):
    subsets = split_categorical(play_tennis.rows, 0)
    assert list(subsets) == ["Sunny", "Overcast", "Rainy"]
    assert sum(len(s) for s in subsets.values()) == len(play_tennis)
    assert [len(s) for s in subsets.values()] == [5, 4, 5]


def test_threshold_between_class_change(numeric_dataset):
    threshold, left, right = best_threshold(numeric_dataset.rows, 0)
    assert threshold == pytest.approx(6.5)
    assert len(left) == 3 and len(right) == 1
    assert set(left[:, -1]) == {"A"}


def test_threshold_with_two_two_labels():
    ds = Dataset.from_records(["x", "label"], [["1", "A"], ["2", "A"], ["3", "B"], ["10", "B"]])
    threshold, left, right = best_threshold(ds.rows, 0)
    assert threshold == pytest.approx(2.5)
    assert list(left[:, -1]) == ["A", "A"]


def test_median_strategy(numeric_dataset):
    threshold, left, right = best_threshold(numeric_dataset.rows, 0, strategy="median")
    assert threshold == 3.0
    assert len(left) == 3 and len(right) == 1


def test_unknown_strategy_rejected(numeric_dataset):
    with pytest.raises(ValueError):
        best_threshold(numeric_dataset.rows, 0, strategy="mean")


def test_single_distinct_value_is_threshold():
    rows = np.array([[4.0, "A"], [4.0, "B"]], dtype=object)
    threshold, left, right = best_threshold(rows, 0)
    assert threshold == 4.0
    assert len(left) == 2 and len(right) == 0


def test_missing_values_go_right():
    ds = Dataset.from_records(["x", "label"], [["1", "A"], ["2", "A"], ["", "B"], ["10", "B"]])
    assert ds.column_types[0] is ColumnType.NUMERIC
    threshold, left, right = best_threshold(ds.rows, 0)
    assert threshold == pytest.approx(6.0)
    assert len(left) == 2 and len(right) == 2
    assert any(row[0] is None for row in right)


def test_numeric_split_keys(numeric_dataset):
    subsets = split(numeric_dataset.rows, numeric_dataset.header, "x", numeric_dataset.column_types)
    assert list(subsets) == list(branch_keys(6.5)) == ["<=6.50", ">6.50"]
    assert sum(len(s) for s in subsets.values()) == len(numeric_dataset)


def test_all_missing_numeric_yields_single_branch():
    rows = np.array([[None, "A"], [None, "B"]], dtype=object)
    subsets = split(rows, ["x", "label"], "x", [ColumnType.NUMERIC, ColumnType.CATEGORICAL])
    assert list(subsets) == [MISSING_BRANCH]
    assert len(subsets[MISSING_BRANCH]) == 2


def test_unknown_attribute(play_tennis):
    with pytest.raises(AttributeNotFoundError) as excinfo:
        split(play_tennis.rows, play_tennis.header, "Color")
    assert excinfo.value.attribute == "Color"
    assert isinstance(excinfo.value, ValueError)


def test_infinite_values_are_treated_as_missing():
    assert comparable(float("inf")) is None
    assert comparable(float("-inf")) is None
    assert comparable(2) == 2.0
    rows = np.array([[float("-inf"), "A"], [1.0, "A"], [3.0, "B"], [float("inf"), "B"]], dtype=object)
    threshold, left, right = best_threshold(rows, 0)
    assert math.isfinite(threshold)
    assert threshold == pytest.approx(2.0)
    assert len(left) == 1 and len(right) == 3
    keys = list(split(rows, ["x", "label"], "x"))
    assert keys == ["<=2.00", ">2.00"]
