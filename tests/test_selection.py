import pytest

from c45py import AttributeNotFoundError, Dataset, build_tree, predict
from c45py.selection import best_attribute, gain_ratio, identifier_columns, information_gain, split_information


def test_information_gain_is_non_negative(play_tennis):
    for attr in play_tennis.feature_names:
        assert information_gain(play_tennis.rows, play_tennis.header, attr) >= -1e-12


def test_play_tennis_gains(play_tennis):
    rows, header = play_tennis.rows, play_tennis.header
    assert information_gain(rows, header, "Outlook") == pytest.approx(0.2467, abs=1e-3)
    assert gain_ratio(rows, header, "Outlook") == pytest.approx(0.156, abs=1e-3)
    assert gain_ratio(rows, header, "Humidity") == pytest.approx(0.152, abs=1e-3)


def test_outlook_is_best_root_attribute(play_tennis):
    attr, ratio = best_attribute(play_tennis.rows, play_tennis.header, play_tennis.column_types)
    assert attr == "Outlook"
    assert ratio > 0


def test_zero_gain_means_zero_ratio():
    ds = Dataset.from_records(["const", "label"], [["x", "A"], ["x", "B"], ["x", "A"]])
    assert information_gain(ds.rows, ds.header, "const") == 0.0
    assert gain_ratio(ds.rows, ds.header, "const") == 0.0


def test_identifier_column_is_never_selected(play_tennis_with_day):
    ds = play_tennis_with_day
    assert identifier_columns(ds.rows, ds.header, ds.column_types) == ["Day"]
    # the plain gain ratio favours the id column over Outlook
    assert gain_ratio(ds.rows, ds.header, "Day") == pytest.approx(0.247, abs=1e-3)
    attr, _ = best_attribute(ds.rows, ds.header, ds.column_types, exclude=["Day"])
    assert attr == "Outlook"
    assert build_tree(ds).attribute == "Outlook"


def test_unique_values_in_a_small_subset_still_split():
    rows = [["R", "A"], ["G", "B"], ["B", "A"]]
    header = ["color", "label"]
    assert gain_ratio(rows, header, "color") == pytest.approx(0.918 / 1.585, abs=1e-3)
    assert identifier_columns(rows[:2], header) == []

    ds = Dataset.from_records(
        ["group", "color", "label"],
        [
            ["g1", "R", "A"],
            ["g1", "G", "B"],
            ["g1", "B", "A"],
            ["g2", "R", "C"],
            ["g2", "R", "C"],
            ["g2", "R", "C"],
        ],
    )
    assert identifier_columns(ds.rows, ds.header, ds.column_types) == []
    tree = build_tree(ds)
    assert tree.attribute == "group"
    assert tree.children["g1"].attribute == "color"
    assert predict(tree, {"group": "g1", "color": "G"}) == "B"
    assert predict(tree, {"group": "g1", "color": "B"}) == "A"


def test_split_information():
    assert split_information([[1], [2]]) == pytest.approx(1.0)
    assert split_information([[1, 2, 3]]) == 0.0


def test_empty_rows():
    assert information_gain([], ["a", "label"], "a") == 0.0
    assert gain_ratio([], ["a", "label"], "a") == 0.0
    with pytest.raises(AttributeNotFoundError):
        gain_ratio([], ["a", "label"], "b")


def test_single_column_has_no_candidate():
    assert best_attribute([["A"], ["B"]], ["label"]) == ("", -1.0)
