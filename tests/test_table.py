import numpy as np
import pandas as pd
import pytest

from c45py import AttributeNotFoundError, ColumnType, Dataset, DatasetError, load_csv
from c45py.table import detect_column_type, parse_date, parse_number


def test_detect_column_type():
    assert detect_column_type(["1", "2.5", "", "-3e2"]) is ColumnType.NUMERIC
    assert detect_column_type(["2020-01-01", "03/04/2021", " "]) is ColumnType.TEMPORAL
    assert detect_column_type(["12-31-2020", "2021/01/15"]) is ColumnType.TEMPORAL
    assert detect_column_type(["a", "1"]) is ColumnType.CATEGORICAL
    assert detect_column_type(["", ""]) is ColumnType.CATEGORICAL
    assert detect_column_type([]) is ColumnType.CATEGORICAL


def test_parse_helpers():
    assert parse_number("4.25") == 4.25
    assert parse_number("abc") is None
    assert parse_number("nan") is None
    assert parse_date("1970-01-02") == 86400.0
    assert parse_date("02/01/1970") == 86400.0
    assert parse_date("yesterday") is None


def test_from_records_types_and_cells():
    ds = Dataset.from_records(
        ["age", "joined", "city", "label"],
        [["30", "2020-01-01", "Paris", "1"], ["", "2020-02-01", " Rome ", "0"]],
    )
    assert ds.column_types == (
        ColumnType.NUMERIC, ColumnType.TEMPORAL, ColumnType.CATEGORICAL, ColumnType.CATEGORICAL,
    )
    assert ds.rows[0, 0] == 30.0
    assert ds.rows[1, 0] is None
    assert ds.rows[1, 2] == "Rome"
    # the label stays a string even when it looks numeric
    assert list(ds.labels) == ["1", "0"]
    assert ds.feature_names == ["age", "joined", "city"]
    assert ds.label_name == "label"


def test_label_column_moves_last(play_tennis):
    ds = Dataset.from_records(play_tennis.header, play_tennis.rows, label="Outlook")
    assert ds.header[-1] == "Outlook"
    assert ds.header[:-1] == ("Temperature", "Humidity", "Wind", "PlayTennis")
    assert ds.labels[0] == "Sunny"


def test_dataset_is_read_only(play_tennis):
    with pytest.raises(ValueError):
        play_tennis.rows[0, 0] = "Cloudy"


def test_column_lookup(play_tennis):
    assert play_tennis.column_index("Wind") == 3
    assert play_tennis.column_type("Wind") is ColumnType.CATEGORICAL
    with pytest.raises(AttributeNotFoundError) as excinfo:
        play_tennis.column_index("Pressure")
    assert "Pressure" in str(excinfo.value)
    assert excinfo.value.header == list(play_tennis.header)


def test_dataset_errors():
    with pytest.raises(DatasetError):
        Dataset.from_records(["a", "label"], [["x", "A"], ["y"]])
    with pytest.raises(DatasetError):
        Dataset.from_records(["a", "a"], [["x", "A"]])
    with pytest.raises(DatasetError):
        Dataset.from_records(["a", "label"], [["x", "A"]], label="target")


def test_from_frame_missing_values():
    frame = pd.DataFrame({"x": [1.0, np.nan, 3.0], "y": ["a", None, "b"]})
    ds = Dataset.from_frame(frame)
    assert ds.column_types[0] is ColumnType.NUMERIC
    assert ds.rows[1, 0] is None
    assert ds.rows[1, 1] == ""


def test_load_csv(tmp_path):
    path = tmp_path / "people.csv"
    path.write_text("age,city,label\n30,Paris,yes\n,Rome,no\n45,,yes\n", encoding="utf-8")
    ds = load_csv(path)
    assert len(ds) == 3
    assert ds.column_types[:2] == (ColumnType.NUMERIC, ColumnType.CATEGORICAL)
    assert ds.rows[1, 0] is None
    assert ds.rows[2, 1] == ""

    ds = load_csv(path, label="city")
    assert ds.label_name == "city"


def test_load_csv_errors(tmp_path):
    empty = tmp_path / "empty.csv"
    empty.write_text("", encoding="utf-8")
    header_only = tmp_path / "header.csv"
    header_only.write_text("a,label\n", encoding="utf-8")
    ragged = tmp_path / "ragged.csv"
    ragged.write_text("a,label\n1,A\n2,B,extra\n", encoding="utf-8")
    good = tmp_path / "good.csv"
    good.write_text("a,label\n1,A\n", encoding="utf-8")

    for path in (empty, header_only, ragged):
        with pytest.raises(DatasetError):
            load_csv(path)
    with pytest.raises(DatasetError):
        load_csv(good, label="missing")
    with pytest.raises(FileNotFoundError):
        load_csv(tmp_path / "absent.csv")


def test_non_finite_numbers_are_not_numeric():
    assert parse_number("inf") is None
    assert parse_number("-Infinity") is None
    assert detect_column_type(["1", "inf"]) is ColumnType.CATEGORICAL
    ds = Dataset.from_records(["x", "label"], [["1", "A"], ["-inf", "B"]])
    assert ds.column_types[0] is ColumnType.CATEGORICAL
    assert ds.rows[1, 0] == "-inf"
