import pytest

from c45py import Dataset

PLAY_TENNIS_HEADER = ["Outlook", "Temperature", "Humidity", "Wind", "PlayTennis"]

PLAY_TENNIS_ROWS = [
    ["Sunny", "Hot", "High", "Weak", "No"],
    ["Sunny", "Hot", "High", "Strong", "No"],
    ["Overcast", "Hot", "High", "Weak", "Yes"],
    ["Rainy", "Mild", "High", "Weak", "Yes"],
    ["Rainy", "Cool", "Normal", "Weak", "Yes"],
    ["Rainy", "Cool", "Normal", "Strong", "No"],
    ["Overcast", "Cool", "Normal", "Strong", "Yes"],
    ["Sunny", "Mild", "High", "Weak", "No"],
    ["Sunny", "Cool", "Normal", "Weak", "Yes"],
    ["Rainy", "Mild", "Normal", "Weak", "Yes"],
    ["Sunny", "Mild", "Normal", "Strong", "Yes"],
    ["Overcast", "Mild", "High", "Strong", "Yes"],
    ["Overcast", "Hot", "Normal", "Weak", "Yes"],
    ["Rainy", "Mild", "High", "Strong", "No"],
]


@pytest.fixture
def play_tennis():
    return Dataset.from_records(PLAY_TENNIS_HEADER, PLAY_TENNIS_ROWS)


@pytest.fixture
def play_tennis_csv(tmp_path):
    path = tmp_path / "play_tennis.csv"
    lines = [",".join(PLAY_TENNIS_HEADER)] + [",".join(r) for r in PLAY_TENNIS_ROWS]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def numeric_dataset():
    return Dataset.from_records(["x", "label"], [["1", "A"], ["2", "A"], ["3", "A"], ["10", "B"]])


@pytest.fixture
def dates_dataset():
    return Dataset.from_records(
        ["when", "season"],
        [
            ["2020-01-01", "early"],
            ["2020-01-05", "early"],
            ["2021-06-01", "late"],
            ["2021-07-01", "late"],
        ],
    )


@pytest.fixture
def play_tennis_with_day():
    header = ["Day"] + PLAY_TENNIS_HEADER
    records = [[f"D{i + 1}"] + row for i, row in enumerate(PLAY_TENNIS_ROWS)]
    return Dataset.from_records(header, records)


def alternating_records(n):
    """Rows ``x=i`` labelled A, B, A, ...; each split peels off one row."""
    return [[str(i), "AB"[i % 2]] for i in range(n)]


@pytest.fixture
def alternating_dataset():
    return Dataset.from_records(["x", "label"], alternating_records(400))
