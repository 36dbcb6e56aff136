# -*- coding: utf-8 -*-
"""
c45py.table
===========

Typed tabular datasets.

A :class:`Dataset` is a header, one :class:`ColumnType` per column and a 2-D
object array of cells.  Types are decided once, when the data is loaded, from
every non-empty cell of a column:

* numeric if every value parses as a number,
* temporal if every value parses under one of :data:`DATE_FORMATS`,
* categorical otherwise.

Numeric cells are floats, temporal cells are seconds since the Unix epoch
(UTC) and categorical cells are the stripped strings.  Empty numeric or
temporal cells are ``None``.  The last column is the class label and is
always categorical.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Sequence

import numpy as np
import pandas as pd
from loguru import logger

from .exceptions import AttributeNotFoundError, DatasetError

DATE_FORMATS: tuple[str, ...] = ("%Y-%m-%d", "%d/%m/%Y", "%m-%d-%Y", "%Y/%m/%d")


class ColumnType(str, Enum):
    """Semantic type of a column."""

    CATEGORICAL = "categorical"
    NUMERIC = "numeric"
    TEMPORAL = "temporal"

    @property
    def is_ordered(self) -> bool:
        """True for types split by a threshold rather than by literal value."""
        return self is not ColumnType.CATEGORICAL


# -----------------------------------------------------------------------------
# Cell parsing
# -----------------------------------------------------------------------------
def parse_number(text) -> float | None:
    """Parse ``text`` as a float; ``None`` unless it is a finite number."""
    try:
        value = float(text)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_date(text, formats: Sequence[str] = DATE_FORMATS) -> float | None:
    """Parse ``text`` under the first matching format.

    Returns
    -------
    float or None
        Seconds since 1970-01-01 UTC, or ``None`` if no format matches.
    """
    if not isinstance(text, str):
        return None
    for fmt in formats:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed.replace(tzinfo=timezone.utc).timestamp()
    return None


def parse_cell(text: str, column_type: ColumnType):
    """Convert one raw string to the cell value for ``column_type``."""
    if column_type is ColumnType.CATEGORICAL:
        return text
    if text == "":
        return None
    if column_type is ColumnType.NUMERIC:
        return parse_number(text)
    return parse_date(text)


def detect_column_type(values: Iterable[str]) -> ColumnType:
    """Infer the type of a column from its raw string values.

    Blank values are ignored.  A column without any non-blank value is
    categorical.
    """
    present = [v for v in (str(x).strip() for x in values) if v]
    if not present:
        return ColumnType.CATEGORICAL
    if all(parse_number(v) is not None for v in present):
        return ColumnType.NUMERIC
    if all(parse_date(v) is not None for v in present):
        return ColumnType.TEMPORAL
    return ColumnType.CATEGORICAL


def as_rows(rows) -> np.ndarray:
    """Return ``rows`` as a 2-D object array (one row per record)."""
    if isinstance(rows, Dataset):
        return rows.rows
    arr = np.asarray(rows, dtype=object)
    if arr.ndim != 2:
        if arr.size == 0:
            return np.empty((0, 0), dtype=object)
        raise DatasetError("rows must be a rectangular sequence of records")
    return arr


# -----------------------------------------------------------------------------
# Dataset
# -----------------------------------------------------------------------------
@dataclass(frozen=True, eq=False)
class Dataset:
    """Immutable typed table whose last column is the class label.

    Parameters
    ----------
    header : tuple[str, ...]
        Column names, label last.
    column_types : tuple[ColumnType, ...]
        One type per column, index-aligned with ``header``.
    rows : ndarray of shape (n_rows, n_columns), dtype=object
        Converted cell values.
    """

    header: tuple[str, ...]
    column_types: tuple[ColumnType, ...]
    rows: np.ndarray

    def __post_init__(self):
        if len(self.header) != len(self.column_types):
            raise DatasetError("header and column_types must have the same length")
        if self.rows.ndim != 2 or (len(self.rows) and self.rows.shape[1] != len(self.header)):
            raise DatasetError(f"every row must have exactly {len(self.header)} cells")
        self.rows.flags.writeable = False

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def label_name(self) -> str:
        return self.header[-1]

    @property
    def feature_names(self) -> list[str]:
        return list(self.header[:-1])

    @property
    def labels(self) -> np.ndarray:
        return self.rows[:, -1]

    def column_index(self, name: str) -> int:
        try:
            return self.header.index(name)
        except ValueError:
            raise AttributeNotFoundError(name, list(self.header)) from None

    def column_type(self, name: str) -> ColumnType:
        return self.column_types[self.column_index(name)]

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def from_frame(cls, frame: pd.DataFrame, label: str | None = None) -> "Dataset":
        """Build a dataset from a DataFrame of raw values.

        Values are rendered as stripped strings (missing values become empty
        strings) and typed with :func:`detect_column_type`.

        Parameters
        ----------
        frame : pandas.DataFrame
            Input table, one column per attribute.
        label : str, optional
            Name of the class column.  It is moved to the end.  By default the
            last column is the label.
        """
        if frame.shape[1] < 1:
            raise DatasetError("a dataset needs at least one column")
        header = [str(c) for c in frame.columns]
        if len(set(header)) != len(header):
            raise DatasetError(f"duplicate column names in header: {header}")
        frame = frame.copy()
        frame.columns = header
        if label is not None:
            if label not in header:
                raise DatasetError(f"label column {label!r} not found in header {header}")
            header = [c for c in header if c != label] + [label]
            frame = frame[header]

        text = frame.astype(object).where(frame.notna(), "").astype(str)
        for name in header:
            text[name] = text[name].str.strip()

        column_types = [detect_column_type(text[name]) for name in header[:-1]]
        column_types.append(ColumnType.CATEGORICAL)

        rows = np.empty((len(text), len(header)), dtype=object)
        for j, (name, column_type) in enumerate(zip(header, column_types)):
            rows[:, j] = [parse_cell(v, column_type) for v in text[name]]
        logger.debug(
            "Typed {} rows: {}",
            len(rows),
            ", ".join(f"{n}={t.value}" for n, t in zip(header, column_types)),
        )
        return cls(tuple(header), tuple(column_types), rows)

    @classmethod
    def from_records(cls, header: Sequence[str], records: Sequence[Sequence[str]],
                     label: str | None = None) -> "Dataset":
        """Build a dataset from a header and rows of raw strings."""
        header = [str(h) for h in header]
        for i, record in enumerate(records):
            if len(record) != len(header):
                raise DatasetError(
                    f"row {i + 1} has {len(record)} cells, expected {len(header)}"
                )
        frame = pd.DataFrame([list(r) for r in records], columns=header, dtype=object)
        return cls.from_frame(frame, label=label)


def load_csv(path, label: str | None = None) -> Dataset:
    """Load a CSV file with a header row into a typed :class:`Dataset`.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    DatasetError
        If the file is not a usable table (no data rows, malformed rows or an
        unknown label column).
    """
    frame = read_raw_csv(path)
    if frame.empty:
        raise DatasetError(f"insufficient data in CSV file: {path}")
    dataset = Dataset.from_frame(frame, label=label)
    logger.info("Loaded {} rows x {} columns from {}", len(dataset), len(dataset.header), path)
    return dataset


def read_raw_csv(path) -> pd.DataFrame:
    """Read a CSV file keeping every cell exactly as written."""
    try:
        return pd.read_csv(path, dtype=str, keep_default_na=False).fillna("")
    except pd.errors.EmptyDataError as exc:
        raise DatasetError(f"insufficient data in CSV file: {path}") from exc
    except pd.errors.ParserError as exc:
        raise DatasetError(f"malformed CSV file {path}: {exc}") from exc
