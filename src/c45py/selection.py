# -*- coding: utf-8 -*-
"""
c45py.selection
===============

Attribute scoring with information gain and Quinlan's gain ratio.
"""

from __future__ import annotations

from typing import Collection, Iterable, Sequence

import numpy as np
from loguru import logger

from .impurity import entropy, entropy_from_counts
from .splitter import attribute_index, resolve_column_type, split
from .table import ColumnType, as_rows

# gains below this are floating-point noise from equal entropies
_GAIN_EPS = 1e-12


def _weighted_entropy(subsets: Iterable[np.ndarray], total: int) -> float:
    return sum(len(s) / total * entropy(s) for s in subsets)


def split_information(subsets: Iterable[np.ndarray]) -> float:
    """Entropy of the subset-size distribution of a partition."""
    return entropy_from_counts([len(s) for s in subsets])


def information_gain(rows, header: Sequence[str], attr_name: str,
                     column_types: Sequence[ColumnType] | None = None,
                     strategy: str = "midpoint") -> float:
    """Entropy reduction obtained by splitting ``rows`` on ``attr_name``."""
    rows = as_rows(rows)
    if len(rows) == 0:
        attribute_index(header, attr_name)
        return 0.0
    subsets = split(rows, header, attr_name, column_types, strategy)
    return entropy(rows) - _weighted_entropy(subsets.values(), len(rows))


def gain_ratio(rows, header: Sequence[str], attr_name: str,
               column_types: Sequence[ColumnType] | None = None,
               strategy: str = "midpoint") -> float:
    """Information gain divided by split information.

    Zero when the gain or the split information is zero.
    """
    rows = as_rows(rows)
    if len(rows) == 0:
        attribute_index(header, attr_name)
        return 0.0
    subsets = split(rows, header, attr_name, column_types, strategy)
    gain = entropy(rows) - _weighted_entropy(subsets.values(), len(rows))
    if gain <= _GAIN_EPS:
        return 0.0

    split_info = split_information(subsets.values())
    if split_info <= 0:
        return 0.0
    return gain / split_info


def identifier_columns(rows, header: Sequence[str],
                       column_types: Sequence[ColumnType] | None = None) -> list[str]:
    """Categorical attributes whose value differs on every row.

    Such a column (a row id, a name) separates a table of more than two rows
    perfectly and has a high gain ratio, but says nothing about new records.
    The builder checks the full training set once and never splits on them.
    """
    rows = as_rows(rows)
    if len(rows) <= 2:
        return []
    found = []
    for attr_index, attr in enumerate(list(header)[:-1]):
        if resolve_column_type(rows, attr_index, column_types).is_ordered:
            continue
        if len({str(v) for v in rows[:, attr_index]}) == len(rows):
            found.append(attr)
    return found


def best_attribute(rows, header: Sequence[str],
                   column_types: Sequence[ColumnType] | None = None,
                   strategy: str = "midpoint",
                   exclude: Collection[str] = ()) -> tuple[str, float]:
    """Pick the attribute with the highest gain ratio.

    Every column except the last (the label) and those in ``exclude`` is
    scored in header order; ties keep the earliest column.  Returns
    ``("", -1.0)`` when there is no candidate column.
    """
    best_attr, best_ratio = "", -1.0
    for attr in list(header)[:-1]:
        if attr in exclude:
            continue
        ratio = gain_ratio(rows, header, attr, column_types, strategy)
        logger.trace("gain ratio {}={:.6f}", attr, ratio)
        if ratio > best_ratio:
            best_attr, best_ratio = attr, ratio
    return best_attr, best_ratio
