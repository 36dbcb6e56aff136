# -*- coding: utf-8 -*-
"""
c45py.splitter
==============

Partitioning of row subsets on one attribute.

Categorical attributes produce one subset per observed value.  Numeric and
temporal attributes produce a binary split ``value <= T`` / ``value > T``
whose branch keys are ``"<=T"`` and ``">T"`` with ``T`` printed to two
decimals.  Rows whose value is missing always take the ``">T"`` side, so the
two subsets partition the input exactly.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .exceptions import AttributeNotFoundError
from .table import ColumnType, as_rows

MISSING_BRANCH = "?"
THRESHOLD_STRATEGIES = ("midpoint", "median")


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def format_branch(op: str, threshold: float) -> str:
    return f"{op}{threshold:.2f}"


def branch_keys(threshold: float) -> tuple[str, str]:
    """Return the ``(left, right)`` branch keys for ``threshold``."""
    return format_branch("<=", threshold), format_branch(">", threshold)


def comparable(value) -> float | None:
    """Return ``value`` as a float, or ``None`` when it is missing or not finite."""
    if value is None or isinstance(value, (str, bool)):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def attribute_index(header: Sequence[str], attr_name: str) -> int:
    try:
        return list(header).index(attr_name)
    except ValueError:
        raise AttributeNotFoundError(attr_name, list(header)) from None


def resolve_column_type(rows: np.ndarray, attr_index: int,
                        column_types: Sequence[ColumnType] | None = None) -> ColumnType:
    """Type of column ``attr_index``.

    Uses ``column_types`` when given, else the value held by the first row:
    strings are categorical, anything else numeric.
    """
    if column_types is not None:
        return ColumnType(column_types[attr_index])
    if len(rows) == 0 or isinstance(rows[0, attr_index], str):
        return ColumnType.CATEGORICAL
    return ColumnType.NUMERIC


# -----------------------------------------------------------------------------
# Splits
# -----------------------------------------------------------------------------
def split_categorical(rows, attr_index: int) -> dict[str, np.ndarray]:
    """Group rows by the literal value at ``attr_index``.

    Keys are exactly the distinct values observed, in order of first
    appearance; every row lands in exactly one group.
    """
    rows = as_rows(rows)
    groups: dict[str, list[int]] = {}
    for i, value in enumerate(rows[:, attr_index]):
        groups.setdefault(str(value), []).append(i)
    return {key: rows[idx] for key, idx in groups.items()}


def best_threshold(rows, attr_index: int, strategy: str = "midpoint"):
    """Find the binary threshold for a numeric or temporal attribute.

    Parameters
    ----------
    rows : array-like of shape (n_rows, n_columns)
        Row subset, label last.
    attr_index : int
        Column to split on.
    strategy : {"midpoint", "median"}, default="midpoint"
        ``"midpoint"`` evaluates every midpoint between adjacent distinct
        values and keeps the one with the lowest weighted entropy (first one
        in sorted order on ties).  ``"median"`` takes the upper median of the
        values regardless of entropy.

    Returns
    -------
    threshold : float or None
        ``None`` when no row has a usable value.
    left : ndarray
        Rows with ``value <= threshold``.
    right : ndarray
        Every other row, including rows with a missing value.
    """
    if strategy not in THRESHOLD_STRATEGIES:
        raise ValueError(f"threshold strategy must be one of {THRESHOLD_STRATEGIES}, got {strategy!r}")
    rows = as_rows(rows)
    values = [comparable(v) for v in rows[:, attr_index]] if len(rows) else []
    known = np.array([v is not None for v in values], dtype=bool)
    if not known.any():
        return None, rows[:0], rows

    vv = np.array([v for v in values if v is not None], dtype=float)
    if strategy == "median":
        threshold = float(np.sort(vv)[len(vv) // 2])
    else:
        threshold = _best_midpoint(vv, rows[known, -1], rows[~known, -1])

    left_mask = np.zeros(len(rows), dtype=bool)
    left_mask[known] = vv <= threshold
    return threshold, rows[left_mask], rows[~left_mask]


def _best_midpoint(values: np.ndarray, labels: np.ndarray, missing_labels: np.ndarray) -> float:
    order = np.argsort(values, kind="mergesort")
    v = values[order]
    bd = np.nonzero(v[:-1] != v[1:])[0]
    if bd.size == 0:
        return float(v[0])

    classes, y_idx = np.unique(
        np.concatenate([labels[order], missing_labels]).astype(str), return_inverse=True
    )
    y_idx = y_idx.ravel()
    K, n_known = len(classes), len(v)
    M = np.zeros((n_known, K), dtype=float)
    M[np.arange(n_known), y_idx[:n_known]] = 1.0
    SW = M.cumsum(axis=0)
    total_known = SW[-1]
    missing = np.bincount(y_idx[n_known:], minlength=K).astype(float)
    n = n_known + len(missing_labels)

    left = SW[bd]
    right = total_known + missing - left
    score = (_scaled_entropy(left) + _scaled_entropy(right)) / n
    # argmin keeps the first candidate in sorted order on ties
    i = bd[int(np.argmin(score))]
    return float(0.5 * (v[i] + v[i + 1]))


def _scaled_entropy(counts: np.ndarray) -> np.ndarray:
    """Row-wise ``total * entropy`` of a 2-D array of class counts."""
    totals = counts.sum(axis=1)
    safe = np.where(counts > 0, counts, 1.0)
    plogp = (counts * np.log2(safe)).sum(axis=1)
    return totals * np.log2(np.where(totals > 0, totals, 1.0)) - plogp


def split(rows, header: Sequence[str], attr_name: str,
          column_types: Sequence[ColumnType] | None = None,
          strategy: str = "midpoint") -> dict[str, np.ndarray]:
    """Partition ``rows`` on ``attr_name``.

    Categorical attributes map each observed value to its rows; numeric and
    temporal attributes map ``"<=T"`` and ``">T"`` to the two sides of the
    best threshold.  A numeric attribute without any usable value yields the
    single branch :data:`MISSING_BRANCH`.

    Raises
    ------
    AttributeNotFoundError
        If ``attr_name`` is not in ``header``.
    """
    attr_index = attribute_index(header, attr_name)
    rows = as_rows(rows)
    if not resolve_column_type(rows, attr_index, column_types).is_ordered:
        return split_categorical(rows, attr_index)
    threshold, left, right = best_threshold(rows, attr_index, strategy)
    if threshold is None:
        return {MISSING_BRANCH: right}
    le_key, gt_key = branch_keys(threshold)
    return {le_key: left, gt_key: right}
