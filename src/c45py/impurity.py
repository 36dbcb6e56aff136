# -*- coding: utf-8 -*-
"""
c45py.impurity
==============

Label-distribution statistics for row subsets.  Rows are 2-D object arrays
whose last column holds the class label.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Mapping

import numpy as np

from .table import as_rows


def class_counts(rows) -> dict[str, int]:
    """Count label occurrences, in order of first appearance."""
    rows = as_rows(rows)
    if len(rows) == 0:
        return {}
    return dict(Counter(rows[:, -1]))


def probabilities(counts: Mapping[str, int], total: int) -> dict[str, float]:
    """Return ``count / total`` for every label in ``counts``."""
    if total <= 0:
        raise ValueError("total must be positive to compute class probabilities")
    return {label: count / total for label, count in counts.items()}


def entropy_from_counts(counts) -> float:
    """Shannon entropy (base 2) of a vector of class counts.

    Zero counts are skipped; an all-zero or empty vector has entropy 0.
    """
    dist = np.asarray(counts, dtype=float)
    tot = dist.sum()
    if tot <= 0:
        return 0.0
    p = dist / tot
    p = p[p > 0]
    return max(0.0, float(-np.sum(p * np.log2(p))))


def entropy(rows) -> float:
    """Entropy of the label column of ``rows``; 0.0 for no rows."""
    return entropy_from_counts(list(class_counts(rows).values()))


def majority_label(labels: Iterable[str]) -> str | None:
    """Most frequent label; ties go to the label seen first.

    Returns ``None`` for an empty iterable.
    """
    # Counter.most_common keeps insertion order among equal counts
    ranked = Counter(labels).most_common(1)
    return ranked[0][0] if ranked else None
