# -*- coding: utf-8 -*-
"""
c45py.tree
==========

This module implements a C4.5-style decision tree classifier after Quinlan.
Attributes are chosen by gain ratio; categorical attributes split into one
branch per observed value, numeric and date attributes split on the binary
threshold that minimises the weighted entropy of the two sides.  The tree is
grown until every leaf is pure or no attribute has a positive gain ratio.
There is no pruning.

Prediction walks the tree with a record mapping column names to strings.  A
record without the tested attribute is classified as ``"Unknown"``; a value
with no matching branch falls back to the majority class among the leaves
below the current node.

Besides the module-level :func:`build_tree` and :func:`predict`, the module
provides :class:`C45Classifier`, a scikit-learn compatible estimator with rule
export, pretty printing, Graphviz export and JSON persistence.
"""

# -----------------------------------------------------------------------------

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Iterable, Iterator, Mapping, Sequence

import numpy as np
import pandas as pd
from loguru import logger
from sklearn.base import BaseEstimator, ClassifierMixin

from .impurity import class_counts, majority_label
from .node import Internal, Leaf, Node, count_leaves, leaf_labels, majority_class, tree_depth
from .persistence import dump_tree, load_tree
from .selection import best_attribute, identifier_columns
from .splitter import (
    best_threshold,
    branch_keys,
    comparable,
    format_branch,
    resolve_column_type,
    split_categorical,
)
from .table import DATE_FORMATS, ColumnType, Dataset, as_rows, parse_date, parse_number

UNKNOWN_LABEL = "Unknown"


# -----------------------------------------------------------------------------
# Tree construction (gain ratio)
# -----------------------------------------------------------------------------
def build_tree(data, header: Sequence[str] | None = None,
               column_types: Sequence[ColumnType] | None = None,
               *, threshold_strategy: str = "midpoint") -> Node:
    """
    Grow a decision tree from a labelled dataset.

    Parameters
    ----------
    data : Dataset or array-like of shape (n_rows, n_columns)
        Training rows, class label in the last column.
    header : sequence of str, optional
        Column names; required unless ``data`` is a :class:`Dataset`.
    column_types : sequence of ColumnType, optional
        Column types.  Taken from ``data`` when it is a :class:`Dataset`;
        otherwise inferred from the first row when omitted.
    threshold_strategy : {"midpoint", "median"}, default="midpoint"
        Threshold policy for numeric and temporal attributes.

    Returns
    -------
    Leaf or Internal
        Root of the fitted tree.

    Raises
    ------
    ValueError
        If there are no rows or no header.

    Notes
    -----
    Categorical columns holding a different value on every training row are
    never split on (see :func:`~c45py.selection.identifier_columns`).  The
    tree is grown from an explicit work stack, so its depth is bounded by the
    number of rows only.
    """
    if isinstance(data, Dataset):
        header = data.header if header is None else header
        column_types = data.column_types if column_types is None else column_types
    rows = as_rows(data)
    if header is None:
        raise ValueError("header is required when building from raw rows")
    if len(rows) == 0:
        raise ValueError("cannot build a decision tree from an empty dataset")
    header = list(header)
    excluded = identifier_columns(rows, header, column_types)
    if excluded:
        logger.debug("not splitting on identifier columns: {}", ", ".join(excluded))

    root: dict[str, Node] = {}
    # (rows, depth, children mapping of the parent, branch key)
    pending = [(rows, 0, root, "")]
    while pending:
        subset, depth, slot, key = pending.pop()
        node, branches = _grow(subset, header, column_types, threshold_strategy, excluded, depth)
        slot[key] = node
        for branch_key, branch_rows in reversed(branches):
            pending.append((branch_rows, depth + 1, node.children, branch_key))
    return root[""]


def _grow(rows: np.ndarray, header: list[str], column_types, strategy: str,
          excluded: list[str], depth: int):
    """Make the node for ``rows``; return it with the branch subsets still to grow."""
    counts = class_counts(rows)
    if len(counts) == 1:
        label = next(iter(counts))
        logger.debug("{}leaf {} (pure, {} rows)", "  " * depth, label, len(rows))
        return Leaf(label), []

    majority = majority_label(rows[:, -1])
    attr, ratio = best_attribute(rows, header, column_types, strategy, exclude=excluded)
    if not attr or ratio <= 0:
        logger.debug("{}leaf {} (no informative attribute, {} rows)", "  " * depth, majority, len(rows))
        return Leaf(majority), []

    attr_index = header.index(attr)
    column_type = resolve_column_type(rows, attr_index, column_types)
    if column_type.is_ordered:
        threshold, left, right = best_threshold(rows, attr_index, strategy)
        le_key, gt_key = branch_keys(threshold)
        subsets = {le_key: left, gt_key: right}
        logger.debug("{}split {} <= {:.4f} (gain ratio {:.4f})", "  " * depth, attr, threshold, ratio)
    else:
        threshold = None
        subsets = split_categorical(rows, attr_index)
        logger.debug("{}split {} into {} branches (gain ratio {:.4f})",
                     "  " * depth, attr, len(subsets), ratio)

    # children are filled in by build_tree; keys are inserted now to keep branch order
    children: dict[str, Node | None] = {}
    branches = []
    for key, subset in subsets.items():
        if len(subset) == 0:
            children[key] = Leaf(majority)
        else:
            children[key] = None
            branches.append((key, subset))
    return Internal(attr, column_type, children, threshold), branches


# -----------------------------------------------------------------------------
# Prediction
# -----------------------------------------------------------------------------
def _is_missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return isinstance(value, float) and math.isnan(value)


def branch_for(node: Internal, value, date_formats: Sequence[str] = DATE_FORMATS) -> str | None:
    """Branch key a record value routes to at ``node``.

    Returns ``None`` when a numeric or date value cannot be parsed.  Missing
    values follow the ``">T"`` branch, like missing training values.
    """
    if not node.column_type.is_ordered:
        return "" if value is None else str(value).strip()
    gt_key = format_branch(">", node.threshold)
    if _is_missing(value):
        return gt_key
    if not isinstance(value, str):
        number = comparable(value)
    elif node.column_type is ColumnType.TEMPORAL:
        number = parse_date(value.strip(), date_formats)
    else:
        number = parse_number(value.strip())
    if number is None:
        return None
    return format_branch("<=", node.threshold) if number <= node.threshold else gt_key


def predict(tree: Node, record: Mapping[str, object], unknown_label: str = UNKNOWN_LABEL,
            date_formats: Sequence[str] = DATE_FORMATS) -> str:
    """
    Classify one record.

    Parameters
    ----------
    tree : Leaf or Internal
        Fitted tree.
    record : Mapping[str, object]
        Column name to value, usually strings as read from a CSV file.
    unknown_label : str, default="Unknown"
        Returned when the record lacks an attribute tested on its path.
    date_formats : sequence of str
        Formats tried for date attributes.

    Returns
    -------
    str
        The predicted class.
    """
    node = tree
    while isinstance(node, Internal):
        if node.attribute not in record:
            logger.debug("attribute {} missing from record", node.attribute)
            return unknown_label
        value = record[node.attribute]
        key = branch_for(node, value, date_formats)
        child = node.children.get(key) if key is not None else None
        if child is None:
            fallback = majority_class(node)
            logger.debug("no branch for {}={!r}; falling back to {}", node.attribute, value, fallback)
            return fallback
        node = child
    return node.label


# -----------------------------------------------------------------------------
# Classifier
# -----------------------------------------------------------------------------
class C45Classifier(ClassifierMixin, BaseEstimator):
    """
    Decision tree classifier inspired by Quinlan's C4.5.

    Splits are chosen by gain ratio over categorical, numeric and date
    attributes.  Column types are detected from the training data (see
    :mod:`c45py.table`); the class label is always categorical.

    Parameters
    ----------
    threshold_strategy : {"midpoint", "median"}, default="midpoint"
        How numeric and date thresholds are chosen.  ``"midpoint"`` searches
        every midpoint between adjacent distinct values for the lowest
        weighted entropy; ``"median"`` always splits at the median value.
    unknown_label : str, default="Unknown"
        Prediction for records missing an attribute the tree tests.

    Attributes
    ----------
    tree_ : Leaf or Internal
        Root of the fitted tree.
    classes_ : ndarray
        Sorted class labels seen during ``fit`` (or in the leaves of a loaded
        model).
    feature_names_ : list[str] or None
        Attribute columns in training order; ``None`` for a loaded model.
    column_types_ : dict[str, ColumnType]
        Detected type of every attribute.

    Notes
    -----
    - The API follows the scikit-learn estimator conventions for ``fit``,
      ``predict`` and ``score``.
    - ``predict`` accepts a DataFrame, a :class:`~c45py.table.Dataset`, an
      iterable of mappings or a 2-D array whose columns follow
      ``feature_names_``.
    """

    def __init__(self, *, threshold_strategy: str = "midpoint", unknown_label: str = UNKNOWN_LABEL):
        self.threshold_strategy = threshold_strategy
        self.unknown_label = unknown_label

    def fit(self, X, y=None, feature_names=None):
        """
        Grow the tree.

        Parameters
        ----------
        X : Dataset, DataFrame or array-like of shape (n_samples, n_features)
            Training data.  A :class:`Dataset` already carries its labels.
        y : array-like of shape (n_samples,), optional
            Class labels.  When omitted for a DataFrame or array, the last
            column of ``X`` is the label.
        feature_names : list[str], optional
            Column names for array input.  Defaults to ``f0, f1, ...``.

        Returns
        -------
        self
        """
        dataset = self._as_dataset(X, y, feature_names)
        if len(dataset) == 0:
            raise ValueError("cannot fit on an empty dataset")
        self.feature_names_ = dataset.feature_names
        self.column_types_ = dict(zip(dataset.feature_names, dataset.column_types[:-1]))
        self.classes_ = np.unique(dataset.labels.astype(str))
        self.tree_ = build_tree(dataset, threshold_strategy=self.threshold_strategy)
        logger.info("Fitted tree on {} rows: depth={}, leaves={}",
                    len(dataset), tree_depth(self.tree_), count_leaves(self.tree_))
        return self

    @staticmethod
    def _as_dataset(X, y, feature_names) -> Dataset:
        if isinstance(X, Dataset):
            if y is not None:
                raise ValueError("y must be None when X is a Dataset")
            return X
        if isinstance(X, pd.DataFrame):
            frame = X
        else:
            arr = np.asarray(X, dtype=object)
            if arr.ndim != 2:
                raise ValueError("X must be two-dimensional")
            if feature_names is None:
                feature_names = [f"f{i}" for i in range(arr.shape[1])]
            elif len(feature_names) != arr.shape[1]:
                raise ValueError("feature_names length must match X.shape[1]")
            frame = pd.DataFrame(arr, columns=list(feature_names))
        if y is None:
            return Dataset.from_frame(frame)
        y = pd.Series(y) if not isinstance(y, pd.Series) else y
        if len(y) != len(frame):
            raise ValueError("X and y must have the same number of rows")
        label = str(y.name) if y.name is not None else "class"
        if label in frame.columns:
            raise ValueError(f"label name {label!r} clashes with a feature column")
        frame = frame.assign(**{label: y.to_numpy()})
        return Dataset.from_frame(frame)

    def _check_fitted(self):
        if getattr(self, "tree_", None) is None:
            raise ValueError("Estimator not fitted. Call fit(...) first.")

    def predict(self, X):
        """
        Predict class labels for the provided samples.

        Parameters
        ----------
        X : DataFrame, Dataset, iterable of mappings or array-like
            Input records.

        Returns
        -------
        ndarray of shape (n_samples,)
            Predicted class labels.

        Raises
        ------
        ValueError
            If the estimator has not been fitted.
        """
        self._check_fitted()
        return np.array([self.predict_record(r) for r in self._iter_records(X)], dtype=object)

    def predict_record(self, record: Mapping[str, object]) -> str:
        """Predict the class of a single record mapping column name to value."""
        self._check_fitted()
        return predict(self.tree_, record, unknown_label=self.unknown_label)

    def _iter_records(self, X) -> Iterator[Mapping[str, object]]:
        if isinstance(X, Dataset):
            for row in X.rows:
                yield dict(zip(X.header, row))
        elif isinstance(X, pd.DataFrame):
            frame = X.astype(object).where(X.notna(), "")
            frame.columns = [str(c) for c in frame.columns]
            yield from frame.to_dict(orient="records")
        elif isinstance(X, Mapping):
            yield X
        else:
            for row in X:
                if isinstance(row, Mapping):
                    yield row
                    continue
                if self.feature_names_ is None:
                    raise ValueError("positional rows need feature_names_; pass mappings or a DataFrame")
                yield dict(zip(self.feature_names_, row))

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def save(self, path):
        """Write the fitted tree to ``path`` as JSON."""
        self._check_fitted()
        return dump_tree(self.tree_, path)

    @classmethod
    def load(cls, path, **params) -> C45Classifier:
        """Rebuild a classifier from a tree written by :meth:`save`."""
        clf = cls(**params)
        clf.tree_ = load_tree(path)
        clf.classes_ = np.unique(np.asarray(leaf_labels(clf.tree_), dtype=str))
        clf.feature_names_ = None
        clf.column_types_ = dict(_tested_attributes(clf.tree_))
        return clf

    # ------------------------------------------------------------------
    # Rules / Graphviz / printing
    # ------------------------------------------------------------------
    def export_rules(self) -> list[str]:
        """
        Export every root-to-leaf path as ``"<conditions> => <class>"``.

        Returns
        -------
        list[str]
            One rule per leaf, in depth-first order.
        """
        self._check_fitted()
        rules: list[str] = []
        self._collect_rules(self.tree_, [], rules)
        return rules

    def export_graphviz(self, filename: str | None = None, *, format: str = "png") -> str:
        """
        Export the tree structure in Graphviz format.

        Parameters
        ----------
        filename : str or None, default=None
            Basename of the output file.  If None, the DOT source is returned
            and nothing is written.
        format : str, default="png"
            Graphviz output format.  ``'dot'`` writes the DOT source directly
            without calling the external ``dot`` binary.

        Returns
        -------
        str
            Path to the written file, or the DOT source if filename is None.
        """
        self._check_fitted()
        try:
            import graphviz
        except ImportError:
            raise RuntimeError("Graphviz is required for export_graphviz but not installed.")
        dot = graphviz.Digraph(format=format)
        _add_graph_nodes(dot, self.tree_, "0")

        if filename is None:
            return dot.source
        if format.lower() == "dot":
            path = f"{filename}.dot"
            dot.save(path)
            return path
        try:
            dot.render(filename, cleanup=True)
            return f"{filename}.{format}"
        except graphviz.ExecutableNotFound:
            logger.warning("Graphviz 'dot' executable not found; writing DOT source instead")
            fallback_path = f"{filename}.dot"
            dot.save(fallback_path)
            return fallback_path

    def print_tree(self):
        """Pretty-print the decision tree to ``stdout``."""
        self._check_fitted()
        _print_node(self.tree_, "")

    def _collect_rules(self, node: Node, parts: list[str], rules: list[str]):
        pending = [(node, parts)]
        while pending:
            current, conditions = pending.pop()
            if isinstance(current, Leaf):
                body = " AND ".join(conditions) if conditions else "<root>"
                rules.append(f"{body} => {current.label}")
                continue
            for key, child in reversed(list(current.children.items())):
                pending.append((child, conditions + [_condition(current, key)]))


def _tested_attributes(node: Node) -> Iterable[tuple[str, ColumnType]]:
    pending = [node]
    while pending:
        current = pending.pop()
        if isinstance(current, Internal):
            yield current.attribute, current.column_type
            pending.extend(reversed(list(current.children.values())))


def _describe_threshold(node: Internal) -> str:
    if node.column_type is ColumnType.TEMPORAL:
        return datetime.fromtimestamp(node.threshold, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
    return f"{node.threshold:.4f}"


def _condition(node: Internal, key: str) -> str:
    if not node.column_type.is_ordered:
        return f"{node.attribute} = {key}"
    op = "<=" if key.startswith("<=") else ">"
    return f"{node.attribute} {op} {_describe_threshold(node)}"


def _add_graph_nodes(dot, node: Node, name: str):
    pending = [(node, name)]
    while pending:
        current, current_id = pending.pop()
        if isinstance(current, Leaf):
            dot.node(current_id, f"class={current.label}", shape="box", style="filled", color="lightgrey")
            continue
        dot.node(current_id, current.attribute, shape="ellipse", style="filled", color="lightblue")
        edges = []
        for i, (key, child) in enumerate(current.children.items()):
            child_id = f"{current_id}_{i}"
            label = key if not current.column_type.is_ordered else _condition(current, key)[len(current.attribute) + 1:]
            dot.edge(current_id, child_id, label=label)
            edges.append((child, child_id))
        pending.extend(reversed(edges))


def _print_node(node: Node, indent=""):
    # items are nodes to print or finished lines
    pending: list = [(node, indent)]
    while pending:
        item = pending.pop()
        if isinstance(item, str):
            print(item)
            continue
        current, pad = item
        if isinstance(current, Leaf):
            print(f"{pad}Predict {current.label}")
            continue
        if current.column_type.is_ordered:
            le_key, gt_key = branch_keys(current.threshold)
            print(f"{pad}if {current.attribute} <= {_describe_threshold(current)}:")
            pending.append((current.children[gt_key], pad + "  "))
            pending.append(f"{pad}else:")
            pending.append((current.children[le_key], pad + "  "))
            continue
        items = []
        for i, (key, child) in enumerate(current.children.items()):
            items.append(f"{pad}{'if' if i == 0 else 'elif'} {current.attribute} == {key}:")
            items.append((child, pad + "  "))
        pending.extend(reversed(items))
