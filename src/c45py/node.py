# -*- coding: utf-8 -*-
"""
c45py.node
==========

Immutable tree nodes.  A tree is either a :class:`Leaf` holding a class
label or an :class:`Internal` decision node holding the splitting attribute
and one child per branch key.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterator, Mapping, Union

from .table import ColumnType


@dataclass(frozen=True)
class Leaf:
    """Terminal node.

    Parameters
    ----------
    label : str
        Class predicted for every record reaching this leaf.
    """

    label: str


@dataclass(frozen=True)
class Internal:
    """Decision node.

    Parameters
    ----------
    attribute : str
        Name of the column tested at this node.
    column_type : ColumnType
        Type of ``attribute``; decides how a record value becomes a branch key.
    children : Mapping[str, Node]
        Branch key to child.  Categorical nodes use the literal training
        values; numeric and temporal nodes use ``"<=T"`` and ``">T"``.
    threshold : float or None, default=None
        Split point for numeric and temporal nodes; ``None`` for categorical
        nodes.
    """

    attribute: str
    column_type: ColumnType
    children: Mapping[str, "Node"] = field(default_factory=dict)
    threshold: float | None = None


Node = Union[Leaf, Internal]


def iter_leaves(node: Node) -> Iterator[Leaf]:
    """Yield every leaf below ``node`` depth-first, in children order."""
    pending = [node]
    while pending:
        current = pending.pop()
        if isinstance(current, Leaf):
            yield current
        else:
            pending.extend(reversed(list(current.children.values())))


def leaf_labels(node: Node) -> list[str]:
    return [leaf.label for leaf in iter_leaves(node)]


def majority_class(node: Node) -> str:
    """Most frequent class among the leaves below ``node``.

    Ties go to the class of the first such leaf in depth-first order.
    """
    return Counter(leaf_labels(node)).most_common(1)[0][0]


def count_leaves(node: Node) -> int:
    return sum(1 for _ in iter_leaves(node))


def tree_depth(node: Node) -> int:
    """Number of decision levels; a single leaf has depth 0."""
    deepest = 0
    pending = [(node, 0)]
    while pending:
        current, depth = pending.pop()
        if isinstance(current, Leaf):
            deepest = max(deepest, depth)
            continue
        if not current.children:
            deepest = max(deepest, depth + 1)
        pending.extend((child, depth + 1) for child in current.children.values())
    return deepest
