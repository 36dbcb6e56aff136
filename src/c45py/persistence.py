# -*- coding: utf-8 -*-
"""
c45py.persistence
=================

JSON persistence of fitted trees.

Every node is written as an object with the fields ``Attribute``,
``Threshold``, ``Children``, ``Class``, ``IsLeaf`` and ``Type``.  Fields that
do not apply to a node keep their default (empty string, ``null`` or
``false``).  Files written without ``Type`` are accepted: a decision node is
read as numeric when it has a threshold and every branch key starts with
``<=`` or ``>``, and as categorical otherwise.

Each node is validated as one flat :class:`NodeRecord`; trees are written and
rebuilt with explicit stacks, so a path of any length round-trips.
"""

from __future__ import annotations

import contextlib
import json
import sys
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .exceptions import ModelFormatError
from .node import Internal, Leaf, Node
from .table import ColumnType

__all__ = ["NodeRecord", "dump_tree", "dumps_tree", "load_tree", "loads_tree"]

# Python frames kept free on top of the nesting of a document being decoded
_FRAME_MARGIN = 200


class NodeRecord(BaseModel):
    """Serialized form of one tree node.

    ``children`` holds the raw child objects; they are validated as records
    of their own.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    attribute: str = Field(default="", alias="Attribute",
                           description="Column tested at a decision node; empty on leaves.")
    threshold: float | None = Field(default=None, alias="Threshold", allow_inf_nan=False,
                                    description="Split point of a numeric or temporal node.")
    children: dict[str, Any] | None = Field(default=None, alias="Children",
                                            description="Branch key to child node.")
    label: str = Field(default="", alias="Class",
                       description="Predicted class of a leaf; empty on decision nodes.")
    is_leaf: bool = Field(default=False, alias="IsLeaf")
    column_type: ColumnType | None = Field(default=None, alias="Type",
                                           description="Type of the tested column.")

    @model_validator(mode="after")
    def _validate_variant(self) -> NodeRecord:
        if self.is_leaf:
            if self.children:
                raise ValueError("a leaf node cannot have children")
            return self
        if not self.attribute:
            raise ValueError("a decision node needs an Attribute")
        if not self.children:
            raise ValueError(f"decision node on {self.attribute!r} has no children")
        return self

    def resolved_type(self) -> ColumnType:
        if self.column_type is not None:
            return self.column_type
        keys = list(self.children or {})
        if self.threshold is not None and all(k.startswith(("<=", ">")) for k in keys):
            return ColumnType.NUMERIC
        return ColumnType.CATEGORICAL


def to_record(node: Node) -> NodeRecord:
    """Flat record of ``node``; children are left as empty placeholders."""
    if isinstance(node, Leaf):
        return NodeRecord(label=node.label, is_leaf=True)
    return NodeRecord(
        attribute=node.attribute,
        threshold=node.threshold,
        children={key: {} for key in node.children},
        column_type=node.column_type,
    )


def _node_from_record(record: NodeRecord, children: dict[str, Node]) -> Node:
    if record.is_leaf:
        return Leaf(record.label)
    column_type = record.resolved_type()
    threshold = record.threshold if column_type.is_ordered else None
    if column_type.is_ordered and threshold is None:
        raise ValueError(f"{column_type.value} node on {record.attribute!r} has no Threshold")
    return Internal(record.attribute, column_type, children, threshold)


def to_node(document: Any) -> Node:
    """Rebuild a tree from decoded JSON (nested dicts).

    Raises
    ------
    ValidationError
        If a node object does not match :class:`NodeRecord`.
    ValueError
        If a numeric or temporal node has no threshold.
    """
    # pre-order: a parent always comes before its children
    visited: list[tuple[NodeRecord, int | None, str, dict]] = []
    pending = [(document, None, "")]
    while pending:
        doc, parent, key = pending.pop()
        record = NodeRecord.model_validate(doc)
        index = len(visited)
        children = {} if record.is_leaf else dict.fromkeys(record.children)
        visited.append((record, parent, key, children))
        if not record.is_leaf:
            for child_key, child in record.children.items():
                pending.append((child, index, child_key))

    node = None
    for record, parent, key, children in reversed(visited):
        node = _node_from_record(record, children)
        if parent is not None:
            visited[parent][3][key] = node
    return node


def dumps_tree(node: Node, indent: int | None = None) -> str:
    """Serialize ``node`` and its subtree to a JSON string.

    Raises
    ------
    ModelFormatError
        If a node cannot be represented in JSON (a non-finite threshold).
    """
    item_sep = "," if indent is not None else ", "

    def newline(level: int) -> str:
        return "" if indent is None else "\n" + " " * (indent * level)

    def node_parts(current: Node, level: int) -> list:
        fields = to_record(current).model_dump(mode="json", by_alias=True)
        parts: list = ["{"]
        for i, (name, value) in enumerate(fields.items()):
            parts.append((item_sep if i else "") + newline(level + 1) + json.dumps(name) + ": ")
            if name == "Children" and isinstance(current, Internal):
                for j, (key, child) in enumerate(current.children.items()):
                    parts.append(("{" if j == 0 else item_sep) + newline(level + 2)
                                 + json.dumps(key, ensure_ascii=False) + ": ")
                    parts.append((child, level + 2))
                parts.append(newline(level + 1) + "}")
            else:
                parts.append(json.dumps(value, ensure_ascii=False, allow_nan=False))
        parts.append(newline(level) + "}")
        return parts

    out: list[str] = []
    # items are finished text or (node, nesting level) still to expand
    pending: list = [(node, 0)]
    try:
        while pending:
            item = pending.pop()
            if isinstance(item, str):
                out.append(item)
            else:
                pending.extend(reversed(node_parts(*item)))
    except ValueError as exc:
        raise ModelFormatError(f"Error encoding model: {exc}") from exc
    return "".join(out)


@contextlib.contextmanager
def _nesting_allowance(levels: int):
    """Temporarily allow ``levels`` more nested frames than the current limit."""
    limit = sys.getrecursionlimit()
    sys.setrecursionlimit(limit + levels + _FRAME_MARGIN)
    try:
        yield
    finally:
        sys.setrecursionlimit(limit)


def loads_tree(text: str | bytes, source: str | None = None) -> Node:
    """Rebuild a tree from :func:`dumps_tree` output.

    Raises
    ------
    ModelFormatError
        If ``text`` is not a valid serialized tree.
    """
    opening = ("{", "[") if isinstance(text, str) else (b"{", b"[")
    try:
        with _nesting_allowance(sum(text.count(c) for c in opening)):
            document = json.loads(text)
        return to_node(document)
    except RecursionError as exc:
        raise ModelFormatError("Error decoding model: tree is nested too deeply", source) from exc
    except ValidationError as exc:
        raise ModelFormatError(f"Error decoding model: {exc.error_count()} validation error(s)\n{exc}",
                               source) from exc
    except ValueError as exc:
        raise ModelFormatError(f"Error decoding model: {exc}", source) from exc


def dump_tree(node: Node, path) -> Path:
    """Write ``node`` to ``path`` as indented JSON and return the path."""
    path = Path(path)
    path.write_text(dumps_tree(node, indent=2), encoding="utf-8")
    logger.info("Model saved to {}", path)
    return path


def load_tree(path) -> Node:
    """Read a tree written by :func:`dump_tree`.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    ModelFormatError
        If the file does not hold a valid serialized tree.
    """
    path = Path(path)
    node = loads_tree(path.read_text(encoding="utf-8"), source=str(path))
    logger.info("Model loaded from {}", path)
    return node
