# -*- coding: utf-8 -*-
"""
c45py.exceptions
================

Errors raised by the tree-induction engine and its I/O collaborators.

All of them subclass ``ValueError`` so callers that already guard estimator
calls with ``except ValueError`` keep working.  "No good split found" is not
an error: the builder turns it into a leaf.
"""

from __future__ import annotations


class AttributeNotFoundError(ValueError):
    """Raised when a named attribute is not a column of the dataset header.

    Attributes
    ----------
    attribute : str
        The attribute that was requested.
    header : list[str]
        Column names that were available.
    """

    def __init__(self, attribute: str, header: list[str]):
        super().__init__(f"Attribute not found in header: {attribute!r}")
        self.attribute = attribute
        self.header = list(header)


class DatasetError(ValueError):
    """Raised when tabular input cannot be turned into a typed dataset."""


class ModelFormatError(ValueError):
    """Raised when a serialized tree cannot be decoded.

    Attributes
    ----------
    source : str or None
        Path of the model file, when the tree was read from disk.
    """

    def __init__(self, message: str, source: str | None = None):
        if source is not None:
            message = f"{message} ({source})"
        super().__init__(message)
        self.source = source
