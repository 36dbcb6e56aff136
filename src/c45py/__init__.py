# c45py/__init__.py
"""
c45py: C4.5-style decision trees over typed tables (scikit-learn style).

Exports:
    - C45Classifier
    - build_tree, predict
    - Dataset, ColumnType, load_csv
    - dump_tree, load_tree
    - enable_logging
    - AttributeNotFoundError, DatasetError, ModelFormatError
"""
from loguru import logger

from .exceptions import AttributeNotFoundError, DatasetError, ModelFormatError
from .logging import PACKAGE_NAME, enable_logging
from .node import Internal, Leaf
from .persistence import dump_tree, load_tree
from .table import ColumnType, Dataset, load_csv
from .tree import C45Classifier, build_tree, predict

logger.disable(PACKAGE_NAME)

__all__ = [
    "AttributeNotFoundError",
    "C45Classifier",
    "ColumnType",
    "Dataset",
    "DatasetError",
    "Internal",
    "Leaf",
    "ModelFormatError",
    "build_tree",
    "dump_tree",
    "enable_logging",
    "load_csv",
    "load_tree",
    "predict",
]
__version__ = "0.1.0"
