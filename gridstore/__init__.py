"""
gridstore: user-defined tables on a fixed four-relation schema.

Tables, typed columns, ordered rows and per-cell JSON values are kept in
the ``tables`` / ``columns`` / ``rows`` / ``cells`` relations through an
explicit :class:`Store` handle.
"""

from .cell import Cell
from .codec import JsonValue, check_options, check_value
from .column import Column
from .column_types import ColumnKind, ColumnType
from .errors import (
    ConstraintViolation,
    GridStoreError,
    SerializationError,
    StoreClosedError,
    UnknownColumnError,
)
from .row import Row
from .store import Store
from .table import Table

__version__ = "0.1.0"

__all__ = [
    "Cell",
    "Column",
    "ColumnKind",
    "ColumnType",
    "ConstraintViolation",
    "GridStoreError",
    "JsonValue",
    "Row",
    "SerializationError",
    "Store",
    "StoreClosedError",
    "Table",
    "UnknownColumnError",
    "check_options",
    "check_value",
]
