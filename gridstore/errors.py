# errors.py
"""
Error taxonomy for the grid store.

Lookups that find nothing return None. Everything below is fatal and is
propagated to the caller unchanged.
"""

from sqlalchemy.exc import IntegrityError

# A duplicate (row_id, column_id) insert or a dangling parent id.
ConstraintViolation = IntegrityError


class GridStoreError(Exception):
    """Base class for errors raised by gridstore itself."""


class SerializationError(GridStoreError, ValueError):
    """A cell value or column option bag cannot be encoded."""


class StoreClosedError(GridStoreError, RuntimeError):
    """An operation was attempted on a store that has been closed."""


class UnknownColumnError(GridStoreError, KeyError):
    """A column named by id or name does not belong to the table."""

    def __str__(self):
        return Exception.__str__(self)
