# cell.py
"""
Cells: the value bound to one (row, column) pair.

A cell is written only through ``Cell.set``, a single INSERT ... ON
CONFLICT statement keyed on the ``unique_cell`` constraint. There is no
read-then-branch step; the constraint alone decides between insert and
update.
"""

import logging

from sqlalchemy import select
from sqlalchemy.dialects import mysql, postgresql, sqlite

from . import models
from .codec import check_value
from .models import CellRecord

logger = logging.getLogger(__name__)

_cells = CellRecord.__table__


def upsert_statement(dialect_name, values):
    """Build the dialect's atomic insert-or-update for one cell."""
    if dialect_name in ("sqlite", "postgresql"):
        dialect = sqlite if dialect_name == "sqlite" else postgresql
        stmt = dialect.insert(_cells).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=[_cells.c.row_id, _cells.c.column_id],
            set_={"value": stmt.excluded.value, "updated_at": stmt.excluded.updated_at},
        )
    if dialect_name in ("mysql", "mariadb"):
        stmt = mysql.insert(_cells).values(**values)
        return stmt.on_duplicate_key_update(
            value=stmt.inserted.value,
            updated_at=stmt.inserted.updated_at,
        )
    raise NotImplementedError(f"cell upsert is not supported on {dialect_name!r}")


class Cell:
    def __init__(self, store, id, row_id, column_id, value=None, updated_at=None):
        self.store = store
        self.id = id
        self.row_id = row_id
        self.column_id = column_id
        self.value = value
        self.updated_at = updated_at

    @classmethod
    def _from_record(cls, store, record):
        return cls(
            store,
            record.id,
            record.row_id,
            record.column_id,
            record.value,
            models.from_timestamp(record.updated_at),
        )

    @classmethod
    def set(cls, store, row_id, column_id, value=None):
        """Insert or overwrite the cell at (row_id, column_id)."""
        check_value(value)
        values = {
            "row_id": row_id,
            "column_id": column_id,
            "value": value,
            "updated_at": models.to_timestamp(models.utcnow()),
        }
        with store.session() as session:
            session.execute(upsert_statement(store.dialect_name, values))
            record = session.scalars(
                select(CellRecord)
                .where(CellRecord.row_id == row_id, CellRecord.column_id == column_id)
                .execution_options(populate_existing=True)
            ).one()
            cell = cls._from_record(store, record)
        logger.debug("Set cell [%s,%s] (id=%s)", row_id, column_id, cell.id)
        return cell

    @classmethod
    def get(cls, store, row_id, column_id):
        with store.session() as session:
            record = session.scalars(
                select(CellRecord)
                .where(CellRecord.row_id == row_id, CellRecord.column_id == column_id)
                .execution_options(populate_existing=True)
            ).first()
            return cls._from_record(store, record) if record is not None else None

    @classmethod
    def get_by_row(cls, store, row_id):
        with store.session() as session:
            records = session.scalars(
                select(CellRecord)
                .where(CellRecord.row_id == row_id)
                .execution_options(populate_existing=True)
            ).all()
            return [cls._from_record(store, record) for record in records]

    def to_dict(self):
        return {
            "id": self.id,
            "row_id": self.row_id,
            "column_id": self.column_id,
            "value": self.value,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Cell [{self.row_id},{self.column_id}] = {self.value!r}>"
