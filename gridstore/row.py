# row.py
"""Rows: ordered record containers owned by one table."""

import logging

from sqlalchemy import delete, func, select

from . import models
from .cell import Cell
from .models import RowRecord

logger = logging.getLogger(__name__)


class Row:
    def __init__(self, store, id, table_id, position=0, created_at=None):
        self.store = store
        self.id = id
        self.table_id = table_id
        self.position = position
        self.created_at = created_at

    @classmethod
    def _from_record(cls, store, record):
        return cls(
            store,
            record.id,
            record.table_id,
            record.position,
            models.from_timestamp(record.created_at),
        )

    @classmethod
    def create(cls, store, table_id, position=None):
        """
        Append a row to a table.

        Without an explicit position the row gets the table's current row
        count, not max(position) + 1, so after deletions two rows can end
        up sharing a position.
        """
        with store.session() as session:
            if position is None:
                position = session.scalar(
                    select(func.count(RowRecord.id)).where(RowRecord.table_id == table_id)
                )
            record = RowRecord(
                table_id=table_id,
                position=position,
                created_at=models.to_timestamp(models.utcnow()),
            )
            session.add(record)
            session.flush()
            row = cls._from_record(store, record)
        logger.debug("Created row %s at position %s in table %s", row.id, position, table_id)
        return row

    @classmethod
    def get(cls, store, id):
        with store.session() as session:
            record = session.scalars(
                select(RowRecord)
                .where(RowRecord.id == id)
                .execution_options(populate_existing=True)
            ).first()
            return cls._from_record(store, record) if record is not None else None

    @classmethod
    def get_by_table(cls, store, table_id):
        """Rows ordered by position; equal positions fall back to id order."""
        with store.session() as session:
            records = session.scalars(
                select(RowRecord)
                .where(RowRecord.table_id == table_id)
                .order_by(RowRecord.position, RowRecord.id)
                .execution_options(populate_existing=True)
            ).all()
            return [cls._from_record(store, record) for record in records]

    def set_cell(self, column_id, value=None):
        return Cell.set(self.store, self.id, column_id, value)

    def get_cell(self, column_id):
        return Cell.get(self.store, self.id, column_id)

    def get_all_cells(self):
        return Cell.get_by_row(self.store, self.id)

    def delete(self):
        """Delete the row; its cells go with it."""
        with self.store.session() as session:
            session.execute(delete(RowRecord).where(RowRecord.id == self.id))
        logger.debug("Deleted row %s from table %s", self.id, self.table_id)

    def to_dict(self):
        return {
            "id": self.id,
            "table_id": self.table_id,
            "position": self.position,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Row {self.id} table={self.table_id} position={self.position}>"
