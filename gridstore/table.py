# table.py
"""
Tables: the user-facing aggregate over columns, rows and cells.

``Table.get_data`` projects the sparse cell store into one flat record per
row. Each record carries the row's id and position under ``_rowId`` and
``_position``, followed by one field per column in creation order; a cell
that was never written projects to None, same as an explicit null.
"""

import logging

from sqlalchemy import delete, select

from . import models
from .column import Column
from .errors import UnknownColumnError
from .models import CellRecord, RowRecord, TableRecord
from .row import Row

logger = logging.getLogger(__name__)

ROW_ID_FIELD = "_rowId"
POSITION_FIELD = "_position"


class Table:
    def __init__(self, store, id, name="", created_at=None):
        self.store = store
        self.id = id
        self.name = name
        self.created_at = created_at

    @classmethod
    def _from_record(cls, store, record):
        return cls(store, record.id, record.name, models.from_timestamp(record.created_at))

    # ----------------- Lifecycle -----------------
    @classmethod
    def create(cls, store, name):
        with store.session() as session:
            record = TableRecord(name=name, created_at=models.to_timestamp(models.utcnow()))
            session.add(record)
            session.flush()
            table = cls._from_record(store, record)
        logger.debug("Created table %s %r", table.id, name)
        return table

    @classmethod
    def get(cls, store, id):
        with store.session() as session:
            record = session.scalars(
                select(TableRecord)
                .where(TableRecord.id == id)
                .execution_options(populate_existing=True)
            ).first()
            return cls._from_record(store, record) if record is not None else None

    @classmethod
    def get_all(cls, store):
        with store.session() as session:
            records = session.scalars(
                select(TableRecord)
                .order_by(TableRecord.id)
                .execution_options(populate_existing=True)
            ).all()
            return [cls._from_record(store, record) for record in records]

    def delete(self):
        """Delete the table; columns, rows and cells cascade."""
        with self.store.session() as session:
            session.execute(delete(TableRecord).where(TableRecord.id == self.id))
        logger.debug("Deleted table %s %r", self.id, self.name)

    # ----------------- Columns -----------------
    def add_column(self, name, type=None, options=None):
        return Column.create(self.store, self.id, name, type, options)

    def get_columns(self):
        return Column.get_by_table(self.store, self.id)

    def get_column_by_name(self, name):
        for column in self.get_columns():
            if column.name == name:
                return column
        return None

    # ----------------- Rows -----------------
    def add_row(self, position=None):
        return Row.create(self.store, self.id, position)

    def get_rows(self):
        return Row.get_by_table(self.store, self.id)

    def add_row_with_cells(self, values, position=None):
        """
        Create a row and write ``values`` into it as one transaction.

        ``values`` maps column ids or column names to cell values. If any
        value fails (unknown column, unserializable value, constraint
        error) the row is not created either.
        """
        with self.store.transaction():
            columns = self.get_columns()
            by_id = {column.id: column for column in columns}
            by_name = {}
            for column in columns:
                by_name.setdefault(column.name, column)

            row = self.add_row(position)
            for key, value in values.items():
                if isinstance(key, int) and not isinstance(key, bool):
                    column = by_id.get(key)
                else:
                    column = by_name.get(key)
                if column is None:
                    raise UnknownColumnError(f"table {self.id} has no column {key!r}")
                row.set_cell(column.id, value)
        return row

    # ----------------- Projection -----------------
    def get_data(self):
        with self.store.transaction():
            columns = self.get_columns()
            rows = self.get_rows()
            with self.store.session() as session:
                stored = session.execute(
                    select(CellRecord.row_id, CellRecord.column_id, CellRecord.value)
                    .join(RowRecord, RowRecord.id == CellRecord.row_id)
                    .where(RowRecord.table_id == self.id)
                ).all()

        values = {(row_id, column_id): value for row_id, column_id, value in stored}
        data = []
        for row in rows:
            record = {ROW_ID_FIELD: row.id, POSITION_FIELD: row.position}
            for column in columns:
                record[column.name] = values.get((row.id, column.id))
            data.append(record)
        return data

    def copy(self, name, limit=None):
        """
        Copy columns and the first ``limit`` rows (all rows when None) into
        a new table. Positions in the copy are renumbered from 0.
        """
        with self.store.transaction():
            target = Table.create(self.store, name)
            column_map = {}
            for column in self.get_columns():
                column_map[column.id] = target.add_column(column.name, column.type, column.options).id
            for index, row in enumerate(self.get_rows()[:limit]):
                new_row = target.add_row(index)
                for cell in row.get_all_cells():
                    if cell.column_id not in column_map:
                        continue
                    new_row.set_cell(column_map[cell.column_id], cell.value)
        logger.debug("Copied table %s into %s %r", self.id, target.id, name)
        return target

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Table {self.id} {self.name!r}>"
