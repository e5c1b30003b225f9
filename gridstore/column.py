# column.py
"""Columns: typed field descriptors owned by one table."""

import logging

from sqlalchemy import select

from . import models
from .codec import check_options, load_options
from .column_types import ColumnType
from .models import ColumnRecord

logger = logging.getLogger(__name__)


class Column:
    def __init__(self, store, id, table_id, name, type=None, options=None, created_at=None):
        self.store = store
        self.id = id
        self.table_id = table_id
        self.name = name
        self.type = ColumnType.coerce(type if type is not None else ColumnType.text())
        self.options = options if options is not None else {}
        self.created_at = created_at

    @classmethod
    def _from_record(cls, store, record):
        options = load_options(record.options)
        return cls(
            store,
            record.id,
            record.table_id,
            record.name,
            ColumnType.decode(record.type, options),
            options,
            models.from_timestamp(record.created_at),
        )

    @classmethod
    def create(cls, store, table_id, name, type=None, options=None):
        column_type = ColumnType.coerce(type if type is not None else ColumnType.text())
        type_name, options = column_type.encode(check_options(options))
        with store.session() as session:
            record = ColumnRecord(
                table_id=table_id,
                name=name,
                type=type_name,
                options=options,
                created_at=models.to_timestamp(models.utcnow()),
            )
            session.add(record)
            session.flush()
            column = cls._from_record(store, record)
        logger.debug("Created column %s %r (%s) in table %s", column.id, name, type_name, table_id)
        return column

    @classmethod
    def get(cls, store, id):
        with store.session() as session:
            record = session.scalars(
                select(ColumnRecord)
                .where(ColumnRecord.id == id)
                .execution_options(populate_existing=True)
            ).first()
            return cls._from_record(store, record) if record is not None else None

    @classmethod
    def get_by_table(cls, store, table_id):
        """All columns of a table in creation order."""
        with store.session() as session:
            records = session.scalars(
                select(ColumnRecord)
                .where(ColumnRecord.table_id == table_id)
                .order_by(ColumnRecord.id)
            ).all()
            return [cls._from_record(store, record) for record in records]

    def to_dict(self):
        return {
            "id": self.id,
            "table_id": self.table_id,
            "name": self.name,
            "type": self.type.name,
            "options": self.options,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Column {self.id} {self.name!r}:{self.type}>"
