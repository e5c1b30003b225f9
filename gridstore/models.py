# models.py
"""
Physical schema: four fixed relations that hold every logical table.

    tables   one row per user table
    columns  typed field descriptors, cascade-deleted with their table
    rows     ordered records, cascade-deleted with their table
    cells    one value per (row, column), cascade-deleted with either side
"""

import threading
from datetime import datetime, timedelta, timezone

from sqlalchemy import JSON, Column, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# None is written as SQL NULL, not the JSON literal null
JsonColumn = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")

_clock_lock = threading.Lock()
_last_moment = None


def utcnow():
    """Current UTC time, strictly increasing within the process."""
    global _last_moment
    with _clock_lock:
        moment = datetime.now(timezone.utc)
        if _last_moment is not None and moment <= _last_moment:
            moment = _last_moment + timedelta(microseconds=1)
        _last_moment = moment
        return moment


def to_timestamp(moment):
    return moment.isoformat()


def from_timestamp(text):
    return datetime.fromisoformat(text)


class TableRecord(Base):
    __tablename__ = "tables"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    created_at = Column(String(40), nullable=False)

    __table_args__ = {"sqlite_autoincrement": True}

    def __repr__(self):
        return f"<TableRecord {self.id} {self.name!r}>"


class ColumnRecord(Base):
    __tablename__ = "columns"

    id = Column(Integer, primary_key=True, autoincrement=True)
    table_id = Column(Integer, ForeignKey("tables.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False)
    type = Column(String(64), nullable=False)
    options = Column(JsonColumn, nullable=True)
    created_at = Column(String(40), nullable=False)

    __table_args__ = (
        Index("idx_columns_table_id", "table_id"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<ColumnRecord {self.id} {self.name!r}:{self.type} table={self.table_id}>"


class RowRecord(Base):
    __tablename__ = "rows"

    id = Column(Integer, primary_key=True, autoincrement=True)
    table_id = Column(Integer, ForeignKey("tables.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    created_at = Column(String(40), nullable=False)

    __table_args__ = (
        Index("idx_rows_table_id", "table_id"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<RowRecord {self.id} table={self.table_id} position={self.position}>"


class CellRecord(Base):
    __tablename__ = "cells"

    id = Column(Integer, primary_key=True, autoincrement=True)
    row_id = Column(Integer, ForeignKey("rows.id", ondelete="CASCADE"), nullable=False)
    column_id = Column(Integer, ForeignKey("columns.id", ondelete="CASCADE"), nullable=False)
    value = Column(JsonColumn, nullable=True)
    updated_at = Column(String(40), nullable=False)

    __table_args__ = (
        UniqueConstraint("row_id", "column_id", name="unique_cell"),
        Index("idx_cells_row_id", "row_id"),
        Index("idx_cells_column_id", "column_id"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<CellRecord [{self.row_id},{self.column_id}] = {self.value}>"
