"""
Rows and cells: value round-trip, upsert semantics, constraint errors and
cascade on row/column removal.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import delete, func, select, text

from gridstore import models
from gridstore.cell import Cell, upsert_statement
from gridstore.errors import ConstraintViolation, SerializationError
from gridstore.models import CellRecord, ColumnRecord
from gridstore.row import Row
from gridstore.table import Table


@pytest.fixture
def table(store):
    table = Table.create(store, "Things")
    table.add_column("Value", "text")
    table.add_column("Extra", "number")
    return table


@pytest.fixture
def column(table):
    return table.get_columns()[0]


@pytest.fixture
def row(table):
    return table.add_row()


def _count_cells(store, row_id, column_id):
    with store.session() as session:
        return session.scalar(
            select(func.count(CellRecord.id)).where(
                CellRecord.row_id == row_id, CellRecord.column_id == column_id
            )
        )


# ═══════════════════════════════════════════════════════════════════════════
# Values
# ═══════════════════════════════════════════════════════════════════════════

@pytest.mark.parametrize(
    "value",
    [
        "Alice",
        30,
        3.14159,
        True,
        False,
        None,
        [1, "two", [3.0, None]],
        {"name": "Alice", "tags": ["a", "b"], "meta": {"active": True, "score": None}},
    ],
)
def test_set_then_get_returns_equal_value(row, column, value):
    row.set_cell(column.id, value)
    assert row.get_cell(column.id).value == value


def test_bool_is_not_confused_with_int(row, column):
    row.set_cell(column.id, True)
    value = row.get_cell(column.id).value
    assert value is True


def test_unserializable_value_is_rejected_without_writing(store, row, column):
    with pytest.raises(SerializationError):
        row.set_cell(column.id, object())
    assert row.get_cell(column.id) is None
    assert _count_cells(store, row.id, column.id) == 0


def test_failed_update_keeps_previous_value(row, column):
    row.set_cell(column.id, "kept")
    with pytest.raises(SerializationError):
        row.set_cell(column.id, {"bad": float("nan")})
    assert row.get_cell(column.id).value == "kept"


def test_cyclic_value_is_rejected_without_writing(store, row, column):
    value = []
    value.append(value)
    with pytest.raises(SerializationError):
        row.set_cell(column.id, value)
    assert _count_cells(store, row.id, column.id) == 0


def test_null_is_sql_null_at_rest_and_json_otherwise(store, table, row):
    value, extra = table.get_columns()
    row.set_cell(value.id, None)
    row.set_cell(extra.id, {"a": [1, None]})
    with store.engine.connect() as conn:
        stored = dict(
            conn.execute(
                text("SELECT column_id, value FROM cells WHERE row_id = :row_id"), {"row_id": row.id}
            ).all()
        )
    assert stored[value.id] is None
    assert stored[extra.id].replace(" ", "") == '{"a":[1,null]}'


def test_updated_at_advances_on_every_upsert(row, column):
    stamps = [row.set_cell(column.id, i).updated_at for i in range(20)]
    assert all(earlier < later for earlier, later in zip(stamps, stamps[1:]))


def test_updated_at_advances_when_the_wall_clock_stalls(monkeypatch, row, column):
    frozen = datetime(2024, 6, 1, tzinfo=timezone.utc)

    class FrozenDatetime(datetime):
        @classmethod
        def now(cls, tz=None):
            return frozen

    monkeypatch.setattr(models, "datetime", FrozenDatetime)
    first = row.set_cell(column.id, "v1")
    second = row.set_cell(column.id, "v2")
    assert second.updated_at > first.updated_at


# ═══════════════════════════════════════════════════════════════════════════
# Upsert
# ═══════════════════════════════════════════════════════════════════════════

def test_second_set_overwrites_the_same_cell(store, clock, row, column):
    first = row.set_cell(column.id, "v1")
    second = row.set_cell(column.id, "v2")

    assert second.id == first.id
    assert second.value == "v2"
    assert second.updated_at > first.updated_at
    assert _count_cells(store, row.id, column.id) == 1
    assert row.get_cell(column.id).value == "v2"


def test_upsert_inside_transaction_sees_latest_value(store, row, column):
    with store.transaction():
        row.set_cell(column.id, "v1")
        assert row.set_cell(column.id, "v2").value == "v2"
        assert row.get_cell(column.id).value == "v2"
    assert row.get_cell(column.id).value == "v2"


def test_set_to_null_keeps_the_cell(store, row, column):
    row.set_cell(column.id, "something")
    cleared = row.set_cell(column.id, None)
    assert cleared.value is None
    assert _count_cells(store, row.id, column.id) == 1


def test_direct_insert_collides_with_unique_constraint(store, row, column):
    row.set_cell(column.id, "v1")
    with pytest.raises(ConstraintViolation):
        with store.session() as session:
            session.add(CellRecord(row_id=row.id, column_id=column.id, value="v2", updated_at="x"))
            session.flush()
    assert row.get_cell(column.id).value == "v1"


def test_cell_for_missing_row_or_column_fails(store, row, column):
    with pytest.raises(ConstraintViolation):
        Cell.set(store, 9999, column.id, 1)
    with pytest.raises(ConstraintViolation):
        row.set_cell(9999, 1)


def test_upsert_statement_rejects_unknown_dialect():
    with pytest.raises(NotImplementedError):
        upsert_statement("oracle", {"row_id": 1, "column_id": 1, "value": None, "updated_at": "x"})


@pytest.mark.parametrize("dialect", ["sqlite", "postgresql", "mysql", "mariadb"])
def test_upsert_statement_builds_for_supported_dialects(dialect):
    stmt = upsert_statement(dialect, {"row_id": 1, "column_id": 2, "value": "1", "updated_at": "x"})
    assert stmt.table.name == "cells"


# ═══════════════════════════════════════════════════════════════════════════
# Row reads
# ═══════════════════════════════════════════════════════════════════════════

def test_get_all_cells_returns_only_this_rows_cells(table, row):
    value, extra = table.get_columns()
    other = table.add_row()
    row.set_cell(value.id, "a")
    row.set_cell(extra.id, 1)
    other.set_cell(value.id, "b")

    cells = row.get_all_cells()
    assert sorted((c.column_id, c.value) for c in cells) == [(value.id, "a"), (extra.id, 1)]
    assert all(c.row_id == row.id for c in cells)


def test_get_missing_row_and_cell_return_none(store, row, column):
    assert Row.get(store, 9999) is None
    assert row.get_cell(column.id) is None
    assert Cell.get_by_row(store, 9999) == []


def test_row_round_trips_through_get(store, row):
    fetched = Row.get(store, row.id)
    assert (fetched.id, fetched.table_id, fetched.position) == (row.id, row.table_id, 0)
    assert fetched.created_at == row.created_at


# ═══════════════════════════════════════════════════════════════════════════
# Cascade
# ═══════════════════════════════════════════════════════════════════════════

def test_deleting_a_row_removes_its_cells(store, table, row, column):
    row.set_cell(column.id, "gone")
    survivor = table.add_row()
    survivor.set_cell(column.id, "stays")

    row.delete()

    assert Row.get(store, row.id) is None
    assert Cell.get(store, row.id, column.id) is None
    assert survivor.get_cell(column.id).value == "stays"


def test_removing_a_column_removes_its_cells(store, row, column):
    row.set_cell(column.id, "gone")
    with store.session() as session:
        session.execute(delete(ColumnRecord).where(ColumnRecord.id == column.id))
    assert Cell.get(store, row.id, column.id) is None
    assert row.get_all_cells() == []


def test_to_dict_views(row, column):
    cell = row.set_cell(column.id, [1, 2])
    assert cell.to_dict()["value"] == [1, 2]
    assert row.to_dict()["position"] == 0
    assert column.to_dict()["type"] == "text"
