from gridstore.column_types import ColumnType
from gridstore.render import format_table, format_value
from gridstore.table import Table


def test_format_value():
    assert format_value(None) == ""
    assert format_value(True) == "true"
    assert format_value(3.5) == "3.5"
    assert format_value({"a": [1, 2]}) == '{"a":[1,2]}'
    assert format_value("plain") == "plain"


def test_table_without_columns(store):
    table = Table.create(store, "Bare")
    assert format_table(table) == 'Table "Bare" has no columns.'


def test_empty_table_has_one_blank_line(store):
    table = Table.create(store, "Empty")
    table.add_column("Name")
    lines = format_table(table).splitlines()
    assert lines[0] == f"Table: Empty (ID: {table.id})"
    assert lines[1] == "┌──────┬──────┐"
    assert lines[2] == "│ _row │ Name │"
    assert lines[3] == "╞══════╪══════╡"
    assert lines[4] == "│      │      │"
    assert lines[5] == "└──────┴──────┘"
    assert lines[6] == "0 row(s)"


def test_rows_render_in_position_order(store):
    table = Table.create(store, "Projects")
    title = table.add_column("Project Name", ColumnType.text())
    owner = table.add_column("Owner", ColumnType.reference(1))
    table.add_row(1).set_cell(title.id, "Mobile App")
    first = table.add_row(0)
    first.set_cell(title.id, "Website Redesign")
    first.set_cell(owner.id, 1)

    lines = format_table(table).splitlines()
    assert lines[2] == "│ _row │ Project Name     │ Owner │"
    assert lines[4] == "│ 0    │ Website Redesign │ 1     │"
    assert lines[5] == "│ 1    │ Mobile App       │       │"
    assert lines[-1] == "2 row(s)"
    widths = {len(line) for line in lines[1:-1]}
    assert len(widths) == 1
