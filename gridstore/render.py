# render.py
"""Fixed-width text grid for a table's rows."""

import json

MIN_WIDTH = 3


def format_value(value):
    if value is None:
        return ""
    if isinstance(value, (list, dict)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _pad(text, width):
    return text + " " * max(0, width - len(text))


def format_table(table):
    columns = table.get_columns()
    if not columns:
        return f'Table "{table.name}" has no columns.'

    headers = ["_row"] + [column.name for column in columns]
    body = []
    for row in table.get_rows():
        values = {cell.column_id: cell.value for cell in row.get_all_cells()}
        line = [str(row.position)]
        line.extend(format_value(values.get(column.id)) for column in columns)
        body.append(line)

    widths = [
        max([len(header), MIN_WIDTH] + [len(line[i]) for line in body])
        for i, header in enumerate(headers)
    ]

    def rule(left, fill, cross, right):
        return left + cross.join(fill * (w + 2) for w in widths) + right

    def line_of(cells):
        return "│" + "│".join(" " + _pad(cell, widths[i]) + " " for i, cell in enumerate(cells)) + "│"

    out = [
        f"Table: {table.name} (ID: {table.id})",
        rule("┌", "─", "┬", "┐"),
        line_of(headers),
        rule("╞", "═", "╪", "╡"),
    ]
    if body:
        out.extend(line_of(line) for line in body)
    else:
        out.append(line_of([""] * len(headers)))
    out.append(rule("└", "─", "┴", "┘"))
    out.append(f"{len(body)} row(s)")
    return "\n".join(out)
