# cli.py
"""Command line entry point: ``gridstore <command>``."""

import argparse
import json
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from .column_types import ColumnType
from .config import Settings
from .errors import GridStoreError
from .logging_config import setup_logging
from .render import format_table
from .store import Store
from .table import Table

logger = logging.getLogger(__name__)


def cmd_init(args, store):
    print(f"Schema ready at {store.url.render_as_string(hide_password=True)}")


def cmd_tables(args, store):
    for table in Table.get_all(store):
        print(f"{table.id}\t{table.name}")


def cmd_show(args, store):
    table = Table.get(store, args.table_id)
    if table is None:
        raise GridStoreError(f"table {args.table_id} not found")
    print(format_table(table))


def cmd_demo(args, store):
    """Exercise the whole data layer against the configured store."""
    users = Table.create(store, "Users")
    name_col = users.add_column("Name", ColumnType.text())
    age_col = users.add_column("Age", ColumnType.number())
    email_col = users.add_column("Email", ColumnType.text())
    print(f"Created table {users.name!r} (ID: {users.id}) with columns Name, Age, Email")

    people = [
        ("Alice Johnson", 28, "alice@example.com"),
        ("Bob Smith", 35, "bob@example.com"),
        ("Carol White", 42, "carol@example.com"),
    ]
    user_rows = [
        users.add_row_with_cells({name_col.id: name, age_col.id: age, email_col.id: email})
        for name, age, email in people
    ]
    print(json.dumps(users.get_data(), indent=2))

    projects = Table.create(store, "Projects")
    project_name = projects.add_column("Project Name", ColumnType.text())
    owner = projects.add_column("Owner", ColumnType.reference(users.id))
    for title, owner_row in (("Website Redesign", user_rows[0]), ("Mobile App", user_rows[1])):
        projects.add_row_with_cells({project_name.id: title, owner.id: owner_row.id})
    print(format_table(projects))

    user_rows[0].set_cell(age_col.id, 29)
    print(f"Updated age: {users.get_data()[0]['Age']}")
    print(f"Email of row {user_rows[0].id}: {user_rows[0].get_cell(email_col.id).value}")

    for i in range(args.rows):
        users.add_row_with_cells({"Name": f"User {i}", "Age": 20 + i, "Email": f"user{i}@example.com"})
    print(f"Total rows in {users.name}: {len(users.get_rows())}")

    preview = users.copy(f"{users.name}_Preview", limit=args.preview)
    print(format_table(preview))


def cmd_serve(args, store):
    from .app import create_app

    settings = Settings.from_env(database_url=args.database_url)
    app = create_app(settings, store=store)
    app.run(debug=args.debug, host=args.host, port=args.port or settings.port)


def _build_parser():
    parser = argparse.ArgumentParser("gridstore")
    parser.add_argument("--database-url", default=None, help="SQLAlchemy URL (default: $DATABASE_URL)")
    parser.add_argument("--log-level", default=None)
    parser.add_argument("--echo", action="store_true", help="log every SQL statement")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("init")
    sp.set_defaults(func=cmd_init)

    sp = sub.add_parser("tables")
    sp.set_defaults(func=cmd_tables)

    sp = sub.add_parser("show")
    sp.add_argument("table_id", type=int)
    sp.set_defaults(func=cmd_show)

    sp = sub.add_parser("demo")
    sp.add_argument("--rows", type=int, default=100, help="extra generated rows")
    sp.add_argument("--preview", type=int, default=10, help="rows in the preview copy")
    sp.set_defaults(func=cmd_demo)

    sp = sub.add_parser("serve")
    sp.add_argument("--host", default="0.0.0.0")
    sp.add_argument("--port", type=int, default=None)
    sp.add_argument("--debug", action="store_true")
    sp.set_defaults(func=cmd_serve)

    return parser


def main(argv=None):
    parser = _build_parser()
    args = parser.parse_args(argv)
    settings = Settings.from_env(
        database_url=args.database_url,
        log_level=args.log_level,
        sql_echo=args.echo or None,
    )
    setup_logging(settings.log_level)

    try:
        with Store.open(settings.database_url, echo=settings.sql_echo) as store:
            args.func(args, store)
    except (GridStoreError, SQLAlchemyError) as exc:
        logger.debug("Command %s failed", args.cmd, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
