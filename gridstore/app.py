# app.py
"""
Flask backend over the grid store.

Exposes tables, columns, rows and cells as JSON resources. The store is
created by the app factory (or passed in) and kept in
``app.extensions["gridstore"]``; nothing is module-global.
"""

import logging

from flask import Flask, Response, current_app, jsonify, request
from flask_cors import CORS
from sqlalchemy.exc import IntegrityError

from .cell import Cell
from .column import Column
from .config import Settings
from .errors import SerializationError, UnknownColumnError
from .render import format_table
from .row import Row
from .store import Store
from .table import Table

logger = logging.getLogger(__name__)

EXTENSION_KEY = "gridstore"


def create_app(settings=None, store=None):
    settings = settings or Settings.from_env()
    if store is None:
        store = Store.open(settings.database_url, echo=settings.sql_echo)

    app = Flask(__name__)
    CORS(app)
    app.json.sort_keys = False  # preserve order in JSON
    app.config["GRIDSTORE_SETTINGS"] = settings
    app.extensions[EXTENSION_KEY] = store

    register_error_handlers(app)
    register_routes(app)
    return app


def get_store():
    return current_app.extensions[EXTENSION_KEY]


def error(message, status):
    return jsonify({"status": "error", "message": message}), status


def _json_body():
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else None


def _find_table(table_id):
    return Table.get(get_store(), table_id)


# ----------------- Error Handling -----------------
def register_error_handlers(app):
    @app.errorhandler(SerializationError)
    def handle_serialization_error(exc):
        return error(f"Value cannot be serialized: {exc}", 400)

    @app.errorhandler(UnknownColumnError)
    def handle_unknown_column(exc):
        return error(str(exc), 400)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(exc):
        logger.warning("Integrity error: %s", exc.orig)
        return error("Database integrity error", 409)


# ----------------- Routes -----------------
def register_routes(app):
    @app.route("/")
    def home():
        return """
        <h1>Grid Store Backend</h1>
        <p>Endpoints:</p>
        <ul>
            <li>GET|POST /tables  (JSON: {"name": "..."})</li>
            <li>GET|DELETE /tables/&lt;id&gt;</li>
            <li>GET|POST /tables/&lt;id&gt;/columns  (JSON: {"name": "...", "type": "text", "options": {}})</li>
            <li>GET|POST /tables/&lt;id&gt;/rows  (JSON: {"position": 0, "cells": {"Name": "..."}})</li>
            <li>GET /tables/&lt;id&gt;/data</li>
            <li>GET /tables/&lt;id&gt;/render</li>
            <li>DELETE /rows/&lt;id&gt;</li>
            <li>GET /rows/&lt;id&gt;/cells</li>
            <li>GET|PUT /rows/&lt;id&gt;/cells/&lt;column_id&gt;  (JSON: {"value": ...})</li>
        </ul>
        """

    @app.route("/tables", methods=["GET"])
    def list_tables():
        return jsonify([table.to_dict() for table in Table.get_all(get_store())])

    @app.route("/tables", methods=["POST"])
    def create_table():
        """
        POST /tables
        Body: { "name": "Users" }
        Names need not be unique.
        """
        payload = _json_body()
        if not payload or not isinstance(payload.get("name"), str):
            return error("Missing 'name'", 400)
        table = Table.create(get_store(), payload["name"])
        return jsonify(table.to_dict()), 201

    @app.route("/tables/<int:table_id>", methods=["GET"])
    def get_table(table_id):
        table = _find_table(table_id)
        if table is None:
            return error(f"Table {table_id} not found", 404)
        body = table.to_dict()
        body["columns"] = [column.to_dict() for column in table.get_columns()]
        return jsonify(body)

    @app.route("/tables/<int:table_id>", methods=["DELETE"])
    def delete_table(table_id):
        table = _find_table(table_id)
        if table is None:
            return error(f"Table {table_id} not found", 404)
        table.delete()
        return jsonify({"status": "success"})

    @app.route("/tables/<int:table_id>/columns", methods=["GET"])
    def list_columns(table_id):
        table = _find_table(table_id)
        if table is None:
            return error(f"Table {table_id} not found", 404)
        return jsonify([column.to_dict() for column in table.get_columns()])

    @app.route("/tables/<int:table_id>/columns", methods=["POST"])
    def add_column(table_id):
        """
        POST /tables/<id>/columns
        Body: { "name": "Owner", "type": "reference", "options": {"referenceTableId": 1} }
        The type is recorded as given.
        """
        table = _find_table(table_id)
        if table is None:
            return error(f"Table {table_id} not found", 404)
        payload = _json_body()
        if not payload or not isinstance(payload.get("name"), str):
            return error("Missing 'name'", 400)
        options = payload.get("options")
        if options is not None and not isinstance(options, dict):
            return error("'options' must be an object", 400)
        column = table.add_column(payload["name"], payload.get("type") or "text", options)
        return jsonify(column.to_dict()), 201

    @app.route("/tables/<int:table_id>/rows", methods=["GET"])
    def list_rows(table_id):
        table = _find_table(table_id)
        if table is None:
            return error(f"Table {table_id} not found", 404)
        return jsonify([row.to_dict() for row in table.get_rows()])

    @app.route("/tables/<int:table_id>/rows", methods=["POST"])
    def add_row(table_id):
        """
        POST /tables/<id>/rows
        Body: { "position": 3, "cells": {"Name": "Alice", "Age": 30} }
        Both fields are optional. The row and its cells are written in one
        transaction.
        """
        table = _find_table(table_id)
        if table is None:
            return error(f"Table {table_id} not found", 404)
        payload = request.get_json(silent=True) or {}
        if not isinstance(payload, dict):
            return error("Body must be a JSON object", 400)

        position = payload.get("position")
        if position is not None and (isinstance(position, bool) or not isinstance(position, int)):
            return error("'position' must be an integer", 400)
        cells = payload.get("cells") or {}
        if not isinstance(cells, dict):
            return error("'cells' must be an object keyed by column name", 400)

        row = table.add_row_with_cells(cells, position)
        body = row.to_dict()
        body["cells"] = [cell.to_dict() for cell in row.get_all_cells()]
        return jsonify(body), 201

    @app.route("/tables/<int:table_id>/data", methods=["GET"])
    def table_data(table_id):
        table = _find_table(table_id)
        if table is None:
            return error(f"Table {table_id} not found", 404)
        return jsonify(table.get_data())

    @app.route("/tables/<int:table_id>/render", methods=["GET"])
    def render_table(table_id):
        table = _find_table(table_id)
        if table is None:
            return error(f"Table {table_id} not found", 404)
        return Response(format_table(table) + "\n", mimetype="text/plain")

    @app.route("/rows/<int:row_id>", methods=["DELETE"])
    def delete_row(row_id):
        row = Row.get(get_store(), row_id)
        if row is None:
            return error(f"Row {row_id} not found", 404)
        row.delete()
        return jsonify({"status": "success"})

    @app.route("/rows/<int:row_id>/cells", methods=["GET"])
    def list_cells(row_id):
        row = Row.get(get_store(), row_id)
        if row is None:
            return error(f"Row {row_id} not found", 404)
        return jsonify([cell.to_dict() for cell in row.get_all_cells()])

    @app.route("/rows/<int:row_id>/cells/<int:column_id>", methods=["GET"])
    def get_cell(row_id, column_id):
        cell = Cell.get(get_store(), row_id, column_id)
        if cell is None:
            return error(f"No cell at row {row_id}, column {column_id}", 404)
        return jsonify(cell.to_dict())

    @app.route("/rows/<int:row_id>/cells/<int:column_id>", methods=["PUT"])
    def set_cell(row_id, column_id):
        """
        PUT /rows/<row_id>/cells/<column_id>
        Body: { "value": <any JSON> }
        Inserts the cell or overwrites its value.
        """
        payload = _json_body()
        if payload is None or "value" not in payload:
            return error("Missing 'value'", 400)
        store = get_store()
        row = Row.get(store, row_id)
        if row is None:
            return error(f"Row {row_id} not found", 404)
        column = Column.get(store, column_id)
        if column is None:
            return error(f"Column {column_id} not found", 404)
        if column.table_id != row.table_id:
            return error(f"Column {column_id} does not belong to table {row.table_id}", 400)
        return jsonify(row.set_cell(column_id, payload["value"]).to_dict())
