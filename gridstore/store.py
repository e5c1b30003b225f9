# store.py
"""
Persistence store: the one explicit database handle.

A Store owns the engine and the physical schema. Every data-layer
operation takes the store it runs against; there is no module-level
connection. Each primitive runs in its own unit of work (``session()``)
unless the caller has opened a scoped ``transaction()``, in which case
all primitives issued inside it commit or roll back together.
"""

import logging
import threading
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .config import Settings
from .errors import StoreClosedError
from .models import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def _engine_options(url, echo):
    options = {"echo": echo}
    if url.get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            # every connection to :memory: is a new database
            options["poolclass"] = StaticPool
    return options


class Store:
    def __init__(self, url=None, echo=False):
        if url is None:
            url = Settings.from_env().database_url
        self.url = make_url(url)
        self.engine = create_engine(self.url, **_engine_options(self.url, echo))
        if self.dialect_name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self._sessionmaker = sessionmaker(bind=self.engine, expire_on_commit=False)
        self._local = threading.local()
        self._closed = False
        logger.info("Opened store %s", self.url.render_as_string(hide_password=True))

    @classmethod
    def open(cls, url=None, echo=False):
        """Create a store and make sure its schema exists."""
        store = cls(url, echo=echo)
        store.init_schema()
        return store

    @property
    def dialect_name(self):
        return self.engine.dialect.name

    @property
    def closed(self):
        return self._closed

    def _ensure_open(self):
        if self._closed:
            raise StoreClosedError("store is closed")

    def init_schema(self):
        """Create the four relations and their indexes if missing."""
        self._ensure_open()
        Base.metadata.create_all(self.engine, checkfirst=True)
        logger.info("Schema ready (%s)", ", ".join(sorted(Base.metadata.tables)))

    @property
    def in_transaction(self):
        return getattr(self._local, "session", None) is not None

    @contextmanager
    def session(self):
        """
        Yield a session for one unit of work.

        Commits on success and rolls back on error. Inside an active
        ``transaction()`` the transaction's session is yielded and left
        for the transaction to finish.
        """
        self._ensure_open()
        active = getattr(self._local, "session", None)
        if active is not None:
            yield active
            return

        session = self._sessionmaker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def transaction(self):
        """
        Scoped transaction: all operations inside commit as one unit and
        are rolled back together if anything raises. Nested calls join the
        outer transaction.
        """
        self._ensure_open()
        if self.in_transaction:
            yield self
            return

        session = self._sessionmaker()
        self._local.session = session
        try:
            yield self
            session.commit()
        except Exception:
            logger.debug("Rolling back scoped transaction")
            session.rollback()
            raise
        finally:
            self._local.session = None
            session.close()

    def close(self):
        if self._closed:
            return
        self.engine.dispose()
        self._closed = True
        logger.info("Closed store %s", self.url.render_as_string(hide_password=True))

    def __enter__(self):
        self._ensure_open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def __repr__(self):
        state = "closed" if self._closed else "open"
        return f"<Store {self.url.render_as_string(hide_password=True)} ({state})>"
