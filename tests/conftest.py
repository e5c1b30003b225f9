import itertools
import logging
from datetime import datetime, timedelta, timezone

import pytest

from gridstore import models
from gridstore.app import create_app
from gridstore.config import Settings
from gridstore.store import Store


@pytest.fixture
def store():
    """Fresh in-memory store with the schema created."""
    store = Store.open("sqlite://")
    yield store
    store.close()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "gridstore.db"


@pytest.fixture
def clock(monkeypatch):
    """Replace the timestamp source with one that ticks a second per call."""
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    ticks = itertools.count()
    monkeypatch.setattr(models, "utcnow", lambda: start + timedelta(seconds=next(ticks)))
    return start


@pytest.fixture
def app(store):
    app = create_app(Settings(database_url="sqlite://"), store=store)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def reset_gridstore_logging():
    yield
    logger = logging.getLogger("gridstore")
    for handler in list(logger.handlers):
        if getattr(handler, "_gridstore_handler", False):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
