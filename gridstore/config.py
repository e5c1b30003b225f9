# config.py
"""
Runtime configuration, read from the environment after loading ``.env``.
"""

import os
from dataclasses import dataclass, replace

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///gridstore.db"
DEFAULT_PORT = 5000

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name, default=False):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    sql_echo: bool = False
    log_level: str = "INFO"
    port: int = DEFAULT_PORT

    @classmethod
    def from_env(cls, **overrides):
        """Build settings from the environment; non-None overrides win."""
        settings = cls(
            database_url=os.environ.get("DATABASE_URL") or DEFAULT_DATABASE_URL,
            sql_echo=_env_flag("GRIDSTORE_SQL_ECHO"),
            log_level=os.environ.get("GRIDSTORE_LOG_LEVEL", "INFO").upper(),
            port=int(os.environ.get("PORT", DEFAULT_PORT)),
        )
        overrides = {key: value for key, value in overrides.items() if value is not None}
        return replace(settings, **overrides)
