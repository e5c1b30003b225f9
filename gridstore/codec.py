# codec.py
"""
Validation of cell values and column option bags before they are written.

A value is a tagged JSON value: None, bool, int, float, str, an ordered
sequence or a str-keyed mapping, nested arbitrarily. Persistence itself
goes through the SQLAlchemy JSON column type (JSONB on PostgreSQL); this
module only makes sure nothing reaches it that the type cannot encode, so
callers see SerializationError rather than a driver or statement error.
"""

import math
from typing import Any, Dict, List, Optional, Union

from .errors import SerializationError

JsonValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


def _check(value, path, active):
    if value is None or isinstance(value, (bool, str, int)):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise SerializationError(f"{path}: non-finite float {value!r} cannot be encoded")
        return
    if not isinstance(value, (list, tuple, dict)):
        raise SerializationError(f"{path}: {type(value).__name__} is not serializable")

    marker = id(value)
    if marker in active:
        raise SerializationError(f"{path}: circular reference")
    active.add(marker)
    try:
        if isinstance(value, dict):
            for key, item in value.items():
                if not isinstance(key, str):
                    raise SerializationError(f"{path}: mapping key {key!r} is not a string")
                _check(item, f"{path}.{key}", active)
        else:
            for i, item in enumerate(value):
                _check(item, f"{path}[{i}]", active)
    finally:
        active.discard(marker)


def check_value(value: JsonValue) -> JsonValue:
    """Return ``value`` unchanged if it can be stored, else raise SerializationError."""
    try:
        _check(value, "$", set())
    except RecursionError:
        raise SerializationError("$: value is nested too deeply") from None
    return value


def check_options(options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Validate a column option bag; None means an empty bag."""
    if options is None:
        return {}
    if not isinstance(options, dict):
        raise SerializationError(f"column options must be a mapping, got {type(options).__name__}")
    check_value(options)
    return options


def load_options(stored) -> Dict[str, Any]:
    return stored if isinstance(stored, dict) else {}
