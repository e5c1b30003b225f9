# column_types.py
"""
Column type descriptors.

The physical schema keeps a column's type as a bare string plus an opaque
option bag. Here it is decoded once into a ColumnType. The type is
descriptive metadata only: cell values are never checked against it, and
a name outside ColumnKind is recorded as given (its ``kind`` is None).

To add a new variant, add a member to ColumnKind. If the variant carries
parameters, give ColumnType a field for them and map that field in
``decode`` / ``encode`` the way REFERENCE maps ``target_table_id``.
"""

import enum
from dataclasses import dataclass
from typing import Any, Dict, Optional

REFERENCE_TABLE_KEY = "referenceTableId"


class ColumnKind(str, enum.Enum):
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    REFERENCE = "reference"


@dataclass(frozen=True)
class ColumnType:
    name: str
    target_table_id: Optional[int] = None

    @property
    def kind(self) -> Optional[ColumnKind]:
        try:
            return ColumnKind(self.name)
        except ValueError:
            return None

    @property
    def is_reference(self):
        return self.kind is ColumnKind.REFERENCE

    @classmethod
    def text(cls):
        return cls(ColumnKind.TEXT.value)

    @classmethod
    def number(cls):
        return cls(ColumnKind.NUMBER.value)

    @classmethod
    def boolean(cls):
        return cls(ColumnKind.BOOLEAN.value)

    @classmethod
    def date(cls):
        return cls(ColumnKind.DATE.value)

    @classmethod
    def reference(cls, target_table_id: int):
        return cls(ColumnKind.REFERENCE.value, target_table_id)

    @classmethod
    def coerce(cls, value) -> "ColumnType":
        """Accept a ColumnType, a ColumnKind or a plain type name."""
        if isinstance(value, ColumnType):
            return value
        if isinstance(value, ColumnKind):
            return cls(value.value)
        return cls(str(value))

    @classmethod
    def decode(cls, name: str, options: Dict[str, Any]) -> "ColumnType":
        target = None
        if name == ColumnKind.REFERENCE.value:
            target = options.get(REFERENCE_TABLE_KEY)
        return cls(name, target)

    def encode(self, options: Optional[Dict[str, Any]] = None):
        """Return the (type name, option bag) pair written to the store."""
        merged = dict(options or {})
        if self.is_reference and self.target_table_id is not None:
            merged.setdefault(REFERENCE_TABLE_KEY, self.target_table_id)
        return self.name, merged

    def __str__(self):
        return self.name
