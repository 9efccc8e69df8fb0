"""Type definitions for the typed_records library."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import TYPE_CHECKING, Any

from typed_records.errors import TypeCastError, UnknownTypeError

if TYPE_CHECKING:
    from typed_records.record import Record


# Identifiers are 15 characters, or 18 with the case-safe suffix
ID_LENGTHS = (15, 18)

ID_FIELD = "Id"

_ID_PATTERN = re.compile(r"[a-zA-Z0-9]+")


class RecordId(str):
    """Identifier of a record within its type partition."""

    @classmethod
    def cast(cls, value: Any) -> RecordId:
        """Convert a value to a RecordId, raising TypeCastError if it is not one."""
        if isinstance(value, RecordId):
            return value
        if (
            isinstance(value, str)
            and len(value) in ID_LENGTHS
            and _ID_PATTERN.fullmatch(value)
        ):
            return cls(value)
        raise TypeCastError(f"Invalid id: {value!r}")

    @property
    def key_prefix(self) -> str:
        """The first three characters, which identify the record type."""
        return self[:3]

    def __repr__(self) -> str:
        return f"RecordId({str.__repr__(self)})"


class FieldType(Enum):
    """Value types a record field can hold."""

    ID = "id"
    STRING = "string"
    DECIMAL = "decimal"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"

    def accepts(self, value: Any) -> bool:
        """Return whether a Python value can be stored in a field of this type."""
        if value is None:
            return True
        if self in (FieldType.ID, FieldType.STRING):
            return isinstance(value, str)
        if self is FieldType.DECIMAL:
            return isinstance(value, (Decimal, int, float)) and not isinstance(value, bool)
        if self is FieldType.INTEGER:
            return isinstance(value, int) and not isinstance(value, bool)
        if self is FieldType.BOOLEAN:
            return isinstance(value, bool)
        if self is FieldType.DATE:
            # datetime is a subclass of date
            return isinstance(value, date) and not isinstance(value, datetime)
        return isinstance(value, datetime)

    def parse(self, raw: Any) -> Any:
        """Convert a raw (JSON or string) value into a value of this type."""
        if raw is None:
            return None
        try:
            if self is FieldType.ID:
                return RecordId.cast(raw)
            if self is FieldType.DECIMAL and not isinstance(raw, bool):
                if isinstance(raw, Decimal):
                    return raw
                if isinstance(raw, (int, float, str)):
                    return Decimal(str(raw))
            if self is FieldType.INTEGER and not isinstance(raw, bool):
                if isinstance(raw, (int, str)):
                    return int(raw)
            if self is FieldType.BOOLEAN:
                if isinstance(raw, bool):
                    return raw
                if isinstance(raw, str) and raw.lower() in ("true", "false"):
                    return raw.lower() == "true"
            if self is FieldType.DATE:
                if self.accepts(raw):
                    return raw
                if isinstance(raw, str):
                    return date.fromisoformat(raw)
            if self is FieldType.DATETIME:
                if isinstance(raw, datetime):
                    return raw
                if isinstance(raw, str):
                    # fromisoformat only understands the Z suffix on 3.11+
                    if raw.endswith("Z"):
                        raw = raw[:-1] + "+00:00"
                    return datetime.fromisoformat(raw)
            if self is FieldType.STRING and isinstance(raw, str):
                return raw
        except (InvalidOperation, ValueError) as e:
            raise TypeCastError(f"Cannot convert {raw!r} to {self.value}: {e}") from e
        raise TypeCastError(f"Cannot convert {type(raw).__name__} {raw!r} to {self.value}")


# Mapping from type name strings to FieldType enum values
FIELD_TYPE_NAMES: dict[str, FieldType] = {ft.value: ft for ft in FieldType}


@dataclass
class FieldDefinition:
    """Definition of a field within a record type."""

    name: str
    field_type: FieldType


@dataclass(eq=False)
class RecordType:
    """Descriptor of a record type.

    Every record type has an implicit ``Id`` field. A type declared with no
    other fields is open: its records accept any field name and value.
    """

    name: str
    key_prefix: str | None = None
    fields: list[FieldDefinition] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.get_field(ID_FIELD) is None:
            self.fields.insert(0, FieldDefinition(name=ID_FIELD, field_type=FieldType.ID))

    @property
    def is_open(self) -> bool:
        """Return whether the type declares no fields besides Id."""
        return all(f.name == ID_FIELD for f in self.fields)

    def get_field(self, name: str) -> FieldDefinition | None:
        """Get a field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def new(self, **values: Any) -> Record:
        """Create a record of this type with the given field values."""
        from typed_records.record import Record

        return Record(self, values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RecordType):
            return NotImplemented
        return self.name.lower() == other.name.lower()

    def __hash__(self) -> int:
        return hash(self.name.lower())

    def __repr__(self) -> str:
        return f"RecordType({self.name!r}, prefix={self.key_prefix!r})"


class TypeRegistry:
    """Registry of all record types, looked up by case-insensitive name."""

    # Prefix of types registered without one of their own
    CUSTOM_PREFIX = "a"

    def __init__(self) -> None:
        self._types: dict[str, RecordType] = {}
        self._prefixes: dict[str, RecordType] = {}
        self._next_custom: int = 0

    def register(self, record_type: RecordType) -> RecordType:
        """Register a record type, allocating a key prefix if it has none."""
        key = record_type.name.lower()
        if key in self._types:
            raise ValueError(f"Type '{record_type.name}' is already defined")

        if record_type.key_prefix is None:
            record_type.key_prefix = self._allocate_prefix()
        elif not _ID_PATTERN.fullmatch(record_type.key_prefix):
            raise ValueError(f"Invalid key prefix {record_type.key_prefix!r} for type '{record_type.name}'")
        elif record_type.key_prefix in self._prefixes:
            owner = self._prefixes[record_type.key_prefix]
            raise ValueError(
                f"Key prefix '{record_type.key_prefix}' is already used by type '{owner.name}'"
            )

        self._types[key] = record_type
        self._prefixes[record_type.key_prefix] = record_type
        return record_type

    def _allocate_prefix(self) -> str:
        """Return the next unused custom prefix: a00, a01, ... a0z, a10, ..."""
        digits = "0123456789abcdefghijklmnopqrstuvwxyz"
        while True:
            n = self._next_custom
            self._next_custom += 1
            if n >= len(digits) ** 2:
                raise ValueError("No custom key prefixes left")
            prefix = self.CUSTOM_PREFIX + digits[n // len(digits)] + digits[n % len(digits)]
            if prefix not in self._prefixes:
                return prefix

    def get(self, name: str) -> RecordType | None:
        """Get a type by name."""
        return self._types.get(name.lower())

    def get_or_raise(self, name: str) -> RecordType:
        """Get a type by name, raising if not found."""
        record_type = self._types.get(name.lower())
        if record_type is None:
            raise UnknownTypeError(name)
        return record_type

    def get_by_prefix(self, key_prefix: str) -> RecordType | None:
        """Get the type whose identifiers start with the given prefix."""
        return self._prefixes.get(key_prefix)

    def key_prefix(self, record_type: RecordType | str) -> str:
        """Return the identifier prefix of a type."""
        if isinstance(record_type, str):
            record_type = self.get_or_raise(record_type)
        registered = self._types.get(record_type.name.lower())
        if registered is None:
            raise UnknownTypeError(record_type.name)
        assert registered.key_prefix is not None
        return registered.key_prefix

    def new_record(self, type_name: str, **values: Any) -> Record:
        """Create a record of the named type with the given field values."""
        return self.get_or_raise(type_name).new(**values)

    def list_types(self) -> list[str]:
        """List all registered type names."""
        return [t.name for t in self._types.values()]

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._types

    def __len__(self) -> int:
        return len(self._types)
