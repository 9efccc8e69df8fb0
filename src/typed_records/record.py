"""Records stored in a RecordStore."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any

from typed_records.errors import TypeCastError, UnknownFieldError
from typed_records.types import ID_FIELD, FieldType, RecordId, RecordType


class Record(MutableMapping[str, Any]):
    """A mutable mapping of field name to value, tagged with its RecordType.

    When the record type declares fields, only those fields can be read or
    written and values must match the declared field type. Records of an open
    type accept any field. The ``Id`` field always holds a RecordId or None.
    """

    def __init__(
        self, record_type: RecordType, values: Mapping[str, Any] | None = None, **fields: Any
    ) -> None:
        self._record_type = record_type
        self._values: dict[str, Any] = {}
        for name, value in {**(values or {}), **fields}.items():
            self.put(name, value)

    @property
    def record_type(self) -> RecordType:
        return self._record_type

    @property
    def id(self) -> RecordId | None:
        return self._values.get(ID_FIELD)

    @id.setter
    def id(self, value: RecordId | str | None) -> None:
        self.put(ID_FIELD, value)

    def _field_type(self, name: str) -> FieldType | None:
        """Return the declared type of a field, or None for open types."""
        field_def = self._record_type.get_field(name)
        if field_def is not None:
            return field_def.field_type
        if self._record_type.is_open:
            return None
        raise UnknownFieldError(self._record_type.name, name)

    def get(self, name: str, default: Any = None) -> Any:
        """Return the value of a field, or None if it has not been set."""
        self._field_type(name)
        return self._values.get(name, default)

    def put(self, name: str, value: Any) -> Any:
        """Set a field and return its previous value."""
        field_type = self._field_type(name)
        if value is not None and (name == ID_FIELD or field_type is FieldType.ID):
            value = RecordId.cast(value)
        elif field_type is not None and not field_type.accepts(value):
            raise TypeCastError(
                f"Field '{name}' of type '{self._record_type.name}' is {field_type.value}, "
                f"got {type(value).__name__} {value!r}"
            )
        previous = self._values.get(name)
        self._values[name] = value
        return previous

    def copy(self) -> Record:
        """Return a shallow copy of this record."""
        return Record(self._record_type, self._values)

    def __getitem__(self, name: str) -> Any:
        self._field_type(name)
        return self._values[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self.put(name, value)

    def __delitem__(self, name: str) -> None:
        del self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        return self._record_type == other._record_type and self._values == other._values

    # Records are mutable
    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self._values.items())
        return f"Record({self._record_type.name}, {fields})"
