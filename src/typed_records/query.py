"""Chainable, immutable query results."""

from __future__ import annotations

import operator
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

from typed_records.errors import TypeCastError
from typed_records.record import Record
from typed_records.types import FieldType, RecordId

if TYPE_CHECKING:
    from typed_records.store import RecordStore


class Comparison(Enum):
    """How a field value is compared against a filter bound."""

    EQUALS = "eq"
    MEMBER_OF = "in"
    GREATER = "gt"
    GREATER_OR_EQUAL = "gte"
    LESS = "lt"
    LESS_OR_EQUAL = "lte"

    @property
    def is_ordering(self) -> bool:
        return self in _ORDERING_OPERATORS


_ORDERING_OPERATORS: dict[Comparison, Callable[[Any, Any], bool]] = {
    Comparison.GREATER: operator.gt,
    Comparison.GREATER_OR_EQUAL: operator.ge,
    Comparison.LESS: operator.lt,
    Comparison.LESS_OR_EQUAL: operator.le,
}

# Checked in this order: a datetime is also a date
_ORDERING_KINDS = (FieldType.DATETIME, FieldType.DATE, FieldType.DECIMAL)

_MISSING = object()


def _values_equal(left: Any, right: Any) -> bool:
    """Value equality, except that a boolean never equals a number."""
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


def _ordering_kind(value: Any) -> FieldType | None:
    """Return the field type a value is ordered as, or None if it is unordered."""
    if value is None:
        return None
    for kind in _ORDERING_KINDS:
        if kind.accepts(value):
            return kind
    return None


def _unique(values: Iterable[Any]) -> list[Any]:
    """De-duplicate values, keeping first occurrences in order."""
    result: list[Any] = []
    for value in values:
        if not any(_values_equal(value, seen) for seen in result):
            result.append(value)
    return result


def collect_values(records: Iterable[Record], field_name: str) -> list[Any]:
    """Return the non-null values of a field, in record order."""
    values = []
    for record in records:
        value = record.get(field_name)
        if value is not None:
            values.append(value)
    return values


def collect_ids(records: Iterable[Record], field_name: str = "Id") -> set[RecordId]:
    """Return the distinct non-null identifiers held in a field."""
    return {RecordId.cast(v) for v in collect_values(records, field_name)}


@dataclass(frozen=True)
class QueryResult:
    """Snapshot of records returned by a query.

    Filtering never changes a result; it returns a new, narrower one, so
    calls chain: ``store.query("Account").filter("Name", "Acme").greater_than(...)``.
    """

    store: RecordStore | None = field(default=None, repr=False, compare=False)
    records: tuple[Record, ...] = ()

    # Records are mutable
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", tuple(self.records or ()))

    def _narrow(self, predicate: Callable[[Record], bool]) -> QueryResult:
        return QueryResult(self.store, tuple(r for r in self.records if predicate(r)))

    # ---- Accessors ----

    def collection(self) -> list[Record]:
        return list(self.records)

    def head(self) -> Record | None:
        """Return the first record, or None if there are none."""
        return self.records[0] if self.records else None

    def collection_of(self, field_name: str) -> list[Any]:
        """Return a field's value from every record, nulls included."""
        return [r.get(field_name) for r in self.records]

    def set_of_ids(self, field_name: str = "Id") -> set[RecordId]:
        """Return the distinct identifiers held in a field.

        Raises:
            TypeCastError: If a value is not an identifier.
        """
        return collect_ids(self.records, field_name)

    def map_by_id(self, field_name: str = "Id") -> dict[RecordId, Record]:
        """Map each non-null identifier in a field to its record (last one wins)."""
        result: dict[RecordId, Record] = {}
        for record in self.records:
            key = record.get(field_name)
            if key is not None:
                result[RecordId.cast(key)] = record
        return result

    def map_by_string(self, field_name: str) -> dict[str, Record]:
        """Map each non-null string in a field to its record (last one wins)."""
        result: dict[str, Record] = {}
        for record in self.records:
            key = record.get(field_name)
            if key is None:
                continue
            if not isinstance(key, str):
                raise TypeCastError(f"Field '{field_name}' holds {type(key).__name__} {key!r}, not a string")
            result[str(key)] = record
        return result

    def size(self) -> int:
        return len(self.records)

    def is_empty(self) -> bool:
        return not self.records

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    # ---- Filtering ----

    def filter(self, field_or_values: str | Mapping[str, Any], values: Any = _MISSING) -> QueryResult:
        """Keep records whose fields equal the given values.

        ``filter(mapping)`` keeps records matching every field in the mapping.
        ``filter(field, [a, b])`` keeps records whose field equals any of the
        values; ``filter(field, a)`` is the single-value form.
        """
        if isinstance(field_or_values, Mapping):
            if values is not _MISSING:
                raise TypeError("filter() takes no values when given a field mapping")
            criteria = dict(field_or_values)
            return self._narrow(
                lambda r: all(_values_equal(r.get(name), value) for name, value in criteria.items())
            )
        if values is _MISSING:
            raise TypeError(f"filter() missing values for field '{field_or_values}'")
        if isinstance(values, Iterable) and not isinstance(values, (str, bytes, Mapping)):
            return self.compare(field_or_values, Comparison.MEMBER_OF, values)
        return self.compare(field_or_values, Comparison.EQUALS, values)

    def compare(self, field_name: str, comparison: Comparison, bound: Any) -> QueryResult:
        """Keep records whose field satisfies a comparison against a bound.

        Ordering comparisons take a date, datetime or numeric bound and skip
        records whose field is null.

        Raises:
            TypeCastError: If the bound cannot be ordered, or a field value is
                not of the same kind as the bound.
        """
        if comparison is Comparison.EQUALS:
            return self._narrow(lambda r: _values_equal(r.get(field_name), bound))

        if comparison is Comparison.MEMBER_OF:
            if isinstance(bound, (str, bytes, Mapping)) or not isinstance(bound, Iterable):
                raise TypeCastError(f"Expected a collection of values, got {type(bound).__name__}")
            members = _unique(bound)
            return self._narrow(lambda r: any(_values_equal(r.get(field_name), m) for m in members))

        kind = _ordering_kind(bound)
        if kind is None:
            raise TypeCastError(f"Cannot order by {type(bound).__name__} {bound!r}")
        compare = _ORDERING_OPERATORS[comparison]

        def matches(record: Record) -> bool:
            value = record.get(field_name)
            if value is None:
                return False
            if _ordering_kind(value) is not kind:
                raise TypeCastError(
                    f"Field '{field_name}' holds {type(value).__name__} {value!r}, "
                    f"which cannot be compared as {kind.value}"
                )
            try:
                return compare(value, bound)
            except TypeError as e:
                # e.g. naive vs. aware datetimes
                raise TypeCastError(f"Cannot compare field '{field_name}' value {value!r} with {bound!r}") from e

        return self._narrow(matches)

    def greater_than(self, field_name: str, bound: Any) -> QueryResult:
        return self.compare(field_name, Comparison.GREATER, bound)

    def greater_or_equal(self, field_name: str, bound: Any) -> QueryResult:
        return self.compare(field_name, Comparison.GREATER_OR_EQUAL, bound)

    def less_than(self, field_name: str, bound: Any) -> QueryResult:
        return self.compare(field_name, Comparison.LESS, bound)

    def less_or_equal(self, field_name: str, bound: Any) -> QueryResult:
        return self.compare(field_name, Comparison.LESS_OR_EQUAL, bound)
