"""Seed a RecordStore from JSON fixture files.

A fixture maps type names to lists of records::

    {
        "Account": [
            {"Id": "001000000000001", "Name": "Acme", "AnnualRevenue": "1200.50"},
            {"Name": "Globex", "CloseDate": "2024-03-31"}
        ]
    }

Raw values are converted with the declared field type, so dates and
datetimes are ISO strings and decimals are strings or numbers. Records
without an Id get a synthesized one.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from typed_records.errors import TypeCastError
from typed_records.record import Record
from typed_records.store import RecordStore
from typed_records.types import RecordType

logger = logging.getLogger(__name__)


def _read_fixture(source: Path | str | Mapping[str, Any]) -> Mapping[str, Any]:
    """Load a fixture document from a path, or pass a parsed one through."""
    if isinstance(source, Mapping):
        return source
    path = Path(source)
    with open(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Fixture {path} must be a JSON object of type name to records")
    return data


def _build_record(record_type: RecordType, raw: Any) -> Record:
    """Convert one raw fixture entry into a record of the given type."""
    if not isinstance(raw, dict):
        raise TypeCastError(f"Fixture entry for '{record_type.name}' must be an object, got {type(raw).__name__}")
    record = Record(record_type)
    for name, value in raw.items():
        field_def = record_type.get_field(name)
        if field_def is not None:
            value = field_def.field_type.parse(value)
        record.put(name, value)
    return record


def load_fixtures(store: RecordStore, source: Path | str | Mapping[str, Any]) -> dict[str, list[Record]]:
    """Insert every record in a fixture into a store.

    Args:
        store: Store to seed. Type names are resolved through its registry.
        source: Path to a JSON file, or an already-parsed fixture.

    Returns:
        The inserted records, keyed by type name as written in the fixture.

    Raises:
        UnknownTypeError: If the fixture names a type the registry lacks.
        DuplicateIdentifierError: If a record's Id is already stored.
    """
    data = _read_fixture(source)
    loaded: dict[str, list[Record]] = {}
    for type_name, entries in data.items():
        record_type = store.registry.get_or_raise(type_name)
        if not isinstance(entries, list):
            raise ValueError(f"Fixture entries for '{type_name}' must be a list")
        records = [_build_record(record_type, raw) for raw in entries]
        store.insert_many(records)
        loaded[type_name] = records
        logger.debug("Loaded %d %s record(s) from fixture", len(records), record_type.name)
    return loaded
