"""Typed Records - an in-memory typed record store for unit tests."""

from typed_records.config import StoreConfig
from typed_records.errors import (
    DuplicateIdentifierError,
    IdentifierExhaustedError,
    RecordStoreError,
    TypeCastError,
    UnknownFieldError,
    UnknownTypeError,
)
from typed_records.fixtures import load_fixtures
from typed_records.parsing import TypeParser, parse_schema
from typed_records.query import Comparison, QueryResult, collect_ids, collect_values
from typed_records.record import Record
from typed_records.store import RecordStore
from typed_records.types import (
    FieldDefinition,
    FieldType,
    RecordId,
    RecordType,
    TypeRegistry,
)

__all__ = [
    # Main API
    "RecordStore",
    "QueryResult",
    "Comparison",
    "Record",
    "StoreConfig",
    "collect_ids",
    "collect_values",
    # Schema
    "TypeParser",
    "parse_schema",
    "load_fixtures",
    # Type definitions
    "FieldDefinition",
    "FieldType",
    "RecordId",
    "RecordType",
    "TypeRegistry",
    # Errors
    "RecordStoreError",
    "DuplicateIdentifierError",
    "IdentifierExhaustedError",
    "TypeCastError",
    "UnknownFieldError",
    "UnknownTypeError",
]

__version__ = "0.1.0"
