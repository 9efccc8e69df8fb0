"""In-memory record store."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from typed_records.config import StoreConfig
from typed_records.errors import DuplicateIdentifierError, IdentifierExhaustedError, TypeCastError
from typed_records.query import QueryResult
from typed_records.record import Record
from typed_records.types import RecordId, RecordType, TypeRegistry

logger = logging.getLogger(__name__)


@dataclass
class Partition:
    """Records of one type, keyed by identifier.

    ``sequence`` counts synthesized identifiers and only ever grows, so an
    identifier freed by a delete is never handed out again.
    """

    records: dict[RecordId, Record] = field(default_factory=dict)
    sequence: int = 0


class RecordStore:
    """Holds typed records partitioned by type, then by identifier."""

    def __init__(self, registry: TypeRegistry | None = None, config: StoreConfig | None = None) -> None:
        """Initialize an empty store.

        Args:
            registry: Record types known to the store. Type names passed to
                query() and new_record() are resolved through it.
            config: Identifier synthesis settings.
        """
        self.registry = registry if registry is not None else TypeRegistry()
        self.config = config if config is not None else StoreConfig()
        self._partitions: dict[RecordType, Partition] = {}

    @classmethod
    def from_schema(cls, type_definitions: str, config: StoreConfig | None = None) -> RecordStore:
        """Parse schema DSL text and create an empty store for its types."""
        from typed_records.parsing import TypeParser

        return cls(TypeParser().parse(type_definitions), config)

    def _check_record(self, record: Any) -> Record:
        if not isinstance(record, Record):
            raise TypeCastError(f"Expected a Record, got {type(record).__name__}")
        return record

    def _put(self, record_type: RecordType, partition: Partition, record: Record) -> None:
        """Store a record, attaching its partition if this is the type's first record."""
        partition.records[record.id] = record
        self._partitions.setdefault(record_type, partition)

    def _resolve_type(self, record_type: RecordType | str) -> RecordType:
        if isinstance(record_type, str):
            return self.registry.get_or_raise(record_type)
        return record_type

    def _next_id(
        self, record_type: RecordType, partition: Partition, sequence: int, reserved: set[RecordId]
    ) -> tuple[RecordId, int]:
        """Find the next free identifier after ``sequence``.

        Candidates already stored or in ``reserved`` are skipped. Returns the
        identifier and the sequence number it was built from; nothing is
        changed.

        Raises:
            UnknownTypeError: If the type has no prefix and is not registered.
            IdentifierExhaustedError: If the next number no longer fits.
        """
        prefix = record_type.key_prefix or self.registry.key_prefix(record_type)
        width = self.config.id_length - len(prefix)
        while True:
            sequence += 1
            number = str(self.config.id_offset + sequence)
            if len(number) > width:
                raise IdentifierExhaustedError(record_type.name, prefix)
            candidate = RecordId(prefix + number.zfill(width))
            if candidate not in partition.records and candidate not in reserved:
                return candidate, sequence

    def _synthesize_id(self, partition: Partition, record_type: RecordType) -> RecordId:
        """Allocate the next free identifier for a type."""
        identifier, partition.sequence = self._next_id(record_type, partition, partition.sequence, set())
        return identifier

    def insert_one(self, record: Record) -> bool:
        """Insert a record, synthesizing an Id if it has none.

        Raises:
            DuplicateIdentifierError: If the record's Id is already stored.
        """
        self._check_record(record)
        record_type = record.record_type
        partition = self._partitions.get(record_type) or Partition()

        if record.id is None:
            record.id = self._synthesize_id(partition, record_type)
            logger.debug("Synthesized id %s for %s", record.id, record_type.name)
        elif record.id in partition.records:
            raise DuplicateIdentifierError(record_type.name, record.id)

        self._put(record_type, partition, record)
        logger.debug("Inserted %s %s", record_type.name, record.id)
        return True

    def insert_many(self, records: Iterable[Record] | None) -> list[bool]:
        """Insert records in order, all or nothing.

        Every Id, supplied or synthesized, is settled before anything is
        written, so any error leaves the store and the records untouched.

        Raises:
            DuplicateIdentifierError: If an Id is already stored, repeats
                within the batch, or a record object appears twice.
        """
        if not records:
            return []
        records = [self._check_record(r) for r in records]

        seen: set[int] = set()
        taken: dict[RecordType, set[RecordId]] = {}
        for record in records:
            if id(record) in seen:
                raise DuplicateIdentifierError(record.record_type.name, record.id or "(unassigned)")
            seen.add(id(record))
            if record.id is None:
                continue
            ids = taken.setdefault(record.record_type, set())
            partition = self._partitions.get(record.record_type)
            if record.id in ids or (partition is not None and record.id in partition.records):
                raise DuplicateIdentifierError(record.record_type.name, record.id)
            ids.add(record.id)

        sequences: dict[RecordType, int] = {}
        planned: list[RecordId] = []
        for record in records:
            if record.id is not None:
                planned.append(record.id)
                continue
            record_type = record.record_type
            partition = self._partitions.get(record_type) or Partition()
            ids = taken.setdefault(record_type, set())
            identifier, sequences[record_type] = self._next_id(
                record_type, partition, sequences.get(record_type, partition.sequence), ids
            )
            ids.add(identifier)
            planned.append(identifier)

        for record, identifier in zip(records, planned):
            record_type = record.record_type
            partition = self._partitions.get(record_type) or Partition()
            if record.id is None:
                record.id = identifier
                logger.debug("Synthesized id %s for %s", identifier, record_type.name)
            if record_type in sequences:
                partition.sequence = sequences[record_type]
            self._put(record_type, partition, record)
            logger.debug("Inserted %s %s", record_type.name, identifier)
        return [True] * len(records)

    def update_one(self, record: Record) -> bool:
        """Replace the stored record with the same Id.

        Returns False, without changing anything, if no such record exists.
        """
        self._check_record(record)
        partition = self._partitions.get(record.record_type)
        if partition is None or record.id is None or record.id not in partition.records:
            return False
        partition.records[record.id] = record
        logger.debug("Updated %s %s", record.record_type.name, record.id)
        return True

    def update_many(self, records: Iterable[Record] | None) -> list[bool]:
        """Update records in order.

        Returns an empty list when the first record's type has never been
        stored, without reporting a result per record.
        """
        if not records:
            return []
        records = [self._check_record(r) for r in records]
        if records[0].record_type not in self._partitions:
            return []
        return [self.update_one(r) for r in records]

    def upsert_one(self, record: Record) -> bool:
        """Insert a record or overwrite the stored record with the same Id.

        A record without an Id is given a synthesized one.
        """
        self._check_record(record)
        record_type = record.record_type
        partition = self._partitions.get(record_type) or Partition()
        if record.id is None:
            record.id = self._synthesize_id(partition, record_type)
            logger.debug("Synthesized id %s for %s", record.id, record_type.name)
        self._put(record_type, partition, record)
        logger.debug("Upserted %s %s", record_type.name, record.id)
        return True

    def upsert_many(self, records: Iterable[Record] | None) -> list[bool]:
        if not records:
            return []
        return [self.upsert_one(r) for r in records]

    def delete_many(self, identifiers: Iterable[str] | None) -> None:
        """Remove records with the given identifiers from every type."""
        if identifiers is None:
            return
        # A lone identifier is not a collection of its characters
        ids = {identifiers} if isinstance(identifiers, str) else set(identifiers)
        for record_type, partition in self._partitions.items():
            for identifier in partition.records.keys() & ids:
                del partition.records[identifier]
                logger.debug("Deleted %s %s", record_type.name, identifier)

    def delete_one(self, identifier: str) -> bool:
        """Remove the record with the given identifier, returning whether one existed."""
        for record_type, partition in self._partitions.items():
            if partition.records.pop(identifier, None) is not None:
                logger.debug("Deleted %s %s", record_type.name, identifier)
                return True
        return False

    def get(self, identifier: str) -> Record | None:
        """Look up a record by identifier across all types."""
        for partition in self._partitions.values():
            record = partition.records.get(identifier)
            if record is not None:
                return record
        return None

    def query(
        self, record_type: RecordType | str, field_filter: Mapping[str, Any] | None = None
    ) -> QueryResult:
        """Snapshot the records of a type, optionally filtered by field equality.

        Args:
            record_type: A RecordType or the (case-insensitive) name of one.
            field_filter: Field values every returned record must equal.

        Raises:
            UnknownTypeError: If a type name is not in the registry.
        """
        record_type = self._resolve_type(record_type)
        partition = self._partitions.get(record_type)
        result = QueryResult(self, tuple(partition.records.values()) if partition else ())
        if field_filter:
            result = result.filter(field_filter)
        return result

    def count(self, record_type: RecordType | str) -> int:
        """Return the number of stored records of a type."""
        partition = self._partitions.get(self._resolve_type(record_type))
        return len(partition.records) if partition else 0

    def record_types(self) -> list[RecordType]:
        """List the types that have a partition."""
        return list(self._partitions)

    def new_record(self, record_type: RecordType | str, **values: Any) -> Record:
        """Create (but do not store) a record of the given type."""
        return self._resolve_type(record_type).new(**values)

    def clear(self) -> None:
        """Remove every record and reset identifier counters."""
        self._partitions.clear()
