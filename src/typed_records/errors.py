"""Exceptions raised by the typed_records library."""

from __future__ import annotations


class RecordStoreError(Exception):
    """Base class for all typed_records errors."""


class DuplicateIdentifierError(RecordStoreError, ValueError):
    """An insert would reuse an identifier already present in its type partition."""

    def __init__(self, type_name: str, identifier: str) -> None:
        self.type_name = type_name
        self.identifier = identifier
        super().__init__(f"Duplicate id '{identifier}' for type '{type_name}'")


class UnknownTypeError(RecordStoreError, KeyError):
    """A type name is not present in the registry."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(type_name)

    def __str__(self) -> str:
        return f"Type '{self.type_name}' not found"


class UnknownFieldError(RecordStoreError, KeyError):
    """A field name is not declared on a record type."""

    def __init__(self, type_name: str, field_name: str) -> None:
        self.type_name = type_name
        self.field_name = field_name
        super().__init__(field_name)

    def __str__(self) -> str:
        return f"Field '{self.field_name}' not found in type '{self.type_name}'"


class TypeCastError(RecordStoreError, TypeError):
    """A value does not have the type an operation expects."""


class IdentifierExhaustedError(RecordStoreError, ValueError):
    """No identifier of the configured length is left for a type."""

    def __init__(self, type_name: str, key_prefix: str) -> None:
        self.type_name = type_name
        self.key_prefix = key_prefix
        super().__init__(f"No identifiers left for type '{type_name}' (prefix '{key_prefix}')")
