"""Parsing module for the schema DSL."""

from typed_records.parsing.type_parser import TypeParser
from typed_records.types import TypeRegistry


def parse_schema(type_definitions: str) -> TypeRegistry:
    """Parse schema DSL text into a TypeRegistry."""
    return TypeParser().parse(type_definitions)


__all__ = [
    "TypeParser",
    "parse_schema",
]
