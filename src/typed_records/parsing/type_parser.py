"""Parser for the schema DSL.

A schema is a list of record types, each with an optional key prefix and a
list of fields. A field without a type is a string field::

    Account prefix "001" {
        Name: string,
        AnnualRevenue: decimal,
        CloseDate: date,
    }
    Widget { Label }
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import ply.yacc as yacc

from typed_records.parsing.type_lexer import TypeLexer
from typed_records.types import (
    FIELD_TYPE_NAMES,
    ID_FIELD,
    FieldDefinition,
    FieldType,
    RecordType,
    TypeRegistry,
)


@dataclass
class FieldSpec:
    """Specification for a field before resolution."""

    name: str
    type_name: str | None = None  # None means string
    lineno: int = 0


@dataclass
class TypeSpec:
    """Specification for a record type before resolution."""

    name: str
    key_prefix: str | None
    fields: list[FieldSpec]


class TypeParser:
    """Parser for the schema DSL."""

    tokens = TypeLexer.tokens

    def __init__(self) -> None:
        self.lexer = TypeLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore
        self.registry: TypeRegistry = TypeRegistry()

    def p_schema(self, p: yacc.YaccProduction) -> None:
        """schema : statement_list"""
        p[0] = p[1]

    def p_schema_empty(self, p: yacc.YaccProduction) -> None:
        """schema : empty"""
        p[0] = []

    def p_empty(self, p: yacc.YaccProduction) -> None:
        """empty :"""

    def p_statement_list_single(self, p: yacc.YaccProduction) -> None:
        """statement_list : type_def"""
        p[0] = [p[1]]

    def p_statement_list_multiple(self, p: yacc.YaccProduction) -> None:
        """statement_list : statement_list type_def"""
        p[0] = p[1] + [p[2]]

    def p_type_def(self, p: yacc.YaccProduction) -> None:
        """type_def : IDENTIFIER prefix_opt LBRACE field_list RBRACE
                    | IDENTIFIER prefix_opt LBRACE field_list COMMA RBRACE"""
        p[0] = TypeSpec(name=p[1], key_prefix=p[2], fields=p[4])

    def p_type_def_empty(self, p: yacc.YaccProduction) -> None:
        """type_def : IDENTIFIER prefix_opt LBRACE RBRACE"""
        p[0] = TypeSpec(name=p[1], key_prefix=p[2], fields=[])

    def p_prefix_opt(self, p: yacc.YaccProduction) -> None:
        """prefix_opt : PREFIX STRING"""
        p[0] = p[2]

    def p_prefix_opt_empty(self, p: yacc.YaccProduction) -> None:
        """prefix_opt : empty"""
        p[0] = None

    def p_field_list_single(self, p: yacc.YaccProduction) -> None:
        """field_list : field"""
        p[0] = [p[1]]

    def p_field_list_multiple(self, p: yacc.YaccProduction) -> None:
        """field_list : field_list COMMA field
                      | field_list field"""
        p[0] = p[1] + [p[len(p) - 1]]

    def p_field_with_type(self, p: yacc.YaccProduction) -> None:
        """field : IDENTIFIER COLON IDENTIFIER"""
        p[0] = FieldSpec(name=p[1], type_name=p[3], lineno=p.lineno(1))

    def p_field_implicit_type(self, p: yacc.YaccProduction) -> None:
        """field : IDENTIFIER"""
        p[0] = FieldSpec(name=p[1], type_name=None, lineno=p.lineno(1))

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (line {p.lineno})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, data: str) -> TypeRegistry:
        """Parse a schema and return a populated TypeRegistry."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        self.registry = TypeRegistry()
        self.lexer.lexer.lineno = 1

        specs = self.parser.parse(data, lexer=self.lexer.lexer)
        for spec in specs or []:
            self.registry.register(self._resolve_type_spec(spec))

        return self.registry

    def _resolve_type_spec(self, spec: TypeSpec) -> RecordType:
        """Resolve a type spec into a record type."""
        fields: list[FieldDefinition] = []
        seen: set[str] = set()
        for fspec in spec.fields:
            if fspec.name in seen:
                raise ValueError(f"Duplicate field '{fspec.name}' in type '{spec.name}' (line {fspec.lineno})")
            seen.add(fspec.name)

            type_name = fspec.type_name or FieldType.STRING.value
            field_type = FIELD_TYPE_NAMES.get(type_name.lower())
            if field_type is None:
                raise ValueError(
                    f"Unknown field type '{type_name}' for field '{fspec.name}' "
                    f"in type '{spec.name}' (line {fspec.lineno})"
                )
            if fspec.name == ID_FIELD and field_type is not FieldType.ID:
                raise ValueError(f"Field '{ID_FIELD}' in type '{spec.name}' must be of type id")
            fields.append(FieldDefinition(name=fspec.name, field_type=field_type))

        return RecordType(name=spec.name, key_prefix=spec.key_prefix, fields=fields)
