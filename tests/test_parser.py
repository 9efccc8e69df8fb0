"""Tests for the schema DSL parser."""

import pytest

from typed_records import RecordStore
from typed_records.parsing import TypeParser, parse_schema
from typed_records.parsing.type_lexer import TypeLexer
from typed_records.types import FieldType


class TestTypeLexer:
    """Tests for the type lexer."""

    def test_tokenize_type(self):
        """Test tokenizing a type with a prefix."""
        lexer = TypeLexer()
        lexer.build()

        tokens = lexer.tokenize('Account prefix "001" { Name: string }')
        token_types = [t.type for t in tokens]

        assert token_types == [
            "IDENTIFIER",
            "PREFIX",
            "STRING",
            "LBRACE",
            "IDENTIFIER",
            "COLON",
            "IDENTIFIER",
            "RBRACE",
        ]

    def test_string_value_unquoted(self):
        """Test string tokens drop their quotes."""
        lexer = TypeLexer()
        lexer.build()

        tokens = lexer.tokenize('"a0B"')
        assert tokens[0].value == "a0B"

    def test_comments_and_newlines_ignored(self):
        """Test that comments and newlines produce no tokens."""
        lexer = TypeLexer()
        lexer.build()

        tokens = lexer.tokenize("# a comment\nAccount { }\n")
        token_types = [t.type for t in tokens]

        assert token_types == ["IDENTIFIER", "LBRACE", "RBRACE"]
        assert tokens[0].lineno == 2

    def test_illegal_character(self):
        """Test error on illegal character."""
        lexer = TypeLexer()
        lexer.build()

        with pytest.raises(SyntaxError):
            lexer.tokenize("Account @ { }")


class TestTypeParser:
    """Tests for the type parser."""

    def test_parse_type(self):
        """Test parsing a type with a prefix and typed fields."""
        registry = TypeParser().parse(
            """
            Account prefix "001" {
                Name: string,
                AnnualRevenue: decimal,
                NumberOfEmployees: integer,
                IsActive: boolean,
                CloseDate: date,
                LastActivity: datetime,
                ParentId: id,
            }
            """
        )

        account = registry.get_or_raise("Account")
        assert account.key_prefix == "001"
        assert [(f.name, f.field_type) for f in account.fields] == [
            ("Id", FieldType.ID),
            ("Name", FieldType.STRING),
            ("AnnualRevenue", FieldType.DECIMAL),
            ("NumberOfEmployees", FieldType.INTEGER),
            ("IsActive", FieldType.BOOLEAN),
            ("CloseDate", FieldType.DATE),
            ("LastActivity", FieldType.DATETIME),
            ("ParentId", FieldType.ID),
        ]

    def test_implicit_string_fields(self):
        """Test that untyped fields are strings and commas are optional."""
        registry = TypeParser().parse("Widget { Label\n Code, Notes }")

        widget = registry.get("Widget")
        assert [f.name for f in widget.fields] == ["Id", "Label", "Code", "Notes"]
        assert all(f.field_type is FieldType.STRING for f in widget.fields[1:])

    def test_multiple_types_and_allocated_prefix(self):
        """Test several types, one without a prefix."""
        registry = TypeParser().parse(
            """
            Account prefix "001" { Name }
            Widget { Label }
            Contact prefix "003" { LastName, AccountId: id }
            """
        )

        assert registry.list_types() == ["Account", "Widget", "Contact"]
        assert registry.key_prefix("Widget") == "a00"
        assert registry.get("contact").get_field("AccountId").field_type is FieldType.ID

    def test_empty_type(self):
        """Test a type with no fields is open."""
        registry = TypeParser().parse('Thing prefix "a01" { }')
        assert registry.get("Thing").is_open

    def test_empty_schema(self):
        """Test parsing nothing gives an empty registry."""
        assert len(TypeParser().parse("")) == 0
        assert len(TypeParser().parse("# nothing here\n")) == 0

    def test_field_type_names_ignore_case(self):
        """Test field type names are case-insensitive."""
        registry = TypeParser().parse("Account { Amount: Decimal }")
        assert registry.get("Account").get_field("Amount").field_type is FieldType.DECIMAL

    def test_unknown_field_type(self):
        """Test an unknown field type raises with its line."""
        with pytest.raises(ValueError, match="Unknown field type 'money'.*line 3"):
            TypeParser().parse("Account {\n Name,\n Amount: money\n}")

    def test_duplicate_field(self):
        """Test a repeated field name raises."""
        with pytest.raises(ValueError, match="Duplicate field 'Name'"):
            TypeParser().parse("Account { Name, Name }")

    def test_id_must_be_id_type(self):
        """Test Id cannot be declared with another type."""
        with pytest.raises(ValueError):
            TypeParser().parse("Account { Id: string }")

    def test_explicit_id_field(self):
        """Test declaring Id as an id is allowed."""
        registry = TypeParser().parse("Account { Id: id, Name }")
        assert [f.name for f in registry.get("Account").fields] == ["Id", "Name"]

    def test_duplicate_type(self):
        """Test a repeated type name raises."""
        with pytest.raises(ValueError, match="already defined"):
            TypeParser().parse("Account { Name } account { Name }")

    def test_syntax_error(self):
        """Test malformed input raises SyntaxError."""
        with pytest.raises(SyntaxError):
            TypeParser().parse("Account { Name: }")
        with pytest.raises(SyntaxError):
            TypeParser().parse("Account prefix 001 { }")
        with pytest.raises(SyntaxError, match="end of input"):
            TypeParser().parse("Account {")

    def test_parser_is_reusable(self):
        """Test each parse starts from a fresh registry."""
        parser = TypeParser()
        first = parser.parse("Account { Name }")
        second = parser.parse("Contact { LastName }")

        assert first is not second
        assert "Account" not in second

    def test_parse_schema(self):
        """Test the module-level helper."""
        registry = parse_schema('Account prefix "001" { Name }')
        assert registry.key_prefix("account") == "001"

    def test_store_from_schema(self):
        """Test building a store straight from a schema."""
        store = RecordStore.from_schema('Account prefix "001" { Name }')
        record = store.new_record("Account", Name="Acme")
        store.insert_one(record)

        assert record.id == "001000001000001"
