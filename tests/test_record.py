"""Tests for Record."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from typed_records.errors import TypeCastError, UnknownFieldError
from typed_records.record import Record
from typed_records.types import FieldDefinition, FieldType, RecordId, RecordType


@pytest.fixture
def account_type():
    return RecordType(
        name="Account",
        key_prefix="001",
        fields=[
            FieldDefinition(name="Name", field_type=FieldType.STRING),
            FieldDefinition(name="AnnualRevenue", field_type=FieldType.DECIMAL),
            FieldDefinition(name="CloseDate", field_type=FieldType.DATE),
            FieldDefinition(name="LastActivity", field_type=FieldType.DATETIME),
            FieldDefinition(name="ParentId", field_type=FieldType.ID),
        ],
    )


class TestRecordFields:
    """Tests for reading and writing fields."""

    def test_put_and_get(self, account_type):
        """Test setting and reading declared fields."""
        record = Record(account_type, Name="Acme")
        previous = record.put("AnnualRevenue", Decimal("100"))

        assert previous is None
        assert record.get("Name") == "Acme"
        assert record.get("AnnualRevenue") == Decimal("100")
        assert record.get("CloseDate") is None
        assert record.put("Name", "Globex") == "Acme"

    def test_values_mapping_and_keywords(self, account_type):
        """Test both ways of passing initial values."""
        record = Record(account_type, {"Name": "Acme"}, CloseDate=date(2024, 1, 1))
        assert dict(record) == {"Name": "Acme", "CloseDate": date(2024, 1, 1)}

    def test_record_type(self, account_type):
        """Test the record is tagged with its type."""
        assert Record(account_type).record_type is account_type

    def test_undeclared_field(self, account_type):
        """Test that undeclared fields cannot be read or written."""
        record = Record(account_type)
        with pytest.raises(UnknownFieldError) as exc_info:
            record.put("Bogus", 1)
        assert exc_info.value.field_name == "Bogus"
        assert str(exc_info.value) == "Field 'Bogus' not found in type 'Account'"

        with pytest.raises(UnknownFieldError):
            record.get("Bogus")
        assert "Bogus" not in record

    def test_wrong_value_type(self, account_type):
        """Test that values must match the declared field type."""
        record = Record(account_type)
        with pytest.raises(TypeCastError):
            record.put("Name", 42)
        with pytest.raises(TypeCastError):
            record.put("CloseDate", datetime(2024, 1, 1))
        with pytest.raises(TypeCastError):
            record["AnnualRevenue"] = "100"

    def test_null_is_always_allowed(self, account_type):
        """Test that any field can be cleared."""
        record = Record(account_type, Name="Acme")
        record.put("Name", None)
        assert record.get("Name") is None

    def test_open_type_accepts_anything(self):
        """Test that a type with no declared fields accepts any field."""
        record = Record(RecordType(name="Thing"), Anything=[1, 2], Count=3)
        assert record.get("Anything") == [1, 2]
        assert record["Count"] == 3


class TestRecordId:
    """Tests for the Id field."""

    def test_id_is_cast(self, account_type):
        """Test that string ids become RecordIds."""
        record = Record(account_type, Id="001000000000001")
        assert isinstance(record.id, RecordId)
        assert record.get("Id") == "001000000000001"

    def test_id_setter(self, account_type):
        """Test assigning an id through the property."""
        record = Record(account_type)
        assert record.id is None
        record.id = "001000000000002"
        assert record.id == RecordId("001000000000002")

    def test_invalid_id(self, account_type):
        """Test that malformed ids are rejected."""
        with pytest.raises(TypeCastError):
            Record(account_type, Id="acme-1")

    def test_id_fields_reject_non_strings(self, account_type):
        """Test that id-typed fields only hold strings."""
        with pytest.raises(TypeCastError):
            Record(account_type, ParentId=7)


class TestRecordMapping:
    """Tests for mapping behaviour and equality."""

    def test_mapping_protocol(self, account_type):
        """Test len, iteration, membership and deletion."""
        record = Record(account_type, Name="Acme", AnnualRevenue=Decimal("5"))
        assert len(record) == 2
        assert list(record) == ["Name", "AnnualRevenue"]
        assert "Name" in record
        assert "CloseDate" not in record

        del record["AnnualRevenue"]
        assert "AnnualRevenue" not in record

    def test_equality_by_value(self, account_type):
        """Test records with the same type and values are equal."""
        first = Record(account_type, Id="001000000000001", Name="Acme")
        second = Record(account_type, Id="001000000000001", Name="Acme")
        third = Record(account_type, Id="001000000000001", Name="Globex")

        assert first == second
        assert first != third
        assert Record(RecordType(name="Other"), Name="Acme") != Record(account_type, Name="Acme")

    def test_copy(self, account_type):
        """Test that copies are equal but independent."""
        record = Record(account_type, Name="Acme")
        clone = record.copy()

        assert clone == record
        clone.put("Name", "Globex")
        assert record.get("Name") == "Acme"

    def test_unhashable(self, account_type):
        """Test that records cannot be used as dict keys."""
        with pytest.raises(TypeError):
            hash(Record(account_type))
