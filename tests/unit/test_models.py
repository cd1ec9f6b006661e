"""
Unit tests for the POS models.

Tests validation, immutability and copy-with-changes.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from campuscoffee.core import exceptions
from campuscoffee.core.address import SplitHouseNumber
from campuscoffee.core.models import Address, CampusType, OsmNode, PosRecord, PosType, parse_pos


def valid_payload(**overrides):
    payload = {
        "name": "Café Central",
        "type": "CAFE",
        "campus": "ALTSTADT",
        "address": {
            "street": "Hauptstr.",
            "house_number": "5",
            "postal_code": "69117",
            "city": "Heidelberg",
        },
    }
    payload.update(overrides)
    return payload


@pytest.mark.unit
class TestAddress:
    """Tests for Address model"""

    def test_valid_address(self):
        address = Address(street="Hauptstr.", house_number="21a", postal_code="69117", city="Heidelberg")

        assert address.house_number == "21a"
        assert address.split_house_number() == SplitHouseNumber(numeric=21, suffix="a")

    def test_invalid_house_number(self):
        with pytest.raises(ValidationError) as exc_info:
            Address(street="Hauptstr.", house_number="21 a", postal_code="69117", city="Heidelberg")
        assert "house_number" in str(exc_info.value)

    @pytest.mark.parametrize("house_number", ["21²", "21½", "4Ⅻ"])
    def test_numeric_symbol_suffix_rejected(self, house_number):
        """A suffix like "²" is not a letter and never reaches storage"""
        with pytest.raises(ValidationError) as exc_info:
            Address(street="Hauptstr.", house_number=house_number, postal_code="69117", city="Heidelberg")
        assert "house_number" in str(exc_info.value)

    @pytest.mark.parametrize("field", ["street", "postal_code", "city"])
    def test_blank_fields_rejected(self, field):
        values = {"street": "Hauptstr.", "house_number": "5", "postal_code": "69117", "city": "Heidelberg"}
        values[field] = "   "

        with pytest.raises(ValidationError) as exc_info:
            Address(**values)
        assert field in str(exc_info.value)

    def test_from_split(self):
        address = Address.from_split(
            street="Hauptstr.",
            house_number=SplitHouseNumber(numeric=7, suffix="b", leading_zeros=1),
            postal_code="69117",
            city="Heidelberg",
        )

        assert address.house_number == "07b"


@pytest.mark.unit
class TestPosRecord:
    """Tests for PosRecord model"""

    def test_valid_pos(self):
        pos = PosRecord(**valid_payload())

        assert pos.id is None
        assert pos.type is PosType.CAFE
        assert pos.campus is CampusType.ALTSTADT
        assert pos.description is None
        assert pos.created_at is None
        assert pos.updated_at is None

    def test_empty_name(self):
        with pytest.raises(ValidationError) as exc_info:
            PosRecord(**valid_payload(name=""))
        assert "name" in str(exc_info.value)

    def test_blank_name(self):
        with pytest.raises(ValidationError):
            PosRecord(**valid_payload(name="   "))

    def test_invalid_type(self):
        with pytest.raises(ValidationError) as exc_info:
            PosRecord(**valid_payload(type="RESTAURANT"))
        assert "type" in str(exc_info.value)

    def test_invalid_campus(self):
        with pytest.raises(ValidationError) as exc_info:
            PosRecord(**valid_payload(campus="MARS"))
        assert "campus" in str(exc_info.value)

    def test_naive_timestamps_are_utc(self):
        pos = PosRecord(**valid_payload(created_at=datetime(2025, 1, 1, 12, 0)))

        assert pos.created_at == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_aware_timestamps_converted_to_utc(self):
        cet = timezone(timedelta(hours=1))
        pos = PosRecord(**valid_payload(updated_at=datetime(2025, 1, 1, 13, 0, tzinfo=cet)))

        assert pos.updated_at == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert pos.updated_at.tzinfo == timezone.utc

    def test_frozen(self, cafe_central):
        with pytest.raises(ValidationError):
            cafe_central.name = "Other"

    def test_with_changes_returns_new_snapshot(self, cafe_central):
        changed = cafe_central.with_changes(description="Now with cake")

        assert changed.description == "Now with cake"
        assert cafe_central.description is None
        assert changed is not cafe_central

    def test_with_changes_revalidates(self, cafe_central):
        with pytest.raises(ValidationError):
            cafe_central.with_changes(name="")

    def test_with_changes_accepts_address_model(self, cafe_central):
        new_address = Address(street="Plöck", house_number="1a", postal_code="69117", city="Heidelberg")

        changed = cafe_central.with_changes(address=new_address)

        assert changed.address == new_address

    def test_same_content_ignores_identity_and_timestamps(self, cafe_central):
        now = datetime.now(timezone.utc)
        persisted = cafe_central.with_changes(id=3, created_at=now, updated_at=now)

        assert persisted.same_content(cafe_central)
        assert persisted != cafe_central

    def test_same_content_detects_field_change(self, cafe_central):
        assert not cafe_central.same_content(cafe_central.with_changes(description="x"))

    def test_mutable_fields(self, cafe_central):
        assert set(cafe_central.mutable_fields()) == {"name", "description", "type", "campus", "address"}


@pytest.mark.unit
class TestParsePos:
    """Tests for parse_pos"""

    def test_parse_valid_payload(self):
        pos = parse_pos(valid_payload(description="Espresso"))

        assert pos.name == "Café Central"
        assert pos.description == "Espresso"

    def test_parse_invalid_payload_raises_domain_error(self):
        payload = valid_payload(name="")
        payload["address"]["house_number"] = "x1"

        with pytest.raises(exceptions.ValidationError) as exc_info:
            parse_pos(payload)

        locations = {".".join(str(p) for p in err["loc"]) for err in exc_info.value.errors}
        assert "name" in locations
        assert "address.house_number" in locations

    def test_bad_house_number_is_reported_as_validation_error(self):
        payload = valid_payload()
        payload["address"]["house_number"] = "21²"

        with pytest.raises(exceptions.ValidationError) as exc_info:
            parse_pos(payload)

        assert not isinstance(exc_info.value, exceptions.InvalidHouseNumberError)
        assert [err["loc"] for err in exc_info.value.errors] == [("address", "house_number")]

    def test_parse_missing_fields(self):
        with pytest.raises(exceptions.ValidationError) as exc_info:
            parse_pos({"name": "Only a name"})
        assert "campus" in str(exc_info.value)


@pytest.mark.unit
class TestOsmNode:
    """Tests for OsmNode model"""

    def test_valid_node(self):
        assert OsmNode(node_id=5589879349).node_id == 5589879349

    def test_non_positive_node_id(self):
        with pytest.raises(ValidationError):
            OsmNode(node_id=0)
