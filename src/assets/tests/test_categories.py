"""Tests for category schemas and record field validation."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from django.utils import timezone

from assets.exceptions import ValidationError
from assets.services.categories import (
    DEFAULT_CATEGORIES,
    category_slug,
    clean_record_changes,
    clean_record_fields,
    field_label,
    parse_purchase_date,
    validate_attributes,
)

VALID_FIELDS = {
    "description": "Toyota Hilux",
    "location": "Abuja HQ",
    "purchase_date": "2021-06-30",
    "purchase_cost": "18500000",
}


class TestHelpers:
    @pytest.mark.parametrize(
        "name,slug",
        [
            ("Motor Vehicle", "motor-vehicle"),
            ("Furniture & Fittings", "furniture-fittings"),
            ("Securities/Financial Assets", "securities-financial-assets"),
            ("Plant/Generator", "plant-generator"),
        ],
    )
    def test_category_slug(self, name, slug):
        assert category_slug(name) == slug

    @pytest.mark.parametrize(
        "name,label",
        [
            ("registrationNumber", "Registration Number"),
            ("capacityKW", "Capacity KW"),
            ("make", "Make"),
            ("sizeInHectares", "Size In Hectares"),
        ],
    )
    def test_field_label(self, name, label):
        assert field_label(name) == label

    def test_default_categories(self):
        assert len(DEFAULT_CATEGORIES) == 10
        assert DEFAULT_CATEGORIES["Others"] == []
        assert "registrationNumber" in DEFAULT_CATEGORIES["Motor Vehicle"]


class TestValidateAttributes:
    def test_all_required_present(self, vehicle_category):
        attributes = {
            "make": "Toyota",
            "model": "Hilux",
            "year": 2021,
            "mileage": 42000,
            "registrationNumber": "ABJ-123-XY",
            "condition": "Good",
        }
        assert validate_attributes(vehicle_category, attributes) == attributes

    def test_reports_every_missing_field(self, vehicle_category):
        with pytest.raises(ValidationError) as exc_info:
            validate_attributes(
                vehicle_category, {"make": "Toyota", "model": "  "}
            )
        fields = exc_info.value.fields
        assert "attributes.model" in fields
        assert "attributes.registrationNumber" in fields
        assert "attributes.make" not in fields
        assert fields["attributes.year"] == (
            "Year is required for Motor Vehicle assets."
        )

    def test_zero_and_false_are_values(self, category):
        category.required_fields = ["mileage", "currentlyInUse"]
        cleaned = validate_attributes(
            category, {"mileage": 0, "currentlyInUse": False}
        )
        assert cleaned == {"mileage": 0, "currentlyInUse": False}

    def test_unknown_attributes_are_dropped(self, category):
        category.required_fields = ["condition"]
        cleaned = validate_attributes(
            category, {"condition": "Fair", "colour": "white"}
        )
        assert cleaned == {"condition": "Fair"}

    def test_non_string_keys_rejected(self, category):
        with pytest.raises(ValidationError) as exc_info:
            validate_attributes(category, {1: "x"})
        assert "attributes" in exc_info.value.fields

    def test_attributes_must_be_a_map(self, category):
        with pytest.raises(ValidationError):
            validate_attributes(category, ["make", "Toyota"])

    def test_none_is_empty(self, category):
        assert validate_attributes(category, None) == {}


class TestParsePurchaseDate:
    def test_iso_string(self):
        assert parse_purchase_date("2020-02-29") == date(2020, 2, 29)

    def test_day_month_year_map(self):
        value = {"day": "5", "month": 11, "year": 2019}
        assert parse_purchase_date(value) == date(2019, 11, 5)

    @pytest.mark.parametrize(
        "value", ["31/12/2020", "2021-02-30", {"day": 1}, 20200101]
    )
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_purchase_date(value)


class TestCleanRecordFields:
    def test_valid(self):
        cleaned = clean_record_fields(VALID_FIELDS)
        assert cleaned["description"] == "Toyota Hilux"
        assert cleaned["purchase_date"] == date(2021, 6, 30)
        assert cleaned["purchase_cost"] == Decimal("18500000.00")
        assert "market_value" not in cleaned

    def test_required_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            clean_record_fields({})
        assert set(exc_info.value.fields) == {
            "description",
            "location",
            "purchase_date",
            "purchase_cost",
        }

    @pytest.mark.parametrize("cost", ["0", "-100", 0, "abc", True])
    def test_cost_must_be_positive_number(self, cost):
        with pytest.raises(ValidationError) as exc_info:
            clean_record_fields({**VALID_FIELDS, "purchase_cost": cost})
        assert "purchase_cost" in exc_info.value.fields

    def test_cost_is_rounded_to_kobo(self):
        cleaned = clean_record_fields(
            {**VALID_FIELDS, "purchase_cost": "1200.555"}
        )
        assert cleaned["purchase_cost"] == Decimal("1200.56")

    @pytest.mark.parametrize("cost", ["1e30", "1e15", "1000000000000"])
    def test_cost_too_large(self, cost):
        with pytest.raises(ValidationError) as exc_info:
            clean_record_fields({**VALID_FIELDS, "purchase_cost": cost})
        assert "purchase_cost" in exc_info.value.fields

    def test_largest_storable_cost(self):
        cleaned = clean_record_fields(
            {**VALID_FIELDS, "purchase_cost": "999,999,999,999.99"}
        )
        assert cleaned["purchase_cost"] == Decimal("999999999999.99")

    def test_market_value_too_large(self):
        with pytest.raises(ValidationError) as exc_info:
            clean_record_fields({**VALID_FIELDS, "market_value": "2e12"})
        assert "market_value" in exc_info.value.fields

    def test_market_value_optional_but_positive(self):
        cleaned = clean_record_fields({**VALID_FIELDS, "market_value": ""})
        assert cleaned["market_value"] is None

        with pytest.raises(ValidationError) as exc_info:
            clean_record_fields({**VALID_FIELDS, "market_value": "-5"})
        assert "market_value" in exc_info.value.fields

    def test_year_before_1900(self):
        with pytest.raises(ValidationError) as exc_info:
            clean_record_fields(
                {**VALID_FIELDS, "purchase_date": "1899-12-31"}
            )
        assert "1900" in exc_info.value.fields["purchase_date"]

    def test_future_date(self):
        tomorrow = timezone.localdate() + timedelta(days=1)
        with pytest.raises(ValidationError) as exc_info:
            clean_record_fields(
                {**VALID_FIELDS, "purchase_date": tomorrow.isoformat()}
            )
        assert "future" in exc_info.value.fields["purchase_date"]

    def test_partial_only_checks_supplied_fields(self):
        assert clean_record_fields({"remarks": " ok "}, partial=True) == {
            "remarks": "ok"
        }

    def test_partial_rejects_blanked_required_field(self):
        with pytest.raises(ValidationError):
            clean_record_fields({"description": ""}, partial=True)


class TestCleanRecordChanges:
    def test_attributes_checked_against_record_category(
        self, ministry, vehicle_category
    ):
        from assets.factories import AssetRecordFactory

        record = AssetRecordFactory(
            ministry=ministry, category=vehicle_category
        )
        with pytest.raises(ValidationError) as exc_info:
            clean_record_changes(record, {"attributes": {"make": "Toyota"}})
        assert "attributes.model" in exc_info.value.fields

    def test_none_means_no_changes(self, pending_record):
        assert clean_record_changes(pending_record, None) == {}

    def test_changes_must_be_a_map(self, pending_record):
        with pytest.raises(ValidationError):
            clean_record_changes(pending_record, "cost=5")
