"""Tests for asset uploads."""

from decimal import Decimal

import pytest

from assets.exceptions import Unauthorized, ValidationError
from assets.models import AssetRecord, AuditEntry
from assets.services.records import create_asset, resolve_category


def _payload(**overrides):
    data = {
        "category": "others",
        "description": "Perkins 100kVA generator",
        "location": "Block C, Federal Secretariat",
        "purchase_date": "2019-03-01",
        "purchase_cost": "12,750,000.00",
    }
    data.update(overrides)
    return data


class TestResolveCategory:
    def test_by_slug_name_and_pk(self, category):
        assert resolve_category("others") == category
        assert resolve_category("OTHERS") == category
        assert resolve_category(category.pk) == category
        assert resolve_category(str(category.pk)) == category

    def test_unknown(self, db):
        with pytest.raises(ValidationError) as exc_info:
            resolve_category("spaceships")
        assert "spaceships" in exc_info.value.fields["category"]

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing(self, db, value):
        with pytest.raises(ValidationError) as exc_info:
            resolve_category(value)
        assert exc_info.value.fields["category"] == "This field is required."


class TestCreateAsset:
    def test_creates_pending_record(self, uploader, category):
        record = create_asset(uploader, _payload())

        assert record.status == AssetRecord.STATUS_PENDING
        assert record.ministry == uploader.ministry
        assert record.category == category
        assert record.uploaded_by == uploader
        assert record.purchase_cost == Decimal("12750000.00")
        assert record.asset_code
        assert record.approved_by is None
        assert record.rejected_by is None

    def test_records_upload_audit_entry(self, uploader, category):
        record = create_asset(uploader, _payload())

        entry = AuditEntry.objects.get(resource_id=str(record.pk))
        assert entry.action == "upload"
        assert entry.actor == uploader
        assert entry.actor_role == "agency"
        assert entry.from_state == ""
        assert entry.to_state == "pending"

    def test_notifies_approvers(
        self, uploader, approver, category, mailoutbox
    ):
        record = create_asset(uploader, _payload())

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == [approver.email]
        assert record.asset_code in mailoutbox[0].subject

    def test_uses_supplied_asset_code(self, uploader, category):
        record = create_asset(uploader, _payload(asset_code="FMW-GEN-001"))
        assert record.asset_code == "FMW-GEN-001"

    def test_duplicate_asset_code(self, uploader, category):
        create_asset(uploader, _payload(asset_code="FMW-GEN-001"))
        with pytest.raises(ValidationError) as exc_info:
            create_asset(uploader, _payload(asset_code="fmw-gen-001"))
        assert "asset_code" in exc_info.value.fields

    def test_collects_every_field_error(self, uploader, vehicle_category):
        data = _payload(
            category="motor-vehicle",
            purchase_cost="0",
            location="",
            attributes={"make": "Toyota"},
        )
        with pytest.raises(ValidationError) as exc_info:
            create_asset(uploader, data)

        fields = exc_info.value.fields
        assert "purchase_cost" in fields
        assert "location" in fields
        assert "attributes.registrationNumber" in fields
        assert not AssetRecord.objects.exists()

    @pytest.mark.parametrize("cost", ["1e30", "1e15"])
    def test_oversized_cost_is_a_field_error(self, uploader, category, cost):
        with pytest.raises(ValidationError) as exc_info:
            create_asset(uploader, _payload(purchase_cost=cost))
        assert "purchase_cost" in exc_info.value.fields
        assert not AssetRecord.objects.exists()

    def test_stores_required_attributes(self, uploader, vehicle_category):
        attributes = {
            "make": "Toyota",
            "model": "Hilux",
            "year": 2019,
            "mileage": 88000,
            "registrationNumber": "FG-123-A01",
            "condition": "Fair",
        }
        record = create_asset(
            uploader,
            _payload(category="Motor Vehicle", attributes=attributes),
        )
        record.refresh_from_db()
        assert record.attributes == attributes

    @pytest.mark.parametrize(
        "user_fixture", ["approver", "ministry_admin", "viewer_user"]
    )
    def test_only_uploaders(self, request, category, user_fixture):
        user = request.getfixturevalue(user_fixture)
        with pytest.raises(Unauthorized):
            create_asset(user, _payload())

    def test_uploader_needs_active_ministry(self, uploader, category):
        uploader.ministry.is_active = False
        uploader.ministry.save()

        with pytest.raises(ValidationError) as exc_info:
            create_asset(uploader, _payload())
        assert "ministry" in exc_info.value.fields
