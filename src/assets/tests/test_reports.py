"""Tests for ministry reports."""

from decimal import Decimal

from assets.factories import AssetRecordFactory
from assets.models import AssetRecord
from assets.services.reports import ministry_summary, status_breakdown


class TestMinistrySummary:
    def test_counts_and_approved_values(
        self, ministry, other_ministry, category
    ):
        AssetRecordFactory(ministry=ministry, category=category)
        AssetRecordFactory(
            ministry=ministry,
            category=category,
            approved=True,
            purchase_cost=Decimal("1000.00"),
            market_value=Decimal("800.00"),
        )
        AssetRecordFactory(
            ministry=ministry,
            category=category,
            approved=True,
            purchase_cost=Decimal("500.50"),
        )
        AssetRecordFactory(ministry=ministry, category=category, rejected=True)

        rows = {row["ministry"]: row for row in ministry_summary()}
        works = rows["Federal Ministry of Works"]
        assert works["total"] == 4
        assert works["by_status"] == {
            "pending": 1,
            "pending_ministry_review": 0,
            "approved": 2,
            "rejected": 1,
        }
        assert works["approved_purchase_cost"] == Decimal("1500.50")
        assert works["approved_market_value"] == Decimal("800.00")

        health = rows["Federal Ministry of Health"]
        assert health["total"] == 0
        assert health["approved_purchase_cost"] == Decimal("0")

    def test_restricted_to_ministries(self, ministry, other_ministry):
        rows = ministry_summary([ministry.pk])
        assert [row["ministry_id"] for row in rows] == [ministry.pk]


class TestStatusBreakdown:
    def test_includes_empty_statuses(self, pending_record):
        counts = status_breakdown()
        assert counts[AssetRecord.STATUS_PENDING] == 1
        assert counts[AssetRecord.STATUS_APPROVED] == 0
        assert set(counts) == {s for s, _ in AssetRecord.STATUS_CHOICES}

    def test_uses_given_queryset(self, pending_record, review_record):
        counts = status_breakdown(
            AssetRecord.objects.filter(ministry=review_record.ministry)
        )
        assert counts[AssetRecord.STATUS_PENDING] == 0
        assert counts[AssetRecord.STATUS_MINISTRY_REVIEW] == 1
