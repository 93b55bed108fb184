"""Aggregate reporting across ministries."""

from decimal import Decimal

from django.db.models import Count, Q, Sum

from ..models import AssetRecord, Ministry

APPROVED = Q(assets__status=AssetRecord.STATUS_APPROVED)


def ministry_summary(ministry_ids=None) -> list[dict]:
    """Per-ministry record counts by status and approved asset values.

    Args:
        ministry_ids: Restrict the report to these ministries. None
            reports on every ministry.
    """
    queryset = Ministry.objects.all()
    if ministry_ids is not None:
        queryset = queryset.filter(pk__in=ministry_ids)

    status_counts = {
        f"{status}_count": Count(
            "assets", filter=Q(assets__status=status)
        )
        for status, _label in AssetRecord.STATUS_CHOICES
    }
    queryset = queryset.annotate(
        total_count=Count("assets"),
        approved_purchase_cost=Sum("assets__purchase_cost", filter=APPROVED),
        approved_market_value=Sum("assets__market_value", filter=APPROVED),
        **status_counts,
    ).order_by("name")

    rows = []
    for ministry in queryset:
        rows.append(
            {
                "ministry_id": ministry.pk,
                "ministry": ministry.name,
                "total": ministry.total_count,
                "by_status": {
                    status: getattr(ministry, f"{status}_count")
                    for status, _label in AssetRecord.STATUS_CHOICES
                },
                "approved_purchase_cost": (
                    ministry.approved_purchase_cost or Decimal("0")
                ),
                "approved_market_value": (
                    ministry.approved_market_value or Decimal("0")
                ),
            }
        )
    return rows


def status_breakdown(queryset=None) -> dict:
    """Count records per status, including statuses with no records."""
    if queryset is None:
        queryset = AssetRecord.objects.all()
    counts = dict.fromkeys(
        (status for status, _label in AssetRecord.STATUS_CHOICES), 0
    )
    for row in queryset.order_by().values("status").annotate(n=Count("pk")):
        counts[row["status"]] = row["n"]
    return counts
