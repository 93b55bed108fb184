"""Read and compare-and-set access to asset records."""

from typing import Protocol

from django.utils import timezone

from ..exceptions import ConflictError, NotFound
from ..models import AssetRecord, Ministry


class PersistenceGateway(Protocol):
    def get_by_id(self, record_id) -> AssetRecord: ...

    def compare_and_set(
        self, record_id, expected_status: str, changes: dict
    ) -> AssetRecord: ...

    def ministry_requires_review(self, ministry_id) -> bool: ...


class DjangoRecordGateway:
    """Gateway backed by the Django ORM.

    ``compare_and_set`` issues a single conditional UPDATE guarded by the
    expected status, so two writers acting on the same prior state cannot
    both succeed.
    """

    def get_by_id(self, record_id) -> AssetRecord:
        try:
            return AssetRecord.objects.select_related(
                "ministry", "category", "uploaded_by"
            ).get(pk=record_id)
        except (AssetRecord.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Asset record '{record_id}' not found.")

    def compare_and_set(
        self, record_id, expected_status: str, changes: dict
    ) -> AssetRecord:
        """Write ``changes`` only if the record still has ``expected_status``.

        Raises NotFound if the record no longer exists and ConflictError if
        its status moved on since it was read.
        """
        updated = AssetRecord.objects.filter(
            pk=record_id, status=expected_status
        ).update(**changes, updated_at=timezone.now())
        if updated == 0:
            if not AssetRecord.objects.filter(pk=record_id).exists():
                raise NotFound(f"Asset record '{record_id}' not found.")
            raise ConflictError()
        return self.get_by_id(record_id)

    def ministry_requires_review(self, ministry_id) -> bool:
        """Whether first-tier approvals for the ministry go to a second review.

        Unknown ministries do not require review.
        """
        return Ministry.objects.filter(
            pk=ministry_id, requires_ministry_review=True
        ).exists()
