"""Asset record uploads."""

import logging

from django.db import IntegrityError
from django.db import transaction as db_transaction
from django.db.models import Q
from django.utils import timezone

from ..exceptions import Unauthorized, ValidationError
from ..models import AssetRecord, Category
from .audit import AuditEvent, DatabaseAuditRecorder, record_safely
from .categories import clean_record_fields, validate_attributes
from .permissions import ROLE_UPLOADER, get_user_role

logger = logging.getLogger(__name__)


def resolve_category(value) -> Category:
    """Find a category by primary key, slug or name."""
    if isinstance(value, Category):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(fields={"category": "This field is required."})

    lookup = Q(slug=str(value).strip()) | Q(name__iexact=str(value).strip())
    if isinstance(value, int) or str(value).strip().isdigit():
        lookup |= Q(pk=int(value))
    category = Category.objects.filter(lookup).first()
    if category is None:
        raise ValidationError(
            fields={"category": f"Unknown category '{value}'."}
        )
    return category


def create_asset(uploader, data: dict, auditor=None) -> AssetRecord:
    """Create an asset record in ``pending`` for the uploader's ministry.

    Raises Unauthorized if the user cannot upload and ValidationError
    listing every invalid field otherwise.
    """
    from .notifications import notify_upload

    role = get_user_role(uploader)
    if role != ROLE_UPLOADER:
        raise Unauthorized("Only agency uploaders can upload assets.")

    ministry = uploader.ministry
    if ministry is None or not ministry.is_active:
        raise ValidationError(
            fields={
                "ministry": "Your account is not linked to an active "
                "ministry."
            }
        )

    errors = {}
    cleaned = {}
    try:
        cleaned.update(clean_record_fields(data))
    except ValidationError as exc:
        errors.update(exc.fields)

    category = None
    try:
        category = resolve_category(data.get("category"))
    except ValidationError as exc:
        errors.update(exc.fields)

    if category is not None:
        try:
            cleaned["attributes"] = validate_attributes(
                category, data.get("attributes")
            )
        except ValidationError as exc:
            errors.update(exc.fields)

    asset_code = str(data.get("asset_code") or "").strip()
    if asset_code and AssetRecord.objects.filter(
        asset_code__iexact=asset_code
    ).exists():
        errors["asset_code"] = f"Asset ID '{asset_code}' is already in use."

    if errors:
        raise ValidationError(fields=errors)

    record = AssetRecord(
        asset_code=asset_code,
        ministry=ministry,
        category=category,
        uploaded_by=uploader,
        status=AssetRecord.STATUS_PENDING,
        **cleaned,
    )
    try:
        with db_transaction.atomic():
            record.save()
    except IntegrityError:
        raise ValidationError(
            fields={"asset_code": "This asset ID is already in use."}
        )

    logger.info(
        "Asset %s uploaded by user %s for ministry %s",
        record.asset_code,
        uploader.pk,
        ministry.pk,
    )
    record_safely(
        auditor or DatabaseAuditRecorder(),
        AuditEvent(
            actor_id=uploader.pk,
            actor_role=role,
            action="upload",
            resource_id=str(record.pk),
            from_state="",
            to_state=record.status,
            timestamp=timezone.now(),
            metadata={"asset_code": record.asset_code},
        ),
    )
    notify_upload(record)
    return record
