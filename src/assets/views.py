"""JSON endpoints for asset uploads, review and reporting."""

import json

from django_ratelimit.decorators import ratelimit

from django.contrib.auth.decorators import login_required
from django.core.paginator import Paginator
from django.http import JsonResponse
from django.views.decorators.http import (
    require_GET,
    require_http_methods,
    require_POST,
)

from .exceptions import (
    NotFound,
    TransitionError,
    Unauthorized,
    ValidationError,
)
from .models import AssetRecord
from .services.approval import (
    ACTION_APPROVE,
    ACTION_REJECT,
    ACTION_RESUBMIT,
    apply_transition,
    bulk_approve,
)
from .services.audit import audit_history
from .services.permissions import (
    ROLE_FEDERAL_ADMIN,
    ROLE_MINISTRY_ADMIN,
    actor_context,
    can_view_asset,
    get_user_role,
    visible_assets,
)
from .services.records import create_asset
from .services.reports import ministry_summary, status_breakdown

PAGE_SIZE = 50


def _read_json(request) -> dict:
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, ValueError):
        raise ValidationError("Invalid JSON.")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


def _error_response(exc: TransitionError) -> JsonResponse:
    return JsonResponse(exc.as_dict(), status=exc.http_status)


def _user_ref(user):
    if user is None:
        return None
    return {"id": user.pk, "name": user.get_display_name()}


def serialize_record(record: AssetRecord) -> dict:
    return {
        "id": record.pk,
        "asset_code": record.asset_code,
        "status": record.status,
        "status_display": record.get_status_display(),
        "ministry": {"id": record.ministry_id, "name": record.ministry.name},
        "category": {
            "id": record.category_id,
            "name": record.category.name,
            "slug": record.category.slug,
        },
        "description": record.description,
        "location": record.location,
        "purchase_date": record.purchase_date,
        "purchase_cost": record.purchase_cost,
        "market_value": record.market_value,
        "remarks": record.remarks,
        "attributes": record.attributes,
        "uploaded_by": _user_ref(record.uploaded_by),
        "approved_by": _user_ref(record.approved_by),
        "approved_at": record.approved_at,
        "approved_by_ministry": _user_ref(record.approved_by_ministry),
        "approved_by_ministry_at": record.approved_by_ministry_at,
        "rejected_by": _user_ref(record.rejected_by),
        "rejected_at": record.rejected_at,
        "rejection_reason": record.rejection_reason,
        "rejection_level": record.rejection_level,
        "resubmission_count": record.resubmission_count,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }


def serialize_audit_entry(entry) -> dict:
    return {
        "action": entry.action,
        "actor": _user_ref(entry.actor),
        "actor_role": entry.actor_role,
        "from_state": entry.from_state,
        "to_state": entry.to_state,
        "timestamp": entry.timestamp,
        "metadata": entry.metadata,
    }


@login_required
@require_http_methods(["GET", "POST"])
def asset_collection(request):
    """List visible asset records, or upload a new one on POST."""
    if request.method == "POST":
        try:
            record = create_asset(request.user, _read_json(request))
        except TransitionError as exc:
            return _error_response(exc)
        return JsonResponse(serialize_record(record), status=201)

    queryset = visible_assets(request.user)
    status = request.GET.get("status", "").strip()
    if status:
        if status not in dict(AssetRecord.STATUS_CHOICES):
            return _error_response(
                ValidationError(fields={"status": "Unknown status."})
            )
        queryset = queryset.filter(status=status)

    queryset = queryset.select_related(
        "approved_by", "approved_by_ministry", "rejected_by"
    ).order_by("-updated_at", "-pk")
    paginator = Paginator(queryset, PAGE_SIZE)
    page = paginator.get_page(request.GET.get("page"))
    return JsonResponse(
        {
            "count": paginator.count,
            "page": page.number,
            "num_pages": paginator.num_pages,
            "results": [serialize_record(r) for r in page],
        }
    )


@login_required
@require_GET
def asset_detail(request, pk):
    """Single record with its audit history."""
    record = (
        AssetRecord.objects.select_related(
            "ministry",
            "category",
            "uploaded_by",
            "approved_by",
            "approved_by_ministry",
            "rejected_by",
        )
        .filter(pk=pk)
        .first()
    )
    if record is None:
        return _error_response(NotFound())
    if not can_view_asset(request.user, record):
        return _error_response(
            Unauthorized("You do not have access to this asset.")
        )
    data = serialize_record(record)
    data["history"] = [
        serialize_audit_entry(entry) for entry in audit_history(record.pk)
    ]
    return JsonResponse(data)


def _transition(request, pk, action):
    try:
        actor_id, role, ministry_id = actor_context(request.user)
        payload = _read_json(request)
        record = apply_transition(
            pk,
            actor_id,
            role,
            action,
            payload,
            actor_ministry_id=ministry_id,
        )
    except TransitionError as exc:
        return _error_response(exc)
    return JsonResponse(serialize_record(record))


@login_required
@require_POST
@ratelimit(key="user", rate="60/m", method="POST", block=True)
def asset_approve(request, pk):
    return _transition(request, pk, ACTION_APPROVE)


@login_required
@require_POST
@ratelimit(key="user", rate="60/m", method="POST", block=True)
def asset_reject(request, pk):
    """Reject a record; body ``{"rejection_reason": "..."}``."""
    return _transition(request, pk, ACTION_REJECT)


@login_required
@require_POST
@ratelimit(key="user", rate="60/m", method="POST", block=True)
def asset_resubmit(request, pk):
    """Resubmit a rejected record; body ``{"changes": {...}}``."""
    return _transition(request, pk, ACTION_RESUBMIT)


@login_required
@require_POST
@ratelimit(key="user", rate="10/m", method="POST", block=True)
def asset_bulk_approve(request):
    """Approve several records; body ``{"ids": [...]}``.

    Always answers 200 with one result per record unless the whole batch
    is refused.
    """
    try:
        actor_id, role, ministry_id = actor_context(request.user)
        ids = _read_json(request).get("ids")
        if not isinstance(ids, list) or not ids:
            raise ValidationError(
                fields={"ids": "Provide a non-empty list of record IDs."}
            )
        if not all(isinstance(i, (int, str)) for i in ids):
            raise ValidationError(
                fields={"ids": "Record IDs must be numbers or strings."}
            )
        results = bulk_approve(
            ids, actor_id, role, actor_ministry_id=ministry_id
        )
    except TransitionError as exc:
        return _error_response(exc)

    succeeded = sum(1 for r in results if r.success)
    return JsonResponse(
        {
            "succeeded": succeeded,
            "failed": len(results) - succeeded,
            "results": [r.as_dict() for r in results],
        }
    )


@login_required
@require_GET
def ministry_report(request):
    """Per-ministry totals; ministry admins see their own ministry only."""
    role = get_user_role(request.user)
    if role == ROLE_FEDERAL_ADMIN:
        ministry_ids = None
        records = AssetRecord.objects.all()
    elif role == ROLE_MINISTRY_ADMIN and request.user.ministry_id:
        ministry_ids = [request.user.ministry_id]
        records = AssetRecord.objects.filter(
            ministry_id=request.user.ministry_id
        )
    else:
        return _error_response(
            Unauthorized("You do not have access to ministry reports.")
        )
    return JsonResponse(
        {
            "ministries": ministry_summary(ministry_ids),
            "status_breakdown": status_breakdown(records),
        }
    )
