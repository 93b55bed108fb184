"""Admin configuration for the asset registry using django-unfold."""

from unfold.admin import ModelAdmin
from unfold.contrib.filters.admin import (
    ChoicesDropdownFilter,
    RelatedDropdownFilter,
)
from unfold.decorators import action, display

from django.contrib import admin, messages

from .exceptions import TransitionError
from .models import AssetRecord, AuditEntry, Category, Ministry
from .services.approval import bulk_approve
from .services.categories import field_label
from .services.permissions import actor_context


@admin.register(Ministry)
class MinistryAdmin(ModelAdmin):
    list_display = [
        "name",
        "ministry_type",
        "official_email",
        "display_review",
        "display_active",
        "display_asset_count",
    ]
    list_filter = ["is_active", "requires_ministry_review"]
    search_fields = ["name", "official_email", "location"]

    @display(description="Ministry review", boolean=True)
    def display_review(self, obj):
        return obj.requires_ministry_review

    @display(description="Active", boolean=True)
    def display_active(self, obj):
        return obj.is_active

    @display(description="Assets")
    def display_asset_count(self, obj):
        return obj.assets.count()


@admin.register(Category)
class CategoryAdmin(ModelAdmin):
    list_display = ["name", "slug", "display_required_fields"]
    search_fields = ["name", "description"]
    prepopulated_fields = {"slug": ["name"]}

    @display(description="Required fields")
    def display_required_fields(self, obj):
        fields = obj.required_fields or []
        return ", ".join(field_label(f) for f in fields) or "-"


@admin.register(AssetRecord)
class AssetRecordAdmin(ModelAdmin):
    list_display = [
        "asset_code",
        "description",
        "ministry",
        "category",
        "display_status",
        "uploaded_by",
        "updated_at",
    ]
    list_filter = [
        ("status", ChoicesDropdownFilter),
        ("ministry", RelatedDropdownFilter),
        ("category", RelatedDropdownFilter),
    ]
    search_fields = [
        "asset_code",
        "description",
        "location",
        "ministry__name",
    ]
    date_hierarchy = "created_at"
    list_select_related = ["ministry", "category", "uploaded_by"]
    readonly_fields = [
        "status",
        "uploaded_by",
        "approved_by",
        "approved_at",
        "approved_by_ministry",
        "approved_by_ministry_at",
        "rejected_by",
        "rejected_at",
        "rejection_reason",
        "rejection_level",
        "resubmission_count",
        "created_at",
        "updated_at",
    ]
    fieldsets = (
        (
            "Asset",
            {
                "classes": ["tab"],
                "fields": (
                    "asset_code",
                    "ministry",
                    "category",
                    "description",
                    "location",
                    "purchase_date",
                    "purchase_cost",
                    "market_value",
                    "remarks",
                    "attributes",
                ),
            },
        ),
        (
            "Workflow",
            {
                "classes": ["tab"],
                "fields": (
                    "status",
                    "uploaded_by",
                    "approved_by",
                    "approved_at",
                    "approved_by_ministry",
                    "approved_by_ministry_at",
                    "rejected_by",
                    "rejected_at",
                    "rejection_reason",
                    "rejection_level",
                    "resubmission_count",
                    "created_at",
                    "updated_at",
                ),
            },
        ),
    )
    actions = ["approve_selected"]

    @display(
        description="Status",
        label={
            AssetRecord.STATUS_PENDING: "warning",
            AssetRecord.STATUS_MINISTRY_REVIEW: "info",
            AssetRecord.STATUS_APPROVED: "success",
            AssetRecord.STATUS_REJECTED: "danger",
        },
    )
    def display_status(self, obj):
        return obj.status

    def has_add_permission(self, request):
        # Records are created through create_asset().
        return False

    def get_readonly_fields(self, request, obj=None):
        readonly = list(super().get_readonly_fields(request, obj))
        if obj is not None:
            readonly.append("ministry")
        return readonly

    @action(description="Approve selected (agency approvers)")
    def approve_selected(self, request, queryset):
        try:
            actor_id, role, ministry_id = actor_context(request.user)
            results = bulk_approve(
                list(queryset.values_list("pk", flat=True)),
                actor_id,
                role,
                actor_ministry_id=ministry_id,
            )
        except TransitionError as exc:
            messages.error(request, exc.message)
            return
        succeeded = sum(1 for r in results if r.success)
        failed = len(results) - succeeded
        if succeeded:
            messages.success(request, f"{succeeded} asset(s) approved.")
        if failed:
            messages.warning(
                request, f"{failed} asset(s) could not be approved."
            )


@admin.register(AuditEntry)
class AuditEntryAdmin(ModelAdmin):
    list_display = [
        "timestamp",
        "display_action",
        "resource_id",
        "actor",
        "actor_role",
        "from_state",
        "to_state",
    ]
    list_filter = [("action", ChoicesDropdownFilter), "actor_role"]
    search_fields = ["resource_id", "actor__username", "actor__email"]
    date_hierarchy = "timestamp"
    readonly_fields = [
        "actor",
        "actor_role",
        "action",
        "resource_type",
        "resource_id",
        "from_state",
        "to_state",
        "timestamp",
        "metadata",
    ]

    @display(
        description="Action",
        label={
            "upload": "default",
            "approve": "success",
            "reject": "danger",
            "resubmit": "info",
        },
    )
    def display_action(self, obj):
        return obj.action

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
