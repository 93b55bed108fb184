"""Models for the FAMS asset registry."""

import random

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.core.validators import MinValueValidator
from django.db import IntegrityError, models, transaction
from django.utils import timezone


def ministry_review_default():
    """Default for Ministry.requires_ministry_review on new ministries."""
    return getattr(settings, "MINISTRY_REVIEW_DEFAULT", False)


class Ministry(models.Model):
    """Federal ministry, agency or parastatal that owns asset records."""

    name = models.CharField(max_length=200, unique=True)
    ministry_type = models.CharField(
        max_length=100,
        blank=True,
        help_text="Federal Ministry, Agency, Parastatal, Commission, ...",
    )
    official_email = models.EmailField(blank=True)
    location = models.CharField(
        max_length=200, blank=True, help_text="Headquarters location"
    )
    is_active = models.BooleanField(default=True)
    requires_ministry_review = models.BooleanField(
        default=ministry_review_default,
        help_text=(
            "If True, assets approved by an agency approver are forwarded "
            "to the ministry admin for a second review."
        ),
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "ministries"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Category(models.Model):
    """Asset classification carrying its required attribute schema."""

    name = models.CharField(max_length=100, unique=True)
    slug = models.SlugField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    required_fields = models.JSONField(
        default=list,
        blank=True,
        help_text="Attribute names every asset in this category must supply",
    )

    class Meta:
        verbose_name_plural = "categories"
        ordering = ["name"]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            from .services.categories import category_slug

            self.slug = category_slug(self.name)
        super().save(*args, **kwargs)


class AssetRecord(models.Model):
    """Asset uploaded by an agency and routed through approval."""

    STATUS_PENDING = "pending"
    STATUS_MINISTRY_REVIEW = "pending_ministry_review"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_MINISTRY_REVIEW, "Pending Ministry Review"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
    ]

    REJECTION_LEVEL_CHOICES = [
        ("approver", "Approver"),
        ("ministry-admin", "Ministry Admin"),
        ("federal-admin", "Federal Admin"),
    ]

    # Valid state transitions: from_status -> [to_statuses]
    VALID_TRANSITIONS = {
        STATUS_PENDING: [
            STATUS_MINISTRY_REVIEW,
            STATUS_APPROVED,
            STATUS_REJECTED,
        ],
        STATUS_MINISTRY_REVIEW: [STATUS_APPROVED, STATUS_REJECTED],
        STATUS_APPROVED: [],
        STATUS_REJECTED: [STATUS_PENDING],
    }

    IMMUTABLE_FIELDS = ("uploaded_by_id", "ministry_id")

    asset_code = models.CharField(
        max_length=50,
        unique=True,
        blank=True,
        help_text="Agency asset ID; generated when left blank",
    )
    ministry = models.ForeignKey(
        Ministry,
        on_delete=models.PROTECT,
        related_name="assets",
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        related_name="assets",
    )
    description = models.TextField()
    location = models.CharField(
        max_length=200, help_text="Where the asset is located"
    )
    purchase_date = models.DateField()
    purchase_cost = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    market_value = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    remarks = models.TextField(blank=True)
    attributes = models.JSONField(
        default=dict,
        blank=True,
        encoder=DjangoJSONEncoder,
        help_text="Category-specific fields (make, model, title type, ...)",
    )
    status = models.CharField(
        max_length=30, choices=STATUS_CHOICES, default=STATUS_PENDING
    )
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="uploaded_assets",
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_assets",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by_ministry = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ministry_approved_assets",
    )
    approved_by_ministry_at = models.DateTimeField(null=True, blank=True)
    rejected_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="rejected_assets",
    )
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True, default="")
    rejection_level = models.CharField(
        max_length=20,
        choices=REJECTION_LEVEL_CHOICES,
        blank=True,
        default="",
    )
    resubmission_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at"]
        indexes = [
            models.Index(fields=["status"], name="idx_record_status"),
            models.Index(
                fields=["ministry", "status"],
                name="idx_record_ministry_status",
            ),
            models.Index(fields=["created_at"], name="idx_record_created_at"),
        ]
        permissions = [
            ("can_approve_assets", "Can approve or reject uploaded assets"),
            (
                "can_review_ministry_assets",
                "Can give ministry-level approval to assets",
            ),
            (
                "can_view_all_assets",
                "Can view assets and reports across all ministries",
            ),
        ]

    def __str__(self):
        return f"{self.asset_code} ({self.get_status_display()})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            self._check_immutable_fields()
        if self.asset_code:
            super().save(*args, **kwargs)
            return
        max_attempts = 5
        for attempt in range(max_attempts):
            self.asset_code = self._generate_asset_code()
            try:
                with transaction.atomic():
                    super().save(*args, **kwargs)
                return
            except IntegrityError:
                if attempt >= max_attempts - 1:
                    raise

    def clean(self):
        super().clean()
        if self.status == self.STATUS_APPROVED and not (
            self.approved_by_id and self.approved_at
        ):
            raise ValidationError(
                "Approved assets must record who approved them and when."
            )
        if self.status == self.STATUS_REJECTED:
            if not (self.rejected_by_id and self.rejected_at):
                raise ValidationError(
                    "Rejected assets must record who rejected them and when."
                )
            if not self.rejection_reason.strip():
                raise ValidationError(
                    {"rejection_reason": "A rejection reason is required."}
                )

    def can_transition_to(self, new_status):
        """Check if the status transition is valid."""
        return new_status in self.VALID_TRANSITIONS.get(self.status, [])

    def _check_immutable_fields(self):
        stored = (
            type(self)
            .objects.filter(pk=self.pk)
            .values(*self.IMMUTABLE_FIELDS)
            .first()
        )
        if stored is None:
            return
        for field in self.IMMUTABLE_FIELDS:
            if stored[field] != getattr(self, field):
                raise ValidationError(
                    f"'{field.removesuffix('_id')}' cannot be changed "
                    f"after upload."
                )

    def _generate_asset_code(self):
        """Generate an asset ID of the form PREFIX-YYYYMMDD-NNNN."""
        prefix = getattr(settings, "ASSET_ID_PREFIX", "ASSET")
        today = timezone.localdate()
        return f"{prefix}-{today:%Y%m%d}-{random.randint(1000, 9999)}"

    @property
    def is_final(self):
        return self.status == self.STATUS_APPROVED


class AuditEntryQuerySet(models.QuerySet):
    """Queryset that refuses bulk changes to audit entries."""

    def update(self, **kwargs):
        raise ValidationError(
            "Audit entries are immutable and cannot be modified."
        )

    def delete(self):
        raise ValidationError(
            "Audit entries are immutable and cannot be deleted."
        )


class AuditEntry(models.Model):
    """Immutable log of every workflow action taken on a resource."""

    ACTION_CHOICES = [
        ("upload", "Upload"),
        ("approve", "Approve"),
        ("reject", "Reject"),
        ("resubmit", "Resubmit"),
    ]

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="audit_entries",
        help_text="The user who performed the action",
    )
    actor_role = models.CharField(max_length=30, blank=True)
    action = models.CharField(max_length=30, choices=ACTION_CHOICES)
    resource_type = models.CharField(max_length=30, default="asset")
    resource_id = models.CharField(max_length=64)
    from_state = models.CharField(max_length=30, blank=True)
    to_state = models.CharField(max_length=30, blank=True)
    timestamp = models.DateTimeField(default=timezone.now)
    metadata = models.JSONField(
        default=dict, blank=True, encoder=DjangoJSONEncoder
    )

    objects = AuditEntryQuerySet.as_manager()

    class Meta:
        verbose_name_plural = "audit entries"
        ordering = ["-timestamp", "-pk"]
        indexes = [
            models.Index(
                fields=["resource_type", "resource_id"],
                name="idx_audit_resource",
            ),
            models.Index(fields=["action"], name="idx_audit_action"),
            models.Index(fields=["timestamp"], name="idx_audit_timestamp"),
        ]

    def __str__(self):
        return (
            f"{self.get_action_display()} {self.resource_type} "
            f"#{self.resource_id} by {self.actor}"
        )

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValidationError(
                "Audit entries are immutable and cannot be modified."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "Audit entries are immutable and cannot be deleted."
        )
