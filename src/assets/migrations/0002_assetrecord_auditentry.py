import django.core.serializers.json
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("assets", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AssetRecord",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "asset_code",
                    models.CharField(
                        blank=True,
                        help_text="Agency asset ID; generated when left blank",
                        max_length=50,
                        unique=True,
                    ),
                ),
                ("description", models.TextField()),
                (
                    "location",
                    models.CharField(
                        help_text="Where the asset is located", max_length=200
                    ),
                ),
                ("purchase_date", models.DateField()),
                (
                    "purchase_cost",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[
                            django.core.validators.MinValueValidator(0)
                        ],
                    ),
                ),
                (
                    "market_value",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=14,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(0)
                        ],
                    ),
                ),
                ("remarks", models.TextField(blank=True)),
                (
                    "attributes",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        encoder=django.core.serializers.json.DjangoJSONEncoder,
                        help_text=(
                            "Category-specific fields (make, model, title "
                            "type, ...)"
                        ),
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            (
                                "pending_ministry_review",
                                "Pending Ministry Review",
                            ),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                        ],
                        default="pending",
                        max_length=30,
                    ),
                ),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                (
                    "approved_by_ministry_at",
                    models.DateTimeField(blank=True, null=True),
                ),
                ("rejected_at", models.DateTimeField(blank=True, null=True)),
                (
                    "rejection_reason",
                    models.TextField(blank=True, default=""),
                ),
                (
                    "rejection_level",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("approver", "Approver"),
                            ("ministry-admin", "Ministry Admin"),
                            ("federal-admin", "Federal Admin"),
                        ],
                        default="",
                        max_length=20,
                    ),
                ),
                (
                    "resubmission_count",
                    models.PositiveIntegerField(default=0),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "ministry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="assets",
                        to="assets.ministry",
                    ),
                ),
                (
                    "category",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="assets",
                        to="assets.category",
                    ),
                ),
                (
                    "uploaded_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="uploaded_assets",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="approved_assets",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "approved_by_ministry",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="ministry_approved_assets",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "rejected_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="rejected_assets",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-updated_at"],
                "permissions": [
                    (
                        "can_approve_assets",
                        "Can approve or reject uploaded assets",
                    ),
                    (
                        "can_review_ministry_assets",
                        "Can give ministry-level approval to assets",
                    ),
                    (
                        "can_view_all_assets",
                        "Can view assets and reports across all ministries",
                    ),
                ],
                "indexes": [
                    models.Index(
                        fields=["status"], name="idx_record_status"
                    ),
                    models.Index(
                        fields=["ministry", "status"],
                        name="idx_record_ministry_status",
                    ),
                    models.Index(
                        fields=["created_at"], name="idx_record_created_at"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AuditEntry",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("actor_role", models.CharField(blank=True, max_length=30)),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("upload", "Upload"),
                            ("approve", "Approve"),
                            ("reject", "Reject"),
                            ("resubmit", "Resubmit"),
                        ],
                        max_length=30,
                    ),
                ),
                (
                    "resource_type",
                    models.CharField(default="asset", max_length=30),
                ),
                ("resource_id", models.CharField(max_length=64)),
                ("from_state", models.CharField(blank=True, max_length=30)),
                ("to_state", models.CharField(blank=True, max_length=30)),
                (
                    "timestamp",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                (
                    "metadata",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        encoder=django.core.serializers.json.DjangoJSONEncoder,
                    ),
                ),
                (
                    "actor",
                    models.ForeignKey(
                        help_text="The user who performed the action",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="audit_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "audit entries",
                "ordering": ["-timestamp", "-pk"],
                "indexes": [
                    models.Index(
                        fields=["resource_type", "resource_id"],
                        name="idx_audit_resource",
                    ),
                    models.Index(fields=["action"], name="idx_audit_action"),
                    models.Index(
                        fields=["timestamp"], name="idx_audit_timestamp"
                    ),
                ],
            },
        ),
    ]
