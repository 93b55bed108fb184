import assets.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Ministry",
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
                ("name", models.CharField(max_length=200, unique=True)),
                (
                    "ministry_type",
                    models.CharField(
                        blank=True,
                        help_text=(
                            "Federal Ministry, Agency, Parastatal, "
                            "Commission, ..."
                        ),
                        max_length=100,
                    ),
                ),
                (
                    "official_email",
                    models.EmailField(blank=True, max_length=254),
                ),
                (
                    "location",
                    models.CharField(
                        blank=True,
                        help_text="Headquarters location",
                        max_length=200,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                (
                    "requires_ministry_review",
                    models.BooleanField(
                        default=assets.models.ministry_review_default,
                        help_text=(
                            "If True, assets approved by an agency approver "
                            "are forwarded to the ministry admin for a "
                            "second review."
                        ),
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name_plural": "ministries",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Category",
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
                ("name", models.CharField(max_length=100, unique=True)),
                ("slug", models.SlugField(max_length=100, unique=True)),
                ("description", models.TextField(blank=True)),
                (
                    "required_fields",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text=(
                            "Attribute names every asset in this category "
                            "must supply"
                        ),
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "categories",
                "ordering": ["name"],
            },
        ),
    ]
