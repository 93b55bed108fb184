"""Seed the standard asset categories and their required attributes."""

from django.core.management.base import BaseCommand

from assets.models import Category
from assets.services.categories import DEFAULT_CATEGORIES, category_slug


class Command(BaseCommand):
    help = "Create or update the standard asset categories"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report what would change without saving",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        created_count = 0
        updated_count = 0

        for name, required_fields in DEFAULT_CATEGORIES.items():
            category = Category.objects.filter(name=name).first()
            if category is None:
                created_count += 1
                if not dry_run:
                    Category.objects.create(
                        name=name,
                        slug=category_slug(name),
                        required_fields=required_fields,
                    )
                self.stdout.write(f"  Created: {name}")
            elif category.required_fields != required_fields:
                updated_count += 1
                if not dry_run:
                    category.required_fields = required_fields
                    category.save(update_fields=["required_fields"])
                self.stdout.write(f"  Updated: {name}")

        prefix = "[DRY RUN] " if dry_run else ""
        self.stdout.write(
            self.style.SUCCESS(
                f"{prefix}{created_count} created, "
                f"{updated_count} updated, "
                f"{len(DEFAULT_CATEGORIES)} categories total."
            )
        )
