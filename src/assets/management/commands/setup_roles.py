"""Management command to create the workflow role groups."""

from django.contrib.auth.models import Group, Permission
from django.core.management.base import BaseCommand

VIEW_PERMISSIONS = [
    "view_assetrecord",
    "view_category",
    "view_ministry",
]

# Group name -> assets permission codenames. Roles are resolved from
# permissions, so groups may be renamed after creation.
ROLE_GROUPS = {
    "Uploader": VIEW_PERMISSIONS + ["add_assetrecord"],
    "Approver": VIEW_PERMISSIONS + ["view_auditentry", "can_approve_assets"],
    "Ministry Admin": VIEW_PERMISSIONS
    + ["view_auditentry", "can_review_ministry_assets"],
    "Federal Admin": VIEW_PERMISSIONS
    + ["view_auditentry", "can_view_all_assets"],
}


def role_permissions(group_name):
    """Permission objects for one of the ROLE_GROUPS."""
    return list(
        Permission.objects.filter(
            content_type__app_label="assets",
            codename__in=ROLE_GROUPS[group_name],
        )
    )


class Command(BaseCommand):
    help = "Create the four workflow role groups with their permissions"

    def handle(self, *args, **options):
        for name in ROLE_GROUPS:
            group, created = Group.objects.get_or_create(name=name)
            group.permissions.set(role_permissions(name))
            verb = "Created" if created else "Updated"
            self.stdout.write(self.style.SUCCESS(f"{verb} '{name}' group"))

        self.stdout.write(self.style.SUCCESS("All role groups configured."))
