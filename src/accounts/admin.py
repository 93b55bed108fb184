"""Admin configuration for accounts app."""

from unfold.admin import ModelAdmin
from unfold.contrib.filters.admin import RelatedDropdownFilter
from unfold.decorators import display

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from assets.services.permissions import get_user_role

from .forms import CustomUserChangeForm, CustomUserCreationForm
from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin, ModelAdmin):
    add_form = CustomUserCreationForm
    form = CustomUserChangeForm
    model = CustomUser
    list_display = [
        "display_user",
        "email",
        "display_ministry",
        "display_role",
        "display_groups",
        "display_active",
    ]
    list_filter = [
        "is_active",
        "is_staff",
        "groups",
        ("ministry", RelatedDropdownFilter),
    ]
    search_fields = [
        "username",
        "email",
        "display_name",
        "first_name",
        "last_name",
        "staff_id",
    ]
    filter_horizontal = ["groups", "user_permissions"]
    autocomplete_fields = ["ministry"]
    fieldsets = (
        (
            "Profile",
            {
                "classes": ["tab"],
                "fields": (
                    "username",
                    "password",
                    "display_name",
                    "first_name",
                    "last_name",
                    "email",
                    "ministry",
                    "position",
                    "staff_id",
                ),
            },
        ),
        (
            "Permissions",
            {
                "classes": ["tab"],
                "fields": (
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                ),
            },
        ),
        (
            "Activity",
            {
                "classes": ["tab"],
                "fields": ("last_login", "date_joined"),
            },
        ),
    )
    readonly_fields = ["last_login", "date_joined"]
    add_fieldsets = UserAdmin.add_fieldsets + (
        (
            "Additional Info",
            {"fields": ("email", "display_name", "ministry")},
        ),
    )

    @display(description="User", header=True, ordering="username")
    def display_user(self, obj):
        return obj.get_display_name(), obj.username

    @display(description="Ministry")
    def display_ministry(self, obj):
        if obj.ministry:
            return obj.ministry.name
        return "-"

    @display(description="Role")
    def display_role(self, obj):
        return get_user_role(obj)

    @display(description="Groups")
    def display_groups(self, obj):
        groups = obj.groups.all()
        if groups:
            return ", ".join(g.name for g in groups)
        return "-"

    @display(description="Active", boolean=True)
    def display_active(self, obj):
        return obj.is_active
