"""Role resolution and ministry-scoped access control."""

from django.contrib.auth import get_user_model
from django.db.models import Q

from ..exceptions import Unauthorized
from ..models import AssetRecord

User = get_user_model()

ROLE_UPLOADER = "agency"
ROLE_APPROVER = "agency-approver"
ROLE_MINISTRY_ADMIN = "ministry-admin"
ROLE_FEDERAL_ADMIN = "federal-admin"
ROLE_VIEWER = "viewer"

ROLES = (
    ROLE_UPLOADER,
    ROLE_APPROVER,
    ROLE_MINISTRY_ADMIN,
    ROLE_FEDERAL_ADMIN,
    ROLE_VIEWER,
)

# Roles whose work is limited to the ministry they belong to.
REVIEWER_ROLES = (ROLE_APPROVER, ROLE_MINISTRY_ADMIN)


def get_user_role(user: User) -> str:
    """Determine the user's highest workflow role.

    Returns one of: 'federal-admin', 'ministry-admin', 'agency-approver',
    'agency' or 'viewer'.

    Uses permission-based checks rather than group names, so
    deployments that rename groups continue to work correctly.
    """
    if not user.is_authenticated or not user.is_active:
        return ROLE_VIEWER

    if user.is_superuser:
        return ROLE_FEDERAL_ADMIN

    if user.has_perm("assets.can_view_all_assets"):
        return ROLE_FEDERAL_ADMIN

    if user.has_perm("assets.can_review_ministry_assets"):
        return ROLE_MINISTRY_ADMIN

    if user.has_perm("assets.can_approve_assets"):
        return ROLE_APPROVER

    if user.has_perm("assets.add_assetrecord"):
        return ROLE_UPLOADER

    return ROLE_VIEWER


def actor_context(user: User) -> tuple:
    """Return ``(actor_id, actor_role, ministry_id)`` for a request user.

    Reviewers without a ministry cannot be scoped, so they are refused
    outright instead of being allowed to act on every ministry.
    """
    role = get_user_role(user)
    if role in REVIEWER_ROLES and not user.ministry_id:
        raise Unauthorized(
            "Your account is not linked to a ministry. "
            "Ask an administrator to assign one."
        )
    return user.pk, role, user.ministry_id


def visible_assets(user: User):
    """Queryset of asset records the user may see."""
    queryset = AssetRecord.objects.select_related(
        "ministry", "category", "uploaded_by"
    )
    role = get_user_role(user)

    if role == ROLE_FEDERAL_ADMIN:
        return queryset

    if role in REVIEWER_ROLES:
        if not user.ministry_id:
            return queryset.none()
        return queryset.filter(ministry_id=user.ministry_id)

    if role == ROLE_UPLOADER:
        return queryset.filter(uploaded_by=user)

    return queryset.none()


def can_view_asset(user: User, record: AssetRecord) -> bool:
    """Check if the user can see the given asset record."""
    role = get_user_role(user)

    if role == ROLE_FEDERAL_ADMIN:
        return True

    if role in REVIEWER_ROLES:
        return bool(user.ministry_id) and (
            record.ministry_id == user.ministry_id
        )

    if role == ROLE_UPLOADER:
        return record.uploaded_by_id == user.pk

    return False


def users_with_permission(codename: str, ministry_id=None):
    """Active users holding ``assets.<codename>``, directly or via a group.

    Superusers are not included; they are not part of any ministry's
    review chain.
    """
    perm_filter = Q(
        groups__permissions__codename=codename,
        groups__permissions__content_type__app_label="assets",
    ) | Q(
        user_permissions__codename=codename,
        user_permissions__content_type__app_label="assets",
    )
    users = User.objects.filter(perm_filter, is_active=True)
    if ministry_id is not None:
        users = users.filter(ministry_id=ministry_id)
    return users.distinct()
