"""Shared pytest fixtures for FAMS tests."""

import pytest

from django.conf import settings
from django.contrib.auth.models import Group

# Plain static storage for tests (manifest storage needs collectstatic)
settings.STORAGES["staticfiles"] = {
    "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
}

# Run Celery tasks synchronously in tests
settings.CELERY_TASK_ALWAYS_EAGER = True
settings.CELERY_TASK_EAGER_PROPAGATES = True

# Use in-memory cache for tests (avoids Redis connection errors)
settings.CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"


@pytest.fixture(autouse=True)
def _clear_cache():
    """Clear the in-memory cache before each test.

    Prevents rate-limit counters (django_ratelimit) from bleeding
    across tests.
    """
    from django.core.cache import cache

    cache.clear()


def _ensure_group_permissions(group_name):
    """Create a role group with the permissions setup_roles assigns."""
    from assets.management.commands.setup_roles import role_permissions

    group, _ = Group.objects.get_or_create(name=group_name)
    group.permissions.set(role_permissions(group_name))
    return group


from assets.factories import (  # noqa: E402
    AssetRecordFactory,
    CategoryFactory,
    MinistryFactory,
    UserFactory,
)


@pytest.fixture
def password():
    return "testpass123!"


# --- Organisation fixtures ---


@pytest.fixture
def ministry(db):
    return MinistryFactory(
        name="Federal Ministry of Works",
        official_email="info@works.gov.ng",
    )


@pytest.fixture
def review_ministry(db):
    """A ministry whose approvals go to a second, ministry-level review."""
    return MinistryFactory(
        name="Federal Ministry of Finance",
        requires_ministry_review=True,
    )


@pytest.fixture
def other_ministry(db):
    return MinistryFactory(name="Federal Ministry of Health")


@pytest.fixture
def category(db):
    return CategoryFactory(name="Others", slug="others", required_fields=[])


@pytest.fixture
def vehicle_category(db):
    return CategoryFactory(
        name="Motor Vehicle",
        slug="motor-vehicle",
        required_fields=[
            "make",
            "model",
            "year",
            "mileage",
            "registrationNumber",
            "condition",
        ],
    )


# --- User fixtures ---


def _role_user(group_name, password, **kwargs):
    group = _ensure_group_permissions(group_name)
    u = UserFactory(password=password, **kwargs)
    u.groups.add(group)
    return u


@pytest.fixture
def make_role_user(db, password):
    """Build extra users in a role group, e.g. another ministry's approver."""

    def _make(group_name, **kwargs):
        return _role_user(group_name, password, **kwargs)

    return _make


@pytest.fixture
def uploader(db, password, ministry):
    return _role_user(
        "Uploader",
        password,
        username="uploader",
        email="uploader@works.gov.ng",
        display_name="Ada Uploader",
        ministry=ministry,
    )


@pytest.fixture
def other_uploader(db, password, ministry):
    return _role_user(
        "Uploader",
        password,
        username="uploader2",
        email="uploader2@works.gov.ng",
        ministry=ministry,
    )


@pytest.fixture
def approver(db, password, ministry):
    return _role_user(
        "Approver",
        password,
        username="approver",
        email="approver@works.gov.ng",
        display_name="Bola Approver",
        ministry=ministry,
    )


@pytest.fixture
def ministry_admin(db, password, ministry):
    return _role_user(
        "Ministry Admin",
        password,
        username="ministryadmin",
        email="admin@works.gov.ng",
        display_name="Chidi Admin",
        ministry=ministry,
    )


@pytest.fixture
def federal_admin(db, password):
    return _role_user(
        "Federal Admin",
        password,
        username="federal",
        email="federal@fams.gov.ng",
        display_name="Dayo Federal",
    )


@pytest.fixture
def viewer_user(db, password, ministry):
    return UserFactory(
        username="viewer",
        email="viewer@example.com",
        password=password,
        ministry=ministry,
    )


@pytest.fixture
def admin_user(db, password):
    return UserFactory(
        username="admin",
        email="admin@example.com",
        password=password,
        is_staff=True,
        is_superuser=True,
    )


# --- Record fixtures ---


@pytest.fixture
def pending_record(db, ministry, category, uploader):
    return AssetRecordFactory(
        ministry=ministry,
        category=category,
        uploaded_by=uploader,
        description="Toyota Hilux pickup",
    )


@pytest.fixture
def rejected_record(db, ministry, category, uploader, approver):
    return AssetRecordFactory(
        ministry=ministry,
        category=category,
        uploaded_by=uploader,
        rejected=True,
        rejected_by=approver,
        rejection_reason="missing cost",
    )


@pytest.fixture
def review_record(db, review_ministry, category, password):
    """A record of the review ministry awaiting ministry-level review."""
    owner = _role_user(
        "Uploader",
        password,
        username="finuploader",
        email="uploader@finance.gov.ng",
        ministry=review_ministry,
    )
    return AssetRecordFactory(
        ministry=review_ministry,
        category=category,
        uploaded_by=owner,
        in_ministry_review=True,
    )


# --- Client fixtures ---


def _logged_in(client, user, password):
    client.login(username=user.username, password=password)
    return client


@pytest.fixture
def uploader_client(client, uploader, password):
    return _logged_in(client, uploader, password)


@pytest.fixture
def approver_client(client, approver, password):
    return _logged_in(client, approver, password)


@pytest.fixture
def ministry_admin_client(client, ministry_admin, password):
    return _logged_in(client, ministry_admin, password)


@pytest.fixture
def federal_client(client, federal_admin, password):
    return _logged_in(client, federal_admin, password)


@pytest.fixture
def viewer_client(client, viewer_user, password):
    return _logged_in(client, viewer_user, password)
