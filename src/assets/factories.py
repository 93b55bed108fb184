"""Factory Boy factories for FAMS test data generation."""

from datetime import date
from decimal import Decimal

import factory
from factory.django import DjangoModelFactory

from django.utils import timezone


class MinistryFactory(DjangoModelFactory):
    """Factory for Ministry model."""

    class Meta:
        model = "assets.Ministry"
        django_get_or_create = ("name",)

    name = factory.Sequence(lambda n: f"Federal Ministry {n}")
    ministry_type = "Federal Ministry"
    official_email = factory.Sequence(lambda n: f"info{n}@ministry.gov.ng")
    location = "Abuja"
    requires_ministry_review = False


class UserFactory(DjangoModelFactory):
    """Factory for CustomUser model."""

    class Meta:
        model = "accounts.CustomUser"
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    display_name = factory.Faker("name")
    is_active = True
    ministry = None

    @factory.post_generation
    def password(self, create, extracted, **kwargs):
        pwd = extracted or "testpass123!"
        self.set_password(pwd)
        if create:
            self.save(update_fields=["password"])


class CategoryFactory(DjangoModelFactory):
    """Factory for Category model. No required attributes by default."""

    class Meta:
        model = "assets.Category"

    name = factory.Sequence(lambda n: f"Category {n}")
    slug = factory.Sequence(lambda n: f"category-{n}")
    required_fields = factory.LazyFunction(list)


class AssetRecordFactory(DjangoModelFactory):
    """Factory for AssetRecord model.

    Does NOT set asset_code; AssetRecord.save() generates it. The
    uploader belongs to the record's ministry.
    """

    class Meta:
        model = "assets.AssetRecord"

    ministry = factory.SubFactory(MinistryFactory)
    category = factory.SubFactory(CategoryFactory)
    uploaded_by = factory.SubFactory(
        UserFactory, ministry=factory.SelfAttribute("..ministry")
    )
    description = factory.Faker("sentence", nb_words=4)
    location = "Abuja"
    purchase_date = date(2020, 1, 15)
    purchase_cost = Decimal("2500000.00")
    status = "pending"

    class Params:
        rejected = factory.Trait(
            status="rejected",
            rejected_by=factory.SubFactory(
                UserFactory,
                ministry=factory.SelfAttribute("..ministry"),
            ),
            rejected_at=factory.LazyFunction(timezone.now),
            rejection_reason="Missing purchase receipt",
            rejection_level="approver",
        )
        approved = factory.Trait(
            status="approved",
            approved_by=factory.SubFactory(
                UserFactory,
                ministry=factory.SelfAttribute("..ministry"),
            ),
            approved_at=factory.LazyFunction(timezone.now),
        )
        in_ministry_review = factory.Trait(
            status="pending_ministry_review",
            approved_by=factory.SubFactory(
                UserFactory,
                ministry=factory.SelfAttribute("..ministry"),
            ),
            approved_at=factory.LazyFunction(timezone.now),
        )
