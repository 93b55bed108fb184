"""Custom user model for FAMS."""

from django.contrib.auth.models import AbstractUser
from django.db import models


class CustomUser(AbstractUser):
    """Staff account linked to the ministry it works in."""

    display_name = models.CharField(
        max_length=255,
        blank=True,
        help_text="Human-readable name shown in approval records",
    )
    email = models.EmailField("email address", blank=False, unique=True)
    ministry = models.ForeignKey(
        "assets.Ministry",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="staff",
        help_text="Ministry or agency this user uploads or reviews for. "
        "Empty for federal staff.",
    )
    position = models.CharField(max_length=150, blank=True)
    staff_id = models.CharField(
        max_length=50,
        blank=True,
        help_text="Government staff identification number",
    )

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"

    def get_display_name(self):
        """Return display_name if set, otherwise full name or username."""
        if self.display_name:
            return self.display_name
        full = self.get_full_name()
        return full if full else self.username

    def __str__(self):
        return self.get_display_name()
