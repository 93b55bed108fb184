"""Forms for the accounts app."""

from django import forms
from django.contrib.auth.forms import UserChangeForm, UserCreationForm

from .models import CustomUser


class CustomUserCreationForm(UserCreationForm):
    class Meta:
        model = CustomUser
        fields = ("username", "email", "display_name", "ministry")


class CustomUserChangeForm(UserChangeForm):
    class Meta:
        model = CustomUser
        fields = (
            "username",
            "email",
            "display_name",
            "first_name",
            "last_name",
            "ministry",
            "position",
            "staff_id",
        )

    def clean_email(self):
        email = self.cleaned_data.get("email", "").strip().lower()
        if (
            CustomUser.objects.filter(email__iexact=email)
            .exclude(pk=self.instance.pk)
            .exists()
        ):
            raise forms.ValidationError(
                "This email address is already in use."
            )
        return email
