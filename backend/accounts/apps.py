# accounts/apps.py
"""Accounts app configuration."""

from django.apps import AppConfig
from django.db.models.signals import post_save


class AccountsConfig(AppConfig):
    """Configuration for the accounts app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "accounts"
    verbose_name = "Accounts & Multi-tenancy"

    def ready(self):
        """Initialize app when Django starts."""
        from accounts.models import CompanyMembership
        from accounts.signals import grant_defaults_on_join

        post_save.connect(
            grant_defaults_on_join,
            sender=CompanyMembership,
            dispatch_uid="accounts.grant_defaults_on_join",
        )
