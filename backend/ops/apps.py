# ops/apps.py
"""Ops app configuration."""

from django.apps import AppConfig


class OpsConfig(AppConfig):
    """Health checks and logging setup."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "ops"
    verbose_name = "Operations"
