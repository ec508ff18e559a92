# payroll/apps.py
"""Payroll app configuration."""

from django.apps import AppConfig


class PayrollConfig(AppConfig):
    """Configuration for the payroll app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payroll"
    verbose_name = "Payroll"
