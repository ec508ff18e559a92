# payroll/models.py
"""
Payroll check register.

A PayrollCheck is a disbursement printed for an employee. Checks are never
deleted; a cancelled check is VOIDED so the number stays accounted for.
"""

import uuid

from django.db import models
from django.db.models import Q

from accounts.models import Company


class PayrollCheck(models.Model):
    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        PRINTED = "PRINTED", "Printed"
        ISSUED = "ISSUED", "Issued"
        VOIDED = "VOIDED", "Voided"

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="payroll_checks",
    )

    public_id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
    )

    check_number = models.CharField(max_length=50)
    check_date = models.DateField()

    # Minor units
    amount = models.BigIntegerField()

    payee = models.CharField(max_length=255, blank=True, default="")
    memo = models.CharField(max_length=255, blank=True, default="")

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.PENDING,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "check_number"],
                name="uniq_payroll_check_number_per_company",
            ),
            models.CheckConstraint(
                condition=Q(amount__gte=0),
                name="chk_payroll_check_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "check_date"], name="paycheck_company_date_idx"),
        ]
        ordering = ["-check_date", "check_number"]

    def __str__(self):
        return f"Check {self.check_number} ({self.check_date}) {self.status}"
