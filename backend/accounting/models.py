# accounting/models.py
"""
Accounting models for Ledgerline.

These tables hold the chart of accounts and the posted journal. The
reporting engine never touches them directly; it reads them through
reporting.adapters, which turns rows into plain engine records.

Amounts are stored as BigIntegerField minor units (cents) so that no
float or Decimal arithmetic happens between the database and the reports.

Models:
- Account: Chart of Accounts
- JournalEntry: Journal entry headers
- JournalLine: Journal entry lines
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q, Sum

from accounts.models import Company


# =============================================================================
# Chart of Accounts
# =============================================================================

class Account(models.Model):
    """
    Chart of Accounts entry.

    Supports:
    - Hierarchical structure (parent/child)
    - Account types with normal balance rules
    - Soft status (ACTIVE/INACTIVE)
    """

    class AccountType(models.TextChoices):
        # Balance Sheet - Assets
        ASSET = "ASSET", "Asset"
        CONTRA_ASSET = "CONTRA_ASSET", "Contra Asset"

        # Balance Sheet - Liabilities
        LIABILITY = "LIABILITY", "Liability"
        CONTRA_LIABILITY = "CONTRA_LIABILITY", "Contra Liability"

        # Balance Sheet - Equity
        EQUITY = "EQUITY", "Equity"
        CONTRA_EQUITY = "CONTRA_EQUITY", "Contra Equity"

        # Income Statement
        REVENUE = "REVENUE", "Revenue"
        CONTRA_REVENUE = "CONTRA_REVENUE", "Contra Revenue"
        EXPENSE = "EXPENSE", "Expense"
        CONTRA_EXPENSE = "CONTRA_EXPENSE", "Contra Expense"

    class NormalBalance(models.TextChoices):
        DEBIT = "DEBIT", "Debit"
        CREDIT = "CREDIT", "Credit"

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", "Active"
        INACTIVE = "INACTIVE", "Inactive"

    # Map account types to their normal balance
    NORMAL_BALANCE_MAP = {
        AccountType.ASSET: NormalBalance.DEBIT,
        AccountType.CONTRA_ASSET: NormalBalance.CREDIT,
        AccountType.LIABILITY: NormalBalance.CREDIT,
        AccountType.CONTRA_LIABILITY: NormalBalance.DEBIT,
        AccountType.EQUITY: NormalBalance.CREDIT,
        AccountType.CONTRA_EQUITY: NormalBalance.DEBIT,
        AccountType.REVENUE: NormalBalance.CREDIT,
        AccountType.CONTRA_REVENUE: NormalBalance.DEBIT,
        AccountType.EXPENSE: NormalBalance.DEBIT,
        AccountType.CONTRA_EXPENSE: NormalBalance.CREDIT,
    }

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="accounts",
    )

    public_id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
    )

    code = models.CharField(max_length=20)
    name = models.CharField(max_length=255)

    account_type = models.CharField(
        max_length=20,
        choices=AccountType.choices,
        db_column="type",
    )

    normal_balance = models.CharField(
        max_length=10,
        choices=NormalBalance.choices,
        editable=False,
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )

    # Hierarchy
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="children",
    )

    description = models.TextField(blank=True, default="")

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "code"],
                name="uniq_account_code_per_company",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "code"], name="account_company_code_idx"),
            models.Index(fields=["company", "account_type"], name="account_company_type_idx"),
        ]
        ordering = ["code"]

    def __str__(self):
        return f"{self.code} - {self.name}"

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE

    def clean(self):
        if self.parent_id:
            if self.parent_id == self.pk:
                raise ValidationError("Account cannot be its own parent.")
            if self.parent.company_id != self.company_id:
                raise ValidationError("Parent account must belong to the same company.")

    def save(self, *args, **kwargs):
        # Normal balance always follows the account type.
        self.normal_balance = self.NORMAL_BALANCE_MAP.get(
            self.account_type, self.NormalBalance.DEBIT
        )
        super().save(*args, **kwargs)


# =============================================================================
# Journal
# =============================================================================

class JournalEntry(models.Model):
    """
    Journal Entry header.

    Workflow: DRAFT -> PENDING -> APPROVED
    - DRAFT: Entry being edited, ignored by every report
    - PENDING: Submitted for approval, shown in the legal journal only
    - APPROVED: Finalized, affects account balances
    """

    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        PENDING = "PENDING", "Pending"
        APPROVED = "APPROVED", "Approved"

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="journal_entries",
    )

    public_id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
    )

    # Entry identification
    entry_number = models.PositiveIntegerField(
        help_text="Sequential entry number, unique per company",
    )
    correlative_number = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Legal journal sequence number, assigned on submission",
    )

    date = models.DateField()

    description = models.CharField(max_length=255, blank=True, default="")
    reference = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="External reference such as a check or invoice number",
    )

    status = models.CharField(
        max_length=12,
        choices=Status.choices,
        default=Status.DRAFT,
    )

    # Approval metadata
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="approved_journal_entries",
    )

    # Audit
    created_at = models.DateTimeField(auto_now_add=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="created_journal_entries",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["company", "entry_number"],
                name="uniq_entry_number_per_company",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "date", "entry_number"], name="entry_company_date_idx"),
            models.Index(fields=["company", "status"], name="entry_company_status_idx"),
            models.Index(fields=["company", "correlative_number"], name="entry_company_correl_idx"),
        ]
        ordering = ["-date", "-entry_number"]

    def __str__(self):
        return f"JE {self.entry_number} ({self.date}) {self.status}"

    def totals(self):
        """Return (total_debit, total_credit) in minor units."""
        agg = self.lines.aggregate(
            total_debit=Sum("debit"),
            total_credit=Sum("credit"),
        )
        return agg["total_debit"] or 0, agg["total_credit"] or 0

    @property
    def is_balanced(self) -> bool:
        debit, credit = self.totals()
        return debit == credit


class JournalLine(models.Model):
    """
    Individual line within a journal entry.
    Each line affects one account with either a debit or credit amount.
    """

    entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.CASCADE,
        related_name="lines",
    )

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="journal_lines",
    )

    line_no = models.PositiveIntegerField()

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )

    description = models.CharField(max_length=255, blank=True, default="")

    # Minor units
    debit = models.BigIntegerField(default=0)
    credit = models.BigIntegerField(default=0)

    class Meta:
        unique_together = ("entry", "line_no")
        ordering = ["entry", "line_no"]
        constraints = [
            models.CheckConstraint(
                condition=~(Q(debit__gt=0) & Q(credit__gt=0)),
                name="chk_line_not_both_debit_credit",
            ),
            models.CheckConstraint(
                condition=~(Q(debit__exact=0) & Q(credit__exact=0)),
                name="chk_line_not_both_zero",
            ),
            models.CheckConstraint(
                condition=Q(debit__gte=0) & Q(credit__gte=0),
                name="chk_line_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "account"], name="line_company_account_idx"),
        ]

    def __str__(self):
        return f"JE#{self.entry_id} L{self.line_no}"

    def save(self, *args, **kwargs):
        if self.entry_id and self.company_id and self.entry.company_id != self.company_id:
            raise ValidationError("JournalLine company must match entry company.")
        if self.account_id and self.company_id and self.account.company_id != self.company_id:
            raise ValidationError("JournalLine company must match account company.")
        super().save(*args, **kwargs)

    @property
    def amount(self) -> int:
        """Returns the non-zero amount (debit or credit)."""
        return self.debit if self.debit > 0 else self.credit
