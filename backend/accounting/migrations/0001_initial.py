"""
Initial migration for accounting app.

Creates:
- Account: chart of accounts
- JournalEntry / JournalLine: the journal, amounts in minor units
"""
import uuid

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("code", models.CharField(max_length=20)),
                ("name", models.CharField(max_length=255)),
                (
                    "account_type",
                    models.CharField(
                        choices=[
                            ("ASSET", "Asset"),
                            ("CONTRA_ASSET", "Contra Asset"),
                            ("LIABILITY", "Liability"),
                            ("CONTRA_LIABILITY", "Contra Liability"),
                            ("EQUITY", "Equity"),
                            ("CONTRA_EQUITY", "Contra Equity"),
                            ("REVENUE", "Revenue"),
                            ("CONTRA_REVENUE", "Contra Revenue"),
                            ("EXPENSE", "Expense"),
                            ("CONTRA_EXPENSE", "Contra Expense"),
                        ],
                        db_column="type",
                        max_length=20,
                    ),
                ),
                (
                    "normal_balance",
                    models.CharField(
                        choices=[("DEBIT", "Debit"), ("CREDIT", "Credit")],
                        editable=False,
                        max_length=10,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("ACTIVE", "Active"), ("INACTIVE", "Inactive")],
                        default="ACTIVE",
                        max_length=20,
                    ),
                ),
                ("description", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="accounts",
                        to="accounts.company",
                    ),
                ),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="children",
                        to="accounting.account",
                    ),
                ),
            ],
            options={
                "ordering": ["code"],
                "indexes": [
                    models.Index(fields=["company", "code"], name="account_company_code_idx"),
                    models.Index(fields=["company", "account_type"], name="account_company_type_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "code"), name="uniq_account_code_per_company"),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("entry_number", models.PositiveIntegerField(help_text="Sequential entry number, unique per company")),
                (
                    "correlative_number",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Legal journal sequence number, assigned on submission",
                        null=True,
                    ),
                ),
                ("date", models.DateField()),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                (
                    "reference",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="External reference such as a check or invoice number",
                        max_length=100,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("DRAFT", "Draft"), ("PENDING", "Pending"), ("APPROVED", "Approved")],
                        default="DRAFT",
                        max_length=12,
                    ),
                ),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="approved_journal_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="journal_entries",
                        to="accounts.company",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_journal_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-date", "-entry_number"],
                "indexes": [
                    models.Index(fields=["company", "date", "entry_number"], name="entry_company_date_idx"),
                    models.Index(fields=["company", "status"], name="entry_company_status_idx"),
                    models.Index(fields=["company", "correlative_number"], name="entry_company_correl_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "entry_number"), name="uniq_entry_number_per_company"),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_no", models.PositiveIntegerField()),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("debit", models.BigIntegerField(default=0)),
                ("credit", models.BigIntegerField(default=0)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="journal_lines",
                        to="accounting.account",
                    ),
                ),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="journal_lines",
                        to="accounts.company",
                    ),
                ),
                (
                    "entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="accounting.journalentry",
                    ),
                ),
            ],
            options={
                "ordering": ["entry", "line_no"],
                "unique_together": {("entry", "line_no")},
                "indexes": [
                    models.Index(fields=["company", "account"], name="line_company_account_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("debit__gt", 0), ("credit__gt", 0), _negated=True),
                        name="chk_line_not_both_debit_credit",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("debit__exact", 0), ("credit__exact", 0), _negated=True),
                        name="chk_line_not_both_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("debit__gte", 0), ("credit__gte", 0)),
                        name="chk_line_non_negative",
                    ),
                ],
            },
        ),
    ]
