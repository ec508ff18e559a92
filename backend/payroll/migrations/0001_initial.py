"""
Initial migration for payroll app.

Creates:
- PayrollCheck: payroll check register, amounts in minor units
"""
import uuid

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="PayrollCheck",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("public_id", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("check_number", models.CharField(max_length=50)),
                ("check_date", models.DateField()),
                ("amount", models.BigIntegerField()),
                ("payee", models.CharField(blank=True, default="", max_length=255)),
                ("memo", models.CharField(blank=True, default="", max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("PRINTED", "Printed"),
                            ("ISSUED", "Issued"),
                            ("VOIDED", "Voided"),
                        ],
                        default="PENDING",
                        max_length=10,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "company",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payroll_checks",
                        to="accounts.company",
                    ),
                ),
            ],
            options={
                "ordering": ["-check_date", "check_number"],
                "indexes": [
                    models.Index(fields=["company", "check_date"], name="paycheck_company_date_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "check_number"), name="uniq_payroll_check_number_per_company"),
                    models.CheckConstraint(condition=models.Q(("amount__gte", 0)), name="chk_payroll_check_non_negative"),
                ],
            },
        ),
    ]
