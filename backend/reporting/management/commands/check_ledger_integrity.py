# reporting/management/commands/check_ledger_integrity.py
"""
Management command to verify double-entry integrity of the ledger.

Runs the trial balance and the legal journal over a date range and prints
every integrity violation they report: unbalanced entries, malformed lines,
missing or duplicate correlative numbers and periods whose debits differ
from their credits. Exits non-zero when anything is found.

Usage:
    # Whole ledger of one company
    python manage.py check_ledger_integrity --company acme

    # A date range
    python manage.py check_ledger_integrity --company acme --start 2024-01-01 --end 2024-12-31

    # Every active company
    python manage.py check_ledger_integrity --all-companies
"""

import logging
from datetime import date

from django.core.management.base import BaseCommand, CommandError
from django.db.models import Max, Min

from accounting.models import JournalEntry
from accounts.models import Company
from reporting.domain import DateRange
from reporting.errors import InvalidRange, UpstreamUnavailable
from reporting.money import format_minor_units
from reporting.services import build_engine, check_integrity

logger = logging.getLogger(__name__)


def _parse_date(value, option):
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise CommandError(f"{option} must be an ISO date (YYYY-MM-DD), got {value!r}")


class Command(BaseCommand):
    """Verify double-entry integrity of the ledger."""

    help = "Check that the ledger balances and the legal journal is well formed"

    def add_arguments(self, parser):
        parser.add_argument(
            "--company",
            type=str,
            help="Company slug to check",
        )
        parser.add_argument(
            "--all-companies",
            action="store_true",
            help="Check every active company",
        )
        parser.add_argument(
            "--start",
            type=str,
            help="First date to check (default: first journal entry)",
        )
        parser.add_argument(
            "--end",
            type=str,
            help="Last date to check (default: last journal entry or today)",
        )

    def handle(self, *args, **options):
        companies = self._get_companies(options)
        start = _parse_date(options["start"], "--start") if options["start"] else None
        end = _parse_date(options["end"], "--end") if options["end"] else None

        total = 0
        for company in companies:
            total += self._check_company(company, start, end)

        if total:
            raise CommandError(f"{total} integrity violation(s) found.")

        self.stdout.write(self.style.SUCCESS("\nLedger integrity OK."))

    def _get_companies(self, options):
        has_company = options["company"] is not None
        has_all = options["all_companies"]

        if not has_company and not has_all:
            raise CommandError("Must specify --company <slug> or --all-companies")
        if has_company and has_all:
            raise CommandError("Cannot use --company and --all-companies together")

        if has_all:
            return list(Company.objects.filter(is_active=True).order_by("slug"))

        try:
            return [Company.objects.get(slug=options["company"])]
        except Company.DoesNotExist:
            raise CommandError(f"Company not found: {options['company']}")

    def _date_range(self, company, start, end) -> DateRange:
        bounds = JournalEntry.objects.filter(company=company).aggregate(
            first=Min("date"),
            last=Max("date"),
        )
        today = date.today()
        if end is None:
            end = max(bounds["last"] or today, today)
        if start is None:
            start = min(bounds["first"] or end, end)
        try:
            return DateRange(start, end)
        except InvalidRange as exc:
            raise CommandError(str(exc))

    def _check_company(self, company, start, end) -> int:
        date_range = self._date_range(company, start, end)
        self.stdout.write(
            f"\nChecking {company.name} ({company.slug}) "
            f"from {date_range.start} to {date_range.end}"
        )

        try:
            result = check_integrity(build_engine(company), date_range)
        except UpstreamUnavailable as exc:
            raise CommandError(f"Could not read the ledger of {company.slug}: {exc}")

        places = company.decimal_places
        journal = result.journal
        violations = result.violations
        for issue in violations:
            where = f"entry {issue.entry_number}: " if issue.entry_number is not None else ""
            self.stdout.write(self.style.ERROR(
                f"  {where}{issue.message} "
                f"(debits {format_minor_units(issue.debits, places)}, "
                f"credits {format_minor_units(issue.credits, places)})"
            ))

        if journal.correlative_gaps:
            gaps = ", ".join(str(gap) for gap in journal.correlative_gaps)
            self.stdout.write(self.style.WARNING(
                f"  Correlative gaps: {gaps} ({journal.missing_correlatives} missing)"
            ))

        self.stdout.write(
            f"  {journal.total_entries} entries, "
            f"debits {format_minor_units(journal.total_debits, places)}, "
            f"credits {format_minor_units(journal.total_credits, places)}"
        )

        if violations:
            logger.error(
                "Ledger integrity check failed",
                extra={"company_id": company.id, "violations": len(violations)},
            )
        else:
            self.stdout.write(self.style.SUCCESS("  OK"))
        return len(violations)
