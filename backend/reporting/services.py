# reporting/services.py
"""
Wiring between Django and the reporting engine.

Views and management commands call these helpers instead of building the
adapters themselves.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Tuple

from django.conf import settings

from accounts.models import Company
from reporting.adapters import DjangoChartOfAccounts, DjangoJournalStore, DjangoPayrollChecks
from reporting.domain import DateRange, IntegrityIssue
from reporting.engine import ReportEngine
from reporting.reports import LegalJournal, TrialBalance


def build_engine(company: Company) -> ReportEngine:
    """ReportEngine over the ledger and payroll checks of ``company``."""
    return ReportEngine(
        chart=DjangoChartOfAccounts(company),
        store=DjangoJournalStore(company),
        payroll=DjangoPayrollChecks(company),
    )


def resolve_date_range(
    start: Optional[date],
    end: Optional[date],
    today: Optional[date] = None,
) -> DateRange:
    """
    Fill in missing bounds.

    A missing end is today; a missing start is REPORTING_DEFAULT_RANGE_DAYS
    before the end.

    Raises:
        InvalidRange: start is after end
    """
    if end is None:
        end = today or date.today()
    if start is None:
        days = getattr(settings, "REPORTING_DEFAULT_RANGE_DAYS", 30)
        start = end - timedelta(days=days)
    return DateRange(start, end)


@dataclass(frozen=True)
class IntegrityCheck:
    """Trial balance and legal journal of one range, read for integrity."""

    date_range: DateRange
    trial_balance: TrialBalance
    journal: LegalJournal

    @property
    def violations(self) -> Tuple[IntegrityIssue, ...]:
        return self.trial_balance.violations + self.journal.violations

    @property
    def is_clean(self) -> bool:
        # Correlative gaps are reported as warnings only.
        return not (self.trial_balance.has_violations or self.journal.has_violations)


def check_integrity(engine: ReportEngine, date_range: DateRange) -> IntegrityCheck:
    """
    Run the trial balance and the legal journal over ``date_range``.

    Raises:
        UpstreamUnavailable: the ledger could not be read
    """
    return IntegrityCheck(
        date_range=date_range,
        trial_balance=engine.trial_balance(date_range),
        journal=engine.legal_journal(date_range),
    )
