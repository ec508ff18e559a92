# reporting/engine.py
"""
Single entry point for every report kind.

ReportEngine receives its collaborators (chart, journal store, payroll
source) from the caller and builds the generators around them. It keeps no
state between calls, so one engine per request is the normal usage.

Usage:
    engine = ReportEngine(chart, store, payroll)
    report = engine.generate(ReportRequest(
        kind=ReportKind.TRIAL_BALANCE,
        date_range=DateRange(date(2024, 1, 1), date(2024, 1, 31)),
    ))
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from reporting.aggregator import BalanceAggregator
from reporting.chart import ChartOfAccounts
from reporting.checks import CheckReferenceIndex, InMemoryPayrollSource, PayrollDisbursementSource
from reporting.domain import CheckReference, DateRange
from reporting.reports import (
    AnalyticalLedger,
    AnalyticalLedgerReport,
    LegalJournal,
    LegalJournalReport,
    TrialBalance,
    TrialBalanceReport,
)
from reporting.store import JournalStore


class ReportKind(str, Enum):
    TRIAL_BALANCE = "trial-balance"
    ANALYTICAL_LEDGER = "analytical-ledger"
    LEGAL_JOURNAL = "legal-journal"
    CHECK_SEARCH = "check-search"


@dataclass(frozen=True)
class ReportRequest:
    kind: ReportKind
    date_range: Optional[DateRange] = None
    account_id: Optional[str] = None
    check_number: Optional[str] = None


@dataclass(frozen=True)
class CheckSearch:
    check_number: str
    results: Tuple[CheckReference, ...]


Report = Union[TrialBalance, AnalyticalLedger, LegalJournal, CheckSearch]


class ReportEngine:
    def __init__(
        self,
        chart: ChartOfAccounts,
        store: JournalStore,
        payroll: Optional[PayrollDisbursementSource] = None,
    ):
        self.chart = chart
        self.store = store
        self.payroll = payroll if payroll is not None else InMemoryPayrollSource()
        self.aggregator = BalanceAggregator(chart, store)

    def generate(self, request: ReportRequest) -> Report:
        """
        Build the report described by ``request``.

        Raises:
            ValueError: A parameter required by the report kind is missing
            InvalidRange, UnknownAccount, InvalidCheckNumber: bad request
            UpstreamUnavailable: a collaborator failed
        """
        kind = ReportKind(request.kind)

        if kind == ReportKind.CHECK_SEARCH:
            return CheckSearch(
                check_number=(request.check_number or "").strip(),
                results=self.search_checks(request.check_number),
            )

        if request.date_range is None:
            raise ValueError(f"{kind.value} requires a date range.")

        if kind == ReportKind.TRIAL_BALANCE:
            return self.trial_balance(request.date_range)
        if kind == ReportKind.LEGAL_JOURNAL:
            return self.legal_journal(request.date_range)

        if not request.account_id:
            raise ValueError(f"{kind.value} requires an account.")
        return self.analytical_ledger(request.account_id, request.date_range)

    def trial_balance(self, date_range: DateRange) -> TrialBalance:
        return TrialBalanceReport(self.chart, self.aggregator).generate(date_range)

    def analytical_ledger(self, account_id: str, date_range: DateRange) -> AnalyticalLedger:
        report = AnalyticalLedgerReport(self.chart, self.store, self.aggregator)
        return report.generate(account_id, date_range)

    def legal_journal(self, date_range: DateRange) -> LegalJournal:
        return LegalJournalReport(self.chart, self.store).generate(date_range)

    def search_checks(self, check_number: str) -> Tuple[CheckReference, ...]:
        return CheckReferenceIndex(self.store, self.payroll).search(check_number)
