# reporting/reports.py
"""
Report generators built on BalanceAggregator and JournalStore.

- TrialBalanceReport: every account with an opening balance or activity
- AnalyticalLedgerReport: one account, line by line, with a running balance
- LegalJournalReport: entries in correlative order, each balance-checked

Generators never raise for a ledger that does not balance. They record an
IntegrityIssue on the report (and log it) so the imbalance can be inspected;
callers that want to fail hard call ``report.raise_for_integrity()``.
"""

import logging
from datetime import date
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from reporting.aggregator import BalanceAggregator
from reporting.chart import ChartOfAccounts
from reporting.domain import (
    AccountPeriodBalance,
    AccountRecord,
    DateRange,
    EntryRecord,
    EntryStatus,
    IntegrityIssue,
    line_sort_key,
    signed_balance,
)
from reporting.errors import DataIntegrityViolation, UnknownAccount, UpstreamUnavailable
from reporting.store import JournalStore


logger = logging.getLogger(__name__)


class _IntegrityMixin:
    violations: Tuple[IntegrityIssue, ...]

    @property
    def has_violations(self) -> bool:
        return bool(self.violations)

    def raise_for_integrity(self) -> None:
        if self.violations:
            raise DataIntegrityViolation(self.violations)


# =============================================================================
# Trial Balance
# =============================================================================

@dataclass(frozen=True)
class TrialBalanceRow:
    account: AccountRecord
    depth: int
    balance: AccountPeriodBalance

    @property
    def code(self) -> str:
        return self.account.code

    @property
    def opening_balance(self) -> int:
        return self.balance.opening_balance

    @property
    def period_debits(self) -> int:
        return self.balance.period_debits

    @property
    def period_credits(self) -> int:
        return self.balance.period_credits

    @property
    def closing_balance(self) -> int:
        return self.balance.closing_balance


@dataclass(frozen=True)
class TrialBalanceTotals:
    opening_debit: int = 0
    opening_credit: int = 0
    period_debits: int = 0
    period_credits: int = 0
    closing_debit: int = 0
    closing_credit: int = 0

    @property
    def difference(self) -> int:
        return self.period_debits - self.period_credits


@dataclass(frozen=True)
class TrialBalance(_IntegrityMixin):
    date_range: DateRange
    rows: Tuple[TrialBalanceRow, ...]
    totals: TrialBalanceTotals
    violations: Tuple[IntegrityIssue, ...] = ()

    @property
    def is_balanced(self) -> bool:
        return self.totals.period_debits == self.totals.period_credits

    def row_for(self, account_id: str) -> Optional[TrialBalanceRow]:
        for row in self.rows:
            if row.account.id == account_id:
                return row
        return None


class TrialBalanceReport:
    """Per-account opening, activity and closing figures for a date range."""

    def __init__(self, chart: ChartOfAccounts, aggregator: BalanceAggregator):
        self.chart = chart
        self.aggregator = aggregator

    def generate(self, date_range: DateRange) -> TrialBalance:
        balances = self.aggregator.compute_all(date_range)

        rows = []
        for account in self.chart.list_accounts():
            balance = balances[account.id]
            # Accounts without opening balance or activity are omitted.
            if not balance.has_activity:
                continue
            rows.append(
                TrialBalanceRow(
                    account=account,
                    depth=self.chart.depth(account.id),
                    balance=balance,
                )
            )
        rows.sort(key=lambda row: row.code)

        totals = TrialBalanceTotals(
            opening_debit=sum(row.balance.opening_debit for row in rows),
            opening_credit=sum(row.balance.opening_credit for row in rows),
            period_debits=sum(row.period_debits for row in rows),
            period_credits=sum(row.period_credits for row in rows),
            closing_debit=sum(row.balance.closing_debit for row in rows),
            closing_credit=sum(row.balance.closing_credit for row in rows),
        )

        violations = []
        if totals.period_debits != totals.period_credits:
            violations.append(IntegrityIssue(
                message="Period debits do not equal period credits",
                debits=totals.period_debits,
                credits=totals.period_credits,
            ))
        if totals.opening_debit != totals.opening_credit:
            violations.append(IntegrityIssue(
                message="Opening balances do not net to zero",
                debits=totals.opening_debit,
                credits=totals.opening_credit,
            ))

        report = TrialBalance(
            date_range=date_range,
            rows=tuple(rows),
            totals=totals,
            violations=tuple(violations),
        )

        for issue in report.violations:
            logger.error(
                "Trial balance integrity violation: %s", issue.message,
                extra={
                    "start_date": date_range.start.isoformat(),
                    "end_date": date_range.end.isoformat(),
                    "difference": issue.difference,
                },
            )
        logger.info(
            "Generated trial balance",
            extra={
                "start_date": date_range.start.isoformat(),
                "end_date": date_range.end.isoformat(),
                "accounts": len(rows),
                "is_balanced": report.is_balanced,
            },
        )
        return report


# =============================================================================
# Analytical Ledger
# =============================================================================

@dataclass(frozen=True)
class LedgerTransaction:
    date: date
    entry_number: int
    line_number: int
    description: str
    reference: str
    debit: int
    credit: int
    running_balance: int


@dataclass(frozen=True)
class AnalyticalLedger(_IntegrityMixin):
    account: AccountRecord
    date_range: DateRange
    opening_balance: int
    transactions: Tuple[LedgerTransaction, ...]
    total_debits: int
    total_credits: int
    closing_balance: int
    expected_closing_balance: int
    violations: Tuple[IntegrityIssue, ...] = ()

    @property
    def is_reconciled(self) -> bool:
        """The fold landed on the balance the aggregator computed on its own."""
        return self.closing_balance == self.expected_closing_balance


class AnalyticalLedgerReport:
    """
    Transaction-level ledger of one account.

    The running balance is a strict left fold over lines in
    (date, entry_number, line_number) order, starting at the opening
    balance. No balance is computed independently of its predecessor.
    """

    def __init__(
        self,
        chart: ChartOfAccounts,
        store: JournalStore,
        aggregator: BalanceAggregator,
    ):
        self.chart = chart
        self.store = store
        self.aggregator = aggregator

    def iter_transactions(
        self,
        account: AccountRecord,
        date_range: DateRange,
        opening_balance: int,
    ) -> Iterator[LedgerTransaction]:
        """Lazily yield the account's lines in the range, each with its running balance."""
        balance = opening_balance
        previous_key = None
        for line in self.store.fetch_lines_within([account.id], date_range):
            if line.account_id != account.id:
                raise UpstreamUnavailable(
                    "journal store",
                    f"Journal store returned a line for account {line.account_id} "
                    f"while reading {account.id}.",
                )
            key = line_sort_key(line)
            if previous_key is not None and key < previous_key:
                raise UpstreamUnavailable(
                    "journal store",
                    "Journal store returned lines out of posting order.",
                )
            previous_key = key

            balance += signed_balance(account.normal_side, line.debit, line.credit)
            yield LedgerTransaction(
                date=line.date,
                entry_number=line.entry_number,
                line_number=line.line_number,
                description=line.description,
                reference=line.reference,
                debit=line.debit,
                credit=line.credit,
                running_balance=balance,
            )

    def generate(self, account_id: str, date_range: DateRange) -> AnalyticalLedger:
        account = self.chart.get_account(account_id)
        expected = self.aggregator.compute_balances([account.id], date_range)[account.id]

        transactions = []
        total_debits = 0
        total_credits = 0
        closing = expected.opening_balance
        for tx in self.iter_transactions(account, date_range, expected.opening_balance):
            transactions.append(tx)
            total_debits += tx.debit
            total_credits += tx.credit
            closing = tx.running_balance

        violations = []
        if closing != expected.closing_balance:
            violations.append(IntegrityIssue(
                message=(
                    f"Running balance of account {account.code} ends at {closing}, "
                    f"aggregated closing balance is {expected.closing_balance}"
                ),
                debits=total_debits,
                credits=total_credits,
            ))
            logger.error(
                "Analytical ledger does not reconcile with aggregated balance",
                extra={
                    "account_code": account.code,
                    "running_closing": closing,
                    "aggregated_closing": expected.closing_balance,
                },
            )

        logger.info(
            "Generated analytical ledger",
            extra={
                "account_code": account.code,
                "start_date": date_range.start.isoformat(),
                "end_date": date_range.end.isoformat(),
                "transactions": len(transactions),
            },
        )
        return AnalyticalLedger(
            account=account,
            date_range=date_range,
            opening_balance=expected.opening_balance,
            transactions=tuple(transactions),
            total_debits=total_debits,
            total_credits=total_credits,
            closing_balance=closing,
            expected_closing_balance=expected.closing_balance,
            violations=tuple(violations),
        )


# =============================================================================
# Legal Journal
# =============================================================================

@dataclass(frozen=True)
class LegalJournalLine:
    line_number: int
    account_id: str
    account_code: Optional[str]
    account_name: Optional[str]
    debit: int
    credit: int
    description: str = ""


@dataclass(frozen=True)
class LegalJournalEntry:
    entry_number: int
    correlative_number: Optional[int]
    date: date
    description: str
    reference: str
    status: EntryStatus
    lines: Tuple[LegalJournalLine, ...]
    total_debits: int
    total_credits: int
    is_balanced: bool
    issues: Tuple[str, ...] = ()
    created_by: str = ""
    approved_by: str = ""
    approved_at: Optional[str] = None


@dataclass(frozen=True)
class CorrelativeGap:
    """An inclusive run of correlative numbers with no entry."""

    first: int
    last: int

    @property
    def size(self) -> int:
        return self.last - self.first + 1

    def __str__(self):
        if self.first == self.last:
            return str(self.first)
        return f"{self.first}-{self.last}"


@dataclass(frozen=True)
class LegalJournal(_IntegrityMixin):
    date_range: DateRange
    entries: Tuple[LegalJournalEntry, ...]
    correlative_gaps: Tuple[CorrelativeGap, ...] = ()
    violations: Tuple[IntegrityIssue, ...] = ()

    @property
    def total_entries(self) -> int:
        return len(self.entries)

    @property
    def missing_correlatives(self) -> int:
        return sum(gap.size for gap in self.correlative_gaps)

    @property
    def total_debits(self) -> int:
        return sum(entry.total_debits for entry in self.entries)

    @property
    def total_credits(self) -> int:
        return sum(entry.total_credits for entry in self.entries)


def _correlative_order(entry: EntryRecord) -> tuple:
    # Numbered entries first, in correlative order; unnumbered ones after them.
    missing = entry.correlative_number is None
    return (missing, entry.correlative_number or 0, entry.date, entry.entry_number)


class LegalJournalReport:
    """
    Journal export of PENDING and APPROVED entries in correlative order.

    Every entry is balance-checked on its own. A malformed entry is kept in
    the output with is_balanced=False and its issues listed; it never stops
    the rest of the report.
    """

    def __init__(self, chart: ChartOfAccounts, store: JournalStore):
        self.chart = chart
        self.store = store

    def generate(self, date_range: DateRange) -> LegalJournal:
        records = sorted(
            self.store.fetch_entries(date_range, min_status=EntryStatus.PENDING),
            key=_correlative_order,
        )

        seen_correlatives = {}
        for record in records:
            if record.correlative_number is not None:
                seen_correlatives.setdefault(record.correlative_number, []).append(
                    record.entry_number
                )

        entries = []
        violations = []
        for record in records:
            entry = self._build_entry(record, seen_correlatives)
            entries.append(entry)
            if not entry.is_balanced:
                violations.append(IntegrityIssue(
                    message="; ".join(entry.issues),
                    entry_number=entry.entry_number,
                    debits=entry.total_debits,
                    credits=entry.total_credits,
                ))
                logger.error(
                    "Legal journal entry is malformed",
                    extra={
                        "entry_number": entry.entry_number,
                        "correlative_number": entry.correlative_number,
                        "debits": entry.total_debits,
                        "credits": entry.total_credits,
                        "issues": list(entry.issues),
                    },
                )

        report = LegalJournal(
            date_range=date_range,
            entries=tuple(entries),
            correlative_gaps=self._gaps(seen_correlatives),
            violations=tuple(violations),
        )
        if report.correlative_gaps:
            logger.warning(
                "Legal journal has gaps in the correlative sequence",
                extra={
                    "gaps": [str(gap) for gap in report.correlative_gaps],
                    "missing": report.missing_correlatives,
                },
            )
        logger.info(
            "Generated legal journal",
            extra={
                "start_date": date_range.start.isoformat(),
                "end_date": date_range.end.isoformat(),
                "entries": report.total_entries,
            },
        )
        return report

    def _build_entry(self, record: EntryRecord, seen_correlatives) -> LegalJournalEntry:
        issues: List[str] = []
        lines = []
        lines_ok = True
        for line in sorted(record.lines, key=lambda ln: ln.line_number):
            try:
                account = self.chart.get_account(line.account_id)
                code, name = account.code, account.name
            except UnknownAccount:
                code = name = None
                issues.append(
                    f"Line {line.line_number} references unknown account {line.account_id}"
                )
            if line.debit and line.credit:
                lines_ok = False
                issues.append(f"Line {line.line_number} has both a debit and a credit")
            elif not line.debit and not line.credit:
                lines_ok = False
                issues.append(f"Line {line.line_number} has neither a debit nor a credit")
            lines.append(LegalJournalLine(
                line_number=line.line_number,
                account_id=line.account_id,
                account_code=code,
                account_name=name,
                debit=line.debit,
                credit=line.credit,
                description=line.description,
            ))

        total_debits = record.total_debits
        total_credits = record.total_credits
        if total_debits != total_credits:
            issues.insert(
                0,
                f"Entry is not balanced: debits {total_debits}, credits {total_credits}",
            )

        if record.correlative_number is None:
            issues.append("Missing correlative number")
        elif len(seen_correlatives[record.correlative_number]) > 1:
            issues.append(f"Duplicate correlative number {record.correlative_number}")

        return LegalJournalEntry(
            entry_number=record.entry_number,
            correlative_number=record.correlative_number,
            date=record.date,
            description=record.description,
            reference=record.reference,
            status=record.status,
            lines=tuple(lines),
            total_debits=total_debits,
            total_credits=total_credits,
            is_balanced=lines_ok and total_debits == total_credits,
            issues=tuple(issues),
            created_by=record.created_by,
            approved_by=record.approved_by,
            approved_at=record.approved_at,
        )

    @staticmethod
    def _gaps(seen_correlatives) -> Tuple[CorrelativeGap, ...]:
        numbers = sorted(seen_correlatives)
        return tuple(
            CorrelativeGap(previous + 1, current - 1)
            for previous, current in zip(numbers, numbers[1:])
            if current - previous > 1
        )
