# reporting/adapters.py
"""
ORM adapters for the reporting engine.

Each adapter is scoped to one company and turns Django rows into the plain
records from reporting.domain. Lines are streamed with
``QuerySet.iterator(chunk_size=...)`` so a long period never lands in memory
as a whole.

Account ids handed to the engine are the string form of Account.public_id.

Any DatabaseError raised while querying is re-raised as UpstreamUnavailable;
callers never see Django exceptions.
"""

import logging
from typing import Callable, Collection, Dict, Iterator, List, Optional

from django.conf import settings
from django.db import DatabaseError
from django.db.models import Prefetch, QuerySet

from accounting.models import Account, JournalEntry, JournalLine
from accounts.models import Company
from payroll.models import PayrollCheck
from reporting.chart import ChartOfAccounts
from reporting.checks import PayrollDisbursementSource, same_check_number, search_fragment
from reporting.domain import (
    AccountRecord,
    DateRange,
    EntryLine,
    EntryRecord,
    EntryStatus,
    LineRecord,
    NormalSide,
    PayrollDisbursement,
)
from reporting.errors import UnknownAccount, UpstreamUnavailable
from reporting.store import JournalStore


logger = logging.getLogger(__name__)

# Above this many accounts the id filter is applied in Python instead of a
# SQL IN clause (SQLite caps bound parameters per statement).
MAX_IN_CLAUSE = 500

LINE_ORDERING = ("entry__date", "entry__entry_number", "line_no")

LINE_FIELDS = (
    "entry__entry_number",
    "entry__date",
    "entry__description",
    "entry__reference",
    "line_no",
    "account__public_id",
    "debit",
    "credit",
    "description",
)


def _chunk_size() -> int:
    return getattr(settings, "REPORTING_LINE_CHUNK_SIZE", 2000)


def _stream(collaborator: str, queryset: QuerySet, build: Callable) -> Iterator:
    """Iterate a queryset in chunks, translating database failures."""
    try:
        for row in queryset.iterator(chunk_size=_chunk_size()):
            item = build(row)
            if item is not None:
                yield item
    except DatabaseError as exc:
        logger.error(
            "Reporting query failed",
            extra={"collaborator": collaborator, "error": str(exc)},
            exc_info=True,
        )
        raise UpstreamUnavailable(collaborator, str(exc)) from exc


def _user_label(user) -> str:
    if user is None:
        return ""
    return user.name or user.email


# =============================================================================
# Chart of accounts
# =============================================================================

class DjangoChartOfAccounts(ChartOfAccounts):
    """
    Chart of accounts of one company.

    The whole chart is loaded on first use and cached for the lifetime of
    the adapter (one request).
    """

    def __init__(self, company: Company):
        self.company = company
        self._by_id: Optional[Dict[str, AccountRecord]] = None
        self._by_code: Dict[str, AccountRecord] = {}

    def _load(self) -> Dict[str, AccountRecord]:
        if self._by_id is not None:
            return self._by_id

        queryset = Account.objects.filter(company=self.company).order_by("code").values(
            "public_id",
            "code",
            "name",
            "normal_balance",
            "status",
            "account_type",
            "parent__public_id",
        )
        try:
            rows = list(queryset)
        except DatabaseError as exc:
            logger.error(
                "Chart of accounts query failed",
                extra={"company_id": self.company.id, "error": str(exc)},
                exc_info=True,
            )
            raise UpstreamUnavailable("chart of accounts", str(exc)) from exc

        by_id = {}
        for row in rows:
            parent = row["parent__public_id"]
            record = AccountRecord(
                id=str(row["public_id"]),
                code=row["code"],
                name=row["name"],
                normal_side=NormalSide(row["normal_balance"]),
                is_active=row["status"] == Account.Status.ACTIVE,
                category=row["account_type"],
                parent_id=str(parent) if parent else None,
            )
            by_id[record.id] = record
            self._by_code[record.code] = record

        self._by_id = by_id
        return by_id

    def list_accounts(self) -> List[AccountRecord]:
        return list(self._load().values())

    def get_account(self, account_id: str) -> AccountRecord:
        try:
            return self._load()[str(account_id)]
        except KeyError:
            raise UnknownAccount(account_id)

    def get_by_code(self, code: str) -> AccountRecord:
        self._load()
        try:
            return self._by_code[code]
        except KeyError:
            raise UnknownAccount(code)


# =============================================================================
# Journal
# =============================================================================


def _statuses_at_least(min_status: EntryStatus) -> List[str]:
    return [status.value for status in EntryStatus if status.at_least(min_status)]


def _line_from_row(row: dict) -> LineRecord:
    return LineRecord(
        entry_number=row["entry__entry_number"],
        date=row["entry__date"],
        line_number=row["line_no"],
        account_id=str(row["account__public_id"]),
        debit=row["debit"],
        credit=row["credit"],
        description=row["description"] or row["entry__description"],
        reference=row["entry__reference"],
    )


def _entry_from_model(entry: JournalEntry) -> EntryRecord:
    lines = tuple(
        EntryLine(
            line_number=line.line_no,
            account_id=str(line.account.public_id),
            debit=line.debit,
            credit=line.credit,
            description=line.description,
        )
        for line in entry.lines.all()
    )
    return EntryRecord(
        entry_number=entry.entry_number,
        date=entry.date,
        status=EntryStatus(entry.status),
        lines=lines,
        correlative_number=entry.correlative_number,
        description=entry.description,
        reference=entry.reference,
        created_by=_user_label(entry.created_by),
        approved_by=_user_label(entry.approved_by),
        approved_at=entry.approved_at.isoformat() if entry.approved_at else None,
    )


class DjangoJournalStore(JournalStore):
    """Approved journal lines and entries of one company."""

    def __init__(self, company: Company):
        self.company = company

    def _approved_lines(self, account_ids: Collection[str]):
        wanted = {str(account_id) for account_id in account_ids}
        queryset = JournalLine.objects.filter(
            company=self.company,
            entry__status=JournalEntry.Status.APPROVED,
        )
        if len(wanted) <= MAX_IN_CLAUSE:
            queryset = queryset.filter(account__public_id__in=wanted)
        return queryset, wanted

    def _stream_lines(self, queryset, wanted) -> Iterator[LineRecord]:
        queryset = queryset.order_by(*LINE_ORDERING).values(*LINE_FIELDS)

        def build(row):
            if str(row["account__public_id"]) not in wanted:
                return None
            return _line_from_row(row)

        return _stream("journal store", queryset, build)

    def fetch_lines_before(self, account_ids, before):
        if not account_ids:
            return iter(())
        queryset, wanted = self._approved_lines(account_ids)
        return self._stream_lines(queryset.filter(entry__date__lt=before), wanted)

    def fetch_lines_within(self, account_ids, date_range: DateRange):
        if not account_ids:
            return iter(())
        queryset, wanted = self._approved_lines(account_ids)
        queryset = queryset.filter(
            entry__date__gte=date_range.start,
            entry__date__lte=date_range.end,
        )
        return self._stream_lines(queryset, wanted)

    def _entries(self, min_status: EntryStatus) -> QuerySet:
        lines = JournalLine.objects.select_related("account").order_by("line_no")
        return (
            JournalEntry.objects.filter(
                company=self.company,
                status__in=_statuses_at_least(min_status),
            )
            .select_related("created_by", "approved_by")
            .prefetch_related(Prefetch("lines", queryset=lines))
            .order_by("date", "entry_number")
        )

    def fetch_entries(self, date_range, min_status=EntryStatus.PENDING):
        queryset = self._entries(min_status).filter(
            date__gte=date_range.start,
            date__lte=date_range.end,
        )
        return _stream("journal store", queryset, _entry_from_model)

    def find_entries_by_reference(self, text, min_status=EntryStatus.PENDING):
        queryset = self._entries(min_status).filter(reference__icontains=text)
        return _stream("journal store", queryset, _entry_from_model)


# =============================================================================
# Payroll
# =============================================================================

class DjangoPayrollChecks(PayrollDisbursementSource):
    """Payroll checks of one company, matched token by token on the check number."""

    def __init__(self, company: Company):
        self.company = company

    def find_by_check_number(self, check_number):
        queryset = PayrollCheck.objects.filter(
            company=self.company,
            check_number__icontains=search_fragment(check_number),
        ).order_by("check_date", "check_number")

        def build(check):
            if not same_check_number(check.check_number, check_number):
                return None
            return PayrollDisbursement(
                check_number=check.check_number,
                check_date=check.check_date,
                amount=check.amount,
                payee=check.payee,
                memo=check.memo,
                status=check.status,
                source_id=str(check.public_id),
            )

        return list(_stream("payroll", queryset, build))
