# reporting/domain.py
"""
Plain value types shared by the reporting engine.

Everything here is immutable and framework-free. The ORM adapters translate
Django rows into these records, and the report generators only ever see
these records.

Money is always an int of minor currency units (cents). Nothing in the
engine touches floats or Decimals.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Tuple

from reporting.errors import InvalidRange


class NormalSide(str, Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class EntryStatus(str, Enum):
    """Posting workflow status. Order matters: DRAFT < PENDING < APPROVED."""

    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]

    def at_least(self, other: "EntryStatus") -> bool:
        return self.rank >= other.rank


_STATUS_RANK = {
    EntryStatus.DRAFT: 0,
    EntryStatus.PENDING: 1,
    EntryStatus.APPROVED: 2,
}


class SourceKind(str, Enum):
    JOURNAL = "JOURNAL"
    PAYROLL = "PAYROLL"


def signed_balance(side: NormalSide, debit: int, credit: int) -> int:
    """
    Net effect of a debit/credit pair on an account with the given normal side.

    Positive means the balance sits on the account's normal side.
    """
    if side == NormalSide.DEBIT:
        return debit - credit
    return credit - debit


@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] date range."""

    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise InvalidRange(self.start, self.end)

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class AccountRecord:
    id: str
    code: str
    name: str
    normal_side: NormalSide
    is_active: bool = True
    category: str = ""
    parent_id: Optional[str] = None


@dataclass(frozen=True)
class LineRecord:
    """
    One posted journal line, flattened with the header fields of its entry.

    Stores yield these for balance queries so the aggregator never needs
    to load whole entries.
    """

    entry_number: int
    date: date
    line_number: int
    account_id: str
    debit: int = 0
    credit: int = 0
    description: str = ""
    reference: str = ""

    def __post_init__(self):
        if self.debit < 0 or self.credit < 0:
            raise ValueError(
                f"Negative amount on entry {self.entry_number} line {self.line_number}"
            )


def line_sort_key(line: LineRecord) -> tuple:
    """Deterministic posting order: (date, entry_number, line_number)."""
    return (line.date, line.entry_number, line.line_number)


@dataclass(frozen=True)
class EntryLine:
    line_number: int
    account_id: str
    debit: int = 0
    credit: int = 0
    description: str = ""


@dataclass(frozen=True)
class EntryRecord:
    entry_number: int
    date: date
    status: EntryStatus
    lines: Tuple[EntryLine, ...] = ()
    correlative_number: Optional[int] = None
    description: str = ""
    reference: str = ""
    created_by: str = ""
    approved_by: str = ""
    approved_at: Optional[str] = None

    @property
    def total_debits(self) -> int:
        return sum(line.debit for line in self.lines)

    @property
    def total_credits(self) -> int:
        return sum(line.credit for line in self.lines)

    def to_line_records(self):
        """Flatten into LineRecords, in line order."""
        for line in sorted(self.lines, key=lambda ln: ln.line_number):
            yield LineRecord(
                entry_number=self.entry_number,
                date=self.date,
                line_number=line.line_number,
                account_id=line.account_id,
                debit=line.debit,
                credit=line.credit,
                description=line.description or self.description,
                reference=self.reference,
            )


@dataclass(frozen=True)
class AccountPeriodBalance:
    """
    Opening balance, period activity and closing balance of one account.

    Balances are signed relative to the account's normal side. The
    ``*_debit`` / ``*_credit`` properties split a signed balance into the
    two presentation columns used by the four-column trial balance.
    """

    account_id: str
    normal_side: NormalSide
    opening_balance: int = 0
    period_debits: int = 0
    period_credits: int = 0

    @property
    def closing_balance(self) -> int:
        return self.opening_balance + signed_balance(
            self.normal_side, self.period_debits, self.period_credits
        )

    @property
    def has_activity(self) -> bool:
        return bool(self.opening_balance or self.period_debits or self.period_credits)

    def _columns(self, balance: int) -> Tuple[int, int]:
        # A positive balance sits on the normal side, a negative one on the other.
        if self.normal_side == NormalSide.DEBIT:
            return (balance, 0) if balance >= 0 else (0, -balance)
        return (0, balance) if balance >= 0 else (-balance, 0)

    @property
    def opening_debit(self) -> int:
        return self._columns(self.opening_balance)[0]

    @property
    def opening_credit(self) -> int:
        return self._columns(self.opening_balance)[1]

    @property
    def closing_debit(self) -> int:
        return self._columns(self.closing_balance)[0]

    @property
    def closing_credit(self) -> int:
        return self._columns(self.closing_balance)[1]


@dataclass(frozen=True)
class IntegrityIssue:
    """A double-entry violation found while building a report."""

    message: str
    entry_number: Optional[int] = None
    debits: int = 0
    credits: int = 0

    @property
    def difference(self) -> int:
        return self.debits - self.credits


@dataclass(frozen=True)
class PayrollDisbursement:
    check_number: str
    check_date: date
    amount: int
    payee: str = ""
    memo: str = ""
    status: str = ""
    source_id: str = ""


@dataclass(frozen=True)
class CheckReference:
    check_number: str
    source_kind: SourceKind
    date: date
    amount: int
    description: str = ""
    source_id: str = ""
    status: str = ""
