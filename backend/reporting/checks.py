# reporting/checks.py
"""
Check number cross-reference.

Looks a check number up in two independent places (journal entry
references and payroll disbursements) and merges the hits into one list
ordered by date, journal hits before payroll hits on the same day.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Iterable, List, Tuple

from reporting.domain import CheckReference, EntryStatus, PayrollDisbursement, SourceKind
from reporting.errors import InvalidCheckNumber
from reporting.store import JournalStore


logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[A-Za-z0-9]+")

_SOURCE_ORDER = {SourceKind.JOURNAL: 0, SourceKind.PAYROLL: 1}


def normalize_check_number(value: str) -> str:
    """Upper-case, trimmed, and without leading zeros for purely numeric values."""
    value = (value or "").strip().upper()
    if value.isdigit():
        return value.lstrip("0") or "0"
    return value


def check_tokens(value: str) -> Tuple[str, ...]:
    """
    Alphanumeric runs of ``value``, each normalized.

    "CHK-001001" and "chk 1001" both give ("CHK", "1001").
    """
    return tuple(normalize_check_number(token) for token in _TOKEN_RE.findall(value or ""))


def same_check_number(candidate: str, check_number: str) -> bool:
    wanted = check_tokens(check_number)
    return bool(wanted) and check_tokens(candidate) == wanted


def reference_mentions(reference: str, check_number: str) -> bool:
    """
    True if the tokens of ``check_number`` appear as a contiguous run in
    ``reference``.

    "CHK #001001" mentions "1001"; "PAY-10010" does not; "Paid CHK-1001"
    mentions "CHK-1001".
    """
    wanted = check_tokens(check_number)
    if not wanted:
        return False
    tokens = check_tokens(reference)
    size = len(wanted)
    return any(
        tokens[start:start + size] == wanted
        for start in range(len(tokens) - size + 1)
    )


def search_fragment(check_number: str) -> str:
    """Longest normalized token; stores use it for a coarse substring filter."""
    return max(check_tokens(check_number), key=len, default="")


class PayrollDisbursementSource(ABC):
    """Read access to payroll checks of one company."""

    @abstractmethod
    def find_by_check_number(self, check_number: str) -> Iterable[PayrollDisbursement]:
        pass


class InMemoryPayrollSource(PayrollDisbursementSource):
    def __init__(self, disbursements: Iterable[PayrollDisbursement] = ()):
        self._disbursements = list(disbursements)

    def find_by_check_number(self, check_number):
        return [
            item
            for item in self._disbursements
            if same_check_number(item.check_number, check_number)
        ]


class CheckReferenceIndex:
    """Merges journal and payroll hits for a check number."""

    def __init__(self, store: JournalStore, payroll: PayrollDisbursementSource):
        self.store = store
        self.payroll = payroll

    def search(self, check_number: str) -> Tuple[CheckReference, ...]:
        """
        Find every journal entry and payroll disbursement tied to a check.

        Returns:
            CheckReferences ordered by (date, source kind); empty when
            nothing matches

        Raises:
            InvalidCheckNumber: check_number is blank or has no letters or digits
        """
        needle = (check_number or "").strip()
        if not check_tokens(needle):
            raise InvalidCheckNumber(check_number)

        results: List[CheckReference] = []

        # The store's reference filter is a coarse substring match; the
        # token rule below decides what actually counts.
        for entry in self.store.find_entries_by_reference(search_fragment(needle), min_status=EntryStatus.PENDING):
            if not reference_mentions(entry.reference, needle):
                continue
            results.append(CheckReference(
                check_number=needle,
                source_kind=SourceKind.JOURNAL,
                date=entry.date,
                amount=entry.total_debits,
                description=entry.description,
                source_id=str(entry.entry_number),
                status=entry.status.value,
            ))

        for item in self.payroll.find_by_check_number(needle):
            results.append(CheckReference(
                check_number=item.check_number,
                source_kind=SourceKind.PAYROLL,
                date=item.check_date,
                amount=item.amount,
                description=item.memo or item.payee,
                source_id=item.source_id,
                status=item.status,
            ))

        results.sort(key=lambda ref: (ref.date, _SOURCE_ORDER[ref.source_kind], ref.source_id))

        logger.info(
            "Check search completed",
            extra={"check_number": needle, "matches": len(results)},
        )
        return tuple(results)
